"""SpringForge process configuration.

Typed settings for the generator process itself (where templates and rule
data live, which sample entity names the blueprint files, logging level).
These never carry per-project choices: those belong to
:class:`springforge.models.ProjectConfig`.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

_JAVA_TYPE_NAME = re.compile(r"^[A-Z][A-Za-z0-9]*$")


class Settings(BaseModel):
    """Global SpringForge settings.

    Instances are typically created once by the CLI entry point (or by
    :meth:`from_env`) and handed to :class:`springforge.pipeline.ProjectGenerator`.
    """

    template_dir: Path | None = Field(
        default=None, description="Override for the packaged Jinja2 template directory"
    )
    rules_path: Path | None = Field(
        default=None, description="Override for the packaged dependency-rules.json"
    )
    sample_entity: str = Field(
        default="Product", description="Entity name used to name blueprint files"
    )
    default_output_dir: Path = Field(default=Path("."))
    default_group_id: str = Field(default="com.example")
    log_level: str = Field(default="INFO")

    @field_validator("sample_entity")
    @classmethod
    def _check_entity(cls, value: str) -> str:
        if not _JAVA_TYPE_NAME.match(value):
            raise ValueError(
                f"sample_entity must be a Java type name starting with an upper-case letter, got {value!r}"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return upper

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the settings to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Load previously-saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            SPRINGFORGE_TEMPLATE_DIR, SPRINGFORGE_RULES_PATH,
            SPRINGFORGE_SAMPLE_ENTITY, SPRINGFORGE_OUTPUT_DIR,
            SPRINGFORGE_GROUP_ID, SPRINGFORGE_LOG_LEVEL.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("SPRINGFORGE_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["SPRINGFORGE_TEMPLATE_DIR"])
        if os.environ.get("SPRINGFORGE_RULES_PATH"):
            kwargs["rules_path"] = Path(os.environ["SPRINGFORGE_RULES_PATH"])
        if os.environ.get("SPRINGFORGE_SAMPLE_ENTITY"):
            kwargs["sample_entity"] = os.environ["SPRINGFORGE_SAMPLE_ENTITY"]
        if os.environ.get("SPRINGFORGE_OUTPUT_DIR"):
            kwargs["default_output_dir"] = Path(os.environ["SPRINGFORGE_OUTPUT_DIR"])
        if os.environ.get("SPRINGFORGE_GROUP_ID"):
            kwargs["default_group_id"] = os.environ["SPRINGFORGE_GROUP_ID"]
        if os.environ.get("SPRINGFORGE_LOG_LEVEL"):
            kwargs["log_level"] = os.environ["SPRINGFORGE_LOG_LEVEL"]
        return cls(**kwargs)
