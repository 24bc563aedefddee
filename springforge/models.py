"""Pydantic v2 models describing one generation request.

A :class:`ProjectConfig` is built once per request by the caller (CLI,
preset, or JSON file), is immutable, and fully determines the generated
file tree.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from springforge.architecture.styles import Architecture
from springforge.utils import package_to_path, to_pascal

_PACKAGE_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)*$")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class BuildTool(str, Enum):
    """Build descriptor dialect of the generated project."""
    MAVEN = "maven"
    GRADLE = "gradle"


class Packaging(str, Enum):
    """Archive type produced by the generated project."""
    JAR = "jar"
    WAR = "war"


# ---------------------------------------------------------------------------
# Feature toggles
# ---------------------------------------------------------------------------

class ProjectFeatures(BaseModel):
    """Independent boolean switches gating optional generated capabilities."""

    model_config = ConfigDict(frozen=True)

    enable_auth: bool = Field(default=False, description="JWT authentication")
    enable_api_docs: bool = Field(default=False, description="OpenAPI / Swagger UI")
    enable_cors: bool = Field(default=False, description="CORS configuration")
    enable_error_handling: bool = Field(default=False, description="Global exception handler")
    enable_object_mapping: bool = Field(default=False, description="MapStruct DTO mapping")
    enable_container_files: bool = Field(default=False, description="Dockerfile")
    enable_orchestration_manifests: bool = Field(default=False, description="Kubernetes manifests")
    enable_pipeline_config: bool = Field(default=False, description="CI workflow")
    enable_audit_fields: bool = Field(default=False, description="JPA auditing fields")

    def is_enabled(self, name: str) -> bool:
        """Return the flag called *name*; unknown names are simply off."""
        if name not in type(self).model_fields:
            return False
        return bool(getattr(self, name))

    def enabled(self) -> tuple[str, ...]:
        """Names of the enabled flags, in declaration order."""
        return tuple(name for name in type(self).model_fields if getattr(self, name))


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------

class ProjectConfig(BaseModel):
    """Everything needed to generate one project.

    Every field is required: defaults are applied by the caller (CLI or
    preset), never inside the generation core.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str
    package_name: str
    java_version: str
    build_tool: BuildTool
    packaging: Packaging
    architecture: Architecture
    spring_boot_version: str
    dependencies: frozenset[str]
    features: ProjectFeatures
    output_directory: Path

    @field_validator("package_name")
    @classmethod
    def _check_package(cls, value: str) -> str:
        if not _PACKAGE_NAME.match(value):
            raise ValueError(f"Invalid Java package name: {value!r}")
        return value

    @field_validator("artifact_id")
    @classmethod
    def _check_artifact(cls, value: str) -> str:
        if "/" in value or "\\" in value or value in {".", ".."}:
            raise ValueError(f"Artifact id must be a single path segment: {value!r}")
        return value

    # -- Derived values ----------------------------------------------------

    @property
    def package_path(self) -> str:
        """Package name with dots converted to path separators."""
        return package_to_path(self.package_name)

    @property
    def application_class(self) -> str:
        """Name of the generated ``@SpringBootApplication`` class."""
        return f"{to_pascal(self.name) or 'Demo'}Application"

    @property
    def project_root(self) -> Path:
        """Directory the project is written to."""
        return self.output_directory / self.artifact_id

    @property
    def sorted_dependencies(self) -> tuple[str, ...]:
        """Dependency ids in lexical order (stable input for ordering)."""
        return tuple(sorted(self.dependencies))
