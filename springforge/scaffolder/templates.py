"""Jinja2 template rendering for generated projects.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``springforge/scaffolder/templates/`` directory and renders them with a
project context.  Rendering is deterministic and has no side effects; the
generator writes nothing until the whole file map is built.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from springforge.errors import TemplateRenderError
from springforge.utils import package_to_path, slugify, to_camel, to_pascal


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates addressed by template id.

    A template id is a path relative to the template directory, with or
    without the ``.j2`` extension (``"java/entity/Entity.java"`` and
    ``"java/entity/Entity.java.j2"`` name the same file).  Undefined
    context variables are errors rather than silently empty strings.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["slugify"] = slugify
        self.env.filters["pascal_case"] = to_pascal
        self.env.filters["camel_case"] = to_camel
        self.env.filters["snake_case"] = _snake_case_filter
        self.env.filters["package_path"] = package_to_path
        self.env.filters["java_imports"] = _java_imports_filter

    # -- Rendering ---------------------------------------------------------

    def render(self, template_id: str, context: dict[str, Any]) -> str:
        """Render the template *template_id* with *context*.

        Raises:
            TemplateRenderError: The template does not exist, does not
                parse, or references a variable missing from *context*.
        """
        name = self.resolve(template_id)
        try:
            template = self.env.get_template(name)
            return template.render(**context)
        except TemplateNotFound:
            raise TemplateRenderError(template_id, f"no template at {self.template_dir / name}") from None
        except TemplateError as exc:
            raise TemplateRenderError(template_id, str(exc)) from exc

    def has_template(self, template_id: str) -> bool:
        return (self.template_dir / self.resolve(template_id)).is_file()

    @staticmethod
    def resolve(template_id: str) -> str:
        """Template file name for *template_id*."""
        return template_id if template_id.endswith(".j2") else f"{template_id}.j2"

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _java_imports_filter(refs: Any, package: str) -> str:
    """Import lines for the class refs living outside *package*.

    ``None`` entries are skipped so templates can pass optional
    collaborators straight through.  A non-empty result ends with a blank
    line separating it from the framework imports that follow.
    """
    names = sorted({
        ref.fqcn for ref in refs
        if ref is not None and ref.package != package
    })
    if not names:
        return ""
    return "".join(f"import {name};\n" for name in names) + "\n"


def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    import re

    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()
