"""Error taxonomy for the SpringForge generation pipeline.

Only failures that make a generated project ambiguous or unsafe are modelled
as exceptions.  Recoverable conditions (a missing build-file anchor, an
unknown dependency id, an unmapped platform version) are logged and never
raised.
"""

from __future__ import annotations

from pathlib import Path


class SpringForgeError(Exception):
    """Base class for every error raised by the generation pipeline."""


class ProjectExistsError(SpringForgeError):
    """Raised when the target project directory is already occupied.

    Reported before any generation work begins.  Retrying requires a new
    artifact id or a different output directory.
    """

    def __init__(self, project_root: Path) -> None:
        self.project_root = Path(project_root)
        super().__init__(f"Project already exists at: {self.project_root}")


class ScaffoldingConflictError(SpringForgeError):
    """Raised when two dependencies scaffold a file at the same path."""

    def __init__(self, path: Path, first_owner: str, second_owner: str) -> None:
        self.path = Path(path)
        self.first_owner = first_owner
        self.second_owner = second_owner
        super().__init__(
            f"Dependencies '{first_owner}' and '{second_owner}' both scaffold {self.path}"
        )


class FileConflictError(SpringForgeError):
    """Raised when a generated file path would be written twice."""

    def __init__(self, path: str, first_origin: str, second_origin: str) -> None:
        self.path = path
        self.first_origin = first_origin
        self.second_origin = second_origin
        super().__init__(
            f"Path '{path}' produced by both '{first_origin}' and '{second_origin}'"
        )


class InfrastructureCycleError(SpringForgeError):
    """Raised when infrastructure startup edges form a cycle."""

    def __init__(self, services: list[str]) -> None:
        self.services = list(services)
        super().__init__(
            "Startup dependency cycle between services: " + ", ".join(self.services)
        )


class TemplateRenderError(SpringForgeError):
    """Raised when a template id cannot be loaded or rendered."""

    def __init__(self, template_id: str, reason: str) -> None:
        self.template_id = template_id
        super().__init__(f"Failed to render template '{template_id}': {reason}")
