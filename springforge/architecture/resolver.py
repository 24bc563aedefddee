"""Resolve an architecture style plus feature flags into file tasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from springforge.architecture.styles import FEATURE_TOKEN, Architecture, ArchitectureStyle
from springforge.utils import path_to_package

if TYPE_CHECKING:
    from springforge.models import ProjectFeatures

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileTask:
    """One file to render: ``<directory>/<filename>`` from *template_id*.

    *directory* is relative to the project's base package directory and
    *package* is the matching package suffix (``domain/model`` ->
    ``domain.model``).
    """
    layer: str
    directory: str
    package: str
    template_id: str
    filename: str


class BlueprintResolver:
    """Expand architecture blueprints into an ordered list of :class:`FileTask`.

    The resolver is total: unknown layers fall back to the layer name and
    nothing here raises.
    """

    def __init__(self, entity_name: str = "Product") -> None:
        self.entity_name = entity_name
        self.feature_slug = entity_name.lower()

    def resolve(
        self,
        architecture: Architecture | ArchitectureStyle,
        features: ProjectFeatures,
    ) -> list[FileTask]:
        style = architecture.style if isinstance(architecture, Architecture) else architecture

        tasks: list[FileTask] = []
        for blueprint in style.blueprints:
            tasks.append(
                self._task(style, blueprint.layer, blueprint.template_id,
                           f"{self.entity_name}{blueprint.suffix}")
            )

        for blueprint in style.feature_blueprints:
            if features.is_enabled(blueprint.toggle):
                tasks.append(
                    self._task(style, blueprint.layer, blueprint.template_id, blueprint.filename)
                )

        logger.debug("Resolved %d file tasks for %s", len(tasks), style.display_name)
        return tasks

    def directory_for(self, style: ArchitectureStyle, layer: str) -> str:
        """Physical directory for *layer* with the feature token substituted."""
        path = style.path_for_layer(layer).replace(FEATURE_TOKEN, self.feature_slug)
        return path.strip("/") or layer

    def _task(
        self, style: ArchitectureStyle, layer: str, template_id: str, filename: str
    ) -> FileTask:
        directory = self.directory_for(style, layer)
        return FileTask(
            layer=layer,
            directory=directory,
            package=path_to_package(directory),
            template_id=template_id,
            filename=filename,
        )
