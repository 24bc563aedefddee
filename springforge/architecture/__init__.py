"""Architecture style catalogue and blueprint resolution."""

from springforge.architecture.resolver import BlueprintResolver, FileTask
from springforge.architecture.styles import (
    Architecture,
    ArchitectureStyle,
    Blueprint,
    FeatureBlueprint,
)

__all__ = [
    "Architecture",
    "ArchitectureStyle",
    "Blueprint",
    "BlueprintResolver",
    "FeatureBlueprint",
    "FileTask",
]
