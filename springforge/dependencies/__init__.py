"""Dependency rule catalogue and library version tables."""

from springforge.dependencies.registry import DependencyRuleRegistry, PropertyCollision
from springforge.dependencies.rules import (
    BuildDependency,
    DependencyRule,
    DependencyScope,
    InfraService,
    ScaffoldingFile,
)
from springforge.dependencies.versions import (
    LibraryVersions,
    ResolvedVersions,
    VersionResolver,
    resolve_versions,
)

__all__ = [
    "BuildDependency",
    "DependencyRule",
    "DependencyRuleRegistry",
    "DependencyScope",
    "InfraService",
    "LibraryVersions",
    "PropertyCollision",
    "ResolvedVersions",
    "ScaffoldingFile",
    "VersionResolver",
    "resolve_versions",
]
