"""Idempotent text patching of Maven and Gradle build descriptors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from springforge.build.gradle import GradleMutator
from springforge.build.maven import PomMutator
from springforge.build.mutator import BuildFileMutator
from springforge.build.plugins import BuildPluginCatalogue

if TYPE_CHECKING:
    from springforge.dependencies.registry import DependencyRuleRegistry


def mutator_for(build_tool: str, registry: DependencyRuleRegistry | None = None) -> BuildFileMutator:
    """Mutator for ``"maven"`` or ``"gradle"`` (a ``BuildTool`` works too)."""
    tool = getattr(build_tool, "value", build_tool)
    if tool == "gradle":
        return GradleMutator(registry)
    if tool == "maven":
        return PomMutator(registry)
    raise ValueError(f"Unsupported build tool: {build_tool!r}")


__all__ = [
    "BuildFileMutator",
    "BuildPluginCatalogue",
    "GradleMutator",
    "PomMutator",
    "mutator_for",
]
