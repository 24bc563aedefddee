"""SpringForge scaffolder -- renders the files of a generated project.

Holds the Jinja2 renderer and its templates, the dependency scaffolding
generator and the Docker Compose composer.  The orchestration that ties
them together lives in :mod:`springforge.pipeline`.

Quick usage::

    from springforge.dependencies import DependencyRuleRegistry
    from springforge.scaffolder import InfrastructureComposer, TemplateRenderer

    composer = InfrastructureComposer(DependencyRuleRegistry.default(), TemplateRenderer())
    compose_yaml = composer.compose({"postgresql", "redis"})
"""

from springforge.scaffolder.docker_gen import (
    NO_INFRASTRUCTURE,
    ComposePlan,
    ComposeService,
    InfrastructureComposer,
    NoInfrastructure,
)
from springforge.scaffolder.scaffolding import BASE_PACKAGE_TOKEN, ScaffoldedFile, ScaffoldingGenerator
from springforge.scaffolder.templates import TemplateRenderer

__all__ = [
    "BASE_PACKAGE_TOKEN",
    "ComposePlan",
    "ComposeService",
    "InfrastructureComposer",
    "NO_INFRASTRUCTURE",
    "NoInfrastructure",
    "ScaffoldedFile",
    "ScaffoldingGenerator",
    "TemplateRenderer",
]
