"""SpringForge -- Spring Boot project composition engine.

Quick usage::

    from springforge import ProjectGenerator, REST_API

    config = REST_API.to_config(group_id="com.acme", artifact_id="orders")
    files = ProjectGenerator().generate(config)
    print(files.paths())
"""

from springforge.architecture import Architecture, BlueprintResolver, FileTask
from springforge.config import Settings
from springforge.dependencies import DependencyRuleRegistry, LibraryVersions, VersionResolver
from springforge.errors import (
    FileConflictError,
    InfrastructureCycleError,
    ProjectExistsError,
    ScaffoldingConflictError,
    SpringForgeError,
    TemplateRenderError,
)
from springforge.file_map import GeneratedFileMap
from springforge.models import BuildTool, Packaging, ProjectConfig, ProjectFeatures
from springforge.presets import GRAPHQL_API, MICROSERVICE, MINIMAL, MONOLITH, REST_API, Preset, get_preset
from springforge.pipeline import ProjectGenerator, write_project

__version__ = "0.1.0"

__all__ = [
    "Architecture",
    "BlueprintResolver",
    "BuildTool",
    "DependencyRuleRegistry",
    "FileConflictError",
    "FileTask",
    "GRAPHQL_API",
    "GeneratedFileMap",
    "InfrastructureCycleError",
    "LibraryVersions",
    "MICROSERVICE",
    "MINIMAL",
    "MONOLITH",
    "Packaging",
    "Preset",
    "ProjectConfig",
    "ProjectExistsError",
    "ProjectFeatures",
    "ProjectGenerator",
    "REST_API",
    "ScaffoldingConflictError",
    "Settings",
    "SpringForgeError",
    "TemplateRenderError",
    "VersionResolver",
    "get_preset",
    "write_project",
]
