"""Named starter presets.

A preset fixes the architecture, Java version, dependency set and feature
switches of a typical project shape; the caller supplies the identity
(group id, artifact id, ...) and :meth:`Preset.to_config` produces a
complete :class:`~springforge.models.ProjectConfig`.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from springforge.architecture.styles import Architecture
from springforge.models import BuildTool, Packaging, ProjectConfig, ProjectFeatures

DEFAULT_BOOT_VERSION = "3.4.1"


def default_package_name(group_id: str, artifact_id: str) -> str:
    """``com.example`` + ``my-app`` -> ``com.example.myapp``."""
    suffix = re.sub(r"[^a-z0-9]", "", artifact_id.lower())
    if suffix and suffix[0].isdigit():
        suffix = f"app{suffix}"
    return f"{group_id}.{suffix}" if suffix else group_id


class Preset(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    architecture: Architecture
    java_version: str
    dependencies: frozenset[str]
    features: ProjectFeatures

    def to_config(
        self,
        *,
        group_id: str,
        artifact_id: str,
        name: str | None = None,
        description: str | None = None,
        package_name: str | None = None,
        build_tool: BuildTool = BuildTool.MAVEN,
        packaging: Packaging = Packaging.JAR,
        spring_boot_version: str = DEFAULT_BOOT_VERSION,
        java_version: str | None = None,
        architecture: Architecture | None = None,
        extra_dependencies: frozenset[str] | set[str] = frozenset(),
        output_directory: str | Path = Path("."),
    ) -> ProjectConfig:
        """Complete project configuration from this preset plus identity fields."""
        return ProjectConfig(
            group_id=group_id,
            artifact_id=artifact_id,
            name=name or artifact_id,
            description=description if description is not None else self.description,
            package_name=package_name or default_package_name(group_id, artifact_id),
            java_version=java_version or self.java_version,
            build_tool=build_tool,
            packaging=packaging,
            architecture=architecture or self.architecture,
            spring_boot_version=spring_boot_version,
            dependencies=self.dependencies | frozenset(extra_dependencies),
            features=self.features,
            output_directory=Path(output_directory),
        )


REST_API = Preset(
    name="REST-API",
    description="Clean Architecture REST API",
    architecture=Architecture.CLEAN,
    java_version="21",
    dependencies=frozenset({"web", "data-jpa", "h2", "validation", "lombok", "devtools"}),
    features=ProjectFeatures(
        enable_auth=True,
        enable_api_docs=True,
        enable_cors=True,
        enable_error_handling=True,
        enable_object_mapping=True,
        enable_audit_fields=True,
    ),
)

GRAPHQL_API = Preset(
    name="GraphQL-API",
    description="GraphQL API with Spring for GraphQL",
    architecture=Architecture.CLEAN,
    java_version="21",
    dependencies=frozenset({"web", "graphql", "data-jpa", "h2", "validation", "lombok", "devtools"}),
    features=ProjectFeatures(
        enable_auth=True,
        enable_cors=True,
        enable_error_handling=True,
        enable_object_mapping=True,
        enable_audit_fields=True,
    ),
)

MICROSERVICE = Preset(
    name="Microservice",
    description="Hexagonal architecture microservice",
    architecture=Architecture.HEXAGONAL,
    java_version="21",
    dependencies=frozenset({
        "web", "data-jpa", "postgresql", "cloud-eureka-client",
        "cloud-config-client", "actuator", "lombok",
    }),
    features=ProjectFeatures(**{name: True for name in ProjectFeatures.model_fields}),
)

MONOLITH = Preset(
    name="Monolith",
    description="Traditional MVC monolith",
    architecture=Architecture.MVC,
    java_version="21",
    dependencies=frozenset({"web", "thymeleaf", "data-jpa", "mysql", "security", "validation", "lombok"}),
    features=ProjectFeatures(enable_error_handling=True, enable_container_files=True),
)

MINIMAL = Preset(
    name="Minimal",
    description="Minimal Spring Boot app",
    architecture=Architecture.MVC,
    java_version="21",
    dependencies=frozenset({"web", "lombok", "devtools"}),
    features=ProjectFeatures(),
)

PRESETS: dict[str, Preset] = {
    preset.name.lower(): preset
    for preset in (REST_API, GRAPHQL_API, MICROSERVICE, MONOLITH, MINIMAL)
}


def get_preset(name: str) -> Preset:
    """Look up a preset by name, ignoring case (``rest-api``, ``REST_API``).

    Raises:
        KeyError: No preset has that name.
    """
    key = name.strip().lower().replace("_", "-")
    try:
        return PRESETS[key]
    except KeyError:
        raise KeyError(f"Unknown preset {name!r}; choose from {', '.join(p.name for p in PRESETS.values())}") from None
