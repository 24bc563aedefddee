"""Architecture style catalogue.

Every style is pure data: a layer map (logical layer -> physical path
segment), the unconditional blueprints, and the feature-gated blueprints.
The catalogue is built once at import time and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

FEATURE_TOKEN = "{feature}"


# ---------------------------------------------------------------------------
# Blueprint records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Blueprint:
    """An unconditional file: ``<Entity><suffix>`` rendered from *template_id*."""
    layer: str
    template_id: str
    suffix: str


@dataclass(frozen=True)
class FeatureBlueprint:
    """A file emitted only when the ``ProjectFeatures`` flag *toggle* is on."""
    layer: str
    template_id: str
    filename: str
    toggle: str


@dataclass(frozen=True)
class ArchitectureStyle:
    """Immutable composition data for one architecture style."""

    display_name: str
    layers: Mapping[str, str]
    blueprints: tuple[Blueprint, ...]
    feature_blueprints: tuple[FeatureBlueprint, ...] = field(default=())

    def path_for_layer(self, layer: str) -> str:
        """Physical path for *layer*; unknown layers map to themselves."""
        return self.layers.get(layer, layer)

    def package_for_layer(self, layer: str) -> str:
        """Package suffix for *layer* (path separators become dots)."""
        return self.path_for_layer(layer).replace("/", ".")


# ---------------------------------------------------------------------------
# Catalogue construction helpers
# ---------------------------------------------------------------------------

def _feature_blueprints(auth_controller_layer: str = "controller") -> tuple[FeatureBlueprint, ...]:
    """The gated blueprint set shared by every style, in declaration order."""
    return (
        FeatureBlueprint("config", "config/SwaggerConfig", "SwaggerConfig.java", "enable_api_docs"),
        FeatureBlueprint("config", "config/CorsConfig", "CorsConfig.java", "enable_cors"),
        FeatureBlueprint("config", "config/GlobalExceptionHandler", "GlobalExceptionHandler.java", "enable_error_handling"),
        FeatureBlueprint("dto", "dto/ErrorResponse", "ErrorResponse.java", "enable_error_handling"),
        FeatureBlueprint("config", "exception/ResourceNotFoundException", "ResourceNotFoundException.java", "enable_error_handling"),
        FeatureBlueprint("config", "exception/BadRequestException", "BadRequestException.java", "enable_error_handling"),
        FeatureBlueprint("security", "security/SecurityConfig", "SecurityConfig.java", "enable_auth"),
        FeatureBlueprint("security", "security/JwtService", "JwtService.java", "enable_auth"),
        FeatureBlueprint("security", "security/JwtAuthenticationFilter", "JwtAuthenticationFilter.java", "enable_auth"),
        FeatureBlueprint("security", "security/JwtAuthenticationEntryPoint", "JwtAuthenticationEntryPoint.java", "enable_auth"),
        FeatureBlueprint("security", "security/UserDetailsServiceImpl", "UserDetailsServiceImpl.java", "enable_auth"),
        FeatureBlueprint(auth_controller_layer, "controller/AuthController", "AuthController.java", "enable_auth"),
        FeatureBlueprint("dto", "dto/LoginRequest", "LoginRequest.java", "enable_auth"),
        FeatureBlueprint("dto", "dto/AuthResponse", "AuthResponse.java", "enable_auth"),
        FeatureBlueprint("config", "config/JpaAuditingConfig", "JpaAuditingConfig.java", "enable_audit_fields"),
    )


def _style(
    display_name: str,
    layers: dict[str, str],
    blueprints: list[tuple[str, str, str]],
    *,
    auth_controller_layer: str = "controller",
) -> ArchitectureStyle:
    return ArchitectureStyle(
        display_name=display_name,
        layers=MappingProxyType(dict(layers)),
        blueprints=tuple(Blueprint(*bp) for bp in blueprints),
        feature_blueprints=_feature_blueprints(auth_controller_layer),
    )


# Unconditional blueprint sets reused by several styles.
_CRUD_FULL = [
    ("model", "entity/Entity", ".java"),
    ("dto", "dto/DTO", "DTO.java"),
    ("mapper", "mapper/Mapper", "Mapper.java"),
    ("repository", "repository/Repository", "Repository.java"),
    ("service", "service/Service", "Service.java"),
    ("controller", "controller/Controller", "Controller.java"),
]

_CRUD_BASIC = [
    ("model", "entity/Entity", ".java"),
    ("repository", "repository/Repository", "Repository.java"),
    ("service", "service/Service", "Service.java"),
    ("controller", "controller/Controller", "Controller.java"),
]


_CATALOGUE: dict[str, ArchitectureStyle] = {
    "mvc": _style(
        "Model-View-Controller",
        {
            "model": "model",
            "dto": "dto",
            "mapper": "mapper",
            "repository": "repository",
            "service": "service",
            "controller": "controller",
            "config": "config",
            "security": "security",
        },
        _CRUD_FULL,
    ),
    "layered": _style(
        "Layered Architecture",
        {
            "model": "database/model",
            "dto": "presentation/dto",
            "mapper": "business/mapper",
            "repository": "persistence/repository",
            "service": "business/service",
            "controller": "presentation/controller",
            "config": "presentation/config",
            "security": "security",
        },
        _CRUD_FULL,
    ),
    "clean": _style(
        "Clean Architecture",
        {
            "model": "domain/model",
            "dto": "application/dto",
            "usecase": "application/usecase",
            "port-out": "domain/repository",
            "repository-impl": "infrastructure/persistence",
            "controller": "infrastructure/controller",
            "config": "infrastructure/config",
            "security": "infrastructure/security",
        },
        [
            ("model", "entity/DomainModel", ".java"),
            ("port-out", "port/RepositoryInterface", "Repository.java"),
            ("usecase", "usecase/UseCase", "UseCase.java"),
            ("controller", "controller/InfrastructureController", "Controller.java"),
            ("repository-impl", "entity/JpaEntity", "Entity.java"),
            ("repository-impl", "repository/JpaRepository", "JpaRepository.java"),
            ("repository-impl", "repository/RepositoryImpl", "RepositoryImpl.java"),
        ],
    ),
    "hexagonal": _style(
        "Hexagonal (Ports & Adapters)",
        {
            "model": "domain/model",
            "port-out": "application/port/out",
            "service": "application/service",
            "controller": "adapter/in/web",
            "adapter-web": "adapter/in/web",
            "repository-impl": "adapter/out/persistence",
            "config": "adapter/config",
            "security": "adapter/security",
            "dto": "application/dto",
        },
        [
            ("model", "entity/DomainModel", ".java"),
            ("port-out", "port/RepositoryInterface", "Port.java"),
            ("service", "service/Service", "Service.java"),
            ("controller", "controller/Controller", "Controller.java"),
            ("repository-impl", "repository/RepositoryImpl", "Adapter.java"),
            ("repository-impl", "entity/JpaEntity", "Entity.java"),
            ("repository-impl", "repository/JpaRepository", "JpaRepository.java"),
        ],
        auth_controller_layer="adapter-web",
    ),
    "feature_driven": _style(
        "Feature-Driven",
        {
            "model": "features/{feature}/model",
            "repository": "features/{feature}/repository",
            "service": "features/{feature}/service",
            "controller": "features/{feature}/controller",
            "config": "shared/config",
            "security": "shared/security",
            "dto": "features/{feature}/dto",
        },
        _CRUD_BASIC,
    ),
    "ddd": _style(
        "Domain-Driven Design",
        {
            "model": "domain/entities",
            "repository": "domain/repositories",
            "service": "domain/services",
            "dto": "application/dto",
            "repository-impl": "infrastructure/persistence",
            "controller": "infrastructure/web",
            "config": "infrastructure/config",
            "security": "infrastructure/security",
        },
        [
            ("model", "entity/DomainModel", ".java"),
            ("repository", "port/RepositoryInterface", "Repository.java"),
            ("service", "service/Service", "Service.java"),
            ("dto", "dto/DTO", "DTO.java"),
            ("controller", "controller/Controller", "Controller.java"),
            ("repository-impl", "repository/RepositoryImpl", "RepositoryImpl.java"),
            ("repository-impl", "entity/JpaEntity", "Entity.java"),
            ("repository-impl", "repository/JpaRepository", "JpaRepository.java"),
        ],
    ),
    "cqrs": _style(
        "CQRS",
        {
            "model": "domain/model",
            "dto": "application/dto",
            "repository": "infrastructure/persistence",
            "service": "application/services",
            "controller": "infrastructure/web",
            "config": "shared/config",
            "security": "shared/security",
        },
        [
            ("model", "entity/Entity", ".java"),
            ("dto", "dto/DTO", "DTO.java"),
            ("repository", "repository/Repository", "Repository.java"),
            ("service", "service/Service", "Service.java"),
            ("controller", "controller/Controller", "Controller.java"),
        ],
    ),
    "event_driven": _style(
        "Event-Driven",
        {
            "model": "domain/model",
            "repository": "infrastructure/persistence",
            "service": "application/services",
            "controller": "infrastructure/web",
            "config": "shared/config",
            "security": "shared/security",
            "dto": "application/dto",
        },
        _CRUD_BASIC,
    ),
    "onion": _style(
        "Onion Architecture",
        {
            "model": "core/domain",
            "service": "core/services",
            "repository": "infrastructure/persistence",
            "controller": "infrastructure/web",
            "config": "infrastructure/config",
            "security": "infrastructure/security",
            "dto": "application/dto",
        },
        [
            ("model", "entity/Entity", ".java"),
            ("service", "service/Service", "Service.java"),
            ("repository", "repository/Repository", "Repository.java"),
            ("controller", "controller/Controller", "Controller.java"),
        ],
    ),
    "vertical_slice": _style(
        "Vertical Slice",
        {
            "feature": "features/{feature}",
            "model": "features/{feature}",
            "repository": "features/{feature}",
            "controller": "features/{feature}",
            "config": "shared/config",
            "security": "shared/security",
            "dto": "features/{feature}",
        },
        [
            ("model", "entity/Entity", ".java"),
            ("repository", "repository/Repository", "Repository.java"),
            ("feature", "service/Service", "Service.java"),
            ("controller", "controller/Controller", "Controller.java"),
        ],
    ),
}


# ---------------------------------------------------------------------------
# Architecture enumeration
# ---------------------------------------------------------------------------

class Architecture(str, Enum):
    """Closed set of supported architecture styles."""
    MVC = "mvc"
    LAYERED = "layered"
    CLEAN = "clean"
    HEXAGONAL = "hexagonal"
    FEATURE_DRIVEN = "feature_driven"
    DDD = "ddd"
    CQRS = "cqrs"
    EVENT_DRIVEN = "event_driven"
    ONION = "onion"
    VERTICAL_SLICE = "vertical_slice"

    @property
    def style(self) -> ArchitectureStyle:
        """The immutable composition data for this style."""
        return _CATALOGUE[self.value]

    @property
    def display_name(self) -> str:
        return self.style.display_name
