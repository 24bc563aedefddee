"""Pydantic v2 models for dependency rules.

A rule is the full generation contract of one selectable dependency id:
build declarations per build tool, runtime properties, an optional
container service, and optional scaffolding files.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from springforge.dependencies.versions import LibraryVersions


class DependencyScope(str, Enum):
    """Where a build dependency is visible."""
    COMPILE = "compile"
    RUNTIME = "runtime"
    ANNOTATION_PROCESSOR = "annotation_processor"
    COMPILE_ONLY = "compile_only"
    TEST = "test"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Build section
# ---------------------------------------------------------------------------

class BuildDependency(_Frozen):
    """One artifact coordinate contributed to the build file."""
    group_id: str
    artifact_id: str
    version: Optional[str] = Field(
        default=None, description="Literal version; omitted when managed by the BOM"
    )
    version_key: Optional[str] = Field(
        default=None, description="LibraryVersions field resolved at render time"
    )
    scope: DependencyScope = DependencyScope.COMPILE

    @property
    def coordinate(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def resolved_version(self, versions: LibraryVersions) -> str | None:
        """Literal version, else the pinned version named by ``version_key``."""
        if self.version:
            return self.version
        if self.version_key:
            return getattr(versions, self.version_key, None)
        return None


class ToolBuildSpec(_Frozen):
    """Declarations for a single build tool."""
    dependencies: tuple[BuildDependency, ...] = ()
    plugins: tuple[str, ...] = ()
    compiler_options: tuple[str, ...] = ()


class BuildSpec(_Frozen):
    maven: ToolBuildSpec = Field(default_factory=ToolBuildSpec)
    gradle: ToolBuildSpec = Field(default_factory=ToolBuildSpec)

    def for_tool(self, tool: str) -> ToolBuildSpec:
        return self.gradle if tool == "gradle" else self.maven


# ---------------------------------------------------------------------------
# Runtime / infrastructure / scaffolding
# ---------------------------------------------------------------------------

class RuntimeSpec(_Frozen):
    properties: dict[str, str] = Field(default_factory=dict)


class HealthCheck(_Frozen):
    test: tuple[str, ...]
    interval: str = "10s"
    timeout: str = "5s"
    retries: int = 5


class InfraService(_Frozen):
    """Container service stanza contributed to ``compose.yaml``."""
    service_name: str
    image: str
    ports: tuple[str, ...] = ()
    environment: dict[str, str] = Field(default_factory=dict)
    healthcheck: Optional[HealthCheck] = None
    volume: Optional[str] = Field(default=None, description="Named persistent volume")
    volume_mount: Optional[str] = Field(default=None, description="Mount path inside the container")
    depends_on: tuple[str, ...] = Field(
        default=(), description="Dependency ids whose services must start first"
    )
    command: Optional[str] = None


class ScaffoldingFile(_Frozen):
    """A path template and content template; both may contain the base-package token."""
    path: str
    content: str


class ScaffoldingSpec(_Frozen):
    files: tuple[ScaffoldingFile, ...] = ()


# ---------------------------------------------------------------------------
# Rule
# ---------------------------------------------------------------------------

class DependencyRule(_Frozen):
    """Everything generated because one dependency id was selected."""
    id: str
    name: str = ""
    category: str = "OTHER"
    priority: int = Field(default=0, description="Higher surfaces and applies first")
    build: BuildSpec = Field(default_factory=BuildSpec)
    runtime: RuntimeSpec = Field(default_factory=RuntimeSpec)
    infrastructure: Optional[InfraService] = None
    scaffolding: Optional[ScaffoldingSpec] = None

    @property
    def has_scaffolding(self) -> bool:
        return self.scaffolding is not None and len(self.scaffolding.files) > 0

    @property
    def has_infrastructure(self) -> bool:
        return self.infrastructure is not None
