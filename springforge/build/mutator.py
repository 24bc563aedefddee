"""Shared build-file patching algorithm.

:class:`BuildFileMutator` fixes the order of the patch steps; the dialect
subclasses (:mod:`springforge.build.maven`, :mod:`springforge.build.gradle`)
say how each step finds its anchor and what text it inserts.

Contract of every step: when its section is already present it returns
the text unchanged, and when its anchor cannot be found it logs a warning
and returns the text unchanged.  ``patch`` is therefore idempotent and
never raises on malformed input.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from springforge.build.plugins import BuildPluginCatalogue
from springforge.build.scanner import Dialect, normalize_whitespace
from springforge.dependencies.rules import BuildDependency, DependencyScope
from springforge.dependencies.versions import LibraryVersions

if TYPE_CHECKING:
    from springforge.dependencies.registry import DependencyRuleRegistry
    from springforge.models import ProjectConfig

logger = logging.getLogger(__name__)

BOM_GROUP = "org.springframework.boot"
BOM_ARTIFACT = "spring-boot-dependencies"
BOM_COORDINATE = f"{BOM_GROUP}:{BOM_ARTIFACT}"


# Feature flag -> dependencies it needs, in injection order.
FEATURE_DEPENDENCIES: tuple[tuple[str, tuple[BuildDependency, ...]], ...] = (
    ("enable_auth", (
        BuildDependency(group_id="org.springframework.boot", artifact_id="spring-boot-starter-security"),
        BuildDependency(group_id="io.jsonwebtoken", artifact_id="jjwt-api", version_key="jjwt"),
        BuildDependency(group_id="io.jsonwebtoken", artifact_id="jjwt-impl", version_key="jjwt",
                        scope=DependencyScope.RUNTIME),
        BuildDependency(group_id="io.jsonwebtoken", artifact_id="jjwt-jackson", version_key="jjwt",
                        scope=DependencyScope.RUNTIME),
    )),
    ("enable_api_docs", (
        BuildDependency(group_id="org.springdoc", artifact_id="springdoc-openapi-starter-webmvc-ui",
                        version_key="springdoc"),
    )),
    ("enable_object_mapping", (
        BuildDependency(group_id="org.mapstruct", artifact_id="mapstruct", version_key="mapstruct"),
        BuildDependency(group_id="org.mapstruct", artifact_id="mapstruct-processor", version_key="mapstruct",
                        scope=DependencyScope.ANNOTATION_PROCESSOR),
        BuildDependency(group_id="org.projectlombok", artifact_id="lombok-mapstruct-binding",
                        version_key="lombok_mapstruct_binding",
                        scope=DependencyScope.ANNOTATION_PROCESSOR),
    )),
)


class BuildFileMutator:
    """Base class holding the ordered patch steps.

    Args:
        registry: Optional rule registry; when given, compiler options and
            extra plugins declared by the selected rules are folded into
            the synthesised plugin section.
    """

    dialect: Dialect = "brace"
    tool: str = ""

    def __init__(self, registry: DependencyRuleRegistry | None = None) -> None:
        self.registry = registry

    # -- Public API --------------------------------------------------------

    def patch(self, text: str, config: ProjectConfig, versions: LibraryVersions) -> str:
        """Return *text* with every missing section added."""
        catalogue = self.catalogue_for(config, versions)

        patched = self.open_empty_sections(text)
        patched = self.ensure_properties(patched, config, versions)
        patched = self.ensure_plugins(patched, config, catalogue)
        patched = self.ensure_bom(patched, config)
        patched = self.inject_feature_dependencies(patched, config, versions)
        patched = self.ensure_test_configuration(patched, catalogue)
        patched = normalize_whitespace(patched, self.dialect)

        logger.debug("Patched %s build file (%d -> %d chars)", self.tool, len(text), len(patched))
        return patched

    def catalogue_for(self, config: ProjectConfig, versions: LibraryVersions) -> BuildPluginCatalogue:
        options: list[str] = []
        plugins: list[str] = []
        if self.registry is not None:
            for rule in self.registry.get_rules(config.sorted_dependencies):
                spec = rule.build.for_tool(self.tool)
                options.extend(spec.compiler_options)
                plugins.extend(spec.plugins)
        return BuildPluginCatalogue(versions, compiler_options=options, extra_plugins=plugins)

    # -- Steps -------------------------------------------------------------

    def open_empty_sections(self, text: str) -> str:
        """Turn empty shorthand sections into ones the steps can insert into."""
        return text

    def ensure_properties(self, text: str, config: ProjectConfig, versions: LibraryVersions) -> str:
        """Build properties; only the tag dialect has a properties section."""
        return text

    def ensure_plugins(self, text: str, config: ProjectConfig, catalogue: BuildPluginCatalogue) -> str:
        raise NotImplementedError

    def ensure_bom(self, text: str, config: ProjectConfig) -> str:
        raise NotImplementedError

    def inject_feature_dependencies(
        self, text: str, config: ProjectConfig, versions: LibraryVersions
    ) -> str:
        missing = [
            dep for dep in self.feature_dependencies(config)
            if not self.has_dependency(text, dep)
        ]
        if not missing:
            return text
        return self.insert_dependencies(text, missing, versions)

    def ensure_test_configuration(self, text: str, catalogue: BuildPluginCatalogue) -> str:
        raise NotImplementedError

    # -- Dialect hooks -----------------------------------------------------

    def feature_dependencies(self, config: ProjectConfig) -> list[BuildDependency]:
        """Dependencies required by the enabled features, in fixed order."""
        selected: list[BuildDependency] = []
        for flag, dependencies in FEATURE_DEPENDENCIES:
            if config.features.is_enabled(flag):
                selected.extend(dep for dep in dependencies if self.accepts(dep))
        return selected

    def accepts(self, dependency: BuildDependency) -> bool:
        """Whether *dependency* belongs in this dialect's dependency list."""
        return True

    def has_dependency(self, text: str, dependency: BuildDependency) -> bool:
        raise NotImplementedError

    def insert_dependencies(
        self, text: str, dependencies: Iterable[BuildDependency], versions: LibraryVersions
    ) -> str:
        raise NotImplementedError

    @staticmethod
    def warn_missing_anchor(step: str, anchor: str) -> None:
        logger.warning("Skipping '%s': could not find %s in build file", step, anchor)
