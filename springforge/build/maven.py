"""Patching for Maven ``pom.xml`` files (tag dialect)."""

from __future__ import annotations

import re
import textwrap
from typing import TYPE_CHECKING, Iterable

from springforge.build.mutator import BOM_ARTIFACT, BOM_GROUP, BuildFileMutator
from springforge.build.plugins import BuildPluginCatalogue
from springforge.build.scanner import (
    TagSpan,
    expand_empty_tags,
    find_all_tags,
    find_tag,
    find_top_level_tag,
    insert_before_line,
)
from springforge.dependencies.rules import BuildDependency, DependencyScope
from springforge.dependencies.versions import LibraryVersions

if TYPE_CHECKING:
    from springforge.models import ProjectConfig

# Regions whose child tags do not belong to the project itself.
NESTED_REGIONS = ("dependencyManagement", "build", "profiles", "plugin", "reporting")

# Sections the steps insert into; ``<name/>`` forms are opened first.
EXPANDABLE_SECTIONS = ("properties", "dependencyManagement", "dependencies", "build", "plugins")

_EXCLUSIONS = re.compile(r"<exclusions>.*?</exclusions>", re.DOTALL)
_SUREFIRE = re.compile(r"<artifactId>\s*maven-surefire-plugin\s*</artifactId>")

MAVEN_SCOPES = {
    DependencyScope.RUNTIME: "runtime",
    DependencyScope.TEST: "test",
}


def maven_dependency(
    dependency: BuildDependency, versions: LibraryVersions, indent: str = "        "
) -> str:
    """``<dependency>`` element for *dependency*, newline terminated."""
    lines = [
        "<dependency>",
        f"    <groupId>{dependency.group_id}</groupId>",
        f"    <artifactId>{dependency.artifact_id}</artifactId>",
    ]
    version = dependency.resolved_version(versions)
    if version:
        lines.append(f"    <version>{version}</version>")
    scope = MAVEN_SCOPES.get(dependency.scope)
    if scope:
        lines.append(f"    <scope>{scope}</scope>")
    if dependency.scope == DependencyScope.COMPILE_ONLY:
        lines.append("    <optional>true</optional>")
    lines.append("</dependency>")
    return textwrap.indent("\n".join(lines), indent) + "\n"


def _element_text(body: str, tag: str) -> str | None:
    span = find_tag(body, tag)
    return span.inner(body).strip() if span is not None else None


def _bom_dependency(boot_version: str, indent: str) -> str:
    body = textwrap.dedent(f"""\
        <dependency>
            <groupId>{BOM_GROUP}</groupId>
            <artifactId>{BOM_ARTIFACT}</artifactId>
            <version>{boot_version}</version>
            <type>pom</type>
            <scope>import</scope>
        </dependency>""")
    return textwrap.indent(body, indent) + "\n"


class PomMutator(BuildFileMutator):
    """Tag-dialect steps; regions are located with plain start/end tag search."""

    dialect = "tag"
    tool = "maven"

    def open_empty_sections(self, text: str) -> str:
        return expand_empty_tags(text, EXPANDABLE_SECTIONS)

    # -- Step 0: properties ------------------------------------------------

    def ensure_properties(self, text: str, config: ProjectConfig, versions: LibraryVersions) -> str:
        wanted = {
            "java.version": config.java_version,
            "maven.compiler.source": config.java_version,
            "maven.compiler.target": config.java_version,
            "lombok.version": versions.lombok,
        }

        span = self._top_level(text, "properties")
        if span is None:
            lines = "".join(f"        <{key}>{value}</{key}>\n" for key, value in wanted.items())
            block = "    <properties>\n" + lines + "    </properties>\n"
            anchor = self._first_section(text, ("dependencyManagement", "dependencies", "build"))
            if anchor is None:
                anchor = text.find("</project>")
            if anchor == -1:
                self.warn_missing_anchor("properties", "a <project> element")
                return text
            return insert_before_line(text, anchor, block, "    ")

        inner = span.inner(text)
        missing: list[str] = []
        for key, value in wanted.items():
            pattern = re.compile(r"<" + re.escape(key) + r">.*?</" + re.escape(key) + r">", re.DOTALL)
            if pattern.search(inner):
                inner = pattern.sub(lambda _m, k=key, v=value: f"<{k}>{v}</{k}>", inner, count=1)
            else:
                missing.append(f"        <{key}>{value}</{key}>\n")

        text = text[:span.inner_start] + inner + text[span.inner_end:]
        if missing:
            close = text.find("</properties>", span.inner_start)
            text = insert_before_line(text, close, "".join(missing), "    ")
        return text

    # -- Step 1: plugins ---------------------------------------------------

    def ensure_plugins(self, text: str, config: ProjectConfig, catalogue: BuildPluginCatalogue) -> str:
        if self._build_plugins(text) is not None:
            return text

        build = self._top_level(text, "build")
        if build is not None:
            plugins = "".join(plugin.render() for plugin in catalogue.maven_plugins(config))
            section = "        <plugins>\n" + plugins + "        </plugins>\n"
            return insert_before_line(text, build.inner_end, section, "    ")

        anchor = text.rfind("</project>")
        if anchor == -1:
            self.warn_missing_anchor("plugins", "the closing </project> tag")
            return text
        return insert_before_line(text, anchor, catalogue.maven_build_section(config))

    # -- Step 2: BOM -------------------------------------------------------

    def ensure_bom(self, text: str, config: ProjectConfig) -> str:
        if BOM_ARTIFACT in text:
            return text

        management = self._top_level(text, "dependencyManagement")
        if management is not None:
            inner = find_tag(text, "dependencies", management.inner_start)
            if inner is not None and inner.end <= management.end:
                entry = _bom_dependency(config.spring_boot_version, "            ")
                return insert_before_line(text, inner.inner_end, entry, "        ")
            entry = _bom_dependency(config.spring_boot_version, "            ")
            section = "        <dependencies>\n" + entry + "        </dependencies>\n"
            return insert_before_line(text, management.inner_end, section, "    ")

        dependencies = self._top_level(text, "dependencies")
        if dependencies is None:
            self.warn_missing_anchor("dependency management", "a <dependencies> element")
            return text
        entry = _bom_dependency(config.spring_boot_version, "            ")
        section = (
            "    <dependencyManagement>\n"
            "        <dependencies>\n" + entry + "        </dependencies>\n"
            "    </dependencyManagement>\n\n"
        )
        return insert_before_line(text, dependencies.start, section, "    ")

    # -- Step 3: feature dependencies -------------------------------------

    def accepts(self, dependency: BuildDependency) -> bool:
        # Annotation processors are configured on the compiler plugin.
        return dependency.scope != DependencyScope.ANNOTATION_PROCESSOR

    def has_dependency(self, text: str, dependency: BuildDependency) -> bool:
        for span in find_all_tags(text, "dependency"):
            body = _EXCLUSIONS.sub("", span.inner(text))
            if (
                _element_text(body, "groupId") == dependency.group_id
                and _element_text(body, "artifactId") == dependency.artifact_id
            ):
                return True
        return False

    def insert_dependencies(
        self, text: str, dependencies: Iterable[BuildDependency], versions: LibraryVersions
    ) -> str:
        span = self._top_level(text, "dependencies")
        if span is None:
            self.warn_missing_anchor("feature dependencies", "a <dependencies> element")
            return text
        entries = "".join(maven_dependency(dep, versions) for dep in dependencies)
        return insert_before_line(text, span.inner_end, entries, "    ")

    # -- Step 4: test runner ----------------------------------------------

    def ensure_test_configuration(self, text: str, catalogue: BuildPluginCatalogue) -> str:
        plugins = self._build_plugins(text)
        if plugins is None:
            self.warn_missing_anchor("test configuration", "a <build><plugins> element")
            return text
        if _SUREFIRE.search(plugins.inner(text)):
            return text
        return insert_before_line(text, plugins.inner_end, catalogue.surefire_plugin().render(), "        ")

    # -- Helpers -----------------------------------------------------------

    @staticmethod
    def _top_level(text: str, tag: str) -> TagSpan | None:
        excluded = tuple(region for region in NESTED_REGIONS if region != tag)
        return find_top_level_tag(text, tag, excluded)

    def _build_plugins(self, text: str) -> TagSpan | None:
        """The ``<plugins>`` of the project's own ``<build>``.

        Plugin lists under ``<pluginManagement>``, ``<reporting>`` or a
        profile do not count.
        """
        build = self._top_level(text, "build")
        if build is None:
            return None
        managed = find_all_tags(text, "pluginManagement")
        for span in find_all_tags(text, "plugins"):
            if span.start < build.inner_start or span.end > build.inner_end:
                continue
            if not any(region.contains(span.start) for region in managed):
                return span
        return None

    def _first_section(self, text: str, tags: Iterable[str]) -> int | None:
        starts = [span.start for span in (self._top_level(text, tag) for tag in tags) if span]
        return min(starts) if starts else None
