"""Patching for Gradle ``build.gradle`` files (brace dialect)."""

from __future__ import annotations

import re
import textwrap
from typing import TYPE_CHECKING, Iterable

from springforge.build.mutator import BOM_COORDINATE, BuildFileMutator
from springforge.build.plugins import BuildPluginCatalogue
from springforge.build.scanner import find_block, find_top_level_block, insert_before_line
from springforge.dependencies.rules import BuildDependency, DependencyScope
from springforge.dependencies.versions import LibraryVersions

if TYPE_CHECKING:
    from springforge.models import ProjectConfig

GRADLE_CONFIGURATIONS = {
    DependencyScope.COMPILE: "implementation",
    DependencyScope.RUNTIME: "runtimeOnly",
    DependencyScope.ANNOTATION_PROCESSOR: "annotationProcessor",
    DependencyScope.COMPILE_ONLY: "compileOnly",
    DependencyScope.TEST: "testImplementation",
}

# The test task configured through the task container instead of a block.
_TEST_TASK = re.compile(r"\btasks\.(?:named\(\s*['\"]test['\"]|test\b|withType\(\s*Test\b)")

_TEST_BLOCK = textwrap.dedent("""\
    test {
        useJUnitPlatform()
        testLogging {
            events "passed", "skipped", "failed"
        }
    }
    """)


def gradle_declaration(dependency: BuildDependency, versions: LibraryVersions) -> str:
    """``implementation "group:artifact:version"`` for one dependency."""
    configuration = GRADLE_CONFIGURATIONS[dependency.scope]
    version = dependency.resolved_version(versions)
    notation = dependency.coordinate + (f":{version}" if version else "")
    return f'{configuration} "{notation}"'


class GradleMutator(BuildFileMutator):
    """Brace-dialect steps; blocks are located with the depth-counting scanner."""

    dialect = "brace"
    tool = "gradle"

    def ensure_plugins(self, text: str, config: ProjectConfig, catalogue: BuildPluginCatalogue) -> str:
        if find_block(text, "plugins") is not None:
            return text
        return catalogue.gradle_plugins_block(config) + "\n" + text

    def ensure_bom(self, text: str, config: ProjectConfig) -> str:
        if BOM_COORDINATE in text:
            return text

        bom_line = f'mavenBom "{BOM_COORDINATE}:{config.spring_boot_version}"'
        management = find_block(text, "dependencyManagement")
        if management is not None:
            imports = find_block(management.body(text), "imports")
            if imports is not None:
                close = management.body_start + imports.close_index
                return insert_before_line(text, close, f"        {bom_line}\n", "    ")
            block = f"    imports {{\n        {bom_line}\n    }}\n"
            return insert_before_line(text, management.close_index, block)

        dependencies = find_block(text, "dependencies")
        if dependencies is None:
            self.warn_missing_anchor("dependency management", "a dependencies block")
            return text
        block = (
            "dependencyManagement {\n"
            "    imports {\n"
            f"        {bom_line}\n"
            "    }\n"
            "}\n\n"
        )
        return insert_before_line(text, dependencies.start, block)

    def has_dependency(self, text: str, dependency: BuildDependency) -> bool:
        pattern = re.escape(dependency.coordinate) + r"(?=[:'\"])"
        return re.search(pattern, text) is not None

    def insert_dependencies(
        self, text: str, dependencies: Iterable[BuildDependency], versions: LibraryVersions
    ) -> str:
        block = find_block(text, "dependencies")
        if block is None:
            self.warn_missing_anchor("feature dependencies", "a dependencies block")
            return text
        lines = "".join(f"    {gradle_declaration(dep, versions)}\n" for dep in dependencies)
        return insert_before_line(text, block.close_index, lines)

    def ensure_test_configuration(self, text: str, catalogue: BuildPluginCatalogue) -> str:
        # A nested ``test {}`` (``sourceSets { test { ... } }``) is not the task.
        if (
            "useJUnitPlatform" in text
            or _TEST_TASK.search(text)
            or find_top_level_block(text, "test") is not None
        ):
            return text
        return text.rstrip("\n") + "\n\n" + _TEST_BLOCK
