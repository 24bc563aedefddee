"""Build plugin declarations synthesised when a build file has none."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Iterable, TYPE_CHECKING

from springforge.dependencies.versions import LibraryVersions

if TYPE_CHECKING:
    from springforge.models import ProjectConfig

# Dependency ids that make a coverage report worthwhile.
COVERAGE_TRIGGERS = frozenset({"web", "webflux", "data-jpa"})


@dataclass(frozen=True)
class MavenPlugin:
    group_id: str
    artifact_id: str
    version: str | None = None
    configuration: str = ""

    def render(self, indent: str = "            ") -> str:
        """``<plugin>`` element, every line prefixed by *indent*."""
        lines = [
            "<plugin>",
            f"    <groupId>{self.group_id}</groupId>",
            f"    <artifactId>{self.artifact_id}</artifactId>",
        ]
        if self.version:
            lines.append(f"    <version>{self.version}</version>")
        if self.configuration:
            lines.append(textwrap.indent(self.configuration.strip("\n"), "    "))
        lines.append("</plugin>")
        return textwrap.indent("\n".join(lines), indent) + "\n"


@dataclass(frozen=True)
class GradlePlugin:
    id: str
    version: str | None = None

    def render(self) -> str:
        if self.version:
            return f"    id '{self.id}' version '{self.version}'\n"
        return f"    id '{self.id}'\n"


def _path(group_id: str, artifact_id: str, version: str) -> str:
    return textwrap.dedent(f"""\
        <path>
            <groupId>{group_id}</groupId>
            <artifactId>{artifact_id}</artifactId>
            <version>{version}</version>
        </path>""")


class BuildPluginCatalogue:
    """Plugin lists for both build tools, pinned to one version table.

    *compiler_options* and *extra_plugins* come from the selected
    dependency rules; extra Maven plugins are ``group:artifact[:version]``
    strings, extra Gradle plugins are plugin ids.
    """

    def __init__(
        self,
        versions: LibraryVersions,
        compiler_options: Iterable[str] = (),
        extra_plugins: Iterable[str] = (),
    ) -> None:
        self.versions = versions
        self.compiler_options = tuple(dict.fromkeys(compiler_options))
        self.extra_plugins = tuple(dict.fromkeys(extra_plugins))

    @staticmethod
    def uses_coverage(dependencies: Iterable[str]) -> bool:
        return not COVERAGE_TRIGGERS.isdisjoint(dependencies)

    # -- Gradle ------------------------------------------------------------

    def gradle_plugins(self, config: ProjectConfig) -> list[GradlePlugin]:
        plugins = [
            GradlePlugin("java"),
            GradlePlugin("org.springframework.boot", config.spring_boot_version),
            GradlePlugin("io.spring.dependency-management", self.versions.dependency_management_plugin),
        ]
        if config.packaging.value == "war":
            plugins.append(GradlePlugin("war"))
        if self.uses_coverage(config.dependencies):
            plugins.append(GradlePlugin("jacoco"))
        plugins.extend(GradlePlugin(plugin_id) for plugin_id in self.extra_plugins)
        return plugins

    def gradle_plugins_block(self, config: ProjectConfig) -> str:
        body = "".join(plugin.render() for plugin in self.gradle_plugins(config))
        return "plugins {\n" + body + "}\n"

    # -- Maven -------------------------------------------------------------

    def maven_plugins(self, config: ProjectConfig) -> list[MavenPlugin]:
        plugins = [
            self._spring_boot_plugin(config),
            self._compiler_plugin(config),
            self.surefire_plugin(),
            self._failsafe_plugin(),
        ]
        if self.uses_coverage(config.dependencies):
            plugins.append(self._jacoco_plugin())
        plugins.append(self._enforcer_plugin(config))
        for coordinate in self.extra_plugins:
            parts = coordinate.split(":")
            if len(parts) >= 2:
                plugins.append(MavenPlugin(parts[0], parts[1], parts[2] if len(parts) > 2 else None))
        return plugins

    def maven_build_section(self, config: ProjectConfig) -> str:
        """``<build><plugins>...</plugins></build>`` indented for a POM body."""
        plugins = "".join(plugin.render() for plugin in self.maven_plugins(config))
        return "    <build>\n        <plugins>\n" + plugins + "        </plugins>\n    </build>\n"

    def _spring_boot_plugin(self, config: ProjectConfig) -> MavenPlugin:
        configuration = ""
        if "lombok" in config.dependencies:
            configuration = textwrap.dedent("""\
                <configuration>
                    <excludes>
                        <exclude>
                            <groupId>org.projectlombok</groupId>
                            <artifactId>lombok</artifactId>
                        </exclude>
                    </excludes>
                </configuration>""")
        return MavenPlugin(
            "org.springframework.boot", "spring-boot-maven-plugin",
            config.spring_boot_version, configuration,
        )

    def _compiler_plugin(self, config: ProjectConfig) -> MavenPlugin:
        mapping = config.features.enable_object_mapping or "mapstruct" in config.dependencies
        paths: list[str] = []
        if mapping:
            paths.append(_path("org.mapstruct", "mapstruct-processor", self.versions.mapstruct))
        if "lombok" in config.dependencies:
            paths.append(_path("org.projectlombok", "lombok", "${lombok.version}"))
            if mapping:
                paths.append(_path(
                    "org.projectlombok", "lombok-mapstruct-binding",
                    self.versions.lombok_mapstruct_binding,
                ))

        lines = [
            "<configuration>",
            "    <source>${java.version}</source>",
            "    <target>${java.version}</target>",
        ]
        if paths:
            lines.append("    <annotationProcessorPaths>")
            lines.extend(textwrap.indent(path, "        ") for path in paths)
            lines.append("    </annotationProcessorPaths>")
        if self.compiler_options:
            lines.append("    <compilerArgs>")
            lines.extend(f"        <arg>{option}</arg>" for option in self.compiler_options)
            lines.append("    </compilerArgs>")
        lines.append("</configuration>")

        return MavenPlugin(
            "org.apache.maven.plugins", "maven-compiler-plugin",
            self.versions.maven_compiler_plugin, "\n".join(lines),
        )

    def surefire_plugin(self) -> MavenPlugin:
        configuration = textwrap.dedent("""\
            <configuration>
                <includes>
                    <include>**/*Test.java</include>
                    <include>**/*Tests.java</include>
                </includes>
            </configuration>""")
        return MavenPlugin(
            "org.apache.maven.plugins", "maven-surefire-plugin",
            self.versions.surefire_plugin, configuration,
        )

    def _failsafe_plugin(self) -> MavenPlugin:
        configuration = textwrap.dedent("""\
            <configuration>
                <includes>
                    <include>**/*IT.java</include>
                    <include>**/*IntegrationTest.java</include>
                </includes>
            </configuration>
            <executions>
                <execution>
                    <goals>
                        <goal>integration-test</goal>
                        <goal>verify</goal>
                    </goals>
                </execution>
            </executions>""")
        return MavenPlugin(
            "org.apache.maven.plugins", "maven-failsafe-plugin",
            self.versions.failsafe_plugin, configuration,
        )

    def _jacoco_plugin(self) -> MavenPlugin:
        configuration = textwrap.dedent("""\
            <executions>
                <execution>
                    <id>prepare-agent</id>
                    <goals>
                        <goal>prepare-agent</goal>
                    </goals>
                </execution>
                <execution>
                    <id>report</id>
                    <phase>test</phase>
                    <goals>
                        <goal>report</goal>
                    </goals>
                </execution>
            </executions>""")
        return MavenPlugin("org.jacoco", "jacoco-maven-plugin", self.versions.jacoco_plugin, configuration)

    def _enforcer_plugin(self, config: ProjectConfig) -> MavenPlugin:
        configuration = textwrap.dedent(f"""\
            <executions>
                <execution>
                    <id>enforce-versions</id>
                    <goals>
                        <goal>enforce</goal>
                    </goals>
                    <configuration>
                        <rules>
                            <requireMavenVersion>
                                <version>[3.6.3,)</version>
                            </requireMavenVersion>
                            <requireJavaVersion>
                                <version>[{config.java_version},)</version>
                            </requireJavaVersion>
                        </rules>
                    </configuration>
                </execution>
            </executions>""")
        return MavenPlugin(
            "org.apache.maven.plugins", "maven-enforcer-plugin",
            self.versions.enforcer_plugin, configuration,
        )
