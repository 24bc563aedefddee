"""Unit tests for pom.xml patching (springforge.build.maven).

Tests cover:
- Properties / plugins / BOM / feature dependencies / test runner steps
- Idempotence of the full patch
- Existing sections are updated or left alone, never duplicated
- Missing anchors are skipped with a warning
"""

from __future__ import annotations

import logging
import textwrap

import pytest

from springforge.build import PomMutator, mutator_for
from springforge.build.maven import maven_dependency
from springforge.build.scanner import find_all_tags
from springforge.dependencies.rules import BuildDependency, DependencyScope

pytestmark = pytest.mark.unit


@pytest.fixture
def mutator(registry) -> PomMutator:
    return PomMutator(registry)


class TestMavenDependency:
    def test_managed_compile_dependency(self, versions):
        dep = BuildDependency(group_id="g", artifact_id="a")
        assert maven_dependency(dep, versions, indent="") == (
            "<dependency>\n"
            "    <groupId>g</groupId>\n"
            "    <artifactId>a</artifactId>\n"
            "</dependency>\n"
        )

    def test_version_key_and_runtime_scope(self, versions):
        dep = BuildDependency(
            group_id="io.jsonwebtoken", artifact_id="jjwt-impl",
            version_key="jjwt", scope=DependencyScope.RUNTIME,
        )
        rendered = maven_dependency(dep, versions)
        assert f"<version>{versions.jjwt}</version>" in rendered
        assert "<scope>runtime</scope>" in rendered

    def test_compile_only_is_optional(self, versions):
        dep = BuildDependency(group_id="org.projectlombok", artifact_id="lombok",
                              scope=DependencyScope.COMPILE_ONLY)
        rendered = maven_dependency(dep, versions)
        assert "<optional>true</optional>" in rendered
        assert "<scope>" not in rendered


class TestPatchMinimalPom:
    def test_adds_every_section(self, mutator, minimal_pom, maven_config, versions):
        patched = mutator.patch(minimal_pom, maven_config, versions)
        assert "<java.version>21</java.version>" in patched
        assert f"<lombok.version>{versions.lombok}</lombok.version>" in patched
        assert "<artifactId>spring-boot-maven-plugin</artifactId>" in patched
        assert "<artifactId>spring-boot-dependencies</artifactId>" in patched
        assert "<scope>import</scope>" in patched
        assert patched.count("maven-surefire-plugin") == 1
        assert patched.endswith("</project>\n")

    def test_section_order(self, mutator, minimal_pom, maven_config, versions):
        patched = mutator.patch(minimal_pom, maven_config, versions)
        assert (
            patched.index("<properties>")
            < patched.index("<dependencyManagement>")
            < patched.index("<artifactId>spring-boot-starter-web</artifactId>")
            < patched.index("<build>")
        )

    def test_idempotent(self, mutator, minimal_pom, config_factory, versions):
        config = config_factory(
            dependencies={"web", "lombok", "mapstruct", "data-jpa"},
            features={"enable_auth": True, "enable_api_docs": True, "enable_object_mapping": True},
        )
        once = mutator.patch(minimal_pom, config, versions)
        twice = mutator.patch(once, config, versions)
        assert twice == once

    def test_coverage_plugin_for_web(self, mutator, minimal_pom, maven_config, versions):
        assert "jacoco-maven-plugin" in mutator.patch(minimal_pom, maven_config, versions)

    def test_no_coverage_plugin_without_triggers(self, mutator, minimal_pom, config_factory, versions):
        config = config_factory(dependencies={"lombok"})
        assert "jacoco-maven-plugin" not in mutator.patch(minimal_pom, config, versions)

    def test_enforcer_uses_java_version(self, mutator, minimal_pom, config_factory, versions):
        patched = mutator.patch(minimal_pom, config_factory(java_version="17"), versions)
        assert "<version>[17,)</version>" in patched


class TestFeatureDependencies:
    def test_auth_adds_jjwt(self, mutator, minimal_pom, config_factory, versions):
        config = config_factory(features={"enable_auth": True})
        patched = mutator.patch(minimal_pom, config, versions)
        for artifact in ("jjwt-api", "jjwt-impl", "jjwt-jackson"):
            assert patched.count(f"<artifactId>{artifact}</artifactId>") == 1
        assert f"<version>{versions.jjwt}</version>" in patched

    def test_existing_dependency_not_duplicated(self, mutator, config_factory, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencies>
                    <dependency>
                        <groupId>org.springdoc</groupId>
                        <artifactId>springdoc-openapi-starter-webmvc-ui</artifactId>
                        <version>2.0.0</version>
                    </dependency>
                </dependencies>
            </project>
            """)
        config = config_factory(features={"enable_api_docs": True})
        patched = mutator.patch(pom, config, versions)
        assert patched.count("springdoc-openapi-starter-webmvc-ui") == 1
        assert "<version>2.0.0</version>" in patched

    def test_object_mapping_uses_processor_paths(self, mutator, minimal_pom, config_factory, versions):
        config = config_factory(dependencies={"web", "lombok"}, features={"enable_object_mapping": True})
        patched = mutator.patch(minimal_pom, config, versions)
        assert patched.count("<artifactId>mapstruct</artifactId>") == 1
        processors = find_all_tags(patched, "annotationProcessorPaths")
        assert len(processors) == 1
        paths = processors[0].inner(patched)
        assert "mapstruct-processor" in paths
        assert "lombok-mapstruct-binding" in paths
        assert "<version>${lombok.version}</version>" in paths

    def test_feature_dependencies_go_to_project_dependencies(self, mutator, config_factory, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencyManagement>
                    <dependencies>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                </dependencies>
            </project>
            """)
        config = config_factory(features={"enable_api_docs": True})
        patched = mutator.patch(pom, config, versions)
        management = find_all_tags(patched, "dependencyManagement")[0].inner(patched)
        assert "springdoc" not in management
        assert "spring-boot-dependencies" in management

    def test_element_order_inside_dependency_is_irrelevant(self, mutator, config_factory, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencies>
                    <dependency>
                        <artifactId>springdoc-openapi-starter-webmvc-ui</artifactId>
                        <groupId>org.springdoc</groupId>
                        <version>2.0.0</version>
                    </dependency>
                </dependencies>
            </project>
            """)
        config = config_factory(features={"enable_api_docs": True})
        patched = mutator.patch(pom, config, versions)
        assert patched.count("springdoc-openapi-starter-webmvc-ui") == 1

    def test_excluded_coordinate_is_still_added(self, mutator, config_factory, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencies>
                    <dependency>
                        <groupId>org.example</groupId>
                        <artifactId>docs-bundle</artifactId>
                        <exclusions>
                            <exclusion>
                                <groupId>org.springdoc</groupId>
                                <artifactId>springdoc-openapi-starter-webmvc-ui</artifactId>
                            </exclusion>
                        </exclusions>
                    </dependency>
                </dependencies>
            </project>
            """)
        config = config_factory(features={"enable_api_docs": True})
        patched = mutator.patch(pom, config, versions)
        declared = [
            span.inner(patched) for span in find_all_tags(patched, "dependency")
            if "<exclusions>" not in span.inner(patched)
        ]
        assert any("<artifactId>springdoc-openapi-starter-webmvc-ui</artifactId>" in body for body in declared)
        assert patched.count("springdoc-openapi-starter-webmvc-ui") == 2


class TestExistingSections:
    def test_properties_are_updated_in_place(self, mutator, config_factory, versions):
        pom = textwrap.dedent("""\
            <project>
                <properties>
                    <java.version>17</java.version>
                    <custom.flag>on</custom.flag>
                </properties>
                <dependencies>
                </dependencies>
            </project>
            """)
        patched = mutator.patch(pom, config_factory(java_version="21"), versions)
        assert patched.count("<properties>") == 1
        assert "<java.version>21</java.version>" in patched
        assert "<java.version>17</java.version>" not in patched
        assert "<custom.flag>on</custom.flag>" in patched
        assert "<maven.compiler.source>21</maven.compiler.source>" in patched

    def test_existing_plugins_left_alone(self, mutator, maven_config, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencies>
                </dependencies>
                <build>
                    <plugins>
                        <plugin>
                            <artifactId>maven-surefire-plugin</artifactId>
                        </plugin>
                    </plugins>
                </build>
            </project>
            """)
        patched = mutator.patch(pom, maven_config, versions)
        assert "spring-boot-maven-plugin" not in patched
        assert patched.count("maven-surefire-plugin") == 1

    def test_build_without_plugins(self, mutator, maven_config, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencies>
                </dependencies>
                <build>
                    <finalName>app</finalName>
                </build>
            </project>
            """)
        patched = mutator.patch(pom, maven_config, versions)
        assert patched.count("<build>") == 1
        assert "<finalName>app</finalName>" in patched
        assert "spring-boot-maven-plugin" in patched

    def test_existing_bom_left_alone(self, mutator, maven_config, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencyManagement>
                    <dependencies>
                        <dependency>
                            <groupId>org.springframework.boot</groupId>
                            <artifactId>spring-boot-dependencies</artifactId>
                            <version>3.2.0</version>
                        </dependency>
                    </dependencies>
                </dependencyManagement>
                <dependencies>
                </dependencies>
            </project>
            """)
        patched = mutator.patch(pom, maven_config, versions)
        assert patched.count("spring-boot-dependencies") == 1
        assert "<version>3.2.0</version>" in patched

    def test_empty_dependency_management_gets_bom(self, mutator, maven_config, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencyManagement>
                </dependencyManagement>
                <dependencies>
                </dependencies>
            </project>
            """)
        patched = mutator.patch(pom, maven_config, versions)
        management = find_all_tags(patched, "dependencyManagement")[0].inner(patched)
        assert "spring-boot-dependencies" in management
        assert patched.count("<dependencyManagement>") == 1


class TestOtherPluginLists:
    SUREFIRE = "<artifactId>maven-surefire-plugin</artifactId>"

    def test_reporting_plugins_are_not_build_plugins(self, mutator, maven_config, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencies>
                </dependencies>
                <reporting>
                    <plugins>
                        <plugin>
                            <artifactId>maven-javadoc-plugin</artifactId>
                        </plugin>
                    </plugins>
                </reporting>
            </project>
            """)
        patched = mutator.patch(pom, maven_config, versions)
        builds = find_all_tags(patched, "build")
        assert len(builds) == 1
        build = builds[0].inner(patched)
        assert "<artifactId>spring-boot-maven-plugin</artifactId>" in build
        assert self.SUREFIRE in build
        assert "surefire" not in find_all_tags(patched, "reporting")[0].inner(patched)
        assert patched.count(self.SUREFIRE) == 1

    def test_plugin_management_is_not_build_plugins(self, mutator, maven_config, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencies>
                </dependencies>
                <build>
                    <pluginManagement>
                        <plugins>
                            <plugin>
                                <artifactId>maven-surefire-plugin</artifactId>
                                <version>3.0.0</version>
                            </plugin>
                        </plugins>
                    </pluginManagement>
                </build>
            </project>
            """)
        patched = mutator.patch(pom, maven_config, versions)
        managed = find_all_tags(patched, "pluginManagement")[0]
        assert "spring-boot-maven-plugin" not in managed.inner(patched)
        own = [span for span in find_all_tags(patched, "plugins") if not managed.contains(span.start)]
        assert len(own) == 1
        assert "<artifactId>spring-boot-maven-plugin</artifactId>" in own[0].inner(patched)
        assert self.SUREFIRE in own[0].inner(patched)
        assert mutator.patch(patched, maven_config, versions) == patched

    def test_profile_plugins_do_not_receive_surefire(self, mutator, maven_config, versions):
        pom = textwrap.dedent("""\
            <project>
                <dependencies>
                </dependencies>
                <build>
                    <finalName>app</finalName>
                </build>
                <profiles>
                    <profile>
                        <id>docs</id>
                        <build>
                            <plugins>
                                <plugin>
                                    <artifactId>maven-site-plugin</artifactId>
                                </plugin>
                            </plugins>
                        </build>
                    </profile>
                </profiles>
            </project>
            """)
        patched = mutator.patch(pom, maven_config, versions)
        profiles = find_all_tags(patched, "profiles")[0].inner(patched)
        assert "surefire" not in profiles
        assert "spring-boot-maven-plugin" not in profiles
        assert patched.count(self.SUREFIRE) == 1


class TestSelfClosingSections:
    POM = textwrap.dedent("""\
        <project>
            <properties/>
            <dependencies />
            <build>
                <plugins/>
            </build>
        </project>
        """)

    def test_sections_are_filled_not_duplicated(self, mutator, maven_config, versions):
        patched = mutator.patch(self.POM, maven_config, versions)
        assert "/>" not in patched
        assert patched.count("<properties>") == 1
        assert "<java.version>21</java.version>" in patched
        assert patched.count("<build>") == 1
        assert patched.count("<plugins>") == 1
        # one project list, one under dependencyManagement
        assert patched.count("<dependencies>") == 2
        assert patched.count("<artifactId>maven-surefire-plugin</artifactId>") == 1

    def test_feature_dependencies_land_in_expanded_section(self, mutator, config_factory, versions):
        config = config_factory(features={"enable_api_docs": True})
        patched = mutator.patch(self.POM, config, versions)
        project_deps = [
            span for span in find_all_tags(patched, "dependencies")
            if "springdoc-openapi-starter-webmvc-ui" in span.inner(patched)
        ]
        assert len(project_deps) == 1

    def test_idempotent(self, mutator, maven_config, versions):
        once = mutator.patch(self.POM, maven_config, versions)
        assert mutator.patch(once, maven_config, versions) == once


class TestMissingAnchors:
    def test_garbage_is_returned_normalized(self, mutator, maven_config, versions, caplog):
        with caplog.at_level(logging.WARNING, logger="springforge.build.mutator"):
            patched = mutator.patch("not   a pom", maven_config, versions)
        assert patched == "not   a pom\n"
        assert "Skipping" in caplog.text


class TestMutatorFor:
    def test_dispatch(self, registry):
        assert isinstance(mutator_for("maven", registry), PomMutator)

    def test_unknown_tool(self):
        with pytest.raises(ValueError, match="Unsupported build tool"):
            mutator_for("ant")
