"""Shared pytest fixtures for the SpringForge test suite.

Provides reusable fixtures for:
- The packaged rule registry and template renderer
- A small hand-written registry for ordering / collision tests
- Complete ProjectConfig factories (Maven and Gradle)
- Minimal base build files
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest

from springforge.architecture.styles import Architecture
from springforge.dependencies.registry import DependencyRuleRegistry
from springforge.dependencies.rules import DependencyRule
from springforge.dependencies.versions import VERSION_TABLE, LibraryVersions
from springforge.models import BuildTool, Packaging, ProjectConfig, ProjectFeatures
from springforge.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Registry & renderer
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def registry() -> DependencyRuleRegistry:
    """The packaged dependency-rules.json catalogue."""
    return DependencyRuleRegistry.default()


@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    """Renderer over the packaged templates."""
    return TemplateRenderer()


@pytest.fixture
def versions() -> LibraryVersions:
    return VERSION_TABLE["3.4"]


def make_rule(rule_id: str, priority: int = 0, **fields: Any) -> DependencyRule:
    """Build a rule from plain dicts, the way the JSON catalogue does."""
    return DependencyRule.model_validate({"id": rule_id, "priority": priority, **fields})


@pytest.fixture
def rule_factory() -> Callable[..., DependencyRule]:
    return make_rule


@pytest.fixture
def small_registry() -> DependencyRuleRegistry:
    """Hand-written rules with known priorities, properties and services."""
    return DependencyRuleRegistry([
        make_rule("alpha", 5, runtime={"properties": {"shared.key": "from-alpha", "alpha.only": "a"}}),
        make_rule("beta", 5, runtime={"properties": {"beta.only": "b"}}),
        make_rule("gamma", 9, runtime={"properties": {"shared.key": "from-gamma"}}),
        make_rule("low", 1),
    ])


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def config_factory(tmp_path: Path) -> Callable[..., ProjectConfig]:
    """Return a factory building complete configs; keyword args override fields."""

    def _make(**overrides: Any) -> ProjectConfig:
        features = overrides.pop("features", ProjectFeatures())
        if isinstance(features, dict):
            features = ProjectFeatures(**features)
        values: dict[str, Any] = {
            "group_id": "com.acme",
            "artifact_id": "orders",
            "name": "orders",
            "description": "Order service",
            "package_name": "com.acme.orders",
            "java_version": "21",
            "build_tool": BuildTool.MAVEN,
            "packaging": Packaging.JAR,
            "architecture": Architecture.MVC,
            "spring_boot_version": "3.4.1",
            "dependencies": frozenset({"web"}),
            "features": features,
            "output_directory": tmp_path / "out",
        }
        values.update(overrides)
        if not isinstance(values["dependencies"], frozenset):
            values["dependencies"] = frozenset(values["dependencies"])
        return ProjectConfig(**values)

    return _make


@pytest.fixture
def maven_config(config_factory) -> ProjectConfig:
    return config_factory()


@pytest.fixture
def gradle_config(config_factory) -> ProjectConfig:
    return config_factory(build_tool=BuildTool.GRADLE)


# ---------------------------------------------------------------------------
# Base build files
# ---------------------------------------------------------------------------

@pytest.fixture
def minimal_pom() -> str:
    return textwrap.dedent("""\
        <?xml version="1.0" encoding="UTF-8"?>
        <project xmlns="http://maven.apache.org/POM/4.0.0">
            <modelVersion>4.0.0</modelVersion>
            <groupId>com.acme</groupId>
            <artifactId>orders</artifactId>

            <dependencies>
                <dependency>
                    <groupId>org.springframework.boot</groupId>
                    <artifactId>spring-boot-starter-web</artifactId>
                </dependency>
            </dependencies>
        </project>
        """)


@pytest.fixture
def minimal_gradle() -> str:
    return textwrap.dedent("""\
        group = 'com.acme'
        version = '0.0.1-SNAPSHOT'

        repositories {
            mavenCentral()
        }

        dependencies {
            implementation "org.springframework.boot:spring-boot-starter-web"
        }
        """)
