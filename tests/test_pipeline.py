"""Unit tests for the generation orchestrator (springforge.pipeline).

Tests cover:
- ProjectGenerator.generate file set, ordering and origins
- Existing project directory refused before any work
- Unknown dependency ids, compose and ops gating, WAR packaging, Gradle
- Cross-step path conflicts
- write_project atomicity and root permissions
- CLI: dry run, write, argument errors, existing project
"""

from __future__ import annotations

import logging
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from springforge.architecture import Architecture
from springforge.config import Settings
from springforge.dependencies import DependencyRuleRegistry
from springforge.errors import FileConflictError, ProjectExistsError
from springforge.file_map import GeneratedFileMap
from springforge.models import BuildTool, Packaging
from springforge.pipeline import (
    COMPOSE_FILE,
    ProjectGenerator,
    main,
    suggest_alternative_artifact_id,
    write_project,
)

MAIN = "src/main/java/com/acme/orders"


@pytest.fixture
def generator(registry, renderer) -> ProjectGenerator:
    return ProjectGenerator(registry=registry, renderer=renderer)


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerate:
    @pytest.mark.unit
    def test_mvc_maven_file_set(self, generator, maven_config):
        files = generator.generate(maven_config)
        assert files.paths() == [
            "pom.xml",
            f"{MAIN}/OrdersApplication.java",
            "src/test/java/com/acme/orders/OrdersApplicationTests.java",
            "src/main/resources/application.properties",
            ".gitignore",
            "README.md",
            f"{MAIN}/model/Product.java",
            f"{MAIN}/dto/ProductDTO.java",
            f"{MAIN}/mapper/ProductMapper.java",
            f"{MAIN}/repository/ProductRepository.java",
            f"{MAIN}/service/ProductService.java",
            f"{MAIN}/controller/ProductController.java",
        ]

    @pytest.mark.unit
    def test_origins(self, generator, maven_config):
        files = generator.generate(maven_config)
        assert files.origin_of("pom.xml") == "build/pom.xml"
        assert files.origin_of(f"{MAIN}/controller/ProductController.java") == "controller/Controller"

    @pytest.mark.unit
    def test_java_sources_declare_their_package(self, generator, maven_config):
        files = generator.generate(maven_config)
        assert files.get(f"{MAIN}/service/ProductService.java").startswith("package com.acme.orders.service;")
        assert files.get(f"{MAIN}/OrdersApplication.java").startswith("package com.acme.orders;")

    @pytest.mark.unit
    def test_existing_project_refused(self, generator, maven_config):
        maven_config.project_root.mkdir(parents=True)
        with pytest.raises(ProjectExistsError) as excinfo:
            generator.generate(maven_config)
        assert excinfo.value.project_root == maven_config.project_root

    @pytest.mark.unit
    def test_unknown_ids_are_ignored(self, generator, config_factory, caplog):
        config = config_factory(dependencies={"web", "quantum-db"})
        with caplog.at_level(logging.WARNING, logger="springforge.pipeline"):
            files = generator.generate(config)
        assert "quantum-db" in caplog.text
        assert "quantum" not in files.get("pom.xml")

    @pytest.mark.unit
    def test_no_compose_without_infrastructure(self, generator, maven_config):
        assert COMPOSE_FILE not in generator.generate(maven_config)

    @pytest.mark.unit
    def test_compose_with_infrastructure(self, generator, config_factory):
        files = generator.generate(config_factory(dependencies={"web", "data-jpa", "postgresql"}))
        assert files.origin_of(COMPOSE_FILE) == "infrastructure"
        assert "postgres:16-alpine" in files.get(COMPOSE_FILE)
        assert "spring.datasource.url=jdbc:postgresql" in files.get("src/main/resources/application.properties")

    @pytest.mark.unit
    def test_ops_files_follow_flags(self, generator, config_factory):
        features = {
            "enable_container_files": True,
            "enable_orchestration_manifests": True,
            "enable_pipeline_config": True,
        }
        files = generator.generate(config_factory(features=features))
        for path in ("Dockerfile", ".dockerignore", "k8s/deployment.yaml", "k8s/service.yaml",
                     "k8s/configmap.yaml", ".github/workflows/ci.yml"):
            assert path in files

    @pytest.mark.unit
    def test_ops_files_absent_by_default(self, generator, maven_config):
        files = generator.generate(maven_config)
        assert "Dockerfile" not in files
        assert not any(path.startswith("k8s/") for path in files)

    @pytest.mark.unit
    def test_war_packaging(self, generator, config_factory):
        files = generator.generate(config_factory(packaging=Packaging.WAR))
        assert files.paths()[2] == f"{MAIN}/ServletInitializer.java"
        pom = files.get("pom.xml")
        assert "<packaging>war</packaging>" in pom
        assert "spring-boot-starter-tomcat" in pom

    @pytest.mark.unit
    def test_gradle_files(self, generator, gradle_config):
        files = generator.generate(gradle_config)
        assert files.paths()[:2] == ["build.gradle", "settings.gradle"]
        assert "pom.xml" not in files
        assert "rootProject.name = 'orders'" in files.get("settings.gradle")
        assert "mavenBom" in files.get("build.gradle")

    @pytest.mark.unit
    def test_scaffolding_owner_in_origin(self, generator, config_factory):
        files = generator.generate(config_factory(dependencies={"web", "security"}))
        path = f"{MAIN}/security/PasswordEncoderConfig.java"
        assert files.origin_of(path) == "scaffolding:security"

    @pytest.mark.unit
    def test_scaffolding_clashing_with_blueprint(self, renderer, rule_factory, maven_config):
        registry = DependencyRuleRegistry([
            rule_factory("web", 1, scaffolding={"files": [{
                "path": "src/main/java/{{basePackage}}/controller/ProductController.java",
                "content": "class Clash {}\n",
            }]}),
        ])
        with pytest.raises(FileConflictError) as excinfo:
            ProjectGenerator(registry=registry, renderer=renderer).generate(maven_config)
        assert excinfo.value.first_origin == "controller/Controller"
        assert excinfo.value.second_origin == "scaffolding:web"

    @pytest.mark.unit
    def test_generate_does_not_touch_disk(self, generator, maven_config):
        generator.generate(maven_config)
        assert not maven_config.project_root.exists()

    @pytest.mark.unit
    @pytest.mark.parametrize("dependencies", [{"web", "security"}, {"web"}])
    def test_single_password_encoder_with_auth(self, generator, config_factory, dependencies):
        files = generator.generate(config_factory(dependencies=dependencies, features={"enable_auth": True}))
        sources = [files.get(path) for path in files if path.endswith(".java")]
        assert sum(source.count("PasswordEncoder passwordEncoder()") for source in sources) == 1

    @pytest.mark.unit
    def test_sample_entity_names_feature_directory(self, registry, renderer, config_factory):
        generator = ProjectGenerator(
            registry=registry, renderer=renderer, settings=Settings(sample_entity="OrderLine")
        )
        files = generator.generate(config_factory(architecture=Architecture.FEATURE_DRIVEN))
        assert f"{MAIN}/features/orderline/model/OrderLine.java" in files


# ---------------------------------------------------------------------------
# write_project
# ---------------------------------------------------------------------------


def _small_map() -> GeneratedFileMap:
    files = GeneratedFileMap()
    files.add("pom.xml", "<project/>\n", "build/pom.xml")
    files.add("src/main/resources/application.properties", "a=b\n", "config")
    return files


class TestWriteProject:
    @pytest.mark.unit
    def test_writes_every_file(self, tmp_path: Path):
        root = write_project(_small_map(), tmp_path / "parent" / "demo")
        assert (root / "pom.xml").read_text(encoding="utf-8") == "<project/>\n"
        assert (root / "src/main/resources/application.properties").is_file()
        assert [p.name for p in (tmp_path / "parent").iterdir()] == ["demo"]

    @pytest.mark.unit
    def test_existing_root(self, tmp_path: Path):
        (tmp_path / "demo").mkdir()
        with pytest.raises(ProjectExistsError):
            write_project(_small_map(), tmp_path / "demo")

    @pytest.mark.unit
    def test_failure_leaves_nothing_behind(self, tmp_path: Path):
        with patch.object(Path, "write_text", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                write_project(_small_map(), tmp_path / "demo")
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.unit
    def test_root_has_default_directory_mode(self, tmp_path: Path):
        root = write_project(_small_map(), tmp_path / "demo")
        plain = tmp_path / "plain"
        plain.mkdir()
        assert stat.S_IMODE(root.stat().st_mode) == stat.S_IMODE(plain.stat().st_mode)
        assert stat.S_IMODE((root / "src").stat().st_mode) == stat.S_IMODE(plain.stat().st_mode)

    @pytest.mark.unit
    def test_generate_to_disk(self, generator, maven_config):
        root = generator.generate_to_disk(maven_config)
        assert root == maven_config.project_root
        assert (root / "pom.xml").is_file()
        assert (root / "src/main/java/com/acme/orders/OrdersApplication.java").is_file()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class TestMain:
    @pytest.fixture(autouse=True)
    def _restore_logger(self):
        logger = logging.getLogger("springforge")
        handlers, level = list(logger.handlers), logger.level
        yield
        logger.handlers[:] = handlers
        logger.setLevel(level)

    @pytest.mark.unit
    def test_suggestion(self):
        assert suggest_alternative_artifact_id("orders") == "orders-new"

    @pytest.mark.unit
    def test_writes_project(self, tmp_path: Path):
        main(["--preset", "minimal", "-a", "demo", "-g", "org.acme", "-o", str(tmp_path), "-d", "redis"])
        root = tmp_path / "demo"
        assert (root / "src/main/java/org/acme/demo/DemoApplication.java").is_file()
        assert (root / COMPOSE_FILE).is_file()

    @pytest.mark.unit
    def test_dry_run_writes_nothing(self, tmp_path: Path):
        main(["-a", "demo", "-o", str(tmp_path), "--dry-run", "--build-tool", "gradle"])
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.unit
    def test_config_file(self, tmp_path: Path, config_factory):
        config = config_factory(output_directory=tmp_path / "generated", build_tool=BuildTool.GRADLE)
        path = tmp_path / "project.json"
        path.write_text(config.model_dump_json(), encoding="utf-8")
        main(["--config", str(path)])
        assert (tmp_path / "generated" / "orders" / "build.gradle").is_file()

    @pytest.mark.unit
    def test_artifact_id_required(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["--preset", "minimal"])
        assert excinfo.value.code == 2

    @pytest.mark.unit
    def test_unknown_preset(self, tmp_path: Path):
        with pytest.raises(SystemExit) as excinfo:
            main(["--preset", "serverless", "-a", "demo", "-o", str(tmp_path)])
        assert excinfo.value.code == 1

    @pytest.mark.unit
    def test_invalid_package(self, tmp_path: Path):
        with pytest.raises(SystemExit) as excinfo:
            main(["-a", "demo", "--package", "com.1bad", "-o", str(tmp_path)])
        assert excinfo.value.code == 1

    @pytest.mark.unit
    def test_existing_project(self, tmp_path: Path):
        (tmp_path / "demo").mkdir()
        with pytest.raises(SystemExit) as excinfo:
            main(["-a", "demo", "-o", str(tmp_path)])
        assert excinfo.value.code == 1
