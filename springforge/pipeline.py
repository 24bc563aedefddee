"""SpringForge generation orchestrator.

Composes one Spring Boot project from a :class:`~springforge.models.ProjectConfig`:

Step 1: CHECK     -- Refuse an occupied project directory before any work.
Step 2: RESOLVE   -- Library versions, dependency rules, runtime properties.
Step 3: BASE      -- Build file, application class, properties, README.
Step 4: BLUEPRINT -- Architecture-specific Java sources.
Step 5: SCAFFOLD  -- Extra files contributed by dependency rules.
Step 6: PATCH     -- Build file completed by the dialect's mutator.
Step 7: COMPOSE   -- ``compose.yaml`` for the selected backing services.
Step 8: OPS       -- Dockerfile, Kubernetes manifests, CI workflow.

Generation is pure: it returns a :class:`GeneratedFileMap` and touches the
disk only through :func:`write_project`, which flushes atomically.

Usage::

    springforge --preset rest-api --artifact-id orders --output ./out
    springforge --config project.json --dry-run
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from springforge.architecture.resolver import BlueprintResolver
from springforge.architecture.styles import Architecture
from springforge.build import mutator_for
from springforge.config import Settings
from springforge.dependencies.registry import DependencyRuleRegistry
from springforge.dependencies.versions import LibraryVersions, VersionResolver
from springforge.errors import ProjectExistsError, SpringForgeError
from springforge.file_map import GeneratedFileMap
from springforge.models import BuildTool, Packaging, ProjectConfig
from springforge.presets import DEFAULT_BOOT_VERSION, PRESETS, get_preset
from springforge.scaffolder.context import (
    class_refs,
    java_template,
    project_context,
    task_context,
)
from springforge.scaffolder.docker_gen import InfrastructureComposer
from springforge.scaffolder.scaffolding import ScaffoldingGenerator
from springforge.scaffolder.templates import TemplateRenderer
from springforge.utils import (
    console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    setup_logging,
)

logger = logging.getLogger(__name__)

COMPOSE_FILE = "compose.yaml"

# Feature flag -> (template id, output path), in emission order.
OPS_FILES: tuple[tuple[str, str, str], ...] = (
    ("enable_container_files", "ops/Dockerfile", "Dockerfile"),
    ("enable_container_files", "ops/dockerignore", ".dockerignore"),
    ("enable_orchestration_manifests", "ops/k8s/deployment.yaml", "k8s/deployment.yaml"),
    ("enable_orchestration_manifests", "ops/k8s/service.yaml", "k8s/service.yaml"),
    ("enable_orchestration_manifests", "ops/k8s/configmap.yaml", "k8s/configmap.yaml"),
    ("enable_pipeline_config", "ops/ci.yml", ".github/workflows/ci.yml"),
)


def suggest_alternative_artifact_id(artifact_id: str) -> str:
    """Artifact id to offer when the requested one is taken."""
    return f"{artifact_id}-new"


# ---------------------------------------------------------------------------
# ProjectGenerator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Compose the complete file set of one Spring Boot project.

    All collaborators are read-only after construction, so one generator
    may serve any number of sequential ``generate`` calls.

    Args:
        registry: Dependency rule catalogue; defaults to the packaged one
            (or ``settings.rules_path`` when set).
        renderer: Template renderer; defaults to the packaged templates
            (or ``settings.template_dir`` when set).
        settings: Process settings; only the sample entity name and the
            override paths are consulted.
    """

    def __init__(
        self,
        registry: DependencyRuleRegistry | None = None,
        renderer: TemplateRenderer | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or Settings()
        if registry is None:
            if self.settings.rules_path is not None:
                registry = DependencyRuleRegistry.from_json(self.settings.rules_path)
            else:
                registry = DependencyRuleRegistry.default()
        self.registry = registry
        self.renderer = renderer or TemplateRenderer(self.settings.template_dir)
        self.versions = VersionResolver()
        self.blueprints = BlueprintResolver(self.settings.sample_entity)
        self.scaffolding = ScaffoldingGenerator(self.registry)
        self.composer = InfrastructureComposer(self.registry, self.renderer)

    # -- Public API --------------------------------------------------------

    def generate(self, config: ProjectConfig) -> GeneratedFileMap:
        """Build the file map for *config* without writing anything.

        Raises:
            ProjectExistsError: ``config.project_root`` already exists.
            ScaffoldingConflictError: Two dependencies scaffold one path.
            FileConflictError: Two generation steps produce one path.
            InfrastructureCycleError: Service startup edges form a cycle.
            TemplateRenderError: A template is missing or fails to render.
        """
        # 1. Configuration check
        if config.project_root.exists():
            raise ProjectExistsError(config.project_root)

        # 2. Resolution
        ids = config.sorted_dependencies
        unknown = [dependency_id for dependency_id in ids if dependency_id not in self.registry]
        if unknown:
            logger.warning("Ignoring unknown dependency ids: %s", ", ".join(unknown))

        resolved = self.versions.resolve(config.spring_boot_version)
        rules = self.registry.get_rules(ids)
        properties = self.registry.aggregate_properties(ids)
        context = project_context(
            config, rules, properties, resolved.versions, self.settings.sample_entity
        )
        compose_plan = self.composer.plan(ids)
        context["has_compose"] = compose_plan.required

        files = GeneratedFileMap()

        # 3 + 6. Base files; the build file is patched before it is added
        self._add_build_files(files, config, context, resolved.versions)
        self._add_base_files(files, config, context)

        # 4. Architecture blueprints
        self._add_blueprints(files, config, context)

        # 5. Dependency scaffolding
        for item in self.scaffolding.plan(ids, config.package_name, ""):
            files.add(item.path, item.content, f"scaffolding:{item.owner}")

        # 7. Infrastructure
        if compose_plan.required:
            files.add(COMPOSE_FILE, self.composer.render(compose_plan), "infrastructure")
        else:
            logger.debug("No selected dependency needs a container; skipping %s", COMPOSE_FILE)

        # 8. Feature-gated ops files
        for flag, template_id, output in OPS_FILES:
            if config.features.is_enabled(flag):
                files.add(output, self.renderer.render(template_id, context), template_id)

        logger.info(
            "Composed %d files for %s (%s, %s)",
            len(files), config.artifact_id, config.architecture.display_name, config.build_tool.value,
        )
        return files

    def generate_to_disk(self, config: ProjectConfig) -> Path:
        """Generate *config* and flush it to ``config.project_root``."""
        files = self.generate(config)
        return write_project(files, config.project_root)

    # -- Steps -------------------------------------------------------------

    def _add_build_files(
        self,
        files: GeneratedFileMap,
        config: ProjectConfig,
        context: dict[str, Any],
        versions: LibraryVersions,
    ) -> None:
        mutator = mutator_for(config.build_tool, self.registry)
        if config.build_tool == BuildTool.MAVEN:
            raw = self.renderer.render("build/pom.xml", context)
            files.add("pom.xml", mutator.patch(raw, config, versions), "build/pom.xml")
        else:
            raw = self.renderer.render("build/build.gradle", context)
            files.add("build.gradle", mutator.patch(raw, config, versions), "build/build.gradle")
            files.add(
                "settings.gradle",
                self.renderer.render("build/settings.gradle", context),
                "build/settings.gradle",
            )

    def _add_base_files(
        self, files: GeneratedFileMap, config: ProjectConfig, context: dict[str, Any]
    ) -> None:
        main_dir = f"src/main/java/{config.package_path}"
        test_dir = f"src/test/java/{config.package_path}"
        app = config.application_class

        base = [
            ("java/Application.java", f"{main_dir}/{app}.java"),
            ("java/ApplicationTests.java", f"{test_dir}/{app}Tests.java"),
            ("config/application.properties", "src/main/resources/application.properties"),
            ("project/gitignore", ".gitignore"),
            ("project/README.md", "README.md"),
        ]
        if config.packaging == Packaging.WAR:
            base.insert(1, ("java/ServletInitializer.java", f"{main_dir}/ServletInitializer.java"))

        for template_id, output in base:
            files.add(output, self.renderer.render(template_id, context), template_id)

    def _add_blueprints(
        self, files: GeneratedFileMap, config: ProjectConfig, context: dict[str, Any]
    ) -> None:
        tasks = self.blueprints.resolve(config.architecture, config.features)
        refs = class_refs(tasks, config.package_name)
        root = f"src/main/java/{config.package_path}"
        for task in tasks:
            content = self.renderer.render(java_template(task.template_id), task_context(context, task, refs))
            files.add(f"{root}/{task.directory}/{task.filename}", content, task.template_id)


# ---------------------------------------------------------------------------
# Atomic writer
# ---------------------------------------------------------------------------


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_project(files: GeneratedFileMap, project_root: str | Path) -> Path:
    """Write *files* under *project_root*, all or nothing.

    Files are written into a temporary sibling directory that is renamed
    onto *project_root* only once every write succeeded.

    Raises:
        ProjectExistsError: *project_root* already exists.
    """
    root = Path(project_root)
    if root.exists():
        raise ProjectExistsError(root)

    root.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f".{root.name}-", dir=root.parent))
    try:
        for relative, content in files.items():
            target = staging / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        # mkdtemp creates 0700; give the root the mode a plain mkdir would.
        staging.chmod(0o777 & ~_current_umask())
        staging.rename(root)
    except Exception:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    logger.info("Wrote %d files to %s", len(files), root)
    return root


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _config_from_args(args: Any, settings: Settings) -> ProjectConfig:
    if args.config:
        raw = Path(args.config).read_text(encoding="utf-8")
        return ProjectConfig.model_validate_json(raw)

    preset = get_preset(args.preset)
    return preset.to_config(
        group_id=args.group_id or settings.default_group_id,
        artifact_id=args.artifact_id,
        name=args.name,
        description=args.description,
        package_name=args.package,
        build_tool=BuildTool(args.build_tool),
        packaging=Packaging(args.packaging),
        spring_boot_version=args.boot_version,
        java_version=args.java,
        architecture=Architecture(args.architecture) if args.architecture else None,
        extra_dependencies=frozenset(args.dependency or ()),
        output_directory=Path(args.output) if args.output else settings.default_output_dir,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``springforge``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="springforge",
        description="SpringForge -- Spring Boot project generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  springforge --preset rest-api --artifact-id orders\n"
            "  springforge --preset minimal --artifact-id demo --build-tool gradle -d redis\n"
            "  springforge --config project.json --dry-run\n"
        ),
    )
    parser.add_argument("--config", help="ProjectConfig JSON file (overrides the other options)")
    parser.add_argument(
        "--preset",
        default="minimal",
        help=f"Starter preset: {', '.join(p.name for p in PRESETS.values())} (default: Minimal)",
    )
    parser.add_argument("--artifact-id", "-a", help="Maven artifact id / project directory name")
    parser.add_argument("--group-id", "-g", default=None, help="Maven group id")
    parser.add_argument("--name", default=None, help="Project display name (default: artifact id)")
    parser.add_argument("--description", default=None, help="Project description")
    parser.add_argument("--package", default=None, help="Base Java package")
    parser.add_argument("--build-tool", choices=[t.value for t in BuildTool], default="maven")
    parser.add_argument("--packaging", choices=[p.value for p in Packaging], default="jar")
    parser.add_argument("--boot-version", default=DEFAULT_BOOT_VERSION, help="Spring Boot version")
    parser.add_argument("--java", default=None, help="Java version (default: from preset)")
    parser.add_argument("--architecture", choices=[a.value for a in Architecture], default=None)
    parser.add_argument(
        "--dependency", "-d",
        action="append",
        help="Additional dependency id (repeatable)",
    )
    parser.add_argument("--output", "-o", default=None, help="Parent directory of the project")
    parser.add_argument("--dry-run", action="store_true", help="List the files without writing them")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")

    args = parser.parse_args(argv)
    if not args.config and not args.artifact_id:
        parser.error("--artifact-id is required unless --config is given")

    try:
        settings = Settings.from_env()
        if args.log_level:
            settings = settings.model_copy(update={"log_level": args.log_level.upper()})
        setup_logging(settings.log_level)
        config = _config_from_args(args, settings)
    except (ValidationError, KeyError, OSError) as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)

    generator = ProjectGenerator(settings=settings)
    try:
        if args.dry_run:
            files = generator.generate(config)
            print_summary_table(
                {path: files.origin_of(path) or "" for path in files.paths()},
                title=f"{config.artifact_id} ({len(files)} files)",
            )
            return
        root = generator.generate_to_disk(config)
    except ProjectExistsError as exc:
        print_error(str(exc))
        print_warning(
            f"Try --artifact-id {suggest_alternative_artifact_id(config.artifact_id)} "
            "or a different --output directory."
        )
        sys.exit(1)
    except SpringForgeError as exc:
        print_error(str(exc))
        sys.exit(1)

    print_success(f"Generated {config.artifact_id} at {root}")
    console.print(f"  Architecture: [bold]{config.architecture.display_name}[/bold]")
    console.print(f"  Build tool:   [bold]{config.build_tool.value}[/bold]")


if __name__ == "__main__":
    main()
