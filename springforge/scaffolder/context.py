"""Jinja2 context building for generated projects.

The project-level context is computed once per generation; every Java
blueprint then gets a shallow copy extended with its own package and
class name plus references to the collaborating classes the same
architecture style produces (the repository a service talks to, the
mapper a controller uses, ...).
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Iterable, NamedTuple

from springforge.architecture.resolver import FileTask
from springforge.build.gradle import gradle_declaration
from springforge.build.maven import maven_dependency
from springforge.dependencies.rules import DependencyRule, DependencyScope
from springforge.dependencies.versions import LibraryVersions
from springforge.models import BuildTool
from springforge.utils import slugify, to_camel

if TYPE_CHECKING:
    from springforge.models import ProjectConfig

# Development-only signing key (base64); generated properties read
# JWT_SECRET first.
JWT_DEV_SECRET = "c3ByaW5nZm9yZ2UtZGV2LXNlY3JldC1jaGFuZ2UtbWUtYmVmb3JlLWRlcGxveWluZw=="


# ---------------------------------------------------------------------------
# Class references
# ---------------------------------------------------------------------------

class ClassRef(NamedTuple):
    """A generated Java class addressed by simple name and package."""
    name: str
    package: str

    @property
    def fqcn(self) -> str:
        return f"{self.package}.{self.name}"


# Context variable -> blueprint template ids that can fill it, first match wins.
COLLABORATORS: dict[str, tuple[str, ...]] = {
    "model": ("entity/Entity", "entity/DomainModel"),
    "dto": ("dto/DTO",),
    "mapper": ("mapper/Mapper",),
    "repository": ("port/RepositoryInterface", "repository/Repository"),
    "jpa_entity": ("entity/JpaEntity",),
    "jpa_repository": ("repository/JpaRepository",),
    "service": ("service/Service",),
    "usecase": ("usecase/UseCase",),
    "not_found": ("exception/ResourceNotFoundException",),
    "bad_request": ("exception/BadRequestException",),
    "error_response": ("dto/ErrorResponse",),
    "jwt_service": ("security/JwtService",),
    "jwt_filter": ("security/JwtAuthenticationFilter",),
    "entry_point": ("security/JwtAuthenticationEntryPoint",),
    "user_details": ("security/UserDetailsServiceImpl",),
    "login_request": ("dto/LoginRequest",),
    "auth_response": ("dto/AuthResponse",),
}


def java_template(template_id: str) -> str:
    """Template file id for a blueprint template id."""
    return f"java/{template_id}.java"


def qualified_package(base_package: str, relative: str) -> str:
    return f"{base_package}.{relative}" if relative else base_package


def class_refs(tasks: Iterable[FileTask], base_package: str) -> dict[str, ClassRef]:
    """Blueprint template id -> the class it produces."""
    refs: dict[str, ClassRef] = {}
    for task in tasks:
        name = task.filename.removesuffix(".java")
        refs.setdefault(task.template_id, ClassRef(name, qualified_package(base_package, task.package)))
    return refs


def collaborators(refs: dict[str, ClassRef]) -> dict[str, ClassRef | None]:
    result: dict[str, ClassRef | None] = {}
    for variable, template_ids in COLLABORATORS.items():
        result[variable] = next((refs[t] for t in template_ids if t in refs), None)
    return result


# ---------------------------------------------------------------------------
# Entity fields
# ---------------------------------------------------------------------------

def _field(java_type: str, name: str) -> dict[str, str]:
    suffix = name[0].upper() + name[1:]
    return {"type": java_type, "name": name, "getter": f"get{suffix}", "setter": f"set{suffix}"}


DTO_FIELDS = [
    _field("Long", "id"),
    _field("String", "name"),
    _field("String", "description"),
    _field("BigDecimal", "price"),
]

AUDIT_FIELDS = [
    _field("LocalDateTime", "createdAt"),
    _field("LocalDateTime", "updatedAt"),
]


def pluralize(word: str) -> str:
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if word.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    return word + "s"


# ---------------------------------------------------------------------------
# Context builders
# ---------------------------------------------------------------------------

def build_dependency_entries(
    config: ProjectConfig,
    rules: list[DependencyRule],
    versions: LibraryVersions,
) -> list[str]:
    """Rendered dependency declarations for the base build file.

    Maven annotation processors are left to the compiler plugin; a
    coordinate declared by two rules with the same scope is kept once.
    """
    tool = config.build_tool.value
    seen: set[tuple[str, DependencyScope]] = set()
    entries: list[str] = []
    for rule in rules:
        for dependency in rule.build.for_tool(tool).dependencies:
            key = (dependency.coordinate, dependency.scope)
            if key in seen:
                continue
            seen.add(key)
            if config.build_tool == BuildTool.MAVEN:
                if dependency.scope == DependencyScope.ANNOTATION_PROCESSOR:
                    continue
                entries.append(maven_dependency(dependency, versions))
            else:
                entries.append(gradle_declaration(dependency, versions))
    return entries


def project_context(
    config: ProjectConfig,
    rules: list[DependencyRule],
    properties: dict[str, str],
    versions: LibraryVersions,
    entity_name: str,
) -> dict[str, Any]:
    """Context shared by every template of one generation."""
    dependencies = list(config.sorted_dependencies)
    features = config.features.model_dump()
    has_jpa = "data-jpa" in config.dependencies
    audit = config.features.enable_audit_fields and has_jpa
    entity_var = to_camel(entity_name)

    compiler_options: list[str] = []
    for rule in rules:
        for option in rule.build.for_tool(config.build_tool.value).compiler_options:
            if option not in compiler_options:
                compiler_options.append(option)

    entries = build_dependency_entries(config, rules, versions)

    return {
        "project": {
            "group_id": config.group_id,
            "artifact_id": config.artifact_id,
            "name": config.name,
            "description": config.description,
            "package_name": config.package_name,
            "java_version": config.java_version,
            "spring_boot_version": config.spring_boot_version,
            "build_tool": config.build_tool.value,
            "packaging": config.packaging.value,
            "architecture": config.architecture.value,
        },
        "architecture_name": config.architecture.display_name,
        "app_name": slugify(config.artifact_id) or "app",
        "base_package": config.package_name,
        "application_class": config.application_class,
        "dependencies": dependencies,
        "rules": rules,
        "properties": properties,
        "features": features,
        "enabled_features": [
            flag.removeprefix("enable_").replace("_", " ") for flag in config.features.enabled()
        ],
        "versions": versions,
        "jwt_secret": JWT_DEV_SECRET,
        "compiler_options": compiler_options,
        "dependency_blocks": entries if config.build_tool == BuildTool.MAVEN else [],
        "dependency_lines": entries if config.build_tool == BuildTool.GRADLE else [],
        "has_compose": False,
        # Java sources
        "entity": entity_name,
        "entity_var": entity_var,
        "entity_plural": pluralize(entity_var),
        "entity_fields": DTO_FIELDS + (AUDIT_FIELDS if audit else []),
        "dto_fields": DTO_FIELDS,
        "has_jpa": has_jpa,
        "has_lombok": "lombok" in config.dependencies,
        "has_validation": "validation" in config.dependencies,
        "has_mapstruct": config.features.enable_object_mapping or "mapstruct" in config.dependencies,
        "audit": audit,
    }


def task_context(
    base: dict[str, Any],
    task: FileTask,
    refs: dict[str, ClassRef],
) -> dict[str, Any]:
    """Context for rendering the blueprint *task*."""
    context = dict(base)
    context.update(collaborators(refs))
    context["package"] = qualified_package(base["base_package"], task.package)
    context["class_name"] = task.filename.removesuffix(".java")
    context["layer"] = task.layer
    return context
