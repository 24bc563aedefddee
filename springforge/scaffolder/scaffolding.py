"""Extra files contributed by dependency rules.

Scaffolding files are not tied to the architecture style: a rule simply
lists path and content templates.  The only placeholder is the base
package token, substituted in slash form in paths and dotted form in
content.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, NamedTuple

from springforge.dependencies.registry import DependencyRuleRegistry
from springforge.dependencies.rules import DependencyRule
from springforge.errors import ScaffoldingConflictError
from springforge.utils import package_to_path

logger = logging.getLogger(__name__)

BASE_PACKAGE_TOKEN = "{{basePackage}}"


class ScaffoldedFile(NamedTuple):
    path: Path
    owner: str
    content: str


class ScaffoldingGenerator:
    """Render the scaffolding files of the selected dependencies."""

    def __init__(self, registry: DependencyRuleRegistry) -> None:
        self.registry = registry

    def rules_with_scaffolding(self, dependency_ids: Iterable[str]) -> list[DependencyRule]:
        return self.registry.rules_with_scaffolding(dependency_ids)

    def plan(
        self,
        dependency_ids: Iterable[str],
        base_package: str,
        output_root: str | Path,
    ) -> list[ScaffoldedFile]:
        """Scaffolded files in rule priority order, with their owning rule.

        Raises:
            ScaffoldingConflictError: Two dependencies produce the same path.
        """
        root = Path(output_root)
        package_dir = package_to_path(base_package)
        owners: dict[Path, str] = {}
        planned: list[ScaffoldedFile] = []

        for rule in self.rules_with_scaffolding(dependency_ids):
            for entry in rule.scaffolding.files:
                relative = entry.path.replace(BASE_PACKAGE_TOKEN, package_dir).replace("\\", "/")
                target = root / relative.lstrip("/")
                if target in owners:
                    raise ScaffoldingConflictError(target, owners[target], rule.id)
                owners[target] = rule.id
                content = entry.content.replace(BASE_PACKAGE_TOKEN, base_package)
                planned.append(ScaffoldedFile(target, rule.id, content))
                logger.debug("Scaffolding %s from '%s'", relative, rule.id)

        return planned

    def generate(
        self,
        dependency_ids: Iterable[str],
        base_package: str,
        output_root: str | Path,
    ) -> dict[Path, str]:
        """Map ``output_root / relative path`` to file content."""
        return {
            item.path: item.content
            for item in self.plan(dependency_ids, base_package, output_root)
        }
