"""In-memory catalogue of dependency rules keyed by id.

The packaged catalogue is loaded once per process behind a lock and is
read-only afterwards, so it can be shared between concurrent requests.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, NamedTuple

from springforge.dependencies.rules import DependencyRule

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "data" / "dependency-rules.json"

_default_registry: DependencyRuleRegistry | None = None
_default_lock = threading.Lock()


class PropertyCollision(NamedTuple):
    """A runtime property set by two rules with different values."""
    key: str
    kept_from: str
    overridden_from: str


class DependencyRuleRegistry:
    """Read-only rule lookup with deterministic priority ordering."""

    def __init__(self, rules: Iterable[DependencyRule]) -> None:
        table: dict[str, DependencyRule] = {}
        for rule in rules:
            if rule.id in table:
                raise ValueError(f"Duplicate dependency rule id: {rule.id}")
            table[rule.id] = rule
        self._rules = MappingProxyType(table)

    # -- Construction ------------------------------------------------------

    @classmethod
    def from_json(cls, path: str | Path) -> DependencyRuleRegistry:
        """Load rules from a JSON document of the form ``{"rules": [...]}``."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        entries = raw["rules"] if isinstance(raw, dict) else raw
        registry = cls(DependencyRule.model_validate(entry) for entry in entries)
        logger.debug("Loaded %d dependency rules from %s", len(registry), path)
        return registry

    @classmethod
    def default(cls) -> DependencyRuleRegistry:
        """The packaged catalogue, loaded exactly once per process."""
        global _default_registry
        if _default_registry is None:
            with _default_lock:
                if _default_registry is None:
                    _default_registry = cls.from_json(DEFAULT_RULES_PATH)
        return _default_registry

    # -- Lookup ------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, dependency_id: object) -> bool:
        return dependency_id in self._rules

    def get_rule(self, dependency_id: str | None) -> DependencyRule | None:
        if dependency_id is None:
            return None
        return self._rules.get(dependency_id)

    def has_rule(self, dependency_id: str | None) -> bool:
        return self.get_rule(dependency_id) is not None

    def all_rules(self) -> list[DependencyRule]:
        return self.get_rules(self._rules.keys())

    def get_rules(self, dependency_ids: Iterable[str]) -> list[DependencyRule]:
        """Rules for *dependency_ids*, highest priority first.

        Unknown ids are skipped.  Equal priorities are ordered by id so the
        result never depends on the iteration order of the input.
        """
        found = {rule.id: rule for rule in map(self.get_rule, dependency_ids) if rule is not None}
        return sorted(found.values(), key=lambda rule: (-rule.priority, rule.id))

    # -- Derived views -----------------------------------------------------

    def aggregate_properties(self, dependency_ids: Iterable[str]) -> dict[str, str]:
        """Union of the runtime properties of every matched rule.

        Rules are applied from lowest to highest priority, so when two rules
        set the same key the higher-priority rule's value is kept.  Every
        such collision is logged.
        """
        merged, collisions = self._merge_properties(dependency_ids)
        for collision in collisions:
            logger.warning(
                "Property '%s' set by both '%s' and '%s'; keeping the value from '%s'",
                collision.key, collision.kept_from, collision.overridden_from, collision.kept_from,
            )
        return merged

    def property_collisions(self, dependency_ids: Iterable[str]) -> list[PropertyCollision]:
        """Collisions :meth:`aggregate_properties` would resolve for *dependency_ids*."""
        return self._merge_properties(dependency_ids)[1]

    def rules_with_scaffolding(self, dependency_ids: Iterable[str]) -> list[DependencyRule]:
        return [rule for rule in self.get_rules(dependency_ids) if rule.has_scaffolding]

    def rules_with_infrastructure(self, dependency_ids: Iterable[str]) -> list[DependencyRule]:
        return [rule for rule in self.get_rules(dependency_ids) if rule.has_infrastructure]

    def _merge_properties(
        self, dependency_ids: Iterable[str]
    ) -> tuple[dict[str, str], list[PropertyCollision]]:
        merged: dict[str, str] = {}
        owners: dict[str, str] = {}
        collisions: list[PropertyCollision] = []
        for rule in reversed(self.get_rules(dependency_ids)):
            for key, value in rule.runtime.properties.items():
                if key in merged and merged[key] != value:
                    collisions.append(PropertyCollision(key, rule.id, owners[key]))
                merged[key] = value
                owners[key] = rule.id
        return dict(sorted(merged.items())), collisions
