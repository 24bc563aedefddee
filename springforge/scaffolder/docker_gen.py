"""Docker Compose generation from the selected dependencies.

Every selected dependency whose rule carries an infrastructure descriptor
becomes one service.  Services are ordered so each one follows the
services it must start after; the compose file is rendered from the
``ops/docker-compose.yml.j2`` template.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from typing import Iterable, Union

from springforge.dependencies.registry import DependencyRuleRegistry
from springforge.dependencies.rules import HealthCheck
from springforge.errors import InfrastructureCycleError

from .templates import TemplateRenderer

logger = logging.getLogger(__name__)

COMPOSE_TEMPLATE = "ops/docker-compose.yml"
DEFAULT_VOLUME_MOUNT = "/data"


# ---------------------------------------------------------------------------
# Plan records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ComposeService:
    """One service stanza, with ``depends_on`` already mapped to service names."""
    dependency_id: str
    name: str
    image: str
    ports: tuple[str, ...] = ()
    environment: tuple[tuple[str, str], ...] = ()
    healthcheck: HealthCheck | None = None
    volume: str | None = None
    volume_mount: str | None = None
    depends_on: tuple[str, ...] = ()
    command: str | None = None


@dataclass(frozen=True)
class ComposePlan:
    services: tuple[ComposeService, ...]
    volumes: tuple[str, ...]

    required = True

    @property
    def service_names(self) -> list[str]:
        return [service.name for service in self.services]


@dataclass(frozen=True)
class NoInfrastructure:
    """Explicit result when no selected dependency needs a container."""

    required = False


NO_INFRASTRUCTURE = NoInfrastructure()

ComposeResult = Union[ComposePlan, NoInfrastructure]


# ---------------------------------------------------------------------------
# InfrastructureComposer
# ---------------------------------------------------------------------------

class InfrastructureComposer:
    """Derive and render ``compose.yaml`` for a dependency selection."""

    def __init__(self, registry: DependencyRuleRegistry, renderer: TemplateRenderer) -> None:
        self.registry = registry
        self.renderer = renderer

    def plan(self, dependency_ids: Iterable[str]) -> ComposeResult:
        """Ordered services and volumes, or :data:`NO_INFRASTRUCTURE`.

        Raises:
            InfrastructureCycleError: The startup edges of the selected
                services form a cycle.
        """
        rules = self.registry.rules_with_infrastructure(dependency_ids)
        if not rules:
            return NO_INFRASTRUCTURE

        # Dependency id (or service name) -> service name, highest priority first.
        service_of: dict[str, str] = {}
        owners: dict[str, str] = {}
        kept = []
        for rule in rules:
            name = rule.infrastructure.service_name
            if name in owners:
                logger.warning(
                    "Service '%s' is declared by both '%s' and '%s'; keeping the one from '%s'",
                    name, owners[name], rule.id, owners[name],
                )
                service_of[rule.id] = name
                continue
            owners[name] = rule.id
            service_of[rule.id] = name
            service_of.setdefault(name, name)
            kept.append(rule)

        services: dict[str, ComposeService] = {}
        for rule in kept:
            infra = rule.infrastructure
            edges: list[str] = []
            for target in infra.depends_on:
                target_name = service_of.get(target)
                if target_name is None:
                    logger.warning(
                        "Dropping startup edge %s -> %s: '%s' is not selected",
                        rule.id, target, target,
                    )
                    continue
                if target_name != infra.service_name and target_name not in edges:
                    edges.append(target_name)
            services[infra.service_name] = ComposeService(
                dependency_id=rule.id,
                name=infra.service_name,
                image=infra.image,
                ports=tuple(infra.ports),
                environment=tuple(infra.environment.items()),
                healthcheck=infra.healthcheck,
                volume=infra.volume,
                volume_mount=infra.volume_mount,
                depends_on=tuple(edges),
                command=infra.command,
            )

        ordered = _startup_order(services, [rule.infrastructure.service_name for rule in kept])
        volumes = tuple(dict.fromkeys(s.volume for s in ordered if s.volume))
        logger.debug("Compose plan: %s", ", ".join(s.name for s in ordered))
        return ComposePlan(services=tuple(ordered), volumes=volumes)

    def render(self, plan: ComposePlan) -> str:
        context = {
            "services": [
                {
                    "name": service.name,
                    "image": service.image,
                    "command": service.command,
                    "ports": list(service.ports),
                    "environment": list(service.environment),
                    "volume": service.volume,
                    "volume_mount": service.volume_mount or DEFAULT_VOLUME_MOUNT,
                    "healthcheck": service.healthcheck,
                    "depends_on": list(service.depends_on),
                }
                for service in plan.services
            ],
            "volumes": list(plan.volumes),
        }
        return self.renderer.render(COMPOSE_TEMPLATE, context)

    def compose(self, dependency_ids: Iterable[str]) -> str | NoInfrastructure:
        """Rendered compose document, or :data:`NO_INFRASTRUCTURE`."""
        plan = self.plan(dependency_ids)
        if isinstance(plan, NoInfrastructure):
            return plan
        return self.render(plan)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _startup_order(services: dict[str, ComposeService], rank_order: list[str]) -> list[ComposeService]:
    """Kahn's algorithm; among ready services the lower rank goes first."""
    rank = {name: index for index, name in enumerate(rank_order)}
    pending = {name: len(service.depends_on) for name, service in services.items()}
    dependents: dict[str, list[str]] = {name: [] for name in services}
    for name, service in services.items():
        for target in service.depends_on:
            dependents[target].append(name)

    ready = [(rank[name], name) for name, count in pending.items() if count == 0]
    heapq.heapify(ready)
    ordered: list[ComposeService] = []
    while ready:
        _, name = heapq.heappop(ready)
        ordered.append(services[name])
        for dependent in dependents[name]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, (rank[dependent], dependent))

    if len(ordered) != len(services):
        stuck = sorted(name for name, count in pending.items() if count > 0)
        raise InfrastructureCycleError(stuck)
    return ordered
