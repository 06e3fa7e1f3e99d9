"""Stage registry — each engine step is a function registered via decorator.

Usage:
    @stage(id="S3.01", layer=Layer.EFFECTS, dependencies=["S0.01"])
    def effect_margins(ctx: EnvelopeContext) -> None:
        for el in ctx.elements:
            el.margins = compute(el.record.effects)

Stages are discovered by importing the ``viewtight.engine.layerN`` packages
(see ``register_stages``).
"""

from __future__ import annotations

import enum
import heapq
import importlib
import logging
import pkgutil
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from viewtight.engine.context import EnvelopeContext

logger = logging.getLogger(__name__)


class Layer(enum.IntEnum):
    COORDINATES = 0
    ANIMATION = 1
    COMBINATION = 2
    EFFECTS = 3
    AGGREGATION = 4


@dataclass
class StageSpec:
    id: str
    layer: Layer
    fn: Callable[["EnvelopeContext"], None]
    dependencies: list[str] = field(default_factory=list)
    # Stage only does work when elements carry these; see Pipeline gating
    requires: set[str] = field(default_factory=set)
    description: str = ""


class StageRegistry:
    def __init__(self) -> None:
        self._stages: dict[str, StageSpec] = {}

    def register(self, spec: StageSpec) -> None:
        if spec.id in self._stages:
            raise ValueError(f"Duplicate stage ID: {spec.id}")
        self._stages[spec.id] = spec
        logger.debug("Registered stage %s (%s)", spec.id, spec.layer.name)

    def get(self, stage_id: str) -> StageSpec:
        return self._stages[stage_id]

    def __contains__(self, stage_id: str) -> bool:
        return stage_id in self._stages

    def all(self) -> list[StageSpec]:
        return sorted(self._stages.values(), key=lambda s: (s.layer, s.id))

    def resolve_order(self, skip: set[str] | None = None) -> list[StageSpec]:
        """Dependency order of all stages except ``skip``.

        Dependencies on skipped or unregistered stages are ignored. Ties are
        broken by (layer, id) so the order is stable.
        """
        skip = skip or set()
        pool = {sid: s for sid, s in self._stages.items() if sid not in skip}

        pending: dict[str, int] = {}
        dependents: dict[str, list[str]] = {sid: [] for sid in pool}
        for sid, spec in pool.items():
            deps = [d for d in spec.dependencies if d in pool]
            pending[sid] = len(deps)
            for d in deps:
                dependents[d].append(sid)

        ready = [(pool[sid].layer, sid) for sid, n in pending.items() if n == 0]
        heapq.heapify(ready)
        ordered: list[StageSpec] = []
        while ready:
            _, sid = heapq.heappop(ready)
            ordered.append(pool[sid])
            for other in dependents[sid]:
                pending[other] -= 1
                if pending[other] == 0:
                    heapq.heappush(ready, (pool[other].layer, other))

        if len(ordered) != len(pool):
            stuck = sorted(set(pool) - {s.id for s in ordered})
            raise ValueError(f"Circular stage dependency among: {stuck}")
        return ordered

    @property
    def count(self) -> int:
        return len(self._stages)


_registry = StageRegistry()


def get_registry() -> StageRegistry:
    return _registry


def stage(
    *,
    id: str,
    layer: Layer,
    dependencies: list[str] | None = None,
    requires: set[str] | None = None,
    description: str = "",
):
    """Decorator registering a stage function in the module-level registry."""

    def decorator(fn: Callable[["EnvelopeContext"], None]):
        _registry.register(StageSpec(
            id=id,
            layer=layer,
            fn=fn,
            dependencies=dependencies or [],
            requires=requires or set(),
            description=description,
        ))
        return fn

    return decorator


def register_stages() -> int:
    """Import every stage module so its ``@stage`` decorator fires. Idempotent."""
    for layer in Layer:
        package_name = f"viewtight.engine.layer{int(layer)}"
        package = importlib.import_module(package_name)
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            importlib.import_module(f"{package_name}.{module_name}")
    return _registry.count
