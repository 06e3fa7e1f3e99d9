"""S2.01 — Animation combination.

Composes each animated element's pose sets into local pose matrices on a
shared timeline (see ``viewtight.animation.combiner``).
"""

from __future__ import annotations

from viewtight.animation.combiner import combine
from viewtight.engine.context import EnvelopeContext
from viewtight.engine.registry import Layer, stage


@stage(
    id="S2.01",
    layer=Layer.COMBINATION,
    dependencies=["S0.01", "S1.01"],
    requires={"animations"},
    description="Compose concurrent animations into pose matrices",
)
def animation_combination(ctx: EnvelopeContext) -> None:
    for el in ctx.elements:
        if not el.poses:
            continue
        el.combined = combine(el.own, el.record.base_bounds, el.poses, ctx.config)
