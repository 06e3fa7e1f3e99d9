"""S3.01 — Effect margins.

Filters, patterns, masks and clip paths become per-side margins on the
element's local geometry box. Relative filter regions are measured against the
animated geometry box when there is one.
"""

from __future__ import annotations

from viewtight.effects.expansion import effect_margins as compute_margins
from viewtight.engine.context import EnvelopeContext
from viewtight.engine.registry import Layer, stage


@stage(
    id="S3.01",
    layer=Layer.EFFECTS,
    dependencies=["S2.01"],
    requires={"effects"},
    description="Expand local boxes by filter and pattern margins",
)
def effect_margins(ctx: EnvelopeContext) -> None:
    for el in ctx.elements:
        if not el.record.effects:
            continue
        box = el.combined.geometry_box if el.combined is not None else el.record.base_bounds
        el.margins = compute_margins(el.record.effects, box, ctx.config)
