"""S0.01 — Cumulative transform.

Folds each element's ancestor chain (transforms, nested viewports, expanded
references) and parses its own transform. The two are kept apart because a
replacing transform animation overrides only the element's own transform.
"""

from __future__ import annotations

from viewtight.engine.accumulator import fold_chain, own_transform
from viewtight.engine.context import EnvelopeContext
from viewtight.engine.registry import Layer, stage
from viewtight.errors import Diagnostic


@stage(
    id="S0.01",
    layer=Layer.COORDINATES,
    description="Fold ancestor chain and own transform per element",
)
def cumulative_transform(ctx: EnvelopeContext) -> None:
    for el in ctx.elements:
        diagnostics: list[Diagnostic] = []
        el.ancestors = fold_chain(el.record.ancestor_chain, ctx.definitions, diagnostics)
        el.own = own_transform(el.record, diagnostics)
        el.report(diagnostics)
