"""S4.01 — Envelope fold.

Maps each element's (margin-expanded) local box through its static pose and
every combined pose into root coordinates, then folds all element boxes into
the global envelope and pads it into the viewport.

Exclusions:
- empty: zero-area base box, no animations, no effects
- hidden: statically invisible and no animation can reveal it
- degenerate: every candidate box has zero area
"""

from __future__ import annotations

import functools
import logging

import numpy as np

from viewtight.animation.model import VISIBILITY_ATTRIBUTES, AttributeAnimation
from viewtight.engine.context import ElementState, EnvelopeContext
from viewtight.engine.records import ElementRecord
from viewtight.engine.registry import Layer, stage
from viewtight.utils.affine import extents_of_poses, stack
from viewtight.utils.geometry import Box, Extents, Margins

logger = logging.getLogger(__name__)

_HIDDEN_VISIBILITY = ("hidden", "collapse")


def _visible_value(attribute: str, value) -> bool:
    if attribute == "opacity":
        if isinstance(value, tuple):
            return bool(value) and value[0] > 0
        try:
            return float(value) > 0
        except ValueError:
            return False
    text = value.strip() if isinstance(value, str) else ""
    if attribute == "display":
        return text != "none"
    return text not in _HIDDEN_VISIBILITY


def can_be_visible(record: ElementRecord) -> bool:
    """True unless some visibility property is off and no animation turns it on."""
    vis = record.visibility
    possible = {
        "display": vis.display != "none",
        "visibility": vis.visibility not in _HIDDEN_VISIBILITY,
        "opacity": vis.opacity > 0,
    }
    for anim in record.animations:
        if not isinstance(anim, AttributeAnimation):
            continue
        name = anim.attribute_name.lower()
        if name in VISIBILITY_ATTRIBUTES and not possible[name]:
            possible[name] = any(_visible_value(name, v) for v in anim.values)
    return all(possible.values())


def element_extents(el: ElementState) -> Extents:
    """Root-space extents of every non-degenerate candidate box of one element."""
    record = el.record
    static_box = record.base_bounds.expand(el.margins)
    outer = el.ancestors.to_array()

    result = extents_of_poses(stack([el.cumulative]), static_box, drop_degenerate=True)
    if el.combined is not None and el.combined.pose_count:
        local_box = el.combined.geometry_box.expand(el.margins)
        matrices = np.matmul(outer, el.combined.matrices)
        result = result.merge(extents_of_poses(matrices, local_box, drop_degenerate=True))
    return result


@stage(
    id="S4.01",
    layer=Layer.AGGREGATION,
    dependencies=["S0.01", "S2.01", "S3.01"],
    description="Fold element boxes into the global envelope and viewport",
)
def envelope_fold(ctx: EnvelopeContext) -> None:
    for el in ctx.elements:
        record = el.record
        if record.base_bounds.is_degenerate and not record.animations and not record.effects:
            el.excluded_reason = "empty"
            continue
        if not can_be_visible(record):
            el.excluded_reason = "hidden"
            continue
        box = element_extents(el).to_box()
        if box is None:
            el.excluded_reason = "degenerate"
            continue
        el.box = box

    contributing = [el.box for el in ctx.elements if el.box is not None]
    ctx.extents = functools.reduce(
        Extents.merge, (Extents.of_box(b) for b in contributing), Extents(),
    )

    envelope = ctx.extents.to_box()
    if envelope is None:
        ctx.envelope = Box(0.0, 0.0, 0.0, 0.0)
        ctx.viewport = Box(0.0, 0.0, 0.0, 0.0)
    else:
        ctx.envelope = envelope
        ctx.viewport = envelope.expand(Margins.uniform(ctx.config.buffer_px))

    logger.info(
        "Envelope from %d/%d elements: %s",
        len(contributing), ctx.num_elements, ctx.envelope.as_tuple(),
    )
