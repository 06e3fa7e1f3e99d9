"""S1.01 — Pose sampling.

Turns every animation of every element into an ``EnvelopePoses``. Animations
with unsupported timing or nothing geometric to say are dropped with a
diagnostic; the element keeps its static pose.
"""

from __future__ import annotations

import logging

from viewtight.animation.sampler import SamplingInput, sample_animation
from viewtight.engine.context import EnvelopeContext
from viewtight.engine.registry import Layer, stage
from viewtight.errors import Diagnostic

logger = logging.getLogger(__name__)


@stage(
    id="S1.01",
    layer=Layer.ANIMATION,
    requires={"animations"},
    description="Sample each animation into a finite pose set",
)
def pose_sampling(ctx: EnvelopeContext) -> None:
    for el in ctx.elements:
        if not el.is_animated:
            continue
        inp = SamplingInput(
            element_id=el.id,
            base_box=el.record.base_bounds,
            geometry=el.record.geometry,
            paths=ctx.definitions.paths,
            config=ctx.config,
        )
        diagnostics: list[Diagnostic] = []
        for i, anim in enumerate(el.record.animations):
            poses = sample_animation(anim, i, inp, diagnostics)
            if poses is not None:
                el.poses.append(poses)
        el.report(diagnostics)
        logger.debug("%s: %d/%d animations contribute poses",
                     el.id, len(el.poses), len(el.record.animations))
