"""Animation combiner — composes an element's concurrent animations.

All transform-bearing animations of an element are sampled on one shared
timeline (the union of their proposed fractions) and evaluated synchronously,
so two animations moving in opposite directions are composed at matching
instants rather than paired extreme-with-extreme.

At a fraction ``u`` a pose is::

    motion(u) . underlying(u) . additive_1(u) . ... . additive_k(u)

``underlying`` ranges over the element's own transform and each replacing
animation; these are alternatives, never composed with each other. Any
additive animation may be inactive at a given instant, so each is both
composed in and left out; additives sharing a definite begin and duration
switch together.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from viewtight.animation.sampler import EnvelopePoses
from viewtight.engine.config import EngineConfig
from viewtight.utils.affine import AffineTransform, stack
from viewtight.utils.geometry import Box, union_all

logger = logging.getLogger(__name__)

# Fractions closer than this are one sample
_FRACTION_DECIMALS = 12


@dataclass(frozen=True)
class CombinedPoses:
    """Local pose matrices of one element, static pose first.

    ``geometry_box`` is the element's local box widened by every attribute
    animation; each pose maps it into the parent coordinate system.
    """

    matrices: NDArray[np.float64]  # Nx3x3
    geometry_box: Box

    @property
    def pose_count(self) -> int:
        return len(self.matrices)


def shared_timeline(poses: Sequence[EnvelopePoses]) -> list[float]:
    fractions: set[float] = set()
    for p in poses:
        fractions.update(round(u, _FRACTION_DECIMALS) for u in p.fractions)
    return sorted(fractions)


def _activation_groups(additive: Sequence[EnvelopePoses]) -> list[list[int]]:
    """Positions in ``additive`` grouped by animations that start and stop together."""
    groups: dict[object, list[int]] = {}
    for i, p in enumerate(additive):
        key = p.activation if p.activation is not None else ("own", p.index)
        groups.setdefault(key, []).append(i)
    return list(groups.values())


def _additive_variants(
    additive: Sequence[EnvelopePoses],
    u: float,
    max_optional: int,
) -> list[AffineTransform]:
    """Compositions of the additive stack at ``u`` for every on/off state, in declaration order.

    Every group may be inactive (before its begin, after its end), so the
    all-off identity is always a variant. Groups past the cap are not
    enumerated; each contributes one stack where it alone is on.
    """
    values = [p.track.at(u) for p in additive]
    groups = _activation_groups(additive)

    def chain(active: set[int]) -> AffineTransform:
        result = AffineTransform()
        for i in sorted(active):
            result = result.compose(values[i])
        return result

    enumerated = groups[:max_optional]
    variants = []
    for r in range(len(enumerated) + 1):
        for combo in itertools.combinations(enumerated, r):
            variants.append(chain({i for g in combo for i in g}))
    variants.extend(chain(set(g)) for g in groups[max_optional:])
    return variants


def combine(
    own_transform: AffineTransform,
    base_box: Box,
    poses: Sequence[EnvelopePoses],
    config: EngineConfig | None = None,
) -> CombinedPoses:
    config = config or EngineConfig()

    geometry_box = union_all([base_box] + [b for p in poses for b in p.attribute_poses])

    tracked = [p for p in poses if p.track is not None]
    replace = [p for p in tracked if p.composition == "replace"]
    additive = [p for p in tracked if p.composition == "additive"]
    motion = [p for p in tracked if p.composition == "motion"]

    matrices: list[AffineTransform] = [own_transform]
    if not tracked:
        return CombinedPoses(stack(matrices), geometry_box)

    for p in tracked:
        if p.composition not in ("replace", "additive", "motion"):
            raise ValueError(f"Unknown composition for tracked animation: {p.composition}")

    motion_may_idle = not motion or any(p.includes_base_pose for p in motion)
    timeline = shared_timeline(tracked)

    for u in timeline:
        motions = [p.track.at(u) for p in motion]
        if motion_may_idle:
            motions.append(AffineTransform())
        underlying = [own_transform] + [p.track.at(u) for p in replace]
        stacks = _additive_variants(additive, u, config.max_event_alternatives)
        for m in motions:
            for base in underlying:
                head = m.compose(base)
                matrices.extend(head.compose(s) for s in stacks)

    logger.debug(
        "Combined %d animations over %d fractions into %d poses",
        len(tracked), len(timeline), len(matrices),
    )
    return CombinedPoses(stack(matrices), geometry_box)
