"""Effects expansion — how far filters and patterns paint outside an element's box.

Within one filter chain offsets accumulate serially and each primitive's
reach is measured from the shifted content; the chain's margin is the
per-side maximum over its primitives. Separate effects on one element apply
one after another, so their margins add up. Masks and clip paths never grow
the box and are not used to shrink it either.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from viewtight.effects.model import (
    REGION_FILLING_PRIMITIVES,
    ClipPath,
    DropShadow,
    EffectDescriptor,
    Filter,
    FilterPrimitive,
    FilterRegion,
    GaussianBlur,
    Mask,
    Morphology,
    Offset,
    OtherPrimitive,
    PatternOverflow,
)
from viewtight.engine.config import EngineConfig
from viewtight.utils.geometry import Box, Margins, union_all
from viewtight.utils.shapes import ShapeGeometry, overflow_margins, shape_bounds, to_length

logger = logging.getLogger(__name__)

_CSS_FUNCTION_RE = re.compile(r"([a-zA-Z-]+)\(((?:[^()]|\([^()]*\))*)\)")
_NESTED_PARENS_RE = re.compile(r"\([^()]*\)")
_CSS_LENGTH_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:px)?$")


def _lengths(args: str) -> list[float]:
    """Numeric lengths in a CSS argument list; colours and keywords are skipped."""
    tokens = _NESTED_PARENS_RE.sub(" ", args).replace(",", " ").split()
    return [to_length(t) for t in tokens if _CSS_LENGTH_RE.match(t)]


def parse_css_filter(text: str | None) -> tuple[FilterPrimitive, ...]:
    """Primitives of a CSS ``filter`` value. Colour-only functions contribute nothing."""
    primitives: list[FilterPrimitive] = []
    for m in _CSS_FUNCTION_RE.finditer(text or ""):
        name = m.group(1).lower()
        if name == "blur":
            values = _lengths(m.group(2))
            primitives.append(GaussianBlur(values[0] if values else 0.0))
        elif name == "drop-shadow":
            values = _lengths(m.group(2))
            if len(values) < 2:
                logger.warning("drop-shadow needs two offsets: %r", m.group(0))
                continue
            blur = values[2] if len(values) > 2 else 0.0
            primitives.append(DropShadow(values[0], values[1], blur))
        elif name == "url":
            primitives.append(OtherPrimitive("url"))
    return tuple(primitives)


def _directional(ox: float, oy: float, spread_x: float, spread_y: float) -> Margins:
    """Reach of content shifted by ``(ox, oy)`` and grown by a spread."""
    return Margins(
        max(0.0, -ox) + spread_x,
        max(0.0, -oy) + spread_y,
        max(0.0, ox) + spread_x,
        max(0.0, oy) + spread_y,
    )


def region_margins(region: FilterRegion, box: Box) -> Margins:
    if region.units == "userSpaceOnUse":
        return Margins(
            max(0.0, box.x - region.x),
            max(0.0, box.y - region.y),
            max(0.0, region.x + region.width - box.max_x),
            max(0.0, region.y + region.height - box.max_y),
        )
    return Margins(
        max(0.0, -region.x * box.width),
        max(0.0, -region.y * box.height),
        max(0.0, (region.x + region.width - 1.0) * box.width),
        max(0.0, (region.y + region.height - 1.0) * box.height),
    )


def chain_margins(primitives: Sequence[FilterPrimitive], config: EngineConfig) -> tuple[Margins, bool]:
    """Margins of a primitive chain, and whether a primitive paints the whole region.

    Blur reach is the largest deviation in the chain; dilate radii add up.
    """
    k = config.blur_sigma_multiplier
    ox = oy = 0.0
    blur_x = blur_y = 0.0
    grow_x = grow_y = 0.0
    result = Margins()
    fills_region = False

    for prim in primitives:
        if isinstance(prim, Offset):
            ox += prim.dx
            oy += prim.dy
        elif isinstance(prim, GaussianBlur):
            sy = prim.std_dev_x if prim.std_dev_y is None else prim.std_dev_y
            blur_x = max(blur_x, k * max(0.0, prim.std_dev_x))
            blur_y = max(blur_y, k * max(0.0, sy))
        elif isinstance(prim, DropShadow):
            sy = prim.std_dev_x if prim.std_dev_y is None else prim.std_dev_y
            result = result.max_with(_directional(
                ox + prim.dx, oy + prim.dy,
                grow_x + max(blur_x, k * max(0.0, prim.std_dev_x)),
                grow_y + max(blur_y, k * max(0.0, sy)),
            ))
        elif isinstance(prim, Morphology):
            if prim.operator.lower() == "dilate":
                ry = prim.radius_x if prim.radius_y is None else prim.radius_y
                grow_x += max(0.0, prim.radius_x)
                grow_y += max(0.0, ry)
        elif isinstance(prim, OtherPrimitive):
            if prim.name.lower() in REGION_FILLING_PRIMITIVES:
                fills_region = True
        else:
            raise TypeError(f"Unknown filter primitive: {type(prim).__name__}")
        result = result.max_with(_directional(ox, oy, grow_x + blur_x, grow_y + blur_y))

    return result, fills_region


def filter_margins(flt: Filter, box: Box, config: EngineConfig | None = None) -> Margins:
    config = config or EngineConfig()
    primitives = tuple(flt.primitives) + parse_css_filter(flt.css)
    result, fills_region = chain_margins(primitives, config)
    if flt.margins is not None:
        result = result.max_with(flt.margins)

    region = region_margins(flt.region or FilterRegion(), box)
    if fills_region:
        result = result.max_with(region)
    elif result.is_zero and not flt.css:
        # Nothing measurable: assume the filter may paint its whole region
        result = region
    return result


def pattern_margins(pattern: PatternOverflow, config: EngineConfig | None = None) -> Margins:
    segments = (config or EngineConfig()).curve_segments
    result = pattern.margins or Margins()
    if pattern.tile is None or not pattern.children:
        return result
    boxes = []
    for child in pattern.children:
        b = shape_bounds(child, segments) if isinstance(child, ShapeGeometry) else child
        if b is not None:
            boxes.append(b)
    content = union_all(boxes)
    if content is None:
        return result
    return result.max_with(overflow_margins(pattern.tile, content))


def effect_margins(
    effects: Sequence[EffectDescriptor],
    box: Box,
    config: EngineConfig | None = None,
) -> Margins:
    """Total outward expansion of ``box`` from all effects on an element."""
    total = Margins()
    for effect in effects:
        if isinstance(effect, Filter):
            total = total + filter_margins(effect, box, config)
        elif isinstance(effect, PatternOverflow):
            total = total + pattern_margins(effect, config)
        elif isinstance(effect, (Mask, ClipPath)):
            continue
        else:
            raise TypeError(f"Unknown effect descriptor: {type(effect).__name__}")
    return total
