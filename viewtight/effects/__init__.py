"""Filter, mask, clip-path and pattern effects."""

from viewtight.effects.expansion import effect_margins, filter_margins, parse_css_filter, pattern_margins
from viewtight.effects.model import (
    ClipPath,
    DropShadow,
    EffectDescriptor,
    Filter,
    FilterRegion,
    GaussianBlur,
    Mask,
    Morphology,
    Offset,
    OtherPrimitive,
    PatternOverflow,
)

__all__ = [
    "effect_margins",
    "filter_margins",
    "parse_css_filter",
    "pattern_margins",
    "ClipPath",
    "DropShadow",
    "EffectDescriptor",
    "Filter",
    "FilterRegion",
    "GaussianBlur",
    "Mask",
    "Morphology",
    "Offset",
    "OtherPrimitive",
    "PatternOverflow",
]
