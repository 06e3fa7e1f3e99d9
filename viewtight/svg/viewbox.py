"""viewBox serialization and area savings."""

from __future__ import annotations

import re

from viewtight.utils.geometry import Box

_SEPARATOR_RE = re.compile(r"[\s,]+")


def format_viewbox(box: Box, decimals: int = 2) -> str:
    """``"x y w h"`` with fixed decimals, e.g. ``"40.00 40.00 120.00 120.00"``."""
    return " ".join(f"{v:.{decimals}f}" for v in box.as_tuple())


def parse_viewbox(text: str | None) -> Box | None:
    """Box of a viewBox attribute; None when absent, malformed or negative."""
    if not text:
        return None
    parts = [p for p in _SEPARATOR_RE.split(text.strip()) if p]
    if len(parts) != 4:
        return None
    try:
        x, y, w, h = (float(p) for p in parts)
    except ValueError:
        return None
    if w < 0 or h < 0:
        return None
    return Box(x, y, w, h)


def area_savings(original: Box, optimized: Box) -> float:
    """Percentage of the original area no longer covered. Zero when the original is empty."""
    original_area = original.area
    if original_area <= 0:
        return 0.0
    return (original_area - optimized.area) / original_area * 100.0
