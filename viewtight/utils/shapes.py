"""Primitive shape geometry on shapely.

A ``ShapeGeometry`` is a shape tag plus its geometric attributes. The engine
uses it to recompute an element's local box when one of those attributes is
animated, and to measure the content of pattern tiles.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from shapely import affinity
from shapely.geometry import LineString, Point as ShapelyPoint, Polygon
from shapely.geometry import box as shapely_box
from shapely.geometry.base import BaseGeometry

from viewtight.utils.geometry import Box, Margins
from viewtight.utils.path_geometry import bounds_of, parse_point_list

logger = logging.getLogger(__name__)

_LENGTH_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*(px)?\s*$")

SHAPE_TAGS = frozenset({"rect", "circle", "ellipse", "line", "polyline", "polygon", "path"})

# Attributes whose change moves or resizes the rendered shape
GEOMETRIC_ATTRIBUTES = frozenset({
    "x", "y", "width", "height",
    "cx", "cy", "r", "rx", "ry",
    "x1", "y1", "x2", "y2",
    "points", "d", "stroke-width",
})


@dataclass(frozen=True)
class ShapeGeometry:
    tag: str
    attributes: Mapping[str, float | str] = field(default_factory=dict)

    def with_attribute(self, name: str, value: float | str) -> ShapeGeometry:
        attrs = dict(self.attributes)
        attrs[name] = value
        return ShapeGeometry(self.tag, attrs)


def to_length(value: float | str | None, default: float = 0.0) -> float:
    """Numeric length from a number or a unitless/px string."""
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    m = _LENGTH_RE.match(value)
    if m is None:
        return default
    return float(m.group(1))


def _build(tag: str, attrs: Mapping[str, float | str]) -> BaseGeometry | None:
    def num(name: str, default: float = 0.0) -> float:
        return to_length(attrs.get(name), default)

    if tag == "rect":
        x, y = num("x"), num("y")
        w, h = max(0.0, num("width")), max(0.0, num("height"))
        return shapely_box(x, y, x + w, y + h)
    if tag == "circle":
        r = max(0.0, num("r"))
        centre = ShapelyPoint(num("cx"), num("cy"))
        return centre.buffer(r) if r > 0 else centre
    if tag == "ellipse":
        rx, ry = max(0.0, num("rx")), max(0.0, num("ry"))
        centre = ShapelyPoint(num("cx"), num("cy"))
        if rx <= 0 or ry <= 0:
            return centre
        return affinity.scale(centre.buffer(1.0), rx, ry)
    if tag == "line":
        return LineString([(num("x1"), num("y1")), (num("x2"), num("y2"))])
    if tag in ("polyline", "polygon"):
        pts = parse_point_list(str(attrs.get("points", "")))
        if len(pts) < 2:
            return None
        if tag == "polygon" and len(pts) >= 3:
            return Polygon(pts)
        return LineString(pts)
    return None


def shape_bounds(geometry: ShapeGeometry, curve_segments: int = 16) -> Box | None:
    """Local bounds of the shape, widened by half its stroke width if it has one."""
    tag = geometry.tag.lower()
    attrs = geometry.attributes

    if tag == "path":
        result = bounds_of(str(attrs.get("d", "")), curve_segments=curve_segments)
    else:
        shape = _build(tag, attrs)
        if shape is None or shape.is_empty:
            if tag not in SHAPE_TAGS:
                logger.debug("No geometry formula for <%s>", tag)
            return None
        minx, miny, maxx, maxy = shape.bounds
        result = Box.from_corners(minx, miny, maxx, maxy)

    if result is None:
        return None
    stroke = to_length(attrs.get("stroke-width"), 0.0)
    if stroke > 0:
        result = result.expand(Margins.uniform(stroke / 2))
    return result


def overflow_margins(tile: Box, content: Box) -> Margins:
    """How far ``content`` sticks out of ``tile`` on each side."""
    return Margins(
        max(0.0, tile.x - content.x),
        max(0.0, tile.y - content.y),
        max(0.0, content.max_x - tile.max_x),
        max(0.0, content.max_y - tile.max_y),
    )
