"""Path geometry on top of svgpathtools.

Parses path data into typed segments and answers the geometric questions the
envelope engine asks: bounds, points at a parametric position, tangent angles,
and interpolation between structurally compatible paths. Malformed data
degrades to an empty path.

Parametric positions run over ``[0, 1]`` by segment index: with ``n``
segments, ``t = i / n`` is the start of segment ``i``.
"""

from __future__ import annotations

import functools
import logging
import math
import re

import numpy as np
from numpy.typing import NDArray
from svgpathtools import Arc, CubicBezier, Line, Path, QuadraticBezier, parse_path

from viewtight.errors import Diagnostic, DiagnosticKind, MalformedPathData
from viewtight.utils.geometry import Box, Extents, Point

logger = logging.getLogger(__name__)

_POINT_LIST_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@functools.lru_cache(maxsize=512)
def _parse_cached(d: str) -> Path:
    try:
        return parse_path(d)
    except Exception as e:
        raise MalformedPathData(f"Failed to parse path {d[:40]!r}: {e}") from e


def load_path(d: str | Path | None, diagnostics: list[Diagnostic] | None = None) -> Path:
    """Parsed path, or an empty path when ``d`` is empty or malformed."""
    if isinstance(d, Path):
        return d
    if not d or not d.strip():
        return Path()
    try:
        return _parse_cached(d)
    except MalformedPathData as e:
        logger.warning("Failed to parse path: %s", e)
        if diagnostics is not None:
            diagnostics.append(Diagnostic(DiagnosticKind.MALFORMED_PATH, str(e)))
        return Path()


def flatten(path: Path, curve_segments: int = 16) -> NDArray[np.float64]:
    """Nx2 polyline through the path. Curves and arcs get ``curve_segments`` pieces."""
    points: list[complex] = []
    for seg in path:
        if isinstance(seg, Line):
            points.extend((seg.start, seg.end))
            continue
        for t in np.linspace(0.0, 1.0, curve_segments + 1):
            points.append(seg.point(float(t)))
    if not points:
        return np.empty((0, 2), dtype=np.float64)
    arr = np.array(points, dtype=np.complex128)
    return np.column_stack([arr.real, arr.imag])


def bounds_of(
    d: str | Path | None,
    diagnostics: list[Diagnostic] | None = None,
    curve_segments: int = 16,
) -> Box | None:
    """Axis-aligned bounds of path data. None for empty or malformed data."""
    path = load_path(d, diagnostics)
    if len(path) == 0:
        return None
    try:
        xmin, xmax, ymin, ymax = path.bbox()
        return Box.from_corners(xmin, ymin, xmax, ymax)
    except Exception as e:
        # Exact bbox fails for some degenerate arcs; flatten instead
        logger.debug("Exact bbox failed (%s); using flattened path", e)
        return Extents.of_points(flatten(path, curve_segments)).to_box()


def _locate(path: Path, t: float) -> tuple[int, float]:
    n = len(path)
    t = min(max(t, 0.0), 1.0)
    if t >= 1.0:
        return n - 1, 1.0
    scaled = t * n
    i = int(math.floor(scaled))
    return i, scaled - i


def point_at(path: Path, t: float) -> Point | None:
    if len(path) == 0:
        return None
    i, local_t = _locate(path, t)
    p = path[i].point(local_t)
    return (p.real, p.imag)


def sample_at(d: str | Path | None, t: float) -> Point | None:
    """Point at parametric position ``t`` in [0, 1]; None for an empty path."""
    return point_at(load_path(d), t)


def tangent_angle_at(path: Path, t: float) -> float:
    """Direction of travel at ``t``, in degrees. Zero for an empty path."""
    if len(path) == 0:
        return 0.0
    i, local_t = _locate(path, t)
    seg = path[i]
    try:
        v = seg.derivative(local_t)
    except Exception as e:
        logger.debug("Derivative failed on %s: %s", type(seg).__name__, e)
        v = 0j
    if abs(v) < 1e-12:
        v = seg.end - seg.start
    if abs(v) < 1e-12:
        return 0.0
    return math.degrees(math.atan2(v.imag, v.real))


def points_along(d: str | Path | None, count: int) -> list[Point]:
    """``count`` points at evenly spaced parametric positions, endpoints included."""
    path = load_path(d)
    if len(path) == 0 or count <= 0:
        return []
    if count == 1:
        return [point_at(path, 0.0)]
    return [point_at(path, float(t)) for t in np.linspace(0.0, 1.0, count)]


def parse_point_list(text: str) -> list[Point]:
    """Points from ``"x1,y1 x2,y2 ..."``. A trailing odd coordinate is dropped."""
    nums = [float(v) for v in _POINT_LIST_RE.findall(text or "")]
    return [(nums[i], nums[i + 1]) for i in range(0, len(nums) - 1, 2)]


def path_from_points(points: list[Point], closed: bool = False) -> Path:
    pts = [complex(x, y) for x, y in points]
    if closed and len(pts) > 2:
        pts.append(pts[0])
    return Path(*[Line(a, b) for a, b in zip(pts, pts[1:]) if a != b])


def _mix(a: complex, b: complex, s: float) -> complex:
    return a + (b - a) * s


def are_compatible(a: Path, b: Path) -> bool:
    """Same segment count and types, and matching arc flags."""
    if len(a) != len(b) or len(a) == 0:
        return False
    for sa, sb in zip(a, b):
        if type(sa) is not type(sb):
            return False
        if isinstance(sa, Arc) and (sa.large_arc != sb.large_arc or sa.sweep != sb.sweep):
            return False
    return True


def interpolate_paths(a: Path, b: Path, s: float) -> Path | None:
    """Path between ``a`` (s=0) and ``b`` (s=1), or None when not morphable."""
    if not are_compatible(a, b):
        return None
    segments = []
    try:
        for sa, sb in zip(a, b):
            if isinstance(sa, Line):
                segments.append(Line(_mix(sa.start, sb.start, s), _mix(sa.end, sb.end, s)))
            elif isinstance(sa, QuadraticBezier):
                segments.append(QuadraticBezier(
                    _mix(sa.start, sb.start, s),
                    _mix(sa.control, sb.control, s),
                    _mix(sa.end, sb.end, s),
                ))
            elif isinstance(sa, CubicBezier):
                segments.append(CubicBezier(
                    _mix(sa.start, sb.start, s),
                    _mix(sa.control1, sb.control1, s),
                    _mix(sa.control2, sb.control2, s),
                    _mix(sa.end, sb.end, s),
                ))
            elif isinstance(sa, Arc):
                segments.append(Arc(
                    _mix(sa.start, sb.start, s),
                    _mix(sa.radius, sb.radius, s),
                    sa.rotation + (sb.rotation - sa.rotation) * s,
                    sa.large_arc,
                    sa.sweep,
                    _mix(sa.end, sb.end, s),
                ))
            else:
                return None
    except Exception as e:
        logger.debug("Path interpolation failed: %s", e)
        return None
    return Path(*segments)
