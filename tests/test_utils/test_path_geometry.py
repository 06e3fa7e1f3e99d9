"""Tests for path geometry on svgpathtools."""

import pytest
from svgpathtools import Path

from viewtight.errors import DiagnosticKind
from viewtight.utils.path_geometry import (
    bounds_of,
    flatten,
    interpolate_paths,
    load_path,
    parse_point_list,
    path_from_points,
    points_along,
    sample_at,
    tangent_angle_at,
)


def test_line_bounds():
    b = bounds_of("M0 0 L10 0 L10 5")
    assert b.as_tuple() == pytest.approx((0, 0, 10, 5))


def test_cubic_bounds_are_exact():
    # Control points reach y=10 but the curve peaks at 7.5
    b = bounds_of("M0 0 C0 10 10 10 10 0")
    assert b.as_tuple() == pytest.approx((0, 0, 10, 7.5))


def test_arc_bounds():
    b = bounds_of("M0 0 A5 5 0 0 1 10 0")
    assert b.width == pytest.approx(10)
    assert b.height == pytest.approx(5)


def test_malformed_path_degrades_to_empty():
    diagnostics = []
    assert bounds_of("10 20 L 5 5", diagnostics) is None
    assert diagnostics[0].kind == DiagnosticKind.MALFORMED_PATH
    assert len(load_path("10 20 L 5 5")) == 0


def test_empty_path():
    assert bounds_of("") is None
    assert sample_at("", 0.5) is None
    assert points_along(None, 5) == []


def test_sample_at_is_parametric_by_segment():
    assert sample_at("M0 0 L10 0", 0.5) == pytest.approx((5, 0))
    # Two segments: t=0.5 is the joint
    assert sample_at("M0 0 L10 0 L10 10", 0.5) == pytest.approx((10, 0))
    assert sample_at("M0 0 L10 0 L10 10", 1.0) == pytest.approx((10, 10))


def test_points_along():
    pts = points_along("M0 0 L10 0", 3)
    assert pts == [pytest.approx((0, 0)), pytest.approx((5, 0)), pytest.approx((10, 0))]


def test_tangent_angle():
    assert tangent_angle_at(load_path("M0 0 L0 10"), 0.5) == pytest.approx(90)
    assert tangent_angle_at(load_path("M10 0 L0 0"), 0.2) == pytest.approx(180)


def test_flatten_curve():
    pts = flatten(load_path("M0 0 Q5 10 10 0"), curve_segments=4)
    assert pts.shape == (5, 2)
    assert tuple(pts[0]) == pytest.approx((0, 0))
    assert tuple(pts[-1]) == pytest.approx((10, 0))


def test_interpolate_compatible_paths():
    a = load_path("M0 0 L10 0")
    b = load_path("M0 0 L20 10")
    mid = interpolate_paths(a, b, 0.5)
    assert mid is not None
    assert (mid[0].end.real, mid[0].end.imag) == pytest.approx((15, 5))


def test_interpolate_incompatible_paths():
    a = load_path("M0 0 L10 0")
    b = load_path("M0 0 Q5 5 10 0")
    assert interpolate_paths(a, b, 0.5) is None


def test_point_list():
    assert parse_point_list("0,0 10,5 20") == [(0, 0), (10, 5)]
    path = path_from_points([(0, 0), (10, 0), (10, 10)], closed=True)
    assert len(path) == 3


def test_flattened_fallback_uses_curve_segments(monkeypatch):
    def no_bbox(self):
        raise ValueError("degenerate arc")

    monkeypatch.setattr(Path, "bbox", no_bbox)
    # Endpoints only: the bulge of the curve is lost
    assert bounds_of("M0 0 Q5 10 10 0", curve_segments=1).height == pytest.approx(0)
    assert bounds_of("M0 0 Q5 10 10 0", curve_segments=2).height == pytest.approx(5)
