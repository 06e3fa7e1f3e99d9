"""Tests for transform list and preserveAspectRatio parsing."""

import pytest

from viewtight.errors import DiagnosticKind
from viewtight.utils.affine import AffineTransform
from viewtight.utils.transform_parser import (
    ViewportFit,
    aspect_ratio_transform,
    parse_operations,
    parse_preserve_aspect_ratio,
    parse_transform,
)


def _coeffs(t: AffineTransform) -> tuple[float, ...]:
    return (t.a, t.b, t.c, t.d, t.e, t.f)


def test_translate_with_comma():
    t = parse_transform("translate(10, 20)")
    assert (t.e, t.f) == (10, 20)


def test_list_folds_left_to_right():
    t = parse_transform("translate(10) scale(2)")
    assert t.apply_to_point(1, 1) == (12, 2)


def test_names_are_case_insensitive():
    assert _coeffs(parse_transform("ROTATE(90)")) == pytest.approx(_coeffs(AffineTransform.rotate(90)))


def test_rotate_about_point():
    x, y = parse_transform("rotate(90 5 5)").apply_to_point(10, 5)
    assert (x, y) == pytest.approx((5, 10))


@pytest.mark.parametrize("text", ["rotate(90deg)", "rotate(0.25turn)", "rotate(100grad)", "rotate(1.5707963267948966rad)"])
def test_angle_units(text):
    assert _coeffs(parse_transform(text)) == pytest.approx(_coeffs(AffineTransform.rotate(90)), abs=1e-12)


def test_css_single_axis_functions():
    assert parse_transform("translateX(5px)").apply_to_point(0, 0) == (5, 0)
    assert parse_transform("translateY(5px)").apply_to_point(0, 0) == (0, 5)
    assert parse_transform("scaleX(2) scaleY(3)").apply_to_point(1, 1) == (2, 3)


def test_matrix():
    t = parse_transform("matrix(1 0 0 1 5 6)")
    assert _coeffs(t) == (1, 0, 0, 1, 5, 6)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("translate(10-5)", (1, 0, 0, 1, 10, -5)),
        ("matrix(1 0 0 1-5-3)", (1, 0, 0, 1, -5, -3)),
        ("translate(.5.5)", (1, 0, 0, 1, 0.5, 0.5)),
        ("translate(1e1-2px)", (1, 0, 0, 1, 10, -2)),
    ],
)
def test_numbers_without_separators(text, expected):
    diagnostics = []
    assert _coeffs(parse_transform(text, diagnostics)) == pytest.approx(expected)
    assert diagnostics == []


def test_unknown_function_is_identity_and_reported():
    diagnostics = []
    t = parse_transform("wiggle(3) translate(5)", diagnostics)
    assert _coeffs(t) == (1, 0, 0, 1, 5, 0)
    assert len(diagnostics) == 1
    assert diagnostics[0].kind == DiagnosticKind.MALFORMED_TRANSFORM


def test_wrong_arity_is_identity():
    diagnostics = []
    assert parse_transform("matrix(1 2 3)", diagnostics).is_identity
    assert diagnostics


def test_bad_argument_and_unit():
    ops, issues = parse_operations("translate(10%) scale(2px) rotate(45)")
    assert [op.name for op in ops] == ["rotate"]
    assert len(issues) == 2


def test_trailing_garbage_reported():
    _, issues = parse_operations("translate(1) oops")
    assert issues


@pytest.mark.parametrize("text", [None, "", "none", "  "])
def test_empty_is_identity(text):
    assert parse_transform(text).is_identity


def test_preserve_aspect_ratio_parsing():
    default = parse_preserve_aspect_ratio(None)
    assert (default.align_x, default.align_y, default.none, default.slice) == ("mid", "mid", False, False)

    r = parse_preserve_aspect_ratio("xMinYMax slice")
    assert (r.align_x, r.align_y, r.slice) == ("min", "max", True)

    assert parse_preserve_aspect_ratio("none").none
    assert parse_preserve_aspect_ratio("defer xMaxYMin").align_x == "max"
    assert parse_preserve_aspect_ratio("bogus meet") == parse_preserve_aspect_ratio(None)


def test_meet_scales_by_minimum_and_centres():
    fit = aspect_ratio_transform(100, 80, 50, 50, "xMidYMid meet")
    assert fit.scale_x == fit.scale_y == pytest.approx(1.6)
    # 80 wide inside 100: half the slack on the left
    assert fit.offset_x == pytest.approx(10)
    assert fit.offset_y == pytest.approx(0)


def test_slice_scales_by_maximum():
    fit = aspect_ratio_transform(100, 80, 50, 50, "xMidYMid slice")
    assert fit.scale_x == fit.scale_y == pytest.approx(2.0)
    assert fit.offset_x == pytest.approx(0)
    assert fit.offset_y == pytest.approx(-10)


def test_alignment_offsets():
    assert aspect_ratio_transform(160, 100, 100, 50, "xMinYMin").offset_y == 0
    assert aspect_ratio_transform(160, 100, 100, 50, "xMaxYMax").offset_y == pytest.approx(20)


def test_none_scales_independently():
    fit = aspect_ratio_transform(160, 100, 100, 50, "none")
    assert (fit.scale_x, fit.scale_y, fit.offset_x, fit.offset_y) == pytest.approx((1.6, 2.0, 0, 0))


def test_degenerate_dimensions():
    assert aspect_ratio_transform(0, 100, 100, 50) == ViewportFit()
    assert aspect_ratio_transform(100, 100, 100, -5) == ViewportFit()
