"""Tests for viewBox formatting and savings."""

import pytest

from viewtight.svg.viewbox import area_savings, format_viewbox, parse_viewbox
from viewtight.utils.geometry import Box


def test_format_viewbox():
    assert format_viewbox(Box(-10, -10, 130, 130)) == "-10.00 -10.00 130.00 130.00"
    assert format_viewbox(Box(0.123, 0, 1, 1), decimals=1) == "0.1 0.0 1.0 1.0"


def test_parse_viewbox():
    assert parse_viewbox("0 0 24 24") == Box(0, 0, 24, 24)
    assert parse_viewbox("0,0,24,24") == Box(0, 0, 24, 24)
    assert parse_viewbox("-5 -5  10   10") == Box(-5, -5, 10, 10)


@pytest.mark.parametrize("text", [None, "", "0 0 24", "0 0 a b", "0 0 -1 5"])
def test_parse_viewbox_rejects(text):
    assert parse_viewbox(text) is None


def test_area_savings():
    assert area_savings(Box(0, 0, 200, 200), Box(-10, -10, 130, 130)) == pytest.approx(57.75)
    assert area_savings(Box(0, 0, 0, 0), Box(0, 0, 5, 5)) == 0.0
