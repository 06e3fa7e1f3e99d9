"""Tests for boxes, margins and extents."""

import functools

import pytest

from viewtight.utils.geometry import Box, Extents, Margins, union_all


def test_box_rejects_negative_size():
    with pytest.raises(ValueError):
        Box(0, 0, -1, 5)


def test_zero_area_box_is_valid_but_degenerate():
    b = Box(3, 4, 0, 10)
    assert b.is_degenerate
    assert not Box(0, 0, 1, 1).is_degenerate


def test_union_and_expand():
    u = Box(0, 0, 10, 10).union(Box(100, 100, 10, 10))
    assert u.as_tuple() == (0, 0, 110, 110)
    e = Box(10, 10, 10, 10).expand(Margins(1, 2, 3, 4))
    assert e.as_tuple() == (9, 8, 14, 16)


def test_margins_add_and_max():
    a = Margins(1, 2, 3, 4)
    b = Margins(4, 3, 2, 1)
    assert a + b == Margins(5, 5, 5, 5)
    assert a.max_with(b) == Margins(4, 3, 3, 4)
    assert Margins().is_zero
    with pytest.raises(ValueError):
        Margins(-1, 0, 0, 0)


def test_empty_extents_is_merge_identity():
    e = Extents.of_box(Box(1, 2, 3, 4))
    assert Extents().is_empty
    assert Extents().merge(e) == e
    assert e.merge(Extents()) == e
    assert Extents().to_box() is None


def test_fold_is_order_independent():
    boxes = [Box(0, 0, 1, 1), Box(-5, 3, 2, 2), Box(7, -1, 1, 9)]
    fwd = functools.reduce(Extents.merge, (Extents.of_box(b) for b in boxes), Extents())
    rev = functools.reduce(Extents.merge, (Extents.of_box(b) for b in reversed(boxes)), Extents())
    assert fwd == rev
    assert fwd.to_box().as_tuple() == (-5, -1, 13, 9)


def test_union_all():
    assert union_all([]) is None
    assert union_all([Box(0, 0, 1, 1), Box(2, 2, 1, 1)]) == Box(0, 0, 3, 3)
