"""Tests for keyframe value and key time resolution."""

import pytest

from viewtight.animation.keyframes import (
    parse_key_times,
    parse_value,
    parse_values,
    resolve_key_times,
    resolve_keyframes,
)


def test_parse_values():
    assert parse_values("0 0; 10,20 ;") == ((0.0, 0.0), (10.0, 20.0))
    assert parse_values(None) == ()


def test_non_numeric_values_stay_text():
    assert parse_value("M0 0 L1 1") == "M0 0 L1 1"
    assert parse_value("12px") == (12.0,)
    assert parse_value("5", numeric=False) == "5"


def test_values_take_precedence():
    assert resolve_keyframes(values="1;2;3", from_="0", to="9") == ((1.0,), (2.0,), (3.0,))


def test_from_to():
    assert resolve_keyframes(from_="0", to="10") == ((0.0,), (10.0,))


def test_to_only_uses_underlying():
    assert resolve_keyframes(to="10", underlying=(5.0,)) == ((5.0,), (10.0,))
    assert resolve_keyframes(to="10") == ((10.0,),)


def test_by_is_added_to_start():
    assert resolve_keyframes(from_="2", by="5") == ((2.0,), (7.0,))
    assert resolve_keyframes(by="5") == ((0.0,), (5.0,))
    assert resolve_keyframes(by="1 2", underlying=(10.0, 10.0)) == ((10.0, 10.0), (11.0, 12.0))


def test_nothing_given():
    assert resolve_keyframes() == ()


def test_parse_key_times():
    assert parse_key_times("0; 0.5; 1") == (0.0, 0.5, 1.0)
    assert parse_key_times("a;b") is None
    assert parse_key_times("") is None


def test_paced_key_times():
    kt = resolve_key_times([(0.0,), (10.0,), (30.0,)], calc_mode="paced")
    assert kt == pytest.approx((0.0, 1 / 3, 1.0))


def test_explicit_key_times_used_when_valid():
    values = [(0.0,), (1.0,), (2.0,)]
    assert resolve_key_times(values, (0.0, 0.2, 1.0)) == (0.0, 0.2, 1.0)
    assert resolve_key_times(values, (0.0, 0.8, 0.5)) == (0.0, 0.5, 1.0)
    assert resolve_key_times(values, (0.0, 1.0)) == (0.0, 0.5, 1.0)


def test_paced_falls_back_for_text_values():
    assert resolve_key_times(["a", "b"], calc_mode="paced") == (0.0, 1.0)
