"""Tests for begin timing classification."""

import pytest

from viewtight.animation.timing import (
    Definite,
    EventBased,
    Syncbase,
    parse_begin,
    parse_clock_value,
    parse_duration,
    resolve_timing,
)
from viewtight.errors import UnsupportedTimingSyntax


@pytest.mark.parametrize(
    "text, seconds",
    [("2s", 2.0), ("500ms", 0.5), ("1.5h", 5400.0), ("2min", 120.0), ("3", 3.0), ("01:30", 90.0), ("00:01.5", 1.5)],
)
def test_clock_values(text, seconds):
    assert parse_clock_value(text) == pytest.approx(seconds)


def test_definite_offsets():
    assert parse_begin("2s") == Definite(2.0)
    assert parse_begin("-1") == Definite(-1.0)
    assert parse_begin("+250ms") == Definite(0.25)
    assert parse_begin(None) == Definite(0.0)
    assert parse_begin("") == Definite(0.0)


def test_event_based():
    assert parse_begin("click") == EventBased("click")
    assert parse_begin("shape.mouseover+1s") == EventBased("shape.mouseover", 1.0)
    assert parse_begin("indefinite") == EventBased("indefinite")
    assert isinstance(parse_begin("accessKey(a)"), EventBased)


def test_syncbase():
    assert parse_begin("a1.end") == Syncbase("a1", "end")
    assert parse_begin("a1.begin-0.5s") == Syncbase("a1", "begin", -0.5)
    assert parse_begin("a1.repeat(2)") == Syncbase("a1", "repeat(2)")


def test_list_prefers_earliest_definite():
    assert parse_begin("click; 3s; 1s") == Definite(1.0)
    assert parse_begin("click; a1.end") == EventBased("click")


def test_list_skips_unsupported_entries():
    assert parse_begin("wallclock(2024-01-01T00:00:00Z); click") == EventBased("click")


@pytest.mark.parametrize("text", ["wallclock(2024-01-01T00:00:00Z)", "@@", ".end"])
def test_unsupported(text):
    with pytest.raises(UnsupportedTimingSyntax):
        parse_begin(text)


def test_duration():
    assert parse_duration("2s") == 2.0
    assert parse_duration("indefinite") is None
    assert parse_duration("media") is None
    assert parse_duration(None) is None


def test_resolve_timing_passes_objects_through():
    t = EventBased("click")
    assert resolve_timing(t) is t
    assert resolve_timing("4s") == Definite(4.0)
