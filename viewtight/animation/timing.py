"""Animation begin timing.

``begin`` text is classified into one of three timing kinds:

* ``Definite`` — a plain offset (``2s``, ``500ms``, ``-1``, ``00:01.5``);
  the animation is known to run.
* ``EventBased`` — waits on an event (``click``, ``shape.mouseover+1s``,
  ``accessKey(a)``, ``indefinite``); it may never run.
* ``Syncbase`` — tied to another animation (``a1.end``, ``a1.repeat(2)``);
  whether it runs depends on that chain.

Wallclock values and anything else unrecognised raise
``UnsupportedTimingSyntax``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from viewtight.errors import UnsupportedTimingSyntax


@dataclass(frozen=True)
class Definite:
    offset_seconds: float = 0.0


@dataclass(frozen=True)
class EventBased:
    event_name: str
    offset_seconds: float = 0.0


@dataclass(frozen=True)
class Syncbase:
    ref_id: str
    edge: str  # "begin" | "end" | "repeat(n)"
    offset_seconds: float = 0.0


Timing = Union[Definite, EventBased, Syncbase]

_TIMECOUNT_RE = re.compile(r"^(\d+(?:\.\d*)?|\.\d+)(h|min|s|ms)?$")
_CLOCK_RE = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)$")
_OFFSET_RE = re.compile(r"^([+-])?\s*(.+)$")
_SPLIT_OFFSET_RE = re.compile(
    r"^(?P<base>.*?)\s*(?:(?P<sign>[+-])\s*(?P<offset>(?:\d[\d:.]*|\.\d+)(?:h|min|s|ms)?))?$"
)
_EVENT_RE = re.compile(r"^[A-Za-z_][\w\-]*$")
_REPEAT_RE = re.compile(r"^repeat\((\d+)\)$")
_ACCESS_KEY_RE = re.compile(r"^accessKey\(.\)$", re.IGNORECASE)

_UNIT_SECONDS = {"h": 3600.0, "min": 60.0, "s": 1.0, "ms": 0.001, None: 1.0}


def parse_clock_value(text: str) -> float:
    """Seconds of an unsigned SMIL clock value (``1.5s``, ``250ms``, ``01:02:03``)."""
    value = text.strip()
    m = _TIMECOUNT_RE.match(value)
    if m:
        return float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
    m = _CLOCK_RE.match(value)
    if m:
        hours = float(m.group(1) or 0)
        return hours * 3600 + float(m.group(2)) * 60 + float(m.group(3))
    raise UnsupportedTimingSyntax(f"Bad clock value: {text!r}")


def parse_offset(text: str) -> float:
    """Signed offset in seconds."""
    m = _OFFSET_RE.match(text.strip())
    if m is None:
        raise UnsupportedTimingSyntax(f"Bad offset: {text!r}")
    seconds = parse_clock_value(m.group(2))
    return -seconds if m.group(1) == "-" else seconds


def parse_duration(text: str | None) -> float | None:
    """Simple duration in seconds; None for ``indefinite``, ``media`` or absent."""
    if text is None or not text.strip() or text.strip() in ("indefinite", "media"):
        return None
    return parse_clock_value(text)


def _parse_single(value: str) -> Timing:
    if not value:
        return Definite(0.0)
    if value.startswith("wallclock("):
        raise UnsupportedTimingSyntax(f"Wallclock timing is not supported: {value!r}")
    if value == "indefinite":
        return EventBased("indefinite")

    try:
        return Definite(parse_offset(value))
    except UnsupportedTimingSyntax:
        pass

    m = _SPLIT_OFFSET_RE.match(value)
    if m is None or not m.group("base"):
        raise UnsupportedTimingSyntax(f"Unrecognised begin value: {value!r}")
    base = m.group("base")
    offset = 0.0
    if m.group("offset"):
        offset = parse_clock_value(m.group("offset"))
        if m.group("sign") == "-":
            offset = -offset

    if _ACCESS_KEY_RE.match(base):
        return EventBased(base, offset)

    if "." in base:
        ref_id, _, event = base.rpartition(".")
        if not ref_id:
            raise UnsupportedTimingSyntax(f"Unrecognised begin value: {value!r}")
        if event in ("begin", "end") or _REPEAT_RE.match(event):
            return Syncbase(ref_id, event, offset)
        if _EVENT_RE.match(event):
            return EventBased(base, offset)
        raise UnsupportedTimingSyntax(f"Unrecognised begin value: {value!r}")

    if _EVENT_RE.match(base):
        return EventBased(base, offset)
    raise UnsupportedTimingSyntax(f"Unrecognised begin value: {value!r}")


def parse_begin(text: str | None) -> Timing:
    """Classify a ``begin`` attribute; a semicolon list resolves to its best entry.

    Within a list a definite entry wins (the earliest one), since it guarantees
    the animation runs. Unsupported entries are skipped as long as one entry
    parses.
    """
    if text is None:
        return Definite(0.0)
    entries = [e.strip() for e in text.split(";")]
    entries = [e for e in entries if e] or [""]

    parsed: list[Timing] = []
    failures: list[str] = []
    for entry in entries:
        try:
            parsed.append(_parse_single(entry))
        except UnsupportedTimingSyntax as e:
            failures.append(str(e))

    if not parsed:
        raise UnsupportedTimingSyntax("; ".join(failures))
    definite = [t for t in parsed if isinstance(t, Definite)]
    if definite:
        return min(definite, key=lambda t: t.offset_seconds)
    return parsed[0]


def resolve_timing(timing: Timing | str | None) -> Timing:
    """Timing object for a descriptor that may still hold raw ``begin`` text."""
    if isinstance(timing, (Definite, EventBased, Syncbase)):
        return timing
    return parse_begin(timing)
