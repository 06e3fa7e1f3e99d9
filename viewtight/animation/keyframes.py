"""Keyframe value resolution from raw animation attributes."""

from __future__ import annotations

import re
from collections.abc import Sequence

from viewtight.animation.model import KeyframeValue
from viewtight.utils.math_helpers import even_key_times, paced_key_times

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_NUMERIC_VALUE_RE = re.compile(
    r"^\s*(?:[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?(?:px|deg|%)?[\s,]*)+$"
)


def parse_numbers(text: str) -> tuple[float, ...]:
    return tuple(float(v) for v in _NUMBER_RE.findall(text))


def is_numeric_value(text: str) -> bool:
    return bool(_NUMERIC_VALUE_RE.match(text))


def parse_value(text: str, numeric: bool = True) -> KeyframeValue:
    """One keyframe value: a number tuple when ``numeric`` and it parses, else the text."""
    text = text.strip()
    if numeric and is_numeric_value(text):
        return parse_numbers(text)
    return text


def parse_values(text: str | None, numeric: bool = True) -> tuple[KeyframeValue, ...]:
    """Split a ``values`` list on semicolons. Empty entries are dropped."""
    if not text:
        return ()
    return tuple(parse_value(v, numeric) for v in text.split(";") if v.strip())


def parse_key_times(text: str | None) -> tuple[float, ...] | None:
    if not text or not text.strip():
        return None
    try:
        return tuple(float(v) for v in text.split(";") if v.strip())
    except ValueError:
        return None


def _add(a: tuple[float, ...], b: tuple[float, ...]) -> tuple[float, ...]:
    n = max(len(a), len(b))
    a = a + (0.0,) * (n - len(a))
    b = b + (0.0,) * (n - len(b))
    return tuple(x + y for x, y in zip(a, b))


def resolve_keyframes(
    values: str | None = None,
    from_: str | None = None,
    to: str | None = None,
    by: str | None = None,
    underlying: KeyframeValue | None = None,
    numeric: bool = True,
) -> tuple[KeyframeValue, ...]:
    """Keyframe values in the precedence order ``values``, ``from/to``, ``from/by``, ``to``, ``by``.

    ``by`` is added to the start value. A missing start value falls back to
    ``underlying``; without one a lone ``to`` is the only keyframe.
    """
    listed = parse_values(values, numeric)
    if listed:
        return listed

    start = parse_value(from_, numeric) if from_ and from_.strip() else underlying
    if to is not None and to.strip():
        end = parse_value(to, numeric)
        return (start, end) if start is not None else (end,)

    if by is not None and by.strip():
        delta = parse_value(by, numeric)
        if start is None and isinstance(delta, tuple):
            start = (0.0,) * len(delta)
        if isinstance(start, tuple) and isinstance(delta, tuple):
            return (start, _add(start, delta))
        return (start,) if start is not None else ()

    return (start,) if start is not None else ()


def _valid_key_times(key_times: Sequence[float], count: int) -> bool:
    if len(key_times) != count or count == 0:
        return False
    if any(t < 0 or t > 1 for t in key_times):
        return False
    return all(a <= b for a, b in zip(key_times, key_times[1:]))


def resolve_key_times(
    values: Sequence[KeyframeValue],
    key_times: Sequence[float] | None = None,
    calc_mode: str = "linear",
) -> tuple[float, ...]:
    """Timeline fraction of every keyframe.

    Paced mode spaces numeric keyframes by distance and ignores explicit key
    times. Otherwise explicit key times are used when they are well formed.
    """
    n = len(values)
    if calc_mode == "paced" and all(isinstance(v, tuple) and v for v in values):
        return paced_key_times(values)  # type: ignore[arg-type]
    if key_times is not None and _valid_key_times(key_times, n):
        return tuple(float(t) for t in key_times)
    return even_key_times(n)
