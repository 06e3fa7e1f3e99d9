"""Math helpers — interpolation, key-time spacing, angle units. No engine imports."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def lerp_values(a: Sequence[float], b: Sequence[float], t: float) -> tuple[float, ...]:
    """Element-wise interpolation. The shorter tuple decides the length."""
    return tuple(lerp(x, y, t) for x, y in zip(a, b))


def even_key_times(count: int) -> tuple[float, ...]:
    """Evenly spaced key times over [0, 1]."""
    if count <= 0:
        return ()
    if count == 1:
        return (0.0,)
    return tuple(float(v) for v in np.linspace(0.0, 1.0, count))


def paced_key_times(values: Sequence[Sequence[float]]) -> tuple[float, ...]:
    """Key times proportional to cumulative Euclidean distance between values.

    Falls back to even spacing when every value is identical.
    """
    if len(values) < 2:
        return even_key_times(len(values))
    distances = [0.0]
    for prev, cur in zip(values, values[1:]):
        distances.append(math.dist(prev[: len(cur)], cur[: len(prev)]))
    cumulative = np.cumsum(distances)
    total = float(cumulative[-1])
    if total <= 0:
        return even_key_times(len(values))
    return tuple(float(v) for v in cumulative / total)


def segment_index(key_times: Sequence[float], u: float) -> tuple[int, float]:
    """Locate timeline fraction ``u`` among ``key_times``.

    Returns ``(i, local_t)`` so that the value at ``u`` lies between keyframes
    ``i`` and ``i + 1`` at local progress ``local_t``.
    """
    n = len(key_times)
    if n < 2 or u <= key_times[0]:
        return 0, 0.0
    if u >= key_times[-1]:
        return n - 2, 1.0
    i = int(np.searchsorted(key_times, u, side="right")) - 1
    i = min(max(i, 0), n - 2)
    span = key_times[i + 1] - key_times[i]
    if span <= 0:
        return i, 1.0
    return i, (u - key_times[i]) / span


def steps_for_sweep(sweep_degrees: float, max_step_degrees: float, minimum: int) -> int:
    """Intermediate sample count so no angular step exceeds ``max_step_degrees``."""
    if max_step_degrees <= 0:
        return minimum
    needed = math.ceil(abs(sweep_degrees) / max_step_degrees) - 1
    return max(minimum, needed)


_ANGLE_UNITS = {
    "deg": 1.0,
    "rad": 180.0 / math.pi,
    "grad": 0.9,
    "turn": 360.0,
}


def to_degrees(value: float, unit: str) -> float:
    """Convert an angle in a CSS angle unit to degrees. Unknown units raise KeyError."""
    if not unit:
        return value
    return value * _ANGLE_UNITS[unit.lower()]
