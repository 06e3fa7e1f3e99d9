"""Animation descriptors.

Four closed variants. Every consumer dispatches on them exhaustively and
raises ``TypeError`` for anything else.

* ``AttributeAnimation`` — ``<animate>``/``<set>`` on one attribute.
* ``TransformAnimation`` — ``<animateTransform>``; replaces the element's
  transform unless ``additive``.
* ``MotionAnimation`` — ``<animateMotion>``; applied on top of the transform
  attribute.
* ``KeyframesAnimation`` — a CSS ``@keyframes`` animation of ``transform``;
  replaces the element's transform.

``timing`` may hold raw ``begin`` text; it is resolved when sampled so a bad
value only drops that animation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from viewtight.animation.timing import Definite, Timing
from viewtight.utils.geometry import Point

KeyframeValue = Union[tuple[float, ...], str]

TRANSFORM_KINDS = frozenset({"translate", "scale", "rotate", "skewx", "skewy", "matrix"})

# Attributes that can make an invisible element visible
VISIBILITY_ATTRIBUTES = frozenset({"opacity", "display", "visibility"})


@dataclass(frozen=True)
class AttributeAnimation:
    attribute_name: str
    values: tuple[KeyframeValue, ...]
    timing: Timing | str = Definite()
    key_times: tuple[float, ...] | None = None
    calc_mode: str = "linear"
    duration: float | None = None


@dataclass(frozen=True)
class TransformAnimation:
    kind: str
    values: tuple[tuple[float, ...], ...]
    additive: bool = False
    timing: Timing | str = Definite()
    key_times: tuple[float, ...] | None = None
    calc_mode: str = "linear"
    duration: float | None = None

    @property
    def normalized_kind(self) -> str:
        return self.kind.lower()


@dataclass(frozen=True)
class MotionAnimation:
    """Motion along a path. Source precedence: ``path_data``, ``points``, ``mpath_ref``."""

    path_data: str | None = None
    points: tuple[Point, ...] | None = None
    mpath_ref: str | None = None
    rotate: str | float = 0.0  # "auto" | "auto-reverse" | fixed degrees
    timing: Timing | str = Definite()
    duration: float | None = None

    @property
    def auto_rotate(self) -> bool:
        return isinstance(self.rotate, str) and self.rotate in ("auto", "auto-reverse")

    @property
    def rotate_offset(self) -> float:
        """Degrees added to the tangent (auto) or used as the fixed angle."""
        if self.rotate == "auto":
            return 0.0
        if self.rotate == "auto-reverse":
            return 180.0
        try:
            return float(self.rotate)
        except (TypeError, ValueError):
            return 0.0


@dataclass(frozen=True)
class KeyframesAnimation:
    keyframes: tuple[tuple[float, str], ...]  # (offset in [0, 1], transform text)
    origin: Point = (0.0, 0.0)
    direction: str = "normal"
    timing: Timing | str = Definite()
    duration: float | None = None


AnimationDescriptor = Union[AttributeAnimation, TransformAnimation, MotionAnimation, KeyframesAnimation]


def transform_underlying(kind: str) -> tuple[float, ...]:
    """Neutral value of a transform kind, used for to-only and by-only animations."""
    kind = kind.lower()
    if kind == "scale":
        return (1.0, 1.0)
    if kind == "translate":
        return (0.0, 0.0)
    if kind == "rotate":
        return (0.0, 0.0, 0.0)
    if kind == "matrix":
        return (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
    return (0.0,)
