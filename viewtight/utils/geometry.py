"""Leaf-node geometry helpers. No engine imports.

Boxes are axis-aligned ``(x, y, width, height)`` rectangles. ``Extents`` is the
running ``(min_x, min_y, max_x, max_y)`` fold over boxes; the empty extents is
the identity of ``merge`` so envelopes can be folded in any order.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

Point = tuple[float, float]

# Areas below this are treated as zero.
_AREA_EPS = 1e-12


@dataclass(frozen=True)
class Box:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Box dimensions must be non-negative, got {self.width}x{self.height}")

    @classmethod
    def from_corners(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> Box:
        return cls(min_x, min_y, max(0.0, max_x - min_x), max(0.0, max_y - min_y))

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def is_degenerate(self) -> bool:
        return self.area <= _AREA_EPS

    def corners(self) -> NDArray[np.float64]:
        """4x2 array of corner points, clockwise from the origin corner."""
        return np.array(
            [
                [self.x, self.y],
                [self.max_x, self.y],
                [self.max_x, self.max_y],
                [self.x, self.max_y],
            ],
            dtype=np.float64,
        )

    def union(self, other: Box) -> Box:
        return Box.from_corners(
            min(self.x, other.x),
            min(self.y, other.y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def expand(self, margins: Margins) -> Box:
        return Box(
            self.x - margins.left,
            self.y - margins.top,
            self.width + margins.left + margins.right,
            self.height + margins.top + margins.bottom,
        )

    def contains(self, other: Box, tolerance: float = 1e-9) -> bool:
        return (
            self.x <= other.x + tolerance
            and self.y <= other.y + tolerance
            and self.max_x >= other.max_x - tolerance
            and self.max_y >= other.max_y - tolerance
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Margins:
    """Per-side outward expansion. Values are never negative."""

    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0

    def __post_init__(self) -> None:
        for side in (self.left, self.top, self.right, self.bottom):
            if side < 0 or math.isnan(side):
                raise ValueError(f"Margins must be non-negative, got {self}")

    @classmethod
    def uniform(cls, value: float) -> Margins:
        value = max(0.0, value)
        return cls(value, value, value, value)

    def __add__(self, other: Margins) -> Margins:
        return Margins(
            self.left + other.left,
            self.top + other.top,
            self.right + other.right,
            self.bottom + other.bottom,
        )

    def max_with(self, other: Margins) -> Margins:
        return Margins(
            max(self.left, other.left),
            max(self.top, other.top),
            max(self.right, other.right),
            max(self.bottom, other.bottom),
        )

    @property
    def is_zero(self) -> bool:
        return self.left == 0 and self.top == 0 and self.right == 0 and self.bottom == 0


@dataclass(frozen=True)
class Extents:
    min_x: float = math.inf
    min_y: float = math.inf
    max_x: float = -math.inf
    max_y: float = -math.inf

    @classmethod
    def of_box(cls, box: Box) -> Extents:
        return cls(box.x, box.y, box.max_x, box.max_y)

    @classmethod
    def of_points(cls, points: NDArray[np.float64]) -> Extents:
        """Extents of an Nx2 point array. Empty input gives empty extents."""
        if len(points) == 0:
            return cls()
        return cls(
            float(np.min(points[:, 0])),
            float(np.min(points[:, 1])),
            float(np.max(points[:, 0])),
            float(np.max(points[:, 1])),
        )

    @property
    def is_empty(self) -> bool:
        return self.min_x > self.max_x or self.min_y > self.max_y

    def merge(self, other: Extents) -> Extents:
        return Extents(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def to_box(self) -> Box | None:
        if self.is_empty:
            return None
        return Box.from_corners(self.min_x, self.min_y, self.max_x, self.max_y)


def union_all(boxes: Iterable[Box]) -> Box | None:
    """Union of all boxes, or None when there are none."""
    ext = Extents()
    for b in boxes:
        ext = ext.merge(Extents.of_box(b))
    return ext.to_box()
