"""2D affine algebra.

A transform maps ``(x, y)`` to ``(a*x + c*y + e, b*x + d*y + f)``, i.e. the
matrix::

    | a c e |
    | b d f |
    | 0 0 1 |

``A.compose(B)`` (also ``A @ B``) applies ``B`` first, then ``A``. Ancestor
transforms are therefore composed on the left of descendant ones.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from viewtight.utils.geometry import Box, Extents, Point

_IDENTITY_EPS = 1e-12


@dataclass(frozen=True)
class AffineTransform:
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    # --- constructors ---

    @classmethod
    def identity(cls) -> AffineTransform:
        return cls()

    @classmethod
    def translate(cls, tx: float, ty: float = 0.0) -> AffineTransform:
        return cls(e=tx, f=ty)

    @classmethod
    def scale(cls, sx: float, sy: float | None = None) -> AffineTransform:
        return cls(a=sx, d=sx if sy is None else sy)

    @classmethod
    def rotate(cls, degrees: float, cx: float = 0.0, cy: float = 0.0) -> AffineTransform:
        """Rotation about ``(cx, cy)``: translate(c) . rotate . translate(-c)."""
        rad = math.radians(degrees)
        cos, sin = math.cos(rad), math.sin(rad)
        rotation = cls(a=cos, b=sin, c=-sin, d=cos)
        if cx == 0 and cy == 0:
            return rotation
        return cls.translate(cx, cy).compose(rotation).compose(cls.translate(-cx, -cy))

    @classmethod
    def skew_x(cls, degrees: float) -> AffineTransform:
        return cls(c=math.tan(math.radians(degrees)))

    @classmethod
    def skew_y(cls, degrees: float) -> AffineTransform:
        return cls(b=math.tan(math.radians(degrees)))

    @classmethod
    def from_array(cls, m: NDArray[np.float64]) -> AffineTransform:
        return cls(
            float(m[0, 0]), float(m[1, 0]), float(m[0, 1]),
            float(m[1, 1]), float(m[0, 2]), float(m[1, 2]),
        )

    # --- algebra ---

    def compose(self, other: AffineTransform) -> AffineTransform:
        """``self . other``: ``other`` is applied first."""
        return AffineTransform(
            a=self.a * other.a + self.c * other.b,
            b=self.b * other.a + self.d * other.b,
            c=self.a * other.c + self.c * other.d,
            d=self.b * other.c + self.d * other.d,
            e=self.a * other.e + self.c * other.f + self.e,
            f=self.b * other.e + self.d * other.f + self.f,
        )

    def __matmul__(self, other: AffineTransform) -> AffineTransform:
        return self.compose(other)

    @property
    def is_identity(self) -> bool:
        return (
            abs(self.a - 1) < _IDENTITY_EPS
            and abs(self.b) < _IDENTITY_EPS
            and abs(self.c) < _IDENTITY_EPS
            and abs(self.d - 1) < _IDENTITY_EPS
            and abs(self.e) < _IDENTITY_EPS
            and abs(self.f) < _IDENTITY_EPS
        )

    # --- application ---

    def apply_to_point(self, x: float, y: float) -> Point:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def apply_to_box(self, box: Box) -> Box:
        """Axis-aligned box of the four transformed corners."""
        pts = box.corners() @ self.linear_part().T + np.array([self.e, self.f])
        result = Extents.of_points(pts).to_box()
        return result if result is not None else Box(self.e, self.f, 0.0, 0.0)

    def linear_part(self) -> NDArray[np.float64]:
        return np.array([[self.a, self.c], [self.b, self.d]], dtype=np.float64)

    def to_array(self) -> NDArray[np.float64]:
        return np.array(
            [[self.a, self.c, self.e], [self.b, self.d, self.f], [0.0, 0.0, 1.0]],
            dtype=np.float64,
        )


def compose(*transforms: AffineTransform) -> AffineTransform:
    """Left-to-right composition: ``compose(A, B, C) == A . B . C``."""
    result = AffineTransform()
    for t in transforms:
        result = result.compose(t)
    return result


def stack(transforms: Sequence[AffineTransform]) -> NDArray[np.float64]:
    """Nx3x3 array of transforms for vectorised application."""
    if not transforms:
        return np.empty((0, 3, 3), dtype=np.float64)
    return np.stack([t.to_array() for t in transforms])


def extents_of_poses(
    matrices: NDArray[np.float64],
    box: Box,
    drop_degenerate: bool = False,
) -> Extents:
    """Extents of ``box`` mapped through every matrix of an Nx3x3 stack.

    With ``drop_degenerate`` a pose whose mapped box has zero area is left out.
    """
    if len(matrices) == 0:
        return Extents()
    corners = np.hstack([box.corners(), np.ones((4, 1))])  # 4x3
    # (N,3,3) @ (3,4) -> (N,3,4); keep the x/y rows
    mapped = matrices @ corners.T
    min_x = mapped[:, 0, :].min(axis=1)
    max_x = mapped[:, 0, :].max(axis=1)
    min_y = mapped[:, 1, :].min(axis=1)
    max_y = mapped[:, 1, :].max(axis=1)
    if drop_degenerate:
        keep = (max_x - min_x) * (max_y - min_y) > 1e-12
        if not keep.any():
            return Extents()
        min_x, max_x, min_y, max_y = min_x[keep], max_x[keep], min_y[keep], max_y[keep]
    return Extents(float(min_x.min()), float(min_y.min()), float(max_x.max()), float(max_y.max()))
