"""Effect descriptors: filters, masks, clip paths and pattern fills."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from viewtight.utils.geometry import Box, Margins
from viewtight.utils.shapes import ShapeGeometry


@dataclass(frozen=True)
class GaussianBlur:
    std_dev_x: float
    std_dev_y: float | None = None


@dataclass(frozen=True)
class DropShadow:
    dx: float = 2.0
    dy: float = 2.0
    std_dev_x: float = 2.0
    std_dev_y: float | None = None


@dataclass(frozen=True)
class Offset:
    dx: float = 0.0
    dy: float = 0.0


@dataclass(frozen=True)
class Morphology:
    operator: str = "erode"
    radius_x: float = 0.0
    radius_y: float | None = None


@dataclass(frozen=True)
class OtherPrimitive:
    """A primitive with no geometric formula (colour matrix, flood, url reference...)."""

    name: str


FilterPrimitive = Union[GaussianBlur, DropShadow, Offset, Morphology, OtherPrimitive]

# Primitives that paint the whole filter region regardless of their input
REGION_FILLING_PRIMITIVES = frozenset({"feflood", "feturbulence", "feimage", "fetile", "url"})


@dataclass(frozen=True)
class FilterRegion:
    """Filter effects region. With ``objectBoundingBox`` units values are box fractions."""

    x: float = -0.1
    y: float = -0.1
    width: float = 1.2
    height: float = 1.2
    units: str = "objectBoundingBox"


@dataclass(frozen=True)
class Filter:
    primitives: tuple[FilterPrimitive, ...] = ()
    margins: Margins | None = None
    region: FilterRegion | None = None
    css: str | None = None


@dataclass(frozen=True)
class Mask:
    ref_id: str | None = None


@dataclass(frozen=True)
class ClipPath:
    ref_id: str | None = None


@dataclass(frozen=True)
class PatternOverflow:
    margins: Margins | None = None
    tile: Box | None = None
    children: tuple[Box | ShapeGeometry, ...] = ()


EffectDescriptor = Union[Filter, Mask, ClipPath, PatternOverflow]
