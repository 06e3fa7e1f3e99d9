"""API request models.

Animation and effect fields carry raw attribute text (``values``, ``begin``,
``keyTimes``...) as found in markup; ``to_record`` turns them into engine
records.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from viewtight.animation.keyframes import parse_key_times, parse_numbers, parse_value, resolve_keyframes
from viewtight.animation.model import (
    AnimationDescriptor,
    AttributeAnimation,
    KeyframesAnimation,
    MotionAnimation,
    TransformAnimation,
    transform_underlying,
)
from viewtight.animation.timing import parse_duration
from viewtight.effects.model import (
    ClipPath,
    DropShadow,
    EffectDescriptor,
    Filter,
    FilterPrimitive,
    FilterRegion,
    GaussianBlur,
    Mask,
    Morphology,
    Offset,
    OtherPrimitive,
    PatternOverflow,
)
from viewtight.engine.records import (
    ChainEntry,
    DefinitionTable,
    ElementRecord,
    SymbolDefinition,
    UseReference,
    ViewportDescriptor,
    Visibility,
)
from viewtight.errors import UnsupportedTimingSyntax
from viewtight.svg.viewbox import parse_viewbox
from viewtight.utils.geometry import Box, Margins, Point
from viewtight.utils.shapes import ShapeGeometry

# Attributes whose values are not numbers
_TEXT_ATTRIBUTES = {"d", "points", "display", "visibility"}
_ORIGIN_TOKEN_RE = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+))(px|%)?$")


class BoxModel(BaseModel):
    x: float = 0.0
    y: float = 0.0
    width: float = Field(0.0, ge=0)
    height: float = Field(0.0, ge=0)

    def to_box(self) -> Box:
        return Box(self.x, self.y, self.width, self.height)

    @classmethod
    def from_box(cls, box: Box) -> BoxModel:
        return cls(x=box.x, y=box.y, width=box.width, height=box.height)


class MarginsModel(BaseModel):
    left: float = Field(0.0, ge=0)
    top: float = Field(0.0, ge=0)
    right: float = Field(0.0, ge=0)
    bottom: float = Field(0.0, ge=0)

    def to_margins(self) -> Margins:
        return Margins(self.left, self.top, self.right, self.bottom)


class ShapeModel(BaseModel):
    tag: str = Field(..., description="Shape tag: rect, circle, ellipse, line, polyline, polygon, path")
    attributes: dict[str, Union[float, str]] = Field(default_factory=dict)

    def to_geometry(self) -> ShapeGeometry:
        return ShapeGeometry(self.tag, dict(self.attributes))


# --- coordinate chain ---

class TransformEntry(BaseModel):
    kind: Literal["transform"] = "transform"
    value: str = Field(..., description="Transform list, e.g. 'translate(10 20) rotate(45)'")

    def to_entry(self) -> ChainEntry:
        return self.value


class ViewportEntry(BaseModel):
    kind: Literal["viewport"] = "viewport"
    width: float | None = None
    height: float | None = None
    x: float = 0.0
    y: float = 0.0
    view_box: str | None = Field(None, description="viewBox attribute text")
    preserve_aspect_ratio: str | None = None
    element: str = Field("svg", description="svg, symbol or pattern")

    def to_entry(self) -> ChainEntry:
        return ViewportDescriptor(
            width=self.width,
            height=self.height,
            x=self.x,
            y=self.y,
            view_box=parse_viewbox(self.view_box),
            preserve_aspect_ratio=self.preserve_aspect_ratio,
            kind=self.element,
        )


class UseEntry(BaseModel):
    kind: Literal["use"] = "use"
    ref: str = Field(..., description="Referenced definition id, without '#'")
    x: float = 0.0
    y: float = 0.0
    width: float | None = None
    height: float | None = None

    def to_entry(self) -> ChainEntry:
        return UseReference(self.ref.lstrip("#"), self.x, self.y, self.width, self.height)


ChainEntryModel = Annotated[Union[TransformEntry, ViewportEntry, UseEntry], Field(discriminator="kind")]


class SymbolModel(BaseModel):
    id: str
    view_box: str | None = None
    preserve_aspect_ratio: str | None = None
    entries: list[ChainEntryModel] = Field(default_factory=list)

    def to_definition(self) -> SymbolDefinition:
        return SymbolDefinition(
            id=self.id,
            view_box=parse_viewbox(self.view_box),
            preserve_aspect_ratio=self.preserve_aspect_ratio,
            entries=tuple(e.to_entry() for e in self.entries),
        )


# --- animations ---

class KeyframeModel(BaseModel):
    offset: float = Field(..., ge=0, le=1)
    transform: str = "none"


class AnimationModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    element: Literal["animate", "set", "animateTransform", "animateMotion", "keyframes"]
    attribute_name: str | None = Field(None, alias="attributeName")
    type: str | None = Field(None, description="animateTransform type")
    values: str | None = None
    from_: str | None = Field(None, alias="from")
    to: str | None = None
    by: str | None = None
    key_times: str | None = Field(None, alias="keyTimes")
    calc_mode: str = Field("linear", alias="calcMode")
    begin: str | None = None
    dur: str | None = None
    additive: str = "replace"
    # animateMotion
    path: str | None = None
    mpath: str | None = None
    rotate: str = "0"
    # CSS keyframes
    keyframes: list[KeyframeModel] = Field(default_factory=list)
    transform_origin: str | None = None
    direction: str = "normal"

    def _duration(self) -> float | None:
        try:
            return parse_duration(self.dur)
        except UnsupportedTimingSyntax:
            return None

    def to_descriptor(self, base: Box, geometry: ShapeGeometry | None = None) -> AnimationDescriptor:
        timing = self.begin or "0s"
        duration = self._duration()
        key_times = parse_key_times(self.key_times)

        if self.element in ("animate", "set"):
            name = (self.attribute_name or "").strip()
            numeric = name.lower() not in _TEXT_ATTRIBUTES
            underlying = None
            if geometry is not None and name in geometry.attributes:
                underlying = parse_value(str(geometry.attributes[name]), numeric)
            if self.element == "set":
                values = resolve_keyframes(to=self.to, numeric=numeric)
            else:
                values = resolve_keyframes(self.values, self.from_, self.to, self.by, underlying, numeric)
            return AttributeAnimation(name, values, timing, key_times, self.calc_mode, duration)

        if self.element == "animateTransform":
            kind = (self.type or "translate").strip()
            values = resolve_keyframes(
                self.values, self.from_, self.to, self.by, transform_underlying(kind),
            )
            return TransformAnimation(
                kind=kind,
                values=tuple(v for v in values if isinstance(v, tuple)),
                additive=self.additive == "sum",
                timing=timing,
                key_times=key_times,
                calc_mode=self.calc_mode,
                duration=duration,
            )

        if self.element == "animateMotion":
            rotate = self.rotate.strip()
            rotate_value: str | float = rotate if rotate in ("auto", "auto-reverse") else _to_float(rotate)
            points = None
            if not self.path:
                keyed = resolve_keyframes(self.values, self.from_, self.to, self.by, (0.0, 0.0))
                points = tuple((v[0], v[1]) for v in keyed if isinstance(v, tuple) and len(v) >= 2) or None
            return MotionAnimation(
                path_data=self.path,
                points=points,
                mpath_ref=self.mpath.lstrip("#") if self.mpath else None,
                rotate=rotate_value,
                timing=timing,
                duration=duration,
            )

        return KeyframesAnimation(
            keyframes=tuple((kf.offset, kf.transform) for kf in self.keyframes),
            origin=parse_transform_origin(self.transform_origin, base),
            direction=self.direction,
            timing=timing,
            duration=duration,
        )


def _to_float(text: str, default: float = 0.0) -> float:
    try:
        return float(text)
    except ValueError:
        return default


def parse_transform_origin(text: str | None, base: Box) -> Point:
    """Origin from ``"x y"`` lengths or percentages of the base box."""
    if not text:
        return (0.0, 0.0)
    keywords = {"left": "0%", "top": "0%", "center": "50%", "right": "100%", "bottom": "100%"}
    tokens = [keywords.get(t, t) for t in text.strip().lower().split()]
    coords = []
    for i, token in enumerate(tokens[:2]):
        m = _ORIGIN_TOKEN_RE.match(token)
        if m is None:
            coords.append(0.0)
            continue
        value = float(m.group(1))
        if m.group(2) == "%":
            value = (base.x + base.width * value / 100) if i == 0 else (base.y + base.height * value / 100)
        coords.append(value)
    while len(coords) < 2:
        coords.append(base.y + base.height / 2 if len(coords) == 1 else 0.0)
    return (coords[0], coords[1])


# --- effects ---

class PrimitiveModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., description="Primitive element name, e.g. feGaussianBlur")
    std_deviation: str | None = Field(None, alias="stdDeviation")
    dx: float = 0.0
    dy: float = 0.0
    operator: str = "erode"
    radius: str | None = None

    def to_primitive(self) -> FilterPrimitive:
        kind = self.type.lower()
        std = parse_numbers(self.std_deviation or "")
        if kind == "fegaussianblur":
            return GaussianBlur(std[0] if std else 0.0, std[1] if len(std) > 1 else None)
        if kind == "fedropshadow":
            return DropShadow(self.dx, self.dy, std[0] if std else 2.0, std[1] if len(std) > 1 else None)
        if kind == "feoffset":
            return Offset(self.dx, self.dy)
        if kind == "femorphology":
            r = parse_numbers(self.radius or "")
            return Morphology(self.operator, r[0] if r else 0.0, r[1] if len(r) > 1 else None)
        return OtherPrimitive(self.type)


class RegionModel(BaseModel):
    x: float = -0.1
    y: float = -0.1
    width: float = 1.2
    height: float = 1.2
    units: Literal["objectBoundingBox", "userSpaceOnUse"] = "objectBoundingBox"

    def to_region(self) -> FilterRegion:
        return FilterRegion(self.x, self.y, self.width, self.height, self.units)


class EffectModel(BaseModel):
    kind: Literal["filter", "mask", "clipPath", "pattern"]
    ref: str | None = None
    primitives: list[PrimitiveModel] = Field(default_factory=list)
    css: str | None = Field(None, description="CSS filter value, e.g. 'blur(4px)'")
    margins: MarginsModel | None = None
    region: RegionModel | None = None
    tile: BoxModel | None = None
    children: list[ShapeModel] = Field(default_factory=list)
    child_boxes: list[BoxModel] = Field(default_factory=list)

    def to_descriptor(self) -> EffectDescriptor:
        margins = self.margins.to_margins() if self.margins else None
        if self.kind == "filter":
            return Filter(
                primitives=tuple(p.to_primitive() for p in self.primitives),
                margins=margins,
                region=self.region.to_region() if self.region else None,
                css=self.css,
            )
        if self.kind == "mask":
            return Mask(self.ref)
        if self.kind == "clipPath":
            return ClipPath(self.ref)
        children = tuple(c.to_geometry() for c in self.children) + tuple(b.to_box() for b in self.child_boxes)
        return PatternOverflow(
            margins=margins,
            tile=self.tile.to_box() if self.tile else None,
            children=children,
        )


# --- elements ---

class VisibilityModel(BaseModel):
    display: str = "inline"
    visibility: str = "visible"
    opacity: float = Field(1.0, ge=0, le=1)


class ElementModel(BaseModel):
    id: str
    base_bounds: BoxModel
    chain: list[ChainEntryModel] = Field(default_factory=list, description="Ancestor chain, root first")
    transform: str | None = None
    animations: list[AnimationModel] = Field(default_factory=list)
    effects: list[EffectModel] = Field(default_factory=list)
    visibility: VisibilityModel = Field(default_factory=VisibilityModel)
    geometry: ShapeModel | None = None

    def to_record(self) -> ElementRecord:
        base = self.base_bounds.to_box()
        geometry = self.geometry.to_geometry() if self.geometry else None
        return ElementRecord(
            id=self.id,
            base_bounds=base,
            ancestor_chain=tuple(e.to_entry() for e in self.chain),
            transform=self.transform,
            animations=tuple(a.to_descriptor(base, geometry) for a in self.animations),
            effects=tuple(e.to_descriptor() for e in self.effects),
            visibility=Visibility(self.visibility.display, self.visibility.visibility, self.visibility.opacity),
            geometry=geometry,
        )


class EnvelopeRequest(BaseModel):
    elements: list[ElementModel] = Field(..., description="One record per renderable element")
    symbols: list[SymbolModel] = Field(default_factory=list)
    paths: dict[str, str] = Field(default_factory=dict, description="Path data by id, for mpath")
    buffer_px: float | None = Field(None, ge=0, description="Viewport padding; server default when absent")
    samples_per_segment: int | None = Field(None, ge=0)
    original_viewbox: str | None = Field(None, description="Current viewBox, for savings reporting")

    def definitions(self) -> DefinitionTable:
        return DefinitionTable(
            symbols={s.id: s.to_definition() for s in self.symbols},
            paths=dict(self.paths),
        )
