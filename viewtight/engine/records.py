"""Element records — the engine's input, one per renderable element.

Records are immutable and built by the caller (a document walker or the HTTP
layer). Base bounds are the element's untransformed local box as reported by
a renderer; everything else describes what can move or grow that box.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Union

from viewtight.animation.model import AnimationDescriptor
from viewtight.effects.model import EffectDescriptor
from viewtight.utils.affine import AffineTransform
from viewtight.utils.geometry import Box
from viewtight.utils.shapes import ShapeGeometry


@dataclass(frozen=True)
class ViewportDescriptor:
    """A nested coordinate system: ``<svg>``, ``<symbol>`` instance or pattern tile."""

    width: float | None = None
    height: float | None = None
    x: float = 0.0
    y: float = 0.0
    view_box: Box | None = None
    preserve_aspect_ratio: str | None = None
    kind: str = "svg"


@dataclass(frozen=True)
class UseReference:
    """A ``<use>`` instance; its target is looked up in the definition table."""

    ref_id: str
    x: float = 0.0
    y: float = 0.0
    width: float | None = None
    height: float | None = None


ChainEntry = Union[AffineTransform, str, ViewportDescriptor, UseReference]


@dataclass(frozen=True)
class SymbolDefinition:
    """A referenceable definition. ``entries`` are the coordinate steps between
    the definition and the referenced content, and may hold further references."""

    id: str
    view_box: Box | None = None
    preserve_aspect_ratio: str | None = None
    entries: tuple[ChainEntry, ...] = ()


@dataclass(frozen=True)
class DefinitionTable:
    symbols: Mapping[str, SymbolDefinition] = field(default_factory=dict)
    # Path data addressable by motion-path references
    paths: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Visibility:
    display: str = "inline"
    visibility: str = "visible"
    opacity: float = 1.0

    @property
    def is_visible(self) -> bool:
        return self.display != "none" and self.visibility not in ("hidden", "collapse") and self.opacity > 0


@dataclass(frozen=True)
class ElementRecord:
    id: str
    base_bounds: Box
    ancestor_chain: tuple[ChainEntry, ...] = ()
    transform: AffineTransform | str | None = None
    animations: tuple[AnimationDescriptor, ...] = ()
    effects: tuple[EffectDescriptor, ...] = ()
    visibility: Visibility = Visibility()
    geometry: ShapeGeometry | None = None
