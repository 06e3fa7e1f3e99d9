"""Envelope sampler — one animation descriptor in, a finite pose set out.

Transform-valued animations become *tracks*: objects that can be evaluated at
any timeline fraction ``u`` in [0, 1]. A track also proposes the fractions at
which it should be sampled (every keyframe plus intermediates). The combiner
evaluates all tracks of an element at a shared set of fractions.

Attribute animations become candidate local boxes, one per keyframe value
(plus morph intermediates for path data).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np
from svgpathtools import Path

from viewtight.animation.keyframes import resolve_key_times
from viewtight.animation.model import (
    TRANSFORM_KINDS,
    AnimationDescriptor,
    AttributeAnimation,
    KeyframesAnimation,
    KeyframeValue,
    MotionAnimation,
    TransformAnimation,
)
from viewtight.animation.timing import Definite, resolve_timing
from viewtight.engine.config import EngineConfig
from viewtight.errors import (
    Diagnostic,
    DiagnosticKind,
    MalformedTransformSyntax,
    UnsupportedTimingSyntax,
)
from viewtight.utils.affine import AffineTransform
from viewtight.utils.geometry import Box, Margins
from viewtight.utils.math_helpers import lerp_values, segment_index, steps_for_sweep
from viewtight.utils.path_geometry import (
    bounds_of,
    interpolate_paths,
    load_path,
    parse_point_list,
    path_from_points,
    point_at,
    tangent_angle_at,
)
from viewtight.utils.shapes import GEOMETRIC_ATTRIBUTES, ShapeGeometry, shape_bounds, to_length
from viewtight.utils.transform_parser import TransformOp, op_to_affine, parse_operations

logger = logging.getLogger(__name__)

# Sample just before a jump so both sides of a discontinuity are visited
_JUMP_EPS = 1e-9

_ANGLE_OPS = {"rotate", "skewx", "skewy"}


def normalize_transform_value(kind: str, value: Sequence[float]) -> tuple[float, ...]:
    """Fill in defaulted parameters so values of one kind can be interpolated."""
    kind = kind.lower()
    v = tuple(value)
    if not v:
        raise MalformedTransformSyntax(f"Empty {kind} value")
    if kind == "translate":
        return (v[0], v[1] if len(v) > 1 else 0.0)
    if kind == "scale":
        return (v[0], v[1] if len(v) > 1 else v[0])
    if kind == "rotate":
        return (v[0], v[1] if len(v) > 1 else 0.0, v[2] if len(v) > 2 else 0.0)
    if kind in ("skewx", "skewy"):
        return (v[0],)
    if kind == "matrix":
        if len(v) != 6:
            raise MalformedTransformSyntax(f"matrix value needs 6 numbers, got {len(v)}")
        return v
    raise MalformedTransformSyntax(f"Unknown transform kind: {kind}")


def _segment_fractions(key_times: Sequence[float], steps: Sequence[int]) -> list[float]:
    """Key times plus ``steps[i]`` evenly spaced fractions inside segment ``i``."""
    out = list(key_times)
    for i, (a, b) in enumerate(zip(key_times, key_times[1:])):
        if b <= a:
            if a > 0:
                out.append(a - _JUMP_EPS)
            continue
        n = steps[i]
        out.extend(a + (b - a) * j / (n + 1) for j in range(1, n + 1))
    return sorted(set(out))


class TransformTrack:
    """Interpolated ``<animateTransform>`` of one kind."""

    def __init__(
        self,
        kind: str,
        values: Sequence[tuple[float, ...]],
        key_times: Sequence[float],
        discrete: bool = False,
    ) -> None:
        self.kind = kind.lower()
        self.values = list(values)
        self.key_times = list(key_times)
        self.discrete = discrete

    def value_at(self, u: float) -> tuple[float, ...]:
        if len(self.values) == 1:
            return self.values[0]
        i, t = segment_index(self.key_times, u)
        if self.discrete:
            return self.values[i + 1] if t >= 1.0 else self.values[i]
        return lerp_values(self.values[i], self.values[i + 1], t)

    def at(self, u: float) -> AffineTransform:
        return op_to_affine(self.kind, self.value_at(u))

    def sample_fractions(self, config: EngineConfig) -> list[float]:
        if self.discrete or len(self.values) < 2:
            return _segment_fractions(self.key_times, [0] * len(self.values))
        steps = []
        for a, b in zip(self.values, self.values[1:]):
            if self.kind in _ANGLE_OPS:
                steps.append(steps_for_sweep(b[0] - a[0], config.max_angle_step_deg,
                                             config.samples_per_segment))
            else:
                steps.append(config.samples_per_segment)
        return _segment_fractions(self.key_times, steps)


class MotionTrack:
    """Position (and optionally heading) along a motion path."""

    def __init__(self, path: Path, auto_rotate: bool, rotate_offset: float) -> None:
        self.path = path
        self.auto_rotate = auto_rotate
        self.rotate_offset = rotate_offset

    def at(self, u: float) -> AffineTransform:
        x, y = point_at(self.path, u)
        angle = self.rotate_offset
        if self.auto_rotate:
            angle += tangent_angle_at(self.path, u)
        move = AffineTransform.translate(x, y)
        if angle == 0:
            return move
        return move.compose(AffineTransform.rotate(angle))

    def sample_fractions(self, config: EngineConfig) -> list[float]:
        n = len(self.path)
        fractions = {float(u) for u in np.linspace(0.0, 1.0, config.motion_samples)}
        # Segment joints carry the exact vertex positions
        fractions.update(i / n for i in range(n + 1))
        if self.auto_rotate:
            fractions.update(i / n - _JUMP_EPS for i in range(1, n + 1))
        return sorted(fractions)


def _ops_compatible(a: Sequence[TransformOp], b: Sequence[TransformOp]) -> bool:
    return len(a) == len(b) and all(
        x.name == y.name and len(x.args) == len(y.args) for x, y in zip(a, b)
    )


class KeyframesTrack:
    """CSS ``@keyframes`` transform animation applied about a transform origin."""

    def __init__(self, offsets: Sequence[float], frames: Sequence[Sequence[TransformOp]],
                 origin: tuple[float, float]) -> None:
        self.key_times = list(offsets)
        self.frames = [list(f) for f in frames]
        self.origin = origin

    def _ops_at(self, u: float) -> list[TransformOp]:
        if len(self.frames) == 1:
            return self.frames[0]
        i, t = segment_index(self.key_times, u)
        a, b = self.frames[i], self.frames[i + 1]
        if not _ops_compatible(a, b):
            # Mismatched function lists only visit their endpoints
            return b if t >= 0.5 else a
        return [TransformOp(x.name, lerp_values(x.args, y.args, t)) for x, y in zip(a, b)]

    def at(self, u: float) -> AffineTransform:
        m = AffineTransform()
        for op in self._ops_at(u):
            m = m.compose(op.to_affine())
        ox, oy = self.origin
        if ox == 0 and oy == 0:
            return m
        return AffineTransform.translate(ox, oy).compose(m).compose(AffineTransform.translate(-ox, -oy))

    def sample_fractions(self, config: EngineConfig) -> list[float]:
        steps = []
        for a, b in zip(self.frames, self.frames[1:]):
            if not _ops_compatible(a, b):
                steps.append(1)
                continue
            sweep = max(
                (abs(y.args[0] - x.args[0]) for x, y in zip(a, b) if x.name in _ANGLE_OPS),
                default=0.0,
            )
            steps.append(steps_for_sweep(sweep, config.max_angle_step_deg, config.samples_per_segment))
        return _segment_fractions(self.key_times, steps)


Track = TransformTrack | MotionTrack | KeyframesTrack


@dataclass(frozen=True)
class EnvelopePoses:
    """Everything one animation can do to its element.

    ``composition`` is ``"replace"``, ``"additive"``, ``"motion"`` or
    ``"attribute"``. When ``includes_base_pose`` is set the animation may never
    run, so the element's un-animated state stays a candidate. Animations
    with equal ``activation`` keys start and stop together; None means the
    animation toggles on its own.
    """

    index: int
    composition: str
    includes_base_pose: bool
    fractions: tuple[float, ...] = ()
    transform_poses: tuple[AffineTransform, ...] = ()
    attribute_poses: tuple[Box, ...] = ()
    track: Track | None = field(default=None, compare=False)
    activation: tuple[float, float | None] | None = None


@dataclass(frozen=True)
class SamplingInput:
    element_id: str
    base_box: Box
    geometry: ShapeGeometry | None = None
    paths: Mapping[str, str] = field(default_factory=dict)
    config: EngineConfig = field(default_factory=EngineConfig)


# --- attribute animations ---

def _render_padding(base: Box, geometric: Box | None) -> Margins:
    """What the rendered box adds around the bare shape (stroke, markers)."""
    if geometric is None:
        return Margins()
    return Margins(
        max(0.0, geometric.x - base.x),
        max(0.0, geometric.y - base.y),
        max(0.0, base.max_x - geometric.max_x),
        max(0.0, base.max_y - geometric.max_y),
    )


def _adjust_box(base: Box, name: str, value: KeyframeValue) -> Box | None:
    """Base box with one attribute changed, for elements without shape geometry."""
    if name == "points":
        text = value if isinstance(value, str) else " ".join(map(str, value))
        pts = parse_point_list(text)
        if not pts:
            return None
        xs, ys = [p[0] for p in pts], [p[1] for p in pts]
        return Box.from_corners(min(xs), min(ys), max(xs), max(ys))

    if isinstance(value, str) or not value:
        return None
    v = value[0]
    cx, cy = base.center
    if name == "x":
        return Box(v, base.y, base.width, base.height)
    if name == "y":
        return Box(base.x, v, base.width, base.height)
    if name == "width":
        return Box(base.x, base.y, max(0.0, v), base.height)
    if name == "height":
        return Box(base.x, base.y, base.width, max(0.0, v))
    if name == "cx":
        return Box(v - base.width / 2, base.y, base.width, base.height)
    if name == "cy":
        return Box(base.x, v - base.height / 2, base.width, base.height)
    if name == "r":
        r = max(0.0, v)
        return Box(cx - r, cy - r, 2 * r, 2 * r)
    if name == "rx":
        r = max(0.0, v)
        return Box(cx - r, base.y, 2 * r, base.height)
    if name == "ry":
        r = max(0.0, v)
        return Box(base.x, cy - r, base.width, 2 * r)
    if name == "stroke-width":
        return base.expand(Margins.uniform(max(0.0, v) / 2))
    if name in ("x1", "x2"):
        return base.union(Box(v, base.y, 0.0, base.height))
    if name in ("y1", "y2"):
        return base.union(Box(base.x, v, base.width, 0.0))
    return None


def _geometry_value(name: str, value: KeyframeValue) -> float | str | None:
    if isinstance(value, str):
        return value
    if name == "points":
        return " ".join(map(str, value))
    return value[0] if value else None


def _path_morph_boxes(anim: AttributeAnimation, inp: SamplingInput, diagnostics: list[Diagnostic]) -> list[Box]:
    paths = [load_path(v, diagnostics) for v in anim.values if isinstance(v, str)]
    segments = inp.config.curve_segments
    boxes = [b for b in (bounds_of(p, curve_segments=segments) for p in paths) if b is not None]
    if anim.calc_mode != "discrete":
        n = inp.config.samples_per_segment
        for a, b in zip(paths, paths[1:]):
            for j in range(1, n + 1):
                mid = interpolate_paths(a, b, j / (n + 1))
                if mid is None:
                    break
                box = bounds_of(mid, curve_segments=segments)
                if box is not None:
                    boxes.append(box)

    stroke = 0.0
    if inp.geometry is not None:
        stroke = to_length(inp.geometry.attributes.get("stroke-width"), 0.0)
    if stroke > 0:
        boxes = [b.expand(Margins.uniform(stroke / 2)) for b in boxes]
    return boxes


def attribute_boxes(anim: AttributeAnimation, inp: SamplingInput,
                    diagnostics: list[Diagnostic]) -> list[Box]:
    """Candidate local boxes for each keyframe of a geometric attribute animation."""
    name = anim.attribute_name.lower()
    if name not in GEOMETRIC_ATTRIBUTES:
        return []
    if name == "d":
        return _path_morph_boxes(anim, inp, diagnostics)

    boxes: list[Box] = []
    if inp.geometry is not None:
        segments = inp.config.curve_segments
        padding = _render_padding(inp.base_box, shape_bounds(inp.geometry, segments))
        for value in anim.values:
            gv = _geometry_value(name, value)
            if gv is None:
                continue
            box = shape_bounds(inp.geometry.with_attribute(name, gv), segments)
            if box is not None:
                boxes.append(box.expand(padding))
        return boxes

    for value in anim.values:
        box = _adjust_box(inp.base_box, name, value)
        if box is not None:
            boxes.append(box)
    return boxes


# --- track construction ---

def _transform_track(anim: TransformAnimation, diagnostics: list[Diagnostic]) -> TransformTrack | None:
    kind = anim.normalized_kind
    if kind not in TRANSFORM_KINDS:
        diagnostics.append(Diagnostic(DiagnosticKind.UNSUPPORTED_ANIMATION,
                                      f"Unknown animateTransform type: {anim.kind}"))
        return None
    values = []
    for v in anim.values:
        try:
            values.append(normalize_transform_value(kind, v))
        except MalformedTransformSyntax as e:
            diagnostics.append(Diagnostic(DiagnosticKind.MALFORMED_TRANSFORM, str(e)))
    if not values:
        return None
    key_times = anim.key_times if len(values) == len(anim.values) else None
    return TransformTrack(
        kind,
        values,
        resolve_key_times(values, key_times, anim.calc_mode),
        discrete=anim.calc_mode == "discrete",
    )


def _motion_track(anim: MotionAnimation, inp: SamplingInput,
                  diagnostics: list[Diagnostic]) -> MotionTrack | None:
    if anim.path_data:
        path = load_path(anim.path_data, diagnostics)
    elif anim.points:
        path = path_from_points(list(anim.points))
    elif anim.mpath_ref:
        d = inp.paths.get(anim.mpath_ref)
        if d is None:
            diagnostics.append(Diagnostic(DiagnosticKind.MISSING_REFERENCE,
                                          f"mpath target not found: {anim.mpath_ref}"))
            return None
        path = load_path(d, diagnostics)
    else:
        return None
    if len(path) == 0:
        return None
    return MotionTrack(path, anim.auto_rotate, anim.rotate_offset)


def _keyframes_track(anim: KeyframesAnimation, diagnostics: list[Diagnostic]) -> KeyframesTrack | None:
    offsets, frames = [], []
    for offset, text in sorted(anim.keyframes, key=lambda kf: kf[0]):
        ops, issues = parse_operations(text)
        for issue in issues:
            diagnostics.append(Diagnostic(DiagnosticKind.MALFORMED_TRANSFORM, issue))
        offsets.append(min(max(offset, 0.0), 1.0))
        frames.append(ops)
    if not frames:
        return None
    return KeyframesTrack(offsets, frames, anim.origin)


def sample_animation(
    anim: AnimationDescriptor,
    index: int,
    inp: SamplingInput,
    diagnostics: list[Diagnostic],
) -> EnvelopePoses | None:
    """Pose set of one animation, or None when it contributes nothing."""
    try:
        timing = resolve_timing(anim.timing)
    except UnsupportedTimingSyntax as e:
        logger.warning("Element %s animation %d: %s", inp.element_id, index, e)
        diagnostics.append(Diagnostic(DiagnosticKind.UNSUPPORTED_TIMING, str(e)))
        return None
    includes_base = not isinstance(timing, Definite)

    if isinstance(anim, AttributeAnimation):
        boxes = attribute_boxes(anim, inp, diagnostics)
        if not boxes:
            return None
        return EnvelopePoses(index, "attribute", includes_base, attribute_poses=tuple(boxes))

    if isinstance(anim, TransformAnimation):
        track = _transform_track(anim, diagnostics)
        composition = "additive" if anim.additive else "replace"
    elif isinstance(anim, MotionAnimation):
        track = _motion_track(anim, inp, diagnostics)
        composition = "motion"
    elif isinstance(anim, KeyframesAnimation):
        track = _keyframes_track(anim, diagnostics)
        composition = "replace"
    else:
        raise TypeError(f"Unknown animation descriptor: {type(anim).__name__}")

    if track is None:
        return None
    fractions = track.sample_fractions(inp.config)
    return EnvelopePoses(
        index,
        composition,
        includes_base,
        fractions=tuple(fractions),
        transform_poses=tuple(track.at(u) for u in fractions),
        track=track,
        activation=(timing.offset_seconds, anim.duration) if isinstance(timing, Definite) else None,
    )
