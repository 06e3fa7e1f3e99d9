"""Transform list and preserveAspectRatio parsing.

Transform lists are folded left to right, so ``"translate(10) scale(2)"``
equals ``translate(10) . scale(2)``. Function names are case-insensitive and
CSS units are accepted (``px`` for lengths, ``deg``/``rad``/``grad``/``turn``
for angles). A function that cannot be understood contributes identity and is
reported; parsing never raises to the caller.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass

from viewtight.errors import Diagnostic, DiagnosticKind, MalformedTransformSyntax
from viewtight.utils.affine import AffineTransform
from viewtight.utils.math_helpers import to_degrees

logger = logging.getLogger(__name__)

_FUNCTION_RE = re.compile(r"([A-Za-z][A-Za-z0-9]*)\s*\(([^)]*)\)")
_ARG_RE = re.compile(r"([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)([a-zA-Z%]*)")

# name -> allowed argument counts
_ARITY: dict[str, tuple[int, ...]] = {
    "translate": (1, 2),
    "translatex": (1,),
    "translatey": (1,),
    "scale": (1, 2),
    "scalex": (1,),
    "scaley": (1,),
    "rotate": (1, 3),
    "skewx": (1,),
    "skewy": (1,),
    "matrix": (6,),
}

# Functions whose first argument is an angle
_ANGLE_FUNCTIONS = {"rotate", "skewx", "skewy"}
# Functions whose arguments are unitless numbers
_UNITLESS_FUNCTIONS = {"scale", "scalex", "scaley", "matrix"}


@dataclass(frozen=True)
class TransformOp:
    """One parsed transform function, with angles in degrees and lengths in px."""

    name: str
    args: tuple[float, ...]

    def to_affine(self) -> AffineTransform:
        return op_to_affine(self.name, self.args)


def op_to_affine(name: str, args: tuple[float, ...]) -> AffineTransform:
    """Affine matrix of one transform function. ``name`` is lower-case."""
    if name == "translate":
        return AffineTransform.translate(args[0], args[1] if len(args) > 1 else 0.0)
    if name == "translatex":
        return AffineTransform.translate(args[0], 0.0)
    if name == "translatey":
        return AffineTransform.translate(0.0, args[0])
    if name == "scale":
        return AffineTransform.scale(args[0], args[1] if len(args) > 1 else args[0])
    if name == "scalex":
        return AffineTransform.scale(args[0], 1.0)
    if name == "scaley":
        return AffineTransform.scale(1.0, args[0])
    if name == "rotate":
        if len(args) >= 3:
            return AffineTransform.rotate(args[0], args[1], args[2])
        return AffineTransform.rotate(args[0])
    if name == "skewx":
        return AffineTransform.skew_x(args[0])
    if name == "skewy":
        return AffineTransform.skew_y(args[0])
    if name == "matrix":
        return AffineTransform(*args[:6])
    raise MalformedTransformSyntax(f"Unknown transform function: {name}")


def _parse_args(name: str, raw: str) -> tuple[float, ...]:
    # Numbers may run together without separators: "10-5", "1.5.5", "1e2-3"
    leftover = _ARG_RE.sub(" ", raw).replace(",", " ").split()
    if leftover:
        raise MalformedTransformSyntax(f"Bad argument {leftover[0]!r} in {name}()")

    values: list[float] = []
    for i, m in enumerate(_ARG_RE.finditer(raw)):
        value = float(m.group(1))
        unit = m.group(2).lower()
        if name in _ANGLE_FUNCTIONS and i == 0:
            try:
                value = to_degrees(value, unit)
            except KeyError:
                raise MalformedTransformSyntax(f"Bad angle unit {unit!r} in {name}()") from None
        elif unit and (unit != "px" or name in _UNITLESS_FUNCTIONS):
            raise MalformedTransformSyntax(f"Unsupported unit {unit!r} in {name}()")
        values.append(value)

    if len(values) not in _ARITY[name]:
        raise MalformedTransformSyntax(
            f"{name}() takes {' or '.join(map(str, _ARITY[name]))} arguments, got {len(values)}"
        )
    return tuple(values)


@functools.lru_cache(maxsize=1024)
def parse_operations(text: str) -> tuple[tuple[TransformOp, ...], tuple[str, ...]]:
    """Parse a transform list into operations plus messages for skipped parts."""
    ops: list[TransformOp] = []
    issues: list[str] = []
    if not text or text.strip().lower() == "none":
        return (), ()

    for m in _FUNCTION_RE.finditer(text):
        name = m.group(1).lower()
        if name not in _ARITY:
            issues.append(f"Unknown transform function: {m.group(1)}")
            continue
        try:
            ops.append(TransformOp(name, _parse_args(name, m.group(2))))
        except MalformedTransformSyntax as e:
            issues.append(str(e))

    leftover = _FUNCTION_RE.sub("", text).strip(" ,\t\r\n")
    if leftover:
        issues.append(f"Unparsed transform text: {leftover!r}")

    return tuple(ops), tuple(issues)


def parse_transform(
    text: str | None,
    diagnostics: list[Diagnostic] | None = None,
) -> AffineTransform:
    """Parse a transform list into one matrix.

    Malformed functions contribute identity; each is logged and, when a
    ``diagnostics`` list is given, appended to it.
    """
    if not text:
        return AffineTransform()
    ops, issues = parse_operations(text)
    for issue in issues:
        logger.warning("Malformed transform %r: %s", text, issue)
        if diagnostics is not None:
            diagnostics.append(Diagnostic(DiagnosticKind.MALFORMED_TRANSFORM, issue))
    result = AffineTransform()
    for op in ops:
        result = result.compose(op.to_affine())
    return result


# --- preserveAspectRatio ---

_ALIGNMENTS = {
    "xminymin": ("min", "min"),
    "xmidymin": ("mid", "min"),
    "xmaxymin": ("max", "min"),
    "xminymid": ("min", "mid"),
    "xmidymid": ("mid", "mid"),
    "xmaxymid": ("max", "mid"),
    "xminymax": ("min", "max"),
    "xmidymax": ("mid", "max"),
    "xmaxymax": ("max", "max"),
}


@dataclass(frozen=True)
class AspectRatio:
    align_x: str = "mid"  # "min" | "mid" | "max"; ignored when none
    align_y: str = "mid"
    none: bool = False
    slice: bool = False


@dataclass(frozen=True)
class ViewportFit:
    scale_x: float = 1.0
    scale_y: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def to_affine(self) -> AffineTransform:
        return AffineTransform(a=self.scale_x, d=self.scale_y, e=self.offset_x, f=self.offset_y)


@functools.lru_cache(maxsize=256)
def parse_preserve_aspect_ratio(text: str | None) -> AspectRatio:
    """Parse ``[defer] <align> [meet|slice]``. Unknown tokens keep the defaults."""
    if not text:
        return AspectRatio()
    tokens = text.strip().lower().split()
    if tokens and tokens[0] == "defer":
        tokens = tokens[1:]
    if not tokens:
        return AspectRatio()

    is_slice = len(tokens) > 1 and tokens[1] == "slice"
    if tokens[0] == "none":
        return AspectRatio(none=True, slice=is_slice)
    align = _ALIGNMENTS.get(tokens[0])
    if align is None:
        logger.warning("Unknown preserveAspectRatio alignment %r, using xMidYMid", tokens[0])
        return AspectRatio(slice=is_slice)
    return AspectRatio(align_x=align[0], align_y=align[1], slice=is_slice)


def _offset(alignment: str, slack: float) -> float:
    if alignment == "min":
        return 0.0
    if alignment == "max":
        return slack
    return slack / 2


def aspect_ratio_transform(
    viewport_width: float,
    viewport_height: float,
    content_width: float,
    content_height: float,
    ratio: AspectRatio | str | None = None,
) -> ViewportFit:
    """Scale and offset mapping a ``content`` (viewBox) size into a viewport."""
    if viewport_width <= 0 or viewport_height <= 0 or content_width <= 0 or content_height <= 0:
        return ViewportFit()
    if not isinstance(ratio, AspectRatio):
        ratio = parse_preserve_aspect_ratio(ratio)

    sx = viewport_width / content_width
    sy = viewport_height / content_height
    if ratio.none:
        return ViewportFit(sx, sy, 0.0, 0.0)

    s = max(sx, sy) if ratio.slice else min(sx, sy)
    return ViewportFit(
        s,
        s,
        _offset(ratio.align_x, viewport_width - content_width * s),
        _offset(ratio.align_y, viewport_height - content_height * s),
    )
