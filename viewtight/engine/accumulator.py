"""Coordinate system accumulator.

Folds an element's ancestor chain, root first, into one transform. Nested
viewports contribute their viewBox mapping; ``<use>`` references are expanded
in place through the definition table. A reference that is already being
expanded further up the chain is a cycle and aborts the run.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from viewtight.engine.records import (
    ChainEntry,
    DefinitionTable,
    ElementRecord,
    UseReference,
    ViewportDescriptor,
)
from viewtight.errors import Diagnostic, DiagnosticKind, IndirectionCycleError
from viewtight.utils.affine import AffineTransform
from viewtight.utils.geometry import Box
from viewtight.utils.transform_parser import aspect_ratio_transform, parse_transform

logger = logging.getLogger(__name__)


def viewbox_mapping(
    view_box: Box,
    width: float | None,
    height: float | None,
    preserve_aspect_ratio: str | None,
) -> AffineTransform:
    """Map viewBox user space into a viewport of ``width`` x ``height``.

    A missing dimension falls back to the viewBox's own size.
    """
    w = view_box.width if width is None else width
    h = view_box.height if height is None else height
    fit = aspect_ratio_transform(w, h, view_box.width, view_box.height, preserve_aspect_ratio)
    return fit.to_affine().compose(AffineTransform.translate(-view_box.x, -view_box.y))


def viewport_transform(vp: ViewportDescriptor) -> AffineTransform:
    anchor = AffineTransform.translate(vp.x, vp.y)
    if vp.view_box is None:
        return anchor
    return anchor.compose(viewbox_mapping(vp.view_box, vp.width, vp.height, vp.preserve_aspect_ratio))


def _expand_use(
    ref: UseReference,
    definitions: DefinitionTable,
    active: list[str],
    diagnostics: list[Diagnostic],
) -> AffineTransform:
    if ref.ref_id in active:
        raise IndirectionCycleError(active + [ref.ref_id])

    result = AffineTransform.translate(ref.x, ref.y)
    symbol = definitions.symbols.get(ref.ref_id)
    if symbol is None:
        logger.warning("Reference target not found: %s", ref.ref_id)
        diagnostics.append(Diagnostic(DiagnosticKind.MISSING_REFERENCE,
                                      f"Reference target not found: {ref.ref_id}"))
        return result

    if symbol.view_box is not None:
        result = result.compose(viewbox_mapping(
            symbol.view_box, ref.width, ref.height, symbol.preserve_aspect_ratio,
        ))
    return result.compose(fold_chain(symbol.entries, definitions, diagnostics, active + [ref.ref_id]))


def fold_chain(
    chain: Sequence[ChainEntry],
    definitions: DefinitionTable | None = None,
    diagnostics: list[Diagnostic] | None = None,
    active: list[str] | None = None,
) -> AffineTransform:
    """Cumulative transform of a root-to-leaf chain."""
    definitions = definitions or DefinitionTable()
    diagnostics = diagnostics if diagnostics is not None else []
    # References enclosing the current position; entries later in the chain are nested inside them
    active = list(active or [])

    running = AffineTransform()
    for entry in chain:
        if isinstance(entry, AffineTransform):
            step = entry
        elif isinstance(entry, str):
            step = parse_transform(entry, diagnostics)
        elif isinstance(entry, ViewportDescriptor):
            step = viewport_transform(entry)
        elif isinstance(entry, UseReference):
            step = _expand_use(entry, definitions, active, diagnostics)
            active.append(entry.ref_id)
        else:
            raise TypeError(f"Unknown chain entry: {type(entry).__name__}")
        running = running.compose(step)
    return running


def own_transform(record: ElementRecord, diagnostics: list[Diagnostic] | None = None) -> AffineTransform:
    t = record.transform
    if t is None:
        return AffineTransform()
    if isinstance(t, AffineTransform):
        return t
    return parse_transform(t, diagnostics)


def cumulative_transform(
    record: ElementRecord,
    definitions: DefinitionTable | None = None,
    diagnostics: list[Diagnostic] | None = None,
) -> AffineTransform:
    """Ancestors then the element's own transform."""
    ancestors = fold_chain(record.ancestor_chain, definitions, diagnostics)
    return ancestors.compose(own_transform(record, diagnostics))
