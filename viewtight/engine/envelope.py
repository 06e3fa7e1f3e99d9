"""Public entry point: the content envelope of a set of element records."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from viewtight.engine.config import EngineConfig
from viewtight.engine.context import ElementState, EnvelopeContext
from viewtight.engine.pipeline import Pipeline
from viewtight.engine.records import DefinitionTable, ElementRecord
from viewtight.engine.registry import StageRegistry, register_stages
from viewtight.errors import Diagnostic
from viewtight.utils.affine import AffineTransform
from viewtight.utils.geometry import Box, Margins

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementDebug:
    id: str
    included: bool
    box: Box | None
    reason: str | None
    pose_count: int
    margins: Margins
    transform: AffineTransform


@dataclass
class EnvelopeResult:
    envelope: Box
    viewport: Box
    elements: list[ElementDebug] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.envelope.is_degenerate


def _debug(el: ElementState) -> ElementDebug:
    return ElementDebug(
        id=el.id,
        included=el.box is not None,
        box=el.box,
        reason=el.excluded_reason,
        pose_count=el.combined.pose_count if el.combined is not None else 1,
        margins=el.margins,
        transform=el.cumulative,
    )


def compute_content_envelope(
    elements: Iterable[ElementRecord],
    options: EngineConfig | None = None,
    definitions: DefinitionTable | None = None,
    registry: StageRegistry | None = None,
) -> EnvelopeResult:
    """Bounding envelope of everything the elements can ever render.

    Raises ``IndirectionCycleError`` when a reference chain loops back on
    itself and ``StageFailedError`` when a stage raises unexpectedly; every
    other malformed input is reported in ``diagnostics``.
    """
    if registry is None:
        register_stages()
    ctx = EnvelopeContext.from_records(elements, definitions, options)
    Pipeline(registry).run(ctx)

    return EnvelopeResult(
        envelope=ctx.envelope if ctx.envelope is not None else Box(),
        viewport=ctx.viewport if ctx.viewport is not None else Box(),
        elements=[_debug(el) for el in ctx.elements],
        diagnostics=ctx.diagnostics,
    )
