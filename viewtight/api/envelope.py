"""POST /api/envelope — content envelope and tightened viewBox."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException

from viewtight.config import Settings
from viewtight.dependencies import get_settings
from viewtight.engine.envelope import ElementDebug, compute_content_envelope
from viewtight.errors import IndirectionCycleError, StageFailedError
from viewtight.models.requests import BoxModel, EnvelopeRequest
from viewtight.models.responses import DiagnosticModel, ElementDebugModel, EnvelopeResponse
from viewtight.svg.viewbox import area_savings, format_viewbox, parse_viewbox

logger = logging.getLogger(__name__)

router = APIRouter()


def _element_model(el: ElementDebug) -> ElementDebugModel:
    t = el.transform
    m = el.margins
    return ElementDebugModel(
        id=el.id,
        included=el.included,
        box=BoxModel.from_box(el.box) if el.box is not None else None,
        reason=el.reason,
        pose_count=el.pose_count,
        margins=[m.left, m.top, m.right, m.bottom],
        transform=[t.a, t.b, t.c, t.d, t.e, t.f],
    )


@router.post("/envelope", response_model=EnvelopeResponse)
def envelope(req: EnvelopeRequest, cfg: Settings = Depends(get_settings)) -> EnvelopeResponse:
    start = time.perf_counter()

    try:
        config = cfg.engine_config(buffer_px=req.buffer_px, samples_per_segment=req.samples_per_segment)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    records = [el.to_record() for el in req.elements]
    try:
        result = compute_content_envelope(records, config, req.definitions())
    except IndirectionCycleError as e:
        logger.warning("Rejected request: %s", e)
        raise HTTPException(status_code=422, detail=str(e)) from e
    except StageFailedError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    savings = None
    original = parse_viewbox(req.original_viewbox)
    if original is not None and not result.is_empty:
        savings = round(area_savings(original, result.viewport), 2)

    return EnvelopeResponse(
        envelope=BoxModel.from_box(result.envelope),
        viewport=BoxModel.from_box(result.viewport),
        viewbox=format_viewbox(result.viewport),
        savings_percentage=savings,
        elements=[_element_model(el) for el in result.elements],
        diagnostics=[
            DiagnosticModel(kind=d.kind.value, message=d.message, element_id=d.element_id)
            for d in result.diagnostics
        ],
        processing_time_ms=round((time.perf_counter() - start) * 1000, 1),
    )
