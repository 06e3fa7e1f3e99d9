"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from viewtight.models.requests import BoxModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    stages_registered: int = 0


class DiagnosticModel(BaseModel):
    kind: str
    message: str
    element_id: str | None = None


class ElementDebugModel(BaseModel):
    id: str
    included: bool
    box: BoxModel | None = None
    reason: str | None = None
    pose_count: int = 1
    margins: list[float] = Field(default_factory=list, description="left, top, right, bottom")
    transform: list[float] = Field(default_factory=list, description="a, b, c, d, e, f")


class EnvelopeResponse(BaseModel):
    envelope: BoxModel
    viewport: BoxModel
    viewbox: str = Field(..., description="Buffered viewport formatted as a viewBox attribute")
    savings_percentage: float | None = None
    elements: list[ElementDebugModel] = Field(default_factory=list)
    diagnostics: list[DiagnosticModel] = Field(default_factory=list)
    processing_time_ms: float = 0.0
