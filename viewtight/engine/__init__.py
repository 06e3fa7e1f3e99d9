"""ViewTight envelope engine."""

from viewtight.engine.registry import Layer, get_registry, register_stages, stage
from viewtight.engine.context import ElementState, EnvelopeContext
from viewtight.engine.pipeline import Pipeline

__all__ = [
    "stage",
    "Layer",
    "get_registry",
    "register_stages",
    "EnvelopeContext",
    "ElementState",
    "Pipeline",
]
