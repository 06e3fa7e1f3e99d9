"""Shared test fixtures."""

from __future__ import annotations

import pytest

from viewtight.animation.model import AttributeAnimation, TransformAnimation
from viewtight.engine.config import EngineConfig
from viewtight.engine.records import ElementRecord
from viewtight.engine.registry import register_stages
from viewtight.utils.geometry import Box

# 10x10 square at the origin
SQUARE = Box(0.0, 0.0, 10.0, 10.0)

# Quarter turn about the square's centre; diagonal sweeps to 10*sqrt(2)
ROTATION_0_90 = TransformAnimation("rotate", ((0.0, 5.0, 5.0), (90.0, 5.0, 5.0)))

SPINNING_SQUARE = ElementRecord(id="spin", base_bounds=SQUARE, animations=(ROTATION_0_90,))

# Two squares whose union is [0, 0, 110, 110]
SQUARE_A = ElementRecord(id="a", base_bounds=Box(0.0, 0.0, 10.0, 10.0))
SQUARE_B = ElementRecord(id="b", base_bounds=Box(100.0, 100.0, 10.0, 10.0))

# Visible square that an event can hide
FADE_ON_CLICK = ElementRecord(
    id="fade",
    base_bounds=Box(50.0, 50.0, 100.0, 100.0),
    animations=(AttributeAnimation("opacity", ((1.0,), (0.0,)), timing="click"),),
)

# Envelope request body for the API tests
ENVELOPE_REQUEST = {
    "elements": [
        {"id": "a", "base_bounds": {"x": 0, "y": 0, "width": 10, "height": 10}},
        {
            "id": "b",
            "base_bounds": {"x": 0, "y": 0, "width": 10, "height": 10},
            "transform": "translate(100 100)",
        },
    ],
    "buffer_px": 10,
    "original_viewbox": "0 0 200 200",
}


@pytest.fixture(scope="session", autouse=True)
def stages() -> int:
    return register_stages()


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()
