"""Tests for API endpoints."""

from __future__ import annotations

import math

import pytest
from fastapi.testclient import TestClient

from viewtight.errors import StageFailedError
from viewtight.main import app
from tests.conftest import ENVELOPE_REQUEST


client = TestClient(app)


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["stages_registered"] == 5


def test_envelope_static():
    response = client.post("/api/envelope", json=ENVELOPE_REQUEST)
    assert response.status_code == 200
    data = response.json()
    assert data["envelope"] == {"x": 0, "y": 0, "width": 110, "height": 110}
    assert data["viewbox"] == "-10.00 -10.00 130.00 130.00"
    assert data["savings_percentage"] == pytest.approx(57.75)
    assert [el["included"] for el in data["elements"]] == [True, True]
    assert data["elements"][1]["transform"] == [1, 0, 0, 1, 100, 100]
    assert data["processing_time_ms"] >= 0


def test_envelope_animated():
    response = client.post("/api/envelope", json={
        "elements": [{
            "id": "spin",
            "base_bounds": {"x": 0, "y": 0, "width": 10, "height": 10},
            "animations": [{
                "element": "animateTransform",
                "attributeName": "transform",
                "type": "rotate",
                "values": "0 5 5; 90 5 5",
                "dur": "2s",
            }],
        }],
        "buffer_px": 0,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["envelope"]["width"] == pytest.approx(10 * math.sqrt(2))
    assert data["savings_percentage"] is None


def test_envelope_css_keyframes_and_filter():
    response = client.post("/api/envelope", json={
        "elements": [{
            "id": "k",
            "base_bounds": {"x": 0, "y": 0, "width": 10, "height": 10},
            "animations": [{
                "element": "keyframes",
                "keyframes": [
                    {"offset": 0, "transform": "translateX(0px)"},
                    {"offset": 1, "transform": "translateX(50px)"},
                ],
            }],
            "effects": [{"kind": "filter", "css": "blur(1px)"}],
        }],
        "buffer_px": 0,
    })
    assert response.status_code == 200
    env = response.json()["envelope"]
    assert (env["x"], env["width"]) == pytest.approx((-3, 66))


def test_envelope_reports_diagnostics():
    response = client.post("/api/envelope", json={
        "elements": [{
            "id": "bad",
            "base_bounds": {"x": 0, "y": 0, "width": 10, "height": 10},
            "transform": "wiggle(1)",
        }],
    })
    assert response.status_code == 200
    diagnostics = response.json()["diagnostics"]
    assert diagnostics[0]["kind"] == "MALFORMED_TRANSFORM"
    assert diagnostics[0]["element_id"] == "bad"


def test_envelope_reference_cycle():
    response = client.post("/api/envelope", json={
        "elements": [{
            "id": "u",
            "base_bounds": {"x": 0, "y": 0, "width": 10, "height": 10},
            "chain": [{"kind": "use", "ref": "#a"}],
        }],
        "symbols": [
            {"id": "a", "entries": [{"kind": "use", "ref": "b"}]},
            {"id": "b", "entries": [{"kind": "use", "ref": "a"}]},
        ],
    })
    assert response.status_code == 422
    assert "a -> b -> a" in response.json()["detail"]


def test_envelope_rejects_negative_buffer():
    response = client.post("/api/envelope", json={**ENVELOPE_REQUEST, "buffer_px": -1})
    assert response.status_code == 422


def test_envelope_stage_failure_is_server_error(monkeypatch):
    def fail(*args, **kwargs):
        raise StageFailedError("S4.01", RuntimeError("fold exploded"))

    monkeypatch.setattr("viewtight.api.envelope.compute_content_envelope", fail)
    response = client.post("/api/envelope", json=ENVELOPE_REQUEST)
    assert response.status_code == 500
    assert "S4.01" in response.json()["detail"]
