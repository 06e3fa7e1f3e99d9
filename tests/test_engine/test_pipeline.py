"""Tests for the pipeline orchestrator."""

import pytest

from tests.conftest import SPINNING_SQUARE, SQUARE_A
from viewtight.engine.context import EnvelopeContext
from viewtight.engine.pipeline import Pipeline
from viewtight.engine.registry import Layer, StageRegistry, StageSpec
from viewtight.errors import IndirectionCycleError, StageFailedError


def test_pipeline_runs_stages():
    reg = StageRegistry()
    results = []

    def s1(ctx: EnvelopeContext) -> None:
        results.append("s1")

    def s2(ctx: EnvelopeContext) -> None:
        results.append("s2")

    reg.register(StageSpec(id="S0.02", layer=Layer.COORDINATES, fn=s2, dependencies=["S0.01"]))
    reg.register(StageSpec(id="S0.01", layer=Layer.COORDINATES, fn=s1))

    ctx = Pipeline(registry=reg).run(EnvelopeContext())

    assert results == ["s1", "s2"]
    assert ctx.completed_stages == {"S0.01", "S0.02"}


def test_failing_stage_aborts_run():
    reg = StageRegistry()
    ran = []

    def fail(ctx: EnvelopeContext) -> None:
        raise ValueError("test error")

    reg.register(StageSpec(id="S0.01", layer=Layer.COORDINATES, fn=fail))
    reg.register(StageSpec(id="S4.01", layer=Layer.AGGREGATION, fn=lambda ctx: ran.append(True)))

    ctx = EnvelopeContext()
    with pytest.raises(StageFailedError, match="S0.01") as exc:
        Pipeline(registry=reg).run(ctx)

    assert exc.value.stage_id == "S0.01"
    assert "test error" in ctx.errors["S0.01"]
    assert "S0.01" not in ctx.completed_stages
    # Later stages never see half-built state
    assert ran == []


def test_fatal_error_aborts_run():
    reg = StageRegistry()

    def cycle(ctx: EnvelopeContext) -> None:
        raise IndirectionCycleError(["a", "b", "a"])

    reg.register(StageSpec(id="S0.01", layer=Layer.COORDINATES, fn=cycle))

    with pytest.raises(IndirectionCycleError, match="a -> b -> a"):
        Pipeline(registry=reg).run(EnvelopeContext())


def test_gating_skips_stages_without_inputs():
    reg = StageRegistry()
    ran = []
    reg.register(StageSpec(id="S1.01", layer=Layer.ANIMATION, fn=lambda ctx: ran.append("anim"),
                           requires={"animations"}))
    reg.register(StageSpec(id="S3.01", layer=Layer.EFFECTS, fn=lambda ctx: ran.append("fx"),
                           requires={"effects"}))

    Pipeline(registry=reg).run(EnvelopeContext.from_records([SQUARE_A]))
    assert ran == []

    Pipeline(registry=reg).run(EnvelopeContext.from_records([SPINNING_SQUARE]))
    assert ran == ["anim"]


def test_context_lookup_and_diagnostics():
    ctx = EnvelopeContext.from_records([SQUARE_A, SPINNING_SQUARE])
    assert ctx.num_elements == 2
    assert ctx.get_element("spin").is_animated
    assert ctx.get_element("missing") is None
    assert ctx.has_animations and not ctx.has_effects
    assert ctx.diagnostics == []
