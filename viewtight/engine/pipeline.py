"""Pipeline orchestrator — runs stages in dependency order with input gating."""

from __future__ import annotations

import logging
import time

from viewtight.engine.context import EnvelopeContext
from viewtight.engine.registry import StageRegistry, StageSpec, get_registry
from viewtight.errors import FatalEnvelopeError, StageFailedError

logger = logging.getLogger(__name__)


class Pipeline:
    """Orchestrates the envelope stages.

    Every stage feeds the envelope, so a stage that raises is recorded in
    ``ctx.errors`` and the run is aborted with ``StageFailedError``.
    ``FatalEnvelopeError`` raised by a stage propagates as is.
    """

    def __init__(self, registry: StageRegistry | None = None) -> None:
        self.registry = registry or get_registry()

    def run(self, ctx: EnvelopeContext) -> EnvelopeContext:
        start = time.perf_counter()

        skip_ids = self._gate(ctx)
        ordered = self.registry.resolve_order(skip_ids)

        logger.info(
            "Pipeline: %d stages queued (%d skipped) for %d elements",
            len(ordered),
            len(skip_ids),
            ctx.num_elements,
        )

        for spec in ordered:
            self._run_stage(spec, ctx)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %d/%d stages in %.0fms",
            len(ctx.completed_stages),
            len(ordered),
            total,
        )
        return ctx

    def _run_stage(self, spec: StageSpec, ctx: EnvelopeContext) -> None:
        t0 = time.perf_counter()
        try:
            spec.fn(ctx)
        except FatalEnvelopeError:
            logger.error("  %s aborted the run", spec.id)
            raise
        except Exception as e:
            ctx.errors[spec.id] = str(e)
            logger.exception("  %s FAILED", spec.id)
            raise StageFailedError(spec.id, e) from e
        ctx.completed_stages.add(spec.id)
        logger.debug("  %s completed in %.1fms", spec.id, (time.perf_counter() - t0) * 1000)

    def _gate(self, ctx: EnvelopeContext) -> set[str]:
        """Skip stages whose inputs no element has.

        - No animations: skip sampling and combination
        - No effects: skip effect expansion
        """
        present: set[str] = set()
        if ctx.has_animations:
            present.add("animations")
        if ctx.has_effects:
            present.add("effects")
        return {s.id for s in self.registry.all() if s.requires - present}
