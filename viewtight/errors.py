"""Error taxonomy and the diagnostics side channel.

Recoverable conditions (malformed transform text, malformed path data,
unsupported timing syntax, missing references) are caught where they occur,
logged, and recorded as a ``Diagnostic``. Recovery always keeps or widens
bounds. Fatal conditions (indirection cycles, stages that raise) abort the run.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class EnvelopeError(Exception):
    """Base class for envelope computation errors."""


class FatalEnvelopeError(EnvelopeError):
    """Aborts the whole run; never swallowed by the pipeline."""


class MalformedTransformSyntax(EnvelopeError):
    pass


class MalformedPathData(EnvelopeError):
    pass


class UnsupportedTimingSyntax(EnvelopeError):
    pass


class IndirectionCycleError(FatalEnvelopeError):
    def __init__(self, path: list[str]) -> None:
        self.path = list(path)
        super().__init__("Reference cycle: " + " -> ".join(self.path))


class StageFailedError(FatalEnvelopeError):
    """A stage raised unexpectedly; its partial results cannot bound the content."""

    def __init__(self, stage_id: str, cause: Exception) -> None:
        self.stage_id = stage_id
        super().__init__(f"Stage {stage_id} failed: {cause}")


class DiagnosticKind(str, enum.Enum):
    MALFORMED_TRANSFORM = "MALFORMED_TRANSFORM"
    MALFORMED_PATH = "MALFORMED_PATH"
    UNSUPPORTED_TIMING = "UNSUPPORTED_TIMING"
    MISSING_REFERENCE = "MISSING_REFERENCE"
    UNSUPPORTED_ANIMATION = "UNSUPPORTED_ANIMATION"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    element_id: str | None = None

    def for_element(self, element_id: str) -> Diagnostic:
        return Diagnostic(self.kind, self.message, element_id)
