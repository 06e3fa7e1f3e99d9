"""EnvelopeContext — the per-run state flowing through all stages.

Per-element results → ElementState
Run-wide results → EnvelopeContext.* (extents, envelope, viewport)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from viewtight.engine.config import EngineConfig
from viewtight.engine.records import DefinitionTable, ElementRecord
from viewtight.errors import Diagnostic
from viewtight.utils.affine import AffineTransform
from viewtight.utils.geometry import Box, Extents, Margins

if TYPE_CHECKING:
    from viewtight.animation.combiner import CombinedPoses
    from viewtight.animation.sampler import EnvelopePoses


@dataclass
class ElementState:
    record: ElementRecord
    # Folded ancestor chain, and the element's own transform attribute
    ancestors: AffineTransform = field(default_factory=AffineTransform)
    own: AffineTransform = field(default_factory=AffineTransform)
    # One entry per animation that contributes poses
    poses: list[EnvelopePoses] = field(default_factory=list)
    combined: CombinedPoses | None = None
    margins: Margins = field(default_factory=Margins)
    # Final contribution in root coordinates; None when excluded
    box: Box | None = None
    excluded_reason: str | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def cumulative(self) -> AffineTransform:
        return self.ancestors.compose(self.own)

    @property
    def is_animated(self) -> bool:
        return bool(self.record.animations)

    def report(self, diagnostics: Iterable[Diagnostic]) -> None:
        self.diagnostics.extend(d.for_element(self.id) for d in diagnostics)


@dataclass
class EnvelopeContext:
    elements: list[ElementState] = field(default_factory=list)
    definitions: DefinitionTable = field(default_factory=DefinitionTable)
    config: EngineConfig = field(default_factory=EngineConfig)

    # --- Aggregation output ---
    extents: Extents = field(default_factory=Extents)
    envelope: Box | None = None
    viewport: Box | None = None

    # --- Pipeline metadata ---
    completed_stages: set[str] = field(default_factory=set)
    errors: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        records: Iterable[ElementRecord],
        definitions: DefinitionTable | None = None,
        config: EngineConfig | None = None,
    ) -> EnvelopeContext:
        return cls(
            elements=[ElementState(record=r) for r in records],
            definitions=definitions or DefinitionTable(),
            config=config or EngineConfig(),
        )

    @property
    def num_elements(self) -> int:
        return len(self.elements)

    @property
    def has_animations(self) -> bool:
        return any(el.record.animations for el in self.elements)

    @property
    def has_effects(self) -> bool:
        return any(el.record.effects for el in self.elements)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [d for el in self.elements for d in el.diagnostics]

    def get_element(self, element_id: str) -> ElementState | None:
        for el in self.elements:
            if el.id == element_id:
                return el
        return None
