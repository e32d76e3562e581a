from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from typingquest.core.config import DetectionConfig
from typingquest.core.layouts import LayoutDescriptor, LayoutRegistry


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of running detection over a typed home-row sample.

    Exactly one state holds: confirmed (``layout`` set), ambiguous
    (``needs_disambiguation`` with several candidates) or unresolved
    (everything empty, keep typing).
    """

    layout: Optional[str] = None
    needs_disambiguation: bool = False
    candidates: Tuple[str, ...] = ()
    family: Optional[str] = None

    @property
    def is_confirmed(self) -> bool:
        return self.layout is not None

    @property
    def is_unresolved(self) -> bool:
        return self.layout is None and not self.candidates

    @classmethod
    def confirmed(cls, layout_id: str) -> "DetectionResult":
        return cls(layout=layout_id, candidates=(layout_id,))

    @classmethod
    def ambiguous(cls, layouts: Sequence[LayoutDescriptor]) -> "DetectionResult":
        families = {layout.family for layout in layouts}
        return cls(
            needs_disambiguation=True,
            candidates=tuple(layout.id for layout in layouts),
            family=families.pop() if len(families) == 1 else None,
        )

    @classmethod
    def unresolved(cls) -> "DetectionResult":
        return cls()


class LayoutDetector:
    """Infers the keyboard layout from the user typing their home row left to right.

    The detector holds no state. Callers own the input buffer and call
    :meth:`detect` again after every change to it, backspace included.
    """

    def __init__(self, registry: LayoutRegistry, config: Optional[DetectionConfig] = None) -> None:
        self._registry = registry
        self._config = config or DetectionConfig()

    @property
    def config(self) -> DetectionConfig:
        return self._config

    def detect(self, buffer: str) -> DetectionResult:
        typed = buffer.lower().strip()
        layouts = self._registry.all()

        exact = [layout for layout in layouts if layout.home_row_signature == typed]
        if len(exact) == 1:
            return DetectionResult.confirmed(exact[0].id)
        if len(exact) > 1:
            return DetectionResult.ambiguous(exact)

        partial = [
            layout
            for layout in layouts
            if layout.home_row_signature.startswith(typed) or typed.startswith(layout.home_row_signature)
        ]
        if len(partial) == 1 and len(typed) >= self._config.min_partial_length:
            return DetectionResult.confirmed(partial[0].id)

        if len(typed) >= self._config.min_scoring_length and layouts:
            scores = [(self.score(typed, layout.home_row_signature), layout) for layout in layouts]
            best = max(score for score, _ in scores)
            if best >= self._config.score_threshold:
                tied = [layout for score, layout in scores if score == best]
                if len(tied) == 1:
                    return DetectionResult.confirmed(tied[0].id)
                return DetectionResult.ambiguous(tied)

        return DetectionResult.unresolved()

    @staticmethod
    def score(typed: str, signature: str) -> int:
        """Count positions where the typed sample agrees with a signature."""
        return sum(1 for a, b in zip(typed, signature) if a == b)

    def possible_layouts(self, buffer: str) -> List[str]:
        """Layouts whose signature still starts with what has been typed so far."""
        typed = buffer.lower().strip()
        return [layout.id for layout in self._registry.all() if layout.home_row_signature.startswith(typed)]

    def layouts_needing_disambiguation(self, family: str) -> List[LayoutDescriptor]:
        return self._registry.by_family(family)
