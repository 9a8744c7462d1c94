"""
Resolution metadata for tracking how each slot was filled.

Used to expose resolution information in responses for explainability.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from .semantic_resolver import ResolutionResult


@dataclass(frozen=True)
class SlotResolution:
    """How one slot got its value in the current turn."""
    slot: str
    mention: str
    status: str
    resolved_name: Optional[str] = None
    confidence: float = 0.0
    strategy: Optional[str] = None

    @classmethod
    def from_result(cls, slot: str, result: ResolutionResult) -> "SlotResolution":
        best = result.best
        return cls(
            slot=slot,
            mention=result.query,
            status=result.status.value,
            resolved_name=best.label if best and result.is_resolved else None,
            confidence=result.confidence,
            strategy=best.strategy if best else None,
        )

    def to_dict(self) -> dict:
        result = {
            "slot": self.slot,
            "mention": self.mention,
            "status": self.status,
            "confidence": round(self.confidence, 3),
        }
        if self.resolved_name:
            result["resolvedName"] = self.resolved_name
        if self.strategy:
            result["strategy"] = self.strategy
        return result


@dataclass
class ResolutionMetadata:
    """
    Metadata about query resolution for explainability.

    Tracks:
    - The normalized query
    - Per-slot resolution outcome and confidence
    - Slots carried over from the conversation
    """
    original_query: str
    normalized_query: str
    slots: List[SlotResolution] = field(default_factory=list)
    carried_over: List[str] = field(default_factory=list)

    def add(self, slot: str, result: ResolutionResult) -> None:
        self.slots.append(SlotResolution.from_result(slot, result))

    def confidence(self) -> Optional[float]:
        """Lowest confidence among resolved slots; None if nothing was resolved."""
        resolved = [s.confidence for s in self.slots if s.status == "resolved"]
        return min(resolved) if resolved else None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        result = {
            "originalQuery": self.original_query,
            "normalizedQuery": self.normalized_query,
        }

        if self.slots:
            result["slots"] = [s.to_dict() for s in self.slots]

        if self.carried_over:
            result["carriedOver"] = list(self.carried_over)

        return result
