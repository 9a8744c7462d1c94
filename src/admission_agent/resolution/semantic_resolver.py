"""
Core abstractions for semantic resolution.

Defines the matcher protocol and the ranked result types for entity
normalization.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ..models import Institution, Program

Entity = Union[Institution, Program]


@dataclass(frozen=True)
class MatchScore:
    """Best score a matcher found for one entity's name variants."""
    score: float
    strategy: str
    variant: Optional[str] = None

    def __post_init__(self):
        """Validate score."""
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Score must be between 0.0 and 1.0, got {self.score}")


class NameMatcher(ABC):
    """
    Protocol for name matching strategies.

    Both query and variants are expected to be normalized already.
    """
    strategy: str = "none"

    @abstractmethod
    def match(self, query: str, variants: Sequence[str]) -> MatchScore:
        """
        Score a query against the name variants of one entity.

        :param query: Normalized mention text
        :param variants: Normalized canonical name and aliases
        :return: MatchScore with the best variant
        """
        pass


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Candidate:
    """
    A ranked catalog entity for a mention.

    Attributes:
        entity: Institution or Program
        label: Display name used in clarification prompts
        score: Similarity between 0.0 and 1.0
        strategy: Matcher that produced the score ("exact", "containment", "fuzzy")
    """
    entity: Entity
    label: str
    score: float
    strategy: str

    @property
    def entity_id(self) -> int:
        return self.entity.id

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.label, "score": round(self.score, 3)}


@dataclass(frozen=True)
class ResolutionResult:
    """
    Immutable, ranked result of resolving one mention.

    Candidates are sorted by descending score; ties keep a stable
    alphabetical order so results are reproducible.
    """
    query: str
    status: ResolutionStatus
    candidates: Tuple[Candidate, ...] = ()

    @property
    def best(self) -> Optional[Candidate]:
        return self.candidates[0] if self.candidates else None

    @property
    def confidence(self) -> float:
        return self.best.score if self.best else 0.0

    @property
    def is_resolved(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED

    @property
    def entity(self) -> Optional[Entity]:
        """Resolved entity, only when the status is resolved."""
        return self.best.entity if self.is_resolved else None

    @classmethod
    def not_found(cls, query: str) -> "ResolutionResult":
        return cls(query=query, status=ResolutionStatus.NOT_FOUND)
