from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .calculation import CalculationResult
from .exceptions import ErrorKind
from .intent import QueryIntent
from .models import ExamType, Institution, Program, ScoreRecord
from .resolution import Candidate, ResolutionMetadata


@dataclass
class ResolvedQuery:
    intent: QueryIntent
    institution: Optional[Institution] = None
    program: Optional[Program] = None
    exam_type: Optional[ExamType] = None
    target_score: Optional[float] = None
    year: Optional[int] = None
    confidence: float = 0.0
    unresolved_slots: List[str] = field(default_factory=list)

    def entities_dict(self) -> Dict[str, Any]:
        entities: Dict[str, Any] = {}
        if self.institution is not None:
            entities["institution"] = self.institution.name
        if self.program is not None:
            entities["program"] = self.program.name
        if self.exam_type is not None:
            entities["examType"] = self.exam_type.value
        if self.target_score is not None:
            entities["targetScore"] = self.target_score
        if self.year is not None:
            entities["year"] = self.year
        return entities


@dataclass
class RecordLookup:
    year: int
    exam_type: ExamType
    base_score: float
    ceiling_score: float
    base_rank: int
    ceiling_rank: int
    quota: int

    @classmethod
    def from_record(cls, record: ScoreRecord) -> "RecordLookup":
        return cls(
            year=record.year,
            exam_type=record.exam_type,
            base_score=record.base_score,
            ceiling_score=record.ceiling_score,
            base_rank=record.base_rank,
            ceiling_rank=record.ceiling_rank,
            quota=record.quota,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "examType": self.exam_type.value,
            "baseScore": self.base_score,
            "ceilingScore": self.ceiling_score,
            "baseRank": self.base_rank,
            "ceilingRank": self.ceiling_rank,
            "quota": self.quota,
        }


@dataclass
class ProgramSummary:
    id: int
    name: str
    institution: str
    faculty: Optional[str]
    language: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "institution": self.institution,
            "faculty": self.faculty,
            "language": self.language,
        }


@dataclass
class Clarification:
    slot: str
    candidates: List[Candidate]
    question: str = ""

    def to_dict(self) -> Dict[str, Any]:
        result = {"slot": self.slot, "candidates": [c.to_dict() for c in self.candidates]}
        if self.question:
            result["question"] = self.question
        return result


@dataclass
class QueryError:
    kind: ErrorKind
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "details": dict(self.details)}


@dataclass
class QueryResponse:
    query: ResolvedQuery
    calculation: Optional[CalculationResult] = None
    lookup: Optional[RecordLookup] = None
    programs: Optional[List[ProgramSummary]] = None
    clarification: Optional[Clarification] = None
    error: Optional[QueryError] = None
    warnings: List[QueryError] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    metadata: Optional[ResolutionMetadata] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.clarification is None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "intent": self.query.intent.value,
            "confidence": round(self.query.confidence, 3),
            "entities": self.query.entities_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
            "suggestions": list(self.suggestions),
            "unresolvedSlots": list(self.query.unresolved_slots),
        }
        if self.calculation is not None:
            result["calculation"] = self.calculation.to_dict()
        if self.lookup is not None:
            result["lookup"] = self.lookup.to_dict()
        if self.programs is not None:
            result["programs"] = [p.to_dict() for p in self.programs]
        if self.clarification is not None:
            result["clarification"] = self.clarification.to_dict()
        if self.error is not None:
            result["error"] = self.error.to_dict()
        if self.metadata is not None:
            result["resolution"] = self.metadata.to_dict()
        return result
