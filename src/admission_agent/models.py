from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional


class ExamType(str, Enum):
    """Score types used for university placement."""
    TYT = "TYT"
    SAY = "SAY"
    EA = "EA"
    SOZ = "SOZ"
    DIL = "DIL"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ExamType"]:
        """Parse a code such as 'say' or 'SÖZ'; None if unknown."""
        if not value:
            return None
        code = value.strip().upper().replace("Ö", "O").replace("İ", "I")
        try:
            return cls(code)
        except ValueError:
            return None


class OwnershipKind(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class InstructionLanguage(str, Enum):
    NATIVE = "native"
    FOREIGN = "foreign"
    PARTIAL_FOREIGN = "partial_foreign"


@dataclass(frozen=True)
class Institution:
    id: int
    name: str
    city: Optional[str] = None
    ownership: OwnershipKind = OwnershipKind.PUBLIC
    aliases: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Program:
    id: int
    institution_id: int
    name: str
    faculty: Optional[str] = None
    language: InstructionLanguage = InstructionLanguage.NATIVE
    aliases: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ScoreRecord:
    """
    Historical placement data for one program, year and exam type.

    Ranks count from the top, so the base (worst admitted) rank is the larger
    number.
    """
    program_id: int
    year: int
    exam_type: ExamType
    base_score: float
    ceiling_score: float
    base_rank: int
    ceiling_rank: int
    quota: int

    def __post_init__(self):
        if self.base_score <= 0:
            raise ValueError(f"Base score must be positive, got {self.base_score}")
        if self.base_score > self.ceiling_score:
            raise ValueError(
                f"Base score {self.base_score} exceeds ceiling score {self.ceiling_score}"
            )
        if self.base_rank < self.ceiling_rank:
            raise ValueError(
                f"Base rank {self.base_rank} is better than ceiling rank {self.ceiling_rank}"
            )
        if self.quota < 0:
            raise ValueError(f"Quota cannot be negative, got {self.quota}")

    @property
    def spread(self) -> float:
        return self.ceiling_score - self.base_score


# Question counts per subject label; used when coefficient data omits them.
DEFAULT_QUESTION_COUNTS = {
    "Türkçe": 40,
    "Sosyal Bilimler": 20,
    "Temel Matematik": 40,
    "Fen Bilimleri": 20,
    "Matematik": 40,
    "Fizik": 14,
    "Kimya": 13,
    "Biyoloji": 13,
    "Edebiyat": 24,
    "Tarih-1": 10,
    "Coğrafya-1": 6,
    "Tarih-2": 11,
    "Coğrafya-2": 11,
    "Felsefe Grubu": 12,
    "Din Kültürü": 6,
    "Yabancı Dil": 80,
}


@dataclass(frozen=True)
class NetCoefficient:
    exam_type: ExamType
    year: int
    subject: str
    points_per_correct: float
    question_count: Optional[int] = None

    def __post_init__(self):
        if self.points_per_correct <= 0:
            raise ValueError(
                f"Coefficient for {self.subject} must be positive, got {self.points_per_correct}"
            )
        if self.question_count is None:
            object.__setattr__(self, "question_count", DEFAULT_QUESTION_COUNTS.get(self.subject, 40))
        elif self.question_count <= 0:
            raise ValueError(f"Question count for {self.subject} must be positive")

    @property
    def max_points(self) -> float:
        return self.points_per_correct * self.question_count
