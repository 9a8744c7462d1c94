"""
Net score calculator.

Turns a program's historical placement scores into a safe target score and
the per-subject correct-answer counts ("nets") needed to reach it.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..config import AdmissionAgentConfig
from ..exceptions import (
    InsufficientHistoricalDataError,
    NoValidCombinationError,
    ScenarioValidationError,
    UnrealisticTargetError,
)
from ..models import ExamType, NetCoefficient, Program, ScoreRecord

if TYPE_CHECKING:
    from .study_plan import StudyPlan

logger = logging.getLogger(__name__)

# Records older than this many years (relative to the latest on file) are low confidence
STALE_AFTER_YEARS = 2
MAX_SCENARIOS = 10


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Competitiveness(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


@dataclass(frozen=True)
class NetBand:
    """Required nets for one subject: min for the target, max for the ceiling."""
    min: float
    max: float
    question_count: int

    def to_dict(self) -> Dict[str, float]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class CalculationResult:
    program_id: int
    exam_type: ExamType
    target_score: float
    safety_margin: float
    required_nets: Dict[str, NetBand]
    based_on_year: int
    base_score: float
    ceiling_score: float
    confidence: ConfidenceLevel
    competitiveness: Competitiveness
    user_target: bool = False
    scenarios: List["CalculationResult"] = field(default_factory=list)
    study_plan: Optional["StudyPlan"] = None

    @property
    def is_low_confidence(self) -> bool:
        return self.confidence == ConfidenceLevel.LOW

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "safeTargetScore": self.target_score,
            "safetyMargin": self.safety_margin,
            "requiredNets": {subject: band.to_dict() for subject, band in self.required_nets.items()},
            "basedOnYear": self.based_on_year,
            "examType": self.exam_type.value,
            "baseScore": self.base_score,
            "ceilingScore": self.ceiling_score,
            "confidenceLevel": self.confidence.value,
            "competitiveness": self.competitiveness.value,
        }
        if self.scenarios:
            result["scenarios"] = [s.to_dict() for s in self.scenarios]
        if self.study_plan is not None:
            result["studyPlan"] = self.study_plan.to_dict()
        return result


class ScenarioRequest(BaseModel):
    """Validated safety margins for a multi-scenario calculation."""
    margins: List[float] = Field(
        min_length=1,
        max_length=MAX_SCENARIOS,
        description="Safety margins as fractions of the base score, each in (0, 1]",
    )

    @field_validator("margins")
    @classmethod
    def check_range(cls, margins: List[float]) -> List[float]:
        for margin in margins:
            if not 0.0 < margin <= 1.0:
                raise ValueError(f"margin {margin} must be in (0, 1]")
        return margins


def validate_margins(margins: Sequence[float]) -> List[float]:
    """
    Validate a scenario margin list.

    :raises ScenarioValidationError: on an empty, oversized or out-of-range list
    """
    try:
        return ScenarioRequest(margins=list(margins)).margins
    except ValidationError as e:
        raise ScenarioValidationError(f"Invalid scenario margins: {e.errors()[0]['msg']}") from e


class NetScoreCalculator:
    """
    Pure calculator over score records and net coefficients.

    Holds no state besides configuration; safe to share between sessions.
    """

    def __init__(self, config: Optional[AdmissionAgentConfig] = None):
        self.config = config or AdmissionAgentConfig()

    def select_record(
        self,
        records: Sequence[ScoreRecord],
        exam_type: ExamType,
        year: Optional[int] = None,
    ) -> ScoreRecord:
        """
        Most recent record for the exam type, or the one for an exact year.

        :raises InsufficientHistoricalDataError: if no record matches
        """
        matching = [
            r for r in records
            if r.exam_type == exam_type and (year is None or r.year == year)
        ]
        if not matching:
            details = {"examType": exam_type.value}
            if year is not None:
                details["year"] = year
            raise InsufficientHistoricalDataError(
                f"No score record for {exam_type.value}" + (f" in {year}" if year else ""),
                details,
            )
        return max(matching, key=lambda r: r.year)

    def safe_target_score(self, base_score: float, margin: float) -> float:
        """base * (1 + margin), rounded to two decimals and capped."""
        return min(round(base_score * (1 + margin), 2), self.config.max_achievable_score)

    @staticmethod
    def competitiveness(base_score: float) -> Competitiveness:
        if base_score < 300:
            return Competitiveness.LOW
        if base_score < 400:
            return Competitiveness.MEDIUM
        if base_score < 500:
            return Competitiveness.HIGH
        return Competitiveness.VERY_HIGH

    def confidence(
        self,
        record: ScoreRecord,
        records_on_file: int,
        latest_year: int,
    ) -> ConfidenceLevel:
        """
        Confidence in a calculation from the recency and spread of its record.

        :param record: Record the calculation is based on
        :param records_on_file: Number of records for the program and exam type
        :param latest_year: Latest year with data on file
        """
        if (
            records_on_file <= 1
            or latest_year - record.year > STALE_AFTER_YEARS
            or record.spread > self.config.moderate_spread
        ):
            return ConfidenceLevel.LOW

        level = ConfidenceLevel.MEDIUM
        if record.year >= latest_year and record.spread <= self.config.narrow_spread:
            level = ConfidenceLevel.HIGH

        if level == ConfidenceLevel.HIGH and self.competitiveness(record.base_score) == Competitiveness.VERY_HIGH:
            level = ConfidenceLevel.MEDIUM
        return level

    def required_nets(
        self,
        target: float,
        ceiling: float,
        coefficients: Sequence[NetCoefficient],
    ) -> Dict[str, NetBand]:
        """
        Per-subject nets for a target score.

        The score above the fixed points is split across subjects in
        proportion to the points each subject can award.
        """
        total_points = sum(c.max_points for c in coefficients)
        upper = max(target, ceiling)

        bands: Dict[str, NetBand] = {}
        for coefficient in coefficients:
            bands[coefficient.subject] = NetBand(
                min=self._subject_nets(target, coefficient, total_points),
                max=self._subject_nets(upper, coefficient, total_points),
                question_count=coefficient.question_count,
            )
        return bands

    def _subject_nets(self, score: float, coefficient: NetCoefficient, total_points: float) -> float:
        fixed = self.config.base_points + self.config.diploma_points
        contribution = max(score - fixed, 0.0)
        share = contribution * coefficient.max_points / total_points
        nets = share / coefficient.points_per_correct
        return round(min(max(nets, 0.0), float(coefficient.question_count)), 2)

    def calculate(
        self,
        program: Program,
        exam_type: ExamType,
        records: Sequence[ScoreRecord],
        coefficients: Sequence[NetCoefficient],
        margin: Optional[float] = None,
        target_score: Optional[float] = None,
        year: Optional[int] = None,
        latest_year: Optional[int] = None,
    ) -> CalculationResult:
        """
        Calculate the nets needed for a program.

        :param program: Program the records belong to
        :param exam_type: Exam type to calculate for
        :param records: Score records of the program
        :param coefficients: Net coefficients (filtered to the record's year)
        :param margin: Safety margin over the base score (config default if None)
        :param target_score: Explicit target; replaces base * (1 + margin)
        :param year: Use the record of this year instead of the latest
        :param latest_year: Latest year on file (defaults to the program's latest)
        :raises UnrealisticTargetError: if the explicit target is out of range
        :raises InsufficientHistoricalDataError: if no record matches
        :raises NoValidCombinationError: if no coefficients exist for the record's year
        """
        if target_score is not None and not 0 < target_score <= self.config.max_achievable_score:
            raise UnrealisticTargetError(
                f"Target score {target_score} is outside (0, {self.config.max_achievable_score}]",
                {"targetScore": target_score, "maxAchievableScore": self.config.max_achievable_score},
            )

        record = self.select_record(records, exam_type, year)
        exam_records = [r for r in records if r.exam_type == exam_type]
        latest = latest_year if latest_year is not None else max(r.year for r in exam_records)

        matching = [c for c in coefficients if c.exam_type == exam_type and c.year == record.year]
        if not matching:
            raise NoValidCombinationError(
                f"No net coefficients for {exam_type.value} {record.year}",
                {"examType": exam_type.value, "year": record.year},
            )

        if target_score is not None:
            margin_used = 0.0
            target = round(float(target_score), 2)
        else:
            margin_used = self.config.default_safety_margin if margin is None else margin
            target = self.safe_target_score(record.base_score, margin_used)

        confidence = self.confidence(record, len(exam_records), latest)
        logger.debug(
            f"Program {program.id} {exam_type.value} {record.year}: base={record.base_score}, "
            f"target={target}, confidence={confidence.value}"
        )

        return CalculationResult(
            program_id=program.id,
            exam_type=exam_type,
            target_score=target,
            safety_margin=margin_used,
            required_nets=self.required_nets(target, record.ceiling_score, matching),
            based_on_year=record.year,
            base_score=record.base_score,
            ceiling_score=record.ceiling_score,
            confidence=confidence,
            competitiveness=self.competitiveness(record.base_score),
            user_target=target_score is not None,
        )

    def calculate_multiple_scenarios(
        self,
        program: Program,
        exam_type: ExamType,
        records: Sequence[ScoreRecord],
        coefficients: Sequence[NetCoefficient],
        margins: Sequence[float],
        year: Optional[int] = None,
        latest_year: Optional[int] = None,
    ) -> List[CalculationResult]:
        """
        One calculation per safety margin, in input order.

        :raises ScenarioValidationError: if the margins are rejected
        """
        validated = validate_margins(margins)
        return [
            self.calculate(
                program,
                exam_type,
                records,
                coefficients,
                margin=margin,
                year=year,
                latest_year=latest_year,
            )
            for margin in validated
        ]

    @staticmethod
    def with_extras(
        result: CalculationResult,
        scenarios: Optional[List[CalculationResult]] = None,
        study_plan: Optional["StudyPlan"] = None,
    ) -> CalculationResult:
        """Copy of a result with scenarios and a study plan attached."""
        return replace(
            result,
            scenarios=list(scenarios or result.scenarios),
            study_plan=study_plan if study_plan is not None else result.study_plan,
        )
