"""
Tests for the net score calculator and study plans.

Fixture coefficients award 400 points above the fixed 100, split evenly per
question, so required nets are (score - 100) / 10 for every subject.
"""
import pytest

from admission_agent.calculation import (
    Competitiveness,
    ConfidenceLevel,
    NetScoreCalculator,
    StudyPriority,
    recommend_study_plan,
    validate_margins,
)
from admission_agent.config import AdmissionAgentConfig
from admission_agent.exceptions import (
    ErrorKind,
    InsufficientHistoricalDataError,
    NoValidCombinationError,
    ScenarioValidationError,
    UnrealisticTargetError,
)
from admission_agent.models import ExamType, NetCoefficient, ScoreRecord


def _record(year, base, ceiling, program_id=1, exam_type=ExamType.SAY):
    return ScoreRecord(program_id, year, exam_type, base, ceiling, 50000, 5000, 80)


@pytest.fixture
def cs_program(catalog):
    return catalog.program(101)


@pytest.fixture
def cs_records(catalog):
    return catalog.score_records(101)


class TestSafeTargetScore:
    """Tests for NetScoreCalculator.safe_target_score."""

    def test_margin_over_base(self, calculator):
        """Test that the safe target is base * (1 + margin)."""
        assert calculator.safe_target_score(450.5, 0.05) == pytest.approx(473.03, abs=0.01)

    def test_target_is_capped(self, calculator):
        """Test that the safe target never exceeds the maximum score."""
        assert calculator.safe_target_score(550.0, 0.05) == 560.0

    def test_custom_maximum(self):
        """Test that the cap follows configuration."""
        calculator = NetScoreCalculator(AdmissionAgentConfig(max_achievable_score=500.0))

        assert calculator.safe_target_score(490.0, 0.05) == 500.0


class TestCompetitiveness:
    """Tests for competitiveness bands."""

    @pytest.mark.parametrize("base,expected", [
        (250.0, Competitiveness.LOW),
        (299.99, Competitiveness.LOW),
        (300.0, Competitiveness.MEDIUM),
        (400.0, Competitiveness.HIGH),
        (499.99, Competitiveness.HIGH),
        (500.0, Competitiveness.VERY_HIGH),
    ])
    def test_bands(self, base, expected):
        """Test that base scores map to the documented bands."""
        assert NetScoreCalculator.competitiveness(base) == expected


class TestConfidence:
    """Tests for confidence levels."""

    def test_single_record_is_low(self, calculator):
        """Test that a lone record gives low confidence."""
        record = _record(2024, 450.0, 460.0)

        assert calculator.confidence(record, 1, 2024) == ConfidenceLevel.LOW

    def test_stale_record_is_low(self, calculator):
        """Test that a record far behind the latest year gives low confidence."""
        record = _record(2020, 450.0, 460.0)

        assert calculator.confidence(record, 3, 2024) == ConfidenceLevel.LOW

    def test_wide_spread_is_low(self, calculator):
        """Test that a wide base-to-ceiling spread gives low confidence."""
        record = _record(2024, 400.0, 460.0)

        assert calculator.confidence(record, 3, 2024) == ConfidenceLevel.LOW

    def test_recent_narrow_is_high(self, calculator):
        """Test that a current record with a narrow spread gives high confidence."""
        record = _record(2024, 450.0, 460.0)

        assert calculator.confidence(record, 3, 2024) == ConfidenceLevel.HIGH

    def test_moderate_spread_is_medium(self, calculator):
        """Test that a moderate spread gives medium confidence."""
        record = _record(2024, 450.0, 485.0)

        assert calculator.confidence(record, 3, 2024) == ConfidenceLevel.MEDIUM

    def test_very_competitive_is_never_high(self, calculator):
        """Test that very high competitiveness lowers high confidence to medium."""
        record = _record(2024, 510.0, 520.0)

        assert calculator.confidence(record, 3, 2024) == ConfidenceLevel.MEDIUM


class TestCalculate:
    """Tests for NetScoreCalculator.calculate."""

    def test_uses_latest_record(self, calculator, cs_program, cs_records, coefficients):
        """Test that the most recent record is the basis by default."""
        result = calculator.calculate(cs_program, ExamType.SAY, cs_records, coefficients)

        assert result.based_on_year == 2024
        assert result.base_score == 450.5
        assert result.safety_margin == 0.05
        assert result.target_score == pytest.approx(473.03, abs=0.01)
        assert not result.user_target

    def test_required_nets(self, calculator, cs_program, cs_records, coefficients):
        """Test that nets cover the target at min and the ceiling at max."""
        result = calculator.calculate(cs_program, ExamType.SAY, cs_records, coefficients)

        assert set(result.required_nets) == {"Türkçe", "Matematik"}
        band = result.required_nets["Matematik"]
        assert band.min == pytest.approx(37.3, abs=0.01)
        assert band.max == pytest.approx(38.52, abs=0.01)
        assert band.question_count == 40

    def test_bands_are_ordered_and_bounded(self, calculator, cs_program, cs_records, coefficients):
        """Test that 0 <= min <= max <= question count for every subject."""
        result = calculator.calculate(cs_program, ExamType.SAY, cs_records, coefficients)

        for band in result.required_nets.values():
            assert 0 <= band.min <= band.max <= band.question_count

    def test_nets_are_clamped(self, calculator, cs_program, cs_records):
        """Test that nets never exceed the question count."""
        tiny = [NetCoefficient(ExamType.SAY, 2024, "Matematik", 1.0, 10)]

        result = calculator.calculate(cs_program, ExamType.SAY, cs_records, tiny)

        assert result.required_nets["Matematik"].min == 10
        assert result.required_nets["Matematik"].max == 10

    def test_explicit_year(self, calculator, cs_program, cs_records, coefficients):
        """Test that an explicit year selects that year's record."""
        result = calculator.calculate(cs_program, ExamType.SAY, cs_records, coefficients, year=2023)

        assert result.based_on_year == 2023
        assert result.base_score == 445.2

    def test_explicit_target(self, calculator, cs_program, cs_records, coefficients):
        """Test that a user target is used as-is with no margin."""
        result = calculator.calculate(
            cs_program, ExamType.SAY, cs_records, coefficients, target_score=480
        )

        assert result.target_score == 480.0
        assert result.safety_margin == 0.0
        assert result.user_target
        assert result.required_nets["Türkçe"].min == pytest.approx(38.0)

    def test_confidence_and_competitiveness(self, calculator, cs_program, cs_records, coefficients):
        """Test that the result reports confidence and competitiveness."""
        result = calculator.calculate(
            cs_program, ExamType.SAY, cs_records, coefficients, latest_year=2024
        )

        assert result.confidence == ConfidenceLevel.MEDIUM
        assert result.competitiveness == Competitiveness.HIGH
        assert not result.is_low_confidence

    @pytest.mark.parametrize("target", [700, 560.01, 0, -10])
    def test_unrealistic_target(self, calculator, cs_program, cs_records, coefficients, target):
        """Test that targets outside (0, max] are rejected."""
        with pytest.raises(UnrealisticTargetError) as exc_info:
            calculator.calculate(
                cs_program, ExamType.SAY, cs_records, coefficients, target_score=target
            )

        assert exc_info.value.kind == ErrorKind.UNREALISTIC_TARGET

    def test_target_at_maximum_is_allowed(self, calculator, cs_program, cs_records, coefficients):
        """Test that the maximum score itself is a valid target."""
        result = calculator.calculate(
            cs_program, ExamType.SAY, cs_records, coefficients, target_score=560
        )

        assert result.target_score == 560.0

    def test_missing_exam_type(self, calculator, cs_program, cs_records, coefficients):
        """Test that an exam type without records raises insufficient data."""
        with pytest.raises(InsufficientHistoricalDataError) as exc_info:
            calculator.calculate(cs_program, ExamType.EA, cs_records, coefficients)

        assert exc_info.value.details == {"examType": "EA"}

    def test_missing_year(self, calculator, cs_program, cs_records, coefficients):
        """Test that a year without a record raises insufficient data."""
        with pytest.raises(InsufficientHistoricalDataError):
            calculator.calculate(cs_program, ExamType.SAY, cs_records, coefficients, year=2019)

    def test_missing_coefficients(self, calculator, catalog, coefficients):
        """Test that a record year without coefficients has no valid combination."""
        law = catalog.program(104)

        with pytest.raises(NoValidCombinationError) as exc_info:
            calculator.calculate(law, ExamType.EA, catalog.score_records(104), coefficients)

        assert exc_info.value.details["year"] == 2021

    def test_diploma_points_lower_nets(self, cs_program, cs_records, coefficients):
        """Test that diploma points reduce the nets needed."""
        plain = NetScoreCalculator(AdmissionAgentConfig())
        with_diploma = NetScoreCalculator(AdmissionAgentConfig(diploma_points=40.0))

        a = plain.calculate(cs_program, ExamType.SAY, cs_records, coefficients)
        b = with_diploma.calculate(cs_program, ExamType.SAY, cs_records, coefficients)

        assert b.required_nets["Matematik"].min < a.required_nets["Matematik"].min

    def test_to_dict_keys(self, calculator, cs_program, cs_records, coefficients):
        """Test that the plain value carries the documented keys."""
        data = calculator.calculate(cs_program, ExamType.SAY, cs_records, coefficients).to_dict()

        assert {
            "safeTargetScore", "safetyMargin", "requiredNets", "basedOnYear",
            "examType", "confidenceLevel", "competitiveness",
        } <= set(data)
        assert set(data["requiredNets"]["Türkçe"]) == {"min", "max"}


class TestScenarios:
    """Tests for multi-margin scenarios."""

    def test_one_result_per_margin_in_order(self, calculator, cs_program, cs_records, coefficients):
        """Test that scenarios follow the input margin order."""
        results = calculator.calculate_multiple_scenarios(
            cs_program, ExamType.SAY, cs_records, coefficients, [0.08, 0.03, 0.05]
        )

        assert [r.safety_margin for r in results] == [0.08, 0.03, 0.05]

    def test_targets_grow_with_margin(self, calculator, cs_program, cs_records, coefficients):
        """Test that larger margins give higher targets."""
        results = calculator.calculate_multiple_scenarios(
            cs_program, ExamType.SAY, cs_records, coefficients, [0.03, 0.05, 0.08]
        )

        targets = [r.target_score for r in results]
        assert targets == sorted(targets)

    @pytest.mark.parametrize("margins", [[], [0.0], [1.5], [-0.1], [0.01] * 11])
    def test_invalid_margins(self, margins):
        """Test that empty, oversized or out-of-range lists are rejected."""
        with pytest.raises(ScenarioValidationError):
            validate_margins(margins)

    def test_validation_error_is_value_error(self):
        """Test that scenario validation errors are also ValueErrors."""
        with pytest.raises(ValueError):
            validate_margins([])


class TestStudyPlan:
    """Tests for study recommendations."""

    def test_high_priority_for_demanding_target(self, calculator, cs_program, cs_records, coefficients):
        """Test that a target needing most questions right is high priority."""
        result = calculator.calculate(cs_program, ExamType.SAY, cs_records, coefficients)

        plan = recommend_study_plan(result)

        assert plan.priority == StudyPriority.HIGH
        assert plan.focus_subjects == ["Matematik", "Türkçe"]
        assert plan.tips

    def test_low_priority_for_easy_target(self, calculator, cs_program, cs_records, coefficients):
        """Test that a modest target is low priority."""
        result = calculator.calculate(
            cs_program, ExamType.SAY, cs_records, coefficients, target_score=150
        )

        plan = recommend_study_plan(result)

        assert plan.priority == StudyPriority.LOW
        assert plan.to_dict()["priority"] == "low"

    def test_attached_to_result(self, calculator, cs_program, cs_records, coefficients):
        """Test that with_extras attaches scenarios and a plan to the plain value."""
        result = calculator.calculate(cs_program, ExamType.SAY, cs_records, coefficients)
        scenarios = calculator.calculate_multiple_scenarios(
            cs_program, ExamType.SAY, cs_records, coefficients, [0.03]
        )

        extended = calculator.with_extras(result, scenarios, recommend_study_plan(result))
        data = extended.to_dict()

        assert len(data["scenarios"]) == 1
        assert "focusSubjects" in data["studyPlan"]
        assert result.scenarios == []
