"""
Net score calculation.
"""
from .net_calculator import (
    CalculationResult,
    Competitiveness,
    ConfidenceLevel,
    NetBand,
    NetScoreCalculator,
    ScenarioRequest,
    validate_margins,
)
from .study_plan import StudyPlan, StudyPriority, recommend_study_plan

__all__ = [
    "CalculationResult",
    "Competitiveness",
    "ConfidenceLevel",
    "NetBand",
    "NetScoreCalculator",
    "ScenarioRequest",
    "validate_margins",
    "StudyPlan",
    "StudyPriority",
    "recommend_study_plan",
]
