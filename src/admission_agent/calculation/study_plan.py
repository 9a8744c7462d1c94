"""
Study recommendations derived from a net calculation.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple

from .net_calculator import CalculationResult

FOCUS_SUBJECT_LIMIT = 3


class StudyPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_TIPS: Dict[StudyPriority, Tuple[str, ...]] = {
    StudyPriority.HIGH: (
        "Yoğun çalışma programı gerekli",
        "Günlük en az 6-8 saat çalışma öneriliyor",
    ),
    StudyPriority.MEDIUM: (
        "Düzenli çalışma programı yeterli",
        "Günlük 4-6 saat çalışma öneriliyor",
    ),
    StudyPriority.LOW: (
        "Mevcut seviyenizi koruyun",
        "Günlük 2-4 saat çalışma yeterli",
    ),
}


@dataclass(frozen=True)
class StudyPlan:
    priority: StudyPriority
    focus_subjects: List[str]
    tips: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "priority": self.priority.value,
            "focusSubjects": list(self.focus_subjects),
            "tips": list(self.tips),
        }


def recommend_study_plan(result: CalculationResult) -> StudyPlan:
    """
    Study priority and focus subjects for a calculation.

    Priority follows the share of all questions that must be answered
    correctly; focus subjects are those with the largest required share.
    """
    bands = result.required_nets
    total_questions = sum(b.question_count for b in bands.values())
    required = sum(b.min for b in bands.values())
    ratio = required / total_questions if total_questions else 0.0

    if ratio > 0.75:
        priority = StudyPriority.HIGH
    elif ratio > 0.5:
        priority = StudyPriority.MEDIUM
    else:
        priority = StudyPriority.LOW

    ranked = sorted(
        bands.items(),
        key=lambda item: (-item[1].min / item[1].question_count, item[0]),
    )
    focus = [subject for subject, band in ranked if band.min > 0][:FOCUS_SUBJECT_LIMIT]

    return StudyPlan(priority=priority, focus_subjects=focus, tips=list(_TIPS[priority]))
