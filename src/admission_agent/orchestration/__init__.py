"""
Orchestration layer: read path, decision table and follow-ups.
"""
from .follow_up import (
    FollowUpGenerator,
    FollowUpSuggestion,
    ambiguity_question,
    clarification_question,
    fallback_suggestions,
)
from .query_pipeline import QueryPipeline, TurnAnalysis
from .response_composer import TRANSITIONS, Outcome, ResponseComposer, classify_outcome

__all__ = [
    "FollowUpGenerator",
    "FollowUpSuggestion",
    "ambiguity_question",
    "clarification_question",
    "fallback_suggestions",
    "QueryPipeline",
    "TurnAnalysis",
    "TRANSITIONS",
    "Outcome",
    "ResponseComposer",
    "classify_outcome",
]
