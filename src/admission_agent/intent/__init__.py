"""
Intent classification for admission questions.

Provides the fixed intent taxonomy and a deterministic, rule-based
classifier.
"""
from .query_intent import (
    INTENT_TRIGGERS,
    IntentClassification,
    IntentClassifier,
    IntentTrigger,
    QueryIntent,
    suggest_questions,
)

__all__ = [
    "INTENT_TRIGGERS",
    "IntentClassification",
    "IntentClassifier",
    "IntentTrigger",
    "QueryIntent",
    "suggest_questions",
]
