"""
Intent taxonomy and rule-based intent classification.

Each intent is a tagged value with an ordered tuple of weighted trigger
patterns. Patterns run against normalized (diacritic-folded) text, so they
are written without Turkish letters.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Pattern, Tuple

from ..normalizer import NormalizedText, normalize

logger = logging.getLogger(__name__)


class QueryIntent(str, Enum):
    """Formal intent taxonomy for admission questions."""
    NET_CALCULATION = "net_calculation"
    BASE_SCORE_LOOKUP = "base_score_lookup"
    QUOTA_INQUIRY = "quota_inquiry"
    PROGRAM_SEARCH = "program_search"
    CLARIFICATION_NEEDED = "clarification_needed"

    @classmethod
    def priority(cls) -> Tuple["QueryIntent", ...]:
        """Tie-break order, strongest first."""
        return (
            cls.NET_CALCULATION,
            cls.BASE_SCORE_LOOKUP,
            cls.QUOTA_INQUIRY,
            cls.PROGRAM_SEARCH,
        )

    @classmethod
    def required_slots(cls, intent: "QueryIntent") -> Tuple[str, ...]:
        """
        Slots an intent needs before it can be answered.

        Program-level intents only name the program: its institution follows
        from ownership.
        """
        return {
            cls.NET_CALCULATION: ("program",),
            cls.BASE_SCORE_LOOKUP: ("program",),
            cls.QUOTA_INQUIRY: ("program",),
            cls.PROGRAM_SEARCH: ("institution",),
            cls.CLARIFICATION_NEEDED: (),
        }[intent]


@dataclass(frozen=True)
class IntentTrigger:
    pattern: Pattern[str]
    weight: float

    @classmethod
    def of(cls, pattern: str, weight: float) -> "IntentTrigger":
        return cls(pattern=re.compile(pattern), weight=weight)


INTENT_TRIGGERS: Dict[QueryIntent, Tuple[IntentTrigger, ...]] = {
    QueryIntent.NET_CALCULATION: (
        IntentTrigger.of(r"\bkac net\b", 3.0),
        IntentTrigger.of(r"\bnet hesap", 2.5),
        IntentTrigger.of(r"\bkac (soru|dogru)\b", 2.0),
        IntentTrigger.of(r"\b(dogru|soru) sayisi\b", 2.0),
        IntentTrigger.of(r"\bnet(ler|leri|im|e|i|le)?\b", 1.5),
        IntentTrigger.of(r"\bhesapla", 1.0),
        IntentTrigger.of(r"\byapma(m|li|liyim|m gerek)", 1.0),
        IntentTrigger.of(r"\b(gerekir|gerekli|gerek|lazim)\b", 0.75),
    ),
    QueryIntent.BASE_SCORE_LOOKUP: (
        IntentTrigger.of(r"\btaban puan", 3.0),
        IntentTrigger.of(r"\btavan puan", 2.5),
        IntentTrigger.of(r"\b(basari )?sira(si|lamasi|lama)\b", 2.0),
        IntentTrigger.of(r"\b(kac|ne kadar) puan", 2.0),
        IntentTrigger.of(r"\ben (dusuk|yuksek) puan", 1.5),
        IntentTrigger.of(r"\bpuan(i|lari|la)?\b", 1.0),
        IntentTrigger.of(r"\bgecen (sene|yil)\b", 0.5),
    ),
    QueryIntent.QUOTA_INQUIRY: (
        IntentTrigger.of(r"\bkontenjan", 3.0),
        IntentTrigger.of(r"\bkac (kisi|ogrenci)\b", 2.0),
        IntentTrigger.of(r"\b(alim|ogrenci) sayisi\b", 1.5),
        IntentTrigger.of(r"\bkapasite", 1.5),
        IntentTrigger.of(r"\bkac kisilik\b", 1.5),
    ),
    QueryIntent.PROGRAM_SEARCH: (
        IntentTrigger.of(r"\bhangi (bolum|program)", 2.5),
        IntentTrigger.of(r"\bbolumleri(ni)?\b", 2.0),
        IntentTrigger.of(r"\bne okuna", 2.0),
        IntentTrigger.of(r"\bneler var\b", 1.5),
        IntentTrigger.of(r"\blistele", 1.5),
        IntentTrigger.of(r"\b(bolum|program)(ler|lar|lari)\b", 1.5),
        IntentTrigger.of(r"\b(bolum|program)\b", 1.0),
    ),
}

_QUESTION_WORDS = re.compile(r"\b(ne|nedir|nasil|neden|hangi|hangisi|kac|nerede|mi|mu)\b")


@dataclass(frozen=True)
class IntentClassification:
    intent: QueryIntent
    score: float
    confidence: float
    matched_triggers: Tuple[str, ...] = ()
    scores: Dict[QueryIntent, float] = field(default_factory=dict)
    is_question: bool = False


class IntentClassifier:
    """
    Deterministic intent classifier.

    Scores every intent by the weights of its matched triggers. No LLM, no
    state: identical normalized input always gives the same result.
    """

    def __init__(
        self,
        min_score: float = 1.0,
        triggers: Optional[Dict[QueryIntent, Tuple[IntentTrigger, ...]]] = None,
    ):
        """
        :param min_score: Best score must reach this value, else clarification_needed
        :param triggers: Optional custom trigger table
        """
        self.min_score = min_score
        self._triggers = triggers or INTENT_TRIGGERS

    def classify(self, message) -> IntentClassification:
        """
        Classify a message.

        :param message: NormalizedText or raw string
        :return: IntentClassification
        """
        normalized = message if isinstance(message, NormalizedText) else normalize(message)
        text = normalized.text

        scores: Dict[QueryIntent, float] = {}
        matched: Dict[QueryIntent, List[str]] = {}
        for intent in QueryIntent.priority():
            total = 0.0
            hits: List[str] = []
            for trigger in self._triggers.get(intent, ()):
                if trigger.pattern.search(text):
                    total += trigger.weight
                    hits.append(trigger.pattern.pattern)
            scores[intent] = total
            matched[intent] = hits

        is_question = bool(_QUESTION_WORDS.search(text)) or "?" in normalized.original

        # priority() order makes max() keep the higher-priority intent on ties
        best = max(QueryIntent.priority(), key=lambda i: scores[i])
        best_score = scores[best]

        readable = {i.value: s for i, s in scores.items()}
        logger.debug(f"Intent scores for '{text}': {readable}")

        if best_score < self.min_score:
            return IntentClassification(
                intent=QueryIntent.CLARIFICATION_NEEDED,
                score=best_score,
                confidence=0.0,
                scores=scores,
                is_question=is_question,
            )

        return IntentClassification(
            intent=best,
            score=best_score,
            confidence=min(best_score / 2.0, 1.0),
            matched_triggers=tuple(matched[best]),
            scores=scores,
            is_question=is_question,
        )


def suggest_questions(has_institution: bool, has_program: bool) -> List[str]:
    """Example questions for the slots the user has given so far."""
    if has_institution and has_program:
        return [
            "Bu bölüm için kaç net gerekli?",
            "Taban puanı nedir?",
            "Kontenjanı kaç kişi?",
        ]
    if has_institution:
        return [
            "Hangi bölümler var?",
            "Bilgisayar mühendisliği için kaç net gerekir?",
        ]
    return [
        "Hangi üniversiteyi merak ediyorsunuz?",
        "Örnek: ODTÜ bilgisayar mühendisliği için kaç net gerekir?",
        "Örnek: Boğaziçi işletme taban puanı nedir?",
    ]
