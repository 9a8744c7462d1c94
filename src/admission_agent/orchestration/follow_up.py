"""
Follow-up suggestions and clarification questions.

All user-facing wording is Turkish. Every function here is deterministic:
the same intent and slots always give the same list in the same order.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..exceptions import ErrorKind
from ..intent import QueryIntent, suggest_questions

MAX_FOLLOW_UPS = 4


@dataclass(frozen=True)
class FollowUpSuggestion:
    text: str
    intent: QueryIntent
    priority: int


_SLOT_QUESTIONS: Dict[QueryIntent, Dict[str, str]] = {
    QueryIntent.NET_CALCULATION: {
        "institution": "Hangi üniversiteyi merak ediyorsunuz?",
        "program": "Hangi bölüm için net hesaplama yapmak istiyorsunuz?",
        "exam_type": "Hangi puan türü için hesaplama yapmalıyım? (SAY, EA, SÖZ, DİL)",
    },
    QueryIntent.BASE_SCORE_LOOKUP: {
        "institution": "Hangi üniversitenin taban puanını öğrenmek istiyorsunuz?",
        "program": "Hangi bölümün taban puanını merak ediyorsunuz?",
        "exam_type": "Hangi puan türünün taban puanını istiyorsunuz? (SAY, EA, SÖZ, DİL)",
    },
    QueryIntent.QUOTA_INQUIRY: {
        "institution": "Hangi üniversitenin kontenjan bilgilerini istiyorsunuz?",
        "program": "Hangi bölümün kontenjan bilgilerini merak ediyorsunuz?",
        "exam_type": "Hangi puan türünün kontenjanını istiyorsunuz? (SAY, EA, SÖZ, DİL)",
    },
    QueryIntent.PROGRAM_SEARCH: {
        "institution": "Hangi üniversitenin bölümlerini görmek istiyorsunuz?",
    },
}

_GENERIC_SLOT_QUESTIONS = {
    "institution": "Hangi üniversiteyi merak ediyorsunuz?",
    "program": "Hangi bölüm hakkında bilgi almak istiyorsunuz?",
    "exam_type": "Hangi puan türü için bilgi istiyorsunuz?",
}

_HELP_SUGGESTIONS = (
    "Net hesaplama için üniversite ve bölüm belirtin",
    "Taban puan sorgulamak için üniversite ve bölüm adı yazın",
    "Bir üniversitenin bölümlerini listeleyebilirim",
    "Kontenjan bilgisi için üniversite ve bölüm belirtin",
)


def clarification_question(intent: QueryIntent, slot: str) -> str:
    """Question asking the user for one missing slot."""
    return _SLOT_QUESTIONS.get(intent, {}).get(slot) or _GENERIC_SLOT_QUESTIONS.get(
        slot, "Sorunuzu biraz daha açar mısınız?"
    )


def ambiguity_question(slot: str, labels: Sequence[str]) -> str:
    options = ", ".join(labels)
    noun = "üniversiteyi" if slot == "institution" else "bölümü"
    return f"Hangi {noun} kastettiniz? {options}"


def fallback_suggestions(
    kind: ErrorKind,
    candidates: Sequence[str] = (),
    missing_slots: Sequence[str] = (),
    intent: QueryIntent = QueryIntent.CLARIFICATION_NEEDED,
) -> List[str]:
    """
    Suggestions attached to an error, never empty.

    :param kind: Error kind
    :param candidates: Labels of the closest catalog entries, best first
    :param missing_slots: Slots the intent still needs
    :param intent: Intent of the turn
    """
    if kind == ErrorKind.AMBIGUOUS_ENTITY and candidates:
        return [f"{label} mi demek istediniz?" for label in candidates]
    if kind == ErrorKind.ENTITY_NOT_FOUND:
        if candidates:
            return [f"{label} mi demek istediniz?" for label in candidates]
        return [
            "Üniversite veya bölüm adını kontrol edip tekrar yazar mısınız?",
            "Kısaltma yerine tam adı yazmayı deneyebilirsiniz (ör. Orta Doğu Teknik Üniversitesi)",
        ]
    if kind == ErrorKind.MISSING_REQUIRED_SLOT and missing_slots:
        return [clarification_question(intent, slot) for slot in missing_slots]
    if kind == ErrorKind.INSUFFICIENT_HISTORICAL_DATA:
        return [
            "Farklı bir puan türü deneyebilirsiniz (SAY, EA, SÖZ, DİL)",
            "Yıl belirtmeden en güncel veriye göre hesaplayabilirim",
            "Başka bir bölümün verilerine bakabiliriz",
        ]
    if kind == ErrorKind.UNREALISTIC_TARGET:
        return [
            "Hedef puanınızı 560 veya altında belirtin",
            "Hedef puan vermezseniz taban puana göre güvenli bir hedef hesaplarım",
        ]
    if kind == ErrorKind.NO_VALID_COMBINATION:
        return [
            "Bu yıl ve puan türü için katsayı bulunamadı; farklı bir yıl deneyin",
            "Taban puan ve kontenjan bilgisini gösterebilirim",
        ]
    if kind == ErrorKind.LOW_CONFIDENCE:
        return [
            "Bu sonuç sınırlı veriye dayanıyor; önceki yılların verilerini de inceleyin",
        ]
    return list(_HELP_SUGGESTIONS)


class FollowUpGenerator:
    """
    Context-aware follow-up questions after an answer.

    Suggestions are ranked by priority and cut to a fixed number.
    """

    def __init__(self, limit: int = MAX_FOLLOW_UPS):
        self.limit = limit

    def suggest(
        self,
        intent: QueryIntent,
        institution: Optional[str] = None,
        program: Optional[str] = None,
    ) -> List[str]:
        builders = {
            QueryIntent.NET_CALCULATION: self._net_calculation,
            QueryIntent.BASE_SCORE_LOOKUP: self._base_score,
            QueryIntent.QUOTA_INQUIRY: self._quota,
            QueryIntent.PROGRAM_SEARCH: self._program_search,
            QueryIntent.CLARIFICATION_NEEDED: self._general,
        }
        suggestions = builders[intent](institution, program)
        ranked = sorted(suggestions, key=lambda s: -s.priority)
        return [s.text for s in ranked[: self.limit]]

    def _net_calculation(self, institution, program) -> List[FollowUpSuggestion]:
        suggestions = []
        if institution and program:
            suggestions.extend([
                FollowUpSuggestion(
                    f"{program} bölümünün taban puanını da merak ediyor musunuz?",
                    QueryIntent.BASE_SCORE_LOOKUP, 8,
                ),
                FollowUpSuggestion(
                    f"{program} bölümünün kontenjanını öğrenmek ister misiniz?",
                    QueryIntent.QUOTA_INQUIRY, 7,
                ),
                FollowUpSuggestion(
                    "Başka bir bölüm için de hesaplama yapabilirsiniz",
                    QueryIntent.NET_CALCULATION, 6,
                ),
            ])
        if institution:
            suggestions.append(FollowUpSuggestion(
                f"{institution} bünyesinde başka hangi bölümler var?",
                QueryIntent.PROGRAM_SEARCH, 5,
            ))
        return suggestions

    def _base_score(self, institution, program) -> List[FollowUpSuggestion]:
        suggestions = []
        if institution and program:
            suggestions.extend([
                FollowUpSuggestion(f"{program} için kaç net gerekli?", QueryIntent.NET_CALCULATION, 9),
                FollowUpSuggestion(
                    f"{program} bölümünün kontenjanı kaç kişi?", QueryIntent.QUOTA_INQUIRY, 7,
                ),
            ])
        suggestions.append(FollowUpSuggestion(
            "Başka bir bölümün taban puanını da sorgulayabilirsiniz",
            QueryIntent.BASE_SCORE_LOOKUP, 6,
        ))
        return suggestions

    def _quota(self, institution, program) -> List[FollowUpSuggestion]:
        suggestions = []
        if institution and program:
            suggestions.extend([
                FollowUpSuggestion(
                    f"{program} için net hesaplama yapalım mı?", QueryIntent.NET_CALCULATION, 8,
                ),
                FollowUpSuggestion(
                    f"{program} bölümünün taban puanı nedir?", QueryIntent.BASE_SCORE_LOOKUP, 7,
                ),
            ])
        return suggestions

    def _program_search(self, institution, program) -> List[FollowUpSuggestion]:
        suggestions = []
        if institution:
            suggestions.append(FollowUpSuggestion(
                "İlginizi çeken bir bölüm için net hesaplama yapabiliriz",
                QueryIntent.NET_CALCULATION, 8,
            ))
            suggestions.append(FollowUpSuggestion(
                "Bir bölümün taban puanını sorabilirsiniz",
                QueryIntent.BASE_SCORE_LOOKUP, 7,
            ))
        return suggestions

    def _general(self, institution, program) -> List[FollowUpSuggestion]:
        questions = suggest_questions(bool(institution), bool(program))
        return [
            FollowUpSuggestion(text, QueryIntent.CLARIFICATION_NEEDED, len(questions) - i)
            for i, text in enumerate(questions)
        ]
