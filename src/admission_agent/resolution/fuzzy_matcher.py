"""
Fuzzy matching strategy for semantic resolution using rapidfuzz.

Handles typos, partial names and word-order changes.
"""
from typing import FrozenSet, Iterable, Sequence

from rapidfuzz import fuzz

from .semantic_resolver import MatchScore, NameMatcher

# Containment always ranks above plain edit-distance matches of similar length
CONTAINMENT_BASE = 0.85
CONTAINMENT_SPAN = 0.14
FUZZY_CEILING = 0.99

# Words shared by most institution names; left out of edit-distance scoring
GENERIC_WORDS: FrozenSet[str] = frozenset({
    "universitesi", "universite", "university", "uni",
})


class FuzzyNameMatcher(NameMatcher):
    """
    Fuzzy match strategy using rapidfuzz.

    Handles:
    - Partial names ("bogazici" → "bogazici universitesi") via word-boundary
      containment, scored by how much of the longer name is covered
    - Typos ("bilgisayr muhendisligi" → "bilgisayar muhendisligi")
    - Word order ("muhendisligi bilgisayar")
    - Shared generic words ("bilkent universitesi" is not close to
      "test universitesi" just because both are universities)
    """
    strategy = "fuzzy"

    def __init__(
        self,
        scorer: str = "token_sort_ratio",
        min_containment_length: int = 2,
        generic_words: Iterable[str] = GENERIC_WORDS,
    ):
        """
        Initialize fuzzy matcher.

        :param scorer: rapidfuzz scorer combined with plain ratio
        :param min_containment_length: Shortest string allowed to count as contained
        :param generic_words: Words dropped from both sides before edit-distance scoring
        """
        # Map scorer names to rapidfuzz functions
        self._scorer_map = {
            "ratio": fuzz.ratio,
            "token_sort_ratio": fuzz.token_sort_ratio,
            "token_set_ratio": fuzz.token_set_ratio,
        }

        if scorer not in self._scorer_map:
            raise ValueError(
                f"Unknown scorer '{scorer}'. "
                f"Must be one of: {list(self._scorer_map.keys())}"
            )

        self.scorer = scorer
        self.min_containment_length = min_containment_length
        self.generic_words = frozenset(generic_words)

    def match(self, query: str, variants: Sequence[str]) -> MatchScore:
        """
        Score the query against every variant and keep the best.

        :param query: Normalized mention
        :param variants: Normalized names of one entity
        :return: MatchScore between 0.0 and 0.99
        """
        query = query.strip()
        if not query or not variants:
            return MatchScore(score=0.0, strategy=self.strategy)

        best = MatchScore(score=0.0, strategy=self.strategy)
        for variant in variants:
            candidate = self._score_variant(query, variant)
            if candidate.score > best.score:
                best = candidate
        return best

    def _score_variant(self, query: str, variant: str) -> MatchScore:
        containment = self._containment_score(query, variant)
        if containment > 0.0:
            return MatchScore(score=containment, strategy="containment", variant=variant)

        scorer_func = self._scorer_map[self.scorer]
        query, variant_text = self._distinctive(query), self._distinctive(variant)
        raw = max(fuzz.ratio(query, variant_text), scorer_func(query, variant_text))
        return MatchScore(
            score=min(raw / 100.0, FUZZY_CEILING),
            strategy=self.strategy,
            variant=variant,
        )

    def _containment_score(self, query: str, variant: str) -> float:
        if query == variant:
            return FUZZY_CEILING
        shorter, longer = sorted((query, variant), key=len)
        if len(shorter) < self.min_containment_length:
            return 0.0
        if f" {shorter} " not in f" {longer} ":
            return 0.0
        return CONTAINMENT_BASE + CONTAINMENT_SPAN * (len(shorter) / len(longer))

    def _distinctive(self, text: str) -> str:
        words = [w for w in text.split() if w not in self.generic_words]
        return " ".join(words) or text
