"""
Exact matching strategy for semantic resolution.

Fast, deterministic matching on normalized names and aliases.
"""
from typing import Sequence

from .semantic_resolver import MatchScore, NameMatcher


class ExactNameMatcher(NameMatcher):
    """
    Exact match strategy for entity resolution.

    Used as first strategy in escalation. Inputs are normalized, so the
    comparison is already case- and diacritic-insensitive.
    """
    strategy = "exact"

    def match(self, query: str, variants: Sequence[str]) -> MatchScore:
        """
        Find an exact match among the variants.

        :param query: Normalized mention
        :param variants: Normalized names of one entity
        :return: 1.0 on equality, otherwise 0.0
        """
        query = query.strip()
        for variant in variants:
            if variant == query:
                return MatchScore(score=1.0, strategy=self.strategy, variant=variant)

        return MatchScore(score=0.0, strategy=self.strategy)
