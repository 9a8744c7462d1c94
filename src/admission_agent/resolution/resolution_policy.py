"""
Resolution policy: matcher escalation, ranking and acceptance.

Implements the escalation logic: exact → fuzzy, then decides whether the top
candidate is accepted, ambiguous or missing.
"""
import logging
from typing import List, Optional, Sequence

from .catalog_index import IndexEntry
from .semantic_resolver import (
    Candidate,
    MatchScore,
    NameMatcher,
    ResolutionResult,
    ResolutionStatus,
)

logger = logging.getLogger(__name__)


class ResolutionPolicy:
    """
    Policy for scoring a mention against index entries.

    Tries matchers in order for each entry until one reaches the acceptance
    threshold, keeps the best score per entry, then applies the acceptance
    rule to the ranked list.
    """

    def __init__(
        self,
        matchers: List[NameMatcher],
        acceptance_threshold: float = 0.80,
        min_similarity: float = 0.55,
        ambiguity_margin: float = 0.05,
        limit: int = 3,
    ):
        """
        Initialize resolution policy.

        :param matchers: Matchers to try in order (e.g., [ExactNameMatcher, FuzzyNameMatcher])
        :param acceptance_threshold: Top score needed to accept a candidate
        :param min_similarity: Candidates below this score are dropped
        :param ambiguity_margin: Lead the top candidate needs over the runner-up
        :param limit: Number of candidates returned as suggestions
        """
        if not matchers:
            raise ValueError("At least one matcher must be provided")

        self._matchers = matchers
        self.acceptance_threshold = acceptance_threshold
        self.min_similarity = min_similarity
        self.ambiguity_margin = ambiguity_margin
        self.limit = limit

    def score_entry(self, query: str, entry: IndexEntry) -> MatchScore:
        """Best score any matcher gives this entry (fast path on confident hits)."""
        best: Optional[MatchScore] = None
        for matcher in self._matchers:
            result = matcher.match(query, entry.variants)
            if result.score >= self.acceptance_threshold:
                return result
            if best is None or result.score > best.score:
                best = result
        return best

    def rank(self, query: str, entries: Sequence[IndexEntry]) -> List[Candidate]:
        """
        Rank entries for a query.

        :return: Candidates at or above min_similarity, best first
        """
        candidates: List[Candidate] = []
        for entry in entries:
            scored = self.score_entry(query, entry)
            if scored.score >= self.min_similarity:
                candidates.append(Candidate(
                    entity=entry.entity,
                    label=entry.label,
                    score=scored.score,
                    strategy=scored.strategy,
                ))
        candidates.sort(key=lambda c: (-c.score, c.label, c.entity_id))
        return candidates

    def resolve(self, query: str, entries: Sequence[IndexEntry]) -> ResolutionResult:
        """
        Resolve a normalized mention against entries.

        :param query: Normalized mention
        :param entries: Index entries to search
        :return: ResolutionResult (resolved, ambiguous or not_found)
        """
        if not query.strip():
            return ResolutionResult.not_found(query)

        ranked = self.rank(query, entries)
        if not ranked:
            logger.debug(f"No candidate for '{query}' above {self.min_similarity}")
            return ResolutionResult.not_found(query)

        top = ranked[0]
        runner_up = ranked[1].score if len(ranked) > 1 else 0.0
        accepted = (
            top.score >= self.acceptance_threshold
            and top.score - runner_up >= self.ambiguity_margin
        )

        logger.debug(
            f"Resolved '{query}': top={top.label} ({top.score:.3f}), "
            f"runner_up={runner_up:.3f}, accepted={accepted}"
        )

        if accepted:
            return ResolutionResult(
                query=query,
                status=ResolutionStatus.RESOLVED,
                candidates=tuple(ranked[: self.limit]),
            )
        return ResolutionResult(
            query=query,
            status=ResolutionStatus.AMBIGUOUS,
            candidates=tuple(ranked[: self.limit]),
        )
