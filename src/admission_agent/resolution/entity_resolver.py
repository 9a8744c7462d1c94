"""
Concrete resolver for institutions and programs.

Combines matchers, policy and the current catalog index snapshot into a
complete resolution system.
"""
import logging
from typing import Iterable, List, Optional

from ..catalog import CatalogRepository
from ..normalizer import normalize_text
from .catalog_index import CatalogIndex
from .exact_matcher import ExactNameMatcher
from .fuzzy_matcher import FuzzyNameMatcher
from .resolution_policy import ResolutionPolicy
from .semantic_resolver import Candidate, ResolutionResult, ResolutionStatus

logger = logging.getLogger(__name__)

_STATUS_RANK = {
    ResolutionStatus.RESOLVED: 2,
    ResolutionStatus.AMBIGUOUS: 1,
    ResolutionStatus.NOT_FOUND: 0,
}


class EntityResolver:
    """
    Resolves free-text mentions to catalog entities.

    Combines:
    - ExactNameMatcher (fast, deterministic)
    - FuzzyNameMatcher (typos, partial names)
    - ResolutionPolicy (escalation and acceptance)

    The index is replaced, never mutated: rebuild() builds a new snapshot and
    swaps the reference. Every resolve call reads the reference once, or uses
    the snapshot it is handed so one message never mixes two versions.

    Usage:
        resolver = EntityResolver(CatalogIndex.build(catalog))
        result = resolver.resolve_institution("bogazici")
        if result.is_resolved:
            institution = result.entity
    """

    def __init__(
        self,
        index: Optional[CatalogIndex] = None,
        acceptance_threshold: float = 0.80,
        min_similarity: float = 0.55,
        ambiguity_margin: float = 0.05,
        limit: int = 3,
    ):
        """
        Initialize entity resolver.

        :param index: Initial CatalogIndex snapshot (empty if None)
        :param acceptance_threshold: Minimum top score to accept a match
        :param min_similarity: Minimum score for a candidate to be listed
        :param ambiguity_margin: Required lead over the runner-up
        :param limit: Maximum number of suggestions
        """
        self._index = index or CatalogIndex.empty()
        self._policy = ResolutionPolicy(
            matchers=[ExactNameMatcher(), FuzzyNameMatcher()],
            acceptance_threshold=acceptance_threshold,
            min_similarity=min_similarity,
            ambiguity_margin=ambiguity_margin,
            limit=limit,
        )

    @property
    def index(self) -> CatalogIndex:
        """Current snapshot."""
        return self._index

    def rebuild(self, catalog: CatalogRepository) -> CatalogIndex:
        """
        Build a fresh snapshot and swap it in.

        :param catalog: Catalog to index
        :return: The new snapshot
        """
        index = CatalogIndex.build(catalog, version=self._index.version + 1)
        self._index = index
        logger.info(f"Swapped catalog index to v{index.version}")
        return index

    def _snapshot(self, index: Optional[CatalogIndex]) -> CatalogIndex:
        return self._index if index is None else index

    def resolve_institution(
        self,
        mention: str,
        index: Optional[CatalogIndex] = None,
    ) -> ResolutionResult:
        """
        Resolve an institution mention.

        :param mention: Raw or normalized mention ("Boğaziçi", "odtu")
        :param index: Snapshot to resolve against (the current one if None)
        :return: ResolutionResult over institutions
        """
        return self._policy.resolve(normalize_text(mention), self._snapshot(index).institutions)

    def resolve_program(
        self,
        mention: str,
        institution_id: Optional[int] = None,
        index: Optional[CatalogIndex] = None,
    ) -> ResolutionResult:
        """
        Resolve a program mention, optionally within one institution.

        :param mention: Raw or normalized mention ("bilgisayar muh")
        :param institution_id: Restrict matching to this institution's programs
        :param index: Snapshot to resolve against (the current one if None)
        :return: ResolutionResult over programs
        """
        entries = self._snapshot(index).program_entries(institution_id)
        return self._policy.resolve(normalize_text(mention), entries)

    def resolve_best_institution(
        self,
        mentions: Iterable[str],
        index: Optional[CatalogIndex] = None,
    ) -> Optional[ResolutionResult]:
        """Best institution result across several mentions; None without mentions."""
        entries = self._snapshot(index).institutions
        return self._best([self._policy.resolve(normalize_text(m), entries) for m in mentions])

    def resolve_best_program(
        self,
        mentions: Iterable[str],
        institution_id: Optional[int] = None,
        index: Optional[CatalogIndex] = None,
    ) -> Optional[ResolutionResult]:
        """Best program result across several mentions; None without mentions."""
        entries = self._snapshot(index).program_entries(institution_id)
        return self._best([self._policy.resolve(normalize_text(m), entries) for m in mentions])

    def search_programs(
        self,
        mention: str,
        limit: int = 10,
        index: Optional[CatalogIndex] = None,
    ) -> List[Candidate]:
        """
        Programs of any institution similar to a phrase, best first.

        Unlike resolve_program, no candidate is accepted; this feeds listings.
        """
        programs = self._snapshot(index).programs
        return self._policy.rank(normalize_text(mention), programs)[:limit]

    @staticmethod
    def _best(results: List[ResolutionResult]) -> Optional[ResolutionResult]:
        if not results:
            return None
        # max() keeps the first mention on ties
        return max(results, key=lambda r: (_STATUS_RANK[r.status], r.confidence))
