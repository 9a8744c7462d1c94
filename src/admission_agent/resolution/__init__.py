"""
Resolution layer for institution and program names.

Converts free-text mentions into catalog entities, tolerating typos,
missing diacritics and abbreviations.

Key components:
- NameMatcher: Protocol for matching strategies
- ResolutionResult: Immutable ranked result (resolved / ambiguous / not_found)
- Matchers: Exact and Fuzzy strategies
- ResolutionPolicy: Escalation and acceptance rule
- CatalogIndex: Immutable name snapshot, swapped as a whole on rebuild
- EntityExtractor: Mention, exam type and number extraction
"""
from .semantic_resolver import (
    Candidate,
    MatchScore,
    NameMatcher,
    ResolutionResult,
    ResolutionStatus,
)
from .exact_matcher import ExactNameMatcher
from .fuzzy_matcher import FuzzyNameMatcher
from .catalog_index import CatalogIndex, IndexEntry
from .resolution_policy import ResolutionPolicy
from .entity_resolver import EntityResolver
from .resolver_factory import create_entity_resolver
from .entity_extractor import EntityExtractor, ExtractedEntities, ExtractedEntity
from .resolution_metadata import ResolutionMetadata, SlotResolution

__all__ = [
    "Candidate",
    "MatchScore",
    "NameMatcher",
    "ResolutionResult",
    "ResolutionStatus",
    "ExactNameMatcher",
    "FuzzyNameMatcher",
    "CatalogIndex",
    "IndexEntry",
    "ResolutionPolicy",
    "EntityResolver",
    "create_entity_resolver",
    "EntityExtractor",
    "ExtractedEntities",
    "ExtractedEntity",
    "ResolutionMetadata",
    "SlotResolution",
]
