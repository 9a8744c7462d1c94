"""
Factory for creating entity resolvers.

Builds the catalog index and creates a resolver with configured thresholds.
"""
from typing import Optional

from ..catalog import CatalogRepository
from ..config import AdmissionAgentConfig
from .catalog_index import CatalogIndex
from .entity_resolver import EntityResolver


def create_entity_resolver(
    config: Optional[AdmissionAgentConfig] = None,
    catalog: Optional[CatalogRepository] = None,
) -> EntityResolver:
    """
    Factory function to create an EntityResolver.

    :param config: AdmissionAgentConfig instance (defaults if None)
    :param catalog: Catalog to index; an empty index is used if None
    :return: EntityResolver
    """
    config = config or AdmissionAgentConfig()
    index = CatalogIndex.build(catalog) if catalog is not None else None

    return EntityResolver(
        index=index,
        acceptance_threshold=config.acceptance_threshold,
        min_similarity=config.min_similarity,
        ambiguity_margin=config.ambiguity_margin,
        limit=config.suggestion_limit,
    )
