"""
Immutable name index built from the catalog.

An index is never modified after build(); a catalog change produces a new
index that replaces the old one as a whole.
"""
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from ..catalog import CatalogRepository
from ..models import Institution, Program
from ..normalizer import normalize_text
from .semantic_resolver import Entity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexEntry:
    """
    One catalog entity with its normalized name variants.

    Attributes:
        entity: Institution or Program
        label: Display name (programs carry their institution in parentheses)
        variants: Normalized canonical name followed by normalized aliases
    """
    entity: Entity
    label: str
    variants: Tuple[str, ...]

    @property
    def entity_id(self) -> int:
        return self.entity.id


def _variants(name: str, aliases: Iterable[str]) -> Tuple[str, ...]:
    seen: List[str] = []
    for raw in [name, *sorted(aliases)]:
        variant = normalize_text(raw)
        if variant and variant not in seen:
            seen.append(variant)
    return tuple(seen)


@dataclass(frozen=True)
class CatalogIndex:
    """
    Snapshot of institution and program names for resolution.

    Fields are tuples and read-only mappings, so a snapshot can be shared by
    any number of concurrent readers.
    """
    institutions: Tuple[IndexEntry, ...]
    programs: Tuple[IndexEntry, ...]
    programs_by_institution: Mapping[int, Tuple[IndexEntry, ...]]
    institution_gazetteer: FrozenSet[str]
    version: int = 0

    @classmethod
    def empty(cls) -> "CatalogIndex":
        return cls(
            institutions=(),
            programs=(),
            programs_by_institution=MappingProxyType({}),
            institution_gazetteer=frozenset(),
        )

    @classmethod
    def build(cls, catalog: CatalogRepository, version: int = 0) -> "CatalogIndex":
        """
        Build a snapshot from the catalog collaborator.

        :param catalog: Read-only catalog repository
        :param version: Monotonic build counter, for logging and tests
        :return: New CatalogIndex
        """
        institutions = sorted(catalog.all_institutions(), key=lambda i: i.id)
        names: Dict[int, str] = {i.id: i.name for i in institutions}

        institution_entries = tuple(
            IndexEntry(entity=i, label=i.name, variants=_variants(i.name, i.aliases))
            for i in institutions
        )

        grouped: Dict[int, List[IndexEntry]] = {}
        program_entries: List[IndexEntry] = []
        for program in sorted(catalog.programs(), key=lambda p: p.id):
            entry = IndexEntry(
                entity=program,
                label=cls._program_label(program, names.get(program.institution_id)),
                variants=_variants(program.name, program.aliases),
            )
            program_entries.append(entry)
            grouped.setdefault(program.institution_id, []).append(entry)

        gazetteer = frozenset(v for entry in institution_entries for v in entry.variants)

        logger.info(
            f"Built catalog index v{version}: {len(institution_entries)} institutions, "
            f"{len(program_entries)} programs"
        )
        return cls(
            institutions=institution_entries,
            programs=tuple(program_entries),
            programs_by_institution=MappingProxyType(
                {key: tuple(entries) for key, entries in grouped.items()}
            ),
            institution_gazetteer=gazetteer,
            version=version,
        )

    @staticmethod
    def _program_label(program: Program, institution_name: Optional[str]) -> str:
        if institution_name:
            return f"{program.name} ({institution_name})"
        return program.name

    def program_entries(self, institution_id: Optional[int] = None) -> Tuple[IndexEntry, ...]:
        if institution_id is None:
            return self.programs
        return self.programs_by_institution.get(institution_id, ())

    def institution(self, institution_id: int) -> Optional[Institution]:
        for entry in self.institutions:
            if entry.entity_id == institution_id:
                return entry.entity
        return None
