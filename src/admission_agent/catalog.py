"""
Read-only reference catalog consumed by the core.

The catalog collaborator owns institutions, programs, score records and net
coefficients. The core only reads through CatalogRepository.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import CatalogError
from .models import ExamType, Institution, NetCoefficient, Program, ScoreRecord

logger = logging.getLogger(__name__)


class CatalogRepository(ABC):
    """Protocol for reference data access."""

    @abstractmethod
    def all_institutions(self) -> List[Institution]:
        pass

    @abstractmethod
    def programs(self, institution_id: Optional[int] = None) -> List[Program]:
        pass

    @abstractmethod
    def score_records(
        self,
        program_id: int,
        year: Optional[int] = None,
        exam_type: Optional[ExamType] = None,
    ) -> List[ScoreRecord]:
        pass

    @abstractmethod
    def coefficients(self, exam_type: ExamType, year: int) -> List[NetCoefficient]:
        pass

    def institution(self, institution_id: int) -> Optional[Institution]:
        for institution in self.all_institutions():
            if institution.id == institution_id:
                return institution
        return None

    def program(self, program_id: int) -> Optional[Program]:
        for program in self.programs():
            if program.id == program_id:
                return program
        return None

    def latest_year(self) -> Optional[int]:
        """Most recent year with score data anywhere in the catalog."""
        years = [
            record.year
            for program in self.programs()
            for record in self.score_records(program.id)
        ]
        return max(years) if years else None


class InMemoryCatalog(CatalogRepository):
    """
    Catalog held in memory, built once per process and never mutated.

    :raises CatalogError: if references are dangling or records are duplicated
    """

    def __init__(
        self,
        institutions: Iterable[Institution],
        programs: Iterable[Program],
        score_records: Iterable[ScoreRecord] = (),
        coefficients: Iterable[NetCoefficient] = (),
    ):
        self._institutions: Dict[int, Institution] = {}
        for institution in institutions:
            if institution.id in self._institutions:
                raise CatalogError(f"Duplicate institution id {institution.id}")
            self._institutions[institution.id] = institution

        self._programs: Dict[int, Program] = {}
        for program in programs:
            if program.id in self._programs:
                raise CatalogError(f"Duplicate program id {program.id}")
            if program.institution_id not in self._institutions:
                raise CatalogError(
                    f"Program {program.id} references unknown institution {program.institution_id}"
                )
            self._programs[program.id] = program

        self._records: Dict[int, List[ScoreRecord]] = {}
        seen: set = set()
        for record in score_records:
            if record.program_id not in self._programs:
                raise CatalogError(f"Score record references unknown program {record.program_id}")
            key = (record.program_id, record.year, record.exam_type)
            if key in seen:
                raise CatalogError(
                    f"Duplicate score record for program {record.program_id}, "
                    f"{record.year} {record.exam_type.value}"
                )
            seen.add(key)
            self._records.setdefault(record.program_id, []).append(record)

        self._coefficients: Dict[Tuple[ExamType, int], List[NetCoefficient]] = {}
        for coefficient in coefficients:
            self._coefficients.setdefault(
                (coefficient.exam_type, coefficient.year), []
            ).append(coefficient)

        logger.info(
            f"Catalog ready: {len(self._institutions)} institutions, "
            f"{len(self._programs)} programs, {len(seen)} score records"
        )

    def all_institutions(self) -> List[Institution]:
        return list(self._institutions.values())

    def institution(self, institution_id: int) -> Optional[Institution]:
        return self._institutions.get(institution_id)

    def program(self, program_id: int) -> Optional[Program]:
        return self._programs.get(program_id)

    def programs(self, institution_id: Optional[int] = None) -> List[Program]:
        if institution_id is None:
            return list(self._programs.values())
        return [p for p in self._programs.values() if p.institution_id == institution_id]

    def score_records(
        self,
        program_id: int,
        year: Optional[int] = None,
        exam_type: Optional[ExamType] = None,
    ) -> List[ScoreRecord]:
        records = self._records.get(program_id, [])
        return [
            r for r in records
            if (year is None or r.year == year)
            and (exam_type is None or r.exam_type == exam_type)
        ]

    def coefficients(self, exam_type: ExamType, year: int) -> List[NetCoefficient]:
        return list(self._coefficients.get((exam_type, year), []))

    def latest_year(self) -> Optional[int]:
        years = [r.year for records in self._records.values() for r in records]
        return max(years) if years else None
