import csv
import logging
import os
import re
from typing import Callable, FrozenSet, List, Optional, TypeVar

from .catalog import InMemoryCatalog
from .exceptions import CatalogError
from .models import (
    ExamType,
    Institution,
    InstructionLanguage,
    NetCoefficient,
    OwnershipKind,
    Program,
    ScoreRecord,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_OWNERSHIP_VALUES = {
    "public": OwnershipKind.PUBLIC,
    "devlet": OwnershipKind.PUBLIC,
    "private": OwnershipKind.PRIVATE,
    "vakif": OwnershipKind.PRIVATE,
    "vakıf": OwnershipKind.PRIVATE,
}

_LANGUAGE_VALUES = {
    "native": InstructionLanguage.NATIVE,
    "türkçe": InstructionLanguage.NATIVE,
    "turkce": InstructionLanguage.NATIVE,
    "foreign": InstructionLanguage.FOREIGN,
    "ingilizce": InstructionLanguage.FOREIGN,
    "partial_foreign": InstructionLanguage.PARTIAL_FOREIGN,
    "%30 ingilizce": InstructionLanguage.PARTIAL_FOREIGN,
}


class CatalogDataLoader:
    """
    Loads reference data from a directory of CSV files.

    Expected files: institutions.csv, programs.csv, score_records.csv and
    net_coefficients.csv. Malformed rows are skipped with a warning.
    """
    def __init__(self, catalog_dir: str):
        self.catalog_dir = catalog_dir

    def load_catalog(self) -> InMemoryCatalog:
        return InMemoryCatalog(
            institutions=self.load_institutions(),
            programs=self.load_programs(),
            score_records=self.load_score_records(),
            coefficients=self.load_coefficients(),
        )

    def load_institutions(self) -> List[Institution]:
        return self._load("institutions.csv", self._parse_institution)

    def load_programs(self) -> List[Program]:
        return self._load("programs.csv", self._parse_program)

    def load_score_records(self) -> List[ScoreRecord]:
        return self._load("score_records.csv", self._parse_score_record, required=False)

    def load_coefficients(self) -> List[NetCoefficient]:
        return self._load("net_coefficients.csv", self._parse_coefficient, required=False)

    def _load(
        self,
        filename: str,
        parse: Callable[[dict], Optional[T]],
        required: bool = True,
    ) -> List[T]:
        path = os.path.join(self.catalog_dir, filename)
        if not os.path.exists(path):
            if required:
                raise CatalogError(f"Catalog file not found: {path}")
            logger.warning(f"Optional catalog file missing: {path}")
            return []

        items: List[T] = []
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for line_no, row in enumerate(reader, start=2):
                try:
                    item = parse(row)
                except (ValueError, KeyError) as e:
                    logger.warning(f"Skipping {filename}:{line_no}: {e}")
                    continue
                if item is not None:
                    items.append(item)

        logger.info(f"Loaded {len(items)} rows from {filename}")
        return items

    def _parse_institution(self, row: dict) -> Optional[Institution]:
        name = self._clean_text(row.get("name"))
        if not name:
            return None
        ownership = self._clean_text(row.get("ownership")) or "public"
        return Institution(
            id=int(row["id"]),
            name=name,
            city=self._clean_text(row.get("city")),
            ownership=_OWNERSHIP_VALUES[ownership.lower()],
            aliases=self._parse_aliases(row.get("aliases")),
        )

    def _parse_program(self, row: dict) -> Optional[Program]:
        name = self._clean_text(row.get("name"))
        if not name:
            return None
        language = self._clean_text(row.get("language")) or "native"
        return Program(
            id=int(row["id"]),
            institution_id=int(row["institution_id"]),
            name=name,
            faculty=self._clean_text(row.get("faculty")),
            language=_LANGUAGE_VALUES[language.lower()],
            aliases=self._parse_aliases(row.get("aliases")),
        )

    def _parse_score_record(self, row: dict) -> Optional[ScoreRecord]:
        exam_type = ExamType.parse(row.get("exam_type"))
        if exam_type is None:
            raise ValueError(f"unknown exam type {row.get('exam_type')!r}")
        return ScoreRecord(
            program_id=int(row["program_id"]),
            year=int(row["year"]),
            exam_type=exam_type,
            base_score=self._parse_float(row["base_score"]),
            ceiling_score=self._parse_float(row["ceiling_score"]),
            base_rank=self._parse_int(row["base_rank"]),
            ceiling_rank=self._parse_int(row["ceiling_rank"]),
            quota=self._parse_int(row["quota"]),
        )

    def _parse_coefficient(self, row: dict) -> Optional[NetCoefficient]:
        exam_type = ExamType.parse(row.get("exam_type"))
        subject = self._clean_text(row.get("subject"))
        if exam_type is None or not subject:
            raise ValueError("exam type and subject are required")
        question_count = self._clean_text(row.get("question_count"))
        return NetCoefficient(
            exam_type=exam_type,
            year=int(row["year"]),
            subject=subject,
            points_per_correct=self._parse_float(row["points_per_correct"]),
            question_count=int(question_count) if question_count else None,
        )

    def _clean_text(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value if value else None

    def _parse_float(self, value: str) -> float:
        # Turkish exports use a decimal comma
        return float(value.strip().replace(",", "."))

    def _parse_int(self, value: str) -> int:
        digits = re.sub(r"[.\s]", "", value.strip())
        return int(digits)

    def _parse_aliases(self, value: Optional[str]) -> FrozenSet[str]:
        if not value:
            return frozenset()
        return frozenset(v.strip() for v in re.split(r",|\|", value) if v.strip())
