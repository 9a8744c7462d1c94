"""
Shared fixtures: a small in-memory catalog and a wired service.
"""
import pytest

from admission_agent.calculation import NetScoreCalculator
from admission_agent.catalog import InMemoryCatalog
from admission_agent.config import AdmissionAgentConfig
from admission_agent.models import (
    ExamType,
    Institution,
    InstructionLanguage,
    NetCoefficient,
    OwnershipKind,
    Program,
    ScoreRecord,
)
from admission_agent.resolution import CatalogIndex, EntityResolver
from admission_agent.service import AdmissionAgentService


def _record(program_id, year, exam_type, base, ceiling, base_rank=50000, ceiling_rank=5000, quota=80):
    return ScoreRecord(
        program_id=program_id,
        year=year,
        exam_type=exam_type,
        base_score=base,
        ceiling_score=ceiling,
        base_rank=base_rank,
        ceiling_rank=ceiling_rank,
        quota=quota,
    )


def _coefficients(exam_type, year):
    # 160 + 240 = 400 points above the fixed 100, so nets = (score - 100) / 10
    return [
        NetCoefficient(exam_type, year, "Türkçe", 4.0, 40),
        NetCoefficient(exam_type, year, "Matematik", 6.0, 40),
    ]


@pytest.fixture
def institutions():
    return [
        Institution(1, "Test Üniversitesi", "Ankara", OwnershipKind.PUBLIC, frozenset({"Test Üni", "TÜ"})),
        Institution(2, "Orta Doğu Teknik Üniversitesi", "Ankara", OwnershipKind.PUBLIC, frozenset({"ODTÜ", "METU"})),
        Institution(3, "Boğaziçi Üniversitesi", "İstanbul", OwnershipKind.PUBLIC, frozenset({"Boğaziçi", "BOUN"})),
        Institution(4, "İstanbul Teknik Üniversitesi", "İstanbul", OwnershipKind.PUBLIC, frozenset({"İTÜ"})),
    ]


@pytest.fixture
def programs():
    return [
        Program(101, 1, "Bilgisayar Mühendisliği", "Mühendislik", aliases=frozenset({"Bilgisayar Müh"})),
        Program(102, 1, "Elektrik-Elektronik Mühendisliği", "Mühendislik", aliases=frozenset({"EEM"})),
        Program(103, 1, "İşletme", "İİBF"),
        Program(104, 1, "Hukuk", "Hukuk"),
        Program(201, 2, "Bilgisayar Mühendisliği", "Mühendislik", InstructionLanguage.FOREIGN),
        Program(202, 2, "Makine Mühendisliği", "Mühendislik", InstructionLanguage.FOREIGN),
        Program(301, 3, "Bilgisayar Mühendisliği", "Mühendislik", InstructionLanguage.FOREIGN),
        Program(302, 3, "İşletme", "İİBF", InstructionLanguage.FOREIGN),
        Program(401, 4, "Bilgisayar Mühendisliği", "Bilgisayar ve Bilişim", InstructionLanguage.PARTIAL_FOREIGN),
    ]


@pytest.fixture
def score_records():
    return [
        _record(101, 2023, ExamType.SAY, 445.2, 480.1),
        _record(101, 2024, ExamType.SAY, 450.5, 485.2),
        _record(102, 2024, ExamType.SAY, 420.3, 440.8),
        _record(103, 2023, ExamType.EA, 345.1, 365.0),
        _record(103, 2024, ExamType.EA, 350.2, 370.5),
        _record(103, 2024, ExamType.SAY, 360.0, 380.0),
        _record(104, 2021, ExamType.EA, 390.0, 420.0),
        _record(201, 2022, ExamType.SAY, 468.4, 489.7),
        _record(201, 2023, ExamType.SAY, 472.1, 490.0),
        _record(201, 2024, ExamType.SAY, 478.3, 492.6),
        _record(301, 2023, ExamType.SAY, 483.0, 496.8),
        _record(301, 2024, ExamType.SAY, 486.9, 497.3),
        _record(302, 2023, ExamType.EA, 466.0, 483.1),
        _record(302, 2024, ExamType.EA, 470.2, 485.0),
        _record(401, 2023, ExamType.SAY, 465.2, 485.9),
        _record(401, 2024, ExamType.SAY, 470.5, 488.0),
    ]


@pytest.fixture
def coefficients():
    result = []
    for year in (2022, 2023, 2024):
        result.extend(_coefficients(ExamType.SAY, year))
    for year in (2023, 2024):
        result.extend(_coefficients(ExamType.EA, year))
    return result


@pytest.fixture
def catalog(institutions, programs, score_records, coefficients):
    return InMemoryCatalog(institutions, programs, score_records, coefficients)


@pytest.fixture
def config():
    return AdmissionAgentConfig()


@pytest.fixture
def resolver(catalog, config):
    return EntityResolver(
        CatalogIndex.build(catalog),
        acceptance_threshold=config.acceptance_threshold,
        min_similarity=config.min_similarity,
        ambiguity_margin=config.ambiguity_margin,
        limit=config.suggestion_limit,
    )


@pytest.fixture
def calculator(config):
    return NetScoreCalculator(config)


@pytest.fixture
def service(config, catalog):
    return AdmissionAgentService(config, catalog)
