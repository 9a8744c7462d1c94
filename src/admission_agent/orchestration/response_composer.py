"""
Response composer - decide path and build the structured answer.

A total state machine over (intent, outcome). Every pair has an explicit
entry in TRANSITIONS; a missing entry is a defect and raises InternalError.
"""
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..calculation import NetScoreCalculator, recommend_study_plan
from ..catalog import CatalogRepository
from ..config import AdmissionAgentConfig
from ..exceptions import CalculationError, ErrorKind, InsufficientHistoricalDataError, InternalError
from ..intent import QueryIntent
from ..models import ExamType, NetCoefficient, ScoreRecord
from ..resolution import CatalogIndex, EntityResolver, ResolutionResult, ResolutionStatus
from ..schemas import (
    Clarification,
    ProgramSummary,
    QueryError,
    QueryResponse,
    RecordLookup,
    ResolvedQuery,
)
from .follow_up import (
    FollowUpGenerator,
    ambiguity_question,
    clarification_question,
    fallback_suggestions,
)
from .query_pipeline import TurnAnalysis

logger = logging.getLogger(__name__)

PROGRAM_LISTING_LIMIT = 20


class Outcome(str, Enum):
    RESOLVED = "resolved"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"
    MISSING_SLOT = "missing_slot"


_I = QueryIntent
_O = Outcome

# (intent, outcome) -> ResponseComposer method name
TRANSITIONS: Dict[Tuple[QueryIntent, Outcome], str] = {
    (_I.NET_CALCULATION, _O.RESOLVED): "_calculate",
    (_I.NET_CALCULATION, _O.AMBIGUOUS): "_ambiguous",
    (_I.NET_CALCULATION, _O.NOT_FOUND): "_not_found",
    (_I.NET_CALCULATION, _O.MISSING_SLOT): "_missing_slot",
    (_I.BASE_SCORE_LOOKUP, _O.RESOLVED): "_lookup",
    (_I.BASE_SCORE_LOOKUP, _O.AMBIGUOUS): "_ambiguous",
    (_I.BASE_SCORE_LOOKUP, _O.NOT_FOUND): "_not_found",
    (_I.BASE_SCORE_LOOKUP, _O.MISSING_SLOT): "_missing_slot",
    (_I.QUOTA_INQUIRY, _O.RESOLVED): "_lookup",
    (_I.QUOTA_INQUIRY, _O.AMBIGUOUS): "_ambiguous",
    (_I.QUOTA_INQUIRY, _O.NOT_FOUND): "_not_found",
    (_I.QUOTA_INQUIRY, _O.MISSING_SLOT): "_missing_slot",
    (_I.PROGRAM_SEARCH, _O.RESOLVED): "_list_programs",
    (_I.PROGRAM_SEARCH, _O.AMBIGUOUS): "_ambiguous",
    (_I.PROGRAM_SEARCH, _O.NOT_FOUND): "_not_found",
    (_I.PROGRAM_SEARCH, _O.MISSING_SLOT): "_missing_slot",
    (_I.CLARIFICATION_NEEDED, _O.RESOLVED): "_clarify_intent",
    (_I.CLARIFICATION_NEEDED, _O.AMBIGUOUS): "_ambiguous",
    (_I.CLARIFICATION_NEEDED, _O.NOT_FOUND): "_not_found",
    (_I.CLARIFICATION_NEEDED, _O.MISSING_SLOT): "_missing_slot",
}


def classify_outcome(analysis: TurnAnalysis) -> Tuple[Outcome, Optional[str]]:
    """
    Resolution outcome of a turn and the slot it concerns.

    Ambiguity wins over absence: a user who named something should be asked
    which one they meant before being asked for anything else. An unclear
    intent with nothing ambiguous or unknown asks what the user wants.
    """
    needs_program = analysis.intent != QueryIntent.PROGRAM_SEARCH
    inst = analysis.institution_result
    prog = analysis.program_result

    if inst is not None and inst.status == ResolutionStatus.AMBIGUOUS and analysis.institution is None:
        return Outcome.AMBIGUOUS, "institution"
    if (
        needs_program
        and prog is not None
        and prog.status == ResolutionStatus.AMBIGUOUS
        and analysis.program is None
    ):
        return Outcome.AMBIGUOUS, "program"

    # a named institution that does not exist is never swapped for another one
    if inst is not None and inst.status == ResolutionStatus.NOT_FOUND:
        return Outcome.NOT_FOUND, "institution"

    missing = analysis.missing_slots
    if (
        needs_program
        and analysis.intent != QueryIntent.CLARIFICATION_NEEDED
        and prog is not None
        and prog.status == ResolutionStatus.NOT_FOUND
        and analysis.program is None
        and missing
    ):
        return Outcome.NOT_FOUND, "program"

    # leftover words of an unclear message are not a program request
    if analysis.intent == QueryIntent.CLARIFICATION_NEEDED:
        return Outcome.RESOLVED, None

    if missing:
        return Outcome.MISSING_SLOT, missing[0]
    return Outcome.RESOLVED, None


class ResponseComposer:
    """
    Builds a QueryResponse for an analyzed turn.

    Recoverable failures become QueryError values on the response; only
    InternalError is raised.
    """

    def __init__(
        self,
        catalog: CatalogRepository,
        resolver: EntityResolver,
        calculator: NetScoreCalculator,
        config: Optional[AdmissionAgentConfig] = None,
        follow_ups: Optional[FollowUpGenerator] = None,
        index: Optional[CatalogIndex] = None,
    ):
        self._catalog = catalog
        self._resolver = resolver
        self._index = index
        self._calculator = calculator
        self.config = config or AdmissionAgentConfig()
        self._follow_ups = follow_ups or FollowUpGenerator()

    def compose(self, analysis: TurnAnalysis) -> QueryResponse:
        """
        Compose the response for a turn.

        :raises InternalError: if (intent, outcome) has no transition
        """
        outcome, slot = classify_outcome(analysis)
        key = (analysis.intent, outcome)
        handler_name = TRANSITIONS.get(key)
        if handler_name is None:
            raise InternalError(f"No transition for intent={key[0].value}, outcome={key[1].value}")

        logger.debug(f"Composing {analysis.intent.value}/{outcome.value} (slot={slot})")
        handler: Callable[[TurnAnalysis, Optional[str]], QueryResponse] = getattr(self, handler_name)
        return handler(analysis, slot)

    def _query(self, analysis: TurnAnalysis, unresolved: Sequence[str] = ()) -> ResolvedQuery:
        return ResolvedQuery(
            intent=analysis.intent,
            institution=analysis.institution,
            program=analysis.program,
            exam_type=analysis.exam_type,
            target_score=analysis.target_score,
            year=analysis.year,
            confidence=analysis.confidence(),
            unresolved_slots=list(unresolved),
        )

    def _success(self, analysis: TurnAnalysis, **payload) -> QueryResponse:
        response = QueryResponse(query=self._query(analysis), metadata=analysis.metadata, **payload)
        response.suggestions = self._follow_ups.suggest(
            analysis.intent,
            analysis.institution.name if analysis.institution else None,
            analysis.program.name if analysis.program else None,
        )
        return response

    def _failure(
        self,
        analysis: TurnAnalysis,
        kind: ErrorKind,
        details: dict,
        unresolved: Sequence[str] = (),
        candidates: Sequence[str] = (),
    ) -> QueryResponse:
        return QueryResponse(
            query=self._query(analysis, unresolved),
            error=QueryError(kind=kind, details=details),
            suggestions=fallback_suggestions(
                kind,
                candidates=candidates,
                missing_slots=analysis.missing_slots,
                intent=analysis.intent,
            ),
            metadata=analysis.metadata,
        )

    def _records(self, analysis: TurnAnalysis) -> Tuple[List[ScoreRecord], ExamType]:
        program = analysis.program
        records = self._catalog.score_records(program.id)
        if analysis.exam_type is None:
            raise InsufficientHistoricalDataError(
                f"No score records for program {program.id}",
                {"program": program.name},
            )
        return records, analysis.exam_type

    def _coefficients(self, records: Sequence[ScoreRecord], exam_type: ExamType) -> List[NetCoefficient]:
        years = sorted({r.year for r in records if r.exam_type == exam_type})
        return [c for year in years for c in self._catalog.coefficients(exam_type, year)]

    def _calculate(self, analysis: TurnAnalysis, slot: Optional[str]) -> QueryResponse:
        try:
            records, exam_type = self._records(analysis)
            coefficients = self._coefficients(records, exam_type)
            latest_year = self._catalog.latest_year()
            result = self._calculator.calculate(
                analysis.program,
                exam_type,
                records,
                coefficients,
                target_score=analysis.target_score,
                year=analysis.year,
                latest_year=latest_year,
            )
            scenarios = []
            if self.config.include_scenarios and analysis.target_score is None:
                scenarios = self._calculator.calculate_multiple_scenarios(
                    analysis.program,
                    exam_type,
                    records,
                    coefficients,
                    self.config.scenario_margins,
                    year=result.based_on_year,
                    latest_year=latest_year,
                )
            result = self._calculator.with_extras(result, scenarios, recommend_study_plan(result))
        except CalculationError as e:
            logger.info(f"Calculation failed for program {analysis.program.id}: {e}")
            return self._failure(analysis, e.kind, e.details)

        response = self._success(analysis, calculation=result)
        if result.is_low_confidence:
            response.warnings.append(QueryError(
                kind=ErrorKind.LOW_CONFIDENCE,
                details={
                    "basedOnYear": result.based_on_year,
                    "spread": round(result.ceiling_score - result.base_score, 2),
                },
            ))
            response.suggestions = (
                fallback_suggestions(ErrorKind.LOW_CONFIDENCE) + response.suggestions
            )
        return response

    def _lookup(self, analysis: TurnAnalysis, slot: Optional[str]) -> QueryResponse:
        try:
            records, exam_type = self._records(analysis)
            record = self._calculator.select_record(records, exam_type, analysis.year)
        except CalculationError as e:
            return self._failure(analysis, e.kind, e.details)
        return self._success(analysis, lookup=RecordLookup.from_record(record))

    def _list_programs(self, analysis: TurnAnalysis, slot: Optional[str]) -> QueryResponse:
        if analysis.institution is not None:
            programs = sorted(self._catalog.programs(analysis.institution.id), key=lambda p: p.name)
        else:
            candidates = []
            for phrase in analysis.program_phrases:
                candidates = self._resolver.search_programs(
                    phrase, PROGRAM_LISTING_LIMIT, index=self._index
                )
                if candidates:
                    break
            programs = [c.entity for c in candidates]
            if not programs:
                mention = analysis.program_phrases[0] if analysis.program_phrases else ""
                return self._failure(
                    analysis,
                    ErrorKind.ENTITY_NOT_FOUND,
                    {"slot": "program", "mention": mention},
                    unresolved=["program"],
                )

        summaries = []
        for program in programs[:PROGRAM_LISTING_LIMIT]:
            owner = self._catalog.institution(program.institution_id)
            summaries.append(ProgramSummary(
                id=program.id,
                name=program.name,
                institution=owner.name if owner else "",
                faculty=program.faculty,
                language=program.language.value,
            ))
        return self._success(analysis, programs=summaries)

    def _clarify_intent(self, analysis: TurnAnalysis, slot: Optional[str]) -> QueryResponse:
        response = self._success(analysis)
        response.clarification = Clarification(
            slot="intent",
            candidates=[],
            question="Size nasıl yardımcı olabilirim? Net hesaplama, taban puan, kontenjan "
                     "veya bölüm listesi sorabilirsiniz.",
        )
        return response

    def _slot_result(self, analysis: TurnAnalysis, slot: str) -> Optional[ResolutionResult]:
        return analysis.institution_result if slot == "institution" else analysis.program_result

    def _ambiguous(self, analysis: TurnAnalysis, slot: Optional[str]) -> QueryResponse:
        result = self._slot_result(analysis, slot)
        labels = [c.label for c in result.candidates]
        response = self._failure(
            analysis,
            ErrorKind.AMBIGUOUS_ENTITY,
            {"slot": slot, "mention": result.query},
            unresolved=[slot],
            candidates=labels,
        )
        response.clarification = Clarification(
            slot=slot,
            candidates=list(result.candidates),
            question=ambiguity_question(slot, labels),
        )
        return response

    def _not_found(self, analysis: TurnAnalysis, slot: Optional[str]) -> QueryResponse:
        result = self._slot_result(analysis, slot)
        unresolved = [slot] + [s for s in analysis.missing_slots if s != slot]
        return self._failure(
            analysis,
            ErrorKind.ENTITY_NOT_FOUND,
            {"slot": slot, "mention": result.query},
            unresolved=unresolved,
        )

    def _missing_slot(self, analysis: TurnAnalysis, slot: Optional[str]) -> QueryResponse:
        missing = list(analysis.missing_slots)
        return self._failure(
            analysis,
            ErrorKind.MISSING_REQUIRED_SLOT,
            {
                "slots": missing,
                "questions": [clarification_question(analysis.intent, s) for s in missing],
            },
            unresolved=missing,
        )
