"""
Query pipeline - read path from raw message to filled slots.

normalize → classify + extract → resolve mentions → carry over context.
Produces a TurnAnalysis; deciding what to answer is the composer's job.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..catalog import CatalogRepository
from ..context import ConversationContextManager, ConversationState, FilledSlots, TurnSlots
from ..intent import IntentClassification, IntentClassifier, QueryIntent
from ..models import ExamType, Institution, Program
from ..normalizer import NormalizedText, normalize
from ..resolution import (
    CatalogIndex,
    EntityExtractor,
    EntityResolver,
    ExtractedEntities,
    ResolutionMetadata,
    ResolutionResult,
    ResolutionStatus,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnAnalysis:
    """Everything known about one message before an answer is composed."""
    message: str
    normalized: NormalizedText
    classification: IntentClassification
    extracted: ExtractedEntities
    institution_result: Optional[ResolutionResult]
    program_result: Optional[ResolutionResult]
    filled: FilledSlots
    exam_type: Optional[ExamType] = None
    exam_type_options: Tuple[ExamType, ...] = ()
    missing_slots: Tuple[str, ...] = ()
    metadata: Optional[ResolutionMetadata] = None
    program_phrases: Tuple[str, ...] = ()

    @property
    def intent(self) -> QueryIntent:
        return self.filled.intent

    @property
    def institution(self) -> Optional[Institution]:
        return self.filled.institution

    @property
    def program(self) -> Optional[Program]:
        return self.filled.program

    @property
    def target_score(self) -> Optional[float]:
        return self.extracted.target_score

    @property
    def year(self) -> Optional[int]:
        return self.extracted.year

    def confidence(self) -> float:
        """Lowest of the intent confidence and the confidences resolved this turn."""
        values = []
        if self.intent == self.classification.intent:
            values.append(self.classification.confidence)
        resolved = self.metadata.confidence() if self.metadata else None
        if resolved is not None:
            values.append(resolved)
        return min(values) if values else self.classification.confidence


@dataclass
class _ExtractorCache:
    version: int = -1
    extractor: EntityExtractor = field(default_factory=EntityExtractor)


class QueryPipeline:
    """
    Runs the read path for one message.

    Every lookup of a message goes to the one index snapshot taken when the
    message arrives; the extractor's gazetteer is rebuilt only when the index
    version changes.
    """

    def __init__(
        self,
        resolver: EntityResolver,
        classifier: IntentClassifier,
        context_manager: ConversationContextManager,
    ):
        self._resolver = resolver
        self._classifier = classifier
        self._context = context_manager
        self._extractors = _ExtractorCache()

    def _extractor_for(self, index: CatalogIndex) -> EntityExtractor:
        cache = self._extractors
        if cache.version != index.version:
            self._extractors = _ExtractorCache(
                version=index.version,
                extractor=EntityExtractor(index.institution_gazetteer),
            )
        return self._extractors.extractor

    def analyze(
        self,
        message: str,
        state: ConversationState,
        catalog: CatalogRepository,
        index: Optional[CatalogIndex] = None,
    ) -> TurnAnalysis:
        """
        Analyze a message in the context of a session.

        :param message: Raw user message
        :param state: Session state (read, not modified)
        :param catalog: Catalog used for ownership and exam type lookups
        :param index: Index snapshot built from catalog (the resolver's current one if None)
        :return: TurnAnalysis
        """
        if index is None:
            index = self._resolver.index
        normalized = normalize(message)
        classification = self._classifier.classify(normalized)
        extracted = self._extractor_for(index).extract(normalized)
        metadata = ResolutionMetadata(original_query=message, normalized_query=normalized.text)

        institution_mentions = [m.text for m in extracted.institution_mentions]
        program_mentions = [m.text for m in extracted.program_mentions]

        institution_result = self._resolver.resolve_best_institution(institution_mentions, index=index)
        scope = self._program_scope(institution_result, bool(institution_mentions), state)
        program_result = self._resolver.resolve_best_program(program_mentions, scope, index=index)

        if (
            institution_result is None
            and program_mentions
            and (program_result is None or not program_result.is_resolved)
        ):
            # a bare institution name ("peki bogazici") lands among program mentions
            moved = self._resolver.resolve_best_institution(program_mentions, index=index)
            if moved is not None and moved.is_resolved:
                institution_result = moved
                program_mentions = [m for m in program_mentions if m != moved.query]
                program_result = self._resolver.resolve_best_program(
                    program_mentions, moved.entity.id, index=index
                )

        turn_institution = institution_result.entity if institution_result else None
        turn_program = program_result.entity if program_result else None
        if institution_result is not None and institution_result.status == ResolutionStatus.NOT_FOUND:
            # the owner of an unscoped program match must not stand in for an unknown institution
            turn_program = None

        if institution_result is not None:
            metadata.add("institution", institution_result)
        if program_result is not None:
            metadata.add("program", program_result)

        turn_program = self._rematch_program(
            state, turn_institution, turn_program, bool(program_mentions), metadata, index
        )

        turn = TurnSlots(
            institution=turn_institution,
            program=turn_program,
            exam_type=extracted.exam_type,
            institution_mentioned=institution_result is not None,
            program_mentioned=bool(program_mentions),
        )
        filled = self._context.fill_slots(state, classification.intent, turn)
        filled = self._align_institution(filled, catalog)
        metadata.carried_over.extend(filled.carried_over)

        exam_type, options = self._exam_type(filled, extracted.exam_type, catalog)
        missing = self._missing_slots(filled, exam_type, options, program_mentions)

        logger.debug(
            f"Turn '{normalized.text}': intent={filled.intent.value}, "
            f"institution={filled.institution.id if filled.institution else None}, "
            f"program={filled.program.id if filled.program else None}, missing={missing}"
        )

        return TurnAnalysis(
            message=message,
            normalized=normalized,
            classification=classification,
            extracted=extracted,
            institution_result=institution_result,
            program_result=program_result,
            filled=filled,
            exam_type=exam_type,
            exam_type_options=options,
            missing_slots=missing,
            metadata=metadata,
            program_phrases=tuple(program_mentions),
        )

    @staticmethod
    def _program_scope(
        institution_result: Optional[ResolutionResult],
        mentioned: bool,
        state: ConversationState,
    ) -> Optional[int]:
        if institution_result is not None and institution_result.is_resolved:
            return institution_result.entity.id
        if not mentioned and state.institution is not None:
            return state.institution.id
        return None

    def _rematch_program(
        self,
        state: ConversationState,
        institution: Optional[Institution],
        program: Optional[Program],
        program_mentioned: bool,
        metadata: ResolutionMetadata,
        index: CatalogIndex,
    ) -> Optional[Program]:
        """
        On a switch to another institution, look for the stored program there.

        "peki ODTÜ?" after a question about Boğaziçi Bilgisayar Mühendisliği
        asks about ODTÜ's program of the same name, not Boğaziçi's.
        """
        if (
            program is not None
            or program_mentioned
            or institution is None
            or state.program is None
            or state.institution is None
            or state.institution.id == institution.id
        ):
            return program

        result = self._resolver.resolve_program(state.program.name, institution.id, index=index)
        if result.is_resolved:
            metadata.add("program", result)
            return result.entity
        return None

    @staticmethod
    def _align_institution(filled: FilledSlots, catalog: CatalogRepository) -> FilledSlots:
        """The program's owner is the institution; fix carried mismatches."""
        program = filled.program
        if program is None:
            return filled
        if filled.institution is not None and filled.institution.id == program.institution_id:
            return filled
        owner = catalog.institution(program.institution_id)
        return FilledSlots(
            intent=filled.intent,
            institution=owner,
            program=program,
            exam_type=filled.exam_type,
            carried_over=list(filled.carried_over),
            topic_switch=filled.topic_switch,
        )

    @staticmethod
    def _exam_type(
        filled: FilledSlots,
        explicit: Optional[ExamType],
        catalog: CatalogRepository,
    ) -> Tuple[Optional[ExamType], Tuple[ExamType, ...]]:
        """Exam type to use and the exam types the program has records for."""
        if filled.program is None:
            return filled.exam_type, ()

        options = tuple(sorted(
            {r.exam_type for r in catalog.score_records(filled.program.id)},
            key=lambda e: e.value,
        ))
        if explicit is not None:
            return explicit, options
        if filled.exam_type is not None and (filled.exam_type in options or not options):
            return filled.exam_type, options
        if len(options) == 1:
            return options[0], options
        return None, options

    @staticmethod
    def _missing_slots(
        filled: FilledSlots,
        exam_type: Optional[ExamType],
        options: Tuple[ExamType, ...],
        program_mentions: List[str],
    ) -> Tuple[str, ...]:
        intent = filled.intent
        if intent == QueryIntent.PROGRAM_SEARCH:
            if filled.institution is None and not program_mentions:
                return ("institution",)
            return ()

        missing = []
        for slot in QueryIntent.required_slots(intent):
            if getattr(filled, slot) is None:
                missing.append(slot)
        if (
            intent != QueryIntent.CLARIFICATION_NEEDED
            and filled.program is not None
            and exam_type is None
            and len(options) > 1
        ):
            missing.append("exam_type")
        return tuple(missing)
