import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from .calculation import CalculationResult, NetScoreCalculator
from .catalog import CatalogRepository
from .config import AdmissionAgentConfig
from .context import ConversationContextManager, ConversationStore
from .exceptions import CatalogError
from .intent import IntentClassifier
from .models import ExamType
from .orchestration import QueryPipeline, ResponseComposer
from .resolution import CatalogIndex, EntityResolver, create_entity_resolver
from .schemas import QueryResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    """A catalog with the index and composer built from it; replaced as a whole."""
    catalog: CatalogRepository
    index: CatalogIndex
    composer: ResponseComposer


class AdmissionAgentService:
    """
    Facade over the admission query subsystem.
    The ONLY entry point for the chat orchestration layer.
    """

    def __init__(
        self,
        config: AdmissionAgentConfig,
        catalog: CatalogRepository,
        store: Optional[ConversationStore] = None,
    ):
        """
        Composition root.
        All components (resolver, classifier, calculator, composer) are created and wired here.
        """
        self.config = config

        self._resolver: EntityResolver = create_entity_resolver(config, catalog)
        self._classifier = IntentClassifier(min_score=config.intent_min_score)
        self._context = ConversationContextManager(store, history_size=config.history_size)
        self._calculator = NetScoreCalculator(config)
        self._pipeline = QueryPipeline(self._resolver, self._classifier, self._context)
        self._snapshot = self._build_snapshot(catalog, self._resolver.index)

    def _build_snapshot(self, catalog: CatalogRepository, index: CatalogIndex) -> CatalogSnapshot:
        composer = ResponseComposer(
            catalog, self._resolver, self._calculator, self.config, index=index
        )
        return CatalogSnapshot(catalog=catalog, index=index, composer=composer)

    @property
    def catalog(self) -> CatalogRepository:
        return self._snapshot.catalog

    @property
    def resolver(self) -> EntityResolver:
        return self._resolver

    @property
    def context_manager(self) -> ConversationContextManager:
        return self._context

    # ----------------------------
    # Query handling
    # ----------------------------
    def handle_message(self, text: str, session_id: str) -> QueryResponse:
        """
        Process one chat message and return a structured response.

        Recoverable problems (ambiguity, missing slots, calculation failures)
        are returned on the response; only InternalError is raised.

        :param text: Raw or normalized message text
        :param session_id: Session identifier
        :return: QueryResponse
        """
        snapshot = self._snapshot
        state = self._context.get_or_create(session_id)

        analysis = self._pipeline.analyze(text, state, snapshot.catalog, snapshot.index)
        response = snapshot.composer.compose(analysis)

        filled = analysis.filled
        if analysis.exam_type is not None and analysis.program is not None:
            filled = replace(filled, exam_type=analysis.exam_type)
        self._context.record_turn(state, text, filled)

        outcome = response.error.kind.value if response.error else "ok"
        logger.info(f"Session {session_id}: {analysis.intent.value} -> {outcome}")
        return response

    # ----------------------------
    # Scenario calculation
    # ----------------------------
    def calculate_scenarios(
        self,
        program_id: int,
        exam_type: ExamType,
        margins: Sequence[float],
        year: Optional[int] = None,
    ) -> List[CalculationResult]:
        """
        One calculation per safety margin, in input order.

        :raises CatalogError: if the program does not exist
        :raises ScenarioValidationError: if the margins are rejected
        :raises CalculationError: if the program's data cannot support a calculation
        """
        catalog = self._snapshot.catalog
        program = catalog.program(program_id)
        if program is None:
            raise CatalogError(f"Unknown program id {program_id}")

        records = catalog.score_records(program.id)
        years = sorted({r.year for r in records if r.exam_type == exam_type})
        coefficients = [c for y in years for c in catalog.coefficients(exam_type, y)]
        return self._calculator.calculate_multiple_scenarios(
            program,
            exam_type,
            records,
            coefficients,
            margins,
            year=year,
            latest_year=catalog.latest_year(),
        )

    # ----------------------------
    # Catalog / session lifecycle
    # ----------------------------
    def reload_catalog(self, catalog: CatalogRepository) -> None:
        """
        Replace the catalog and swap in a freshly built index.

        In-flight messages keep the snapshot they started with.
        """
        index = self._resolver.rebuild(catalog)
        self._snapshot = self._build_snapshot(catalog, index)
        logger.info(f"Catalog reloaded (index v{index.version})")

    def end_session(self, session_id: str) -> None:
        """Discard the conversation state of a session."""
        self._context.end_session(session_id)
