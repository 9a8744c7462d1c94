"""
Conversation context manager.

Manages ConversationState instances per session ID and fills the slots a
message leaves open from earlier turns.
"""
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Dict, Optional

from ..intent import QueryIntent
from .session_context import ConversationState, FilledSlots, TurnRecord, TurnSlots

logger = logging.getLogger(__name__)


class ConversationStore(ABC):
    """
    Protocol for session state persistence.

    Callers guarantee a single writer per session; implementations do not
    lock.
    """

    @abstractmethod
    def get_state(self, session_id: str) -> Optional[ConversationState]:
        pass

    @abstractmethod
    def set_state(self, state: ConversationState) -> None:
        pass

    @abstractmethod
    def clear_state(self, session_id: str) -> None:
        pass


class InMemoryConversationStore(ConversationStore):
    """Dict-backed store; state lives as long as the process."""

    def __init__(self):
        self._states: Dict[str, ConversationState] = {}

    def get_state(self, session_id: str) -> Optional[ConversationState]:
        return self._states.get(session_id)

    def set_state(self, state: ConversationState) -> None:
        self._states[state.session_id] = state

    def clear_state(self, session_id: str) -> None:
        self._states.pop(session_id, None)

    def clear_all(self) -> None:
        """Clear all sessions."""
        self._states.clear()


class ConversationContextManager:
    """
    Carries slots across turns of one session.

    Purpose:
    - Fill slots a follow-up message omits ("peki ODTÜ?")
    - Detect topic switches (a different institution drops the stored program)
    - Keep a bounded history window per session
    """

    def __init__(self, store: Optional[ConversationStore] = None, history_size: int = 5):
        """
        :param store: Session store (in-memory if None)
        :param history_size: Number of turns kept per session
        """
        self._store = store or InMemoryConversationStore()
        self.history_size = history_size

    @property
    def store(self) -> ConversationStore:
        return self._store

    def get_or_create(self, session_id: str) -> ConversationState:
        """
        Get or create state for a session.

        :param session_id: Session identifier
        :return: ConversationState instance
        """
        state = self._store.get_state(session_id)
        if state is None:
            state = ConversationState(
                session_id=session_id,
                history=deque(maxlen=self.history_size),
            )
            self._store.set_state(state)
        return state

    def fill_slots(
        self,
        state: ConversationState,
        intent: QueryIntent,
        turn: TurnSlots,
    ) -> FilledSlots:
        """
        Combine this turn's slots with the stored ones.

        :param state: Current session state (not modified)
        :param intent: Intent classified for this message
        :param turn: Slots resolved from this message
        :return: FilledSlots used to answer the message
        """
        carried = []

        topic_switch = (
            turn.institution is not None
            and state.institution is not None
            and turn.institution.id != state.institution.id
        )

        institution = turn.institution
        if institution is None and not turn.institution_mentioned and state.institution is not None:
            institution = state.institution
            carried.append("institution")

        program = turn.program
        if (
            program is None
            and not turn.program_mentioned
            and not topic_switch
            and not turn.institution_mentioned
            and state.program is not None
        ):
            program = state.program
            carried.append("program")

        exam_type = turn.exam_type
        if exam_type is None and state.exam_type is not None:
            exam_type = state.exam_type
            carried.append("exam_type")

        resolved_intent = intent
        if (
            intent == QueryIntent.CLARIFICATION_NEEDED
            and turn.any_slot()
            and state.last_intent is not None
        ):
            resolved_intent = state.last_intent
            carried.append("intent")

        if carried:
            logger.debug(
                f"Session {state.session_id}: carried {carried} "
                f"(topic_switch={topic_switch})"
            )

        return FilledSlots(
            intent=resolved_intent,
            institution=institution,
            program=program,
            exam_type=exam_type,
            carried_over=carried,
            topic_switch=topic_switch,
        )

    def record_turn(
        self,
        state: ConversationState,
        message: str,
        filled: FilledSlots,
    ) -> ConversationState:
        """
        Store the slots of a handled turn.

        Resolved slots overwrite stored ones; unresolved slots keep their
        prior value, except that a topic switch clears the stored program.

        :return: The updated state
        """
        if filled.institution is not None:
            state.institution = filled.institution
        if filled.topic_switch and filled.program is None:
            state.program = None
        if filled.program is not None:
            state.program = filled.program
        if filled.exam_type is not None:
            state.exam_type = filled.exam_type
        if filled.intent != QueryIntent.CLARIFICATION_NEEDED:
            state.last_intent = filled.intent

        state.history.append(TurnRecord(
            message=message,
            intent=filled.intent,
            institution_id=state.institution.id if state.institution else None,
            program_id=state.program.id if state.program else None,
            exam_type=state.exam_type,
        ))
        self._store.set_state(state)
        return state

    def end_session(self, session_id: str) -> None:
        """Drop all state for a session."""
        self._store.clear_state(session_id)
