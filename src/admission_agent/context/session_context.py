"""
Conversation state domain objects.

Pure domain models - no transport, no persistence, no resolution logic.
"""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional

from ..intent import QueryIntent
from ..models import ExamType, Institution, Program


@dataclass(frozen=True)
class TurnRecord:
    """One handled message, kept in the bounded history window."""
    message: str
    intent: QueryIntent
    institution_id: Optional[int] = None
    program_id: Optional[int] = None
    exam_type: Optional[ExamType] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ConversationState:
    """Session state - single source of truth for carried-over slots."""
    session_id: str
    institution: Optional[Institution] = None
    program: Optional[Program] = None
    exam_type: Optional[ExamType] = None
    last_intent: Optional[QueryIntent] = None
    history: Deque[TurnRecord] = field(default_factory=lambda: deque(maxlen=5))

    def has_slots(self) -> bool:
        """Check if any slot has been resolved in this session."""
        return any(v is not None for v in (self.institution, self.program, self.exam_type))

    def recent_turns(self) -> List[TurnRecord]:
        return list(self.history)

    def clear(self) -> None:
        """Forget every slot and the history."""
        self.institution = None
        self.program = None
        self.exam_type = None
        self.last_intent = None
        self.history.clear()


@dataclass(frozen=True)
class TurnSlots:
    """
    Slots the current message resolved on its own.

    ``institution_mentioned`` is True when the message named an institution,
    even if it did not resolve; such a turn never inherits the stored one.
    """
    institution: Optional[Institution] = None
    program: Optional[Program] = None
    exam_type: Optional[ExamType] = None
    institution_mentioned: bool = False
    program_mentioned: bool = False

    def any_slot(self) -> bool:
        return (
            self.institution is not None
            or self.program is not None
            or self.exam_type is not None
            or self.institution_mentioned
            or self.program_mentioned
        )


@dataclass(frozen=True)
class FilledSlots:
    """Slots after carry-over from the conversation state."""
    intent: QueryIntent
    institution: Optional[Institution] = None
    program: Optional[Program] = None
    exam_type: Optional[ExamType] = None
    carried_over: List[str] = field(default_factory=list)
    topic_switch: bool = False
