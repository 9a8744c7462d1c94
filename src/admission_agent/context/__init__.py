"""
Conversation context layer.

Per-session slot carry-over for follow-up questions.
"""
from .session_context import ConversationState, FilledSlots, TurnRecord, TurnSlots
from .context_manager import (
    ConversationContextManager,
    ConversationStore,
    InMemoryConversationStore,
)

__all__ = [
    "ConversationState",
    "FilledSlots",
    "TurnRecord",
    "TurnSlots",
    "ConversationContextManager",
    "ConversationStore",
    "InMemoryConversationStore",
]
