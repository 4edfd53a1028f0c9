"""Conversational state storage for toodles.

Per-user chat transcripts and sentiment counters behind one interface,
with in-memory, SQLite and PostgreSQL backends.
"""

from .base import ChatHistoryStore, StateBackend, UserInteractionStore
from .factory import SUPPORTED_BACKENDS, create_state_store, create_stores
from .in_memory import InMemoryStateStore
from .models import ChatHistory, ChatMessage, ChatRole, Sentiment, UserInteraction

__all__ = [
    "ChatHistory",
    "ChatHistoryStore",
    "ChatMessage",
    "ChatRole",
    "InMemoryStateStore",
    "SUPPORTED_BACKENDS",
    "Sentiment",
    "StateBackend",
    "UserInteraction",
    "UserInteractionStore",
    "create_state_store",
    "create_stores",
]
