"""
Toodles: per-user conversational state for a sentiment-aware chat agent.

Each user's transcript and sentiment counters live behind one store
interface with interchangeable backends; the counters decide the mood
of the agent's next reply.
"""

__version__ = "0.1.0"

from .errors import ClassificationError, GenerationError, StoreError, ToodlesError
from .mood import Mood, RewardRule, derive_directive
from .store import (
    ChatHistory,
    ChatHistoryStore,
    ChatMessage,
    ChatRole,
    Sentiment,
    UserInteraction,
    UserInteractionStore,
    create_stores,
)

__all__ = [
    "ChatHistory",
    "ChatHistoryStore",
    "ChatMessage",
    "ChatRole",
    "ClassificationError",
    "GenerationError",
    "Mood",
    "RewardRule",
    "Sentiment",
    "StoreError",
    "ToodlesError",
    "UserInteraction",
    "UserInteractionStore",
    "create_stores",
    "derive_directive",
]
