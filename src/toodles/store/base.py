"""Abstract base classes for conversational state backends.

This module defines the interfaces for per-user chat history and
sentiment counter storage. The abstraction hides:
- Storage format (dict, SQL tables)
- Persistence mechanism (process memory, database)
- Connection management and concurrency control
"""

from abc import ABC, abstractmethod

from .models import ChatHistory, ChatMessage, ChatRole, Sentiment, UserInteraction


class StateBackend(ABC):
    """Lifecycle shared by every backend."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the backend.

        Raises:
            StoreError: If the backend cannot be reached
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the backend gracefully."""

    async def initialize_schema(self) -> None:
        """Create persistent structures if the backend has any."""

    async def drop_schema(self) -> None:
        """Remove all stored state along with any persistent structures."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "StateBackend":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()


class ChatHistoryStore(StateBackend):
    """Per-user ordered transcript storage.

    Reads never fail with "not found": an unknown user has an empty
    history. Returned histories are snapshots; mutating them does not
    change stored state.
    """

    @abstractmethod
    async def get_chat_history(self, user_id: str) -> ChatHistory:
        """Retrieve a user's full history in conversational order."""

    @abstractmethod
    async def add_user_message(self, user_id: str, content: str) -> None:
        """Append a user message to the tail of the history."""

    @abstractmethod
    async def add_assistant_message(self, user_id: str, content: str) -> None:
        """Append an assistant message to the tail of the history."""

    @abstractmethod
    async def set_system_message(self, user_id: str, content: str) -> None:
        """Insert or replace the system message at position 0."""

    @abstractmethod
    async def clear_chat_history(self, user_id: str) -> None:
        """Remove every message for a user."""

    async def add_chat_message(self, user_id: str, message: ChatMessage) -> None:
        """Store a message according to its role."""
        if message.role == ChatRole.SYSTEM:
            await self.set_system_message(user_id, message.content)
        elif message.role == ChatRole.USER:
            await self.add_user_message(user_id, message.content)
        else:
            await self.add_assistant_message(user_id, message.content)


class UserInteractionStore(StateBackend):
    """Per-user sentiment counter storage.

    Each increment is a single atomic read-modify-write-or-create, so
    concurrent increments for the same user never lose updates. Reads
    may observe the value before or after a concurrent increment.
    """

    @abstractmethod
    async def get_user_interaction(self, user_id: str) -> UserInteraction:
        """Retrieve a user's counters (all zero for an unknown user)."""

    @abstractmethod
    async def increment_positive(self, user_id: str) -> None:
        """Atomically add one to the positive counter."""

    @abstractmethod
    async def increment_negative(self, user_id: str) -> None:
        """Atomically add one to the negative counter."""

    @abstractmethod
    async def increment_neutral(self, user_id: str) -> None:
        """Atomically add one to the neutral counter."""

    @abstractmethod
    async def reset_user_interaction(self, user_id: str) -> None:
        """Zero all counters for a user."""

    async def increment(self, user_id: str, sentiment: Sentiment) -> None:
        """Increment the counter matching ``sentiment``."""
        if sentiment == Sentiment.POSITIVE:
            await self.increment_positive(user_id)
        elif sentiment == Sentiment.NEGATIVE:
            await self.increment_negative(user_id)
        else:
            await self.increment_neutral(user_id)
