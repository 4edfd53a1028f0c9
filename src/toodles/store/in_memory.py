"""In-memory conversational state backend.

Dict-based storage for a single process. Data is lost when the
application exits.
"""

import asyncio

from .base import ChatHistoryStore, UserInteractionStore
from .models import ChatHistory, ChatRole, UserInteraction


class _UserRecord:
    """Everything stored for one user."""

    __slots__ = ("history", "interaction")

    def __init__(self) -> None:
        self.history = ChatHistory()
        self.interaction = UserInteraction()


class InMemoryStateStore(ChatHistoryStore, UserInteractionStore):
    """In-memory chat history and interaction counters.

    One map from user id to record, guarded by a single lock covering
    the whole map. Every read and write, including the lazy creation of
    a missing record, runs under the lock, so increments never lose
    updates.
    """

    def __init__(self) -> None:
        self._records: dict[str, _UserRecord] = {}
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """Initialize memory (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close memory (no-op for in-memory)."""
        pass

    async def drop_schema(self) -> None:
        """Forget every user."""
        async with self._lock:
            self._records.clear()

    def _record(self, user_id: str) -> _UserRecord:
        """Get or create a user's record. Caller must hold the lock."""
        record = self._records.get(user_id)
        if record is None:
            record = self._records[user_id] = _UserRecord()
        return record

    async def get_chat_history(self, user_id: str) -> ChatHistory:
        async with self._lock:
            return self._record(user_id).history.model_copy(deep=True)

    async def add_user_message(self, user_id: str, content: str) -> None:
        async with self._lock:
            self._record(user_id).history.add_message(ChatRole.USER, content)

    async def add_assistant_message(self, user_id: str, content: str) -> None:
        async with self._lock:
            self._record(user_id).history.add_message(ChatRole.ASSISTANT, content)

    async def set_system_message(self, user_id: str, content: str) -> None:
        async with self._lock:
            self._record(user_id).history.set_system_message(content)

    async def clear_chat_history(self, user_id: str) -> None:
        async with self._lock:
            self._record(user_id).history.clear()

    async def get_user_interaction(self, user_id: str) -> UserInteraction:
        async with self._lock:
            return self._record(user_id).interaction.model_copy()

    async def increment_positive(self, user_id: str) -> None:
        async with self._lock:
            self._record(user_id).interaction.increment_positive()

    async def increment_negative(self, user_id: str) -> None:
        async with self._lock:
            self._record(user_id).interaction.increment_negative()

    async def increment_neutral(self, user_id: str) -> None:
        async with self._lock:
            self._record(user_id).interaction.increment_neutral()

    async def reset_user_interaction(self, user_id: str) -> None:
        async with self._lock:
            self._record(user_id).interaction.reset()

    @property
    def backend_type(self) -> str:
        return "memory"
