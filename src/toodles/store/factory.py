"""Factory for creating conversational state backends."""

from typing import Any

from .base import ChatHistoryStore, UserInteractionStore

SUPPORTED_BACKENDS = ("memory", "sqlite", "postgres")


def create_state_store(backend: str = "memory", **kwargs: Any) -> ChatHistoryStore:
    """Create a backend implementing both store interfaces.

    Every backend implements ``ChatHistoryStore`` and
    ``UserInteractionStore`` on one object, so the history and counters
    share a connection.

    Args:
        backend: Backend type ("memory", "sqlite" or "postgres")
        **kwargs: Backend-specific configuration

    Returns:
        Store instance (not yet connected)

    Raises:
        ValueError: If backend type is not supported

    Example:
        >>> store = create_state_store("sqlite", path="./toodles.db")
        >>> await store.connect()
    """
    if backend == "memory":
        from .in_memory import InMemoryStateStore
        return InMemoryStateStore(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteStateStore
        return SQLiteStateStore(**kwargs)

    elif backend == "postgres":
        from .postgres import PostgresStateStore
        return PostgresStateStore(**kwargs)

    raise ValueError(
        f"Unsupported state backend: {backend}. "
        f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
    )


def create_stores(
    backend: str = "memory",
    **kwargs: Any
) -> tuple[ChatHistoryStore, UserInteractionStore]:
    """Create the (history, interaction) store pair for a backend.

    Both elements are the same object; connect and disconnect it once.
    """
    store = create_state_store(backend, **kwargs)
    return store, store  # type: ignore[return-value]
