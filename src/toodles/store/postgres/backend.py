"""PostgreSQL conversational state backend."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

from ...errors import StoreError
from ..base import ChatHistoryStore, UserInteractionStore
from ..models import ChatHistory, ChatRole, Sentiment, UserInteraction
from ..relational import history_from_rows, interaction_from_row, render_increment
from . import schema

# Errors that mean the database, not the caller, failed
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class PostgresStateStore(ChatHistoryStore, UserInteractionStore):
    """
    PostgreSQL chat history and interaction counters.

    Hides all Postgres-specific details:
    - Connection pooling
    - SQL query construction
    - Upsert-based counter increments

    Concurrency control is left to the database: every increment is one
    ``INSERT ... ON CONFLICT DO UPDATE`` statement, so concurrent
    increments for the same user serialize on the row lock.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        database: str = "toodles",
        user: str = "toodles",
        password: str = "toodles_dev",
        dsn: str | None = None,
        min_pool_size: int = 1,
        max_pool_size: int = 10,
        command_timeout: float = 60.0,
    ):
        """
        Initialize Postgres backend.

        Args:
            host: Database host
            port: Database port
            database: Database name
            user: Database user
            password: Database password
            dsn: Connection string; when set it takes precedence
            min_pool_size: Minimum connection pool size
            max_pool_size: Maximum connection pool size
            command_timeout: Per-statement timeout in seconds
        """
        self._host = host
        self._port = port
        self._database = database
        self._user = user
        self._password = password
        self._dsn = dsn
        self._min_pool_size = min_pool_size
        self._max_pool_size = max_pool_size
        self._command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """Establish database connection pool."""
        if self._pool is not None:
            return

        try:
            if self._dsn:
                self._pool = await asyncpg.create_pool(
                    dsn=self._dsn,
                    min_size=self._min_pool_size,
                    max_size=self._max_pool_size,
                    command_timeout=self._command_timeout,
                )
            else:
                self._pool = await asyncpg.create_pool(
                    host=self._host,
                    port=self._port,
                    database=self._database,
                    user=self._user,
                    password=self._password,
                    min_size=self._min_pool_size,
                    max_size=self._max_pool_size,
                    command_timeout=self._command_timeout,
                )
        except Exception as e:
            raise StoreError(f"Failed to connect to PostgreSQL: {e}") from e

    async def disconnect(self) -> None:
        """Close database connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a pooled connection, wrapping driver errors in StoreError."""
        if self._pool is None:
            raise RuntimeError("Not connected to database")

        try:
            async with self._pool.acquire() as conn:
                yield conn
        except _DRIVER_ERRORS as e:
            raise StoreError(f"PostgreSQL operation failed: {e}") from e

    async def initialize_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        async with self._connection() as conn, conn.transaction():
            await conn.execute(schema.CREATE_CHAT_MESSAGES_TABLE)
            await conn.execute(schema.CREATE_CHAT_MESSAGES_USER_INDEX)
            await conn.execute(schema.CREATE_CHAT_MESSAGES_SYSTEM_INDEX)
            await conn.execute(schema.CREATE_USER_INTERACTION_TABLE)

    async def drop_schema(self) -> None:
        """
        Drop both tables.

        WARNING: This destroys all data!
        """
        async with self._connection() as conn:
            await conn.execute(schema.DROP_TABLES)

    async def get_chat_history(self, user_id: str) -> ChatHistory:
        async with self._connection() as conn:
            rows = await conn.fetch(schema.SELECT_CHAT_HISTORY, user_id)
        return history_from_rows(rows)

    async def _insert_message(self, user_id: str, role: ChatRole, content: str) -> None:
        async with self._connection() as conn:
            await conn.execute(schema.INSERT_CHAT_MESSAGE, user_id, role.value, content)

    async def add_user_message(self, user_id: str, content: str) -> None:
        await self._insert_message(user_id, ChatRole.USER, content)

    async def add_assistant_message(self, user_id: str, content: str) -> None:
        await self._insert_message(user_id, ChatRole.ASSISTANT, content)

    async def set_system_message(self, user_id: str, content: str) -> None:
        async with self._connection() as conn:
            await conn.execute(schema.UPSERT_SYSTEM_MESSAGE, user_id, content)

    async def clear_chat_history(self, user_id: str) -> None:
        async with self._connection() as conn:
            await conn.execute(schema.DELETE_CHAT_HISTORY, user_id)

    async def get_user_interaction(self, user_id: str) -> UserInteraction:
        async with self._connection() as conn:
            row = await conn.fetchrow(schema.SELECT_USER_INTERACTION, user_id)
        return interaction_from_row(row)

    async def _increment(self, user_id: str, sentiment: Sentiment) -> None:
        query = render_increment(schema.INCREMENT_COUNTER, sentiment)
        async with self._connection() as conn:
            await conn.execute(query, user_id)

    async def increment_positive(self, user_id: str) -> None:
        await self._increment(user_id, Sentiment.POSITIVE)

    async def increment_negative(self, user_id: str) -> None:
        await self._increment(user_id, Sentiment.NEGATIVE)

    async def increment_neutral(self, user_id: str) -> None:
        await self._increment(user_id, Sentiment.NEUTRAL)

    async def reset_user_interaction(self, user_id: str) -> None:
        async with self._connection() as conn:
            await conn.execute(schema.RESET_USER_INTERACTION, user_id)

    @property
    def backend_type(self) -> str:
        return "postgres"
