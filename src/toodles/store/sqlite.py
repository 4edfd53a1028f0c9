"""SQLite conversational state backend.

Provides persistent chat history and counters in a single database file.
Uses aiosqlite for async access.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from ..errors import StoreError
from .base import ChatHistoryStore, UserInteractionStore
from .models import ChatHistory, ChatRole, Sentiment, UserInteraction
from .relational import history_from_rows, interaction_from_row, render_increment

_INCREMENT_COUNTER = """
    INSERT INTO user_interaction (user_id, num_positive, num_negative, num_neutral)
    VALUES (?, {positive}, {negative}, {neutral})
    ON CONFLICT (user_id)
    DO UPDATE SET
        {column} = user_interaction.{column} + 1,
        last_interaction = CURRENT_TIMESTAMP
"""


class SQLiteStateStore(ChatHistoryStore, UserInteractionStore):
    """SQLite-backed chat history and interaction counters.

    Mirrors the PostgreSQL table pair. The connection runs in autocommit
    mode, so every statement, including each increment upsert, is its own
    atomic transaction.
    """

    def __init__(self, path: str | Path = "./toodles.db"):
        self._db_path = path if path == ":memory:" else Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database connection and create the schema."""
        if self._connection is not None:
            return

        try:
            if isinstance(self._db_path, Path):
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self._db_path, isolation_level=None)
        except (aiosqlite.Error, OSError) as e:
            raise StoreError(f"Failed to open SQLite database {self._db_path}: {e}") from e

        await self.initialize_schema()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @asynccontextmanager
    async def _db(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield the open connection, wrapping driver errors in StoreError."""
        if self._connection is None:
            raise RuntimeError("Not connected to database")

        try:
            yield self._connection
        except aiosqlite.Error as e:
            raise StoreError(f"SQLite operation failed: {e}") from e

    async def initialize_schema(self) -> None:
        """Create database tables."""
        async with self._db() as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS chat_messages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    role TEXT NOT NULL,
                    content TEXT NOT NULL,
                    timestamp TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
                )
            """)

            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_chat_messages_user
                ON chat_messages(user_id, timestamp, id)
            """)

            await db.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_chat_messages_system
                ON chat_messages(user_id)
                WHERE role = 'system'
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS user_interaction (
                    user_id TEXT PRIMARY KEY,
                    num_positive INTEGER NOT NULL DEFAULT 0 CHECK (num_positive >= 0),
                    num_negative INTEGER NOT NULL DEFAULT 0 CHECK (num_negative >= 0),
                    num_neutral INTEGER NOT NULL DEFAULT 0 CHECK (num_neutral >= 0),
                    last_interaction TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)

    async def drop_schema(self) -> None:
        """
        Drop both tables.

        WARNING: This destroys all data!
        """
        async with self._db() as db:
            await db.execute("DROP TABLE IF EXISTS chat_messages")
            await db.execute("DROP TABLE IF EXISTS user_interaction")

    async def get_chat_history(self, user_id: str) -> ChatHistory:
        async with self._db() as db:
            async with db.execute(
                """
                SELECT role, content
                FROM chat_messages
                WHERE user_id = ?
                ORDER BY (role = 'system') DESC, timestamp ASC, id ASC
                """,
                (user_id,)
            ) as cursor:
                rows = await cursor.fetchall()

        return history_from_rows(rows)

    async def _insert_message(self, user_id: str, role: ChatRole, content: str) -> None:
        async with self._db() as db:
            await db.execute(
                "INSERT INTO chat_messages (user_id, role, content) VALUES (?, ?, ?)",
                (user_id, role.value, content)
            )

    async def add_user_message(self, user_id: str, content: str) -> None:
        await self._insert_message(user_id, ChatRole.USER, content)

    async def add_assistant_message(self, user_id: str, content: str) -> None:
        await self._insert_message(user_id, ChatRole.ASSISTANT, content)

    async def set_system_message(self, user_id: str, content: str) -> None:
        async with self._db() as db:
            await db.execute("""
                INSERT INTO chat_messages (user_id, role, content)
                VALUES (?, 'system', ?)
                ON CONFLICT (user_id) WHERE role = 'system'
                DO UPDATE SET
                    content = excluded.content,
                    timestamp = strftime('%Y-%m-%d %H:%M:%f', 'now')
            """, (user_id, content))

    async def clear_chat_history(self, user_id: str) -> None:
        async with self._db() as db:
            await db.execute("DELETE FROM chat_messages WHERE user_id = ?", (user_id,))

    async def get_user_interaction(self, user_id: str) -> UserInteraction:
        async with self._db() as db:
            async with db.execute(
                """
                SELECT num_positive, num_negative, num_neutral
                FROM user_interaction
                WHERE user_id = ?
                """,
                (user_id,)
            ) as cursor:
                row = await cursor.fetchone()

        return interaction_from_row(row)

    async def _increment(self, user_id: str, sentiment: Sentiment) -> None:
        async with self._db() as db:
            await db.execute(render_increment(_INCREMENT_COUNTER, sentiment), (user_id,))

    async def increment_positive(self, user_id: str) -> None:
        await self._increment(user_id, Sentiment.POSITIVE)

    async def increment_negative(self, user_id: str) -> None:
        await self._increment(user_id, Sentiment.NEGATIVE)

    async def increment_neutral(self, user_id: str) -> None:
        await self._increment(user_id, Sentiment.NEUTRAL)

    async def reset_user_interaction(self, user_id: str) -> None:
        async with self._db() as db:
            await db.execute("""
                UPDATE user_interaction
                SET num_positive = 0, num_negative = 0, num_neutral = 0,
                    last_interaction = CURRENT_TIMESTAMP
                WHERE user_id = ?
            """, (user_id,))

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> str | Path:
        return self._db_path
