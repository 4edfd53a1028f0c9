"""Backend-independent tests for the state stores.

Every test in TestChatHistoryStore and TestUserInteractionStore runs once
per backend through the parametrized ``store`` fixture.
"""
import asyncio

import aiosqlite
import pytest

from toodles.errors import StoreError
from toodles.store import (
    ChatHistoryStore,
    ChatMessage,
    ChatRole,
    InMemoryStateStore,
    Sentiment,
    UserInteraction,
    UserInteractionStore,
    create_state_store,
    create_stores,
)
from toodles.store.postgres import PostgresStateStore
from toodles.store.sqlite import SQLiteStateStore


class TestStoreInterfaces:
    """Tests for the abstract interfaces."""

    def test_history_store_is_abstract(self):
        with pytest.raises(TypeError):
            ChatHistoryStore()  # type: ignore

    def test_interaction_store_is_abstract(self):
        with pytest.raises(TypeError):
            UserInteractionStore()  # type: ignore


class TestChatHistoryStore:
    """Contract tests for ChatHistoryStore."""

    @pytest.mark.asyncio
    async def test_unknown_user_has_empty_history(self, store, user_id):
        history = await store.get_chat_history(user_id)
        assert history.messages == []

    @pytest.mark.asyncio
    async def test_append_then_fetch_round_trip(self, store, user_id):
        """Test that an appended message is returned last with the same role and content."""
        await store.add_user_message(user_id, "Hello, Toodles!")
        history = await store.get_chat_history(user_id)
        assert history.last_message() == ChatMessage(role=ChatRole.USER, content="Hello, Toodles!")

        await store.add_assistant_message(user_id, "Honk honk!")
        history = await store.get_chat_history(user_id)
        assert history.last_message() == ChatMessage(role=ChatRole.ASSISTANT, content="Honk honk!")

    @pytest.mark.asyncio
    async def test_messages_keep_order(self, store, user_id):
        contents = [f"message {i}" for i in range(10)]
        for i, content in enumerate(contents):
            if i % 2 == 0:
                await store.add_user_message(user_id, content)
            else:
                await store.add_assistant_message(user_id, content)

        history = await store.get_chat_history(user_id)

        assert [m.content for m in history.messages] == contents
        assert [m.role for m in history.messages] == [
            ChatRole.USER if i % 2 == 0 else ChatRole.ASSISTANT for i in range(10)
        ]

    @pytest.mark.asyncio
    async def test_system_message_set_after_appends_is_first(self, store, user_id):
        await store.add_user_message(user_id, "hi")
        await store.add_assistant_message(user_id, "honk")
        await store.set_system_message(user_id, "be nice")

        history = await store.get_chat_history(user_id)

        assert history.messages[0] == ChatMessage(role=ChatRole.SYSTEM, content="be nice")
        assert [m.content for m in history.messages[1:]] == ["hi", "honk"]

    @pytest.mark.asyncio
    async def test_system_message_stays_first_after_more_appends(self, store, user_id):
        await store.set_system_message(user_id, "be nice")
        await store.add_user_message(user_id, "hi")
        await store.add_assistant_message(user_id, "honk")

        history = await store.get_chat_history(user_id)

        assert history.messages[0].role == ChatRole.SYSTEM
        assert [m.content for m in history.messages] == ["be nice", "hi", "honk"]

    @pytest.mark.asyncio
    async def test_set_system_message_replaces(self, store, user_id):
        await store.set_system_message(user_id, "first")
        await store.add_user_message(user_id, "hi")
        await store.set_system_message(user_id, "second")
        await store.add_assistant_message(user_id, "honk")

        history = await store.get_chat_history(user_id)

        assert [(m.role, m.content) for m in history.messages] == [
            (ChatRole.SYSTEM, "second"),
            (ChatRole.USER, "hi"),
            (ChatRole.ASSISTANT, "honk"),
        ]

    @pytest.mark.asyncio
    async def test_returned_history_is_independent(self, store, user_id):
        """Test that mutating a fetched history does not touch the store."""
        await store.add_user_message(user_id, "hi")

        history = await store.get_chat_history(user_id)
        history.add_user_message("not stored")
        history.set_system_message("not stored either")

        stored = await store.get_chat_history(user_id)
        assert [m.content for m in stored.messages] == ["hi"]

    @pytest.mark.asyncio
    async def test_add_chat_message_routes_by_role(self, store, user_id):
        await store.add_chat_message(user_id, ChatMessage(role=ChatRole.USER, content="hi"))
        await store.add_chat_message(user_id, ChatMessage(role=ChatRole.SYSTEM, content="directive"))
        await store.add_chat_message(user_id, ChatMessage(role=ChatRole.ASSISTANT, content="honk"))

        history = await store.get_chat_history(user_id)

        assert [m.role for m in history.messages] == [
            ChatRole.SYSTEM, ChatRole.USER, ChatRole.ASSISTANT
        ]

    @pytest.mark.asyncio
    async def test_clear_history(self, store, user_id):
        await store.set_system_message(user_id, "directive")
        await store.add_user_message(user_id, "hi")

        await store.clear_chat_history(user_id)

        history = await store.get_chat_history(user_id)
        assert history.messages == []

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, store, user_id):
        other = f"{user_id}-other"
        await store.add_user_message(user_id, "mine")
        await store.add_user_message(other, "theirs")

        assert [m.content for m in (await store.get_chat_history(user_id)).messages] == ["mine"]
        assert [m.content for m in (await store.get_chat_history(other)).messages] == ["theirs"]


class TestUserInteractionStore:
    """Contract tests for UserInteractionStore."""

    @pytest.mark.asyncio
    async def test_unknown_user_has_zero_counters(self, store, user_id):
        interaction = await store.get_user_interaction(user_id)
        assert interaction == UserInteraction()

    @pytest.mark.asyncio
    async def test_increments_touch_only_their_counter(self, store, user_id):
        await store.increment_positive(user_id)
        assert await store.get_user_interaction(user_id) == UserInteraction(num_positive=1)

        await store.increment_negative(user_id)
        assert await store.get_user_interaction(user_id) == UserInteraction(
            num_positive=1, num_negative=1
        )

        await store.increment_neutral(user_id)
        await store.increment_neutral(user_id)
        assert await store.get_user_interaction(user_id) == UserInteraction(
            num_positive=1, num_negative=1, num_neutral=2
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sentiment", list(Sentiment))
    async def test_first_increment_creates_row(self, store, user_id, sentiment):
        """Test that the first increment for a new user starts that counter at 1."""
        await store.increment(user_id, sentiment)

        interaction = await store.get_user_interaction(user_id)

        assert interaction.total == 1
        assert getattr(interaction, f"num_{sentiment.value}") == 1

    @pytest.mark.asyncio
    async def test_reset(self, store, user_id):
        await store.increment_positive(user_id)
        await store.increment_negative(user_id)

        await store.reset_user_interaction(user_id)

        assert await store.get_user_interaction(user_id) == UserInteraction()

        await store.increment_neutral(user_id)
        assert await store.get_user_interaction(user_id) == UserInteraction(num_neutral=1)

    @pytest.mark.asyncio
    async def test_reset_unknown_user_is_harmless(self, store, user_id):
        await store.reset_user_interaction(user_id)
        assert await store.get_user_interaction(user_id) == UserInteraction()

    @pytest.mark.asyncio
    async def test_concurrent_increments_are_not_lost(self, store, user_id):
        """Test that N concurrent increments of one counter end at N."""
        n = 50

        await asyncio.gather(*(store.increment_positive(user_id) for _ in range(n)))

        interaction = await store.get_user_interaction(user_id)
        assert interaction.num_positive == n
        assert interaction.num_negative == 0

    @pytest.mark.asyncio
    async def test_concurrent_mixed_increments(self, store, user_id):
        await asyncio.gather(
            *(store.increment_positive(user_id) for _ in range(20)),
            *(store.increment_negative(user_id) for _ in range(15)),
            *(store.increment_neutral(user_id) for _ in range(10)),
        )

        assert await store.get_user_interaction(user_id) == UserInteraction(
            num_positive=20, num_negative=15, num_neutral=10
        )

    @pytest.mark.asyncio
    async def test_interleaved_reads_never_decrease(self, store, user_id):
        """Test that reads racing with increments observe non-decreasing values."""
        n = 30

        async def writer():
            for _ in range(n):
                await store.increment_positive(user_id)
                await asyncio.sleep(0)

        async def reader() -> list[int]:
            observed = []
            for _ in range(n):
                observed.append((await store.get_user_interaction(user_id)).num_positive)
                await asyncio.sleep(0)
            return observed

        _, first, second = await asyncio.gather(writer(), reader(), reader())

        for observed in (first, second):
            assert observed == sorted(observed)
            assert all(0 <= value <= n for value in observed)
        assert (await store.get_user_interaction(user_id)).num_positive == n

    @pytest.mark.asyncio
    async def test_returned_counters_are_independent(self, store, user_id):
        await store.increment_positive(user_id)

        interaction = await store.get_user_interaction(user_id)
        interaction.increment_positive()

        assert (await store.get_user_interaction(user_id)).num_positive == 1


class TestSchemaLifecycle:
    """Tests for dropping and recreating stored state on every backend."""

    @pytest.mark.asyncio
    async def test_drop_then_initialize_starts_empty(self, store, user_id):
        await store.set_system_message(user_id, "directive")
        await store.add_user_message(user_id, "hi")
        await store.increment_positive(user_id)

        await store.drop_schema()
        await store.initialize_schema()

        assert (await store.get_chat_history(user_id)).messages == []
        assert await store.get_user_interaction(user_id) == UserInteraction()

        await store.add_user_message(user_id, "again")
        assert [m.content for m in (await store.get_chat_history(user_id)).messages] == ["again"]


class TestInMemoryStateStore:
    """Tests specific to the in-memory backend."""

    @pytest.mark.asyncio
    async def test_state_is_per_instance(self):
        first = InMemoryStateStore()
        second = InMemoryStateStore()

        await first.increment_positive("u")

        assert (await second.get_user_interaction("u")).num_positive == 0

    def test_backend_type(self):
        assert InMemoryStateStore().backend_type == "memory"


class TestSQLiteStateStore:
    """Tests specific to the SQLite backend."""

    @pytest.mark.asyncio
    async def test_state_survives_reconnect(self, tmp_path):
        path = tmp_path / "toodles.db"

        async with SQLiteStateStore(path) as store:
            await store.set_system_message("u", "directive")
            await store.add_user_message("u", "hi")
            await store.increment_negative("u")

        async with SQLiteStateStore(path) as store:
            history = await store.get_chat_history("u")
            interaction = await store.get_user_interaction("u")

        assert [m.content for m in history.messages] == ["directive", "hi"]
        assert interaction == UserInteraction(num_negative=1)

    @pytest.mark.asyncio
    async def test_unknown_stored_role_degrades_to_system(self, tmp_path):
        path = tmp_path / "toodles.db"
        async with SQLiteStateStore(path):
            pass

        async with aiosqlite.connect(path) as db:
            await db.execute(
                "INSERT INTO chat_messages (user_id, role, content) VALUES (?, ?, ?)",
                ("u", "moderator", "legacy row")
            )
            await db.commit()

        async with SQLiteStateStore(path) as store:
            await store.add_user_message("u", "hi")
            history = await store.get_chat_history("u")

        assert [(m.role, m.content) for m in history.messages] == [
            (ChatRole.SYSTEM, "legacy row"),
            (ChatRole.USER, "hi"),
        ]

    @pytest.mark.asyncio
    async def test_unknown_role_after_system_is_dropped(self, tmp_path):
        path = tmp_path / "toodles.db"
        async with SQLiteStateStore(path) as store:
            await store.set_system_message("u", "directive")
            await store.add_user_message("u", "hi")

        async with aiosqlite.connect(path) as db:
            await db.execute(
                "INSERT INTO chat_messages (user_id, role, content) VALUES (?, ?, ?)",
                ("u", "moderator", "legacy row")
            )
            await db.commit()

        async with SQLiteStateStore(path) as store:
            history = await store.get_chat_history("u")

        assert [m.content for m in history.messages] == ["directive", "hi"]

    @pytest.mark.asyncio
    async def test_driver_errors_surface_as_store_error(self, tmp_path):
        async with SQLiteStateStore(tmp_path / "toodles.db") as store:
            async with aiosqlite.connect(store.db_path) as db:
                await db.execute("DROP TABLE user_interaction")
                await db.commit()

            with pytest.raises(StoreError):
                await store.increment_positive("u")

    @pytest.mark.asyncio
    async def test_not_connected_raises(self, tmp_path):
        store = SQLiteStateStore(tmp_path / "toodles.db")

        with pytest.raises(RuntimeError, match="Not connected"):
            await store.get_user_interaction("u")

    @pytest.mark.asyncio
    async def test_in_memory_database(self):
        async with SQLiteStateStore(":memory:") as store:
            await store.increment_positive("u")
            assert (await store.get_user_interaction("u")).num_positive == 1


class TestPostgresStateStore:
    """Tests specific to the PostgreSQL backend that need no server."""

    @pytest.mark.asyncio
    async def test_not_connected_raises(self):
        store = PostgresStateStore()

        with pytest.raises(RuntimeError, match="Not connected"):
            await store.get_chat_history("u")

    @pytest.mark.asyncio
    async def test_unreachable_server_raises_store_error(self):
        store = PostgresStateStore(host="127.0.0.1", port=1, command_timeout=1.0)

        with pytest.raises(StoreError, match="Failed to connect"):
            await store.connect()

    def test_backend_type(self):
        assert PostgresStateStore().backend_type == "postgres"


class TestStoreFactory:
    """Tests for the store factory."""

    @pytest.mark.parametrize(
        "backend,kwargs,expected",
        [
            ("memory", {}, InMemoryStateStore),
            ("sqlite", {"path": ":memory:"}, SQLiteStateStore),
            ("postgres", {"dsn": "postgresql://localhost/toodles"}, PostgresStateStore),
        ],
    )
    def test_create_state_store(self, backend, kwargs, expected):
        store = create_state_store(backend, **kwargs)
        assert isinstance(store, expected)
        assert store.backend_type == backend

    def test_create_stores_returns_one_object_for_both_roles(self):
        history_store, interaction_store = create_stores("memory")

        assert history_store is interaction_store
        assert isinstance(history_store, ChatHistoryStore)
        assert isinstance(interaction_store, UserInteractionStore)

    @pytest.mark.parametrize("cls", [InMemoryStateStore, SQLiteStateStore, PostgresStateStore])
    def test_every_backend_implements_both_interfaces(self, cls):
        assert issubclass(cls, ChatHistoryStore)
        assert issubclass(cls, UserInteractionStore)

    def test_unknown_backend_raises(self):
        with pytest.raises(ValueError, match="Unsupported state backend"):
            create_state_store("redis")
