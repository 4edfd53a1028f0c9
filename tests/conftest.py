"""Pytest configuration and shared fixtures."""
import os
from collections.abc import Sequence
from uuid import uuid4

import pytest

from toodles.llm import LLMProvider, LLMResponse
from toodles.store import create_state_store
from toodles.store.models import ChatMessage


class ScriptedLLM(LLMProvider):
    """LLM provider that answers from a script instead of the network.

    Responses are returned in order; the last one repeats once the
    script runs out. An Exception in the script is raised instead.
    """

    def __init__(self, *responses: str | Exception):
        self._responses = list(responses) or [""]
        self.calls: list[list[ChatMessage]] = []
        self.closed = False

    @property
    def default_model(self) -> str:
        return "scripted"

    async def chat_completion(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        self.calls.append(list(messages))
        index = min(len(self.calls), len(self._responses)) - 1
        response = self._responses[index]
        if isinstance(response, Exception):
            raise response
        return LLMResponse(content=response, model="scripted")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def postgres_dsn():
    """Return the PostgreSQL DSN for integration tests, if configured."""
    return os.getenv("TOODLES_TEST_POSTGRES_DSN")


@pytest.fixture(params=["memory", "sqlite", "postgres"])
async def store(request, tmp_path, postgres_dsn):
    """Connected store for every backend, so each test runs against all of them."""
    backend = request.param

    if backend == "memory":
        instance = create_state_store("memory")
    elif backend == "sqlite":
        instance = create_state_store("sqlite", path=tmp_path / "toodles.db")
    else:
        if not postgres_dsn:
            pytest.skip("TOODLES_TEST_POSTGRES_DSN not set")
        instance = create_state_store("postgres", dsn=postgres_dsn)

    await instance.connect()
    await instance.initialize_schema()
    try:
        yield instance
    finally:
        await instance.disconnect()


@pytest.fixture
def user_id():
    """Return a user id no test has used before (Postgres data persists)."""
    return f"user-{uuid4()}"
