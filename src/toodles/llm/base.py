"""Language model interface used for sentiment labels and replies."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from ..store.models import ChatMessage
from .models import LLMResponse


class LLMProvider(ABC):
    """Chat-completion endpoint.

    The agent makes two kinds of call through this interface: a short,
    deterministic one that labels a message's sentiment, and a longer one
    that writes the reply from the stored history. Both send a list of
    ChatMessage and read back plain text.

    Providers are async context managers:
        async with provider:
            response = await provider.chat_completion(messages)
    """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used when a call does not name one."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Complete a conversation.

        Args:
            messages: Conversation so far, system message first if present
            model: Model override
            temperature: Sampling temperature (0.0 for classification)
            max_tokens: Cap on generated tokens

        Raises:
            Exception: Transport or API errors, unwrapped; callers decide
                whether they abort a turn
        """

    async def close(self) -> None:
        """Release network resources held by the provider."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        # httpx may close its transport after the loop is gone at shutdown
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
