"""OpenAI chat-completions provider.

Works with any server speaking the OpenAI chat API when ``base_url`` is set.
"""

import logging
from collections.abc import Sequence

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from ...store.models import ChatMessage
from ..base import LLMProvider
from ..models import LLMResponse, TokenUsage

logger = logging.getLogger(__name__)


def to_openai_messages(messages: Sequence[ChatMessage]) -> list[dict[str, str]]:
    """Convert stored messages to the chat API's wire format."""
    return [{"role": message.role.value, "content": message.content} for message in messages]


def _usage(completion: ChatCompletion) -> TokenUsage | None:
    if completion.usage is None:
        return None
    return TokenUsage(
        prompt_tokens=completion.usage.prompt_tokens,
        completion_tokens=completion.usage.completion_tokens,
        total_tokens=completion.usage.total_tokens,
    )


class OpenAIProvider(LLMProvider):
    """LLMProvider backed by ``openai.AsyncOpenAI``.

    Retries on rate limits and transient server errors are left to the
    SDK (``max_retries``); whatever still fails is raised unchanged.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 2,
    ):
        """Initialize the provider.

        Args:
            api_key: OpenAI API key
            model: Default chat model
            base_url: Endpoint of an OpenAI-compatible server
            timeout: Request timeout in seconds
            max_retries: SDK-level retries per request
        """
        self._model = model
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

    @property
    def default_model(self) -> str:
        return self._model

    async def chat_completion(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Run one chat completion and return the first choice."""
        params = {
            "model": model or self._model,
            "messages": to_openai_messages(messages),
            "temperature": temperature,
        }
        if max_tokens is not None:
            params["max_tokens"] = max_tokens

        completion = await self._client.chat.completions.create(**params)

        if not completion.choices:
            logger.warning("Completion %s returned no choices", completion.id)
            return LLMResponse(content="", model=completion.model, usage=_usage(completion))

        choice = completion.choices[0]
        return LLMResponse(
            content=choice.message.content or "",
            model=completion.model,
            finish_reason=choice.finish_reason,
            usage=_usage(completion),
        )

    async def close(self) -> None:
        await self._client.close()
