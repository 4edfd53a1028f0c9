"""Reply generation from a chat history."""

from ..errors import GenerationError
from ..llm import LLMProvider
from ..store.models import ChatHistory

EMPTY_REPLY = "No response from Toodles"


class ReplyGenerator:
    """Generates the agent's next message for a conversation."""

    def __init__(self, llm: LLMProvider, max_tokens: int | None = 200):
        self._llm = llm
        self._max_tokens = max_tokens

    async def generate(self, history: ChatHistory) -> str:
        """Generate a reply to the last message in ``history``.

        An empty but successful response yields ``EMPTY_REPLY`` so the
        turn is never silently dropped.

        Raises:
            GenerationError: If the LLM call fails
        """
        try:
            response = await self._llm.chat_completion(
                history.messages,
                max_tokens=self._max_tokens,
            )
        except Exception as e:
            raise GenerationError(f"Reply generation failed: {e}") from e

        return response.content.strip() or EMPTY_REPLY
