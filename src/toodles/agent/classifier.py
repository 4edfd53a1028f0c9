"""LLM-backed sentiment classification of user messages."""

from ..errors import GenerationError
from ..llm import LLMProvider
from ..prompts import load_prompt
from ..store.models import ChatMessage, ChatRole, Sentiment


class SentimentClassifier:
    """Classifies one user message as positive, negative or neutral."""

    def __init__(self, llm: LLMProvider, system_prompt: str | None = None):
        """Initialize the classifier.

        Args:
            llm: LLM provider used for classification
            system_prompt: Optional custom instructions (or loaded from
                prompts/sentiment_classifier.txt)
        """
        self._llm = llm
        if system_prompt is None:
            system_prompt = load_prompt("sentiment_classifier").strip()
        self._system_prompt = system_prompt

    async def classify(self, text: str) -> Sentiment:
        """Classify a message.

        Raises:
            GenerationError: If the LLM call fails
            ClassificationError: If the LLM answers with an unknown label
        """
        messages = [
            ChatMessage(role=ChatRole.SYSTEM, content=self._system_prompt),
            ChatMessage(role=ChatRole.USER, content=text),
        ]
        try:
            response = await self._llm.chat_completion(messages, temperature=0.0, max_tokens=5)
        except Exception as e:
            raise GenerationError(f"Sentiment classification failed: {e}") from e

        return Sentiment.parse(response.content)
