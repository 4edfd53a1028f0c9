"""Turn orchestration: one inbound user message to one agent reply."""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from ..config import DEFAULT_PREFIX
from ..errors import ClassificationError, GenerationError, StoreError
from ..mood import RewardRule, derive_directive
from ..store import ChatHistoryStore, Sentiment, UserInteraction, UserInteractionStore
from .classifier import SentimentClassifier
from .responder import ReplyGenerator

logger = logging.getLogger(__name__)

THINKING_MESSAGE = "🤡 Toodles is thinking..."
ERROR_MESSAGE = "🤡 Toodles encountered an error while thinking!"

T = TypeVar("T")


class PendingReply(Protocol):
    """A message already shown to the user that can be rewritten."""

    async def edit(self, text: str) -> None: ...


class ReplyChannel(Protocol):
    """Where the gateway shows replies for one inbound message."""

    async def send(self, text: str) -> PendingReply: ...


@dataclass
class TurnResult:
    """Outcome of a completed turn."""

    user_id: str
    sentiment: Sentiment
    interaction: UserInteraction
    directive: str
    reply: str


class TurnHandler:
    """Runs conversational turns against the state stores.

    Hidden design decisions:
    - Order of classification, counter update and history writes
    - Deadlines on store calls
    - Which failures abort a turn and which are recovered locally

    Counter increments and history writes are not in one transaction: a
    turn that fails after classification keeps its increment but records
    no messages.
    """

    def __init__(
        self,
        history_store: ChatHistoryStore,
        interaction_store: UserInteractionStore,
        classifier: SentimentClassifier,
        generator: ReplyGenerator,
        prefix: str = DEFAULT_PREFIX,
        reward_rule: RewardRule = RewardRule.MARGIN,
        store_timeout: float | None = 10.0,
    ):
        """Initialize the turn handler.

        Args:
            history_store: Chat history backend
            interaction_store: Sentiment counter backend
            classifier: Sentiment classifier for inbound messages
            generator: Reply generator
            prefix: Default command prefix stripped from inbound text
            reward_rule: Gate used for the idol hint
            store_timeout: Deadline in seconds for each store call (None disables)
        """
        self._history = history_store
        self._interactions = interaction_store
        self._classifier = classifier
        self._generator = generator
        self._prefix = prefix
        self._reward_rule = reward_rule
        self._store_timeout = store_timeout

    @property
    def prefix(self) -> str:
        return self._prefix

    def strip_prefix(self, raw_text: str, prefix: str | None = None) -> str:
        """Remove the command prefix (if present) and surrounding whitespace."""
        prefix = self._prefix if prefix is None else prefix
        if prefix and raw_text.startswith(prefix):
            raw_text = raw_text[len(prefix):]
        return raw_text.strip()

    async def _store_call(self, call: Awaitable[T]) -> T:
        """Await a store call under the configured deadline."""
        try:
            return await asyncio.wait_for(call, timeout=self._store_timeout)
        except asyncio.TimeoutError as e:
            raise StoreError(f"Store call exceeded {self._store_timeout}s deadline") from e

    async def _classify(self, text: str) -> Sentiment:
        try:
            return await self._classifier.classify(text)
        except ClassificationError as e:
            logger.warning("%s; counting message as neutral", e)
            return Sentiment.NEUTRAL

    async def process_turn(
        self,
        user_id: str,
        username: str,
        text: str,
        idol_already_given: bool = False,
    ) -> TurnResult:
        """Run one turn for already-stripped user text.

        Raises:
            StoreError: If a store call fails or misses its deadline
            GenerationError: If the LLM cannot be reached
        """
        sentiment = await self._classify(text)
        logger.info("User %s sent a %s message", username, sentiment.value)

        history = await self._store_call(self._history.get_chat_history(user_id))
        await self._store_call(self._interactions.increment(user_id, sentiment))
        interaction = await self._store_call(self._interactions.get_user_interaction(user_id))

        directive = derive_directive(username, interaction, idol_already_given, self._reward_rule)
        logger.debug("Directive for %s: %s", username, directive)

        history.set_system_message(directive)
        history.add_user_message(text)
        reply = await self._generator.generate(history)

        await self._store_call(self._history.set_system_message(user_id, directive))
        await self._store_call(self._history.add_user_message(user_id, text))
        await self._store_call(self._history.add_assistant_message(user_id, reply))

        return TurnResult(
            user_id=user_id,
            sentiment=sentiment,
            interaction=interaction,
            directive=directive,
            reply=reply,
        )

    async def on_incoming_message(
        self,
        user_id: str,
        username: str,
        raw_text: str,
        prefix: str | None = None,
        *,
        reply: ReplyChannel,
        idol_already_given: bool = False,
    ) -> TurnResult | None:
        """Handle one inbound message from the gateway.

        Shows a "thinking" placeholder, runs the turn and replaces the
        placeholder with the reply. If a store or LLM call fails, the
        placeholder becomes ``ERROR_MESSAGE`` and None is returned; the
        process keeps running. Safe to call concurrently for different
        users.

        Args:
            user_id: Opaque user identifier
            username: Display name used in the persona directive
            raw_text: Message text as received
            prefix: Command prefix to strip (defaults to the handler's)
            reply: Channel used to show the placeholder and the reply
            idol_already_given: Whether the user already received the idol
        """
        text = self.strip_prefix(raw_text, prefix)
        pending = await reply.send(THINKING_MESSAGE)

        try:
            result = await self.process_turn(user_id, username, text, idol_already_given)
        except (StoreError, GenerationError):
            logger.exception("Turn for user %s aborted", user_id)
            await pending.edit(ERROR_MESSAGE)
            return None

        await pending.edit(result.reply)
        return result
