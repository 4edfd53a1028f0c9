"""Data models for conversational state.

These models define the per-user transcript and sentiment counters,
independent of the storage backend used.
"""

import string
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors import ClassificationError


class ChatRole(str, Enum):
    """Role of a message sender."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Sentiment(str, Enum):
    """Sentiment of a single user message."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

    @classmethod
    def parse(cls, label: str) -> "Sentiment":
        """Parse a classifier label.

        Matching ignores case, surrounding whitespace and punctuation,
        so ``"Positive."`` is accepted.

        Raises:
            ClassificationError: If the label is not a known sentiment
        """
        normalized = label.strip().strip(string.punctuation + string.whitespace).lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ClassificationError(label) from None


class ChatMessage(BaseModel):
    """A single message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole = Field(description="Role of the message sender")
    content: str = Field(description="Content of the message")


class ChatHistory(BaseModel):
    """Ordered transcript of one user's conversation.

    At most one system message exists and it always sits at position 0.
    """

    messages: list[ChatMessage] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_system_position(self) -> "ChatHistory":
        """Reject a system message anywhere but position 0."""
        for position, message in enumerate(self.messages[1:], start=1):
            if message.role == ChatRole.SYSTEM:
                raise ValueError(f"System message at position {position}; it must be first")
        return self

    def set_system_message(self, content: str) -> None:
        """Insert or replace the system message at position 0."""
        message = ChatMessage(role=ChatRole.SYSTEM, content=content)
        if self.messages and self.messages[0].role == ChatRole.SYSTEM:
            self.messages[0] = message
        else:
            self.messages.insert(0, message)

    def add_message(self, role: ChatRole, content: str) -> None:
        """Append a message, routing system content to position 0."""
        if role == ChatRole.SYSTEM:
            self.set_system_message(content)
            return
        self.messages.append(ChatMessage(role=role, content=content))

    def add_user_message(self, content: str) -> None:
        self.add_message(ChatRole.USER, content)

    def add_assistant_message(self, content: str) -> None:
        self.add_message(ChatRole.ASSISTANT, content)

    def clear(self) -> None:
        self.messages.clear()

    def last_message(self) -> ChatMessage | None:
        return self.messages[-1] if self.messages else None

    @property
    def system_message(self) -> ChatMessage | None:
        """The system message, if one is set."""
        if self.messages and self.messages[0].role == ChatRole.SYSTEM:
            return self.messages[0]
        return None

    def __len__(self) -> int:
        return len(self.messages)

    def __str__(self) -> str:
        return "".join(
            f"Role: {message.role.value.capitalize()}: Content: {message.content}\n"
            for message in self.messages
        )


class UserInteraction(BaseModel):
    """Running tally of sentiment-classified messages for one user.

    Counters only grow, except through ``reset``.
    """

    model_config = ConfigDict(validate_assignment=True)

    num_positive: int = Field(default=0, ge=0)
    num_negative: int = Field(default=0, ge=0)
    num_neutral: int = Field(default=0, ge=0)

    def increment_positive(self) -> None:
        self.num_positive += 1

    def increment_negative(self) -> None:
        self.num_negative += 1

    def increment_neutral(self) -> None:
        self.num_neutral += 1

    def increment(self, sentiment: Sentiment) -> None:
        """Increment the counter matching ``sentiment``."""
        if sentiment == Sentiment.POSITIVE:
            self.increment_positive()
        elif sentiment == Sentiment.NEGATIVE:
            self.increment_negative()
        else:
            self.increment_neutral()

    def reset(self) -> None:
        """Zero all counters."""
        self.num_positive = 0
        self.num_negative = 0
        self.num_neutral = 0

    @property
    def total(self) -> int:
        return self.num_positive + self.num_negative + self.num_neutral
