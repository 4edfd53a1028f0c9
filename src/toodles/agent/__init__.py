"""Conversation agent: sentiment classification, replies and turn handling."""

from .classifier import SentimentClassifier
from .responder import EMPTY_REPLY, ReplyGenerator
from .turn import (
    ERROR_MESSAGE,
    THINKING_MESSAGE,
    PendingReply,
    ReplyChannel,
    TurnHandler,
    TurnResult,
)

__all__ = [
    "EMPTY_REPLY",
    "ERROR_MESSAGE",
    "THINKING_MESSAGE",
    "PendingReply",
    "ReplyChannel",
    "ReplyGenerator",
    "SentimentClassifier",
    "TurnHandler",
    "TurnResult",
]
