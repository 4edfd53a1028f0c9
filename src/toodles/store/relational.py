"""Helpers shared by the SQL-backed stores."""

import logging
from collections.abc import Iterable
from typing import Any

from .models import ChatHistory, ChatMessage, ChatRole, Sentiment, UserInteraction

logger = logging.getLogger(__name__)

# Counter column for each sentiment. Column names are interpolated into SQL,
# so they must only ever come from this table.
COUNTER_COLUMNS: dict[Sentiment, str] = {
    Sentiment.POSITIVE: "num_positive",
    Sentiment.NEGATIVE: "num_negative",
    Sentiment.NEUTRAL: "num_neutral",
}


def parse_stored_role(value: str) -> ChatRole:
    """Map a stored role string back to a ChatRole.

    Unknown strings fall back to ``ChatRole.SYSTEM`` and are logged.
    """
    try:
        return ChatRole(value)
    except ValueError:
        logger.warning("Unknown stored role %r, treating as system", value)
        return ChatRole.SYSTEM


def history_from_rows(rows: Iterable[Any]) -> ChatHistory:
    """Build a ChatHistory from ``(role, content)`` rows in stored order.

    A row whose role falls back to system is only kept when it is the
    first row, so the system-at-position-0 invariant still holds.
    """
    messages: list[ChatMessage] = []
    for row in rows:
        role = parse_stored_role(row[0])
        if role == ChatRole.SYSTEM and messages:
            logger.warning("Dropping out-of-place system row for history")
            continue
        messages.append(ChatMessage(role=role, content=row[1]))
    return ChatHistory(messages=messages)


def interaction_from_row(row: Any | None) -> UserInteraction:
    """Build counters from a ``(positive, negative, neutral)`` row."""
    if row is None:
        return UserInteraction()
    return UserInteraction(
        num_positive=row[0],
        num_negative=row[1],
        num_neutral=row[2],
    )


def render_increment(template: str, sentiment: Sentiment) -> str:
    """Fill an increment upsert template for one counter.

    The template receives ``column`` plus the initial ``positive``,
    ``negative`` and ``neutral`` values used when the row is new.
    """
    initial = {
        "positive": int(sentiment == Sentiment.POSITIVE),
        "negative": int(sentiment == Sentiment.NEGATIVE),
        "neutral": int(sentiment == Sentiment.NEUTRAL),
    }
    return template.format(column=COUNTER_COLUMNS[sentiment], **initial)
