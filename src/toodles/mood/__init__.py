"""Sentiment-driven persona derivation."""

from .deriver import (
    IDOL_MIN_LEAD,
    IDOL_MIN_POSITIVE,
    MOOD_MARGIN,
    Mood,
    RewardRule,
    classify_mood,
    derive_directive,
    reward_eligible,
)

__all__ = [
    "IDOL_MIN_LEAD",
    "IDOL_MIN_POSITIVE",
    "MOOD_MARGIN",
    "Mood",
    "RewardRule",
    "classify_mood",
    "derive_directive",
    "reward_eligible",
]
