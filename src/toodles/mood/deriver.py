"""Persona directive derivation from sentiment counters.

Everything here is pure: the directive is recomputed from the current
counters on every turn and never cached.
"""

from enum import Enum

from ..prompts import render_prompt
from ..store.models import UserInteraction

# A sentiment must lead both others by more than this to set the mood
MOOD_MARGIN = 2

# Positive messages needed before the idol hint is considered
IDOL_MIN_POSITIVE = 10

# Lead of positive over negative messages required by RewardRule.MARGIN
IDOL_MIN_LEAD = 5


class Mood(str, Enum):
    """Persona branch selected for the next reply."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class RewardRule(str, Enum):
    """Extra gate for the idol hint, after the positive-count threshold."""

    # num_negative > num_negative + 5, which never holds
    LITERAL = "literal"
    # num_positive - num_negative >= 5
    MARGIN = "margin"


def classify_mood(interaction: UserInteraction) -> Mood:
    """Pick the persona branch for a user's counters.

    Args:
        interaction: The user's current counters

    Returns:
        POSITIVE or NEGATIVE when that sentiment leads both others by more
        than ``MOOD_MARGIN``, otherwise NEUTRAL
    """
    positive = interaction.num_positive
    negative = interaction.num_negative
    neutral = interaction.num_neutral

    if positive > negative + MOOD_MARGIN and positive > neutral + MOOD_MARGIN:
        return Mood.POSITIVE
    if negative > positive + MOOD_MARGIN and negative > neutral + MOOD_MARGIN:
        return Mood.NEGATIVE
    return Mood.NEUTRAL


def reward_eligible(
    interaction: UserInteraction,
    idol_already_given: bool,
    reward_rule: RewardRule = RewardRule.MARGIN,
) -> bool:
    """Decide whether the directive should hint at the idol reward."""
    if idol_already_given or interaction.num_positive < IDOL_MIN_POSITIVE:
        return False

    if reward_rule == RewardRule.LITERAL:
        return interaction.num_negative > interaction.num_negative + IDOL_MIN_LEAD
    return interaction.num_positive - interaction.num_negative >= IDOL_MIN_LEAD


def derive_directive(
    username: str,
    interaction: UserInteraction,
    idol_already_given: bool = False,
    reward_rule: RewardRule = RewardRule.MARGIN,
) -> str:
    """Build the system directive for a user's next reply.

    Args:
        username: Display name inserted into the persona text
        interaction: The user's current counters
        idol_already_given: Whether the user already received the idol
        reward_rule: Which extra gate to apply to the idol hint

    Returns:
        Persona directive text
    """
    mood = classify_mood(interaction)
    directive = render_prompt(f"mood_{mood.value}", username=username)

    if reward_eligible(interaction, idol_already_given, reward_rule):
        directive = f"{directive}\n\n{render_prompt('idol_hint', username=username)}"

    return directive
