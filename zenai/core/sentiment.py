"""Reaction sentiment: classify emoji reactions left on bot responses."""

from __future__ import annotations

import random
from typing import Iterable, Optional

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"
MIXED = "mixed"

POSITIVE_REACTIONS = frozenset(
    {
        "+1",
        "thumbsup",
        "heart",
        "heart_eyes",
        "fire",
        "star",
        "clap",
        "raised_hands",
        "100",
        "white_check_mark",
        "ok_hand",
        "muscle",
        "sparkles",
        "tada",
    }
)
NEGATIVE_REACTIONS = frozenset(
    {
        "-1",
        "thumbsdown",
        "x",
        "angry",
        "rage",
        "disappointed",
        "confused",
        "thinking_face",
        "face_with_raised_eyebrow",
    }
)
NEUTRAL_REACTIONS = frozenset({"eyes", "thinking", "shrug"})

_DESCRIPTIONS = {
    POSITIVE: "positive (user appreciated the response)",
    NEGATIVE: "negative (user was dissatisfied or found the response unhelpful)",
    NEUTRAL: "neutral (user was uncertain or needed clarification)",
    MIXED: "mixed",
}

POSITIVE_REPLIES = (
    "Glad you found that helpful! 😊",
    "Thanks for the positive feedback! 👍",
    "Happy to help! Let me know if you need anything else.",
    "Great to hear that worked for you! 🎉",
    "Awesome! I'm here if you have more questions.",
    "Perfect! I'm glad I could assist you.",
    "Wonderful! Thanks for letting me know it was useful.",
)
NEGATIVE_REPLIES = (
    "Sorry that didn't match your expectations. Let me try to help you differently.",
    "I apologize if my response wasn't helpful. Could you clarify what you're looking for?",
    "Sorry about that! Can you tell me more about what you need?",
    "I understand that wasn't quite right. How can I better assist you?",
    "Sorry for the confusion. Let me know how I can improve my response.",
    "I apologize if that wasn't what you were looking for. What would be more helpful?",
    "Sorry that didn't work out. Please let me know what you'd prefer instead.",
)
NEUTRAL_REPLIES = (
    "I see you're thinking about this. Let me know if you need clarification!",
    "Looks like you might have questions. Feel free to ask!",
    "I notice you reacted - is there something specific you'd like to know?",
    "Thanks for the reaction! Let me know if you need any adjustments.",
    "I see your reaction. How can I help you further?",
    "Noted! Is there anything else you'd like me to explain?",
)


def classify(reaction_names: Iterable[str]) -> str:
    """
    Classify a set of reactions as positive, negative, neutral or mixed.

    Neutral wins only on an exact positive/negative tie with at least one
    neutral reaction. Returns an empty string for no reactions.
    """
    names = list(reaction_names)
    if not names:
        return ""
    positive = sum(1 for name in names if name in POSITIVE_REACTIONS)
    negative = sum(1 for name in names if name in NEGATIVE_REACTIONS)
    neutral = sum(1 for name in names if name in NEUTRAL_REACTIONS)
    if positive > negative:
        return POSITIVE
    if negative > positive:
        return NEGATIVE
    if neutral > 0:
        return NEUTRAL
    return MIXED


def describe(label: str) -> str:
    """Annotation text for a sentiment label, as shown to the LLM."""
    return _DESCRIPTIONS.get(label, label)


def reaction_reply(reaction_name: str, rng: Optional[random.Random] = None) -> str:
    """Pick a canned reply matching the sentiment of a single reaction."""
    label = classify([reaction_name])
    if label == POSITIVE:
        pool = POSITIVE_REPLIES
    elif label == NEGATIVE:
        pool = NEGATIVE_REPLIES
    else:
        pool = NEUTRAL_REPLIES
    return (rng or random).choice(pool)
