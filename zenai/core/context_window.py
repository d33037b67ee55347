"""
Context window selection for the LLM prompt.

Short conversations are replayed in full. Longer ones are reduced to the
opening messages, messages sharing keywords with the current prompt and the
most recent messages, always in their original chronological order.
"""

from __future__ import annotations

from typing import Sequence

from zenai.core.language_hint import language_instruction
from zenai.core.sentiment import classify, describe
from zenai.schemas.conversation import HistoryMessage

FULL_HISTORY_THRESHOLD = 15
ONGOING_BANNER_THRESHOLD = 8
FIRST_MESSAGES = 3
RELEVANT_MESSAGES = 5
RECENT_MESSAGES = 10
MIN_KEYWORD_LENGTH = 4
DEDUPE_PREFIX_LENGTH = 50

ONGOING_BANNER = (
    "=== ONGOING CONVERSATION ===",
    "(This is a continuing conversation with full message history available. "
    "Reference previous exchanges when relevant.)",
    "",
)


def _keywords(prompt: str) -> list[str]:
    return [w for w in prompt.lower().split() if len(w) >= MIN_KEYWORD_LENGTH]


def select_messages(
    history: Sequence[HistoryMessage],
    current_prompt: str,
    max_messages: int = FULL_HISTORY_THRESHOLD,
) -> list[HistoryMessage]:
    """Pick the subset of history forwarded to the LLM, in chronological order."""
    if len(history) <= max_messages:
        return list(history)

    total = len(history)
    first = list(range(min(FIRST_MESSAGES, total)))
    recent = list(range(max(total - RECENT_MESSAGES, 0), total))

    relevant: list[int] = []
    keywords = _keywords(current_prompt or "")
    if keywords:
        for index, message in enumerate(history):
            content = message.content.lower()
            if any(word in content for word in keywords):
                relevant.append(index)
                if len(relevant) == RELEVANT_MESSAGES:
                    break

    seen: set[tuple[str, str]] = set()
    selected: list[int] = []
    for index in first + relevant + recent:
        message = history[index]
        key = (message.role, message.content[:DEDUPE_PREFIX_LENGTH])
        if key in seen:
            continue
        seen.add(key)
        selected.append(index)

    return [history[index] for index in sorted(selected)]


def render_message(message: HistoryMessage) -> str:
    if message.role == "user":
        return f"User: {message.content}"
    rendered = f"Assistant: {message.content}"
    names = message.reaction_names
    if names:
        sentiment = describe(classify(names))
        rendered += f"\n[User's reaction: {', '.join(names)} - Sentiment: {sentiment}]"
    return rendered


def build_context(
    history: Sequence[HistoryMessage],
    current_prompt: str,
    max_messages: int = FULL_HISTORY_THRESHOLD,
) -> str:
    """Render the selected history as a text block; empty history gives ''."""
    if not history:
        return ""
    parts: list[str] = []
    if len(history) > ONGOING_BANNER_THRESHOLD:
        parts.extend(ONGOING_BANNER)
    parts.extend(
        render_message(m)
        for m in select_messages(history, current_prompt, max_messages)
    )
    return "\n\n".join(parts)


def build_prompt(
    history: Sequence[HistoryMessage],
    current_prompt: str,
    max_messages: int = FULL_HISTORY_THRESHOLD,
) -> str:
    """
    Full prompt sent to the LLM: context block followed by the new turn,
    prefixed with a respond-in-language instruction for non-English prompts.
    """
    context = build_context(history, current_prompt, max_messages)
    prompt = f"User: {current_prompt}"
    if context:
        prompt = f"{context}\n\n{prompt}"
    instruction = language_instruction(current_prompt)
    if instruction:
        prompt = f"{instruction}\n\n{prompt}"
    return prompt
