"""
Guess the language of a prompt from a few common words.

The guess only steers the model toward answering in the user's language; an
unrecognised prompt gets no instruction at all.
"""

from __future__ import annotations

import re
from typing import Optional

# Checked in order; the first match wins. Words in Latin script must stand on
# their own, other scripts match anywhere in the text.
LANGUAGE_PATTERNS = (
    ("Spanish", re.compile(r"\b(hola|buenos días|gracias|por favor|cómo|está)\b", re.IGNORECASE)),
    ("French", re.compile(r"\b(bonjour|merci|comment|ça va|s'il vous plaît)\b", re.IGNORECASE)),
    ("Hindi", re.compile(r"\b(namaste|kaise|hai|dhanyawad|kya|aap)\b", re.IGNORECASE)),
    ("Telugu", re.compile(r"\b(ne peru|enti|ela|unnavu|ela unnav|nenu|meeru|mee)\b", re.IGNORECASE)),
    ("Chinese", re.compile(r"你好|谢谢|请问|怎么|什么")),
    ("Japanese", re.compile(r"こんにちは|ありがとう|すみません|どう|何")),
    ("German", re.compile(r"\b(hallo|danke|bitte|wie|was)\b", re.IGNORECASE)),
    ("Arabic", re.compile(r"مرحبا|شكرا|من فضلك|كيف|ماذا")),
)

LANGUAGE_INSTRUCTION = (
    "[CRITICAL INSTRUCTION: The user is writing in {language}. "
    "You MUST respond entirely in {language}. "
    "Do not use English or claim you cannot speak {language}.]"
)


def detect_language_hint(text: str) -> Optional[str]:
    """Language name for a non-English prompt, or None."""
    for language, pattern in LANGUAGE_PATTERNS:
        if pattern.search(text or ""):
            return language
    return None


def language_instruction(text: str) -> Optional[str]:
    language = detect_language_hint(text)
    if language is None:
        return None
    return LANGUAGE_INSTRUCTION.format(language=language)
