# gpt_habits/services/moderation.py
from __future__ import annotations

# Subcadena, sin distinguir mayúsculas: "kos" también atrapa palabras más largas.
BAD_WORDS: tuple[str, ...] = (
    # English
    "fuck", "shit", "bitch", "asshole", "cunt", "dick", "pussy", "bastard", "whore", "slut",
    # Arabic (transliterated)
    "sharmoota", "sharmuta", "kos", "kuss", "zeb", "zubb", "ayr", "gahba", "qahba",
    "manyok", "manyuk", "khara", "neek", "nik",
    # Arabic (script)
    "شرموطة", "كس", "زب", "قحبة", "منيوك", "خرا", "نيك", "طيز", "قواد",
)


def is_inappropriate(text: str, words: tuple[str, ...] = BAD_WORDS) -> bool:
    lowered = (text or "").lower()
    return any(w in lowered for w in words)
