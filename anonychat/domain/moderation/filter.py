# anonychat/domain/moderation/filter.py
from __future__ import annotations

from typing import AbstractSet

from anonychat.domain.moderation.wordlist import DEFAULT_BAD_WORDS


def is_profane(text: str, vocabulary: AbstractSet[str] = DEFAULT_BAD_WORDS) -> bool:
    """
    Whole-token match on whitespace-split, lower-cased text.
    "contohnya" does not match "contoh"; neither does "contoh!".
    """
    if not text:
        return False
    return any(token in vocabulary for token in text.lower().split())
