# anonychat/domain/moderation/wordlist.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import FrozenSet, Optional

logger = logging.getLogger(__name__)

# Built-in vocabulary; BAD_WORDS_FILE replaces it when configured.
DEFAULT_BAD_WORDS: FrozenSet[str] = frozenset(
    {
        "anjing",
        "anjir",
        "asu",
        "babi",
        "bajingan",
        "bangsat",
        "bego",
        "brengsek",
        "goblok",
        "jancok",
        "jancuk",
        "kampret",
        "kontol",
        "memek",
        "ngentot",
        "tai",
        "tolol",
    }
)


def load_bad_words(path: Optional[str]) -> FrozenSet[str]:
    """
    Read one word per line; blank lines and '#' comments are skipped.
    Falls back to the built-in list when no path is given.
    """
    if not path:
        return DEFAULT_BAD_WORDS
    words = set()
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        w = line.strip().lower()
        if w and not w.startswith("#"):
            words.add(w)
    logger.info("Loaded %d bad words from %s", len(words), path)
    return frozenset(words)
