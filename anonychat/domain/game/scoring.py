# anonychat/domain/game/scoring.py
from __future__ import annotations

import random
import re
from typing import Tuple

from anonychat.store.models import DEFAULT_TIER

TIERS: Tuple[str, ...] = (DEFAULT_TIER, "Perak", "Emas", "Platinum", "Berlian")


def tier_for(xp: int, tier_size: int) -> str:
    """floor(xp / tier_size), clamped to the highest tier."""
    if tier_size <= 0:
        raise ValueError("tier_size must be positive")
    idx = max(0, xp) // tier_size
    return TIERS[min(idx, len(TIERS) - 1)]


def roll_xp(rng: random.Random, xp_min: int, xp_max: int) -> int:
    return rng.randint(xp_min, xp_max)


def is_correct(answer_text: str, expected: str) -> bool:
    """
    Case-insensitive: the expected answer appears in the reply as whole words.
    "5" does not match "15"; "jakarta" matches "jawabannya Jakarta dong".
    """
    exp = " ".join((expected or "").lower().split())
    if not exp:
        return False
    reply = " ".join((answer_text or "").lower().split())
    return re.search(rf"(?<!\w){re.escape(exp)}(?!\w)", reply) is not None
