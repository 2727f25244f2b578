# anonychat/domain/game/catalog.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from anonychat.domain.common.types import GameType


@dataclass(frozen=True)
class GameSpec:
    key: GameType
    number: str
    name: str
    aliases: Tuple[str, ...]
    # What to ask the text generator for; the JSON answer format is appended
    instruction: str


GAMES: Tuple[GameSpec, ...] = (
    GameSpec(
        key="tebak_kata",
        number="1",
        name="Tebak Kata",
        aliases=("tebak kata", "tebakkata", "kata"),
        instruction=(
            "Buat satu teka-teki tebak kata dalam bahasa Indonesia. "
            "Berikan petunjuk singkat dan jawabannya berupa satu kata."
        ),
    ),
    GameSpec(
        key="trivia",
        number="2",
        name="Trivia",
        aliases=("trivia", "pengetahuan umum"),
        instruction=(
            "Buat satu pertanyaan trivia pengetahuan umum dalam bahasa Indonesia "
            "dengan jawaban singkat (satu sampai tiga kata)."
        ),
    ),
    GameSpec(
        key="matematika",
        number="3",
        name="Matematika",
        aliases=("matematika", "mtk", "math", "hitung"),
        instruction=(
            "Buat satu soal hitungan aritmetika sederhana dalam bahasa Indonesia. "
            "Jawabannya hanya berupa angka."
        ),
    ),
)

_BY_KEY: Dict[str, GameSpec] = {g.key: g for g in GAMES}


def get_game(key: GameType) -> GameSpec:
    return _BY_KEY[key]


def parse_choice(text: str) -> Optional[GameSpec]:
    """Accept the menu number, the game name or one of its aliases."""
    choice = " ".join((text or "").strip().lower().split())
    if not choice:
        return None
    for g in GAMES:
        if choice == g.number or choice == g.name.lower() or choice in g.aliases:
            return g
    return None
