# anonychat/domain/common/types.py
from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

GameType = Literal["tebak_kata", "trivia", "matematika"]
MediaKind = Literal["image", "sticker", "video", "audio", "document"]


# =========================
# Session state (one per participant)
# =========================

class _State(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str


class Idle(_State):
    kind: Literal["idle"] = "idle"


class Waiting(_State):
    kind: Literal["waiting"] = "waiting"
    enqueued_at: int


class Paired(_State):
    kind: Literal["paired"] = "paired"
    partner_id: str
    room_id: str


class ChoosingGame(_State):
    kind: Literal["choosing_game"] = "choosing_game"


class Playing(_State):
    kind: Literal["playing"] = "playing"
    game_type: GameType
    prompt: str
    expected_answer: str
    deadline: int


class AIFallback(_State):
    kind: Literal["ai_fallback"] = "ai_fallback"


SessionState = Union[Idle, Waiting, Paired, ChoosingGame, Playing, AIFallback]

IDLE = Idle()
