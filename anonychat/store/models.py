# anonychat/store/models.py
from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


Role = Literal["user", "admin"]
ViolationKind = Literal["ProfaneMessage", "UserReport"]

DEFAULT_TIER = "Perunggu"


class ParticipantStore(BaseModel):
    pid: str
    nickname: str
    role: Role = "user"
    is_banned: bool = False
    xp: int = Field(default=0, ge=0)
    tier: str = DEFAULT_TIER
    created_at: int = 0


class TranscriptEntry(BaseModel):
    """
    One line of a room chat log.
    Media is stored as a marker, never as the blob itself.
    """
    model_config = ConfigDict(frozen=True)

    timestamp: str
    nickname: str
    message: str


class PartyRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    nickname: str


class ViolationEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str
    kind: ViolationKind
    room_id: str

    # ProfaneMessage
    offender: Optional[PartyRef] = None
    message: str = ""

    # UserReport
    reporter: Optional[PartyRef] = None
    reported: Optional[PartyRef] = None
    chat_history: List[TranscriptEntry] = Field(default_factory=list)
