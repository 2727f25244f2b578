# anonychat/transport/protocols.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


# =========================
# Incoming (gateway -> server)
# =========================

class InMessage(BaseModel):
    """
    One inbound chat message from the messaging gateway.
    Accepts both snake_case and the gateway's camelCase field names.
    """
    model_config = ConfigDict(populate_by_name=True)

    sender_id: str = Field(alias="senderId", min_length=1, max_length=128)
    text: str = Field(default="", max_length=4096)
    has_media: bool = Field(default=False, alias="hasMedia")
    media_kind: Optional[str] = Field(default=None, alias="mediaKind")
    # Opaque media payload as handed over by the gateway (base64 or handle)
    media: Optional[str] = None

    @property
    def lower(self) -> str:
        return self.text.strip().lower()

    @property
    def command(self) -> str:
        parts = self.lower.split()
        return parts[0] if parts else ""


class InBroadcast(BaseModel):
    message: str = Field(default="", max_length=4096)


def parse_inbound(payload: Dict[str, Any]) -> InMessage:
    """
    Convert raw dict -> validated message model.
    Raises ValidationError if invalid.
    """
    return InMessage.model_validate(payload)


# =========================
# Outgoing (server -> gateway)
# =========================

class OutBase(BaseModel):
    type: str
    to: str


class OutText(OutBase):
    type: Literal["text"] = "text"
    text: str
    # Relayed chat is held back a little; 0 means send as soon as the lane is free
    delay_ms: int = 0


class OutMedia(OutBase):
    type: Literal["media"] = "media"
    media: Optional[str] = None
    caption: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)
    # Sent instead when the gateway refuses the media; never part of the payload
    on_failure: Optional[OutText] = None


OutgoingMessage = Union[OutText, OutMedia]
Outgoing = List[OutgoingMessage]
