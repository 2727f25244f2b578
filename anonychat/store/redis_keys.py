# anonychat/store/redis_keys.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RK:
    """
    Redis Key builder.
    Everything lives under one prefix so several bots can share a Redis db.
    """
    prefix: str = "anon"

    # ---- Profiles ----
    def users(self) -> str:
        return f"{self.prefix}:users"  # HASH pid -> JSON

    # ---- Moderation ----
    def violations(self) -> str:
        return f"{self.prefix}:violations"  # LIST entries JSON (append-only)

    # ---- Chat logs ----
    def chatlog(self, room_id: str) -> str:
        return f"{self.prefix}:chatlog:{room_id}"  # LIST entries JSON
