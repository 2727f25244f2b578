# anonychat/domain/common/errors.py
from __future__ import annotations


class ChatError(Exception):
    """Base class for orchestrator errors."""


class CommandError(ChatError):
    """Malformed command input. Reported to the sender, no state change."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code
        self.message = message or code


class ExternalServiceError(ChatError):
    """Text generation or messaging gateway failure."""


class PersistenceError(ChatError):
    """Store write/read failure. In-memory session state stays authoritative."""


class StaleTimer(ChatError):
    """
    A timer fired for a state it no longer owns.
    Never user-visible; callers drop it.
    """

    def __init__(self, pid: str, token: int) -> None:
        super().__init__(f"stale timer for {pid} (token={token})")
        self.pid = pid
        self.token = token
