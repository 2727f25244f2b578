# anonychat/domain/broadcast/broadcaster.py
from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel

from anonychat.domain.common.errors import ExternalServiceError, PersistenceError
from anonychat.store.models import ParticipantStore

logger = logging.getLogger(__name__)

DONE_MARKER = "Selesai"


class BroadcastStatus(BaseModel):
    is_running: bool = False
    progress: int = 0
    total: int = 0
    current_recipient: str = ""


class BroadcastOutcome(BaseModel):
    accepted: bool
    reason: str = ""
    total: int = 0


def eligible_recipients(participants: List[ParticipantStore]) -> List[ParticipantStore]:
    return [p for p in participants if not p.is_banned and p.role != "admin"]


class Broadcaster:
    """
    Sends one text to every eligible participant, one at a time, with a
    random pause between sends. Only one broadcast runs at a time.
    """

    def __init__(
        self,
        *,
        repo,
        gateway,
        min_delay_sec: float = 3.0,
        max_delay_sec: float = 11.0,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.repo = repo
        self.gateway = gateway
        self.min_delay_sec = min_delay_sec
        self.max_delay_sec = max_delay_sec
        self._rng = rng or random.Random()
        self._sleep = sleep
        self.status = BroadcastStatus()
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.status.is_running

    async def start(self, text: str) -> BroadcastOutcome:
        text = (text or "").strip()
        if not text:
            return BroadcastOutcome(accepted=False, reason="EMPTY_MESSAGE")
        if self.status.is_running:
            return BroadcastOutcome(accepted=False, reason="ALREADY_RUNNING")

        # claim the flag before the first await
        self.status = BroadcastStatus(is_running=True)
        try:
            participants = await self.repo.list_participants()
        except PersistenceError:
            logger.exception("Broadcast aborted: could not list participants")
            self.status = BroadcastStatus()
            return BroadcastOutcome(accepted=False, reason="STORE_UNAVAILABLE")

        recipients = eligible_recipients(participants)
        self.status.total = len(recipients)
        logger.info("Broadcast started for %d recipients", len(recipients))
        self._task = asyncio.create_task(self._run(recipients, text), name="broadcast")
        return BroadcastOutcome(accepted=True, total=len(recipients))

    async def _run(self, recipients: List[ParticipantStore], text: str) -> None:
        try:
            for i, p in enumerate(recipients):
                self.status.current_recipient = p.nickname
                self.status.progress = i + 1
                try:
                    await self.gateway.send_text(p.pid, text)
                except ExternalServiceError as e:
                    logger.warning("[BROADCAST] Failed to send to %s: %s", p.pid, e)
                if i < len(recipients) - 1:
                    await self._sleep(self._rng.uniform(self.min_delay_sec, self.max_delay_sec))
        finally:
            self.status.is_running = False
            self.status.current_recipient = DONE_MARKER
            logger.info("Broadcast finished (%d/%d)", self.status.progress, self.status.total)

    async def wait(self) -> None:
        if self._task is not None:
            await self._task
