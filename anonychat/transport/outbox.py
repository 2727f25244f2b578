# anonychat/transport/outbox.py
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Iterable, Optional

from anonychat.domain.common.errors import ExternalServiceError
from anonychat.transport.protocols import OutgoingMessage

logger = logging.getLogger(__name__)


class Outbox:
    """
    Delivers outgoing messages through the gateway.

    Messages are queued per lane (normally the participant whose event
    produced them) and one worker per lane sends them in order, sleeping
    first for messages that carry a delay. Two messages from the same
    sender therefore never overtake each other; different lanes run
    independently.
    """

    def __init__(self, gateway, *, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> None:
        self.gateway = gateway
        self._sleep = sleep
        self._lanes: Dict[str, asyncio.Queue] = {}
        self._workers: Dict[str, asyncio.Task] = {}

    async def deliver(self, events: Iterable[OutgoingMessage], *, lane: Optional[str] = None) -> None:
        events = list(events)
        if not events:
            return
        key = lane or events[0].to
        q = self._lanes.get(key)
        if q is None:
            q = asyncio.Queue()
            self._lanes[key] = q
            self._workers[key] = asyncio.create_task(self._work(key, q), name=f"outbox:{key}")
        for e in events:
            q.put_nowait(e)

    async def _work(self, key: str, q: asyncio.Queue) -> None:
        try:
            while True:
                if q.empty():
                    # no await between the check and the removal
                    self._lanes.pop(key, None)
                    self._workers.pop(key, None)
                    return
                event = q.get_nowait()
                delay_ms = getattr(event, "delay_ms", 0) or 0
                if delay_ms > 0:
                    await self._sleep(delay_ms / 1000.0)
                try:
                    await self.gateway.send(event)
                except ExternalServiceError as e:
                    logger.warning("Delivery to %s failed: %s", event.to, e)
                    await self._notify_failure(event)
        except asyncio.CancelledError:
            self._lanes.pop(key, None)
            self._workers.pop(key, None)
            raise

    async def _notify_failure(self, event: OutgoingMessage) -> None:
        notice = getattr(event, "on_failure", None)
        if notice is None:
            return
        try:
            await self.gateway.send(notice)
        except ExternalServiceError as e:
            logger.warning("Failure notice to %s failed: %s", notice.to, e)

    async def drain(self) -> None:
        """Wait until every lane has flushed."""
        while self._workers:
            await asyncio.gather(*list(self._workers.values()), return_exceptions=True)

    async def close(self) -> None:
        for t in list(self._workers.values()):
            t.cancel()
        await asyncio.gather(*list(self._workers.values()), return_exceptions=True)
