# anonychat/domain/session/timers.py
from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Awaitable, Callable, Dict

logger = logging.getLogger(__name__)

TimerCallback = Callable[[str, int], Awaitable[None]]


class TimerRegistry:
    """
    At most one pending timer per participant.

    Every arm draws a fresh token from one process-wide counter and cancel
    drops it, so tokens are never reused. A callback gets the token it was
    armed with and must check `is_current` before touching any state, so a
    timer that fires after its state moved on does nothing. Only participants
    with a pending or running timer are tracked.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, asyncio.Task] = {}
        self._tokens: Dict[str, int] = {}
        self._counter = itertools.count(1)

    def token(self, pid: str) -> int:
        return self._tokens.get(pid, 0)

    def is_current(self, pid: str, token: int) -> bool:
        return self._tokens.get(pid) == token

    def has_timer(self, pid: str) -> bool:
        task = self._tasks.get(pid)
        return task is not None and not task.done()

    def pending(self) -> int:
        return sum(1 for t in self._tasks.values() if not t.done())

    def arm(self, pid: str, delay_sec: float, callback: TimerCallback) -> int:
        self.cancel(pid)
        token = next(self._counter)
        self._tokens[pid] = token
        self._tasks[pid] = asyncio.create_task(
            self._run(pid, token, delay_sec, callback),
            name=f"timer:{pid}:{token}",
        )
        return token

    def cancel(self, pid: str) -> bool:
        """Invalidate the current token and cancel the pending task, if any."""
        self._tokens.pop(pid, None)
        task = self._tasks.pop(pid, None)
        if task is None or task.done():
            return False
        if task is not asyncio.current_task():
            task.cancel()
        return True

    async def _run(self, pid: str, token: int, delay_sec: float, callback: TimerCallback) -> None:
        await asyncio.sleep(delay_sec)
        if self._tasks.get(pid) is asyncio.current_task():
            self._tasks.pop(pid, None)
        try:
            await callback(pid, token)
        except Exception:
            logger.exception("Timer callback failed for %s (token=%s)", pid, token)
        finally:
            if self._tokens.get(pid) == token:
                del self._tokens[pid]

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for pid in list(self._tasks):
            self.cancel(pid)
        for t in tasks:
            try:
                await t
            except asyncio.CancelledError:
                pass
