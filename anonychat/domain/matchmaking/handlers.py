# anonychat/domain/matchmaking/handlers.py
from __future__ import annotations

import logging

from anonychat.domain.common import replies
from anonychat.domain.common.errors import StaleTimer
from anonychat.domain.common.types import AIFallback, Idle, Waiting
from anonychat.transport.protocols import OutText, Outgoing
from anonychat.util.timeutil import now_ts

logger = logging.getLogger(__name__)


def _arm_queue_timer(app, pid: str) -> int:
    registry = app.state.sessions

    async def _fire(pid: str, token: int) -> None:
        events = await expire(app=app, pid=pid, token=token)
        if events:
            await app.state.outbox.deliver(events, lane=pid)

    return registry.timers.arm(pid, app.state.settings.QUEUE_TIMEOUT_SEC, _fire)


def _enqueue_locked(app, pid: str) -> Outgoing:
    registry = app.state.sessions
    registry.set(pid, Waiting(enqueued_at=now_ts()))
    _arm_queue_timer(app, pid)
    return [OutText(to=pid, text=replies.QUEUE_JOINED.render())]


def _try_match_locked(app, pid: str) -> Outgoing:
    registry = app.state.sessions

    head = registry.pop_head()
    if head is None:
        return _enqueue_locked(app, pid)

    if head == pid:
        # Requester was already queued: put it back, never pair with self
        registry.push_back(pid)
        if not isinstance(registry.get(pid), Waiting) or not registry.timers.has_timer(pid):
            registry.set(pid, Waiting(enqueued_at=now_ts()))
            _arm_queue_timer(app, pid)
        return [OutText(to=pid, text=replies.STILL_SEARCHING.render())]

    room = registry.open_room(head, pid)
    text = replies.PAIRED.render()
    return [OutText(to=seat, text=text) for seat in room.seats]


async def enqueue(*, app, pid: str) -> Outgoing:
    registry = app.state.sessions
    async with registry.lock:
        if registry.queued(pid):
            return [OutText(to=pid, text=replies.ALREADY_QUEUED.render())]
        if not isinstance(registry.get(pid), Idle):
            return [OutText(to=pid, text=replies.BUSY.render())]
        return _enqueue_locked(app, pid)


async def try_match(*, app, pid: str) -> Outgoing:
    """
    Pair the requester with the head of the queue, or queue them.
    A requester that is already waiting goes through the self-match guard.
    """
    registry = app.state.sessions
    async with registry.lock:
        state = registry.get(pid)
        if not isinstance(state, (Idle, Waiting)):
            return [OutText(to=pid, text=replies.BUSY.render())]
        return _try_match_locked(app, pid)


async def cancel(*, app, pid: str) -> Outgoing:
    registry = app.state.sessions
    async with registry.lock:
        if not registry.queued(pid):
            return [OutText(to=pid, text=replies.NOTHING_TO_STOP.render())]
        registry.clear(pid)
    return [OutText(to=pid, text=replies.QUEUE_CANCELLED.render())]


async def expire(*, app, pid: str, token: int) -> Outgoing:
    """Queue timer fired: move a still-waiting participant to AI fallback."""
    registry = app.state.sessions
    async with registry.participant_lock(pid):
        async with registry.lock:
            try:
                registry.claim_timer(pid, token, Waiting)
            except StaleTimer:
                logger.debug("queue timer for %s is stale (token=%s)", pid, token)
                return []
            if not registry.queued(pid):
                return []
            registry.set(pid, AIFallback())
    logger.info("queue expired for %s, switched to AI fallback", pid)
    return [OutText(to=pid, text=replies.QUEUE_EXPIRED.render())]
