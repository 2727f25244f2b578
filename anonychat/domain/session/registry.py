# anonychat/domain/session/registry.py
from __future__ import annotations

import asyncio
import logging
import secrets
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict

from anonychat.domain.common.errors import StaleTimer
from anonychat.domain.common.types import IDLE, Idle, Paired, SessionState, Waiting
from anonychat.domain.session.timers import TimerRegistry
from anonychat.util.timeutil import now_ts

logger = logging.getLogger(__name__)


class _HeldLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class Room(BaseModel):
    model_config = ConfigDict(frozen=True)

    room_id: str
    seats: Tuple[str, str]
    created_at: int


class SessionRegistry:
    """
    Single owner of session states, the waiting queue and open rooms.

    Rules enforced here and nowhere else:
    - one state per participant; `set` clears whatever was there before,
      drops the participant from the queue unless the new state is Waiting,
      and cancels the participant's timer;
    - a room is opened for two different participants and sets both to
      Paired with the same room id;
    - the queue only ever holds Waiting participants, each at most once.

    `lock` guards multi-step mutations that span an await.
    `participant_lock(pid)` serialises whole events of one participant; a
    participant's lock only exists while someone holds or waits for it.
    """

    def __init__(self, timers: Optional[TimerRegistry] = None) -> None:
        self.lock = asyncio.Lock()
        self.timers = timers or TimerRegistry()
        self._states: Dict[str, SessionState] = {}
        self._queue: List[str] = []
        self._rooms: Dict[str, Room] = {}
        self._participant_locks: Dict[str, _HeldLock] = {}

    @asynccontextmanager
    async def participant_lock(self, pid: str) -> AsyncIterator[None]:
        held = self._participant_locks.get(pid)
        if held is None:
            held = self._participant_locks[pid] = _HeldLock()
        held.users += 1
        try:
            async with held.lock:
                yield
        finally:
            held.users -= 1
            if held.users == 0:
                del self._participant_locks[pid]

    def held_locks(self) -> int:
        return len(self._participant_locks)

    # ----------------------------
    # State
    # ----------------------------
    def get(self, pid: str) -> SessionState:
        return self._states.get(pid, IDLE)

    def set(self, pid: str, state: SessionState) -> None:
        prev = self.get(pid)
        self.timers.cancel(pid)

        if isinstance(state, Waiting):
            if pid not in self._queue:
                self._queue.append(pid)
        elif pid in self._queue:
            self._queue.remove(pid)

        if isinstance(state, Idle):
            self._states.pop(pid, None)
        else:
            self._states[pid] = state

        if prev.kind != state.kind:
            logger.info("session %s: %s -> %s", pid, prev.kind, state.kind)
        else:
            logger.debug("session %s: %s refreshed", pid, state.kind)

    def clear(self, pid: str) -> None:
        self.set(pid, IDLE)

    def claim_timer(self, pid: str, token: int, expected: Type[BaseModel]) -> SessionState:
        """
        Return the current state if the timer armed with `token` still owns it.
        Raises StaleTimer otherwise.
        """
        state = self.get(pid)
        if not self.timers.is_current(pid, token) or not isinstance(state, expected):
            raise StaleTimer(pid, token)
        return state

    def all_states(self) -> Dict[str, SessionState]:
        return dict(self._states)

    # ----------------------------
    # Waiting queue
    # ----------------------------
    def queued(self, pid: str) -> bool:
        return pid in self._queue

    def waiting(self) -> List[str]:
        return list(self._queue)

    def pop_head(self) -> Optional[str]:
        if not self._queue:
            return None
        return self._queue.pop(0)

    def push_back(self, pid: str) -> None:
        """Re-append a popped participant without touching its state or timer."""
        if pid not in self._queue:
            self._queue.append(pid)

    # ----------------------------
    # Rooms
    # ----------------------------
    def _new_room_id(self) -> str:
        # chat logs outlive the process, so ids must not repeat across restarts
        room_id = f"wafa{secrets.token_hex(8)}"
        while room_id in self._rooms:
            room_id = f"wafa{secrets.token_hex(8)}"
        return room_id

    def open_room(self, first: str, second: str) -> Room:
        if first == second:
            raise ValueError(f"cannot pair {first} with themself")
        room = Room(room_id=self._new_room_id(), seats=(first, second), created_at=now_ts())
        self._rooms[room.room_id] = room
        self.set(first, Paired(partner_id=second, room_id=room.room_id))
        self.set(second, Paired(partner_id=first, room_id=room.room_id))
        logger.info("room %s opened for %s and %s", room.room_id, first, second)
        return room

    def close_room(self, room_id: str) -> Optional[Room]:
        """
        Reset both seats to Idle. The chat log stays in the store.
        Seats that already moved to another state are left alone.
        """
        room = self._rooms.pop(room_id, None)
        if room is None:
            return None
        for pid in room.seats:
            state = self.get(pid)
            if isinstance(state, Paired) and state.room_id == room_id:
                self.clear(pid)
        logger.info("room %s closed", room_id)
        return room

    def room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def active_rooms(self) -> List[Room]:
        return list(self._rooms.values())
