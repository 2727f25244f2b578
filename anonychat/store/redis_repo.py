# anonychat/store/redis_repo.py
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from anonychat.domain.common.errors import PersistenceError
from anonychat.store.redis_keys import RK
from anonychat.store.models import ParticipantStore, TranscriptEntry, ViolationEntry
from anonychat.util.timeutil import now_ts

logger = logging.getLogger(__name__)


class RedisRepo:
    """
    Profile store, violation log and chat logs.
    Every read goes back to Redis, so an admin editing a record between two
    events is always picked up.
    """

    def __init__(self, r: Redis, prefix: str = "anon", admin_ids: Iterable[str] = ()):
        self.r = r
        self.rk = RK(prefix)
        self.admin_ids = set(admin_ids)

    def _dec(self, x):
            """Decode redis bytes -> str; pass through str/int/None safely."""
            if x is None:
                return None
            if isinstance(x, bytes):
                return x.decode("utf-8")
            return x

    async def ping(self) -> bool:
        return bool(await self.r.ping())

    # ----------------------------
    # Participants
    # ----------------------------
    async def get_participant(self, pid: str) -> Optional[ParticipantStore]:
        try:
            raw = await self.r.hget(self.rk.users(), pid)
        except RedisError as e:
            raise PersistenceError(f"read participant {pid}: {e}") from e
        if not raw:
            return None
        try:
            return ParticipantStore.model_validate_json(self._dec(raw))
        except ValidationError:
            logger.warning("Corrupt participant record for %s, recreating", pid)
            return None

    async def get_or_create_participant(self, pid: str) -> ParticipantStore:
        p = await self.get_participant(pid)
        if p is not None:
            return p

        p = ParticipantStore(
            pid=pid,
            nickname=pid.split("@")[0],
            role="admin" if pid in self.admin_ids else "user",
            created_at=now_ts(),
        )
        try:
            await self.save_participant(p)
        except PersistenceError:
            # first contact still gets served; the record is written on the next save
            logger.exception("Could not persist new participant %s", pid)
        return p

    async def save_participant(self, p: ParticipantStore) -> None:
        try:
            await self.r.hset(self.rk.users(), p.pid, p.model_dump_json())
        except RedisError as e:
            raise PersistenceError(f"save participant {p.pid}: {e}") from e

    async def update_participant_fields(self, pid: str, **fields: Any) -> Optional[ParticipantStore]:
        p = await self.get_participant(pid)
        if p is None:
            return None
        for k, v in fields.items():
            setattr(p, k, v)
        await self.save_participant(p)
        return p

    async def list_participants(self) -> list[ParticipantStore]:
        try:
            data = await self.r.hgetall(self.rk.users())
        except RedisError as e:
            raise PersistenceError(f"list participants: {e}") from e
        players: list[ParticipantStore] = []
        for _, raw in data.items():
            try:
                players.append(ParticipantStore.model_validate_json(self._dec(raw)))
            except ValidationError:
                continue
        # stable order: first contact
        players.sort(key=lambda x: (x.created_at, x.pid))
        return players

    # ----------------------------
    # Violations (append-only)
    # ----------------------------
    async def append_violation(self, entry: ViolationEntry) -> None:
        try:
            await self.r.rpush(self.rk.violations(), entry.model_dump_json())
        except RedisError as e:
            raise PersistenceError(f"append violation: {e}") from e

    async def list_violations(self) -> list[ViolationEntry]:
        try:
            raw = await self.r.lrange(self.rk.violations(), 0, -1)
        except RedisError as e:
            raise PersistenceError(f"list violations: {e}") from e
        return [ViolationEntry.model_validate_json(self._dec(x)) for x in raw]

    # ----------------------------
    # Chat logs
    # ----------------------------
    async def append_transcript(self, room_id: str, entry: TranscriptEntry) -> None:
        try:
            await self.r.rpush(self.rk.chatlog(room_id), entry.model_dump_json())
        except RedisError as e:
            raise PersistenceError(f"append chatlog {room_id}: {e}") from e

    async def read_transcript(self, room_id: str, start: int = 0, end: int = -1) -> list[TranscriptEntry]:
        try:
            raw = await self.r.lrange(self.rk.chatlog(room_id), start, end)
        except RedisError as e:
            raise PersistenceError(f"read chatlog {room_id}: {e}") from e
        return [TranscriptEntry.model_validate_json(self._dec(x)) for x in raw]

    async def transcript_exists(self, room_id: str) -> bool:
        try:
            return bool(await self.r.exists(self.rk.chatlog(room_id)))
        except RedisError as e:
            raise PersistenceError(f"check chatlog {room_id}: {e}") from e
