from __future__ import annotations

import re

from fastapi import APIRouter, HTTPException, Request

from anonychat.domain.common.errors import PersistenceError
from anonychat.domain.common.types import Paired
from anonychat.transport.protocols import InBroadcast

router = APIRouter(prefix="/admin", tags=["admin"])

_ROOM_ID_RE = re.compile(r"[^a-zA-Z0-9]")


@router.get("/status")
async def status(request: Request):
    """
    Participants, waiting queue, active pairs and violations (dashboard view).
    """
    repo = request.app.state.repo
    registry = request.app.state.sessions

    try:
        users = await repo.list_participants()
        violations = await repo.list_violations()
    except PersistenceError:
        raise HTTPException(status_code=503, detail="Store unavailable")

    by_id = {u.pid: u for u in users}

    def _nick(pid: str) -> str:
        u = by_id.get(pid)
        return u.nickname if u is not None else pid.split("@")[0]

    waiting = [{"id": pid, "nickname": _nick(pid)} for pid in registry.waiting()]

    active = []
    for room in registry.active_rooms():
        a, b = room.seats
        active.append(
            {
                "room_id": room.room_id,
                "user1": _nick(a),
                "user2": _nick(b),
                "created_at": room.created_at,
            }
        )

    states = {pid: s.kind for pid, s in registry.all_states().items()}

    return {
        "users": [{**u.model_dump(), "state": states.get(u.pid, "idle")} for u in users],
        "waiting": waiting,
        "active": active,
        "violations": [v.model_dump() for v in violations],
    }


@router.post("/users/{pid}/toggle-ban")
async def toggle_ban(pid: str, request: Request):
    """
    Flip the ban flag. A banned participant in a chat is taken out of it.
    """
    repo = request.app.state.repo
    registry = request.app.state.sessions

    try:
        user = await repo.get_participant(pid)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        user.is_banned = not user.is_banned
        await repo.save_participant(user)
    except PersistenceError:
        raise HTTPException(status_code=503, detail="Store unavailable")

    if user.is_banned:
        async with registry.lock:
            state = registry.get(pid)
            if isinstance(state, Paired):
                registry.close_room(state.room_id)
            else:
                registry.clear(pid)

    return {"ok": True, "id": pid, "is_banned": user.is_banned}


@router.get("/chatlog/{room_id}")
async def chatlog(room_id: str, request: Request):
    repo = request.app.state.repo
    room_id = _ROOM_ID_RE.sub("", room_id)
    try:
        if not await repo.transcript_exists(room_id):
            raise HTTPException(status_code=404, detail="Log tidak ditemukan")
        entries = await repo.read_transcript(room_id)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Gagal membaca log")
    return [e.model_dump() for e in entries]


@router.post("/broadcast")
async def broadcast(body: InBroadcast, request: Request):
    broadcaster = request.app.state.broadcaster
    outcome = await broadcaster.start(body.message)
    if not outcome.accepted:
        detail = {
            "EMPTY_MESSAGE": "Pesan tidak boleh kosong.",
            "ALREADY_RUNNING": "Broadcast lain sedang berjalan.",
        }.get(outcome.reason, "Broadcast gagal dimulai.")
        raise HTTPException(status_code=400, detail=detail)
    return {"ok": True, "total": outcome.total, "message": "Broadcast dimulai! Pantau progres di dashboard."}


@router.get("/broadcast-status")
async def broadcast_status(request: Request):
    return request.app.state.broadcaster.status.model_dump()
