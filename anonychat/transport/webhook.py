# anonychat/transport/webhook.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import ValidationError

from anonychat.domain.common.errors import PersistenceError
from anonychat.transport.dispatcher import dispatch_message
from anonychat.transport.protocols import parse_inbound

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhook")
async def inbound_message(request: Request, payload: Dict[str, Any] = Body(...)):
    """
    Inbound half of the messaging transport: the gateway POSTs every chat
    message here. Replies go out asynchronously through the outbox.
    """
    app = request.app
    if not getattr(app.state, "ready", False):
        raise HTTPException(status_code=503, detail="Profile store not ready")

    try:
        msg = parse_inbound(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    try:
        events = await dispatch_message(app=app, msg=msg)
    except PersistenceError:
        logger.exception("Profile store unavailable while handling %s", msg.sender_id)
        raise HTTPException(status_code=503, detail="Profile store unavailable")

    await app.state.outbox.deliver(events, lane=msg.sender_id)
    return {"ok": True, "queued": len(events)}
