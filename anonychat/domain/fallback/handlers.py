# anonychat/domain/fallback/handlers.py
from __future__ import annotations

import logging

from anonychat.domain.common import replies
from anonychat.domain.common.errors import ExternalServiceError
from anonychat.domain.common.types import AIFallback
from anonychat.domain.matchmaking.handlers import try_match
from anonychat.store.models import ParticipantStore
from anonychat.transport.protocols import InMessage, OutText, Outgoing

logger = logging.getLogger(__name__)

PERSONA = (
    "Kamu adalah teman ngobrol anonim yang ramah dan santai. "
    "Balas dalam bahasa Indonesia sehari-hari, maksimal tiga kalimat, "
    "jangan meminta data pribadi. Nama panggilan lawan bicaramu: {nickname}.\n\n"
    "Pesan: {message}\nBalasan:"
)


def build_reply_prompt(nickname: str, message: str) -> str:
    return PERSONA.format(nickname=nickname, message=message)


async def handle_fallback(*, app, participant: ParticipantStore, msg: InMessage, state: AIFallback) -> Outgoing:
    registry = app.state.sessions
    pid = participant.pid

    if msg.command in ("!stop", "!skip"):
        async with registry.lock:
            registry.clear(pid)
        return [OutText(to=pid, text=replies.FALLBACK_STOPPED.render())]

    if msg.command == "!chat":
        async with registry.lock:
            if registry.get(pid) is state:
                registry.clear(pid)
        return await try_match(app=app, pid=pid)

    if msg.has_media:
        return [OutText(to=pid, text=replies.FALLBACK_TEXT_ONLY.render())]

    text = msg.text.strip()
    if not text:
        return []

    try:
        reply = await app.state.textgen.generate(build_reply_prompt(participant.nickname, text))
    except ExternalServiceError:
        logger.warning("AI fallback reply failed for %s", pid)
        return [OutText(to=pid, text=replies.FALLBACK_FAILED.render())]

    async with registry.lock:
        if registry.get(pid) is not state:
            logger.debug("dropping fallback reply for %s, state moved on", pid)
            return []
    return [OutText(to=pid, text=reply)]
