# anonychat/domain/relay/handlers.py
from __future__ import annotations

import logging
from typing import List

from anonychat.domain.common import replies
from anonychat.domain.common.errors import PersistenceError
from anonychat.domain.common.types import Paired
from anonychat.domain.moderation.filter import is_profane
from anonychat.domain.moderation.handlers import profane_message, record_violation, user_report
from anonychat.store.models import ParticipantStore, TranscriptEntry
from anonychat.transport.protocols import InMessage, OutMedia, OutText, Outgoing
from anonychat.util.timeutil import now_local

logger = logging.getLogger(__name__)

STOP_COMMANDS = ("!stop", "!skip")
REPORT_COMMAND = "!lapor"


async def _log_line(repo, room_id: str, nickname: str, message: str) -> None:
    entry = TranscriptEntry(timestamp=now_local(), nickname=nickname, message=message)
    try:
        await repo.append_transcript(room_id, entry)
    except PersistenceError:
        logger.exception("Failed to write chat log for room %s", room_id)


async def _last_lines(repo, room_id: str, n: int) -> List[TranscriptEntry]:
    try:
        return await repo.read_transcript(room_id, -n, -1)
    except PersistenceError:
        logger.exception("Failed to read chat log for report in room %s", room_id)
        return []


def _still_paired(registry, pid: str, state: Paired) -> bool:
    current = registry.get(pid)
    return isinstance(current, Paired) and current.room_id == state.room_id


async def handle_relay(*, app, participant: ParticipantStore, msg: InMessage, state: Paired) -> Outgoing:
    """
    Message from a paired participant, in order: stop/skip, report, media,
    moderation gate, plain relay.
    """
    repo = app.state.repo
    registry = app.state.sessions
    settings = app.state.settings
    pid = participant.pid
    partner_id = state.partner_id
    room_id = state.room_id
    lower = msg.lower

    if lower in STOP_COMMANDS:
        async with registry.lock:
            if not _still_paired(registry, pid, state):
                return []
            registry.close_room(room_id)
        return [
            OutText(to=pid, text=replies.SESSION_ENDED_SELF.render()),
            OutText(to=partner_id, text=replies.SESSION_ENDED_PARTNER.render()),
        ]

    if lower == REPORT_COMMAND:
        history = await _last_lines(repo, room_id, settings.REPORT_HISTORY)
        async with registry.lock:
            if not _still_paired(registry, pid, state):
                return []
            registry.close_room(room_id)
        reported = await repo.get_or_create_participant(partner_id)
        await record_violation(
            repo,
            user_report(reporter=participant, reported=reported, room_id=room_id, chat_history=history),
        )
        return [
            OutText(to=pid, text=replies.REPORT_ACCEPTED.render()),
            OutText(to=partner_id, text=replies.REPORT_PARTNER.render()),
        ]

    if msg.has_media:
        kind = msg.media_kind or "media"
        await _log_line(repo, room_id, participant.nickname, f"[Media: {kind}]")
        caption = msg.text.strip() or None
        return [
            OutText(to=pid, text=replies.MEDIA_FORWARDING.render()),
            OutMedia(
                to=partner_id,
                media=msg.media,
                caption=caption if kind == "image" else None,
                on_failure=OutText(to=pid, text=replies.MEDIA_FORWARD_FAILED.render()),
            ),
        ]

    text = msg.text.strip()
    if not text:
        return []

    if is_profane(text, app.state.bad_words):
        await record_violation(repo, profane_message(offender=participant, room_id=room_id, message=text))
        return [OutText(to=pid, text=replies.PROFANITY_WARNING.render())]

    await _log_line(repo, room_id, participant.nickname, text)
    return [OutText(to=partner_id, text=text, delay_ms=settings.RELAY_DELAY_MS)]
