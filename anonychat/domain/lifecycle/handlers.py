# anonychat/domain/lifecycle/handlers.py
from __future__ import annotations

import logging

from anonychat.domain.common import replies
from anonychat.domain.common.errors import CommandError, PersistenceError
from anonychat.domain.common.types import Waiting
from anonychat.domain.game.handlers import handle_start_game
from anonychat.domain.matchmaking.handlers import cancel, try_match
from anonychat.store.models import ParticipantStore
from anonychat.transport.protocols import InMessage, OutMedia, OutText, Outgoing

logger = logging.getLogger(__name__)

MENU_WORDS = ("halo", "p", "salam", "!menu")
NICK_MAX = 24


def parse_nickname(text: str) -> str:
    parts = (text or "").strip().split(maxsplit=1)
    name = " ".join(parts[1].split()) if len(parts) > 1 else ""
    if not name or len(name) > NICK_MAX:
        raise CommandError("BAD_NICK", "Nickname must be 1-24 characters")
    return name


async def _change_nickname(app, participant: ParticipantStore, msg: InMessage) -> Outgoing:
    pid = participant.pid
    try:
        name = parse_nickname(msg.text)
    except CommandError:
        return [OutText(to=pid, text=replies.NICK_INVALID.render())]

    participant.nickname = name
    try:
        await app.state.repo.save_participant(participant)
    except PersistenceError:
        logger.exception("Failed to save nickname for %s", pid)
    return [OutText(to=pid, text=replies.NICK_CHANGED.render(nickname=name))]


def _sticker(participant: ParticipantStore, msg: InMessage) -> Outgoing:
    pid = participant.pid
    if not msg.has_media or msg.media_kind not in (None, "image"):
        return [OutText(to=pid, text=replies.STICKER_HINT.render())]
    return [
        OutText(to=pid, text=replies.STICKER_WORKING.render()),
        OutMedia(
            to=pid,
            media=msg.media,
            options={
                "send_media_as_sticker": True,
                "sticker_author": "AnonyChat Bot",
                "sticker_name": f"Stiker by {participant.nickname}",
            },
            on_failure=OutText(to=pid, text=replies.STICKER_FAILED.render()),
        ),
    ]


async def handle_command(*, app, participant: ParticipantStore, msg: InMessage) -> Outgoing:
    """
    Commands for participants that are idle or waiting in the queue.
    Anything that is not a command is ignored.
    """
    registry = app.state.sessions
    pid = participant.pid
    command = msg.command

    if command in MENU_WORDS:
        return [OutText(to=pid, text=replies.MENU.render(nickname=participant.nickname))]

    if command == "!chat":
        if registry.queued(pid):
            return [OutText(to=pid, text=replies.ALREADY_QUEUED.render())]
        return await try_match(app=app, pid=pid)

    if command in ("!stop", "!skip"):
        return await cancel(app=app, pid=pid)

    if command == "!nick":
        return await _change_nickname(app, participant, msg)

    if command == "!profil":
        return [
            OutText(
                to=pid,
                text=replies.PROFILE.render(nickname=participant.nickname, xp=participant.xp, tier=participant.tier),
            )
        ]

    if command in ("!game", "!kuis"):
        return await handle_start_game(app=app, participant=participant, msg=msg)

    if command == "!stiker":
        return _sticker(participant, msg)

    if isinstance(registry.get(pid), Waiting) and msg.text.strip():
        return [OutText(to=pid, text=replies.STILL_SEARCHING.render())]

    return []
