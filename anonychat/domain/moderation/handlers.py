# anonychat/domain/moderation/handlers.py
from __future__ import annotations

import logging
from typing import List

from anonychat.domain.common.errors import PersistenceError
from anonychat.store.models import ParticipantStore, PartyRef, TranscriptEntry, ViolationEntry
from anonychat.util.timeutil import now_local

logger = logging.getLogger(__name__)


def _ref(p: ParticipantStore) -> PartyRef:
    return PartyRef(id=p.pid, nickname=p.nickname)


def profane_message(*, offender: ParticipantStore, room_id: str, message: str) -> ViolationEntry:
    return ViolationEntry(
        timestamp=now_local(),
        kind="ProfaneMessage",
        room_id=room_id,
        offender=_ref(offender),
        message=message,
    )


def user_report(
    *,
    reporter: ParticipantStore,
    reported: ParticipantStore,
    room_id: str,
    chat_history: List[TranscriptEntry],
) -> ViolationEntry:
    return ViolationEntry(
        timestamp=now_local(),
        kind="UserReport",
        room_id=room_id,
        reporter=_ref(reporter),
        reported=_ref(reported),
        chat_history=list(chat_history),
    )


async def record_violation(repo, entry: ViolationEntry) -> bool:
    """
    Append to the violation log.
    A store failure is logged and reported as False, never raised: the
    sender still gets their moderation notice.
    """
    try:
        await repo.append_violation(entry)
    except PersistenceError:
        logger.exception("Failed to persist %s violation in room %s", entry.kind, entry.room_id)
        return False
    logger.info("violation %s recorded in room %s", entry.kind, entry.room_id)
    return True
