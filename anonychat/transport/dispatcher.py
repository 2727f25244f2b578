# anonychat/transport/dispatcher.py
from __future__ import annotations

import logging

from anonychat.domain.common.types import AIFallback, ChoosingGame, Idle, Paired, Playing, Waiting
from anonychat.domain.fallback.handlers import handle_fallback
from anonychat.domain.game.handlers import handle_answer, handle_choice
from anonychat.domain.lifecycle.handlers import handle_command
from anonychat.domain.relay.handlers import handle_relay
from anonychat.transport.protocols import InMessage, Outgoing

logger = logging.getLogger(__name__)


async def dispatch_message(*, app, msg: InMessage) -> Outgoing:
    """
    Transport layer calls this for every inbound message.
    Precedence: ban check -> paired -> queued -> game / AI fallback -> commands.
    Returns the messages to deliver; nothing is sent from here.

    Raises PersistenceError when the profile store cannot be read.
    """
    repo = app.state.repo
    registry = app.state.sessions

    participant = await repo.get_or_create_participant(msg.sender_id)
    if participant.is_banned:
        logger.debug("ignoring message from banned %s", participant.pid)
        return []

    async with registry.participant_lock(participant.pid):
        state = registry.get(participant.pid)

        if isinstance(state, Paired):
            return await handle_relay(app=app, participant=participant, msg=msg, state=state)

        if isinstance(state, Waiting):
            return await handle_command(app=app, participant=participant, msg=msg)

        if isinstance(state, ChoosingGame):
            return await handle_choice(app=app, participant=participant, msg=msg, state=state)

        if isinstance(state, Playing):
            return await handle_answer(app=app, participant=participant, msg=msg, state=state)

        if isinstance(state, AIFallback):
            return await handle_fallback(app=app, participant=participant, msg=msg, state=state)

        if isinstance(state, Idle):
            return await handle_command(app=app, participant=participant, msg=msg)

    raise TypeError(f"unhandled session state: {state!r}")
