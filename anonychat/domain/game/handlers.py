# anonychat/domain/game/handlers.py
from __future__ import annotations

import logging
import math

from anonychat.domain.common import replies
from anonychat.domain.common.errors import ExternalServiceError, PersistenceError, StaleTimer
from anonychat.domain.common.types import ChoosingGame, GameType, Idle, Playing, SessionState
from anonychat.domain.game.catalog import GameSpec, get_game, parse_choice
from anonychat.domain.game.generator import generate_question
from anonychat.domain.game.scoring import is_correct, roll_xp, tier_for
from anonychat.store.models import ParticipantStore
from anonychat.transport.protocols import InMessage, OutText, Outgoing
from anonychat.util.timeutil import now_ts

logger = logging.getLogger(__name__)

STOP_COMMAND = "!stop"


def _arm_question_timer(app, pid: str, game_type: GameType) -> int:
    registry = app.state.sessions

    async def _fire(pid: str, token: int) -> None:
        events = await expire_question(app=app, pid=pid, token=token, game_type=game_type)
        if events:
            await app.state.outbox.deliver(events, lane=pid)

    return registry.timers.arm(pid, app.state.settings.QUIZ_TIMEOUT_SEC, _fire)


async def _next_question(app, pid: str, game: GameSpec, expected: SessionState) -> Outgoing:
    """
    Generate a question and switch to Playing, but only if the participant
    is still in `expected` once the generator answers.
    """
    registry = app.state.sessions
    settings = app.state.settings

    try:
        q = await generate_question(app.state.textgen, game)
    except ExternalServiceError:
        logger.warning("Question generation failed for %s (%s)", pid, game.key)
        async with registry.lock:
            if registry.get(pid) is expected:
                registry.clear(pid)
        return [OutText(to=pid, text=replies.GAME_GENERATION_FAILED.render())]

    async with registry.lock:
        if registry.get(pid) is not expected:
            logger.debug("dropping question for %s, state moved on", pid)
            return []
        registry.set(
            pid,
            Playing(
                game_type=game.key,
                prompt=q.prompt,
                expected_answer=q.answer,
                deadline=now_ts() + math.ceil(settings.QUIZ_TIMEOUT_SEC),
            ),
        )
        _arm_question_timer(app, pid, game.key)

    text = replies.GAME_QUESTION.render(
        game_name=game.name,
        prompt=q.prompt,
        seconds=math.ceil(settings.QUIZ_TIMEOUT_SEC),
    )
    return [OutText(to=pid, text=text)]


async def handle_start_game(*, app, participant: ParticipantStore, msg: InMessage) -> Outgoing:
    registry = app.state.sessions
    pid = participant.pid
    async with registry.lock:
        if not isinstance(registry.get(pid), Idle):
            return [OutText(to=pid, text=replies.BUSY.render())]
        registry.set(pid, ChoosingGame())
    return [OutText(to=pid, text=replies.GAME_MENU.render())]


async def handle_choice(*, app, participant: ParticipantStore, msg: InMessage, state: ChoosingGame) -> Outgoing:
    registry = app.state.sessions
    pid = participant.pid

    game = parse_choice(msg.text)
    if game is None:
        async with registry.lock:
            if registry.get(pid) is state:
                registry.clear(pid)
        return [OutText(to=pid, text=replies.GAME_INVALID_CHOICE.render())]

    logger.info("%s picked %s", pid, game.key)
    return await _next_question(app, pid, game, state)


async def _award(app, participant: ParticipantStore) -> Outgoing:
    settings = app.state.settings
    gained = roll_xp(app.state.rng, settings.XP_MIN, settings.XP_MAX)
    old_tier = participant.tier
    participant.xp += gained
    participant.tier = tier_for(participant.xp, settings.TIER_SIZE)
    try:
        await app.state.repo.save_participant(participant)
    except PersistenceError:
        logger.exception("Failed to save XP for %s", participant.pid)

    out = [
        OutText(
            to=participant.pid,
            text=replies.GAME_CORRECT.render(gained=gained, xp=participant.xp, tier=participant.tier),
        )
    ]
    if participant.tier != old_tier:
        out.append(OutText(to=participant.pid, text=replies.GAME_TIER_UP.render(tier=participant.tier)))
    return out


async def handle_answer(*, app, participant: ParticipantStore, msg: InMessage, state: Playing) -> Outgoing:
    """Score one answer and move straight on to the next question."""
    registry = app.state.sessions
    pid = participant.pid

    if msg.lower == STOP_COMMAND:
        async with registry.lock:
            registry.clear(pid)
        return [OutText(to=pid, text=replies.GAME_STOPPED.render())]

    if not msg.text.strip():
        return []

    if is_correct(msg.text, state.expected_answer):
        events = await _award(app, participant)
    else:
        events = [OutText(to=pid, text=replies.GAME_WRONG.render(answer=state.expected_answer))]

    events.extend(await _next_question(app, pid, get_game(state.game_type), state))
    return events


async def expire_question(*, app, pid: str, token: int, game_type: GameType) -> Outgoing:
    """
    Deadline passed without an answer: reveal it and ask the next one.
    A second fire for the same question finds a newer token and does nothing.
    """
    registry = app.state.sessions
    async with registry.participant_lock(pid):
        try:
            state = registry.claim_timer(pid, token, Playing)
        except StaleTimer:
            logger.debug("quiz timer for %s is stale (token=%s)", pid, token)
            return []
        if state.game_type != game_type:
            return []

        events: Outgoing = [OutText(to=pid, text=replies.GAME_TIMEOUT.render(answer=state.expected_answer))]
        events.extend(await _next_question(app, pid, get_game(game_type), state))
        return events
