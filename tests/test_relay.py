import pytest

from anonychat.domain.common import replies
from anonychat.domain.common.types import Idle
from anonychat.transport.dispatcher import dispatch_message
from anonychat.transport.outbox import Outbox
from anonychat.transport.protocols import InMessage, OutMedia, OutText

from conftest import FakeGateway

A = "a@c.us"
B = "b@c.us"


def _msg(pid, text="", **kw):
    return InMessage(sender_id=pid, text=text, **kw)


async def _pair(app):
    await dispatch_message(app=app, msg=_msg(A, "!chat"))
    await dispatch_message(app=app, msg=_msg(B, "!chat"))
    return app.state.sessions.get(A).room_id


@pytest.mark.asyncio
async def test_plain_text_is_relayed_with_delay(app, repo):
    room_id = await _pair(app)

    out = await dispatch_message(app=app, msg=_msg(A, "halo kamu"))
    assert out == [OutText(to=B, text="halo kamu", delay_ms=1500)]

    log = repo.chatlogs[room_id]
    assert [(e.nickname, e.message) for e in log] == [("a", "halo kamu")]


@pytest.mark.asyncio
async def test_profane_message_is_blocked_and_recorded(app, repo):
    room_id = await _pair(app)
    await dispatch_message(app=app, msg=_msg(A, "hai"))

    out = await dispatch_message(app=app, msg=_msg(A, "dasar KASAR"))
    assert out == [OutText(to=A, text=replies.PROFANITY_WARNING.render())]
    assert [e.message for e in repo.chatlogs[room_id]] == ["hai"]
    assert len(repo.violations) == 1
    v = repo.violations[0]
    assert v.kind == "ProfaneMessage"
    assert v.offender.id == A
    assert v.room_id == room_id
    assert v.message == "dasar KASAR"


@pytest.mark.asyncio
async def test_word_containing_banned_token_is_relayed(app, repo):
    await _pair(app)
    out = await dispatch_message(app=app, msg=_msg(A, "contohnya begini"))
    assert out == [OutText(to=B, text="contohnya begini", delay_ms=1500)]
    assert repo.violations == []


@pytest.mark.asyncio
async def test_stop_ends_session_for_both(app):
    reg = app.state.sessions
    room_id = await _pair(app)

    out = await dispatch_message(app=app, msg=_msg(B, "!skip"))
    assert out == [
        OutText(to=B, text=replies.SESSION_ENDED_SELF.render()),
        OutText(to=A, text=replies.SESSION_ENDED_PARTNER.render()),
    ]
    assert isinstance(reg.get(A), Idle)
    assert isinstance(reg.get(B), Idle)
    assert reg.room(room_id) is None


@pytest.mark.asyncio
async def test_report_keeps_recent_history(app, repo):
    reg = app.state.sessions
    room_id = await _pair(app)
    for i in range(12):
        sender = A if i % 2 == 0 else B
        await dispatch_message(app=app, msg=_msg(sender, f"pesan {i}"))

    out = await dispatch_message(app=app, msg=_msg(A, "!lapor"))
    assert out == [
        OutText(to=A, text=replies.REPORT_ACCEPTED.render()),
        OutText(to=B, text=replies.REPORT_PARTNER.render()),
    ]
    assert isinstance(reg.get(A), Idle) and isinstance(reg.get(B), Idle)

    (v,) = repo.violations
    assert v.kind == "UserReport"
    assert v.reporter.id == A and v.reported.id == B
    assert [e.message for e in v.chat_history] == [f"pesan {i}" for i in range(2, 12)]
    # the log itself is kept for the admin view
    assert len(repo.chatlogs[room_id]) == 12


@pytest.mark.asyncio
async def test_media_is_forwarded_and_logged_as_marker(app, repo):
    room_id = await _pair(app)

    out = await dispatch_message(
        app=app, msg=_msg(A, "lihat ini", has_media=True, media_kind="image", media="aGVsbG8=")
    )
    assert out == [
        OutText(to=A, text=replies.MEDIA_FORWARDING.render()),
        OutMedia(
            to=B,
            media="aGVsbG8=",
            caption="lihat ini",
            on_failure=OutText(to=A, text=replies.MEDIA_FORWARD_FAILED.render()),
        ),
    ]
    assert repo.chatlogs[room_id][-1].message == "[Media: image]"

    out = await dispatch_message(app=app, msg=_msg(A, "", has_media=True, media_kind="audio", media="x"))
    assert out[1].caption is None
    assert out[1].media == "x"


@pytest.mark.asyncio
async def test_empty_text_is_ignored(app):
    await _pair(app)
    assert await dispatch_message(app=app, msg=_msg(A, "   ")) == []


@pytest.mark.asyncio
async def test_store_failure_does_not_stop_the_chat(app, repo):
    await _pair(app)
    repo.fail_writes = True

    out = await dispatch_message(app=app, msg=_msg(A, "tetap terkirim"))
    assert out == [OutText(to=B, text="tetap terkirim", delay_ms=1500)]

    out = await dispatch_message(app=app, msg=_msg(A, "contoh"))
    assert out == [OutText(to=A, text=replies.PROFANITY_WARNING.render())]
    assert repo.violations == []


@pytest.mark.asyncio
async def test_sender_hears_about_a_failed_media_forward(app):
    await _pair(app)
    gw = FakeGateway(fail_for={B})
    box = Outbox(gw)

    out = await dispatch_message(app=app, msg=_msg(A, "", has_media=True, media_kind="video", media="dmlk"))
    await box.deliver(out, lane=A)
    await box.drain()

    assert gw.sent == [
        (A, replies.MEDIA_FORWARDING.render()),
        (A, replies.MEDIA_FORWARD_FAILED.render()),
    ]
