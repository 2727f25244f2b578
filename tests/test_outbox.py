import asyncio

import pytest

from anonychat.transport.outbox import Outbox
from anonychat.transport.protocols import OutMedia, OutText

from conftest import FakeGateway


@pytest.mark.asyncio
async def test_lane_keeps_order_and_honours_delay(gateway):
    sleeps = []

    async def sleep(sec):
        sleeps.append(sec)
        await asyncio.sleep(0)

    box = Outbox(gateway, sleep=sleep)
    await box.deliver([OutText(to="b", text="satu", delay_ms=1500)], lane="a")
    await box.deliver([OutText(to="b", text="dua", delay_ms=1500), OutText(to="a", text="ok")], lane="a")
    await box.drain()

    assert gateway.sent == [("b", "satu"), ("b", "dua"), ("a", "ok")]
    assert sleeps == [1.5, 1.5]


@pytest.mark.asyncio
async def test_lanes_are_independent(gateway):
    gate = asyncio.Event()

    async def sleep(sec):
        await gate.wait()

    box = Outbox(gateway, sleep=sleep)
    await box.deliver([OutText(to="x", text="tertahan", delay_ms=1000)], lane="slow")
    await box.deliver([OutText(to="y", text="langsung")], lane="fast")
    await asyncio.sleep(0.01)
    assert gateway.sent == [("y", "langsung")]

    gate.set()
    await box.drain()
    assert gateway.sent[-1] == ("x", "tertahan")


@pytest.mark.asyncio
async def test_failed_send_does_not_block_the_lane():
    gw = FakeGateway(fail_for={"gone"})
    box = Outbox(gw)
    await box.deliver([OutText(to="gone", text="1"), OutMedia(to="here", media="m")], lane="a")
    await box.drain()
    assert gw.sent == [("here", "m")]


@pytest.mark.asyncio
async def test_nothing_to_deliver(gateway):
    box = Outbox(gateway)
    await box.deliver([], lane="a")
    await box.drain()
    assert gateway.sent == []


@pytest.mark.asyncio
async def test_close_cancels_pending_lanes(gateway):
    async def never(sec):
        await asyncio.Event().wait()

    box = Outbox(gateway, sleep=never)
    await box.deliver([OutText(to="x", text="nanti", delay_ms=500)], lane="a")
    await asyncio.sleep(0)
    await box.close()
    assert gateway.sent == []


@pytest.mark.asyncio
async def test_refused_media_tells_the_sender():
    gw = FakeGateway(fail_for={"partner"})
    box = Outbox(gw)
    notice = OutText(to="sender", text="gagal")
    await box.deliver(
        [OutText(to="sender", text="meneruskan"), OutMedia(to="partner", media="m", on_failure=notice)],
        lane="sender",
    )
    await box.drain()
    assert gw.sent == [("sender", "meneruskan"), ("sender", "gagal")]


@pytest.mark.asyncio
async def test_delivered_media_sends_no_notice(gateway):
    box = Outbox(gateway)
    await box.deliver([OutMedia(to="partner", media="m", on_failure=OutText(to="sender", text="gagal"))], lane="s")
    await box.drain()
    assert gateway.sent == [("partner", "m")]
