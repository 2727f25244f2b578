import json

import httpx
import pytest

from anonychat.domain.common.errors import ExternalServiceError
from anonychat.services.textgen import TextGenClient
from anonychat.transport.gateway import GatewayClient
from anonychat.transport.protocols import OutMedia, OutText


def _client(handler, **kw):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), **kw)


# ----------------------------
# Text generation
# ----------------------------

@pytest.mark.asyncio
async def test_textgen_posts_prompt_and_reads_text():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"text": "  Halo!  "})

    tg = TextGenClient("http://tg/generate", model="kecil", client=_client(handler))
    assert await tg.generate("sapa aku") == "Halo!"
    assert seen == [{"prompt": "sapa aku", "model": "kecil"}]


@pytest.mark.asyncio
async def test_textgen_reads_chat_completion_shape():
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": "jawab"}}]})

    tg = TextGenClient("http://tg/generate", client=_client(handler))
    assert await tg.generate("x") == "jawab"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, content=b"bukan json"),
        httpx.Response(200, json={"unexpected": 1}),
        httpx.Response(200, json={"text": "   "}),
    ],
)
@pytest.mark.asyncio
async def test_textgen_failures_raise(response):
    tg = TextGenClient("http://tg/generate", client=_client(lambda request: response))
    with pytest.raises(ExternalServiceError):
        await tg.generate("x")


@pytest.mark.asyncio
async def test_textgen_unreachable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    tg = TextGenClient("http://tg/generate", client=_client(handler))
    with pytest.raises(ExternalServiceError):
        await tg.generate("x")


# ----------------------------
# Gateway
# ----------------------------

@pytest.mark.asyncio
async def test_gateway_sends_text_and_media():
    seen = []

    def handler(request):
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"ok": True})

    gw = GatewayClient("http://gw", client=_client(handler, base_url="http://gw"))
    await gw.send(OutText(to="a@c.us", text="hai", delay_ms=1500))
    await gw.send(OutMedia(to="b@c.us", media="aW1n", caption="lihat", options={"send_media_as_sticker": True}))

    assert seen[0] == ("/messages", {"type": "text", "to": "a@c.us", "text": "hai"})
    path, body = seen[1]
    assert path == "/messages"
    assert body["type"] == "media" and body["media"] == "aW1n"
    assert body["options"] == {"send_media_as_sticker": True, "caption": "lihat"}


@pytest.mark.asyncio
async def test_gateway_errors_are_external_service_errors():
    gw = GatewayClient("http://gw", client=_client(lambda r: httpx.Response(502), base_url="http://gw"))
    with pytest.raises(ExternalServiceError):
        await gw.send_text("a@c.us", "hai")
