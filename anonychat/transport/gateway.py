# anonychat/transport/gateway.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from anonychat.domain.common.errors import ExternalServiceError
from anonychat.transport.protocols import OutMedia, OutText, OutgoingMessage

logger = logging.getLogger(__name__)


class GatewayClient:
    """
    Outbound half of the messaging transport.
    The gateway owns the chat-network session; we only POST messages to it.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str = "",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            headers=headers,
        )

    async def _post(self, payload: Dict[str, Any]) -> None:
        try:
            resp = await self._client.post("/messages", json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"gateway HTTP {e.response.status_code} for {payload.get('to')}") from e
        except httpx.RequestError as e:
            raise ExternalServiceError(f"gateway unreachable: {e}") from e

    async def send_text(self, pid: str, text: str) -> None:
        await self._post({"type": "text", "to": pid, "text": text})

    async def send_media(self, pid: str, media: Optional[str], options: Optional[Dict[str, Any]] = None) -> None:
        await self._post({"type": "media", "to": pid, "media": media, "options": dict(options or {})})

    async def send(self, event: OutgoingMessage) -> None:
        if isinstance(event, OutText):
            await self.send_text(event.to, event.text)
            return
        if isinstance(event, OutMedia):
            options = dict(event.options)
            if event.caption:
                options["caption"] = event.caption
            await self.send_media(event.to, event.media, options)
            return
        raise TypeError(f"unsupported outgoing event: {type(event).__name__}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
