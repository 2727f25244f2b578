"""Thin client for the external text-generation service.

The service takes a prompt and returns text. Two response shapes are read:
``{"text": "..."}`` and the OpenAI-style
``{"choices": [{"message": {"content": "..."}}]}``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from anonychat.domain.common.errors import ExternalServiceError

logger = logging.getLogger(__name__)


def _extract_text(data: Any) -> str:
    if isinstance(data, dict):
        text = data.get("text")
        if isinstance(text, str):
            return text
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            first = choices[0] or {}
            message = first.get("message") if isinstance(first, dict) else None
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                return message["content"]
            if isinstance(first, dict) and isinstance(first.get("text"), str):
                return first["text"]
    raise ExternalServiceError("text generation returned an unexpected payload")


class TextGenClient:
    """Async wrapper around one HTTP completion endpoint."""

    def __init__(
        self,
        url: str,
        *,
        model: str = "",
        api_key: str = "",
        timeout: float = 20.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.model = model
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers=headers,
        )

    async def generate(self, prompt: str) -> str:
        payload: dict[str, Any] = {"prompt": prompt}
        if self.model:
            payload["model"] = self.model
        try:
            resp = await self._client.post(self.url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("Text generation HTTP %s", e.response.status_code)
            raise ExternalServiceError(f"text generation failed: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.warning("Text generation request error: %s", e)
            raise ExternalServiceError(f"text generation unreachable: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ExternalServiceError("text generation returned invalid JSON") from e

        text = _extract_text(data).strip()
        if not text:
            raise ExternalServiceError("text generation returned an empty reply")
        return text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
