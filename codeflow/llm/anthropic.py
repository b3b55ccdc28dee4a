from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, Optional

import httpx

from codeflow.config.sub_config.general.api_config import DEFAULT_API_VERSION, DEFAULT_BASE_URL
from codeflow.errors import ModelInvocationError

from .base import ModelRequest, ModelResponse

logger = getLogger(__name__)


class AnthropicClient:
    """Minimal async Anthropic Messages API client via raw HTTP.

    The credential is bound at construction, so clients with different
    keys can coexist in one process.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        anthropic_version: str = DEFAULT_API_VERSION,
        timeout_s: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.anthropic_version = anthropic_version
        self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.anthropic_version,
            "content-type": "application/json",
        }

    async def create_message(self, request: ModelRequest) -> ModelResponse:
        url = f"{self.base_url}/messages"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                r = await client.post(url, json=request.to_payload(), headers=self._headers())
        except httpx.HTTPError as e:
            raise ModelInvocationError(None, f"{type(e).__name__}: {e}") from e

        if not r.is_success:
            raise ModelInvocationError(r.status_code, _error_message(r))

        try:
            data = r.json()
        except ValueError as e:
            raise ModelInvocationError(r.status_code, "response body is not JSON") from e

        if not isinstance(data, dict):
            raise ModelInvocationError(r.status_code, "response body is not a JSON object")

        # Anthropic returns: content: [{type:"text", text:"..."}]
        blocks = data.get("content")
        if not isinstance(blocks, list):
            blocks = []
        texts = [
            str(b.get("text", ""))
            for b in blocks
            if isinstance(b, dict) and b.get("type") == "text"
        ]
        if not texts:
            raise ModelInvocationError(r.status_code, "response contained no text content")

        logger.debug(f"Model {data.get('model', request.model)} stop_reason={data.get('stop_reason')}")
        return ModelResponse(
            text="\n".join(texts),
            model=data.get("model", request.model),
            stop_reason=data.get("stop_reason"),
            usage=data.get("usage") if isinstance(data.get("usage"), dict) else {},
        )


def _error_message(r: httpx.Response) -> str:
    """Best-effort provider error text from a non-2xx response."""
    try:
        body: Any = r.json()
    except ValueError:
        return r.text.strip() or r.reason_phrase
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return r.reason_phrase or str(body)
