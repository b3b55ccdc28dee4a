from __future__ import annotations

from typing import List, Optional, Sequence

from .base import ModelRequest, ModelResponse


class MockModelClient:
    """Deterministic mock backend: useful to verify control-flow without an external LLM.

    Replies with the scripted ``responses`` in order, then echoes the
    last user turn. Every request is kept in ``requests``.
    """

    def __init__(self, responses: Optional[Sequence[str]] = None) -> None:
        self._responses: List[str] = list(responses or [])
        self.requests: List[ModelRequest] = []

    async def create_message(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        if self._responses:
            return ModelResponse(text=self._responses.pop(0), model=request.model)
        last_user = next((t.content for t in reversed(request.messages) if t.role == "user"), "")
        return ModelResponse(text=f"[mock:{request.model}] {last_user}", model=request.model)
