from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, Literal, Protocol, Tuple

if TYPE_CHECKING:
    from codeflow.workflow.workflow_state import Message

TurnRole = Literal["user", "assistant"]

# The provider takes only user/assistant turns; system text goes in the
# top-level `system` parameter.
_ROLE_MAP: Dict[str, TurnRole] = {
    "user": "user",
    "assistant": "assistant",
    "system": "assistant",
    "tool": "user",
}


@dataclass(frozen=True)
class ChatTurn:
    role: TurnRole
    content: str


@dataclass(frozen=True)
class ModelRequest:
    model: str
    messages: Tuple[ChatTurn, ...]
    system: str
    temperature: float
    max_tokens: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": self.system,
            "messages": [{"role": t.role, "content": t.content} for t in self.messages],
        }


@dataclass(frozen=True)
class ModelResponse:
    text: str
    model: str = ""
    stop_reason: str | None = None
    usage: Dict[str, Any] = field(default_factory=dict)


class ModelClient(Protocol):
    async def create_message(self, request: ModelRequest) -> ModelResponse:
        """Return the generated text; raise ModelInvocationError on non-success."""
        raise NotImplementedError


def to_provider_turns(messages: Iterable["Message"]) -> Tuple[ChatTurn, ...]:
    """Convert transcript messages to provider turns, remapping roles."""
    return tuple(ChatTurn(role=_ROLE_MAP[m.role], content=m.content) for m in messages)
