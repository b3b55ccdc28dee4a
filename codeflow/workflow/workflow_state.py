"""
Agent State — the value threaded through every node execution.

``AgentState`` is frozen: a node never mutates the state it receives,
it returns a new one built with the ``with_*`` helpers. Recorded step
snapshots therefore stay exactly as they were when the step ran.

Well-known ``context`` keys:

    lastToolResult  — transcript text of the most recent tool call
    lastToolOk      — whether that call succeeded (``ToolResult.ok``)
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Union

from pydantic import ConfigDict, Field

from codeflow.workflow.workflow_model import CamelModel

Role = Literal["user", "assistant", "system", "tool"]

LAST_TOOL_RESULT = "lastToolResult"
LAST_TOOL_OK = "lastToolOk"


class ToolCall(CamelModel):
    """Tool invocation metadata attached to a message."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class Message(CamelModel):
    """One transcript entry."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    tool_calls: Optional[Tuple[ToolCall, ...]] = None
    tool_call_id: Optional[str] = None
    name: Optional[str] = None


class AgentState(CamelModel):
    """Immutable per-step workflow state."""

    model_config = ConfigDict(frozen=True)

    messages: Tuple[Message, ...] = ()
    current_file: Optional[str] = None
    project_path: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    next_action: Optional[str] = None

    # ── Transitions (each returns a new state) ──

    def with_message(self, message: Message) -> "AgentState":
        return self.model_copy(update={"messages": (*self.messages, message)})

    def with_context(self, **updates: Any) -> "AgentState":
        return self.model_copy(update={"context": {**self.context, **updates}})

    def with_next_action(self, next_action: Optional[str]) -> "AgentState":
        return self.model_copy(update={"next_action": next_action})

    # ── Inspection ──

    @property
    def last_message(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None

    def summary(self) -> Dict[str, Any]:
        """Compact view for logging."""
        return {
            "messages_count": len(self.messages),
            "current_file": self.current_file,
            "context_keys": sorted(self.context),
            "next_action": self.next_action,
        }


def make_initial_state(
    initial: Union[AgentState, Mapping[str, Any], None] = None,
) -> AgentState:
    """Build a full state from caller-supplied partial values.

    Accepts an ``AgentState``, a mapping with camelCase or snake_case
    keys, or ``None``. The caller's containers are copied, never shared.
    """
    if initial is None:
        return AgentState()
    if isinstance(initial, AgentState):
        return initial.model_copy(update={"context": dict(initial.context)})
    # None means "use the default" for the container fields.
    data = {k: v for k, v in initial.items() if not (k in ("messages", "context") and v is None)}
    if "context" in data:
        data["context"] = dict(data["context"])
    return AgentState.model_validate(data)
