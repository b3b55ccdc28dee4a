"""Execution record models: per-node steps and the per-call result."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ConfigDict, Field

from codeflow.workflow.workflow_model import CamelModel, NodeType
from codeflow.workflow.workflow_state import AgentState


class ExecutionStep(CamelModel):
    """One recorded node execution with its input/output snapshots."""

    model_config = ConfigDict(frozen=True)

    node_id: str
    node_name: str
    node_type: NodeType
    input: AgentState
    output: AgentState
    duration_ms: float
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class GraphExecutionResult(CamelModel):
    """Outcome of one ``execute_workflow`` call.

    ``output`` is the final state on success and ``None`` on failure.
    On failure ``steps`` holds every step completed before the failing node.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    output: Optional[AgentState] = None
    steps: Tuple[ExecutionStep, ...] = ()
    error: Optional[str] = None
    error_type: Optional[str] = None
    session_id: str = ""
    duration_ms: float = 0.0

    @property
    def visited_node_ids(self) -> List[str]:
        return [s.node_id for s in self.steps]


class ExecutionRecord:
    """Accumulates the step log of a single workflow execution.

    Lives only for the duration of one call; ``to_result`` hands the
    steps to the caller as an immutable tuple.
    """

    def __init__(self, session_id: str = "") -> None:
        self.session_id = session_id
        self._steps: List[ExecutionStep] = []

    def __len__(self) -> int:
        return len(self._steps)

    def append(self, step: ExecutionStep) -> None:
        self._steps.append(step)

    @property
    def steps(self) -> Tuple[ExecutionStep, ...]:
        return tuple(self._steps)

    @property
    def total_duration_ms(self) -> float:
        return sum(s.duration_ms for s in self._steps)

    def to_result(
        self,
        success: bool,
        output: Optional[AgentState] = None,
        error: Optional[BaseException] = None,
        duration_ms: float = 0.0,
    ) -> GraphExecutionResult:
        extra: Dict[str, Any] = {}
        if error is not None:
            extra = {
                "error": str(error) or type(error).__name__,
                "error_type": type(error).__name__,
            }
        return GraphExecutionResult(
            success=success,
            output=output if success else None,
            steps=self.steps,
            session_id=self.session_id,
            duration_ms=duration_ms,
            **extra,
        )
