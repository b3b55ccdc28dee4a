"""
Logic Nodes — condition evaluation and human-review markers.

These nodes perform pure state-based decisions without invoking
the model or any tool. They implement the graph's control flow.
"""

from __future__ import annotations

from enum import Enum
from logging import getLogger
from typing import Any, Mapping, Optional

from codeflow.workflow.nodes.base import (
    BaseNode,
    ExecutionContext,
    NodeConfig,
    NodeParameter,
    OutputPort,
    RoutingFunction,
    register_node,
)
from codeflow.workflow.workflow_model import NodeType, WorkflowNode
from codeflow.workflow.workflow_state import LAST_TOOL_OK, LAST_TOOL_RESULT, AgentState

logger = getLogger(__name__)

DEFAULT_OUTCOME = "default"


class Condition(str, Enum):
    """Recognised condition names."""
    HAS_ERROR = "has_error"
    HAS_FILE = "has_file"


def evaluate_condition(condition: Optional[str], state: AgentState) -> str:
    """Compute the outcome of a named condition against ``state``.

    Unrecognised or missing conditions yield ``"default"``.
    """
    if condition == Condition.HAS_ERROR.value:
        ok = state.context.get(LAST_TOOL_OK)
        if isinstance(ok, bool):
            return "success" if ok else "error"
        # No explicit flag: fall back to the prose convention.
        last = state.context.get(LAST_TOOL_RESULT)
        return "error" if isinstance(last, str) and "Error" in last else "success"
    if condition == Condition.HAS_FILE.value:
        return "with_file" if state.current_file else "no_file"
    return DEFAULT_OUTCOME


# ============================================================================
# Conditional
# ============================================================================


class ConditionalNodeConfig(NodeConfig):
    condition: Optional[str] = None


@register_node
class ConditionalNode(BaseNode):
    """Evaluate a named condition and store the outcome in ``next_action``.

    Outgoing edges whose ``condition`` equals the outcome are taken;
    otherwise the unconditioned (default) edge.
    """

    node_type = NodeType.CONDITIONAL
    label = "Conditional"
    description = "Evaluate a named condition and route on its outcome"
    category = "logic"
    config_model = ConditionalNodeConfig

    parameters = [
        NodeParameter(
            name="condition",
            label="Condition",
            type="select",
            options=[
                {"value": Condition.HAS_ERROR.value, "label": "Last tool result has an error"},
                {"value": Condition.HAS_FILE.value, "label": "A current file is set"},
            ],
            required=True,
            group="routing",
        ),
    ]

    output_ports = [
        OutputPort(id="error", label="Error", description="has_error: last tool call failed"),
        OutputPort(id="success", label="Success", description="has_error: last tool call succeeded"),
        OutputPort(id="with_file", label="With File", description="has_file: current file set"),
        OutputPort(id="no_file", label="No File", description="has_file: no current file"),
        OutputPort(id=DEFAULT_OUTCOME, label="Default", description="Unrecognised condition"),
    ]

    async def execute(
        self,
        node: WorkflowNode,
        state: AgentState,
        context: ExecutionContext,
    ) -> AgentState:
        config = self.parse_config(node.config)
        outcome = evaluate_condition(config.condition, state)
        logger.info(
            f"[{context.session_id}] conditional '{node.display_name}': "
            f"{config.condition or '<none>'} → {outcome}"
        )
        return state.with_next_action(outcome)

    def get_routing_function(
        self, config: Mapping[str, Any],
    ) -> Optional[RoutingFunction]:
        def _route(state: AgentState) -> Optional[str]:
            return state.next_action
        return _route


# ============================================================================
# Human Review
# ============================================================================


class HumanNodeConfig(NodeConfig):
    instructions: Optional[str] = None


@register_node
class HumanNode(BaseNode):
    """Structural marker for a human-review point.

    The engine does not suspend here; the state passes through unchanged.
    """

    node_type = NodeType.HUMAN
    label = "Human Review"
    description = "Mark a point where a person should review the transcript"
    category = "logic"
    config_model = HumanNodeConfig

    parameters = [
        NodeParameter(
            name="instructions",
            label="Review Instructions",
            type="string",
            description="What the reviewer should check. Informational only.",
            group="general",
        ),
    ]

    async def execute(
        self,
        node: WorkflowNode,
        state: AgentState,
        context: ExecutionContext,
    ) -> AgentState:
        self.parse_config(node.config)
        logger.info(f"[{context.session_id}] human review point '{node.display_name}' (pass-through)")
        return state
