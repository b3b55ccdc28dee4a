"""
Task Nodes — tool invocation.

A tool node calls one registered tool, appends the result to the
transcript as a tool message and records it in ``context``.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, Optional

from pydantic import Field

from codeflow.errors import ConfigurationError, ToolNotFoundError
from codeflow.workflow.nodes.base import (
    BaseNode,
    ExecutionContext,
    NodeConfig,
    NodeParameter,
    register_node,
)
from codeflow.workflow.workflow_model import NodeType, WorkflowNode
from codeflow.workflow.workflow_state import (
    LAST_TOOL_OK,
    LAST_TOOL_RESULT,
    AgentState,
    Message,
)

logger = getLogger(__name__)


class ToolNodeConfig(NodeConfig):
    tool_name: Optional[str] = None
    args: Dict[str, Any] = Field(default_factory=dict)
    tool_call_id: Optional[str] = None


def resolve_tool_args(args: Dict[str, Any], state: AgentState) -> Dict[str, Any]:
    """Copy ``args``, filling ``path`` from the state's current file if missing."""
    resolved = dict(args)
    if "path" not in resolved and state.current_file:
        if state.project_path:
            resolved["path"] = f"{state.project_path}/{state.current_file}"
        else:
            resolved["path"] = state.current_file
    return resolved


# ============================================================================
# Tool Call
# ============================================================================


@register_node
class ToolNode(BaseNode):
    """Run a registered tool.

    Tool failures do not fail the node: the failure text becomes the
    tool message and ``context["lastToolOk"]`` is ``False``.
    """

    node_type = NodeType.TOOL
    label = "Tool Call"
    description = "Invoke a registered tool and record its result"
    category = "task"
    config_model = ToolNodeConfig

    parameters = [
        NodeParameter(
            name="toolName",
            label="Tool",
            type="string",
            required=True,
            description="Registry name of the tool (e.g. read_file, list_directory).",
            group="tool",
        ),
        NodeParameter(
            name="args",
            label="Arguments (JSON)",
            type="json",
            default={},
            description=(
                "Tool arguments. When 'path' is omitted and a current file is "
                "set, path = projectPath/currentFile."
            ),
            group="tool",
        ),
        NodeParameter(
            name="toolCallId",
            label="Tool Call ID",
            type="string",
            description="Optional id attached to the resulting tool message.",
            group="tool",
        ),
    ]

    async def execute(
        self,
        node: WorkflowNode,
        state: AgentState,
        context: ExecutionContext,
    ) -> AgentState:
        config = self.parse_config(node.config)
        if not config.tool_name:
            raise ConfigurationError(
                f"Tool node '{node.display_name}' missing toolName in config"
            )

        registry = context.tool_registry
        if config.tool_name not in registry:
            raise ToolNotFoundError(config.tool_name)

        args = resolve_tool_args(config.args, state)
        result = await registry.execute(config.tool_name, args)

        if not result.ok:
            logger.warning(
                f"[{context.session_id}] tool '{config.tool_name}' reported failure: "
                f"{result.message[:200]}"
            )

        message = Message(
            role="tool",
            content=result.message,
            name=config.tool_name,
            tool_call_id=config.tool_call_id,
        )
        return state.with_message(message).with_context(
            **{LAST_TOOL_RESULT: result.message, LAST_TOOL_OK: result.ok}
        )
