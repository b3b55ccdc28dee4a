"""
codeflow — workflow graph engine for coding-assistant tasks.

    config     — env-backed config sections (api, engine)
    llm        — model clients (Anthropic Messages API, mock)
    tools      — capability registry and built-in file/analysis tools
    workflow   — workflow model, nodes, traversal engine, templates
    logging    — per-session graph event logging
"""

from codeflow.errors import (
    ConfigurationError,
    CycleDetectedError,
    ModelInvocationError,
    NodeNotFoundError,
    ToolNotFoundError,
    UnknownNodeTypeError,
    WorkflowError,
)
from codeflow.tools import ToolRegistry, ToolResult
from codeflow.workflow import (
    AgentState,
    GraphExecutionResult,
    Message,
    NodeType,
    Workflow,
    WorkflowEdge,
    WorkflowEngine,
    WorkflowNode,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "CycleDetectedError",
    "ModelInvocationError",
    "NodeNotFoundError",
    "ToolNotFoundError",
    "UnknownNodeTypeError",
    "WorkflowError",
    "ToolRegistry",
    "ToolResult",
    "AgentState",
    "GraphExecutionResult",
    "Message",
    "NodeType",
    "Workflow",
    "WorkflowEdge",
    "WorkflowEngine",
    "WorkflowNode",
]
