"""
Workflow Engine — execute node/edge workflow graphs for coding tasks.

Architecture:
    nodes/              — BaseNode ABC + llm / tool / conditional / human nodes
    workflow_model      — Workflow, WorkflowNode, WorkflowEdge definitions
    workflow_state      — immutable AgentState threaded through the nodes
    execution_record    — ExecutionStep log and GraphExecutionResult
    workflow_executor   — WorkflowEngine: the traversal controller
    templates           — pre-built workflows
"""

from codeflow.workflow.nodes import (
    BaseNode,
    ExecutionContext,
    NodeParameter,
    NodeRegistry,
    OutputPort,
    get_node_registry,
    register_all_nodes,
)
from codeflow.workflow.workflow_model import (
    NodeType,
    Workflow,
    WorkflowEdge,
    WorkflowNode,
)
from codeflow.workflow.workflow_state import (
    AgentState,
    Message,
    ToolCall,
    make_initial_state,
)
from codeflow.workflow.execution_record import (
    ExecutionRecord,
    ExecutionStep,
    GraphExecutionResult,
)
from codeflow.workflow.workflow_executor import WorkflowEngine
from codeflow.workflow.templates import get_template, list_templates

__all__ = [
    "BaseNode",
    "ExecutionContext",
    "NodeParameter",
    "NodeRegistry",
    "OutputPort",
    "get_node_registry",
    "register_all_nodes",
    "NodeType",
    "Workflow",
    "WorkflowEdge",
    "WorkflowNode",
    "AgentState",
    "Message",
    "ToolCall",
    "make_initial_state",
    "ExecutionRecord",
    "ExecutionStep",
    "GraphExecutionResult",
    "WorkflowEngine",
    "get_template",
    "list_templates",
]
