"""
Error taxonomy for workflow execution.

Every node-level failure raised inside ``WorkflowEngine.execute_workflow``
is a ``WorkflowError`` subclass. The engine converts them into a failed
``GraphExecutionResult``; callers never see them raised from the engine
itself. Tool failures are *not* exceptions — see ``ToolResult``.
"""

from __future__ import annotations

from typing import Optional


class WorkflowError(Exception):
    """Base class for all workflow execution errors."""


class ConfigurationError(WorkflowError):
    """A node or engine configuration is missing or invalid."""


class NodeNotFoundError(WorkflowError):
    """Traversal reached a node id that the workflow does not declare."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class CycleDetectedError(WorkflowError):
    """Traversal revisited a node it already executed."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Cycle detected: circular reference at node: {node_id}")


class ToolNotFoundError(WorkflowError):
    """A tool node names a tool that is not in the registry."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool not found: {tool_name}")


class ModelInvocationError(WorkflowError):
    """The model provider returned a non-success response.

    ``status_code`` is ``None`` when the request never produced an
    HTTP response (connection failure, timeout).
    """

    def __init__(self, status_code: Optional[int], provider_message: str) -> None:
        self.status_code = status_code
        self.provider_message = provider_message
        status = status_code if status_code is not None else "no response"
        super().__init__(f"Model invocation failed ({status}): {provider_message}")


class UnknownNodeTypeError(WorkflowError):
    """No node implementation is registered for a node type."""

    def __init__(self, node_type: str) -> None:
        self.node_type = node_type
        super().__init__(f"Unknown node type: {node_type}")


__all__ = [
    "WorkflowError",
    "ConfigurationError",
    "NodeNotFoundError",
    "CycleDetectedError",
    "ToolNotFoundError",
    "ModelInvocationError",
    "UnknownNodeTypeError",
]
