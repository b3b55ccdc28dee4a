"""
Workflow Nodes Package.

Auto-registers all concrete node implementations into the global NodeRegistry.
Import this package to ensure all nodes are available.
"""

from logging import getLogger

from codeflow.workflow.nodes.base import (
    BaseNode,
    ExecutionContext,
    NodeConfig,
    NodeParameter,
    NodeRegistry,
    OutputPort,
    get_node_registry,
    register_node,
)

# Import all node modules to trigger registration
from codeflow.workflow.nodes import model_nodes    # noqa: F401
from codeflow.workflow.nodes import task_nodes     # noqa: F401
from codeflow.workflow.nodes import logic_nodes    # noqa: F401

from codeflow.workflow.nodes.logic_nodes import ConditionalNode, HumanNode, evaluate_condition
from codeflow.workflow.nodes.model_nodes import LLMNode
from codeflow.workflow.nodes.task_nodes import ToolNode

logger = getLogger(__name__)


def register_all_nodes() -> None:
    """Ensure all node types are registered.

    The module-level imports above trigger ``@register_node``
    decorators; this function verifies every ``NodeType`` has an
    implementation and logs the count.
    """
    registry = get_node_registry()
    missing = registry.missing_types()
    if missing:
        logger.warning(f"No implementation for node types: {[t.value for t in missing]}")
    logger.info(f"✅ Workflow nodes registered: {len(registry.list_all())} node types")


__all__ = [
    "BaseNode",
    "ExecutionContext",
    "NodeConfig",
    "NodeParameter",
    "NodeRegistry",
    "OutputPort",
    "get_node_registry",
    "register_node",
    "register_all_nodes",
    "LLMNode",
    "ToolNode",
    "ConditionalNode",
    "HumanNode",
    "evaluate_condition",
]
