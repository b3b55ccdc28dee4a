"""
Node Base — the BaseNode ABC, node metadata, execution context and registry.

Every node behaviour (llm, tool, conditional, human) is a ``BaseNode``
subclass registered with ``@register_node``. The engine looks the
implementation up by ``WorkflowNode.type`` and calls::

    new_state = await node_impl.execute(node, state, context)

``execute`` must return a new ``AgentState`` and never mutate the one
it was given. Raw ``WorkflowNode.config`` mappings are parsed into the
node's typed ``config_model`` via ``parse_config``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from logging import getLogger
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Type

from pydantic import ConfigDict, ValidationError

from codeflow.config.sub_config.general.engine_config import EngineConfig
from codeflow.errors import ConfigurationError, UnknownNodeTypeError
from codeflow.llm.base import ModelClient
from codeflow.logging.session_logger import SessionLogger
from codeflow.tools.base import ToolRegistry
from codeflow.workflow.workflow_model import CamelModel, NodeType, WorkflowNode
from codeflow.workflow.workflow_state import AgentState

logger = getLogger(__name__)

RoutingFunction = Callable[[AgentState], Optional[str]]


# ============================================================================
# Metadata
# ============================================================================


@dataclass
class NodeParameter:
    """Describes one config key of a node type for an authoring surface."""
    name: str
    label: str
    type: str  # string | number | boolean | json | select | prompt_template
    default: Any = None
    required: bool = False
    description: str = ""
    options: List[Dict[str, Any]] = field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    group: str = "general"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OutputPort:
    """A named outcome a node can route on."""
    id: str
    label: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class NodeConfig(CamelModel):
    """Base for typed per-node configuration.

    Unknown keys are ignored so definitions written for newer node
    versions still load.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)


# ============================================================================
# Execution context
# ============================================================================


@dataclass
class ExecutionContext:
    """Collaborators shared by every node during one workflow execution."""
    session_id: str
    model_client: ModelClient
    tool_registry: ToolRegistry
    engine_config: EngineConfig
    default_model: str
    session_logger: Optional[SessionLogger] = None


# ============================================================================
# BaseNode
# ============================================================================


class BaseNode(ABC):
    """Abstract node behaviour.

    Subclasses set the class-level metadata and implement ``execute``.
    Nodes that choose between outgoing edges also implement
    ``get_routing_function``.
    """

    node_type: ClassVar[NodeType]
    label: ClassVar[str] = ""
    description: ClassVar[str] = ""
    category: ClassVar[str] = "general"

    parameters: ClassVar[List[NodeParameter]] = []
    output_ports: ClassVar[List[OutputPort]] = [
        OutputPort(id="default", label="Next"),
    ]
    config_model: ClassVar[Type[NodeConfig]] = NodeConfig

    def parse_config(self, raw: Optional[Mapping[str, Any]]) -> NodeConfig:
        """Validate a raw config mapping into ``config_model``."""
        try:
            return self.config_model.model_validate(dict(raw or {}))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(
                f"Invalid config for {self.node_type.value} node: {problems}"
            ) from e

    @abstractmethod
    async def execute(
        self,
        node: WorkflowNode,
        state: AgentState,
        context: ExecutionContext,
    ) -> AgentState:
        """Run the node and return the next state."""

    def get_routing_function(
        self, config: Mapping[str, Any],
    ) -> Optional[RoutingFunction]:
        """Return a function mapping the post-execution state to an outcome.

        ``None`` means the node does not branch.
        """
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize node-type metadata for an authoring surface."""
        return {
            "node_type": self.node_type.value,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "parameters": [p.to_dict() for p in self.parameters],
            "output_ports": [p.to_dict() for p in self.output_ports],
            "config_schema": self.config_model.model_json_schema(by_alias=True),
        }


# ============================================================================
# Registry
# ============================================================================


class NodeRegistry:
    """Maps node types to their (stateless, shared) implementations."""

    def __init__(self) -> None:
        self._nodes: Dict[NodeType, BaseNode] = {}

    def register(self, node_cls: Type[BaseNode]) -> None:
        node_type = NodeType(node_cls.node_type)
        if node_type in self._nodes:
            logger.warning(f"Node type '{node_type.value}' re-registered by {node_cls.__name__}")
        self._nodes[node_type] = node_cls()

    def get(self, node_type: NodeType | str) -> Optional[BaseNode]:
        try:
            return self._nodes.get(NodeType(node_type))
        except ValueError:
            return None

    def require(self, node_type: NodeType | str) -> BaseNode:
        node = self.get(node_type)
        if node is None:
            raise UnknownNodeTypeError(getattr(node_type, "value", str(node_type)))
        return node

    def list_all(self) -> List[BaseNode]:
        return list(self._nodes.values())

    def missing_types(self) -> List[NodeType]:
        """Node types with no registered implementation."""
        return [t for t in NodeType if t not in self._nodes]

    def __contains__(self, node_type: object) -> bool:
        return self.get(node_type) is not None  # type: ignore[arg-type]


_registry = NodeRegistry()


def get_node_registry() -> NodeRegistry:
    """Return the global node registry."""
    return _registry


def register_node(cls: Type[BaseNode]) -> Type[BaseNode]:
    """Class decorator: register a node implementation globally."""
    _registry.register(cls)
    return cls
