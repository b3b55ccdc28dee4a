"""
Workflow Data Models — definitions, nodes, and edges.

These are the serializable data structures that describe a
workflow graph authored outside the engine. They are consumed
read-only by ``WorkflowEngine``. At the JSON boundary they use
camelCase keys (``entryPoint``), and also accept snake_case.
"""

from __future__ import annotations

import json
import uuid
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases at the serialization boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump with camelCase keys, JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class NodeType(str, Enum):
    """The closed set of node behaviours."""
    LLM = "llm"
    TOOL = "tool"
    CONDITIONAL = "conditional"
    HUMAN = "human"


class WorkflowNode(CamelModel):
    """A single node in the workflow graph.

    ``config`` holds the type-specific parameters exactly as authored;
    each node implementation parses it into its typed config model.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: str = ""
    type: NodeType
    config: Dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or self.id


class WorkflowEdge(CamelModel):
    """A directed edge between two nodes.

    ``condition`` names the conditional outcome that selects this edge.
    Edges without a condition are the default route out of a node.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    source: str  # source node id
    target: str  # target node id, or the terminal marker
    condition: Optional[str] = None


class Workflow(CamelModel):
    """A complete workflow graph definition.

    An empty ``entry_point`` marks a workflow that has nothing to run.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Untitled Workflow"
    description: str = ""
    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    entry_point: str = ""

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Workflow":
        """Load a workflow definition from a JSON file."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.model_validate(data)

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Find a node by ID."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def get_edges_from(self, node_id: str) -> List[WorkflowEdge]:
        """Get all edges originating from a node, in declaration order."""
        return [e for e in self.edges if e.source == node_id]

    def get_edges_to(self, node_id: str) -> List[WorkflowEdge]:
        """Get all edges pointing to a node."""
        return [e for e in self.edges if e.target == node_id]

    def validate_graph(self, terminal_marker: str = "END") -> List[str]:
        """Validate the workflow graph structure.

        This is an authoring aid; the engine does not call it and
        reports structural problems only when traversal hits them.

        Returns a list of error messages (empty = valid).
        """
        errors: List[str] = []
        node_ids = [n.id for n in self.nodes]

        # Duplicate node ids
        seen = set()
        for node_id in node_ids:
            if node_id in seen:
                errors.append(f"Duplicate node id: {node_id}")
            seen.add(node_id)

        # Entry point
        if self.entry_point and self.entry_point not in seen:
            errors.append(f"Entry point references unknown node: {self.entry_point}")
        if not self.entry_point and self.nodes:
            errors.append("Workflow has nodes but no entry point.")

        # Edge references
        for edge in self.edges:
            if edge.source not in seen:
                errors.append(f"Edge references unknown source node: {edge.source}")
            if edge.target != terminal_marker and edge.target not in seen:
                errors.append(f"Edge references unknown target node: {edge.target}")

        # Disconnected nodes (no incoming and no outgoing edges, except entry)
        for node in self.nodes:
            if node.id == self.entry_point:
                continue
            if not self.get_edges_to(node.id) and not self.get_edges_from(node.id):
                errors.append(
                    f"Node '{node.display_name}' ({node.id}) is disconnected (no edges)."
                )

        return errors
