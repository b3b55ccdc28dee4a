from typing import Any, Dict, List, Optional

from codeflow.workflow import Workflow


def build_workflow(
    nodes: List[Dict[str, Any]],
    edges: List[Dict[str, Any]],
    entry_point: Optional[str] = None,
    name: str = "test",
) -> Workflow:
    """Workflow from compact node/edge dicts; entry defaults to the first node."""
    if entry_point is None:
        entry_point = nodes[0]["id"] if nodes else ""
    return Workflow.model_validate({
        "id": name,
        "name": name,
        "nodes": nodes,
        "edges": [
            {"id": f"e{i}", **edge} for i, edge in enumerate(edges, start=1)
        ],
        "entryPoint": entry_point,
    })


def llm(node_id: str, **config: Any) -> Dict[str, Any]:
    return {"id": node_id, "name": node_id, "type": "llm", "config": config}


def tool(node_id: str, tool_name: Optional[str], **args: Any) -> Dict[str, Any]:
    config: Dict[str, Any] = {"args": args} if args else {}
    if tool_name is not None:
        config["toolName"] = tool_name
    return {"id": node_id, "name": node_id, "type": "tool", "config": config}


def conditional(node_id: str, condition: Optional[str]) -> Dict[str, Any]:
    config = {"condition": condition} if condition is not None else {}
    return {"id": node_id, "name": node_id, "type": "conditional", "config": config}


def human(node_id: str) -> Dict[str, Any]:
    return {"id": node_id, "name": node_id, "type": "human", "config": {}}


def edge(source: str, target: str, condition: Optional[str] = None) -> Dict[str, Any]:
    data = {"source": source, "target": target}
    if condition is not None:
        data["condition"] = condition
    return data
