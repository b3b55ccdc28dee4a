"""
Pre-built Workflow Templates.

Factory functions returning ready-made ``Workflow`` definitions for
common coding-assistant tasks. ``get_template`` / ``list_templates``
expose them by id for the CLI and any authoring surface.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from codeflow.workflow.workflow_model import NodeType, Workflow, WorkflowEdge, WorkflowNode

END = "END"


class _Builder:
    """Collects nodes and edges; the first node added is the entry point."""

    def __init__(self) -> None:
        self.nodes: List[WorkflowNode] = []
        self.edges: List[WorkflowEdge] = []

    def add(self, ntype: NodeType, nid: str, name: str, **cfg: Any) -> None:
        self.nodes.append(WorkflowNode(id=nid, name=name, type=ntype, config=cfg))

    def edge(self, src: str, tgt: str, condition: Optional[str] = None) -> None:
        self.edges.append(WorkflowEdge(
            id=f"e{len(self.edges) + 1}", source=src, target=tgt, condition=condition,
        ))

    def build(self, wid: str, name: str, description: str) -> Workflow:
        return Workflow(
            id=wid,
            name=name,
            description=description,
            nodes=self.nodes,
            edges=self.edges,
            entry_point=self.nodes[0].id if self.nodes else "",
        )


# ============================================================================
# Single-model templates
# ============================================================================


def create_simple_code_assistant_workflow() -> Workflow:
    """One LLM call. understand → END"""
    b = _Builder()
    b.add(NodeType.LLM, "understand", "Understand Request",
          systemPrompt="You are a helpful code assistant. Analyze the user request "
                       "and provide helpful guidance.")
    b.edge("understand", END)
    return b.build(
        "simple-code-assistant",
        "Simple Code Assistant",
        "A simple workflow for code assistance without complex graph features",
    )


def create_refactoring_workflow() -> Workflow:
    """understand → suggest → END"""
    b = _Builder()
    b.add(NodeType.LLM, "understand", "Understand Code",
          systemPrompt="Analyze the user's refactoring request and plan the approach.")
    b.add(NodeType.LLM, "suggest", "Suggest Refactoring",
          systemPrompt="Based on the analysis, provide specific refactoring suggestions "
                       "with code examples.")
    b.edge("understand", "suggest")
    b.edge("suggest", END)
    return b.build(
        "refactoring-assistant",
        "Refactoring Assistant",
        "Help refactor code with best practices",
    )


# ============================================================================
# Tool + model templates
# ============================================================================


def create_file_analysis_workflow() -> Workflow:
    """read (current file) → analyze → END"""
    b = _Builder()
    b.add(NodeType.TOOL, "read", "Read File", toolName="read_file")
    b.add(NodeType.LLM, "analyze", "Analyze Content",
          systemPrompt="Analyze the file content and provide insights about code structure, "
                       "potential improvements, and best practices.")
    b.edge("read", "analyze")
    b.edge("analyze", END)
    return b.build(
        "file-analysis",
        "File Analysis",
        "Analyze the current file and provide insights",
    )


def create_documentation_workflow() -> Workflow:
    """analyze_code (current file) → generate_docs → END"""
    b = _Builder()
    b.add(NodeType.TOOL, "analyze_code", "Analyze Code Structure", toolName="analyze_code")
    b.add(NodeType.LLM, "generate_docs", "Generate Documentation",
          systemPrompt="Generate comprehensive documentation for the analyzed code, including "
                       "function descriptions, parameters, return values, and usage examples.")
    b.edge("analyze_code", "generate_docs")
    b.edge("generate_docs", END)
    return b.build(
        "documentation-generator",
        "Documentation Generator",
        "Generate documentation for code",
    )


def create_code_assistant_workflow() -> Workflow:
    """understand → analyze → generate → END"""
    b = _Builder()
    b.add(NodeType.LLM, "understand", "Understand Request",
          systemPrompt="You are a helpful code assistant. Understand what the user wants "
                       "and plan the approach.")
    b.add(NodeType.TOOL, "analyze", "Analyze Code", toolName="analyze_code")
    b.add(NodeType.LLM, "generate", "Generate Response",
          systemPrompt="Based on the analysis, provide a helpful response to the user.")
    b.edge("understand", "analyze")
    b.edge("analyze", "generate")
    b.edge("generate", END)
    return b.build(
        "code-assistant",
        "Code Assistant",
        "A workflow for assisting with code-related tasks",
    )


# ============================================================================
# Branching template
# ============================================================================


def create_guarded_review_workflow() -> Workflow:
    """Review the current file, branching on whether it could be read.

    Topology::
        has_file → [with_file → read | no_file → ask]
        read → read_ok → [success → review → approve → END
                          error → explain → END]
        ask → END
    """
    b = _Builder()
    b.add(NodeType.CONDITIONAL, "has_file", "Has File?", condition="has_file")
    b.add(NodeType.TOOL, "read", "Read File", toolName="read_file")
    b.add(NodeType.CONDITIONAL, "read_ok", "Read OK?", condition="has_error")
    b.add(NodeType.LLM, "review", "Review Code",
          systemPrompt="Review the file in the last tool message. Point out bugs, risky "
                       "constructs and readability problems.")
    b.add(NodeType.HUMAN, "approve", "Approve Review",
          instructions="Check the review before applying any change.")
    b.add(NodeType.LLM, "explain", "Explain Failure",
          systemPrompt="The file could not be read. Explain the error in the last tool "
                       "message and suggest how to fix it.")
    b.add(NodeType.LLM, "ask", "Ask For File",
          systemPrompt="No file is open. Ask the user which file to review.")

    b.edge("has_file", "read", condition="with_file")
    b.edge("has_file", "ask", condition="no_file")
    b.edge("read", "read_ok")
    b.edge("read_ok", "review", condition="success")
    b.edge("read_ok", "explain", condition="error")
    b.edge("review", "approve")
    b.edge("approve", END)
    b.edge("explain", END)
    b.edge("ask", END)
    return b.build(
        "guarded-review",
        "Guarded File Review",
        "Review the current file, routing on whether it exists and could be read",
    )


# ── Lookup ──

_TEMPLATE_FACTORIES: Dict[str, Callable[[], Workflow]] = {
    "simple-code-assistant": create_simple_code_assistant_workflow,
    "file-analysis": create_file_analysis_workflow,
    "refactoring-assistant": create_refactoring_workflow,
    "documentation-generator": create_documentation_workflow,
    "code-assistant": create_code_assistant_workflow,
    "guarded-review": create_guarded_review_workflow,
}


def get_template(template_id: str) -> Optional[Workflow]:
    """Build a fresh copy of a template by id."""
    factory = _TEMPLATE_FACTORIES.get(template_id)
    return factory() if factory else None


def list_templates() -> List[Workflow]:
    return [factory() for factory in _TEMPLATE_FACTORIES.values()]
