"""
Workflow Engine — walk a Workflow from its entry point to a terminal marker.

Traversal is a strict non-repeating walk: each node runs at most once
per call, and revisiting a node is reported as a cycle. After every
node the next edge is chosen from the node's outgoing edges (see
``WorkflowEngine._select_edge``). Any node failure aborts the call and
is returned, never raised, as a failed ``GraphExecutionResult``.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from logging import getLogger
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from codeflow.config import APIConfig, EngineConfig, get_config
from codeflow.errors import (
    ConfigurationError,
    CycleDetectedError,
    NodeNotFoundError,
    WorkflowError,
)
from codeflow.llm import ModelClient, build_model_client
from codeflow.logging.session_logger import (
    SessionLogger,
    get_session_logger,
    release_session_logger,
)
from codeflow.tools import ToolRegistry, get_tool_registry
from codeflow.workflow.execution_record import (
    ExecutionRecord,
    ExecutionStep,
    GraphExecutionResult,
)
from codeflow.workflow.nodes import (
    BaseNode,
    ExecutionContext,
    NodeRegistry,
    get_node_registry,
)
from codeflow.workflow.nodes.logic_nodes import DEFAULT_OUTCOME
from codeflow.workflow.workflow_model import Workflow, WorkflowEdge, WorkflowNode
from codeflow.workflow.workflow_state import AgentState, make_initial_state

logger = getLogger(__name__)

InitialState = Union[AgentState, Mapping[str, Any], None]


class WorkflowEngine:
    """Execute workflow definitions against a model client and tool registry.

    The engine holds only immutable configuration, so one instance can
    serve concurrent ``execute_workflow`` calls.

    Usage::

        engine = WorkflowEngine(api_key="sk-ant-…")
        result = await engine.execute_workflow(workflow, {"messages": [...]})
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model_client: Optional[ModelClient] = None,
        tool_registry: Optional[ToolRegistry] = None,
        node_registry: Optional[NodeRegistry] = None,
        api_config: Optional[APIConfig] = None,
        engine_config: Optional[EngineConfig] = None,
        legacy_routing: Optional[bool] = None,
    ) -> None:
        self._api_config: APIConfig = api_config or get_config("api")  # type: ignore[assignment]
        self._engine_config: EngineConfig = engine_config or get_config("engine")  # type: ignore[assignment]
        self._model_client = model_client or build_model_client(self._api_config, api_key=api_key)
        self._tool_registry = tool_registry if tool_registry is not None else get_tool_registry()
        self._node_registry = node_registry or get_node_registry()
        self._legacy_routing = (
            self._engine_config.legacy_routing if legacy_routing is None else legacy_routing
        )
        self._terminal_markers = {"END", self._engine_config.terminal_marker}

    @property
    def tool_registry(self) -> ToolRegistry:
        return self._tool_registry

    @property
    def legacy_routing(self) -> bool:
        return self._legacy_routing

    # ========================================================================
    # Execution
    # ========================================================================

    async def execute_workflow(
        self,
        workflow: Workflow,
        initial_state: InitialState = None,
    ) -> GraphExecutionResult:
        """Run ``workflow`` from its entry point.

        Returns a ``GraphExecutionResult``; node failures are reported in
        it (``success=False``) rather than raised.
        """
        session_id = uuid.uuid4().hex[:8]
        session_logger = get_session_logger(session_id)
        record = ExecutionRecord(session_id)
        started = time.perf_counter()

        session_logger.log_graph_start(workflow.name, len(workflow.nodes), len(workflow.edges))
        logger.info(f"[{session_id}] Running workflow '{workflow.name}' …")

        try:
            state = await self._execute(workflow, initial_state, session_logger, record)
        except WorkflowError as e:
            return self._finish(record, session_logger, started, error=e)
        except Exception as e:
            # A node bug must not escape as an exception either.
            logger.exception(f"[{session_id}] Unexpected error in workflow '{workflow.name}'")
            return self._finish(record, session_logger, started, error=e)
        finally:
            # Also reached on cancellation, which bypasses _finish.
            release_session_logger(session_id)
        return self._finish(record, session_logger, started, output=state)

    def run_workflow(
        self,
        workflow: Workflow,
        initial_state: InitialState = None,
    ) -> GraphExecutionResult:
        """Synchronous wrapper around ``execute_workflow``."""
        return asyncio.run(self.execute_workflow(workflow, initial_state))

    async def _execute(
        self,
        workflow: Workflow,
        initial_state: InitialState,
        session_logger: SessionLogger,
        record: ExecutionRecord,
    ) -> AgentState:
        try:
            state = make_initial_state(initial_state)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid initial state: {e}") from e
        context = ExecutionContext(
            session_id=record.session_id,
            model_client=self._model_client,
            tool_registry=self._tool_registry,
            engine_config=self._engine_config,
            default_model=self._api_config.anthropic_model,
            session_logger=session_logger,
        )
        return await self._walk(workflow, state, context, record)

    async def _walk(
        self,
        workflow: Workflow,
        state: AgentState,
        context: ExecutionContext,
        record: ExecutionRecord,
    ) -> AgentState:
        node_map: Dict[str, WorkflowNode] = {}
        for n in workflow.nodes:
            node_map.setdefault(n.id, n)

        visited = set()
        current = workflow.entry_point

        while not self._is_terminal(current):
            if current in visited:
                raise CycleDetectedError(current)
            visited.add(current)

            node = node_map.get(current)
            if node is None:
                raise NodeNotFoundError(current)

            base_node = self._node_registry.require(node.type)
            state = await self._run_node(base_node, node, state, context, record)
            current = self._next_node_id(workflow, base_node, node, state, context, len(record))

        return state

    async def _run_node(
        self,
        base_node: BaseNode,
        node: WorkflowNode,
        state: AgentState,
        context: ExecutionContext,
        record: ExecutionRecord,
    ) -> AgentState:
        """Execute one node, log it, and append its step on success."""
        session_logger = context.session_logger
        iteration = len(record) + 1
        node_label = node.display_name

        if session_logger:
            session_logger.log_graph_node_enter(
                node_name=node_label,
                iteration=iteration,
                state_summary=state.summary(),
            )

        start = time.perf_counter()
        try:
            new_state = await base_node.execute(node, state, context)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"[{context.session_id}] Node '{node_label}' ({node.type.value}) "
                f"failed after {duration_ms:.0f}ms: {e}"
            )
            if session_logger:
                session_logger.log_graph_error(
                    error_message=str(e)[:500],
                    node_name=node_label,
                    iteration=iteration,
                    error_type=type(e).__name__,
                )
            raise
        duration_ms = (time.perf_counter() - start) * 1000

        if session_logger:
            session_logger.log_graph_node_exit(
                node_name=node_label,
                iteration=iteration,
                output_preview=self._make_output_preview(state, new_state),
                duration_ms=duration_ms,
                state_changes=self._summarize_changes(state, new_state),
            )

        record.append(ExecutionStep(
            node_id=node.id,
            node_name=node.name,
            node_type=node.type,
            input=state,
            output=new_state,
            duration_ms=duration_ms,
        ))
        return new_state

    def _finish(
        self,
        record: ExecutionRecord,
        session_logger: SessionLogger,
        started: float,
        output: Optional[AgentState] = None,
        error: Optional[BaseException] = None,
    ) -> GraphExecutionResult:
        duration_ms = (time.perf_counter() - started) * 1000
        success = error is None
        session_logger.log_graph_end(success, len(record), duration_ms)
        return record.to_result(success, output=output, error=error, duration_ms=duration_ms)

    # ========================================================================
    # Routing
    # ========================================================================

    def _is_terminal(self, node_id: Optional[str]) -> bool:
        return not node_id or node_id in self._terminal_markers

    def _next_node_id(
        self,
        workflow: Workflow,
        base_node: BaseNode,
        node: WorkflowNode,
        state: AgentState,
        context: ExecutionContext,
        iteration: int,
    ) -> str:
        edges = workflow.get_edges_from(node.id)
        outcome: Optional[str] = None

        if not edges:
            edge = None
        elif self._legacy_routing:
            edge = edges[0]
        else:
            routing_fn = base_node.get_routing_function(node.config)
            outcome = routing_fn(state) if routing_fn else None
            edge = self._select_edge(edges, outcome, branching=routing_fn is not None)

        target = edge.target if edge else self._engine_config.terminal_marker
        if context.session_logger:
            decision = f"{outcome} → {target}" if outcome is not None else f"→ {target}"
            context.session_logger.log_graph_edge_decision(
                from_node=node.display_name,
                decision=decision,
                iteration=iteration,
            )
        return target

    @staticmethod
    def _select_edge(
        edges: List[WorkflowEdge],
        outcome: Optional[str],
        branching: bool,
    ) -> Optional[WorkflowEdge]:
        """Pick the outgoing edge to follow, in declaration order.

        Branching nodes take the first edge labelled with their outcome,
        else the first default edge (no condition or ``"default"``), else
        stop. Other nodes take the first default edge, else the first edge.
        """
        defaults = [e for e in edges if not e.condition or e.condition == DEFAULT_OUTCOME]
        if branching:
            for edge in edges:
                if outcome is not None and edge.condition == outcome:
                    return edge
            return defaults[0] if defaults else None
        return defaults[0] if defaults else edges[0]

    # ========================================================================
    # Logging helpers
    # ========================================================================

    @staticmethod
    def _make_output_preview(before: AgentState, after: AgentState) -> Optional[str]:
        """Extract a short preview string from a node's output."""
        if len(after.messages) > len(before.messages):
            return after.messages[-1].content[:200]
        if after.next_action != before.next_action:
            return f"next_action={after.next_action}"
        return None

    @staticmethod
    def _summarize_changes(before: AgentState, after: AgentState) -> Optional[Dict[str, Any]]:
        """Produce a minimal summary of state changes between two snapshots."""
        if after is before:
            return None
        summary: Dict[str, Any] = {}
        added = len(after.messages) - len(before.messages)
        if added:
            summary["messages"] = f"+{added} ({len(after.messages)} items)"
        changed_keys = [
            k for k in after.context
            if k not in before.context or before.context[k] is not after.context[k]
        ]
        if changed_keys:
            summary["context"] = changed_keys
        for field_name in ("current_file", "project_path", "next_action"):
            value = getattr(after, field_name)
            if value != getattr(before, field_name):
                summary[field_name] = value
        return summary or None
