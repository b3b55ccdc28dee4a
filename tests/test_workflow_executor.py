"""Tests for WorkflowEngine traversal, routing and failure reporting."""

import asyncio
import json
import logging

import pytest

from codeflow.config import EngineConfig
from codeflow.errors import ModelInvocationError
from codeflow.llm import ModelRequest, ModelResponse
from codeflow.logging.session_logger import _active_loggers
from codeflow.tools import ToolRegistry
from codeflow.workflow import (
    AgentState,
    BaseNode,
    Message,
    NodeRegistry,
    NodeType,
    Workflow,
)
from tests.helpers import build_workflow, conditional, edge, human, llm, tool


def run(engine, workflow, initial=None):
    return asyncio.run(engine.execute_workflow(workflow, initial))


class FailingModelClient:
    """Model client whose provider always answers 529."""

    async def create_message(self, request: ModelRequest) -> ModelResponse:
        raise ModelInvocationError(529, "Overloaded")


class TestTraversal:
    """Walk order, terminal markers and the step log."""

    def test_empty_entry_point_is_zero_step_success(self, make_engine):
        """A workflow with nothing to run returns the initial state."""
        result = run(make_engine(), Workflow(), {"messages": [{"role": "user", "content": "hi"}]})

        assert result.success is True
        assert result.steps == ()
        assert [m.content for m in result.output.messages] == ["hi"]

    def test_each_llm_node_appends_one_assistant_message(self, make_engine, mock_client):
        """N llm nodes in a chain append exactly N assistant messages."""
        wf = build_workflow(
            [llm("a"), llm("b"), llm("c")],
            [edge("a", "b"), edge("b", "c"), edge("c", "END")],
        )
        result = run(make_engine(), wf, {"messages": [{"role": "user", "content": "hello"}]})

        assert result.success is True
        roles = [m.role for m in result.output.messages]
        assert roles == ["user", "assistant", "assistant", "assistant"]
        assert result.visited_node_ids == ["a", "b", "c"]
        assert len(mock_client.requests) == 3
        # Later nodes see earlier replies.
        assert [t.role for t in mock_client.requests[2].messages] == [
            "user", "assistant", "assistant",
        ]

    def test_node_without_outgoing_edges_ends_the_walk(self, make_engine):
        wf = build_workflow([llm("only")], [])
        result = run(make_engine(), wf)

        assert result.success is True
        assert result.visited_node_ids == ["only"]

    def test_custom_terminal_marker(self, make_engine):
        engine = make_engine(engine_config=EngineConfig(terminal_marker="__end__"))
        wf = build_workflow([llm("a"), llm("b")], [edge("a", "__end__"), edge("b", "END")])
        result = run(engine, wf)

        assert result.success is True
        assert result.visited_node_ids == ["a"]

    def test_steps_carry_node_metadata(self, make_engine):
        wf = build_workflow([human("review")], [edge("review", "END")])
        result = run(make_engine(), wf)

        step = result.steps[0]
        assert step.node_id == "review"
        assert step.node_name == "review"
        assert step.node_type == NodeType.HUMAN
        assert step.duration_ms >= 0

    def test_sync_wrapper(self, make_engine):
        wf = build_workflow([llm("a")], [edge("a", "END")])
        result = make_engine().run_workflow(wf)

        assert result.success is True
        assert result.session_id


class TestStructuralFailures:
    """Cycles, dangling references and unknown node types."""

    def test_cycle_is_reported_with_completed_steps(self, make_engine):
        """entry → A → B → A fails on the revisit of A after three steps."""
        wf = build_workflow(
            [llm("entry"), llm("A"), llm("B")],
            [edge("entry", "A"), edge("A", "B"), edge("B", "A")],
        )
        result = run(make_engine(), wf)

        assert result.success is False
        assert result.error_type == "CycleDetectedError"
        assert "circular" in result.error.lower()
        assert "A" in result.error
        assert result.visited_node_ids == ["entry", "A", "B"]
        assert result.output is None

    def test_self_loop_is_a_cycle(self, make_engine):
        wf = build_workflow([human("h")], [edge("h", "h")])
        result = run(make_engine(), wf)

        assert result.success is False
        assert result.error_type == "CycleDetectedError"
        assert result.visited_node_ids == ["h"]

    def test_undeclared_entry_point(self, make_engine):
        wf = build_workflow([llm("a")], [], entry_point="ghost")
        result = run(make_engine(), wf)

        assert result.success is False
        assert result.error_type == "NodeNotFoundError"
        assert "ghost" in result.error
        assert result.steps == ()

    def test_edge_to_undeclared_node(self, make_engine):
        wf = build_workflow([human("a")], [edge("a", "missing")])
        result = run(make_engine(), wf)

        assert result.success is False
        assert result.error_type == "NodeNotFoundError"
        assert result.visited_node_ids == ["a"]

    def test_unregistered_node_type(self, make_engine):
        wf = build_workflow([llm("a")], [edge("a", "END")])
        result = run(make_engine(node_registry=NodeRegistry()), wf)

        assert result.success is False
        assert result.error_type == "UnknownNodeTypeError"


class TestNodeFailures:
    """A failing node aborts the call and is left out of the step log."""

    def test_model_failure_excludes_failing_step(self, make_engine):
        wf = build_workflow(
            [human("first"), llm("model")],
            [edge("first", "model"), edge("model", "END")],
        )
        result = run(make_engine(model_client=FailingModelClient()), wf)

        assert result.success is False
        assert result.error_type == "ModelInvocationError"
        assert "529" in result.error
        assert "Overloaded" in result.error
        assert result.visited_node_ids == ["first"]

    def test_unknown_tool_fails_the_workflow(self, make_engine):
        wf = build_workflow([tool("t", "nope")], [edge("t", "END")])
        result = run(make_engine(), wf)

        assert result.success is False
        assert result.error_type == "ToolNotFoundError"
        assert "nope" in result.error
        assert result.steps == ()

    def test_tool_node_without_tool_name(self, make_engine):
        wf = build_workflow([tool("t", None)], [edge("t", "END")])
        result = run(make_engine(), wf)

        assert result.success is False
        assert result.error_type == "ConfigurationError"
        assert "missing toolName" in result.error

    def test_invalid_llm_config(self, make_engine):
        wf = build_workflow([llm("a", temperature=2)], [edge("a", "END")])
        result = run(make_engine(), wf)

        assert result.success is False
        assert result.error_type == "ConfigurationError"

    def test_invalid_initial_state(self, make_engine):
        wf = build_workflow([human("h")], [edge("h", "END")])
        result = run(make_engine(), wf, {"messages": [{"role": "robot", "content": "x"}]})

        assert result.success is False
        assert result.error_type == "ConfigurationError"

    def test_unexpected_node_exception_is_returned(self, make_engine):
        class ExplodingNode(BaseNode):
            node_type = NodeType.HUMAN

            async def execute(self, node, state, context):
                raise RuntimeError("kaboom")

        registry = NodeRegistry()
        registry.register(ExplodingNode)
        wf = build_workflow([human("h")], [edge("h", "END")])
        result = run(make_engine(node_registry=registry), wf)

        assert result.success is False
        assert result.error_type == "RuntimeError"
        assert result.error == "kaboom"


class TestToolNodes:
    """Tool invocation through the engine."""

    def test_read_file_result_becomes_tool_message(self, make_engine, tmp_path):
        (tmp_path / "main.py").write_text("print('hi')\n", encoding="utf-8")
        wf = build_workflow([tool("read", "read_file")], [edge("read", "END")])
        result = run(make_engine(), wf, {
            "projectPath": str(tmp_path),
            "currentFile": "main.py",
        })

        assert result.success is True
        last = result.output.messages[-1]
        assert last.role == "tool"
        assert last.name == "read_file"
        assert last.content == "print('hi')\n"
        assert result.output.context["lastToolResult"] == "print('hi')\n"
        assert result.output.context["lastToolOk"] is True

    def test_read_file_keeps_crlf_through_the_engine(self, make_engine, tmp_path):
        (tmp_path / "dos.txt").write_bytes(b"a\r\nb\r\n")
        wf = build_workflow([tool("read", "read_file")], [edge("read", "END")])
        result = run(make_engine(), wf, {"projectPath": str(tmp_path), "currentFile": "dos.txt"})

        assert result.output.messages[-1].content == "a\r\nb\r\n"
        assert result.output.context["lastToolResult"] == "a\r\nb\r\n"

    def test_tool_failure_does_not_fail_the_workflow(self, make_engine, tmp_path):
        wf = build_workflow(
            [tool("read", "read_file", path=str(tmp_path / "absent.txt"))],
            [edge("read", "END")],
        )
        result = run(make_engine(), wf)

        assert result.success is True
        assert result.output.messages[-1].content.startswith("Error")
        assert result.output.context["lastToolOk"] is False

    def test_list_directory_with_stub_tool(self, make_engine):
        """The engine passes the registry's text through untouched."""
        listing = '[{"name":"a.txt","isDirectory":false}]'
        calls = []

        def list_directory(path: str) -> str:
            """List a directory."""
            calls.append(path)
            return listing

        registry = ToolRegistry()
        registry.register_function(list_directory)
        wf = build_workflow(
            [tool("ls", "list_directory", path="/proj")],
            [edge("ls", "END")],
        )
        result = run(make_engine(tool_registry=registry), wf, {"messages": [], "projectPath": "/proj"})

        assert result.success is True
        assert len(result.steps) == 1
        tool_messages = [m for m in result.output.messages if m.role == "tool"]
        assert len(tool_messages) == 1
        assert tool_messages[0].content == listing
        assert json.loads(tool_messages[0].content)[0]["name"] == "a.txt"
        assert calls == ["/proj"]


class TestRouting:
    """Outcome-keyed edge selection and the legacy first-edge mode."""

    def _branching_workflow(self, missing_path):
        return build_workflow(
            [
                tool("read", "read_file", path=missing_path),
                conditional("check", "has_error"),
                llm("on_success"),
                llm("on_error"),
            ],
            [
                edge("read", "check"),
                edge("check", "on_success", condition="success"),
                edge("check", "on_error", condition="error"),
                edge("on_success", "END"),
                edge("on_error", "END"),
            ],
        )

    def test_conditional_follows_matching_outcome(self, make_engine, tmp_path):
        wf = self._branching_workflow(str(tmp_path / "absent.txt"))
        result = run(make_engine(), wf)

        assert result.success is True
        assert result.visited_node_ids == ["read", "check", "on_error"]
        assert result.steps[1].output.next_action == "error"

    def test_legacy_routing_takes_first_edge(self, make_engine, tmp_path):
        wf = self._branching_workflow(str(tmp_path / "absent.txt"))
        engine = make_engine(legacy_routing=True)
        result = run(engine, wf)

        assert engine.legacy_routing is True
        assert result.visited_node_ids == ["read", "check", "on_success"]

    def test_unmatched_outcome_uses_default_edge(self, make_engine):
        wf = build_workflow(
            [conditional("check", "has_file"), llm("fallback"), llm("with_file")],
            [
                edge("check", "with_file", condition="with_file"),
                edge("check", "fallback"),
                edge("fallback", "END"),
                edge("with_file", "END"),
            ],
        )
        result = run(make_engine(), wf)

        assert result.visited_node_ids == ["check", "fallback"]

    def test_unmatched_outcome_without_default_ends(self, make_engine):
        wf = build_workflow(
            [conditional("check", "has_file"), llm("with_file")],
            [edge("check", "with_file", condition="with_file"), edge("with_file", "END")],
        )
        result = run(make_engine(), wf)

        assert result.success is True
        assert result.visited_node_ids == ["check"]

    @pytest.mark.parametrize("current_file, outcome", [("app.py", "with_file"), (None, "no_file")])
    def test_has_file_only_sets_next_action(self, make_engine, current_file, outcome):
        wf = build_workflow([conditional("check", "has_file")], [edge("check", "END")])
        initial = {"messages": [{"role": "user", "content": "hi"}], "currentFile": current_file}
        result = run(make_engine(), wf, initial)

        assert result.success is True
        assert result.output.next_action == outcome
        assert [m.content for m in result.output.messages] == ["hi"]


class TestStateHandling:
    """Snapshots are immutable and independent of the caller's objects."""

    def test_step_snapshots_are_not_rewritten(self, make_engine):
        wf = build_workflow([llm("a"), llm("b")], [edge("a", "b"), edge("b", "END")])
        initial = AgentState(messages=(Message(role="user", content="hi"),))
        result = run(make_engine(), wf, initial)

        first, second = result.steps
        assert len(first.input.messages) == 1
        assert len(first.output.messages) == 2
        assert second.input == first.output
        assert len(initial.messages) == 1

    def test_caller_context_is_copied(self, make_engine):
        context = {"ticket": "ABC-1"}
        wf = build_workflow([conditional("check", "has_file")], [edge("check", "END")])
        result = run(make_engine(), wf, {"context": context})
        context["ticket"] = "changed"

        assert result.output.context == {"ticket": "ABC-1"}

    def test_concurrent_executions_are_independent(self, make_engine):
        engine = make_engine()
        wf = build_workflow([llm("a")], [edge("a", "END")])

        async def both():
            return await asyncio.gather(
                engine.execute_workflow(wf, {"messages": [{"role": "user", "content": "one"}]}),
                engine.execute_workflow(wf, {"messages": [{"role": "user", "content": "two"}]}),
            )

        first, second = asyncio.run(both())
        assert first.success and second.success
        assert first.session_id != second.session_id
        assert first.output.messages[0].content == "one"
        assert second.output.messages[0].content == "two"


class TestSessionLogging:
    """Graph events reach the stdlib logger."""

    def test_graph_events_are_logged(self, make_engine, caplog):
        caplog.set_level(logging.DEBUG, logger="codeflow.session")
        wf = build_workflow(
            [llm("entry"), llm("A"), llm("B")],
            [edge("entry", "A"), edge("A", "B"), edge("B", "A")],
            name="loop",
        )
        run(make_engine(), wf)

        messages = [r.getMessage() for r in caplog.records if r.name == "codeflow.session"]
        assert any("Workflow 'loop' started" in m for m in messages)
        assert any("Workflow failed after 3 steps" in m for m in messages)

    def test_session_logger_released_after_run(self, make_engine):
        run(make_engine(), build_workflow([llm("ask")], [edge("ask", "END")]))
        assert _active_loggers == {}

    def test_session_logger_released_on_cancellation(self, make_engine):
        class SlowNode(BaseNode):
            node_type = NodeType.HUMAN

            async def execute(self, node, state, context):
                await asyncio.sleep(10)
                return state

        registry = NodeRegistry()
        registry.register(SlowNode)
        engine = make_engine(node_registry=registry)
        wf = build_workflow([human("wait")], [edge("wait", "END")])

        async def cancel_mid_node():
            task = asyncio.create_task(engine.execute_workflow(wf))
            await asyncio.sleep(0.05)
            assert len(_active_loggers) == 1
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(cancel_mid_node())
        assert _active_loggers == {}
