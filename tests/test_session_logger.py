"""Tests for per-session graph event logging."""

import logging

from codeflow.logging import (
    GraphEvent,
    LogLevel,
    SessionLogger,
    get_session_logger,
    release_session_logger,
)


class TestSessionLogger:
    """Structured entries and their stdlib forwarding."""

    def test_records_events_in_order(self):
        session_logger = SessionLogger("s1")
        session_logger.log_graph_start("wf", node_count=2, edge_count=1)
        session_logger.log_graph_node_enter("read", iteration=1, state_summary={"messages_count": 0})
        session_logger.log_graph_node_exit("read", iteration=1, output_preview="text", duration_ms=3.2)
        session_logger.log_graph_edge_decision("read", "→ END", iteration=1)
        session_logger.log_graph_end(True, step_count=1, duration_ms=4.0)

        assert [e.event for e in session_logger.entries] == [
            GraphEvent.GRAPH_START,
            GraphEvent.NODE_ENTER,
            GraphEvent.NODE_EXIT,
            GraphEvent.EDGE_DECISION,
            GraphEvent.GRAPH_END,
        ]
        exit_entry = session_logger.events(GraphEvent.NODE_EXIT)[0]
        assert exit_entry.metadata["duration_ms"] == 3.2
        assert exit_entry.to_dict()["event"] == "node_exit"

    def test_error_entry(self):
        session_logger = SessionLogger("s2")
        session_logger.log_graph_error("boom", node_name="llm", iteration=2, error_type="ModelInvocationError")

        entry = session_logger.events(GraphEvent.GRAPH_ERROR)[0]
        assert entry.level == LogLevel.ERROR
        assert entry.message == "ModelInvocationError in llm: boom"

    def test_forwards_to_stdlib_logger(self, caplog):
        caplog.set_level(logging.INFO, logger="codeflow.session")
        SessionLogger("s3").log_graph_end(False, step_count=2, duration_ms=1.0)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.getMessage().startswith("[s3] Workflow failed after 2 steps")


class TestSessionLookup:
    def test_get_and_release(self):
        created = get_session_logger("live")
        assert get_session_logger("live") is created

        release_session_logger("live")
        assert get_session_logger("live", create=False) is None
