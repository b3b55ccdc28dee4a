"""
Session Logger — per-execution graph event log.

One ``SessionLogger`` is created for every ``execute_workflow`` call.
It keeps the structured entries in memory for the duration of the call
and forwards each one to the stdlib logger ``codeflow.session``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from logging import getLogger
from typing import Any, Dict, List, Optional, Tuple

_base_logger = getLogger("codeflow.session")


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class GraphEvent(str, Enum):
    """Graph lifecycle events recorded by the session logger."""
    GRAPH_START = "graph_start"
    NODE_ENTER = "node_enter"
    NODE_EXIT = "node_exit"
    EDGE_DECISION = "edge_decision"
    GRAPH_ERROR = "graph_error"
    GRAPH_END = "graph_end"


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: LogLevel
    event: GraphEvent
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "event": self.event.value,
            "message": self.message,
            "metadata": dict(self.metadata),
        }


class SessionLogger:
    """Structured graph-event logger bound to one execution session."""

    def __init__(self, session_id: str, logger: Optional[logging.Logger] = None) -> None:
        self.session_id = session_id
        self._logger = logger or _base_logger
        self._entries: List[LogEntry] = []

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def events(self, event: GraphEvent) -> List[LogEntry]:
        """Return the entries of one event type, in order."""
        return [e for e in self._entries if e.event == event]

    def _log(
        self,
        level: LogLevel,
        event: GraphEvent,
        message: str,
        **metadata: Any,
    ) -> LogEntry:
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            event=event,
            message=message,
            metadata=metadata,
        )
        self._entries.append(entry)
        self._logger.log(
            getattr(logging, level.value),
            f"[{self.session_id}] {message}",
        )
        return entry

    # ── Graph events ──

    def log_graph_start(self, workflow_name: str, node_count: int, edge_count: int) -> None:
        self._log(
            LogLevel.INFO,
            GraphEvent.GRAPH_START,
            f"Workflow '{workflow_name}' started ({node_count} nodes, {edge_count} edges)",
            workflow_name=workflow_name,
            node_count=node_count,
            edge_count=edge_count,
        )

    def log_graph_node_enter(
        self,
        node_name: str,
        iteration: int,
        state_summary: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._log(
            LogLevel.DEBUG,
            GraphEvent.NODE_ENTER,
            f"→ {node_name} (step {iteration})",
            node_name=node_name,
            iteration=iteration,
            state_summary=state_summary or {},
        )

    def log_graph_node_exit(
        self,
        node_name: str,
        iteration: int,
        output_preview: Optional[str] = None,
        duration_ms: float = 0.0,
        state_changes: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._log(
            LogLevel.INFO,
            GraphEvent.NODE_EXIT,
            f"← {node_name} (step {iteration}) in {duration_ms:.1f}ms",
            node_name=node_name,
            iteration=iteration,
            output_preview=output_preview,
            duration_ms=duration_ms,
            state_changes=state_changes or {},
        )

    def log_graph_edge_decision(self, from_node: str, decision: str, iteration: int) -> None:
        self._log(
            LogLevel.DEBUG,
            GraphEvent.EDGE_DECISION,
            f"{from_node}: {decision}",
            from_node=from_node,
            decision=decision,
            iteration=iteration,
        )

    def log_graph_error(
        self,
        error_message: str,
        node_name: Optional[str] = None,
        iteration: int = 0,
        error_type: Optional[str] = None,
    ) -> None:
        where = f" in {node_name}" if node_name else ""
        self._log(
            LogLevel.ERROR,
            GraphEvent.GRAPH_ERROR,
            f"{error_type or 'Error'}{where}: {error_message}",
            node_name=node_name,
            iteration=iteration,
            error_type=error_type,
            error_message=error_message,
        )

    def log_graph_end(self, success: bool, step_count: int, duration_ms: float) -> None:
        status = "succeeded" if success else "failed"
        self._log(
            LogLevel.INFO if success else LogLevel.WARNING,
            GraphEvent.GRAPH_END,
            f"Workflow {status} after {step_count} steps ({duration_ms:.1f}ms)",
            success=success,
            step_count=step_count,
            duration_ms=duration_ms,
        )


# ── Live session lookup ──

_active_loggers: Dict[str, SessionLogger] = {}


def get_session_logger(session_id: str, create: bool = True) -> Optional[SessionLogger]:
    """Return the logger of a running session, creating it if asked."""
    session_logger = _active_loggers.get(session_id)
    if session_logger is None and create:
        session_logger = SessionLogger(session_id)
        _active_loggers[session_id] = session_logger
    return session_logger


def release_session_logger(session_id: str) -> None:
    """Forget a finished session's logger."""
    _active_loggers.pop(session_id, None)
