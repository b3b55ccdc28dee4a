"""
Session Logging Module

Provides per-execution graph event logging for workflow runs.
"""
from codeflow.logging.handlers import configure_logging
from codeflow.logging.session_logger import (
    GraphEvent,
    LogEntry,
    LogLevel,
    SessionLogger,
    get_session_logger,
    release_session_logger,
)

__all__ = [
    'GraphEvent',
    'LogEntry',
    'LogLevel',
    'SessionLogger',
    'configure_logging',
    'get_session_logger',
    'release_session_logger',
]
