"""
Tools — the capability registry and built-in tools.

    base     — ToolResult, ToolRegistry, get_tool_registry
    builtin  — read/write/list/mkdir, analyze_code, search
"""

from codeflow.tools.base import ToolRegistry, ToolResult, get_tool_registry
from codeflow.tools.builtin import create_default_registry, get_builtin_tools

__all__ = [
    "ToolRegistry",
    "ToolResult",
    "get_tool_registry",
    "create_default_registry",
    "get_builtin_tools",
]
