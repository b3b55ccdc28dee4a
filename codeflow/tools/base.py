"""
Tool Registry — name → tool capability mapping.

Tools are LangChain ``BaseTool`` instances (usually ``StructuredTool``),
which carry the name, description and argument schema. The registry
adds one guarantee on top: ``execute`` never raises. Every outcome,
including bad arguments and exceptions inside the tool, comes back as
a ``ToolResult``.
"""

from __future__ import annotations

import inspect
import json
from logging import getLogger
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Type

from langchain_core.tools import BaseTool, StructuredTool
from pydantic import BaseModel, ConfigDict

logger = getLogger(__name__)

ERROR_PREFIX = "Error"


class ToolResult(BaseModel):
    """Explicit success/failure result of a tool call.

    ``message`` is the human-readable text shown in the transcript.
    Failure messages always start with ``"Error"``.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    message: str

    @classmethod
    def success(cls, message: str) -> "ToolResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        if not message.startswith(ERROR_PREFIX):
            message = f"{ERROR_PREFIX}: {message}"
        return cls(ok=False, message=message)

    @classmethod
    def coerce(cls, value: Any) -> "ToolResult":
        """Normalise a raw tool return value.

        Plain strings follow the prose convention: a leading ``"Error"``
        marks a failure.
        """
        if isinstance(value, ToolResult):
            return value
        if isinstance(value, str):
            return cls(ok=not value.startswith(ERROR_PREFIX), message=value)
        if isinstance(value, (dict, list)):
            return cls.success(json.dumps(value, indent=2, default=str))
        return cls.success("" if value is None else str(value))

    def __str__(self) -> str:
        return self.message


class ToolRegistry:
    """Holds the tools available to tool nodes.

    Populate it at process start and hand it to the engine; the engine
    only reads from it.
    """

    def __init__(self, tools: Optional[Iterable[BaseTool]] = None) -> None:
        self._tools: Dict[str, BaseTool] = {}
        for tool in tools or ():
            self.register(tool)

    # ── Registration ──

    def register(self, tool: BaseTool) -> BaseTool:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        logger.debug(f"Tool registered: {tool.name}")
        return tool

    def register_function(
        self,
        func: Callable[..., Any],
        name: Optional[str] = None,
        description: Optional[str] = None,
        args_schema: Optional[Type[BaseModel]] = None,
    ) -> BaseTool:
        """Wrap a plain (sync or async) function as a tool and register it."""
        kwargs: Dict[str, Any] = {
            "name": name or func.__name__,
            "description": description or (inspect.getdoc(func) or func.__name__),
        }
        if args_schema is not None:
            kwargs["args_schema"] = args_schema
        if inspect.iscoroutinefunction(func):
            tool = StructuredTool.from_function(coroutine=func, **kwargs)
        else:
            tool = StructuredTool.from_function(func=func, **kwargs)
        return self.register(tool)

    # ── Lookup ──

    def get(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def get_tools_by_names(self, names: Iterable[str]) -> List[BaseTool]:
        """Return the registered tools among ``names``, in registration order."""
        wanted = set(names)
        return [t for n, t in self._tools.items() if n in wanted]

    def list_names(self) -> List[str]:
        return list(self._tools)

    def describe(self) -> List[Dict[str, Any]]:
        """Name, description and JSON argument schema of every tool."""
        out = []
        for tool in self._tools.values():
            schema = tool.args_schema
            if isinstance(schema, type) and issubclass(schema, BaseModel):
                params = schema.model_json_schema()
            else:
                params = tool.args
            out.append({"name": tool.name, "description": tool.description, "parameters": params})
        return out

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(list(self._tools.values()))

    # ── Execution ──

    async def execute(self, name: str, args: Mapping[str, Any]) -> ToolResult:
        """Run a tool. Never raises; failures come back as ``ToolResult``."""
        tool = self._tools.get(name)
        if tool is None:
            return ToolResult.failure(f"Error: tool not found: {name}")
        try:
            raw = await tool.ainvoke(_normalize_args(tool, args))
        except Exception as e:
            logger.warning(f"Tool '{name}' failed: {type(e).__name__}: {e}")
            return ToolResult.failure(f"Error executing tool {name}: {e}")
        return ToolResult.coerce(raw)


def _normalize_args(tool: BaseTool, args: Mapping[str, Any]) -> Dict[str, Any]:
    """Re-key aliased arguments (``fileExtensions``) by their field names."""
    schema = tool.args_schema
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        validated = schema.model_validate(dict(args))
        return {name: getattr(validated, name) for name in validated.model_fields_set}
    return dict(args)


# ── Singleton ──

_registry_instance: Optional[ToolRegistry] = None


def get_tool_registry() -> ToolRegistry:
    """Return the process-wide registry holding the built-in tools."""
    global _registry_instance
    if _registry_instance is None:
        from codeflow.tools.builtin import create_default_registry

        _registry_instance = create_default_registry()
    return _registry_instance
