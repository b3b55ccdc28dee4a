"""
Built-in Tools — file system access and code analysis.

Each tool takes conventional path-string arguments and returns a
``ToolResult``; I/O problems become failure results with an
``"Error …"`` message rather than exceptions.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

from langchain_core.tools import BaseTool, StructuredTool
from pydantic import BaseModel, ConfigDict, Field

from codeflow.tools.base import ToolRegistry, ToolResult


# ============================================================================
# Argument schemas
# ============================================================================


class PathArgs(BaseModel):
    path: str = Field(description="The path to the file or directory")


class WriteFileArgs(BaseModel):
    path: str = Field(description="The path to the file to write")
    content: str = Field(description="The content to write to the file")


class CreateDirectoryArgs(BaseModel):
    path: str = Field(description="The path of the directory to create")
    recursive: bool = Field(
        default=False,
        description="Create parent directories if they don't exist",
    )


class AnalyzeCodeArgs(BaseModel):
    code: Optional[str] = Field(default=None, description="The code to analyze")
    language: Optional[str] = Field(default=None, description="Programming language of the code")
    path: Optional[str] = Field(
        default=None,
        description="File to analyze when no code is given; also used to detect the language",
    )


class SearchArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pattern: str = Field(description="The pattern to search for")
    directory: str = Field(description="The directory to search in")
    file_extensions: Optional[List[str]] = Field(
        default=None,
        alias="fileExtensions",
        description="File extensions to include",
    )


# ============================================================================
# File system
# ============================================================================


def read_file(path: str) -> ToolResult:
    try:
        # newline="" keeps \r\n line endings intact.
        with open(path, encoding="utf-8", newline="") as f:
            return ToolResult.success(f.read())
    except (OSError, UnicodeDecodeError) as e:
        return ToolResult.failure(f"Error reading file: {e}")


def write_file(path: str, content: str) -> ToolResult:
    try:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8", newline="")
    except OSError as e:
        return ToolResult.failure(f"Error writing file: {e}")
    return ToolResult.success(f"Successfully wrote to file: {path}")


def list_directory(path: str) -> ToolResult:
    try:
        entries = sorted(Path(path).iterdir(), key=lambda p: p.name)
        listing = [{"name": p.name, "isDirectory": p.is_dir()} for p in entries]
    except OSError as e:
        return ToolResult.failure(f"Error listing directory: {e}")
    return ToolResult.success(json.dumps(listing, indent=2))


def create_directory(path: str, recursive: bool = False) -> ToolResult:
    try:
        Path(path).mkdir(parents=recursive, exist_ok=recursive)
    except OSError as e:
        return ToolResult.failure(f"Error creating directory: {e}")
    return ToolResult.success(f"Successfully created directory: {path}")


# ============================================================================
# Code analysis
# ============================================================================

_EXTENSION_LANGUAGES = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".rs": "rust",
    ".go": "go",
    ".java": "java",
    ".kt": "kotlin",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".sh": "shell",
    ".css": "css",
    ".html": "html",
}

_HASH_COMMENT_LANGUAGES = {"python", "ruby", "shell"}

# Naive: counts lines that look like they declare a function.
_FUNCTION_MARKERS = ("function", "=>", "def ", "fn ", "func ")


def detect_language(path: Optional[str]) -> str:
    if not path:
        return "unknown"
    return _EXTENSION_LANGUAGES.get(Path(path).suffix.lower(), "unknown")


def analyze_code(
    code: Optional[str] = None,
    language: Optional[str] = None,
    path: Optional[str] = None,
) -> ToolResult:
    if code is None:
        if not path:
            return ToolResult.failure("Error analyzing code: provide 'code' or 'path'")
        loaded = read_file(path)
        if not loaded.ok:
            return loaded
        code = loaded.message

    language = language or detect_language(path)
    markers = ["//", "/*"]
    if language in _HASH_COMMENT_LANGUAGES:
        markers.append("#")

    lines = code.split("\n")
    analysis = {
        "lines": len(lines),
        "language": language,
        "hasComments": any(m in line for line in lines for m in markers),
        "functions": sum(1 for line in lines if any(m in line for m in _FUNCTION_MARKERS)),
    }
    return ToolResult.success(json.dumps(analysis, indent=2))


def search(
    pattern: str,
    directory: str,
    file_extensions: Optional[List[str]] = None,
) -> ToolResult:
    # TODO: walk `directory` honouring `file_extensions` and report matching lines.
    return ToolResult.failure(
        f"Error: search is not implemented (pattern {pattern!r} in {directory})"
    )


# ============================================================================
# Registry
# ============================================================================


def get_builtin_tools() -> List[BaseTool]:
    """Fresh instances of every built-in tool."""
    return [
        StructuredTool.from_function(
            func=read_file,
            name="read_file",
            description="Read the contents of a file",
            args_schema=PathArgs,
        ),
        StructuredTool.from_function(
            func=write_file,
            name="write_file",
            description="Write content to a file, creating parent directories as needed",
            args_schema=WriteFileArgs,
        ),
        StructuredTool.from_function(
            func=list_directory,
            name="list_directory",
            description="List the contents of a directory",
            args_schema=PathArgs,
        ),
        StructuredTool.from_function(
            func=create_directory,
            name="create_directory",
            description="Create a new directory",
            args_schema=CreateDirectoryArgs,
        ),
        StructuredTool.from_function(
            func=analyze_code,
            name="analyze_code",
            description="Analyze code structure and provide insights",
            args_schema=AnalyzeCodeArgs,
        ),
        StructuredTool.from_function(
            func=search,
            name="search",
            description="Search for text patterns in files (not implemented)",
            args_schema=SearchArgs,
        ),
    ]


def create_default_registry() -> ToolRegistry:
    """A new registry holding the built-in tools."""
    return ToolRegistry(get_builtin_tools())
