"""Tool system entrypoint."""

from __future__ import annotations

from dbchat.tools.base import ToolCategory, ToolContext, ToolDefinition, tool
from dbchat.tools.executor import ToolExecutionError, ToolExecutor
from dbchat.tools.registry import ToolRegistry


def initialize_tools() -> None:
    # Register built-in tools
    from dbchat.tools.builtin import schema  # noqa: F401


__all__ = [
    "ToolCategory",
    "ToolContext",
    "ToolDefinition",
    "ToolExecutionError",
    "ToolExecutor",
    "ToolRegistry",
    "initialize_tools",
    "tool",
]
