"""Tool execution engine."""

from __future__ import annotations

import inspect
import logging
from typing import Any

from dbchat.tools.base import ToolContext
from dbchat.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolExecutionError(Exception):
    pass


class ToolExecutor:
    async def execute(self, name: str, args: dict[str, Any], ctx: ToolContext) -> dict[str, Any]:
        definition = ToolRegistry.get_definition(name)
        handler = ToolRegistry.get_handler(name)
        if not definition or not handler:
            raise ToolExecutionError(f"Unknown tool: {name}")

        ctx.log_action("tool_invoked", {"tool": name, "args": list(args.keys())})

        try:
            if "ctx" in inspect.signature(handler).parameters:
                result = handler(**args, ctx=ctx)
            else:
                result = handler(**args)

            if inspect.isawaitable(result):
                result = await result

            ctx.log_action("tool_completed", {"tool": name})
            return {
                "tool": name,
                "success": True,
                "result": result,
            }
        except Exception as exc:
            logger.error(f"Tool execution failed: {name} - {exc}")
            raise ToolExecutionError(str(exc)) from exc
