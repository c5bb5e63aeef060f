"""Tool system base types and decorator."""

from __future__ import annotations

import inspect
import logging
import types
from collections.abc import Callable
from datetime import timedelta
from enum import StrEnum
from typing import Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ConfigDict, Field

from dbchat.agent.session import SessionState
from dbchat.models.agent import DEFAULT_SCHEMA_CACHE_TTL

logger = logging.getLogger(__name__)
NONE_TYPE = type(None)

_JSON_TYPES = {bool: "boolean", int: "integer", float: "number", str: "string"}


class ToolCategory(StrEnum):
    DATABASE = "database"
    SYSTEM = "system"


class ToolDefinition(BaseModel):
    name: str
    description: str
    category: ToolCategory
    parameters_schema: dict[str, Any]
    return_schema: dict[str, Any]


class ToolContext(BaseModel):
    """Per-turn values a tool may read: the session and its database target."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_id: str
    connection_string: str = ""
    schema_cache_ttl: timedelta = DEFAULT_SCHEMA_CACHE_TTL
    connect_timeout: float = Field(default=10.0, gt=0)
    command_timeout: float = Field(default=30.0, gt=0)
    state: SessionState | None = None

    def log_action(self, action: str, metadata: dict[str, Any]) -> None:
        logger.info(
            "tool_action",
            extra={
                "session_id": self.session_id,
                "action": action,
                "metadata": metadata,
            },
        )


def _extract_parameters_schema(func: Callable[..., Any]) -> dict[str, Any]:
    signature = inspect.signature(func)
    type_hints = get_type_hints(func, include_extras=True)
    properties: dict[str, Any] = {}
    required: list[str] = []

    for name, param in signature.parameters.items():
        if name in ("ctx", "context"):
            continue
        resolved_annotation = type_hints.get(name, param.annotation)
        param_schema = _annotation_to_json_schema(resolved_annotation)
        if param.default is inspect.Parameter.empty:
            required.append(name)
        else:
            if param.default is None:
                param_schema = _ensure_nullable(param_schema)
            else:
                param_schema["default"] = param.default
        properties[name] = param_schema

    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }


def _annotation_to_json_schema(annotation: Any) -> dict[str, Any]:
    """Map scalar, list and optional annotations; anything else is a string."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return {}

    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin in (Union, types.UnionType):
        non_none = [arg for arg in args if arg is not NONE_TYPE]
        base_schema = _annotation_to_json_schema(non_none[0]) if len(non_none) == 1 else {}
        return _ensure_nullable(base_schema) if len(non_none) != len(args) else base_schema

    if origin is list or annotation is list:
        return {"type": "array", "items": _annotation_to_json_schema(args[0]) if args else {}}

    return {"type": _JSON_TYPES.get(annotation, "string")}


def _ensure_nullable(schema: dict[str, Any]) -> dict[str, Any]:
    if not schema:
        return {"anyOf": [{}, {"type": "null"}]}
    if schema.get("type") == "null":
        return schema
    if "anyOf" in schema:
        variants = schema["anyOf"]
        if not any(variant.get("type") == "null" for variant in variants if isinstance(variant, dict)):
            return {**schema, "anyOf": [*variants, {"type": "null"}]}
        return schema
    return {"anyOf": [schema, {"type": "null"}]}


def tool(
    name: str,
    description: str,
    category: ToolCategory = ToolCategory.DATABASE,
):
    def decorator(func: Callable[..., Any]):
        from dbchat.tools.registry import ToolRegistry

        tool_def = ToolDefinition(
            name=name,
            description=description,
            category=category,
            parameters_schema=_extract_parameters_schema(func),
            return_schema={"type": "object", "additionalProperties": True},
        )
        ToolRegistry.register(tool_def, func)
        return func

    return decorator
