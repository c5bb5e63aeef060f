"""Tool registry for the DBChat tool system."""

from __future__ import annotations

import logging
from typing import Any, Callable

from dbchat.llm.models import LLMToolDefinition
from dbchat.tools.base import ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    _definitions: dict[str, ToolDefinition] = {}
    _handlers: dict[str, Callable[..., Any]] = {}

    @classmethod
    def register(cls, definition: ToolDefinition, handler: Callable[..., Any]) -> None:
        if definition.name in cls._definitions:
            logger.warning(f"Replacing registered tool: {definition.name}")
        cls._definitions[definition.name] = definition
        cls._handlers[definition.name] = handler
        logger.debug(f"Registered tool: {definition.name}")

    @classmethod
    def get_definition(cls, name: str) -> ToolDefinition | None:
        return cls._definitions.get(name)

    @classmethod
    def get_handler(cls, name: str) -> Callable[..., Any] | None:
        return cls._handlers.get(name)

    @classmethod
    def list_definitions(cls) -> list[ToolDefinition]:
        return list(cls._definitions.values())

    @classmethod
    def llm_tools(cls, names: list[str] | None = None) -> list[LLMToolDefinition]:
        """Tool definitions in the provider-agnostic shape the LLM layer sends."""
        definitions = cls.list_definitions()
        if names is not None:
            definitions = [d for d in definitions if d.name in names]
        return [
            LLMToolDefinition(
                name=definition.name,
                description=definition.description,
                parameters=definition.parameters_schema,
            )
            for definition in definitions
        ]
