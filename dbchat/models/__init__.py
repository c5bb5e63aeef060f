"""
DBChat Models Module

Pydantic models for type-safe data validation throughout the application.

Available Models:
    Schema Models:
        - DatabaseSchema: Normalized schema snapshot
        - TableSchema, ColumnSchema, ForeignKey, IndexSchema

    Agent Models:
        - Provider, Model: Selectable LLMs
        - ChatRequest, ChatResponse, Query: Chat domain objects
        - AgentConfig: Per-process agent configuration
        - AgentError, LLMError: Agent runtime errors

Usage:
    from dbchat.models.schema import DatabaseSchema
    from dbchat.models.agent import ChatRequest, ChatResponse
    from dbchat.models.api import ChatRequest as APIChatRequest
"""

from dbchat.models.agent import (
    AgentConfig,
    AgentError,
    ChatRequest,
    ChatResponse,
    LLMError,
    Model,
    Provider,
    Query,
)
from dbchat.models.schema import (
    ColumnSchema,
    DatabaseSchema,
    ForeignKey,
    IndexSchema,
    TableSchema,
)

__all__ = [
    # Schema models
    "DatabaseSchema",
    "TableSchema",
    "ColumnSchema",
    "ForeignKey",
    "IndexSchema",
    # Agent models
    "Provider",
    "Model",
    "Query",
    "ChatRequest",
    "ChatResponse",
    "AgentConfig",
    # Error types
    "AgentError",
    "LLMError",
]
