"""
Agent Domain Models

Pydantic models for the chat domain: selectable models and providers,
chat requests/responses, and the per-process agent configuration.
"""

from datetime import timedelta
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SCHEMA_CACHE_TTL = timedelta(hours=1)


class Provider(StrEnum):
    """LLM vendors an agent can be bound to."""

    GOOGLE = "google"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class Model(BaseModel):
    """A selectable LLM, identified by its slug."""

    slug: str = Field(..., description="Unique model identifier sent to the provider")
    name: str = Field(..., description="Display name")
    provider: Provider = Field(..., description="Vendor serving this model")

    model_config = ConfigDict(frozen=True)


class Query(BaseModel):
    """A single proposed SQL query with its metadata."""

    title: str = Field(default="", description="Short title for the query")
    query: str = Field(default="", description="SQL text")
    description: str = Field(default="", description="What the query does")


class ChatRequest(BaseModel):
    """A chat turn routed to the agent pool."""

    session_id: str = Field(default="", description="Conversation id ('' starts a new one)")
    message: str = Field(..., description="User message")
    connection_string: str = Field(default="", description="Target database DSN")
    model: str | None = Field(default=None, description="Model slug (None = default model)")


class ChatResponse(BaseModel):
    """Structured agent reply."""

    session_id: str
    message: str
    queries: list[Query] = Field(default_factory=list)


class AgentConfig(BaseModel):
    """
    Per-process agent configuration.

    Only providers with a non-empty API key count as configured.
    Immutable once loaded.
    """

    providers: dict[Provider, str] = Field(default_factory=dict)
    schema_cache_ttl: timedelta = Field(default=DEFAULT_SCHEMA_CACHE_TTL)
    default_model: str | None = Field(default=None)
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4096, gt=0)
    timeout: int = Field(default=60, gt=0)
    max_tool_iterations: int = Field(default=8, ge=1, le=25)
    connect_timeout: float = Field(default=10.0, gt=0)
    command_timeout: float = Field(default=30.0, gt=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("schema_cache_ttl")
    @classmethod
    def default_non_positive_ttl(cls, v: timedelta) -> timedelta:
        """Non-positive TTLs fall back to the default."""
        if v <= timedelta(0):
            return DEFAULT_SCHEMA_CACHE_TTL
        return v

    def configured_providers(self) -> list[Provider]:
        return [provider for provider, key in self.providers.items() if key]

    def api_key_for(self, provider: Provider) -> str | None:
        return self.providers.get(provider) or None


class AgentError(Exception):
    """
    Error raised while an agent is processing a chat turn.

    Attributes:
        agent: Name (model slug) of the agent that raised the error
        message: Error description
        recoverable: Whether a later turn may succeed
        context: Additional context for debugging
    """

    def __init__(
        self,
        agent: str,
        message: str,
        recoverable: bool = True,
        context: dict[str, Any] | None = None,
    ):
        self.agent = agent
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}
        super().__init__(f"[{agent}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/API responses."""
        return {
            "agent": self.agent,
            "message": self.message,
            "recoverable": self.recoverable,
            "context": self.context,
            "type": self.__class__.__name__,
        }


class LLMError(AgentError):
    """Error during an LLM API call (usually recoverable on the next turn)."""

    def __init__(self, agent: str, message: str, context: dict[str, Any] | None = None):
        super().__init__(agent, message, recoverable=True, context=context)
