"""
LLM Request and Response Models

Pydantic models for LLM provider interactions.
Provider-agnostic models covering plain chat and function/tool calling
across Google, OpenAI and Anthropic.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class LLMToolCall(BaseModel):
    """A function call requested by the model."""

    id: str = Field(
        ...,
        description="Provider call id (synthesized when the provider has none)"
    )
    name: str = Field(
        ...,
        description="Tool name"
    )
    arguments: Dict[str, Any] = Field(
        default_factory=dict,
        description="Decoded call arguments"
    )


class LLMToolDefinition(BaseModel):
    """A tool advertised to the model."""

    name: str = Field(
        ...,
        description="Tool name"
    )
    description: str = Field(
        ...,
        description="What the tool does, shown to the model"
    )
    parameters: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON schema of the tool arguments"
    )

    @property
    def has_parameters(self) -> bool:
        return bool(self.parameters.get("properties"))


class LLMMessage(BaseModel):
    """Single message in an LLM conversation."""

    role: Literal["system", "user", "assistant", "tool"] = Field(
        ...,
        description="Message role"
    )
    content: str = Field(
        default="",
        description="Message content"
    )
    tool_calls: List[LLMToolCall] = Field(
        default_factory=list,
        description="Tool calls made by the assistant in this message"
    )
    tool_call_id: Optional[str] = Field(
        None,
        description="Id of the call this tool message answers"
    )
    name: Optional[str] = Field(
        None,
        description="Tool name for tool messages"
    )

    @model_validator(mode="after")
    def validate_shape(self) -> "LLMMessage":
        if self.role == "tool" and not (self.tool_call_id and self.name):
            raise ValueError("tool messages require tool_call_id and name")
        if self.role in ("system", "user") and not self.content:
            raise ValueError(f"{self.role} messages require content")
        return self


class LLMRequest(BaseModel):
    """Request to an LLM provider."""

    messages: List[LLMMessage] = Field(
        ...,
        description="Conversation messages",
        min_length=1
    )
    tools: List[LLMToolDefinition] = Field(
        default_factory=list,
        description="Tools the model may call"
    )
    temperature: Optional[float] = Field(
        None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (overrides default)"
    )
    max_tokens: Optional[int] = Field(
        None,
        gt=0,
        description="Maximum tokens to generate (overrides default)"
    )
    model: Optional[str] = Field(
        None,
        description="Specific model to use (overrides default)"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional provider-specific parameters"
    )


class LLMUsage(BaseModel):
    """Token usage information."""

    prompt_tokens: int = Field(
        default=0,
        ge=0,
        description="Number of tokens in the prompt"
    )
    completion_tokens: int = Field(
        default=0,
        ge=0,
        description="Number of tokens in the completion"
    )
    total_tokens: int = Field(
        default=0,
        ge=0,
        description="Total tokens used"
    )


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    content: str = Field(
        default="",
        description="Generated text content (all text parts joined)"
    )
    model: str = Field(
        ...,
        description="Model that generated the response"
    )
    usage: LLMUsage = Field(
        default_factory=LLMUsage,
        description="Token usage information"
    )
    finish_reason: Literal["stop", "length", "content_filter", "tool_calls", "error"] = Field(
        ...,
        description="Reason the generation stopped"
    )
    provider: str = Field(
        ...,
        description="Provider that handled the request (google, openai, anthropic)"
    )
    tool_calls: List[LLMToolCall] = Field(
        default_factory=list,
        description="Tool calls requested by the model"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional provider-specific response data"
    )

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)
