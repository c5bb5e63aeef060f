"""
LLM Provider Module

Multi-provider LLM abstraction layer with tool calling, supporting Google,
OpenAI and Anthropic models.

Usage:
    from dbchat.llm import LLMProviderFactory, LLMRequest, LLMMessage
    from dbchat.models.agent import Provider

    provider = LLMProviderFactory.create_provider(
        Provider.GOOGLE, "gemini-2.5-flash", api_key
    )

    request = LLMRequest(
        messages=[LLMMessage(role="user", content="Hello!")],
    )

    response = await provider.generate(request)
    print(response.content)
"""

from dbchat.llm.anthropic import AnthropicProvider
from dbchat.llm.base import BaseLLMProvider
from dbchat.llm.factory import LLMProviderFactory
from dbchat.llm.google import GoogleProvider
from dbchat.llm.models import (
    LLMMessage,
    LLMRequest,
    LLMResponse,
    LLMToolCall,
    LLMToolDefinition,
    LLMUsage,
)
from dbchat.llm.openai import OpenAIProvider

__all__ = [
    # Base classes
    "BaseLLMProvider",
    # Models
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMToolCall",
    "LLMToolDefinition",
    "LLMUsage",
    # Factory
    "LLMProviderFactory",
    # Providers
    "GoogleProvider",
    "OpenAIProvider",
    "AnthropicProvider",
]
