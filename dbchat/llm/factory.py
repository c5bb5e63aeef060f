"""
LLM Provider Factory

Factory and registry for creating LLM provider instances bound to one model.
Dispatch is a table from the Provider enum to the provider class.
"""

import logging

from dbchat.llm.anthropic import AnthropicProvider
from dbchat.llm.base import BaseLLMProvider
from dbchat.llm.google import GoogleProvider
from dbchat.llm.openai import OpenAIProvider
from dbchat.models.agent import AgentConfig, Provider

logger = logging.getLogger(__name__)


class LLMProviderFactory:
    """
    Factory for creating LLM provider instances.

    Each supported Provider maps to exactly one provider class.
    """

    # Registry of available providers
    PROVIDERS: dict[Provider, type[BaseLLMProvider]] = {
        Provider.GOOGLE: GoogleProvider,
        Provider.OPENAI: OpenAIProvider,
        Provider.ANTHROPIC: AnthropicProvider,
    }

    @staticmethod
    def create_provider(
        provider: Provider | str,
        model: str,
        api_key: str | None,
        config: AgentConfig | None = None,
    ) -> BaseLLMProvider:
        """
        Create an LLM provider instance.

        Args:
            provider: Provider to create
            model: Model slug the provider is bound to
            api_key: API key for the provider
            config: Agent configuration supplying temperature/max_tokens/timeout

        Returns:
            Configured provider instance

        Raises:
            ValueError: If provider type is unknown or the API key is missing
        """
        try:
            provider = Provider(provider)
        except ValueError:
            raise ValueError(
                f"Unknown provider type: {provider}. "
                f"Available providers: {[p.value for p in LLMProviderFactory.PROVIDERS]}"
            ) from None

        if not api_key:
            raise ValueError(f"{provider.value} API key is required but not configured")

        config = config or AgentConfig()

        logger.info(
            f"Creating {provider.value} provider for model {model}",
            extra={"provider": provider.value, "model": model},
        )

        provider_class = LLMProviderFactory.PROVIDERS[provider]

        return provider_class(
            api_key=api_key,
            model=model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )
