"""Agent pool errors."""

from __future__ import annotations


class AgentPoolError(Exception):
    """Base exception for agent pool configuration and construction errors."""

    pass


class UnknownModelError(AgentPoolError):
    """The requested model slug is not in the model registry."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"unknown model: {slug}")


class ProviderNotConfiguredError(AgentPoolError):
    """The model's provider has no API key configured."""

    def __init__(self, provider: str, slug: str):
        self.provider = provider
        self.slug = slug
        super().__init__(f"provider {provider} not configured for model {slug}")


class AgentConstructionError(AgentPoolError):
    """Building the provider handle or agent for a model failed."""

    def __init__(self, slug: str, message: str):
        self.slug = slug
        super().__init__(f"failed to create agent for model {slug}: {message}")
