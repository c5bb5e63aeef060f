"""
Agent Manager

Pool of DBAgents, one per model slug, built lazily on first use. All agents
share one session store so a session's schema cache and history survive a
model switch.
"""

from __future__ import annotations

import asyncio
import logging

from dbchat.agent.advisory import AdvisoryResult
from dbchat.agent.errors import (
    AgentConstructionError,
    ProviderNotConfiguredError,
    UnknownModelError,
)
from dbchat.agent.registry import PROVIDER_REGISTRY, get_default_model_slug, get_model_by_slug
from dbchat.agent.runtime import DBAgent, load_instruction
from dbchat.agent.session import InMemorySessionService
from dbchat.llm.factory import LLMProviderFactory
from dbchat.models.agent import AgentConfig, ChatRequest, ChatResponse, Model
from dbchat.tools import initialize_tools

logger = logging.getLogger(__name__)


class AgentManager:
    """
    Lazily constructs and reuses one DBAgent per model slug.

    Lookups of existing agents take no lock; construction is serialized by
    an asyncio.Lock with a re-check so each slug is built at most once.
    """

    def __init__(
        self,
        config: AgentConfig,
        session_service: InMemorySessionService | None = None,
    ) -> None:
        self.config = config
        self.session_service = session_service or InMemorySessionService()
        self._agents: dict[str, DBAgent] = {}
        self._lock = asyncio.Lock()
        self._instruction: str | None = None
        initialize_tools()

    @property
    def default_model(self) -> str:
        return self.config.default_model or get_default_model_slug()

    async def get_agent(self, model_slug: str) -> DBAgent:
        """
        Return the agent for model_slug, constructing it on first use.

        Raises:
            UnknownModelError: If the slug is not in the model registry
            ProviderNotConfiguredError: If the model's provider has no API key
            AgentConstructionError: If building the provider or agent fails
        """
        agent = self._agents.get(model_slug)
        if agent is not None:
            return agent

        async with self._lock:
            agent = self._agents.get(model_slug)
            if agent is not None:
                return agent

            agent = self._create_agent(model_slug)
            self._agents[model_slug] = agent
            logger.info(f"Agent initialized for model {model_slug}", extra={"model": model_slug})
            return agent

    def _create_agent(self, model_slug: str) -> DBAgent:
        model = get_model_by_slug(model_slug)
        if model is None:
            raise UnknownModelError(model_slug)

        api_key = self.config.api_key_for(model.provider)
        if not api_key:
            raise ProviderNotConfiguredError(model.provider.value, model_slug)

        logger.info(
            f"Initializing agent for model {model_slug}",
            extra={"model": model_slug, "provider": model.provider.value},
        )
        try:
            if self._instruction is None:
                self._instruction = load_instruction()
            provider = LLMProviderFactory.create_provider(
                model.provider, model_slug, api_key, self.config
            )
            return DBAgent(
                model_slug=model_slug,
                provider=provider,
                session_service=self.session_service,
                config=self.config,
                instruction=self._instruction,
            )
        except Exception as e:
            logger.error(f"Failed to create agent for model {model_slug}: {e}")
            raise AgentConstructionError(model_slug, str(e)) from e

    def get_available_models(self) -> list[Model]:
        """Models of every configured provider, in registry order."""
        configured = set(self.config.configured_providers())
        models: list[Model] = []
        for provider, provider_config in PROVIDER_REGISTRY.items():
            if provider in configured:
                models.extend(provider_config.models)
        return models

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Route a chat turn to the agent for the requested (or default) model."""
        model_slug = request.model or self.default_model
        agent = await self.get_agent(model_slug)
        return await agent.chat(request)

    @property
    def agent_count(self) -> int:
        return len(self._agents)

    async def close(self) -> list[AdvisoryResult]:
        """
        Close every pooled agent and clear the pool.

        Failures are logged and reported, never raised. Safe to call twice.
        """
        async with self._lock:
            agents = list(self._agents.items())
            self._agents.clear()

        results: list[AdvisoryResult] = []
        for slug, agent in agents:
            try:
                await agent.close()
            except Exception as e:
                results.append(AdvisoryResult.failure(f"close agent {slug}", e))
            else:
                results.append(AdvisoryResult.success(f"close agent {slug}"))

        if agents:
            logger.info(f"Closed {len(agents)} agents")
        return results
