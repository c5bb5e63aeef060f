"""
Agent Runtime

DBAgent runs one chat turn against one model: it replays the session
history, lets the model call tools (read_schema) until it produces a final
answer, and parses that answer into a ChatResponse.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from dbchat.agent.response import ResponseParser
from dbchat.agent.session import HistoryEntry, InMemorySessionService
from dbchat.llm.base import BaseLLMProvider
from dbchat.llm.models import LLMMessage, LLMRequest, LLMResponse, LLMToolCall
from dbchat.models.agent import AgentConfig, AgentError, ChatRequest, ChatResponse, LLMError
from dbchat.prompts.loader import PromptLoader
from dbchat.tools.base import ToolContext
from dbchat.tools.executor import ToolExecutionError, ToolExecutor
from dbchat.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

AGENT_NAME = "dbchat_agent"
AGENT_DESCRIPTION = (
    "A database assistant that helps users understand their database schema "
    "and generate SQL queries."
)
INSTRUCTION_PROMPT = "agent_instruction.md"
AGENT_TOOLS = ("read_schema",)


def load_instruction(loader: PromptLoader | None = None) -> str:
    loader = loader or PromptLoader()
    return loader.render(INSTRUCTION_PROMPT, agent_name=AGENT_NAME)


class DBAgent:
    """
    Database assistant bound to a single model.

    Usage:
        agent = DBAgent(
            model_slug="gemini-2.5-flash",
            provider=provider,
            session_service=sessions,
            config=config,
        )
        response = await agent.chat(ChatRequest(message="...", connection_string=dsn))
    """

    def __init__(
        self,
        model_slug: str,
        provider: BaseLLMProvider,
        session_service: InMemorySessionService,
        config: AgentConfig,
        instruction: str | None = None,
        executor: ToolExecutor | None = None,
        parser: ResponseParser | None = None,
    ) -> None:
        self.model_slug = model_slug
        self.provider = provider
        self.session_service = session_service
        self.config = config
        self.schema_cache_ttl = config.schema_cache_ttl
        self.max_tool_iterations = config.max_tool_iterations
        self.instruction = instruction if instruction is not None else load_instruction()
        self.executor = executor or ToolExecutor()
        self.parser = parser or ResponseParser()
        self.tools = ToolRegistry.llm_tools(list(AGENT_TOOLS))

        logger.info(
            f"Agent created for model {model_slug}",
            extra={
                "model": model_slug,
                "provider": provider.provider_name,
                "schema_cache_ttl": str(self.schema_cache_ttl),
                "tools": [t.name for t in self.tools],
            },
        )

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """
        Process one chat turn.

        Raises:
            AgentError: If the model call fails or no final answer is produced
        """
        session = self.session_service.get_or_create(request.session_id)
        ctx = ToolContext(
            session_id=session.id,
            connection_string=request.connection_string,
            schema_cache_ttl=self.schema_cache_ttl,
            connect_timeout=self.config.connect_timeout,
            command_timeout=self.config.command_timeout,
            state=session.state,
        )

        messages = [LLMMessage(role="system", content=self.instruction)]
        messages.extend(
            LLMMessage(role=entry.role, content=entry.content)
            for entry in self.session_service.history(session.id)
            if entry.content
        )
        messages.append(LLMMessage(role="user", content=request.message))

        logger.debug(
            f"Processing chat turn for session {session.id}",
            extra={"session_id": session.id, "model": self.model_slug},
        )
        raw = await self._run_tool_loop(messages, ctx)

        self.session_service.append_history(
            session.id,
            [
                HistoryEntry(role="user", content=request.message),
                HistoryEntry(role="assistant", content=raw),
            ],
        )
        return self.parser.parse(session.id, raw)

    async def _run_tool_loop(self, messages: list[LLMMessage], ctx: ToolContext) -> str:
        last_content = ""
        for iteration in range(self.max_tool_iterations):
            response = await self._generate(messages)
            last_content = response.content

            # No tool calls - done
            if not response.has_tool_calls:
                return response.content

            messages.append(
                LLMMessage(
                    role="assistant",
                    content=response.content,
                    tool_calls=response.tool_calls,
                )
            )
            for call in response.tool_calls:
                result = await self._execute_tool(call, ctx)
                messages.append(
                    LLMMessage(
                        role="tool",
                        content=json.dumps(result, default=str),
                        tool_call_id=call.id,
                        name=call.name,
                    )
                )
            logger.debug(
                f"Tool iteration {iteration + 1} complete",
                extra={"session_id": ctx.session_id, "tools": [c.name for c in response.tool_calls]},
            )

        if last_content:
            logger.warning(
                f"Tool iteration limit ({self.max_tool_iterations}) reached, using last model text"
            )
            return last_content
        raise AgentError(
            self.model_slug,
            f"no final answer after {self.max_tool_iterations} tool iterations",
            recoverable=True,
            context={"session_id": ctx.session_id},
        )

    async def _generate(self, messages: list[LLMMessage]) -> LLMResponse:
        try:
            return await self.provider.generate(
                LLMRequest(messages=messages, tools=self.tools, model=self.model_slug)
            )
        except Exception as e:
            logger.error(f"LLM call failed for model {self.model_slug}: {e}")
            raise LLMError(
                self.model_slug,
                f"LLM call failed: {e}",
                context={"provider": self.provider.provider_name},
            ) from e

    async def _execute_tool(self, call: LLMToolCall, ctx: ToolContext) -> dict[str, Any]:
        try:
            outcome = await self.executor.execute(call.name, call.arguments, ctx)
        except ToolExecutionError as e:
            logger.warning(f"Tool {call.name} failed: {e}")
            return {"status": "error", "message": str(e)}
        return outcome["result"]

    async def close(self) -> None:
        await self.provider.close()
        logger.debug(f"Agent for model {self.model_slug} closed")
