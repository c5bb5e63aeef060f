"""
Google LLM Provider

Implementation of BaseLLMProvider for Google's Gemini models using
google-generativeai function calling.
"""

import json
import logging
import uuid
import warnings
from typing import Any

with warnings.catch_warnings():
    warnings.simplefilter("ignore", FutureWarning)
    import google.generativeai as genai

from dbchat.llm.base import BaseLLMProvider
from dbchat.llm.models import (
    LLMMessage,
    LLMRequest,
    LLMResponse,
    LLMToolCall,
    LLMToolDefinition,
    LLMUsage,
)

logger = logging.getLogger(__name__)

# JSON schema keywords Gemini function declarations reject
_UNSUPPORTED_SCHEMA_KEYS = {"additionalProperties", "default", "title", "$schema"}


def _clean_schema(schema: Any) -> Any:
    if isinstance(schema, dict):
        return {
            key: _clean_schema(value)
            for key, value in schema.items()
            if key not in _UNSUPPORTED_SCHEMA_KEYS
        }
    if isinstance(schema, list):
        return [_clean_schema(item) for item in schema]
    return schema


class GoogleProvider(BaseLLMProvider):
    """
    Google (Gemini) LLM provider implementation.

    Uses the google-generativeai Python SDK. The SDK keeps the API key in
    process-wide configuration.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.0,
        max_tokens: int = 4096,
        timeout: int = 60,
    ):
        """Initialize Google provider."""
        super().__init__(
            provider_name="google",
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )

        self.api_key = api_key
        genai.configure(api_key=api_key)
        self.genai = genai

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate one turn using the Gemini API."""
        request = self._apply_defaults(request)
        self._log_request(request)

        model_name = request.model or self.model
        system_parts = [msg.content for msg in request.messages if msg.role == "system"]

        client = self.genai.GenerativeModel(
            model_name,
            system_instruction="\n\n".join(system_parts) if system_parts else None,
            tools=self._convert_tools(request.tools) if request.tools else None,
        )

        response = await client.generate_content_async(
            self._convert_messages(request.messages),
            generation_config=self.genai.types.GenerationConfig(
                temperature=request.temperature,
                max_output_tokens=request.max_tokens,
            ),
            request_options={"timeout": self.timeout},
        )

        text, tool_calls = self._extract_parts(response)
        usage = getattr(response, "usage_metadata", None)
        prompt_tokens = getattr(usage, "prompt_token_count", 0) or 0
        completion_tokens = getattr(usage, "candidates_token_count", 0) or 0

        llm_response = LLMResponse(
            content=text,
            model=model_name,
            usage=LLMUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=getattr(usage, "total_token_count", 0)
                or prompt_tokens + completion_tokens,
            ),
            finish_reason="tool_calls" if tool_calls else self._extract_finish_reason(response),
            provider="google",
            tool_calls=tool_calls,
            metadata={"raw_finish_reason": self._extract_raw_finish_reason(response)},
        )

        self._log_response(llm_response)
        return llm_response

    def _convert_messages(self, messages: list[LLMMessage]) -> list[dict[str, Any]]:
        contents: list[dict[str, Any]] = []
        for msg in messages:
            if msg.role == "system":
                continue
            if msg.role == "tool":
                part = {"function_response": {"name": msg.name, "response": self._tool_payload(msg)}}
                # answers to one model turn go back as a single user turn
                last = contents[-1] if contents else None
                if last and last["role"] == "user" and "function_response" in last["parts"][0]:
                    last["parts"].append(part)
                else:
                    contents.append({"role": "user", "parts": [part]})
                continue
            if msg.role == "assistant":
                parts: list[dict[str, Any]] = []
                if msg.content:
                    parts.append({"text": msg.content})
                parts.extend(
                    {"function_call": {"name": call.name, "args": call.arguments}}
                    for call in msg.tool_calls
                )
                contents.append({"role": "model", "parts": parts})
                continue
            contents.append({"role": "user", "parts": [{"text": msg.content}]})
        return contents

    def _tool_payload(self, msg: LLMMessage) -> dict[str, Any]:
        try:
            payload = json.loads(msg.content)
        except json.JSONDecodeError:
            return {"result": msg.content}
        return payload if isinstance(payload, dict) else {"result": payload}

    def _convert_tools(self, tools: list[LLMToolDefinition]) -> list[dict[str, Any]]:
        declarations = []
        for tool in tools:
            declaration: dict[str, Any] = {"name": tool.name, "description": tool.description}
            # Gemini rejects an object schema without properties
            if tool.has_parameters:
                declaration["parameters"] = _clean_schema(tool.parameters)
            declarations.append(declaration)
        return [{"function_declarations": declarations}]

    def _extract_parts(self, response: Any) -> tuple[str, list[LLMToolCall]]:
        # response.text raises when a function_call part is present
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return "", []
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []

        text_parts: list[str] = []
        tool_calls: list[LLMToolCall] = []
        for part in parts:
            function_call = getattr(part, "function_call", None)
            if function_call is not None and getattr(function_call, "name", ""):
                tool_calls.append(
                    LLMToolCall(
                        id=f"call_{uuid.uuid4().hex[:12]}",
                        name=function_call.name,
                        arguments=dict(function_call.args or {}),
                    )
                )
                continue
            text = getattr(part, "text", "")
            if text:
                text_parts.append(text)
        return "".join(text_parts), tool_calls

    def _extract_raw_finish_reason(self, response: Any) -> str:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return ""
        first = candidates[0] if len(candidates) > 0 else None
        if first is None:
            return ""
        reason = getattr(first, "finish_reason", "")
        return str(reason or "")

    def _extract_finish_reason(self, response: Any) -> str:
        raw_reason = self._extract_raw_finish_reason(response).lower()
        if any(token in raw_reason for token in ("max_tokens", "length")):
            return "length"
        if any(token in raw_reason for token in ("safety", "blocked", "recitation")):
            return "content_filter"
        if "error" in raw_reason:
            return "error"
        return "stop"
