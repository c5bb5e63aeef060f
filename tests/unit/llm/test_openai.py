"""Tests for OpenAIProvider request/response mapping."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from dbchat.llm.models import LLMMessage, LLMRequest, LLMToolCall, LLMToolDefinition
from dbchat.llm.openai import OpenAIProvider


def _completion(content=None, tool_calls=None, finish_reason="stop"):
    return SimpleNamespace(
        id="chatcmpl-1",
        created=1700000000,
        model="gpt-4o",
        choices=[
            SimpleNamespace(
                message=SimpleNamespace(content=content, tool_calls=tool_calls),
                finish_reason=finish_reason,
            )
        ],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15),
    )


@pytest.fixture
def provider():
    provider = OpenAIProvider(api_key="sk-test", model="gpt-4o")
    provider.client = SimpleNamespace(
        chat=SimpleNamespace(completions=SimpleNamespace(create=AsyncMock())),
        close=AsyncMock(),
    )
    return provider


@pytest.mark.asyncio
async def test_text_response(provider):
    provider.client.chat.completions.create.return_value = _completion(content="hello")

    response = await provider.generate(
        LLMRequest(messages=[LLMMessage(role="user", content="hi")])
    )

    assert response.content == "hello"
    assert response.finish_reason == "stop"
    assert response.usage.total_tokens == 15
    params = provider.client.chat.completions.create.call_args.kwargs
    assert params["temperature"] == 0.0
    assert params["max_tokens"] == 4096
    assert "tools" not in params


@pytest.mark.asyncio
async def test_tool_call_response(provider):
    call = SimpleNamespace(
        id="call_abc",
        function=SimpleNamespace(name="read_schema", arguments="{}"),
    )
    provider.client.chat.completions.create.return_value = _completion(
        tool_calls=[call], finish_reason="tool_calls"
    )

    response = await provider.generate(
        LLMRequest(
            messages=[LLMMessage(role="user", content="schema?")],
            tools=[LLMToolDefinition(name="read_schema", description="Read the schema")],
        )
    )

    assert response.content == ""
    assert response.finish_reason == "tool_calls"
    assert response.tool_calls == [LLMToolCall(id="call_abc", name="read_schema", arguments={})]
    tools = provider.client.chat.completions.create.call_args.kwargs["tools"]
    assert tools[0]["type"] == "function"
    assert tools[0]["function"]["name"] == "read_schema"


@pytest.mark.asyncio
async def test_tool_round_trip_messages(provider):
    provider.client.chat.completions.create.return_value = _completion(content="done")
    messages = [
        LLMMessage(role="system", content="be helpful"),
        LLMMessage(role="user", content="schema?"),
        LLMMessage(
            role="assistant",
            tool_calls=[LLMToolCall(id="call_abc", name="read_schema", arguments={"x": 1})],
        ),
        LLMMessage(role="tool", content='{"status": "success"}', tool_call_id="call_abc", name="read_schema"),
    ]

    await provider.generate(LLMRequest(messages=messages))

    sent = provider.client.chat.completions.create.call_args.kwargs["messages"]
    assert sent[0] == {"role": "system", "content": "be helpful"}
    assert sent[2]["content"] is None
    assert sent[2]["tool_calls"][0]["function"]["arguments"] == json.dumps({"x": 1})
    assert sent[3] == {"role": "tool", "tool_call_id": "call_abc", "content": '{"status": "success"}'}


def test_undecodable_arguments(provider):
    assert provider._decode_arguments("{not json") == {}
    assert provider._decode_arguments("[1, 2]") == {}
    assert provider._decode_arguments(None) == {}


def test_finish_reason_mapping(provider):
    assert provider._map_finish_reason("length") == "length"
    assert provider._map_finish_reason("content_filter") == "content_filter"
    assert provider._map_finish_reason(None) == "stop"


@pytest.mark.asyncio
async def test_close(provider):
    await provider.close()

    provider.client.close.assert_awaited_once()
