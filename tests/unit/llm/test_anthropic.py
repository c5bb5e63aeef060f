"""Tests for AnthropicProvider request/response mapping."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from dbchat.llm.anthropic import AnthropicProvider
from dbchat.llm.models import LLMMessage, LLMRequest, LLMToolCall, LLMToolDefinition


def _message(blocks, stop_reason="end_turn"):
    return SimpleNamespace(
        id="msg_1",
        model="claude-sonnet-4-5",
        content=blocks,
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=12, output_tokens=8),
    )


@pytest.fixture
def provider():
    provider = AnthropicProvider(api_key="sk-ant-test")
    provider.client = SimpleNamespace(
        messages=SimpleNamespace(create=AsyncMock()),
        close=AsyncMock(),
    )
    return provider


@pytest.mark.asyncio
async def test_system_prompt_sent_separately(provider):
    provider.client.messages.create.return_value = _message(
        [SimpleNamespace(type="text", text="hello")]
    )

    response = await provider.generate(
        LLMRequest(
            messages=[
                LLMMessage(role="system", content="be helpful"),
                LLMMessage(role="user", content="hi"),
            ]
        )
    )

    params = provider.client.messages.create.call_args.kwargs
    assert params["system"] == "be helpful"
    assert params["messages"] == [{"role": "user", "content": "hi"}]
    assert response.content == "hello"
    assert response.usage.total_tokens == 20
    assert response.finish_reason == "stop"


@pytest.mark.asyncio
async def test_tool_use_blocks(provider):
    provider.client.messages.create.return_value = _message(
        [
            SimpleNamespace(type="text", text="Let me look."),
            SimpleNamespace(type="tool_use", id="toolu_1", name="read_schema", input={}),
        ],
        stop_reason="tool_use",
    )

    response = await provider.generate(
        LLMRequest(
            messages=[LLMMessage(role="user", content="schema?")],
            tools=[LLMToolDefinition(name="read_schema", description="Read the schema")],
        )
    )

    assert response.content == "Let me look."
    assert response.finish_reason == "tool_calls"
    assert response.tool_calls[0].id == "toolu_1"
    tools = provider.client.messages.create.call_args.kwargs["tools"]
    assert tools[0]["input_schema"] == {"type": "object", "properties": {}}


def test_tool_results_share_one_user_turn(provider):
    converted = provider._convert_messages(
        [
            LLMMessage(role="user", content="schema?"),
            LLMMessage(
                role="assistant",
                tool_calls=[
                    LLMToolCall(id="toolu_1", name="read_schema"),
                    LLMToolCall(id="toolu_2", name="read_schema"),
                ],
            ),
            LLMMessage(role="tool", content="{}", tool_call_id="toolu_1", name="read_schema"),
            LLMMessage(role="tool", content="{}", tool_call_id="toolu_2", name="read_schema"),
        ]
    )

    assert [m["role"] for m in converted] == ["user", "assistant", "user"]
    assert [b["type"] for b in converted[1]["content"]] == ["tool_use", "tool_use"]
    assert [b["tool_use_id"] for b in converted[2]["content"]] == ["toolu_1", "toolu_2"]


def test_stop_reason_mapping(provider):
    assert provider._map_finish_reason("max_tokens") == "length"
    assert provider._map_finish_reason("refusal") == "content_filter"
    assert provider._map_finish_reason("end_turn") == "stop"
