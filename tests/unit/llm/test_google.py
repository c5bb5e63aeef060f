"""Tests for GoogleProvider helper behavior."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from dbchat.llm.google import GoogleProvider, _clean_schema
from dbchat.llm.models import LLMMessage, LLMRequest, LLMToolCall, LLMToolDefinition


class _FakeCandidate:
    def __init__(self, finish_reason, parts=None):
        self.finish_reason = finish_reason
        self.content = SimpleNamespace(parts=parts or [])


class _FakeResponse:
    def __init__(self, parts=None, finish_reason=None):
        self.candidates = [_FakeCandidate(finish_reason, parts)]
        self.usage_metadata = SimpleNamespace(
            prompt_token_count=7, candidates_token_count=3, total_token_count=10
        )


def _text_part(text):
    return SimpleNamespace(text=text, function_call=None)


def _call_part(name, args):
    return SimpleNamespace(text="", function_call=SimpleNamespace(name=name, args=args))


@pytest.fixture
def provider():
    provider = GoogleProvider(api_key="dummy", model="gemini-2.5-flash")
    provider.genai = MagicMock()
    return provider


def test_extract_finish_reason_maps_length_like_values(provider):
    assert provider._extract_finish_reason(_FakeResponse(finish_reason="MAX_TOKENS")) == "length"


def test_extract_finish_reason_maps_content_filter_values(provider):
    assert provider._extract_finish_reason(_FakeResponse(finish_reason="SAFETY")) == "content_filter"


def test_extract_finish_reason_defaults_to_stop_for_unknown(provider):
    response = _FakeResponse(finish_reason="FINISH_REASON_UNSPECIFIED")

    assert provider._extract_finish_reason(response) == "stop"


def test_extract_parts_without_candidates(provider):
    assert provider._extract_parts(SimpleNamespace(candidates=[])) == ("", [])


def test_extract_parts_splits_text_and_calls(provider):
    response = _FakeResponse(
        parts=[_text_part("Checking."), _call_part("read_schema", {})], finish_reason="STOP"
    )

    text, calls = provider._extract_parts(response)

    assert text == "Checking."
    assert calls[0].name == "read_schema"
    assert calls[0].id.startswith("call_")


def test_clean_schema_strips_unsupported_keys():
    schema = {
        "type": "object",
        "title": "Args",
        "additionalProperties": False,
        "properties": {"limit": {"type": "integer", "default": 5}},
    }

    assert _clean_schema(schema) == {
        "type": "object",
        "properties": {"limit": {"type": "integer"}},
    }


def test_no_arg_tool_omits_parameters(provider):
    tools = provider._convert_tools(
        [
            LLMToolDefinition(name="read_schema", description="Read the schema"),
            LLMToolDefinition(
                name="search",
                description="Search",
                parameters={"type": "object", "properties": {"q": {"type": "string"}}},
            ),
        ]
    )

    declarations = tools[0]["function_declarations"]
    assert "parameters" not in declarations[0]
    assert declarations[1]["parameters"]["properties"] == {"q": {"type": "string"}}


def test_function_responses_grouped_in_user_turn(provider):
    contents = provider._convert_messages(
        [
            LLMMessage(role="system", content="be helpful"),
            LLMMessage(role="user", content="schema?"),
            LLMMessage(
                role="assistant",
                tool_calls=[LLMToolCall(id="call_1", name="read_schema")],
            ),
            LLMMessage(
                role="tool",
                content='{"status": "success"}',
                tool_call_id="call_1",
                name="read_schema",
            ),
        ]
    )

    assert [c["role"] for c in contents] == ["user", "model", "user"]
    assert contents[1]["parts"] == [{"function_call": {"name": "read_schema", "args": {}}}]
    assert contents[2]["parts"][0]["function_response"] == {
        "name": "read_schema",
        "response": {"status": "success"},
    }


@pytest.mark.asyncio
async def test_generate_tool_call(provider):
    model = MagicMock()
    model.generate_content_async = AsyncMock(
        return_value=_FakeResponse(parts=[_call_part("read_schema", {})], finish_reason="STOP")
    )
    provider.genai.GenerativeModel.return_value = model

    response = await provider.generate(
        LLMRequest(
            messages=[
                LLMMessage(role="system", content="be helpful"),
                LLMMessage(role="user", content="schema?"),
            ],
            tools=[LLMToolDefinition(name="read_schema", description="Read the schema")],
        )
    )

    assert response.finish_reason == "tool_calls"
    assert response.tool_calls[0].name == "read_schema"
    assert response.usage.total_tokens == 10
    kwargs = provider.genai.GenerativeModel.call_args.kwargs
    assert kwargs["system_instruction"] == "be helpful"
    assert kwargs["tools"][0]["function_declarations"][0]["name"] == "read_schema"
