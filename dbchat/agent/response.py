"""
Response Parser

Turns the model's final text into a ChatResponse. Models are asked to reply
with a JSON object {message, queries[]} but often wrap it in markdown fences
or reply in prose; anything that does not decode cleanly is passed through
as the message.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dbchat.models.agent import ChatResponse, Query

logger = logging.getLogger(__name__)

_FENCE_PREFIXES = ("```json", "```JSON", "```")
_FENCE = "```"


class _ParsedQuery(BaseModel):
    model_config = ConfigDict(strict=True)

    title: str = ""
    query: str = ""
    description: str = ""

    @field_validator("title", "query", "description", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return "" if value is None else value


class _ParsedResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    message: str = ""
    queries: list[_ParsedQuery] | None = Field(default=None)

    @field_validator("message", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return "" if value is None else value


def clean_json(raw: str) -> str:
    """Strip whitespace and one level of markdown code fences."""
    cleaned = raw.strip()
    for prefix in _FENCE_PREFIXES:
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix):]
            break
    if cleaned.endswith(_FENCE):
        cleaned = cleaned[: -len(_FENCE)]
    return cleaned.strip()


class ResponseParser:
    """Parse raw model output into the structured chat response."""

    def parse(self, session_id: str, raw: str) -> ChatResponse:
        """
        Parse raw model text. Never raises.

        On any decode or shape failure the original (uncleaned) text becomes
        the message and no queries are returned.
        """
        cleaned = clean_json(raw)
        try:
            parsed = _ParsedResponse.model_validate_json(cleaned)
        except ValidationError as e:
            logger.debug(f"Failed to parse JSON response, returning raw text: {e.error_count()} errors")
            return ChatResponse(session_id=session_id, message=raw, queries=[])

        queries = [
            Query(title=q.title, query=q.query, description=q.description)
            for q in parsed.queries or []
        ]
        logger.debug(f"Parsed response with {len(queries)} queries")
        return ChatResponse(session_id=session_id, message=parsed.message, queries=queries)

    def looks_like_json_object(self, raw: str) -> bool:
        cleaned = clean_json(raw)
        return cleaned.startswith("{") and cleaned.endswith("}")
