"""
Schema Cache

TTL-bounded cache of the introspected schema, stored in the session state
as two strings: the schema JSON and an RFC3339 UTC timestamp (second
precision). Reads never raise; anything unexpected is a miss.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError

from dbchat.agent.advisory import AdvisoryResult
from dbchat.agent.session import SessionState
from dbchat.models.agent import DEFAULT_SCHEMA_CACHE_TTL
from dbchat.models.schema import DatabaseSchema

logger = logging.getLogger(__name__)

SCHEMA_STATE_KEY = "cached_schema"
SCHEMA_CACHED_AT_KEY = "schema_cached_at"

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    """Format as RFC3339 in UTC, truncated to whole seconds."""
    return moment.astimezone(UTC).strftime(_TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an RFC3339 timestamp; None when malformed or missing an offset."""
    if "T" not in value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


class SchemaCache:
    """
    Schema cache bound to a TTL and a clock.

    Usage:
        cache = SchemaCache(ttl=timedelta(minutes=30))
        schema = cache.get(session.state)
        if schema is None:
            ...
            cache.set(session.state, fresh_schema)
    """

    def __init__(
        self,
        ttl: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if ttl is None or ttl <= timedelta(0):
            ttl = DEFAULT_SCHEMA_CACHE_TTL
        self.ttl = ttl
        self._clock = clock

    def get(self, state: SessionState | None) -> DatabaseSchema | None:
        """Return the cached schema if present and fresh, else None."""
        if state is None:
            return None

        blob = state.get(SCHEMA_STATE_KEY)
        stamp = state.get(SCHEMA_CACHED_AT_KEY)
        if not isinstance(blob, str) or not blob:
            return None
        if not isinstance(stamp, str) or not stamp:
            return None

        cached_at = parse_timestamp(stamp)
        if cached_at is None:
            logger.debug(f"Ignoring cached schema with malformed timestamp: {stamp!r}")
            return None

        age = self._clock() - cached_at
        if age > self.ttl:
            logger.debug(f"Cached schema expired ({age} > {self.ttl})")
            return None

        try:
            return DatabaseSchema.model_validate_json(blob)
        except ValidationError as e:
            logger.warning(f"Ignoring undecodable cached schema: {e.error_count()} errors")
            return None

    def set(self, state: SessionState | None, schema: DatabaseSchema) -> AdvisoryResult:
        """
        Write the schema then its timestamp.

        The timestamp is written last so a failed write never leaves a
        fresh-looking entry behind.
        """
        if state is None:
            return AdvisoryResult.success("schema_cache.set")

        try:
            blob = schema.model_dump_json()
            state.set(SCHEMA_STATE_KEY, blob)
            state.set(SCHEMA_CACHED_AT_KEY, format_timestamp(self._clock()))
        except Exception as e:
            return AdvisoryResult.failure("schema_cache.set", e)

        logger.debug(f"Cached schema for database {schema.database_name}")
        return AdvisoryResult.success("schema_cache.set")
