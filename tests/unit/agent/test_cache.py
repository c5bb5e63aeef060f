"""
Unit tests for the session schema cache.

A fixed clock makes the TTL boundary deterministic.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from dbchat.agent.cache import (
    SCHEMA_CACHED_AT_KEY,
    SCHEMA_STATE_KEY,
    SchemaCache,
    format_timestamp,
    parse_timestamp,
)
from dbchat.agent.session import InMemorySessionService, SessionStateError

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


@pytest.fixture
def state():
    return InMemorySessionService().get_or_create("cache-session").state


@pytest.fixture
def clock():
    return FakeClock(NOW)


class TestTimestamps:
    def test_format_is_rfc3339_utc_seconds(self):
        moment = datetime(2025, 3, 1, 12, 0, 0, 987654, tzinfo=UTC)

        assert format_timestamp(moment) == "2025-03-01T12:00:00Z"

    def test_format_converts_to_utc(self):
        moment = datetime(2025, 3, 1, 14, 0, 0, tzinfo=UTC).astimezone(
            datetime.now().astimezone().tzinfo
        )

        assert format_timestamp(moment) == "2025-03-01T14:00:00Z"

    @pytest.mark.parametrize("value", ["", "yesterday", "2025-03-01", "2025-03-01T12:00:00"])
    def test_parse_rejects_malformed(self, value):
        assert parse_timestamp(value) is None

    def test_parse_accepts_offsets(self):
        assert parse_timestamp("2025-03-01T13:00:00+01:00") == NOW


class TestSchemaCache:
    def test_round_trip(self, state, clock, sample_schema):
        cache = SchemaCache(ttl=timedelta(minutes=30), clock=clock)

        result = cache.set(state, sample_schema)

        assert result.ok
        assert state.get(SCHEMA_CACHED_AT_KEY) == "2025-03-01T12:00:00Z"
        assert cache.get(state) == sample_schema

    def test_empty_state_is_miss(self, state, clock):
        assert SchemaCache(clock=clock).get(state) is None

    def test_none_state(self, sample_schema):
        cache = SchemaCache()

        assert cache.get(None) is None
        assert cache.set(None, sample_schema).ok

    def test_entry_at_ttl_is_fresh(self, state, clock, sample_schema):
        cache = SchemaCache(ttl=timedelta(minutes=30), clock=clock)
        cache.set(state, sample_schema)

        clock.moment = NOW + timedelta(minutes=30)

        assert cache.get(state) == sample_schema

    def test_entry_past_ttl_is_miss(self, state, clock, sample_schema):
        cache = SchemaCache(ttl=timedelta(minutes=30), clock=clock)
        cache.set(state, sample_schema)

        clock.moment = NOW + timedelta(minutes=30, seconds=1)

        assert cache.get(state) is None

    def test_non_positive_ttl_uses_default(self):
        assert SchemaCache(ttl=timedelta(seconds=-5)).ttl == timedelta(hours=1)
        assert SchemaCache(ttl=None).ttl == timedelta(hours=1)

    def test_malformed_timestamp_is_miss(self, state, clock, sample_schema):
        state.set(SCHEMA_STATE_KEY, sample_schema.model_dump_json())
        state.set(SCHEMA_CACHED_AT_KEY, "not-a-time")

        assert SchemaCache(clock=clock).get(state) is None

    def test_missing_timestamp_is_miss(self, state, clock, sample_schema):
        state.set(SCHEMA_STATE_KEY, sample_schema.model_dump_json())

        assert SchemaCache(clock=clock).get(state) is None

    def test_undecodable_blob_is_miss(self, state, clock):
        state.set(SCHEMA_STATE_KEY, '{"database_name": 42')
        state.set(SCHEMA_CACHED_AT_KEY, format_timestamp(NOW))

        assert SchemaCache(clock=clock).get(state) is None

    def test_failed_write_is_reported_not_raised(self, clock, sample_schema):
        state = MagicMock()
        state.set.side_effect = SessionStateError("session store is closed")

        result = SchemaCache(clock=clock).set(state, sample_schema)

        assert result.ok is False
        assert result.operation == "schema_cache.set"
        assert result.error == "session store is closed"

    def test_failed_timestamp_write_leaves_no_fresh_entry(self, clock, sample_schema):
        backing = InMemorySessionService().get_or_create("partial").state
        state = MagicMock()
        state.get.side_effect = backing.get

        def set_value(key, value):
            if key == SCHEMA_CACHED_AT_KEY:
                raise SessionStateError("disk full")
            backing.set(key, value)

        state.set.side_effect = set_value
        cache = SchemaCache(clock=clock)

        assert cache.set(state, sample_schema).ok is False
        assert cache.get(state) is None
