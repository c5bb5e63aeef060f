"""
Unit tests for schema and agent domain models.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from dbchat.models.agent import AgentConfig, AgentError, LLMError, Provider
from dbchat.models.api import ChatRequest as APIChatRequest
from dbchat.models.api import ChatResponse as APIChatResponse
from dbchat.models.agent import ChatResponse, Query
from dbchat.models.schema import ColumnSchema, DatabaseSchema, ForeignKey, TableSchema


class TestSchemaModels:
    """Test the normalized schema snapshot."""

    def test_empty_default_and_comment_are_absent(self):
        column = ColumnSchema(name="id", data_type="integer", is_nullable=False, default="", comment="")

        assert column.default is None
        assert column.comment is None

    def test_foreign_key_requires_matching_column_counts(self):
        with pytest.raises(ValidationError, match="referenced columns"):
            ForeignKey(
                name="fk_bad",
                columns=["a", "b"],
                referenced_table="other",
                referenced_columns=["id"],
            )

    def test_duplicate_table_names_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate table"):
            DatabaseSchema(
                database_name="shop",
                tables=[TableSchema(name="orders"), TableSchema(name="orders")],
            )

    def test_empty_database_is_valid(self):
        schema = DatabaseSchema(database_name="empty")

        assert schema.tables == []

    def test_get_table(self, sample_schema):
        assert sample_schema.get_table("orders").primary_key == ["id"]
        assert sample_schema.get_table("missing") is None

    def test_json_round_trip_preserves_order(self, sample_schema):
        restored = DatabaseSchema.model_validate_json(sample_schema.model_dump_json())

        assert restored == sample_schema
        assert [t.name for t in restored.tables] == ["customers", "orders"]
        assert [c.name for c in restored.get_table("orders").columns] == [
            "id",
            "customer_id",
            "total",
        ]


class TestAgentConfig:
    """Test the per-process agent configuration."""

    def test_non_positive_ttl_falls_back_to_one_hour(self):
        config = AgentConfig(schema_cache_ttl=timedelta(0))

        assert config.schema_cache_ttl == timedelta(hours=1)

    def test_configured_providers_skip_empty_keys(self):
        config = AgentConfig(providers={Provider.GOOGLE: "key", Provider.OPENAI: ""})

        assert config.configured_providers() == [Provider.GOOGLE]
        assert config.api_key_for(Provider.OPENAI) is None
        assert config.api_key_for(Provider.ANTHROPIC) is None

    def test_config_is_frozen(self):
        config = AgentConfig()

        with pytest.raises(ValidationError):
            config.default_model = "gpt-4o"


class TestAgentErrors:
    def test_agent_error_to_dict(self):
        error = AgentError("gpt-4o", "boom", recoverable=False, context={"k": "v"})

        assert str(error) == "[gpt-4o] boom"
        assert error.to_dict() == {
            "agent": "gpt-4o",
            "message": "boom",
            "recoverable": False,
            "context": {"k": "v"},
            "type": "AgentError",
        }

    def test_llm_error_is_recoverable(self):
        assert LLMError("gpt-4o", "timeout").recoverable is True


class TestAPIModels:
    """Test the HTTP request/response shapes."""

    def test_request_to_domain_defaults_session(self):
        request = APIChatRequest(message="hi", connection_string="postgresql://h/db")

        domain = request.to_domain()

        assert domain.session_id == ""
        assert domain.model is None

    def test_request_requires_connection_string(self):
        with pytest.raises(ValidationError):
            APIChatRequest(message="hi", connection_string="")

    def test_response_from_domain(self):
        response = APIChatResponse.from_domain(
            ChatResponse(
                session_id="s1",
                message="done",
                queries=[Query(title="t", query="SELECT 1", description="d")],
            )
        )

        assert response.success is True
        assert response.queries[0].query == "SELECT 1"
        assert response.error is None

    def test_failure_body(self):
        body = APIChatResponse.failure("bad").model_dump(exclude_none=True)

        assert body == {"success": False, "queries": [], "error": "bad"}
