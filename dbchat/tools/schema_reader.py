"""
Schema Reader

Tool-facing contract around the connectors: turns a connection string into
a SchemaReaderOutput. Connection and introspection failures come back as
structured error results so the model can explain them to the user; only
cancellation propagates.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Literal

from pydantic import BaseModel, Field

from dbchat.connectors.base import BaseConnector, ConnectorError
from dbchat.connectors.factory import create_connector
from dbchat.models.schema import DatabaseSchema

logger = logging.getLogger(__name__)

NO_CONNECTION_MESSAGE = "No database connection configured. Please provide a connection string."


class SchemaReaderOutput(BaseModel):
    """Result of a schema read, as handed to the model."""

    status: Literal["success", "error"]
    db_schema: DatabaseSchema | None = Field(default=None, alias="schema")
    message: str | None = None
    source: Literal["cache", "database"] | None = None

    model_config = {"populate_by_name": True}

    @classmethod
    def success(
        cls,
        schema: DatabaseSchema,
        source: Literal["cache", "database"],
        message: str | None = None,
    ) -> SchemaReaderOutput:
        return cls(status="success", db_schema=schema, source=source, message=message)

    @classmethod
    def error(cls, message: str) -> SchemaReaderOutput:
        return cls(status="error", message=message)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_tool_result(self) -> dict[str, Any]:
        """Serialize for the tool boundary (absent fields omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def schema_to_json(schema: DatabaseSchema, indent: int | None = 2) -> str:
    """Render a schema snapshot as JSON text."""
    return json.dumps(schema.model_dump(mode="json"), indent=indent)


async def read_schema_from_database(
    connection_string: str,
    *,
    connect_timeout: float = 10.0,
    command_timeout: float = 30.0,
) -> SchemaReaderOutput:
    """
    Connect, ping and extract the full schema of the target database.

    Never raises for connection or catalog failures; those become error
    results. asyncio.CancelledError propagates after the connection is
    terminated.

    Args:
        connection_string: Target database URL
        connect_timeout: Seconds to wait for the connection to open
        command_timeout: Seconds to wait for each catalog query

    Returns:
        SchemaReaderOutput with source="database" on success
    """
    if not connection_string:
        return SchemaReaderOutput.error(NO_CONNECTION_MESSAGE)

    try:
        connector = create_connector(
            database_url=connection_string,
            connect_timeout=connect_timeout,
            command_timeout=command_timeout,
        )
    except ValueError as e:
        logger.warning(f"Rejected connection string: {e}")
        return SchemaReaderOutput.error(f"failed to connect to database: {e}")

    return await _extract(connector)


async def _extract(connector: BaseConnector) -> SchemaReaderOutput:
    try:
        await connector.connect()
    except ConnectorError as e:
        return SchemaReaderOutput.error(str(e))
    except Exception as e:
        logger.error(f"Unexpected error connecting to database: {e}")
        await connector.close()
        return SchemaReaderOutput.error(f"failed to connect to database: {_describe(e)}")

    try:
        schema = await connector.get_schema()
    except asyncio.CancelledError:
        _abort(connector)
        raise
    except ConnectorError as e:
        logger.error(f"Schema extraction failed: {e}")
        return SchemaReaderOutput.error(f"failed to extract schema: {e}")
    except ValueError as e:
        # pydantic rejected the assembled snapshot
        logger.error(f"Schema extraction produced an invalid snapshot: {e}")
        return SchemaReaderOutput.error(f"failed to extract schema: {e}")
    except Exception as e:
        logger.error(f"Unexpected error during schema extraction: {_describe(e)}")
        return SchemaReaderOutput.error(f"failed to extract schema: {_describe(e)}")
    finally:
        await connector.close()

    logger.info(
        f"Extracted schema for database {schema.database_name}",
        extra={"database": schema.database_name, "tables": len(schema.tables)},
    )
    return SchemaReaderOutput.success(schema, source="database")


def _describe(error: Exception) -> str:
    return str(error) or error.__class__.__name__


def _abort(connector: BaseConnector) -> None:
    abort = getattr(connector, "abort", None)
    if abort is not None:
        abort()
