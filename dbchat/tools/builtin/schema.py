"""Built-in schema tools."""

from __future__ import annotations

import logging
from typing import Any

from dbchat.agent.cache import SchemaCache
from dbchat.tools.base import ToolCategory, ToolContext, tool
from dbchat.tools.schema_reader import SchemaReaderOutput, read_schema_from_database

logger = logging.getLogger(__name__)

NO_SESSION_CONNECTION_MESSAGE = "No database connection configured for this session."
CACHE_HIT_MESSAGE = "Schema loaded from cache."


@tool(
    name="read_schema",
    description=(
        "Read the schema of the user's connected PostgreSQL database: tables, columns "
        "with types and nullability, primary keys, foreign keys and indexes. Call this "
        "before writing SQL that references tables or columns."
    ),
    category=ToolCategory.DATABASE,
)
async def read_schema(ctx: ToolContext | None = None) -> dict[str, Any]:
    if ctx is None or not ctx.connection_string:
        return SchemaReaderOutput.error(NO_SESSION_CONNECTION_MESSAGE).to_tool_result()

    cache = SchemaCache(ttl=ctx.schema_cache_ttl)

    cached = cache.get(ctx.state)
    if cached is not None:
        logger.info(
            f"Schema for session {ctx.session_id} served from cache",
            extra={"session_id": ctx.session_id, "database": cached.database_name},
        )
        return SchemaReaderOutput.success(
            cached, source="cache", message=CACHE_HIT_MESSAGE
        ).to_tool_result()

    output = await read_schema_from_database(
        ctx.connection_string,
        connect_timeout=ctx.connect_timeout,
        command_timeout=ctx.command_timeout,
    )
    if output.ok and output.db_schema is not None:
        cache.set(ctx.state, output.db_schema)

    return output.to_tool_result()
