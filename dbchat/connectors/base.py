"""
Base Database Connector

Abstract base class for schema-introspecting database connectors. Provides a
consistent async interface for connecting to a database, verifying it is
alive, and extracting a normalized schema snapshot.

All connectors must implement:
- connect(): Open a connection and verify liveness
- get_schema(): Extract the full DatabaseSchema snapshot
- close(): Release the connection
"""

import logging
from abc import ABC, abstractmethod

from dbchat.models.schema import DatabaseSchema

logger = logging.getLogger(__name__)


# ============================================================================
# Errors
# ============================================================================


class ConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class ConnectionError(ConnectorError):
    """Error establishing or verifying a database connection."""

    pass


class SchemaError(ConnectorError):
    """
    Error introspecting the database schema.

    Attributes:
        table: Table being introspected when the error occurred (None for
            database-level steps such as listing tables)
        operation: Catalog step that failed (columns, primary key, ...)
    """

    def __init__(self, message: str, table: str | None = None, operation: str | None = None):
        self.table = table
        self.operation = operation
        super().__init__(message)


# ============================================================================
# Base Connector
# ============================================================================


class BaseConnector(ABC):
    """
    Abstract base class for database connectors.

    Usage:
        connector = PostgresConnector(
            host="localhost", port=5432, database="shop", user="postgres", password=""
        )
        async with connector:
            schema = await connector.get_schema()
    """

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        connect_timeout: float = 10.0,
        command_timeout: float = 30.0,
        **kwargs,
    ):
        """
        Initialize connector.

        Args:
            host: Database host
            port: Database port
            database: Database name
            user: Database user
            password: Database password
            connect_timeout: Seconds to wait for the connection to open
            command_timeout: Seconds to wait for each catalog query
            **kwargs: Additional connector-specific parameters
        """
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout
        self.kwargs = kwargs

        self._conn = None
        self._connected = False

        logger.debug(f"Initialized {self.__class__.__name__} for {user}@{host}:{port}/{database}")

    @abstractmethod
    async def connect(self) -> None:
        """
        Open a connection and ping it.

        Idempotent: calling it again on a live connector is a no-op.

        Raises:
            ConnectionError: If the connection cannot be opened or pinged
        """
        pass

    @abstractmethod
    async def get_schema(self) -> DatabaseSchema:
        """
        Extract the normalized schema snapshot.

        Raises:
            ConnectionError: If not connected
            SchemaError: If any catalog query fails (no partial snapshot)
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Close the connection.

        Should be idempotent - safe to call multiple times.
        """
        pass

    @property
    def is_connected(self) -> bool:
        """Check if connector is connected."""
        return self._connected

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
        return False

    def __repr__(self) -> str:
        """String representation (never includes the password)."""
        status = "connected" if self._connected else "disconnected"
        return f"<{self.__class__.__name__} {self.user}@{self.host}:{self.port}/{self.database} ({status})>"
