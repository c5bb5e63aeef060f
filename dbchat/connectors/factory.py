"""Connector factory for supported connection strings."""

from __future__ import annotations

import re
from urllib.parse import quote, unquote, urlencode, urlparse

from dbchat.connectors.base import BaseConnector
from dbchat.connectors.postgres import PostgresConnector

_POSTGRES_SCHEMES = {"postgres", "postgresql"}

_KEYWORD_PAIR = re.compile(r"(\w+)\s*=\s*('(?:[^'\\]|\\.)*'|[^\s']\S*)")
_KEYWORD_ESCAPE = re.compile(r"\\(.)")


def is_keyword_dsn(database_url: str) -> bool:
    """True for libpq key=value strings such as "host=db dbname=shop"."""
    text = database_url.strip()
    return "://" not in text and "=" in text


def parse_keyword_dsn(dsn: str) -> dict[str, str]:
    """
    Parse a libpq key=value connection string.

    Values may be single-quoted, with backslash escapes inside the quotes.

    Raises:
        ValueError: If the text is not a sequence of key=value pairs
    """
    text = dsn.strip()
    params: dict[str, str] = {}
    position = 0
    for match in _KEYWORD_PAIR.finditer(text):
        if text[position:match.start()].strip():
            break
        value = match.group(2)
        if value.startswith("'"):
            value = _KEYWORD_ESCAPE.sub(r"\1", value[1:-1])
        params[match.group(1).lower()] = value
        position = match.end()

    if not params or text[position:].strip():
        raise ValueError("Invalid connection string: expected key=value pairs.")
    return params


def keyword_dsn_to_url(params: dict[str, str]) -> str:
    """Rewrite parsed key=value parameters as the equivalent postgresql:// URL."""
    options = dict(params)
    host = options.pop("host", "")
    port = options.pop("port", "")
    user = options.pop("user", "")
    password = options.pop("password", "")
    dbname = options.pop("dbname", "")

    # Unix socket directories travel as a query parameter
    if host.startswith("/"):
        options["host"] = host
        host = ""

    auth = ""
    if user or password:
        auth = quote(user, safe="")
        if password:
            auth += ":" + quote(password, safe="")
        auth += "@"

    netloc = auth + host + (f":{port}" if port else "")
    query = f"?{urlencode(options)}" if options else ""
    return f"postgresql://{netloc}/{quote(dbname, safe='')}{query}"


def infer_database_type(database_url: str) -> str:
    """Infer logical database type from the connection string."""
    if is_keyword_dsn(database_url):
        return "postgresql"
    parsed = urlparse(_normalize_url(database_url))
    scheme = parsed.scheme.split("+")[0].lower()
    if scheme in _POSTGRES_SCHEMES:
        return "postgresql"
    raise ValueError(f"Unsupported database URL scheme: {parsed.scheme or '<none>'}")


def create_connector(
    *,
    database_url: str,
    connect_timeout: float = 10.0,
    command_timeout: float = 30.0,
    **kwargs,
) -> BaseConnector:
    """
    Create a typed connector instance from a connection string.

    Accepts postgresql:// URLs and libpq key=value strings. The driver
    receives the caller's settings intact (sslmode, options, ...); the
    parsed host, port, database and user only describe the target.

    Raises:
        ValueError: If the string is malformed, has no host or names an
            unsupported database
    """
    target_type = infer_database_type(database_url)

    if is_keyword_dsn(database_url):
        params = parse_keyword_dsn(database_url)
        dsn = keyword_dsn_to_url(params)
        host = params.get("host", "")
        port = params.get("port", "")
        database = params.get("dbname", "")
        user = params.get("user", "")
        password = params.get("password", "")
    else:
        dsn = _normalize_url(database_url)
        parsed = urlparse(dsn)
        host = parsed.hostname or ""
        port = parsed.port or ""
        database = unquote(parsed.path.lstrip("/"))
        user = unquote(parsed.username or "")
        password = unquote(parsed.password or "")

    if not host:
        raise ValueError("Invalid database URL: host is required.")

    if target_type == "postgresql":
        return PostgresConnector(
            host=host,
            port=int(port or 5432),
            database=database,
            user=user,
            password=password,
            connect_timeout=connect_timeout,
            command_timeout=command_timeout,
            dsn=dsn,
            **kwargs,
        )

    raise ValueError(f"Unsupported database type: {target_type}")


def _normalize_url(database_url: str) -> str:
    normalized = database_url.strip()
    if normalized.startswith("postgresql+asyncpg://"):
        normalized = "postgresql://" + normalized[len("postgresql+asyncpg://"):]
    return normalized
