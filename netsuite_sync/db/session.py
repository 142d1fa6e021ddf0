"""Database engine utilities.

This module centralizes database connectivity primitives to enforce the db-layer
boundary for all SQLAlchemy usage.
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url

_SUPPORTED_DIALECTS = frozenset({"postgresql", "sqlite"})


def db_normalize_database_url(database_url: str) -> str:
    """Return a SQLAlchemy URL that selects the psycopg 3 driver for Postgres DSNs.

    Supabase hands out `postgres://` and `postgresql://` connection strings;
    both are rewritten to `postgresql+psycopg://`.

    Args:
        database_url: Raw database URL or DSN.

    Returns:
        str: SQLAlchemy database URL.

    Raises:
        ValueError: Raised when the URL is blank.
    """

    normalized_url = database_url.strip()
    if not normalized_url:
        raise ValueError("database_url must not be blank")

    for prefix in ("postgres://", "postgresql://"):
        if normalized_url.startswith(prefix):
            return "postgresql+psycopg://" + normalized_url[len(prefix):]
    return normalized_url


def db_create_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for destination store access.

    Args:
        database_url: SQLAlchemy database URL or Postgres DSN.

    Returns:
        Engine: Configured SQLAlchemy engine.

    Raises:
        ValueError: Raised when the database URL is blank or its dialect is unsupported.
    """

    normalized_url = db_normalize_database_url(database_url)
    backend_name = make_url(normalized_url).get_backend_name()
    if backend_name not in _SUPPORTED_DIALECTS:
        raise ValueError(f"unsupported database dialect: {backend_name}")

    return create_engine(normalized_url, pool_pre_ping=True)
