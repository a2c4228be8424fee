"""Database session management.

Provides engine and session factory caching keyed by database URL,
with SQLite thread-safety settings for FastAPI concurrency and the
enrichment worker pool.
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from buildservice.db.schema import Base

# Default database URL
DEFAULT_DATABASE_URL = "sqlite:///data/builds.db"

# Module-level engine cache for connection pooling
_engine_cache: dict[str, Engine] = {}

# Module-level session factory cache
_session_factory_cache: dict[str, sessionmaker] = {}


def get_engine(database_url: str | None = None) -> Engine:
    """Get SQLAlchemy engine for the database.

    Engines are cached by URL. For SQLite the parent directory of the
    database file is created, check_same_thread is disabled so request
    threads and enrichment threads can use the engine, and in-memory
    databases share a single connection through StaticPool.

    Args:
        database_url: SQLAlchemy URL. Defaults to sqlite:///data/builds.db.

    Returns:
        SQLAlchemy engine instance (cached).
    """
    if database_url is None:
        database_url = DEFAULT_DATABASE_URL

    if database_url in _engine_cache:
        return _engine_cache[database_url]

    url = make_url(database_url)
    kwargs: dict = {"echo": False}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **kwargs)
    _engine_cache[database_url] = engine

    return engine


def get_session_factory(database_url: str | None = None) -> sessionmaker:
    """Get cached session factory for the database.

    Args:
        database_url: SQLAlchemy URL.

    Returns:
        Cached sessionmaker instance.
    """
    if database_url is None:
        database_url = DEFAULT_DATABASE_URL

    if database_url in _session_factory_cache:
        return _session_factory_cache[database_url]

    factory = sessionmaker(bind=get_engine(database_url))
    _session_factory_cache[database_url] = factory

    return factory


def init_db(database_url: str | None = None) -> None:
    """Create the builds, coverage and dependencies tables if missing.

    Args:
        database_url: SQLAlchemy URL.
    """
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
