"""SQLAlchemy engine lifecycle.

The store targets PostgreSQL in production but supports SQLite for local
development and CI. No declarative models are defined here; this module only
manages connection lifecycle.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return (
        os.getenv("TEST_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or "sqlite+pysqlite:///:memory:"
    )


# Module-level cached Engine so repositories share one pool
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    # SQLite ignores REFERENCES/ON DELETE CASCADE unless enabled per connection
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    Reuses a module-level Engine so repositories share the same pool; called
    without a URL it returns whichever Engine was configured last. For
    SQLite in-memory URLs, use a StaticPool to keep a single connection alive
    across sessions and threads during tests. Every SQLite connection gets
    foreign key enforcement switched on.
    """
    global _ENGINE, _ENGINE_URL
    if url is None and _ENGINE is not None:
        return _ENGINE
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in resolved_url:
                # Keep a single in-memory DB connection shared across the process
                kwargs["poolclass"] = StaticPool
        if _ENGINE is not None:
            _ENGINE.dispose()
        engine = create_engine(resolved_url, **kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        logger.info("engine.created dialect=%s", engine.dialect.name)
        _ENGINE = engine
        _ENGINE_URL = resolved_url

    return _ENGINE


def dispose_engine() -> None:
    """Drop the cached Engine and close its pooled connections."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None


@contextmanager
def transaction() -> Generator[Connection, None, None]:
    """Yield a connection inside a transaction that commits on success.

    Rolls back and re-raises on any error; the caller sees the original
    exception.
    """
    engine = get_engine()
    with engine.connect() as conn:
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
        except Exception:
            trans.rollback()
            logger.debug("db transaction rolled back", exc_info=True)
            raise
