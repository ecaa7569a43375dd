"""Schema bootstrap.

Applies the dialect-specific DDL from `db/sql/` to an engine. The DDL uses
`CREATE ... IF NOT EXISTS` throughout so applying it repeatedly is harmless.
There is no journal and no versioning; schema evolution is out of scope.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parent / "sql"

_SCHEMA_FILES = {
    "postgresql": "postgresql.sql",
    "sqlite": "sqlite.sql",
}


class UnsupportedDialectError(RuntimeError):
    pass


def schema_path(dialect_name: str) -> Path:
    try:
        return SQL_DIR / _SCHEMA_FILES[dialect_name]
    except KeyError:
        raise UnsupportedDialectError(
            f"no schema available for dialect {dialect_name!r}; "
            f"supported: {sorted(_SCHEMA_FILES)}"
        ) from None


def _iter_statements(sql: str) -> Iterable[str]:
    """Yield individual statements with full-line comments removed."""
    lines = [ln for ln in sql.splitlines() if not ln.strip().startswith("--")]
    for stmt in "\n".join(lines).split(";"):
        s = stmt.strip()
        if s:
            yield s


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute SQL text, tolerating multi-statement files on SQLite.

    SQLite's DB-API (pysqlite) does not allow multiple statements in a single
    execute() call, so the script is split on ';'. Other dialects receive the
    full script as-is.
    """
    name = (conn.dialect.name or "").lower()
    if name == "sqlite":
        for stmt in _iter_statements(sql):
            conn.exec_driver_sql(stmt)
        return
    conn.exec_driver_sql(sql)


def apply_schema(engine: Engine) -> Path:
    """Create the templates/substitutes tables on `engine` if missing.

    Returns the path of the DDL file that was applied.
    """
    path = schema_path(engine.dialect.name)
    sql = path.read_text(encoding="utf-8")
    with engine.begin() as conn:
        _exec_sql_compat(conn, sql)
    logger.info("schema.applied dialect=%s file=%s", engine.dialect.name, path.name)
    return path


__all__ = ["SQL_DIR", "UnsupportedDialectError", "apply_schema", "schema_path"]
