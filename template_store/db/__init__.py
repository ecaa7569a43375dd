"""Database bootstrap utilities for the template store.

This module exposes convenience imports for engine construction and the schema
bootstrap that applies the SQL files under `db/sql/`. The DB layer is
intentionally minimal and does not leak ORM models into route handlers.
"""

from template_store.db.base import dispose_engine, get_engine, transaction
from template_store.db.schema_runner import apply_schema

__all__ = [
    "apply_schema",
    "dispose_engine",
    "get_engine",
    "transaction",
]
