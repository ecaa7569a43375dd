"""Constraint-violation errors raised by the repositories.

The relational engine is the single source of truth for every rule on the
templates/substitutes tables. Repositories catch SQLAlchemy's IntegrityError
and re-raise one of the classes below so callers can react to the kind of
violation without inspecting driver-specific payloads.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class StoreError(Exception):
    pass


class ConstraintViolation(StoreError):
    """A statement was rejected by a table constraint."""

    kind = "constraint"

    def __init__(self, message: str, constraint: str | None = None) -> None:
        super().__init__(message)
        self.constraint = constraint


class UniqueViolation(ConstraintViolation):
    kind = "unique"


class CheckViolation(ConstraintViolation):
    kind = "check"


class ForeignKeyViolation(ConstraintViolation):
    kind = "foreign_key"


class NotNullViolation(ConstraintViolation):
    kind = "not_null"


# PostgreSQL SQLSTATE class 23 (integrity constraint violation)
_PG_SQLSTATE = {
    "23505": UniqueViolation,
    "23514": CheckViolation,
    "23503": ForeignKeyViolation,
    "23502": NotNullViolation,
}

# pysqlite reports the failing constraint only in the message text
_SQLITE_PREFIXES = (
    ("UNIQUE constraint failed", UniqueViolation),
    ("CHECK constraint failed", CheckViolation),
    ("FOREIGN KEY constraint failed", ForeignKeyViolation),
    ("NOT NULL constraint failed", NotNullViolation),
)

_SQLITE_DETAIL_RE = re.compile(r"constraint failed:\s*(?P<detail>.+)$")


def _pg_constraint_name(orig: object) -> str | None:
    diag = getattr(orig, "diag", None)
    return getattr(diag, "constraint_name", None) if diag is not None else None


def classify_integrity_error(exc: IntegrityError) -> ConstraintViolation:
    """Map an IntegrityError to the matching ConstraintViolation subclass."""
    orig = getattr(exc, "orig", None)
    message = str(orig) if orig is not None else str(exc)

    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in _PG_SQLSTATE:
        return _PG_SQLSTATE[sqlstate](message, _pg_constraint_name(orig))

    for prefix, cls in _SQLITE_PREFIXES:
        if message.startswith(prefix):
            m = _SQLITE_DETAIL_RE.search(message)
            return cls(message, m.group("detail").strip() if m else None)

    logger.warning("integrity_error.unclassified message=%s", message)
    return ConstraintViolation(message)


@contextmanager
def constraint_errors(action: str) -> Iterator[None]:
    """Re-raise IntegrityError raised inside the block as a ConstraintViolation."""
    try:
        yield
    except IntegrityError as exc:
        err = classify_integrity_error(exc)
        logger.info("%s.rejected kind=%s constraint=%s", action, err.kind, err.constraint)
        raise err from exc


__all__ = [
    "CheckViolation",
    "ConstraintViolation",
    "ForeignKeyViolation",
    "NotNullViolation",
    "StoreError",
    "UniqueViolation",
    "classify_integrity_error",
    "constraint_errors",
]
