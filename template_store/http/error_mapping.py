"""Central error mapping for store errors.

Single source of truth for mapping constraint-violation kinds to
problem+json codes and HTTP statuses. Route and handler modules must import
from here instead of hardcoding strings or numbers.
"""

from __future__ import annotations

CONSTRAINT_ERROR_MAP = {
    "unique": {"code": "CONSTRAINT_UNIQUE_VIOLATION", "status": 409, "title": "Conflict"},
    "foreign_key": {"code": "CONSTRAINT_FOREIGN_KEY_VIOLATION", "status": 409, "title": "Conflict"},
    "check": {"code": "CONSTRAINT_CHECK_VIOLATION", "status": 422, "title": "Unprocessable Entity"},
    "not_null": {"code": "CONSTRAINT_NOT_NULL_VIOLATION", "status": 422, "title": "Unprocessable Entity"},
    "constraint": {"code": "CONSTRAINT_VIOLATION", "status": 409, "title": "Conflict"},
}

NOT_FOUND = {"code": "RESOURCE_NOT_FOUND", "status": 404, "title": "Not Found"}

__all__ = ["CONSTRAINT_ERROR_MAP", "NOT_FOUND"]
