"""Ordering and limit controls for listing templates and substitutes.

Values are rendered into SQL from a closed set of fragments; user input never
reaches the ORDER BY clause directly.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Sequence


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def as_sql(self) -> str:
        return "ASC" if self is SortOrder.ASC else "DESC"


class OrderBy(str, Enum):
    ID = "id"
    NAME = "name"
    NAME_IGNORE_CASE = "name_ignore_case"
    RANDOM = "random"
    DEFAULT = "default"

    def as_sql(self, sort: SortOrder = SortOrder.ASC, alias: str | None = None) -> str:
        """Render an ORDER BY expression, optionally qualified by a table alias."""
        col = f"{alias}." if alias else ""
        if self is OrderBy.ID:
            return f"{col}id {sort.as_sql()}"
        if self is OrderBy.NAME:
            return f"{col}name {sort.as_sql()}"
        if self is OrderBy.NAME_IGNORE_CASE:
            return f"LOWER({col}name) {sort.as_sql()}"
        if self is OrderBy.RANDOM:
            return "RANDOM()"
        # Default ignores the requested direction
        return f"{col}id ASC"


def limit_clause(limit: int | None) -> str:
    """Return a LIMIT clause, or an empty string when every row is wanted."""
    if limit is None:
        return ""
    if limit < 0:
        raise ValueError("limit must be zero or positive")
    return f" LIMIT {int(limit)}"


def contains_pattern(fragment: str) -> str:
    """LIKE pattern for text containing `fragment` literally; pair with ESCAPE '\\'."""
    escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def filter_containing(
    rows: Sequence[Mapping[str, Any]], fragment: str, limit: int | None = None
) -> list[Mapping[str, Any]]:
    """Keep rows whose `name` contains `fragment` (case-sensitive), then apply `limit`.

    SQLite LIKE ignores ASCII case, so rows pre-selected with `contains_pattern`
    get the exact match here.
    """
    matched = [r for r in rows if fragment in r["name"]]
    return matched if limit is None else matched[:limit]


__all__ = ["OrderBy", "SortOrder", "contains_pattern", "filter_containing", "limit_clause"]
