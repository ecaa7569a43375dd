"""Template data access helpers.

Every function runs in its own transaction. Names are passed to the database
unchanged; the pattern, length and uniqueness rules live in the table
definition and surface here as ConstraintViolation subclasses.
"""

from __future__ import annotations

import logging

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from template_store.db.base import transaction
from template_store.logic.errors import ConstraintViolation, constraint_errors
from template_store.logic.reference_rewriter import like_pattern, rename_references
from template_store.models.ordering import (
    OrderBy,
    SortOrder,
    contains_pattern,
    filter_containing,
    limit_clause,
)
from template_store.models.rows import Template

logger = logging.getLogger(__name__)


def create_template(name: str) -> Template:
    with constraint_errors("template.create"):
        with transaction() as conn:
            row = conn.execute(
                sql_text("INSERT INTO templates (name) VALUES (:name) RETURNING id, name"),
                {"name": name},
            ).mappings().one()
    template = Template.from_row(row)
    logger.info("template.created id=%s name=%s", template.id, template.name)
    return template


def upsert_template(conn: Connection, name: str) -> Template:
    """Return the template called `name`, inserting it first if absent.

    Runs on the caller's connection so it can share a transaction with the
    substitute inserts that follow.
    """
    row = conn.execute(
        sql_text(
            """
            INSERT INTO templates (name) VALUES (:name)
            ON CONFLICT (name) DO UPDATE SET name = excluded.name
            RETURNING id, name
            """
        ),
        {"name": name},
    ).mappings().one()
    return Template.from_row(row)


def read_or_create_template(name: str) -> Template:
    with constraint_errors("template.create"):
        with transaction() as conn:
            return upsert_template(conn, name)


def read_template_by_id(template_id: int) -> Template | None:
    with transaction() as conn:
        row = conn.execute(
            sql_text("SELECT id, name FROM templates WHERE id = :id"),
            {"id": template_id},
        ).mappings().first()
    return Template.from_row(row) if row else None


def read_template_by_name(name: str) -> Template | None:
    with transaction() as conn:
        row = conn.execute(
            sql_text("SELECT id, name FROM templates WHERE name = :name"),
            {"name": name},
        ).mappings().first()
    return Template.from_row(row) if row else None


def read_templates(
    order_by: OrderBy = OrderBy.DEFAULT,
    sort: SortOrder = SortOrder.ASC,
    limit: int | None = None,
    search: str | None = None,
) -> list[Template]:
    """Return templates ordered by `order_by`; `limit=None` returns all rows.

    With `search`, only names containing it (case-sensitive) are returned and
    the limit applies to the matches.
    """
    limit_sql = limit_clause(limit)
    order_sql = order_by.as_sql(sort)
    with transaction() as conn:
        if search:
            rows = conn.execute(
                sql_text(
                    "SELECT id, name FROM templates WHERE name LIKE :pattern ESCAPE '\\' "
                    f"ORDER BY {order_sql}"
                ),
                {"pattern": contains_pattern(search)},
            ).mappings().all()
            rows = filter_containing(rows, search, limit)
        else:
            rows = conn.execute(
                sql_text(f"SELECT id, name FROM templates ORDER BY {order_sql}{limit_sql}")
            ).mappings().all()
    return [Template.from_row(r) for r in rows]


def _rewrite_references(old_name: str, new_name: str) -> int:
    """Point every `^old_name` reference in substitute text at `new_name`.

    Rows are updated one at a time; a row whose rewritten text collides with
    an existing substitute of the same template is skipped and logged.
    Returns the number of rows changed.
    """
    with transaction() as conn:
        candidates = conn.execute(
            sql_text("SELECT id, name FROM substitutes WHERE name LIKE :pattern"),
            {"pattern": like_pattern(old_name)},
        ).mappings().all()

    changed = 0
    for sub in candidates:
        new_text = rename_references(sub["name"], old_name, new_name)
        if new_text == sub["name"]:
            continue
        try:
            with constraint_errors("substitute.update"):
                with transaction() as conn:
                    conn.execute(
                        sql_text("UPDATE substitutes SET name = :name WHERE id = :id"),
                        {"name": new_text, "id": sub["id"]},
                    )
        except ConstraintViolation as exc:
            logger.warning(
                "template.rename.reference_skipped substitute_id=%s reason=%s", sub["id"], exc
            )
            continue
        changed += 1
    return changed


def _rename(old: Template, new_name: str) -> Template | None:
    with constraint_errors("template.rename"):
        with transaction() as conn:
            row = conn.execute(
                sql_text("UPDATE templates SET name = :new WHERE id = :id RETURNING id, name"),
                {"new": new_name, "id": old.id},
            ).mappings().first()
    if row is None:
        # Deleted between the lookup and the update
        return None
    renamed = Template.from_row(row)
    logger.info("template.renamed id=%s from=%s to=%s", renamed.id, old.name, renamed.name)

    if old.name != renamed.name:
        try:
            count = _rewrite_references(old.name, renamed.name)
            logger.info("template.rename.references_rewritten count=%s", count)
        except SQLAlchemyError as exc:
            logger.warning(
                'failed to rename all references to template "%s": %s', old.name, exc
            )
    return renamed


def update_template_by_id(template_id: int, new_name: str) -> Template | None:
    """Rename a template and rewrite references to it; None if it does not exist."""
    old = read_template_by_id(template_id)
    if old is None:
        return None
    return _rename(old, new_name)


def update_template_by_name(old_name: str, new_name: str) -> Template | None:
    old = read_template_by_name(old_name)
    if old is None:
        return None
    return _rename(old, new_name)


def delete_template_by_id(template_id: int) -> bool:
    """Delete a template and, via ON DELETE CASCADE, all of its substitutes."""
    with transaction() as conn:
        deleted = conn.execute(
            sql_text("DELETE FROM templates WHERE id = :id"), {"id": template_id}
        ).rowcount > 0
    if deleted:
        logger.info("template.deleted id=%s", template_id)
    return deleted


def delete_template_by_name(name: str) -> bool:
    with transaction() as conn:
        deleted = conn.execute(
            sql_text("DELETE FROM templates WHERE name = :name"), {"name": name}
        ).rowcount > 0
    if deleted:
        logger.info("template.deleted name=%s", name)
    return deleted


__all__ = [
    "create_template",
    "delete_template_by_id",
    "delete_template_by_name",
    "read_or_create_template",
    "read_template_by_id",
    "read_template_by_name",
    "read_templates",
    "update_template_by_id",
    "update_template_by_name",
    "upsert_template",
]
