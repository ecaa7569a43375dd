"""Substitute data access helpers.

Substitutes always belong to exactly one template. Inserts by template id rely
on the foreign key to reject unknown templates; the by-name helpers create
the owning template on demand, mirroring how substitutes are usually added.
Batch helpers report which texts changed and which were left alone as a
SubstituteRecord.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import bindparam
from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from template_store.db.base import transaction
from template_store.logic.errors import constraint_errors
from template_store.logic.repository_templates import upsert_template
from template_store.models.ordering import (
    OrderBy,
    SortOrder,
    contains_pattern,
    filter_containing,
    limit_clause,
)
from template_store.models.rows import Substitute, SubstituteRecord

logger = logging.getLogger(__name__)

_INSERT = sql_text(
    "INSERT INTO substitutes (name, template_id) VALUES (:name, :template_id) "
    "RETURNING id, name, template_id"
)

_INSERT_IF_ABSENT = sql_text(
    "INSERT INTO substitutes (name, template_id) VALUES (:name, :template_id) "
    "ON CONFLICT (name, template_id) DO NOTHING "
    "RETURNING id, name, template_id"
)


def create_substitute(template_id: int, name: str) -> Substitute:
    """Insert a substitute under an existing template id."""
    with constraint_errors("substitute.create"):
        with transaction() as conn:
            row = conn.execute(_INSERT, {"name": name, "template_id": template_id}).mappings().one()
    sub = Substitute.from_row(row)
    logger.info("substitute.created id=%s template_id=%s", sub.id, sub.template_id)
    return sub


def add_substitute(template_name: str, name: str) -> Substitute:
    """Insert a substitute under `template_name`, creating the template if needed.

    A text the template already holds is rejected with UniqueViolation.
    """
    with constraint_errors("substitute.create"):
        with transaction() as conn:
            template = upsert_template(conn, template_name)
            row = conn.execute(_INSERT, {"name": name, "template_id": template.id}).mappings().one()
    sub = Substitute.from_row(row)
    logger.info("substitute.created id=%s template_id=%s", sub.id, sub.template_id)
    return sub


def add_substitutes(template_name: str, names: Sequence[str]) -> SubstituteRecord:
    """Insert several substitutes under one template in a single transaction.

    Texts the template already holds (or that repeat earlier in `names`) are
    skipped and listed in `ignored`. Any other constraint violation rolls the
    whole batch back, template creation included.
    """
    record = SubstituteRecord()
    with constraint_errors("substitute.create"):
        with transaction() as conn:
            template = upsert_template(conn, template_name)
            for n in names:
                row = conn.execute(
                    _INSERT_IF_ABSENT, {"name": n, "template_id": template.id}
                ).mappings().first()
                if row is None:
                    record.ignored.append(n)
                else:
                    record.updated.append(Substitute.from_row(row))
    logger.info(
        "substitutes.created template=%s count=%s ignored=%s",
        template_name,
        len(record.updated),
        len(record.ignored),
    )
    return record


def read_substitute_by_id(substitute_id: int) -> Substitute | None:
    with transaction() as conn:
        row = conn.execute(
            sql_text("SELECT id, name, template_id FROM substitutes WHERE id = :id"),
            {"id": substitute_id},
        ).mappings().first()
    return Substitute.from_row(row) if row else None


def read_substitute_by_name(template_name: str, name: str) -> Substitute | None:
    with transaction() as conn:
        row = conn.execute(
            sql_text(
                """
                SELECT s.id, s.name, s.template_id
                FROM substitutes s
                JOIN templates t ON s.template_id = t.id
                WHERE t.name = :template_name
                AND s.name = :name
                """
            ),
            {"template_name": template_name, "name": name},
        ).mappings().first()
    return Substitute.from_row(row) if row else None


def _select_listing(
    conn: Connection,
    query: str,
    params: dict,
    order_sql: str,
    limit: int | None,
    search: str | None,
) -> list[Substitute]:
    """Run a substitute listing, narrowing it to texts containing `search`."""
    limit_sql = limit_clause(limit)
    if not search:
        rows = conn.execute(sql_text(f"{query} ORDER BY {order_sql}{limit_sql}"), params)
        return [Substitute.from_row(r) for r in rows.mappings().all()]
    rows = conn.execute(
        sql_text(f"{query} AND s.name LIKE :pattern ESCAPE '\\' ORDER BY {order_sql}"),
        {**params, "pattern": contains_pattern(search)},
    ).mappings().all()
    return [Substitute.from_row(r) for r in filter_containing(rows, search, limit)]


def read_substitutes_from_template(
    template_name: str,
    order_by: OrderBy = OrderBy.DEFAULT,
    sort: SortOrder = SortOrder.ASC,
    limit: int | None = None,
    search: str | None = None,
) -> list[Substitute]:
    query = """
        SELECT s.id, s.name, s.template_id
        FROM substitutes s
        JOIN templates t ON s.template_id = t.id
        WHERE t.name = :template_name
        """
    with transaction() as conn:
        return _select_listing(
            conn,
            query,
            {"template_name": template_name},
            order_by.as_sql(sort, alias="s"),
            limit,
            search,
        )


def read_substitutes_by_template_id(
    template_id: int,
    order_by: OrderBy = OrderBy.DEFAULT,
    sort: SortOrder = SortOrder.ASC,
    limit: int | None = None,
    search: str | None = None,
) -> list[Substitute]:
    query = "SELECT s.id, s.name, s.template_id FROM substitutes s WHERE s.template_id = :template_id"
    with transaction() as conn:
        return _select_listing(
            conn,
            query,
            {"template_id": template_id},
            order_by.as_sql(sort, alias="s"),
            limit,
            search,
        )


def update_substitute_by_id(substitute_id: int, new_name: str) -> Substitute | None:
    with constraint_errors("substitute.update"):
        with transaction() as conn:
            row = conn.execute(
                sql_text(
                    "UPDATE substitutes SET name = :name WHERE id = :id "
                    "RETURNING id, name, template_id"
                ),
                {"name": new_name, "id": substitute_id},
            ).mappings().first()
    return Substitute.from_row(row) if row else None


def update_substitute_by_name(template_name: str, old_name: str, new_name: str) -> Substitute | None:
    with constraint_errors("substitute.update"):
        with transaction() as conn:
            row = conn.execute(
                sql_text(
                    """
                    UPDATE substitutes
                    SET name = :new_name
                    WHERE name = :old_name
                    AND template_id = (SELECT id FROM templates WHERE name = :template_name)
                    RETURNING id, name, template_id
                    """
                ),
                {"new_name": new_name, "old_name": old_name, "template_name": template_name},
            ).mappings().first()
    return Substitute.from_row(row) if row else None


def delete_substitute_by_id(substitute_id: int) -> bool:
    with transaction() as conn:
        count = conn.execute(
            sql_text("DELETE FROM substitutes WHERE id = :id"), {"id": substitute_id}
        ).rowcount
    return count > 0


def delete_substitutes_by_id(substitute_ids: Iterable[int]) -> int:
    ids = list(substitute_ids)
    if not ids:
        return 0
    stmt = sql_text("DELETE FROM substitutes WHERE id IN :ids").bindparams(
        bindparam("ids", expanding=True)
    )
    with transaction() as conn:
        count = conn.execute(stmt, {"ids": ids}).rowcount
    logger.info("substitutes.deleted count=%s", count)
    return count


def delete_substitute_by_name(template_name: str, name: str) -> bool:
    record = delete_substitutes_by_name(template_name, [name])
    return record is not None and bool(record.updated)


def delete_substitutes_by_name(template_name: str, names: Iterable[str]) -> SubstituteRecord | None:
    """Delete the given texts from `template_name`.

    Returns the deleted rows and the texts that were not present, or None when
    the template does not exist.
    """
    names = list(names)
    record = SubstituteRecord()
    with transaction() as conn:
        template = conn.execute(
            sql_text("SELECT id FROM templates WHERE name = :name"), {"name": template_name}
        ).first()
        if template is None:
            return None
        if names:
            stmt = sql_text(
                "DELETE FROM substitutes WHERE template_id = :template_id AND name IN :names "
                "RETURNING id, name, template_id"
            ).bindparams(bindparam("names", expanding=True))
            rows = conn.execute(stmt, {"template_id": template[0], "names": names}).mappings().all()
            record.updated = [Substitute.from_row(r) for r in rows]
    deleted = {s.name for s in record.updated}
    record.ignored = [n for n in names if n not in deleted]
    logger.info(
        "substitutes.deleted template=%s count=%s ignored=%s",
        template_name,
        len(record.updated),
        len(record.ignored),
    )
    return record


def copy_substitutes(from_template: str, to_template: str) -> int | None:
    """Copy every substitute of `from_template` into `to_template`.

    The target template is created if needed; texts it already holds are
    skipped. Returns the number of rows inserted, or None when the source
    template does not exist.
    """
    with constraint_errors("substitutes.copy"):
        with transaction() as conn:
            source = conn.execute(
                sql_text("SELECT id FROM templates WHERE name = :name"), {"name": from_template}
            ).first()
            if source is None:
                return None
            target = upsert_template(conn, to_template)
            count = conn.execute(
                sql_text(
                    """
                    INSERT INTO substitutes (name, template_id)
                    SELECT s.name, :to_id FROM substitutes s WHERE s.template_id = :from_id
                    ON CONFLICT (name, template_id) DO NOTHING
                    """
                ),
                {"to_id": target.id, "from_id": source[0]},
            ).rowcount
    logger.info(
        "substitutes.copied from=%s to=%s count=%s", from_template, to_template, count
    )
    return count


def read_substitutes_containing(fragment: str) -> list[Substitute]:
    """Return substitutes of any template whose text contains `fragment` (case-sensitive)."""
    with transaction() as conn:
        rows = conn.execute(
            sql_text(
                "SELECT id, name, template_id FROM substitutes "
                "WHERE name LIKE :pattern ESCAPE '\\' ORDER BY id ASC"
            ),
            {"pattern": contains_pattern(fragment)},
        ).mappings().all()
    return [Substitute.from_row(r) for r in filter_containing(rows, fragment)]


__all__ = [
    "add_substitute",
    "add_substitutes",
    "copy_substitutes",
    "create_substitute",
    "delete_substitute_by_id",
    "delete_substitute_by_name",
    "delete_substitutes_by_id",
    "delete_substitutes_by_name",
    "read_substitute_by_id",
    "read_substitute_by_name",
    "read_substitutes_by_template_id",
    "read_substitutes_containing",
    "read_substitutes_from_template",
    "update_substitute_by_id",
    "update_substitute_by_name",
]
