"""Architectural tests for the table definitions and layering.

These tests use file-system and text inspection only; no application code is
executed and no database is needed.
"""

from __future__ import annotations

import ast
import re
from pathlib import Path
from typing import Dict, List

import pytest

PACKAGE = Path("template_store")
SQL_DIR = PACKAGE / "db" / "sql"
ROUTES = PACKAGE / "routes"
DIALECTS = ["postgresql", "sqlite"]


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AssertionError(f"Failed to read text file: {path}: {exc}")


def _table_blocks(sql: str) -> Dict[str, str]:
    """Map table name -> body of its CREATE TABLE statement."""
    return {
        m.group(1): m.group(2)
        for m in re.finditer(
            r"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(\w+)\s*\((.*?)\);",
            sql,
            re.IGNORECASE | re.DOTALL,
        )
    }


def _column_line(block: str, column: str) -> str:
    for line in block.splitlines():
        if re.match(rf"\s*{column}\s+", line):
            return line
    raise AssertionError(f"column {column!r} not declared")


@pytest.fixture(params=DIALECTS)
def schema(request) -> Dict[str, str]:
    path = SQL_DIR / f"{request.param}.sql"
    assert path.exists(), f"Missing schema file: {path}"
    return _table_blocks(_read_text(path))


def test_both_tables_declared(schema):
    assert set(schema) == {"templates", "substitutes"}


def test_template_columns(schema):
    block = schema["templates"]
    assert "PRIMARY KEY" in _column_line(block, "id").upper()
    name = _column_line(block, "name").upper()
    assert "NOT NULL" in name
    assert "UNIQUE" in name
    assert "ck_templates_name_pattern" in block
    assert re.search(r"ck_templates_name_length\s+CHECK\s*\(\s*\w+\(name\)\s*<=\s*255\s*\)", block)


def test_substitute_columns(schema):
    block = schema["substitutes"]
    assert "PRIMARY KEY" in _column_line(block, "id").upper()
    assert "NOT NULL" in _column_line(block, "name").upper()
    assert re.search(r"ck_substitutes_name_length\s+CHECK\s*\(\s*\w+\(name\)\s*<=\s*16000\s*\)", block)

    template_id = _column_line(block, "template_id").upper()
    assert "NOT NULL" in template_id
    assert re.search(r"REFERENCES\s+TEMPLATES\s*\(\s*ID\s*\)\s+ON\s+DELETE\s+CASCADE", template_id)


def test_substitute_text_unique_per_template(schema):
    uniques: List[str] = re.findall(r"\bUNIQUE\s*\(([^)]*)\)", schema["substitutes"], re.IGNORECASE)
    assert [sorted(c.strip() for c in u.split(",")) for u in uniques] == [["name", "template_id"]]


def _imported_modules(path: Path) -> List[str]:
    tree = ast.parse(_read_text(path))
    names: List[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.extend(a.name for a in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.append(node.module)
    return names


@pytest.mark.parametrize("path", sorted(ROUTES.glob("*.py")), ids=lambda p: p.name)
def test_routes_do_not_touch_the_database(path):
    imports = _imported_modules(path)
    assert not [m for m in imports if m.startswith("sqlalchemy")], imports
    assert not [m for m in imports if m.startswith("template_store.db")], imports
    text = _read_text(path)
    assert not re.search(r"\b(SELECT|INSERT|UPDATE|DELETE)\s+(\w+\s+)?(FROM|INTO|SET)\b", text)
