"""Functional test bootstrap for the template store.

Each test gets a fresh file-backed SQLite database with the schema applied.
Point TEST_DATABASE_URL at a PostgreSQL database to run the same tests there;
the tables are then truncated and their identity sequences restarted before
every test.
"""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from template_store.config import AppConfig, DatabaseConfig, LoggingConfig, SchemaConfig
from template_store.db.base import dispose_engine, get_engine
from template_store.db.schema_runner import apply_schema

_PG_URL = os.getenv("TEST_DATABASE_URL", "")
if not _PG_URL.startswith("postgresql"):
    _PG_URL = ""


@pytest.fixture()
def database_url(tmp_path) -> str:
    return _PG_URL or f"sqlite:///{tmp_path / 'template_store.db'}"


@pytest.fixture()
def engine(database_url):
    dispose_engine()
    eng = get_engine(database_url)
    apply_schema(eng)
    if eng.dialect.name == "postgresql":
        with eng.begin() as conn:
            conn.execute(text("TRUNCATE TABLE templates RESTART IDENTITY CASCADE"))
    yield eng
    dispose_engine()


@pytest.fixture()
def client(engine, database_url):
    cfg = AppConfig(
        database=DatabaseConfig(dsn=database_url),
        schema=SchemaConfig(auto_apply=True),
        logging=LoggingConfig(level="INFO"),
    )
    from template_store.main import create_app

    with TestClient(create_app(cfg)) as c:
        yield c
