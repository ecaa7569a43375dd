from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from template_store.config import AppConfig, load_config
from template_store.db.base import get_engine
from template_store.db.schema_runner import apply_schema
from template_store.http.problem import (
    handle_constraint_violation,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from template_store.http.request_id import RequestIdMiddleware
from template_store.logging_setup import configure_logging
from template_store.logic.errors import ConstraintViolation
from template_store.routes import api_router

logger = logging.getLogger(__name__)


def _health_check(engine: Engine) -> Callable[[], dict]:
    def check() -> dict:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def create_app(config: AppConfig | None = None) -> FastAPI:
    cfg = config or load_config()
    # Configure global logging before app instantiation so all modules emit
    configure_logging(cfg.logging.level)
    dsn = cfg.database.dsn
    engine = get_engine(dsn)

    # Apply the schema on startup to avoid import-time side effects
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not cfg.schema_.auto_apply:
            logger.info("AUTO_APPLY_SCHEMA disabled; skipping schema bootstrap at startup")
        else:
            try:
                apply_schema(engine)
            except Exception:
                logger.error("Failed to apply schema at startup", exc_info=True)
                raise
        yield

    app = FastAPI(title="Template Store", lifespan=lifespan)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(ConstraintViolation, handle_constraint_violation)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api/v1")

    health_check = _health_check(engine)

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return health_check()

    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
