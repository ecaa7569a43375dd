"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that produce
application/problem+json responses. Constraint violations raised by the
repositories are reported with the status and code from `error_mapping`.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from template_store.http.error_mapping import CONSTRAINT_ERROR_MAP, NOT_FOUND
from template_store.logic.errors import ConstraintViolation

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def problem_response(
    request: Request, status: int, title: str, detail: str = "", **extra: object
) -> JSONResponse:
    body: dict[str, object] = {"title": title, "status": status}
    if detail:
        body["detail"] = detail
    body.update(extra)
    rid = _request_id(request)
    if rid:
        body["request_id"] = rid
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE)


def not_found(resource: str, key: object) -> HTTPException:
    """Build a 404 HTTPException carrying a problem body."""
    return HTTPException(
        status_code=NOT_FOUND["status"],
        detail={
            "title": NOT_FOUND["title"],
            "status": NOT_FOUND["status"],
            "detail": f"{resource} {key} does not exist",
            "code": NOT_FOUND["code"],
        },
    )


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        extra = {k: v for k, v in exc.detail.items() if k not in {"title", "status"}}
        return problem_response(request, status, str(exc.detail.get("title", "Error")), **extra)
    return problem_response(request, status, "Error", str(exc.detail or ""))


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    return problem_response(
        request,
        422,
        "Invalid Request",
        "Request validation failed",
        code="REQUEST_VALIDATION_FAILED",
        errors=[
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ],
    )


async def handle_constraint_violation(request: Request, exc: ConstraintViolation) -> JSONResponse:  # noqa: D401
    mapping = CONSTRAINT_ERROR_MAP.get(exc.kind, CONSTRAINT_ERROR_MAP["constraint"])
    logger.info(
        "error_handler.handle code=%s constraint=%s path=%s",
        mapping["code"],
        exc.constraint,
        request.url.path,
    )
    extra: dict[str, object] = {"code": mapping["code"]}
    if exc.constraint:
        extra["constraint"] = exc.constraint
    return problem_response(request, int(mapping["status"]), str(mapping["title"]), str(exc), **extra)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response(request, 500, "Internal Server Error")


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_constraint_violation",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
    "not_found",
    "problem_response",
]
