"""APIRouter registration for the template store."""

from __future__ import annotations

from fastapi import APIRouter

from template_store.routes.substitutes import router as substitutes_router
from template_store.routes.templates import router as templates_router

api_router = APIRouter()
# Templates first so /templates/by-name/{name} wins over /templates/{template_id}/substitutes
api_router.include_router(templates_router, tags=["Templates"])
api_router.include_router(substitutes_router, tags=["Substitutes"])

__all__ = ["api_router"]
