"""Template endpoints.

Thin handlers over `repository_templates`; constraint violations propagate to
the global problem+json handlers unchanged.
"""

from __future__ import annotations

from fastapi import APIRouter, Path, Query, Response

from template_store.http.problem import not_found
from template_store.logic import repository_templates as templates_repo
from template_store.models.ordering import OrderBy, SortOrder
from template_store.models.requests import MAX_ID, TemplateCreate, TemplateRename
from template_store.models.rows import Template

router = APIRouter()


@router.post("/templates", status_code=201, response_model=Template, summary="Create template")
def post_template(body: TemplateCreate) -> Template:
    return templates_repo.create_template(body.name)


@router.get("/templates", response_model=list[Template], summary="List templates")
def get_templates(
    order_by: OrderBy = OrderBy.DEFAULT,
    sort: SortOrder = SortOrder.ASC,
    limit: int | None = Query(default=None, ge=0),
    search: str | None = None,
) -> list[Template]:
    return templates_repo.read_templates(order_by, sort, limit, search)


@router.get("/templates/by-name/{name}", response_model=Template, summary="Read template by name")
def get_template_by_name(name: str) -> Template:
    template = templates_repo.read_template_by_name(name)
    if template is None:
        raise not_found("template", name)
    return template


@router.get("/templates/{template_id}", response_model=Template, summary="Read template")
def get_template(template_id: int = Path(..., ge=1, le=MAX_ID)) -> Template:
    template = templates_repo.read_template_by_id(template_id)
    if template is None:
        raise not_found("template", template_id)
    return template


@router.patch("/templates/{template_id}", response_model=Template, summary="Rename template")
def patch_template(body: TemplateRename, template_id: int = Path(..., ge=1, le=MAX_ID)) -> Template:
    template = templates_repo.update_template_by_id(template_id, body.name)
    if template is None:
        raise not_found("template", template_id)
    return template


@router.delete("/templates/{template_id}", status_code=204, summary="Delete template and its substitutes")
def delete_template(template_id: int = Path(..., ge=1, le=MAX_ID)) -> Response:
    if not templates_repo.delete_template_by_id(template_id):
        raise not_found("template", template_id)
    return Response(status_code=204)


__all__ = ["router"]
