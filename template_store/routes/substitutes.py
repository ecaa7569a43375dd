"""Substitute endpoints.

Substitutes are addressed either through their owning template (by id or by
name) or directly by their own id.
"""

from __future__ import annotations

from fastapi import APIRouter, Path, Query, Response

from template_store.http.problem import not_found
from template_store.logic import repository_substitutes as substitutes_repo
from template_store.logic import repository_templates as templates_repo
from template_store.models.ordering import OrderBy, SortOrder
from template_store.models.requests import (
    MAX_ID,
    CopiedCount,
    DeletedCount,
    SubstituteCreate,
    SubstituteIds,
    SubstituteNames,
    SubstituteRename,
    SubstitutesCreate,
)
from template_store.models.rows import Substitute, SubstituteRecord

router = APIRouter()


@router.post(
    "/templates/by-name/{template_name}/substitutes",
    status_code=201,
    response_model=SubstituteRecord,
    summary="Add substitutes, creating the template if needed",
)
def post_substitutes_by_template_name(template_name: str, body: SubstitutesCreate) -> SubstituteRecord:
    return substitutes_repo.add_substitutes(template_name, body.names)


@router.get(
    "/templates/by-name/{template_name}/substitutes",
    response_model=list[Substitute],
    summary="List substitutes of a template by name",
)
def get_substitutes_by_template_name(
    template_name: str,
    order_by: OrderBy = OrderBy.DEFAULT,
    sort: SortOrder = SortOrder.ASC,
    limit: int | None = Query(default=None, ge=0),
    search: str | None = None,
) -> list[Substitute]:
    if templates_repo.read_template_by_name(template_name) is None:
        raise not_found("template", template_name)
    return substitutes_repo.read_substitutes_from_template(template_name, order_by, sort, limit, search)


@router.post(
    "/templates/by-name/{template_name}/substitutes/copy-from/{source_name}",
    response_model=CopiedCount,
    summary="Copy substitutes from another template",
)
def post_copy_substitutes(template_name: str, source_name: str) -> CopiedCount:
    copied = substitutes_repo.copy_substitutes(source_name, template_name)
    if copied is None:
        raise not_found("template", source_name)
    return CopiedCount(copied=copied)


@router.post(
    "/templates/by-name/{template_name}/substitutes/delete",
    response_model=SubstituteRecord,
    summary="Delete substitutes of a template by text",
)
def post_delete_substitutes_by_name(template_name: str, body: SubstituteNames) -> SubstituteRecord:
    record = substitutes_repo.delete_substitutes_by_name(template_name, body.names)
    if record is None:
        raise not_found("template", template_name)
    return record


@router.get(
    "/templates/{template_id}/substitutes",
    response_model=list[Substitute],
    summary="List substitutes of a template",
)
def get_substitutes(
    template_id: int = Path(..., ge=1, le=MAX_ID),
    order_by: OrderBy = OrderBy.DEFAULT,
    sort: SortOrder = SortOrder.ASC,
    limit: int | None = Query(default=None, ge=0),
    search: str | None = None,
) -> list[Substitute]:
    if templates_repo.read_template_by_id(template_id) is None:
        raise not_found("template", template_id)
    return substitutes_repo.read_substitutes_by_template_id(template_id, order_by, sort, limit, search)


@router.post(
    "/templates/{template_id}/substitutes",
    status_code=201,
    response_model=Substitute,
    summary="Create substitute",
)
def post_substitute(body: SubstituteCreate, template_id: int = Path(..., ge=1, le=MAX_ID)) -> Substitute:
    return substitutes_repo.create_substitute(template_id, body.name)


@router.post("/substitutes/delete", response_model=DeletedCount, summary="Delete substitutes by id")
def post_delete_substitutes(body: SubstituteIds) -> DeletedCount:
    return DeletedCount(deleted=substitutes_repo.delete_substitutes_by_id(body.ids))


@router.get("/substitutes/{substitute_id}", response_model=Substitute, summary="Read substitute")
def get_substitute(substitute_id: int = Path(..., ge=1, le=MAX_ID)) -> Substitute:
    sub = substitutes_repo.read_substitute_by_id(substitute_id)
    if sub is None:
        raise not_found("substitute", substitute_id)
    return sub


@router.patch("/substitutes/{substitute_id}", response_model=Substitute, summary="Replace substitute text")
def patch_substitute(body: SubstituteRename, substitute_id: int = Path(..., ge=1, le=MAX_ID)) -> Substitute:
    sub = substitutes_repo.update_substitute_by_id(substitute_id, body.name)
    if sub is None:
        raise not_found("substitute", substitute_id)
    return sub


@router.delete("/substitutes/{substitute_id}", status_code=204, summary="Delete substitute")
def delete_substitute(substitute_id: int = Path(..., ge=1, le=MAX_ID)) -> Response:
    if not substitutes_repo.delete_substitute_by_id(substitute_id):
        raise not_found("substitute", substitute_id)
    return Response(status_code=204)


__all__ = ["router"]
