"""Pydantic request bodies for the template and substitute routes.

Name rules (pattern, length) are not repeated here: the tables enforce them
and the resulting violations are reported as problem+json.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

# Ids are BIGSERIAL / SQLite INTEGER: signed 64-bit, starting at 1
MAX_ID = 2**63 - 1

RowId = Annotated[int, Field(ge=1, le=MAX_ID)]


class TemplateCreate(BaseModel):
    name: str


class TemplateRename(BaseModel):
    name: str


class SubstituteCreate(BaseModel):
    name: str


class SubstituteRename(BaseModel):
    name: str


class SubstitutesCreate(BaseModel):
    names: list[str] = Field(min_length=1)


class SubstituteNames(BaseModel):
    names: list[str] = Field(min_length=1)


class SubstituteIds(BaseModel):
    ids: list[RowId] = Field(min_length=1)


class DeletedCount(BaseModel):
    deleted: int


class CopiedCount(BaseModel):
    copied: int


__all__ = [
    "MAX_ID",
    "CopiedCount",
    "DeletedCount",
    "RowId",
    "SubstituteCreate",
    "SubstituteIds",
    "SubstituteNames",
    "SubstituteRename",
    "SubstitutesCreate",
    "TemplateCreate",
    "TemplateRename",
]
