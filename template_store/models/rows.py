"""Pydantic models for rows of the templates and substitutes tables."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field


class Template(BaseModel):
    id: int
    name: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Template":
        return cls(id=int(row["id"]), name=str(row["name"]))


class Substitute(BaseModel):
    id: int
    name: str
    template_id: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Substitute":
        return cls(
            id=int(row["id"]),
            name=str(row["name"]),
            template_id=int(row["template_id"]),
        )


class SubstituteRecord(BaseModel):
    """Outcome of a batch change to one template's substitutes.

    `updated` holds the rows that were inserted or deleted; `ignored` holds the
    requested texts that were left alone (already present on insert, absent on
    delete), in request order.
    """

    updated: list[Substitute] = Field(default_factory=list)
    ignored: list[str] = Field(default_factory=list)


__all__ = ["Substitute", "SubstituteRecord", "Template"]
