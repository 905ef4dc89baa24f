"""
Pydantic schemas for the records module.

Record bodies are free-form: each kind keeps its own fields inside `data`.
Store-owned fields (id, area, user_id, timestamps) are never read from
client input.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RecordResponse(BaseModel):
    """A stored record of any kind."""

    id: str
    area: str
    user_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None


class RecordList(BaseModel):
    items: list[RecordResponse]
    count: int
    limit: int
    offset: int


class AssessmentRequest(BaseModel):
    """Score given to a caso by an admin, superuser or analyst."""

    valor: int
