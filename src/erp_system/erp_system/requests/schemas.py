from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..http.schema import RequestSchema


class CreateRequestBody(RequestSchema):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    type: str = "CUSTOM"
    priority: str = "MEDIUM"
    category: Optional[str] = Field(None, max_length=64)
    target_type: Optional[str] = Field(None, max_length=64)
    target_id: Optional[str] = None
    due_date: Optional[datetime] = None
    as_draft: bool = False


class AssignRequestBody(RequestSchema):
    assignee_id: str
    note: Optional[str] = Field(None, max_length=1000)


class NoteBody(RequestSchema):
    note: Optional[str] = Field(None, max_length=1000)


class ReasonBody(RequestSchema):
    reason: Optional[str] = Field(None, max_length=1000)


class CommentBody(RequestSchema):
    content: str = Field(..., min_length=1, max_length=5000)
    is_internal: bool = False
