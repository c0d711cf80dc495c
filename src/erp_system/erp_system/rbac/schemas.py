from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..http.schema import RequestSchema


class CreatePermissionBody(RequestSchema):
    code: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=512)


class CreateGroupBody(RequestSchema):
    name: str = Field(..., min_length=1, max_length=128)
    slug: Optional[str] = Field(None, max_length=128)
    description: Optional[str] = Field(None, max_length=512)
    parent_id: Optional[str] = None
    priority: int = 0


class UpdateGroupBody(RequestSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = Field(None, max_length=512)
    is_active: Optional[bool] = None
    parent_id: Optional[str] = None


class GroupPermissionBody(RequestSchema):
    permission_code: str
    effect: str = "ALLOW"
    conditions: Optional[dict] = None


class UserGroupBody(RequestSchema):
    group_id: str
    expires_at: Optional[datetime] = None


class DirectPermissionBody(RequestSchema):
    permission_code: str
    effect: str = "ALLOW"
    expires_at: Optional[datetime] = None
