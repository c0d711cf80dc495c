from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..common.datetime_utils import utc_now
from .permission_code import PermissionCode


class PermissionEffect(str, Enum):
    """Deny always wins over allow."""

    ALLOW = "ALLOW"
    DENY = "DENY"


@dataclass
class Permission:
    id: str
    code: str
    name: str
    module: str
    resource: str
    action: str
    description: Optional[str] = None
    is_system: bool = False
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class PermissionGroup:
    id: str
    tenant_id: str
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    is_active: bool = True
    priority: int = 0
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


@dataclass
class GroupPermission:
    id: str
    group_id: str
    permission_id: str
    effect: PermissionEffect = PermissionEffect.ALLOW
    conditions: Optional[dict] = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class UserGroup:
    id: str
    tenant_id: str
    user_id: str
    group_id: str
    expires_at: Optional[datetime] = None
    granted_by: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def is_active(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now


@dataclass
class UserDirectPermission:
    id: str
    tenant_id: str
    user_id: str
    permission_id: str
    effect: PermissionEffect = PermissionEffect.ALLOW
    expires_at: Optional[datetime] = None
    granted_by: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def is_active(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now


@dataclass
class PermissionAuditLog:
    id: str
    tenant_id: str
    user_id: str
    permission_code: str
    allowed: bool
    reason: str
    resource_id: Optional[str] = None
    ip: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class EffectivePermission:
    code: PermissionCode
    effect: PermissionEffect
    source: str


@dataclass(frozen=True)
class PermissionCheckResult:
    allowed: bool
    reason: str
