from __future__ import annotations

from typing import Iterable, List, Optional, Protocol

from .model import (
    GroupPermission,
    Permission,
    PermissionAuditLog,
    PermissionGroup,
    UserDirectPermission,
    UserGroup,
)


class PermissionRepository(Protocol):
    def save(self, permission: Permission) -> Permission:
        raise NotImplementedError

    def get_by_id(self, permission_id: str) -> Optional[Permission]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Permission]:
        raise NotImplementedError

    def get_many(self, permission_ids: Iterable[str]) -> List[Permission]:
        raise NotImplementedError

    def list_all(self, *, module: Optional[str] = None) -> List[Permission]:
        raise NotImplementedError


class PermissionGroupRepository(Protocol):
    def save(self, group: PermissionGroup) -> PermissionGroup:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, group_id: str) -> Optional[PermissionGroup]:
        raise NotImplementedError

    def get_by_slug(
        self, *, tenant_id: str, slug: str, include_deleted: bool = False
    ) -> Optional[PermissionGroup]:
        raise NotImplementedError

    def list_all(self, *, tenant_id: str) -> List[PermissionGroup]:
        raise NotImplementedError


class GroupPermissionRepository(Protocol):
    def save(self, grant: GroupPermission) -> GroupPermission:
        raise NotImplementedError

    def delete(self, grant_id: str) -> bool:
        raise NotImplementedError

    def find(self, *, group_id: str, permission_id: str) -> Optional[GroupPermission]:
        raise NotImplementedError

    def list_by_groups(self, group_ids: Iterable[str]) -> List[GroupPermission]:
        raise NotImplementedError


class UserGroupRepository(Protocol):
    def save(self, membership: UserGroup) -> UserGroup:
        raise NotImplementedError

    def delete(self, membership_id: str) -> bool:
        raise NotImplementedError

    def find(self, *, tenant_id: str, user_id: str, group_id: str) -> Optional[UserGroup]:
        raise NotImplementedError

    def list_by_user(self, *, tenant_id: str, user_id: str) -> List[UserGroup]:
        raise NotImplementedError

    def list_by_group(self, *, tenant_id: str, group_id: str) -> List[UserGroup]:
        raise NotImplementedError


class UserDirectPermissionRepository(Protocol):
    def save(self, grant: UserDirectPermission) -> UserDirectPermission:
        raise NotImplementedError

    def delete(self, grant_id: str) -> bool:
        raise NotImplementedError

    def find(self, *, tenant_id: str, user_id: str, permission_id: str) -> Optional[UserDirectPermission]:
        raise NotImplementedError

    def list_by_user(self, *, tenant_id: str, user_id: str) -> List[UserDirectPermission]:
        raise NotImplementedError


class PermissionAuditLogRepository(Protocol):
    def save(self, entry: PermissionAuditLog) -> PermissionAuditLog:
        raise NotImplementedError

    def list_by_user(self, *, tenant_id: str, user_id: str, limit: int = 100) -> List[PermissionAuditLog]:
        raise NotImplementedError
