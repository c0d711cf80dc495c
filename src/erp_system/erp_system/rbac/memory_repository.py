from __future__ import annotations

from typing import Iterable, List, Optional

from ..common.memory import InMemoryRepository
from .model import (
    GroupPermission,
    Permission,
    PermissionAuditLog,
    PermissionGroup,
    UserDirectPermission,
    UserGroup,
)


class InMemoryPermissionRepository(InMemoryRepository[Permission]):
    def save(self, permission: Permission) -> Permission:
        return self._save(permission)

    def get_by_id(self, permission_id: str) -> Optional[Permission]:
        return self._get(permission_id)

    def get_by_code(self, code: str) -> Optional[Permission]:
        return self._first(lambda p: p.code == code)

    def get_many(self, permission_ids: Iterable[str]) -> List[Permission]:
        wanted = set(permission_ids)
        return self._find(lambda p: p.id in wanted)

    def list_all(self, *, module: Optional[str] = None) -> List[Permission]:
        return self._find(lambda p: module is None or p.module == module, sort_key=lambda p: p.code)


class InMemoryPermissionGroupRepository(InMemoryRepository[PermissionGroup]):
    def save(self, group: PermissionGroup) -> PermissionGroup:
        return self._save(group)

    def get_by_id(self, *, tenant_id: str, group_id: str) -> Optional[PermissionGroup]:
        return self._get(group_id, tenant_id=tenant_id)

    def get_by_slug(
        self, *, tenant_id: str, slug: str, include_deleted: bool = False
    ) -> Optional[PermissionGroup]:
        return self._first(lambda g: g.slug == slug, tenant_id=tenant_id, include_deleted=include_deleted)

    def list_all(self, *, tenant_id: str) -> List[PermissionGroup]:
        return self._find(tenant_id=tenant_id, sort_key=lambda g: (-g.priority, g.name))


class InMemoryGroupPermissionRepository(InMemoryRepository[GroupPermission]):
    def save(self, grant: GroupPermission) -> GroupPermission:
        return self._save(grant)

    def delete(self, grant_id: str) -> bool:
        return self._remove(grant_id)

    def find(self, *, group_id: str, permission_id: str) -> Optional[GroupPermission]:
        return self._first(lambda g: g.group_id == group_id and g.permission_id == permission_id)

    def list_by_groups(self, group_ids: Iterable[str]) -> List[GroupPermission]:
        wanted = set(group_ids)
        return self._find(lambda g: g.group_id in wanted)


class InMemoryUserGroupRepository(InMemoryRepository[UserGroup]):
    def save(self, membership: UserGroup) -> UserGroup:
        return self._save(membership)

    def delete(self, membership_id: str) -> bool:
        return self._remove(membership_id)

    def find(self, *, tenant_id: str, user_id: str, group_id: str) -> Optional[UserGroup]:
        return self._first(lambda m: m.user_id == user_id and m.group_id == group_id, tenant_id=tenant_id)

    def list_by_user(self, *, tenant_id: str, user_id: str) -> List[UserGroup]:
        return self._find(lambda m: m.user_id == user_id, tenant_id=tenant_id)

    def list_by_group(self, *, tenant_id: str, group_id: str) -> List[UserGroup]:
        return self._find(lambda m: m.group_id == group_id, tenant_id=tenant_id)


class InMemoryUserDirectPermissionRepository(InMemoryRepository[UserDirectPermission]):
    def save(self, grant: UserDirectPermission) -> UserDirectPermission:
        return self._save(grant)

    def delete(self, grant_id: str) -> bool:
        return self._remove(grant_id)

    def find(self, *, tenant_id: str, user_id: str, permission_id: str) -> Optional[UserDirectPermission]:
        return self._first(
            lambda g: g.user_id == user_id and g.permission_id == permission_id, tenant_id=tenant_id
        )

    def list_by_user(self, *, tenant_id: str, user_id: str) -> List[UserDirectPermission]:
        return self._find(lambda g: g.user_id == user_id, tenant_id=tenant_id)


class InMemoryPermissionAuditLogRepository(InMemoryRepository[PermissionAuditLog]):
    def save(self, entry: PermissionAuditLog) -> PermissionAuditLog:
        return self._save(entry)

    def list_by_user(self, *, tenant_id: str, user_id: str, limit: int = 100) -> List[PermissionAuditLog]:
        return self._find(
            lambda e: e.user_id == user_id, tenant_id=tenant_id, sort_key=lambda e: e.created_at, reverse=True
        )[:limit]
