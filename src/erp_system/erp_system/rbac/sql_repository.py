from __future__ import annotations

from typing import Iterable, List, Optional

from ..database.sql_repository import SqlRepository
from ..database.tables import (
    GroupPermissionRow,
    PermissionAuditLogRow,
    PermissionGroupRow,
    PermissionRow,
    UserDirectPermissionRow,
    UserGroupRow,
)
from .model import (
    GroupPermission,
    Permission,
    PermissionAuditLog,
    PermissionGroup,
    UserDirectPermission,
    UserGroup,
)


class SqlPermissionRepository(SqlRepository[Permission]):
    entity_cls = Permission
    table_cls = PermissionRow

    def save(self, permission: Permission) -> Permission:
        return self._save(permission)

    def get_by_id(self, permission_id: str) -> Optional[Permission]:
        return self._get(permission_id)

    def get_by_code(self, code: str) -> Optional[Permission]:
        return self._first(PermissionRow.code == code)

    def get_many(self, permission_ids: Iterable[str]) -> List[Permission]:
        ids = list(permission_ids)
        if not ids:
            return []
        return self._find(PermissionRow.id.in_(ids))

    def list_all(self, *, module: Optional[str] = None) -> List[Permission]:
        criteria = [PermissionRow.module == module] if module else []
        return self._find(*criteria, order_by=[PermissionRow.code])


class SqlPermissionGroupRepository(SqlRepository[PermissionGroup]):
    entity_cls = PermissionGroup
    table_cls = PermissionGroupRow

    def save(self, group: PermissionGroup) -> PermissionGroup:
        return self._save(group)

    def get_by_id(self, *, tenant_id: str, group_id: str) -> Optional[PermissionGroup]:
        return self._get(group_id, tenant_id=tenant_id)

    def get_by_slug(
        self, *, tenant_id: str, slug: str, include_deleted: bool = False
    ) -> Optional[PermissionGroup]:
        return self._first(PermissionGroupRow.slug == slug, tenant_id=tenant_id, include_deleted=include_deleted)

    def list_all(self, *, tenant_id: str) -> List[PermissionGroup]:
        return self._find(
            tenant_id=tenant_id, order_by=[PermissionGroupRow.priority.desc(), PermissionGroupRow.name]
        )


class SqlGroupPermissionRepository(SqlRepository[GroupPermission]):
    entity_cls = GroupPermission
    table_cls = GroupPermissionRow

    def save(self, grant: GroupPermission) -> GroupPermission:
        return self._save(grant)

    def delete(self, grant_id: str) -> bool:
        return self._delete(grant_id)

    def find(self, *, group_id: str, permission_id: str) -> Optional[GroupPermission]:
        return self._first(
            GroupPermissionRow.group_id == group_id, GroupPermissionRow.permission_id == permission_id
        )

    def list_by_groups(self, group_ids: Iterable[str]) -> List[GroupPermission]:
        ids = list(group_ids)
        if not ids:
            return []
        return self._find(GroupPermissionRow.group_id.in_(ids))


class SqlUserGroupRepository(SqlRepository[UserGroup]):
    entity_cls = UserGroup
    table_cls = UserGroupRow

    def save(self, membership: UserGroup) -> UserGroup:
        return self._save(membership)

    def delete(self, membership_id: str) -> bool:
        return self._delete(membership_id)

    def find(self, *, tenant_id: str, user_id: str, group_id: str) -> Optional[UserGroup]:
        return self._first(UserGroupRow.user_id == user_id, UserGroupRow.group_id == group_id, tenant_id=tenant_id)

    def list_by_user(self, *, tenant_id: str, user_id: str) -> List[UserGroup]:
        return self._find(UserGroupRow.user_id == user_id, tenant_id=tenant_id)

    def list_by_group(self, *, tenant_id: str, group_id: str) -> List[UserGroup]:
        return self._find(UserGroupRow.group_id == group_id, tenant_id=tenant_id)


class SqlUserDirectPermissionRepository(SqlRepository[UserDirectPermission]):
    entity_cls = UserDirectPermission
    table_cls = UserDirectPermissionRow

    def save(self, grant: UserDirectPermission) -> UserDirectPermission:
        return self._save(grant)

    def delete(self, grant_id: str) -> bool:
        return self._delete(grant_id)

    def find(self, *, tenant_id: str, user_id: str, permission_id: str) -> Optional[UserDirectPermission]:
        return self._first(
            UserDirectPermissionRow.user_id == user_id,
            UserDirectPermissionRow.permission_id == permission_id,
            tenant_id=tenant_id,
        )

    def list_by_user(self, *, tenant_id: str, user_id: str) -> List[UserDirectPermission]:
        return self._find(UserDirectPermissionRow.user_id == user_id, tenant_id=tenant_id)


class SqlPermissionAuditLogRepository(SqlRepository[PermissionAuditLog]):
    entity_cls = PermissionAuditLog
    table_cls = PermissionAuditLogRow

    def save(self, entry: PermissionAuditLog) -> PermissionAuditLog:
        return self._save(entry)

    def list_by_user(self, *, tenant_id: str, user_id: str, limit: int = 100) -> List[PermissionAuditLog]:
        return self._find(
            PermissionAuditLogRow.user_id == user_id,
            tenant_id=tenant_id,
            order_by=[PermissionAuditLogRow.created_at.desc()],
            limit=limit,
        )
