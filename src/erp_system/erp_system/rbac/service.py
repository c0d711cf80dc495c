from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import utc_now
from ..common.ids import new_id
from ..common.validators import parse_enum, require_max_length, require_non_empty
from ..core.exceptions import BadRequestError, ConflictError, ResourceNotFoundError, ValidationError
from ..tenants.model import slugify
from ..users.repository import UserRepository
from .model import (
    GroupPermission,
    Permission,
    PermissionEffect,
    PermissionGroup,
    UserDirectPermission,
    UserGroup,
)
from .permission_code import PermissionCode
from .permission_service import PermissionService
from .repository import (
    GroupPermissionRepository,
    PermissionGroupRepository,
    PermissionRepository,
    UserDirectPermissionRepository,
    UserGroupRepository,
)


class RbacService:
    """Use case: manage permissions, groups and assignments."""

    def __init__(
        self,
        permissions: PermissionRepository,
        groups: PermissionGroupRepository,
        group_permissions: GroupPermissionRepository,
        user_groups: UserGroupRepository,
        direct_permissions: UserDirectPermissionRepository,
        users: UserRepository,
        permission_service: PermissionService,
        audit: Optional[AuditService] = None,
    ):
        self._permissions = permissions
        self._groups = groups
        self._group_permissions = group_permissions
        self._user_groups = user_groups
        self._direct = direct_permissions
        self._users = users
        self._permission_service = permission_service
        self._audit = audit

    # permissions
    def create_permission(
        self,
        *,
        code: str,
        name: str,
        description: Optional[str] = None,
        is_system: bool = False,
    ) -> Permission:
        parsed = PermissionCode.parse(code)
        name = require_non_empty(name, "Name")
        if self._permissions.get_by_code(parsed.value):
            raise ConflictError(f"Permission {parsed.value} already exists")
        return self._permissions.save(
            Permission(
                id=new_id(),
                code=parsed.value,
                name=name,
                module=parsed.module,
                resource=parsed.resource,
                action=parsed.action,
                description=description,
                is_system=is_system,
            )
        )

    def list_permissions(self, *, module: Optional[str] = None) -> List[Permission]:
        return self._permissions.list_all(module=module)

    def _permission_by_code(self, code: str) -> Permission:
        permission = self._permissions.get_by_code(PermissionCode.parse(code).value)
        if not permission:
            raise ResourceNotFoundError(f"Permission {code} not found")
        return permission

    # groups
    def _group(self, tenant_id: str, group_id: str) -> PermissionGroup:
        group = self._groups.get_by_id(tenant_id=tenant_id, group_id=group_id)
        if not group:
            raise ResourceNotFoundError("Permission group not found")
        return group

    def _ensure_no_cycle(self, tenant_id: str, group_id: str, parent_id: str) -> None:
        current: Optional[str] = parent_id
        seen = set()
        while current and current not in seen:
            if current == group_id:
                raise ValidationError("A group cannot inherit from itself")
            seen.add(current)
            parent = self._groups.get_by_id(tenant_id=tenant_id, group_id=current)
            current = parent.parent_id if parent else None

    def create_group(
        self,
        *,
        tenant_id: str,
        name: str,
        slug: Optional[str] = None,
        description: Optional[str] = None,
        parent_id: Optional[str] = None,
        priority: int = 0,
    ) -> PermissionGroup:
        name = require_non_empty(name, "Name")
        require_max_length(name, "Name", 128)
        slug = slugify(slug or name)
        if not slug:
            raise ValidationError("Slug is invalid")
        if self._groups.get_by_slug(tenant_id=tenant_id, slug=slug, include_deleted=True):
            raise ConflictError(f"Group with slug '{slug}' already exists")
        if parent_id:
            self._group(tenant_id, parent_id)
        return self._groups.save(
            PermissionGroup(
                id=new_id(),
                tenant_id=tenant_id,
                name=name,
                slug=slug,
                description=description,
                parent_id=parent_id,
                priority=int(priority),
            )
        )

    def update_group(
        self,
        *,
        tenant_id: str,
        group_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
        parent_id: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> PermissionGroup:
        group = self._group(tenant_id, group_id)
        if name is not None:
            group.name = require_non_empty(name, "Name")
        if description is not None:
            group.description = description
        if is_active is not None:
            group.is_active = bool(is_active)
        if priority is not None:
            group.priority = int(priority)
        if parent_id is not None:
            if parent_id:
                self._group(tenant_id, parent_id)
                self._ensure_no_cycle(tenant_id, group_id, parent_id)
            group.parent_id = parent_id or None
        group.updated_at = utc_now()
        self._groups.save(group)
        # Descendant groups inherit too, so every cached user is stale
        self._permission_service.clear_cache()
        return group

    def delete_group(self, *, tenant_id: str, group_id: str) -> None:
        group = self._group(tenant_id, group_id)
        if self._user_groups.list_by_group(tenant_id=tenant_id, group_id=group_id):
            raise BadRequestError("Group still has users assigned")
        group.deleted_at = utc_now()
        group.is_active = False
        self._groups.save(group)
        self._permission_service.clear_cache()

    def list_groups(self, *, tenant_id: str) -> List[PermissionGroup]:
        return self._groups.list_all(tenant_id=tenant_id)

    def add_permission_to_group(
        self,
        *,
        tenant_id: str,
        group_id: str,
        permission_code: str,
        effect: str = "ALLOW",
        conditions: Optional[dict] = None,
    ) -> GroupPermission:
        group = self._group(tenant_id, group_id)
        permission = self._permission_by_code(permission_code)
        effect_value = parse_enum(PermissionEffect, effect, "Effect")
        grant = self._group_permissions.find(group_id=group.id, permission_id=permission.id)
        if grant:
            grant.effect = effect_value
            grant.conditions = conditions
        else:
            grant = GroupPermission(
                id=new_id(),
                group_id=group.id,
                permission_id=permission.id,
                effect=effect_value,
                conditions=conditions,
            )
        self._group_permissions.save(grant)
        self._permission_service.clear_cache()
        return grant

    def remove_permission_from_group(self, *, tenant_id: str, group_id: str, permission_code: str) -> None:
        group = self._group(tenant_id, group_id)
        permission = self._permission_by_code(permission_code)
        grant = self._group_permissions.find(group_id=group.id, permission_id=permission.id)
        if not grant:
            raise ResourceNotFoundError("Permission is not assigned to this group")
        self._group_permissions.delete(grant.id)
        self._permission_service.clear_cache()

    # user assignments
    def _ensure_user(self, tenant_id: str, user_id: str) -> None:
        if not self._users.get_by_id(tenant_id=tenant_id, user_id=user_id):
            raise ResourceNotFoundError("User not found")

    def assign_group_to_user(
        self,
        *,
        tenant_id: str,
        user_id: str,
        group_id: str,
        expires_at: Optional[datetime] = None,
        granted_by: Optional[str] = None,
    ) -> UserGroup:
        self._ensure_user(tenant_id, user_id)
        group = self._group(tenant_id, group_id)
        if not group.is_active:
            raise BadRequestError("Group is inactive")
        if expires_at is not None and expires_at <= utc_now():
            raise ValidationError("Expiration must be in the future")
        existing = self._user_groups.find(tenant_id=tenant_id, user_id=user_id, group_id=group_id)
        if existing and existing.is_active(utc_now()):
            raise ConflictError("User already belongs to this group")
        membership = existing or UserGroup(id=new_id(), tenant_id=tenant_id, user_id=user_id, group_id=group_id)
        membership.expires_at = expires_at
        membership.granted_by = granted_by
        self._user_groups.save(membership)
        self._permission_service.invalidate_user_cache(tenant_id, user_id)
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=granted_by,
                action=AuditAction.PERMISSION_GRANT,
                entity=AuditEntity.PERMISSION_GROUP,
                entity_id=group_id,
                new_data={"userId": user_id, "group": group.slug},
            )
        return membership

    def remove_group_from_user(
        self, *, tenant_id: str, user_id: str, group_id: str, removed_by: Optional[str] = None
    ) -> None:
        membership = self._user_groups.find(tenant_id=tenant_id, user_id=user_id, group_id=group_id)
        if not membership:
            raise ResourceNotFoundError("User is not in this group")
        self._user_groups.delete(membership.id)
        self._permission_service.invalidate_user_cache(tenant_id, user_id)
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=removed_by,
                action=AuditAction.PERMISSION_REVOKE,
                entity=AuditEntity.PERMISSION_GROUP,
                entity_id=group_id,
                old_data={"userId": user_id},
            )

    def grant_direct_permission(
        self,
        *,
        tenant_id: str,
        user_id: str,
        permission_code: str,
        effect: str = "ALLOW",
        expires_at: Optional[datetime] = None,
        granted_by: Optional[str] = None,
    ) -> UserDirectPermission:
        self._ensure_user(tenant_id, user_id)
        permission = self._permission_by_code(permission_code)
        effect_value = parse_enum(PermissionEffect, effect, "Effect")
        grant = self._direct.find(tenant_id=tenant_id, user_id=user_id, permission_id=permission.id)
        if grant is None:
            grant = UserDirectPermission(id=new_id(), tenant_id=tenant_id, user_id=user_id, permission_id=permission.id)
        grant.effect = effect_value
        grant.expires_at = expires_at
        grant.granted_by = granted_by
        self._direct.save(grant)
        self._permission_service.invalidate_user_cache(tenant_id, user_id)
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=granted_by,
                action=AuditAction.PERMISSION_GRANT,
                entity=AuditEntity.PERMISSION,
                entity_id=permission.id,
                new_data={"userId": user_id, "code": permission.code, "effect": effect_value.value},
            )
        return grant

    def revoke_direct_permission(
        self, *, tenant_id: str, user_id: str, permission_code: str, revoked_by: Optional[str] = None
    ) -> None:
        permission = self._permission_by_code(permission_code)
        grant = self._direct.find(tenant_id=tenant_id, user_id=user_id, permission_id=permission.id)
        if not grant:
            raise ResourceNotFoundError("Permission is not granted to this user")
        self._direct.delete(grant.id)
        self._permission_service.invalidate_user_cache(tenant_id, user_id)
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=revoked_by,
                action=AuditAction.PERMISSION_REVOKE,
                entity=AuditEntity.PERMISSION,
                entity_id=permission.id,
                old_data={"userId": user_id, "code": permission.code},
            )

    def list_user_groups(self, *, tenant_id: str, user_id: str) -> List[PermissionGroup]:
        now = utc_now()
        out = []
        for membership in self._user_groups.list_by_user(tenant_id=tenant_id, user_id=user_id):
            if not membership.is_active(now):
                continue
            group = self._groups.get_by_id(tenant_id=tenant_id, group_id=membership.group_id)
            if group:
                out.append(group)
        return out

    def list_user_permissions(self, *, tenant_id: str, user_id: str) -> List[str]:
        self._ensure_user(tenant_id, user_id)
        return self._permission_service.get_user_permission_codes(tenant_id=tenant_id, user_id=user_id)
