from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import as_naive_utc
from ..container import Container
from ..http.auth import current_principal
from ..http.payload import listed, ok, parse_body
from . import permission_codes as perms
from .schemas import (
    CreateGroupBody,
    CreatePermissionBody,
    DirectPermissionBody,
    GroupPermissionBody,
    UpdateGroupBody,
    UserGroupBody,
)


def _expiry(value):
    return as_naive_utc(value) if value else None


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.rbac_service

    # permissions
    @app.route("/v1/rbac/permissions", methods=["POST"], endpoint="create_permission")
    @guards.permission(perms.RBAC_PERMISSIONS_MANAGE)
    def create_permission():
        body = parse_body(CreatePermissionBody)
        return ok(service.create_permission(**body.model_dump()), status=201)

    @app.route("/v1/rbac/permissions", methods=["GET"], endpoint="list_permissions")
    @guards.permission(perms.RBAC_PERMISSIONS_MANAGE)
    def list_permissions():
        return listed(service.list_permissions(module=request.args.get("module")))

    # groups
    @app.route("/v1/rbac/groups", methods=["POST"], endpoint="create_group")
    @guards.permission(perms.RBAC_GROUPS_MANAGE)
    def create_group():
        body = parse_body(CreateGroupBody)
        group = service.create_group(tenant_id=current_principal().tenant_id, **body.model_dump())
        return ok(group, status=201)

    @app.route("/v1/rbac/groups", methods=["GET"], endpoint="list_groups")
    @guards.permission(perms.RBAC_GROUPS_MANAGE)
    def list_groups():
        return listed(service.list_groups(tenant_id=current_principal().tenant_id))

    @app.route("/v1/rbac/groups/<group_id>", methods=["PATCH"], endpoint="update_group")
    @guards.permission(perms.RBAC_GROUPS_MANAGE)
    def update_group(group_id: str):
        body = parse_body(UpdateGroupBody)
        group = service.update_group(tenant_id=current_principal().tenant_id, group_id=group_id, **body.changes())
        return ok(group)

    @app.route("/v1/rbac/groups/<group_id>", methods=["DELETE"], endpoint="delete_group")
    @guards.permission(perms.RBAC_GROUPS_MANAGE)
    def delete_group(group_id: str):
        service.delete_group(tenant_id=current_principal().tenant_id, group_id=group_id)
        return "", 204

    @app.route("/v1/rbac/groups/<group_id>/permissions", methods=["POST"], endpoint="add_permission_to_group")
    @guards.permission(perms.RBAC_GROUPS_MANAGE)
    def add_permission_to_group(group_id: str):
        body = parse_body(GroupPermissionBody)
        grant = service.add_permission_to_group(
            tenant_id=current_principal().tenant_id, group_id=group_id, **body.model_dump()
        )
        return ok(grant, status=201)

    @app.route(
        "/v1/rbac/groups/<group_id>/permissions/<permission_code>",
        methods=["DELETE"],
        endpoint="remove_permission_from_group",
    )
    @guards.permission(perms.RBAC_GROUPS_MANAGE)
    def remove_permission_from_group(group_id: str, permission_code: str):
        service.remove_permission_from_group(
            tenant_id=current_principal().tenant_id, group_id=group_id, permission_code=permission_code
        )
        return "", 204

    # user assignments
    @app.route("/v1/rbac/users/<user_id>/groups", methods=["POST"], endpoint="assign_group_to_user")
    @guards.permission(perms.RBAC_ASSIGNMENTS_MANAGE)
    def assign_group_to_user(user_id: str):
        body = parse_body(UserGroupBody)
        principal = current_principal()
        membership = service.assign_group_to_user(
            tenant_id=principal.tenant_id,
            user_id=user_id,
            group_id=body.group_id,
            expires_at=_expiry(body.expires_at),
            granted_by=principal.user_id,
        )
        return ok(membership, status=201)

    @app.route("/v1/rbac/users/<user_id>/groups", methods=["GET"], endpoint="list_user_groups")
    @guards.permission(perms.RBAC_ASSIGNMENTS_MANAGE)
    def list_user_groups(user_id: str):
        return listed(service.list_user_groups(tenant_id=current_principal().tenant_id, user_id=user_id))

    @app.route("/v1/rbac/users/<user_id>/groups/<group_id>", methods=["DELETE"], endpoint="remove_group_from_user")
    @guards.permission(perms.RBAC_ASSIGNMENTS_MANAGE)
    def remove_group_from_user(user_id: str, group_id: str):
        principal = current_principal()
        service.remove_group_from_user(
            tenant_id=principal.tenant_id, user_id=user_id, group_id=group_id, removed_by=principal.user_id
        )
        return "", 204

    @app.route("/v1/rbac/users/<user_id>/permissions", methods=["POST"], endpoint="grant_direct_permission")
    @guards.permission(perms.RBAC_ASSIGNMENTS_MANAGE)
    def grant_direct_permission(user_id: str):
        body = parse_body(DirectPermissionBody)
        principal = current_principal()
        grant = service.grant_direct_permission(
            tenant_id=principal.tenant_id,
            user_id=user_id,
            permission_code=body.permission_code,
            effect=body.effect,
            expires_at=_expiry(body.expires_at),
            granted_by=principal.user_id,
        )
        return ok(grant, status=201)

    @app.route("/v1/rbac/users/<user_id>/permissions", methods=["GET"], endpoint="list_user_permissions")
    @guards.permission(perms.RBAC_ASSIGNMENTS_MANAGE)
    def list_user_permissions(user_id: str):
        codes = service.list_user_permissions(tenant_id=current_principal().tenant_id, user_id=user_id)
        return {"data": codes}

    @app.route(
        "/v1/rbac/users/<user_id>/permissions/<permission_code>",
        methods=["DELETE"],
        endpoint="revoke_direct_permission",
    )
    @guards.permission(perms.RBAC_ASSIGNMENTS_MANAGE)
    def revoke_direct_permission(user_id: str, permission_code: str):
        principal = current_principal()
        service.revoke_direct_permission(
            tenant_id=principal.tenant_id,
            user_id=user_id,
            permission_code=permission_code,
            revoked_by=principal.user_id,
        )
        return "", 204
