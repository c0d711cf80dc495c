from __future__ import annotations

from flask import Flask, request

from ..common.serialization import to_dto
from ..container import Container
from ..http.auth import client_ip, current_principal
from ..http.payload import listed, ok, page_params, paged, parse_body
from ..rbac import permission_codes as perms
from .schemas import (
    BlockUserBody,
    ChangePasswordBody,
    CreateUserBody,
    PasswordLoginBody,
    PinLoginBody,
    RegisterBody,
    ResetPasswordBody,
    SetPinBody,
)

_SECRET_FIELDS = ("password_hash", "access_pin_hash")


def user_dto(user) -> dict:
    return to_dto(user, exclude=_SECRET_FIELDS, extra={"has_access_pin": bool(user.access_pin_hash)})


def auth_dto(result) -> dict:
    return {
        "token": result.token,
        "user": user_dto(result.user),
        "sessionId": result.session.id,
        "expiresAt": result.session.expires_at.isoformat(),
    }


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    auth = container.auth_service
    users = container.user_service

    # auth
    @app.route("/v1/auth/register", methods=["POST"], endpoint="register_user")
    def register_user():
        body = parse_body(RegisterBody)
        container.tenant_service.get_tenant(tenant_id=body.tenant_id)
        user = users.register_user(
            tenant_id=body.tenant_id, username=body.username, email=body.email, password=body.password
        )
        return ok(user, user_dto, status=201)

    @app.route("/v1/auth/login/password", methods=["POST"], endpoint="login_password")
    def login_password():
        body = parse_body(PasswordLoginBody)
        result = auth.authenticate_with_password(
            tenant_id=body.tenant_id, identifier=body.identifier, password=body.password, ip=client_ip()
        )
        return auth_dto(result)

    @app.route("/v1/auth/login/pin", methods=["POST"], endpoint="login_pin")
    def login_pin():
        body = parse_body(PinLoginBody)
        result = auth.authenticate_with_access_pin(
            tenant_id=body.tenant_id, identifier=body.identifier, pin=body.pin, ip=client_ip()
        )
        return auth_dto(result)

    @app.route("/v1/auth/refresh", methods=["POST"], endpoint="refresh_session")
    @guards.login_required
    def refresh_session():
        principal = current_principal()
        return auth_dto(auth.refresh_session(tenant_id=principal.tenant_id, session_id=principal.session_id))

    @app.route("/v1/auth/logout", methods=["POST"], endpoint="logout")
    @guards.login_required
    def logout():
        principal = current_principal()
        auth.logout(tenant_id=principal.tenant_id, session_id=principal.session_id)
        return "", 204

    @app.route("/v1/auth/reset-password", methods=["POST"], endpoint="reset_password")
    def reset_password():
        body = parse_body(ResetPasswordBody)
        auth.reset_password_with_token(token=body.token, new_password=body.new_password)
        return "", 204

    # me
    @app.route("/v1/me", methods=["GET"], endpoint="get_me")
    @guards.login_required
    def get_me():
        principal = current_principal()
        user = users.get_user(tenant_id=principal.tenant_id, user_id=principal.user_id)
        out = user_dto(user)
        out["permissions"] = container.permission_service.get_user_permission_codes(
            tenant_id=principal.tenant_id, user_id=principal.user_id
        )
        return out

    @app.route("/v1/me/password", methods=["PATCH"], endpoint="change_my_password")
    @guards.login_required
    def change_my_password():
        body = parse_body(ChangePasswordBody)
        principal = current_principal()
        users.change_password(
            tenant_id=principal.tenant_id,
            user_id=principal.user_id,
            current_password=body.current_password,
            new_password=body.new_password,
        )
        return "", 204

    @app.route("/v1/me/pin", methods=["PATCH"], endpoint="set_my_pin")
    @guards.login_required
    def set_my_pin():
        body = parse_body(SetPinBody)
        principal = current_principal()
        users.set_access_pin(tenant_id=principal.tenant_id, user_id=principal.user_id, pin=body.pin)
        return "", 204

    @app.route("/v1/me/sessions", methods=["GET"], endpoint="list_my_sessions")
    @guards.login_required
    def list_my_sessions():
        principal = current_principal()
        sessions = auth.list_sessions(tenant_id=principal.tenant_id, user_id=principal.user_id)
        return listed(sessions, lambda s: to_dto(s, extra={"is_current": s.id == principal.session_id}))

    @app.route("/v1/me/sessions/<session_id>", methods=["DELETE"], endpoint="revoke_my_session")
    @guards.login_required
    def revoke_my_session(session_id: str):
        principal = current_principal()
        auth.revoke_session(tenant_id=principal.tenant_id, user_id=principal.user_id, session_id=session_id)
        return "", 204

    # users
    @app.route("/v1/users", methods=["POST"], endpoint="create_user")
    @guards.permission(perms.CORE_USERS_CREATE)
    def create_user():
        body = parse_body(CreateUserBody)
        principal = current_principal()
        user = users.register_user(tenant_id=principal.tenant_id, actor_id=principal.user_id, **body.model_dump())
        return ok(user, user_dto, status=201)

    @app.route("/v1/users", methods=["GET"], endpoint="list_users")
    @guards.permission(perms.CORE_USERS_READ)
    def list_users():
        page = users.list_users(
            tenant_id=current_principal().tenant_id, params=page_params(), search=request.args.get("search")
        )
        return paged(page, user_dto)

    @app.route("/v1/users/<user_id>", methods=["GET"], endpoint="get_user")
    @guards.permission(perms.CORE_USERS_READ)
    def get_user(user_id: str):
        return ok(users.get_user(tenant_id=current_principal().tenant_id, user_id=user_id), user_dto)

    @app.route("/v1/users/<user_id>", methods=["DELETE"], endpoint="delete_user")
    @guards.permission(perms.CORE_USERS_DELETE)
    def delete_user(user_id: str):
        principal = current_principal()
        users.delete_user(tenant_id=principal.tenant_id, user_id=user_id, actor_id=principal.user_id)
        return "", 204

    @app.route("/v1/users/<user_id>/force-password-reset", methods=["PATCH"], endpoint="force_password_reset")
    @guards.permission(perms.CORE_USERS_UPDATE)
    def force_password_reset(user_id: str):
        return ok(users.force_password_reset(tenant_id=current_principal().tenant_id, user_id=user_id), user_dto)

    @app.route("/v1/users/<user_id>/block", methods=["PATCH"], endpoint="block_user")
    @guards.permission(perms.CORE_USERS_UPDATE)
    def block_user(user_id: str):
        body = parse_body(BlockUserBody)
        user = users.block_user(tenant_id=current_principal().tenant_id, user_id=user_id, minutes=body.minutes)
        return ok(user, user_dto)

    @app.route("/v1/users/<user_id>/unblock", methods=["PATCH"], endpoint="unblock_user")
    @guards.permission(perms.CORE_USERS_UPDATE)
    def unblock_user(user_id: str):
        return ok(users.unblock_user(tenant_id=current_principal().tenant_id, user_id=user_id), user_dto)
