from __future__ import annotations

from datetime import timedelta

import pytest

from erp_system.core.exceptions import (
    AuthenticationError,
    ConflictError,
    PasswordResetRequiredError,
    PinSetupRequiredError,
    UnauthorizedError,
    UserBlockedError,
    ValidationError,
)
from erp_system.users.memory_repository import InMemorySessionRepository, InMemoryUserRepository
from erp_system.users.service import AuthService, UserService
from erp_system.users.tokens import TokenService

TENANT = "tenant-1"


@pytest.fixture
def services():
    users = InMemoryUserRepository()
    sessions = InMemorySessionRepository()
    auth = AuthService(users, sessions, TokenService("secret"), max_attempts=3, block_minutes=15)
    user_service = UserService(users, sessions)
    user = user_service.register_user(tenant_id=TENANT, username="ana", email="ana@acme.com", password="secret1")
    return auth, user_service, user


def test_register_rejects_duplicates_and_bad_usernames(services):
    _, user_service, _ = services
    with pytest.raises(ConflictError):
        user_service.register_user(tenant_id=TENANT, username="ana", email="other@acme.com", password="secret1")
    with pytest.raises(ConflictError):
        user_service.register_user(tenant_id=TENANT, username="bob", email="ANA@acme.com", password="secret1")
    with pytest.raises(ValidationError):
        user_service.register_user(tenant_id=TENANT, username="a b", email="ab@acme.com", password="secret1")
    # same username is allowed in another tenant
    user_service.register_user(tenant_id="tenant-2", username="ana", email="ana@acme.com", password="secret1")


def test_password_login_by_username_or_email(services):
    auth, _, user = services
    result = auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1")
    assert result.user.id == user.id
    assert result.user.last_login_at is not None

    result = auth.authenticate_with_password(tenant_id=TENANT, identifier="ana@acme.com", password="secret1")
    principal = auth.resolve_principal(result.token)
    assert principal.user_id == user.id
    assert principal.session_id == result.session.id


def test_wrong_tenant_cannot_login(services):
    auth, _, _ = services
    with pytest.raises(AuthenticationError):
        auth.authenticate_with_password(tenant_id="tenant-2", identifier="ana", password="secret1")


def test_failed_attempts_block_user(services):
    auth, _, _ = services
    for _ in range(2):
        with pytest.raises(AuthenticationError):
            auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="wrong")
    with pytest.raises(UserBlockedError) as blocked:
        auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="wrong")
    assert blocked.value.blocked_until is not None

    # even the right password is refused while blocked
    with pytest.raises(UserBlockedError):
        auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1")


def test_unblock_allows_login_again(services):
    auth, user_service, user = services
    user_service.block_user(tenant_id=TENANT, user_id=user.id, minutes=30)
    with pytest.raises(UserBlockedError):
        auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1")
    user_service.unblock_user(tenant_id=TENANT, user_id=user.id)
    assert auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1").token


def test_pin_login_requires_configured_pin(services):
    auth, user_service, user = services
    with pytest.raises(PinSetupRequiredError):
        auth.authenticate_with_access_pin(tenant_id=TENANT, identifier="ana", pin="1234")

    with pytest.raises(ValidationError):
        user_service.set_access_pin(tenant_id=TENANT, user_id=user.id, pin="12a4")
    user_service.set_access_pin(tenant_id=TENANT, user_id=user.id, pin="1234")
    assert auth.authenticate_with_access_pin(tenant_id=TENANT, identifier="ana", pin="1234").token
    with pytest.raises(AuthenticationError):
        auth.authenticate_with_access_pin(tenant_id=TENANT, identifier="ana", pin="4321")


def test_forced_reset_issues_token_and_reset_clears_flag(services):
    auth, user_service, user = services
    user_service.force_password_reset(tenant_id=TENANT, user_id=user.id)
    with pytest.raises(PasswordResetRequiredError) as required:
        auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1")

    auth.reset_password_with_token(token=required.value.reset_token, new_password="brand-new")
    assert auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="brand-new").token


def test_logout_revokes_session(services):
    auth, _, user = services
    result = auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1")
    auth.logout(tenant_id=TENANT, session_id=result.session.id)
    with pytest.raises(UnauthorizedError):
        auth.resolve_principal(result.token)
    assert auth.list_sessions(tenant_id=TENANT, user_id=user.id) == []


def test_refresh_extends_expiry(services):
    auth, _, _ = services
    result = auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1")
    refreshed = auth.refresh_session(tenant_id=TENANT, session_id=result.session.id)
    assert refreshed.session.expires_at >= result.session.expires_at
    assert refreshed.session.last_used_at is not None


def test_expired_session_is_rejected(services):
    auth, _, _ = services
    result = auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1")
    session = result.session
    session.expires_at = session.created_at - timedelta(seconds=1)
    auth._sessions.save(session)
    with pytest.raises(UnauthorizedError):
        auth.resolve_principal(result.token)


def test_tampered_token_is_rejected(services):
    auth, _, _ = services
    with pytest.raises(UnauthorizedError):
        auth.resolve_principal("not-a-token")


def test_change_password_checks_current(services):
    auth, user_service, user = services
    with pytest.raises(AuthenticationError):
        user_service.change_password(tenant_id=TENANT, user_id=user.id, current_password="x", new_password="abcdef")
    with pytest.raises(ValidationError):
        user_service.change_password(
            tenant_id=TENANT, user_id=user.id, current_password="secret1", new_password="secret1"
        )
    user_service.change_password(tenant_id=TENANT, user_id=user.id, current_password="secret1", new_password="abcdef")
    assert auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="abcdef").token


def test_delete_user_revokes_sessions_and_forbids_self_delete(services):
    auth, user_service, user = services
    auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1")
    with pytest.raises(ValidationError):
        user_service.delete_user(tenant_id=TENANT, user_id=user.id, actor_id=user.id)

    user_service.delete_user(tenant_id=TENANT, user_id=user.id, actor_id="someone-else")
    assert auth.list_sessions(tenant_id=TENANT, user_id=user.id) == []
    with pytest.raises(AuthenticationError):
        auth.authenticate_with_password(tenant_id=TENANT, identifier="ana", password="secret1")
