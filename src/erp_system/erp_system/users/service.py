from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import require_email, require_min_length, require_non_empty, require_positive
from ..core.constants import BLOCK_MINUTES, DEFAULT_SESSION_DAYS, MAX_LOGIN_ATTEMPTS
from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    PasswordResetRequiredError,
    PinSetupRequiredError,
    ResourceNotFoundError,
    UnauthorizedError,
    UserBlockedError,
    ValidationError,
)
from .model import Principal, Session, User
from .repository import SessionRepository, UserRepository
from .tokens import TokenService

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_.-]{3,32}$")
_PIN_RE = re.compile(r"^\d{4,6}$")


def _check_secret(secret_hash: Optional[str], candidate: str) -> bool:
    if not secret_hash or candidate is None:
        return False
    try:
        return check_password_hash(secret_hash, candidate)
    except (TypeError, ValueError):
        # e.g. placeholder or corrupted hashes
        return False


@dataclass(frozen=True)
class AuthResult:
    user: User
    session: Session
    token: str


class AuthService:
    """Use case: authenticate users and manage their sessions."""

    def __init__(
        self,
        users: UserRepository,
        sessions: SessionRepository,
        tokens: TokenService,
        audit: Optional[AuditService] = None,
        *,
        session_days: int = DEFAULT_SESSION_DAYS,
        max_attempts: int = MAX_LOGIN_ATTEMPTS,
        block_minutes: int = BLOCK_MINUTES,
    ):
        self._users = users
        self._sessions = sessions
        self._tokens = tokens
        self._audit = audit
        self._session_days = session_days
        self._max_attempts = max_attempts
        self._block_minutes = block_minutes

    def _find_user(self, tenant_id: str, identifier: str) -> User:
        identifier = (identifier or "").strip()
        if not identifier:
            raise AuthenticationError("Invalid credentials")
        if "@" in identifier:
            user = self._users.get_by_email(tenant_id=tenant_id, email=identifier)
        else:
            user = self._users.get_by_username(tenant_id=tenant_id, username=identifier)
        if not user:
            raise AuthenticationError("Invalid credentials")
        return user

    def _ensure_can_login(self, user: User) -> None:
        now = utc_now()
        if user.is_blocked(now):
            raise UserBlockedError("User is temporarily blocked", blocked_until=user.blocked_until)
        if user.force_password_reset:
            token = self._tokens.issue_reset_token(user_id=user.id, tenant_id=user.tenant_id)
            raise PasswordResetRequiredError("Password reset required", reset_token=token)

    def _fail(self, user: User) -> None:
        blocked = user.register_failed_attempt(
            utc_now(), max_attempts=self._max_attempts, block_minutes=self._block_minutes
        )
        self._users.save(user)
        if blocked:
            raise UserBlockedError("Too many failed attempts, user blocked", blocked_until=user.blocked_until)
        raise AuthenticationError("Invalid credentials")

    def _succeed(self, user: User, *, ip: Optional[str], method: str) -> AuthResult:
        now = utc_now()
        user.register_successful_login(now)
        self._users.save(user)

        session = Session(
            id=new_id(),
            tenant_id=user.tenant_id,
            user_id=user.id,
            ip=ip,
            created_at=now,
            expires_at=now + timedelta(days=self._session_days),
        )
        self._sessions.save(session)
        token = self._tokens.issue_access_token(user_id=user.id, tenant_id=user.tenant_id, session_id=session.id)

        if self._audit:
            self._audit.log(
                tenant_id=user.tenant_id,
                user_id=user.id,
                action=AuditAction.LOGIN,
                entity=AuditEntity.SESSION,
                entity_id=session.id,
                metadata={"method": method},
                ip=ip,
            )
        return AuthResult(user=user, session=session, token=token)

    def authenticate_with_password(
        self, *, tenant_id: str, identifier: str, password: str, ip: Optional[str] = None
    ) -> AuthResult:
        user = self._find_user(tenant_id, identifier)
        self._ensure_can_login(user)
        if not _check_secret(user.password_hash, password):
            self._fail(user)
        return self._succeed(user, ip=ip, method="password")

    def authenticate_with_access_pin(
        self, *, tenant_id: str, identifier: str, pin: str, ip: Optional[str] = None
    ) -> AuthResult:
        user = self._find_user(tenant_id, identifier)
        self._ensure_can_login(user)
        if not user.access_pin_hash:
            raise PinSetupRequiredError("Access PIN not configured")
        if not _check_secret(user.access_pin_hash, pin):
            self._fail(user)
        return self._succeed(user, ip=ip, method="access_pin")

    def resolve_principal(self, token: str) -> Principal:
        claims = self._tokens.decode_access_token(token)
        session = self._sessions.get_by_id(session_id=claims.session_id)
        if not session or session.user_id != claims.user_id or not session.is_active(utc_now()):
            raise UnauthorizedError("Session expired or revoked")
        user = self._users.get_by_id(tenant_id=claims.tenant_id, user_id=claims.user_id)
        if not user:
            raise UnauthorizedError("User not found")
        return Principal(user_id=user.id, tenant_id=user.tenant_id, session_id=session.id, username=user.username)

    def _active_session(self, tenant_id: str, session_id: str) -> Session:
        session = self._sessions.get_by_id(session_id=session_id)
        if not session or session.tenant_id != tenant_id or not session.is_active(utc_now()):
            raise UnauthorizedError("Session expired or revoked")
        return session

    def refresh_session(self, *, tenant_id: str, session_id: str) -> AuthResult:
        session = self._active_session(tenant_id, session_id)
        user = self._users.get_by_id(tenant_id=tenant_id, user_id=session.user_id)
        if not user:
            raise UnauthorizedError("User not found")
        now = utc_now()
        session.expires_at = now + timedelta(days=self._session_days)
        session.last_used_at = now
        self._sessions.save(session)
        token = self._tokens.issue_access_token(user_id=user.id, tenant_id=tenant_id, session_id=session.id)
        return AuthResult(user=user, session=session, token=token)

    def logout(self, *, tenant_id: str, session_id: str) -> None:
        session = self._active_session(tenant_id, session_id)
        session.revoked_at = utc_now()
        self._sessions.save(session)
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=session.user_id,
                action=AuditAction.LOGOUT,
                entity=AuditEntity.SESSION,
                entity_id=session.id,
            )

    def list_sessions(self, *, tenant_id: str, user_id: str) -> List[Session]:
        return self._sessions.list_active_for_user(tenant_id=tenant_id, user_id=user_id)

    def revoke_session(self, *, tenant_id: str, user_id: str, session_id: str) -> None:
        session = self._sessions.get_by_id(session_id=session_id)
        if not session or session.tenant_id != tenant_id or session.user_id != user_id:
            raise ResourceNotFoundError("Session not found")
        if session.revoked_at is None:
            session.revoked_at = utc_now()
            self._sessions.save(session)

    def reset_password_with_token(self, *, token: str, new_password: str) -> None:
        user_id, tenant_id = self._tokens.decode_reset_token(token)
        user = self._users.get_by_id(tenant_id=tenant_id, user_id=user_id)
        if not user:
            raise UnauthorizedError("Invalid reset token")
        require_min_length(new_password, "Password", 6)
        user.password_hash = generate_password_hash(new_password)
        user.force_password_reset = False
        user.failed_login_attempts = 0
        user.blocked_until = None
        user.updated_at = utc_now()
        self._users.save(user)


class UserService:
    """Use case: manage user accounts."""

    def __init__(self, users: UserRepository, sessions: SessionRepository, audit: Optional[AuditService] = None):
        self._users = users
        self._sessions = sessions
        self._audit = audit

    def _get(self, tenant_id: str, user_id: str) -> User:
        user = self._users.get_by_id(tenant_id=tenant_id, user_id=user_id)
        if not user:
            raise ResourceNotFoundError("User not found")
        return user

    def register_user(
        self,
        *,
        tenant_id: str,
        username: str,
        email: str,
        password: str,
        actor_id: Optional[str] = None,
    ) -> User:
        username = require_non_empty(username, "Username")
        if not _USERNAME_RE.match(username):
            raise ValidationError("Username must have 3-32 letters, digits, '.', '_' or '-'")
        email = require_email(email)
        require_min_length(password, "Password", 6)

        # deleted users keep their username and email reserved
        if self._users.get_by_username(tenant_id=tenant_id, username=username, include_deleted=True):
            raise ConflictError("Username already in use")
        if self._users.get_by_email(tenant_id=tenant_id, email=email, include_deleted=True):
            raise ConflictError("Email already in use")

        user = self._users.save(
            User(
                id=new_id(),
                tenant_id=tenant_id,
                username=username,
                email=email,
                password_hash=generate_password_hash(password),
            )
        )
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=actor_id,
                action=AuditAction.CREATE,
                entity=AuditEntity.USER,
                entity_id=user.id,
                new_data={"username": user.username, "email": user.email},
            )
        return user

    def get_user(self, *, tenant_id: str, user_id: str) -> User:
        return self._get(tenant_id, user_id)

    def list_users(self, *, tenant_id: str, params: PageParams, search: Optional[str] = None) -> Page[User]:
        items, total = self._users.list_page(tenant_id=tenant_id, params=params, search=search)
        return Page(items=items, total=total, params=params)

    def change_password(self, *, tenant_id: str, user_id: str, current_password: str, new_password: str) -> None:
        user = self._get(tenant_id, user_id)
        if not _check_secret(user.password_hash, current_password):
            raise AuthenticationError("Current password is incorrect")
        require_min_length(new_password, "Password", 6)
        if current_password == new_password:
            raise ValidationError("New password must differ from the current one")
        user.password_hash = generate_password_hash(new_password)
        user.updated_at = utc_now()
        self._users.save(user)

    def set_access_pin(self, *, tenant_id: str, user_id: str, pin: str) -> None:
        user = self._get(tenant_id, user_id)
        if not pin or not _PIN_RE.match(pin):
            raise ValidationError("PIN must have 4 to 6 digits")
        user.access_pin_hash = generate_password_hash(pin)
        user.updated_at = utc_now()
        self._users.save(user)

    def force_password_reset(self, *, tenant_id: str, user_id: str) -> User:
        user = self._get(tenant_id, user_id)
        user.force_password_reset = True
        user.updated_at = utc_now()
        return self._users.save(user)

    def block_user(self, *, tenant_id: str, user_id: str, minutes: int) -> User:
        require_positive(minutes, "Minutes")
        user = self._get(tenant_id, user_id)
        user.blocked_until = utc_now() + timedelta(minutes=int(minutes))
        user.updated_at = utc_now()
        return self._users.save(user)

    def unblock_user(self, *, tenant_id: str, user_id: str) -> User:
        user = self._get(tenant_id, user_id)
        user.blocked_until = None
        user.failed_login_attempts = 0
        user.updated_at = utc_now()
        return self._users.save(user)

    def delete_user(self, *, tenant_id: str, user_id: str, actor_id: Optional[str] = None) -> None:
        if actor_id is not None and actor_id == user_id:
            raise ValidationError("You cannot delete your own account")
        user = self._get(tenant_id, user_id)
        now = utc_now()
        user.deleted_at = now
        self._users.save(user)
        for session in self._sessions.list_active_for_user(tenant_id=tenant_id, user_id=user_id):
            session.revoked_at = now
            self._sessions.save(session)
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=actor_id,
                action=AuditAction.DELETE,
                entity=AuditEntity.USER,
                entity_id=user_id,
                old_data={"username": user.username},
            )
