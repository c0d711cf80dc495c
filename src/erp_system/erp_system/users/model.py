from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import utc_now


@dataclass
class User:
    id: str
    tenant_id: str
    username: str
    email: str
    password_hash: str
    access_pin_hash: Optional[str] = None
    failed_login_attempts: int = 0
    blocked_until: Optional[datetime] = None
    force_password_reset: bool = False
    last_login_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def is_blocked(self, now: datetime) -> bool:
        return self.blocked_until is not None and self.blocked_until > now

    def register_failed_attempt(self, now: datetime, *, max_attempts: int, block_minutes: int) -> bool:
        """Count a failed login; returns True when this attempt blocked the user."""
        self.failed_login_attempts += 1
        self.updated_at = now
        if self.failed_login_attempts >= max_attempts:
            self.blocked_until = now + timedelta(minutes=block_minutes)
            self.failed_login_attempts = 0
            return True
        return False

    def register_successful_login(self, now: datetime) -> None:
        self.failed_login_attempts = 0
        self.blocked_until = None
        self.last_login_at = now
        self.updated_at = now


@dataclass
class Session:
    id: str
    tenant_id: str
    user_id: str
    expires_at: datetime
    ip: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    last_used_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None

    def is_active(self, now: datetime) -> bool:
        return self.revoked_at is None and self.expires_at > now


@dataclass(frozen=True)
class Principal:
    """The authenticated caller attached to a request."""

    user_id: str
    tenant_id: str
    session_id: str
    username: str
