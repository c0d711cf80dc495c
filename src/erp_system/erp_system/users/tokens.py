from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_ACCESS_TOKEN_TTL_SECONDS, RESET_TOKEN_MINUTES
from ..core.exceptions import UnauthorizedError


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    tenant_id: str
    session_id: str


class TokenService:
    """Signed bearer tokens (access and password reset)."""

    def __init__(
        self,
        secret_key: str,
        *,
        access_ttl_seconds: int = DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
        reset_ttl_seconds: int = RESET_TOKEN_MINUTES * 60,
    ):
        self._access = URLSafeTimedSerializer(secret_key, salt="erp-access-token")
        self._reset = URLSafeTimedSerializer(secret_key, salt="erp-password-reset")
        self._access_ttl = access_ttl_seconds
        self._reset_ttl = reset_ttl_seconds

    def issue_access_token(self, *, user_id: str, tenant_id: str, session_id: str) -> str:
        return self._access.dumps({"sub": user_id, "tid": tenant_id, "sid": session_id})

    def decode_access_token(self, token: str) -> TokenClaims:
        try:
            data = self._access.loads(token, max_age=self._access_ttl)
        except SignatureExpired:
            raise UnauthorizedError("Token expired")
        except BadSignature:
            raise UnauthorizedError("Invalid token")
        return TokenClaims(user_id=data["sub"], tenant_id=data["tid"], session_id=data["sid"])

    def issue_reset_token(self, *, user_id: str, tenant_id: str) -> str:
        return self._reset.dumps({"sub": user_id, "tid": tenant_id})

    def decode_reset_token(self, token: str) -> Tuple[str, str]:
        try:
            data = self._reset.loads(token, max_age=self._reset_ttl)
        except SignatureExpired:
            raise UnauthorizedError("Reset token expired")
        except BadSignature:
            raise UnauthorizedError("Invalid reset token")
        return data["sub"], data["tid"]
