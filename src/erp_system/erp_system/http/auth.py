from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, request

from ..core.exceptions import ForbiddenError, UnauthorizedError
from ..users.model import Principal


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def client_ip() -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def current_principal() -> Principal:
    principal = getattr(g, "principal", None)
    if principal is None:
        raise UnauthorizedError("Authentication required")
    return principal


class AuthGuards:
    """Route decorators bound to the auth and permission services of a container."""

    def __init__(self, auth_service, permission_service):
        self._auth = auth_service
        self._permissions = permission_service

    def authenticate(self) -> Principal:
        principal = getattr(g, "principal", None)
        if principal is not None:
            return principal
        token = bearer_token()
        if not token:
            raise UnauthorizedError("Missing bearer token")
        principal = self._auth.resolve_principal(token)
        g.principal = principal
        return principal

    def login_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            self.authenticate()
            return view(*args, **kwargs)

        return wrapper

    def permission(self, code: str):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                principal = self.authenticate()
                result = self._permissions.check_permission(
                    tenant_id=principal.tenant_id,
                    user_id=principal.user_id,
                    code=code,
                    resource_id=next(iter(kwargs.values()), None),
                    ip=client_ip(),
                )
                if not result.allowed:
                    raise ForbiddenError(f"Missing permission {code}")
                return view(*args, **kwargs)

            return wrapper

        return decorator

    def has(self, code: str) -> bool:
        principal = current_principal()
        return self._permissions.has_permission(
            tenant_id=principal.tenant_id, user_id=principal.user_id, code=code
        )
