from __future__ import annotations

from typing import Optional

from flask import Flask, g, jsonify, request

from ..core.exceptions import UnauthorizedError
from ..infrastructure.rate_limit import RedisRateLimiter
from .auth import AuthGuards, client_ip

SKIP_PATHS = ("/health", "/v1/health")


def register_rate_limit(app: Flask, limiter: Optional[RedisRateLimiter], guards: AuthGuards, permission_service) -> None:
    if limiter is None:
        return

    @app.before_request
    def apply_rate_limit():
        if request.path.startswith(SKIP_PATHS):
            return None

        user_id = None
        codes = []
        try:
            principal = guards.authenticate()
            user_id = principal.user_id
            codes = permission_service.get_user_permission_codes(
                tenant_id=principal.tenant_id, user_id=principal.user_id
            )
        except UnauthorizedError:
            # route decorators reject bad tokens, here they only count as anonymous
            g.pop("principal", None)

        result = limiter.check(user_id=user_id, ip=client_ip() or "unknown", permission_codes=codes)
        if result is None:
            return None
        g.rate_limit = result
        if not result.allowed:
            response = jsonify(
                {
                    "message": f"Rate limit exceeded. Try again in {result.reset_in} seconds.",
                    "retryAfter": result.reset_in,
                }
            )
            response.status_code = 429
            response.headers.update(result.headers())
            response.headers["Retry-After"] = str(result.reset_in)
            return response
        return None

    @app.after_request
    def add_rate_limit_headers(response):
        result = getattr(g, "rate_limit", None)
        if result is not None:
            response.headers.update(result.headers())
        return response
