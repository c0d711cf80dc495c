"""Fixed-window request rate limiting backed by Redis."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import redis

from ..logging_config import get_logger

logger = get_logger(__name__)

WINDOW_SECONDS = 60


@dataclass(frozen=True)
class RateLimitTier:
    name: str
    max_requests: int
    window_seconds: int = WINDOW_SECONDS


ANONYMOUS = RateLimitTier("anonymous", 60)
AUTHENTICATED = RateLimitTier("authenticated", 200)
PREMIUM = RateLimitTier("premium", 500)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_in: int

    def headers(self) -> dict:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_in),
        }


def is_premium(permission_codes: Iterable[str]) -> bool:
    return any(code.startswith("rbac.") or code == "admin.*" for code in permission_codes)


def select_tier(*, authenticated: bool, permission_codes: Iterable[str] = ()) -> RateLimitTier:
    if not authenticated:
        return ANONYMOUS
    return PREMIUM if is_premium(permission_codes) else AUTHENTICATED


def user_key(user_id: str) -> str:
    return f"rate-limit:user:{user_id}"


def ip_key(ip: str) -> str:
    return f"rate-limit:ip:{ip}"


class RedisRateLimiter:
    def __init__(self, client: redis.Redis):
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisRateLimiter":
        return cls(redis.Redis.from_url(url, socket_timeout=2, socket_connect_timeout=2))

    def hit(self, key: str, tier: RateLimitTier) -> RateLimitResult:
        """Count one request; raises redis.RedisError when Redis is unavailable."""
        count = int(self._redis.incr(key))
        if count == 1:
            self._redis.expire(key, tier.window_seconds)
        ttl = int(self._redis.ttl(key))
        if ttl < 0:
            ttl = tier.window_seconds
        return RateLimitResult(
            allowed=count <= tier.max_requests,
            limit=tier.max_requests,
            remaining=max(0, tier.max_requests - count),
            reset_in=ttl,
        )

    def check(
        self,
        *,
        user_id: Optional[str],
        ip: str,
        permission_codes: Iterable[str] = (),
    ) -> Optional[RateLimitResult]:
        """Like hit() but fails open: returns None when Redis errors."""
        tier = select_tier(authenticated=user_id is not None, permission_codes=permission_codes)
        key = user_key(user_id) if user_id else ip_key(ip)
        try:
            return self.hit(key, tier)
        except redis.RedisError:
            logger.warning("Rate limiter unavailable, allowing request for %s", key, exc_info=True)
            return None

    def reset_user_rate_limit(self, user_id: str) -> None:
        self._redis.delete(user_key(user_id))

    def reset_ip_rate_limit(self, ip: str) -> None:
        self._redis.delete(ip_key(ip))

    def get_rate_limit_status(self, identifier: str, *, is_user: bool = True) -> dict:
        key = user_key(identifier) if is_user else ip_key(identifier)
        raw = self._redis.get(key)
        return {"count": int(raw) if raw is not None else 0, "ttl": int(self._redis.ttl(key))}
