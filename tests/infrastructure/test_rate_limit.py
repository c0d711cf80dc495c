from __future__ import annotations

import redis

from erp_system.infrastructure.rate_limit import (
    ANONYMOUS,
    AUTHENTICATED,
    PREMIUM,
    RateLimitTier,
    RedisRateLimiter,
    select_tier,
)


class BrokenRedis:
    def incr(self, key):
        raise redis.ConnectionError("connection refused")


def test_tier_selection():
    assert select_tier(authenticated=False) is ANONYMOUS
    assert select_tier(authenticated=True, permission_codes=["hr.employees.read"]) is AUTHENTICATED
    assert select_tier(authenticated=True, permission_codes=["rbac.groups.manage"]) is PREMIUM
    assert select_tier(authenticated=True, permission_codes=["admin.*"]) is PREMIUM


def test_hit_counts_within_window(fake_redis):
    limiter = RedisRateLimiter(fake_redis)
    tier = RateLimitTier("tiny", 2, window_seconds=30)

    first = limiter.hit("k", tier)
    assert (first.allowed, first.remaining, first.reset_in) == (True, 1, 30)
    limiter.hit("k", tier)
    third = limiter.hit("k", tier)
    assert not third.allowed
    assert third.remaining == 0
    assert third.headers() == {"X-RateLimit-Limit": "2", "X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "30"}


def test_check_keys_by_user_or_ip(fake_redis):
    limiter = RedisRateLimiter(fake_redis)
    limiter.check(user_id="u1", ip="10.0.0.1")
    limiter.check(user_id=None, ip="10.0.0.1")
    limiter.check(user_id=None, ip="10.0.0.1")
    assert fake_redis.values == {"rate-limit:user:u1": 1, "rate-limit:ip:10.0.0.1": 2}

    assert limiter.get_rate_limit_status("10.0.0.1", is_user=False) == {"count": 2, "ttl": 60}
    limiter.reset_ip_rate_limit("10.0.0.1")
    limiter.reset_user_rate_limit("u1")
    assert limiter.get_rate_limit_status("u1") == {"count": 0, "ttl": -2}


def test_check_fails_open_when_redis_is_down():
    assert RedisRateLimiter(BrokenRedis()).check(user_id="u1", ip="10.0.0.1") is None
