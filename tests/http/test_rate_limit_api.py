from __future__ import annotations

import pytest

from erp_system.container import build_in_memory_container
from erp_system.infrastructure.rate_limit import RedisRateLimiter
from erp_system.infrastructure.storage import LocalFileStorage
from erp_system.main import create_app


@pytest.fixture
def limited_client(fake_redis, tmp_path):
    container = build_in_memory_container(
        storage=LocalFileStorage(str(tmp_path)), rate_limiter=RedisRateLimiter(fake_redis)
    )
    return create_app(container=container).test_client()


def test_anonymous_requests_get_headers(limited_client, fake_redis):
    response = limited_client.get("/v1/me")
    assert response.status_code == 401
    assert response.headers["X-RateLimit-Limit"] == "60"
    assert response.headers["X-RateLimit-Remaining"] == "59"
    assert fake_redis.values == {"rate-limit:ip:127.0.0.1": 1}


def test_health_is_not_counted(limited_client, fake_redis):
    limited_client.get("/health")
    assert fake_redis.values == {}


def test_exhausted_ip_gets_429(limited_client, fake_redis):
    fake_redis.values["rate-limit:ip:10.1.1.1"] = 60
    fake_redis.ttls["rate-limit:ip:10.1.1.1"] = 42

    response = limited_client.get("/v1/me", headers={"X-Forwarded-For": "10.1.1.1, 172.16.0.1"})
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "42"
    assert response.get_json()["retryAfter"] == 42

    other = limited_client.get("/v1/me", headers={"X-Forwarded-For": "10.2.2.2"})
    assert other.status_code == 401
