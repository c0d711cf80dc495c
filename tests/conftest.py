from __future__ import annotations

import pytest

from erp_system.container import build_in_memory_container
from erp_system.database.bootstrap import create_schema, ensure_admin, seed_permissions
from erp_system.database.connection import Database
from erp_system.infrastructure.circuit_breaker import reset_all_circuit_breakers
from erp_system.infrastructure.storage import LocalFileStorage
from erp_system.main import create_app

ADMIN_PASSWORD = "admin-secret"


@pytest.fixture(autouse=True)
def _closed_breakers():
    reset_all_circuit_breakers()
    yield
    reset_all_circuit_breakers()


@pytest.fixture
def container(tmp_path):
    return build_in_memory_container(storage=LocalFileStorage(str(tmp_path / "uploads")))


@pytest.fixture
def tenant(container):
    return container.tenant_service.create_tenant(name="Acme")


@pytest.fixture
def admin(container):
    seed_permissions(container.rbac_service, container.repos.permissions)
    return ensure_admin(
        tenant_service=container.tenant_service,
        user_service=container.user_service,
        rbac_service=container.rbac_service,
        tenants_repo=container.repos.tenants,
        users_repo=container.repos.users,
        groups_repo=container.repos.groups,
        tenant_name="Acme",
        username="admin",
        password=ADMIN_PASSWORD,
    )


@pytest.fixture
def app(container):
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(client, admin):
    response = client.post(
        "/v1/auth/login/password",
        json={"tenantId": admin.tenant_id, "identifier": "admin", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.get_json()
    return {"Authorization": f"Bearer {response.get_json()['token']}"}


@pytest.fixture
def database():
    db = Database("sqlite://")
    create_schema(db)
    yield db
    db.dispose()


class FakeRedis:
    """Just enough of the redis client for the rate limiter."""

    def __init__(self):
        self.values = {}
        self.ttls = {}

    def incr(self, key):
        self.values[key] = self.values.get(key, 0) + 1
        return self.values[key]

    def expire(self, key, seconds):
        self.ttls[key] = seconds
        return True

    def ttl(self, key):
        if key not in self.values:
            return -2
        return self.ttls.get(key, -1)

    def get(self, key):
        value = self.values.get(key)
        return None if value is None else str(value).encode()

    def delete(self, key):
        self.values.pop(key, None)
        self.ttls.pop(key, None)
        return 1


@pytest.fixture
def fake_redis():
    return FakeRedis()
