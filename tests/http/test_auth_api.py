from __future__ import annotations


def test_health_is_public(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "ok"
    assert "circuitBreakers" in body


def test_login_with_wrong_password(client, admin):
    response = client.post(
        "/v1/auth/login/password",
        json={"tenantId": admin.tenant_id, "identifier": "admin", "password": "nope"},
    )
    assert response.status_code == 401
    assert response.get_json()["message"] == "Invalid credentials"


def test_login_body_is_validated(client):
    response = client.post("/v1/auth/login/password", json={"identifier": "admin"})
    assert response.status_code == 400
    body = response.get_json()
    assert body["message"] == "Validation failed"
    assert {e["field"] for e in body["errors"]} >= {"tenantId", "password"}


def test_me_requires_token(client):
    assert client.get("/v1/me").status_code == 401
    assert client.get("/v1/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_me_returns_profile_without_secrets(client, admin_headers):
    response = client.get("/v1/me", headers=admin_headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body["username"] == "admin"
    assert body["hasAccessPin"] is False
    assert "passwordHash" not in body
    assert "*.*.*" in body["permissions"]


def test_logout_revokes_token(client, admin_headers):
    assert client.post("/v1/auth/logout", headers=admin_headers).status_code == 204
    assert client.get("/v1/me", headers=admin_headers).status_code == 401


def test_registered_user_without_groups_is_forbidden(client, admin):
    created = client.post(
        "/v1/auth/register",
        json={"tenantId": admin.tenant_id, "username": "maria", "email": "maria@acme.com", "password": "secret123"},
    )
    assert created.status_code == 201
    login = client.post(
        "/v1/auth/login/password",
        json={"tenantId": admin.tenant_id, "identifier": "maria@acme.com", "password": "secret123"},
    )
    headers = {"Authorization": f"Bearer {login.get_json()['token']}"}

    response = client.get("/v1/hr/employees", headers=headers)
    assert response.status_code == 403
    assert response.get_json()["message"] == "Missing permission hr.employees.read"
