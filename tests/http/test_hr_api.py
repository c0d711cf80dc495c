from __future__ import annotations

import pytest

EMPLOYEE = {
    "registrationNumber": "001",
    "fullName": "Ana Souza",
    "cpf": "123.456.789-09",
    "hireDate": "2022-03-01",
    "baseSalary": 3500,
    "department": "Finance",
}


@pytest.fixture
def employee(client, admin_headers):
    response = client.post("/v1/hr/employees", json=EMPLOYEE, headers=admin_headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_create_employee_returns_camel_case(employee):
    assert employee["fullName"] == "Ana Souza"
    assert employee["cpf"] == "12345678909"
    assert employee["baseSalary"] == 3500
    assert employee["hireDate"] == "2022-03-01"
    assert employee["status"] == "ACTIVE"


def test_duplicate_cpf_is_a_conflict(client, admin_headers, employee):
    response = client.post("/v1/hr/employees", json={**EMPLOYEE, "registrationNumber": "002"}, headers=admin_headers)
    assert response.status_code == 409


def test_invalid_body_is_rejected(client, admin_headers):
    response = client.post("/v1/hr/employees", json={**EMPLOYEE, "baseSalary": -1}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["errors"][0]["field"] == "baseSalary"


def test_list_filter_and_paginate(client, admin_headers, employee):
    client.post(
        "/v1/hr/employees",
        json={**EMPLOYEE, "registrationNumber": "002", "cpf": "529.982.247-25", "fullName": "Bruno", "department": "Ops"},
        headers=admin_headers,
    )

    body = client.get("/v1/hr/employees?department=Finance", headers=admin_headers).get_json()
    assert [e["id"] for e in body["data"]] == [employee["id"]]
    assert body["meta"]["total"] == 1

    everyone = client.get("/v1/hr/employees?limit=1", headers=admin_headers).get_json()
    assert len(everyone["data"]) == 1
    assert everyone["meta"]["total"] == 2
    assert everyone["meta"]["hasNext"] is True


def test_update_and_terminate(client, admin_headers, employee):
    url = f"/v1/hr/employees/{employee['id']}"
    updated = client.patch(url, json={"position": "Analyst"}, headers=admin_headers).get_json()
    assert updated["position"] == "Analyst"
    assert updated["fullName"] == "Ana Souza"

    early = client.post(f"{url}/terminate", json={"terminationDate": "2021-01-01"}, headers=admin_headers)
    assert early.status_code == 400

    terminated = client.post(f"{url}/terminate", json={"terminationDate": "2024-05-31"}, headers=admin_headers)
    assert terminated.status_code == 200
    assert terminated.get_json()["status"] == "TERMINATED"


def test_unknown_employee_is_404(client, admin_headers):
    response = client.get("/v1/hr/employees/does-not-exist", headers=admin_headers)
    assert response.status_code == 404
