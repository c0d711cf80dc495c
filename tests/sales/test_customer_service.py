from __future__ import annotations

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from erp_system.sales.model import CustomerType


def test_create_normalizes_fields(container, tenant, customer):
    assert customer.type is CustomerType.BUSINESS
    assert customer.document == "12345678000190"

    person = container.customer_service.create_customer(
        tenant_id=tenant.id, name="Bia", email="Bia@Example.com", state="sp"
    )
    assert person.email == "bia@example.com"
    assert person.state == "SP"


@pytest.mark.parametrize(
    "fields",
    [
        {"name": " "},
        {"name": "X", "type": "robot"},
        {"name": "X", "email": "not-an-email"},
        {"name": "X", "state": "SPX"},
        {"name": "X", "zip_code": "12345678901"},
        {"name": "X", "document": "--"},
    ],
)
def test_create_validation(container, tenant, fields):
    with pytest.raises(ValidationError):
        container.customer_service.create_customer(tenant_id=tenant.id, **fields)


def test_document_and_email_are_unique(container, tenant, customer):
    customers = container.customer_service
    with pytest.raises(ConflictError):
        customers.create_customer(tenant_id=tenant.id, name="Copy", document="12345678000190")

    other = customers.create_customer(tenant_id=tenant.id, name="Other", email="o@example.com")
    with pytest.raises(ConflictError):
        customers.update_customer(
            tenant_id=tenant.id, customer_id=customer.id, changes={"email": "O@example.com"}
        )
    # keeping your own email is fine
    updated = customers.update_customer(
        tenant_id=tenant.id, customer_id=other.id, changes={"email": "o@example.com", "city": "Recife"}
    )
    assert updated.city == "Recife"


def test_list_search_and_delete(container, tenant, customer):
    customers = container.customer_service
    customers.create_customer(tenant_id=tenant.id, name="Ana Souza")

    assert customers.list_customers(tenant_id=tenant.id, params=PageParams(), search="padaria").total == 1
    assert customers.list_customers(tenant_id=tenant.id, params=PageParams(), search="123456").total == 1
    individuals = customers.list_customers(tenant_id=tenant.id, params=PageParams(), type="INDIVIDUAL")
    assert [c.name for c in individuals.items] == ["Ana Souza"]

    customers.delete_customer(tenant_id=tenant.id, customer_id=customer.id)
    with pytest.raises(ResourceNotFoundError):
        customers.get_customer(tenant_id=tenant.id, customer_id=customer.id)
