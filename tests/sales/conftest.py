from __future__ import annotations

import pytest


@pytest.fixture
def variant(container, tenant):
    return container.item_service.create_variant(
        tenant_id=tenant.id, product_name="Coffee", sku="COF-500", name="Coffee 500g", price=100.0
    )


@pytest.fixture
def customer(container, tenant):
    return container.customer_service.create_customer(
        tenant_id=tenant.id, name="Padaria Central", type="business", document="12.345.678/0001-90"
    )
