from __future__ import annotations

import pytest


@pytest.fixture
def finance_setup(container, tenant):
    setup = container.finance_setup_service
    category = setup.create_category(tenant_id=tenant.id, name="Rent", type="EXPENSE")
    income = setup.create_category(tenant_id=tenant.id, name="Services", type="INCOME")
    cost_center = setup.create_cost_center(tenant_id=tenant.id, code="adm", name="Administration")
    account = setup.create_bank_account(
        tenant_id=tenant.id, name="Main", bank_code="001", agency="1234", number="5678-9", balance=1000
    )
    return {
        "tenant_id": tenant.id,
        "category": category,
        "income": income,
        "cost_center": cost_center,
        "account": account,
    }
