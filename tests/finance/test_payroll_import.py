from __future__ import annotations

from datetime import date

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ValidationError
from erp_system.employees.service import NewEmployee
from erp_system.finance.payroll_import import payroll_tag


@pytest.fixture
def calculated_payroll(container, finance_setup):
    tenant_id = finance_setup["tenant_id"]
    container.employee_service.create_employee(
        tenant_id=tenant_id,
        data=NewEmployee(
            registration_number="001", full_name="Ana", cpf="12345678909", hire_date=date(2020, 1, 1), base_salary=2000
        ),
    )
    payrolls = container.payroll_service
    payroll = payrolls.create_payroll(tenant_id=tenant_id, month=3, year=2024)
    payrolls.calculate_payroll(tenant_id=tenant_id, payroll_id=payroll.id, processed_by="hr")
    return payroll


def test_unapproved_payroll_cannot_be_imported(container, finance_setup, calculated_payroll):
    with pytest.raises(ValidationError):
        container.payroll_finance_service.payroll_to_finance(
            tenant_id=finance_setup["tenant_id"], payroll_id=calculated_payroll.id
        )


def test_import_creates_net_salary_and_withholding_entries(container, finance_setup, calculated_payroll):
    tenant_id = finance_setup["tenant_id"]
    container.finance_setup_service.create_category(tenant_id=tenant_id, name="Tax INSS", slug="encargos-sociais-inss")
    container.payroll_service.approve_payroll(tenant_id=tenant_id, payroll_id=calculated_payroll.id, approved_by="boss")

    result = container.payroll_finance_service.payroll_to_finance(tenant_id=tenant_id, payroll_id=calculated_payroll.id)
    assert result == {"entriesCreated": 2, "totalAmount": 2000.0}

    page = container.finance_entry_service.list_entries(
        tenant_id=tenant_id, params=PageParams(), search=payroll_tag(calculated_payroll.id)
    )
    by_amount = {e.expected_amount: e for e in page.items}
    salary = by_amount[1841.18]
    assert salary.supplier_name == "Ana"
    assert salary.due_date == date(2024, 3, 31)
    assert salary.competence_date == date(2024, 3, 1)
    # no salary category exists, so the first expense category is used
    assert salary.category_id == finance_setup["category"].id
    assert by_amount[158.82].description.startswith("INSS 2024-03")

    with pytest.raises(ValidationError):
        container.payroll_finance_service.payroll_to_finance(tenant_id=tenant_id, payroll_id=calculated_payroll.id)
