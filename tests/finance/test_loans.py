from __future__ import annotations

from datetime import date

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ResourceNotFoundError, ValidationError
from erp_system.finance.loans import build_schedule
from erp_system.finance.model import LoanStatus


def test_price_schedule_amortizes_principal():
    rows = build_schedule(principal=12000, annual_rate=12, count=12, start_date=date(2024, 1, 15), installment_day=10)
    assert rows[0]["due_date"] == date(2024, 2, 10)
    assert rows[-1]["due_date"] == date(2025, 1, 10)
    assert rows[0]["total"] == pytest.approx(1066.19)
    assert rows[0]["interest"] == pytest.approx(120.0)
    assert sum(r["principal"] for r in rows) == pytest.approx(12000, abs=0.05)
    # interest shrinks as the balance is paid down
    assert rows[-1]["interest"] < rows[0]["interest"]


def test_zero_rate_schedule_is_linear():
    rows = build_schedule(principal=1200, annual_rate=0, count=3, start_date=date(2024, 1, 31), installment_day=31)
    assert [r["total"] for r in rows] == [400.0, 400.0, 400.0]
    assert [r["due_date"] for r in rows] == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]


def create_loan(container, finance_setup, **overrides):
    data = dict(
        tenant_id=finance_setup["tenant_id"],
        name="Working capital",
        bank_account_id=finance_setup["account"].id,
        cost_center_id=finance_setup["cost_center"].id,
        principal_amount=1200,
        interest_rate=0,
        start_date=date(2024, 1, 10),
        total_installments=3,
    )
    data.update(overrides)
    return container.loan_service.create_loan(**data)


def test_create_loan_builds_installments(container, finance_setup):
    details = create_loan(container, finance_setup)
    assert details.loan.installment_day == 10
    assert details.loan.end_date == date(2024, 4, 10)
    assert len(details.installments) == 3

    with pytest.raises(ResourceNotFoundError):
        create_loan(container, finance_setup, bank_account_id="missing")
    with pytest.raises(ValidationError):
        create_loan(container, finance_setup, principal_amount=0)
    with pytest.raises(ValidationError):
        create_loan(container, finance_setup, installment_day=32)


def test_paying_every_installment_pays_off_loan(container, finance_setup):
    loans = container.loan_service
    tenant_id = finance_setup["tenant_id"]
    details = create_loan(container, finance_setup)
    loan_id = details.loan.id

    first = details.installments[0]
    after_first = loans.register_loan_payment(tenant_id=tenant_id, loan_id=loan_id, installment_id=first.id, amount=400)
    assert after_first.loan.outstanding_balance == 800.0
    assert after_first.loan.progress_percentage == pytest.approx(33.33)
    with pytest.raises(ValidationError):
        loans.register_loan_payment(tenant_id=tenant_id, loan_id=loan_id, installment_id=first.id, amount=400)
    with pytest.raises(ValidationError):
        loans.delete_loan(tenant_id=tenant_id, loan_id=loan_id)

    for installment in details.installments[1:]:
        final = loans.register_loan_payment(
            tenant_id=tenant_id, loan_id=loan_id, installment_id=installment.id, amount=400
        )
    assert final.loan.status is LoanStatus.PAID_OFF
    assert final.loan.outstanding_balance == 0.0
    assert loans.list_loans(tenant_id=tenant_id, params=PageParams(), status="PAID_OFF").total == 1


def test_unpaid_loan_can_be_deleted(container, finance_setup):
    details = create_loan(container, finance_setup)
    tenant_id = finance_setup["tenant_id"]
    container.loan_service.delete_loan(tenant_id=tenant_id, loan_id=details.loan.id)
    with pytest.raises(ResourceNotFoundError):
        container.loan_service.get_loan(tenant_id=tenant_id, loan_id=details.loan.id)
