from __future__ import annotations

from datetime import date

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from erp_system.finance.model import FinanceEntryStatus, RecurrenceUnit
from erp_system.finance.service import NewFinanceEntry, advance_due_date, split_installments


def entry(category_id, **overrides):
    data = dict(
        type="PAYABLE",
        description="Office rent",
        category_id=category_id,
        expected_amount=100.0,
        due_date=date(2024, 1, 31),
    )
    data.update(overrides)
    return NewFinanceEntry(**data)


def test_split_installments_puts_remainder_on_last():
    assert split_installments(100.0, 3) == [33.33, 33.33, 33.34]


def test_advance_due_date_units():
    assert advance_due_date(date(2024, 1, 31), 1, RecurrenceUnit.MONTHLY) == date(2024, 2, 29)
    assert advance_due_date(date(2024, 1, 1), 2, RecurrenceUnit.WEEKLY) == date(2024, 1, 15)
    assert advance_due_date(date(2024, 1, 15), 1, RecurrenceUnit.QUARTERLY) == date(2024, 4, 15)


def test_setup_conflicts(container, finance_setup):
    setup = container.finance_setup_service
    tenant_id = finance_setup["tenant_id"]
    with pytest.raises(ConflictError):
        setup.create_category(tenant_id=tenant_id, name="rent")
    with pytest.raises(ConflictError):
        setup.create_cost_center(tenant_id=tenant_id, code="ADM", name="Again")


def test_codes_are_sequential_per_type(container, finance_setup):
    entries = container.finance_entry_service
    tenant_id = finance_setup["tenant_id"]
    first = entries.create_finance_entry(tenant_id=tenant_id, data=entry(finance_setup["category"].id))
    second = entries.create_finance_entry(tenant_id=tenant_id, data=entry(finance_setup["category"].id))
    income = entries.create_finance_entry(
        tenant_id=tenant_id, data=entry(finance_setup["income"].id, type="RECEIVABLE", customer_name="Client")
    )
    assert (first.code, second.code, income.code) == ("PAG-000001", "PAG-000002", "REC-000001")


def test_create_validates_references(container, finance_setup):
    entries = container.finance_entry_service
    tenant_id = finance_setup["tenant_id"]
    with pytest.raises(ResourceNotFoundError):
        entries.create_finance_entry(tenant_id=tenant_id, data=entry("missing"))
    with pytest.raises(ValidationError):
        entries.create_finance_entry(tenant_id=tenant_id, data=entry(finance_setup["category"].id, expected_amount=0))
    with pytest.raises(ValidationError):
        entries.create_finance_entry(
            tenant_id=tenant_id,
            data=entry(finance_setup["category"].id, recurrence_type="INSTALLMENT", total_installments=1),
        )


def test_partial_payment_then_settlement_moves_bank_balance(container, finance_setup):
    entries = container.finance_entry_service
    tenant_id = finance_setup["tenant_id"]
    account = finance_setup["account"]
    created = entries.create_finance_entry(
        tenant_id=tenant_id, data=entry(finance_setup["category"].id, interest=10, discount=5)
    )
    assert created.total_due == 105.0

    partial = entries.register_payment(tenant_id=tenant_id, entry_id=created.id, amount=50, bank_account_id=account.id)
    assert partial.status is FinanceEntryStatus.PARTIALLY_PAID
    assert partial.remaining_balance == 55.0
    with pytest.raises(ValidationError):
        entries.register_payment(tenant_id=tenant_id, entry_id=created.id, amount=60)

    paid = entries.register_payment(
        tenant_id=tenant_id, entry_id=created.id, amount=55, payment_date=date(2024, 2, 1), bank_account_id=account.id
    )
    assert paid.status is FinanceEntryStatus.PAID
    assert paid.payment_date == date(2024, 2, 1)
    balance = container.repos.bank_accounts.get_by_id(tenant_id=tenant_id, account_id=account.id).balance
    assert balance == 895.0

    with pytest.raises(ValidationError):
        entries.update_entry(tenant_id=tenant_id, entry_id=created.id, changes={"description": "x"})
    with pytest.raises(ValidationError):
        entries.cancel_entry(tenant_id=tenant_id, entry_id=created.id)


def test_installments_settle_the_master_entry(container, finance_setup):
    entries = container.finance_entry_service
    tenant_id = finance_setup["tenant_id"]
    master = entries.create_finance_entry(
        tenant_id=tenant_id,
        data=entry(finance_setup["category"].id, recurrence_type="INSTALLMENT", total_installments=3),
    )
    children = entries.list_installments(tenant_id=tenant_id, entry_id=master.id)
    assert [c.expected_amount for c in children] == [33.33, 33.33, 33.34]
    assert [c.due_date for c in children] == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]
    assert children[0].description == "Office rent (1/3)"

    for child in children:
        entries.register_payment(tenant_id=tenant_id, entry_id=child.id, amount=child.expected_amount)
    settled = entries.get_entry(tenant_id=tenant_id, entry_id=master.id)
    assert settled.status is FinanceEntryStatus.PAID
    assert settled.actual_amount == 100.0


def test_paying_recurring_entry_schedules_next(container, finance_setup):
    entries = container.finance_entry_service
    tenant_id = finance_setup["tenant_id"]
    created = entries.create_finance_entry(
        tenant_id=tenant_id,
        data=entry(finance_setup["category"].id, recurrence_type="RECURRING", recurrence_unit="MONTHLY"),
    )
    entries.register_payment(tenant_id=tenant_id, entry_id=created.id, amount=100)

    pending = entries.list_entries(tenant_id=tenant_id, params=PageParams(), status="PENDING").items
    assert len(pending) == 1
    assert pending[0].description == "Office rent (2)"
    assert pending[0].due_date == date(2024, 2, 29)
    assert pending[0].current_installment == 2


def test_check_overdue_marks_and_notifies(container, finance_setup):
    entries = container.finance_entry_service
    tenant_id = finance_setup["tenant_id"]
    category_id = finance_setup["category"].id
    late = entries.create_finance_entry(tenant_id=tenant_id, data=entry(category_id, due_date=date(2024, 3, 1)))
    entries.create_finance_entry(tenant_id=tenant_id, data=entry(category_id, due_date=date(2024, 3, 12)))
    entries.create_finance_entry(tenant_id=tenant_id, data=entry(category_id, due_date=date(2024, 4, 30)))

    summary = entries.check_overdue_entries(tenant_id=tenant_id, today=date(2024, 3, 10), notify_user_id="u1")
    assert summary == {"markedOverdue": 1, "payableOverdue": 1, "receivableOverdue": 0, "dueSoonAlerts": 1}
    assert entries.get_entry(tenant_id=tenant_id, entry_id=late.id).status is FinanceEntryStatus.OVERDUE
    assert container.notification_service.count_unread(tenant_id=tenant_id, user_id="u1") == 2

    # moving the due date forward reopens the entry
    reopened = entries.update_entry(
        tenant_id=tenant_id, entry_id=late.id, changes={"due_date": date(2099, 1, 1)}
    )
    assert reopened.status is FinanceEntryStatus.PENDING
