from __future__ import annotations

from datetime import date

import pytest

from erp_system.core.exceptions import ValidationError
from erp_system.payroll.model import Deduction, Payroll, PayrollItemType, PayrollStatus


def make_deduction(**kwargs):
    defaults = dict(
        id="d1",
        tenant_id="t1",
        employee_id="e1",
        name="Uniform",
        amount=300.0,
        reason="Lost uniform",
        date=date(2024, 3, 1),
    )
    defaults.update(kwargs)
    return Deduction(**defaults)


def test_payroll_items_are_editable_until_approval():
    payroll = Payroll(id="p1", tenant_id="t1", reference_month=3, reference_year=2024)
    assert payroll.reference_period == "2024-03"
    assert payroll.can_edit_items

    payroll.start_processing("hr")
    payroll.finish_calculation(5000.5, 1000.25)
    assert (payroll.total_gross, payroll.total_net) == (5000.5, 4000.25)
    assert payroll.can_edit_items

    payroll.approve("boss")
    assert not payroll.can_edit_items
    payroll.mark_as_paid("finance")
    assert payroll.status is PayrollStatus.PAID
    with pytest.raises(ValidationError):
        payroll.cancel()


def test_item_type_deduction_flag_and_category():
    assert PayrollItemType.INSS.is_deduction
    assert not PayrollItemType.BONUS.is_deduction
    assert PayrollItemType.BONUS.finance_category_slug == "gratificacoes-e-bonus"


@pytest.mark.parametrize(
    "kwargs",
    [{"amount": 0}, {"name": " "}, {"reason": ""}, {"installments": 0}],
)
def test_deduction_validation(kwargs):
    with pytest.raises(ValidationError):
        make_deduction(**kwargs)


def test_installment_deduction_applies_once_per_installment():
    deduction = make_deduction(installments=3)
    assert deduction.installment_amount == 100.0

    for _ in range(3):
        deduction.mark_as_applied("p1")
    assert deduction.current_installment == 3
    assert not deduction.has_remaining_installments
    with pytest.raises(ValidationError):
        deduction.mark_as_applied("p2")


def test_applied_one_off_deduction_is_frozen():
    deduction = make_deduction()
    deduction.update_amount(250.0)
    deduction.update_reason("  Damaged uniform ")
    assert (deduction.amount, deduction.reason) == (250.0, "Damaged uniform")

    deduction.mark_as_applied("p1")
    with pytest.raises(ValidationError):
        deduction.update_amount(100.0)
    with pytest.raises(ValidationError):
        deduction.update_reason("Other")


def test_recurring_deduction_stays_editable():
    deduction = make_deduction(is_recurring=True)
    deduction.mark_as_applied("p1")
    deduction.mark_as_applied("p2")
    deduction.update_amount(320.0)
    assert deduction.amount == 320.0
