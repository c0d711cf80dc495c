from __future__ import annotations

import pytest

from erp_system.payroll.calculator.standard_calculator import INSS_CAP, StandardPayrollCalculator


@pytest.fixture
def calc():
    return StandardPayrollCalculator()


def test_inss_first_bracket(calc):
    assert calc.inss(1412.00) == pytest.approx(105.90)


def test_inss_is_capped(calc):
    assert calc.inss(10000.00) == INSS_CAP


def test_irrf_exempt_below_limit(calc):
    assert calc.irrf(2000.00) == 0.0


def test_irrf_top_bracket(calc):
    assert calc.irrf(5000.00) == pytest.approx(479.00)


def test_overtime_uses_hour_rate_with_multiplier(calc):
    assert calc.overtime_pay(2200.00, 2) == pytest.approx(30.00)


def test_absence_deduction_is_per_day(calc):
    assert calc.absence_deduction(3000.00, 3) == pytest.approx(300.00)
