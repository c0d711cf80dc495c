from __future__ import annotations

from .base import PayrollCalculator

# (upper limit, rate) applied progressively
INSS_BRACKETS = (
    (1412.00, 0.075),
    (2666.68, 0.09),
    (4000.03, 0.12),
    (7786.02, 0.14),
)
INSS_CAP = 908.86

IRRF_EXEMPT_LIMIT = 2259.20
# (upper limit, rate, deduction); None means no upper limit
IRRF_BRACKETS = (
    (2826.65, 0.075, 169.44),
    (3751.05, 0.15, 381.44),
    (4664.68, 0.225, 662.77),
    (None, 0.275, 896.00),
)

MONTHLY_HOURS = 220
OVERTIME_MULTIPLIER = 1.5
DAYS_IN_MONTH = 30


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: progressive INSS, IRRF over earnings minus INSS."""

    def inss(self, gross: float) -> float:
        total = 0.0
        lower = 0.0
        for upper, rate in INSS_BRACKETS:
            if gross <= lower:
                break
            total += (min(gross, upper) - lower) * rate
            lower = upper
        return round(min(total, INSS_CAP), 2)

    def irrf(self, taxable_base: float) -> float:
        if taxable_base <= IRRF_EXEMPT_LIMIT:
            return 0.0
        for upper, rate, deduction in IRRF_BRACKETS:
            if upper is None or taxable_base <= upper:
                return round(max(taxable_base * rate - deduction, 0.0), 2)
        return 0.0

    def overtime_pay(self, base_salary: float, hours: float) -> float:
        return round(base_salary / MONTHLY_HOURS * hours * OVERTIME_MULTIPLIER, 2)

    def absence_deduction(self, base_salary: float, days: int) -> float:
        return round(base_salary / DAYS_IN_MONTH * days, 2)
