from __future__ import annotations

from abc import ABC, abstractmethod


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def inss(self, gross: float) -> float:
        raise NotImplementedError

    @abstractmethod
    def irrf(self, taxable_base: float) -> float:
        raise NotImplementedError

    @abstractmethod
    def overtime_pay(self, base_salary: float, hours: float) -> float:
        raise NotImplementedError

    @abstractmethod
    def absence_deduction(self, base_salary: float, days: int) -> float:
        raise NotImplementedError
