from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageParams
from .model import Bonus, Deduction, Overtime, Payroll, PayrollItem, PayrollStatus


class PayrollRepository(Protocol):
    def save(self, payroll: Payroll) -> Payroll:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, payroll_id: str) -> Optional[Payroll]:
        raise NotImplementedError

    def get_by_period(self, *, tenant_id: str, month: int, year: int) -> Optional[Payroll]:
        raise NotImplementedError

    def list_page(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Tuple[List[Payroll], int]:
        raise NotImplementedError


class PayrollItemRepository(Protocol):
    def save(self, item: PayrollItem) -> PayrollItem:
        raise NotImplementedError

    def list_by_payroll(self, *, tenant_id: str, payroll_id: str) -> List[PayrollItem]:
        raise NotImplementedError


class OvertimeRepository(Protocol):
    def save(self, overtime: Overtime) -> Overtime:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, overtime_id: str) -> Optional[Overtime]:
        raise NotImplementedError

    def list_by_employee(
        self, *, tenant_id: str, employee_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[Overtime]:
        raise NotImplementedError


class BonusRepository(Protocol):
    def save(self, bonus: Bonus) -> Bonus:
        raise NotImplementedError

    def list_by_employee(self, *, tenant_id: str, employee_id: str, unpaid_only: bool = False) -> List[Bonus]:
        raise NotImplementedError


class DeductionRepository(Protocol):
    def save(self, deduction: Deduction) -> Deduction:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, deduction_id: str) -> Optional[Deduction]:
        raise NotImplementedError

    def list_by_employee(self, *, tenant_id: str, employee_id: Optional[str] = None) -> List[Deduction]:
        raise NotImplementedError
