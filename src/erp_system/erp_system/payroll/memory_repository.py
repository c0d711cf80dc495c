from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import Bonus, Deduction, Overtime, Payroll, PayrollItem, PayrollStatus


class InMemoryPayrollRepository(InMemoryRepository[Payroll]):
    def save(self, payroll: Payroll) -> Payroll:
        return self._save(payroll)

    def get_by_id(self, *, tenant_id: str, payroll_id: str) -> Optional[Payroll]:
        return self._get(payroll_id, tenant_id=tenant_id)

    def get_by_period(self, *, tenant_id: str, month: int, year: int) -> Optional[Payroll]:
        return self._first(
            lambda p: p.reference_month == month and p.reference_year == year,
            tenant_id=tenant_id,
        )

    def list_page(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Tuple[List[Payroll], int]:
        found = self._find(
            lambda p: (year is None or p.reference_year == year) and (status is None or p.status == status),
            tenant_id=tenant_id,
            sort_key=lambda p: (p.reference_year, p.reference_month),
            reverse=True,
        )
        return self._page(found, params)


class InMemoryPayrollItemRepository(InMemoryRepository[PayrollItem]):
    def save(self, item: PayrollItem) -> PayrollItem:
        return self._save(item)

    def list_by_payroll(self, *, tenant_id: str, payroll_id: str) -> List[PayrollItem]:
        return self._find(
            lambda i: i.payroll_id == payroll_id,
            tenant_id=tenant_id,
            sort_key=lambda i: i.created_at,
        )


class InMemoryOvertimeRepository(InMemoryRepository[Overtime]):
    def save(self, overtime: Overtime) -> Overtime:
        return self._save(overtime)

    def get_by_id(self, *, tenant_id: str, overtime_id: str) -> Optional[Overtime]:
        return self._get(overtime_id, tenant_id=tenant_id)

    def list_by_employee(
        self, *, tenant_id: str, employee_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[Overtime]:
        return self._find(
            lambda o: o.employee_id == employee_id
            and (start is None or o.date >= start)
            and (end is None or o.date <= end),
            tenant_id=tenant_id,
            sort_key=lambda o: o.date,
        )


class InMemoryBonusRepository(InMemoryRepository[Bonus]):
    def save(self, bonus: Bonus) -> Bonus:
        return self._save(bonus)

    def list_by_employee(self, *, tenant_id: str, employee_id: str, unpaid_only: bool = False) -> List[Bonus]:
        return self._find(
            lambda b: b.employee_id == employee_id and (not unpaid_only or not b.is_paid),
            tenant_id=tenant_id,
            sort_key=lambda b: b.date,
        )


class InMemoryDeductionRepository(InMemoryRepository[Deduction]):
    def save(self, deduction: Deduction) -> Deduction:
        return self._save(deduction)

    def get_by_id(self, *, tenant_id: str, deduction_id: str) -> Optional[Deduction]:
        return self._get(deduction_id, tenant_id=tenant_id)

    def list_by_employee(self, *, tenant_id: str, employee_id: Optional[str] = None) -> List[Deduction]:
        return self._find(
            lambda d: employee_id is None or d.employee_id == employee_id,
            tenant_id=tenant_id,
            sort_key=lambda d: d.date,
        )
