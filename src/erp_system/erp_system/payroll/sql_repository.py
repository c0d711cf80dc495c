from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import BonusRow, DeductionRow, OvertimeRow, PayrollItemRow, PayrollRow
from .model import Bonus, Deduction, Overtime, Payroll, PayrollItem, PayrollStatus


class SqlPayrollRepository(SqlRepository[Payroll]):
    entity_cls = Payroll
    table_cls = PayrollRow

    def save(self, payroll: Payroll) -> Payroll:
        return self._save(payroll)

    def get_by_id(self, *, tenant_id: str, payroll_id: str) -> Optional[Payroll]:
        return self._get(payroll_id, tenant_id=tenant_id)

    def get_by_period(self, *, tenant_id: str, month: int, year: int) -> Optional[Payroll]:
        return self._first(
            PayrollRow.reference_month == month,
            PayrollRow.reference_year == year,
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
        criteria = []
        if year is not None:
            criteria.append(PayrollRow.reference_year == year)
        if status is not None:
            criteria.append(PayrollRow.status == status)
        return self._page(
            criteria,
            params,
            tenant_id=tenant_id,
            order_by=[PayrollRow.reference_year.desc(), PayrollRow.reference_month.desc()],
        )


class SqlPayrollItemRepository(SqlRepository[PayrollItem]):
    entity_cls = PayrollItem
    table_cls = PayrollItemRow

    def save(self, item: PayrollItem) -> PayrollItem:
        return self._save(item)

    def list_by_payroll(self, *, tenant_id: str, payroll_id: str) -> List[PayrollItem]:
        return self._find(
            PayrollItemRow.payroll_id == payroll_id,
            tenant_id=tenant_id,
            order_by=[PayrollItemRow.created_at],
        )


class SqlOvertimeRepository(SqlRepository[Overtime]):
    entity_cls = Overtime
    table_cls = OvertimeRow

    def save(self, overtime: Overtime) -> Overtime:
        return self._save(overtime)

    def get_by_id(self, *, tenant_id: str, overtime_id: str) -> Optional[Overtime]:
        return self._get(overtime_id, tenant_id=tenant_id)

    def list_by_employee(
        self, *, tenant_id: str, employee_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[Overtime]:
        criteria = [OvertimeRow.employee_id == employee_id]
        if start is not None:
            criteria.append(OvertimeRow.date >= start)
        if end is not None:
            criteria.append(OvertimeRow.date <= end)
        return self._find(*criteria, tenant_id=tenant_id, order_by=[OvertimeRow.date])


class SqlBonusRepository(SqlRepository[Bonus]):
    entity_cls = Bonus
    table_cls = BonusRow

    def save(self, bonus: Bonus) -> Bonus:
        return self._save(bonus)

    def list_by_employee(self, *, tenant_id: str, employee_id: str, unpaid_only: bool = False) -> List[Bonus]:
        criteria = [BonusRow.employee_id == employee_id]
        if unpaid_only:
            criteria.append(BonusRow.is_paid.is_(False))
        return self._find(*criteria, tenant_id=tenant_id, order_by=[BonusRow.date])


class SqlDeductionRepository(SqlRepository[Deduction]):
    entity_cls = Deduction
    table_cls = DeductionRow

    def save(self, deduction: Deduction) -> Deduction:
        return self._save(deduction)

    def get_by_id(self, *, tenant_id: str, deduction_id: str) -> Optional[Deduction]:
        return self._get(deduction_id, tenant_id=tenant_id)

    def list_by_employee(self, *, tenant_id: str, employee_id: Optional[str] = None) -> List[Deduction]:
        criteria = [DeductionRow.employee_id == employee_id] if employee_id else []
        return self._find(*criteria, tenant_id=tenant_id, order_by=[DeductionRow.date])
