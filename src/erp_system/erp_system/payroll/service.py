from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from ..absences.model import AbsenceStatus
from ..absences.repository import AbsenceRepository
from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import inclusive_days, last_day_of_month, today, utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import parse_enum, require_between, require_non_empty, require_positive
from ..core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..logging_config import get_logger
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Bonus, Deduction, Overtime, Payroll, PayrollItem, PayrollItemType, PayrollStatus
from .repository import (
    BonusRepository,
    DeductionRepository,
    OvertimeRepository,
    PayrollItemRepository,
    PayrollRepository,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PayrollDetails:
    payroll: Payroll
    items: List[PayrollItem]

    @property
    def employee_count(self) -> int:
        return len({item.employee_id for item in self.items})


class PayrollService:
    """Use case: monthly payroll runs and the records that feed them."""

    def __init__(
        self,
        payrolls: PayrollRepository,
        items: PayrollItemRepository,
        employees: EmployeeRepository,
        absences: AbsenceRepository,
        overtime: OvertimeRepository,
        bonuses: BonusRepository,
        deductions: DeductionRepository,
        audit: Optional[AuditService] = None,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payrolls = payrolls
        self._items = items
        self._employees = employees
        self._absences = absences
        self._overtime = overtime
        self._bonuses = bonuses
        self._deductions = deductions
        self._audit = audit
        self._calculator = calculator or StandardPayrollCalculator()

    def _get(self, tenant_id: str, payroll_id: str) -> Payroll:
        payroll = self._payrolls.get_by_id(tenant_id=tenant_id, payroll_id=payroll_id)
        if not payroll:
            raise ResourceNotFoundError("Payroll not found")
        return payroll

    def _employee(self, tenant_id: str, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(tenant_id=tenant_id, employee_id=employee_id)
        if not employee:
            raise ResourceNotFoundError("Employee not found")
        return employee

    def _log(self, payroll: Payroll, action: AuditAction, actor_id: Optional[str], **kwargs) -> None:
        if self._audit:
            self._audit.log(
                tenant_id=payroll.tenant_id,
                user_id=actor_id,
                action=action,
                entity=AuditEntity.PAYROLL,
                entity_id=payroll.id,
                **kwargs,
            )

    # payroll runs
    def create_payroll(self, *, tenant_id: str, month: int, year: int, actor_id: Optional[str] = None) -> Payroll:
        require_between(month, "Month", 1, 12)
        require_between(year, "Year", 2000, 2100)
        if self._payrolls.get_by_period(tenant_id=tenant_id, month=month, year=year):
            raise ConflictError(f"Payroll for {year:04d}-{month:02d} already exists")
        payroll = self._payrolls.save(
            Payroll(id=new_id(), tenant_id=tenant_id, reference_month=int(month), reference_year=int(year))
        )
        self._log(payroll, AuditAction.CREATE, actor_id, new_data={"referencePeriod": payroll.reference_period})
        return payroll

    def _add_item(
        self,
        payroll: Payroll,
        employee: Employee,
        type: PayrollItemType,
        description: str,
        amount: float,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> Optional[PayrollItem]:
        amount = round(amount, 2)
        if amount <= 0:
            return None
        return self._items.save(
            PayrollItem(
                id=new_id(),
                tenant_id=payroll.tenant_id,
                payroll_id=payroll.id,
                employee_id=employee.id,
                type=type,
                description=description,
                amount=amount,
                is_deduction=type.is_deduction,
                reference_type=reference_type,
                reference_id=reference_id,
            )
        )

    def _calculate_employee(self, payroll: Payroll, employee: Employee, start: date, end: date) -> Tuple[float, float]:
        tenant_id = payroll.tenant_id
        earnings = 0.0
        deductions = 0.0

        def earn(*args, **kwargs):
            nonlocal earnings
            item = self._add_item(payroll, employee, *args, **kwargs)
            if item:
                earnings += item.amount

        def deduct(*args, **kwargs):
            nonlocal deductions
            item = self._add_item(payroll, employee, *args, **kwargs)
            if item:
                deductions += item.amount

        earn(PayrollItemType.BASE_SALARY, "Base salary", employee.base_salary)

        for overtime in self._overtime.list_by_employee(tenant_id=tenant_id, employee_id=employee.id, start=start, end=end):
            if overtime.approved:
                earn(
                    PayrollItemType.OVERTIME,
                    f"Overtime {overtime.date.isoformat()} ({overtime.hours}h)",
                    self._calculator.overtime_pay(employee.base_salary, overtime.hours),
                    "OVERTIME",
                    overtime.id,
                )

        absences = self._absences.list_for_employee(
            tenant_id=tenant_id,
            employee_id=employee.id,
            statuses=(AbsenceStatus.APPROVED, AbsenceStatus.IN_PROGRESS, AbsenceStatus.COMPLETED),
        )
        for absence in absences:
            if absence.is_paid or not absence.overlaps(start, end):
                continue
            days = inclusive_days(max(absence.start_date, start), min(absence.end_date, end))
            deduct(
                PayrollItemType.OTHER_DEDUCTION,
                f"Unpaid absence ({days} days)",
                self._calculator.absence_deduction(employee.base_salary, days),
                "ABSENCE",
                absence.id,
            )

        for bonus in self._bonuses.list_by_employee(tenant_id=tenant_id, employee_id=employee.id, unpaid_only=True):
            earn(PayrollItemType.BONUS, bonus.name, bonus.amount, "BONUS", bonus.id)
            bonus.is_paid = True
            self._bonuses.save(bonus)

        for deduction in self._deductions.list_by_employee(tenant_id=tenant_id, employee_id=employee.id):
            if not deduction.is_due:
                continue
            description = deduction.name
            if deduction.is_installment_based:
                description = f"{deduction.name} ({deduction.current_installment + 1}/{deduction.installments})"
            deduct(PayrollItemType.OTHER_DEDUCTION, description, deduction.installment_amount, "DEDUCTION", deduction.id)
            deduction.mark_as_applied(payroll.id)
            self._deductions.save(deduction)

        inss = self._calculator.inss(earnings)
        deduct(PayrollItemType.INSS, "INSS", inss)
        deduct(PayrollItemType.IRRF, "IRRF", self._calculator.irrf(earnings - inss))
        return earnings, deductions

    def calculate_payroll(self, *, tenant_id: str, payroll_id: str, processed_by: str) -> PayrollDetails:
        payroll = self._get(tenant_id, payroll_id)
        payroll.start_processing(processed_by)
        self._payrolls.save(payroll)

        start = date(payroll.reference_year, payroll.reference_month, 1)
        end = date(payroll.reference_year, payroll.reference_month, last_day_of_month(start.year, start.month))
        gross = total_deductions = 0.0
        employees = self._employees.list_active(tenant_id=tenant_id)
        for employee in employees:
            earnings, deductions = self._calculate_employee(payroll, employee, start, end)
            gross += earnings
            total_deductions += deductions

        payroll.finish_calculation(gross, total_deductions)
        self._payrolls.save(payroll)
        logger.info(
            "Payroll %s calculated for %d employees (gross=%.2f net=%.2f)",
            payroll.reference_period,
            len(employees),
            payroll.total_gross,
            payroll.total_net,
        )
        self._log(
            payroll,
            AuditAction.STATUS_CHANGE,
            processed_by,
            new_data={"status": payroll.status.value, "totalNet": payroll.total_net},
        )
        return self.get_payroll(tenant_id=tenant_id, payroll_id=payroll.id)

    def approve_payroll(self, *, tenant_id: str, payroll_id: str, approved_by: str) -> Payroll:
        payroll = self._get(tenant_id, payroll_id)
        payroll.approve(approved_by)
        self._payrolls.save(payroll)
        self._log(payroll, AuditAction.APPROVE, approved_by, new_data={"status": payroll.status.value})
        return payroll

    def pay_payroll(self, *, tenant_id: str, payroll_id: str, paid_by: str) -> Payroll:
        payroll = self._get(tenant_id, payroll_id)
        payroll.mark_as_paid(paid_by)
        self._payrolls.save(payroll)
        self._log(payroll, AuditAction.STATUS_CHANGE, paid_by, new_data={"status": payroll.status.value})
        return payroll

    def cancel_payroll(self, *, tenant_id: str, payroll_id: str, cancelled_by: Optional[str] = None) -> Payroll:
        payroll = self._get(tenant_id, payroll_id)
        previous = payroll.status
        payroll.cancel()
        self._payrolls.save(payroll)
        self._log(
            payroll,
            AuditAction.CANCEL,
            cancelled_by,
            old_data={"status": previous.value},
            new_data={"status": payroll.status.value},
        )
        return payroll

    def get_payroll(self, *, tenant_id: str, payroll_id: str) -> PayrollDetails:
        payroll = self._get(tenant_id, payroll_id)
        items = self._items.list_by_payroll(tenant_id=tenant_id, payroll_id=payroll.id)
        return PayrollDetails(payroll=payroll, items=items)

    def list_payrolls(
        self, *, tenant_id: str, params: PageParams, year: Optional[int] = None, status: Optional[str] = None
    ) -> Page[Payroll]:
        status_enum = parse_enum(PayrollStatus, status, "Status") if status else None
        items, total = self._payrolls.list_page(tenant_id=tenant_id, params=params, year=year, status=status_enum)
        return Page(items=items, total=total, params=params)

    # deductions
    def create_deduction(
        self,
        *,
        tenant_id: str,
        employee_id: str,
        name: str,
        amount: float,
        reason: str,
        date: Optional[date] = None,
        is_recurring: bool = False,
        installments: Optional[int] = None,
        actor_id: Optional[str] = None,
    ) -> Deduction:
        employee = self._employee(tenant_id, employee_id)
        deduction = Deduction(
            id=new_id(),
            tenant_id=tenant_id,
            employee_id=employee.id,
            name=(name or "").strip(),
            amount=round(float(amount), 2) if amount is not None else None,
            reason=(reason or "").strip(),
            date=date or today(),
            is_recurring=bool(is_recurring),
            installments=installments,
        )
        self._deductions.save(deduction)
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=actor_id,
                action=AuditAction.CREATE,
                entity=AuditEntity.DEDUCTION,
                entity_id=deduction.id,
                new_data={"employeeId": employee.id, "name": deduction.name, "amount": deduction.amount},
            )
        return deduction

    def list_deductions(
        self, *, tenant_id: str, employee_id: Optional[str] = None, pending_only: bool = False
    ) -> List[Deduction]:
        deductions = self._deductions.list_by_employee(tenant_id=tenant_id, employee_id=employee_id)
        if pending_only:
            deductions = [d for d in deductions if d.is_due]
        return deductions

    def delete_deduction(self, *, tenant_id: str, deduction_id: str, actor_id: Optional[str] = None) -> None:
        deduction = self._deductions.get_by_id(tenant_id=tenant_id, deduction_id=deduction_id)
        if not deduction:
            raise ResourceNotFoundError("Deduction not found")
        if deduction.is_applied:
            raise ValidationError("Applied deductions cannot be deleted")
        deduction.deleted_at = deduction.updated_at = utc_now()
        self._deductions.save(deduction)
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=actor_id,
                action=AuditAction.DELETE,
                entity=AuditEntity.DEDUCTION,
                entity_id=deduction.id,
            )

    # bonuses and overtime
    def create_bonus(
        self,
        *,
        tenant_id: str,
        employee_id: str,
        name: str,
        amount: float,
        reason: str,
        date: Optional[date] = None,
    ) -> Bonus:
        employee = self._employee(tenant_id, employee_id)
        name = require_non_empty(name, "Name")
        require_positive(amount, "Amount")
        reason = require_non_empty(reason, "Reason")
        return self._bonuses.save(
            Bonus(
                id=new_id(),
                tenant_id=tenant_id,
                employee_id=employee.id,
                name=name,
                amount=round(float(amount), 2),
                reason=reason,
                date=date or today(),
            )
        )

    def list_bonuses(self, *, tenant_id: str, employee_id: str, unpaid_only: bool = False) -> List[Bonus]:
        self._employee(tenant_id, employee_id)
        return self._bonuses.list_by_employee(tenant_id=tenant_id, employee_id=employee_id, unpaid_only=unpaid_only)

    def register_overtime(
        self, *, tenant_id: str, employee_id: str, date: date, hours: float, reason: Optional[str] = None
    ) -> Overtime:
        employee = self._employee(tenant_id, employee_id)
        if hours is None or hours <= 0 or hours > 24:
            raise ValidationError("Hours must be greater than 0 and at most 24")
        return self._overtime.save(
            Overtime(
                id=new_id(),
                tenant_id=tenant_id,
                employee_id=employee.id,
                date=date,
                hours=float(hours),
                reason=reason,
            )
        )

    def approve_overtime(self, *, tenant_id: str, overtime_id: str, approved_by: str) -> Overtime:
        overtime = self._overtime.get_by_id(tenant_id=tenant_id, overtime_id=overtime_id)
        if not overtime:
            raise ResourceNotFoundError("Overtime not found")
        if overtime.approved:
            raise ValidationError("Overtime is already approved")
        overtime.approved = True
        overtime.approved_by = approved_by
        overtime.approved_at = utc_now()
        return self._overtime.save(overtime)

    def list_overtime(
        self, *, tenant_id: str, employee_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[Overtime]:
        self._employee(tenant_id, employee_id)
        return self._overtime.list_by_employee(tenant_id=tenant_id, employee_id=employee_id, start=start, end=end)
