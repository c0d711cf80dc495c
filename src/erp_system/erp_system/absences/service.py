from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import today as current_day
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import parse_enum, require_max_length, require_non_empty
from ..core.exceptions import ResourceNotFoundError, ValidationError
from ..employees.model import Employee, EmployeeStatus
from ..employees.repository import EmployeeRepository
from ..logging_config import get_logger
from .model import (
    BLOCKING_STATUSES,
    MAX_VACATION_DAYS,
    MIN_VACATION_DAYS,
    VACATION_NOTICE_DAYS,
    Absence,
    AbsenceStatus,
    AbsenceType,
    VacationPeriod,
    VacationStatus,
    vacation_days,
)
from .repository import AbsenceFilter, AbsenceRepository, VacationPeriodRepository

logger = get_logger(__name__)


class AbsenceService:
    """Use case: absence requests and vacation entitlements."""

    def __init__(
        self,
        absences: AbsenceRepository,
        vacation_periods: VacationPeriodRepository,
        employees: EmployeeRepository,
        audit: Optional[AuditService] = None,
    ):
        self._absences = absences
        self._periods = vacation_periods
        self._employees = employees
        self._audit = audit

    # helpers
    def _employee(self, tenant_id: str, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(tenant_id=tenant_id, employee_id=employee_id)
        if not employee:
            raise ResourceNotFoundError("Employee not found")
        return employee

    def _absence(self, tenant_id: str, absence_id: str) -> Absence:
        absence = self._absences.get_by_id(tenant_id=tenant_id, absence_id=absence_id)
        if not absence:
            raise ResourceNotFoundError("Absence not found")
        return absence

    def _period(self, tenant_id: str, period_id: str) -> VacationPeriod:
        period = self._periods.get_by_id(tenant_id=tenant_id, period_id=period_id)
        if not period:
            raise ResourceNotFoundError("Vacation period not found")
        return period

    def _ensure_no_overlap(self, tenant_id: str, employee_id: str, start: date, end: date) -> None:
        active = self._absences.list_for_employee(
            tenant_id=tenant_id, employee_id=employee_id, statuses=BLOCKING_STATUSES
        )
        if any(a.overlaps(start, end) for a in active):
            raise ValidationError("An absence is already registered for this period")

    def _log(self, absence: Absence, action: AuditAction, actor_id: Optional[str], **kwargs) -> None:
        if self._audit:
            self._audit.log(
                tenant_id=absence.tenant_id,
                user_id=actor_id,
                action=action,
                entity=AuditEntity.ABSENCE,
                entity_id=absence.id,
                **kwargs,
            )

    def _create(self, absence: Absence, actor_id: Optional[str]) -> Absence:
        self._absences.save(absence)
        self._log(
            absence,
            AuditAction.CREATE,
            actor_id,
            new_data={
                "employeeId": absence.employee_id,
                "type": absence.type.value,
                "startDate": absence.start_date.isoformat(),
                "endDate": absence.end_date.isoformat(),
            },
        )
        return absence

    # requests
    def request_vacation(
        self,
        *,
        tenant_id: str,
        employee_id: str,
        vacation_period_id: str,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
        requested_by: Optional[str] = None,
    ) -> Absence:
        employee = self._employee(tenant_id, employee_id)
        if employee.status != EmployeeStatus.ACTIVE:
            raise ValidationError("Employee is not active")
        period = self._period(tenant_id, vacation_period_id)
        if period.employee_id != employee.id:
            raise ValidationError("Vacation period does not belong to this employee")

        total_days = vacation_days(start_date, end_date)
        if total_days < MIN_VACATION_DAYS:
            raise ValidationError(f"Minimum vacation period is {MIN_VACATION_DAYS} days")
        if total_days > MAX_VACATION_DAYS:
            raise ValidationError(f"Maximum vacation period is {MAX_VACATION_DAYS} days")
        if period.remaining_days < total_days:
            raise ValidationError("Not enough vacation days available")
        self._ensure_no_overlap(tenant_id, employee.id, start_date, end_date)
        if start_date < current_day() + timedelta(days=VACATION_NOTICE_DAYS):
            raise ValidationError(f"Vacations must be requested at least {VACATION_NOTICE_DAYS} days in advance")

        absence = Absence(
            id=new_id(),
            tenant_id=tenant_id,
            employee_id=employee.id,
            type=AbsenceType.VACATION,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=reason,
            is_paid=True,
            vacation_period_id=period.id,
            requested_by=requested_by,
        )
        return self._create(absence, requested_by)

    def request_sick_leave(
        self,
        *,
        tenant_id: str,
        employee_id: str,
        start_date: date,
        end_date: date,
        cid: str,
        document_url: Optional[str] = None,
        reason: Optional[str] = None,
        requested_by: Optional[str] = None,
    ) -> Absence:
        employee = self._employee(tenant_id, employee_id)
        cid = require_non_empty(cid, "CID")
        total_days = vacation_days(start_date, end_date)
        self._ensure_no_overlap(tenant_id, employee.id, start_date, end_date)

        absence = Absence(
            id=new_id(),
            tenant_id=tenant_id,
            employee_id=employee.id,
            type=AbsenceType.SICK_LEAVE,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=reason,
            document_url=document_url,
            cid=cid,
            is_paid=True,
            requested_by=requested_by,
        )
        return self._create(absence, requested_by)

    def request_absence(
        self,
        *,
        tenant_id: str,
        employee_id: str,
        type,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
        document_url: Optional[str] = None,
        is_paid: Optional[bool] = None,
        requested_by: Optional[str] = None,
    ) -> Absence:
        absence_type = AbsenceType.parse(type)
        if absence_type.is_vacation:
            raise ValidationError("Use the vacation request for vacations")
        if absence_type.is_sick_leave:
            raise ValidationError("Use the sick leave request for sick leaves")
        employee = self._employee(tenant_id, employee_id)
        require_max_length(reason, "Reason", 1000)
        total_days = vacation_days(start_date, end_date)
        self._ensure_no_overlap(tenant_id, employee.id, start_date, end_date)

        absence = Absence(
            id=new_id(),
            tenant_id=tenant_id,
            employee_id=employee.id,
            type=absence_type,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=reason,
            document_url=document_url,
            is_paid=absence_type.is_paid_by_default if is_paid is None else bool(is_paid),
            requested_by=requested_by,
        )
        return self._create(absence, requested_by)

    # decisions
    def approve_absence(self, *, tenant_id: str, absence_id: str, approver_id: str) -> Absence:
        absence = self._absence(tenant_id, absence_id)
        period = None
        if absence.type.is_vacation and absence.vacation_period_id:
            period = self._period(tenant_id, absence.vacation_period_id)
        absence.approve(approver_id)
        if period is not None:
            period.schedule(absence.start_date, absence.end_date, absence.total_days)
            self._periods.save(period)
        self._absences.save(absence)
        self._log(absence, AuditAction.APPROVE, approver_id, new_data={"status": absence.status.value})
        return absence

    def reject_absence(self, *, tenant_id: str, absence_id: str, rejected_by: str, reason: str) -> Absence:
        absence = self._absence(tenant_id, absence_id)
        absence.reject(rejected_by, reason)
        self._absences.save(absence)
        self._log(
            absence,
            AuditAction.REJECT,
            rejected_by,
            new_data={"status": absence.status.value, "rejectionReason": absence.rejection_reason},
        )
        return absence

    def cancel_absence(self, *, tenant_id: str, absence_id: str, cancelled_by: Optional[str] = None) -> Absence:
        absence = self._absence(tenant_id, absence_id)
        was_approved = absence.status == AbsenceStatus.APPROVED
        absence.cancel()
        if was_approved and absence.type.is_vacation and absence.vacation_period_id:
            period = self._period(tenant_id, absence.vacation_period_id)
            if period.status == VacationStatus.SCHEDULED:
                period.cancel_schedule()
                self._periods.save(period)
        self._absences.save(absence)
        self._log(absence, AuditAction.CANCEL, cancelled_by, new_data={"status": absence.status.value})
        return absence

    def get_absence(self, *, tenant_id: str, absence_id: str) -> Absence:
        return self._absence(tenant_id, absence_id)

    def list_absences(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        employee_id: Optional[str] = None,
        type: Optional[str] = None,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Page[Absence]:
        filters = AbsenceFilter(
            employee_id=employee_id,
            type=AbsenceType.parse(type) if type else None,
            status=parse_enum(AbsenceStatus, status, "Status") if status else None,
            date_from=date_from,
            date_to=date_to,
        )
        items, total = self._absences.list_page(tenant_id=tenant_id, filters=filters, params=params)
        return Page(items=items, total=total, params=params)

    # vacation periods
    def create_vacation_period(self, *, tenant_id: str, employee_id: str, total_days: int = 30) -> VacationPeriod:
        employee = self._employee(tenant_id, employee_id)
        if employee.status == EmployeeStatus.TERMINATED:
            raise ValidationError("Employee is terminated")
        existing = self._periods.list_by_employee(tenant_id=tenant_id, employee_id=employee.id)
        start = existing[-1].acquisition_end + timedelta(days=1) if existing else employee.hire_date

        period = VacationPeriod.create_from_hire_date(
            id=new_id(),
            tenant_id=tenant_id,
            employee_id=employee.id,
            hire_date=start,
            total_days=total_days,
        )
        if period.acquisition_end < current_day():
            period.complete_acquisition()
        return self._periods.save(period)

    def get_vacation_period(self, *, tenant_id: str, period_id: str) -> VacationPeriod:
        return self._period(tenant_id, period_id)

    def list_vacation_periods(self, *, tenant_id: str, employee_id: str) -> List[VacationPeriod]:
        self._employee(tenant_id, employee_id)
        return self._periods.list_by_employee(tenant_id=tenant_id, employee_id=employee_id)

    def sell_vacation_days(self, *, tenant_id: str, period_id: str, days: int) -> VacationPeriod:
        period = self._period(tenant_id, period_id)
        period.sell_days(int(days))
        return self._periods.save(period)

    def complete_vacation(self, *, tenant_id: str, period_id: str, days_used: int) -> VacationPeriod:
        period = self._period(tenant_id, period_id)
        period.complete(int(days_used))
        return self._periods.save(period)

    def expire_vacation_periods(self, *, tenant_id: str, today: Optional[date] = None) -> int:
        day = today or current_day()
        expired = 0
        for period in self._periods.list_concession_ended_before(tenant_id=tenant_id, day=day):
            if period.status in (VacationStatus.COMPLETED, VacationStatus.EXPIRED, VacationStatus.SOLD):
                continue
            period.expire()
            self._periods.save(period)
            expired += 1
        if expired:
            logger.info("Expired %d vacation periods for tenant %s", expired, tenant_id)
        return expired
