from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from ..common.datetime_utils import add_months, inclusive_days, ranges_overlap, utc_now
from ..common.validators import parse_enum
from ..core.exceptions import ValidationError

MIN_VACATION_DAYS = 5
MAX_VACATION_DAYS = 30
VACATION_NOTICE_DAYS = 30


class AbsenceType(str, Enum):
    VACATION = "VACATION"
    SICK_LEAVE = "SICK_LEAVE"
    PERSONAL_LEAVE = "PERSONAL_LEAVE"
    MATERNITY_LEAVE = "MATERNITY_LEAVE"
    PATERNITY_LEAVE = "PATERNITY_LEAVE"
    BEREAVEMENT_LEAVE = "BEREAVEMENT_LEAVE"
    WEDDING_LEAVE = "WEDDING_LEAVE"
    MEDICAL_APPOINTMENT = "MEDICAL_APPOINTMENT"
    JURY_DUTY = "JURY_DUTY"
    UNPAID_LEAVE = "UNPAID_LEAVE"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value) -> "AbsenceType":
        return parse_enum(cls, value, "Absence type")

    @property
    def is_vacation(self) -> bool:
        return self == AbsenceType.VACATION

    @property
    def is_sick_leave(self) -> bool:
        return self == AbsenceType.SICK_LEAVE

    @property
    def is_paid_by_default(self) -> bool:
        return self not in (AbsenceType.UNPAID_LEAVE, AbsenceType.OTHER)


class AbsenceStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


BLOCKING_STATUSES = (AbsenceStatus.PENDING, AbsenceStatus.APPROVED, AbsenceStatus.IN_PROGRESS)


@dataclass
class Absence:
    id: str
    tenant_id: str
    employee_id: str
    type: AbsenceType
    start_date: date
    end_date: date
    total_days: int
    status: AbsenceStatus = AbsenceStatus.PENDING
    reason: Optional[str] = None
    document_url: Optional[str] = None
    cid: Optional[str] = None
    is_paid: bool = True
    vacation_period_id: Optional[str] = None
    requested_by: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def _require(self, *allowed: AbsenceStatus, action: str) -> None:
        if self.status not in allowed:
            raise ValidationError(f"Cannot {action} an absence with status {self.status.value}")

    def approve(self, approver_id: str) -> None:
        self._require(AbsenceStatus.PENDING, action="approve")
        self.status = AbsenceStatus.APPROVED
        self.approved_by = approver_id
        self.approved_at = utc_now()
        self.updated_at = self.approved_at

    def reject(self, rejected_by: str, reason: str) -> None:
        self._require(AbsenceStatus.PENDING, action="reject")
        if not reason or not reason.strip():
            raise ValidationError("Rejection reason is required")
        self.status = AbsenceStatus.REJECTED
        self.approved_by = rejected_by
        self.rejection_reason = reason.strip()
        self.updated_at = utc_now()

    def cancel(self) -> None:
        self._require(AbsenceStatus.PENDING, AbsenceStatus.APPROVED, action="cancel")
        self.status = AbsenceStatus.CANCELLED
        self.updated_at = utc_now()

    def start_progress(self) -> None:
        self._require(AbsenceStatus.APPROVED, action="start")
        self.status = AbsenceStatus.IN_PROGRESS
        self.updated_at = utc_now()

    def complete(self) -> None:
        self._require(AbsenceStatus.IN_PROGRESS, action="complete")
        self.status = AbsenceStatus.COMPLETED
        self.updated_at = utc_now()

    def overlaps(self, start: date, end: date) -> bool:
        return ranges_overlap(self.start_date, self.end_date, start, end)


class VacationStatus(str, Enum):
    PENDING_ACQUISITION = "PENDING_ACQUISITION"
    AVAILABLE = "AVAILABLE"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    SOLD = "SOLD"


@dataclass
class VacationPeriod:
    """Vacation entitlement earned over one acquisition year."""

    id: str
    tenant_id: str
    employee_id: str
    acquisition_start: date
    acquisition_end: date
    concession_start: date
    concession_end: date
    total_days: int = 30
    used_days: int = 0
    sold_days: int = 0
    status: VacationStatus = VacationStatus.PENDING_ACQUISITION
    scheduled_start: Optional[date] = None
    scheduled_end: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    @classmethod
    def create_from_hire_date(
        cls, *, id: str, tenant_id: str, employee_id: str, hire_date: date, total_days: int = 30
    ) -> "VacationPeriod":
        acquisition_end = add_months(hire_date, 12) - timedelta(days=1)
        concession_start = acquisition_end + timedelta(days=1)
        concession_end = add_months(concession_start, 12) - timedelta(days=1)
        return cls(
            id=id,
            tenant_id=tenant_id,
            employee_id=employee_id,
            acquisition_start=hire_date,
            acquisition_end=acquisition_end,
            concession_start=concession_start,
            concession_end=concession_end,
            total_days=total_days,
        )

    @property
    def remaining_days(self) -> int:
        return self.total_days - self.used_days - self.sold_days

    @property
    def max_sellable_days(self) -> int:
        return self.total_days // 3 - self.sold_days

    def _touch(self) -> None:
        self.updated_at = utc_now()

    def complete_acquisition(self) -> None:
        if self.status != VacationStatus.PENDING_ACQUISITION:
            raise ValidationError("Vacation period is not pending acquisition")
        self.status = VacationStatus.AVAILABLE
        self._touch()

    def schedule(self, start: date, end: date, days: int) -> None:
        if self.status != VacationStatus.AVAILABLE:
            raise ValidationError("Cannot schedule vacation in the current status")
        if self.remaining_days <= 0:
            raise ValidationError("No vacation days remaining")
        if days < MIN_VACATION_DAYS:
            raise ValidationError(f"Minimum vacation period is {MIN_VACATION_DAYS} days")
        if days > self.remaining_days:
            raise ValidationError(f"Only {self.remaining_days} vacation days remaining")
        if start > end:
            raise ValidationError("Start date must be before end date")
        self.status = VacationStatus.SCHEDULED
        self.scheduled_start = start
        self.scheduled_end = end
        self._touch()

    def cancel_schedule(self) -> None:
        if self.status != VacationStatus.SCHEDULED:
            raise ValidationError("Vacation is not scheduled")
        self.status = VacationStatus.AVAILABLE
        self.scheduled_start = None
        self.scheduled_end = None
        self._touch()

    def start_vacation(self) -> None:
        if self.status != VacationStatus.SCHEDULED:
            raise ValidationError("Vacation must be scheduled before starting")
        self.status = VacationStatus.IN_PROGRESS
        self._touch()

    def complete(self, days_used: int) -> None:
        if self.status not in (VacationStatus.IN_PROGRESS, VacationStatus.SCHEDULED):
            raise ValidationError("Vacation must be in progress or scheduled to complete")
        if days_used < 1 or days_used > self.remaining_days:
            raise ValidationError(f"Days used must be between 1 and {self.remaining_days}")
        self.used_days += days_used
        self.scheduled_start = None
        self.scheduled_end = None
        self.status = VacationStatus.COMPLETED if self.remaining_days == 0 else VacationStatus.AVAILABLE
        self._touch()

    def sell_days(self, days: int) -> None:
        if self.status != VacationStatus.AVAILABLE:
            raise ValidationError("Cannot sell vacation days in the current status")
        if days < 1:
            raise ValidationError("Days to sell must be at least 1")
        if days > self.max_sellable_days:
            raise ValidationError(f"At most {self.max_sellable_days} days can still be sold")
        if days > self.remaining_days:
            raise ValidationError(f"Only {self.remaining_days} vacation days remaining")
        self.sold_days += days
        if self.remaining_days == 0:
            self.status = VacationStatus.SOLD
        self._touch()

    def expire(self) -> None:
        if self.status in (VacationStatus.COMPLETED, VacationStatus.EXPIRED):
            raise ValidationError("Vacation period is already finalized")
        self.status = VacationStatus.EXPIRED
        self._touch()

    def is_expired(self, today: date) -> bool:
        return today > self.concession_end


def vacation_days(start: date, end: date) -> int:
    if end < start:
        raise ValidationError("End date must be on or after start date")
    return inclusive_days(start, end)
