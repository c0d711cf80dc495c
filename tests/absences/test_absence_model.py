from __future__ import annotations

from datetime import date

import pytest

from erp_system.absences.model import (
    Absence,
    AbsenceStatus,
    AbsenceType,
    VacationPeriod,
    VacationStatus,
)
from erp_system.core.exceptions import ValidationError


def make_absence(**kwargs):
    defaults = dict(
        id="a1",
        tenant_id="t1",
        employee_id="e1",
        type=AbsenceType.SICK_LEAVE,
        start_date=date(2024, 5, 6),
        end_date=date(2024, 5, 8),
        total_days=3,
    )
    defaults.update(kwargs)
    return Absence(**defaults)


def test_absence_type_parsing_and_predicates():
    assert AbsenceType.parse("sick_leave") is AbsenceType.SICK_LEAVE
    assert AbsenceType.VACATION.is_vacation
    assert AbsenceType.SICK_LEAVE.is_sick_leave
    assert AbsenceType.JURY_DUTY.is_paid_by_default
    assert not AbsenceType.UNPAID_LEAVE.is_paid_by_default
    assert not AbsenceType.OTHER.is_paid_by_default
    with pytest.raises(ValidationError):
        AbsenceType.parse("HOLIDAY")


def test_absence_lifecycle():
    absence = make_absence()
    with pytest.raises(ValidationError):
        absence.start_progress()

    absence.approve("manager")
    absence.start_progress()
    assert absence.status is AbsenceStatus.IN_PROGRESS
    with pytest.raises(ValidationError):
        absence.cancel()

    absence.complete()
    assert absence.status is AbsenceStatus.COMPLETED


def test_absence_overlap_is_inclusive():
    absence = make_absence()
    assert absence.overlaps(date(2024, 5, 8), date(2024, 5, 10))
    assert not absence.overlaps(date(2024, 5, 9), date(2024, 5, 10))


def test_vacation_period_dates_from_hire_date():
    period = VacationPeriod.create_from_hire_date(id="v1", tenant_id="t1", employee_id="e1", hire_date=date(2023, 3, 10))
    assert period.acquisition_end == date(2024, 3, 9)
    assert period.concession_start == date(2024, 3, 10)
    assert period.concession_end == date(2025, 3, 9)
    assert period.status is VacationStatus.PENDING_ACQUISITION
    assert not period.is_expired(date(2025, 3, 9))
    assert period.is_expired(date(2025, 3, 10))


def test_vacation_schedule_start_and_complete():
    period = VacationPeriod.create_from_hire_date(id="v1", tenant_id="t1", employee_id="e1", hire_date=date(2023, 3, 10))
    period.complete_acquisition()
    with pytest.raises(ValidationError):
        period.start_vacation()
    with pytest.raises(ValidationError):
        period.schedule(date(2024, 6, 1), date(2024, 6, 4), 4)

    period.schedule(date(2024, 6, 1), date(2024, 6, 20), 20)
    period.start_vacation()
    assert period.status is VacationStatus.IN_PROGRESS

    period.complete(20)
    assert period.remaining_days == 10
    assert period.status is VacationStatus.AVAILABLE
    assert period.scheduled_start is None

    period.schedule(date(2024, 9, 1), date(2024, 9, 10), 10)
    period.complete(10)
    assert period.status is VacationStatus.COMPLETED
    with pytest.raises(ValidationError):
        period.expire()
