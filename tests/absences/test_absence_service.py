from __future__ import annotations

from datetime import date, timedelta

import pytest

from erp_system.absences.memory_repository import InMemoryAbsenceRepository, InMemoryVacationPeriodRepository
from erp_system.absences.model import AbsenceStatus, VacationStatus
from erp_system.absences.service import AbsenceService
from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ValidationError
from erp_system.employees.memory_repository import InMemoryEmployeeRepository
from erp_system.employees.model import Employee

TENANT = "t1"


@pytest.fixture
def service():
    employees = InMemoryEmployeeRepository()
    employees.save(
        Employee(
            id="e1",
            tenant_id=TENANT,
            registration_number="001",
            full_name="Ana",
            cpf="12345678909",
            hire_date=date(2020, 1, 1),
        )
    )
    return AbsenceService(InMemoryAbsenceRepository(), InMemoryVacationPeriodRepository(), employees)


def upcoming(offset, days):
    start = date.today() + timedelta(days=offset)
    return start, start + timedelta(days=days - 1)


def test_vacation_periods_follow_each_other(service):
    first = service.create_vacation_period(tenant_id=TENANT, employee_id="e1")
    second = service.create_vacation_period(tenant_id=TENANT, employee_id="e1")
    assert first.acquisition_start == date(2020, 1, 1)
    assert first.acquisition_end == date(2020, 12, 31)
    assert first.concession_end == date(2021, 12, 31)
    assert second.acquisition_start == date(2021, 1, 1)
    assert first.status is VacationStatus.AVAILABLE
    assert len(service.list_vacation_periods(tenant_id=TENANT, employee_id="e1")) == 2


def test_vacation_approval_schedules_and_cancel_releases(service):
    period = service.create_vacation_period(tenant_id=TENANT, employee_id="e1")
    start, end = upcoming(40, 10)
    absence = service.request_vacation(
        tenant_id=TENANT, employee_id="e1", vacation_period_id=period.id, start_date=start, end_date=end
    )
    assert absence.total_days == 10
    assert absence.status is AbsenceStatus.PENDING

    service.approve_absence(tenant_id=TENANT, absence_id=absence.id, approver_id="boss")
    scheduled = service.get_vacation_period(tenant_id=TENANT, period_id=period.id)
    assert scheduled.status is VacationStatus.SCHEDULED
    assert scheduled.scheduled_start == start

    service.cancel_absence(tenant_id=TENANT, absence_id=absence.id)
    assert service.get_vacation_period(tenant_id=TENANT, period_id=period.id).status is VacationStatus.AVAILABLE


@pytest.mark.parametrize("offset, days", [(40, 3), (40, 31), (5, 10)])
def test_vacation_request_rules(service, offset, days):
    period = service.create_vacation_period(tenant_id=TENANT, employee_id="e1")
    start, end = upcoming(offset, days)
    with pytest.raises(ValidationError):
        service.request_vacation(
            tenant_id=TENANT, employee_id="e1", vacation_period_id=period.id, start_date=start, end_date=end
        )


def test_overlapping_absences_are_refused(service):
    start, end = upcoming(1, 3)
    service.request_sick_leave(tenant_id=TENANT, employee_id="e1", start_date=start, end_date=end, cid="J11")
    with pytest.raises(ValidationError):
        service.request_absence(
            tenant_id=TENANT, employee_id="e1", type="personal_leave", start_date=end, end_date=end
        )
    with pytest.raises(ValidationError):
        service.request_sick_leave(tenant_id=TENANT, employee_id="e1", start_date=start, end_date=end, cid=" ")


def test_generic_absence_rules_and_rejection(service):
    start, end = upcoming(10, 1)
    with pytest.raises(ValidationError):
        service.request_absence(tenant_id=TENANT, employee_id="e1", type="VACATION", start_date=start, end_date=end)

    absence = service.request_absence(
        tenant_id=TENANT, employee_id="e1", type="UNPAID_LEAVE", start_date=start, end_date=end
    )
    assert absence.is_paid is False
    with pytest.raises(ValidationError):
        service.reject_absence(tenant_id=TENANT, absence_id=absence.id, rejected_by="boss", reason="")
    rejected = service.reject_absence(tenant_id=TENANT, absence_id=absence.id, rejected_by="boss", reason="Busy")
    assert rejected.status is AbsenceStatus.REJECTED
    with pytest.raises(ValidationError):
        service.approve_absence(tenant_id=TENANT, absence_id=absence.id, approver_id="boss")

    page = service.list_absences(tenant_id=TENANT, params=PageParams(), status="rejected")
    assert [a.id for a in page.items] == [absence.id]


def test_sell_and_expire_vacation_days(service):
    period = service.create_vacation_period(tenant_id=TENANT, employee_id="e1")
    with pytest.raises(ValidationError):
        service.sell_vacation_days(tenant_id=TENANT, period_id=period.id, days=11)
    sold = service.sell_vacation_days(tenant_id=TENANT, period_id=period.id, days=10)
    assert sold.remaining_days == 20

    assert service.expire_vacation_periods(tenant_id=TENANT, today=date(2022, 1, 1)) == 1
    assert service.get_vacation_period(tenant_id=TENANT, period_id=period.id).status is VacationStatus.EXPIRED
    assert service.expire_vacation_periods(tenant_id=TENANT, today=date(2022, 1, 1)) == 0
