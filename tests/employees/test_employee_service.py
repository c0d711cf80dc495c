from __future__ import annotations

from datetime import date, timedelta

import pytest

from erp_system.audit.memory_repository import InMemoryAuditLogRepository
from erp_system.audit.model import AuditAction, AuditEntity
from erp_system.audit.service import AuditService
from erp_system.audit.signature import AuditSignatureService
from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ConflictError, ValidationError
from erp_system.employees.memory_repository import InMemoryEmployeeRepository
from erp_system.employees.model import EmployeeStatus
from erp_system.employees.service import EmployeeService, NewEmployee

TENANT = "t1"


def new_employee(**overrides):
    data = dict(
        registration_number="001",
        full_name="Ana Souza",
        cpf="123.456.789-09",
        hire_date=date(2023, 3, 1),
        base_salary=3500,
        department="Sales",
    )
    data.update(overrides)
    return NewEmployee(**data)


@pytest.fixture
def service():
    audit = AuditService(InMemoryAuditLogRepository(), AuditSignatureService("secret"))
    return EmployeeService(InMemoryEmployeeRepository(), audit), audit


def test_create_normalizes_cpf_and_audits(service):
    employees, audit = service
    employee = employees.create_employee(tenant_id=TENANT, data=new_employee(), actor_id="admin")
    assert employee.cpf == "12345678909"
    assert employee.status is EmployeeStatus.ACTIVE

    history = audit.get_entity_history(tenant_id=TENANT, entity=AuditEntity.EMPLOYEE, entity_id=employee.id)
    assert [h.action for h in history] == [AuditAction.CREATE]


@pytest.mark.parametrize(
    "overrides",
    [
        {"cpf": "123"},
        {"base_salary": -1},
        {"hire_date": date.today() + timedelta(days=10)},
        {"full_name": "  "},
        {"email": "nope"},
    ],
)
def test_create_validates_input(service, overrides):
    employees, _ = service
    with pytest.raises(ValidationError):
        employees.create_employee(tenant_id=TENANT, data=new_employee(**overrides))


def test_registration_number_and_cpf_are_unique_per_tenant(service):
    employees, _ = service
    employees.create_employee(tenant_id=TENANT, data=new_employee())
    with pytest.raises(ConflictError):
        employees.create_employee(tenant_id=TENANT, data=new_employee(cpf="98765432100"))
    with pytest.raises(ConflictError):
        employees.create_employee(tenant_id=TENANT, data=new_employee(registration_number="002"))
    assert employees.create_employee(tenant_id="t2", data=new_employee())


def test_update_and_terminate(service):
    employees, _ = service
    employee = employees.create_employee(tenant_id=TENANT, data=new_employee())
    updated = employees.update_employee(
        tenant_id=TENANT, employee_id=employee.id, changes={"base_salary": 4000.456, "position": "Lead"}
    )
    assert updated.base_salary == 4000.46
    assert updated.position == "Lead"

    with pytest.raises(ValidationError):
        employees.update_employee(tenant_id=TENANT, employee_id=employee.id, changes={"status": "TERMINATED"})
    with pytest.raises(ValidationError):
        employees.terminate_employee(tenant_id=TENANT, employee_id=employee.id, termination_date=date(2020, 1, 1))

    terminated = employees.terminate_employee(
        tenant_id=TENANT, employee_id=employee.id, termination_date=date(2024, 6, 30)
    )
    assert terminated.status is EmployeeStatus.TERMINATED
    with pytest.raises(ValidationError):
        employees.update_employee(tenant_id=TENANT, employee_id=employee.id, changes={"position": "X"})


def test_list_filters(service):
    employees, _ = service
    employees.create_employee(tenant_id=TENANT, data=new_employee())
    employees.create_employee(
        tenant_id=TENANT,
        data=new_employee(registration_number="002", full_name="Bruno Lima", cpf="98765432100", department="HR"),
    )
    assert employees.list_employees(tenant_id=TENANT, params=PageParams(), department="HR").total == 1
    page = employees.list_employees(tenant_id=TENANT, params=PageParams(), search="souza")
    assert [e.full_name for e in page.items] == ["Ana Souza"]
    assert employees.list_employees(tenant_id=TENANT, params=PageParams(), status="terminated").total == 0
