from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import today, utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.serialization import to_jsonable
from ..common.validators import parse_enum, require_email, require_non_empty, require_non_negative
from ..core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from .model import Employee, EmployeeStatus, normalize_cpf
from .repository import EmployeeRepository


@dataclass(frozen=True)
class NewEmployee:
    registration_number: str
    full_name: str
    cpf: str
    hire_date: date
    base_salary: float = 0.0
    user_id: Optional[str] = None
    email: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None


_UPDATABLE = ("full_name", "email", "position", "department", "base_salary", "status", "user_id")


class EmployeeService:
    """Use case: employee records of the HR module."""

    def __init__(self, employees: EmployeeRepository, audit: Optional[AuditService] = None):
        self._employees = employees
        self._audit = audit

    def _get(self, tenant_id: str, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(tenant_id=tenant_id, employee_id=employee_id)
        if not employee:
            raise ResourceNotFoundError("Employee not found")
        return employee

    def _log(self, tenant_id: str, actor_id: Optional[str], action: AuditAction, employee: Employee, **kwargs) -> None:
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=actor_id,
                action=action,
                entity=AuditEntity.EMPLOYEE,
                entity_id=employee.id,
                **kwargs,
            )

    @staticmethod
    def _validate_cpf(cpf: str) -> str:
        digits = normalize_cpf(cpf)
        if len(digits) != 11:
            raise ValidationError("CPF must have 11 digits")
        return digits

    def create_employee(self, *, tenant_id: str, data: NewEmployee, actor_id: Optional[str] = None) -> Employee:
        registration_number = require_non_empty(data.registration_number, "Registration number")
        full_name = require_non_empty(data.full_name, "Full name")
        cpf = self._validate_cpf(data.cpf)
        require_non_negative(data.base_salary, "Base salary")
        if data.hire_date > today():
            raise ValidationError("Hire date cannot be in the future")
        email = require_email(data.email) if data.email else None

        if self._employees.get_by_registration_number(tenant_id=tenant_id, registration_number=registration_number):
            raise ConflictError("Registration number already in use")
        if self._employees.get_by_cpf(tenant_id=tenant_id, cpf=cpf):
            raise ConflictError("CPF already registered")

        employee = self._employees.save(
            Employee(
                id=new_id(),
                tenant_id=tenant_id,
                registration_number=registration_number,
                full_name=full_name,
                cpf=cpf,
                hire_date=data.hire_date,
                base_salary=round(float(data.base_salary), 2),
                user_id=data.user_id,
                email=email,
                position=data.position,
                department=data.department,
            )
        )
        self._log(
            tenant_id,
            actor_id,
            AuditAction.CREATE,
            employee,
            new_data={"registrationNumber": employee.registration_number, "fullName": employee.full_name},
        )
        return employee

    def update_employee(
        self, *, tenant_id: str, employee_id: str, changes: dict, actor_id: Optional[str] = None
    ) -> Employee:
        employee = self._get(tenant_id, employee_id)
        if employee.status == EmployeeStatus.TERMINATED:
            raise ValidationError("Terminated employees cannot be updated")

        old = {}
        for key in _UPDATABLE:
            if key not in changes or changes[key] is None:
                continue
            value = changes[key]
            if key == "full_name":
                value = require_non_empty(value, "Full name")
            elif key == "email":
                value = require_email(value)
            elif key == "base_salary":
                value = round(float(require_non_negative(value, "Base salary")), 2)
            elif key == "status":
                value = parse_enum(EmployeeStatus, value, "Status")
                if value == EmployeeStatus.TERMINATED:
                    raise ValidationError("Use the termination operation to terminate an employee")
            old[key] = getattr(employee, key)
            setattr(employee, key, value)

        employee.updated_at = utc_now()
        self._employees.save(employee)
        self._log(
            tenant_id,
            actor_id,
            AuditAction.UPDATE,
            employee,
            old_data=to_jsonable(old),
            new_data={k: to_jsonable(getattr(employee, k)) for k in old},
        )
        return employee

    def terminate_employee(
        self, *, tenant_id: str, employee_id: str, termination_date: date, actor_id: Optional[str] = None
    ) -> Employee:
        employee = self._get(tenant_id, employee_id)
        if employee.status == EmployeeStatus.TERMINATED:
            raise ValidationError("Employee is already terminated")
        if termination_date < employee.hire_date:
            raise ValidationError("Termination date cannot be before the hire date")

        previous = employee.status
        employee.status = EmployeeStatus.TERMINATED
        employee.termination_date = termination_date
        employee.updated_at = utc_now()
        self._employees.save(employee)
        self._log(
            tenant_id,
            actor_id,
            AuditAction.STATUS_CHANGE,
            employee,
            old_data={"status": previous.value},
            new_data={"status": employee.status.value, "terminationDate": termination_date.isoformat()},
        )
        return employee

    def get_employee(self, *, tenant_id: str, employee_id: str) -> Employee:
        return self._get(tenant_id, employee_id)

    def list_employees(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        status: Optional[str] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Page[Employee]:
        status_enum = parse_enum(EmployeeStatus, status, "Status") if status else None
        items, total = self._employees.list_page(
            tenant_id=tenant_id, params=params, status=status_enum, department=department, search=search
        )
        return Page(items=items, total=total, params=params)
