from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import or_

from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import EmployeeRow
from .model import Employee, EmployeeStatus


class SqlEmployeeRepository(SqlRepository[Employee]):
    entity_cls = Employee
    table_cls = EmployeeRow

    def save(self, employee: Employee) -> Employee:
        return self._save(employee)

    def get_by_id(self, *, tenant_id: str, employee_id: str) -> Optional[Employee]:
        return self._get(employee_id, tenant_id=tenant_id)

    def get_by_registration_number(self, *, tenant_id: str, registration_number: str) -> Optional[Employee]:
        return self._first(EmployeeRow.registration_number == registration_number, tenant_id=tenant_id)

    def get_by_cpf(self, *, tenant_id: str, cpf: str) -> Optional[Employee]:
        return self._first(EmployeeRow.cpf == cpf, tenant_id=tenant_id)

    def list_active(self, *, tenant_id: str) -> List[Employee]:
        return self._find(
            EmployeeRow.status == EmployeeStatus.ACTIVE,
            tenant_id=tenant_id,
            order_by=[EmployeeRow.full_name],
        )

    def list_page(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        status: Optional[EmployeeStatus] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Employee], int]:
        criteria = []
        if status is not None:
            criteria.append(EmployeeRow.status == status)
        if department:
            criteria.append(EmployeeRow.department == department)
        if search:
            pattern = f"%{search}%"
            criteria.append(or_(EmployeeRow.full_name.ilike(pattern), EmployeeRow.registration_number.ilike(pattern)))
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[EmployeeRow.full_name])
