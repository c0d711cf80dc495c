from __future__ import annotations

from typing import List, Optional, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import Employee, EmployeeStatus


class InMemoryEmployeeRepository(InMemoryRepository[Employee]):
    def save(self, employee: Employee) -> Employee:
        return self._save(employee)

    def get_by_id(self, *, tenant_id: str, employee_id: str) -> Optional[Employee]:
        return self._get(employee_id, tenant_id=tenant_id)

    def get_by_registration_number(self, *, tenant_id: str, registration_number: str) -> Optional[Employee]:
        return self._first(lambda e: e.registration_number == registration_number, tenant_id=tenant_id)

    def get_by_cpf(self, *, tenant_id: str, cpf: str) -> Optional[Employee]:
        return self._first(lambda e: e.cpf == cpf, tenant_id=tenant_id)

    def list_active(self, *, tenant_id: str) -> List[Employee]:
        return self._find(
            lambda e: e.status == EmployeeStatus.ACTIVE,
            tenant_id=tenant_id,
            sort_key=lambda e: e.full_name,
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
        needle = (search or "").lower()

        def matches(e: Employee) -> bool:
            if status is not None and e.status != status:
                return False
            if department and e.department != department:
                return False
            if needle and needle not in e.full_name.lower() and needle not in e.registration_number.lower():
                return False
            return True

        return self._page(self._find(matches, tenant_id=tenant_id, sort_key=lambda e: e.full_name), params)
