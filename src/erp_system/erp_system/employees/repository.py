from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageParams
from .model import Employee, EmployeeStatus


class EmployeeRepository(Protocol):
    def save(self, employee: Employee) -> Employee:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_registration_number(self, *, tenant_id: str, registration_number: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_cpf(self, *, tenant_id: str, cpf: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self, *, tenant_id: str) -> List[Employee]:
        raise NotImplementedError

    def list_page(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        status: Optional[EmployeeStatus] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Employee], int]:
        raise NotImplementedError
