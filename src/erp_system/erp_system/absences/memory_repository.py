from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import Absence, AbsenceStatus, VacationPeriod
from .repository import AbsenceFilter


class InMemoryAbsenceRepository(InMemoryRepository[Absence]):
    def save(self, absence: Absence) -> Absence:
        return self._save(absence)

    def get_by_id(self, *, tenant_id: str, absence_id: str) -> Optional[Absence]:
        return self._get(absence_id, tenant_id=tenant_id)

    def list_for_employee(
        self, *, tenant_id: str, employee_id: str, statuses: Sequence[AbsenceStatus] = ()
    ) -> List[Absence]:
        return self._find(
            lambda a: a.employee_id == employee_id and (not statuses or a.status in statuses),
            tenant_id=tenant_id,
            sort_key=lambda a: a.start_date,
        )

    def list_page(self, *, tenant_id: str, filters: AbsenceFilter, params: PageParams) -> Tuple[List[Absence], int]:
        found = self._find(filters.matches, tenant_id=tenant_id, sort_key=lambda a: a.start_date, reverse=True)
        return self._page(found, params)


class InMemoryVacationPeriodRepository(InMemoryRepository[VacationPeriod]):
    def save(self, period: VacationPeriod) -> VacationPeriod:
        return self._save(period)

    def get_by_id(self, *, tenant_id: str, period_id: str) -> Optional[VacationPeriod]:
        return self._get(period_id, tenant_id=tenant_id)

    def list_by_employee(self, *, tenant_id: str, employee_id: str) -> List[VacationPeriod]:
        return self._find(
            lambda p: p.employee_id == employee_id,
            tenant_id=tenant_id,
            sort_key=lambda p: p.acquisition_start,
        )

    def list_concession_ended_before(self, *, tenant_id: str, day: date) -> List[VacationPeriod]:
        return self._find(lambda p: p.concession_end < day, tenant_id=tenant_id)
