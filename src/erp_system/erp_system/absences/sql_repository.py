from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence, Tuple

from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import AbsenceRow, VacationPeriodRow
from .model import Absence, AbsenceStatus, VacationPeriod
from .repository import AbsenceFilter


class SqlAbsenceRepository(SqlRepository[Absence]):
    entity_cls = Absence
    table_cls = AbsenceRow

    def save(self, absence: Absence) -> Absence:
        return self._save(absence)

    def get_by_id(self, *, tenant_id: str, absence_id: str) -> Optional[Absence]:
        return self._get(absence_id, tenant_id=tenant_id)

    def list_for_employee(
        self, *, tenant_id: str, employee_id: str, statuses: Sequence[AbsenceStatus] = ()
    ) -> List[Absence]:
        criteria = [AbsenceRow.employee_id == employee_id]
        if statuses:
            criteria.append(AbsenceRow.status.in_(list(statuses)))
        return self._find(*criteria, tenant_id=tenant_id, order_by=[AbsenceRow.start_date])

    def list_page(self, *, tenant_id: str, filters: AbsenceFilter, params: PageParams) -> Tuple[List[Absence], int]:
        criteria = []
        if filters.employee_id:
            criteria.append(AbsenceRow.employee_id == filters.employee_id)
        if filters.type is not None:
            criteria.append(AbsenceRow.type == filters.type)
        if filters.status is not None:
            criteria.append(AbsenceRow.status == filters.status)
        if filters.date_from:
            criteria.append(AbsenceRow.end_date >= filters.date_from)
        if filters.date_to:
            criteria.append(AbsenceRow.start_date <= filters.date_to)
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[AbsenceRow.start_date.desc()])


class SqlVacationPeriodRepository(SqlRepository[VacationPeriod]):
    entity_cls = VacationPeriod
    table_cls = VacationPeriodRow

    def save(self, period: VacationPeriod) -> VacationPeriod:
        return self._save(period)

    def get_by_id(self, *, tenant_id: str, period_id: str) -> Optional[VacationPeriod]:
        return self._get(period_id, tenant_id=tenant_id)

    def list_by_employee(self, *, tenant_id: str, employee_id: str) -> List[VacationPeriod]:
        return self._find(
            VacationPeriodRow.employee_id == employee_id,
            tenant_id=tenant_id,
            order_by=[VacationPeriodRow.acquisition_start],
        )

    def list_concession_ended_before(self, *, tenant_id: str, day: date) -> List[VacationPeriod]:
        return self._find(VacationPeriodRow.concession_end < day, tenant_id=tenant_id)
