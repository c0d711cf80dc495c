from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Protocol, Sequence, Tuple

from ..common.pagination import PageParams
from .model import Absence, AbsenceStatus, AbsenceType, VacationPeriod


@dataclass(frozen=True)
class AbsenceFilter:
    employee_id: Optional[str] = None
    type: Optional[AbsenceType] = None
    status: Optional[AbsenceStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def matches(self, absence: Absence) -> bool:
        if self.employee_id and absence.employee_id != self.employee_id:
            return False
        if self.type is not None and absence.type != self.type:
            return False
        if self.status is not None and absence.status != self.status:
            return False
        if self.date_from and absence.end_date < self.date_from:
            return False
        if self.date_to and absence.start_date > self.date_to:
            return False
        return True


class AbsenceRepository(Protocol):
    def save(self, absence: Absence) -> Absence:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, absence_id: str) -> Optional[Absence]:
        raise NotImplementedError

    def list_for_employee(
        self, *, tenant_id: str, employee_id: str, statuses: Sequence[AbsenceStatus] = ()
    ) -> List[Absence]:
        raise NotImplementedError

    def list_page(self, *, tenant_id: str, filters: AbsenceFilter, params: PageParams) -> Tuple[List[Absence], int]:
        raise NotImplementedError


class VacationPeriodRepository(Protocol):
    def save(self, period: VacationPeriod) -> VacationPeriod:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, period_id: str) -> Optional[VacationPeriod]:
        raise NotImplementedError

    def list_by_employee(self, *, tenant_id: str, employee_id: str) -> List[VacationPeriod]:
        raise NotImplementedError

    def list_concession_ended_before(self, *, tenant_id: str, day: date) -> List[VacationPeriod]:
        raise NotImplementedError
