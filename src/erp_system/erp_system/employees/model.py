from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from ..common.datetime_utils import utc_now


class EmployeeStatus(str, Enum):
    """Employment situation of an employee."""

    ACTIVE = "ACTIVE"
    ON_LEAVE = "ON_LEAVE"
    VACATION = "VACATION"
    SUSPENDED = "SUSPENDED"
    TERMINATED = "TERMINATED"


def normalize_cpf(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


@dataclass
class Employee:
    id: str
    tenant_id: str
    registration_number: str
    full_name: str
    cpf: str
    hire_date: date
    base_salary: float = 0.0
    user_id: Optional[str] = None
    email: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    termination_date: Optional[date] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE
