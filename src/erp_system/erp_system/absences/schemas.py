from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from ..http.schema import RequestSchema


class VacationRequestBody(RequestSchema):
    employee_id: str
    vacation_period_id: str
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=1000)


class SickLeaveBody(RequestSchema):
    employee_id: str
    start_date: date
    end_date: date
    cid: str = Field(..., min_length=1, max_length=16)
    document_url: Optional[str] = None
    reason: Optional[str] = Field(None, max_length=1000)


class AbsenceRequestBody(RequestSchema):
    employee_id: str
    type: str
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=1000)
    document_url: Optional[str] = None
    is_paid: Optional[bool] = None


class RejectAbsenceBody(RequestSchema):
    reason: str = Field(..., min_length=1, max_length=1000)


class CreateVacationPeriodBody(RequestSchema):
    employee_id: str
    total_days: int = Field(30, ge=1, le=30)


class SellDaysBody(RequestSchema):
    days: int = Field(..., ge=1)


class CompleteVacationBody(RequestSchema):
    days_used: int = Field(..., ge=1)
