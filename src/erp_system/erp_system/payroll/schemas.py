from __future__ import annotations

from datetime import date as Date
from typing import Optional

from pydantic import Field

from ..http.schema import RequestSchema


class CreatePayrollBody(RequestSchema):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)


class CreateDeductionBody(RequestSchema):
    employee_id: str
    name: str = Field(..., min_length=1, max_length=128)
    amount: float = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=1000)
    date: Optional[Date] = None
    is_recurring: bool = False
    installments: Optional[int] = Field(None, ge=1)


class CreateBonusBody(RequestSchema):
    employee_id: str
    name: str = Field(..., min_length=1, max_length=128)
    amount: float = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=1000)
    date: Optional[Date] = None


class RegisterOvertimeBody(RequestSchema):
    employee_id: str
    date: Date
    hours: float = Field(..., gt=0, le=24)
    reason: Optional[str] = Field(None, max_length=1000)
