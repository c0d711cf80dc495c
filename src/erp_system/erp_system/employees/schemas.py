from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from ..http.schema import RequestSchema


class CreateEmployeeBody(RequestSchema):
    registration_number: str = Field(..., min_length=1, max_length=32)
    full_name: str = Field(..., min_length=1, max_length=128)
    cpf: str
    hire_date: date
    base_salary: float = Field(0.0, ge=0)
    user_id: Optional[str] = None
    email: Optional[str] = None
    position: Optional[str] = Field(None, max_length=64)
    department: Optional[str] = Field(None, max_length=64)


class UpdateEmployeeBody(RequestSchema):
    full_name: Optional[str] = Field(None, min_length=1, max_length=128)
    email: Optional[str] = None
    position: Optional[str] = Field(None, max_length=64)
    department: Optional[str] = Field(None, max_length=64)
    base_salary: Optional[float] = Field(None, ge=0)
    status: Optional[str] = None
    user_id: Optional[str] = None


class TerminateEmployeeBody(RequestSchema):
    termination_date: date
