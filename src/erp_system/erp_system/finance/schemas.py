from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from ..http.schema import RequestSchema


class CreateCategoryBody(RequestSchema):
    name: str = Field(..., min_length=1, max_length=128)
    type: str = "EXPENSE"
    slug: Optional[str] = None


class CreateCostCenterBody(RequestSchema):
    code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=128)


class CreateBankAccountBody(RequestSchema):
    name: str = Field(..., min_length=1, max_length=128)
    bank_code: str = Field(..., min_length=1, max_length=8)
    agency: str = Field(..., min_length=1, max_length=16)
    number: str = Field(..., min_length=1, max_length=32)
    balance: float = 0.0


class CreateFinanceEntryBody(RequestSchema):
    type: str
    description: str = Field(..., min_length=1, max_length=500)
    category_id: str
    expected_amount: float = Field(..., gt=0)
    due_date: date
    issue_date: Optional[date] = None
    cost_center_id: Optional[str] = None
    bank_account_id: Optional[str] = None
    supplier_name: Optional[str] = Field(None, max_length=256)
    customer_name: Optional[str] = Field(None, max_length=256)
    discount: float = Field(0.0, ge=0)
    interest: float = Field(0.0, ge=0)
    penalty: float = Field(0.0, ge=0)
    competence_date: Optional[date] = None
    recurrence_type: str = "SINGLE"
    recurrence_interval: Optional[int] = Field(None, ge=1)
    recurrence_unit: Optional[str] = None
    total_installments: Optional[int] = Field(None, ge=2, le=360)
    notes: Optional[str] = Field(None, max_length=2000)
    tags: List[str] = Field(default_factory=list)


class UpdateFinanceEntryBody(RequestSchema):
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    category_id: Optional[str] = None
    cost_center_id: Optional[str] = None
    bank_account_id: Optional[str] = None
    supplier_name: Optional[str] = Field(None, max_length=256)
    customer_name: Optional[str] = Field(None, max_length=256)
    expected_amount: Optional[float] = Field(None, gt=0)
    discount: Optional[float] = Field(None, ge=0)
    interest: Optional[float] = Field(None, ge=0)
    penalty: Optional[float] = Field(None, ge=0)
    due_date: Optional[date] = None
    competence_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=2000)
    tags: Optional[List[str]] = None


class RegisterPaymentBody(RequestSchema):
    amount: float = Field(..., gt=0)
    payment_date: Optional[date] = None
    bank_account_id: Optional[str] = None


class CheckOverdueBody(RequestSchema):
    due_soon_days: int = Field(3, ge=0, le=60)
    notify_user_id: Optional[str] = None


class CreateLoanBody(RequestSchema):
    name: str = Field(..., min_length=1, max_length=128)
    bank_account_id: str
    cost_center_id: str
    principal_amount: float = Field(..., gt=0)
    interest_rate: float = Field(..., ge=0)
    start_date: date
    total_installments: int = Field(..., ge=1, le=600)
    installment_day: Optional[int] = Field(None, ge=1, le=31)
    contract_number: Optional[str] = Field(None, max_length=64)
    notes: Optional[str] = Field(None, max_length=2000)


class LoanPaymentBody(RequestSchema):
    installment_id: str
    amount: float = Field(..., gt=0)
    paid_at: Optional[datetime] = None
