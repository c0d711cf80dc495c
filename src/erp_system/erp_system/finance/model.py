from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from ..common.datetime_utils import utc_now

PAYMENT_TOLERANCE = 0.01


class FinanceCategoryType(str, Enum):
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    BOTH = "BOTH"


@dataclass
class FinanceCategory:
    id: str
    tenant_id: str
    name: str
    slug: str
    type: FinanceCategoryType = FinanceCategoryType.EXPENSE
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    deleted_at: Optional[datetime] = None


@dataclass
class CostCenter:
    id: str
    tenant_id: str
    code: str
    name: str
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    deleted_at: Optional[datetime] = None


@dataclass
class BankAccount:
    id: str
    tenant_id: str
    name: str
    bank_code: str
    agency: str
    number: str
    balance: float = 0.0
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def debit(self, amount: float) -> None:
        self.balance = round(self.balance - amount, 2)
        self.updated_at = utc_now()

    def credit(self, amount: float) -> None:
        self.balance = round(self.balance + amount, 2)
        self.updated_at = utc_now()


class FinanceEntryType(str, Enum):
    PAYABLE = "PAYABLE"
    RECEIVABLE = "RECEIVABLE"

    @property
    def code_prefix(self) -> str:
        return "PAG" if self == FinanceEntryType.PAYABLE else "REC"

    @property
    def settled_status(self) -> "FinanceEntryStatus":
        return FinanceEntryStatus.PAID if self == FinanceEntryType.PAYABLE else FinanceEntryStatus.RECEIVED


class FinanceEntryStatus(str, Enum):
    PENDING = "PENDING"
    OVERDUE = "OVERDUE"
    PAID = "PAID"
    RECEIVED = "RECEIVED"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    CANCELLED = "CANCELLED"
    SCHEDULED = "SCHEDULED"


SETTLED_STATUSES = (FinanceEntryStatus.PAID, FinanceEntryStatus.RECEIVED)


class RecurrenceType(str, Enum):
    SINGLE = "SINGLE"
    RECURRING = "RECURRING"
    INSTALLMENT = "INSTALLMENT"


class RecurrenceUnit(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"


@dataclass
class FinanceEntry:
    id: str
    tenant_id: str
    code: str
    type: FinanceEntryType
    description: str
    category_id: str
    expected_amount: float
    issue_date: date
    due_date: date
    cost_center_id: Optional[str] = None
    bank_account_id: Optional[str] = None
    supplier_name: Optional[str] = None
    customer_name: Optional[str] = None
    actual_amount: Optional[float] = None
    discount: float = 0.0
    interest: float = 0.0
    penalty: float = 0.0
    competence_date: Optional[date] = None
    payment_date: Optional[date] = None
    status: FinanceEntryStatus = FinanceEntryStatus.PENDING
    recurrence_type: RecurrenceType = RecurrenceType.SINGLE
    recurrence_interval: Optional[int] = None
    recurrence_unit: Optional[RecurrenceUnit] = None
    total_installments: Optional[int] = None
    current_installment: Optional[int] = None
    parent_entry_id: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def total_due(self) -> float:
        return round(self.expected_amount - (self.discount or 0) + (self.interest or 0) + (self.penalty or 0), 2)

    @property
    def paid_amount(self) -> float:
        return self.actual_amount or 0.0

    @property
    def remaining_balance(self) -> float:
        return round(self.total_due - self.paid_amount, 2)

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES

    def is_overdue(self, today: date) -> bool:
        if self.status in (*SETTLED_STATUSES, FinanceEntryStatus.CANCELLED):
            return False
        return self.due_date < today


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAID_OFF = "PAID_OFF"
    DEFAULTED = "DEFAULTED"
    RENEGOTIATED = "RENEGOTIATED"
    CANCELLED = "CANCELLED"


@dataclass
class Loan:
    id: str
    tenant_id: str
    name: str
    bank_account_id: str
    cost_center_id: str
    principal_amount: float
    outstanding_balance: float
    interest_rate: float
    start_date: date
    total_installments: int
    installment_day: int
    contract_number: Optional[str] = None
    end_date: Optional[date] = None
    paid_installments: int = 0
    status: LoanStatus = LoanStatus.ACTIVE
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def remaining_installments(self) -> int:
        return max(self.total_installments - self.paid_installments, 0)

    @property
    def progress_percentage(self) -> float:
        if not self.total_installments:
            return 0.0
        return round(self.paid_installments / self.total_installments * 100, 2)


@dataclass
class LoanInstallment:
    id: str
    tenant_id: str
    loan_id: str
    number: int
    due_date: date
    principal: float
    interest: float
    total: float
    paid_amount: Optional[float] = None
    paid_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)

    @property
    def is_paid(self) -> bool:
        return self.paid_at is not None
