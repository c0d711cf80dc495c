from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from ..common.datetime_utils import utc_now
from ..core.exceptions import ValidationError


class PayrollStatus(str, Enum):
    DRAFT = "DRAFT"
    PROCESSING = "PROCESSING"
    CALCULATED = "CALCULATED"
    APPROVED = "APPROVED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


EDITABLE_STATUSES = (PayrollStatus.DRAFT, PayrollStatus.PROCESSING, PayrollStatus.CALCULATED)


@dataclass
class Payroll:
    id: str
    tenant_id: str
    reference_month: int
    reference_year: int
    status: PayrollStatus = PayrollStatus.DRAFT
    total_gross: float = 0.0
    total_deductions: float = 0.0
    total_net: float = 0.0
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    paid_by: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    @property
    def reference_period(self) -> str:
        return f"{self.reference_year:04d}-{self.reference_month:02d}"

    @property
    def can_edit_items(self) -> bool:
        return self.status in EDITABLE_STATUSES

    def _require(self, expected: PayrollStatus, action: str) -> None:
        if self.status != expected:
            raise ValidationError(f"Only {expected.value} payrolls can be {action}")

    def start_processing(self, processed_by: str) -> None:
        self._require(PayrollStatus.DRAFT, "processed")
        self.status = PayrollStatus.PROCESSING
        self.processed_by = processed_by
        self.processed_at = utc_now()
        self.updated_at = self.processed_at

    def finish_calculation(self, gross: float, deductions: float) -> None:
        self._require(PayrollStatus.PROCESSING, "calculated")
        self.total_gross = round(gross, 2)
        self.total_deductions = round(deductions, 2)
        self.total_net = round(self.total_gross - self.total_deductions, 2)
        self.status = PayrollStatus.CALCULATED
        self.updated_at = utc_now()

    def approve(self, approved_by: str) -> None:
        self._require(PayrollStatus.CALCULATED, "approved")
        self.status = PayrollStatus.APPROVED
        self.approved_by = approved_by
        self.approved_at = utc_now()
        self.updated_at = self.approved_at

    def mark_as_paid(self, paid_by: str) -> None:
        self._require(PayrollStatus.APPROVED, "paid")
        self.status = PayrollStatus.PAID
        self.paid_by = paid_by
        self.paid_at = utc_now()
        self.updated_at = self.paid_at

    def cancel(self) -> None:
        if self.status in (PayrollStatus.PAID, PayrollStatus.CANCELLED):
            raise ValidationError(f"Cannot cancel a {self.status.value} payroll")
        self.status = PayrollStatus.CANCELLED
        self.updated_at = utc_now()


class PayrollItemType(str, Enum):
    BASE_SALARY = "BASE_SALARY"
    OVERTIME = "OVERTIME"
    NIGHT_SHIFT = "NIGHT_SHIFT"
    HAZARD_PAY = "HAZARD_PAY"
    DANGER_PAY = "DANGER_PAY"
    VACATION_PAY = "VACATION_PAY"
    THIRTEENTH_SALARY = "THIRTEENTH_SALARY"
    BONUS = "BONUS"
    COMMISSION = "COMMISSION"
    INSS = "INSS"
    IRRF = "IRRF"
    FGTS = "FGTS"
    HEALTH_PLAN = "HEALTH_PLAN"
    DENTAL_PLAN = "DENTAL_PLAN"
    TRANSPORT_VOUCHER = "TRANSPORT_VOUCHER"
    MEAL_VOUCHER = "MEAL_VOUCHER"
    OTHER_BENEFIT = "OTHER_BENEFIT"
    ADVANCE = "ADVANCE"
    LOAN = "LOAN"
    OTHER_DEDUCTION = "OTHER_DEDUCTION"

    @property
    def is_deduction(self) -> bool:
        return self in _DEDUCTION_TYPES

    @property
    def finance_category_slug(self) -> Optional[str]:
        return _FINANCE_CATEGORY_SLUGS.get(self)


_DEDUCTION_TYPES = frozenset(
    {
        PayrollItemType.INSS,
        PayrollItemType.IRRF,
        PayrollItemType.HEALTH_PLAN,
        PayrollItemType.DENTAL_PLAN,
        PayrollItemType.TRANSPORT_VOUCHER,
        PayrollItemType.MEAL_VOUCHER,
        PayrollItemType.ADVANCE,
        PayrollItemType.LOAN,
        PayrollItemType.OTHER_DEDUCTION,
    }
)

_SALARY_SLUG = "salarios-e-ordenados"
_FINANCE_CATEGORY_SLUGS = {
    PayrollItemType.BASE_SALARY: _SALARY_SLUG,
    PayrollItemType.OVERTIME: _SALARY_SLUG,
    PayrollItemType.NIGHT_SHIFT: _SALARY_SLUG,
    PayrollItemType.HAZARD_PAY: _SALARY_SLUG,
    PayrollItemType.DANGER_PAY: _SALARY_SLUG,
    PayrollItemType.VACATION_PAY: _SALARY_SLUG,
    PayrollItemType.THIRTEENTH_SALARY: _SALARY_SLUG,
    PayrollItemType.COMMISSION: _SALARY_SLUG,
    PayrollItemType.BONUS: "gratificacoes-e-bonus",
    PayrollItemType.INSS: "encargos-sociais-inss",
    PayrollItemType.IRRF: "impostos-irrf",
    PayrollItemType.FGTS: "encargos-sociais-fgts",
    PayrollItemType.HEALTH_PLAN: "beneficios-plano-saude",
    PayrollItemType.DENTAL_PLAN: "beneficios-plano-saude",
    PayrollItemType.TRANSPORT_VOUCHER: "beneficios-vale-transporte",
    PayrollItemType.MEAL_VOUCHER: "beneficios-vale-refeicao",
}


@dataclass
class PayrollItem:
    id: str
    tenant_id: str
    payroll_id: str
    employee_id: str
    type: PayrollItemType
    description: str
    amount: float
    is_deduction: bool = False
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Overtime:
    id: str
    tenant_id: str
    employee_id: str
    date: date
    hours: float
    reason: Optional[str] = None
    approved: bool = False
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Bonus:
    id: str
    tenant_id: str
    employee_id: str
    name: str
    amount: float
    reason: str
    date: date
    is_paid: bool = False
    created_at: datetime = field(default_factory=utc_now)
    deleted_at: Optional[datetime] = None


@dataclass
class Deduction:
    id: str
    tenant_id: str
    employee_id: str
    name: str
    amount: float
    reason: str
    date: date
    is_recurring: bool = False
    installments: Optional[int] = None
    current_installment: int = 0
    is_applied: bool = False
    applied_at: Optional[datetime] = None
    payroll_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def __post_init__(self):
        if self.amount is None or self.amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if not self.name or not self.name.strip():
            raise ValidationError("Name is required")
        if not self.reason or not self.reason.strip():
            raise ValidationError("Reason is required")
        if self.installments is not None and self.installments < 1:
            raise ValidationError("Installments must be at least 1")

    @property
    def is_installment_based(self) -> bool:
        return bool(self.installments) and self.installments > 1

    @property
    def has_remaining_installments(self) -> bool:
        if not self.is_installment_based:
            return False
        return self.current_installment < self.installments

    @property
    def remaining_installments(self) -> int:
        return self.installments - self.current_installment if self.is_installment_based else 0

    @property
    def installment_amount(self) -> float:
        if not self.is_installment_based:
            return self.amount
        return round(self.amount / self.installments, 2)

    @property
    def is_due(self) -> bool:
        """Whether the next payroll should still discount this deduction."""
        return not self.is_applied or self.is_recurring or self.has_remaining_installments

    def mark_as_applied(self, payroll_id: Optional[str] = None) -> None:
        if self.is_applied and not self.is_recurring and not self.has_remaining_installments:
            raise ValidationError("Deduction is already fully applied")
        self.is_applied = True
        self.applied_at = utc_now()
        if payroll_id:
            self.payroll_id = payroll_id
        if self.is_installment_based:
            self.current_installment += 1
        self.updated_at = self.applied_at

    def _ensure_editable(self) -> None:
        if self.is_applied and not self.is_recurring:
            raise ValidationError("Cannot change a deduction that was already applied")

    def update_amount(self, amount: float) -> None:
        self._ensure_editable()
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        self.amount = amount
        self.updated_at = utc_now()

    def update_reason(self, reason: str) -> None:
        self._ensure_editable()
        if not reason or not reason.strip():
            raise ValidationError("Reason is required")
        self.reason = reason.strip()
        self.updated_at = utc_now()
