from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import add_months, utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import parse_enum, require_between, require_non_empty, require_non_negative
from ..core.exceptions import ResourceNotFoundError, ValidationError
from ..logging_config import get_logger
from .model import Loan, LoanInstallment, LoanStatus
from .repository import BankAccountRepository, CostCenterRepository, LoanInstallmentRepository, LoanRepository

logger = get_logger(__name__)


def monthly_rate(annual_rate: float) -> float:
    return annual_rate / 100 / 12


def installment_payment(principal: float, rate: float, count: int) -> float:
    """Fixed instalment of a French (Price) amortization schedule."""
    if rate == 0:
        return principal / count
    return principal * rate / (1 - (1 + rate) ** -count)


def build_schedule(
    *, principal: float, annual_rate: float, count: int, start_date: date, installment_day: int
) -> List[dict]:
    rate = monthly_rate(annual_rate)
    payment = installment_payment(principal, rate, count)
    balance = principal
    rows = []
    for number in range(1, count + 1):
        interest = balance * rate
        amortization = payment - interest
        balance -= amortization
        rows.append(
            {
                "number": number,
                "due_date": add_months(start_date, number, day=installment_day),
                "principal": round(amortization, 2),
                "interest": round(interest, 2),
                "total": round(payment, 2),
            }
        )
    return rows


@dataclass(frozen=True)
class LoanDetails:
    loan: Loan
    installments: List[LoanInstallment]


class LoanService:
    """Use case: bank loans and their amortization schedules."""

    def __init__(
        self,
        loans: LoanRepository,
        installments: LoanInstallmentRepository,
        bank_accounts: BankAccountRepository,
        cost_centers: CostCenterRepository,
        audit: Optional[AuditService] = None,
    ):
        self._loans = loans
        self._installments = installments
        self._bank_accounts = bank_accounts
        self._cost_centers = cost_centers
        self._audit = audit

    def _get(self, tenant_id: str, loan_id: str) -> Loan:
        loan = self._loans.get_by_id(tenant_id=tenant_id, loan_id=loan_id)
        if not loan:
            raise ResourceNotFoundError("Loan not found")
        return loan

    def _log(self, loan: Loan, action: AuditAction, actor_id: Optional[str], **kwargs) -> None:
        if self._audit:
            self._audit.log(
                tenant_id=loan.tenant_id,
                user_id=actor_id,
                action=action,
                entity=AuditEntity.LOAN,
                entity_id=loan.id,
                **kwargs,
            )

    def create_loan(
        self,
        *,
        tenant_id: str,
        name: str,
        bank_account_id: str,
        cost_center_id: str,
        principal_amount: float,
        interest_rate: float,
        start_date: date,
        total_installments: int,
        installment_day: Optional[int] = None,
        contract_number: Optional[str] = None,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> LoanDetails:
        name = require_non_empty(name, "Name")
        if principal_amount is None or principal_amount <= 0:
            raise ValidationError("Principal amount must be greater than zero")
        if not total_installments or total_installments < 1:
            raise ValidationError("Loan needs at least 1 installment")
        require_non_negative(interest_rate, "Interest rate")
        day = installment_day or start_date.day
        require_between(day, "Installment day", 1, 31)
        if not self._bank_accounts.get_by_id(tenant_id=tenant_id, account_id=bank_account_id):
            raise ResourceNotFoundError("Bank account not found")
        if not self._cost_centers.get_by_id(tenant_id=tenant_id, cost_center_id=cost_center_id):
            raise ResourceNotFoundError("Cost center not found")

        schedule = build_schedule(
            principal=principal_amount,
            annual_rate=interest_rate,
            count=total_installments,
            start_date=start_date,
            installment_day=day,
        )
        loan = Loan(
            id=new_id(),
            tenant_id=tenant_id,
            name=name,
            bank_account_id=bank_account_id,
            cost_center_id=cost_center_id,
            principal_amount=round(principal_amount, 2),
            outstanding_balance=round(principal_amount, 2),
            interest_rate=interest_rate,
            start_date=start_date,
            end_date=schedule[-1]["due_date"],
            total_installments=total_installments,
            installment_day=day,
            contract_number=contract_number,
            notes=notes,
        )
        self._loans.save(loan)
        installments = [
            self._installments.save(LoanInstallment(id=new_id(), tenant_id=tenant_id, loan_id=loan.id, **row))
            for row in schedule
        ]
        self._log(
            loan,
            AuditAction.CREATE,
            created_by,
            new_data={"name": loan.name, "principalAmount": loan.principal_amount, "installments": total_installments},
        )
        return LoanDetails(loan=loan, installments=installments)

    def register_loan_payment(
        self,
        *,
        tenant_id: str,
        loan_id: str,
        installment_id: str,
        amount: float,
        paid_at: Optional[datetime] = None,
        paid_by: Optional[str] = None,
    ) -> LoanDetails:
        loan = self._get(tenant_id, loan_id)
        if loan.status != LoanStatus.ACTIVE:
            raise ValidationError("Only active loans accept payments")
        installment = self._installments.get_by_id(tenant_id=tenant_id, installment_id=installment_id)
        if not installment or installment.loan_id != loan.id:
            raise ResourceNotFoundError("Loan installment not found")
        if installment.is_paid:
            raise ValidationError("Installment is already paid")
        if amount is None or amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")

        installment.paid_amount = round(amount, 2)
        installment.paid_at = paid_at or utc_now()
        self._installments.save(installment)

        loan.outstanding_balance = max(round(loan.outstanding_balance - installment.principal, 2), 0.0)
        loan.paid_installments += 1
        if loan.paid_installments >= loan.total_installments:
            loan.status = LoanStatus.PAID_OFF
            loan.outstanding_balance = 0.0
        loan.updated_at = utc_now()
        self._loans.save(loan)
        self._log(
            loan,
            AuditAction.UPDATE,
            paid_by,
            metadata={"installment": installment.number, "amount": installment.paid_amount},
            new_data={"outstandingBalance": loan.outstanding_balance, "status": loan.status.value},
        )
        return self.get_loan(tenant_id=tenant_id, loan_id=loan.id)

    def get_loan(self, *, tenant_id: str, loan_id: str) -> LoanDetails:
        loan = self._get(tenant_id, loan_id)
        installments = self._installments.list_by_loan(tenant_id=tenant_id, loan_id=loan.id)
        return LoanDetails(loan=loan, installments=sorted(installments, key=lambda i: i.number))

    def list_loans(self, *, tenant_id: str, params: PageParams, status: Optional[str] = None) -> Page[Loan]:
        status_enum = parse_enum(LoanStatus, status, "Status") if status else None
        items, total = self._loans.list_page(tenant_id=tenant_id, params=params, status=status_enum)
        return Page(items=items, total=total, params=params)

    def delete_loan(self, *, tenant_id: str, loan_id: str, deleted_by: Optional[str] = None) -> None:
        loan = self._get(tenant_id, loan_id)
        installments = self._installments.list_by_loan(tenant_id=tenant_id, loan_id=loan.id)
        if loan.paid_installments or any(i.is_paid for i in installments):
            raise ValidationError("Loans with paid installments cannot be deleted")
        loan.deleted_at = utc_now()
        self._loans.save(loan)
        self._log(loan, AuditAction.DELETE, deleted_by)
