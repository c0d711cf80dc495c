from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Protocol, Sequence, Tuple

from ..common.pagination import PageParams
from .model import (
    BankAccount,
    CostCenter,
    FinanceCategory,
    FinanceEntry,
    FinanceEntryStatus,
    FinanceEntryType,
    Loan,
    LoanInstallment,
    LoanStatus,
)


@dataclass(frozen=True)
class FinanceEntryFilter:
    type: Optional[FinanceEntryType] = None
    statuses: Sequence[FinanceEntryStatus] = ()
    category_id: Optional[str] = None
    cost_center_id: Optional[str] = None
    due_from: Optional[date] = None
    due_to: Optional[date] = None
    payment_from: Optional[date] = None
    payment_to: Optional[date] = None
    parent_entry_id: Optional[str] = None
    search: Optional[str] = None

    def matches(self, entry: FinanceEntry) -> bool:
        if self.type is not None and entry.type != self.type:
            return False
        if self.statuses and entry.status not in self.statuses:
            return False
        if self.category_id and entry.category_id != self.category_id:
            return False
        if self.cost_center_id and entry.cost_center_id != self.cost_center_id:
            return False
        if self.due_from and entry.due_date < self.due_from:
            return False
        if self.due_to and entry.due_date > self.due_to:
            return False
        if self.payment_from and (entry.payment_date is None or entry.payment_date < self.payment_from):
            return False
        if self.payment_to and (entry.payment_date is None or entry.payment_date > self.payment_to):
            return False
        if self.parent_entry_id and entry.parent_entry_id != self.parent_entry_id:
            return False
        if self.search:
            needle = self.search.lower()
            haystack = (entry.code, entry.description, entry.supplier_name or "", entry.customer_name or "")
            if not any(needle in value.lower() for value in haystack):
                return False
        return True


class FinanceCategoryRepository(Protocol):
    def save(self, category: FinanceCategory) -> FinanceCategory:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, category_id: str) -> Optional[FinanceCategory]:
        raise NotImplementedError

    def get_by_slug(self, *, tenant_id: str, slug: str) -> Optional[FinanceCategory]:
        raise NotImplementedError

    def list_all(self, *, tenant_id: str) -> List[FinanceCategory]:
        raise NotImplementedError


class CostCenterRepository(Protocol):
    def save(self, cost_center: CostCenter) -> CostCenter:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, cost_center_id: str) -> Optional[CostCenter]:
        raise NotImplementedError

    def get_by_code(self, *, tenant_id: str, code: str) -> Optional[CostCenter]:
        raise NotImplementedError

    def list_all(self, *, tenant_id: str) -> List[CostCenter]:
        raise NotImplementedError


class BankAccountRepository(Protocol):
    def save(self, account: BankAccount) -> BankAccount:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, account_id: str) -> Optional[BankAccount]:
        raise NotImplementedError

    def list_all(self, *, tenant_id: str) -> List[BankAccount]:
        raise NotImplementedError


class FinanceEntryRepository(Protocol):
    def save(self, entry: FinanceEntry) -> FinanceEntry:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, entry_id: str) -> Optional[FinanceEntry]:
        raise NotImplementedError

    def count_by_type(self, *, tenant_id: str, type: FinanceEntryType) -> int:
        """Entries ever created for the type, deleted ones included."""

        raise NotImplementedError

    def list_page(
        self, *, tenant_id: str, filters: FinanceEntryFilter, params: PageParams
    ) -> Tuple[List[FinanceEntry], int]:
        raise NotImplementedError

    def list_all(self, *, tenant_id: str, filters: FinanceEntryFilter) -> List[FinanceEntry]:
        raise NotImplementedError


class LoanRepository(Protocol):
    def save(self, loan: Loan) -> Loan:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, loan_id: str) -> Optional[Loan]:
        raise NotImplementedError

    def list_page(
        self, *, tenant_id: str, params: PageParams, status: Optional[LoanStatus] = None
    ) -> Tuple[List[Loan], int]:
        raise NotImplementedError


class LoanInstallmentRepository(Protocol):
    def save(self, installment: LoanInstallment) -> LoanInstallment:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, installment_id: str) -> Optional[LoanInstallment]:
        raise NotImplementedError

    def list_by_loan(self, *, tenant_id: str, loan_id: str) -> List[LoanInstallment]:
        raise NotImplementedError
