from __future__ import annotations

from typing import List, Optional, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import (
    BankAccount,
    CostCenter,
    FinanceCategory,
    FinanceEntry,
    FinanceEntryType,
    Loan,
    LoanInstallment,
    LoanStatus,
)
from .repository import FinanceEntryFilter


class InMemoryFinanceCategoryRepository(InMemoryRepository[FinanceCategory]):
    def save(self, category: FinanceCategory) -> FinanceCategory:
        return self._save(category)

    def get_by_id(self, *, tenant_id: str, category_id: str) -> Optional[FinanceCategory]:
        return self._get(category_id, tenant_id=tenant_id)

    def get_by_slug(self, *, tenant_id: str, slug: str) -> Optional[FinanceCategory]:
        return self._first(lambda c: c.slug == slug, tenant_id=tenant_id)

    def list_all(self, *, tenant_id: str) -> List[FinanceCategory]:
        return self._find(tenant_id=tenant_id, sort_key=lambda c: c.name)


class InMemoryCostCenterRepository(InMemoryRepository[CostCenter]):
    def save(self, cost_center: CostCenter) -> CostCenter:
        return self._save(cost_center)

    def get_by_id(self, *, tenant_id: str, cost_center_id: str) -> Optional[CostCenter]:
        return self._get(cost_center_id, tenant_id=tenant_id)

    def get_by_code(self, *, tenant_id: str, code: str) -> Optional[CostCenter]:
        return self._first(lambda c: c.code == code, tenant_id=tenant_id)

    def list_all(self, *, tenant_id: str) -> List[CostCenter]:
        return self._find(tenant_id=tenant_id, sort_key=lambda c: c.code)


class InMemoryBankAccountRepository(InMemoryRepository[BankAccount]):
    def save(self, account: BankAccount) -> BankAccount:
        return self._save(account)

    def get_by_id(self, *, tenant_id: str, account_id: str) -> Optional[BankAccount]:
        return self._get(account_id, tenant_id=tenant_id)

    def list_all(self, *, tenant_id: str) -> List[BankAccount]:
        return self._find(tenant_id=tenant_id, sort_key=lambda a: a.name)


class InMemoryFinanceEntryRepository(InMemoryRepository[FinanceEntry]):
    def save(self, entry: FinanceEntry) -> FinanceEntry:
        return self._save(entry)

    def get_by_id(self, *, tenant_id: str, entry_id: str) -> Optional[FinanceEntry]:
        return self._get(entry_id, tenant_id=tenant_id)

    def count_by_type(self, *, tenant_id: str, type: FinanceEntryType) -> int:
        return len(self._find(lambda e: e.type == type, tenant_id=tenant_id, include_deleted=True))

    def list_page(
        self, *, tenant_id: str, filters: FinanceEntryFilter, params: PageParams
    ) -> Tuple[List[FinanceEntry], int]:
        return self._page(self.list_all(tenant_id=tenant_id, filters=filters), params)

    def list_all(self, *, tenant_id: str, filters: FinanceEntryFilter) -> List[FinanceEntry]:
        return self._find(filters.matches, tenant_id=tenant_id, sort_key=lambda e: (e.due_date, e.code))


class InMemoryLoanRepository(InMemoryRepository[Loan]):
    def save(self, loan: Loan) -> Loan:
        return self._save(loan)

    def get_by_id(self, *, tenant_id: str, loan_id: str) -> Optional[Loan]:
        return self._get(loan_id, tenant_id=tenant_id)

    def list_page(
        self, *, tenant_id: str, params: PageParams, status: Optional[LoanStatus] = None
    ) -> Tuple[List[Loan], int]:
        found = self._find(
            lambda l: status is None or l.status == status,
            tenant_id=tenant_id,
            sort_key=lambda l: l.start_date,
            reverse=True,
        )
        return self._page(found, params)


class InMemoryLoanInstallmentRepository(InMemoryRepository[LoanInstallment]):
    def save(self, installment: LoanInstallment) -> LoanInstallment:
        return self._save(installment)

    def get_by_id(self, *, tenant_id: str, installment_id: str) -> Optional[LoanInstallment]:
        return self._get(installment_id, tenant_id=tenant_id)

    def list_by_loan(self, *, tenant_id: str, loan_id: str) -> List[LoanInstallment]:
        return self._find(lambda i: i.loan_id == loan_id, tenant_id=tenant_id, sort_key=lambda i: i.number)
