from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import or_

from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import (
    BankAccountRow,
    CostCenterRow,
    FinanceCategoryRow,
    FinanceEntryRow,
    LoanInstallmentRow,
    LoanRow,
)
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


class SqlFinanceCategoryRepository(SqlRepository[FinanceCategory]):
    entity_cls = FinanceCategory
    table_cls = FinanceCategoryRow

    def save(self, category: FinanceCategory) -> FinanceCategory:
        return self._save(category)

    def get_by_id(self, *, tenant_id: str, category_id: str) -> Optional[FinanceCategory]:
        return self._get(category_id, tenant_id=tenant_id)

    def get_by_slug(self, *, tenant_id: str, slug: str) -> Optional[FinanceCategory]:
        return self._first(FinanceCategoryRow.slug == slug, tenant_id=tenant_id)

    def list_all(self, *, tenant_id: str) -> List[FinanceCategory]:
        return self._find(tenant_id=tenant_id, order_by=[FinanceCategoryRow.name])


class SqlCostCenterRepository(SqlRepository[CostCenter]):
    entity_cls = CostCenter
    table_cls = CostCenterRow

    def save(self, cost_center: CostCenter) -> CostCenter:
        return self._save(cost_center)

    def get_by_id(self, *, tenant_id: str, cost_center_id: str) -> Optional[CostCenter]:
        return self._get(cost_center_id, tenant_id=tenant_id)

    def get_by_code(self, *, tenant_id: str, code: str) -> Optional[CostCenter]:
        return self._first(CostCenterRow.code == code, tenant_id=tenant_id)

    def list_all(self, *, tenant_id: str) -> List[CostCenter]:
        return self._find(tenant_id=tenant_id, order_by=[CostCenterRow.code])


class SqlBankAccountRepository(SqlRepository[BankAccount]):
    entity_cls = BankAccount
    table_cls = BankAccountRow

    def save(self, account: BankAccount) -> BankAccount:
        return self._save(account)

    def get_by_id(self, *, tenant_id: str, account_id: str) -> Optional[BankAccount]:
        return self._get(account_id, tenant_id=tenant_id)

    def list_all(self, *, tenant_id: str) -> List[BankAccount]:
        return self._find(tenant_id=tenant_id, order_by=[BankAccountRow.name])


class SqlFinanceEntryRepository(SqlRepository[FinanceEntry]):
    entity_cls = FinanceEntry
    table_cls = FinanceEntryRow

    def save(self, entry: FinanceEntry) -> FinanceEntry:
        return self._save(entry)

    def get_by_id(self, *, tenant_id: str, entry_id: str) -> Optional[FinanceEntry]:
        return self._get(entry_id, tenant_id=tenant_id)

    def count_by_type(self, *, tenant_id: str, type: FinanceEntryType) -> int:
        return self._count(FinanceEntryRow.type == type, tenant_id=tenant_id, include_deleted=True)

    @staticmethod
    def _criteria(filters: FinanceEntryFilter) -> list:
        row = FinanceEntryRow
        criteria = []
        if filters.type is not None:
            criteria.append(row.type == filters.type)
        if filters.statuses:
            criteria.append(row.status.in_(list(filters.statuses)))
        if filters.category_id:
            criteria.append(row.category_id == filters.category_id)
        if filters.cost_center_id:
            criteria.append(row.cost_center_id == filters.cost_center_id)
        if filters.due_from:
            criteria.append(row.due_date >= filters.due_from)
        if filters.due_to:
            criteria.append(row.due_date <= filters.due_to)
        if filters.payment_from:
            criteria.append(row.payment_date >= filters.payment_from)
        if filters.payment_to:
            criteria.append(row.payment_date <= filters.payment_to)
        if filters.parent_entry_id:
            criteria.append(row.parent_entry_id == filters.parent_entry_id)
        if filters.search:
            pattern = f"%{filters.search}%"
            criteria.append(
                or_(
                    row.code.ilike(pattern),
                    row.description.ilike(pattern),
                    row.supplier_name.ilike(pattern),
                    row.customer_name.ilike(pattern),
                )
            )
        return criteria

    def list_page(
        self, *, tenant_id: str, filters: FinanceEntryFilter, params: PageParams
    ) -> Tuple[List[FinanceEntry], int]:
        return self._page(
            self._criteria(filters),
            params,
            tenant_id=tenant_id,
            order_by=[FinanceEntryRow.due_date, FinanceEntryRow.code],
        )

    def list_all(self, *, tenant_id: str, filters: FinanceEntryFilter) -> List[FinanceEntry]:
        return self._find(
            *self._criteria(filters),
            tenant_id=tenant_id,
            order_by=[FinanceEntryRow.due_date, FinanceEntryRow.code],
        )


class SqlLoanRepository(SqlRepository[Loan]):
    entity_cls = Loan
    table_cls = LoanRow

    def save(self, loan: Loan) -> Loan:
        return self._save(loan)

    def get_by_id(self, *, tenant_id: str, loan_id: str) -> Optional[Loan]:
        return self._get(loan_id, tenant_id=tenant_id)

    def list_page(
        self, *, tenant_id: str, params: PageParams, status: Optional[LoanStatus] = None
    ) -> Tuple[List[Loan], int]:
        criteria = [LoanRow.status == status] if status is not None else []
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[LoanRow.start_date.desc()])


class SqlLoanInstallmentRepository(SqlRepository[LoanInstallment]):
    entity_cls = LoanInstallment
    table_cls = LoanInstallmentRow

    def save(self, installment: LoanInstallment) -> LoanInstallment:
        return self._save(installment)

    def get_by_id(self, *, tenant_id: str, installment_id: str) -> Optional[LoanInstallment]:
        return self._get(installment_id, tenant_id=tenant_id)

    def list_by_loan(self, *, tenant_id: str, loan_id: str) -> List[LoanInstallment]:
        return self._find(
            LoanInstallmentRow.loan_id == loan_id,
            tenant_id=tenant_id,
            order_by=[LoanInstallmentRow.number],
        )
