from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, Optional

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import last_day_of_month
from ..core.exceptions import ResourceNotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..logging_config import get_logger
from ..payroll.model import PayrollItemType, PayrollStatus
from ..payroll.repository import PayrollItemRepository, PayrollRepository
from .model import FinanceCategory, FinanceCategoryType
from .repository import FinanceCategoryRepository, FinanceEntryFilter, FinanceEntryRepository
from .service import FinanceEntryService, NewFinanceEntry

logger = get_logger(__name__)

SALARY_CATEGORY_SLUG = "salarios-e-ordenados"
# Withholdings paid to the government in one entry per payroll
WITHHOLDING_TYPES = (PayrollItemType.INSS, PayrollItemType.IRRF)


def payroll_tag(payroll_id: str) -> str:
    return f"FOLHA-{payroll_id}"


class PayrollFinanceService:
    """Use case: turn an approved payroll into payable finance entries."""

    def __init__(
        self,
        entry_service: FinanceEntryService,
        entries: FinanceEntryRepository,
        categories: FinanceCategoryRepository,
        payrolls: PayrollRepository,
        payroll_items: PayrollItemRepository,
        employees: EmployeeRepository,
        audit: Optional[AuditService] = None,
    ):
        self._entry_service = entry_service
        self._entries = entries
        self._categories = categories
        self._payrolls = payrolls
        self._items = payroll_items
        self._employees = employees
        self._audit = audit

    def _salary_category(self, tenant_id: str) -> FinanceCategory:
        category = self._categories.get_by_slug(tenant_id=tenant_id, slug=SALARY_CATEGORY_SLUG)
        if category:
            return category
        for candidate in self._categories.list_all(tenant_id=tenant_id):
            if candidate.type == FinanceCategoryType.EXPENSE and candidate.is_active:
                return candidate
        raise ValidationError("No expense category available for payroll entries")

    def payroll_to_finance(self, *, tenant_id: str, payroll_id: str, created_by: Optional[str] = None) -> dict:
        payroll = self._payrolls.get_by_id(tenant_id=tenant_id, payroll_id=payroll_id)
        if not payroll:
            raise ResourceNotFoundError("Payroll not found")
        if payroll.status not in (PayrollStatus.APPROVED, PayrollStatus.PAID):
            raise ValidationError("Only approved or paid payrolls can be sent to finance")

        tag = payroll_tag(payroll.id)
        already = self._entries.list_all(tenant_id=tenant_id, filters=FinanceEntryFilter(search=tag))
        if already:
            raise ValidationError("Payroll was already imported into finance")

        items = self._items.list_by_payroll(tenant_id=tenant_id, payroll_id=payroll.id)
        if not items:
            raise ValidationError("Payroll has no items")

        net_by_employee: Dict[str, float] = defaultdict(float)
        withheld: Dict[PayrollItemType, float] = defaultdict(float)
        for item in items:
            net_by_employee[item.employee_id] += -item.amount if item.is_deduction else item.amount
            if item.type in WITHHOLDING_TYPES:
                withheld[item.type] += item.amount

        category = self._salary_category(tenant_id)
        year, month = payroll.reference_year, payroll.reference_month
        due = date(year, month, last_day_of_month(year, month))
        competence = date(year, month, 1)

        created = 0
        total = 0.0
        for employee_id, net in net_by_employee.items():
            net = round(net, 2)
            if net <= 0:
                continue
            employee = self._employees.get_by_id(tenant_id=tenant_id, employee_id=employee_id)
            name = employee.full_name if employee else employee_id
            self._entry_service.create_finance_entry(
                tenant_id=tenant_id,
                data=NewFinanceEntry(
                    type="PAYABLE",
                    description=f"Salary {payroll.reference_period} - {name} [{tag}]",
                    category_id=category.id,
                    expected_amount=net,
                    due_date=due,
                    competence_date=competence,
                    supplier_name=name,
                    tags=[tag, "payroll"],
                ),
                created_by=created_by,
            )
            created += 1
            total += net

        for item_type, amount in withheld.items():
            amount = round(amount, 2)
            withholding_category = self._categories.get_by_slug(
                tenant_id=tenant_id, slug=item_type.finance_category_slug
            )
            if amount <= 0 or not withholding_category:
                continue
            self._entry_service.create_finance_entry(
                tenant_id=tenant_id,
                data=NewFinanceEntry(
                    type="PAYABLE",
                    description=f"{item_type.value} {payroll.reference_period} [{tag}]",
                    category_id=withholding_category.id,
                    expected_amount=amount,
                    due_date=due,
                    competence_date=competence,
                    tags=[tag, "payroll", item_type.value.lower()],
                ),
                created_by=created_by,
            )
            created += 1
            total += amount

        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=created_by,
                action=AuditAction.EXPORT,
                entity=AuditEntity.PAYROLL,
                entity_id=payroll.id,
                metadata={"entriesCreated": created},
            )
        logger.info("Payroll %s generated %d finance entries", payroll.id, created)
        return {"entriesCreated": created, "totalAmount": round(total, 2)}
