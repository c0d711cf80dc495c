from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import List, Optional

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import add_months, today as current_day, utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.serialization import to_jsonable
from ..common.validators import (
    parse_enum,
    require_max_length,
    require_non_empty,
    require_non_negative,
    require_positive,
)
from ..core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from ..logging_config import get_logger
from ..notifications.model import NotificationPriority, NotificationType
from ..notifications.service import NotificationService
from ..tenants.model import slugify
from .model import (
    PAYMENT_TOLERANCE,
    BankAccount,
    CostCenter,
    FinanceCategory,
    FinanceCategoryType,
    FinanceEntry,
    FinanceEntryStatus,
    FinanceEntryType,
    RecurrenceType,
    RecurrenceUnit,
)
from .repository import (
    BankAccountRepository,
    CostCenterRepository,
    FinanceCategoryRepository,
    FinanceEntryFilter,
    FinanceEntryRepository,
)

logger = get_logger(__name__)

_OCCURRENCE_SUFFIX = re.compile(r"\s\(\d+\)$")


class FinanceSetupService:
    """Use case: lookup tables (categories, cost centers, bank accounts)."""

    def __init__(
        self,
        categories: FinanceCategoryRepository,
        cost_centers: CostCenterRepository,
        bank_accounts: BankAccountRepository,
    ):
        self._categories = categories
        self._cost_centers = cost_centers
        self._bank_accounts = bank_accounts

    def create_category(
        self, *, tenant_id: str, name: str, type="EXPENSE", slug: Optional[str] = None
    ) -> FinanceCategory:
        name = require_non_empty(name, "Name")
        require_max_length(name, "Name", 128)
        slug = slugify(slug or name)
        if self._categories.get_by_slug(tenant_id=tenant_id, slug=slug):
            raise ConflictError("A category with this slug already exists")
        return self._categories.save(
            FinanceCategory(
                id=new_id(),
                tenant_id=tenant_id,
                name=name,
                slug=slug,
                type=parse_enum(FinanceCategoryType, type, "Type"),
            )
        )

    def list_categories(self, *, tenant_id: str) -> List[FinanceCategory]:
        return self._categories.list_all(tenant_id=tenant_id)

    def create_cost_center(self, *, tenant_id: str, code: str, name: str) -> CostCenter:
        code = require_non_empty(code, "Code").upper()
        name = require_non_empty(name, "Name")
        if self._cost_centers.get_by_code(tenant_id=tenant_id, code=code):
            raise ConflictError("A cost center with this code already exists")
        return self._cost_centers.save(CostCenter(id=new_id(), tenant_id=tenant_id, code=code, name=name))

    def list_cost_centers(self, *, tenant_id: str) -> List[CostCenter]:
        return self._cost_centers.list_all(tenant_id=tenant_id)

    def create_bank_account(
        self,
        *,
        tenant_id: str,
        name: str,
        bank_code: str,
        agency: str,
        number: str,
        balance: float = 0.0,
    ) -> BankAccount:
        return self._bank_accounts.save(
            BankAccount(
                id=new_id(),
                tenant_id=tenant_id,
                name=require_non_empty(name, "Name"),
                bank_code=require_non_empty(bank_code, "Bank code"),
                agency=require_non_empty(agency, "Agency"),
                number=require_non_empty(number, "Account number"),
                balance=round(float(balance or 0), 2),
            )
        )

    def list_bank_accounts(self, *, tenant_id: str) -> List[BankAccount]:
        return self._bank_accounts.list_all(tenant_id=tenant_id)


@dataclass(frozen=True)
class NewFinanceEntry:
    type: str
    description: str
    category_id: str
    expected_amount: float
    due_date: date
    issue_date: Optional[date] = None
    cost_center_id: Optional[str] = None
    bank_account_id: Optional[str] = None
    supplier_name: Optional[str] = None
    customer_name: Optional[str] = None
    discount: float = 0.0
    interest: float = 0.0
    penalty: float = 0.0
    competence_date: Optional[date] = None
    recurrence_type: str = "SINGLE"
    recurrence_interval: Optional[int] = None
    recurrence_unit: Optional[str] = None
    total_installments: Optional[int] = None
    notes: Optional[str] = None
    tags: List[str] = field(default_factory=list)


_UPDATABLE = (
    "description",
    "category_id",
    "cost_center_id",
    "bank_account_id",
    "supplier_name",
    "customer_name",
    "expected_amount",
    "discount",
    "interest",
    "penalty",
    "due_date",
    "competence_date",
    "notes",
    "tags",
)


def advance_due_date(due: date, interval: int, unit: RecurrenceUnit) -> date:
    if unit == RecurrenceUnit.DAILY:
        return due + timedelta(days=interval)
    if unit == RecurrenceUnit.WEEKLY:
        return due + timedelta(weeks=interval)
    if unit == RecurrenceUnit.QUARTERLY:
        return add_months(due, 3 * interval)
    if unit == RecurrenceUnit.ANNUAL:
        return add_months(due, 12 * interval)
    return add_months(due, interval)


def split_installments(total: float, count: int) -> List[float]:
    """Equal parts rounded to cents; the rounding remainder goes to the last one."""
    part = round(total / count, 2)
    parts = [part] * (count - 1)
    parts.append(round(total - part * (count - 1), 2))
    return parts


class FinanceEntryService:
    """Use case: payable and receivable entries."""

    def __init__(
        self,
        entries: FinanceEntryRepository,
        categories: FinanceCategoryRepository,
        cost_centers: CostCenterRepository,
        bank_accounts: BankAccountRepository,
        audit: Optional[AuditService] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self._entries = entries
        self._categories = categories
        self._cost_centers = cost_centers
        self._bank_accounts = bank_accounts
        self._audit = audit
        self._notifications = notifications

    # helpers
    def _get(self, tenant_id: str, entry_id: str) -> FinanceEntry:
        entry = self._entries.get_by_id(tenant_id=tenant_id, entry_id=entry_id)
        if not entry:
            raise ResourceNotFoundError("Finance entry not found")
        return entry

    def _bank_account(self, tenant_id: str, account_id: str) -> BankAccount:
        account = self._bank_accounts.get_by_id(tenant_id=tenant_id, account_id=account_id)
        if not account:
            raise ResourceNotFoundError("Bank account not found")
        return account

    def _check_references(
        self,
        tenant_id: str,
        category_id: Optional[str],
        cost_center_id: Optional[str],
        bank_account_id: Optional[str],
    ) -> None:
        if category_id is not None and not self._categories.get_by_id(tenant_id=tenant_id, category_id=category_id):
            raise ResourceNotFoundError("Finance category not found")
        if cost_center_id and not self._cost_centers.get_by_id(tenant_id=tenant_id, cost_center_id=cost_center_id):
            raise ResourceNotFoundError("Cost center not found")
        if bank_account_id:
            self._bank_account(tenant_id, bank_account_id)

    def _next_code(self, tenant_id: str, type: FinanceEntryType) -> str:
        sequence = self._entries.count_by_type(tenant_id=tenant_id, type=type) + 1
        return f"{type.code_prefix}-{sequence:06d}"

    def _log(self, entry: FinanceEntry, action: AuditAction, actor_id: Optional[str], **kwargs) -> None:
        if self._audit:
            self._audit.log(
                tenant_id=entry.tenant_id,
                user_id=actor_id,
                action=action,
                entity=AuditEntity.FINANCE_ENTRY,
                entity_id=entry.id,
                **kwargs,
            )

    # operations
    def create_finance_entry(
        self, *, tenant_id: str, data: NewFinanceEntry, created_by: Optional[str] = None
    ) -> FinanceEntry:
        description = require_non_empty(data.description, "Description")
        require_max_length(description, "Description", 500)
        entry_type = parse_enum(FinanceEntryType, data.type, "Type")
        require_positive(data.expected_amount, "Expected amount")
        for name in ("discount", "interest", "penalty"):
            require_non_negative(getattr(data, name) or 0, name.capitalize())
        require_non_empty(data.category_id, "Category")
        self._check_references(tenant_id, data.category_id, data.cost_center_id, data.bank_account_id)

        recurrence = parse_enum(RecurrenceType, data.recurrence_type or "SINGLE", "Recurrence type")
        unit = None
        interval = None
        if recurrence == RecurrenceType.RECURRING:
            unit = parse_enum(RecurrenceUnit, data.recurrence_unit or "MONTHLY", "Recurrence unit")
            interval = int(data.recurrence_interval or 1)
            if interval < 1:
                raise ValidationError("Recurrence interval must be at least 1")
        installments = data.total_installments
        if recurrence == RecurrenceType.INSTALLMENT and (not installments or installments < 2):
            raise ValidationError("Installment entries need at least 2 installments")

        entry = FinanceEntry(
            id=new_id(),
            tenant_id=tenant_id,
            code=self._next_code(tenant_id, entry_type),
            type=entry_type,
            description=description,
            category_id=data.category_id,
            cost_center_id=data.cost_center_id,
            bank_account_id=data.bank_account_id,
            supplier_name=data.supplier_name,
            customer_name=data.customer_name,
            expected_amount=round(float(data.expected_amount), 2),
            discount=round(float(data.discount or 0), 2),
            interest=round(float(data.interest or 0), 2),
            penalty=round(float(data.penalty or 0), 2),
            issue_date=data.issue_date or current_day(),
            due_date=data.due_date,
            competence_date=data.competence_date,
            recurrence_type=recurrence,
            recurrence_interval=interval,
            recurrence_unit=unit,
            total_installments=installments if recurrence == RecurrenceType.INSTALLMENT else None,
            current_installment=1 if recurrence == RecurrenceType.RECURRING else None,
            notes=data.notes,
            tags=list(data.tags or []),
            created_by=created_by,
        )
        self._entries.save(entry)

        if recurrence == RecurrenceType.INSTALLMENT:
            for number, amount in enumerate(split_installments(entry.expected_amount, installments), start=1):
                self._entries.save(
                    replace(
                        entry,
                        id=new_id(),
                        code=self._next_code(tenant_id, entry_type),
                        description=f"{description} ({number}/{installments})",
                        expected_amount=amount,
                        discount=0.0,
                        interest=0.0,
                        penalty=0.0,
                        due_date=add_months(data.due_date, number - 1),
                        current_installment=number,
                        parent_entry_id=entry.id,
                        tags=list(entry.tags),
                    )
                )

        self._log(
            entry,
            AuditAction.CREATE,
            created_by,
            new_data={"code": entry.code, "type": entry.type.value, "expectedAmount": entry.expected_amount},
        )
        return entry

    def get_entry(self, *, tenant_id: str, entry_id: str) -> FinanceEntry:
        return self._get(tenant_id, entry_id)

    def list_installments(self, *, tenant_id: str, entry_id: str) -> List[FinanceEntry]:
        self._get(tenant_id, entry_id)
        children = self._entries.list_all(tenant_id=tenant_id, filters=FinanceEntryFilter(parent_entry_id=entry_id))
        return sorted(children, key=lambda e: e.current_installment or 0)

    def list_entries(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        type: Optional[str] = None,
        status: Optional[str] = None,
        category_id: Optional[str] = None,
        cost_center_id: Optional[str] = None,
        due_from: Optional[date] = None,
        due_to: Optional[date] = None,
        search: Optional[str] = None,
    ) -> Page[FinanceEntry]:
        filters = FinanceEntryFilter(
            type=parse_enum(FinanceEntryType, type, "Type") if type else None,
            statuses=(parse_enum(FinanceEntryStatus, status, "Status"),) if status else (),
            category_id=category_id,
            cost_center_id=cost_center_id,
            due_from=due_from,
            due_to=due_to,
            search=search,
        )
        items, total = self._entries.list_page(tenant_id=tenant_id, filters=filters, params=params)
        return Page(items=items, total=total, params=params)

    def update_entry(
        self, *, tenant_id: str, entry_id: str, changes: dict, updated_by: Optional[str] = None
    ) -> FinanceEntry:
        entry = self._get(tenant_id, entry_id)
        if entry.is_settled:
            raise ValidationError("Paid entries cannot be changed")
        if entry.status == FinanceEntryStatus.CANCELLED:
            raise ValidationError("Cancelled entries cannot be changed")

        changes = {k: v for k, v in changes.items() if k in _UPDATABLE and v is not None}
        if "description" in changes:
            changes["description"] = require_non_empty(changes["description"], "Description")
        if "expected_amount" in changes:
            require_positive(changes["expected_amount"], "Expected amount")
        for name in ("discount", "interest", "penalty"):
            if name in changes:
                require_non_negative(changes[name], name.capitalize())
        self._check_references(
            tenant_id,
            changes.get("category_id"),
            changes.get("cost_center_id"),
            changes.get("bank_account_id"),
        )

        old = {k: getattr(entry, k) for k in changes}
        for key, value in changes.items():
            setattr(entry, key, value)
        if entry.paid_amount > entry.total_due + PAYMENT_TOLERANCE:
            raise ValidationError("Total due cannot be lower than the amount already paid")
        if entry.status == FinanceEntryStatus.OVERDUE and not entry.is_overdue(current_day()):
            entry.status = FinanceEntryStatus.PENDING
        entry.updated_at = utc_now()
        self._entries.save(entry)
        self._log(entry, AuditAction.UPDATE, updated_by, old_data=to_jsonable(old), new_data=to_jsonable(changes))
        return entry

    def cancel_entry(self, *, tenant_id: str, entry_id: str, cancelled_by: Optional[str] = None) -> FinanceEntry:
        entry = self._get(tenant_id, entry_id)
        if entry.is_settled:
            raise ValidationError("Paid entries cannot be cancelled")
        if entry.status == FinanceEntryStatus.CANCELLED:
            raise ValidationError("Entry is already cancelled")
        previous = entry.status
        entry.status = FinanceEntryStatus.CANCELLED
        entry.updated_at = utc_now()
        self._entries.save(entry)
        self._log(
            entry,
            AuditAction.CANCEL,
            cancelled_by,
            old_data={"status": previous.value},
            new_data={"status": entry.status.value},
        )
        return entry

    def register_payment(
        self,
        *,
        tenant_id: str,
        entry_id: str,
        amount: float,
        payment_date: Optional[date] = None,
        bank_account_id: Optional[str] = None,
        paid_by: Optional[str] = None,
    ) -> FinanceEntry:
        entry = self._get(tenant_id, entry_id)
        if entry.status == FinanceEntryStatus.CANCELLED:
            raise ValidationError("Cannot register a payment for a cancelled entry")
        if entry.is_settled:
            raise ValidationError("Entry is already paid")
        if amount is None or amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        account = self._bank_account(tenant_id, bank_account_id) if bank_account_id else None

        paid = round(entry.paid_amount + amount, 2)
        if paid > entry.total_due + PAYMENT_TOLERANCE:
            raise ValidationError(f"Payment exceeds the remaining balance of {entry.remaining_balance:.2f}")

        entry.actual_amount = paid
        if bank_account_id:
            entry.bank_account_id = bank_account_id
        if paid >= entry.total_due - PAYMENT_TOLERANCE:
            entry.status = entry.type.settled_status
            entry.payment_date = payment_date or current_day()
        else:
            entry.status = FinanceEntryStatus.PARTIALLY_PAID
        entry.updated_at = utc_now()
        self._entries.save(entry)

        if account is not None:
            if entry.type == FinanceEntryType.PAYABLE:
                account.debit(amount)
            else:
                account.credit(amount)
            self._bank_accounts.save(account)

        if entry.is_settled:
            if entry.recurrence_type == RecurrenceType.RECURRING:
                self._schedule_next_occurrence(entry)
            if entry.parent_entry_id:
                self._settle_master_if_complete(entry)

        self._log(
            entry,
            AuditAction.UPDATE,
            paid_by,
            metadata={"payment": round(amount, 2)},
            new_data={"status": entry.status.value, "actualAmount": entry.actual_amount},
        )
        return entry

    def _schedule_next_occurrence(self, entry: FinanceEntry) -> FinanceEntry:
        occurrence = (entry.current_installment or 1) + 1
        base_description = _OCCURRENCE_SUFFIX.sub("", entry.description)
        next_entry = replace(
            entry,
            id=new_id(),
            code=self._next_code(entry.tenant_id, entry.type),
            description=f"{base_description} ({occurrence})",
            due_date=advance_due_date(
                entry.due_date, entry.recurrence_interval or 1, entry.recurrence_unit or RecurrenceUnit.MONTHLY
            ),
            issue_date=current_day(),
            competence_date=None,
            payment_date=None,
            actual_amount=None,
            status=FinanceEntryStatus.PENDING,
            current_installment=occurrence,
            tags=list(entry.tags),
            created_at=utc_now(),
            updated_at=None,
        )
        return self._entries.save(next_entry)

    def _settle_master_if_complete(self, child: FinanceEntry) -> None:
        master = self._entries.get_by_id(tenant_id=child.tenant_id, entry_id=child.parent_entry_id)
        if not master or master.is_settled:
            return
        siblings = self._entries.list_all(
            tenant_id=child.tenant_id, filters=FinanceEntryFilter(parent_entry_id=master.id)
        )
        if siblings and all(s.is_settled for s in siblings):
            master.status = master.type.settled_status
            master.actual_amount = round(sum(s.paid_amount for s in siblings), 2)
            master.payment_date = child.payment_date
            master.updated_at = utc_now()
            self._entries.save(master)

    def check_overdue_entries(
        self,
        *,
        tenant_id: str,
        today: Optional[date] = None,
        due_soon_days: int = 3,
        notify_user_id: Optional[str] = None,
    ) -> dict:
        day = today or current_day()
        pending = self._entries.list_all(
            tenant_id=tenant_id, filters=FinanceEntryFilter(statuses=(FinanceEntryStatus.PENDING,))
        )
        payable_overdue = receivable_overdue = due_soon = 0

        for entry in pending:
            if entry.due_date < day:
                entry.status = FinanceEntryStatus.OVERDUE
                entry.updated_at = utc_now()
                self._entries.save(entry)
                if entry.type == FinanceEntryType.PAYABLE:
                    payable_overdue += 1
                else:
                    receivable_overdue += 1
                self._notify(
                    tenant_id,
                    notify_user_id,
                    entry,
                    title=f"Overdue entry {entry.code}",
                    message=f"{entry.description} was due on {entry.due_date.isoformat()} ({entry.remaining_balance:.2f})",
                    type=NotificationType.WARNING,
                    priority=NotificationPriority.HIGH,
                )
                continue

            days_left = (entry.due_date - day).days
            if 1 <= days_left <= due_soon_days:
                due_soon += 1
                self._notify(
                    tenant_id,
                    notify_user_id,
                    entry,
                    title=f"Entry {entry.code} due in {days_left} day(s)",
                    message=f"{entry.description} is due on {entry.due_date.isoformat()} ({entry.remaining_balance:.2f})",
                    type=NotificationType.REMINDER,
                    priority=NotificationPriority.NORMAL,
                )

        marked = payable_overdue + receivable_overdue
        if marked:
            logger.info("Marked %d finance entries overdue for tenant %s", marked, tenant_id)
        return {
            "markedOverdue": marked,
            "payableOverdue": payable_overdue,
            "receivableOverdue": receivable_overdue,
            "dueSoonAlerts": due_soon,
        }

    def _notify(self, tenant_id: str, user_id: Optional[str], entry: FinanceEntry, **kwargs) -> None:
        if self._notifications is None or not user_id:
            return
        self._notifications.create_notification(
            tenant_id=tenant_id,
            user_id=user_id,
            entity_type="FINANCE_ENTRY",
            entity_id=entry.id,
            action_url=f"/finance/entries/{entry.id}",
            **kwargs,
        )
