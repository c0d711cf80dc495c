from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase

from ..absences.model import AbsenceStatus, AbsenceType, VacationStatus
from ..audit.model import AuditAction, AuditEntity, AuditModule
from ..employees.model import EmployeeStatus
from ..finance.model import (
    FinanceCategoryType,
    FinanceEntryStatus,
    FinanceEntryType,
    LoanStatus,
    RecurrenceType,
    RecurrenceUnit,
)
from ..notifications.model import NotificationChannel, NotificationPriority, NotificationType
from ..payroll.model import PayrollItemType, PayrollStatus
from ..rbac.model import PermissionEffect
from ..requests.model import HistoryAction, RequestPriority, RequestStatus, RequestType
from ..sales.model import CustomerType, DiscountType, OrderStatus
from ..stock.model import ItemStatus, MovementType, VolumeStatus
from ..tenants.model import TenantStatus


class Base(DeclarativeBase):
    pass


def _id(**kwargs):
    return sa.Column(sa.String(36), **kwargs)


def _enum(enum_cls, **kwargs):
    return sa.Column(sa.Enum(enum_cls, native_enum=False, length=32), **kwargs)


# core
class TenantRow(Base):
    __tablename__ = "tenants"

    id = _id(primary_key=True)
    name = sa.Column(sa.String(128), nullable=False)
    slug = sa.Column(sa.String(128), nullable=False, unique=True)
    status = _enum(TenantStatus, nullable=False)
    settings = sa.Column(sa.JSON, nullable=False, default=dict)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class UserRow(Base):
    __tablename__ = "users"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "username", name="uq_users_tenant_username"),
        sa.UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
    )

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    username = sa.Column(sa.String(64), nullable=False)
    email = sa.Column(sa.String(254), nullable=False)
    password_hash = sa.Column(sa.String(255), nullable=False)
    access_pin_hash = sa.Column(sa.String(255))
    failed_login_attempts = sa.Column(sa.Integer, nullable=False, default=0)
    blocked_until = sa.Column(sa.DateTime)
    force_password_reset = sa.Column(sa.Boolean, nullable=False, default=False)
    last_login_at = sa.Column(sa.DateTime)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class SessionRow(Base):
    __tablename__ = "sessions"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    user_id = _id(nullable=False, index=True)
    expires_at = sa.Column(sa.DateTime, nullable=False)
    ip = sa.Column(sa.String(64))
    created_at = sa.Column(sa.DateTime, nullable=False)
    last_used_at = sa.Column(sa.DateTime)
    revoked_at = sa.Column(sa.DateTime)


# rbac
class PermissionRow(Base):
    __tablename__ = "permissions"

    id = _id(primary_key=True)
    code = sa.Column(sa.String(128), nullable=False, unique=True)
    name = sa.Column(sa.String(128), nullable=False)
    module = sa.Column(sa.String(64), nullable=False, index=True)
    resource = sa.Column(sa.String(64), nullable=False)
    action = sa.Column(sa.String(64), nullable=False)
    description = sa.Column(sa.String(512))
    is_system = sa.Column(sa.Boolean, nullable=False, default=False)
    created_at = sa.Column(sa.DateTime, nullable=False)


class PermissionGroupRow(Base):
    __tablename__ = "permission_groups"
    __table_args__ = (sa.UniqueConstraint("tenant_id", "slug", name="uq_permission_groups_tenant_slug"),)

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    name = sa.Column(sa.String(128), nullable=False)
    slug = sa.Column(sa.String(128), nullable=False)
    description = sa.Column(sa.String(512))
    parent_id = _id()
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    priority = sa.Column(sa.Integer, nullable=False, default=0)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class GroupPermissionRow(Base):
    __tablename__ = "group_permissions"
    __table_args__ = (sa.UniqueConstraint("group_id", "permission_id", name="uq_group_permissions"),)

    id = _id(primary_key=True)
    group_id = _id(nullable=False, index=True)
    permission_id = _id(nullable=False)
    effect = _enum(PermissionEffect, nullable=False)
    conditions = sa.Column(sa.JSON)
    created_at = sa.Column(sa.DateTime, nullable=False)


class UserGroupRow(Base):
    __tablename__ = "user_groups"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    user_id = _id(nullable=False, index=True)
    group_id = _id(nullable=False, index=True)
    expires_at = sa.Column(sa.DateTime)
    granted_by = _id()
    created_at = sa.Column(sa.DateTime, nullable=False)


class UserDirectPermissionRow(Base):
    __tablename__ = "user_direct_permissions"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    user_id = _id(nullable=False, index=True)
    permission_id = _id(nullable=False)
    effect = _enum(PermissionEffect, nullable=False)
    expires_at = sa.Column(sa.DateTime)
    granted_by = _id()
    created_at = sa.Column(sa.DateTime, nullable=False)


class PermissionAuditLogRow(Base):
    __tablename__ = "permission_audit_logs"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    user_id = _id(nullable=False, index=True)
    permission_code = sa.Column(sa.String(128), nullable=False)
    allowed = sa.Column(sa.Boolean, nullable=False)
    reason = sa.Column(sa.String(255), nullable=False)
    resource_id = sa.Column(sa.String(64))
    ip = sa.Column(sa.String(64))
    created_at = sa.Column(sa.DateTime, nullable=False)


# audit and notifications
class AuditLogRow(Base):
    __tablename__ = "audit_logs"
    __table_args__ = (sa.Index("ix_audit_logs_entity", "tenant_id", "entity", "entity_id"),)

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    action = _enum(AuditAction, nullable=False)
    entity = _enum(AuditEntity, nullable=False)
    entity_id = sa.Column(sa.String(64), nullable=False)
    module = _enum(AuditModule, nullable=False)
    user_id = _id(index=True)
    old_data = sa.Column(sa.JSON)
    new_data = sa.Column(sa.JSON)
    # "metadata" is reserved on declarative classes
    metadata_ = sa.Column("metadata", sa.JSON)
    ip = sa.Column(sa.String(64))
    user_agent = sa.Column(sa.String(512))
    signature = sa.Column(sa.String(128))
    created_at = sa.Column(sa.DateTime, nullable=False, index=True)


class NotificationRow(Base):
    __tablename__ = "notifications"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    user_id = _id(nullable=False, index=True)
    title = sa.Column(sa.String(256), nullable=False)
    message = sa.Column(sa.Text, nullable=False)
    type = _enum(NotificationType, nullable=False)
    priority = _enum(NotificationPriority, nullable=False)
    channel = _enum(NotificationChannel, nullable=False)
    entity_type = sa.Column(sa.String(64))
    entity_id = sa.Column(sa.String(64))
    action_url = sa.Column(sa.String(512))
    is_read = sa.Column(sa.Boolean, nullable=False, default=False)
    read_at = sa.Column(sa.DateTime)
    is_sent = sa.Column(sa.Boolean, nullable=False, default=False)
    sent_at = sa.Column(sa.DateTime)
    scheduled_for = sa.Column(sa.DateTime)
    created_at = sa.Column(sa.DateTime, nullable=False)
    deleted_at = sa.Column(sa.DateTime)


class NotificationPreferenceRow(Base):
    __tablename__ = "notification_preferences"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "user_id", "alert_type", "channel", name="uq_notification_preferences"),
    )

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    user_id = _id(nullable=False)
    alert_type = sa.Column(sa.String(64), nullable=False)
    channel = _enum(NotificationChannel, nullable=False)
    is_enabled = sa.Column(sa.Boolean, nullable=False, default=True)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)


# hr
class EmployeeRow(Base):
    __tablename__ = "employees"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    registration_number = sa.Column(sa.String(32), nullable=False)
    full_name = sa.Column(sa.String(256), nullable=False)
    cpf = sa.Column(sa.String(11), nullable=False)
    hire_date = sa.Column(sa.Date, nullable=False)
    base_salary = sa.Column(sa.Float, nullable=False, default=0.0)
    user_id = _id()
    email = sa.Column(sa.String(254))
    position = sa.Column(sa.String(128))
    department = sa.Column(sa.String(128))
    termination_date = sa.Column(sa.Date)
    status = _enum(EmployeeStatus, nullable=False)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class AbsenceRow(Base):
    __tablename__ = "absences"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    employee_id = _id(nullable=False, index=True)
    type = _enum(AbsenceType, nullable=False)
    start_date = sa.Column(sa.Date, nullable=False)
    end_date = sa.Column(sa.Date, nullable=False)
    total_days = sa.Column(sa.Integer, nullable=False)
    status = _enum(AbsenceStatus, nullable=False)
    reason = sa.Column(sa.String(512))
    document_url = sa.Column(sa.String(512))
    cid = sa.Column(sa.String(16))
    is_paid = sa.Column(sa.Boolean, nullable=False, default=True)
    vacation_period_id = _id()
    requested_by = _id()
    approved_by = _id()
    approved_at = sa.Column(sa.DateTime)
    rejection_reason = sa.Column(sa.String(512))
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class VacationPeriodRow(Base):
    __tablename__ = "vacation_periods"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    employee_id = _id(nullable=False, index=True)
    acquisition_start = sa.Column(sa.Date, nullable=False)
    acquisition_end = sa.Column(sa.Date, nullable=False)
    concession_start = sa.Column(sa.Date, nullable=False)
    concession_end = sa.Column(sa.Date, nullable=False)
    total_days = sa.Column(sa.Integer, nullable=False, default=30)
    used_days = sa.Column(sa.Integer, nullable=False, default=0)
    sold_days = sa.Column(sa.Integer, nullable=False, default=0)
    status = _enum(VacationStatus, nullable=False)
    scheduled_start = sa.Column(sa.Date)
    scheduled_end = sa.Column(sa.Date)
    notes = sa.Column(sa.String(512))
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)


class PayrollRow(Base):
    __tablename__ = "payrolls"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "reference_month", "reference_year", name="uq_payrolls_reference"),
    )

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    reference_month = sa.Column(sa.Integer, nullable=False)
    reference_year = sa.Column(sa.Integer, nullable=False)
    status = _enum(PayrollStatus, nullable=False)
    total_gross = sa.Column(sa.Float, nullable=False, default=0.0)
    total_deductions = sa.Column(sa.Float, nullable=False, default=0.0)
    total_net = sa.Column(sa.Float, nullable=False, default=0.0)
    processed_by = _id()
    processed_at = sa.Column(sa.DateTime)
    approved_by = _id()
    approved_at = sa.Column(sa.DateTime)
    paid_by = _id()
    paid_at = sa.Column(sa.DateTime)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)


class PayrollItemRow(Base):
    __tablename__ = "payroll_items"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    payroll_id = _id(nullable=False, index=True)
    employee_id = _id(nullable=False, index=True)
    type = _enum(PayrollItemType, nullable=False)
    description = sa.Column(sa.String(256), nullable=False)
    amount = sa.Column(sa.Float, nullable=False)
    is_deduction = sa.Column(sa.Boolean, nullable=False, default=False)
    reference_type = sa.Column(sa.String(32))
    reference_id = _id()
    created_at = sa.Column(sa.DateTime, nullable=False)


class OvertimeRow(Base):
    __tablename__ = "overtimes"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    employee_id = _id(nullable=False, index=True)
    date = sa.Column(sa.Date, nullable=False)
    hours = sa.Column(sa.Float, nullable=False)
    reason = sa.Column(sa.String(512))
    approved = sa.Column(sa.Boolean, nullable=False, default=False)
    approved_by = _id()
    approved_at = sa.Column(sa.DateTime)
    created_at = sa.Column(sa.DateTime, nullable=False)


class BonusRow(Base):
    __tablename__ = "bonuses"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    employee_id = _id(nullable=False, index=True)
    name = sa.Column(sa.String(128), nullable=False)
    amount = sa.Column(sa.Float, nullable=False)
    reason = sa.Column(sa.String(512), nullable=False)
    date = sa.Column(sa.Date, nullable=False)
    is_paid = sa.Column(sa.Boolean, nullable=False, default=False)
    created_at = sa.Column(sa.DateTime, nullable=False)
    deleted_at = sa.Column(sa.DateTime)


class DeductionRow(Base):
    __tablename__ = "deductions"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    employee_id = _id(nullable=False, index=True)
    name = sa.Column(sa.String(128), nullable=False)
    amount = sa.Column(sa.Float, nullable=False)
    reason = sa.Column(sa.String(512), nullable=False)
    date = sa.Column(sa.Date, nullable=False)
    is_recurring = sa.Column(sa.Boolean, nullable=False, default=False)
    installments = sa.Column(sa.Integer)
    current_installment = sa.Column(sa.Integer, nullable=False, default=0)
    is_applied = sa.Column(sa.Boolean, nullable=False, default=False)
    applied_at = sa.Column(sa.DateTime)
    payroll_id = _id()
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


# finance
class FinanceCategoryRow(Base):
    __tablename__ = "finance_categories"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    name = sa.Column(sa.String(128), nullable=False)
    slug = sa.Column(sa.String(128), nullable=False)
    type = _enum(FinanceCategoryType, nullable=False)
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    created_at = sa.Column(sa.DateTime, nullable=False)
    deleted_at = sa.Column(sa.DateTime)


class CostCenterRow(Base):
    __tablename__ = "cost_centers"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    code = sa.Column(sa.String(32), nullable=False)
    name = sa.Column(sa.String(128), nullable=False)
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    created_at = sa.Column(sa.DateTime, nullable=False)
    deleted_at = sa.Column(sa.DateTime)


class BankAccountRow(Base):
    __tablename__ = "bank_accounts"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    name = sa.Column(sa.String(128), nullable=False)
    bank_code = sa.Column(sa.String(8), nullable=False)
    agency = sa.Column(sa.String(16), nullable=False)
    number = sa.Column(sa.String(32), nullable=False)
    balance = sa.Column(sa.Float, nullable=False, default=0.0)
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class FinanceEntryRow(Base):
    __tablename__ = "finance_entries"
    __table_args__ = (sa.UniqueConstraint("tenant_id", "code", name="uq_finance_entries_code"),)

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    code = sa.Column(sa.String(64), nullable=False)
    type = _enum(FinanceEntryType, nullable=False)
    description = sa.Column(sa.String(512), nullable=False)
    category_id = _id(nullable=False, index=True)
    expected_amount = sa.Column(sa.Float, nullable=False)
    issue_date = sa.Column(sa.Date, nullable=False)
    due_date = sa.Column(sa.Date, nullable=False, index=True)
    cost_center_id = _id(index=True)
    bank_account_id = _id()
    supplier_name = sa.Column(sa.String(256))
    customer_name = sa.Column(sa.String(256))
    actual_amount = sa.Column(sa.Float)
    discount = sa.Column(sa.Float, nullable=False, default=0.0)
    interest = sa.Column(sa.Float, nullable=False, default=0.0)
    penalty = sa.Column(sa.Float, nullable=False, default=0.0)
    competence_date = sa.Column(sa.Date)
    payment_date = sa.Column(sa.Date)
    status = _enum(FinanceEntryStatus, nullable=False, index=True)
    recurrence_type = _enum(RecurrenceType, nullable=False)
    recurrence_interval = sa.Column(sa.Integer)
    recurrence_unit = _enum(RecurrenceUnit)
    total_installments = sa.Column(sa.Integer)
    current_installment = sa.Column(sa.Integer)
    parent_entry_id = _id(index=True)
    notes = sa.Column(sa.Text)
    tags = sa.Column(sa.JSON, nullable=False, default=list)
    created_by = _id()
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class LoanRow(Base):
    __tablename__ = "loans"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    name = sa.Column(sa.String(128), nullable=False)
    bank_account_id = _id(nullable=False)
    cost_center_id = _id(nullable=False)
    principal_amount = sa.Column(sa.Float, nullable=False)
    outstanding_balance = sa.Column(sa.Float, nullable=False)
    interest_rate = sa.Column(sa.Float, nullable=False)
    start_date = sa.Column(sa.Date, nullable=False)
    total_installments = sa.Column(sa.Integer, nullable=False)
    installment_day = sa.Column(sa.Integer, nullable=False)
    contract_number = sa.Column(sa.String(64))
    end_date = sa.Column(sa.Date)
    paid_installments = sa.Column(sa.Integer, nullable=False, default=0)
    status = _enum(LoanStatus, nullable=False)
    notes = sa.Column(sa.Text)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class LoanInstallmentRow(Base):
    __tablename__ = "loan_installments"
    __table_args__ = (sa.UniqueConstraint("loan_id", "number", name="uq_loan_installments_number"),)

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    loan_id = _id(nullable=False, index=True)
    number = sa.Column(sa.Integer, nullable=False)
    due_date = sa.Column(sa.Date, nullable=False)
    principal = sa.Column(sa.Float, nullable=False)
    interest = sa.Column(sa.Float, nullable=False)
    total = sa.Column(sa.Float, nullable=False)
    paid_amount = sa.Column(sa.Float)
    paid_at = sa.Column(sa.DateTime)
    created_at = sa.Column(sa.DateTime, nullable=False)


# stock
class WarehouseRow(Base):
    __tablename__ = "warehouses"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    code = sa.Column(sa.String(16), nullable=False)
    name = sa.Column(sa.String(128), nullable=False)
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    created_at = sa.Column(sa.DateTime, nullable=False)
    deleted_at = sa.Column(sa.DateTime)


class ZoneRow(Base):
    __tablename__ = "zones"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    warehouse_id = _id(nullable=False, index=True)
    code = sa.Column(sa.String(16), nullable=False)
    name = sa.Column(sa.String(128), nullable=False)
    structure = sa.Column(sa.JSON, nullable=False, default=dict)
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class BinRow(Base):
    __tablename__ = "bins"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    zone_id = _id(nullable=False, index=True)
    address = sa.Column(sa.String(64), nullable=False)
    aisle = sa.Column(sa.Integer, nullable=False)
    shelf = sa.Column(sa.Integer, nullable=False)
    position = sa.Column(sa.String(8), nullable=False)
    capacity = sa.Column(sa.Integer)
    current_occupancy = sa.Column(sa.Integer, nullable=False, default=0)
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    is_blocked = sa.Column(sa.Boolean, nullable=False, default=False)
    block_reason = sa.Column(sa.String(256))
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class VariantRow(Base):
    __tablename__ = "variants"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    product_name = sa.Column(sa.String(256), nullable=False)
    sku = sa.Column(sa.String(64), nullable=False)
    name = sa.Column(sa.String(256), nullable=False)
    price = sa.Column(sa.Float, nullable=False, default=0.0)
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class ItemRow(Base):
    __tablename__ = "items"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    unique_code = sa.Column(sa.String(128), nullable=False)
    variant_id = _id(nullable=False, index=True)
    bin_id = _id(index=True)
    quantity = sa.Column(sa.Integer, nullable=False)
    batch_number = sa.Column(sa.String(64))
    manufacturing_date = sa.Column(sa.Date)
    expiry_date = sa.Column(sa.Date)
    status = _enum(ItemStatus, nullable=False)
    entry_date = sa.Column(sa.DateTime, nullable=False)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class ItemMovementRow(Base):
    __tablename__ = "item_movements"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    item_id = _id(nullable=False, index=True)
    user_id = _id()
    quantity = sa.Column(sa.Integer, nullable=False)
    quantity_before = sa.Column(sa.Integer, nullable=False)
    quantity_after = sa.Column(sa.Integer, nullable=False)
    movement_type = _enum(MovementType, nullable=False)
    reason_code = sa.Column(sa.String(64))
    origin_ref = sa.Column(sa.String(128))
    destination_ref = sa.Column(sa.String(128))
    notes = sa.Column(sa.String(512))
    sales_order_id = _id()
    created_at = sa.Column(sa.DateTime, nullable=False)


class VolumeRow(Base):
    __tablename__ = "volumes"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    code = sa.Column(sa.String(64), nullable=False)
    status = _enum(VolumeStatus, nullable=False)
    item_ids = sa.Column(sa.JSON, nullable=False, default=list)
    notes = sa.Column(sa.String(512))
    closed_at = sa.Column(sa.DateTime)
    delivered_at = sa.Column(sa.DateTime)
    returned_at = sa.Column(sa.DateTime)
    created_by = _id()
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


# sales
class CustomerRow(Base):
    __tablename__ = "customers"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    name = sa.Column(sa.String(256), nullable=False)
    type = _enum(CustomerType, nullable=False)
    document = sa.Column(sa.String(32))
    email = sa.Column(sa.String(254))
    phone = sa.Column(sa.String(32))
    address = sa.Column(sa.String(512))
    city = sa.Column(sa.String(128))
    state = sa.Column(sa.String(2))
    zip_code = sa.Column(sa.String(16))
    country = sa.Column(sa.String(64))
    notes = sa.Column(sa.Text)
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class SalesOrderRow(Base):
    __tablename__ = "sales_orders"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    order_number = sa.Column(sa.String(64), nullable=False)
    customer_id = _id(nullable=False, index=True)
    created_by = _id()
    status = _enum(OrderStatus, nullable=False)
    items = sa.Column(sa.JSON, nullable=False, default=list)
    discount = sa.Column(sa.Float, nullable=False, default=0.0)
    notes = sa.Column(sa.Text)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class VariantPromotionRow(Base):
    __tablename__ = "variant_promotions"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    variant_id = _id(nullable=False, index=True)
    name = sa.Column(sa.String(128), nullable=False)
    discount_type = _enum(DiscountType, nullable=False)
    discount_value = sa.Column(sa.Float, nullable=False)
    start_date = sa.Column(sa.DateTime, nullable=False)
    end_date = sa.Column(sa.DateTime, nullable=False)
    is_active = sa.Column(sa.Boolean, nullable=False, default=True)
    notes = sa.Column(sa.Text)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


# requests
class RequestRow(Base):
    __tablename__ = "requests"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    title = sa.Column(sa.String(256), nullable=False)
    description = sa.Column(sa.Text, nullable=False)
    type = _enum(RequestType, nullable=False)
    requester_id = _id(nullable=False, index=True)
    category = sa.Column(sa.String(64))
    status = _enum(RequestStatus, nullable=False, index=True)
    priority = _enum(RequestPriority, nullable=False)
    assigned_to_id = _id(index=True)
    target_type = sa.Column(sa.String(64))
    target_id = sa.Column(sa.String(64))
    due_date = sa.Column(sa.DateTime)
    sla_deadline = sa.Column(sa.DateTime)
    approval_id = _id()
    submitted_at = sa.Column(sa.DateTime)
    completed_at = sa.Column(sa.DateTime)
    created_at = sa.Column(sa.DateTime, nullable=False)
    updated_at = sa.Column(sa.DateTime)
    deleted_at = sa.Column(sa.DateTime)


class RequestCommentRow(Base):
    __tablename__ = "request_comments"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    request_id = _id(nullable=False, index=True)
    author_id = _id(nullable=False)
    content = sa.Column(sa.Text, nullable=False)
    is_internal = sa.Column(sa.Boolean, nullable=False, default=False)
    created_at = sa.Column(sa.DateTime, nullable=False)
    deleted_at = sa.Column(sa.DateTime)


class RequestHistoryRow(Base):
    __tablename__ = "request_history"

    id = _id(primary_key=True)
    tenant_id = _id(nullable=False, index=True)
    request_id = _id(nullable=False, index=True)
    action = _enum(HistoryAction, nullable=False)
    performed_by = _id(nullable=False)
    from_status = _enum(RequestStatus)
    to_status = _enum(RequestStatus)
    note = sa.Column(sa.Text)
    created_at = sa.Column(sa.DateTime, nullable=False)
