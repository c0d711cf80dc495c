from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import boto3

from .absences.memory_repository import InMemoryAbsenceRepository, InMemoryVacationPeriodRepository
from .absences.service import AbsenceService
from .absences.sql_repository import SqlAbsenceRepository, SqlVacationPeriodRepository
from .audit.memory_repository import InMemoryAuditLogRepository
from .audit.service import AuditService
from .audit.signature import AuditSignatureService
from .audit.sql_repository import SqlAuditLogRepository
from .config import Settings, load_settings
from .database.connection import Database
from .employees.memory_repository import InMemoryEmployeeRepository
from .employees.service import EmployeeService
from .employees.sql_repository import SqlEmployeeRepository
from .finance.export import AccountingExportService
from .finance.loans import LoanService
from .finance.memory_repository import (
    InMemoryBankAccountRepository,
    InMemoryCostCenterRepository,
    InMemoryFinanceCategoryRepository,
    InMemoryFinanceEntryRepository,
    InMemoryLoanInstallmentRepository,
    InMemoryLoanRepository,
)
from .finance.payroll_import import PayrollFinanceService
from .finance.service import FinanceEntryService, FinanceSetupService
from .finance.sql_repository import (
    SqlBankAccountRepository,
    SqlCostCenterRepository,
    SqlFinanceCategoryRepository,
    SqlFinanceEntryRepository,
    SqlLoanInstallmentRepository,
    SqlLoanRepository,
)
from .http.auth import AuthGuards
from .infrastructure.mailer import EmailSender, SmtpEmailSender
from .infrastructure.rate_limit import RedisRateLimiter
from .infrastructure.storage import FileStorage, FileUploadService, LocalFileStorage, S3FileStorage
from .notifications.memory_repository import (
    InMemoryNotificationPreferenceRepository,
    InMemoryNotificationRepository,
)
from .notifications.service import NotificationService
from .notifications.sql_repository import SqlNotificationPreferenceRepository, SqlNotificationRepository
from .payroll.memory_repository import (
    InMemoryBonusRepository,
    InMemoryDeductionRepository,
    InMemoryOvertimeRepository,
    InMemoryPayrollItemRepository,
    InMemoryPayrollRepository,
)
from .payroll.service import PayrollService
from .payroll.sql_repository import (
    SqlBonusRepository,
    SqlDeductionRepository,
    SqlOvertimeRepository,
    SqlPayrollItemRepository,
    SqlPayrollRepository,
)
from .rbac.memory_repository import (
    InMemoryGroupPermissionRepository,
    InMemoryPermissionAuditLogRepository,
    InMemoryPermissionGroupRepository,
    InMemoryPermissionRepository,
    InMemoryUserDirectPermissionRepository,
    InMemoryUserGroupRepository,
)
from .rbac.permission_service import PermissionService
from .rbac.service import RbacService
from .rbac.sql_repository import (
    SqlGroupPermissionRepository,
    SqlPermissionAuditLogRepository,
    SqlPermissionGroupRepository,
    SqlPermissionRepository,
    SqlUserDirectPermissionRepository,
    SqlUserGroupRepository,
)
from .requests.memory_repository import (
    InMemoryRequestCommentRepository,
    InMemoryRequestHistoryRepository,
    InMemoryRequestRepository,
)
from .requests.service import RequestService
from .requests.sql_repository import (
    SqlRequestCommentRepository,
    SqlRequestHistoryRepository,
    SqlRequestRepository,
)
from .sales.memory_repository import (
    InMemoryCustomerRepository,
    InMemorySalesOrderRepository,
    InMemoryVariantPromotionRepository,
)
from .sales.service import CustomerService, PromotionService, SalesOrderService
from .sales.sql_repository import SqlCustomerRepository, SqlSalesOrderRepository, SqlVariantPromotionRepository
from .stock.item_service import ItemService
from .stock.location_service import LocationService
from .stock.memory_repository import (
    InMemoryBinRepository,
    InMemoryItemMovementRepository,
    InMemoryItemRepository,
    InMemoryVariantRepository,
    InMemoryVolumeRepository,
    InMemoryWarehouseRepository,
    InMemoryZoneRepository,
)
from .stock.sql_repository import (
    SqlBinRepository,
    SqlItemMovementRepository,
    SqlItemRepository,
    SqlVariantRepository,
    SqlVolumeRepository,
    SqlWarehouseRepository,
    SqlZoneRepository,
)
from .stock.volume_service import VolumeService
from .tenants.memory_repository import InMemoryTenantRepository
from .tenants.service import TenantService
from .tenants.sql_repository import SqlTenantRepository
from .users.memory_repository import InMemorySessionRepository, InMemoryUserRepository
from .users.service import AuthService, UserService
from .users.sql_repository import SqlSessionRepository, SqlUserRepository
from .users.tokens import TokenService


@dataclass(frozen=True)
class Repositories:
    tenants: Any
    users: Any
    sessions: Any
    permissions: Any
    groups: Any
    group_permissions: Any
    user_groups: Any
    direct_permissions: Any
    permission_audit_logs: Any
    audit_logs: Any
    notifications: Any
    notification_preferences: Any
    employees: Any
    absences: Any
    vacation_periods: Any
    payrolls: Any
    payroll_items: Any
    overtime: Any
    bonuses: Any
    deductions: Any
    finance_categories: Any
    cost_centers: Any
    bank_accounts: Any
    finance_entries: Any
    loans: Any
    loan_installments: Any
    warehouses: Any
    zones: Any
    bins: Any
    variants: Any
    items: Any
    movements: Any
    volumes: Any
    customers: Any
    sales_orders: Any
    promotions: Any
    requests: Any
    request_comments: Any
    request_history: Any


def memory_repositories() -> Repositories:
    return Repositories(
        tenants=InMemoryTenantRepository(),
        users=InMemoryUserRepository(),
        sessions=InMemorySessionRepository(),
        permissions=InMemoryPermissionRepository(),
        groups=InMemoryPermissionGroupRepository(),
        group_permissions=InMemoryGroupPermissionRepository(),
        user_groups=InMemoryUserGroupRepository(),
        direct_permissions=InMemoryUserDirectPermissionRepository(),
        permission_audit_logs=InMemoryPermissionAuditLogRepository(),
        audit_logs=InMemoryAuditLogRepository(),
        notifications=InMemoryNotificationRepository(),
        notification_preferences=InMemoryNotificationPreferenceRepository(),
        employees=InMemoryEmployeeRepository(),
        absences=InMemoryAbsenceRepository(),
        vacation_periods=InMemoryVacationPeriodRepository(),
        payrolls=InMemoryPayrollRepository(),
        payroll_items=InMemoryPayrollItemRepository(),
        overtime=InMemoryOvertimeRepository(),
        bonuses=InMemoryBonusRepository(),
        deductions=InMemoryDeductionRepository(),
        finance_categories=InMemoryFinanceCategoryRepository(),
        cost_centers=InMemoryCostCenterRepository(),
        bank_accounts=InMemoryBankAccountRepository(),
        finance_entries=InMemoryFinanceEntryRepository(),
        loans=InMemoryLoanRepository(),
        loan_installments=InMemoryLoanInstallmentRepository(),
        warehouses=InMemoryWarehouseRepository(),
        zones=InMemoryZoneRepository(),
        bins=InMemoryBinRepository(),
        variants=InMemoryVariantRepository(),
        items=InMemoryItemRepository(),
        movements=InMemoryItemMovementRepository(),
        volumes=InMemoryVolumeRepository(),
        customers=InMemoryCustomerRepository(),
        sales_orders=InMemorySalesOrderRepository(),
        promotions=InMemoryVariantPromotionRepository(),
        requests=InMemoryRequestRepository(),
        request_comments=InMemoryRequestCommentRepository(),
        request_history=InMemoryRequestHistoryRepository(),
    )


def sql_repositories(database: Database) -> Repositories:
    return Repositories(
        tenants=SqlTenantRepository(database),
        users=SqlUserRepository(database),
        sessions=SqlSessionRepository(database),
        permissions=SqlPermissionRepository(database),
        groups=SqlPermissionGroupRepository(database),
        group_permissions=SqlGroupPermissionRepository(database),
        user_groups=SqlUserGroupRepository(database),
        direct_permissions=SqlUserDirectPermissionRepository(database),
        permission_audit_logs=SqlPermissionAuditLogRepository(database),
        audit_logs=SqlAuditLogRepository(database),
        notifications=SqlNotificationRepository(database),
        notification_preferences=SqlNotificationPreferenceRepository(database),
        employees=SqlEmployeeRepository(database),
        absences=SqlAbsenceRepository(database),
        vacation_periods=SqlVacationPeriodRepository(database),
        payrolls=SqlPayrollRepository(database),
        payroll_items=SqlPayrollItemRepository(database),
        overtime=SqlOvertimeRepository(database),
        bonuses=SqlBonusRepository(database),
        deductions=SqlDeductionRepository(database),
        finance_categories=SqlFinanceCategoryRepository(database),
        cost_centers=SqlCostCenterRepository(database),
        bank_accounts=SqlBankAccountRepository(database),
        finance_entries=SqlFinanceEntryRepository(database),
        loans=SqlLoanRepository(database),
        loan_installments=SqlLoanInstallmentRepository(database),
        warehouses=SqlWarehouseRepository(database),
        zones=SqlZoneRepository(database),
        bins=SqlBinRepository(database),
        variants=SqlVariantRepository(database),
        items=SqlItemRepository(database),
        movements=SqlItemMovementRepository(database),
        volumes=SqlVolumeRepository(database),
        customers=SqlCustomerRepository(database),
        sales_orders=SqlSalesOrderRepository(database),
        promotions=SqlVariantPromotionRepository(database),
        requests=SqlRequestRepository(database),
        request_comments=SqlRequestCommentRepository(database),
        request_history=SqlRequestHistoryRepository(database),
    )


@dataclass(frozen=True)
class Container:
    settings: Settings
    database: Optional[Database]
    repos: Repositories
    guards: AuthGuards
    rate_limiter: Optional[RedisRateLimiter]

    tenant_service: TenantService
    auth_service: AuthService
    user_service: UserService
    permission_service: PermissionService
    rbac_service: RbacService
    audit_service: AuditService
    notification_service: NotificationService
    file_upload_service: FileUploadService

    employee_service: EmployeeService
    absence_service: AbsenceService
    payroll_service: PayrollService

    finance_setup_service: FinanceSetupService
    finance_entry_service: FinanceEntryService
    payroll_finance_service: PayrollFinanceService
    loan_service: LoanService
    accounting_export_service: AccountingExportService

    location_service: LocationService
    item_service: ItemService
    volume_service: VolumeService

    customer_service: CustomerService
    sales_order_service: SalesOrderService
    promotion_service: PromotionService

    request_service: RequestService


def build_storage(settings: Settings) -> FileStorage:
    if settings.storage_driver == "s3":
        client = boto3.client(
            "s3",
            region_name=settings.s3_region or None,
            endpoint_url=settings.s3_endpoint_url or None,
        )
        return S3FileStorage(bucket=settings.s3_bucket, client=client, public_base_url=settings.public_files_url or None)
    return LocalFileStorage(settings.upload_dir, settings.public_files_url)


def build_email_sender(settings: Settings) -> Optional[EmailSender]:
    if not settings.smtp_host:
        return None
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.smtp_sender,
        use_tls=settings.smtp_use_tls,
    )


def build_rate_limiter(settings: Settings) -> Optional[RedisRateLimiter]:
    if not settings.rate_limit_enabled or not settings.redis_url:
        return None
    return RedisRateLimiter.from_url(settings.redis_url)


def build_container(
    settings: Settings,
    repos: Repositories,
    *,
    database: Optional[Database] = None,
    storage: Optional[FileStorage] = None,
    email_sender: Optional[EmailSender] = None,
    rate_limiter: Optional[RedisRateLimiter] = None,
) -> Container:
    signer = AuditSignatureService.from_secrets(
        audit_secret=settings.audit_hmac_secret,
        jwt_secret=settings.jwt_secret,
        fallback_secret=settings.secret_key,
    )
    audit_service = AuditService(repos.audit_logs, signer)
    notification_service = NotificationService(
        repos.notifications,
        repos.notification_preferences,
        email_sender if email_sender is not None else build_email_sender(settings),
        repos.users,
    )

    tokens = TokenService(settings.secret_key, access_ttl_seconds=settings.access_token_ttl_seconds)
    auth_service = AuthService(repos.users, repos.sessions, tokens, audit_service, session_days=settings.session_days)
    user_service = UserService(repos.users, repos.sessions, audit_service)
    permission_service = PermissionService(
        repos.permissions,
        repos.groups,
        repos.group_permissions,
        repos.user_groups,
        repos.direct_permissions,
        repos.permission_audit_logs,
    )
    rbac_service = RbacService(
        repos.permissions,
        repos.groups,
        repos.group_permissions,
        repos.user_groups,
        repos.direct_permissions,
        repos.users,
        permission_service,
        audit_service,
    )

    finance_entry_service = FinanceEntryService(
        repos.finance_entries,
        repos.finance_categories,
        repos.cost_centers,
        repos.bank_accounts,
        audit_service,
        notification_service,
    )

    return Container(
        settings=settings,
        database=database,
        repos=repos,
        guards=AuthGuards(auth_service, permission_service),
        rate_limiter=rate_limiter if rate_limiter is not None else build_rate_limiter(settings),
        tenant_service=TenantService(repos.tenants),
        auth_service=auth_service,
        user_service=user_service,
        permission_service=permission_service,
        rbac_service=rbac_service,
        audit_service=audit_service,
        notification_service=notification_service,
        file_upload_service=FileUploadService(storage if storage is not None else build_storage(settings)),
        employee_service=EmployeeService(repos.employees, audit_service),
        absence_service=AbsenceService(repos.absences, repos.vacation_periods, repos.employees, audit_service),
        payroll_service=PayrollService(
            repos.payrolls,
            repos.payroll_items,
            repos.employees,
            repos.absences,
            repos.overtime,
            repos.bonuses,
            repos.deductions,
            audit_service,
        ),
        finance_setup_service=FinanceSetupService(repos.finance_categories, repos.cost_centers, repos.bank_accounts),
        finance_entry_service=finance_entry_service,
        payroll_finance_service=PayrollFinanceService(
            finance_entry_service,
            repos.finance_entries,
            repos.finance_categories,
            repos.payrolls,
            repos.payroll_items,
            repos.employees,
            audit_service,
        ),
        loan_service=LoanService(
            repos.loans, repos.loan_installments, repos.bank_accounts, repos.cost_centers, audit_service
        ),
        accounting_export_service=AccountingExportService(
            repos.finance_entries, repos.finance_categories, repos.cost_centers, audit_service
        ),
        location_service=LocationService(repos.warehouses, repos.zones, repos.bins, repos.items, audit_service),
        item_service=ItemService(repos.variants, repos.items, repos.bins, repos.movements, audit_service),
        volume_service=VolumeService(repos.volumes, repos.items, audit_service),
        customer_service=CustomerService(repos.customers, audit_service),
        sales_order_service=SalesOrderService(repos.sales_orders, repos.customers, repos.variants, audit_service),
        promotion_service=PromotionService(repos.promotions, repos.variants, audit_service),
        request_service=RequestService(
            repos.requests, repos.request_comments, repos.request_history, audit_service, notification_service
        ),
    )


def build_in_memory_container(settings: Optional[Settings] = None, **overrides) -> Container:
    settings = settings or load_settings("erp_system.config.testing")
    return build_container(settings, memory_repositories(), **overrides)


def build_sql_container(settings: Settings, **overrides) -> Container:
    database = Database.get_instance(settings.database_url)
    return build_container(settings, sql_repositories(database), database=database, **overrides)
