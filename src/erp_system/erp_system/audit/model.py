from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Tuple

from ..common.datetime_utils import utc_now


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    RESTORE = "RESTORE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    STATUS_CHANGE = "STATUS_CHANGE"
    PERMISSION_GRANT = "PERMISSION_GRANT"
    PERMISSION_REVOKE = "PERMISSION_REVOKE"
    EXPORT = "EXPORT"
    OTHER = "OTHER"


class AuditEntity(str, Enum):
    USER = "USER"
    SESSION = "SESSION"
    TENANT = "TENANT"
    PERMISSION = "PERMISSION"
    PERMISSION_GROUP = "PERMISSION_GROUP"
    EMPLOYEE = "EMPLOYEE"
    ABSENCE = "ABSENCE"
    VACATION_PERIOD = "VACATION_PERIOD"
    PAYROLL = "PAYROLL"
    DEDUCTION = "DEDUCTION"
    FINANCE_ENTRY = "FINANCE_ENTRY"
    LOAN = "LOAN"
    WAREHOUSE = "WAREHOUSE"
    BIN = "BIN"
    ZONE = "ZONE"
    ITEM = "ITEM"
    VARIANT = "VARIANT"
    VOLUME = "VOLUME"
    SALES_ORDER = "SALES_ORDER"
    CUSTOMER = "CUSTOMER"
    VARIANT_PROMOTION = "VARIANT_PROMOTION"
    NOTIFICATION = "NOTIFICATION"
    REQUEST = "REQUEST"
    OTHER = "OTHER"


class AuditModule(str, Enum):
    CORE = "CORE"
    RBAC = "RBAC"
    HR = "HR"
    PAYROLL = "PAYROLL"
    FINANCE = "FINANCE"
    STOCK = "STOCK"
    SALES = "SALES"
    NOTIFICATIONS = "NOTIFICATIONS"
    REQUESTS = "REQUESTS"
    OTHER = "OTHER"


ENTITY_MODULES = {
    AuditEntity.USER: AuditModule.CORE,
    AuditEntity.SESSION: AuditModule.CORE,
    AuditEntity.TENANT: AuditModule.CORE,
    AuditEntity.PERMISSION: AuditModule.RBAC,
    AuditEntity.PERMISSION_GROUP: AuditModule.RBAC,
    AuditEntity.EMPLOYEE: AuditModule.HR,
    AuditEntity.ABSENCE: AuditModule.HR,
    AuditEntity.VACATION_PERIOD: AuditModule.HR,
    AuditEntity.PAYROLL: AuditModule.PAYROLL,
    AuditEntity.DEDUCTION: AuditModule.PAYROLL,
    AuditEntity.FINANCE_ENTRY: AuditModule.FINANCE,
    AuditEntity.LOAN: AuditModule.FINANCE,
    AuditEntity.WAREHOUSE: AuditModule.STOCK,
    AuditEntity.BIN: AuditModule.STOCK,
    AuditEntity.ZONE: AuditModule.STOCK,
    AuditEntity.ITEM: AuditModule.STOCK,
    AuditEntity.VARIANT: AuditModule.STOCK,
    AuditEntity.VOLUME: AuditModule.STOCK,
    AuditEntity.SALES_ORDER: AuditModule.SALES,
    AuditEntity.CUSTOMER: AuditModule.SALES,
    AuditEntity.VARIANT_PROMOTION: AuditModule.SALES,
    AuditEntity.NOTIFICATION: AuditModule.NOTIFICATIONS,
    AuditEntity.REQUEST: AuditModule.REQUESTS,
}


def module_for(entity: AuditEntity) -> AuditModule:
    return ENTITY_MODULES.get(entity, AuditModule.OTHER)


@dataclass
class AuditLog:
    id: str
    tenant_id: str
    action: AuditAction
    entity: AuditEntity
    entity_id: str
    module: AuditModule
    user_id: Optional[str] = None
    old_data: Optional[dict] = None
    new_data: Optional[dict] = None
    metadata: Optional[dict] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    signature: Optional[str] = None
    # Second precision so the signed timestamp survives any SQL backend
    created_at: datetime = field(default_factory=lambda: utc_now().replace(microsecond=0))


@dataclass(frozen=True)
class AuditLogFilter:
    user_id: Optional[str] = None
    entity: Optional[AuditEntity] = None
    entity_id: Optional[str] = None
    module: Optional[AuditModule] = None
    action: Optional[AuditAction] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    def matches(self, log: AuditLog) -> bool:
        checks: List[Tuple[Any, Any]] = [
            (self.user_id, log.user_id),
            (self.entity, log.entity),
            (self.entity_id, log.entity_id),
            (self.module, log.module),
            (self.action, log.action),
        ]
        if any(expected is not None and expected != actual for expected, actual in checks):
            return False
        if self.date_from is not None and log.created_at < self.date_from:
            return False
        if self.date_to is not None and log.created_at > self.date_to:
            return False
        return True
