from __future__ import annotations

from typing import Any, List, Optional

from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.serialization import to_jsonable
from ..core.constants import REDACTED
from ..logging_config import get_logger
from .model import AuditAction, AuditEntity, AuditLog, AuditLogFilter, module_for
from .repository import AuditLogRepository
from .signature import AuditSignatureService, ChainVerification

logger = get_logger(__name__)

SENSITIVE_KEYS = {
    "password",
    "passwordhash",
    "token",
    "accesstoken",
    "refreshtoken",
    "resettoken",
    "apikey",
    "secret",
    "privatekey",
    "creditcard",
    "cvv",
    "ssn",
    "pin",
    "accesspinhash",
}


def _normalize_key(key: str) -> str:
    return str(key).replace("_", "").replace("-", "").lower()


def sanitize(data: Any) -> Any:
    """Replace sensitive values at any depth with a redaction marker."""
    if isinstance(data, dict):
        return {
            key: (REDACTED if _normalize_key(key) in SENSITIVE_KEYS else sanitize(value))
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [sanitize(v) for v in data]
    return to_jsonable(data)


class AuditService:
    """Use case: record and inspect signed audit logs."""

    def __init__(self, logs: AuditLogRepository, signer: AuditSignatureService):
        self._logs = logs
        self._signer = signer

    def log(
        self,
        *,
        tenant_id: str,
        action: AuditAction,
        entity: AuditEntity,
        entity_id: str,
        user_id: Optional[str] = None,
        old_data: Optional[dict] = None,
        new_data: Optional[dict] = None,
        metadata: Optional[dict] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[AuditLog]:
        try:
            entry = AuditLog(
                id=new_id(),
                tenant_id=tenant_id,
                action=action,
                entity=entity,
                entity_id=str(entity_id),
                module=module_for(entity),
                user_id=user_id,
                old_data=sanitize(old_data) if old_data is not None else None,
                new_data=sanitize(new_data) if new_data is not None else None,
                metadata=sanitize(metadata) if metadata is not None else None,
                ip=ip,
                user_agent=user_agent,
            )
            entry.signature = self._signer.sign(entry)
            return self._logs.save(entry)
        except Exception:
            # Auditing must never break the business operation that triggered it
            logger.exception("Failed to write audit log for %s %s (%s)", entity, entity_id, action)
            return None

    def list_logs(self, *, tenant_id: str, filters: Optional[AuditLogFilter] = None, params: PageParams) -> Page[AuditLog]:
        items, total = self._logs.list_page(tenant_id=tenant_id, filters=filters or AuditLogFilter(), params=params)
        return Page(items=items, total=total, params=params)

    def get_entity_history(self, *, tenant_id: str, entity: AuditEntity, entity_id: str) -> List[AuditLog]:
        return self._logs.list_all(
            tenant_id=tenant_id,
            filters=AuditLogFilter(entity=entity, entity_id=entity_id),
        )

    def verify_integrity(self, *, tenant_id: str, filters: Optional[AuditLogFilter] = None) -> ChainVerification:
        logs = self._logs.list_all(tenant_id=tenant_id, filters=filters or AuditLogFilter())
        result = self._signer.verify_chain(logs)
        if not result.valid:
            logger.warning(
                "Audit integrity check failed for tenant %s: %d of %d logs invalid",
                tenant_id,
                len(result.invalid_log_ids),
                result.total_checked,
            )
        return result
