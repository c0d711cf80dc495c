from __future__ import annotations

from typing import List, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import AuditLog, AuditLogFilter


class InMemoryAuditLogRepository(InMemoryRepository[AuditLog]):
    def save(self, log: AuditLog) -> AuditLog:
        return self._save(log)

    def _matching(self, tenant_id: str, filters: AuditLogFilter) -> List[AuditLog]:
        return self._find(filters.matches, tenant_id=tenant_id, sort_key=lambda l: l.created_at, reverse=True)

    def list_page(self, *, tenant_id: str, filters: AuditLogFilter, params: PageParams) -> Tuple[List[AuditLog], int]:
        return self._page(self._matching(tenant_id, filters), params)

    def list_all(self, *, tenant_id: str, filters: AuditLogFilter, limit: int = 10000) -> List[AuditLog]:
        return self._matching(tenant_id, filters)[:limit]
