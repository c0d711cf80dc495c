from __future__ import annotations

from typing import List, Tuple

from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import AuditLogRow
from .model import AuditLog, AuditLogFilter


class SqlAuditLogRepository(SqlRepository[AuditLog]):
    entity_cls = AuditLog
    table_cls = AuditLogRow
    renamed = {"metadata": "metadata_"}

    def save(self, log: AuditLog) -> AuditLog:
        return self._save(log)

    @staticmethod
    def _criteria(filters: AuditLogFilter) -> list:
        t = AuditLogRow
        out = []
        if filters.user_id is not None:
            out.append(t.user_id == filters.user_id)
        if filters.entity is not None:
            out.append(t.entity == filters.entity)
        if filters.entity_id is not None:
            out.append(t.entity_id == filters.entity_id)
        if filters.module is not None:
            out.append(t.module == filters.module)
        if filters.action is not None:
            out.append(t.action == filters.action)
        if filters.date_from is not None:
            out.append(t.created_at >= filters.date_from)
        if filters.date_to is not None:
            out.append(t.created_at <= filters.date_to)
        return out

    def list_page(self, *, tenant_id: str, filters: AuditLogFilter, params: PageParams) -> Tuple[List[AuditLog], int]:
        return self._page(
            self._criteria(filters), params, tenant_id=tenant_id, order_by=[AuditLogRow.created_at.desc()]
        )

    def list_all(self, *, tenant_id: str, filters: AuditLogFilter, limit: int = 10000) -> List[AuditLog]:
        return self._find(
            *self._criteria(filters),
            tenant_id=tenant_id,
            order_by=[AuditLogRow.created_at.desc()],
            limit=limit,
        )
