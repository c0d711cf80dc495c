from __future__ import annotations

from typing import List, Protocol, Tuple

from ..common.pagination import PageParams
from .model import AuditLog, AuditLogFilter


class AuditLogRepository(Protocol):
    def save(self, log: AuditLog) -> AuditLog:
        raise NotImplementedError

    def list_page(self, *, tenant_id: str, filters: AuditLogFilter, params: PageParams) -> Tuple[List[AuditLog], int]:
        """Newest first."""

        raise NotImplementedError

    def list_all(self, *, tenant_id: str, filters: AuditLogFilter, limit: int = 10000) -> List[AuditLog]:
        raise NotImplementedError
