from __future__ import annotations

from typing import List, Optional, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import Request, RequestComment, RequestHistory
from .repository import RequestFilter


class InMemoryRequestRepository(InMemoryRepository[Request]):
    def save(self, request: Request) -> Request:
        return self._save(request)

    def get_by_id(self, *, tenant_id: str, request_id: str) -> Optional[Request]:
        return self._get(request_id, tenant_id=tenant_id)

    def list_page(self, *, tenant_id: str, filters: RequestFilter, params: PageParams) -> Tuple[List[Request], int]:
        found = self._find(filters.matches, tenant_id=tenant_id, sort_key=lambda r: r.created_at, reverse=True)
        return self._page(found, params)


class InMemoryRequestCommentRepository(InMemoryRepository[RequestComment]):
    def save(self, comment: RequestComment) -> RequestComment:
        return self._save(comment)

    def list_by_request(
        self, *, tenant_id: str, request_id: str, include_internal: bool = True
    ) -> List[RequestComment]:
        return self._find(
            lambda c: c.request_id == request_id and (include_internal or not c.is_internal),
            tenant_id=tenant_id,
            sort_key=lambda c: c.created_at,
        )


class InMemoryRequestHistoryRepository(InMemoryRepository[RequestHistory]):
    def save(self, entry: RequestHistory) -> RequestHistory:
        return self._save(entry)

    def list_by_request(self, *, tenant_id: str, request_id: str) -> List[RequestHistory]:
        return self._find(lambda h: h.request_id == request_id, tenant_id=tenant_id, sort_key=lambda h: h.created_at)
