from __future__ import annotations

from typing import List, Optional, Tuple

from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import RequestCommentRow, RequestHistoryRow, RequestRow
from .model import Request, RequestComment, RequestHistory
from .repository import RequestFilter


class SqlRequestRepository(SqlRepository[Request]):
    entity_cls = Request
    table_cls = RequestRow

    def save(self, request: Request) -> Request:
        return self._save(request)

    def get_by_id(self, *, tenant_id: str, request_id: str) -> Optional[Request]:
        return self._get(request_id, tenant_id=tenant_id)

    def list_page(self, *, tenant_id: str, filters: RequestFilter, params: PageParams) -> Tuple[List[Request], int]:
        criteria = []
        if filters.requester_id:
            criteria.append(RequestRow.requester_id == filters.requester_id)
        if filters.assigned_to_id:
            criteria.append(RequestRow.assigned_to_id == filters.assigned_to_id)
        if filters.status is not None:
            criteria.append(RequestRow.status == filters.status)
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[RequestRow.created_at.desc()])


class SqlRequestCommentRepository(SqlRepository[RequestComment]):
    entity_cls = RequestComment
    table_cls = RequestCommentRow

    def save(self, comment: RequestComment) -> RequestComment:
        return self._save(comment)

    def list_by_request(
        self, *, tenant_id: str, request_id: str, include_internal: bool = True
    ) -> List[RequestComment]:
        criteria = [RequestCommentRow.request_id == request_id]
        if not include_internal:
            criteria.append(RequestCommentRow.is_internal.is_(False))
        return self._find(*criteria, tenant_id=tenant_id, order_by=[RequestCommentRow.created_at])


class SqlRequestHistoryRepository(SqlRepository[RequestHistory]):
    entity_cls = RequestHistory
    table_cls = RequestHistoryRow

    def save(self, entry: RequestHistory) -> RequestHistory:
        return self._save(entry)

    def list_by_request(self, *, tenant_id: str, request_id: str) -> List[RequestHistory]:
        return self._find(
            RequestHistoryRow.request_id == request_id,
            tenant_id=tenant_id,
            order_by=[RequestHistoryRow.created_at],
        )
