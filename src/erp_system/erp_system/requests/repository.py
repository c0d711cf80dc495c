from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageParams
from .model import Request, RequestComment, RequestHistory, RequestStatus


@dataclass(frozen=True)
class RequestFilter:
    requester_id: Optional[str] = None
    assigned_to_id: Optional[str] = None
    status: Optional[RequestStatus] = None

    def matches(self, request: Request) -> bool:
        if self.requester_id and request.requester_id != self.requester_id:
            return False
        if self.assigned_to_id and request.assigned_to_id != self.assigned_to_id:
            return False
        if self.status is not None and request.status != self.status:
            return False
        return True


class RequestRepository(Protocol):
    def save(self, request: Request) -> Request:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, request_id: str) -> Optional[Request]:
        raise NotImplementedError

    def list_page(self, *, tenant_id: str, filters: RequestFilter, params: PageParams) -> Tuple[List[Request], int]:
        raise NotImplementedError


class RequestCommentRepository(Protocol):
    def save(self, comment: RequestComment) -> RequestComment:
        raise NotImplementedError

    def list_by_request(
        self, *, tenant_id: str, request_id: str, include_internal: bool = True
    ) -> List[RequestComment]:
        raise NotImplementedError


class RequestHistoryRepository(Protocol):
    def save(self, entry: RequestHistory) -> RequestHistory:
        raise NotImplementedError

    def list_by_request(self, *, tenant_id: str, request_id: str) -> List[RequestHistory]:
        raise NotImplementedError
