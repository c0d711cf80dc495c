from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, FrozenSet, Optional

from ..common.datetime_utils import utc_now
from ..core.exceptions import BadRequestError


class RequestType(str, Enum):
    ACCESS_REQUEST = "ACCESS_REQUEST"
    PURCHASE_REQUEST = "PURCHASE_REQUEST"
    APPROVAL_REQUEST = "APPROVAL_REQUEST"
    ACTION_REQUEST = "ACTION_REQUEST"
    CHANGE_REQUEST = "CHANGE_REQUEST"
    CUSTOM = "CUSTOM"


class RequestPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def sla(self) -> timedelta:
        return SLA_BY_PRIORITY[self]


SLA_BY_PRIORITY = {
    RequestPriority.URGENT: timedelta(hours=4),
    RequestPriority.HIGH: timedelta(hours=24),
    RequestPriority.MEDIUM: timedelta(hours=72),
    RequestPriority.LOW: timedelta(hours=168),
}


class RequestStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING_INFO = "PENDING_INFO"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    def can_transition_to(self, target: "RequestStatus") -> bool:
        return target in REQUEST_TRANSITIONS.get(self, frozenset())

    @property
    def is_final(self) -> bool:
        return not REQUEST_TRANSITIONS.get(self)


REQUEST_TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    RequestStatus.DRAFT: frozenset({RequestStatus.SUBMITTED, RequestStatus.CANCELLED}),
    RequestStatus.SUBMITTED: frozenset(
        {RequestStatus.IN_PROGRESS, RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED}
    ),
    RequestStatus.IN_PROGRESS: frozenset(
        {
            RequestStatus.PENDING_INFO,
            RequestStatus.APPROVED,
            RequestStatus.REJECTED,
            RequestStatus.COMPLETED,
            RequestStatus.CANCELLED,
        }
    ),
    RequestStatus.PENDING_INFO: frozenset({RequestStatus.SUBMITTED, RequestStatus.CANCELLED}),
    RequestStatus.APPROVED: frozenset({RequestStatus.COMPLETED}),
}


@dataclass
class Request:
    id: str
    tenant_id: str
    title: str
    description: str
    type: RequestType
    requester_id: str
    category: Optional[str] = None
    status: RequestStatus = RequestStatus.DRAFT
    priority: RequestPriority = RequestPriority.MEDIUM
    assigned_to_id: Optional[str] = None
    target_type: Optional[str] = None
    target_id: Optional[str] = None
    due_date: Optional[datetime] = None
    sla_deadline: Optional[datetime] = None
    approval_id: Optional[str] = None
    submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def _move(self, target: RequestStatus, allowed, verb: str) -> None:
        if self.status not in allowed:
            raise BadRequestError(f"Cannot {verb} a request in status {self.status.value}")
        self.status = target
        self.updated_at = utc_now()

    def submit(self) -> None:
        self._move(RequestStatus.SUBMITTED, (RequestStatus.DRAFT,), "submit")
        self.submitted_at = self.updated_at
        self.sla_deadline = self.submitted_at + self.priority.sla

    def assign(self, user_id: str) -> None:
        if self.status not in (RequestStatus.SUBMITTED, RequestStatus.IN_PROGRESS):
            raise BadRequestError(f"Cannot assign a request in status {self.status.value}")
        self.assigned_to_id = user_id
        if self.status == RequestStatus.SUBMITTED:
            self.status = RequestStatus.IN_PROGRESS
        self.updated_at = utc_now()

    def request_info(self) -> None:
        self._move(RequestStatus.PENDING_INFO, (RequestStatus.IN_PROGRESS,), "request info on")

    def provide_info(self) -> None:
        self._move(RequestStatus.SUBMITTED, (RequestStatus.PENDING_INFO,), "provide info on")

    def approve(self) -> None:
        self._move(RequestStatus.APPROVED, (RequestStatus.SUBMITTED, RequestStatus.IN_PROGRESS), "approve")

    def reject(self) -> None:
        self._move(RequestStatus.REJECTED, (RequestStatus.SUBMITTED, RequestStatus.IN_PROGRESS), "reject")

    def complete(self) -> None:
        self._move(RequestStatus.COMPLETED, (RequestStatus.IN_PROGRESS, RequestStatus.APPROVED), "complete")
        self.completed_at = self.updated_at

    def cancel(self) -> None:
        self._move(
            RequestStatus.CANCELLED,
            (RequestStatus.DRAFT, RequestStatus.SUBMITTED, RequestStatus.IN_PROGRESS, RequestStatus.PENDING_INFO),
            "cancel",
        )

    def can_be_viewed_by(self, user_id: str, has_view_all: bool = False) -> bool:
        return has_view_all or user_id in (self.requester_id, self.assigned_to_id)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if self.status.is_final or self.status == RequestStatus.DRAFT:
            return False
        deadline = self.sla_deadline or self.due_date
        return deadline is not None and (now or utc_now()) > deadline


@dataclass
class RequestComment:
    id: str
    tenant_id: str
    request_id: str
    author_id: str
    content: str
    is_internal: bool = False
    created_at: datetime = field(default_factory=utc_now)
    deleted_at: Optional[datetime] = None


class HistoryAction(str, Enum):
    CREATED = "CREATED"
    SUBMITTED = "SUBMITTED"
    ASSIGNED = "ASSIGNED"
    INFO_REQUESTED = "INFO_REQUESTED"
    INFO_PROVIDED = "INFO_PROVIDED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    COMMENTED = "COMMENTED"


@dataclass
class RequestHistory:
    id: str
    tenant_id: str
    request_id: str
    action: HistoryAction
    performed_by: str
    from_status: Optional[RequestStatus] = None
    to_status: Optional[RequestStatus] = None
    note: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
