from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import as_naive_utc
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import parse_enum, require_max_length, require_non_empty
from ..core.exceptions import ForbiddenError, ResourceNotFoundError, ValidationError
from ..logging_config import get_logger
from ..notifications.model import NotificationPriority, NotificationType
from ..notifications.service import NotificationService
from .model import HistoryAction, Request, RequestComment, RequestHistory, RequestPriority, RequestStatus, RequestType
from .repository import RequestCommentRepository, RequestFilter, RequestHistoryRepository, RequestRepository

logger = get_logger(__name__)

LIST_SCOPES = ("mine", "assigned", "all")

_AUDIT_ACTIONS = {
    HistoryAction.CREATED: AuditAction.CREATE,
    HistoryAction.APPROVED: AuditAction.APPROVE,
    HistoryAction.REJECTED: AuditAction.REJECT,
    HistoryAction.CANCELLED: AuditAction.CANCEL,
    HistoryAction.COMMENTED: AuditAction.UPDATE,
    HistoryAction.ASSIGNED: AuditAction.UPDATE,
}


class RequestService:
    """Use case: internal request workflow (submit, assign, decide, close)."""

    def __init__(
        self,
        requests: RequestRepository,
        comments: RequestCommentRepository,
        history: RequestHistoryRepository,
        audit: Optional[AuditService] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self._requests = requests
        self._comments = comments
        self._history = history
        self._audit = audit
        self._notifications = notifications

    def _get(self, tenant_id: str, request_id: str) -> Request:
        request = self._requests.get_by_id(tenant_id=tenant_id, request_id=request_id)
        if not request:
            raise ResourceNotFoundError("Request not found")
        return request

    def _record(
        self,
        request: Request,
        action: HistoryAction,
        user_id: str,
        from_status: Optional[RequestStatus],
        note: Optional[str] = None,
    ) -> None:
        self._history.save(
            RequestHistory(
                id=new_id(),
                tenant_id=request.tenant_id,
                request_id=request.id,
                action=action,
                performed_by=user_id,
                from_status=from_status,
                to_status=request.status,
                note=note,
            )
        )
        if self._audit:
            self._audit.log(
                tenant_id=request.tenant_id,
                user_id=user_id,
                action=_AUDIT_ACTIONS.get(action, AuditAction.STATUS_CHANGE),
                entity=AuditEntity.REQUEST,
                entity_id=request.id,
                old_data={"status": from_status.value} if from_status else None,
                new_data={"status": request.status.value},
                metadata={"action": action.value, "note": note} if note else {"action": action.value},
            )

    def _transition(self, request: Request, action: HistoryAction, user_id: str, note: Optional[str], apply) -> Request:
        old = request.status
        apply()
        self._requests.save(request)
        self._record(request, action, user_id, old, note)
        return request

    def _notify(self, request: Request, user_id: Optional[str], title: str, message: str, **kwargs) -> None:
        if self._notifications is None or not user_id:
            return
        self._notifications.create_notification(
            tenant_id=request.tenant_id,
            user_id=user_id,
            title=title,
            message=message,
            entity_type="REQUEST",
            entity_id=request.id,
            action_url=f"/requests/{request.id}",
            **kwargs,
        )

    def create_request(
        self,
        *,
        tenant_id: str,
        requester_id: str,
        title: str,
        description: str,
        type: str = "CUSTOM",
        priority: str = "MEDIUM",
        category: Optional[str] = None,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        due_date: Optional[datetime] = None,
        as_draft: bool = False,
    ) -> Request:
        title = require_non_empty(title, "Title")
        require_max_length(title, "Title", 200)
        description = require_non_empty(description, "Description")
        request = Request(
            id=new_id(),
            tenant_id=tenant_id,
            title=title,
            description=description,
            type=parse_enum(RequestType, type, "Type"),
            priority=parse_enum(RequestPriority, priority, "Priority"),
            requester_id=requester_id,
            category=category,
            target_type=target_type,
            target_id=target_id,
            due_date=as_naive_utc(due_date) if due_date else None,
        )
        if not as_draft:
            request.submit()
        self._requests.save(request)
        self._record(request, HistoryAction.CREATED, requester_id, None)
        logger.info("Request %s created by %s (%s)", request.id, requester_id, request.status.value)
        return request

    def submit_request(self, *, tenant_id: str, request_id: str, user_id: str) -> Request:
        request = self._get(tenant_id, request_id)
        if request.requester_id != user_id:
            raise ForbiddenError("Only the requester can submit this request")
        return self._transition(request, HistoryAction.SUBMITTED, user_id, None, request.submit)

    def assign_request(
        self, *, tenant_id: str, request_id: str, assignee_id: str, user_id: str, note: Optional[str] = None
    ) -> Request:
        request = self._get(tenant_id, request_id)
        require_non_empty(assignee_id, "Assignee")
        self._transition(request, HistoryAction.ASSIGNED, user_id, note, lambda: request.assign(assignee_id))
        self._notify(
            request,
            assignee_id,
            title="Request assigned to you",
            message=f"You were assigned to the request: {request.title}",
            priority=(
                NotificationPriority.HIGH if request.priority == RequestPriority.URGENT else NotificationPriority.NORMAL
            ),
        )
        return request

    def request_info(self, *, tenant_id: str, request_id: str, note: str, user_id: str) -> Request:
        request = self._get(tenant_id, request_id)
        if request.assigned_to_id != user_id:
            raise ForbiddenError("Only the assignee can request more information")
        note = require_non_empty(note, "Note")
        self._transition(request, HistoryAction.INFO_REQUESTED, user_id, note, request.request_info)
        self._notify(
            request,
            request.requester_id,
            title="Information requested",
            message=f"More information is needed for your request: {request.title}",
            type=NotificationType.WARNING,
        )
        return request

    def provide_info(self, *, tenant_id: str, request_id: str, note: str, user_id: str) -> Request:
        request = self._get(tenant_id, request_id)
        if request.requester_id != user_id:
            raise ForbiddenError("Only the requester can provide information")
        note = require_non_empty(note, "Note")
        self._transition(request, HistoryAction.INFO_PROVIDED, user_id, note, request.provide_info)
        self._notify(
            request,
            request.assigned_to_id,
            title="Information provided",
            message=f"The requester answered on: {request.title}",
        )
        return request

    def approve_request(
        self, *, tenant_id: str, request_id: str, user_id: str, note: Optional[str] = None
    ) -> Request:
        request = self._get(tenant_id, request_id)
        if request.requester_id == user_id:
            raise ForbiddenError("You cannot approve your own request")
        self._transition(request, HistoryAction.APPROVED, user_id, note, request.approve)
        self._notify(
            request,
            request.requester_id,
            title="Request approved",
            message=f"Your request was approved: {request.title}",
            type=NotificationType.SUCCESS,
        )
        return request

    def reject_request(self, *, tenant_id: str, request_id: str, reason: str, user_id: str) -> Request:
        request = self._get(tenant_id, request_id)
        if request.requester_id == user_id:
            raise ForbiddenError("You cannot reject your own request")
        reason = require_non_empty(reason, "Rejection reason")
        self._transition(request, HistoryAction.REJECTED, user_id, reason, request.reject)
        self._notify(
            request,
            request.requester_id,
            title="Request rejected",
            message=f"Your request was rejected: {request.title}. Reason: {reason}",
            type=NotificationType.ERROR,
        )
        return request

    def complete_request(
        self, *, tenant_id: str, request_id: str, user_id: str, note: Optional[str] = None
    ) -> Request:
        request = self._get(tenant_id, request_id)
        self._transition(request, HistoryAction.COMPLETED, user_id, note, request.complete)
        self._notify(
            request,
            request.requester_id,
            title="Request completed",
            message=f"Your request was completed: {request.title}",
            type=NotificationType.SUCCESS,
        )
        return request

    def cancel_request(
        self, *, tenant_id: str, request_id: str, user_id: str, reason: Optional[str] = None, is_manager: bool = False
    ) -> Request:
        request = self._get(tenant_id, request_id)
        if request.requester_id != user_id and not is_manager:
            raise ForbiddenError("Only the requester or a manager can cancel this request")
        self._transition(request, HistoryAction.CANCELLED, user_id, reason, request.cancel)
        if request.assigned_to_id and request.assigned_to_id != user_id:
            self._notify(
                request,
                request.assigned_to_id,
                title="Request cancelled",
                message=f"The request was cancelled: {request.title}",
            )
        return request

    def add_request_comment(
        self,
        *,
        tenant_id: str,
        request_id: str,
        author_id: str,
        content: str,
        is_internal: bool = False,
        has_view_all: bool = False,
        is_manager: bool = False,
    ) -> RequestComment:
        request = self._get(tenant_id, request_id)
        content = require_non_empty(content, "Content")
        require_max_length(content, "Content", 5000)
        if not request.can_be_viewed_by(author_id, has_view_all):
            raise ForbiddenError("You cannot comment on this request")
        if is_internal and request.assigned_to_id != author_id and not is_manager:
            raise ForbiddenError("Only the assignee or a manager can add internal comments")
        comment = RequestComment(
            id=new_id(),
            tenant_id=tenant_id,
            request_id=request.id,
            author_id=author_id,
            content=content,
            is_internal=is_internal,
        )
        self._comments.save(comment)
        self._record(request, HistoryAction.COMMENTED, author_id, request.status)
        recipient = request.assigned_to_id if author_id == request.requester_id else request.requester_id
        if not is_internal and recipient != author_id:
            self._notify(request, recipient, title="New comment", message=f"New comment on: {request.title}")
        return comment

    def list_request_comments(
        self, *, tenant_id: str, request_id: str, user_id: str, has_view_all: bool = False, is_manager: bool = False
    ) -> List[RequestComment]:
        request = self.get_request(
            tenant_id=tenant_id, request_id=request_id, user_id=user_id, has_view_all=has_view_all
        )
        include_internal = is_manager or request.assigned_to_id == user_id
        return self._comments.list_by_request(
            tenant_id=tenant_id, request_id=request_id, include_internal=include_internal
        )

    def get_request(
        self, *, tenant_id: str, request_id: str, user_id: str, has_view_all: bool = False
    ) -> Request:
        request = self._get(tenant_id, request_id)
        if not request.can_be_viewed_by(user_id, has_view_all):
            raise ForbiddenError("You cannot view this request")
        return request

    def list_requests(
        self,
        *,
        tenant_id: str,
        user_id: str,
        params: PageParams,
        scope: str = "mine",
        status: Optional[str] = None,
        has_view_all: bool = False,
    ) -> Page[Request]:
        scope = (scope or "mine").lower()
        if scope not in LIST_SCOPES:
            raise ValidationError(f"Scope must be one of {', '.join(LIST_SCOPES)}")
        if scope == "all" and not has_view_all:
            raise ForbiddenError("Missing permission to view all requests")
        filters = RequestFilter(
            requester_id=user_id if scope == "mine" else None,
            assigned_to_id=user_id if scope == "assigned" else None,
            status=parse_enum(RequestStatus, status, "Status") if status else None,
        )
        items, total = self._requests.list_page(tenant_id=tenant_id, filters=filters, params=params)
        return Page(items=items, total=total, params=params)

    def get_request_history(
        self, *, tenant_id: str, request_id: str, user_id: str, has_view_all: bool = False
    ) -> List[RequestHistory]:
        self.get_request(tenant_id=tenant_id, request_id=request_id, user_id=user_id, has_view_all=has_view_all)
        return self._history.list_by_request(tenant_id=tenant_id, request_id=request_id)

