from __future__ import annotations

from datetime import timedelta

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import BadRequestError, ForbiddenError, ValidationError
from erp_system.requests.model import HistoryAction, RequestStatus

REQUESTER = "ana"
AGENT = "bruno"
OUTSIDER = "carla"


@pytest.fixture
def submitted(container, tenant):
    return container.request_service.create_request(
        tenant_id=tenant.id,
        requester_id=REQUESTER,
        title="New laptop",
        description="Mine stopped booting",
        type="purchase_request",
        priority="urgent",
    )


def unread(container, tenant, user_id):
    return container.notification_service.count_unread(tenant_id=tenant.id, user_id=user_id)


def test_create_submits_with_sla(submitted):
    assert submitted.status is RequestStatus.SUBMITTED
    assert submitted.sla_deadline - submitted.submitted_at == timedelta(hours=4)
    assert not submitted.is_overdue(submitted.submitted_at + timedelta(hours=3))
    assert submitted.is_overdue(submitted.submitted_at + timedelta(hours=5))


def test_draft_is_submitted_by_requester_only(container, tenant):
    requests = container.request_service
    draft = requests.create_request(
        tenant_id=tenant.id, requester_id=REQUESTER, title="Access", description="VPN", as_draft=True
    )
    assert draft.status is RequestStatus.DRAFT
    assert draft.sla_deadline is None
    with pytest.raises(ForbiddenError):
        requests.submit_request(tenant_id=tenant.id, request_id=draft.id, user_id=AGENT)
    submitted = requests.submit_request(tenant_id=tenant.id, request_id=draft.id, user_id=REQUESTER)
    assert submitted.status is RequestStatus.SUBMITTED


@pytest.mark.parametrize("fields", [{"title": ""}, {"description": " "}, {"priority": "asap"}, {"type": "gift"}])
def test_create_validation(container, tenant, fields):
    data = dict(tenant_id=tenant.id, requester_id=REQUESTER, title="T", description="D")
    data.update(fields)
    with pytest.raises(ValidationError):
        container.request_service.create_request(**data)


def test_info_round_trip_and_completion(container, tenant, submitted):
    requests = container.request_service
    assigned = requests.assign_request(tenant_id=tenant.id, request_id=submitted.id, assignee_id=AGENT, user_id="boss")
    assert assigned.status is RequestStatus.IN_PROGRESS
    assert unread(container, tenant, AGENT) == 1

    with pytest.raises(ForbiddenError):
        requests.request_info(tenant_id=tenant.id, request_id=submitted.id, note="?", user_id=OUTSIDER)
    requests.request_info(tenant_id=tenant.id, request_id=submitted.id, note="Which model?", user_id=AGENT)
    assert unread(container, tenant, REQUESTER) == 1

    answered = requests.provide_info(
        tenant_id=tenant.id, request_id=submitted.id, note="The 14 inch one", user_id=REQUESTER
    )
    assert answered.status is RequestStatus.SUBMITTED
    assert unread(container, tenant, AGENT) == 2

    with pytest.raises(ForbiddenError):
        requests.approve_request(tenant_id=tenant.id, request_id=submitted.id, user_id=REQUESTER)
    requests.approve_request(tenant_id=tenant.id, request_id=submitted.id, user_id=AGENT)
    done = requests.complete_request(tenant_id=tenant.id, request_id=submitted.id, user_id=AGENT)
    assert done.status is RequestStatus.COMPLETED
    assert done.completed_at is not None
    with pytest.raises(BadRequestError):
        requests.cancel_request(tenant_id=tenant.id, request_id=submitted.id, user_id=REQUESTER)

    history = requests.get_request_history(tenant_id=tenant.id, request_id=submitted.id, user_id=REQUESTER)
    assert [h.action for h in history] == [
        HistoryAction.CREATED,
        HistoryAction.ASSIGNED,
        HistoryAction.INFO_REQUESTED,
        HistoryAction.INFO_PROVIDED,
        HistoryAction.APPROVED,
        HistoryAction.COMPLETED,
    ]
    assert history[2].note == "Which model?"
    assert history[2].from_status is RequestStatus.IN_PROGRESS


def test_reject_requires_reason(container, tenant, submitted):
    requests = container.request_service
    with pytest.raises(ValidationError):
        requests.reject_request(tenant_id=tenant.id, request_id=submitted.id, reason=" ", user_id=AGENT)
    rejected = requests.reject_request(tenant_id=tenant.id, request_id=submitted.id, reason="No budget", user_id=AGENT)
    assert rejected.status is RequestStatus.REJECTED
    assert unread(container, tenant, REQUESTER) == 1


def test_cancel_permissions(container, tenant, submitted):
    requests = container.request_service
    requests.assign_request(tenant_id=tenant.id, request_id=submitted.id, assignee_id=AGENT, user_id="boss")
    with pytest.raises(ForbiddenError):
        requests.cancel_request(tenant_id=tenant.id, request_id=submitted.id, user_id=OUTSIDER)
    cancelled = requests.cancel_request(
        tenant_id=tenant.id, request_id=submitted.id, user_id=OUTSIDER, reason="Duplicate", is_manager=True
    )
    assert cancelled.status is RequestStatus.CANCELLED
    # assignment plus cancellation
    assert unread(container, tenant, AGENT) == 2


def test_comments_visibility(container, tenant, submitted):
    requests = container.request_service
    requests.assign_request(tenant_id=tenant.id, request_id=submitted.id, assignee_id=AGENT, user_id="boss")

    requests.add_request_comment(tenant_id=tenant.id, request_id=submitted.id, author_id=REQUESTER, content="Any news?")
    assert unread(container, tenant, AGENT) == 2
    with pytest.raises(ForbiddenError):
        requests.add_request_comment(
            tenant_id=tenant.id, request_id=submitted.id, author_id=REQUESTER, content="psst", is_internal=True
        )
    requests.add_request_comment(
        tenant_id=tenant.id, request_id=submitted.id, author_id=AGENT, content="Ordering today", is_internal=True
    )
    with pytest.raises(ForbiddenError):
        requests.add_request_comment(tenant_id=tenant.id, request_id=submitted.id, author_id=OUTSIDER, content="hi")

    seen_by_requester = requests.list_request_comments(tenant_id=tenant.id, request_id=submitted.id, user_id=REQUESTER)
    assert [c.content for c in seen_by_requester] == ["Any news?"]
    seen_by_agent = requests.list_request_comments(tenant_id=tenant.id, request_id=submitted.id, user_id=AGENT)
    assert len(seen_by_agent) == 2
    # internal comments do not notify the requester
    assert unread(container, tenant, REQUESTER) == 0


def test_list_scopes(container, tenant, submitted):
    requests = container.request_service
    requests.assign_request(tenant_id=tenant.id, request_id=submitted.id, assignee_id=AGENT, user_id="boss")
    requests.create_request(tenant_id=tenant.id, requester_id=OUTSIDER, title="Other", description="D")

    mine = requests.list_requests(tenant_id=tenant.id, user_id=REQUESTER, params=PageParams())
    assert [r.id for r in mine.items] == [submitted.id]
    assigned = requests.list_requests(tenant_id=tenant.id, user_id=AGENT, params=PageParams(), scope="assigned")
    assert assigned.total == 1
    with pytest.raises(ForbiddenError):
        requests.list_requests(tenant_id=tenant.id, user_id=AGENT, params=PageParams(), scope="all")
    everything = requests.list_requests(
        tenant_id=tenant.id, user_id="boss", params=PageParams(), scope="ALL", has_view_all=True, status="submitted"
    )
    assert everything.total == 1
    with pytest.raises(ValidationError):
        requests.list_requests(tenant_id=tenant.id, user_id=AGENT, params=PageParams(), scope="team")
    with pytest.raises(ForbiddenError):
        requests.get_request(tenant_id=tenant.id, request_id=submitted.id, user_id=OUTSIDER)
