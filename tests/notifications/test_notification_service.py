from __future__ import annotations

from datetime import timedelta

import pytest

from erp_system.common.datetime_utils import utc_now
from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import BadRequestError, ResourceNotFoundError, ValidationError
from erp_system.notifications.memory_repository import (
    InMemoryNotificationPreferenceRepository,
    InMemoryNotificationRepository,
)
from erp_system.notifications.model import NotificationChannel
from erp_system.notifications.service import NotificationService
from erp_system.users.memory_repository import InMemoryUserRepository
from erp_system.users.model import User

TENANT = "t1"


class FakeSender:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, *, to, subject, body):
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append((to, subject, body))


def make_service(sender=None):
    users = InMemoryUserRepository()
    users.save(User(id="u1", tenant_id=TENANT, username="ana", email="ana@acme.com", password_hash="x"))
    service = NotificationService(
        InMemoryNotificationRepository(), InMemoryNotificationPreferenceRepository(), sender, users
    )
    return service


def test_in_app_notification_is_sent_immediately():
    service = make_service()
    notification = service.create_notification(tenant_id=TENANT, user_id="u1", title="Hi", message="Welcome")
    assert notification.is_sent
    assert service.count_unread(tenant_id=TENANT, user_id="u1") == 1

    with pytest.raises(ValidationError):
        service.create_notification(tenant_id=TENANT, user_id="u1", title=" ", message="x")


def test_read_flags_and_ownership():
    service = make_service()
    first = service.create_notification(tenant_id=TENANT, user_id="u1", title="A", message="a")
    service.create_notification(tenant_id=TENANT, user_id="u1", title="B", message="b")

    read = service.mark_as_read(tenant_id=TENANT, user_id="u1", notification_id=first.id)
    assert read.is_read and read.read_at is not None
    with pytest.raises(ResourceNotFoundError):
        service.mark_as_read(tenant_id=TENANT, user_id="someone-else", notification_id=first.id)

    assert service.mark_all_as_read(tenant_id=TENANT, user_id="u1") == 1
    assert service.count_unread(tenant_id=TENANT, user_id="u1") == 0

    service.delete_notification(tenant_id=TENANT, user_id="u1", notification_id=first.id)
    page = service.list_my_notifications(tenant_id=TENANT, user_id="u1", params=PageParams())
    assert page.total == 1


def test_send_email_notification_respects_preferences():
    sender = FakeSender()
    service = make_service(sender)
    notification = service.create_notification(
        tenant_id=TENANT, user_id="u1", title="Stock low", message="Reorder", channel="EMAIL", entity_type="STOCK"
    )
    assert not notification.is_sent

    service.set_preference(tenant_id=TENANT, user_id="u1", alert_type="STOCK", channel="EMAIL", is_enabled=False)
    with pytest.raises(BadRequestError):
        service.send_email_notification(tenant_id=TENANT, notification_id=notification.id, user_email="ana@acme.com")

    service.set_preference(tenant_id=TENANT, user_id="u1", alert_type="STOCK", channel="EMAIL", is_enabled=True)
    sent = service.send_email_notification(
        tenant_id=TENANT, notification_id=notification.id, user_email="ana@acme.com"
    )
    assert sent.is_sent
    assert sender.sent == [("ana@acme.com", "Stock low", "Reorder")]
    assert len(service.list_preferences(tenant_id=TENANT, user_id="u1")) == 1

    with pytest.raises(BadRequestError):
        service.send_email_notification(tenant_id=TENANT, notification_id=notification.id, user_email="ana@acme.com")


def test_email_without_sender_is_rejected():
    service = make_service()
    notification = service.create_notification(tenant_id=TENANT, user_id="u1", title="A", message="a", channel="EMAIL")
    with pytest.raises(BadRequestError):
        service.send_email_notification(tenant_id=TENANT, notification_id=notification.id, user_email="a@b.com")


def test_process_scheduled_notifications():
    sender = FakeSender()
    service = make_service(sender)
    past = utc_now() - timedelta(minutes=5)
    service.create_notification(tenant_id=TENANT, user_id="u1", title="In app", message="x", scheduled_for=past)
    service.create_notification(
        tenant_id=TENANT, user_id="u1", title="Mail", message="y", channel=NotificationChannel.EMAIL, scheduled_for=past
    )
    service.create_notification(
        tenant_id=TENANT, user_id="ghost", title="Mail", message="z", channel="EMAIL", scheduled_for=past
    )
    service.create_notification(
        tenant_id=TENANT, user_id="u1", title="Later", message="w", scheduled_for=utc_now() + timedelta(days=1)
    )

    assert service.process_scheduled_notifications() == {"processed": 3, "sent": 2, "failed": 1}
    assert [to for to, _, _ in sender.sent] == ["ana@acme.com"]
    assert service.process_scheduled_notifications()["processed"] == 1


def test_scheduled_email_failure_is_counted():
    service = make_service(FakeSender(fail=True))
    service.create_notification(
        tenant_id=TENANT,
        user_id="u1",
        title="Mail",
        message="y",
        channel="EMAIL",
        scheduled_for=utc_now() - timedelta(minutes=1),
    )
    assert service.process_scheduled_notifications()["failed"] == 1
