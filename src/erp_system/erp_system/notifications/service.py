from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from ..common.datetime_utils import utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import parse_enum, require_max_length, require_non_empty
from ..core.exceptions import BadRequestError, ResourceNotFoundError
from ..infrastructure.mailer import EmailSender
from ..logging_config import get_logger
from ..users.repository import UserRepository
from .model import (
    Notification,
    NotificationChannel,
    NotificationPreference,
    NotificationPriority,
    NotificationType,
)
from .repository import NotificationPreferenceRepository, NotificationRepository

logger = get_logger(__name__)


class NotificationService:
    """Use case: in-app and e-mail notifications for users of a tenant."""

    def __init__(
        self,
        notifications: NotificationRepository,
        preferences: NotificationPreferenceRepository,
        email_sender: Optional[EmailSender] = None,
        users: Optional[UserRepository] = None,
    ):
        self._notifications = notifications
        self._preferences = preferences
        self._email_sender = email_sender
        self._users = users

    def _get(self, tenant_id: str, notification_id: str, user_id: Optional[str] = None) -> Notification:
        notification = self._notifications.get_by_id(tenant_id=tenant_id, notification_id=notification_id)
        if not notification or (user_id is not None and notification.user_id != user_id):
            raise ResourceNotFoundError("Notification not found")
        return notification

    def create_notification(
        self,
        *,
        tenant_id: str,
        user_id: str,
        title: str,
        message: str,
        type=NotificationType.INFO,
        priority=NotificationPriority.NORMAL,
        channel=NotificationChannel.IN_APP,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        action_url: Optional[str] = None,
        scheduled_for: Optional[datetime] = None,
    ) -> Notification:
        require_non_empty(user_id, "User")
        title = require_non_empty(title, "Title")
        require_max_length(title, "Title", 256)
        message = require_non_empty(message, "Message")
        require_max_length(message, "Message", 5000)

        now = utc_now()
        notification = Notification(
            id=new_id(),
            tenant_id=tenant_id,
            user_id=user_id,
            title=title,
            message=message,
            type=parse_enum(NotificationType, type, "Type"),
            priority=parse_enum(NotificationPriority, priority, "Priority"),
            channel=parse_enum(NotificationChannel, channel, "Channel"),
            entity_type=entity_type,
            entity_id=entity_id,
            action_url=action_url,
            scheduled_for=scheduled_for,
            created_at=now,
        )
        # immediate in-app notifications are delivered by being stored
        if notification.channel == NotificationChannel.IN_APP and scheduled_for is None:
            notification.mark_as_sent(now)
        return self._notifications.save(notification)

    def list_my_notifications(
        self, *, tenant_id: str, user_id: str, params: PageParams, only_unread: bool = False
    ) -> Page[Notification]:
        items, total = self._notifications.list_page(
            tenant_id=tenant_id, user_id=user_id, only_unread=only_unread, params=params
        )
        return Page(items=items, total=total, params=params)

    def mark_as_read(self, *, tenant_id: str, user_id: str, notification_id: str) -> Notification:
        notification = self._get(tenant_id, notification_id, user_id)
        notification.mark_as_read(utc_now())
        return self._notifications.save(notification)

    def mark_all_as_read(self, *, tenant_id: str, user_id: str) -> int:
        now = utc_now()
        unread = self._notifications.list_unread(tenant_id=tenant_id, user_id=user_id)
        for notification in unread:
            notification.mark_as_read(now)
            self._notifications.save(notification)
        return len(unread)

    def delete_notification(self, *, tenant_id: str, user_id: str, notification_id: str) -> None:
        notification = self._get(tenant_id, notification_id, user_id)
        notification.deleted_at = utc_now()
        self._notifications.save(notification)

    def count_unread(self, *, tenant_id: str, user_id: str) -> int:
        return len(self._notifications.list_unread(tenant_id=tenant_id, user_id=user_id))

    def _email_enabled(self, notification: Notification) -> bool:
        if not notification.entity_type:
            return True
        preference = self._preferences.find(
            tenant_id=notification.tenant_id,
            user_id=notification.user_id,
            alert_type=notification.entity_type,
            channel=NotificationChannel.EMAIL,
        )
        return preference is None or preference.is_enabled

    def _deliver_email(self, notification: Notification, to: str) -> None:
        if self._email_sender is None:
            raise BadRequestError("Email delivery is not configured")
        self._email_sender.send(to=to, subject=notification.title, body=notification.message)
        notification.mark_as_sent(utc_now())
        self._notifications.save(notification)

    def send_email_notification(self, *, tenant_id: str, notification_id: str, user_email: str) -> Notification:
        notification = self._get(tenant_id, notification_id)
        if notification.channel != NotificationChannel.EMAIL:
            raise BadRequestError("Notification is not an email notification")
        if notification.is_sent:
            raise BadRequestError("Notification was already sent")
        if not self._email_enabled(notification):
            raise BadRequestError("User disabled email notifications for this alert type")
        self._deliver_email(notification, user_email)
        return notification

    def _resolve_email(self, notification: Notification) -> Optional[str]:
        if self._users is None:
            return None
        user = self._users.get_by_id(tenant_id=notification.tenant_id, user_id=notification.user_id)
        return user.email if user else None

    def process_scheduled_notifications(self, *, now: Optional[datetime] = None, limit: int = 100) -> dict:
        now = now or utc_now()
        due = self._notifications.list_due(now=now, limit=limit)
        sent = failed = 0
        for notification in due:
            if notification.channel == NotificationChannel.IN_APP:
                notification.mark_as_sent(now)
                self._notifications.save(notification)
                sent += 1
                continue

            email = self._resolve_email(notification) if notification.channel == NotificationChannel.EMAIL else None
            if not email or not self._email_enabled(notification):
                failed += 1
                continue
            try:
                self._deliver_email(notification, email)
                sent += 1
            except Exception:
                logger.exception("Failed to deliver scheduled notification %s", notification.id)
                failed += 1

        if due:
            logger.info("Processed %d scheduled notifications (%d sent, %d failed)", len(due), sent, failed)
        return {"processed": len(due), "sent": sent, "failed": failed}

    def set_preference(
        self, *, tenant_id: str, user_id: str, alert_type: str, channel, is_enabled: bool
    ) -> NotificationPreference:
        alert_type = require_non_empty(alert_type, "Alert type")
        channel = parse_enum(NotificationChannel, channel, "Channel")
        preference = self._preferences.find(
            tenant_id=tenant_id, user_id=user_id, alert_type=alert_type, channel=channel
        )
        if preference is None:
            preference = NotificationPreference(
                id=new_id(), tenant_id=tenant_id, user_id=user_id, alert_type=alert_type, channel=channel
            )
        else:
            preference.updated_at = utc_now()
        preference.is_enabled = bool(is_enabled)
        return self._preferences.save(preference)

    def list_preferences(self, *, tenant_id: str, user_id: str) -> List[NotificationPreference]:
        return self._preferences.list_by_user(tenant_id=tenant_id, user_id=user_id)
