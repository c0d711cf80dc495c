from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import NotificationPreferenceRow, NotificationRow
from .model import Notification, NotificationChannel, NotificationPreference


class SqlNotificationRepository(SqlRepository[Notification]):
    entity_cls = Notification
    table_cls = NotificationRow

    def save(self, notification: Notification) -> Notification:
        return self._save(notification)

    def get_by_id(self, *, tenant_id: str, notification_id: str) -> Optional[Notification]:
        return self._get(notification_id, tenant_id=tenant_id)

    def list_page(
        self, *, tenant_id: str, user_id: str, only_unread: bool, params: PageParams
    ) -> Tuple[List[Notification], int]:
        criteria = [NotificationRow.user_id == user_id]
        if only_unread:
            criteria.append(NotificationRow.is_read.is_(False))
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[NotificationRow.created_at.desc()])

    def list_unread(self, *, tenant_id: str, user_id: str) -> List[Notification]:
        return self._find(NotificationRow.user_id == user_id, NotificationRow.is_read.is_(False), tenant_id=tenant_id)

    def list_due(self, *, now: datetime, limit: int = 100) -> List[Notification]:
        return self._find(
            NotificationRow.is_sent.is_(False),
            NotificationRow.scheduled_for.is_not(None),
            NotificationRow.scheduled_for <= now,
            order_by=[NotificationRow.scheduled_for],
            limit=limit,
        )


class SqlNotificationPreferenceRepository(SqlRepository[NotificationPreference]):
    entity_cls = NotificationPreference
    table_cls = NotificationPreferenceRow

    def save(self, preference: NotificationPreference) -> NotificationPreference:
        return self._save(preference)

    def find(
        self, *, tenant_id: str, user_id: str, alert_type: str, channel: NotificationChannel
    ) -> Optional[NotificationPreference]:
        return self._first(
            NotificationPreferenceRow.user_id == user_id,
            NotificationPreferenceRow.alert_type == alert_type,
            NotificationPreferenceRow.channel == channel,
            tenant_id=tenant_id,
        )

    def list_by_user(self, *, tenant_id: str, user_id: str) -> List[NotificationPreference]:
        return self._find(NotificationPreferenceRow.user_id == user_id, tenant_id=tenant_id)
