from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import Notification, NotificationChannel, NotificationPreference


class InMemoryNotificationRepository(InMemoryRepository[Notification]):
    def save(self, notification: Notification) -> Notification:
        return self._save(notification)

    def get_by_id(self, *, tenant_id: str, notification_id: str) -> Optional[Notification]:
        return self._get(notification_id, tenant_id=tenant_id)

    def list_page(
        self, *, tenant_id: str, user_id: str, only_unread: bool, params: PageParams
    ) -> Tuple[List[Notification], int]:
        found = self._find(
            lambda n: n.user_id == user_id and (not only_unread or not n.is_read),
            tenant_id=tenant_id,
            sort_key=lambda n: n.created_at,
            reverse=True,
        )
        return self._page(found, params)

    def list_unread(self, *, tenant_id: str, user_id: str) -> List[Notification]:
        return self._find(lambda n: n.user_id == user_id and not n.is_read, tenant_id=tenant_id)

    def list_due(self, *, now: datetime, limit: int = 100) -> List[Notification]:
        return self._find(
            lambda n: not n.is_sent and n.scheduled_for is not None and n.scheduled_for <= now,
            sort_key=lambda n: n.scheduled_for,
        )[:limit]


class InMemoryNotificationPreferenceRepository(InMemoryRepository[NotificationPreference]):
    def save(self, preference: NotificationPreference) -> NotificationPreference:
        return self._save(preference)

    def find(
        self, *, tenant_id: str, user_id: str, alert_type: str, channel: NotificationChannel
    ) -> Optional[NotificationPreference]:
        return self._first(
            lambda p: p.user_id == user_id and p.alert_type == alert_type and p.channel == channel,
            tenant_id=tenant_id,
        )

    def list_by_user(self, *, tenant_id: str, user_id: str) -> List[NotificationPreference]:
        return self._find(lambda p: p.user_id == user_id, tenant_id=tenant_id)
