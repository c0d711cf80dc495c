from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageParams
from .model import Notification, NotificationChannel, NotificationPreference


class NotificationRepository(Protocol):
    def save(self, notification: Notification) -> Notification:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, notification_id: str) -> Optional[Notification]:
        raise NotImplementedError

    def list_page(
        self, *, tenant_id: str, user_id: str, only_unread: bool, params: PageParams
    ) -> Tuple[List[Notification], int]:
        raise NotImplementedError

    def list_unread(self, *, tenant_id: str, user_id: str) -> List[Notification]:
        raise NotImplementedError

    def list_due(self, *, now: datetime, limit: int = 100) -> List[Notification]:
        """Unsent scheduled notifications across tenants, oldest first."""

        raise NotImplementedError


class NotificationPreferenceRepository(Protocol):
    def save(self, preference: NotificationPreference) -> NotificationPreference:
        raise NotImplementedError

    def find(
        self, *, tenant_id: str, user_id: str, alert_type: str, channel: NotificationChannel
    ) -> Optional[NotificationPreference]:
        raise NotImplementedError

    def list_by_user(self, *, tenant_id: str, user_id: str) -> List[NotificationPreference]:
        raise NotImplementedError
