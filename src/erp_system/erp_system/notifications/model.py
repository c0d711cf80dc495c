from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..common.datetime_utils import utc_now


class NotificationType(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"
    REMINDER = "REMINDER"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class NotificationChannel(str, Enum):
    IN_APP = "IN_APP"
    EMAIL = "EMAIL"
    SMS = "SMS"


@dataclass
class Notification:
    id: str
    tenant_id: str
    user_id: str
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    priority: NotificationPriority = NotificationPriority.NORMAL
    channel: NotificationChannel = NotificationChannel.IN_APP
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    action_url: Optional[str] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    is_sent: bool = False
    sent_at: Optional[datetime] = None
    scheduled_for: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)
    deleted_at: Optional[datetime] = None

    def mark_as_read(self, now: datetime) -> None:
        if not self.is_read:
            self.is_read = True
            self.read_at = now

    def mark_as_sent(self, now: datetime) -> None:
        self.is_sent = True
        self.sent_at = now


@dataclass
class NotificationPreference:
    id: str
    tenant_id: str
    user_id: str
    alert_type: str
    channel: NotificationChannel
    is_enabled: bool = True
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
