from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..common.datetime_utils import utc_now


class TenantStatus(str, Enum):
    """Lifecycle of a customer organization."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


@dataclass
class Tenant:
    id: str
    name: str
    slug: str
    status: TenantStatus = TenantStatus.ACTIVE
    settings: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE and self.deleted_at is None


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower())
    return slug.strip("-")
