from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageParams
from .model import Tenant


class TenantRepository(Protocol):
    def save(self, tenant: Tenant) -> Tenant:
        raise NotImplementedError

    def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        raise NotImplementedError

    def get_by_slug(self, slug: str) -> Optional[Tenant]:
        raise NotImplementedError

    def list_page(self, *, params: PageParams) -> Tuple[List[Tenant], int]:
        raise NotImplementedError
