from __future__ import annotations

from typing import List, Optional, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import Tenant


class InMemoryTenantRepository(InMemoryRepository[Tenant]):
    def save(self, tenant: Tenant) -> Tenant:
        return self._save(tenant)

    def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        return self._get(tenant_id)

    def get_by_slug(self, slug: str) -> Optional[Tenant]:
        return self._first(lambda t: t.slug == slug)

    def list_page(self, *, params: PageParams) -> Tuple[List[Tenant], int]:
        return self._page(self._find(sort_key=lambda t: t.name.lower()), params)
