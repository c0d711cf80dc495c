from __future__ import annotations

from typing import List, Optional, Tuple

from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import TenantRow
from .model import Tenant


class SqlTenantRepository(SqlRepository[Tenant]):
    entity_cls = Tenant
    table_cls = TenantRow

    def save(self, tenant: Tenant) -> Tenant:
        return self._save(tenant)

    def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        return self._get(tenant_id)

    def get_by_slug(self, slug: str) -> Optional[Tenant]:
        return self._first(TenantRow.slug == slug)

    def list_page(self, *, params: PageParams) -> Tuple[List[Tenant], int]:
        return self._page([], params, order_by=[TenantRow.name])
