from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import parse_enum, require_max_length, require_non_empty
from ..core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from .model import Tenant, TenantStatus, slugify
from .repository import TenantRepository


class TenantService:
    """Use case: manage customer organizations."""

    def __init__(self, tenants: TenantRepository):
        self._tenants = tenants

    def create_tenant(self, *, name: str, slug: Optional[str] = None, settings: Optional[dict] = None) -> Tenant:
        name = require_non_empty(name, "Name")
        require_max_length(name, "Name", 128)
        slug = slugify(slug or name)
        if not slug:
            raise ValidationError("Slug is invalid")
        if self._tenants.get_by_slug(slug):
            raise ConflictError(f"Tenant with slug '{slug}' already exists")
        return self._tenants.save(Tenant(id=new_id(), name=name, slug=slug, settings=dict(settings or {})))

    def get_tenant(self, *, tenant_id: str) -> Tenant:
        tenant = self._tenants.get_by_id(tenant_id)
        if not tenant:
            raise ResourceNotFoundError("Tenant not found")
        return tenant

    def list_tenants(self, *, params: PageParams) -> Page[Tenant]:
        items, total = self._tenants.list_page(params=params)
        return Page(items=items, total=total, params=params)

    def change_status(self, *, tenant_id: str, status: str) -> Tenant:
        tenant = self.get_tenant(tenant_id=tenant_id)
        tenant.status = parse_enum(TenantStatus, status, "Status")
        tenant.updated_at = utc_now()
        return self._tenants.save(tenant)
