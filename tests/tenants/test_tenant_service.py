from __future__ import annotations

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from erp_system.tenants.memory_repository import InMemoryTenantRepository
from erp_system.tenants.model import TenantStatus, slugify
from erp_system.tenants.service import TenantService


def test_slugify():
    assert slugify("  Acme Indústria & Co ") == "acme-ind-stria-co"


def test_create_tenant_derives_unique_slug():
    service = TenantService(InMemoryTenantRepository())
    tenant = service.create_tenant(name="Acme Corp")
    assert tenant.slug == "acme-corp"
    assert tenant.is_active

    with pytest.raises(ConflictError):
        service.create_tenant(name="Other", slug="Acme Corp")
    with pytest.raises(ValidationError):
        service.create_tenant(name="!!!")


def test_change_status_and_listing():
    service = TenantService(InMemoryTenantRepository())
    tenant = service.create_tenant(name="Acme")
    service.create_tenant(name="Beta")

    suspended = service.change_status(tenant_id=tenant.id, status="suspended")
    assert suspended.status is TenantStatus.SUSPENDED
    assert not suspended.is_active
    assert service.list_tenants(params=PageParams()).total == 2

    with pytest.raises(ValidationError):
        service.change_status(tenant_id=tenant.id, status="closed")
    with pytest.raises(ResourceNotFoundError):
        service.get_tenant(tenant_id="missing")
