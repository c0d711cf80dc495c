from __future__ import annotations

import pytest

from erp_system.common.pagination import PageParams


@pytest.fixture
def zone(container, tenant):
    locations = container.location_service
    warehouse = locations.create_warehouse(tenant_id=tenant.id, code="wh1", name="Main warehouse")
    zone = locations.create_zone(tenant_id=tenant.id, warehouse_id=warehouse.id, code="A", name="Picking")
    locations.configure_zone_structure(
        tenant_id=tenant.id,
        zone_id=zone.id,
        structure={"aisles": 1, "shelvesPerAisle": 1, "binsPerShelf": 3},
    )
    return zone


@pytest.fixture
def bins(container, tenant, zone):
    page = container.location_service.list_bins(tenant_id=tenant.id, params=PageParams(limit=100), zone_id=zone.id)
    return {b.position: b for b in page.items}


@pytest.fixture
def variant(container, tenant):
    return container.item_service.create_variant(
        tenant_id=tenant.id, product_name="T-shirt", sku="TS-BLUE-M", name="Blue M", price=49.9
    )
