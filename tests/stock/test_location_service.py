from __future__ import annotations

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from erp_system.stock.zone_diff import REMOVED_BIN_REASON


def test_warehouse_codes_are_normalized(container, tenant):
    locations = container.location_service
    warehouse = locations.create_warehouse(tenant_id=tenant.id, code="cd01", name="Distribution")
    assert warehouse.code == "CD01"
    with pytest.raises(ConflictError):
        locations.create_warehouse(tenant_id=tenant.id, code="CD01", name="Again")
    with pytest.raises(ValidationError):
        locations.create_warehouse(tenant_id=tenant.id, code="CD-02", name="Dash")
    with pytest.raises(ValidationError):
        locations.create_warehouse(tenant_id=tenant.id, code="TOOLONGCODE", name="Long")


def test_initial_configuration_generates_bins(zone, bins):
    assert sorted(b.address for b in bins.values()) == ["WH1-A-01-01-A", "WH1-A-01-01-B", "WH1-A-01-01-C"]
    assert zone.structure["binsPerShelf"] == 3


def test_shrinking_zone_blocks_occupied_bins(container, tenant, zone, bins, variant):
    container.item_service.register_item_entry(
        tenant_id=tenant.id, variant_id=variant.id, bin_id=bins["C"].id, quantity=5
    )
    smaller = {"aisles": 1, "shelvesPerAisle": 1, "binsPerShelf": 1}
    locations = container.location_service

    preview = locations.preview_zone_structure(tenant_id=tenant.id, zone_id=zone.id, structure=smaller)
    assert preview == {
        "binsToPreserve": 1,
        "binsToCreate": 0,
        "binsToDeleteEmpty": 1,
        "binsWithItems": 1,
        "addressUpdates": 0,
        "totalAffectedItems": 1,
        "totalNewBins": 1,
    }

    result = locations.configure_zone_structure(tenant_id=tenant.id, zone_id=zone.id, structure=smaller)
    assert result.summary() == {
        "binsCreated": 0,
        "binsPreserved": 1,
        "binsUpdated": 0,
        "binsDeleted": 1,
        "binsBlocked": 1,
    }
    remaining = locations.list_bins(tenant_id=tenant.id, params=PageParams(), zone_id=zone.id).items
    assert [b.position for b in remaining] == ["A", "C"]
    blocked = locations.get_bin(tenant_id=tenant.id, bin_id=bins["C"].id)
    assert blocked.is_blocked
    assert blocked.block_reason == REMOVED_BIN_REASON
    with pytest.raises(ResourceNotFoundError):
        locations.get_bin(tenant_id=tenant.id, bin_id=bins["B"].id)


def test_growing_zone_preserves_existing_bins(container, tenant, zone, bins):
    result = container.location_service.configure_zone_structure(
        tenant_id=tenant.id, zone_id=zone.id, structure={"aisles": 2, "shelvesPerAisle": 1, "binsPerShelf": 3}
    )
    assert (result.bins_created, result.bins_preserved, result.bins_deleted) == (3, 3, 0)
    assert container.location_service.get_bin(tenant_id=tenant.id, bin_id=bins["A"].id).address == "WH1-A-01-01-A"


@pytest.mark.parametrize(
    "structure",
    [
        {},
        {"aisles": 2, "shelvesPerAisle": 0, "binsPerShelf": 3},
        {"aisles": 99, "shelvesPerAisle": 99, "binsPerShelf": 26},
    ],
)
def test_unusable_structures_are_rejected(container, tenant, zone, structure):
    with pytest.raises(ValidationError):
        container.location_service.preview_zone_structure(tenant_id=tenant.id, zone_id=zone.id, structure=structure)


def test_block_unblock_and_capacity(container, tenant, bins, variant):
    locations = container.location_service
    bin_id = bins["A"].id
    with pytest.raises(ValidationError):
        locations.block_bin(tenant_id=tenant.id, bin_id=bin_id, reason="  ")

    locations.block_bin(tenant_id=tenant.id, bin_id=bin_id, reason="Broken shelf")
    blocked = locations.list_bins(tenant_id=tenant.id, params=PageParams(), is_blocked=True).items
    assert [b.id for b in blocked] == [bin_id]
    available = locations.list_bins(tenant_id=tenant.id, params=PageParams(), only_available=True)
    assert available.total == 2

    locations.unblock_bin(tenant_id=tenant.id, bin_id=bin_id)
    container.item_service.register_item_entry(tenant_id=tenant.id, variant_id=variant.id, bin_id=bin_id, quantity=4)
    with pytest.raises(ValidationError):
        locations.update_bin_capacity(tenant_id=tenant.id, bin_id=bin_id, capacity=3)

    full = locations.update_bin_capacity(tenant_id=tenant.id, bin_id=bin_id, capacity=4)
    assert full.is_full
    assert full.occupancy_percentage == 100
    with pytest.raises(ValidationError):
        container.item_service.register_item_entry(
            tenant_id=tenant.id, variant_id=variant.id, bin_id=bin_id, quantity=1
        )


def test_search_bins_by_address(container, tenant, bins):
    page = container.location_service.list_bins(tenant_id=tenant.id, params=PageParams(), search="01-01-b")
    assert [b.id for b in page.items] == [bins["B"].id]
