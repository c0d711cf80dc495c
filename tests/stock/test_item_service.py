from __future__ import annotations

from datetime import date

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from erp_system.stock.model import ItemStatus, MovementType


def enter(container, tenant, variant, bin, quantity=1, **kwargs):
    return container.item_service.register_item_entry(
        tenant_id=tenant.id, variant_id=variant.id, bin_id=bin.id, quantity=quantity, **kwargs
    )


def occupancy(container, tenant, bin):
    return container.location_service.get_bin(tenant_id=tenant.id, bin_id=bin.id).current_occupancy


def test_variant_rules(container, tenant, variant):
    items = container.item_service
    assert variant.price == 49.9
    with pytest.raises(ConflictError):
        items.create_variant(tenant_id=tenant.id, product_name="T-shirt", sku="TS-BLUE-M", name="Dup")
    with pytest.raises(ValidationError):
        items.create_variant(tenant_id=tenant.id, product_name="T-shirt", sku="TS-RED", name="Red", price=-1)
    assert items.list_variants(tenant_id=tenant.id, params=PageParams(), search="blue").total == 1


def test_entry_fills_bin_and_records_movement(container, tenant, bins, variant):
    item = enter(container, tenant, variant, bins["A"], quantity=3, unique_code="SN-1", batch_number="L1")
    assert item.status is ItemStatus.AVAILABLE
    assert occupancy(container, tenant, bins["A"]) == 3

    movements = container.repos.movements.list_by_item(tenant_id=tenant.id, item_id=item.id)
    assert movements[0].movement_type is MovementType.INVENTORY_ADJUSTMENT
    assert movements[0].reason_code == "ENTRY"
    assert movements[0].destination_ref == "Bin: WH1-A-01-01-A"

    with pytest.raises(ConflictError):
        enter(container, tenant, variant, bins["B"], unique_code="SN-1")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"quantity": 0},
        {"manufacturing_date": date(2030, 1, 2), "expiry_date": date(2030, 1, 1)},
        {"expiry_date": date(2000, 1, 1)},
    ],
)
def test_entry_validation(container, tenant, bins, variant, kwargs):
    with pytest.raises(ValidationError):
        enter(container, tenant, variant, bins["A"], **kwargs)


def test_entry_into_blocked_bin_is_refused(container, tenant, bins, variant):
    container.location_service.block_bin(tenant_id=tenant.id, bin_id=bins["A"].id, reason="Inventory count")
    with pytest.raises(ValidationError):
        enter(container, tenant, variant, bins["A"])


def test_exits_update_quantity_and_status(container, tenant, bins, variant):
    items = container.item_service
    sold = enter(container, tenant, variant, bins["A"], quantity=2)
    lost = enter(container, tenant, variant, bins["A"], quantity=5)

    movement = items.register_item_exit(tenant_id=tenant.id, item_id=sold.id, quantity=2, movement_type="sale")
    assert movement.quantity_before == 2
    assert movement.quantity_after == 0
    assert items.get_item(tenant_id=tenant.id, item_id=sold.id).status is ItemStatus.SOLD

    items.register_item_exit(tenant_id=tenant.id, item_id=lost.id, quantity=1, movement_type="LOSS")
    assert items.get_item(tenant_id=tenant.id, item_id=lost.id).status is ItemStatus.AVAILABLE
    assert occupancy(container, tenant, bins["A"]) == 4

    with pytest.raises(ValidationError):
        items.register_item_exit(tenant_id=tenant.id, item_id=lost.id, quantity=1, movement_type="PURCHASE")
    with pytest.raises(ValidationError):
        items.register_item_exit(tenant_id=tenant.id, item_id=lost.id, quantity=10, movement_type="SAMPLE")

    sold_page = items.list_items(tenant_id=tenant.id, params=PageParams(), status="SOLD")
    assert [i.id for i in sold_page.items] == [sold.id]


def test_transfer_moves_occupancy(container, tenant, bins, variant):
    items = container.item_service
    item = enter(container, tenant, variant, bins["A"], quantity=3)

    with pytest.raises(ValidationError):
        items.transfer_item(tenant_id=tenant.id, item_id=item.id, destination_bin_id=bins["A"].id)
    container.location_service.block_bin(tenant_id=tenant.id, bin_id=bins["C"].id, reason="Maintenance")
    with pytest.raises(ValidationError):
        items.transfer_item(tenant_id=tenant.id, item_id=item.id, destination_bin_id=bins["C"].id)

    movement = items.transfer_item(tenant_id=tenant.id, item_id=item.id, destination_bin_id=bins["B"].id)
    assert movement.origin_ref == "Bin: WH1-A-01-01-A"
    assert movement.destination_ref == "Bin: WH1-A-01-01-B"
    assert occupancy(container, tenant, bins["A"]) == 0
    assert occupancy(container, tenant, bins["B"]) == 3

    history = items.get_item_location_history(tenant_id=tenant.id, item_id=item.id)
    assert [m.movement_type for m in history] == [MovementType.TRANSFER]


def test_batch_transfer_skips_items_already_there(container, tenant, bins, variant):
    items = container.item_service
    first = enter(container, tenant, variant, bins["A"], quantity=1)
    second = enter(container, tenant, variant, bins["A"], quantity=2)
    already = enter(container, tenant, variant, bins["B"], quantity=4)
    container.location_service.block_bin(tenant_id=tenant.id, bin_id=bins["A"].id, reason="Removed")

    result = items.batch_transfer_items(
        tenant_id=tenant.id, item_ids=[first.id, second.id, already.id, first.id], destination_bin_id=bins["B"].id
    )
    assert result["transferred"] == 2
    assert result["skipped"] == 1
    assert occupancy(container, tenant, bins["B"]) == 7
    # a blocked bin left empty is retired
    with pytest.raises(ResourceNotFoundError):
        container.location_service.get_bin(tenant_id=tenant.id, bin_id=bins["A"].id)


def test_batch_transfer_validation(container, tenant, bins):
    items = container.item_service
    with pytest.raises(ValidationError):
        items.batch_transfer_items(tenant_id=tenant.id, item_ids=[], destination_bin_id=bins["B"].id)
    with pytest.raises(ResourceNotFoundError):
        items.batch_transfer_items(tenant_id=tenant.id, item_ids=["ghost"], destination_bin_id=bins["B"].id)


def test_batch_transfer_into_full_bin_moves_nothing(container, tenant, bins, variant):
    items = container.item_service
    first = enter(container, tenant, variant, bins["A"], quantity=3)
    second = enter(container, tenant, variant, bins["B"], quantity=3)
    container.location_service.update_bin_capacity(tenant_id=tenant.id, bin_id=bins["C"].id, capacity=4)

    with pytest.raises(ValidationError):
        items.batch_transfer_items(
            tenant_id=tenant.id, item_ids=[first.id, second.id], destination_bin_id=bins["C"].id
        )

    assert items.get_item(tenant_id=tenant.id, item_id=first.id).bin_id == bins["A"].id
    assert items.get_item(tenant_id=tenant.id, item_id=second.id).bin_id == bins["B"].id
    assert occupancy(container, tenant, bins["A"]) == 3
    assert occupancy(container, tenant, bins["B"]) == 3
    assert occupancy(container, tenant, bins["C"]) == 0
    assert items.get_item_location_history(tenant_id=tenant.id, item_id=first.id) == []
