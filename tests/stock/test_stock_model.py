from __future__ import annotations

import pytest

from erp_system.core.exceptions import ValidationError
from erp_system.sales.model import DiscountType
from erp_system.stock.model import Bin, MovementType
from erp_system.stock.zone_structure import ZoneStructure


def make_bin(**kwargs):
    defaults = dict(id="b1", tenant_id="t1", zone_id="z1", address="WH1-A-01-01-A", aisle=1, shelf=1, position="A")
    defaults.update(kwargs)
    return Bin(**defaults)


def test_movement_type_predicates():
    assert MovementType.parse(" sale ") is MovementType.SALE
    assert MovementType.PURCHASE.is_entry
    assert MovementType.CUSTOMER_RETURN.is_entry
    assert MovementType.LOSS.is_exit
    assert not MovementType.TRANSFER.is_exit
    assert MovementType.TRANSFER.is_transfer
    assert MovementType.ZONE_RECONFIGURE.is_adjustment
    assert MovementType.INVENTORY_ADJUSTMENT.is_adjustment
    with pytest.raises(ValidationError):
        MovementType.parse("GIFT")


def test_discount_type_predicates():
    assert DiscountType.parse("fixed_value").is_fixed_value
    assert DiscountType.PERCENTAGE.is_percentage
    assert not DiscountType.PERCENTAGE.is_fixed_value
    with pytest.raises(ValidationError):
        DiscountType.parse("BOGO")


def test_bin_occupancy_bookkeeping():
    bin = make_bin(capacity=10)
    bin.add_occupancy(7)
    assert bin.occupancy_percentage == 70
    assert bin.available_space == 3
    with pytest.raises(ValidationError):
        bin.add_occupancy(4)

    bin.add_occupancy(3)
    assert bin.is_full
    assert not bin.is_available
    with pytest.raises(ValidationError):
        bin.set_capacity(9)

    bin.remove_occupancy(10)
    assert bin.is_empty
    with pytest.raises(ValidationError):
        bin.remove_occupancy(1)


def test_unlimited_bin():
    bin = make_bin()
    bin.add_occupancy(1000)
    assert bin.occupancy_percentage == 0
    assert bin.available_space is None
    assert bin.is_available


def test_bin_blocking_needs_a_reason():
    bin = make_bin()
    with pytest.raises(ValidationError):
        bin.block("  ")
    bin.block(" Inventory count ")
    assert (bin.is_blocked, bin.block_reason) == (True, "Inventory count")
    bin.unblock()
    assert bin.block_reason is None
    assert bin.is_available


def test_empty_structure_is_not_configured():
    assert not ZoneStructure().is_configured
    assert ZoneStructure(aisles=1, shelves_per_aisle=1, bins_per_shelf=1).is_configured
    assert ZoneStructure(aisles=2, shelves_per_aisle=3, bins_per_shelf=0).total_shelves == 6
