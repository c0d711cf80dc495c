from __future__ import annotations

import pytest

from erp_system.core.exceptions import ValidationError
from erp_system.stock.model import Bin
from erp_system.stock.zone_diff import compute_zone_diff
from erp_system.stock.zone_structure import BinData, CodePattern, ZoneStructure


def test_uniform_layout_generates_addresses():
    structure = ZoneStructure(aisles=2, shelves_per_aisle=2, bins_per_shelf=3)
    data = list(structure.generate_bin_data("WH1", "A"))
    assert structure.total_bins == 12
    assert structure.total_shelves == 4
    assert data[0] == BinData(address="WH1-A-01-01-A", aisle=1, shelf=1, position="A")
    assert data[-1].address == "WH1-A-02-02-C"


def test_aisle_configs_override_and_grow_summary():
    structure = ZoneStructure.from_dict(
        {
            "aisles": 1,
            "shelvesPerAisle": 1,
            "binsPerShelf": 1,
            "aisleConfigs": [
                {"aisleNumber": 3, "shelvesCount": 1, "binsPerShelf": 2},
                {"aisleNumber": 1, "shelvesCount": 2, "binsPerShelf": 1},
            ],
        }
    )
    assert structure.aisles == 3
    assert structure.shelves_per_aisle == 2
    assert structure.bins_per_shelf == 2
    assert [c.aisle_number for c in structure.aisle_configs] == [1, 3]
    assert structure.total_bins == 4


def test_numbered_positions_and_custom_separator():
    pattern = CodePattern.from_dict({"separator": ".", "aisleDigits": 3, "binLabeling": "numbers"})
    structure = ZoneStructure(aisles=1, shelves_per_aisle=1, bins_per_shelf=12, code_pattern=pattern)
    addresses = [d.address for d in structure.generate_bin_data("W", "Z")]
    assert addresses[0] == "W.Z.001.01.01"
    assert addresses[-1] == "W.Z.001.01.12"


@pytest.mark.parametrize(
    "data",
    [
        {"aisles": 100},
        {"binsPerShelf": 27},
        {"aisleConfigs": [{"aisleNumber": 1}, {"aisleNumber": 1}]},
        {"codePattern": {"binLabeling": "emoji"}},
        {"codePattern": {"separator": "--"}},
    ],
)
def test_invalid_structures(data):
    with pytest.raises(ValidationError):
        ZoneStructure.from_dict(data)


def test_round_trip_keeps_configs():
    structure = ZoneStructure(aisles=1, shelves_per_aisle=1, bins_per_shelf=1)
    assert ZoneStructure.from_dict(structure.to_dict()) == structure


def make_bin(aisle, shelf, position, id=None):
    return Bin(
        id=id or f"{aisle}{shelf}{position}",
        tenant_id="t1",
        zone_id="z1",
        address=f"W-Z-{aisle:02d}-{shelf:02d}-{position}",
        aisle=aisle,
        shelf=shelf,
        position=position,
    )


def test_diff_preserves_creates_deletes_and_blocks():
    existing = [make_bin(1, 1, "A"), make_bin(1, 1, "B"), make_bin(1, 2, "A")]
    new_layout = ZoneStructure(aisles=1, shelves_per_aisle=1, bins_per_shelf=3)
    # rename the warehouse so preserved bins get a new address
    new_data = list(new_layout.generate_bin_data("W2", "Z"))

    diff = compute_zone_diff(existing, new_data, {"12A": 4})
    summary = diff.summary()
    assert summary == {
        "binsToPreserve": 2,
        "binsToCreate": 1,
        "binsToDeleteEmpty": 0,
        "binsWithItems": 1,
        "addressUpdates": 2,
        "totalAffectedItems": 4,
        "totalNewBins": 3,
    }
    assert diff.to_create[0].position == "C"
    assert diff.to_block[0].bin.id == "12A"

    empty = compute_zone_diff(existing, new_data, {})
    assert [b.id for b in empty.to_delete] == ["12A"]
