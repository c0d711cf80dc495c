from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Tuple

from .model import Bin
from .zone_structure import BinData

REMOVED_BIN_REASON = "Removed from zone structure"


@dataclass(frozen=True)
class PreservedBin:
    bin: Bin
    new_address: str

    @property
    def address_changed(self) -> bool:
        return self.bin.address != self.new_address


@dataclass(frozen=True)
class OccupiedBin:
    bin: Bin
    item_count: int


@dataclass
class ZoneDiff:
    to_preserve: List[PreservedBin] = field(default_factory=list)
    to_create: List[BinData] = field(default_factory=list)
    to_delete: List[Bin] = field(default_factory=list)
    to_block: List[OccupiedBin] = field(default_factory=list)

    @property
    def total_affected_items(self) -> int:
        return sum(b.item_count for b in self.to_block)

    def summary(self) -> dict:
        return {
            "binsToPreserve": len(self.to_preserve),
            "binsToCreate": len(self.to_create),
            "binsToDeleteEmpty": len(self.to_delete),
            "binsWithItems": len(self.to_block),
            "addressUpdates": sum(1 for p in self.to_preserve if p.address_changed),
            "totalAffectedItems": self.total_affected_items,
            "totalNewBins": len(self.to_preserve) + len(self.to_create),
        }


def _slot(aisle: int, shelf: int, position: str) -> Tuple[int, int, str]:
    return aisle, shelf, position


def compute_zone_diff(
    existing_bins: Iterable[Bin],
    new_bin_data: Iterable[BinData],
    bin_item_counts: Mapping[str, int],
) -> ZoneDiff:
    """Match current bins against a new layout by (aisle, shelf, position)."""
    existing: Dict[Tuple[int, int, str], Bin] = {_slot(b.aisle, b.shelf, b.position): b for b in existing_bins}
    diff = ZoneDiff()
    seen = set()

    for data in new_bin_data:
        key = _slot(data.aisle, data.shelf, data.position)
        seen.add(key)
        current = existing.get(key)
        if current is None:
            diff.to_create.append(data)
        else:
            diff.to_preserve.append(PreservedBin(bin=current, new_address=data.address))

    for key, current in existing.items():
        if key in seen:
            continue
        count = bin_item_counts.get(current.id, 0)
        if count > 0:
            diff.to_block.append(OccupiedBin(bin=current, item_count=count))
        else:
            diff.to_delete.append(current)
    return diff
