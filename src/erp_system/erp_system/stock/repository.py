from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from ..common.pagination import PageParams
from .model import Bin, Item, ItemMovement, ItemStatus, MovementType, Variant, Volume, VolumeStatus, Warehouse, Zone


@dataclass(frozen=True)
class BinFilter:
    zone_id: Optional[str] = None
    is_blocked: Optional[bool] = None
    only_available: bool = False
    search: Optional[str] = None

    def matches(self, bin: Bin) -> bool:
        if self.zone_id and bin.zone_id != self.zone_id:
            return False
        if self.is_blocked is not None and bin.is_blocked != self.is_blocked:
            return False
        if self.only_available and not bin.is_available:
            return False
        if self.search and self.search.lower() not in bin.address.lower():
            return False
        return True


@dataclass(frozen=True)
class ItemFilter:
    bin_id: Optional[str] = None
    variant_id: Optional[str] = None
    status: Optional[ItemStatus] = None

    def matches(self, item: Item) -> bool:
        if self.bin_id and item.bin_id != self.bin_id:
            return False
        if self.variant_id and item.variant_id != self.variant_id:
            return False
        if self.status is not None and item.status != self.status:
            return False
        return True


class WarehouseRepository(Protocol):
    def save(self, warehouse: Warehouse) -> Warehouse:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, warehouse_id: str) -> Optional[Warehouse]:
        raise NotImplementedError

    def get_by_code(self, *, tenant_id: str, code: str) -> Optional[Warehouse]:
        raise NotImplementedError

    def list_all(self, *, tenant_id: str) -> List[Warehouse]:
        raise NotImplementedError


class ZoneRepository(Protocol):
    def save(self, zone: Zone) -> Zone:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, zone_id: str) -> Optional[Zone]:
        raise NotImplementedError

    def get_by_code(self, *, tenant_id: str, warehouse_id: str, code: str) -> Optional[Zone]:
        raise NotImplementedError

    def list_by_warehouse(self, *, tenant_id: str, warehouse_id: str) -> List[Zone]:
        raise NotImplementedError


class BinRepository(Protocol):
    def save(self, bin: Bin) -> Bin:
        raise NotImplementedError

    def save_many(self, bins: Iterable[Bin]) -> int:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, bin_id: str) -> Optional[Bin]:
        raise NotImplementedError

    def list_by_zone(self, *, tenant_id: str, zone_id: str) -> List[Bin]:
        raise NotImplementedError

    def list_page(self, *, tenant_id: str, filters: BinFilter, params: PageParams) -> Tuple[List[Bin], int]:
        raise NotImplementedError


class VariantRepository(Protocol):
    def save(self, variant: Variant) -> Variant:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, variant_id: str) -> Optional[Variant]:
        raise NotImplementedError

    def get_by_sku(self, *, tenant_id: str, sku: str) -> Optional[Variant]:
        raise NotImplementedError

    def list_page(
        self, *, tenant_id: str, params: PageParams, search: Optional[str] = None
    ) -> Tuple[List[Variant], int]:
        raise NotImplementedError


class ItemRepository(Protocol):
    def save(self, item: Item) -> Item:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, item_id: str) -> Optional[Item]:
        raise NotImplementedError

    def get_by_unique_code(self, *, tenant_id: str, unique_code: str) -> Optional[Item]:
        raise NotImplementedError

    def list_by_ids(self, *, tenant_id: str, item_ids: Iterable[str]) -> List[Item]:
        raise NotImplementedError

    def list_page(self, *, tenant_id: str, filters: ItemFilter, params: PageParams) -> Tuple[List[Item], int]:
        raise NotImplementedError

    def count_items_per_bin(self, *, tenant_id: str, bin_ids: Iterable[str]) -> Dict[str, int]:
        """Items with stock left, keyed by bin id."""

        raise NotImplementedError


class ItemMovementRepository(Protocol):
    def save(self, movement: ItemMovement) -> ItemMovement:
        raise NotImplementedError

    def list_by_item(
        self, *, tenant_id: str, item_id: str, movement_type: Optional[MovementType] = None
    ) -> List[ItemMovement]:
        """Newest first."""

        raise NotImplementedError


class VolumeRepository(Protocol):
    def save(self, volume: Volume) -> Volume:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, volume_id: str) -> Optional[Volume]:
        raise NotImplementedError

    def get_by_code(self, *, tenant_id: str, code: str) -> Optional[Volume]:
        raise NotImplementedError

    def list_page(
        self, *, tenant_id: str, params: PageParams, status: Optional[VolumeStatus] = None
    ) -> Tuple[List[Volume], int]:
        raise NotImplementedError
