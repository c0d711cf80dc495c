from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import Bin, Item, ItemMovement, MovementType, Variant, Volume, VolumeStatus, Warehouse, Zone
from .repository import BinFilter, ItemFilter


class InMemoryWarehouseRepository(InMemoryRepository[Warehouse]):
    def save(self, warehouse: Warehouse) -> Warehouse:
        return self._save(warehouse)

    def get_by_id(self, *, tenant_id: str, warehouse_id: str) -> Optional[Warehouse]:
        return self._get(warehouse_id, tenant_id=tenant_id)

    def get_by_code(self, *, tenant_id: str, code: str) -> Optional[Warehouse]:
        return self._first(lambda w: w.code == code, tenant_id=tenant_id)

    def list_all(self, *, tenant_id: str) -> List[Warehouse]:
        return self._find(tenant_id=tenant_id, sort_key=lambda w: w.code)


class InMemoryZoneRepository(InMemoryRepository[Zone]):
    def save(self, zone: Zone) -> Zone:
        return self._save(zone)

    def get_by_id(self, *, tenant_id: str, zone_id: str) -> Optional[Zone]:
        return self._get(zone_id, tenant_id=tenant_id)

    def get_by_code(self, *, tenant_id: str, warehouse_id: str, code: str) -> Optional[Zone]:
        return self._first(lambda z: z.warehouse_id == warehouse_id and z.code == code, tenant_id=tenant_id)

    def list_by_warehouse(self, *, tenant_id: str, warehouse_id: str) -> List[Zone]:
        return self._find(lambda z: z.warehouse_id == warehouse_id, tenant_id=tenant_id, sort_key=lambda z: z.code)


class InMemoryBinRepository(InMemoryRepository[Bin]):
    def save(self, bin: Bin) -> Bin:
        return self._save(bin)

    def save_many(self, bins: Iterable[Bin]) -> int:
        count = 0
        for bin in bins:
            self._save(bin)
            count += 1
        return count

    def get_by_id(self, *, tenant_id: str, bin_id: str) -> Optional[Bin]:
        return self._get(bin_id, tenant_id=tenant_id)

    def list_by_zone(self, *, tenant_id: str, zone_id: str) -> List[Bin]:
        return self._find(lambda b: b.zone_id == zone_id, tenant_id=tenant_id, sort_key=lambda b: b.address)

    def list_page(self, *, tenant_id: str, filters: BinFilter, params: PageParams) -> Tuple[List[Bin], int]:
        return self._page(self._find(filters.matches, tenant_id=tenant_id, sort_key=lambda b: b.address), params)


class InMemoryVariantRepository(InMemoryRepository[Variant]):
    def save(self, variant: Variant) -> Variant:
        return self._save(variant)

    def get_by_id(self, *, tenant_id: str, variant_id: str) -> Optional[Variant]:
        return self._get(variant_id, tenant_id=tenant_id)

    def get_by_sku(self, *, tenant_id: str, sku: str) -> Optional[Variant]:
        return self._first(lambda v: v.sku == sku, tenant_id=tenant_id)

    def list_page(
        self, *, tenant_id: str, params: PageParams, search: Optional[str] = None
    ) -> Tuple[List[Variant], int]:
        needle = (search or "").lower()

        def matches(v: Variant) -> bool:
            return not needle or needle in v.name.lower() or needle in v.sku.lower() or needle in v.product_name.lower()

        return self._page(self._find(matches, tenant_id=tenant_id, sort_key=lambda v: v.sku), params)


class InMemoryItemRepository(InMemoryRepository[Item]):
    def save(self, item: Item) -> Item:
        return self._save(item)

    def get_by_id(self, *, tenant_id: str, item_id: str) -> Optional[Item]:
        return self._get(item_id, tenant_id=tenant_id)

    def get_by_unique_code(self, *, tenant_id: str, unique_code: str) -> Optional[Item]:
        return self._first(lambda i: i.unique_code == unique_code, tenant_id=tenant_id, include_deleted=True)

    def list_by_ids(self, *, tenant_id: str, item_ids: Iterable[str]) -> List[Item]:
        wanted = set(item_ids)
        return self._find(lambda i: i.id in wanted, tenant_id=tenant_id)

    def list_page(self, *, tenant_id: str, filters: ItemFilter, params: PageParams) -> Tuple[List[Item], int]:
        items = self._find(filters.matches, tenant_id=tenant_id, sort_key=lambda i: i.entry_date, reverse=True)
        return self._page(items, params)

    def count_items_per_bin(self, *, tenant_id: str, bin_ids: Iterable[str]) -> Dict[str, int]:
        wanted = set(bin_ids)
        counts: Dict[str, int] = {}
        for item in self._find(lambda i: i.bin_id in wanted and i.quantity > 0, tenant_id=tenant_id):
            counts[item.bin_id] = counts.get(item.bin_id, 0) + 1
        return counts


class InMemoryItemMovementRepository(InMemoryRepository[ItemMovement]):
    def save(self, movement: ItemMovement) -> ItemMovement:
        return self._save(movement)

    def list_by_item(
        self, *, tenant_id: str, item_id: str, movement_type: Optional[MovementType] = None
    ) -> List[ItemMovement]:
        return self._find(
            lambda m: m.item_id == item_id and (movement_type is None or m.movement_type == movement_type),
            tenant_id=tenant_id,
            sort_key=lambda m: m.created_at,
            reverse=True,
        )


class InMemoryVolumeRepository(InMemoryRepository[Volume]):
    def save(self, volume: Volume) -> Volume:
        return self._save(volume)

    def get_by_id(self, *, tenant_id: str, volume_id: str) -> Optional[Volume]:
        return self._get(volume_id, tenant_id=tenant_id)

    def get_by_code(self, *, tenant_id: str, code: str) -> Optional[Volume]:
        return self._first(lambda v: v.code == code, tenant_id=tenant_id)

    def list_page(
        self, *, tenant_id: str, params: PageParams, status: Optional[VolumeStatus] = None
    ) -> Tuple[List[Volume], int]:
        volumes = self._find(
            lambda v: status is None or v.status == status,
            tenant_id=tenant_id,
            sort_key=lambda v: v.created_at,
            reverse=True,
        )
        return self._page(volumes, params)
