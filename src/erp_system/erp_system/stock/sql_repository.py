from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, select

from ..common.pagination import PageParams
from ..database.session import session_scope
from ..database.sql_repository import SqlRepository
from ..database.tables import BinRow, ItemMovementRow, ItemRow, VariantRow, VolumeRow, WarehouseRow, ZoneRow
from .model import Bin, Item, ItemMovement, MovementType, Variant, Volume, VolumeStatus, Warehouse, Zone
from .repository import BinFilter, ItemFilter


class SqlWarehouseRepository(SqlRepository[Warehouse]):
    entity_cls = Warehouse
    table_cls = WarehouseRow

    def save(self, warehouse: Warehouse) -> Warehouse:
        return self._save(warehouse)

    def get_by_id(self, *, tenant_id: str, warehouse_id: str) -> Optional[Warehouse]:
        return self._get(warehouse_id, tenant_id=tenant_id)

    def get_by_code(self, *, tenant_id: str, code: str) -> Optional[Warehouse]:
        return self._first(WarehouseRow.code == code, tenant_id=tenant_id)

    def list_all(self, *, tenant_id: str) -> List[Warehouse]:
        return self._find(tenant_id=tenant_id, order_by=[WarehouseRow.code])


class SqlZoneRepository(SqlRepository[Zone]):
    entity_cls = Zone
    table_cls = ZoneRow

    def save(self, zone: Zone) -> Zone:
        return self._save(zone)

    def get_by_id(self, *, tenant_id: str, zone_id: str) -> Optional[Zone]:
        return self._get(zone_id, tenant_id=tenant_id)

    def get_by_code(self, *, tenant_id: str, warehouse_id: str, code: str) -> Optional[Zone]:
        return self._first(ZoneRow.warehouse_id == warehouse_id, ZoneRow.code == code, tenant_id=tenant_id)

    def list_by_warehouse(self, *, tenant_id: str, warehouse_id: str) -> List[Zone]:
        return self._find(ZoneRow.warehouse_id == warehouse_id, tenant_id=tenant_id, order_by=[ZoneRow.code])


class SqlBinRepository(SqlRepository[Bin]):
    entity_cls = Bin
    table_cls = BinRow

    def save(self, bin: Bin) -> Bin:
        return self._save(bin)

    def save_many(self, bins: Iterable[Bin]) -> int:
        count = 0
        with session_scope(self._db) as session:
            for bin in bins:
                self._save_in(session, bin)
                count += 1
        return count

    def get_by_id(self, *, tenant_id: str, bin_id: str) -> Optional[Bin]:
        return self._get(bin_id, tenant_id=tenant_id)

    def list_by_zone(self, *, tenant_id: str, zone_id: str) -> List[Bin]:
        return self._find(BinRow.zone_id == zone_id, tenant_id=tenant_id, order_by=[BinRow.address])

    def list_page(self, *, tenant_id: str, filters: BinFilter, params: PageParams) -> Tuple[List[Bin], int]:
        criteria = []
        if filters.zone_id:
            criteria.append(BinRow.zone_id == filters.zone_id)
        if filters.is_blocked is not None:
            criteria.append(BinRow.is_blocked.is_(filters.is_blocked))
        if filters.only_available:
            criteria.append(BinRow.is_active.is_(True))
            criteria.append(BinRow.is_blocked.is_(False))
            criteria.append(or_(BinRow.capacity.is_(None), BinRow.current_occupancy < BinRow.capacity))
        if filters.search:
            criteria.append(BinRow.address.ilike(f"%{filters.search}%"))
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[BinRow.address])


class SqlVariantRepository(SqlRepository[Variant]):
    entity_cls = Variant
    table_cls = VariantRow

    def save(self, variant: Variant) -> Variant:
        return self._save(variant)

    def get_by_id(self, *, tenant_id: str, variant_id: str) -> Optional[Variant]:
        return self._get(variant_id, tenant_id=tenant_id)

    def get_by_sku(self, *, tenant_id: str, sku: str) -> Optional[Variant]:
        return self._first(VariantRow.sku == sku, tenant_id=tenant_id)

    def list_page(
        self, *, tenant_id: str, params: PageParams, search: Optional[str] = None
    ) -> Tuple[List[Variant], int]:
        criteria = []
        if search:
            pattern = f"%{search}%"
            criteria.append(
                or_(
                    VariantRow.name.ilike(pattern),
                    VariantRow.sku.ilike(pattern),
                    VariantRow.product_name.ilike(pattern),
                )
            )
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[VariantRow.sku])


class SqlItemRepository(SqlRepository[Item]):
    entity_cls = Item
    table_cls = ItemRow

    def save(self, item: Item) -> Item:
        return self._save(item)

    def get_by_id(self, *, tenant_id: str, item_id: str) -> Optional[Item]:
        return self._get(item_id, tenant_id=tenant_id)

    def get_by_unique_code(self, *, tenant_id: str, unique_code: str) -> Optional[Item]:
        return self._first(ItemRow.unique_code == unique_code, tenant_id=tenant_id, include_deleted=True)

    def list_by_ids(self, *, tenant_id: str, item_ids: Iterable[str]) -> List[Item]:
        ids = list(item_ids)
        if not ids:
            return []
        return self._find(ItemRow.id.in_(ids), tenant_id=tenant_id)

    def list_page(self, *, tenant_id: str, filters: ItemFilter, params: PageParams) -> Tuple[List[Item], int]:
        criteria = []
        if filters.bin_id:
            criteria.append(ItemRow.bin_id == filters.bin_id)
        if filters.variant_id:
            criteria.append(ItemRow.variant_id == filters.variant_id)
        if filters.status is not None:
            criteria.append(ItemRow.status == filters.status)
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[ItemRow.entry_date.desc()])

    def count_items_per_bin(self, *, tenant_id: str, bin_ids: Iterable[str]) -> Dict[str, int]:
        ids = list(bin_ids)
        if not ids:
            return {}
        with session_scope(self._db) as session:
            stmt = (
                select(ItemRow.bin_id, func.count())
                .where(
                    ItemRow.tenant_id == tenant_id,
                    ItemRow.bin_id.in_(ids),
                    ItemRow.quantity > 0,
                    ItemRow.deleted_at.is_(None),
                )
                .group_by(ItemRow.bin_id)
            )
            return {bin_id: int(count) for bin_id, count in session.execute(stmt).all()}


class SqlItemMovementRepository(SqlRepository[ItemMovement]):
    entity_cls = ItemMovement
    table_cls = ItemMovementRow

    def save(self, movement: ItemMovement) -> ItemMovement:
        return self._save(movement)

    def list_by_item(
        self, *, tenant_id: str, item_id: str, movement_type: Optional[MovementType] = None
    ) -> List[ItemMovement]:
        criteria = [ItemMovementRow.item_id == item_id]
        if movement_type is not None:
            criteria.append(ItemMovementRow.movement_type == movement_type)
        return self._find(*criteria, tenant_id=tenant_id, order_by=[ItemMovementRow.created_at.desc()])


class SqlVolumeRepository(SqlRepository[Volume]):
    entity_cls = Volume
    table_cls = VolumeRow

    def save(self, volume: Volume) -> Volume:
        return self._save(volume)

    def get_by_id(self, *, tenant_id: str, volume_id: str) -> Optional[Volume]:
        return self._get(volume_id, tenant_id=tenant_id)

    def get_by_code(self, *, tenant_id: str, code: str) -> Optional[Volume]:
        return self._first(VolumeRow.code == code, tenant_id=tenant_id)

    def list_page(
        self, *, tenant_id: str, params: PageParams, status: Optional[VolumeStatus] = None
    ) -> Tuple[List[Volume], int]:
        criteria = [VolumeRow.status == status] if status is not None else []
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[VolumeRow.created_at.desc()])
