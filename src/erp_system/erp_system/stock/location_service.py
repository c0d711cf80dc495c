from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import require_max_length, require_non_empty
from ..core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from ..logging_config import get_logger
from .model import Bin, Warehouse, Zone
from .repository import BinFilter, BinRepository, ItemRepository, WarehouseRepository, ZoneRepository
from .zone_diff import REMOVED_BIN_REASON, ZoneDiff, compute_zone_diff
from .zone_structure import MAX_BINS_PER_ZONE, BinData, ZoneStructure

logger = get_logger(__name__)


@dataclass(frozen=True)
class ZoneConfigurationResult:
    zone: Zone
    bins_created: int
    bins_preserved: int
    bins_updated: int
    bins_deleted: int
    bins_blocked: int

    def summary(self) -> dict:
        return {
            "binsCreated": self.bins_created,
            "binsPreserved": self.bins_preserved,
            "binsUpdated": self.bins_updated,
            "binsDeleted": self.bins_deleted,
            "binsBlocked": self.bins_blocked,
        }


class LocationService:
    """Use case: warehouses, zones and the bins generated from their structure."""

    def __init__(
        self,
        warehouses: WarehouseRepository,
        zones: ZoneRepository,
        bins: BinRepository,
        items: ItemRepository,
        audit: Optional[AuditService] = None,
    ):
        self._warehouses = warehouses
        self._zones = zones
        self._bins = bins
        self._items = items
        self._audit = audit

    # helpers
    def _warehouse(self, tenant_id: str, warehouse_id: str) -> Warehouse:
        warehouse = self._warehouses.get_by_id(tenant_id=tenant_id, warehouse_id=warehouse_id)
        if not warehouse:
            raise ResourceNotFoundError("Warehouse not found")
        return warehouse

    def _zone(self, tenant_id: str, zone_id: str) -> Zone:
        zone = self._zones.get_by_id(tenant_id=tenant_id, zone_id=zone_id)
        if not zone:
            raise ResourceNotFoundError("Zone not found")
        return zone

    def _bin(self, tenant_id: str, bin_id: str) -> Bin:
        bin = self._bins.get_by_id(tenant_id=tenant_id, bin_id=bin_id)
        if not bin:
            raise ResourceNotFoundError("Bin not found")
        return bin

    def _log(self, tenant_id: str, entity: AuditEntity, entity_id: str, action: AuditAction, actor_id, **kwargs):
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=actor_id,
                action=action,
                entity=entity,
                entity_id=entity_id,
                **kwargs,
            )

    @staticmethod
    def _check_code(code: str, name: str) -> str:
        code = require_non_empty(code, name).upper()
        require_max_length(code, name, 8)
        if not code.isalnum():
            raise ValidationError(f"{name} must be alphanumeric")
        return code

    # warehouses and zones
    def create_warehouse(
        self, *, tenant_id: str, code: str, name: str, created_by: Optional[str] = None
    ) -> Warehouse:
        code = self._check_code(code, "Warehouse code")
        name = require_non_empty(name, "Name")
        if self._warehouses.get_by_code(tenant_id=tenant_id, code=code):
            raise ConflictError("A warehouse with this code already exists")
        warehouse = self._warehouses.save(Warehouse(id=new_id(), tenant_id=tenant_id, code=code, name=name))
        self._log(
            tenant_id, AuditEntity.WAREHOUSE, warehouse.id, AuditAction.CREATE, created_by, new_data={"code": code}
        )
        return warehouse

    def list_warehouses(self, *, tenant_id: str) -> List[Warehouse]:
        return self._warehouses.list_all(tenant_id=tenant_id)

    def create_zone(
        self,
        *,
        tenant_id: str,
        warehouse_id: str,
        code: str,
        name: str,
        structure: Optional[dict] = None,
        created_by: Optional[str] = None,
    ) -> Zone:
        warehouse = self._warehouse(tenant_id, warehouse_id)
        code = self._check_code(code, "Zone code")
        name = require_non_empty(name, "Name")
        if self._zones.get_by_code(tenant_id=tenant_id, warehouse_id=warehouse.id, code=code):
            raise ConflictError("A zone with this code already exists in the warehouse")
        zone = Zone(
            id=new_id(),
            tenant_id=tenant_id,
            warehouse_id=warehouse.id,
            code=code,
            name=name,
            structure=ZoneStructure.from_dict(structure).to_dict(),
        )
        self._zones.save(zone)
        self._log(tenant_id, AuditEntity.ZONE, zone.id, AuditAction.CREATE, created_by, new_data={"code": code})
        return zone

    def get_zone(self, *, tenant_id: str, zone_id: str) -> Zone:
        return self._zone(tenant_id, zone_id)

    def list_zones(self, *, tenant_id: str, warehouse_id: str) -> List[Zone]:
        self._warehouse(tenant_id, warehouse_id)
        return self._zones.list_by_warehouse(tenant_id=tenant_id, warehouse_id=warehouse_id)

    # structure
    def _plan(self, tenant_id: str, zone: Zone, structure: ZoneStructure) -> Tuple[List[Bin], List[BinData], ZoneDiff]:
        if structure.total_bins < 1:
            raise ValidationError("Zone structure must include aisles, shelves per aisle and bins per shelf")
        if structure.total_bins > MAX_BINS_PER_ZONE:
            raise ValidationError(
                f"Configuration would create {structure.total_bins} bins. Maximum is {MAX_BINS_PER_ZONE} bins per zone"
            )
        warehouse = self._warehouse(tenant_id, zone.warehouse_id)
        existing = self._bins.list_by_zone(tenant_id=tenant_id, zone_id=zone.id)
        new_data = list(structure.generate_bin_data(warehouse.code, zone.code))
        counts = self._items.count_items_per_bin(tenant_id=tenant_id, bin_ids=[b.id for b in existing])
        return existing, new_data, compute_zone_diff(existing, new_data, counts)

    def preview_zone_structure(self, *, tenant_id: str, zone_id: str, structure: dict) -> dict:
        zone = self._zone(tenant_id, zone_id)
        _, _, diff = self._plan(tenant_id, zone, ZoneStructure.from_dict(structure))
        return diff.summary()

    def configure_zone_structure(
        self, *, tenant_id: str, zone_id: str, structure: dict, configured_by: Optional[str] = None
    ) -> ZoneConfigurationResult:
        zone = self._zone(tenant_id, zone_id)
        zone_structure = ZoneStructure.from_dict(structure)
        existing, new_data, diff = self._plan(tenant_id, zone, zone_structure)

        def new_bin(data: BinData) -> Bin:
            return Bin(
                id=new_id(),
                tenant_id=tenant_id,
                zone_id=zone.id,
                address=data.address,
                aisle=data.aisle,
                shelf=data.shelf,
                position=data.position,
            )

        if not existing:
            created = self._bins.save_many(new_bin(data) for data in new_data)
            updated = deleted = blocked = 0
        else:
            now = utc_now()
            changed = []
            for preserved in diff.to_preserve:
                if preserved.address_changed:
                    preserved.bin.address = preserved.new_address
                    preserved.bin.updated_at = now
                    changed.append(preserved.bin)
            for removed in diff.to_delete:
                removed.deleted_at = now
                changed.append(removed)
            for occupied in diff.to_block:
                occupied.bin.block(REMOVED_BIN_REASON)
                changed.append(occupied.bin)
            self._bins.save_many(changed)
            created = self._bins.save_many(new_bin(data) for data in diff.to_create)
            updated = sum(1 for p in diff.to_preserve if p.address_changed)
            deleted = len(diff.to_delete)
            blocked = len(diff.to_block)

        zone.structure = zone_structure.to_dict()
        zone.updated_at = utc_now()
        self._zones.save(zone)

        result = ZoneConfigurationResult(
            zone=zone,
            bins_created=created,
            bins_preserved=len(diff.to_preserve),
            bins_updated=updated,
            bins_deleted=deleted,
            bins_blocked=blocked,
        )
        self._log(
            tenant_id,
            AuditEntity.ZONE,
            zone.id,
            AuditAction.UPDATE,
            configured_by,
            new_data={"structure": zone.structure},
            metadata=result.summary(),
        )
        logger.info("Zone %s reconfigured: %s", zone.code, result.summary())
        return result

    # bins
    def list_bins(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        zone_id: Optional[str] = None,
        is_blocked: Optional[bool] = None,
        only_available: bool = False,
        search: Optional[str] = None,
    ) -> Page[Bin]:
        filters = BinFilter(zone_id=zone_id, is_blocked=is_blocked, only_available=only_available, search=search)
        items, total = self._bins.list_page(tenant_id=tenant_id, filters=filters, params=params)
        return Page(items=items, total=total, params=params)

    def get_bin(self, *, tenant_id: str, bin_id: str) -> Bin:
        return self._bin(tenant_id, bin_id)

    def block_bin(self, *, tenant_id: str, bin_id: str, reason: str, blocked_by: Optional[str] = None) -> Bin:
        bin = self._bin(tenant_id, bin_id)
        bin.block(reason)
        self._bins.save(bin)
        self._log(
            tenant_id,
            AuditEntity.BIN,
            bin.id,
            AuditAction.STATUS_CHANGE,
            blocked_by,
            new_data={"blocked": True, "reason": bin.block_reason},
        )
        return bin

    def unblock_bin(self, *, tenant_id: str, bin_id: str, unblocked_by: Optional[str] = None) -> Bin:
        bin = self._bin(tenant_id, bin_id)
        bin.unblock()
        self._bins.save(bin)
        self._log(
            tenant_id, AuditEntity.BIN, bin.id, AuditAction.STATUS_CHANGE, unblocked_by, new_data={"blocked": False}
        )
        return bin

    def update_bin_capacity(
        self, *, tenant_id: str, bin_id: str, capacity: Optional[int], updated_by: Optional[str] = None
    ) -> Bin:
        bin = self._bin(tenant_id, bin_id)
        previous = bin.capacity
        bin.set_capacity(capacity)
        self._bins.save(bin)
        self._log(
            tenant_id,
            AuditEntity.BIN,
            bin.id,
            AuditAction.UPDATE,
            updated_by,
            old_data={"capacity": previous},
            new_data={"capacity": capacity},
        )
        return bin
