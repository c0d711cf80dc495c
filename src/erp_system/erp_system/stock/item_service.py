from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Sequence

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import today, utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import parse_enum, require_max_length, require_non_empty
from ..core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from ..logging_config import get_logger
from .model import EXIT_MOVEMENTS, Bin, Item, ItemMovement, ItemStatus, MovementType, Variant
from .repository import BinRepository, ItemFilter, ItemMovementRepository, ItemRepository, VariantRepository

logger = get_logger(__name__)

MAX_BATCH_TRANSFER = 100
ENTRY_REASON = "ENTRY"


def bin_ref(bin: Optional[Bin]) -> Optional[str]:
    return f"Bin: {bin.address}" if bin else None


class ItemService:
    """Use case: variants, stock items and their movements between bins."""

    def __init__(
        self,
        variants: VariantRepository,
        items: ItemRepository,
        bins: BinRepository,
        movements: ItemMovementRepository,
        audit: Optional[AuditService] = None,
    ):
        self._variants = variants
        self._items = items
        self._bins = bins
        self._movements = movements
        self._audit = audit

    # helpers
    def _item(self, tenant_id: str, item_id: str) -> Item:
        item = self._items.get_by_id(tenant_id=tenant_id, item_id=item_id)
        if not item:
            raise ResourceNotFoundError("Item not found")
        return item

    def _bin(self, tenant_id: str, bin_id: str, label: str = "Bin") -> Bin:
        bin = self._bins.get_by_id(tenant_id=tenant_id, bin_id=bin_id)
        if not bin:
            raise ResourceNotFoundError(f"{label} not found")
        return bin

    def _record(self, item: Item, user_id: Optional[str], **kwargs) -> ItemMovement:
        return self._movements.save(
            ItemMovement(id=new_id(), tenant_id=item.tenant_id, item_id=item.id, user_id=user_id, **kwargs)
        )

    def _log(self, item: Item, action: AuditAction, user_id: Optional[str], **kwargs) -> None:
        if self._audit:
            self._audit.log(
                tenant_id=item.tenant_id,
                user_id=user_id,
                action=action,
                entity=AuditEntity.ITEM,
                entity_id=item.id,
                **kwargs,
            )

    # variants
    def create_variant(
        self,
        *,
        tenant_id: str,
        product_name: str,
        sku: str,
        name: str,
        price: float = 0.0,
        created_by: Optional[str] = None,
    ) -> Variant:
        product_name = require_non_empty(product_name, "Product name")
        name = require_non_empty(name, "Name")
        sku = require_non_empty(sku, "SKU")
        require_max_length(sku, "SKU", 64)
        if price is None or price < 0:
            raise ValidationError("Price cannot be negative")
        if self._variants.get_by_sku(tenant_id=tenant_id, sku=sku):
            raise ConflictError("A variant with this SKU already exists")
        variant = self._variants.save(
            Variant(
                id=new_id(),
                tenant_id=tenant_id,
                product_name=product_name,
                sku=sku,
                name=name,
                price=round(float(price), 2),
            )
        )
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=created_by,
                action=AuditAction.CREATE,
                entity=AuditEntity.VARIANT,
                entity_id=variant.id,
                new_data={"sku": sku, "price": variant.price},
            )
        return variant

    def get_variant(self, *, tenant_id: str, variant_id: str) -> Variant:
        variant = self._variants.get_by_id(tenant_id=tenant_id, variant_id=variant_id)
        if not variant:
            raise ResourceNotFoundError("Variant not found")
        return variant

    def list_variants(self, *, tenant_id: str, params: PageParams, search: Optional[str] = None) -> Page[Variant]:
        items, total = self._variants.list_page(tenant_id=tenant_id, params=params, search=search)
        return Page(items=items, total=total, params=params)

    # entries and exits
    def register_item_entry(
        self,
        *,
        tenant_id: str,
        variant_id: str,
        bin_id: str,
        quantity: int,
        unique_code: Optional[str] = None,
        batch_number: Optional[str] = None,
        manufacturing_date: Optional[date] = None,
        expiry_date: Optional[date] = None,
        notes: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Item:
        code = (unique_code or "").strip() or new_id()
        require_max_length(code, "Unique code", 128)
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")
        require_max_length(batch_number, "Batch number", 64)
        if manufacturing_date and expiry_date and manufacturing_date >= expiry_date:
            raise ValidationError("Manufacturing date must be before the expiry date")
        if expiry_date and expiry_date < today():
            raise ValidationError("Expiry date cannot be in the past")
        if self._items.get_by_unique_code(tenant_id=tenant_id, unique_code=code):
            raise ConflictError("An item with this unique code already exists")
        self.get_variant(tenant_id=tenant_id, variant_id=variant_id)
        bin = self._bin(tenant_id, bin_id)
        if not bin.is_available:
            raise ValidationError(f"Bin {bin.address} is not available")

        bin.add_occupancy(quantity)
        item = Item(
            id=new_id(),
            tenant_id=tenant_id,
            unique_code=code,
            variant_id=variant_id,
            bin_id=bin.id,
            quantity=quantity,
            batch_number=batch_number,
            manufacturing_date=manufacturing_date,
            expiry_date=expiry_date,
        )
        self._items.save(item)
        self._bins.save(bin)
        self._record(
            item,
            user_id,
            quantity=quantity,
            quantity_before=0,
            quantity_after=quantity,
            movement_type=MovementType.INVENTORY_ADJUSTMENT,
            reason_code=ENTRY_REASON,
            destination_ref=bin_ref(bin),
            notes=notes,
        )
        self._log(item, AuditAction.CREATE, user_id, new_data={"uniqueCode": code, "quantity": quantity})
        return item

    def register_item_exit(
        self,
        *,
        tenant_id: str,
        item_id: str,
        quantity: int,
        movement_type,
        reason_code: Optional[str] = None,
        sales_order_id: Optional[str] = None,
        notes: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> ItemMovement:
        kind = MovementType.parse(movement_type)
        if kind not in EXIT_MOVEMENTS:
            raise ValidationError("Exit movement must be SALE, PRODUCTION, SAMPLE or LOSS")
        item = self._item(tenant_id, item_id)
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")
        if quantity > item.quantity:
            raise ValidationError("Insufficient quantity")

        before = item.quantity
        item.quantity -= quantity
        if item.quantity == 0:
            if kind == MovementType.SALE:
                item.status = ItemStatus.SOLD
            elif kind == MovementType.LOSS:
                item.status = ItemStatus.DAMAGED
        item.updated_at = utc_now()
        self._items.save(item)

        bin = self._bins.get_by_id(tenant_id=tenant_id, bin_id=item.bin_id) if item.bin_id else None
        if bin is not None and bin.current_occupancy:
            bin.remove_occupancy(min(quantity, bin.current_occupancy))
            self._bins.save(bin)

        movement = self._record(
            item,
            user_id,
            quantity=quantity,
            quantity_before=before,
            quantity_after=item.quantity,
            movement_type=kind,
            reason_code=reason_code,
            origin_ref=bin_ref(bin),
            notes=notes,
            sales_order_id=sales_order_id,
        )
        self._log(
            item,
            AuditAction.UPDATE,
            user_id,
            old_data={"quantity": before},
            new_data={"quantity": item.quantity, "status": item.status.value, "movement": kind.value},
        )
        return movement

    # transfers
    def _move(self, item: Item, origin: Optional[Bin], destination: Bin, notes, user_id) -> ItemMovement:
        if item.quantity > 0:
            destination.add_occupancy(item.quantity)
            if origin is not None and origin.current_occupancy:
                origin.remove_occupancy(min(item.quantity, origin.current_occupancy))
        item.bin_id = destination.id
        item.updated_at = utc_now()
        self._items.save(item)
        return self._record(
            item,
            user_id,
            quantity=item.quantity,
            quantity_before=item.quantity,
            quantity_after=item.quantity,
            movement_type=MovementType.TRANSFER,
            origin_ref=bin_ref(origin),
            destination_ref=bin_ref(destination),
            notes=notes,
        )

    def transfer_item(
        self,
        *,
        tenant_id: str,
        item_id: str,
        destination_bin_id: str,
        notes: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> ItemMovement:
        item = self._item(tenant_id, item_id)
        destination = self._bin(tenant_id, destination_bin_id, "Destination bin")
        if destination.is_blocked:
            raise ValidationError(f"Destination bin {destination.address} is blocked")
        if item.bin_id == destination.id:
            raise ValidationError("Item is already in the destination bin")
        origin = self._bins.get_by_id(tenant_id=tenant_id, bin_id=item.bin_id) if item.bin_id else None

        movement = self._move(item, origin, destination, notes, user_id)
        if origin is not None:
            self._bins.save(origin)
        self._bins.save(destination)
        self._log(
            item,
            AuditAction.UPDATE,
            user_id,
            old_data={"binId": origin.id if origin else None},
            new_data={"binId": destination.id},
        )
        return movement

    def batch_transfer_items(
        self,
        *,
        tenant_id: str,
        item_ids: Sequence[str],
        destination_bin_id: str,
        notes: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> dict:
        ids = list(dict.fromkeys(item_ids or []))
        if not 1 <= len(ids) <= MAX_BATCH_TRANSFER:
            raise ValidationError(f"Between 1 and {MAX_BATCH_TRANSFER} items can be transferred at once")
        require_max_length(notes, "Notes", 1000)
        destination = self._bin(tenant_id, destination_bin_id, "Destination bin")
        if destination.is_blocked:
            raise ValidationError(f"Destination bin {destination.address} is blocked")

        items = self._items.list_by_ids(tenant_id=tenant_id, item_ids=ids)
        found = {item.id for item in items}
        missing = [item_id for item_id in ids if item_id not in found]
        if missing:
            raise ResourceNotFoundError(f"Items not found: {', '.join(missing)}")

        to_move = [item for item in items if item.bin_id != destination.id]
        skipped = len(items) - len(to_move)
        # the whole batch must fit before anything moves
        incoming = sum(item.quantity for item in to_move if item.quantity > 0)
        if destination.has_capacity_limit and incoming > destination.available_space:
            raise ValidationError(
                f"Destination bin {destination.address} has room for {destination.available_space} units, "
                f"{incoming} requested"
            )

        origins: Dict[str, Bin] = {}
        movements: List[ItemMovement] = []
        for item in to_move:
            origin = None
            if item.bin_id:
                origin = origins.get(item.bin_id) or self._bins.get_by_id(tenant_id=tenant_id, bin_id=item.bin_id)
                if origin is not None:
                    origins[origin.id] = origin
            movements.append(self._move(item, origin, destination, notes, user_id))

        now = utc_now()
        for origin in origins.values():
            if origin.is_blocked and origin.is_empty:
                origin.deleted_at = now
        self._bins.save_many(list(origins.values()) + [destination])

        logger.info("Transferred %d items to bin %s (%d skipped)", len(movements), destination.address, skipped)
        return {"transferred": len(movements), "skipped": skipped, "movements": movements}

    # queries
    def get_item(self, *, tenant_id: str, item_id: str) -> Item:
        return self._item(tenant_id, item_id)

    def list_items(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        bin_id: Optional[str] = None,
        variant_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Page[Item]:
        filters = ItemFilter(
            bin_id=bin_id,
            variant_id=variant_id,
            status=parse_enum(ItemStatus, status, "Status") if status else None,
        )
        items, total = self._items.list_page(tenant_id=tenant_id, filters=filters, params=params)
        return Page(items=items, total=total, params=params)

    def get_item_location_history(self, *, tenant_id: str, item_id: str) -> List[ItemMovement]:
        item = self._item(tenant_id, item_id)
        return self._movements.list_by_item(tenant_id=tenant_id, item_id=item.id, movement_type=MovementType.TRANSFER)
