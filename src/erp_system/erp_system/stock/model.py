from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from ..common.datetime_utils import utc_now
from ..core.exceptions import InvalidVolumeStatusError, ValidationError, VolumeCannotBeClosedError
from .zone_structure import ZoneStructure


@dataclass
class Warehouse:
    id: str
    tenant_id: str
    code: str
    name: str
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    deleted_at: Optional[datetime] = None


@dataclass
class Zone:
    id: str
    tenant_id: str
    warehouse_id: str
    code: str
    name: str
    structure: dict = field(default_factory=dict)
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def zone_structure(self) -> ZoneStructure:
        return ZoneStructure.from_dict(self.structure)


@dataclass
class Bin:
    id: str
    tenant_id: str
    zone_id: str
    address: str
    aisle: int
    shelf: int
    position: str
    capacity: Optional[int] = None
    current_occupancy: int = 0
    is_active: bool = True
    is_blocked: bool = False
    block_reason: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def __post_init__(self):
        if self.capacity is not None and self.capacity < 0:
            raise ValidationError("Capacity cannot be negative")
        if self.current_occupancy < 0:
            raise ValidationError("Current occupancy cannot be negative")

    @property
    def has_capacity_limit(self) -> bool:
        return self.capacity is not None

    @property
    def occupancy_percentage(self) -> int:
        if not self.has_capacity_limit or self.capacity == 0:
            return 0
        return round(self.current_occupancy / self.capacity * 100)

    @property
    def is_full(self) -> bool:
        return self.has_capacity_limit and self.current_occupancy >= self.capacity

    @property
    def is_empty(self) -> bool:
        return self.current_occupancy == 0

    @property
    def available_space(self) -> Optional[int]:
        if not self.has_capacity_limit:
            return None
        return max(self.capacity - self.current_occupancy, 0)

    @property
    def is_available(self) -> bool:
        return self.is_active and not self.is_blocked and not self.is_full

    def _touch(self) -> None:
        self.updated_at = utc_now()

    def block(self, reason: str) -> None:
        if not reason or not reason.strip():
            raise ValidationError("Block reason is required")
        self.is_blocked = True
        self.block_reason = reason.strip()
        self._touch()

    def unblock(self) -> None:
        self.is_blocked = False
        self.block_reason = None
        self._touch()

    def add_occupancy(self, amount: int) -> None:
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        if self.has_capacity_limit and self.current_occupancy + amount > self.capacity:
            raise ValidationError("Would exceed bin capacity")
        self.current_occupancy += amount
        self._touch()

    def remove_occupancy(self, amount: int) -> None:
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        if self.current_occupancy - amount < 0:
            raise ValidationError("Cannot remove more than current occupancy")
        self.current_occupancy -= amount
        self._touch()

    def set_capacity(self, capacity: Optional[int]) -> None:
        if capacity is not None:
            if capacity < 0:
                raise ValidationError("Capacity cannot be negative")
            if self.current_occupancy > capacity:
                raise ValidationError("Cannot set capacity below current occupancy")
        self.capacity = capacity
        self._touch()


@dataclass
class Variant:
    id: str
    tenant_id: str
    product_name: str
    sku: str
    name: str
    price: float = 0.0
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class ItemStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    EXPIRED = "EXPIRED"
    DAMAGED = "DAMAGED"


@dataclass
class Item:
    id: str
    tenant_id: str
    unique_code: str
    variant_id: str
    bin_id: Optional[str]
    quantity: int
    batch_number: Optional[str] = None
    manufacturing_date: Optional[date] = None
    expiry_date: Optional[date] = None
    status: ItemStatus = ItemStatus.AVAILABLE
    entry_date: datetime = field(default_factory=utc_now)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class MovementType(str, Enum):
    PURCHASE = "PURCHASE"
    CUSTOMER_RETURN = "CUSTOMER_RETURN"
    SALE = "SALE"
    PRODUCTION = "PRODUCTION"
    SAMPLE = "SAMPLE"
    LOSS = "LOSS"
    TRANSFER = "TRANSFER"
    INVENTORY_ADJUSTMENT = "INVENTORY_ADJUSTMENT"
    ZONE_RECONFIGURE = "ZONE_RECONFIGURE"

    @classmethod
    def parse(cls, value) -> "MovementType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except (ValueError, AttributeError):
            raise ValidationError(f"Invalid movement type: {value}")

    @property
    def is_entry(self) -> bool:
        return self in (MovementType.PURCHASE, MovementType.CUSTOMER_RETURN)

    @property
    def is_exit(self) -> bool:
        return self in EXIT_MOVEMENTS

    @property
    def is_transfer(self) -> bool:
        return self == MovementType.TRANSFER

    @property
    def is_adjustment(self) -> bool:
        return self in (MovementType.INVENTORY_ADJUSTMENT, MovementType.ZONE_RECONFIGURE)


EXIT_MOVEMENTS = (MovementType.SALE, MovementType.PRODUCTION, MovementType.SAMPLE, MovementType.LOSS)


@dataclass
class ItemMovement:
    id: str
    tenant_id: str
    item_id: str
    user_id: Optional[str]
    quantity: int
    quantity_before: int
    quantity_after: int
    movement_type: MovementType
    reason_code: Optional[str] = None
    origin_ref: Optional[str] = None
    destination_ref: Optional[str] = None
    notes: Optional[str] = None
    sales_order_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)


class VolumeStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    DELIVERED = "DELIVERED"
    RETURNED = "RETURNED"


@dataclass
class Volume:
    id: str
    tenant_id: str
    code: str
    status: VolumeStatus = VolumeStatus.OPEN
    item_ids: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    closed_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    returned_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def item_count(self) -> int:
        return len(self.item_ids)

    def _require(self, expected: VolumeStatus, action: str) -> None:
        if self.status != expected:
            raise InvalidVolumeStatusError(
                f"Volume must be {expected.value} to be {action} (current: {self.status.value})"
            )

    def close(self) -> None:
        if self.status != VolumeStatus.OPEN:
            raise VolumeCannotBeClosedError("Only open volumes can be closed")
        if not self.item_ids:
            raise VolumeCannotBeClosedError("Cannot close an empty volume")
        self.status = VolumeStatus.CLOSED
        self.closed_at = utc_now()
        self.updated_at = self.closed_at

    def reopen(self) -> None:
        self._require(VolumeStatus.CLOSED, "reopened")
        self.status = VolumeStatus.OPEN
        self.closed_at = None
        self.updated_at = utc_now()

    def deliver(self) -> None:
        self._require(VolumeStatus.CLOSED, "delivered")
        self.status = VolumeStatus.DELIVERED
        self.delivered_at = utc_now()
        self.updated_at = self.delivered_at

    def mark_returned(self) -> None:
        self._require(VolumeStatus.DELIVERED, "returned")
        self.status = VolumeStatus.RETURNED
        self.returned_at = utc_now()
        self.updated_at = self.returned_at
