from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from ..common.datetime_utils import utc_now
from ..core.exceptions import BadRequestError, ResourceNotFoundError, ValidationError


class CustomerType(str, Enum):
    INDIVIDUAL = "INDIVIDUAL"
    BUSINESS = "BUSINESS"


@dataclass
class Customer:
    id: str
    tenant_id: str
    name: str
    type: CustomerType = CustomerType.INDIVIDUAL
    document: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class OrderStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"

    @property
    def can_be_modified(self) -> bool:
        return self in (OrderStatus.DRAFT, OrderStatus.PENDING)

    @property
    def is_final(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.RETURNED)

    def can_transition_to(self, target: "OrderStatus") -> bool:
        return target in ORDER_TRANSITIONS.get(self, frozenset())


ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.DRAFT: frozenset({OrderStatus.PENDING, OrderStatus.CANCELLED}),
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.IN_TRANSIT, OrderStatus.CANCELLED}),
    OrderStatus.IN_TRANSIT: frozenset({OrderStatus.DELIVERED, OrderStatus.RETURNED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.RETURNED}),
}

INITIAL_ORDER_STATUSES = (OrderStatus.DRAFT, OrderStatus.PENDING, OrderStatus.CONFIRMED)
DELETABLE_ORDER_STATUSES = (OrderStatus.DRAFT, OrderStatus.PENDING, OrderStatus.CANCELLED)


@dataclass
class SalesOrderItem:
    id: str
    variant_id: str
    quantity: int
    unit_price: float
    discount: float = 0.0
    notes: Optional[str] = None

    @property
    def total_price(self) -> float:
        return round(self.quantity * self.unit_price - self.discount, 2)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "variantId": self.variant_id,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "discount": self.discount,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SalesOrderItem":
        return cls(
            id=data["id"],
            variant_id=data["variantId"],
            quantity=int(data["quantity"]),
            unit_price=float(data["unitPrice"]),
            discount=float(data.get("discount") or 0.0),
            notes=data.get("notes"),
        )


@dataclass
class SalesOrder:
    id: str
    tenant_id: str
    order_number: str
    customer_id: str
    created_by: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    items: List[SalesOrderItem] = field(default_factory=list)
    discount: float = 0.0
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def total_price(self) -> float:
        return round(sum(item.total_price for item in self.items), 2)

    @property
    def final_price(self) -> float:
        return round(self.total_price - self.discount, 2)

    def _touch(self) -> None:
        self.updated_at = utc_now()

    def add_item(self, item: SalesOrderItem) -> None:
        if not self.status.can_be_modified:
            raise BadRequestError(f"Cannot add items to an order in status {self.status.value}")
        self.items.append(item)
        self._touch()

    def remove_item(self, item_id: str) -> SalesOrderItem:
        if not self.status.can_be_modified:
            raise BadRequestError(f"Cannot remove items from an order in status {self.status.value}")
        for index, item in enumerate(self.items):
            if item.id == item_id:
                self._touch()
                return self.items.pop(index)
        raise ResourceNotFoundError("Order item not found")

    def confirm(self) -> None:
        if self.status != OrderStatus.PENDING:
            raise BadRequestError("Only pending orders can be confirmed")
        self.status = OrderStatus.CONFIRMED
        self._touch()

    def cancel(self) -> None:
        if self.status.is_final:
            raise BadRequestError(f"Cannot cancel an order in status {self.status.value}")
        self.status = OrderStatus.CANCELLED
        self._touch()

    def change_status(self, new_status: OrderStatus) -> None:
        if not self.status.can_transition_to(new_status):
            raise BadRequestError(f"Cannot change order status from {self.status.value} to {new_status.value}")
        self.status = new_status
        self._touch()

    def delete(self) -> None:
        if self.status not in DELETABLE_ORDER_STATUSES:
            raise BadRequestError(f"Cannot delete an order in status {self.status.value}")
        self.deleted_at = utc_now()


class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_VALUE = "FIXED_VALUE"

    @classmethod
    def parse(cls, value) -> "DiscountType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(f"Invalid discount type: {value}")

    @property
    def is_percentage(self) -> bool:
        return self is DiscountType.PERCENTAGE

    @property
    def is_fixed_value(self) -> bool:
        return self is DiscountType.FIXED_VALUE


def validate_discount(discount_type: DiscountType, value: float) -> None:
    if value < 0:
        raise ValidationError("Discount value cannot be negative")
    if discount_type.is_percentage and value > 100:
        raise ValidationError("Percentage discount cannot exceed 100%")


@dataclass
class VariantPromotion:
    id: str
    tenant_id: str
    variant_id: str
    name: str
    discount_type: DiscountType
    discount_value: float
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def __post_init__(self):
        validate_discount(self.discount_type, self.discount_value)
        if self.start_date >= self.end_date:
            raise ValidationError("Start date must be before end date")

    def is_currently_valid(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return self.deleted_at is None and self.is_active and self.start_date <= now <= self.end_date

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) > self.end_date

    def is_upcoming(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) < self.start_date

    def calculate_discount(self, price: float, now: Optional[datetime] = None) -> float:
        if not self.is_currently_valid(now):
            return 0.0
        if self.discount_type.is_percentage:
            return round(price * self.discount_value / 100, 2)
        return min(self.discount_value, price)

    def calculate_final_price(self, price: float, now: Optional[datetime] = None) -> float:
        return max(round(price - self.calculate_discount(price, now), 2), 0.0)

    def delete(self) -> None:
        self.deleted_at = utc_now()
        self.is_active = False
        self.updated_at = self.deleted_at
