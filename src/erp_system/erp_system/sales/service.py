from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import as_naive_utc, utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.serialization import to_jsonable
from ..common.validators import (
    parse_enum,
    require_between,
    require_email,
    require_max_length,
    require_non_empty,
    require_non_negative,
)
from ..core.exceptions import BadRequestError, ConflictError, ResourceNotFoundError, ValidationError
from ..stock.repository import VariantRepository
from .model import (
    INITIAL_ORDER_STATUSES,
    Customer,
    CustomerType,
    DiscountType,
    OrderStatus,
    SalesOrder,
    SalesOrderItem,
    VariantPromotion,
    validate_discount,
)
from .repository import CustomerRepository, SalesOrderRepository, VariantPromotionRepository

MAX_ORDER_ITEMS = 100
MAX_ITEM_QUANTITY = 10000

_CUSTOMER_FIELDS = ("document", "email", "phone", "address", "city", "state", "zip_code", "country", "notes")
_CUSTOMER_LIMITS = {"phone": 20, "address": 256, "city": 128, "zip_code": 10, "country": 64, "notes": 1000}


class CustomerService:
    """Use case: sales customers."""

    def __init__(self, customers: CustomerRepository, audit: Optional[AuditService] = None):
        self._customers = customers
        self._audit = audit

    def _get(self, tenant_id: str, customer_id: str) -> Customer:
        customer = self._customers.get_by_id(tenant_id=tenant_id, customer_id=customer_id)
        if not customer:
            raise ResourceNotFoundError("Customer not found")
        return customer

    def _log(self, customer: Customer, action: AuditAction, user_id: Optional[str], **kwargs) -> None:
        if self._audit:
            self._audit.log(
                tenant_id=customer.tenant_id,
                user_id=user_id,
                action=action,
                entity=AuditEntity.CUSTOMER,
                entity_id=customer.id,
                **kwargs,
            )

    def _clean(self, tenant_id: str, key: str, value, current_id: Optional[str] = None):
        if value is None:
            return None
        if key == "email":
            email = require_email(value)
            require_max_length(email, "Email", 254)
            other = self._customers.get_by_email(tenant_id=tenant_id, email=email)
            if other and other.id != current_id:
                raise ConflictError("Email already in use by another customer")
            return email
        if key == "document":
            document = "".join(ch for ch in str(value) if ch.isalnum())
            if not document:
                raise ValidationError("Document is invalid")
            other = self._customers.get_by_document(tenant_id=tenant_id, document=document)
            if other and other.id != current_id:
                raise ConflictError("Document already in use by another customer")
            return document
        if key == "state":
            if len(value) != 2:
                raise ValidationError("State must be exactly 2 characters")
            return value.upper()
        require_max_length(value, key.replace("_", " ").capitalize(), _CUSTOMER_LIMITS[key])
        return value

    def create_customer(
        self, *, tenant_id: str, name: str, type: str = "INDIVIDUAL", created_by: Optional[str] = None, **fields
    ) -> Customer:
        name = require_non_empty(name, "Customer name")
        require_max_length(name, "Customer name", 128)
        customer = Customer(
            id=new_id(),
            tenant_id=tenant_id,
            name=name,
            type=parse_enum(CustomerType, type, "Customer type"),
            **{key: self._clean(tenant_id, key, fields.get(key)) for key in _CUSTOMER_FIELDS},
        )
        self._customers.save(customer)
        self._log(customer, AuditAction.CREATE, created_by, new_data={"name": name, "type": customer.type.value})
        return customer

    def get_customer(self, *, tenant_id: str, customer_id: str) -> Customer:
        return self._get(tenant_id, customer_id)

    def list_customers(
        self, *, tenant_id: str, params: PageParams, search: Optional[str] = None, type: Optional[str] = None
    ) -> Page[Customer]:
        type_enum = parse_enum(CustomerType, type, "Customer type") if type else None
        items, total = self._customers.list_page(tenant_id=tenant_id, params=params, search=search, type=type_enum)
        return Page(items=items, total=total, params=params)

    def update_customer(
        self, *, tenant_id: str, customer_id: str, changes: dict, updated_by: Optional[str] = None
    ) -> Customer:
        customer = self._get(tenant_id, customer_id)
        old = {}
        for key, value in changes.items():
            if value is None:
                continue
            if key == "name":
                value = require_non_empty(value, "Customer name")
                require_max_length(value, "Customer name", 128)
            elif key == "type":
                value = parse_enum(CustomerType, value, "Customer type")
            elif key in _CUSTOMER_FIELDS:
                value = self._clean(tenant_id, key, value, current_id=customer.id)
            elif key != "is_active":
                continue
            old[key] = getattr(customer, key)
            setattr(customer, key, value)
        customer.updated_at = utc_now()
        self._customers.save(customer)
        self._log(
            customer,
            AuditAction.UPDATE,
            updated_by,
            old_data=to_jsonable(old),
            new_data={k: to_jsonable(getattr(customer, k)) for k in old},
        )
        return customer

    def delete_customer(self, *, tenant_id: str, customer_id: str, deleted_by: Optional[str] = None) -> None:
        customer = self._get(tenant_id, customer_id)
        customer.deleted_at = utc_now()
        customer.is_active = False
        self._customers.save(customer)
        self._log(customer, AuditAction.DELETE, deleted_by)


@dataclass(frozen=True)
class NewOrderItem:
    variant_id: str
    quantity: int
    unit_price: float
    discount: float = 0.0
    notes: Optional[str] = None


class SalesOrderService:
    """Use case: sales orders and their status lifecycle."""

    def __init__(
        self,
        orders: SalesOrderRepository,
        customers: CustomerRepository,
        variants: VariantRepository,
        audit: Optional[AuditService] = None,
    ):
        self._orders = orders
        self._customers = customers
        self._variants = variants
        self._audit = audit

    def _get(self, tenant_id: str, order_id: str) -> SalesOrder:
        order = self._orders.get_by_id(tenant_id=tenant_id, order_id=order_id)
        if not order:
            raise ResourceNotFoundError("Sales order not found")
        return order

    def _log(self, order: SalesOrder, action: AuditAction, user_id: Optional[str], **kwargs) -> None:
        if self._audit:
            self._audit.log(
                tenant_id=order.tenant_id,
                user_id=user_id,
                action=action,
                entity=AuditEntity.SALES_ORDER,
                entity_id=order.id,
                **kwargs,
            )

    def _build_item(self, tenant_id: str, data: NewOrderItem, position: int) -> SalesOrderItem:
        label = f"Item {position}"
        if not self._variants.get_by_id(tenant_id=tenant_id, variant_id=data.variant_id):
            raise ResourceNotFoundError(f"{label}: variant not found")
        require_between(data.quantity, f"{label} quantity", 1, MAX_ITEM_QUANTITY)
        require_non_negative(data.unit_price, f"{label} unit price")
        require_non_negative(data.discount, f"{label} discount")
        require_max_length(data.notes, f"{label} notes", 500)
        return SalesOrderItem(
            id=new_id(),
            variant_id=data.variant_id,
            quantity=int(data.quantity),
            unit_price=round(float(data.unit_price), 2),
            discount=round(float(data.discount), 2),
            notes=data.notes,
        )

    def create_sales_order(
        self,
        *,
        tenant_id: str,
        order_number: str,
        customer_id: str,
        items: Sequence[NewOrderItem],
        discount: float = 0.0,
        notes: Optional[str] = None,
        status: str = "PENDING",
        created_by: Optional[str] = None,
    ) -> SalesOrder:
        order_number = require_non_empty(order_number, "Order number")
        require_max_length(order_number, "Order number", 50)
        if self._orders.get_by_order_number(tenant_id=tenant_id, order_number=order_number):
            raise ConflictError(f"Order number {order_number} already exists")
        if not self._customers.get_by_id(tenant_id=tenant_id, customer_id=customer_id):
            raise ResourceNotFoundError("Customer not found")
        if not items:
            raise ValidationError("Order must have at least one item")
        if len(items) > MAX_ORDER_ITEMS:
            raise ValidationError(f"Order cannot have more than {MAX_ORDER_ITEMS} items")
        require_non_negative(discount, "Order discount")
        require_max_length(notes, "Notes", 1000)
        status_enum = parse_enum(OrderStatus, status, "Status")
        if status_enum not in INITIAL_ORDER_STATUSES:
            raise ValidationError("New orders must start as DRAFT, PENDING or CONFIRMED")

        order = SalesOrder(
            id=new_id(),
            tenant_id=tenant_id,
            order_number=order_number,
            customer_id=customer_id,
            created_by=created_by,
            status=status_enum,
            items=[self._build_item(tenant_id, data, n) for n, data in enumerate(items, start=1)],
            discount=round(float(discount), 2),
            notes=notes,
        )
        self._orders.save(order)
        self._log(
            order,
            AuditAction.CREATE,
            created_by,
            new_data={"orderNumber": order_number, "finalPrice": order.final_price, "status": status_enum.value},
        )
        return order

    def get_sales_order(self, *, tenant_id: str, order_id: str) -> SalesOrder:
        return self._get(tenant_id, order_id)

    def list_sales_orders(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        status: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> Page[SalesOrder]:
        status_enum = parse_enum(OrderStatus, status, "Status") if status else None
        items, total = self._orders.list_page(
            tenant_id=tenant_id, params=params, status=status_enum, customer_id=customer_id
        )
        return Page(items=items, total=total, params=params)

    def _transition(self, order: SalesOrder, action: AuditAction, user_id: Optional[str], old: OrderStatus, **kwargs):
        self._orders.save(order)
        self._log(
            order,
            action,
            user_id,
            old_data={"status": old.value},
            new_data={"status": order.status.value},
            **kwargs,
        )
        return order

    def confirm_sales_order(self, *, tenant_id: str, order_id: str, user_id: Optional[str] = None) -> SalesOrder:
        order = self._get(tenant_id, order_id)
        old = order.status
        order.confirm()
        return self._transition(order, AuditAction.APPROVE, user_id, old)

    def cancel_sales_order(
        self, *, tenant_id: str, order_id: str, reason: Optional[str] = None, user_id: Optional[str] = None
    ) -> SalesOrder:
        order = self._get(tenant_id, order_id)
        old = order.status
        order.cancel()
        return self._transition(order, AuditAction.CANCEL, user_id, old, metadata={"reason": reason})

    def update_sales_order_status(
        self, *, tenant_id: str, order_id: str, status: str, user_id: Optional[str] = None
    ) -> SalesOrder:
        order = self._get(tenant_id, order_id)
        old = order.status
        order.change_status(parse_enum(OrderStatus, status, "Status"))
        return self._transition(order, AuditAction.STATUS_CHANGE, user_id, old)

    def add_sales_order_item(
        self, *, tenant_id: str, order_id: str, item: NewOrderItem, user_id: Optional[str] = None
    ) -> SalesOrder:
        order = self._get(tenant_id, order_id)
        if len(order.items) >= MAX_ORDER_ITEMS:
            raise BadRequestError(f"Order cannot have more than {MAX_ORDER_ITEMS} items")
        line = self._build_item(tenant_id, item, len(order.items) + 1)
        order.add_item(line)
        self._orders.save(order)
        self._log(order, AuditAction.UPDATE, user_id, metadata={"addedItemId": line.id})
        return order

    def remove_sales_order_item(
        self, *, tenant_id: str, order_id: str, item_id: str, user_id: Optional[str] = None
    ) -> SalesOrder:
        order = self._get(tenant_id, order_id)
        if len(order.items) == 1 and order.items[0].id == item_id:
            raise BadRequestError("Order must keep at least one item")
        order.remove_item(item_id)
        self._orders.save(order)
        self._log(order, AuditAction.UPDATE, user_id, metadata={"removedItemId": item_id})
        return order

    def delete_sales_order(self, *, tenant_id: str, order_id: str, deleted_by: Optional[str] = None) -> None:
        order = self._get(tenant_id, order_id)
        order.delete()
        self._orders.save(order)
        self._log(order, AuditAction.DELETE, deleted_by)


class PromotionService:
    """Use case: time-boxed discounts on product variants."""

    def __init__(
        self,
        promotions: VariantPromotionRepository,
        variants: VariantRepository,
        audit: Optional[AuditService] = None,
    ):
        self._promotions = promotions
        self._variants = variants
        self._audit = audit

    def _get(self, tenant_id: str, promotion_id: str) -> VariantPromotion:
        promotion = self._promotions.get_by_id(tenant_id=tenant_id, promotion_id=promotion_id)
        if not promotion:
            raise ResourceNotFoundError("Promotion not found")
        return promotion

    def _log(self, promotion: VariantPromotion, action: AuditAction, user_id: Optional[str], **kwargs) -> None:
        if self._audit:
            self._audit.log(
                tenant_id=promotion.tenant_id,
                user_id=user_id,
                action=action,
                entity=AuditEntity.VARIANT_PROMOTION,
                entity_id=promotion.id,
                **kwargs,
            )

    def create_variant_promotion(
        self,
        *,
        tenant_id: str,
        variant_id: str,
        name: str,
        discount_type: str,
        discount_value: float,
        start_date: datetime,
        end_date: datetime,
        is_active: bool = True,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> VariantPromotion:
        if not self._variants.get_by_id(tenant_id=tenant_id, variant_id=variant_id):
            raise ResourceNotFoundError("Variant not found")
        name = require_non_empty(name, "Promotion name")
        require_max_length(name, "Promotion name", 128)
        require_max_length(notes, "Notes", 1000)
        promotion = VariantPromotion(
            id=new_id(),
            tenant_id=tenant_id,
            variant_id=variant_id,
            name=name,
            discount_type=DiscountType.parse(discount_type),
            discount_value=float(discount_value),
            start_date=as_naive_utc(start_date),
            end_date=as_naive_utc(end_date),
            is_active=is_active,
            notes=notes,
        )
        self._promotions.save(promotion)
        self._log(
            promotion,
            AuditAction.CREATE,
            created_by,
            new_data={"name": name, "discountType": promotion.discount_type.value, "value": discount_value},
        )
        return promotion

    def update_variant_promotion(
        self, *, tenant_id: str, promotion_id: str, changes: dict, updated_by: Optional[str] = None
    ) -> VariantPromotion:
        promotion = self._get(tenant_id, promotion_id)
        old = {}
        for key in ("name", "discount_value", "start_date", "end_date", "is_active", "notes"):
            if changes.get(key) is None:
                continue
            value = changes[key]
            if key == "name":
                value = require_non_empty(value, "Promotion name")
                require_max_length(value, "Promotion name", 128)
            elif key in ("start_date", "end_date"):
                value = as_naive_utc(value)
            old[key] = getattr(promotion, key)
            setattr(promotion, key, value)
        validate_discount(promotion.discount_type, promotion.discount_value)
        if promotion.start_date >= promotion.end_date:
            raise ValidationError("Start date must be before end date")
        promotion.updated_at = utc_now()
        self._promotions.save(promotion)
        self._log(
            promotion,
            AuditAction.UPDATE,
            updated_by,
            old_data=to_jsonable(old),
            new_data={k: to_jsonable(getattr(promotion, k)) for k in old},
        )
        return promotion

    def get_variant_promotion(self, *, tenant_id: str, promotion_id: str) -> VariantPromotion:
        return self._get(tenant_id, promotion_id)

    def list_variant_promotions(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        variant_id: Optional[str] = None,
        active_only: bool = False,
    ) -> Page[VariantPromotion]:
        items, total = self._promotions.list_page(
            tenant_id=tenant_id, params=params, variant_id=variant_id, active_only=active_only
        )
        return Page(items=items, total=total, params=params)

    def delete_variant_promotion(self, *, tenant_id: str, promotion_id: str, deleted_by: Optional[str] = None) -> None:
        promotion = self._get(tenant_id, promotion_id)
        promotion.delete()
        self._promotions.save(promotion)
        self._log(promotion, AuditAction.DELETE, deleted_by)

    def get_best_price(self, *, tenant_id: str, variant_id: str, now: Optional[datetime] = None) -> dict:
        """Lowest price among the variant's currently valid promotions."""
        variant = self._variants.get_by_id(tenant_id=tenant_id, variant_id=variant_id)
        if not variant:
            raise ResourceNotFoundError("Variant not found")
        now = now or utc_now()
        best: Optional[VariantPromotion] = None
        best_price = variant.price
        valid: List[VariantPromotion] = [
            p for p in self._promotions.list_by_variant(tenant_id=tenant_id, variant_id=variant_id)
            if p.is_currently_valid(now)
        ]
        for promotion in valid:
            price = promotion.calculate_final_price(variant.price, now)
            if price < best_price:
                best, best_price = promotion, price
        return {
            "variantId": variant_id,
            "originalPrice": variant.price,
            "finalPrice": best_price,
            "discount": round(variant.price - best_price, 2),
            "promotionId": best.id if best else None,
            "promotionName": best.name if best else None,
        }
