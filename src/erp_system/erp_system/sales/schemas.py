from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..http.schema import RequestSchema


class CreateCustomerBody(RequestSchema):
    name: str = Field(..., min_length=1, max_length=128)
    type: str = "INDIVIDUAL"
    document: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = Field(None, max_length=254)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=256)
    city: Optional[str] = Field(None, max_length=128)
    state: Optional[str] = Field(None, min_length=2, max_length=2)
    zip_code: Optional[str] = Field(None, max_length=10)
    country: Optional[str] = Field(None, max_length=64)
    notes: Optional[str] = Field(None, max_length=1000)


class UpdateCustomerBody(RequestSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    type: Optional[str] = None
    document: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = Field(None, max_length=254)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=256)
    city: Optional[str] = Field(None, max_length=128)
    state: Optional[str] = Field(None, min_length=2, max_length=2)
    zip_code: Optional[str] = Field(None, max_length=10)
    country: Optional[str] = Field(None, max_length=64)
    notes: Optional[str] = Field(None, max_length=1000)
    is_active: Optional[bool] = None


class OrderItemBody(RequestSchema):
    variant_id: str
    quantity: int = Field(..., ge=1, le=10000)
    unit_price: float = Field(..., ge=0)
    discount: float = Field(0.0, ge=0)
    notes: Optional[str] = Field(None, max_length=500)


class CreateSalesOrderBody(RequestSchema):
    order_number: str = Field(..., min_length=1, max_length=50)
    customer_id: str
    items: List[OrderItemBody] = Field(..., min_length=1, max_length=100)
    discount: float = Field(0.0, ge=0)
    notes: Optional[str] = Field(None, max_length=1000)
    status: str = "PENDING"


class CancelOrderBody(RequestSchema):
    reason: Optional[str] = Field(None, max_length=500)


class OrderStatusBody(RequestSchema):
    status: str


class CreatePromotionBody(RequestSchema):
    variant_id: str
    name: str = Field(..., min_length=1, max_length=128)
    discount_type: str
    discount_value: float = Field(..., ge=0)
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    notes: Optional[str] = Field(None, max_length=1000)


class UpdatePromotionBody(RequestSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    discount_value: Optional[float] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = Field(None, max_length=1000)
