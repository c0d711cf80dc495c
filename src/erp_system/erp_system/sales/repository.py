from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageParams
from .model import Customer, OrderStatus, SalesOrder, VariantPromotion


class CustomerRepository(Protocol):
    def save(self, customer: Customer) -> Customer:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, customer_id: str) -> Optional[Customer]:
        raise NotImplementedError

    def get_by_document(self, *, tenant_id: str, document: str) -> Optional[Customer]:
        raise NotImplementedError

    def get_by_email(self, *, tenant_id: str, email: str) -> Optional[Customer]:
        raise NotImplementedError

    def list_page(
        self, *, tenant_id: str, params: PageParams, search: Optional[str] = None, type=None
    ) -> Tuple[List[Customer], int]:
        raise NotImplementedError


class SalesOrderRepository(Protocol):
    def save(self, order: SalesOrder) -> SalesOrder:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, order_id: str) -> Optional[SalesOrder]:
        raise NotImplementedError

    def get_by_order_number(self, *, tenant_id: str, order_number: str) -> Optional[SalesOrder]:
        raise NotImplementedError

    def list_page(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        status: Optional[OrderStatus] = None,
        customer_id: Optional[str] = None,
    ) -> Tuple[List[SalesOrder], int]:
        raise NotImplementedError


class VariantPromotionRepository(Protocol):
    def save(self, promotion: VariantPromotion) -> VariantPromotion:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, promotion_id: str) -> Optional[VariantPromotion]:
        raise NotImplementedError

    def list_by_variant(self, *, tenant_id: str, variant_id: str) -> List[VariantPromotion]:
        raise NotImplementedError

    def list_page(
        self, *, tenant_id: str, params: PageParams, variant_id: Optional[str] = None, active_only: bool = False
    ) -> Tuple[List[VariantPromotion], int]:
        raise NotImplementedError
