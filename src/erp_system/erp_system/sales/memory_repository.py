from __future__ import annotations

from typing import List, Optional, Tuple

from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import Customer, CustomerType, OrderStatus, SalesOrder, VariantPromotion


class InMemoryCustomerRepository(InMemoryRepository[Customer]):
    def save(self, customer: Customer) -> Customer:
        return self._save(customer)

    def get_by_id(self, *, tenant_id: str, customer_id: str) -> Optional[Customer]:
        return self._get(customer_id, tenant_id=tenant_id)

    def get_by_document(self, *, tenant_id: str, document: str) -> Optional[Customer]:
        return self._first(lambda c: c.document == document, tenant_id=tenant_id)

    def get_by_email(self, *, tenant_id: str, email: str) -> Optional[Customer]:
        return self._first(lambda c: (c.email or "").lower() == email.lower(), tenant_id=tenant_id)

    def list_page(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        search: Optional[str] = None,
        type: Optional[CustomerType] = None,
    ) -> Tuple[List[Customer], int]:
        needle = (search or "").lower()

        def matches(c: Customer) -> bool:
            if type is not None and c.type != type:
                return False
            if needle and needle not in c.name.lower() and needle not in (c.document or "").lower():
                return False
            return True

        return self._page(self._find(matches, tenant_id=tenant_id, sort_key=lambda c: c.name.lower()), params)


class InMemorySalesOrderRepository(InMemoryRepository[SalesOrder]):
    def save(self, order: SalesOrder) -> SalesOrder:
        return self._save(order)

    def get_by_id(self, *, tenant_id: str, order_id: str) -> Optional[SalesOrder]:
        return self._get(order_id, tenant_id=tenant_id)

    def get_by_order_number(self, *, tenant_id: str, order_number: str) -> Optional[SalesOrder]:
        return self._first(lambda o: o.order_number == order_number, tenant_id=tenant_id, include_deleted=True)

    def list_page(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        status: Optional[OrderStatus] = None,
        customer_id: Optional[str] = None,
    ) -> Tuple[List[SalesOrder], int]:
        found = self._find(
            lambda o: (status is None or o.status == status) and (customer_id is None or o.customer_id == customer_id),
            tenant_id=tenant_id,
            sort_key=lambda o: o.created_at,
            reverse=True,
        )
        return self._page(found, params)


class InMemoryVariantPromotionRepository(InMemoryRepository[VariantPromotion]):
    def save(self, promotion: VariantPromotion) -> VariantPromotion:
        return self._save(promotion)

    def get_by_id(self, *, tenant_id: str, promotion_id: str) -> Optional[VariantPromotion]:
        return self._get(promotion_id, tenant_id=tenant_id)

    def list_by_variant(self, *, tenant_id: str, variant_id: str) -> List[VariantPromotion]:
        return self._find(lambda p: p.variant_id == variant_id, tenant_id=tenant_id, sort_key=lambda p: p.start_date)

    def list_page(
        self, *, tenant_id: str, params: PageParams, variant_id: Optional[str] = None, active_only: bool = False
    ) -> Tuple[List[VariantPromotion], int]:
        found = self._find(
            lambda p: (variant_id is None or p.variant_id == variant_id) and (not active_only or p.is_active),
            tenant_id=tenant_id,
            sort_key=lambda p: p.start_date,
            reverse=True,
        )
        return self._page(found, params)
