from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, or_

from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import CustomerRow, SalesOrderRow, VariantPromotionRow
from .model import Customer, CustomerType, OrderStatus, SalesOrder, SalesOrderItem, VariantPromotion


class SqlCustomerRepository(SqlRepository[Customer]):
    entity_cls = Customer
    table_cls = CustomerRow

    def save(self, customer: Customer) -> Customer:
        return self._save(customer)

    def get_by_id(self, *, tenant_id: str, customer_id: str) -> Optional[Customer]:
        return self._get(customer_id, tenant_id=tenant_id)

    def get_by_document(self, *, tenant_id: str, document: str) -> Optional[Customer]:
        return self._first(CustomerRow.document == document, tenant_id=tenant_id)

    def get_by_email(self, *, tenant_id: str, email: str) -> Optional[Customer]:
        return self._first(func.lower(CustomerRow.email) == email.lower(), tenant_id=tenant_id)

    def list_page(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        search: Optional[str] = None,
        type: Optional[CustomerType] = None,
    ) -> Tuple[List[Customer], int]:
        criteria = []
        if type is not None:
            criteria.append(CustomerRow.type == type)
        if search:
            pattern = f"%{search}%"
            criteria.append(or_(CustomerRow.name.ilike(pattern), CustomerRow.document.ilike(pattern)))
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[CustomerRow.name])


class SqlSalesOrderRepository(SqlRepository[SalesOrder]):
    """Order lines are stored as a JSON list on the order row."""

    entity_cls = SalesOrder
    table_cls = SalesOrderRow

    def _to_entity(self, row) -> SalesOrder:
        order = super()._to_entity(row)
        order.items = [SalesOrderItem.from_dict(data) for data in (row.items or [])]
        return order

    def _apply(self, row, entity: SalesOrder) -> None:
        super()._apply(row, entity)
        row.items = [item.to_dict() for item in entity.items]

    def save(self, order: SalesOrder) -> SalesOrder:
        return self._save(order)

    def get_by_id(self, *, tenant_id: str, order_id: str) -> Optional[SalesOrder]:
        return self._get(order_id, tenant_id=tenant_id)

    def get_by_order_number(self, *, tenant_id: str, order_number: str) -> Optional[SalesOrder]:
        return self._first(SalesOrderRow.order_number == order_number, tenant_id=tenant_id, include_deleted=True)

    def list_page(
        self,
        *,
        tenant_id: str,
        params: PageParams,
        status: Optional[OrderStatus] = None,
        customer_id: Optional[str] = None,
    ) -> Tuple[List[SalesOrder], int]:
        criteria = []
        if status is not None:
            criteria.append(SalesOrderRow.status == status)
        if customer_id:
            criteria.append(SalesOrderRow.customer_id == customer_id)
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[SalesOrderRow.created_at.desc()])


class SqlVariantPromotionRepository(SqlRepository[VariantPromotion]):
    entity_cls = VariantPromotion
    table_cls = VariantPromotionRow

    def save(self, promotion: VariantPromotion) -> VariantPromotion:
        return self._save(promotion)

    def get_by_id(self, *, tenant_id: str, promotion_id: str) -> Optional[VariantPromotion]:
        return self._get(promotion_id, tenant_id=tenant_id)

    def list_by_variant(self, *, tenant_id: str, variant_id: str) -> List[VariantPromotion]:
        return self._find(
            VariantPromotionRow.variant_id == variant_id,
            tenant_id=tenant_id,
            order_by=[VariantPromotionRow.start_date],
        )

    def list_page(
        self, *, tenant_id: str, params: PageParams, variant_id: Optional[str] = None, active_only: bool = False
    ) -> Tuple[List[VariantPromotion], int]:
        criteria = []
        if variant_id:
            criteria.append(VariantPromotionRow.variant_id == variant_id)
        if active_only:
            criteria.append(VariantPromotionRow.is_active.is_(True))
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[VariantPromotionRow.start_date.desc()])
