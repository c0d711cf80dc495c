from __future__ import annotations

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import BadRequestError, ConflictError, ResourceNotFoundError, ValidationError
from erp_system.sales.model import OrderStatus
from erp_system.sales.service import NewOrderItem


def create_order(container, tenant, customer, variant, number="SO-1", **kwargs):
    items = kwargs.pop("items", None) or [NewOrderItem(variant_id=variant.id, quantity=2, unit_price=100, discount=10)]
    return container.sales_order_service.create_sales_order(
        tenant_id=tenant.id, order_number=number, customer_id=customer.id, items=items, **kwargs
    )


def test_order_totals(container, tenant, customer, variant):
    order = create_order(container, tenant, customer, variant, discount=15.5)
    assert order.status is OrderStatus.PENDING
    assert order.total_price == 190.0
    assert order.final_price == 174.5


def test_create_validation(container, tenant, customer, variant):
    create_order(container, tenant, customer, variant)
    with pytest.raises(ConflictError):
        create_order(container, tenant, customer, variant)
    with pytest.raises(ResourceNotFoundError):
        create_order(
            container, tenant, customer, variant, number="SO-2", items=[NewOrderItem("ghost", 1, 10)]
        )
    with pytest.raises(ValidationError):
        create_order(container, tenant, customer, variant, number="SO-3", items=[NewOrderItem(variant.id, 0, 10)])
    with pytest.raises(ValidationError):
        create_order(container, tenant, customer, variant, number="SO-4", status="DELIVERED")


def test_lifecycle(container, tenant, customer, variant):
    orders = container.sales_order_service
    order = create_order(container, tenant, customer, variant)

    confirmed = orders.confirm_sales_order(tenant_id=tenant.id, order_id=order.id)
    assert confirmed.status is OrderStatus.CONFIRMED
    with pytest.raises(BadRequestError):
        orders.confirm_sales_order(tenant_id=tenant.id, order_id=order.id)
    with pytest.raises(BadRequestError):
        orders.update_sales_order_status(tenant_id=tenant.id, order_id=order.id, status="DELIVERED")

    orders.update_sales_order_status(tenant_id=tenant.id, order_id=order.id, status="in_transit")
    delivered = orders.update_sales_order_status(tenant_id=tenant.id, order_id=order.id, status="DELIVERED")
    assert delivered.status is OrderStatus.DELIVERED
    with pytest.raises(BadRequestError):
        orders.cancel_sales_order(tenant_id=tenant.id, order_id=order.id, reason="late")
    with pytest.raises(BadRequestError):
        orders.delete_sales_order(tenant_id=tenant.id, order_id=order.id)


def test_items_only_change_while_pending(container, tenant, customer, variant):
    orders = container.sales_order_service
    order = create_order(container, tenant, customer, variant)

    grown = orders.add_sales_order_item(
        tenant_id=tenant.id, order_id=order.id, item=NewOrderItem(variant.id, 1, 50.0)
    )
    assert grown.total_price == 240.0
    first_line = grown.items[0].id
    shrunk = orders.remove_sales_order_item(tenant_id=tenant.id, order_id=order.id, item_id=first_line)
    assert [i.quantity for i in shrunk.items] == [1]
    with pytest.raises(BadRequestError):
        orders.remove_sales_order_item(tenant_id=tenant.id, order_id=order.id, item_id=shrunk.items[0].id)

    orders.confirm_sales_order(tenant_id=tenant.id, order_id=order.id)
    with pytest.raises(BadRequestError):
        orders.add_sales_order_item(tenant_id=tenant.id, order_id=order.id, item=NewOrderItem(variant.id, 1, 5))


def test_cancel_delete_and_list(container, tenant, customer, variant):
    orders = container.sales_order_service
    kept = create_order(container, tenant, customer, variant, number="SO-1")
    dropped = create_order(container, tenant, customer, variant, number="SO-2", status="DRAFT")

    orders.cancel_sales_order(tenant_id=tenant.id, order_id=dropped.id, reason="duplicate")
    orders.delete_sales_order(tenant_id=tenant.id, order_id=dropped.id)

    page = orders.list_sales_orders(tenant_id=tenant.id, params=PageParams(), customer_id=customer.id)
    assert [o.id for o in page.items] == [kept.id]
    # deleted order numbers stay reserved
    with pytest.raises(ConflictError):
        create_order(container, tenant, customer, variant, number="SO-2")
