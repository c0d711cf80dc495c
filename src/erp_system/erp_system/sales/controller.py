from __future__ import annotations

from flask import Flask, request

from ..common.serialization import to_dto
from ..container import Container
from ..http.auth import current_principal
from ..http.payload import ok, page_params, paged, parse_body, query_bool
from ..rbac import permission_codes as perms
from .schemas import (
    CancelOrderBody,
    CreateCustomerBody,
    CreatePromotionBody,
    CreateSalesOrderBody,
    OrderItemBody,
    OrderStatusBody,
    UpdateCustomerBody,
    UpdatePromotionBody,
)
from .service import NewOrderItem


def order_dto(order) -> dict:
    out = to_dto(order, extra={"total_price": order.total_price, "final_price": order.final_price})
    out["items"] = [to_dto(item, extra={"total_price": item.total_price}) for item in order.items]
    return out


def promotion_dto(promotion) -> dict:
    return to_dto(
        promotion,
        extra={
            "is_currently_valid": promotion.is_currently_valid(),
            "is_expired": promotion.is_expired(),
            "is_upcoming": promotion.is_upcoming(),
        },
    )


def _order_item(body: OrderItemBody) -> NewOrderItem:
    return NewOrderItem(**body.model_dump())


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    customers = container.customer_service
    orders = container.sales_order_service
    promotions = container.promotion_service

    # customers
    @app.route("/v1/sales/customers", methods=["POST"], endpoint="create_customer")
    @guards.permission(perms.SALES_CUSTOMERS_MANAGE)
    def create_customer():
        body = parse_body(CreateCustomerBody)
        principal = current_principal()
        customer = customers.create_customer(
            tenant_id=principal.tenant_id, created_by=principal.user_id, **body.model_dump()
        )
        return ok(customer, status=201)

    @app.route("/v1/sales/customers", methods=["GET"], endpoint="list_customers")
    @guards.permission(perms.SALES_CUSTOMERS_READ)
    def list_customers():
        page = customers.list_customers(
            tenant_id=current_principal().tenant_id,
            params=page_params(),
            search=request.args.get("search"),
            type=request.args.get("type"),
        )
        return paged(page)

    @app.route("/v1/sales/customers/<customer_id>", methods=["GET"], endpoint="get_customer")
    @guards.permission(perms.SALES_CUSTOMERS_READ)
    def get_customer(customer_id: str):
        return ok(customers.get_customer(tenant_id=current_principal().tenant_id, customer_id=customer_id))

    @app.route("/v1/sales/customers/<customer_id>", methods=["PATCH"], endpoint="update_customer")
    @guards.permission(perms.SALES_CUSTOMERS_MANAGE)
    def update_customer(customer_id: str):
        body = parse_body(UpdateCustomerBody)
        principal = current_principal()
        customer = customers.update_customer(
            tenant_id=principal.tenant_id, customer_id=customer_id, changes=body.changes(), updated_by=principal.user_id
        )
        return ok(customer)

    @app.route("/v1/sales/customers/<customer_id>", methods=["DELETE"], endpoint="delete_customer")
    @guards.permission(perms.SALES_CUSTOMERS_MANAGE)
    def delete_customer(customer_id: str):
        principal = current_principal()
        customers.delete_customer(tenant_id=principal.tenant_id, customer_id=customer_id, deleted_by=principal.user_id)
        return "", 204

    # orders
    @app.route("/v1/sales/orders", methods=["POST"], endpoint="create_sales_order")
    @guards.permission(perms.SALES_ORDERS_MANAGE)
    def create_sales_order():
        body = parse_body(CreateSalesOrderBody)
        principal = current_principal()
        order = orders.create_sales_order(
            tenant_id=principal.tenant_id,
            order_number=body.order_number,
            customer_id=body.customer_id,
            items=[_order_item(item) for item in body.items],
            discount=body.discount,
            notes=body.notes,
            status=body.status,
            created_by=principal.user_id,
        )
        return ok(order, order_dto, status=201)

    @app.route("/v1/sales/orders", methods=["GET"], endpoint="list_sales_orders")
    @guards.permission(perms.SALES_ORDERS_READ)
    def list_sales_orders():
        page = orders.list_sales_orders(
            tenant_id=current_principal().tenant_id,
            params=page_params(),
            status=request.args.get("status"),
            customer_id=request.args.get("customerId"),
        )
        return paged(page, order_dto)

    @app.route("/v1/sales/orders/<order_id>", methods=["GET"], endpoint="get_sales_order")
    @guards.permission(perms.SALES_ORDERS_READ)
    def get_sales_order(order_id: str):
        return ok(orders.get_sales_order(tenant_id=current_principal().tenant_id, order_id=order_id), order_dto)

    @app.route("/v1/sales/orders/<order_id>", methods=["DELETE"], endpoint="delete_sales_order")
    @guards.permission(perms.SALES_ORDERS_MANAGE)
    def delete_sales_order(order_id: str):
        principal = current_principal()
        orders.delete_sales_order(tenant_id=principal.tenant_id, order_id=order_id, deleted_by=principal.user_id)
        return "", 204

    @app.route("/v1/sales/orders/<order_id>/confirm", methods=["PATCH"], endpoint="confirm_sales_order")
    @guards.permission(perms.SALES_ORDERS_MANAGE)
    def confirm_sales_order(order_id: str):
        principal = current_principal()
        order = orders.confirm_sales_order(tenant_id=principal.tenant_id, order_id=order_id, user_id=principal.user_id)
        return ok(order, order_dto)

    @app.route("/v1/sales/orders/<order_id>/cancel", methods=["PATCH"], endpoint="cancel_sales_order")
    @guards.permission(perms.SALES_ORDERS_MANAGE)
    def cancel_sales_order(order_id: str):
        body = parse_body(CancelOrderBody)
        principal = current_principal()
        order = orders.cancel_sales_order(
            tenant_id=principal.tenant_id, order_id=order_id, reason=body.reason, user_id=principal.user_id
        )
        return ok(order, order_dto)

    @app.route("/v1/sales/orders/<order_id>/status", methods=["PATCH"], endpoint="update_sales_order_status")
    @guards.permission(perms.SALES_ORDERS_MANAGE)
    def update_sales_order_status(order_id: str):
        body = parse_body(OrderStatusBody)
        principal = current_principal()
        order = orders.update_sales_order_status(
            tenant_id=principal.tenant_id, order_id=order_id, status=body.status, user_id=principal.user_id
        )
        return ok(order, order_dto)

    @app.route("/v1/sales/orders/<order_id>/items", methods=["POST"], endpoint="add_sales_order_item")
    @guards.permission(perms.SALES_ORDERS_MANAGE)
    def add_sales_order_item(order_id: str):
        body = parse_body(OrderItemBody)
        principal = current_principal()
        order = orders.add_sales_order_item(
            tenant_id=principal.tenant_id, order_id=order_id, item=_order_item(body), user_id=principal.user_id
        )
        return ok(order, order_dto, status=201)

    @app.route("/v1/sales/orders/<order_id>/items/<item_id>", methods=["DELETE"], endpoint="remove_sales_order_item")
    @guards.permission(perms.SALES_ORDERS_MANAGE)
    def remove_sales_order_item(order_id: str, item_id: str):
        principal = current_principal()
        order = orders.remove_sales_order_item(
            tenant_id=principal.tenant_id, order_id=order_id, item_id=item_id, user_id=principal.user_id
        )
        return ok(order, order_dto)

    # promotions
    @app.route("/v1/sales/promotions", methods=["POST"], endpoint="create_variant_promotion")
    @guards.permission(perms.SALES_PROMOTIONS_MANAGE)
    def create_variant_promotion():
        body = parse_body(CreatePromotionBody)
        principal = current_principal()
        promotion = promotions.create_variant_promotion(
            tenant_id=principal.tenant_id, created_by=principal.user_id, **body.model_dump()
        )
        return ok(promotion, promotion_dto, status=201)

    @app.route("/v1/sales/promotions", methods=["GET"], endpoint="list_variant_promotions")
    @guards.permission(perms.SALES_ORDERS_READ)
    def list_variant_promotions():
        page = promotions.list_variant_promotions(
            tenant_id=current_principal().tenant_id,
            params=page_params(),
            variant_id=request.args.get("variantId"),
            active_only=query_bool("activeOnly"),
        )
        return paged(page, promotion_dto)

    @app.route("/v1/sales/promotions/<promotion_id>", methods=["GET"], endpoint="get_variant_promotion")
    @guards.permission(perms.SALES_ORDERS_READ)
    def get_variant_promotion(promotion_id: str):
        promotion = promotions.get_variant_promotion(tenant_id=current_principal().tenant_id, promotion_id=promotion_id)
        return ok(promotion, promotion_dto)

    @app.route("/v1/sales/promotions/<promotion_id>", methods=["PATCH"], endpoint="update_variant_promotion")
    @guards.permission(perms.SALES_PROMOTIONS_MANAGE)
    def update_variant_promotion(promotion_id: str):
        body = parse_body(UpdatePromotionBody)
        principal = current_principal()
        promotion = promotions.update_variant_promotion(
            tenant_id=principal.tenant_id,
            promotion_id=promotion_id,
            changes=body.changes(),
            updated_by=principal.user_id,
        )
        return ok(promotion, promotion_dto)

    @app.route("/v1/sales/promotions/<promotion_id>", methods=["DELETE"], endpoint="delete_variant_promotion")
    @guards.permission(perms.SALES_PROMOTIONS_MANAGE)
    def delete_variant_promotion(promotion_id: str):
        principal = current_principal()
        promotions.delete_variant_promotion(
            tenant_id=principal.tenant_id, promotion_id=promotion_id, deleted_by=principal.user_id
        )
        return "", 204

    @app.route("/v1/sales/variants/<variant_id>/best-price", methods=["GET"], endpoint="get_best_price")
    @guards.permission(perms.SALES_ORDERS_READ)
    def get_best_price(variant_id: str):
        return promotions.get_best_price(tenant_id=current_principal().tenant_id, variant_id=variant_id)
