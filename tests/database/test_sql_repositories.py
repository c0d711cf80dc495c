from __future__ import annotations

from datetime import date

import pytest

from erp_system.audit.model import AuditAction, AuditEntity
from erp_system.common.pagination import PageParams
from erp_system.config import load_settings
from erp_system.container import build_container, sql_repositories
from erp_system.core.exceptions import ConflictError
from erp_system.database.bootstrap import list_tables
from erp_system.database.tables import ItemRow
from erp_system.employees.service import NewEmployee
from erp_system.infrastructure.storage import LocalFileStorage
from erp_system.sales.model import OrderStatus
from erp_system.sales.service import NewOrderItem
from erp_system.stock.model import ItemStatus


@pytest.fixture
def sql_container(database, tmp_path):
    return build_container(
        load_settings("erp_system.config.testing"),
        sql_repositories(database),
        database=database,
        storage=LocalFileStorage(str(tmp_path)),
    )


@pytest.fixture
def sql_tenant(sql_container):
    return sql_container.tenant_service.create_tenant(name="Acme")


def test_schema_has_every_table(database):
    tables = list_tables(database)
    for name in ("tenants", "users", "audit_logs", "sales_orders", "bins", "finance_entries"):
        assert name in tables


def test_rows_are_scoped_by_tenant(sql_container, sql_tenant):
    other = sql_container.tenant_service.create_tenant(name="Globex")
    employee = sql_container.employee_service.create_employee(
        tenant_id=sql_tenant.id,
        data=NewEmployee(
            registration_number="001", full_name="Ana", cpf="123.456.789-09", hire_date=date(2020, 1, 1), base_salary=3000
        ),
    )
    repo = sql_container.repos.employees
    assert repo.get_by_id(tenant_id=sql_tenant.id, employee_id=employee.id).cpf == "12345678909"
    assert repo.get_by_id(tenant_id=other.id, employee_id=employee.id) is None
    with pytest.raises(ConflictError):
        sql_container.employee_service.create_employee(
            tenant_id=sql_tenant.id,
            data=NewEmployee(
                registration_number="002", full_name="Bia", cpf="12345678909", hire_date=date(2021, 1, 1), base_salary=1
            ),
        )


def test_sales_order_lines_survive_round_trip(sql_container, sql_tenant):
    tenant_id = sql_tenant.id
    variant = sql_container.item_service.create_variant(
        tenant_id=tenant_id, product_name="Coffee", sku="COF-1", name="Coffee 1kg", price=30
    )
    customer = sql_container.customer_service.create_customer(tenant_id=tenant_id, name="Padaria")
    orders = sql_container.sales_order_service
    order = orders.create_sales_order(
        tenant_id=tenant_id,
        order_number="SO-1",
        customer_id=customer.id,
        items=[NewOrderItem(variant.id, 2, 30.0, notes="ground")],
    )
    orders.add_sales_order_item(tenant_id=tenant_id, order_id=order.id, item=NewOrderItem(variant.id, 1, 25.5))

    loaded = orders.get_sales_order(tenant_id=tenant_id, order_id=order.id)
    assert [(i.quantity, i.unit_price, i.notes) for i in loaded.items] == [(2, 30.0, "ground"), (1, 25.5, None)]
    assert loaded.final_price == 85.5
    assert loaded.status is OrderStatus.PENDING

    orders.cancel_sales_order(tenant_id=tenant_id, order_id=order.id, reason="customer gave up")
    cancelled = orders.list_sales_orders(tenant_id=tenant_id, params=PageParams(), status="CANCELLED")
    assert [o.id for o in cancelled.items] == [order.id]


def test_audit_metadata_and_signatures_persist(sql_container, sql_tenant):
    tenant_id = sql_tenant.id
    customer = sql_container.customer_service.create_customer(tenant_id=tenant_id, name="Padaria")
    sql_container.customer_service.update_customer(
        tenant_id=tenant_id, customer_id=customer.id, changes={"city": "Recife"}
    )
    sql_container.audit_service.log(
        tenant_id=tenant_id,
        action=AuditAction.EXPORT,
        entity=AuditEntity.CUSTOMER,
        entity_id=customer.id,
        metadata={"format": "csv", "token": "abc"},
    )

    history = sql_container.audit_service.get_entity_history(
        tenant_id=tenant_id, entity=AuditEntity.CUSTOMER, entity_id=customer.id
    )
    assert len(history) == 3
    exported = next(log for log in history if log.action is AuditAction.EXPORT)
    assert exported.metadata["format"] == "csv"
    assert exported.metadata["token"] != "abc"
    assert sql_container.audit_service.verify_integrity(tenant_id=tenant_id).valid


def test_zone_reconfiguration_on_sql(sql_container, sql_tenant):
    tenant_id = sql_tenant.id
    locations = sql_container.location_service
    warehouse = locations.create_warehouse(tenant_id=tenant_id, code="WH1", name="Main")
    zone = locations.create_zone(tenant_id=tenant_id, warehouse_id=warehouse.id, code="A", name="Picking")
    first = locations.configure_zone_structure(
        tenant_id=tenant_id, zone_id=zone.id, structure={"aisles": 1, "shelvesPerAisle": 2, "binsPerShelf": 2}
    )
    assert first.bins_created == 4

    bins = locations.list_bins(tenant_id=tenant_id, params=PageParams(), zone_id=zone.id).items
    last = bins[-1]
    assert last.address == "WH1-A-01-02-B"
    variant = sql_container.item_service.create_variant(tenant_id=tenant_id, product_name="Box", sku="BX", name="Box")
    item = sql_container.item_service.register_item_entry(
        tenant_id=tenant_id, variant_id=variant.id, bin_id=last.id, quantity=2
    )
    assert sql_container.repos.items.count_items_per_bin(tenant_id=tenant_id, bin_ids=[b.id for b in bins]) == {
        last.id: 1
    }

    second = locations.configure_zone_structure(
        tenant_id=tenant_id, zone_id=zone.id, structure={"aisles": 1, "shelvesPerAisle": 1, "binsPerShelf": 2}
    )
    assert second.summary() == {
        "binsCreated": 0,
        "binsPreserved": 2,
        "binsUpdated": 0,
        "binsDeleted": 1,
        "binsBlocked": 1,
    }
    blocked = locations.list_bins(tenant_id=tenant_id, params=PageParams(), is_blocked=True).items
    assert [b.id for b in blocked] == [last.id]
    assert locations.get_zone(tenant_id=tenant_id, zone_id=zone.id).structure["shelvesPerAisle"] == 1

    sql_container.item_service.register_item_exit(
        tenant_id=tenant_id, item_id=item.id, quantity=2, movement_type="SALE"
    )
    assert sql_container.item_service.get_item(tenant_id=tenant_id, item_id=item.id).status is ItemStatus.SOLD


def test_deleted_user_keeps_username_and_email_reserved(sql_container, sql_tenant):
    users = sql_container.user_service
    alice = users.register_user(tenant_id=sql_tenant.id, username="alice", email="alice@acme.test", password="secret1")
    users.delete_user(tenant_id=sql_tenant.id, user_id=alice.id)

    with pytest.raises(ConflictError):
        users.register_user(tenant_id=sql_tenant.id, username="alice", email="other@acme.test", password="secret1")
    with pytest.raises(ConflictError):
        users.register_user(tenant_id=sql_tenant.id, username="alice2", email="ALICE@acme.test", password="secret1")
    assert sql_container.repos.users.get_by_username(tenant_id=sql_tenant.id, username="alice") is None


def test_deleted_group_keeps_its_slug_reserved(sql_container, sql_tenant):
    rbac = sql_container.rbac_service
    group = rbac.create_group(tenant_id=sql_tenant.id, name="Warehouse staff")
    rbac.delete_group(tenant_id=sql_tenant.id, group_id=group.id)

    with pytest.raises(ConflictError):
        rbac.create_group(tenant_id=sql_tenant.id, name="Warehouse staff")


def test_long_item_codes_are_stored_whole(sql_container, sql_tenant):
    tenant_id = sql_tenant.id
    locations = sql_container.location_service
    warehouse = locations.create_warehouse(tenant_id=tenant_id, code="WH1", name="Main")
    zone = locations.create_zone(tenant_id=tenant_id, warehouse_id=warehouse.id, code="A", name="Picking")
    locations.configure_zone_structure(
        tenant_id=tenant_id, zone_id=zone.id, structure={"aisles": 1, "shelvesPerAisle": 1, "binsPerShelf": 1}
    )
    bin = locations.list_bins(tenant_id=tenant_id, params=PageParams(), zone_id=zone.id).items[0]
    variant = sql_container.item_service.create_variant(tenant_id=tenant_id, product_name="Box", sku="BX", name="Box")

    code = "SN-" + "7" * 125
    item = sql_container.item_service.register_item_entry(
        tenant_id=tenant_id, variant_id=variant.id, bin_id=bin.id, quantity=1, unique_code=code
    )
    assert ItemRow.__table__.c.unique_code.type.length >= 128
    assert sql_container.item_service.get_item(tenant_id=tenant_id, item_id=item.id).unique_code == code
