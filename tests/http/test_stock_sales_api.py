from __future__ import annotations

import pytest


@pytest.fixture
def zone(client, admin_headers):
    warehouse = client.post("/v1/stock/warehouses", json={"code": "wh1", "name": "Main"}, headers=admin_headers)
    assert warehouse.status_code == 201, warehouse.get_json()
    assert warehouse.get_json()["code"] == "WH1"
    zone = client.post(
        f"/v1/stock/warehouses/{warehouse.get_json()['id']}/zones",
        json={"code": "A", "name": "Picking"},
        headers=admin_headers,
    )
    assert zone.status_code == 201, zone.get_json()
    return zone.get_json()


@pytest.fixture
def variant(client, admin_headers):
    response = client.post(
        "/v1/stock/variants",
        json={"productName": "Coffee", "sku": "COF-1", "name": "Coffee 1kg", "price": 50},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_configure_zone_and_store_an_item(client, admin_headers, zone, variant):
    structure = {"aisles": 1, "shelvesPerAisle": 2, "binsPerShelf": 2}
    preview = client.post(
        f"/v1/stock/zones/{zone['id']}/structure/preview", json={"structure": structure}, headers=admin_headers
    )
    assert preview.status_code == 200

    configured = client.post(
        f"/v1/stock/zones/{zone['id']}/structure", json={"structure": structure}, headers=admin_headers
    ).get_json()
    assert configured["binsCreated"] == 4
    assert configured["zone"]["structure"]["shelvesPerAisle"] == 2

    bins = client.get(f"/v1/stock/bins?zoneId={zone['id']}", headers=admin_headers).get_json()
    assert [b["address"] for b in bins["data"]] == ["WH1-A-01-01-A", "WH1-A-01-01-B", "WH1-A-01-02-A", "WH1-A-01-02-B"]
    first = bins["data"][0]
    assert first["isAvailable"] is True

    entry = client.post(
        "/v1/stock/items/entry",
        json={"variantId": variant["id"], "binId": first["id"], "quantity": 3},
        headers=admin_headers,
    )
    assert entry.status_code == 201, entry.get_json()
    assert entry.get_json()["binId"] == first["id"]

    blocked = client.patch(f"/v1/stock/bins/{first['id']}/block", json={"reason": "Inventory"}, headers=admin_headers)
    assert blocked.get_json()["isBlocked"] is True


def test_bad_structure_is_rejected(client, admin_headers, zone):
    response = client.post(
        f"/v1/stock/zones/{zone['id']}/structure",
        json={"structure": {"aisles": 1, "shelvesPerAisle": 1, "binsPerShelf": 27}},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_sales_order_flow(client, admin_headers, variant):
    customer = client.post("/v1/sales/customers", json={"name": "Padaria"}, headers=admin_headers).get_json()
    order = client.post(
        "/v1/sales/orders",
        json={
            "orderNumber": "SO-1",
            "customerId": customer["id"],
            "items": [{"variantId": variant["id"], "quantity": 2, "unitPrice": 50}],
            "discount": 10,
        },
        headers=admin_headers,
    )
    assert order.status_code == 201, order.get_json()
    body = order.get_json()
    assert body["totalPrice"] == 100
    assert body["finalPrice"] == 90
    assert body["items"][0]["totalPrice"] == 100

    confirmed = client.patch(f"/v1/sales/orders/{body['id']}/confirm", headers=admin_headers)
    assert confirmed.get_json()["status"] == "CONFIRMED"
    again = client.patch(f"/v1/sales/orders/{body['id']}/confirm", headers=admin_headers)
    assert again.status_code == 400

    listed = client.get("/v1/sales/orders?status=CONFIRMED", headers=admin_headers).get_json()
    assert [o["orderNumber"] for o in listed["data"]] == ["SO-1"]


def test_cancel_accepts_an_empty_body(client, admin_headers, variant):
    customer = client.post("/v1/sales/customers", json={"name": "Padaria"}, headers=admin_headers).get_json()
    order = client.post(
        "/v1/sales/orders",
        json={
            "orderNumber": "SO-2",
            "customerId": customer["id"],
            "items": [{"variantId": variant["id"], "quantity": 1, "unitPrice": 50}],
        },
        headers=admin_headers,
    ).get_json()
    cancelled = client.patch(f"/v1/sales/orders/{order['id']}/cancel", headers=admin_headers)
    assert cancelled.status_code == 200
    assert cancelled.get_json()["status"] == "CANCELLED"
