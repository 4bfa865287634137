"""
Tests for checkout, order visibility and the status workflow.

Prices come from the ``marketplace`` fixture: burger 12.50, fries 4.00.
"""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select

import helpers
from app.models.order import OrderItem
from helpers import auth

pytestmark = pytest.mark.asyncio


async def test_checkout_totals_below_free_delivery(async_client: AsyncClient, marketplace):
    m = marketplace
    order = await helpers.place_order(
        async_client, m.customer["token"], m.restaurant["id"], [(m.burger["id"], 2), (m.fries["id"], 1)]
    )
    assert order["status"] == "pending"
    assert order["totalAmount"] == 29.0
    assert order["deliveryFee"] == 2.99
    assert order["tax"] == 2.32
    assert order["tip"] == 0
    assert order["grandTotal"] == pytest.approx(34.31)
    assert order["restaurant"]["name"] == "Bob's Burgers"
    assert order["deliveryAddress"]["city"] == "Springfield"
    assert order["estimatedDeliveryTime"] is not None

    lines = {line["name"]: line for line in order["items"]}
    assert lines["Burger"]["quantity"] == 2
    assert lines["Burger"]["price"] == 12.5

    assert len(order["trackingUpdates"]) == 1
    first = order["trackingUpdates"][0]
    assert first["sequence"] == 1
    assert first["status"] == "pending"
    assert first["message"] == "Order placed successfully"


async def test_checkout_free_delivery_and_tip(async_client: AsyncClient, marketplace):
    m = marketplace
    order = await helpers.place_order(
        async_client, m.customer["token"], m.restaurant["id"], [(m.burger["id"], 3)], tip=5
    )
    assert order["totalAmount"] == 37.5
    assert order["deliveryFee"] == 0
    assert order["tax"] == 3.0
    assert order["tip"] == 5
    assert order["grandTotal"] == pytest.approx(45.5)


async def test_checkout_with_saved_address(async_client: AsyncClient, marketplace):
    m = marketplace
    headers = auth(m.customer["token"])
    saved = await async_client.post("/api/users/me/addresses", json=helpers.inline_address(), headers=headers)
    address_id = saved.json()["data"]["id"]

    resp = await async_client.post(
        "/api/orders",
        json={
            "restaurantId": m.restaurant["id"],
            "items": [{"menuItemId": m.fries["id"], "quantity": 1}],
            "deliveryAddressId": address_id,
            "paymentMethodType": "cash",
        },
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["deliveryAddress"]["id"] == address_id


async def test_checkout_with_someone_elses_address(async_client: AsyncClient, marketplace):
    m = marketplace
    saved = await async_client.post(
        "/api/users/me/addresses", json=helpers.inline_address(), headers=auth(m.owner["token"])
    )
    resp = await async_client.post(
        "/api/orders",
        json={
            "restaurantId": m.restaurant["id"],
            "items": [{"menuItemId": m.fries["id"], "quantity": 1}],
            "deliveryAddressId": saved.json()["data"]["id"],
            "paymentMethodType": "cash",
        },
        headers=auth(m.customer["token"]),
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Delivery address not found"


async def test_checkout_needs_exactly_one_address(async_client: AsyncClient, marketplace):
    m = marketplace
    resp = await async_client.post(
        "/api/orders",
        json={
            "restaurantId": m.restaurant["id"],
            "items": [{"menuItemId": m.fries["id"], "quantity": 1}],
            "paymentMethodType": "cash",
        },
        headers=auth(m.customer["token"]),
    )
    assert resp.status_code == 400


async def test_checkout_rejects_empty_cart_and_bad_quantity(async_client: AsyncClient, marketplace):
    m = marketplace
    base = {
        "restaurantId": m.restaurant["id"],
        "deliveryAddress": helpers.inline_address(),
        "paymentMethodType": "cash",
    }
    resp = await async_client.post(
        "/api/orders", json={**base, "items": []}, headers=auth(m.customer["token"])
    )
    assert resp.status_code == 400
    resp = await async_client.post(
        "/api/orders",
        json={**base, "items": [{"menuItemId": m.fries["id"], "quantity": 0}]},
        headers=auth(m.customer["token"]),
    )
    assert resp.status_code == 400


async def test_checkout_rejects_unavailable_item(async_client: AsyncClient, marketplace):
    m = marketplace
    await async_client.patch(f"/api/menu/items/{m.fries['id']}/toggle", headers=auth(m.owner["token"]))
    resp = await async_client.post(
        "/api/orders",
        json={
            "restaurantId": m.restaurant["id"],
            "items": [{"menuItemId": m.fries["id"], "quantity": 1}],
            "deliveryAddress": helpers.inline_address(),
            "paymentMethodType": "cash",
        },
        headers=auth(m.customer["token"]),
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Menu item not found or unavailable"


async def test_checkout_rejects_item_from_other_restaurant(async_client: AsyncClient, marketplace):
    m = marketplace
    await helpers.create_restaurant(async_client, m.rival["token"], name="Carol's Cafe")
    cat = await helpers.create_category(async_client, m.rival["token"])
    latte = await helpers.create_item(async_client, m.rival["token"], cat["id"], name="Latte", price=4.5)

    resp = await async_client.post(
        "/api/orders",
        json={
            "restaurantId": m.restaurant["id"],
            "items": [{"menuItemId": latte["id"], "quantity": 1}],
            "deliveryAddress": helpers.inline_address(),
            "paymentMethodType": "cash",
        },
        headers=auth(m.customer["token"]),
    )
    assert resp.status_code == 400


async def test_checkout_unknown_restaurant(async_client: AsyncClient, marketplace):
    m = marketplace
    resp = await async_client.post(
        "/api/orders",
        json={
            "restaurantId": str(uuid.uuid4()),
            "items": [{"menuItemId": m.fries["id"], "quantity": 1}],
            "deliveryAddress": helpers.inline_address(),
            "paymentMethodType": "cash",
        },
        headers=auth(m.customer["token"]),
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Restaurant not found or inactive"


async def test_status_workflow_scenario(async_client: AsyncClient, marketplace):
    """Owner walks the order forward; customers and skips are refused."""
    m = marketplace
    order = await helpers.place_order(
        async_client, m.customer["token"], m.restaurant["id"], [(m.burger["id"], 1)]
    )
    oid = order["id"]

    resp = await helpers.set_status(async_client, m.owner["token"], oid, "confirmed")
    assert resp.status_code == 200
    resp = await helpers.set_status(async_client, m.owner["token"], oid, "preparing", message="On the grill")
    assert resp.status_code == 200
    assert resp.json()["data"]["trackingUpdates"][-1]["message"] == "On the grill"

    resp = await helpers.set_status(async_client, m.customer["token"], oid, "pending")
    assert resp.status_code == 403

    resp = await helpers.set_status(async_client, m.owner["token"], oid, "picked_up")
    assert resp.status_code == 409
    body = resp.json()
    assert body["message"] == "Cannot change order status from preparing to picked_up"
    assert "ready_for_pickup" in body["error"]

    resp = await helpers.set_status(async_client, m.owner["token"], oid, "pending")
    assert resp.status_code == 409

    for status in ("ready_for_pickup", "picked_up", "on_the_way"):
        resp = await helpers.set_status(async_client, m.owner["token"], oid, status)
        assert resp.status_code == 200
    resp = await helpers.set_status(
        async_client, m.owner["token"], oid, "delivered", latitude=39.78, longitude=-89.65
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "delivered"
    assert data["actualDeliveryTime"] is not None

    history = data["trackingUpdates"]
    assert [u["sequence"] for u in history] == [1, 2, 3, 4, 5, 6, 7]
    assert [u["status"] for u in history] == [
        "pending", "confirmed", "preparing", "ready_for_pickup", "picked_up", "on_the_way", "delivered",
    ]
    assert history[-1]["latitude"] == 39.78

    resp = await helpers.set_status(async_client, m.owner["token"], oid, "cancelled")
    assert resp.status_code == 409
    assert resp.json()["error"] == "Order is already delivered"


async def test_cancelled_is_terminal(async_client: AsyncClient, marketplace):
    m = marketplace
    order = await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])

    resp = await helpers.set_status(async_client, m.owner["token"], order["id"], "cancelled")
    assert resp.status_code == 200
    assert resp.json()["data"]["trackingUpdates"][-1]["message"] == "Order cancelled"

    resp = await helpers.set_status(async_client, m.owner["token"], order["id"], "confirmed")
    assert resp.status_code == 409


async def test_rival_owner_cannot_update_status(async_client: AsyncClient, marketplace):
    m = marketplace
    order = await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])
    await helpers.create_restaurant(async_client, m.rival["token"], name="Carol's Cafe")

    resp = await helpers.set_status(async_client, m.rival["token"], order["id"], "confirmed")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Not authorized to update this order"


async def test_admin_can_move_any_order(async_client: AsyncClient, marketplace, admin_token):
    m = marketplace
    order = await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])
    resp = await helpers.set_status(async_client, admin_token, order["id"], "confirmed")
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "confirmed"


async def test_status_unknown_order_and_bad_value(async_client: AsyncClient, marketplace):
    m = marketplace
    resp = await helpers.set_status(async_client, m.owner["token"], str(uuid.uuid4()), "confirmed")
    assert resp.status_code == 404

    order = await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])
    resp = await helpers.set_status(async_client, m.owner["token"], order["id"], "teleported")
    assert resp.status_code == 400


async def test_order_visibility(async_client: AsyncClient, marketplace, admin_token):
    m = marketplace
    order = await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])
    url = f"/api/orders/{order['id']}"

    for token in (m.customer["token"], m.owner["token"], admin_token):
        resp = await async_client.get(url, headers=auth(token))
        assert resp.status_code == 200

    stranger = await helpers.register(async_client, email="eve@example.com")
    for token in (stranger["token"], m.rival["token"]):
        resp = await async_client.get(url, headers=auth(token))
        assert resp.status_code == 404

    resp = await async_client.get(f"/api/orders/{uuid.uuid4()}", headers=auth(m.customer["token"]))
    assert resp.status_code == 404


async def test_order_history_and_status_filter(async_client: AsyncClient, marketplace):
    m = marketplace
    first = await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])
    await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.burger["id"], 1)])
    await helpers.set_status(async_client, m.owner["token"], first["id"], "confirmed")

    headers = auth(m.customer["token"])
    resp = await async_client.get("/api/orders", headers=headers)
    data = resp.json()["data"]
    assert data["pagination"]["total"] == 2

    resp = await async_client.get("/api/orders", params={"status": "confirmed"}, headers=headers)
    orders = resp.json()["data"]["orders"]
    assert [o["id"] for o in orders] == [first["id"]]

    stranger = await helpers.register(async_client, email="eve@example.com")
    resp = await async_client.get("/api/orders", headers=auth(stranger["token"]))
    assert resp.json()["data"]["orders"] == []


async def test_restaurant_order_list(async_client: AsyncClient, marketplace):
    m = marketplace
    await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])

    resp = await async_client.get("/api/restaurant/orders", headers=auth(m.owner["token"]))
    assert resp.status_code == 200
    orders = resp.json()["data"]["orders"]
    assert len(orders) == 1
    assert orders[0]["user"]["firstName"] == "Alice"

    await helpers.create_restaurant(async_client, m.rival["token"], name="Carol's Cafe")
    resp = await async_client.get("/api/restaurant/orders", headers=auth(m.rival["token"]))
    assert resp.json()["data"]["orders"] == []

    resp = await async_client.get("/api/restaurant/orders", headers=auth(m.customer["token"]))
    assert resp.status_code == 403


async def test_deleting_menu_item_keeps_order_lines(async_client: AsyncClient, marketplace, app):
    m = marketplace
    order = await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 2)])
    resp = await async_client.delete(f"/api/menu/items/{m.fries['id']}", headers=auth(m.owner["token"]))
    assert resp.status_code == 200

    resp = await async_client.get(f"/api/orders/{order['id']}", headers=auth(m.customer["token"]))
    assert resp.status_code == 200
    lines = resp.json()["data"]["items"]
    assert lines[0]["name"] == "Fries"
    assert lines[0]["price"] == 4.0
    assert lines[0]["menuItemId"] is None

    async with app.state.session_factory() as session:
        rows = (await session.execute(select(OrderItem))).scalars().all()
    assert len(rows) == 1
    assert rows[0].menu_item_id is None
