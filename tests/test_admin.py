"""Tests for the admin dashboard endpoints."""

import uuid

import pytest
from httpx import AsyncClient

import helpers
from app.core.security import decode_access_token
from helpers import auth


@pytest.mark.asyncio
async def test_dashboard_stats(async_client: AsyncClient, marketplace, admin_token):
    m = marketplace
    delivered = await helpers.place_order(
        async_client, m.customer["token"], m.restaurant["id"], [(m.burger["id"], 2), (m.fries["id"], 1)]
    )
    await helpers.deliver(async_client, m.owner["token"], delivered["id"])
    cancelled = await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])
    await helpers.set_status(async_client, m.owner["token"], cancelled["id"], "cancelled")
    await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])

    resp = await async_client.get("/api/admin/stats", headers=auth(admin_token))
    assert resp.status_code == 200
    stats = resp.json()["data"]
    # customer, owner, rival and the admin
    assert stats["totalUsers"] == 4
    assert stats["activeUsers"] == 4
    assert stats["totalRestaurants"] == 1
    assert stats["totalOrders"] == 3
    assert stats["pendingOrders"] == 1
    assert stats["deliveredOrders"] == 1
    assert stats["cancelledOrders"] == 1
    assert stats["totalRevenue"] == pytest.approx(34.31)


@pytest.mark.asyncio
async def test_list_users_with_filters(async_client: AsyncClient, marketplace, admin_token):
    headers = auth(admin_token)

    resp = await async_client.get("/api/admin/users", headers=headers)
    assert resp.json()["data"]["pagination"]["total"] == 4
    assert resp.json()["data"]["pagination"]["limit"] == 20

    resp = await async_client.get("/api/admin/users", params={"role": "restaurant_owner"}, headers=headers)
    emails = {u["email"] for u in resp.json()["data"]["users"]}
    assert emails == {"bob@example.com", "carol@example.com"}

    resp = await async_client.get("/api/admin/users", params={"search": "alice"}, headers=headers)
    assert [u["email"] for u in resp.json()["data"]["users"]] == ["alice@example.com"]

    resp = await async_client.get("/api/admin/users", params={"status": "inactive"}, headers=headers)
    assert resp.json()["data"]["users"] == []

    resp = await async_client.get("/api/admin/users", params={"status": "sleeping"}, headers=headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_toggle_user_status(async_client: AsyncClient, marketplace, admin_token):
    user_id = marketplace.rival["user"]["id"]
    resp = await async_client.patch(
        f"/api/admin/users/{user_id}/status", json={"isActive": False}, headers=auth(admin_token)
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "User deactivated successfully"
    assert resp.json()["data"]["isActive"] is False

    resp = await async_client.patch(
        f"/api/admin/users/{user_id}/status", json={"isActive": True}, headers=auth(admin_token)
    )
    assert resp.json()["message"] == "User activated successfully"

    resp = await async_client.patch(
        f"/api/admin/users/{uuid.uuid4()}/status", json={"isActive": True}, headers=auth(admin_token)
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_change_user_role(async_client: AsyncClient, marketplace, admin_token):
    user_id = marketplace.customer["user"]["id"]
    resp = await async_client.patch(
        f"/api/admin/users/{user_id}/role", json={"role": "restaurant_owner"}, headers=auth(admin_token)
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "restaurant_owner"

    resp = await async_client.patch(
        f"/api/admin/users/{user_id}/role", json={"role": "overlord"}, headers=auth(admin_token)
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_admin_cannot_change_own_role(async_client: AsyncClient, app, settings):
    token = await helpers.create_admin(app, settings, email="boss@example.com")
    admin_id = decode_access_token(settings, token)["sub"]
    resp = await async_client.patch(
        f"/api/admin/users/{admin_id}/role", json={"role": "customer"}, headers=auth(token)
    )
    assert resp.status_code == 403
    assert resp.json()["message"] == "You cannot change your own role"


@pytest.mark.asyncio
async def test_list_orders_and_restaurants(async_client: AsyncClient, marketplace, admin_token):
    m = marketplace
    headers = auth(admin_token)
    order = await helpers.place_order(async_client, m.customer["token"], m.restaurant["id"], [(m.fries["id"], 1)])

    resp = await async_client.get("/api/admin/orders", headers=headers)
    orders = resp.json()["data"]["orders"]
    assert [o["id"] for o in orders] == [order["id"]]
    assert orders[0]["user"]["firstName"] == "Alice"

    resp = await async_client.get("/api/admin/orders", params={"restaurant": "bob"}, headers=headers)
    assert len(resp.json()["data"]["orders"]) == 1
    resp = await async_client.get("/api/admin/orders", params={"restaurant": "nowhere"}, headers=headers)
    assert resp.json()["data"]["orders"] == []
    resp = await async_client.get("/api/admin/orders", params={"status": "delivered"}, headers=headers)
    assert resp.json()["data"]["orders"] == []

    resp = await async_client.get("/api/admin/restaurants", params={"search": "burg"}, headers=headers)
    assert [r["name"] for r in resp.json()["data"]["restaurants"]] == ["Bob's Burgers"]
    resp = await async_client.get("/api/admin/restaurants", params={"status": "inactive"}, headers=headers)
    assert resp.json()["data"]["restaurants"] == []
