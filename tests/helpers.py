"""Request builders shared by the test modules."""

from httpx import AsyncClient

from app.core.config import Settings
from app.core.security import create_access_token, get_password_hash
from app.models.user import User, UserRole

PASSWORD = "secret123"


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(
    client: AsyncClient, *, email: str, role: str = "customer", password: str = PASSWORD
) -> dict:
    """Register through the API and return ``{"user": ..., "token": ...}``."""
    resp = await client.post(
        "/api/auth/register",
        json={
            "email": email,
            "password": password,
            "firstName": email.split("@")[0].title(),
            "lastName": "Tester",
            "phone": "555-0100",
            "role": role,
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def create_admin(app, settings: Settings, email: str = "root@example.com") -> str:
    """Admins cannot self-register; insert one directly and mint its token."""
    async with app.state.session_factory() as session:
        admin = User(
            email=email,
            hashed_password=get_password_hash(PASSWORD),
            first_name="Root",
            last_name="Admin",
            phone="555-0199",
            role=UserRole.ADMIN.value,
        )
        session.add(admin)
        await session.commit()
        return create_access_token(settings, user_id=admin.id, email=admin.email, role=admin.role)


async def create_restaurant(client: AsyncClient, token: str, **overrides) -> dict:
    payload = {
        "name": "Test Kitchen",
        "description": "Honest food",
        "cuisineType": "American",
        "address": "1 Main St",
        "phone": "555-0111",
        "email": "kitchen@example.com",
        "priceRange": 2,
        "deliveryFee": 1.5,
        "minDeliveryTime": 20,
        "maxDeliveryTime": 45,
    }
    payload.update(overrides)
    resp = await client.post("/api/restaurants", json=payload, headers=auth(token))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def create_category(client: AsyncClient, token: str, name: str = "Mains", order: int = 0) -> dict:
    resp = await client.post(
        "/api/menu/categories", json={"name": name, "order": order}, headers=auth(token)
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def create_item(
    client: AsyncClient, token: str, category_id: str, name: str = "Burger", price: float = 10.0, **extra
) -> dict:
    payload = {"categoryId": category_id, "name": name, "price": price, **extra}
    resp = await client.post("/api/menu/items", json=payload, headers=auth(token))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def inline_address() -> dict:
    return {"street": "42 Elm St", "city": "Springfield", "state": "IL", "zipCode": "62701"}


async def place_order(
    client: AsyncClient, token: str, restaurant_id: str, items: list[tuple[str, int]], **extra
) -> dict:
    payload = {
        "restaurantId": restaurant_id,
        "items": [{"menuItemId": item_id, "quantity": qty} for item_id, qty in items],
        "deliveryAddress": inline_address(),
        "paymentMethodType": "credit_card",
        **extra,
    }
    resp = await client.post("/api/orders", json=payload, headers=auth(token))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def set_status(client: AsyncClient, token: str, order_id: str, status: str, **extra):
    return await client.patch(
        f"/api/restaurant/orders/{order_id}/status",
        json={"status": status, **extra},
        headers=auth(token),
    )


async def deliver(client: AsyncClient, token: str, order_id: str) -> None:
    """Walk an order through every step up to delivered."""
    for status in ("confirmed", "preparing", "ready_for_pickup", "picked_up", "on_the_way", "delivered"):
        resp = await set_status(client, token, order_id, status)
        assert resp.status_code == 200, resp.text
