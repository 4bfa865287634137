"""
Checkout, order history and the restaurant-side status workflow.

- POST/GET /orders: any authenticated identity, scoped to the caller.
- GET /orders/{id}: the customer, the restaurant's owner or an admin.
- GET /restaurant/orders: restaurant owner, scoped to their restaurant.
- PATCH /restaurant/orders/{id}/status: restaurant owner (own restaurant
  only) or admin.  Transitions follow ``app.core.workflow``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.deps import (PageParams, get_current_claims, get_db,
                             get_owner_restaurant, get_settings, paginate,
                             public_page, require_roles)
from app.core.config import Settings
from app.core.exceptions import (AuthorizationError, ConflictError,
                                 NotFoundError, ValidationError)
from app.core.workflow import (ORDER_PLACED_MESSAGE, default_message,
                               ensure_transition)
from app.db.base import utcnow
from app.models.menu import MenuItem
from app.models.order import Order, OrderItem, OrderStatus, TrackingUpdate
from app.models.restaurant import Restaurant
from app.models.user import Address, UserRole
from app.schemas.common import ApiResponse
from app.schemas.order import (OrderCreate, OrderDetail, OrderList,
                               OrderStatusUpdate, RestaurantOrderList)
from app.schemas.token import TokenClaims

router = APIRouter(tags=["orders"])
logger = logging.getLogger(__name__)

ORDER_SUMMARY_OPTIONS = (
    selectinload(Order.restaurant),
    selectinload(Order.delivery_address),
    selectinload(Order.items),
    selectinload(Order.user),
)


def compute_charges(settings: Settings, subtotal: float, tip: float) -> dict[str, float]:
    """Delivery fee, tax and tip for an item subtotal, rounded to cents."""
    subtotal = round(subtotal, 2)
    delivery_fee = 0.0 if subtotal > settings.FREE_DELIVERY_THRESHOLD else settings.DEFAULT_DELIVERY_FEE
    return {
        "total_amount": subtotal,
        "delivery_fee": round(delivery_fee, 2),
        "tax": round(subtotal * settings.TAX_RATE, 2),
        "tip": round(tip, 2),
    }


async def load_order(db: AsyncSession, order_id: uuid.UUID) -> Order | None:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(*ORDER_SUMMARY_OPTIONS, selectinload(Order.tracking_updates))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _resolve_address(db: AsyncSession, claims: TokenClaims, body: OrderCreate) -> Address:
    if body.delivery_address is not None:
        return Address(user_id=claims.sub, **body.delivery_address.model_dump())

    result = await db.execute(
        select(Address).where(
            Address.id == body.delivery_address_id, Address.user_id == claims.sub
        )
    )
    address = result.scalar_one_or_none()
    if address is None:
        raise ValidationError("Delivery address not found")
    return address


# ── Checkout & customer views ───────────────────────────────────────
@router.post(
    "/orders",
    response_model=ApiResponse[OrderDetail],
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    body: OrderCreate,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Place an order: line items, charges and the first tracking entry in one commit."""
    restaurant = await db.get(Restaurant, body.restaurant_id)
    if restaurant is None or not restaurant.is_active:
        raise ValidationError("Restaurant not found or inactive")

    address = await _resolve_address(db, claims, body)

    wanted = {line.menu_item_id for line in body.items}
    result = await db.execute(
        select(MenuItem).where(
            MenuItem.id.in_(wanted),
            MenuItem.restaurant_id == restaurant.id,
            MenuItem.is_available.is_(True),
        )
    )
    menu = {item.id: item for item in result.scalars()}
    missing = wanted - menu.keys()
    if missing:
        raise ValidationError(
            "Menu item not found or unavailable",
            error=", ".join(sorted(str(item_id) for item_id in missing)),
        )

    subtotal = 0.0
    lines: list[OrderItem] = []
    for line in body.items:
        item = menu[line.menu_item_id]
        subtotal += item.price * line.quantity
        lines.append(
            OrderItem(
                menu_item_id=item.id,
                name=item.name,
                price=item.price,
                quantity=line.quantity,
                customizations_data=line.customizations_data,
                special_instructions=line.special_instructions,
            )
        )

    order = Order(
        user_id=claims.sub,
        restaurant_id=restaurant.id,
        status=OrderStatus.PENDING.value,
        delivery_address=address,
        payment_method_type=body.payment_method_type.value,
        payment_details=body.payment_details,
        special_instructions=body.special_instructions,
        estimated_delivery_time=utcnow() + timedelta(minutes=restaurant.max_delivery_time),
        items=lines,
        tracking_updates=[
            TrackingUpdate(
                sequence=1,
                status=OrderStatus.PENDING.value,
                message=ORDER_PLACED_MESSAGE,
            )
        ],
        **compute_charges(settings, subtotal, body.tip),
    )
    db.add(order)
    await db.commit()
    logger.info(
        "Order %s placed by %s at restaurant %s (%.2f)",
        order.id, claims.email, restaurant.id, order.grand_total,
    )

    return {
        "success": True,
        "message": "Order created successfully",
        "data": await load_order(db, order.id),
    }


@router.get("/orders", response_model=ApiResponse[OrderList])
async def list_my_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    params: PageParams = Depends(public_page),
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = (
        select(Order)
        .where(Order.user_id == claims.sub)
        .options(*ORDER_SUMMARY_OPTIONS)
        .order_by(Order.created_at.desc())
    )
    if status_filter is not None:
        stmt = stmt.where(Order.status == status_filter.value)

    orders, pagination = await paginate(db, stmt, params)
    return {
        "success": True,
        "message": "Orders retrieved successfully",
        "data": {"orders": orders, "pagination": pagination},
    }


@router.get("/orders/{order_id}", response_model=ApiResponse[OrderDetail])
async def get_order(
    order_id: uuid.UUID,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Unrelated callers get 404 so order ids are not disclosed."""
    order = await load_order(db, order_id)
    if order is None:
        raise NotFoundError("Order not found")

    allowed = (
        order.user_id == claims.sub
        or order.restaurant.owner_id == claims.sub
        or claims.has_role(UserRole.ADMIN)
    )
    if not allowed:
        raise NotFoundError("Order not found")
    return {"success": True, "message": "Order retrieved successfully", "data": order}


# ── Restaurant side ─────────────────────────────────────────────────
@router.get("/restaurant/orders", response_model=ApiResponse[RestaurantOrderList])
async def list_restaurant_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    params: PageParams = Depends(public_page),
    restaurant: Restaurant = Depends(get_owner_restaurant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = (
        select(Order)
        .where(Order.restaurant_id == restaurant.id)
        .options(*ORDER_SUMMARY_OPTIONS)
        .order_by(Order.created_at.desc())
    )
    if status_filter is not None:
        stmt = stmt.where(Order.status == status_filter.value)

    orders, pagination = await paginate(db, stmt, params)
    return {
        "success": True,
        "message": "Orders retrieved successfully",
        "data": {"orders": orders, "pagination": pagination},
    }


@router.patch("/restaurant/orders/{order_id}/status", response_model=ApiResponse[OrderDetail])
async def update_order_status(
    order_id: uuid.UUID,
    body: OrderStatusUpdate,
    claims: TokenClaims = Depends(require_roles(UserRole.RESTAURANT_OWNER, UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Advance the order one step (or cancel it) and append a tracking entry.

    The order row is locked for the rest of the transaction so concurrent
    updates serialize.
    """
    result = await db.execute(select(Order).where(Order.id == order_id).with_for_update())
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFoundError("Order not found")

    if not claims.has_role(UserRole.ADMIN):
        restaurant = await db.get(Restaurant, order.restaurant_id)
        if restaurant is None or restaurant.owner_id != claims.sub:
            raise AuthorizationError("Not authorized to update this order")

    try:
        target = ensure_transition(order.status, body.status)
    except ConflictError:
        logger.warning(
            "Rejected transition %s -> %s on order %s by %s",
            order.status, body.status.value, order.id, claims.email,
        )
        raise

    last_sequence = await db.scalar(
        select(func.max(TrackingUpdate.sequence)).where(TrackingUpdate.order_id == order.id)
    )
    previous = order.status
    order.status = target.value
    if target == OrderStatus.DELIVERED:
        order.actual_delivery_time = utcnow()
    db.add(
        TrackingUpdate(
            order_id=order.id,
            sequence=(last_sequence or 0) + 1,
            status=target.value,
            message=body.message or default_message(target),
            latitude=body.latitude,
            longitude=body.longitude,
        )
    )
    await db.commit()
    logger.info("Order %s moved %s -> %s by %s", order.id, previous, target.value, claims.email)

    return {
        "success": True,
        "message": "Order status updated successfully",
        "data": await load_order(db, order.id),
    }
