"""
Admin dashboard endpoints.  Every route requires the admin role.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import (PageParams, admin_page, get_db, paginate,
                             require_roles)
from app.api.v1.endpoints.orders import ORDER_SUMMARY_OPTIONS
from app.core.exceptions import AuthorizationError, NotFoundError
from app.core.workflow import OPEN_STATUSES
from app.models.order import Order, OrderStatus
from app.models.restaurant import Restaurant
from app.models.user import User, UserRole
from app.schemas.admin import (AdminOrderList, AdminRestaurantList,
                               DashboardStats)
from app.schemas.common import ApiResponse
from app.schemas.token import TokenClaims
from app.schemas.user import (UserList, UserRead, UserRoleUpdate,
                              UserStatusUpdate)

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)

require_admin = require_roles(UserRole.ADMIN)


async def _count(db: AsyncSession, model, *criteria) -> int:
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return (await db.scalar(stmt)) or 0


async def _get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("/stats", response_model=ApiResponse[DashboardStats])
async def dashboard_stats(
    _admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    revenue = await db.scalar(
        select(
            func.coalesce(
                func.sum(Order.total_amount + Order.delivery_fee + Order.tax + Order.tip), 0
            )
        ).where(Order.status == OrderStatus.DELIVERED.value)
    )
    stats = {
        "total_users": await _count(db, User),
        "active_users": await _count(db, User, User.is_active.is_(True)),
        "total_restaurants": await _count(db, Restaurant),
        "active_restaurants": await _count(db, Restaurant, Restaurant.is_active.is_(True)),
        "total_orders": await _count(db, Order),
        "pending_orders": await _count(
            db, Order, Order.status.in_([s.value for s in OPEN_STATUSES])
        ),
        "delivered_orders": await _count(db, Order, Order.status == OrderStatus.DELIVERED.value),
        "cancelled_orders": await _count(db, Order, Order.status == OrderStatus.CANCELLED.value),
        "total_revenue": round(float(revenue or 0), 2),
    }
    return {
        "success": True,
        "message": "Dashboard statistics retrieved successfully",
        "data": stats,
    }


# ── Users ───────────────────────────────────────────────────────────
@router.get("/users", response_model=ApiResponse[UserList])
async def list_users(
    search: Optional[str] = Query(None),
    role: Optional[UserRole] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|inactive)$"),
    params: PageParams = Depends(admin_page),
    _admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = select(User).order_by(User.created_at.desc())
    if search:
        term = f"%{search}%"
        stmt = stmt.where(
            or_(User.email.ilike(term), User.first_name.ilike(term), User.last_name.ilike(term))
        )
    if role is not None:
        stmt = stmt.where(User.role == role.value)
    if status_filter is not None:
        stmt = stmt.where(User.is_active.is_(status_filter == "active"))

    users, pagination = await paginate(db, stmt, params)
    return {
        "success": True,
        "message": "Users retrieved successfully",
        "data": {"users": users, "pagination": pagination},
    }


@router.patch("/users/{user_id}/status", response_model=ApiResponse[UserRead])
async def update_user_status(
    user_id: uuid.UUID,
    body: UserStatusUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await _get_user(db, user_id)
    user.is_active = body.is_active
    await db.commit()
    await db.refresh(user)
    state = "activated" if body.is_active else "deactivated"
    logger.info("User %s %s by %s", user.email, state, admin.email)
    return {"success": True, "message": f"User {state} successfully", "data": user}


@router.patch("/users/{user_id}/role", response_model=ApiResponse[UserRead])
async def update_user_role(
    user_id: uuid.UUID,
    body: UserRoleUpdate,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if user_id == admin.sub:
        raise AuthorizationError("You cannot change your own role")

    user = await _get_user(db, user_id)
    previous = user.role
    user.role = body.role.value
    await db.commit()
    await db.refresh(user)
    logger.info("User %s role changed %s -> %s by %s", user.email, previous, user.role, admin.email)
    return {"success": True, "message": "User role updated successfully", "data": user}


# ── Orders & restaurants ────────────────────────────────────────────
@router.get("/orders", response_model=ApiResponse[AdminOrderList])
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    restaurant: Optional[str] = Query(None),
    params: PageParams = Depends(admin_page),
    _admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = select(Order).options(*ORDER_SUMMARY_OPTIONS).order_by(Order.created_at.desc())
    if status_filter is not None:
        stmt = stmt.where(Order.status == status_filter.value)
    if restaurant:
        stmt = stmt.join(Restaurant, Order.restaurant_id == Restaurant.id).where(
            Restaurant.name.ilike(f"%{restaurant}%")
        )

    orders, pagination = await paginate(db, stmt, params)
    return {
        "success": True,
        "message": "Orders retrieved successfully",
        "data": {"orders": orders, "pagination": pagination},
    }


@router.get("/restaurants", response_model=ApiResponse[AdminRestaurantList])
async def list_restaurants(
    search: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|inactive)$"),
    params: PageParams = Depends(admin_page),
    _admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = select(Restaurant).order_by(Restaurant.created_at.desc())
    if search:
        term = f"%{search}%"
        stmt = stmt.where(or_(Restaurant.name.ilike(term), Restaurant.cuisine_type.ilike(term)))
    if status_filter is not None:
        stmt = stmt.where(Restaurant.is_active.is_(status_filter == "active"))

    restaurants, pagination = await paginate(db, stmt, params)
    return {
        "success": True,
        "message": "Restaurants retrieved successfully",
        "data": {"restaurants": restaurants, "pagination": pagination},
    }
