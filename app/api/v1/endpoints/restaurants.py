"""
Restaurant endpoints.

- POST /restaurants and GET /restaurants/me are restaurant-owner only.
- PUT /restaurants/{id} allows the owner of that restaurant or an admin.
- /public/restaurants/* needs no authentication and only exposes active
  restaurants.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.deps import (PageParams, get_db, get_owner_restaurant,
                             paginate, public_page, require_roles)
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.restaurant import OpeningHours, Restaurant, RestaurantImage
from app.models.user import UserRole
from app.schemas.common import ApiResponse
from app.schemas.restaurant import (GalleryImageIn, OpeningHoursIn,
                                    RestaurantCreate, RestaurantDetail,
                                    RestaurantList, RestaurantUpdate)
from app.schemas.token import TokenClaims

router = APIRouter(tags=["restaurants"])
logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "rating": Restaurant.rating,
    "delivery_fee": Restaurant.delivery_fee,
    "delivery_time": Restaurant.min_delivery_time,
    "name": Restaurant.name,
    "created_at": Restaurant.created_at,
}


async def load_restaurant(db: AsyncSession, restaurant_id: uuid.UUID) -> Restaurant | None:
    """Fetch a restaurant with opening hours and gallery eagerly loaded."""
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.id == restaurant_id)
        .options(selectinload(Restaurant.opening_hours), selectinload(Restaurant.gallery))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _opening_hours(items: list[OpeningHoursIn]) -> list[OpeningHours]:
    return [OpeningHours(**item.model_dump()) for item in items]


def _gallery(items: list[GalleryImageIn]) -> list[RestaurantImage]:
    return [RestaurantImage(**item.model_dump()) for item in items]


# ── Owner routes ────────────────────────────────────────────────────
@router.post(
    "/restaurants",
    response_model=ApiResponse[RestaurantDetail],
    status_code=status.HTTP_201_CREATED,
)
async def create_restaurant(
    body: RestaurantCreate,
    claims: TokenClaims = Depends(require_roles(UserRole.RESTAURANT_OWNER)),
    db: AsyncSession = Depends(get_db),
) -> dict:
    existing = await db.execute(select(Restaurant.id).where(Restaurant.owner_id == claims.sub))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("User already owns a restaurant")

    fields = body.model_dump(exclude={"opening_hours", "gallery"})
    restaurant = Restaurant(
        owner_id=claims.sub,
        opening_hours=_opening_hours(body.opening_hours),
        gallery=_gallery(body.gallery),
        **fields,
    )
    db.add(restaurant)
    await db.commit()
    logger.info("Restaurant %s created by %s", restaurant.name, claims.email)

    return {
        "success": True,
        "message": "Restaurant created successfully",
        "data": await load_restaurant(db, restaurant.id),
    }


@router.get("/restaurants/me", response_model=ApiResponse[RestaurantDetail])
async def get_my_restaurant(
    restaurant: Restaurant = Depends(get_owner_restaurant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {
        "success": True,
        "message": "Restaurant retrieved successfully",
        "data": await load_restaurant(db, restaurant.id),
    }


@router.put("/restaurants/{restaurant_id}", response_model=ApiResponse[RestaurantDetail])
async def update_restaurant(
    restaurant_id: uuid.UUID,
    body: RestaurantUpdate,
    claims: TokenClaims = Depends(require_roles(UserRole.RESTAURANT_OWNER, UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Partial update; opening hours and gallery are replaced when supplied."""
    restaurant = await load_restaurant(db, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    if restaurant.owner_id != claims.sub and not claims.has_role(UserRole.ADMIN):
        raise AuthorizationError("You can only update your own restaurant")

    changes = body.model_dump(exclude_unset=True, exclude={"opening_hours", "gallery"})
    for field, value in changes.items():
        if value is None and field not in {"description", "image"}:
            continue
        setattr(restaurant, field, value)
    if body.opening_hours is not None:
        restaurant.opening_hours = _opening_hours(body.opening_hours)
    if body.gallery is not None:
        restaurant.gallery = _gallery(body.gallery)

    await db.commit()
    logger.info("Restaurant %s updated by %s", restaurant.id, claims.email)
    return {
        "success": True,
        "message": "Restaurant updated successfully",
        "data": await load_restaurant(db, restaurant.id),
    }


# ── Public routes ───────────────────────────────────────────────────
@router.get("/public/restaurants", response_model=ApiResponse[RestaurantList])
async def list_restaurants(
    cuisine: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    params: PageParams = Depends(public_page),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = select(Restaurant).where(Restaurant.is_active.is_(True))
    if cuisine:
        stmt = stmt.where(Restaurant.cuisine_type.ilike(f"%{cuisine}%"))
    if search:
        term = f"%{search}%"
        stmt = stmt.where(or_(Restaurant.name.ilike(term), Restaurant.description.ilike(term)))
    stmt = stmt.order_by(Restaurant.rating.desc(), Restaurant.name)

    restaurants, pagination = await paginate(db, stmt, params)
    return {
        "success": True,
        "message": "Restaurants retrieved successfully",
        "data": {"restaurants": restaurants, "pagination": pagination},
    }


@router.get("/public/restaurants/search", response_model=ApiResponse[RestaurantList])
async def search_restaurants(
    q: Optional[str] = Query(None),
    cuisine: Optional[str] = Query(None),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    max_price: Optional[int] = Query(None, alias="maxPrice", ge=1, le=3),
    delivery_fee: Optional[float] = Query(None, alias="deliveryFee", ge=0),
    is_open: Optional[bool] = Query(None, alias="isOpen"),
    sort_by: str = Query("rating", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    params: PageParams = Depends(public_page),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Filtered search; unknown sort keys fall back to rating, descending."""
    stmt = select(Restaurant).where(Restaurant.is_active.is_(True))
    if q:
        term = f"%{q}%"
        stmt = stmt.where(
            or_(
                Restaurant.name.ilike(term),
                Restaurant.cuisine_type.ilike(term),
                Restaurant.description.ilike(term),
            )
        )
    if cuisine:
        stmt = stmt.where(Restaurant.cuisine_type.ilike(f"%{cuisine}%"))
    if min_rating:
        stmt = stmt.where(Restaurant.rating >= min_rating)
    if max_price is not None:
        stmt = stmt.where(Restaurant.price_range <= max_price)
    if delivery_fee is not None:
        stmt = stmt.where(Restaurant.delivery_fee <= delivery_fee)
    if is_open is not None:
        stmt = stmt.where(Restaurant.is_open.is_(is_open))

    column = SORT_FIELDS.get(sort_by, Restaurant.rating)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    stmt = stmt.order_by(ordering, Restaurant.name)

    restaurants, pagination = await paginate(db, stmt, params)
    return {
        "success": True,
        "message": "Restaurants retrieved successfully",
        "data": {"restaurants": restaurants, "pagination": pagination},
    }


@router.get("/public/restaurants/{restaurant_id}", response_model=ApiResponse[RestaurantDetail])
async def get_restaurant(
    restaurant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> dict:
    restaurant = await load_restaurant(db, restaurant_id)
    if restaurant is None or not restaurant.is_active:
        raise NotFoundError("Restaurant not found")
    return {"success": True, "message": "Restaurant retrieved successfully", "data": restaurant}
