"""
The caller's own account: profile, delivery addresses and favorite
restaurants.  Every route requires an authenticated identity.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.deps import get_current_claims, get_current_user, get_db
from app.core.exceptions import ConflictError, NotFoundError
from app.models.order import Order
from app.models.restaurant import Restaurant
from app.models.review import Favorite
from app.models.user import Address, User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.review import FavoriteRead
from app.schemas.token import TokenClaims
from app.schemas.user import AddressCreate, AddressRead, UserRead

router = APIRouter(prefix="/users/me", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("", response_model=ApiResponse[UserRead])
async def read_current_user(current_user: User = Depends(get_current_user)) -> dict:
    """Return profile of the currently authenticated user."""
    return {"success": True, "message": "User retrieved successfully", "data": current_user}


# ── Addresses ───────────────────────────────────────────────────────
@router.get("/addresses", response_model=ApiResponse[list[AddressRead]])
async def list_addresses(
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    result = await db.execute(
        select(Address)
        .where(Address.user_id == claims.sub)
        .order_by(Address.is_default.desc(), Address.created_at)
    )
    return {
        "success": True,
        "message": "Addresses retrieved successfully",
        "data": list(result.scalars().all()),
    }


@router.post(
    "/addresses",
    response_model=ApiResponse[AddressRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_address(
    body: AddressCreate,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if body.is_default:
        # Only one default address per user
        await db.execute(
            update(Address).where(Address.user_id == claims.sub).values(is_default=False)
        )
    address = Address(user_id=claims.sub, **body.model_dump())
    db.add(address)
    await db.commit()
    await db.refresh(address)
    return {"success": True, "message": "Address created successfully", "data": address}


@router.delete("/addresses/{address_id}", response_model=MessageResponse)
async def delete_address(
    address_id: uuid.UUID,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    result = await db.execute(
        select(Address).where(Address.id == address_id, Address.user_id == claims.sub)
    )
    address = result.scalar_one_or_none()
    if address is None:
        raise NotFoundError("Address not found")

    # Orders keep pointing at the address they were delivered to
    in_use = await db.scalar(select(Order.id).where(Order.delivery_address_id == address.id).limit(1))
    if in_use is not None:
        raise ConflictError("Address is used by existing orders")

    await db.delete(address)
    await db.commit()
    return {"success": True, "message": "Address deleted successfully"}


# ── Favorites ───────────────────────────────────────────────────────
@router.get("/favorites", response_model=ApiResponse[list[FavoriteRead]])
async def list_favorites(
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    result = await db.execute(
        select(Favorite)
        .where(Favorite.user_id == claims.sub)
        .options(selectinload(Favorite.restaurant))
        .order_by(Favorite.created_at.desc())
    )
    return {
        "success": True,
        "message": "Favorites retrieved successfully",
        "data": list(result.scalars().all()),
    }


@router.post("/favorites/{restaurant_id}", response_model=MessageResponse)
async def add_favorite(
    restaurant_id: uuid.UUID,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Adding a restaurant that is already a favorite is a no-op."""
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None or not restaurant.is_active:
        raise NotFoundError("Restaurant not found")

    existing = await db.execute(
        select(Favorite).where(
            Favorite.user_id == claims.sub, Favorite.restaurant_id == restaurant_id
        )
    )
    if existing.scalar_one_or_none() is not None:
        return {"success": True, "message": "Restaurant already in favorites"}

    db.add(Favorite(user_id=claims.sub, restaurant_id=restaurant_id))
    await db.commit()
    return {"success": True, "message": "Restaurant added to favorites"}


@router.delete("/favorites/{restaurant_id}", response_model=MessageResponse)
async def remove_favorite(
    restaurant_id: uuid.UUID,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    result = await db.execute(
        select(Favorite).where(
            Favorite.user_id == claims.sub, Favorite.restaurant_id == restaurant_id
        )
    )
    favorite = result.scalar_one_or_none()
    if favorite is None:
        raise NotFoundError("Favorite not found")
    await db.delete(favorite)
    await db.commit()
    return {"success": True, "message": "Restaurant removed from favorites"}
