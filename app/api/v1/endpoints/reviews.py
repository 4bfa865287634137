"""
Review endpoints.

Authorship policy:
- create: the order must be the caller's, placed at this restaurant and
  delivered; one review per order.
- update: author only.  delete: author or admin.
- respond: the restaurant's owner, once.

Every create / update / delete recomputes the restaurant's rating and
review count inside the same transaction.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.deps import (PageParams, get_current_claims, get_db, paginate,
                             public_page, require_roles)
from app.core.exceptions import (AuthorizationError, ConflictError,
                                 NotFoundError, ValidationError)
from app.db.base import utcnow
from app.models.order import Order, OrderStatus
from app.models.restaurant import Restaurant
from app.models.review import Review
from app.models.user import UserRole
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.review import (ReviewCreate, ReviewList, ReviewRead,
                                ReviewResponseIn, ReviewUpdate)
from app.schemas.token import TokenClaims

router = APIRouter(tags=["reviews"])
logger = logging.getLogger(__name__)


async def refresh_restaurant_rating(db: AsyncSession, restaurant_id: uuid.UUID) -> None:
    """Recompute rating (mean, 2 decimals) and review count from the reviews table."""
    average, count = (
        await db.execute(
            select(func.avg(Review.rating), func.count(Review.id)).where(
                Review.restaurant_id == restaurant_id
            )
        )
    ).one()
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is not None:
        restaurant.rating = round(float(average or 0), 2)
        restaurant.review_count = count


async def _load_review(db: AsyncSession, review_id: uuid.UUID) -> Review | None:
    result = await db.execute(
        select(Review)
        .where(Review.id == review_id)
        .options(selectinload(Review.user), selectinload(Review.restaurant))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _get_review(db: AsyncSession, review_id: uuid.UUID) -> Review:
    review = await _load_review(db, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


@router.post(
    "/restaurants/{restaurant_id}/reviews",
    response_model=ApiResponse[ReviewRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    restaurant_id: uuid.UUID,
    body: ReviewCreate,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None or not restaurant.is_active:
        raise NotFoundError("Restaurant not found")

    result = await db.execute(
        select(Order).where(
            Order.id == body.order_id,
            Order.user_id == claims.sub,
            Order.restaurant_id == restaurant_id,
        )
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFoundError("Order not found")
    if order.status != OrderStatus.DELIVERED.value:
        raise ValidationError("Only delivered orders can be reviewed")

    existing = await db.execute(select(Review.id).where(Review.order_id == order.id))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Order has already been reviewed")

    review = Review(
        user_id=claims.sub,
        restaurant_id=restaurant_id,
        order_id=order.id,
        rating=body.rating,
        comment=body.comment,
        photos=body.photos,
    )
    db.add(review)
    await refresh_restaurant_rating(db, restaurant_id)
    await db.commit()
    logger.info("Review %s (%d stars) posted on restaurant %s", review.id, review.rating, restaurant_id)

    return {
        "success": True,
        "message": "Review created successfully",
        "data": await _load_review(db, review.id),
    }


@router.get("/public/restaurants/{restaurant_id}/reviews", response_model=ApiResponse[ReviewList])
async def list_restaurant_reviews(
    restaurant_id: uuid.UUID,
    params: PageParams = Depends(public_page),
    db: AsyncSession = Depends(get_db),
) -> dict:
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None or not restaurant.is_active:
        raise NotFoundError("Restaurant not found")

    stmt = (
        select(Review)
        .where(Review.restaurant_id == restaurant_id)
        .options(selectinload(Review.user))
        .order_by(Review.created_at.desc())
    )
    reviews, pagination = await paginate(db, stmt, params)
    return {
        "success": True,
        "message": "Reviews retrieved successfully",
        "data": {"reviews": reviews, "pagination": pagination},
    }


@router.get("/reviews/{review_id}", response_model=ApiResponse[ReviewRead])
async def get_review(
    review_id: uuid.UUID,
    _claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    review = await _get_review(db, review_id)
    return {"success": True, "message": "Review retrieved successfully", "data": review}


@router.put("/reviews/{review_id}", response_model=ApiResponse[ReviewRead])
async def update_review(
    review_id: uuid.UUID,
    body: ReviewUpdate,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    review = await _get_review(db, review_id)
    if review.user_id != claims.sub:
        raise AuthorizationError("You can only update your own reviews")

    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field == "rating":
            continue
        setattr(review, field, value)
    await refresh_restaurant_rating(db, review.restaurant_id)
    await db.commit()

    return {
        "success": True,
        "message": "Review updated successfully",
        "data": await _load_review(db, review.id),
    }


@router.delete("/reviews/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: uuid.UUID,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> dict:
    review = await _get_review(db, review_id)
    if review.user_id != claims.sub and not claims.has_role(UserRole.ADMIN):
        raise AuthorizationError("You can only delete your own reviews")

    restaurant_id = review.restaurant_id
    await db.delete(review)
    await refresh_restaurant_rating(db, restaurant_id)
    await db.commit()
    logger.info("Review %s deleted by %s", review_id, claims.email)
    return {"success": True, "message": "Review deleted successfully"}


@router.put("/reviews/{review_id}/response", response_model=ApiResponse[ReviewRead])
async def respond_to_review(
    review_id: uuid.UUID,
    body: ReviewResponseIn,
    claims: TokenClaims = Depends(require_roles(UserRole.RESTAURANT_OWNER)),
    db: AsyncSession = Depends(get_db),
) -> dict:
    review = await _get_review(db, review_id)
    if review.restaurant.owner_id != claims.sub:
        raise AuthorizationError("You can only respond to reviews of your own restaurant")
    if review.response:
        raise ConflictError("Review already has a response")

    review.response = body.response
    review.response_at = utcnow()
    await db.commit()
    return {
        "success": True,
        "message": "Response posted successfully",
        "data": await _load_review(db, review.id),
    }
