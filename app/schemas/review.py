"""Pydantic schemas for reviews and favorites."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel, Pagination
from app.schemas.restaurant import RestaurantRead


class ReviewCreate(CamelModel):
    order_id: uuid.UUID
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)
    photos: list[str] = []


class ReviewUpdate(CamelModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)
    photos: list[str] | None = None


class ReviewResponseIn(CamelModel):
    response: str = Field(min_length=1, max_length=2000)


class ReviewRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    restaurant_id: uuid.UUID
    order_id: uuid.UUID
    user_name: str
    rating: int
    comment: str | None
    photos: list[str] | None
    response: str | None
    response_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None


class ReviewList(CamelModel):
    reviews: list[ReviewRead]
    pagination: Pagination


class FavoriteRead(CamelModel):
    id: uuid.UUID
    restaurant: RestaurantRead
    created_at: datetime | None
