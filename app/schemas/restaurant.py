"""Pydantic schemas for restaurants, opening hours and gallery images."""

from __future__ import annotations

import re
import uuid
from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.common import CamelModel, Pagination

_DAYS = {"monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"}
_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class OpeningHoursIn(CamelModel):
    day: str
    open_time: str | None = None
    close_time: str | None = None
    is_closed: bool = False

    @field_validator("day")
    @classmethod
    def _validate_day(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in _DAYS:
            raise ValueError("day must be a weekday name")
        return v

    @field_validator("open_time", "close_time")
    @classmethod
    def _validate_time(cls, v: str | None) -> str | None:
        if v is not None and not _HHMM.match(v):
            raise ValueError("time must be HH:MM")
        return v


class OpeningHoursRead(CamelModel):
    id: uuid.UUID
    day: str
    open_time: str | None
    close_time: str | None
    is_closed: bool


class GalleryImageIn(CamelModel):
    image_url: str = Field(min_length=1, max_length=500)
    caption: str | None = None
    order: int = 0


class GalleryImageRead(CamelModel):
    id: uuid.UUID
    image_url: str
    caption: str | None
    order: int


class RestaurantCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    cuisine_type: str = Field(min_length=1, max_length=100)
    address: str = Field(min_length=1, max_length=500)
    phone: str = Field(min_length=1, max_length=30)
    email: str
    price_range: int = Field(ge=1, le=3)
    delivery_fee: float = Field(default=0.0, ge=0)
    min_delivery_time: int = Field(default=30, ge=0)
    max_delivery_time: int = Field(default=60, ge=0)
    image: str | None = None
    opening_hours: list[OpeningHoursIn] = []
    gallery: list[GalleryImageIn] = []

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class RestaurantUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    cuisine_type: str | None = Field(default=None, min_length=1, max_length=100)
    address: str | None = Field(default=None, min_length=1, max_length=500)
    phone: str | None = Field(default=None, min_length=1, max_length=30)
    email: str | None = None
    price_range: int | None = Field(default=None, ge=1, le=3)
    delivery_fee: float | None = Field(default=None, ge=0)
    min_delivery_time: int | None = Field(default=None, ge=0)
    max_delivery_time: int | None = Field(default=None, ge=0)
    image: str | None = None
    is_open: bool | None = None
    # Replaced wholesale when supplied
    opening_hours: list[OpeningHoursIn] | None = None
    gallery: list[GalleryImageIn] | None = None


class RestaurantSummary(CamelModel):
    id: uuid.UUID
    name: str
    cuisine_type: str
    image: str | None


class RestaurantRead(CamelModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    description: str | None
    cuisine_type: str
    address: str
    phone: str
    email: str
    rating: float
    review_count: int
    price_range: int
    delivery_fee: float
    min_delivery_time: int
    max_delivery_time: int
    is_open: bool
    is_active: bool
    image: str | None
    created_at: datetime | None
    updated_at: datetime | None


class RestaurantDetail(RestaurantRead):
    opening_hours: list[OpeningHoursRead] = []
    gallery: list[GalleryImageRead] = []


class RestaurantList(CamelModel):
    restaurants: list[RestaurantRead]
    pagination: Pagination
