"""Pydantic schemas for menu categories, items and customizations."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from app.models.menu import CustomizationType
from app.schemas.common import CamelModel
from app.schemas.restaurant import RestaurantSummary


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    order: int = 0


class CategoryUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    order: int | None = None
    is_active: bool | None = None


class CategorySummary(CamelModel):
    id: uuid.UUID
    name: str


class OptionIn(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    price_modifier: float = 0.0
    is_available: bool = True


class OptionRead(CamelModel):
    id: uuid.UUID
    name: str
    price_modifier: float
    is_available: bool


class CustomizationIn(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    type: CustomizationType
    required: bool = False
    max_selections: int = Field(default=1, ge=1)
    options: list[OptionIn] = []


class CustomizationRead(CamelModel):
    id: uuid.UUID
    name: str
    type: str
    required: bool
    max_selections: int
    options: list[OptionRead] = []


class _NutritionFields(CamelModel):
    calories: int | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    fiber: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)


class MenuItemCreate(_NutritionFields):
    category_id: uuid.UUID
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    price: float = Field(gt=0)
    image: str | None = None
    preparation_time: int = Field(default=15, ge=0)
    allergens: str | None = None
    customizations: list[CustomizationIn] = []


class MenuItemUpdate(_NutritionFields):
    category_id: uuid.UUID | None = None
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    image: str | None = None
    is_available: bool | None = None
    preparation_time: int | None = Field(default=None, ge=0)
    allergens: str | None = None
    # Replaced wholesale when supplied
    customizations: list[CustomizationIn] | None = None


class MenuItemRead(CamelModel):
    id: uuid.UUID
    restaurant_id: uuid.UUID
    category_id: uuid.UUID
    name: str
    description: str | None
    price: float
    image: str | None
    is_available: bool
    preparation_time: int
    allergens: str | None
    calories: int | None
    protein: float | None
    carbs: float | None
    fat: float | None
    fiber: float | None
    sodium: float | None
    customizations: list[CustomizationRead] = []
    created_at: datetime | None
    updated_at: datetime | None


class MenuItemDetail(MenuItemRead):
    restaurant: RestaurantSummary
    category: CategorySummary


class CategoryRead(CamelModel):
    id: uuid.UUID
    restaurant_id: uuid.UUID
    name: str
    description: str | None
    order: int
    is_active: bool
    created_at: datetime | None


class CategoryWithItems(CategoryRead):
    menu_items: list[MenuItemRead] = []
