"""
Menu endpoints.

- /menu/* is restaurant-owner only and always scoped to the caller's own
  restaurant; anything outside it is reported as not found.
- GET /public/restaurants/{id}/menu and GET /menu-items/{id} are public.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.deps import get_db, get_owner_restaurant
from app.core.exceptions import NotFoundError
from app.models.menu import (CustomizationOption, MenuCategory,
                             MenuCustomization, MenuItem)
from app.models.restaurant import Restaurant
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.menu import (CategoryCreate, CategoryRead, CategoryUpdate,
                              CategoryWithItems, CustomizationIn,
                              MenuItemCreate, MenuItemDetail, MenuItemRead,
                              MenuItemUpdate)

router = APIRouter(tags=["menu"])
logger = logging.getLogger(__name__)

_ITEM_OPTIONS = selectinload(MenuItem.customizations).selectinload(MenuCustomization.options)


def _customizations(items: list[CustomizationIn]) -> list[MenuCustomization]:
    return [
        MenuCustomization(
            name=c.name,
            type=c.type.value,
            required=c.required,
            max_selections=c.max_selections,
            options=[CustomizationOption(**o.model_dump()) for o in c.options],
        )
        for c in items
    ]


async def _load_item(db: AsyncSession, item_id: uuid.UUID) -> MenuItem | None:
    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.id == item_id)
        .options(_ITEM_OPTIONS)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _owned_category(
    db: AsyncSession, restaurant: Restaurant, category_id: uuid.UUID
) -> MenuCategory:
    result = await db.execute(
        select(MenuCategory).where(
            MenuCategory.id == category_id, MenuCategory.restaurant_id == restaurant.id
        )
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def _owned_item(db: AsyncSession, restaurant: Restaurant, item_id: uuid.UUID) -> MenuItem:
    item = await _load_item(db, item_id)
    if item is None or item.restaurant_id != restaurant.id:
        raise NotFoundError("Menu item not found")
    return item


# ── Categories (owner) ──────────────────────────────────────────────
@router.get("/menu/categories", response_model=ApiResponse[list[CategoryWithItems]])
async def list_categories(
    restaurant: Restaurant = Depends(get_owner_restaurant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Full menu of the caller's restaurant, inactive and unavailable entries included."""
    result = await db.execute(
        select(MenuCategory)
        .where(MenuCategory.restaurant_id == restaurant.id)
        .options(selectinload(MenuCategory.menu_items).options(_ITEM_OPTIONS))
        .order_by(MenuCategory.order, MenuCategory.created_at)
    )
    return {
        "success": True,
        "message": "Categories retrieved successfully",
        "data": list(result.scalars().all()),
    }


@router.post(
    "/menu/categories",
    response_model=ApiResponse[CategoryRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    body: CategoryCreate,
    restaurant: Restaurant = Depends(get_owner_restaurant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    category = MenuCategory(restaurant_id=restaurant.id, **body.model_dump())
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return {"success": True, "message": "Category created successfully", "data": category}


@router.put("/menu/categories/{category_id}", response_model=ApiResponse[CategoryRead])
async def update_category(
    category_id: uuid.UUID,
    body: CategoryUpdate,
    restaurant: Restaurant = Depends(get_owner_restaurant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    category = await _owned_category(db, restaurant, category_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field != "description":
            continue
        setattr(category, field, value)
    await db.commit()
    await db.refresh(category)
    return {"success": True, "message": "Category updated successfully", "data": category}


# ── Items (owner) ───────────────────────────────────────────────────
@router.post(
    "/menu/items",
    response_model=ApiResponse[MenuItemRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_menu_item(
    body: MenuItemCreate,
    restaurant: Restaurant = Depends(get_owner_restaurant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    await _owned_category(db, restaurant, body.category_id)

    item = MenuItem(
        restaurant_id=restaurant.id,
        customizations=_customizations(body.customizations),
        **body.model_dump(exclude={"customizations"}),
    )
    db.add(item)
    await db.commit()
    logger.info("Menu item %s added to restaurant %s", item.name, restaurant.id)
    return {
        "success": True,
        "message": "Menu item created successfully",
        "data": await _load_item(db, item.id),
    }


@router.put("/menu/items/{item_id}", response_model=ApiResponse[MenuItemRead])
async def update_menu_item(
    item_id: uuid.UUID,
    body: MenuItemUpdate,
    restaurant: Restaurant = Depends(get_owner_restaurant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Partial update; customizations are replaced when supplied."""
    item = await _owned_item(db, restaurant, item_id)
    if body.category_id is not None:
        await _owned_category(db, restaurant, body.category_id)

    nullable = {"description", "image", "allergens", "calories", "protein", "carbs", "fat", "fiber", "sodium"}
    for field, value in body.model_dump(exclude_unset=True, exclude={"customizations"}).items():
        if value is None and field not in nullable:
            continue
        setattr(item, field, value)
    if body.customizations is not None:
        item.customizations = _customizations(body.customizations)

    await db.commit()
    return {
        "success": True,
        "message": "Menu item updated successfully",
        "data": await _load_item(db, item.id),
    }


@router.patch("/menu/items/{item_id}/toggle", response_model=ApiResponse[MenuItemRead])
async def toggle_menu_item(
    item_id: uuid.UUID,
    restaurant: Restaurant = Depends(get_owner_restaurant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    item = await _owned_item(db, restaurant, item_id)
    item.is_available = not item.is_available
    await db.commit()
    state = "available" if item.is_available else "unavailable"
    return {
        "success": True,
        "message": f"Menu item marked {state}",
        "data": await _load_item(db, item.id),
    }


@router.delete("/menu/items/{item_id}", response_model=MessageResponse)
async def delete_menu_item(
    item_id: uuid.UUID,
    restaurant: Restaurant = Depends(get_owner_restaurant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    item = await _owned_item(db, restaurant, item_id)
    await db.delete(item)
    await db.commit()
    logger.info("Menu item %s deleted from restaurant %s", item_id, restaurant.id)
    return {"success": True, "message": "Menu item deleted successfully"}


# ── Public ──────────────────────────────────────────────────────────
@router.get(
    "/public/restaurants/{restaurant_id}/menu",
    response_model=ApiResponse[list[CategoryWithItems]],
)
async def get_public_menu(
    restaurant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Active categories in display order, each with its available items."""
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None or not restaurant.is_active:
        raise NotFoundError("Restaurant not found")

    result = await db.execute(
        select(MenuCategory)
        .where(MenuCategory.restaurant_id == restaurant_id, MenuCategory.is_active.is_(True))
        .options(
            selectinload(MenuCategory.menu_items.and_(MenuItem.is_available.is_(True))).options(
                _ITEM_OPTIONS
            )
        )
        .order_by(MenuCategory.order, MenuCategory.created_at)
    )
    return {
        "success": True,
        "message": "Menu retrieved successfully",
        "data": list(result.scalars().all()),
    }


@router.get("/menu-items/{item_id}", response_model=ApiResponse[MenuItemDetail])
async def get_menu_item(
    item_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> dict:
    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.id == item_id)
        .options(
            _ITEM_OPTIONS,
            selectinload(MenuItem.restaurant),
            selectinload(MenuItem.category),
        )
    )
    item = result.scalar_one_or_none()
    if item is None or not item.restaurant.is_active:
        raise NotFoundError("Menu item not found")
    return {"success": True, "message": "Menu item retrieved successfully", "data": item}
