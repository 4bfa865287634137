"""
Menu models: categories, items and their customizations.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (Boolean, Column, DateTime, Float, ForeignKey, Integer,
                        String, Text, Uuid)
from sqlalchemy.orm import relationship

from app.db.base import Base, utcnow


class CustomizationType(str, enum.Enum):
    SIZE = "size"
    ADDON = "addon"
    CHOICE = "choice"


class MenuCategory(Base):
    __tablename__ = "menu_categories"

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    restaurant_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    order: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    restaurant = relationship("Restaurant", back_populates="categories")
    menu_items = relationship(
        "MenuItem",
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="MenuItem.created_at",
    )


class MenuItem(Base):
    __tablename__ = "menu_items"

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    restaurant_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("menu_categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    price: float = Column(Float, nullable=False)  # type: ignore[assignment]
    image: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    is_available: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    preparation_time: int = Column(Integer, nullable=False, default=15)  # type: ignore[assignment]  # minutes
    allergens: str | None = Column(Text, nullable=True)  # type: ignore[assignment]

    # Nutrition facts (all optional)
    calories: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    protein: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    carbs: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    fat: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    fiber: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    sodium: float | None = Column(Float, nullable=True)  # type: ignore[assignment]

    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    restaurant = relationship("Restaurant")
    category = relationship("MenuCategory", back_populates="menu_items")
    customizations = relationship(
        "MenuCustomization",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="MenuCustomization.created_at",
    )


class MenuCustomization(Base):
    __tablename__ = "menu_customizations"

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    menu_item_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    type: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # size | addon | choice
    required: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    max_selections: int = Column(Integer, nullable=False, default=1)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    menu_item = relationship("MenuItem", back_populates="customizations")
    options = relationship(
        "CustomizationOption",
        back_populates="customization",
        cascade="all, delete-orphan",
        order_by="CustomizationOption.created_at",
    )


class CustomizationOption(Base):
    __tablename__ = "customization_options"

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    customization_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("menu_customizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    price_modifier: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    is_available: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    customization = relationship("MenuCustomization", back_populates="options")
