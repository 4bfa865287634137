"""
Restaurant, opening hours & gallery models.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (Boolean, CheckConstraint, Column, DateTime, Float,
                        ForeignKey, Integer, String, Text, Uuid)
from sqlalchemy.orm import relationship

from app.db.base import Base, utcnow


class Restaurant(Base):
    __tablename__ = "restaurants"
    __table_args__ = (
        CheckConstraint("price_range >= 1 AND price_range <= 3", name="ck_restaurants_price_range"),
    )

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    # One restaurant per owner
    owner_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    name: str = Column(String(200), nullable=False, index=True)  # type: ignore[assignment]
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    cuisine_type: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    address: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    phone: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(320), nullable=False)  # type: ignore[assignment]
    rating: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    review_count: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    price_range: int = Column(Integer, nullable=False, default=1)  # type: ignore[assignment]
    delivery_fee: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    min_delivery_time: int = Column(Integer, nullable=False, default=30)  # type: ignore[assignment]
    max_delivery_time: int = Column(Integer, nullable=False, default=60)  # type: ignore[assignment]
    is_open: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    image: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    owner = relationship("User")
    opening_hours = relationship(
        "OpeningHours",
        back_populates="restaurant",
        cascade="all, delete-orphan",
        order_by="OpeningHours.created_at",
    )
    gallery = relationship(
        "RestaurantImage",
        back_populates="restaurant",
        cascade="all, delete-orphan",
        order_by="RestaurantImage.order",
    )
    categories = relationship(
        "MenuCategory",
        back_populates="restaurant",
        cascade="all, delete-orphan",
    )


class OpeningHours(Base):
    __tablename__ = "opening_hours"

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    restaurant_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # monday..sunday
    open_time: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]  # HH:MM
    close_time: str | None = Column(String(5), nullable=True)  # type: ignore[assignment]
    is_closed: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    restaurant = relationship("Restaurant", back_populates="opening_hours")


class RestaurantImage(Base):
    __tablename__ = "restaurant_images"

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    restaurant_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    caption: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    order: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    restaurant = relationship("Restaurant", back_populates="gallery")
