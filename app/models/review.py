"""
Review & Favorite models.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (JSON, CheckConstraint, Column, DateTime, ForeignKey,
                        Integer, Text, UniqueConstraint, Uuid)
from sqlalchemy.orm import relationship

from app.db.base import Base, utcnow


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
    )

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    user_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    restaurant_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # At most one review per order
    order_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    rating: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    comment: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    photos: list[str] | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    response: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    response_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, index=True)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    user = relationship("User")
    restaurant = relationship("Restaurant")

    @property
    def user_name(self) -> str:
        return self.user.full_name if self.user else ""


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "restaurant_id", name="uq_favorites_user_restaurant"),
    )

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    user_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    restaurant_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]

    user = relationship("User")
    restaurant = relationship("Restaurant")
