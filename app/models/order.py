"""
Order aggregate: the order row, its line items and the append-only
tracking history.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (JSON, Column, DateTime, Float, ForeignKey, Integer,
                        String, Text, UniqueConstraint, Uuid)
from sqlalchemy.orm import relationship

from app.db.base import Base, utcnow


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY_FOR_PICKUP = "ready_for_pickup"
    PICKED_UP = "picked_up"
    ON_THE_WAY = "on_the_way"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethodType(str, enum.Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    DIGITAL_WALLET = "digital_wallet"
    CASH = "cash"


class Order(Base):
    __tablename__ = "orders"

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    user_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    restaurant_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=OrderStatus.PENDING.value,
        index=True,
    )
    total_amount: float = Column(Float, nullable=False)  # type: ignore[assignment]  # item subtotal
    delivery_fee: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    tax: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    tip: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    delivery_address_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("addresses.id"), nullable=False
    )
    payment_method_type: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    payment_details: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    special_instructions: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    estimated_delivery_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    actual_delivery_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, index=True)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    user = relationship("User")
    restaurant = relationship("Restaurant")
    delivery_address = relationship("Address")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.created_at",
    )
    tracking_updates = relationship(
        "TrackingUpdate",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="TrackingUpdate.sequence",
    )

    @property
    def grand_total(self) -> float:
        return round(self.total_amount + self.delivery_fee + self.tax + self.tip, 2)


class OrderItem(Base):
    __tablename__ = "order_items"

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    order_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Nulled when the menu item is deleted; name and price below survive
    menu_item_id: uuid.UUID | None = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True
    )
    # Snapshot of the menu item at checkout time
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    price: float = Column(Float, nullable=False)  # type: ignore[assignment]
    quantity: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    customizations_data: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    special_instructions: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    order = relationship("Order", back_populates="items")


class TrackingUpdate(Base):
    """Immutable record of one status change.  Rows are only ever inserted."""

    __tablename__ = "tracking_updates"
    __table_args__ = (
        UniqueConstraint("order_id", "sequence", name="uq_tracking_updates_order_sequence"),
    )

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    order_id: uuid.UUID = Column(  # type: ignore[assignment]
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sequence: int = Column(Integer, nullable=False)  # type: ignore[assignment]  # 1-based
    status: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    message: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    latitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    longitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]

    order = relationship("Order", back_populates="tracking_updates")
