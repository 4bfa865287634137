"""Pydantic schemas for checkout, orders and tracking."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field, model_validator

from app.models.order import OrderStatus, PaymentMethodType
from app.schemas.common import CamelModel, Pagination
from app.schemas.restaurant import RestaurantSummary
from app.schemas.user import AddressCreate, AddressRead


class OrderItemIn(CamelModel):
    menu_item_id: uuid.UUID
    quantity: int = Field(ge=1)
    customizations_data: list[Any] | dict[str, Any] | None = None
    special_instructions: str | None = None


class OrderCreate(CamelModel):
    restaurant_id: uuid.UUID
    items: list[OrderItemIn] = Field(min_length=1)
    delivery_address_id: uuid.UUID | None = None
    delivery_address: AddressCreate | None = None
    payment_method_type: PaymentMethodType
    payment_details: dict[str, Any] | None = None
    special_instructions: str | None = None
    tip: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _one_address(self) -> "OrderCreate":
        if (self.delivery_address_id is None) == (self.delivery_address is None):
            raise ValueError("Provide exactly one of deliveryAddressId or deliveryAddress")
        return self


class OrderStatusUpdate(CamelModel):
    status: OrderStatus
    message: str | None = Field(default=None, max_length=500)
    latitude: float | None = None
    longitude: float | None = None


class OrderItemRead(CamelModel):
    id: uuid.UUID
    menu_item_id: uuid.UUID | None
    name: str
    price: float
    quantity: int
    customizations_data: list[Any] | dict[str, Any] | None
    special_instructions: str | None


class TrackingUpdateRead(CamelModel):
    id: uuid.UUID
    sequence: int
    status: str
    message: str
    latitude: float | None
    longitude: float | None
    created_at: datetime | None


class CustomerSummary(CamelModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    phone: str


class OrderRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    restaurant_id: uuid.UUID
    status: str
    total_amount: float
    delivery_fee: float
    tax: float
    tip: float
    grand_total: float
    payment_method_type: str
    special_instructions: str | None
    estimated_delivery_time: datetime | None
    actual_delivery_time: datetime | None
    created_at: datetime | None
    updated_at: datetime | None
    restaurant: RestaurantSummary | None = None
    delivery_address: AddressRead | None = None
    items: list[OrderItemRead] = []


class OrderDetail(OrderRead):
    tracking_updates: list[TrackingUpdateRead] = []


class RestaurantOrderRead(OrderRead):
    user: CustomerSummary | None = None


class OrderList(CamelModel):
    orders: list[OrderRead]
    pagination: Pagination


class RestaurantOrderList(CamelModel):
    orders: list[RestaurantOrderRead]
    pagination: Pagination
