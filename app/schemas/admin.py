"""Pydantic schemas for the admin dashboard."""

from __future__ import annotations

from app.schemas.common import CamelModel, Pagination
from app.schemas.order import RestaurantOrderRead
from app.schemas.restaurant import RestaurantRead


class DashboardStats(CamelModel):
    total_users: int
    active_users: int
    total_restaurants: int
    active_restaurants: int
    total_orders: int
    pending_orders: int
    delivered_orders: int
    cancelled_orders: int
    total_revenue: float


class AdminOrderList(CamelModel):
    orders: list[RestaurantOrderRead]
    pagination: Pagination


class AdminRestaurantList(CamelModel):
    restaurants: list[RestaurantRead]
    pagination: Pagination
