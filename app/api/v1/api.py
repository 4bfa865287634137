"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (admin, auth, menu, orders, restaurants,
                                  reviews, uploads, users)

api_router = APIRouter()

# Auth (register, login, refresh, password flows, profile)
api_router.include_router(auth.router)

# The caller's account: profile, addresses, favorites
api_router.include_router(users.router)

# Restaurants (owner + public), menu, reviews
api_router.include_router(restaurants.router)
api_router.include_router(menu.router)
api_router.include_router(reviews.router)

# Checkout and the order status workflow
api_router.include_router(orders.router)

# Admin dashboard
api_router.include_router(admin.router)

# Image uploads and file serving
api_router.include_router(uploads.router)
