"""
Shared test fixtures for the Restaurant App API test suite.

Every test gets its own app instance wired to a fresh in-memory SQLite
database (aiosqlite), so nothing leaks between tests.
"""

import os
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest

# Override environment BEFORE importing application modules: importing
# app.main builds the module-level app from the environment.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-restaurant-app-suite"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.rate_limit import limiter
from app.db.migrations import apply_migrations
from app.main import create_app

import helpers

TEST_SECRET_KEY = "test-secret-key-for-the-restaurant-app-suite"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        SECRET_KEY=TEST_SECRET_KEY,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
async def app(settings: Settings):
    """A fresh application with the schema migrated.

    ASGITransport does not run the lifespan, so migrations are applied here.
    """
    application = create_app(settings)
    await apply_migrations(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """The limiter is process-wide; start every test with empty counters."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session(app) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture
async def admin_token(app, settings: Settings) -> str:
    return await helpers.create_admin(app, settings)


@pytest.fixture
async def marketplace(async_client: AsyncClient) -> SimpleNamespace:
    """Customer A, owner B with restaurant R (one category, two items), owner C without a restaurant."""
    customer = await helpers.register(async_client, email="alice@example.com")
    owner = await helpers.register(async_client, email="bob@example.com", role="restaurant_owner")
    rival = await helpers.register(async_client, email="carol@example.com", role="restaurant_owner")

    restaurant = await helpers.create_restaurant(async_client, owner["token"], name="Bob's Burgers")
    category = await helpers.create_category(async_client, owner["token"], name="Mains")
    burger = await helpers.create_item(async_client, owner["token"], category["id"], name="Burger", price=12.5)
    fries = await helpers.create_item(async_client, owner["token"], category["id"], name="Fries", price=4.0)

    return SimpleNamespace(
        customer=customer,
        owner=owner,
        rival=rival,
        restaurant=restaurant,
        category=category,
        burger=burger,
        fries=fries,
    )
