"""
Restaurant App API: application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from app.api.v1.api import api_router
from app.api.v1.endpoints import health
from app.core.config import Settings
from app.core.exceptions import register_exception_handlers
from app.core.rate_limit import limiter
from app.core.security import get_password_hash
from app.db.migrations import apply_migrations
from app.db.session import create_engine, create_session_factory
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


async def seed_admin(application: FastAPI) -> None:
    """Create the configured admin account on first run."""
    settings: Settings = application.state.settings
    async with application.state.session_factory() as session:
        result = await session.execute(
            select(User).where(User.email == settings.FIRST_ADMIN_EMAIL)
        )
        if result.scalar_one_or_none() is None:
            admin = User(
                email=settings.FIRST_ADMIN_EMAIL,
                hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                first_name="System",
                last_name="Administrator",
                phone="",
                role=UserRole.ADMIN.value,
            )
            session.add(admin)
            await session.commit()
            logger.info(
                "Default admin created: %s (password: <redacted>)",
                settings.FIRST_ADMIN_EMAIL,
            )


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    await apply_migrations(application.state.engine)
    await seed_admin(application)

    logger.info("%s v%s started", application.state.settings.PROJECT_NAME, application.state.settings.VERSION)
    yield
    await application.state.engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    if settings.uses_insecure_secret:
        logger.warning("SECRET_KEY is the built-in default; set a random value outside development")

    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Food delivery REST API",
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # One immutable settings value, one engine and session factory per app
    engine = create_engine(settings)
    application.state.settings = settings
    application.state.engine = engine
    application.state.session_factory = create_session_factory(engine)
    application.state.limiter = limiter

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(health.router)
    application.include_router(api_router, prefix=settings.API_PREFIX)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.settings.SERVER_HOST, port=app.state.settings.SERVER_PORT)
