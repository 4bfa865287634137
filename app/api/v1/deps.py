"""
FastAPI dependencies: settings, database session, auth guards and
pagination.

Authentication is a small state machine run once per request:
no header -> 401, header without a ``Bearer`` token -> 401, token that
fails signature/expiry/type checks -> 401, token whose account is gone
or deactivated -> 401, otherwise the decoded claim set is attached to
``request.state.identity``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable, Coroutine
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Depends, Query, Request
from fastapi.security import APIKeyHeader
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.core.config import Settings
from app.core.exceptions import (AuthenticationError, AuthorizationError,
                                 NotFoundError)
from app.core.security import decode_access_token
from app.models.restaurant import Restaurant
from app.models.user import User, UserRole
from app.schemas.common import Pagination
from app.schemas.token import TokenClaims

# auto_error=False so a missing header surfaces as our own 401 envelope
bearer_header = APIKeyHeader(name="Authorization", auto_error=False)

MAX_PAGE_SIZE = 100


# ── Settings & database session ─────────────────────────────────────
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_claims(
    request: Request,
    authorization: Optional[str] = Depends(bearer_header),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> TokenClaims:
    """Validate the bearer token and attach its claim set to the request.

    The account is re-read on every request so a deactivation takes effect
    before the token expires.
    """
    if not authorization:
        raise AuthenticationError("Authorization header is required")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        raise AuthenticationError("Bearer token is required")

    payload = decode_access_token(settings, token)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    try:
        claims = TokenClaims.model_validate(payload)
    except PydanticValidationError:
        raise AuthenticationError("Invalid or expired token")

    user = await db.get(User, claims.sub)
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    request.state.identity = claims
    return claims


def require_roles(
    *roles: UserRole,
) -> Callable[..., Coroutine[Any, Any, TokenClaims]]:
    """Build a guard admitting only the listed roles (exact match, 403 otherwise)."""

    async def _guard(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if not claims.has_role(*roles):
            raise AuthorizationError("Insufficient permissions")
        return claims

    return _guard


async def get_current_user(
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> User:
    """The account behind the token, already checked active by the claims guard."""
    # Loaded into the session's identity map by get_current_claims
    user = await db.get(User, claims.sub)
    if user is None:
        raise AuthenticationError("User not found or inactive")
    return user


async def get_owner_restaurant(
    claims: TokenClaims = Depends(require_roles(UserRole.RESTAURANT_OWNER)),
    db: AsyncSession = Depends(get_db),
) -> Restaurant:
    """The caller's own restaurant."""
    result = await db.execute(select(Restaurant).where(Restaurant.owner_id == claims.sub))
    restaurant = result.scalar_one_or_none()
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    return restaurant


# ── Pagination ──────────────────────────────────────────────────────
@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def pagination(default_limit: int) -> Callable[..., PageParams]:
    """Out-of-range values fall back to defaults instead of failing."""

    def _params(
        page: int = Query(1),
        limit: int = Query(default_limit),
    ) -> PageParams:
        if page < 1:
            page = 1
        if limit < 1 or limit > MAX_PAGE_SIZE:
            limit = default_limit
        return PageParams(page=page, limit=limit)

    return _params


public_page = pagination(10)
admin_page = pagination(20)


async def paginate(db: AsyncSession, stmt: Select, params: PageParams) -> tuple[list, Pagination]:
    """Run *stmt* for one page; returns the rows and the pagination block."""
    total = await db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    result = await db.execute(stmt.offset(params.offset).limit(params.limit))
    rows = list(result.scalars().all())
    return rows, Pagination.build(params.page, params.limit, total or 0)
