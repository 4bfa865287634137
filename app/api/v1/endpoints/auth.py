"""
Auth endpoints: registration, login, token refresh, password flows and
the caller's profile.
"""

# No ``from __future__ import annotations`` here: slowapi's wrapper would
# hide this module's globals from FastAPI's annotation resolution.

import logging
import uuid

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import (get_current_claims, get_current_user, get_db,
                             get_settings)
from app.core.config import Settings
from app.core.exceptions import (AuthenticationError, ConflictError,
                                 ValidationError)
from app.core.rate_limit import limiter
from app.core.security import (create_access_token,
                               create_password_reset_token,
                               decode_access_token,
                               decode_password_reset_token, get_password_hash,
                               verify_password)
from app.models.user import User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.token import AuthData, RefreshRequest, TokenClaims
from app.schemas.user import (ForgotPasswordData, ForgotPasswordRequest,
                              LoginRequest, PasswordChange, ProfileUpdate,
                              ResetPasswordRequest, UserCreate, UserRead)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _auth_data(settings: Settings, user: User) -> dict:
    token = create_access_token(settings, user_id=user.id, email=user.email, role=user.role)
    return {"user": user, "token": token}


def _subject(payload: dict, message: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(payload["sub"]))
    except (KeyError, ValueError):
        raise AuthenticationError(message)


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Create a customer or restaurant-owner account and sign the caller in."""
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise ConflictError("User with this email already exists")

    user = User(
        email=body.email,
        hashed_password=get_password_hash(body.password),
        first_name=body.first_name.strip(),
        last_name=body.last_name.strip(),
        phone=body.phone.strip(),
        role=body.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered %s as %s", user.email, user.role)

    return {
        "success": True,
        "message": "User registered successfully",
        "data": _auth_data(settings, user),
    }


@router.post("/login", response_model=ApiResponse[AuthData])
@limiter.limit("5/minute")
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()

    # One message for every failure so accounts cannot be enumerated
    if user is None or not user.is_active or not verify_password(body.password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")

    return {
        "success": True,
        "message": "Login successful",
        "data": _auth_data(settings, user),
    }


@router.post("/refresh", response_model=ApiResponse[AuthData])
async def refresh_token(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Re-issue a still-valid access token with a fresh expiry."""
    payload = decode_access_token(settings, body.refresh_token)
    if payload is None:
        raise AuthenticationError("Invalid refresh token")

    user_id = _subject(payload, "Invalid refresh token")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    return {
        "success": True,
        "message": "Token refreshed successfully",
        "data": _auth_data(settings, user),
    }


@router.post("/logout", response_model=MessageResponse)
async def logout(claims: TokenClaims = Depends(get_current_claims)) -> dict:
    """Tokens are stateless; the client discards its copy."""
    logger.info("User %s logged out", claims.sub)
    return {"success": True, "message": "Logged out successfully"}


# ── Password flows ──────────────────────────────────────────────────
@router.post("/forgot-password", response_model=ApiResponse[ForgotPasswordData])
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    message = "If the email exists, a password reset link has been sent"
    result = await db.execute(
        select(User).where(User.email == body.email, User.is_active.is_(True))
    )
    user = result.scalar_one_or_none()
    if user is None:
        return {"success": True, "message": message}

    token = create_password_reset_token(settings, user_id=user.id, email=user.email)
    logger.info("Password reset requested for %s", user.email)
    # No mail delivery: the token is echoed back outside production only
    data = {"reset_token": None if settings.is_production else token}
    return {"success": True, "message": message, "data": data}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    payload = decode_password_reset_token(settings, body.token)
    if payload is None:
        raise AuthenticationError("Invalid or expired reset token")

    user_id = _subject(payload, "Invalid reset token")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active or user.email != payload.get("email"):
        raise AuthenticationError("User not found or inactive")

    user.hashed_password = get_password_hash(body.password)
    await db.commit()
    logger.info("Password reset for %s", user.email)
    return {"success": True, "message": "Password reset successfully"}


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if not verify_password(body.current_password, current_user.hashed_password):
        raise ValidationError("Current password is incorrect")

    current_user.hashed_password = get_password_hash(body.new_password)
    await db.commit()
    logger.info("Password changed for %s", current_user.email)
    return {"success": True, "message": "Password changed successfully"}


# ── Profile ─────────────────────────────────────────────────────────
@router.get("/profile", response_model=ApiResponse[UserRead])
async def get_profile(current_user: User = Depends(get_current_user)) -> dict:
    return {"success": True, "message": "Profile retrieved successfully", "data": current_user}


@router.put("/profile", response_model=ApiResponse[UserRead])
async def update_profile(
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(current_user, field, value.strip())
    await db.commit()
    await db.refresh(current_user)
    return {"success": True, "message": "Profile updated successfully", "data": current_user}
