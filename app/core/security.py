"""
JWT claim-set issuance / verification and password hashing (bcrypt).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
PASSWORD_RESET_TOKEN_TYPE = "password_reset"


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
def _encode(settings: Settings, claims: dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _decode(settings: Settings, token: str, token_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type or not payload.get("sub"):
        return None
    return payload


def create_access_token(
    settings: Settings,
    *,
    user_id: uuid.UUID | str,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign the claim set {sub, email, role} with a fixed expiry."""
    return _encode(
        settings,
        {"sub": str(user_id), "email": email, "role": role, "type": ACCESS_TOKEN_TYPE},
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_password_reset_token(settings: Settings, *, user_id: uuid.UUID | str, email: str) -> str:
    return _encode(
        settings,
        {"sub": str(user_id), "email": email, "type": PASSWORD_RESET_TOKEN_TYPE},
        timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
    )


def decode_access_token(settings: Settings, token: str) -> dict | None:
    """Return payload dict if *access* token is valid, else ``None``."""
    return _decode(settings, token, ACCESS_TOKEN_TYPE)


def decode_password_reset_token(settings: Settings, token: str) -> dict | None:
    """Return payload dict if *password reset* token is valid, else ``None``."""
    return _decode(settings, token, PASSWORD_RESET_TOKEN_TYPE)
