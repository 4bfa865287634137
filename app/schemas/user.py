"""Pydantic schemas for identities, profiles and addresses."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field, field_validator

from app.models.user import UserRole
from app.schemas.common import CamelModel, Pagination

# Roles a caller may pick for themselves at registration
_SELF_SERVICE_ROLES = {UserRole.CUSTOMER.value, UserRole.RESTAURANT_OWNER.value}


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


class UserCreate(CamelModel):
    email: str
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=30)
    role: str = UserRole.CUSTOMER.value

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        if v not in _SELF_SERVICE_ROLES:
            raise ValueError(f"Role must be one of: {sorted(_SELF_SERVICE_ROLES)}")
        return v

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        return _normalise_email(v)


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        return v.strip().lower()


class UserRead(CamelModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    phone: str
    role: str
    is_active: bool
    created_at: datetime | None
    updated_at: datetime | None


class ProfileUpdate(CamelModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, min_length=1, max_length=30)


class PasswordChange(CamelModel):
    current_password: str
    new_password: str = Field(min_length=6)


class ForgotPasswordRequest(CamelModel):
    email: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        return _normalise_email(v)


class ForgotPasswordData(CamelModel):
    # Only populated outside production
    reset_token: str | None = None


class ResetPasswordRequest(CamelModel):
    token: str
    password: str = Field(min_length=6)


class UserStatusUpdate(CamelModel):
    is_active: bool


class UserRoleUpdate(CamelModel):
    role: UserRole


class UserList(CamelModel):
    users: list[UserRead]
    pagination: Pagination


# ── Addresses ───────────────────────────────────────────────────────
class AddressCreate(CamelModel):
    street: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    zip_code: str = Field(min_length=1, max_length=20)
    country: str = "US"
    is_default: bool = False
    latitude: float | None = None
    longitude: float | None = None


class AddressRead(CamelModel):
    id: uuid.UUID
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    is_default: bool
    latitude: float | None
    longitude: float | None
    created_at: datetime | None
