"""Pydantic schemas for JWT claim sets and auth responses."""

from __future__ import annotations

import uuid

from pydantic import BaseModel

from app.models.user import UserRole
from app.schemas.common import CamelModel
from app.schemas.user import UserRead


class TokenClaims(BaseModel):
    """Decoded access-token claim set attached to the request."""

    sub: uuid.UUID
    email: str
    role: str
    exp: int

    @property
    def user_id(self) -> uuid.UUID:
        return self.sub

    def has_role(self, *roles: UserRole) -> bool:
        # Exact, case-sensitive match; no role hierarchy
        return any(self.role == role.value for role in roles)


class AuthData(CamelModel):
    user: UserRead
    token: str


class RefreshRequest(CamelModel):
    refresh_token: str
