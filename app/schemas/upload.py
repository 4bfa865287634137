"""Pydantic schemas for image uploads."""

from __future__ import annotations

from app.schemas.common import CamelModel


class UploadRead(CamelModel):
    url: str
    filename: str
    size: int
    type: str
