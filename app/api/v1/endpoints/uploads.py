"""
Image uploads.

Files land in ``UPLOAD_DIR/images/<restaurants|menu>/`` under a random
name and are served back publicly from ``/api/uploads/...``.  Every path
segment taken from a request is checked before touching the filesystem.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse

from app.api.v1.deps import get_current_claims, get_settings
from app.core.config import Settings
from app.core.exceptions import (NotFoundError, PayloadTooLargeError,
                                 ValidationError)
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.token import TokenClaims
from app.schemas.upload import UploadRead

router = APIRouter(tags=["uploads"])
logger = logging.getLogger(__name__)

IMAGES_DIR = "images"
SUBDIRS = {"restaurant": "restaurants", "menu": "menu"}
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}
IMAGE_SUFFIXES = frozenset(ALLOWED_IMAGE_TYPES.values()) | {".jpeg"}
_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _safe_path(settings: Settings, category: str, subdir: str, filename: str) -> Path:
    for segment in (category, subdir, filename):
        if ".." in segment or not _SAFE_SEGMENT.match(segment):
            raise ValidationError("Invalid file path")
    if category != IMAGES_DIR or subdir not in SUBDIRS.values():
        raise NotFoundError("File not found")
    return Path(settings.UPLOAD_DIR) / category / subdir / filename


@router.post("/upload/image", response_model=ApiResponse[UploadRead])
async def upload_image(
    upload_type: str = Form(..., alias="type"),
    file: UploadFile = File(...),
    _claims: TokenClaims = Depends(get_current_claims),
    settings: Settings = Depends(get_settings),
) -> dict:
    subdir = SUBDIRS.get(upload_type)
    if subdir is None:
        raise ValidationError("Invalid upload type. Must be 'restaurant' or 'menu'")

    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Invalid file type. Only JPEG, PNG, WebP, and GIF images are allowed")

    # Read one byte past the limit to detect oversize files without buffering them whole
    data = await file.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(data) > settings.MAX_UPLOAD_SIZE:
        raise PayloadTooLargeError(
            f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE} bytes"
        )

    # The client's filename never picks the extension; serving guesses the media type from it
    filename = f"{uuid.uuid4()}_{int(time.time())}{ALLOWED_IMAGE_TYPES[content_type]}"

    target_dir = Path(settings.UPLOAD_DIR) / IMAGES_DIR / subdir
    target_dir.mkdir(parents=True, exist_ok=True)
    (target_dir / filename).write_bytes(data)
    logger.info("Stored upload %s/%s (%d bytes)", subdir, filename, len(data))

    return {
        "success": True,
        "message": "File uploaded successfully",
        "data": {
            "url": f"{settings.API_PREFIX}/uploads/{IMAGES_DIR}/{subdir}/{filename}",
            "filename": filename,
            "size": len(data),
            "type": content_type,
        },
    }


@router.delete("/upload/images/{subdir}/{filename}", response_model=MessageResponse)
async def delete_image(
    subdir: str,
    filename: str,
    _claims: TokenClaims = Depends(get_current_claims),
    settings: Settings = Depends(get_settings),
) -> dict:
    path = _safe_path(settings, IMAGES_DIR, subdir, filename)
    if not path.is_file():
        raise NotFoundError("File not found")
    path.unlink()
    logger.info("Deleted upload %s/%s", subdir, filename)
    return {"success": True, "message": "File deleted successfully"}


@router.get("/uploads/{category}/{subdir}/{filename}")
async def serve_upload(
    category: str,
    subdir: str,
    filename: str,
    settings: Settings = Depends(get_settings),
) -> FileResponse:
    path = _safe_path(settings, category, subdir, filename)
    if path.suffix.lower() not in IMAGE_SUFFIXES or not path.is_file():
        raise NotFoundError("File not found")
    return FileResponse(path)
