"""Utilities for storing images uploaded as base64 payloads."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Final
from uuid import uuid4

from app.config import get_settings
from app.core.errors import FileTooLarge, InvalidInputError

logger = logging.getLogger(__name__)

settings = get_settings()

IMAGE_EXTENSIONS: Final[dict[str, str]] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_MAX_NAME_LENGTH: Final[int] = 50


@dataclass(slots=True)
class StoredImage:
    """Represents an image persisted by the storage backend."""

    file_name: str
    content_type: str
    file_size: int
    absolute_path: Path
    url: str


def _media_root() -> Path:
    root = settings.media_root
    root.mkdir(parents=True, exist_ok=True)
    return root


def sanitize_file_name(file_name: str) -> str:
    """Strip the extension and reduce ``file_name`` to a filesystem-safe stem."""

    stem = re.sub(r"\.[^/.]+$", "", file_name)
    stem = _UNSAFE_CHARS.sub("_", stem)
    stem = re.sub(r"_{2,}", "_", stem).strip("_")
    return stem[:_MAX_NAME_LENGTH] or "image"


def _strip_data_url(file_data: str) -> str:
    if not file_data.startswith("data:"):
        return file_data
    _, separator, payload = file_data.partition(",")
    if not separator:
        raise InvalidInputError("Invalid data URL format")
    return payload


def _decode_base64(payload: str) -> bytes:
    if not payload or len(payload) % 4 != 0 or not _BASE64_PATTERN.match(payload):
        raise InvalidInputError("Invalid file data format. Expected base64 encoded data.")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise InvalidInputError("Invalid file data format. Expected base64 encoded data.") from exc


def upload_image(*, file_data: str, file_name: str, content_type: str, author_id: str) -> StoredImage:
    """Validate a base64 encoded image and persist it under ``media_root/images``."""

    extension = IMAGE_EXTENSIONS.get(content_type)
    if extension is None:
        allowed = ", ".join(IMAGE_EXTENSIONS)
        raise InvalidInputError(f"Unsupported image type: {content_type}. Allowed types: {allowed}")

    payload = _strip_data_url(file_data.strip())
    limit = settings.max_image_upload_size
    limit_label = f"Maximum size is {limit / (1024 * 1024):g}MB"

    # Reject oversized payloads before decoding them.
    if len(payload) * 3 // 4 > limit:
        raise FileTooLarge(f"File too large. {limit_label}")

    data = _decode_base64(payload)
    if len(data) > limit:
        raise FileTooLarge(f"File too large. {limit_label}")

    if not file_name.strip():
        raise InvalidInputError("File name cannot be empty")

    target_dir = _media_root() / "images"
    target_dir.mkdir(parents=True, exist_ok=True)

    author_prefix = _UNSAFE_CHARS.sub("_", author_id)[:_MAX_NAME_LENGTH]
    stored_name = f"{author_prefix}_{uuid4().hex}_{sanitize_file_name(file_name)}{extension}"
    absolute_path = target_dir / stored_name
    absolute_path.write_bytes(data)

    base = settings.media_base_url.rstrip("/")
    logger.info("Stored image %s (%d bytes) for user %s", stored_name, len(data), author_id)
    return StoredImage(
        file_name=file_name,
        content_type=content_type,
        file_size=len(data),
        absolute_path=absolute_path,
        url=f"{base}/images/{stored_name}",
    )
