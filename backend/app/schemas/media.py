"""Schemas for image uploads and link previews."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ImageUploadRequest(BaseModel):
    """Base64 encoded image, optionally wrapped in a ``data:`` URL."""

    file_data: str = Field(..., description="Base64 encoded image bytes")
    file_name: str
    content_type: str
    author_id: str


class ImageUploadResponse(BaseModel):
    url: str


class LinkPreviewRequest(BaseModel):
    url: str = Field(..., min_length=1)
