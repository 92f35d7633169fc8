"""Image upload and link preview endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from app.core import upload_image
from app.schemas import ImageUploadRequest, ImageUploadResponse, LinkPreview, LinkPreviewRequest
from app.services import fetch_link_preview

router = APIRouter(prefix="/media", tags=["media"])


@router.post("/images", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_image_endpoint(payload: ImageUploadRequest) -> ImageUploadResponse:
    stored = upload_image(
        file_data=payload.file_data,
        file_name=payload.file_name,
        content_type=payload.content_type,
        author_id=payload.author_id,
    )
    return ImageUploadResponse(url=stored.url)


@router.post("/link-preview", response_model=LinkPreview | None)
async def generate_link_preview(payload: LinkPreviewRequest) -> LinkPreview | None:
    """Return preview metadata for a URL, or ``null`` when none is available."""

    return await fetch_link_preview(payload.url)
