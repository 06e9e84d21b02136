"""Pydantic schemas for the image upload API."""

from __future__ import annotations

from pydantic import Field

from hoso.schemas.common import ApiModel


class RenditionInfo(ApiModel):
    """One stored rendition of an uploaded image."""

    url: str
    width: int
    height: int
    size: int = Field(..., description="File size in bytes")


class ImageMetadata(ApiModel):
    """Metadata for a processed image, ready to attach to a profile."""

    base_filename: str
    url: str = Field(..., description="URL of the medium rendition")
    alt: str
    caption: str | None = None
    width: int
    height: int
    format: str = "webp"
    bytes: int
    blur_data_url: str = Field(..., alias="blurDataURL")
    dominant_color: str
    sizes: dict[str, RenditionInfo]
    is_lcp: bool = Field(False, alias="isLCP")


class UploadResult(ApiModel):
    """Response after a successful upload."""

    success: bool = True
    data: ImageMetadata


class DeleteUploadResponse(ApiModel):
    """Response after deleting an image's renditions."""

    success: bool = True
    message: str
    deleted: int = Field(0, description="Number of rendition files removed")
