"""Pydantic schemas for the profile API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from hoso.db.models.enums import ProfileStatus, Region
from hoso.schemas.common import ApiModel


class PhotoSchema(ApiModel):
    """A photo attached to a profile, as produced by the upload API."""

    url: str
    base_filename: str = ""
    alt: str
    caption: str | None = None
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    format: str = "webp"
    bytes: int = Field(0, ge=0)
    dominant_color: str | None = None
    is_lcp: bool = Field(False, alias="isLCP")
    blur_data_url: str | None = Field(None, alias="blurDataURL")
    sizes: dict[str, Any] | None = None


class _ProfileFields(ApiModel):
    @field_validator("tags", check_fields=False)
    @classmethod
    def strip_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [tag.strip() for tag in value if tag and tag.strip()]


class ProfileCreate(_ProfileFields):
    """Request body for creating a profile."""

    name: str = Field(..., min_length=1, max_length=100)
    age: int = Field(..., ge=1, le=120)
    height: int | None = Field(None, ge=50, le=250, description="Height in cm")
    weight: int | None = Field(None, ge=20, le=300, description="Weight in kg")
    region: str | None = Field(
        None, description="Region name, code (bac/trung/nam) or slug; inferred from province if omitted"
    )
    province: str = Field(..., min_length=1, max_length=100)
    district: str | None = Field(None, max_length=100)
    occupation: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    photos: list[PhotoSchema] = Field(default_factory=list)
    status: ProfileStatus = ProfileStatus.PUBLISHED
    is_featured: bool = False
    featured_score: int = 0


class ProfileUpdate(_ProfileFields):
    """Request body for a partial profile update. The slug cannot change."""

    name: str | None = Field(None, min_length=1, max_length=100)
    age: int | None = Field(None, ge=1, le=120)
    height: int | None = Field(None, ge=50, le=250)
    weight: int | None = Field(None, ge=20, le=300)
    region: str | None = None
    province: str | None = Field(None, min_length=1, max_length=100)
    district: str | None = Field(None, max_length=100)
    occupation: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    tags: list[str] | None = None
    photos: list[PhotoSchema] | None = None
    status: ProfileStatus | None = None
    is_featured: bool | None = None
    featured_score: int | None = None


class ProfileResponse(ApiModel):
    """A profile as returned by the API."""

    id: str
    slug: str
    name: str
    age: int
    height: int | None = None
    weight: int | None = None
    region: Region
    province: str
    district: str | None = None
    occupation: str
    occupation_slug: str
    description: str | None = None
    tags: list[str]
    tag_slugs: list[str]
    photos: list[PhotoSchema]
    status: ProfileStatus
    is_featured: bool
    featured_score: int
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None = None


class Pagination(ApiModel):
    """Pagination block of a listing response."""

    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class ProfileListResponse(ApiModel):
    """Paginated profile listing."""

    profiles: list[ProfileResponse]
    pagination: Pagination


class ProfileDetailResponse(ApiModel):
    """Single profile."""

    profile: ProfileResponse


class ProfileWriteResponse(ApiModel):
    """Response after creating or updating a profile."""

    message: str
    profile: ProfileResponse


class OccupationListResponse(ApiModel):
    """Known occupations."""

    success: bool = True
    occupations: list[str]
