"""Pydantic schemas for the tag API."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from hoso.schemas.common import ApiModel


class TagCreate(ApiModel):
    """Request body for creating a tag."""

    name: str = Field(..., max_length=50)
    description: str | None = Field(None, max_length=200)
    color: str | None = Field(None, max_length=16)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()


class TagUpdate(ApiModel):
    """Request body for a partial tag update."""

    name: str | None = Field(None, max_length=50)
    description: str | None = Field(None, max_length=200)
    color: str | None = Field(None, max_length=16)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None


class TagResponse(ApiModel):
    """A tag with its usage count."""

    id: str
    name: str
    slug: str
    description: str | None = None
    count: int
    is_active: bool
    color: str
    created_at: datetime
    updated_at: datetime


class TagListResponse(ApiModel):
    """List of tags."""

    tags: list[TagResponse]


class TagDetailResponse(ApiModel):
    """Single tag."""

    tag: TagResponse


class TagWriteResponse(ApiModel):
    """Response after creating or updating a tag."""

    message: str
    tag: TagResponse


class TagSyncStats(ApiModel):
    """Outcome of a full tag resync."""

    total: int
    created: int
    updated: int
    reset: int
    errors: int


class TagSyncResponse(ApiModel):
    """Response of a full tag resync."""

    message: str
    stats: TagSyncStats


class MissingTag(ApiModel):
    """A tag used by profiles that has no tag record yet."""

    name: str
    slug: str
    count: int


class TagSyncReport(ApiModel):
    """Comparison between tag records and tags used on profiles."""

    tag_model_count: int
    profile_unique_tags_count: int
    missing_tags_count: int
    stale_count_tags: int
    needs_sync: bool
    missing_tags: list[MissingTag]


class TagSyncReportResponse(ApiModel):
    """Response of the sync status check."""

    stats: TagSyncReport
