"""Pydantic schemas for the browse API."""

from __future__ import annotations

from hoso.schemas.common import ApiModel
from hoso.schemas.profile import Pagination, ProfileResponse


class BrowseFilters(ApiModel):
    """Filter state decoded from a browse URL, with display labels."""

    region: str | None = None
    region_slug: str | None = None
    province: str | None = None
    province_slug: str | None = None
    occupation: str | None = None
    occupation_slug: str | None = None
    age: str | None = None
    age_min: int | None = None
    age_max: int | None = None
    tags: list[str] = []
    tag_slugs: list[str] = []


class BrowseResponse(ApiModel):
    """A browse page: decoded filters, canonical URL and matching profiles."""

    filters: BrowseFilters
    canonical_url: str
    profiles: list[ProfileResponse]
    pagination: Pagination
