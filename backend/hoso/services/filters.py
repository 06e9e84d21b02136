"""Translate between browse filter state and URLs.

A browse URL carries region and province as path segments and occupation,
tags and age as query parameters::

    /kham-pha/mien-bac/ha-noi?occupation=sinh-vien&tags=vui-ve,sang-tao&age=18-22

``parse_location`` is the inverse of ``build_location``. Display labels for
occupations and tags come from the static label tables; unknown slugs fall
back to title case and lose their diacritics.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from urllib.parse import urlencode

from hoso.core.config import settings
from hoso.db.models import Region
from hoso.services.profile_query import (
    AgeFilter,
    AgeRange,
    OccupationFilter,
    ProfileQuery,
    ProvinceFilter,
    RegionFilter,
    TagFilter,
    format_age_token,
    parse_age_token,
)
from hoso.taxonomy import OCCUPATION_LABELS, TAG_LABELS, find_province, find_region
from hoso.utils.slug import slug_to_label, to_slug

__all__ = [
    "AgeRange",
    "FilterState",
    "build_location",
    "format_age_token",
    "parse_age_token",
    "parse_location",
    "to_path_segments",
    "to_profile_query",
    "to_query_params",
]


@dataclass(frozen=True)
class FilterState:
    """Filters selected on a browse page. Values are display labels."""

    region: Region | None = None
    province: str | None = None
    occupation: str | None = None
    age_range: AgeRange | None = None
    tags: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.region or self.province or self.occupation or self.age_range or self.tags
        )

    @property
    def tag_slugs(self) -> list[str]:
        return list(dict.fromkeys(s for s in (to_slug(t) for t in self.tags) if s))


def _effective_region(state: FilterState) -> Region | None:
    if state.region is not None:
        return state.region
    province = find_province(state.province)
    return province.region if province else None


def to_path_segments(state: FilterState) -> list[str]:
    """Region slug then province slug; the region is implied by a known province."""
    region = _effective_region(state)
    if region is None:
        return []

    region_info = find_region(region)
    segments = [region_info.slug]

    if state.province:
        province = find_province(state.province)
        if province is not None and province.region is region:
            segments.append(province.slug)
    return segments


def to_query_params(state: FilterState) -> dict[str, str]:
    """Occupation slug, comma-joined tag slugs and age token; empty values omitted."""
    params: dict[str, str] = {}
    if state.occupation and to_slug(state.occupation):
        params["occupation"] = to_slug(state.occupation)
    if state.tag_slugs:
        params["tags"] = ",".join(state.tag_slugs)
    age = format_age_token(state.age_range)
    if age:
        params["age"] = age
    return params


def build_location(state: FilterState, base_path: str | None = None) -> str:
    """Full browse URL for a filter state."""
    base = (base_path if base_path is not None else settings.browse_base_path).rstrip("/")
    path = "/".join([base, *to_path_segments(state)]) or "/"
    params = to_query_params(state)
    if params:
        path += "?" + urlencode(params, safe=",")
    return path


def _split_tags(value: str | Sequence[str] | None) -> list[str]:
    if not value:
        return []
    values = [value] if isinstance(value, str) else list(value)
    return [part.strip() for item in values for part in item.split(",") if part.strip()]


def parse_location(
    segments: Sequence[str] | str | None,
    params: Mapping[str, str | Sequence[str]] | None = None,
) -> FilterState:
    """Decode browse path segments and query parameters into a filter state.

    Unknown region or province slugs are dropped, as is a province outside
    the given region. Segments after the province are read as tag slugs;
    query tags come first when both are present.
    """
    if isinstance(segments, str):
        segments = [s for s in segments.split("/") if s]
    segments = list(segments or [])
    params = params or {}

    region_slug = segments[0] if segments else None
    province_slug = segments[1] if len(segments) > 1 else None
    path_tags = segments[2:]

    region_info = find_region(region_slug) if region_slug else None
    region = region_info.region if region_info else None

    province_name = None
    province = find_province(province_slug) if province_slug else None
    if province is not None and (region is None or province.region is region):
        province_name = province.name
        region = region or province.region

    occupation_slug = to_slug(_first(params.get("occupation")))
    occupation = (
        slug_to_label(occupation_slug, OCCUPATION_LABELS) if occupation_slug else None
    )

    tag_slugs: list[str] = []
    for raw in _split_tags(params.get("tags")) + list(path_tags):
        slug = to_slug(raw)
        if slug and slug not in tag_slugs:
            tag_slugs.append(slug)
    tags = tuple(slug_to_label(slug, TAG_LABELS) for slug in tag_slugs)

    age_range = parse_age_token(_first(params.get("age")))

    return FilterState(
        region=region,
        province=province_name,
        occupation=occupation,
        age_range=age_range,
        tags=tags,
    )


def _first(value: str | Sequence[str] | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value[0] if value else None


def to_profile_query(state: FilterState) -> ProfileQuery:
    """Published-profile query matching a filter state."""
    province = find_province(state.province) if state.province else None
    region = _effective_region(state)
    occupation_slug = to_slug(state.occupation) if state.occupation else ""

    return ProfileQuery(
        region=RegionFilter(region) if region else None,
        province=ProvinceFilter(province.name if province else state.province)
        if state.province
        else None,
        occupation=OccupationFilter(occupation_slug) if occupation_slug else None,
        tags=TagFilter(tuple(state.tag_slugs)) if state.tag_slugs else None,
        age=AgeFilter(state.age_range)
        if state.age_range and not state.age_range.is_open
        else None,
    )
