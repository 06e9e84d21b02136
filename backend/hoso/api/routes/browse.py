"""Browse endpoint: decode a browse URL and return the matching profiles."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hoso.api.routes.profiles import to_pagination, to_profile_response
from hoso.core.logging import get_logger
from hoso.db import get_db
from hoso.schemas.browse import BrowseFilters, BrowseResponse
from hoso.services.filters import (
    FilterState,
    build_location,
    format_age_token,
    parse_location,
    to_profile_query,
    to_query_params,
)
from hoso.services.profile import ProfileService
from hoso.taxonomy import find_province, find_region

logger = get_logger(__name__)

router = APIRouter(prefix="/browse", tags=["browse"])


def _describe(state: FilterState) -> BrowseFilters:
    region = find_region(state.region) if state.region else None
    province = find_province(state.province) if state.province else None
    params = to_query_params(state)
    return BrowseFilters(
        region=region.name if region else None,
        region_slug=region.slug if region else None,
        province=state.province,
        province_slug=province.slug if province else None,
        occupation=state.occupation,
        occupation_slug=params.get("occupation"),
        age=format_age_token(state.age_range),
        age_min=state.age_range.min_age if state.age_range else None,
        age_max=state.age_range.max_age if state.age_range else None,
        tags=list(state.tags),
        tag_slugs=state.tag_slugs,
    )


@router.get("", response_model=BrowseResponse)
@router.get("/{segments:path}", response_model=BrowseResponse)
async def browse(
    request: Request,
    segments: str = "",
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
) -> BrowseResponse:
    """Decode ``/{region}/{province}/{tags...}?occupation=&tags=&age=``.

    Unknown region or province slugs are ignored; the canonical URL
    reflects only what was understood.
    """
    params = {
        key: request.query_params.getlist(key)
        for key in ("occupation", "tags", "age")
        if key in request.query_params
    }
    state = parse_location(segments, params)

    service = ProfileService(db)
    try:
        result = await service.list_profiles(to_profile_query(state), page=page, limit=limit)
    except Exception as e:
        logger.exception("browse_failed", segments=segments, error=str(e))
        raise HTTPException(status_code=500, detail="Không thể lấy danh sách hồ sơ")

    return BrowseResponse(
        filters=_describe(state),
        canonical_url=build_location(state),
        profiles=[to_profile_response(p) for p in result.items],
        pagination=to_pagination(result),
    )
