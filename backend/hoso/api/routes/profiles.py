"""Profile API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hoso.api.deps import optional_admin, require_admin
from hoso.core.logging import get_logger
from hoso.db import get_db
from hoso.db.models import Profile, ProfileStatus
from hoso.schemas.common import MessageResponse
from hoso.schemas.profile import (
    Pagination,
    ProfileCreate,
    ProfileDetailResponse,
    ProfileListResponse,
    ProfileResponse,
    ProfileUpdate,
    ProfileWriteResponse,
)
from hoso.services.profile import (
    ProfileNotFoundError,
    ProfilePage,
    ProfileService,
    ProfileValidationError,
)
from hoso.services.profile_query import InvalidFilterError, ProfileQuery, StatusFilter

logger = get_logger(__name__)

router = APIRouter(prefix="/profiles", tags=["profiles"])


def to_profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse.model_validate(profile)


def to_pagination(page: ProfilePage) -> Pagination:
    return Pagination(
        page=page.page,
        limit=page.limit,
        total=page.total,
        pages=page.pages,
        has_next=page.has_next,
        has_prev=page.has_prev,
    )


@router.get("", response_model=ProfileListResponse)
async def list_profiles(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    region: str | None = Query(None, description="Region name, code or slug"),
    province: str | None = Query(None, description="Province name or slug"),
    occupation: str | None = Query(None),
    tags: str | None = Query(None, description="Comma-separated tag names or slugs"),
    age: str | None = Query(None, description="Age token: 18-22, duoi-18 or tren-35"),
    age_min: int | None = Query(None, alias="ageMin", ge=0),
    age_max: int | None = Query(None, alias="ageMax", ge=0),
    status: str | None = Query(None, description="published (default), draft, archived or all"),
    featured: bool = Query(False),
    exclude: str | None = Query(None, description="Profile ID to leave out"),
    is_admin: bool = Depends(optional_admin),
    db: AsyncSession = Depends(get_db),
) -> ProfileListResponse:
    """List profiles with filters, newest first."""
    try:
        query = ProfileQuery.from_params(
            status=status,
            region=region,
            province=province,
            occupation=occupation,
            tags=tags,
            age=age,
            age_min=age_min,
            age_max=age_max,
            featured=featured,
            exclude=exclude,
        )
    except InvalidFilterError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if query.status != StatusFilter(ProfileStatus.PUBLISHED) and not is_admin:
        raise HTTPException(status_code=401, detail="Không có quyền truy cập")

    service = ProfileService(db)
    try:
        result = await service.list_profiles(query, page=page, limit=limit)
    except Exception as e:
        logger.exception("profile_list_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Không thể lấy danh sách hồ sơ")

    return ProfileListResponse(
        profiles=[to_profile_response(p) for p in result.items],
        pagination=to_pagination(result),
    )


@router.post(
    "",
    response_model=ProfileWriteResponse,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
async def create_profile(
    payload: ProfileCreate,
    db: AsyncSession = Depends(get_db),
) -> ProfileWriteResponse:
    """Create a profile. The slug is generated from its attributes."""
    service = ProfileService(db)
    try:
        profile = await service.create_profile(payload)
        await db.commit()
    except ProfileValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError as e:
        logger.warning("profile_slug_conflict", error=str(e))
        raise HTTPException(status_code=409, detail="Slug đã tồn tại")
    except Exception as e:
        logger.exception("profile_create_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Không thể tạo hồ sơ")

    return ProfileWriteResponse(
        message="Hồ sơ đã được tạo thành công",
        profile=to_profile_response(profile),
    )


@router.get("/{slug}", response_model=ProfileDetailResponse)
async def get_profile(
    slug: str,
    is_admin: bool = Depends(optional_admin),
    db: AsyncSession = Depends(get_db),
) -> ProfileDetailResponse:
    """Get one profile. Unpublished profiles are only visible to admins."""
    service = ProfileService(db)
    try:
        profile = await service.get_profile(slug, include_unpublished=is_admin)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ProfileValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("profile_get_failed", slug=slug, error=str(e))
        raise HTTPException(status_code=500, detail="Không thể lấy thông tin hồ sơ")

    return ProfileDetailResponse(profile=to_profile_response(profile))


@router.put(
    "/{slug}",
    response_model=ProfileWriteResponse,
    dependencies=[Depends(require_admin)],
)
async def update_profile(
    slug: str,
    payload: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProfileWriteResponse:
    """Partially update a profile."""
    service = ProfileService(db)
    try:
        profile = await service.update_profile(slug, payload)
        await db.commit()
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ProfileValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("profile_update_failed", slug=slug, error=str(e))
        raise HTTPException(status_code=500, detail="Không thể cập nhật hồ sơ")

    return ProfileWriteResponse(
        message="Hồ sơ đã được cập nhật thành công",
        profile=to_profile_response(profile),
    )


@router.delete(
    "/{slug}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_profile(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete a profile and its photo files."""
    service = ProfileService(db)
    try:
        base_filenames = await service.delete_profile(slug)
        await db.commit()
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception("profile_delete_failed", slug=slug, error=str(e))
        raise HTTPException(status_code=500, detail="Không thể xóa hồ sơ")

    # Files go only once the row is gone for good
    await service.remove_photo_files(base_filenames)

    return MessageResponse(message="Hồ sơ đã được xóa thành công")
