"""Tag API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hoso.api.deps import require_admin
from hoso.core.logging import get_logger
from hoso.db import get_db
from hoso.schemas.common import MessageResponse
from hoso.schemas.tag import (
    TagCreate,
    TagDetailResponse,
    TagListResponse,
    TagResponse,
    TagSyncReportResponse,
    TagSyncResponse,
    TagUpdate,
    TagWriteResponse,
)
from hoso.services.tag import (
    TagConflictError,
    TagInUseError,
    TagNotFoundError,
    TagService,
    TagValidationError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/tags", tags=["tags"])


# =============================================================================
# Listing and creation
# =============================================================================


@router.get("", response_model=TagListResponse)
async def list_tags(
    limit: int = Query(0, ge=0, description="Maximum tags to return; 0 for all"),
    search: str | None = Query(None, description="Substring of the name or slug"),
    active_only: bool = Query(False, alias="activeOnly"),
    db: AsyncSession = Depends(get_db),
) -> TagListResponse:
    """List tags, most used first."""
    service = TagService(db)
    try:
        tags = await service.list_tags(limit=limit, search=search, active_only=active_only)
    except Exception as e:
        logger.exception("tag_list_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Không thể lấy danh sách đặc điểm")

    return TagListResponse(tags=[TagResponse.model_validate(t) for t in tags])


@router.post(
    "",
    response_model=TagWriteResponse,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
async def create_tag(
    payload: TagCreate,
    db: AsyncSession = Depends(get_db),
) -> TagWriteResponse:
    """Create a tag."""
    service = TagService(db)
    try:
        tag = await service.create_tag(payload)
        await db.commit()
    except TagValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TagConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.exception("tag_create_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Không thể tạo đặc điểm")

    return TagWriteResponse(
        message="Tạo đặc điểm thành công",
        tag=TagResponse.model_validate(tag),
    )


# =============================================================================
# Synchronisation (declared before /{tag_id})
# =============================================================================


@router.get("/sync", response_model=TagSyncReportResponse)
async def get_sync_status(
    db: AsyncSession = Depends(get_db),
) -> TagSyncReportResponse:
    """Compare tag records with tags used on published profiles."""
    service = TagService(db)
    try:
        report = await service.sync_report()
    except Exception as e:
        logger.exception("tag_sync_report_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Không thể kiểm tra trạng thái sync")

    return TagSyncReportResponse(stats=report)


@router.post(
    "/sync",
    response_model=TagSyncResponse,
    dependencies=[Depends(require_admin)],
)
async def sync_tags(
    db: AsyncSession = Depends(get_db),
) -> TagSyncResponse:
    """Rebuild all tag records and counts from published profiles."""
    service = TagService(db)
    try:
        stats = await service.resync_all()
        await db.commit()
    except Exception as e:
        logger.exception("tag_sync_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Không thể sync tags")

    return TagSyncResponse(message="Sync tags thành công", stats=stats)


# =============================================================================
# Single tag
# =============================================================================


@router.get("/{tag_id}", response_model=TagDetailResponse)
async def get_tag(
    tag_id: str,
    db: AsyncSession = Depends(get_db),
) -> TagDetailResponse:
    """Get one tag."""
    service = TagService(db)
    try:
        tag = await service.get_tag(tag_id)
    except TagNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception("tag_get_failed", tag_id=tag_id, error=str(e))
        raise HTTPException(status_code=500, detail="Không thể lấy thông tin đặc điểm")

    return TagDetailResponse(tag=TagResponse.model_validate(tag))


@router.put(
    "/{tag_id}",
    response_model=TagWriteResponse,
    dependencies=[Depends(require_admin)],
)
async def update_tag(
    tag_id: str,
    payload: TagUpdate,
    db: AsyncSession = Depends(get_db),
) -> TagWriteResponse:
    """Partially update a tag."""
    service = TagService(db)
    try:
        tag = await service.update_tag(tag_id, payload)
        await db.commit()
    except TagNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TagValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TagConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.exception("tag_update_failed", tag_id=tag_id, error=str(e))
        raise HTTPException(status_code=500, detail="Không thể cập nhật đặc điểm")

    return TagWriteResponse(
        message="Cập nhật đặc điểm thành công",
        tag=TagResponse.model_validate(tag),
    )


@router.delete(
    "/{tag_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_tag(
    tag_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete a tag that no published profile uses."""
    service = TagService(db)
    try:
        await service.delete_tag(tag_id)
        await db.commit()
    except TagNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TagInUseError as e:
        raise HTTPException(
            status_code=409,
            detail={"error": str(e), "profilesCount": e.profiles_count},
        )
    except Exception as e:
        logger.exception("tag_delete_failed", tag_id=tag_id, error=str(e))
        raise HTTPException(status_code=500, detail="Không thể xóa đặc điểm")

    return MessageResponse(message="Xóa đặc điểm thành công")
