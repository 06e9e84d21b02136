"""Occupation listing endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hoso.core.logging import get_logger
from hoso.db import get_db
from hoso.schemas.profile import OccupationListResponse
from hoso.services.profile import ProfileService
from hoso.taxonomy import DEFAULT_OCCUPATIONS

logger = get_logger(__name__)

router = APIRouter(tags=["occupations"])


@router.get("/occupations", response_model=OccupationListResponse)
async def list_occupations(
    db: AsyncSession = Depends(get_db),
) -> OccupationListResponse | JSONResponse:
    """Occupations in use merged with the default list, sorted.

    On a database error the default list is still returned, with status 500.
    """
    service = ProfileService(db)
    try:
        occupations = await service.list_occupations()
    except SQLAlchemyError as e:
        logger.error("occupation_list_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Không thể lấy danh sách nghề nghiệp",
                "occupations": sorted(DEFAULT_OCCUPATIONS),
            },
        )

    return OccupationListResponse(occupations=occupations)
