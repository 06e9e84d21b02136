"""Image upload endpoints.

Uploads are turned into the fixed WebP rendition set and described by an
``ImageMetadata`` payload the admin form attaches to a profile.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from hoso.api.deps import require_admin
from hoso.core.logging import get_logger
from hoso.schemas.upload import DeleteUploadResponse, UploadResult
from hoso.services.image import ImageTransformError
from hoso.services.upload import UploadService, UploadValidationError

logger = get_logger(__name__)

router = APIRouter(
    prefix="/upload",
    tags=["upload"],
    dependencies=[Depends(require_admin)],
)


@router.post("", response_model=UploadResult)
async def upload_image(
    file: UploadFile | None = File(None, description="Image file (JPEG, PNG or WebP)"),
    name: str | None = Form(None),
    age: str | None = Form(None),
    province: str | None = Form(None),
    caption: str | None = Form(None),
    alt: str | None = Form(None),
) -> UploadResult:
    """Upload one image and generate its renditions.

    Maximum file size: 10MB (configurable)
    """
    service = UploadService()
    await service.ensure_upload_dir()

    try:
        data = await file.read() if file is not None else None
        metadata = await service.handle_upload(
            filename=file.filename if file is not None else None,
            data=data,
            content_type=file.content_type if file is not None else None,
            name=name,
            age=age,
            province=province,
            caption=caption,
            alt=alt,
        )
    except UploadValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ImageTransformError:
        raise HTTPException(status_code=400, detail="Không thể xử lý ảnh")
    except Exception as e:
        logger.exception("upload_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Lỗi server khi upload ảnh")

    return UploadResult(data=metadata)


@router.delete("", response_model=DeleteUploadResponse)
async def delete_image(
    filename: str | None = Query(None, description="Base filename of the image"),
) -> DeleteUploadResponse:
    """Delete every rendition of an uploaded image."""
    service = UploadService()
    try:
        deleted = await service.delete_renditions(filename or "")
    except UploadValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("upload_delete_failed", filename=filename, error=str(e))
        raise HTTPException(status_code=500, detail="Lỗi server khi xóa ảnh")

    return DeleteUploadResponse(message="Đã xóa ảnh thành công", deleted=deleted)
