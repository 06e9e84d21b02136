"""Image serving endpoint with long-lived caching."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response

from hoso.core.logging import get_logger
from hoso.services.upload import ImageAccessError, ImageNotFoundError, UploadService

logger = get_logger(__name__)

router = APIRouter(prefix="/images", tags=["images"])

CACHE_HEADERS = {
    "Cache-Control": "public, max-age=31536000, immutable",
    "X-Content-Type-Options": "nosniff",
    "Content-Security-Policy": "default-src 'none'",
}


@router.get("/{path:path}")
async def get_image(path: str, request: Request) -> Response:
    """Serve a stored rendition, falling back to the original source image."""
    service = UploadService()
    try:
        image = service.resolve_image(path)
    except ImageAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ImageNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    headers = {**CACHE_HEADERS, "ETag": image.etag}

    if_none_match = request.headers.get("if-none-match")
    if if_none_match and image.etag in [tag.strip() for tag in if_none_match.split(",")]:
        return Response(status_code=304, headers=headers)

    try:
        content = await service.read_image(image)
    except OSError as e:
        logger.error("image_read_failed", path=image.relative_path, error=str(e))
        raise HTTPException(status_code=500, detail="Không thể đọc ảnh")

    return Response(content=content, media_type=image.content_type, headers=headers)
