"""Upload handling and image serving for profile photos.

Provides:
- Upload validation and collision-resistant base filenames
- Rendition generation through the image transform engine
- Deletion of every rendition of one image
- Safe path resolution for the image serving endpoint
"""

from __future__ import annotations

import asyncio
import hashlib
import mimetypes
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os

from hoso.core.config import settings
from hoso.core.logging import get_logger
from hoso.db.models.enums import RenditionSize
from hoso.schemas.upload import ImageMetadata, RenditionInfo
from hoso.services.image import (
    ImageTransformer,
    ImageTransformError,
    TransformResult,
    rendition_filename,
)

logger = get_logger(__name__)

# Vietnamese letters mapped to ASCII for file names
_VIETNAMESE_MAP = {
    "a": "àáạảãâầấậẩẫăằắặẳẵ",
    "e": "èéẹẻẽêềếệểễ",
    "i": "ìíịỉĩ",
    "o": "òóọỏõôồốộổỗơờớợởỡ",
    "u": "ùúụủũưừứựửữ",
    "y": "ỳýỵỷỹ",
    "d": "đ",
}
_FILENAME_TRANSLATION = str.maketrans(
    {ch: ascii_ch for ascii_ch, chars in _VIETNAMESE_MAP.items() for ch in chars}
)
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

RENDITION_SUFFIX = re.compile(
    r"-(thumbnail|small|medium|large|original)\.webp$", re.IGNORECASE
)

_EXTRA_CONTENT_TYPES = {
    ".webp": "image/webp",
    ".avif": "image/avif",
}


class UploadError(Exception):
    """Base exception for upload errors."""

    pass


class UploadValidationError(UploadError):
    """Raised when an upload request is invalid."""

    pass


class ImageNotFoundError(UploadError):
    """Raised when a requested image does not exist."""

    pass


class ImageAccessError(UploadError):
    """Raised when a requested path escapes the image roots."""

    pass


@dataclass(frozen=True)
class ResolvedImage:
    """A file located by the image serving endpoint."""

    path: Path
    relative_path: str
    content_type: str
    etag: str


def clean_filename_part(value: str) -> str:
    """Reduce free text to a lowercase ASCII file name fragment.

    This is looser than ``to_slug``: every run of non-alphanumeric
    characters becomes a single hyphen.
    """
    value = value.lower().translate(_FILENAME_TRANSLATION)
    return _NON_ALNUM.sub("-", value).strip("-")


def generate_base_filename(name: str, age: int, province: str) -> str:
    """Build a collision-resistant base filename for an upload."""
    timestamp = int(time.time() * 1000)
    random_part = secrets.token_hex(4)
    return (
        f"{clean_filename_part(name)}-{age}-tuoi-{clean_filename_part(province)}"
        f"-{timestamp}-{random_part}"
    )


def _content_type_for(path: Path) -> str:
    ext = path.suffix.lower()
    if ext in _EXTRA_CONTENT_TYPES:
        return _EXTRA_CONTENT_TYPES[ext]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


class UploadService:
    """Service for processing uploads and locating stored images."""

    def __init__(
        self,
        upload_path: Path | None = None,
        originals_path: Path | None = None,
    ):
        """Initialize the upload service.

        Args:
            upload_path: Root for renditions. Defaults to settings.
            originals_path: Fallback root for source images. Defaults to settings.
        """
        self.upload_path = upload_path or settings.upload_path
        self.originals_path = originals_path or settings.originals_path

    async def ensure_upload_dir(self) -> None:
        """Ensure the rendition directory exists."""
        await aiofiles.os.makedirs(self.upload_path, exist_ok=True)

    # ========== Upload ==========

    def validate_upload(
        self,
        filename: str | None,
        data: bytes | None,
        content_type: str | None,
        name: str | None,
        age: str | int | None,
        province: str | None,
    ) -> int:
        """Check an upload request and return the parsed age.

        Raises:
            UploadValidationError: On the first failing check.
        """
        if not filename or data is None:
            raise UploadValidationError("Không có file được upload")

        if not name or not name.strip() or age in (None, "") or not province or not province.strip():
            raise UploadValidationError("Thiếu thông tin bắt buộc: name, age, province")

        try:
            age_value = int(str(age).strip())
        except ValueError:
            raise UploadValidationError("Tuổi phải là số nguyên") from None
        if age_value <= 0:
            raise UploadValidationError("Tuổi phải là số nguyên")

        # The extension decides; a declared image type must agree with it
        ext = Path(filename).suffix.lower()
        declared = (content_type or "").split(";")[0].strip().lower()
        type_ok = (
            not declared.startswith("image/")
            or declared in settings.upload_allowed_content_types
        )
        if ext not in settings.upload_allowed_extensions or not type_ok:
            raise UploadValidationError(
                "Định dạng file không được hỗ trợ. Chỉ chấp nhận JPEG, PNG, WebP"
            )

        if len(data) == 0:
            raise UploadValidationError("File rỗng")
        if len(data) > settings.upload_max_size_bytes:
            raise UploadValidationError(
                f"File quá lớn. Kích thước tối đa là {settings.upload_max_size_mb}MB"
            )

        return age_value

    async def handle_upload(
        self,
        filename: str | None,
        data: bytes | None,
        content_type: str | None,
        name: str | None,
        age: str | int | None,
        province: str | None,
        caption: str | None = None,
        alt: str | None = None,
    ) -> ImageMetadata:
        """Validate an upload, generate its renditions and describe the result.

        The caller attaches the returned metadata to a profile; nothing is
        written to the database here.

        Raises:
            UploadValidationError: If the request is invalid.
            ImageTransformError: If the file is not a decodable image.
        """
        age_value = self.validate_upload(filename, data, content_type, name, age, province)

        name = name.strip()
        province = province.strip()
        base_filename = generate_base_filename(name, age_value, province)

        transformer = ImageTransformer(self.upload_path)
        loop = asyncio.get_event_loop()
        try:
            result = await loop.run_in_executor(
                None, transformer.transform, data, base_filename
            )
        except ImageTransformError as e:
            logger.warning("upload_decode_failed", filename=filename, error=str(e))
            raise

        metadata = self._build_metadata(
            result,
            alt=alt.strip() if alt and alt.strip() else f"{name} {age_value} tuổi, {province}",
            caption=caption.strip() if caption and caption.strip() else None,
        )

        logger.info(
            "upload_processed",
            base_filename=base_filename,
            filename=filename,
            size=len(data),
            dominant_color=metadata.dominant_color,
        )
        return metadata

    def image_url(self, filename: str) -> str:
        """Public URL of a stored rendition."""
        return f"{settings.images_url_prefix.rstrip('/')}/{filename}"

    def _build_metadata(
        self, result: TransformResult, alt: str, caption: str | None
    ) -> ImageMetadata:
        sizes = {
            size.value: RenditionInfo(
                url=self.image_url(rendition.filename),
                width=rendition.width,
                height=rendition.height,
                size=rendition.bytes,
            )
            for size, rendition in result.renditions.items()
        }
        main = result.main
        return ImageMetadata(
            base_filename=result.base_filename,
            url=self.image_url(main.filename),
            alt=alt,
            caption=caption,
            width=main.width,
            height=main.height,
            format=result.format,
            bytes=main.bytes,
            blur_data_url=result.blur_data_url,
            dominant_color=result.dominant_color,
            sizes=sizes,
            is_lcp=False,
        )

    # ========== Deletion ==========

    async def delete_renditions(self, base_filename: str) -> int:
        """Remove all renditions of one image.

        Missing files are skipped.

        Returns:
            Number of files removed.

        Raises:
            UploadValidationError: If the name is empty or contains a path.
        """
        if not base_filename or not base_filename.strip():
            raise UploadValidationError("Thiếu tham số filename")
        if "/" in base_filename or "\\" in base_filename or ".." in base_filename:
            raise UploadValidationError("Tên file không hợp lệ")

        deleted = 0
        for size in RenditionSize:
            path = self.upload_path / rendition_filename(base_filename, size)
            try:
                await aiofiles.os.remove(path)
                deleted += 1
            except FileNotFoundError:
                continue

        logger.info("renditions_deleted", base_filename=base_filename, deleted=deleted)
        return deleted

    # ========== Serving ==========

    def resolve_image(self, requested: str) -> ResolvedImage:
        """Locate a requested image under the upload root.

        Falls back to the originals directory with the rendition suffix
        stripped when the rendition is missing.

        Raises:
            ImageAccessError: If the path escapes its root.
            ImageNotFoundError: If no file matches.
        """
        requested = requested.lstrip("/")
        if not requested:
            raise ImageNotFoundError("Không tìm thấy ảnh")

        path = self._safe_join(self.upload_path, requested)
        if path.is_file():
            return self._describe(self.upload_path, path)

        if RENDITION_SUFFIX.search(requested):
            original_name = RENDITION_SUFFIX.sub("", requested)
            for candidate in self._original_candidates(original_name):
                fallback = self._safe_join(self.originals_path, candidate)
                if fallback.is_file():
                    logger.debug(
                        "image_served_from_originals",
                        requested=requested,
                        fallback=candidate,
                    )
                    return self._describe(self.originals_path, fallback)

        raise ImageNotFoundError("Không tìm thấy ảnh")

    async def read_image(self, image: ResolvedImage) -> bytes:
        """Read a resolved image from disk."""
        async with aiofiles.open(image.path, "rb") as f:
            return await f.read()

    @staticmethod
    def _original_candidates(stem: str) -> list[str]:
        if Path(stem).suffix:
            return [stem]
        return [stem] + [f"{stem}{ext}" for ext in settings.upload_allowed_extensions]

    @staticmethod
    def _safe_join(root: Path, requested: str) -> Path:
        root_resolved = root.resolve()
        path = (root_resolved / requested).resolve()
        if not path.is_relative_to(root_resolved):
            logger.warning("image_path_traversal", requested=requested, root=str(root))
            raise ImageAccessError("Truy cập bị từ chối")
        return path

    @staticmethod
    def _describe(root: Path, path: Path) -> ResolvedImage:
        relative = path.relative_to(root.resolve()).as_posix()
        etag = '"' + hashlib.md5(relative.encode("utf-8")).hexdigest() + '"'
        return ResolvedImage(
            path=path,
            relative_path=relative,
            content_type=_content_type_for(path),
            etag=etag,
        )
