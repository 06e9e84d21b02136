"""Image transform engine producing the fixed WebP rendition set.

Every upload becomes five square renditions (cover-fit, centre crop), a
dominant colour taken from the medium rendition and a tiny blurred WebP
placeholder encoded as a data URI. All encoding happens in memory before
any file is written, and a failed write removes the files already on disk.

The work is CPU-bound; async callers run ``transform`` in an executor.
"""

from __future__ import annotations

import base64
from collections import Counter
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageFilter, ImageOps

from hoso.core.config import settings
from hoso.core.logging import get_logger
from hoso.db.models.enums import RenditionSize

logger = get_logger(__name__)

# Edge length in pixels of each square rendition
RENDITION_SIZES: dict[RenditionSize, int] = {
    RenditionSize.THUMBNAIL: 150,
    RenditionSize.SMALL: 400,
    RenditionSize.MEDIUM: 800,
    RenditionSize.LARGE: 1200,
    RenditionSize.ORIGINAL: 2000,
}

OUTPUT_FORMAT = "webp"
ACCEPTED_FORMATS = frozenset({"JPEG", "PNG", "WEBP"})

# Colour quantisation for the dominant colour
COLOR_LEVELS = 16
COLOR_SAMPLE_SIZE = 64


class ImageTransformError(Exception):
    """Raised when an image buffer cannot be decoded or processed."""

    pass


@dataclass
class Rendition:
    """One encoded rendition and where it was written."""

    size: RenditionSize
    filename: str
    width: int
    height: int
    bytes: int
    path: Path | None = None


@dataclass
class TransformResult:
    """Output of a successful transform."""

    base_filename: str
    renditions: dict[RenditionSize, Rendition] = field(default_factory=dict)
    dominant_color: str = "rgb(0, 0, 0)"
    blur_data_url: str = ""
    format: str = OUTPUT_FORMAT

    @property
    def main(self) -> Rendition:
        """The medium rendition, used as the main image."""
        return self.renditions[RenditionSize.MEDIUM]


def rendition_filename(base_filename: str, size: RenditionSize) -> str:
    """File name of one rendition, e.g. ``{base}-medium.webp``."""
    return f"{base_filename}-{size.value}.{OUTPUT_FORMAT}"


class ImageTransformer:
    """Decode an image and write its rendition set to ``output_dir``."""

    def __init__(
        self,
        output_dir: Path,
        quality: int | None = None,
        effort: int | None = None,
        blur_size: int | None = None,
        blur_quality: int | None = None,
    ):
        self.output_dir = output_dir
        self.quality = quality if quality is not None else settings.image_quality
        self.effort = effort if effort is not None else settings.image_effort
        self.blur_size = blur_size if blur_size is not None else settings.blur_size
        self.blur_quality = (
            blur_quality if blur_quality is not None else settings.blur_quality
        )

    def transform(self, data: bytes, base_filename: str) -> TransformResult:
        """Produce and persist all renditions for one image.

        Args:
            data: Raw image bytes (JPEG, PNG or WebP).
            base_filename: Shared base name for every rendition.

        Returns:
            TransformResult with rendition metadata, dominant colour and
            blur placeholder.

        Raises:
            ImageTransformError: If the buffer is not a decodable image.
            OSError: If writing a rendition fails. Nothing is left on disk.
        """
        source = self._decode(data)

        result = TransformResult(base_filename=base_filename)
        encoded: dict[RenditionSize, bytes] = {}

        for size, edge in RENDITION_SIZES.items():
            fitted = ImageOps.fit(
                source, (edge, edge), method=Image.Resampling.LANCZOS, centering=(0.5, 0.5)
            )
            payload = self._encode(fitted, self.quality)
            encoded[size] = payload
            result.renditions[size] = Rendition(
                size=size,
                filename=rendition_filename(base_filename, size),
                width=fitted.width,
                height=fitted.height,
                bytes=len(payload),
            )
            if size is RenditionSize.MEDIUM:
                result.dominant_color = self.dominant_color(fitted)

        result.blur_data_url = self.blur_placeholder(source)

        self._write_all(result, encoded)

        logger.debug(
            "image_transformed",
            base_filename=base_filename,
            source_size=f"{source.width}x{source.height}",
            total_bytes=sum(len(payload) for payload in encoded.values()),
        )
        return result

    def _decode(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(BytesIO(data))
            img.load()
            source_format = img.format
            img = ImageOps.exif_transpose(img)
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise ImageTransformError(f"Cannot decode image: {e}") from e

        if source_format not in ACCEPTED_FORMATS:
            raise ImageTransformError(f"Unsupported image format: {source_format}")

        has_alpha = img.mode in ("RGBA", "LA") or (
            img.mode == "P" and "transparency" in img.info
        )
        return img.convert("RGBA" if has_alpha else "RGB")

    def _encode(self, img: Image.Image, quality: int) -> bytes:
        buffer = BytesIO()
        img.save(buffer, format="WEBP", quality=quality, method=self.effort)
        return buffer.getvalue()

    def _write_all(
        self, result: TransformResult, encoded: dict[RenditionSize, bytes]
    ) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        try:
            for size, payload in encoded.items():
                path = self.output_dir / result.renditions[size].filename
                path.write_bytes(payload)
                written.append(path)
                result.renditions[size].path = path
        except OSError:
            for path in written:
                path.unlink(missing_ok=True)
            logger.error(
                "rendition_write_failed",
                base_filename=result.base_filename,
                removed=len(written),
            )
            raise

    @staticmethod
    def dominant_color(img: Image.Image) -> str:
        """Most frequent colour bin of an image as ``rgb(r, g, b)``.

        The image is downsampled to 64x64 and each channel quantised to
        16 levels; the bin centre of the most common bin is returned.
        """
        sample = img.convert("RGB").resize(
            (COLOR_SAMPLE_SIZE, COLOR_SAMPLE_SIZE), Image.Resampling.BILINEAR
        )
        step = 256 // COLOR_LEVELS
        raw = sample.tobytes()
        bins = Counter(
            (r // step, g // step, b // step)
            for r, g, b in zip(raw[0::3], raw[1::3], raw[2::3])
        )
        (r, g, b), _ = bins.most_common(1)[0]
        half = step // 2
        return f"rgb({r * step + half}, {g * step + half}, {b * step + half})"

    def blur_placeholder(self, img: Image.Image) -> str:
        """Tiny blurred WebP of the image as a base64 data URI."""
        tiny = ImageOps.fit(
            img, (self.blur_size, self.blur_size), method=Image.Resampling.LANCZOS
        )
        tiny = tiny.filter(ImageFilter.GaussianBlur(1))
        payload = self._encode(tiny, self.blur_quality)
        return f"data:image/webp;base64,{base64.b64encode(payload).decode('ascii')}"
