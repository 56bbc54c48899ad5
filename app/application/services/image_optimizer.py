"""Optional WebP re-encoding of large images (Pillow, in a worker thread)."""

from __future__ import annotations

import asyncio
import io
import logging
from typing import BinaryIO

from PIL import Image, ImageOps, UnidentifiedImageError

from app.application.interfaces.services import OptimizedImage
from app.core.constants import OPTIMIZABLE_IMAGE_TYPES, OPTIMIZED_CONTENT_TYPE
from app.shared.utils.sanitization import replace_extension

logger = logging.getLogger(__name__)

DEFAULT_WEBP_QUALITY = 80


def encode_webp(image_bytes: bytes, quality: int = DEFAULT_WEBP_QUALITY) -> bytes:
    """Re-encode an image as WebP at the original resolution."""
    im = Image.open(io.BytesIO(image_bytes))
    im = ImageOps.exif_transpose(im)
    if im.mode not in ("RGB", "RGBA"):
        im = im.convert("RGBA" if "A" in im.getbands() else "RGB")
    out = io.BytesIO()
    im.save(out, format="WEBP", quality=quality)
    return out.getvalue()


class ImageOptimizer:
    """Replaces large JPEG/PNG/WebP/TIFF/HEIC uploads with a smaller WebP.

    Only files above ``threshold_bytes`` are considered. The result is used
    only when strictly smaller than the original; any decode or encode
    failure keeps the original.
    """

    def __init__(
        self,
        threshold_bytes: int,
        quality: int = DEFAULT_WEBP_QUALITY,
        enabled: bool = True,
    ) -> None:
        self.threshold_bytes = threshold_bytes
        self.quality = quality
        self.enabled = enabled

    def should_optimize(self, content_type: str, size: int) -> bool:
        return self.enabled and content_type in OPTIMIZABLE_IMAGE_TYPES and size > self.threshold_bytes

    async def optimize(
        self,
        file_data: BinaryIO,
        filename: str,
        content_type: str,
        size: int,
    ) -> OptimizedImage | None:
        if not self.should_optimize(content_type, size):
            return None
        try:
            file_data.seek(0)
            original = await asyncio.to_thread(file_data.read)
            encoded = await asyncio.to_thread(encode_webp, original, self.quality)
        except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
            logger.warning("Image optimization failed, keeping original %s: %s", filename, e)
            return None
        finally:
            file_data.seek(0)
        if len(encoded) >= len(original):
            logger.debug("WebP not smaller for %s (%d >= %d)", filename, len(encoded), len(original))
            return None
        logger.info("Optimized %s: %d -> %d bytes", filename, len(original), len(encoded))
        return OptimizedImage(
            data=encoded,
            content_type=OPTIMIZED_CONTENT_TYPE,
            filename=replace_extension(filename, ".webp"),
        )
