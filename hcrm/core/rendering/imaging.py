"""
PNG Finishing
=============

Shared post-processing for both backends: read image dimensions with Pillow,
optionally re-encode, and wrap the bytes in a PNGResult.
"""

from typing import Any, Dict, Optional
import io

from PIL import Image

from hcrm.config.logging import get_logger
from hcrm.models.schemas import PNGResult

logger = get_logger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def image_mime(data: bytes) -> str:
    """MIME type of an embedded background; anything not PNG is sent as JPEG."""
    return "image/png" if data.startswith(PNG_SIGNATURE) else "image/jpeg"


def optimize_png(png_bytes: bytes) -> bytes:
    """
    Re-encode PNG bytes with maximum compression.

    Returns the original bytes when Pillow cannot process the image or the
    result is not smaller.
    """
    try:
        image = Image.open(io.BytesIO(png_bytes))
        output = io.BytesIO()
        image.save(output, format="PNG", optimize=True, compress_level=9)
        optimized_bytes = output.getvalue()
    except Exception as e:
        logger.warning("PNG optimization failed, using original", error=str(e))
        return png_bytes

    if len(optimized_bytes) >= len(png_bytes):
        return png_bytes

    logger.debug(
        "PNG optimization completed",
        original_size=len(png_bytes),
        optimized_size=len(optimized_bytes),
    )
    return optimized_bytes


def finalize_png(
    png_bytes: bytes,
    generator: str,
    optimize: bool = False,
    metadata: Optional[Dict[str, Any]] = None,
) -> PNGResult:
    """Build a PNGResult from raw PNG bytes."""
    if optimize:
        png_bytes = optimize_png(png_bytes)

    with Image.open(io.BytesIO(png_bytes)) as image:
        width, height = image.size

    return PNGResult(
        png_data=png_bytes,
        width=width,
        height=height,
        file_size=len(png_bytes),
        metadata={"generator": generator, "optimization": optimize, **(metadata or {})},
    )
