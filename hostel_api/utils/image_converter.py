"""
Image conversion utility for converting uploads to WebP format.
Reduces file size before handing the bytes to the image host.
"""
import io
import logging
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# WebP conversion settings
DEFAULT_WEBP_QUALITY = 85  # Balance between quality and file size (0-100)
DEFAULT_WEBP_METHOD = 6    # Compression method (0-6, higher = better compression but slower)
MAX_DIMENSION = 3840       # Maximum width or height before downscaling


def convert_to_webp(
    image_bytes: bytes,
    quality: int = DEFAULT_WEBP_QUALITY,
    method: int = DEFAULT_WEBP_METHOD,
    max_dimension: Optional[int] = MAX_DIMENSION,
) -> Tuple[bytes, bool]:
    """
    Convert image bytes to WebP format.

    Args:
        image_bytes: Original image file bytes
        quality: WebP quality (0-100, default: 85)
        method: WebP compression method (0-6, default: 6)
        max_dimension: Maximum width or height before downscaling (None to disable)

    Returns:
        Tuple[bytes, bool]:
            - Converted image bytes (or original if skipped/failed)
            - Whether new WebP bytes were produced
    """
    try:
        image = Image.open(io.BytesIO(image_bytes))

        if image.format == 'WEBP':
            logger.debug("Image is already WebP format, skipping conversion")
            return image_bytes, False

        # WebP keeps transparency, palette images need RGBA first
        if image.mode == 'P':
            image = image.convert('RGBA')
        elif image.mode not in ('RGB', 'RGBA', 'LA'):
            image = image.convert('RGB')

        if max_dimension:
            width, height = image.size
            if width > max_dimension or height > max_dimension:
                image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
                logger.info(f"Downscaled image from {width}x{height} to {image.size[0]}x{image.size[1]}")

        webp_buffer = io.BytesIO()
        image.save(webp_buffer, format='WEBP', quality=quality, method=method)
        return webp_buffer.getvalue(), True

    except UnidentifiedImageError as e:
        logger.warning(f"Cannot identify image format: {str(e)}")
        return image_bytes, False

    except (OSError, ValueError) as e:
        logger.error(f"Error converting image to WebP: {str(e)}", exc_info=True)
        return image_bytes, False


def shrink_for_upload(content: bytes, filename: str, content_type: str) -> Tuple[bytes, str, str]:
    """
    Re-encode an upload as WebP when that makes it smaller.

    Returns:
        Tuple of (bytes, filename, content_type) to send to the image host
    """
    converted, converted_ok = convert_to_webp(content)
    if not converted_ok or len(converted) >= len(content):
        logger.debug(f"Keeping original encoding for {filename}")
        return content, filename, content_type

    logger.info(f"Converted {filename} to WebP: {len(content):,} bytes -> {len(converted):,} bytes")
    stem = filename.rsplit('.', 1)[0] if '.' in filename else filename
    return converted, f"{stem}.webp", "image/webp"
