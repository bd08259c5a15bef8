# model_file_manager/images.py
"""
Resized image variants.

A variant of ``avatars/xyz.png`` at 100x100 lives at
``resized/100x100/xyz.png`` (the configured ``resized_image_path`` template
plus the source basename) on the same disk. Variants are created the first
time they are asked for and never cleaned up.

Variants are keyed by basename only: two sources named ``xyz.png`` in
different directories of one disk share the same variant.
"""

import io
import logging
import posixpath
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from .conf import FileManagerConfig
from .exceptions import DecodeError
from .storage import Disk

logger = logging.getLogger(__name__)

# Formats Pillow can write that need a mode conversion first
RGB_ONLY_FORMATS = {'JPEG', 'JPG'}


# ==============================================================================
# PILLOW HELPERS
# ==============================================================================

def fit_within(size: Tuple[int, int], width: int, height: int) -> Tuple[int, int]:
    """
    Largest size with the source aspect ratio that fits inside width x height.

    Small images are scaled up, so one of the two bounds is always met exactly.
    """
    src_width, src_height = size
    scale = min(width / src_width, height / src_height)
    return max(1, round(src_width * scale)), max(1, round(src_height * scale))


def decode_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DecodeError(f"Cannot decode image: {exc}") from exc
    return image


def encode_image(image: Image.Image, image_format: str) -> bytes:
    image_format = (image_format or 'PNG').upper()
    if image_format in RGB_ONLY_FORMATS and image.mode not in ('RGB', 'L', 'CMYK'):
        image = image.convert('RGB')

    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def resize_image(data: bytes, width: int, height: int) -> bytes:
    """Decode, resize keeping the aspect ratio, and re-encode in the source format."""
    image = decode_image(data)
    source_format = image.format
    resized = image.resize(fit_within(image.size, width, height), Image.LANCZOS)
    return encode_image(resized, source_format)


# ==============================================================================
# RESOLVER
# ==============================================================================

class ResizedVariantResolver:
    """Maps (disk, path, width, height) to the URL of a resized copy."""

    def __init__(self, config: FileManagerConfig):
        self.config = config

    def variant_path(self, path: str, width: int, height: int) -> str:
        prefix = (
            self.config.resized_image_path
            .replace('{width}', str(width))
            .replace('{height}', str(height))
        )
        return prefix + posixpath.basename(path)

    def resolve(self, disk: Disk, path: str, width: int, height: int) -> str:
        """
        URL of the variant, generating it on a cache miss.

        Raises:
            StorageReadError: source could not be read
            DecodeError: source is not an image
            StorageWriteError: variant could not be written
        """
        variant = self.variant_path(path, width, height)

        if disk.exists(variant):
            logger.debug(f"Resized variant hit: {variant} on {disk.name}")
            return disk.url(variant)

        logger.info(f"Generating {width}x{height} variant of {path} on {disk.name}")
        disk.put(variant, resize_image(disk.get(path), width, height))
        return disk.url(variant)
