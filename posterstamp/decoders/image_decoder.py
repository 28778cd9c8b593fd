from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image, ImageOps

from posterstamp.errors import PhotoDecodeError
from posterstamp.models import DecodedPhoto

LOGGER = logging.getLogger(__name__)

_HEIF_REGISTERED = False


def _register_heif_opener() -> bool:
    global _HEIF_REGISTERED
    if _HEIF_REGISTERED:
        return True
    try:
        from pillow_heif import register_heif_opener
    except ImportError:
        return False
    register_heif_opener()
    _HEIF_REGISTERED = True
    return True


def decode_photo(data: bytes) -> DecodedPhoto:
    """Decode image bytes to an upright RGB image.

    EXIF orientation is applied before the size is read, so width and height
    describe the photo as it should be displayed.
    """
    if not data:
        raise PhotoDecodeError("photo is empty")
    if not _register_heif_opener():
        LOGGER.debug("pillow-heif not installed, HEIF photos cannot be decoded")
    try:
        with Image.open(BytesIO(data)) as image:
            upright = ImageOps.exif_transpose(image)
            photo = upright.convert("RGB")
            photo.load()
    except Exception as exc:
        raise PhotoDecodeError(f"cannot decode photo: {exc}") from exc
    width, height = photo.size
    if width <= 0 or height <= 0:
        raise PhotoDecodeError(f"photo has no pixels: {width}x{height}")
    return DecodedPhoto(image=photo, width=width, height=height)
