from __future__ import annotations

import logging
from io import BytesIO
from typing import Any

from PIL import ExifTags, Image

LOGGER = logging.getLogger(__name__)


def _ratio_to_float(value: Any) -> float:
    if isinstance(value, tuple) and len(value) == 2:
        numerator, denominator = value
        if denominator == 0:
            return 0.0
        return float(numerator) / float(denominator)
    numerator = getattr(value, "numerator", None)
    denominator = getattr(value, "denominator", None)
    if numerator is not None and denominator not in (None, 0):
        return float(numerator) / float(denominator)
    return float(value)


def _plain_value(value: Any) -> Any:
    if isinstance(value, (str, bytes, int, float)):
        return value
    if isinstance(value, (list, tuple)):
        return [_plain_value(item) for item in value]
    try:
        return _ratio_to_float(value)
    except (TypeError, ValueError):
        return str(value)


def _collect(target: dict[str, Any], items: Any) -> None:
    for tag_id, value in items:
        tag = ExifTags.TAGS.get(tag_id, str(tag_id))
        if isinstance(value, dict):
            continue
        target.setdefault(tag, _plain_value(value))


def extract_pillow_metadata(data: bytes) -> dict[str, Any]:
    """Read IFD0 and Exif sub-IFD tags from encoded image bytes.

    Never raises: unreadable input yields an empty mapping.
    """
    metadata: dict[str, Any] = {}
    try:
        with Image.open(BytesIO(data)) as image:
            exif = image.getexif()
            if not exif:
                return metadata
            _collect(metadata, exif.items())
            _collect(metadata, exif.get_ifd(ExifTags.IFD.Exif).items())
    except Exception as exc:
        LOGGER.debug("Pillow metadata reader failed: %s", exc)
    return metadata
