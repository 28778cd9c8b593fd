from __future__ import annotations

import logging
from typing import Any

from posterstamp.errors import ExifToolUnavailableError
from posterstamp.meta.exiftool import extract_exiftool_metadata, resolve_mode
from posterstamp.meta.normalize import normalize_metadata
from posterstamp.meta.pillow_reader import extract_pillow_metadata
from posterstamp.models import PosterMetadata

LOGGER = logging.getLogger(__name__)


def extract_metadata(data: bytes, mode: str = "auto") -> dict[str, Any]:
    """Return the raw tag table for ``data``; ExifTool first, Pillow otherwise."""
    raw = extract_exiftool_metadata(data, mode=mode)
    if raw:
        return raw
    return extract_pillow_metadata(data)


def read_metadata(data: bytes, mode: str = "auto") -> PosterMetadata:
    """Best-effort metadata for a photo. Always returns a fully populated record.

    An unreadable file yields the all-``unknown`` record. A bad ``mode`` or a
    required ExifTool that is not installed are setup errors and are raised.
    """
    mode = resolve_mode(mode)
    try:
        raw = extract_metadata(data, mode=mode)
    except ExifToolUnavailableError:
        raise
    except Exception as exc:
        LOGGER.warning("Metadata extraction failed, using defaults: %s", exc)
        raw = {}
    return normalize_metadata(raw)
