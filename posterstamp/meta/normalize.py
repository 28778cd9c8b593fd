from __future__ import annotations

import logging
import re
from typing import Any, Callable

from posterstamp.constants import UNKNOWN
from posterstamp.mathutils import format_number, round_half_up
from posterstamp.models import PosterMetadata

LOGGER = logging.getLogger(__name__)

# Tag candidates in priority order. The record's own keys come last so that a
# normalized record can be fed back in and produce itself.
MAKE_KEYS = ["Make", "cameraMake", "camera_make"]
MODEL_KEYS = ["Model", "CameraModelName", "cameraModel", "camera_model"]
LENS_MODEL_KEYS = ["LensModel", "lensModel", "lens_model"]
LENS_INFO_KEYS = ["LensInfo", "LensSpecification"]
FOCAL_KEYS = ["FocalLength", "focalLength", "focal_length"]
APERTURE_KEYS = ["FNumber", "aperture"]
EXPOSURE_KEYS = ["ExposureTime", "ShutterSpeed", "shutterSpeed", "shutter_speed"]
ISO_KEYS = ["ISO", "ISOSpeedRatings", "PhotographicSensitivity", "iso"]


def _normalize_lookup(raw: dict[str, Any]) -> dict[str, Any]:
    lookup: dict[str, Any] = {}
    for key, value in raw.items():
        k = str(key).strip().lower()
        if not k:
            continue
        lookup.setdefault(k, value)
        if ":" in k:
            lookup.setdefault(k.split(":")[-1], value)
    return lookup


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    if isinstance(value, (list, tuple)):
        text_items = [str(v).strip() for v in value if str(v).strip()]
        value = " ".join(text_items)
    text = str(value).replace("\x00", " ").strip()
    text = re.sub(r"\s+", " ", text)
    return text or None


def _pick(lookup: dict[str, Any], candidates: list[str]) -> Any | None:
    for key in candidates:
        value = lookup.get(key.lower())
        if value is None:
            continue
        if isinstance(value, str) and value.strip() in ("", UNKNOWN):
            continue
        return value
    return None


def _to_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
        return _to_float(value)
    numerator = getattr(value, "numerator", None)
    denominator = getattr(value, "denominator", None)
    if numerator is not None and denominator:
        return float(numerator) / float(denominator)
    text = _clean_text(value)
    if not text:
        return None
    match = re.search(r"[-+]?\d+(\.\d+)?", text)
    if not match:
        return None
    return float(match.group(0))


def _to_positive(value: Any) -> float | None:
    number = _to_float(value)
    if number is None or number <= 0:
        return None
    return number


def _parse_exposure_seconds(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
        return seconds if seconds > 0 else None
    if not isinstance(value, (str, bytes)):
        return _to_positive(value)

    text = _clean_text(value)
    if not text:
        return None
    text = text.lower().replace("sec", "").replace("s", "").strip()
    if "/" in text:
        left, right = text.split("/", 1)
        numerator = float(left.strip())
        denominator = float(right.strip())
        if denominator == 0:
            return None
        seconds = numerator / denominator
        return seconds if seconds > 0 else None
    seconds = float(text)
    return seconds if seconds > 0 else None


def format_focal_length(value: float) -> str:
    return f"{round_half_up(value)}mm"


def format_aperture(value: float) -> str:
    return f"f/{format_number(value)}"


def format_shutter(seconds: float) -> str:
    if seconds >= 1:
        return f"{format_number(seconds)}s"
    return f"1/{round_half_up(1 / seconds)}s"


def format_lens_info(value: Any) -> str | None:
    """Render a lens specification (min/max focal, min/max aperture) as ``24-70mm f/2.8``."""
    if isinstance(value, str):
        parts = value.replace(",", " ").split()
        try:
            numbers = [float(p) for p in parts]
        except ValueError:
            return _clean_text(value)
    elif isinstance(value, (list, tuple)):
        numbers = [_to_float(v) or 0.0 for v in value]
    else:
        return _clean_text(value)
    if len(numbers) != 4:
        return _clean_text(value)

    min_focal, max_focal, min_f, max_f = numbers
    pieces: list[str] = []
    if min_focal > 0:
        if max_focal > 0 and max_focal != min_focal:
            pieces.append(f"{format_number(min_focal)}-{format_number(max_focal)}mm")
        else:
            pieces.append(f"{format_number(min_focal)}mm")
    if min_f > 0:
        if max_f > 0 and max_f != min_f:
            pieces.append(f"f/{format_number(min_f)}-{format_number(max_f)}")
        else:
            pieces.append(f"f/{format_number(min_f)}")
    return " ".join(pieces) or None


def _camera_text(lookup: dict[str, Any], keys: list[str]) -> str | None:
    return _clean_text(_pick(lookup, keys))


def _lens_text(lookup: dict[str, Any]) -> str | None:
    lens = _clean_text(_pick(lookup, LENS_MODEL_KEYS))
    if lens:
        return lens
    info = _pick(lookup, LENS_INFO_KEYS)
    if info is None:
        return None
    return format_lens_info(info)


def _focal_text(lookup: dict[str, Any]) -> str | None:
    focal = _to_positive(_pick(lookup, FOCAL_KEYS))
    return format_focal_length(focal) if focal is not None else None


def _aperture_text(lookup: dict[str, Any]) -> str | None:
    aperture = _to_positive(_pick(lookup, APERTURE_KEYS))
    return format_aperture(aperture) if aperture is not None else None


_RECIPROCAL_SHUTTER = re.compile(r"1\s*/\s*(\d+)\s*(?:s|sec)?", re.IGNORECASE)


def _shutter_text(lookup: dict[str, Any]) -> str | None:
    value = _pick(lookup, EXPOSURE_KEYS)
    # "1/1s" reads back as one second; keep unit fractions in reciprocal form.
    if isinstance(value, str):
        match = _RECIPROCAL_SHUTTER.fullmatch(value.strip())
        if match and int(match.group(1)) > 0:
            return f"1/{int(match.group(1))}s"
    seconds = _parse_exposure_seconds(value)
    return format_shutter(seconds) if seconds is not None else None


def _iso_text(lookup: dict[str, Any]) -> str | None:
    value = _pick(lookup, ISO_KEYS)
    if value is None or value == 0:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return _clean_text(value)


_FIELD_READERS: dict[str, Callable[[dict[str, Any]], str | None]] = {
    "camera_make": lambda lookup: _camera_text(lookup, MAKE_KEYS),
    "camera_model": lambda lookup: _camera_text(lookup, MODEL_KEYS),
    "lens_model": _lens_text,
    "focal_length": _focal_text,
    "aperture": _aperture_text,
    "shutter_speed": _shutter_text,
    "iso": _iso_text,
}


def normalize_metadata(raw_metadata: dict[str, Any] | None) -> PosterMetadata:
    """Map a raw tag table onto the fixed display record.

    Each field is read independently; a tag that is missing or fails to parse
    leaves its field at ``unknown`` without affecting the others.
    """
    lookup = _normalize_lookup(raw_metadata or {})
    values: dict[str, str] = {}
    for name, reader in _FIELD_READERS.items():
        try:
            text = reader(lookup)
        except Exception as exc:
            LOGGER.debug("Ignoring unreadable metadata field %s: %s", name, exc)
            text = None
        values[name] = text or UNKNOWN
    return PosterMetadata(**values)
