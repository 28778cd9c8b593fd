from __future__ import annotations

from io import BytesIO

from PIL import Image

from posterstamp.constants import OUTPUT_FORMATS
from posterstamp.errors import EncodeError
from posterstamp.mathutils import round_half_up
from posterstamp.models import EncodedImage

DEFAULT_QUALITY = 0.9


def resolve_output_format(fmt: str) -> tuple[str, str, str]:
    """Return ``(pillow format, content type, extension)`` for ``jpg``/``jpeg``/``png``."""
    key = fmt.lower().lstrip(".")
    if key not in OUTPUT_FORMATS:
        raise ValueError(f"output format must be jpeg/jpg or png, got: {fmt!r}")
    return OUTPUT_FORMATS[key]


def jpeg_quality(quality: float) -> int:
    return max(1, min(100, round_half_up(quality * 100)))


def encode_poster(image: Image.Image, fmt: str = "jpg", quality: float = DEFAULT_QUALITY) -> EncodedImage:
    """Encode a flattened poster. ``quality`` in [0, 1] applies to JPEG only."""
    pil_format, content_type, extension = resolve_output_format(fmt)
    buffer = BytesIO()
    try:
        if pil_format == "JPEG":
            image.convert("RGB").save(buffer, format="JPEG", quality=jpeg_quality(quality), optimize=True)
        else:
            image.save(buffer, format="PNG", optimize=True)
    except (OSError, ValueError) as exc:
        raise EncodeError(f"cannot encode poster as {extension}: {exc}") from exc
    return EncodedImage(data=buffer.getvalue(), content_type=content_type, extension=extension, size=image.size)
