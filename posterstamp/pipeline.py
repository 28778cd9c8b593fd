from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

from posterstamp.constants import DEFAULT_TEMPLATE, VALID_TEMPLATES
from posterstamp.decoders.image_decoder import decode_photo
from posterstamp.models import EncodedImage, PosterMetadata, RenderRequest
from posterstamp.render.compositor import build_layers, composite_layers
from posterstamp.render.encoder import DEFAULT_QUALITY, encode_poster
from posterstamp.render.layout import compute_layout
from posterstamp.render.rasterize import get_rasterizer
from posterstamp.render.text_layer import build_text_layer

LOGGER = logging.getLogger(__name__)


def resolve_template(template_id: str | None) -> str:
    """Map a requested template id to a known one; unknown ids fall back to classic."""
    key = (template_id or "").strip().lower()
    if key in VALID_TEMPLATES:
        return key
    LOGGER.warning("Unknown template %r, falling back to %s", template_id, DEFAULT_TEMPLATE)
    return DEFAULT_TEMPLATE


def render_poster(
    request: RenderRequest,
    *,
    text_backend: str = "pillow",
    font_path: Path | None = None,
    bold_font_path: Path | None = None,
) -> Image.Image:
    template = resolve_template(request.template_id)
    geometry = compute_layout(request.width, request.height, template)
    text_layer = build_text_layer(request.metadata, geometry)
    layers = build_layers(request, geometry, text_layer)
    rasterizer = get_rasterizer(text_backend, font_path=font_path, bold_font_path=bold_font_path)
    LOGGER.debug(
        "Compositing %s poster %dx%d with layers %s",
        template,
        geometry.canvas_width,
        geometry.canvas_height,
        [layer.name for layer in layers],
    )
    return composite_layers(layers, rasterizer)


def render(
    request: RenderRequest,
    *,
    output_format: str = "jpg",
    quality: float = DEFAULT_QUALITY,
    text_backend: str = "pillow",
    font_path: Path | None = None,
    bold_font_path: Path | None = None,
) -> EncodedImage:
    poster = render_poster(
        request,
        text_backend=text_backend,
        font_path=font_path,
        bold_font_path=bold_font_path,
    )
    return encode_poster(poster, output_format, quality)


def render_bytes(
    data: bytes,
    metadata: PosterMetadata,
    template_id: str | None = DEFAULT_TEMPLATE,
    **options,
) -> EncodedImage:
    """Decode ``data`` (applying EXIF orientation) and render it. Raises ``PhotoDecodeError``."""
    photo = decode_photo(data)
    request = RenderRequest.from_photo(photo, metadata, template_id or DEFAULT_TEMPLATE)
    return render(request, **options)
