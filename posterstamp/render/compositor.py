from __future__ import annotations

from PIL import Image, ImageEnhance, ImageFilter, ImageOps

from posterstamp.constants import BLUR_BACKGROUND_STACK, CLASSIC_STACK, TEMPLATE_BLUR_BACKGROUND, TEMPLATE_CLASSIC
from posterstamp.models import CompositeLayer, LayoutGeometry, RenderRequest, TextLayer
from posterstamp.render.rasterize import TextRasterizer

BACKGROUND_BLUR_RADIUS = 50
BACKGROUND_BRIGHTNESS = 0.8
SCRIM_OPACITY = 0.3
CLASSIC_BACKGROUND = (255, 255, 255)


def blurred_background(photo: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Cover-fit ``photo`` to ``size`` (centered), blur it and darken it."""
    cover = ImageOps.fit(photo.convert("RGB"), size, method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))
    blurred = cover.filter(ImageFilter.GaussianBlur(BACKGROUND_BLUR_RADIUS))
    return ImageEnhance.Brightness(blurred).enhance(BACKGROUND_BRIGHTNESS)


def _classic_layers(request: RenderRequest, geometry: LayoutGeometry, text_layer: TextLayer) -> list[CompositeLayer]:
    top, left = geometry.photo_origin
    return [
        CompositeLayer("base", Image.new("RGB", geometry.canvas_size, CLASSIC_BACKGROUND)),
        CompositeLayer("photo", request.photo, top=top, left=left),
        CompositeLayer("text", text_layer),
    ]


def _blur_background_layers(
    request: RenderRequest,
    geometry: LayoutGeometry,
    text_layer: TextLayer,
) -> list[CompositeLayer]:
    top, left = geometry.photo_origin
    scrim_left, scrim_top, scrim_width, scrim_height = geometry.scrim_box or (0, 0, 0, 0)
    scrim = Image.new("RGBA", (scrim_width, scrim_height), (0, 0, 0, 255))
    return [
        CompositeLayer("background", blurred_background(request.photo, geometry.canvas_size)),
        CompositeLayer("scrim", scrim, top=scrim_top, left=scrim_left, opacity=SCRIM_OPACITY),
        CompositeLayer("photo", request.photo, top=top, left=left),
        CompositeLayer("text", text_layer),
    ]


_LAYER_BUILDERS = {
    TEMPLATE_CLASSIC: (CLASSIC_STACK, _classic_layers),
    TEMPLATE_BLUR_BACKGROUND: (BLUR_BACKGROUND_STACK, _blur_background_layers),
}


def build_layers(request: RenderRequest, geometry: LayoutGeometry, text_layer: TextLayer) -> list[CompositeLayer]:
    """Ordered layer stack for the template in ``geometry``, bottom layer first.

    The template's stack constant fixes the order; the builders only supply
    the named layers.
    """
    stack, builder = _LAYER_BUILDERS.get(geometry.template, _LAYER_BUILDERS[TEMPLATE_CLASSIC])
    named = {layer.name: layer for layer in builder(request, geometry, text_layer)}
    if set(named) != set(stack):
        raise ValueError(f"layers {sorted(named)} do not match the {geometry.template} stack {stack}")
    return [named[name] for name in stack]


def _layer_pixels(layer: CompositeLayer, rasterizer: TextRasterizer) -> Image.Image:
    source = layer.source
    image = rasterizer(source) if isinstance(source, TextLayer) else source
    image = image.convert("RGBA")
    if layer.opacity < 1.0:
        alpha = image.getchannel("A").point(lambda value: round(value * layer.opacity))
        image.putalpha(alpha)
    return image


def composite_layers(layers: list[CompositeLayer], rasterizer: TextRasterizer) -> Image.Image:
    """Flatten ``layers`` in order onto the first one and return an opaque RGB image."""
    if not layers:
        raise ValueError("nothing to composite")
    base, *overlays = layers
    canvas = _layer_pixels(base, rasterizer)
    for layer in overlays:
        if layer.blend != "over":
            raise ValueError(f"unsupported blend mode: {layer.blend}")
        canvas.alpha_composite(_layer_pixels(layer, rasterizer), dest=(layer.left, layer.top))
    return canvas.convert("RGB")
