from __future__ import annotations

from functools import partial
from io import BytesIO
from pathlib import Path
from typing import Callable

from PIL import Image, ImageDraw, ImageFilter

from posterstamp.constants import TEXT_BACKENDS
from posterstamp.models import TextLayer
from posterstamp.render.text_layer import text_layer_to_svg
from posterstamp.render.typography import draw_centered_text, load_font

TextRasterizer = Callable[[TextLayer], Image.Image]


def _draw_lines(
    layer: TextLayer,
    size: tuple[int, int],
    *,
    font_path: Path | None,
    bold_font_path: Path | None,
    color_override: tuple[int, int, int, int] | None = None,
    offset: tuple[int, int] = (0, 0),
) -> Image.Image:
    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    dx, dy = offset
    for line in layer.lines:
        font = load_font((bold_font_path or font_path) if line.bold else font_path, line.font_size, bold=line.bold)
        draw_centered_text(
            draw,
            center_x=layer.width / 2 + dx,
            baseline_y=line.y + dy,
            text=line.text,
            font=font,
            fill=color_override or line.fill,
            spacing=line.letter_spacing_px,
        )
    return canvas


def rasterize_with_pillow(
    layer: TextLayer,
    font_path: Path | None = None,
    bold_font_path: Path | None = None,
) -> Image.Image:
    """Render the text layer to a transparent RGBA image with ImageDraw."""
    size = (layer.width, layer.height)
    output = Image.new("RGBA", size, (0, 0, 0, 0))

    if layer.shadow is not None:
        shadow = layer.shadow
        shadow_image = _draw_lines(
            layer,
            size,
            font_path=font_path,
            bold_font_path=bold_font_path,
            color_override=shadow.color,
            offset=(shadow.dx, shadow.dy),
        )
        output.alpha_composite(shadow_image.filter(ImageFilter.GaussianBlur(shadow.blur)))

    if layer.rule is not None:
        rule = layer.rule
        rule_image = Image.new("RGBA", size, (0, 0, 0, 0))
        ImageDraw.Draw(rule_image).line(
            [(rule.x1, rule.y), (rule.x2, rule.y)],
            fill=rule.color,
            width=rule.width,
        )
        output.alpha_composite(rule_image)

    text_image = _draw_lines(layer, size, font_path=font_path, bold_font_path=bold_font_path)
    output.alpha_composite(text_image)
    return output


def rasterize_with_svg(layer: TextLayer, font_family: str = "sans-serif") -> Image.Image:
    """Render the SVG markup of the text layer with CairoSVG."""
    import cairosvg

    png_bytes = cairosvg.svg2png(
        bytestring=text_layer_to_svg(layer, font_family=font_family).encode("utf-8"),
        output_width=layer.width,
        output_height=layer.height,
    )
    with Image.open(BytesIO(png_bytes)) as image:
        return image.convert("RGBA")


def get_rasterizer(
    backend: str = "pillow",
    *,
    font_path: Path | None = None,
    bold_font_path: Path | None = None,
) -> TextRasterizer:
    backend = backend.lower()
    if backend not in TEXT_BACKENDS:
        raise ValueError(f"text backend must be one of {sorted(TEXT_BACKENDS)}, got: {backend!r}")
    if backend == "svg":
        return rasterize_with_svg
    return partial(rasterize_with_pillow, font_path=font_path, bold_font_path=bold_font_path)
