from __future__ import annotations

from xml.sax.saxutils import escape

from posterstamp.constants import TEMPLATE_BLUR_BACKGROUND, UNKNOWN
from posterstamp.mathutils import format_number
from posterstamp.models import (
    DropShadow,
    LayoutGeometry,
    PosterMetadata,
    TextLayer,
    TextLine,
    TextRule,
)

PARAMS_SEPARATOR = "   "

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}

# Per-template text styles: (fill RGBA, bold, letter spacing in em)
_CLASSIC_STYLES = {
    "camera": ((26, 26, 26, 255), True, 0.0),
    "lens": ((102, 102, 102, 255), False, 0.0),
    "params": ((26, 26, 26, 255), False, 0.1),
}
_BLUR_STYLES = {
    "camera": ((255, 255, 255, 255), True, 0.0),
    "lens": ((255, 255, 255, 217), False, 0.0),
    "params": ((255, 255, 255, 255), False, 0.12),
}
_RULE_COLOR = (221, 221, 221, 255)
_SHADOW = DropShadow(dx=2, dy=2, blur=3, color=(0, 0, 0, 128))


def escape_xml(text: str) -> str:
    """Escape ``& < > " '`` for embedding in markup."""
    return escape(text, _XML_ENTITIES)


def format_camera_line(metadata: PosterMetadata) -> str:
    """Model alone when it already names the make, else ``"<make> <model>"``."""
    make = metadata.camera_make
    model = metadata.camera_model
    if make.upper() in model.upper():
        return model
    return f"{make} {model}".strip()


def format_params_line(metadata: PosterMetadata) -> str:
    parts: list[str] = []
    if metadata.focal_length != UNKNOWN:
        parts.append(metadata.focal_length)
    if metadata.aperture != UNKNOWN:
        parts.append(metadata.aperture)
    if metadata.shutter_speed != UNKNOWN:
        parts.append(metadata.shutter_speed)
    if metadata.iso != UNKNOWN:
        parts.append(f"ISO {metadata.iso}")
    return PARAMS_SEPARATOR.join(parts)


def _line(role: str, text: str, size: int, y: int, styles: dict) -> TextLine:
    fill, bold, spacing = styles[role]
    return TextLine(role=role, text=text, font_size=size, y=y, fill=fill, bold=bold, letter_spacing_em=spacing)


def build_text_layer(metadata: PosterMetadata, geometry: LayoutGeometry) -> TextLayer:
    blur = geometry.template == TEMPLATE_BLUR_BACKGROUND
    styles = _BLUR_STYLES if blur else _CLASSIC_STYLES

    lines = [_line("camera", format_camera_line(metadata), geometry.title_size, geometry.title_y, styles)]
    if metadata.lens_model != UNKNOWN:
        lines.append(_line("lens", metadata.lens_model, geometry.lens_size, geometry.lens_y, styles))
    lines.append(_line("params", format_params_line(metadata), geometry.params_size, geometry.params_y, styles))

    rule = None
    if not blur and geometry.rule_y is not None:
        rule = TextRule(
            x1=geometry.canvas_width * 0.3,
            x2=geometry.canvas_width * 0.7,
            y=geometry.rule_y,
            color=_RULE_COLOR,
        )
    return TextLayer(
        width=geometry.canvas_width,
        height=geometry.canvas_height,
        lines=tuple(lines),
        rule=rule,
        shadow=_SHADOW if blur else None,
    )


def _css_color(color: tuple[int, int, int, int]) -> str:
    r, g, b, a = color
    if a >= 255:
        return f"#{r:02x}{g:02x}{b:02x}"
    return f"rgba({r},{g},{b},{format_number(round(a / 255, 2))})"


def text_layer_to_svg(layer: TextLayer, font_family: str = "sans-serif") -> str:
    """Serialize the text layer as an SVG document the size of the canvas."""
    parts = [f'<svg xmlns="http://www.w3.org/2000/svg" width="{layer.width}" height="{layer.height}">']
    filter_attr = ""
    if layer.shadow is not None:
        shadow = layer.shadow
        parts.append(
            "<defs>"
            '<filter id="shadow" x="-20%" y="-20%" width="140%" height="140%">'
            f'<feDropShadow dx="{shadow.dx}" dy="{shadow.dy}" stdDeviation="{format_number(shadow.blur)}" '
            f'flood-color="{_css_color(shadow.color)}"/>'
            "</filter>"
            "</defs>"
        )
        filter_attr = ' filter="url(#shadow)"'

    family = escape_xml(font_family)
    for line in layer.lines:
        weight = ' font-weight="bold"' if line.bold else ""
        spacing = f' letter-spacing="{format_number(line.letter_spacing_em)}em"' if line.letter_spacing_em else ""
        parts.append(
            f'<text x="50%" y="{line.y}" text-anchor="middle" class="{line.role}" '
            f'font-family="{family}" font-size="{line.font_size}px"{weight} '
            f'fill="{_css_color(line.fill)}"{spacing}{filter_attr}>{escape_xml(line.text)}</text>'
        )
    if layer.rule is not None:
        rule = layer.rule
        parts.append(
            f'<line x1="{format_number(rule.x1)}" y1="{rule.y}" x2="{format_number(rule.x2)}" y2="{rule.y}" '
            f'stroke="{_css_color(rule.color)}" stroke-width="{rule.width}"/>'
        )
    parts.append("</svg>")
    return "".join(parts)
