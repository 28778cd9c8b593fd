from __future__ import annotations

from posterstamp.constants import TEMPLATE_BLUR_BACKGROUND, TEMPLATE_CLASSIC
from posterstamp.mathutils import round_half_up
from posterstamp.models import LayoutGeometry

LENS_GUTTER = 8
CLASSIC_PARAMS_GUTTER = 16
BLUR_PARAMS_GUTTER = 20
CLASSIC_RULE_OFFSET = 10


def _font_size(base_size: int, ratio: float, minimum: int) -> int:
    return max(minimum, round_half_up(base_size * ratio))


def _classic_layout(width: int, height: int, base_size: int) -> LayoutGeometry:
    padding = max(1, round_half_up(base_size * 0.05))
    text_area_height = max(1, round_half_up(base_size * 0.15))
    title_size = _font_size(base_size, 0.035, 28)
    lens_size = _font_size(base_size, 0.02, 18)
    params_size = _font_size(base_size, 0.025, 22)

    title_y = height + padding * 2 + title_size
    lens_y = title_y + lens_size + LENS_GUTTER
    params_y = lens_y + params_size + CLASSIC_PARAMS_GUTTER
    return LayoutGeometry(
        template=TEMPLATE_CLASSIC,
        photo_width=width,
        photo_height=height,
        base_size=base_size,
        border=padding,
        caption_height=text_area_height,
        canvas_width=width + padding * 2,
        canvas_height=height + padding * 2 + text_area_height,
        title_size=title_size,
        lens_size=lens_size,
        params_size=params_size,
        title_y=title_y,
        lens_y=lens_y,
        params_y=params_y,
        rule_y=lens_y + CLASSIC_RULE_OFFSET,
    )


def _blur_background_layout(width: int, height: int, base_size: int) -> LayoutGeometry:
    border_width = max(1, round_half_up(base_size * 0.08))
    watermark_height = max(1, round_half_up(base_size * 0.18))
    title_size = _font_size(base_size, 0.045, 28)
    lens_size = _font_size(base_size, 0.02, 18)
    params_size = _font_size(base_size, 0.028, 22)

    canvas_width = width + border_width * 2
    canvas_height = height + border_width * 2 + watermark_height
    text_start_y = height + border_width * 2 + round_half_up(border_width * 0.5)
    title_y = text_start_y + title_size
    lens_y = title_y + lens_size + LENS_GUTTER
    params_y = lens_y + params_size + BLUR_PARAMS_GUTTER
    # The scrim spans the bottom border and the caption band
    scrim_top = canvas_height - watermark_height - border_width
    return LayoutGeometry(
        template=TEMPLATE_BLUR_BACKGROUND,
        photo_width=width,
        photo_height=height,
        base_size=base_size,
        border=border_width,
        caption_height=watermark_height,
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        title_size=title_size,
        lens_size=lens_size,
        params_size=params_size,
        title_y=title_y,
        lens_y=lens_y,
        params_y=params_y,
        scrim_box=(0, scrim_top, canvas_width, watermark_height + border_width),
    )


def compute_layout(width: int, height: int, template_id: str) -> LayoutGeometry:
    """Geometry for a poster around a ``width`` x ``height`` photo.

    ``template_id`` must already be resolved to one of the known templates.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"photo dimensions must be positive, got {width}x{height}")
    base_size = min(width, height)
    if template_id == TEMPLATE_BLUR_BACKGROUND:
        return _blur_background_layout(width, height, base_size)
    if template_id == TEMPLATE_CLASSIC:
        return _classic_layout(width, height, base_size)
    raise ValueError(f"unsupported template: {template_id}")
