import pytest

from posterstamp.constants import TEMPLATE_BLUR_BACKGROUND, TEMPLATE_CLASSIC, VALID_TEMPLATES
from posterstamp.render.layout import compute_layout


@pytest.mark.parametrize("template", VALID_TEMPLATES)
@pytest.mark.parametrize("size", [(1, 1), (9, 5), (10, 10), (640, 480), (3000, 4000), (4000, 3000)])
def test_canvas_is_larger_than_photo(template: str, size: tuple[int, int]) -> None:
    width, height = size
    geometry = compute_layout(width, height, template)
    assert geometry.canvas_width > width
    assert geometry.canvas_height > height


def test_classic_layout_for_landscape_photo() -> None:
    geometry = compute_layout(4000, 3000, TEMPLATE_CLASSIC)
    assert geometry.border == 150
    assert geometry.caption_height == 450
    assert geometry.canvas_size == (4300, 3750)
    assert (geometry.title_size, geometry.lens_size, geometry.params_size) == (105, 60, 75)
    assert (geometry.title_y, geometry.lens_y, geometry.params_y) == (3405, 3473, 3564)
    assert geometry.rule_y == 3483
    assert geometry.scrim_box is None


def test_blur_background_layout_for_landscape_photo() -> None:
    geometry = compute_layout(4000, 3000, TEMPLATE_BLUR_BACKGROUND)
    assert geometry.border == 240
    assert geometry.caption_height == 540
    assert geometry.canvas_size == (4480, 4020)
    assert (geometry.title_size, geometry.lens_size, geometry.params_size) == (135, 60, 84)
    assert (geometry.title_y, geometry.lens_y, geometry.params_y) == (3735, 3803, 3907)
    assert geometry.scrim_box == (0, 3240, 4480, 780)
    assert geometry.rule_y is None


def test_small_photos_use_minimum_font_sizes() -> None:
    geometry = compute_layout(640, 480, TEMPLATE_CLASSIC)
    assert (geometry.title_size, geometry.lens_size, geometry.params_size) == (28, 18, 22)


def test_layout_rounds_half_up() -> None:
    assert compute_layout(50, 70, TEMPLATE_CLASSIC).border == 3


def test_layout_rejects_empty_photo() -> None:
    with pytest.raises(ValueError):
        compute_layout(0, 100, TEMPLATE_CLASSIC)
