from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from PIL import Image

from posterstamp.constants import UNKNOWN

_FIELD_KEYS = {
    "camera_make": "cameraMake",
    "camera_model": "cameraModel",
    "lens_model": "lensModel",
    "focal_length": "focalLength",
    "aperture": "aperture",
    "shutter_speed": "shutterSpeed",
    "iso": "iso",
}


def _display_value(value: Any) -> str:
    if value is None:
        return UNKNOWN
    text = str(value).strip()
    return text or UNKNOWN


@dataclass(frozen=True, slots=True)
class PosterMetadata:
    camera_make: str = UNKNOWN
    camera_model: str = UNKNOWN
    lens_model: str = UNKNOWN
    focal_length: str = UNKNOWN
    aperture: str = UNKNOWN
    shutter_speed: str = UNKNOWN
    iso: str = UNKNOWN

    def to_dict(self) -> dict[str, str]:
        return {wire: getattr(self, attr) for attr, wire in _FIELD_KEYS.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PosterMetadata":
        """Build a record from camelCase or snake_case keys; blanks become ``unknown``."""
        data = data or {}
        values: dict[str, str] = {}
        for attr, wire in _FIELD_KEYS.items():
            raw = data.get(wire, data.get(attr))
            values[attr] = _display_value(raw)
        return cls(**values)


@dataclass(frozen=True, slots=True)
class DecodedPhoto:
    image: Image.Image
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class RenderRequest:
    photo: Image.Image
    width: int
    height: int
    metadata: PosterMetadata
    template_id: str

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"photo dimensions must be positive, got {self.width}x{self.height}")

    @classmethod
    def from_photo(cls, photo: DecodedPhoto, metadata: PosterMetadata, template_id: str) -> "RenderRequest":
        return cls(
            photo=photo.image,
            width=photo.width,
            height=photo.height,
            metadata=metadata,
            template_id=template_id,
        )


@dataclass(frozen=True, slots=True)
class LayoutGeometry:
    template: str
    photo_width: int
    photo_height: int
    base_size: int
    border: int
    caption_height: int
    canvas_width: int
    canvas_height: int
    title_size: int
    lens_size: int
    params_size: int
    title_y: int
    lens_y: int
    params_y: int
    rule_y: int | None = None
    scrim_box: tuple[int, int, int, int] | None = None

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self.canvas_width, self.canvas_height

    @property
    def photo_origin(self) -> tuple[int, int]:
        """(top, left) of the sharp photo on the canvas."""
        return self.border, self.border


@dataclass(frozen=True, slots=True)
class TextLine:
    role: str
    text: str
    font_size: int
    y: int
    fill: tuple[int, int, int, int]
    bold: bool = False
    letter_spacing_em: float = 0.0

    @property
    def letter_spacing_px(self) -> float:
        return self.font_size * self.letter_spacing_em


@dataclass(frozen=True, slots=True)
class TextRule:
    x1: float
    x2: float
    y: int
    color: tuple[int, int, int, int]
    width: int = 1


@dataclass(frozen=True, slots=True)
class DropShadow:
    dx: int
    dy: int
    blur: float
    color: tuple[int, int, int, int]


@dataclass(frozen=True, slots=True)
class TextLayer:
    width: int
    height: int
    lines: tuple[TextLine, ...]
    rule: TextRule | None = None
    shadow: DropShadow | None = None

    def line(self, role: str) -> TextLine | None:
        for item in self.lines:
            if item.role == role:
                return item
        return None


LayerSource = Union[Image.Image, TextLayer]


@dataclass(slots=True)
class CompositeLayer:
    name: str
    source: LayerSource
    top: int = 0
    left: int = 0
    blend: str = "over"
    opacity: float = 1.0


@dataclass(frozen=True, slots=True)
class EncodedImage:
    data: bytes
    content_type: str
    extension: str
    size: tuple[int, int] = field(default=(0, 0))
