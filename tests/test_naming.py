from pathlib import Path

import pytest

from posterstamp.models import PosterMetadata
from posterstamp.naming import build_output_name


def test_build_output_name_defaults_to_poster_suffix() -> None:
    name = build_output_name("{stem}_poster.{ext}", Path("IMG 0042.HEIC"), PosterMetadata(), extension="jpg", template_name="classic")
    assert name == "IMG_0042_poster.jpg"


def test_build_output_name_with_tokens() -> None:
    metadata = PosterMetadata(camera_make="Sony", camera_model="ILCE-7M4")
    name = build_output_name(
        "{model}_{stem}_{template}",
        Path("DSC01234.JPG"),
        metadata,
        extension="png",
        template_name="blur-background",
    )
    assert name == "ILCE-7M4_DSC01234_blur-background.png"


def test_build_output_name_unknown_fields_use_placeholder() -> None:
    name = build_output_name("{lens}.{ext}", Path("a.jpg"), PosterMetadata(), extension="jpg", template_name="classic")
    assert name == "NA.jpg"


def test_build_output_name_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError):
        build_output_name("{owner}.{ext}", Path("a.jpg"), PosterMetadata(), extension="jpg", template_name="classic")
