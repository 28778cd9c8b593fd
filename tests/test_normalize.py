from posterstamp.constants import UNKNOWN
from posterstamp.meta.normalize import format_lens_info, format_shutter, normalize_metadata
from posterstamp.models import PosterMetadata


def test_normalize_metadata_formats_display_fields() -> None:
    raw = {
        "Make": " Canon ",
        "Model": "Canon EOS R5",
        "LensModel": "RF24-70mm F2.8 L IS USM",
        "FocalLength": 35.5,
        "FNumber": 2.8,
        "ExposureTime": 0.004,
        "ISO": 400,
    }
    metadata = normalize_metadata(raw)
    assert metadata.camera_make == "Canon"
    assert metadata.camera_model == "Canon EOS R5"
    assert metadata.lens_model == "RF24-70mm F2.8 L IS USM"
    assert metadata.focal_length == "36mm"
    assert metadata.aperture == "f/2.8"
    assert metadata.shutter_speed == "1/250s"
    assert metadata.iso == "400"


def test_shutter_speed_uses_reciprocal_below_one_second() -> None:
    assert format_shutter(0.004) == "1/250s"
    assert format_shutter(0.5) == "1/2s"
    assert format_shutter(2) == "2s"
    assert format_shutter(1.5) == "1.5s"


def test_normalize_metadata_defaults_every_field_to_unknown() -> None:
    metadata = normalize_metadata({})
    assert metadata == PosterMetadata()
    assert all(value == UNKNOWN for value in metadata.to_dict().values())


def test_normalize_metadata_falls_back_to_lens_info() -> None:
    assert normalize_metadata({"LensInfo": [24, 70, 2.8, 2.8]}).lens_model == "24-70mm f/2.8"
    assert normalize_metadata({"LensSpecification": "50 50 1.8 1.8"}).lens_model == "50mm f/1.8"
    assert format_lens_info([100, 400, 4.5, 5.6]) == "100-400mm f/4.5-5.6"


def test_normalize_metadata_keeps_good_fields_when_one_tag_is_unreadable() -> None:
    metadata = normalize_metadata({"Make": "Sony", "ExposureTime": "a/b", "FNumber": "n/a"})
    assert metadata.camera_make == "Sony"
    assert metadata.shutter_speed == UNKNOWN
    assert metadata.aperture == UNKNOWN


def test_normalize_metadata_treats_zero_values_as_missing() -> None:
    metadata = normalize_metadata({"FocalLength": 0, "FNumber": 0, "ExposureTime": 0, "ISO": 0})
    assert metadata == PosterMetadata()


def test_normalize_metadata_reads_grouped_and_pillow_tag_names() -> None:
    metadata = normalize_metadata({"EXIF:Make": "NIKON CORPORATION", "ISOSpeedRatings": 800, "FNumber": 4.0})
    assert metadata.camera_make == "NIKON CORPORATION"
    assert metadata.iso == "800"
    assert metadata.aperture == "f/4"


def test_normalize_metadata_is_idempotent() -> None:
    first = normalize_metadata(
        {
            "Make": "FUJIFILM",
            "Model": "X-T5",
            "LensInfo": [18, 55, 2.8, 4],
            "FocalLength": 23,
            "FNumber": 1.4,
            "ExposureTime": 1 / 3,
            "ISO": 160,
        }
    )
    assert normalize_metadata(first.to_dict()) == first
    long_exposure = normalize_metadata({"ExposureTime": 2.5})
    assert normalize_metadata(long_exposure.to_dict()) == long_exposure


def test_sub_second_stops_keep_reciprocal_form_on_renormalize() -> None:
    for exposure in (0.8, 0.7):
        first = normalize_metadata({"ExposureTime": exposure})
        assert first.shutter_speed == "1/1s"
        assert normalize_metadata(first.to_dict()) == first
    assert normalize_metadata({"ExposureTime": "1/250"}).shutter_speed == "1/250s"
