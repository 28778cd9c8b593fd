import json
import subprocess
from io import BytesIO

import pytest
from PIL import Image

from posterstamp.constants import UNKNOWN
from posterstamp.errors import ExifToolUnavailableError
from posterstamp.meta import exiftool, extract
from posterstamp.meta.pillow_reader import extract_pillow_metadata


def _jpeg_with_camera() -> bytes:
    exif = Image.Exif()
    exif[0x010F] = "FUJIFILM"
    exif[0x0110] = "X100VI"
    buffer = BytesIO()
    Image.new("RGB", (16, 16)).save(buffer, format="JPEG", exif=exif)
    return buffer.getvalue()


def test_extract_pillow_metadata_is_safe_on_unidentified_bytes() -> None:
    assert extract_pillow_metadata(b"not-a-real-image") == {}


def test_extract_pillow_metadata_reads_camera_tags() -> None:
    metadata = extract_pillow_metadata(_jpeg_with_camera())
    assert metadata["Make"] == "FUJIFILM"
    assert metadata["Model"] == "X100VI"


def test_exiftool_off_mode_skips_subprocess(monkeypatch) -> None:
    def _unexpected(*args, **kwargs):
        raise AssertionError("exiftool should not run")

    monkeypatch.setattr(exiftool.subprocess, "run", _unexpected)
    assert exiftool.extract_exiftool_metadata(b"data", mode="off") == {}


def test_exiftool_output_is_parsed(monkeypatch) -> None:
    payload = [{"SourceFile": "-", "Make": "Canon", "ExposureTime": 0.004}]

    def _run(cmd, **kwargs):
        assert cmd[-1] == "-"
        assert kwargs["input"] == b"data"
        return subprocess.CompletedProcess(cmd, 0, stdout=json.dumps(payload).encode(), stderr=b"")

    monkeypatch.setattr(exiftool.subprocess, "run", _run)
    assert exiftool.extract_exiftool_metadata(b"data") == {"Make": "Canon", "ExposureTime": 0.004}


def test_exiftool_missing_binary(monkeypatch) -> None:
    def _missing(*args, **kwargs):
        raise FileNotFoundError("exiftool")

    monkeypatch.setattr(exiftool.subprocess, "run", _missing)
    assert exiftool.extract_exiftool_metadata(b"data", mode="auto") == {}
    with pytest.raises(ExifToolUnavailableError):
        exiftool.extract_exiftool_metadata(b"data", mode="on")


def test_read_metadata_falls_back_to_pillow_reader(monkeypatch) -> None:
    monkeypatch.setattr(extract, "extract_exiftool_metadata", lambda data, mode: {})
    metadata = extract.read_metadata(_jpeg_with_camera())
    assert metadata.camera_make == "FUJIFILM"
    assert metadata.camera_model == "X100VI"
    assert metadata.lens_model == UNKNOWN


def test_read_metadata_returns_defaults_on_total_failure(monkeypatch) -> None:
    def _boom(data, mode):
        raise RuntimeError("ExifTool extraction failed: File format error")

    monkeypatch.setattr(extract, "extract_exiftool_metadata", _boom)
    metadata = extract.read_metadata(b"corrupt", mode="on")
    assert all(value == UNKNOWN for value in metadata.to_dict().values())


def test_exiftool_failure_with_non_utf8_stderr(monkeypatch) -> None:
    def _run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, stdout=b"", stderr=b"Error: Fichier \xe9crit")

    monkeypatch.setattr(exiftool.subprocess, "run", _run)
    assert exiftool.extract_exiftool_metadata(b"data", mode="auto") == {}
    with pytest.raises(RuntimeError, match="Fichier"):
        exiftool.extract_exiftool_metadata(b"data", mode="on")


def test_exiftool_output_keeps_utf8_text(monkeypatch) -> None:
    payload = [{"SourceFile": "-", "Model": "α7 IV"}]

    def _run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 0, stdout=json.dumps(payload, ensure_ascii=False).encode("utf-8"), stderr=b"")

    monkeypatch.setattr(exiftool.subprocess, "run", _run)
    assert exiftool.extract_exiftool_metadata(b"data") == {"Model": "α7 IV"}


def test_read_metadata_rejects_invalid_mode(monkeypatch) -> None:
    def _unexpected(*args, **kwargs):
        raise AssertionError("no reader should run for an invalid mode")

    monkeypatch.setattr(extract, "extract_exiftool_metadata", _unexpected)
    with pytest.raises(ValueError, match="use-exiftool"):
        extract.read_metadata(_jpeg_with_camera(), mode="bogus")


def test_read_metadata_raises_when_required_exiftool_is_missing(monkeypatch) -> None:
    def _missing(*args, **kwargs):
        raise FileNotFoundError("exiftool")

    monkeypatch.setattr(exiftool.subprocess, "run", _missing)
    with pytest.raises(ExifToolUnavailableError):
        extract.read_metadata(_jpeg_with_camera(), mode="on")
    assert extract.read_metadata(_jpeg_with_camera(), mode="auto").camera_make == "FUJIFILM"
