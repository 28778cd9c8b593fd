import base64
import copy
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from posterstamp.config import DEFAULT_CONFIG
from posterstamp.render.layout import compute_layout
from posterstamp import server
from posterstamp.server import create_app


def _data_url() -> str:
    exif = Image.Exif()
    exif[0x010F] = "Canon"
    exif[0x0110] = "Canon EOS R6"
    buffer = BytesIO()
    Image.new("RGB", (300, 200), color=(90, 90, 90)).save(buffer, format="JPEG", exif=exif)
    return "data:image/jpeg;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture()
def client() -> TestClient:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg["use_exiftool"] = "off"
    return TestClient(create_app(cfg))


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_exif_endpoint_returns_normalized_record(client: TestClient) -> None:
    response = client.post("/api/exif", json={"image": _data_url()})
    assert response.status_code == 200
    payload = response.json()
    assert payload["cameraMake"] == "Canon"
    assert payload["cameraModel"] == "Canon EOS R6"
    assert payload["iso"] == "unknown"


def test_render_endpoint_returns_png(client: TestClient) -> None:
    response = client.post(
        "/api/render",
        json={
            "image": _data_url(),
            "exif": {"cameraMake": "Canon", "cameraModel": "Canon EOS R6", "iso": "800"},
            "template": "blur-background",
            "format": "png",
        },
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.headers["content-length"] == str(len(response.content))
    with Image.open(BytesIO(response.content)) as image:
        assert image.size == compute_layout(300, 200, "blur-background").canvas_size


def test_render_endpoint_rejects_missing_image(client: TestClient) -> None:
    assert client.post("/api/render", json={"exif": {}}).status_code == 400
    assert client.post("/api/exif", json={"image": "%%%"}).status_code == 400


def test_render_endpoint_reports_undecodable_photo(client: TestClient) -> None:
    garbage = base64.b64encode(b"hello world").decode("ascii")
    response = client.post("/api/render", json={"image": garbage})
    assert response.status_code == 422


def test_render_endpoint_validates_quality(client: TestClient) -> None:
    response = client.post("/api/render", json={"image": _data_url(), "quality": 5})
    assert response.status_code == 422


def test_render_endpoint_preview_uses_preview_quality(client: TestClient, monkeypatch) -> None:
    seen: list[float] = []
    real_render_bytes = server.render_bytes

    def _spy(data, metadata, template_id, **options):
        seen.append(options["quality"])
        return real_render_bytes(data, metadata, template_id, **options)

    monkeypatch.setattr(server, "render_bytes", _spy)
    assert client.post("/api/render", json={"image": _data_url(), "preview": True}).status_code == 200
    assert client.post("/api/render", json={"image": _data_url()}).status_code == 200
    assert client.post("/api/render", json={"image": _data_url(), "preview": True, "quality": 0.5}).status_code == 200
    assert seen == [0.8, 0.9, 0.5]


def test_exif_endpoint_reports_misconfigured_reader() -> None:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg["use_exiftool"] = "sometimes"
    response = TestClient(create_app(cfg)).post("/api/exif", json={"image": _data_url()})
    assert response.status_code == 500
