from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Any, Literal

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

from posterstamp.config import load_config, optional_path
from posterstamp.constants import DEFAULT_TEMPLATE
from posterstamp.errors import EncodeError, ExifToolUnavailableError, PhotoDecodeError
from posterstamp.meta.extract import read_metadata
from posterstamp.models import PosterMetadata
from posterstamp.pipeline import render_bytes

LOGGER = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


class ExifPayload(BaseModel):
    image: str = ""


class RenderPayload(BaseModel):
    image: str = ""
    exif: dict[str, Any] = Field(default_factory=dict)
    template: str = DEFAULT_TEMPLATE
    format: Literal["jpg", "png"] = "jpg"
    quality: float | None = Field(default=None, ge=0.0, le=1.0)
    preview: bool = False


def decode_image_payload(image: str, max_bytes: int) -> bytes:
    """Turn a data URL or bare base64 string into bytes, or raise a 400."""
    if not image:
        raise HTTPException(status_code=400, detail="missing image data")
    encoded = _DATA_URL_PREFIX.sub("", image.strip(), count=1)
    if len(encoded) * 3 // 4 > max_bytes:
        raise HTTPException(status_code=413, detail="image is too large")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail="image is not valid base64") from exc


def _max_bytes(request: Request) -> int:
    return int(request.app.state.config.get("max_upload_mb", 50)) * 1024 * 1024


def _quality(payload: RenderPayload, cfg: dict[str, Any]) -> float:
    if payload.quality is not None:
        return payload.quality
    key = "preview_quality" if payload.preview else "quality"
    return float(cfg.get(key, 0.9))


router = APIRouter(prefix="/api", tags=["poster"])


@router.post("/exif", summary="Extract the normalized camera metadata of a photo")
def exif(payload: ExifPayload, request: Request) -> dict[str, str]:
    data = decode_image_payload(payload.image, _max_bytes(request))
    mode = str(request.app.state.config.get("use_exiftool", "auto"))
    try:
        metadata = read_metadata(data, mode=mode)
    except (ExifToolUnavailableError, ValueError) as exc:
        LOGGER.error("Metadata reader misconfigured: %s", exc)
        raise HTTPException(status_code=500, detail="metadata reader is misconfigured") from exc
    return metadata.to_dict()


@router.post("/render", summary="Render a poster and return the encoded image")
def render(payload: RenderPayload, request: Request) -> Response:
    cfg = request.app.state.config
    data = decode_image_payload(payload.image, _max_bytes(request))
    metadata = PosterMetadata.from_dict(payload.exif)
    try:
        encoded = render_bytes(
            data,
            metadata,
            payload.template,
            output_format=payload.format,
            quality=_quality(payload, cfg),
            text_backend=str(cfg.get("text_backend", "pillow")),
            font_path=optional_path(cfg.get("font_path")),
            bold_font_path=optional_path(cfg.get("bold_font_path")),
        )
    except PhotoDecodeError as exc:
        LOGGER.warning("Render rejected: %s", exc)
        raise HTTPException(status_code=422, detail="photo could not be decoded") from exc
    except EncodeError as exc:
        LOGGER.error("Render failed: %s", exc)
        raise HTTPException(status_code=500, detail="poster could not be encoded") from exc

    return Response(
        content=encoded.data,
        media_type=encoded.content_type,
        headers={"Content-Length": str(len(encoded.data))},
    )


def create_app(config: dict[str, Any] | None = None) -> FastAPI:
    cfg = config if config is not None else load_config()
    app = FastAPI(title="PosterStamp API", version="0.1.0")
    app.state.config = cfg

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.get("allowed_origins") or ["*"]),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
