from __future__ import annotations

import re
from pathlib import Path

from posterstamp.constants import UNKNOWN
from posterstamp.models import PosterMetadata

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]')


def sanitize_token(value: str | None, fallback: str = "NA") -> str:
    text = (value or "").strip()
    if not text or text == UNKNOWN:
        text = fallback
    text = INVALID_FILENAME_CHARS.sub("_", text)
    text = re.sub(r"\s+", "_", text)
    text = text.strip(" ._")
    return text or fallback


def sanitize_filename(value: str, fallback: str = "output") -> str:
    text = INVALID_FILENAME_CHARS.sub("_", value).strip()
    text = text.strip(" .")
    return text or fallback


def build_output_name(
    name_template: str,
    source: Path,
    meta: PosterMetadata,
    extension: str,
    template_name: str,
) -> str:
    ext = extension.lower().lstrip(".")
    values = {
        "stem": sanitize_token(source.stem, fallback="image"),
        "make": sanitize_token(meta.camera_make),
        "model": sanitize_token(meta.camera_model),
        "lens": sanitize_token(meta.lens_model),
        "template": sanitize_token(template_name),
        "ext": ext,
    }
    try:
        rendered = name_template.format(**values)
    except KeyError as exc:
        missing = str(exc).strip("'")
        raise ValueError(f"name template contains unknown key: {missing}") from exc

    rendered = sanitize_filename(rendered, fallback=f"{values['stem']}_poster.{ext}")
    if not Path(rendered).suffix:
        rendered = f"{rendered}.{ext}"
    return rendered
