from __future__ import annotations

import json
import logging
import os
import subprocess
from typing import Any

from posterstamp.errors import ExifToolUnavailableError

LOGGER = logging.getLogger(__name__)
EXIFTOOL_BIN = os.environ.get("EXIFTOOL_BIN", "exiftool")
VALID_MODES = {"auto", "on", "off"}


def resolve_mode(mode: str) -> str:
    normalized = str(mode).strip().lower()
    if normalized not in VALID_MODES:
        raise ValueError(f"invalid use-exiftool mode: {mode} (expected auto|on|off)")
    return normalized


def _decode_output(data: bytes | None) -> str:
    # -j output is always UTF-8; stderr follows the locale and is only logged.
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def extract_exiftool_metadata(data: bytes, mode: str = "auto") -> dict[str, Any]:
    """Run ExifTool over image bytes piped through stdin.

    ``mode`` is ``auto`` (use ExifTool when installed), ``on`` (required) or
    ``off``. In ``auto`` mode every failure degrades to an empty mapping.
    """
    mode = resolve_mode(mode)
    if mode == "off" or not data:
        return {}

    cmd = [EXIFTOOL_BIN, "-j", "-n", "-u", "-"]
    try:
        result = subprocess.run(cmd, input=data, capture_output=True, check=False)
    except FileNotFoundError:
        if mode == "on":
            raise ExifToolUnavailableError(f"ExifTool is required but {EXIFTOOL_BIN!r} was not found in PATH")
        LOGGER.debug("ExifTool not found, Pillow reader will be used")
        return {}

    if result.returncode != 0:
        message = _decode_output(result.stderr).strip() or "unknown error"
        if mode == "on":
            raise RuntimeError(f"ExifTool extraction failed: {message}")
        LOGGER.warning("ExifTool extraction failed: %s", message)
        return {}
    try:
        payload = json.loads(_decode_output(result.stdout))
    except json.JSONDecodeError:
        if mode == "on":
            raise RuntimeError("ExifTool returned invalid JSON")
        LOGGER.warning("ExifTool returned invalid JSON, ignoring its output")
        return {}
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
        return {}
    item = dict(payload[0])
    item.pop("SourceFile", None)
    return item
