from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml

from posterstamp.constants import DEFAULT_TEMPLATE

CONFIG_ENV_VAR = "POSTERSTAMP_CONFIG"

DEFAULT_CONFIG: dict[str, Any] = {
    "template": DEFAULT_TEMPLATE,
    "output_format": "jpg",
    "quality": 0.9,
    "preview_quality": 0.8,
    "use_exiftool": "auto",
    "text_backend": "pillow",
    "font_path": None,
    "bold_font_path": None,
    "name_template": "{stem}_poster.{ext}",
    "host": "127.0.0.1",
    "port": 8000,
    "allowed_origins": ["*"],
    "max_upload_mb": 50,
    "log_level": "info",
}


def get_user_data_dir() -> Path:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "PosterStamp"
    return Path.home() / ".config" / "PosterStamp"


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return get_user_data_dir() / "Config" / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    text = cfg_path.read_text(encoding="utf-8")
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"config file is not a mapping: {cfg_path}")
    return _deep_merge(DEFAULT_CONFIG, loaded)


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return cfg_path


def optional_path(value: Any) -> Path | None:
    if not value:
        return None
    return Path(str(value)).expanduser()
