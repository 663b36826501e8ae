"""Editor configuration loaded from ``config/editor.json``."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from renderer.core.paths import ABSOLUTE_PATH, user_data_dir

DEFAULT_SETTINGS_PATH = ABSOLUTE_PATH("config/editor.json")

ENV_BACKEND_URL = "BDAY_GEN_BACKEND_URL"
ENV_CACHE_PATH = "BDAY_GEN_CACHE_PATH"
ENV_LANGUAGE = "BDAY_GEN_LANGUAGE"

DEFAULT_MOCK_LATENCY = {"upload": 1.0, "fetch": 0.8, "save": 1.5}


@dataclass(frozen=True)
class EditorSettings:
    max_canvas_width: int = 800
    viewport_margin: int = 40
    touch_padding: int = 20
    export_filename: str = "birthday-template.png"
    fonts_dir: str = ABSOLUTE_PATH("assets/fonts")
    cache_path: str = str(user_data_dir() / "cache.json")
    backend_url: str = ""
    request_timeout: float = 15
    mock_latency: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_MOCK_LATENCY))
    language: str = "en"

    @property
    def uses_backend(self) -> bool:
        return bool(self.backend_url)


def load_settings(path: Optional[str] = None, environ: Optional[dict] = None) -> EditorSettings:
    """Read the JSON config; missing keys keep their defaults."""
    path = path or DEFAULT_SETTINGS_PATH
    environ = os.environ if environ is None else environ

    data: dict = {}
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a JSON object: {path}")

    defaults = EditorSettings()
    values = {
        "max_canvas_width": int(data.get("max_canvas_width", defaults.max_canvas_width)),
        "viewport_margin": int(data.get("viewport_margin", defaults.viewport_margin)),
        "touch_padding": int(data.get("touch_padding", defaults.touch_padding)),
        "export_filename": data.get("export_filename") or defaults.export_filename,
        "fonts_dir": _resolve_dir(data.get("fonts_dir"), defaults.fonts_dir),
        "cache_path": data.get("cache_path") or defaults.cache_path,
        "backend_url": (data.get("backend_url") or "").rstrip("/"),
        "request_timeout": float(data.get("request_timeout", defaults.request_timeout)),
        "mock_latency": {**defaults.mock_latency, **data.get("mock_latency", {})},
        "language": data.get("language") or defaults.language,
    }

    # environment wins over the file
    if environ.get(ENV_BACKEND_URL):
        values["backend_url"] = environ[ENV_BACKEND_URL].rstrip("/")
    if environ.get(ENV_CACHE_PATH):
        values["cache_path"] = environ[ENV_CACHE_PATH]
    if environ.get(ENV_LANGUAGE):
        values["language"] = environ[ENV_LANGUAGE]

    return EditorSettings(**values)


def _resolve_dir(value: Optional[str], default: str) -> str:
    if not value:
        return default
    if Path(value).is_absolute():
        return value
    return ABSOLUTE_PATH(value)
