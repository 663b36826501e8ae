from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict

LOCALES_DIR = Path(__file__).resolve().parent
FALLBACK_LANGUAGE = "en"


def available_languages() -> Dict[str, str]:
    languages: Dict[str, str] = {}
    for path in sorted(LOCALES_DIR.glob("*.json")):
        data = load_locale(path.stem)
        languages[path.stem] = data.get("_meta", {}).get("display_name", path.stem)
    return languages


def ensure_language(language: str) -> str:
    available = {path.stem for path in LOCALES_DIR.glob("*.json")}
    if language in available:
        return language
    if FALLBACK_LANGUAGE in available:
        return FALLBACK_LANGUAGE
    return sorted(available)[0] if available else language


@lru_cache(maxsize=None)
def load_locale(language: str) -> dict:
    language = ensure_language(language)
    path = LOCALES_DIR / f"{language}.json"
    if not path.is_file():
        raise FileNotFoundError(f"Locale file not found for language: {language}")
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def get_section(language: str, section: str) -> dict:
    """Strings of one section; missing keys fall back to English."""
    language = ensure_language(language)
    section_data = dict(load_locale(language).get(section) or {})
    if language != FALLBACK_LANGUAGE:
        fallback = load_locale(FALLBACK_LANGUAGE).get(section) or {}
        for key, value in fallback.items():
            section_data.setdefault(key, value)
    return section_data


def format_message(strings: dict, key: str, **kwargs) -> str:
    value = strings.get(key, "")
    try:
        return value.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return value
