from __future__ import annotations

import os
import sys
from pathlib import Path

# ─────────────────────────────────────────────
# BASE DIRECTORY
# ─────────────────────────────────────────────

def application_base_dir() -> Path:
    """
    Base directory of the renderer package (config, assets).
    Works both from sources and from a PyInstaller bundle.
    """
    # PyInstaller sets _MEIPASS
    if hasattr(sys, "_MEIPASS"):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parent.parent


# ─────────────────────────────────────────────
# ABSOLUTE PATH RESOLVER
# ─────────────────────────────────────────────

def ABSOLUTE_PATH(relative_path: str) -> str:
    """Absolute path to a file relative to the renderer package root."""
    base = application_base_dir()
    return str(base.joinpath(relative_path))


# ─────────────────────────────────────────────
# USER DATA DIRECTORY (local image cache)
# ─────────────────────────────────────────────

def user_data_dir() -> Path:
    if sys.platform.startswith("win"):
        root = os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    else:
        root = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(root) / "bday_gen"
