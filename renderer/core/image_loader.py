"""Background image loading: validation, decoding, data URLs and scaling."""

from __future__ import annotations

import base64
import binascii
import io
import logging
import mimetypes
import os
import struct
import threading
from typing import Optional, Tuple

import requests
from PIL import Image, UnidentifiedImageError
from psd_tools import PSDImage

from renderer.core.errors import InvalidInput, LoadFailure

logger = logging.getLogger(__name__)

PSD_SIGNATURE = b"8BPS"
DEFAULT_MAX_WIDTH = 800
DEFAULT_MARGIN = 40


# ─────────────────────────────────────────────
# Decoding
# ─────────────────────────────────────────────

def is_image_payload(data: bytes) -> bool:
    if not data:
        return False
    if data.startswith(PSD_SIGNATURE):
        return True
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return False
    return True


def decode_image(data: bytes) -> Image.Image:
    """Decode bytes (any Pillow format or PSD) into an RGBA image."""
    if not data:
        raise LoadFailure("Image payload is empty")
    try:
        if data.startswith(PSD_SIGNATURE):
            return _decode_psd(data)
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, EOFError, struct.error) as exc:
        raise LoadFailure("Failed to load image. Please try uploading again.", cause=exc) from exc


def _decode_psd(data: bytes) -> Image.Image:
    psd = PSDImage.open(io.BytesIO(data))
    composite = psd.composite()
    if composite is None:
        raise ValueError("PSD file could not be composited")
    return composite.convert("RGBA")


# ─────────────────────────────────────────────
# Data URLs
# ─────────────────────────────────────────────

def to_data_url(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def from_data_url(url: str) -> Tuple[str, bytes]:
    """Return ``(mime, payload)`` of a base64 data URL."""
    if not url.startswith("data:") or "," not in url:
        raise LoadFailure("Not a data URL")
    header, encoded = url.split(",", 1)
    mime = header[5:].split(";", 1)[0] or "text/plain"
    if ";base64" not in header:
        raise LoadFailure("Only base64 data URLs are supported")
    try:
        return mime, base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise LoadFailure("Corrupt data URL", cause=exc) from exc


# ─────────────────────────────────────────────
# Sources
# ─────────────────────────────────────────────

def read_upload(path: str) -> Tuple[bytes, str]:
    """
    Read a user-selected file. Returns ``(bytes, data_url)``.

    Anything that is not an image is rejected with InvalidInput before the
    caller touches its state.
    """
    if not path or not os.path.isfile(path):
        raise InvalidInput(f"File not found: {path}")

    with open(path, "rb") as f:
        data = f.read()

    if not is_image_payload(data):
        raise InvalidInput("Please upload an image file")
    # the content decides; the extension only fills in formats Pillow has no MIME for
    mime = guess_mime(data)
    if not mime:
        hint, _ = mimetypes.guess_type(path)
        mime = hint if hint and hint.startswith("image/") else "application/octet-stream"
    return data, to_data_url(data, mime)


def load_source(source: str, timeout: float = 15) -> bytes:
    """Bytes behind a data URL, http(s) URL or local path."""
    if not source:
        raise LoadFailure("No image source")
    if source.startswith("data:"):
        mime, data = from_data_url(source)
        if not mime.startswith("image/"):
            raise LoadFailure(f"Data URL is not an image: {mime}")
        return data
    if source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise LoadFailure("Failed to download template image", cause=exc) from exc
        return response.content
    if os.path.isfile(source):
        with open(source, "rb") as f:
            return f.read()
    raise LoadFailure(f"Image not found: {source}")


# ─────────────────────────────────────────────
# Scaling
# ─────────────────────────────────────────────

def fit_scale(source_width: int, viewport_width: int, max_width: int = DEFAULT_MAX_WIDTH, margin: int = DEFAULT_MARGIN) -> float:
    """``min(max_width, viewport_width - margin) / source_width``"""
    if source_width <= 0:
        raise LoadFailure("Image has no width")
    target = min(max_width, viewport_width - margin)
    if target <= 0:
        raise LoadFailure(f"Viewport too narrow: {viewport_width}px")
    return target / source_width


def scaled_size(size: Tuple[int, int], scale: float) -> Tuple[int, int]:
    # canvas dimensions are truncated to whole pixels
    return max(1, int(size[0] * scale)), max(1, int(size[1] * scale))


def fit_to_viewport(image: Image.Image, viewport_width: int, max_width: int = DEFAULT_MAX_WIDTH, margin: int = DEFAULT_MARGIN) -> Image.Image:
    scale = fit_scale(image.width, viewport_width, max_width, margin)
    size = scaled_size(image.size, scale)
    if size == image.size:
        return image.copy()
    return image.resize(size, Image.LANCZOS)


# ─────────────────────────────────────────────
# Stale decode guard
# ─────────────────────────────────────────────

class DecodeGeneration:
    """
    Hands out tickets for image decodes. Only the latest ticket is current;
    completions holding an older one must be dropped.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._current = 0

    def begin(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._current

    def invalidate(self):
        self.begin()


class ImageLoader:
    """Loads a template background and scales it to the canvas."""

    def __init__(self, max_width: int = DEFAULT_MAX_WIDTH, margin: int = DEFAULT_MARGIN, timeout: float = 15):
        self.max_width = max_width
        self.margin = margin
        self.timeout = timeout

    def load(self, source: str) -> Image.Image:
        return decode_image(load_source(source, self.timeout))

    def load_scaled(self, source: str, viewport_width: int) -> Tuple[Image.Image, Image.Image]:
        """Return ``(source_image, canvas_background)``."""
        image = self.load(source)
        scaled = fit_to_viewport(image, viewport_width, self.max_width, self.margin)
        logger.debug("Loaded %sx%s image, canvas %sx%s", image.width, image.height, scaled.width, scaled.height)
        return image, scaled


def guess_mime(data: bytes) -> Optional[str]:
    if data.startswith(PSD_SIGNATURE):
        return "image/vnd.adobe.photoshop"
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format)
    except (UnidentifiedImageError, OSError):
        return None
