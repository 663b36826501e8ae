"""
Template persistence: local image cache, bundle serialization and the
template stores (mocked and REST backend).
"""

from __future__ import annotations

import json
import logging
import os
import random
import string
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests

from renderer.core.errors import InvalidInput, LoadFailure, SaveFailure
from renderer.core.image_loader import guess_mime, is_image_payload, to_data_url
from renderer.core.models import EditorState, PersonEntry, TextElement
from renderer.core.settings import DEFAULT_MOCK_LATENCY

logger = logging.getLogger(__name__)

TEMPLATE_IMAGE_KEY = "templateImage"
TEMPLATE_ID_PREFIX = "template-"


@dataclass
class TemplateRecord:
    id: str
    image_url: Optional[str]


# ─────────────────────────────────────────────
# Bundle serialization
# ─────────────────────────────────────────────

def element_to_dict(element: TextElement) -> dict:
    data = {
        "id": element.id,
        "type": element.kind,
        "text": element.text,
        "x": element.x,
        "y": element.y,
        "fontSize": element.font_size,
        "color": element.color,
        "fontFamily": element.font_family,
        "dragging": element.dragging,
    }
    if element.line_spacing is not None:
        data["lineSpacing"] = element.line_spacing
    return data


def person_to_dict(person: PersonEntry) -> dict:
    return {
        "id": person.id,
        "name": person.name,
        "birthdate": person.birthdate.isoformat() if person.birthdate else None,
    }


def bundle_to_dict(state: EditorState) -> dict:
    return {
        "elements": [element_to_dict(el) for el in state.elements],
        "personEntries": [person_to_dict(p) for p in state.persons],
        "quote": state.quote,
    }


# ─────────────────────────────────────────────
# Local image cache
# ─────────────────────────────────────────────

class LocalImageCache:
    """Small JSON key/value file; ``templateImage`` holds the last upload."""

    def __init__(self, path: str):
        self.path = path

    def get(self, key: str = TEMPLATE_IMAGE_KEY) -> Optional[str]:
        return self._read().get(key)

    def set(self, value: str, key: str = TEMPLATE_IMAGE_KEY):
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str = TEMPLATE_IMAGE_KEY):
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    # -------------------------------------------------
    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring corrupt image cache %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]):
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)


# ─────────────────────────────────────────────
# Stores
# ─────────────────────────────────────────────

class TemplateStore(ABC):
    """upload / fetch / save of a template and its rendered image."""

    @abstractmethod
    def upload(self, image_bytes: bytes) -> str:
        ...

    @abstractmethod
    def fetch(self, template_id: str) -> TemplateRecord:
        ...

    @abstractmethod
    def save(self, template_id: str, bundle: dict, image_png: bytes) -> None:
        ...


class MockTemplateStore(TemplateStore):
    """In-memory store with simulated latency and random template ids."""

    def __init__(
        self,
        cache: Optional[LocalImageCache] = None,
        latency: Optional[Dict[str, float]] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.cache = cache
        self.latency = dict(DEFAULT_MOCK_LATENCY)
        if latency:
            self.latency.update(latency)
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._images: Dict[str, bytes] = {}
        self.saved: Dict[str, dict] = {}

    def _wait(self, operation: str):
        delay = self.latency.get(operation, 0)
        if delay > 0:
            self._sleep(delay)

    def upload(self, image_bytes: bytes) -> str:
        if not is_image_payload(image_bytes):
            raise InvalidInput("Please upload an image file")
        self._wait("upload")
        suffix = "".join(self._rng.choices(string.ascii_lowercase + string.digits, k=7))
        template_id = TEMPLATE_ID_PREFIX + suffix
        self._images[template_id] = image_bytes
        logger.info("Uploaded template %s (%d bytes)", template_id, len(image_bytes))
        return template_id

    def fetch(self, template_id: str) -> TemplateRecord:
        self._wait("fetch")
        image_url = None
        data = self._images.get(template_id)
        if data is not None:
            image_url = to_data_url(data, guess_mime(data) or "image/png")
        elif self.cache is not None:
            image_url = self.cache.get()
        return TemplateRecord(id=template_id, image_url=image_url)

    def save(self, template_id: str, bundle: dict, image_png: bytes) -> None:
        if not template_id:
            raise SaveFailure("No template selected")
        try:
            payload = json.dumps(bundle)
        except (TypeError, ValueError) as exc:
            raise SaveFailure("Template data is not serializable", cause=exc) from exc
        self._wait("save")
        self.saved[template_id] = {"bundle": json.loads(payload), "image": image_png}
        logger.info("Saved template %s", template_id)


class RemoteTemplateStore(TemplateStore):
    """
    Talks to the template REST backend under ``/api/templates``.

    The backend keeps a template as ``id``, ``imagePath``,
    ``originalFilename`` and ``elements``; a PUT replaces the whole record.
    Saving therefore sends the elements together with the image fields last
    seen for that id. The rendered PNG, person entries and quote are not
    sent to the backend.
    """

    RECORD_FIELDS = ("imagePath", "originalFilename")

    def __init__(
        self,
        base_url: str,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
        cache: Optional[LocalImageCache] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.cache = cache
        self._records: Dict[str, dict] = {}

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, "api", "templates", *parts])

    def _remember(self, template_id: str, data: dict):
        known = {key: data[key] for key in self.RECORD_FIELDS if data.get(key) is not None}
        self._records.setdefault(template_id, {}).update(known)

    def upload(self, image_bytes: bytes) -> str:
        if not is_image_payload(image_bytes):
            raise InvalidInput("Please upload an image file")
        mime = guess_mime(image_bytes) or "application/octet-stream"
        try:
            response = self.session.post(
                self._url(),
                files={"file": ("template", image_bytes, mime)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
            template_id = data["id"]
        except (requests.RequestException, KeyError, TypeError, ValueError) as exc:
            raise SaveFailure("Failed to upload image. Please try again.", cause=exc) from exc
        self._remember(template_id, data)
        return template_id

    def fetch(self, template_id: str) -> TemplateRecord:
        try:
            response = self.session.get(self._url(template_id), timeout=self.timeout)
        except requests.RequestException as exc:
            raise LoadFailure("Failed to load template. Please try again.", cause=exc) from exc
        if response.status_code == 404:
            raise LoadFailure(f"Template not found: {template_id}")
        try:
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise LoadFailure("Failed to load template. Please try again.", cause=exc) from exc

        self._remember(template_id, data)
        image_url = data.get("imageUrl") or data.get("imagePath")
        if not image_url and self.cache is not None:
            image_url = self.cache.get()
        return TemplateRecord(id=data.get("id", template_id), image_url=image_url)

    def template_body(self, template_id: str, bundle: dict) -> dict:
        body = {"id": template_id}
        body.update(self._records.get(template_id, {}))
        body["elements"] = bundle.get("elements", [])
        return body

    def save(self, template_id: str, bundle: dict, image_png: bytes) -> None:
        if not template_id:
            raise SaveFailure("No template selected")
        try:
            response = self.session.put(
                self._url(template_id),
                json=self.template_body(template_id, bundle),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except (requests.RequestException, TypeError, ValueError) as exc:
            raise SaveFailure("Failed to save template. Please try again.", cause=exc) from exc
        logger.info("Saved template %s to %s", template_id, self.base_url)


def resolve_template_image(template_id: str, cache: Optional[LocalImageCache], store: TemplateStore) -> Optional[str]:
    """Image source for the editor: the cached upload first, then the store."""
    if cache is not None:
        cached = cache.get()
        if cached:
            return cached
    return store.fetch(template_id).image_url


def create_store(settings, cache: Optional[LocalImageCache] = None) -> TemplateStore:
    if settings.uses_backend:
        return RemoteTemplateStore(settings.backend_url, settings.request_timeout, cache=cache)
    return MockTemplateStore(cache=cache, latency=settings.mock_latency)
