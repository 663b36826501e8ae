import io

import pytest
from PIL import Image

from renderer.core.fonts import FontResolver
from renderer.core.models import EditorState, default_elements
from renderer.core.persistence import LocalImageCache


class FakeNotifier:
    def __init__(self):
        self.events = []

    def emit_error(self, title, message, level="error"):
        self.events.append((title, message, level))


@pytest.fixture
def fonts(tmp_path):
    return FontResolver(str(tmp_path / "fonts"))


@pytest.fixture
def background():
    return Image.new("RGB", (400, 300), "white")


@pytest.fixture
def state():
    return EditorState(elements=default_elements())


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def cache(tmp_path):
    return LocalImageCache(str(tmp_path / "cache" / "cache.json"))


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (1000, 500), "red").save(buffer, format="PNG")
    return buffer.getvalue()
