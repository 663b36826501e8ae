import io
import os

import pytest
from PIL import Image

from renderer.core.exporter import EXPORT_FILENAME, download_png, encode_png, export_pdf


def test_encode_png(background):
    data = encode_png(background)
    assert data.startswith(b"\x89PNG")
    assert Image.open(io.BytesIO(data)).size == background.size


def test_download_uses_fixed_filename(tmp_path, background):
    path = download_png(background, str(tmp_path / "out"))
    assert os.path.basename(path) == EXPORT_FILENAME == "birthday-template.png"
    with Image.open(path) as img:
        assert img.size == (400, 300)


def test_export_pdf(tmp_path, background):
    target = tmp_path / "pdf" / "card.pdf"
    assert export_pdf(background.convert("RGBA"), str(target)) == str(target)
    assert target.read_bytes().startswith(b"%PDF")


def test_export_pdf_needs_an_image(tmp_path):
    with pytest.raises(ValueError):
        export_pdf(None, str(tmp_path / "empty.pdf"))
