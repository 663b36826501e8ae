import io

import pytest
from PIL import Image

from renderer.core.errors import InvalidInput, LoadFailure
from renderer.core.exporter import encode_png
from renderer.core.image_loader import (
    DecodeGeneration,
    ImageLoader,
    decode_image,
    fit_scale,
    from_data_url,
    guess_mime,
    is_image_payload,
    load_source,
    read_upload,
    scaled_size,
    to_data_url,
)
from renderer.core.renderer import TemplateRenderer


def test_fit_scale_caps_at_max_width():
    assert fit_scale(1000, 1920) == pytest.approx(0.8)
    assert fit_scale(1000, 500) == pytest.approx(0.46)


def test_fit_scale_upscales_narrow_images():
    assert fit_scale(400, 1920) == pytest.approx(2.0)


def test_fit_scale_rejects_degenerate_input():
    with pytest.raises(LoadFailure):
        fit_scale(0, 1000)
    with pytest.raises(LoadFailure):
        fit_scale(100, 30)


def test_scaled_size_truncates():
    assert scaled_size((333, 101), 0.5) == (166, 50)
    assert scaled_size((1, 1), 0.1) == (1, 1)


def test_rendered_png_keeps_canvas_size(png_bytes, fonts, state):
    loader = ImageLoader()
    source, background = loader.load_scaled(to_data_url(png_bytes), 1000)
    assert source.size == (1000, 500)
    assert background.size == (800, 400)

    rendered = TemplateRenderer(fonts).render(background, state)
    decoded = Image.open(io.BytesIO(encode_png(rendered)))
    assert decoded.size == (800, 400)


def test_payload_detection(png_bytes):
    assert is_image_payload(png_bytes)
    assert not is_image_payload(b"")
    assert not is_image_payload(b"hello world")
    assert guess_mime(png_bytes) == "image/png"


def test_decode_rejects_garbage():
    with pytest.raises(LoadFailure):
        decode_image(b"not an image at all")
    with pytest.raises(LoadFailure):
        decode_image(b"")


def test_data_url(png_bytes):
    url = to_data_url(png_bytes)
    assert url.startswith("data:image/png;base64,")
    assert from_data_url(url) == ("image/png", png_bytes)
    with pytest.raises(LoadFailure):
        from_data_url("data:image/png,raw")


def test_read_upload_accepts_images(tmp_path, png_bytes):
    path = tmp_path / "template.png"
    path.write_bytes(png_bytes)
    data, url = read_upload(str(path))
    assert data == png_bytes
    assert url.startswith("data:image/png;base64,")


def test_read_upload_detects_type_from_content(tmp_path, png_bytes):
    bare = tmp_path / "photo"
    bare.write_bytes(png_bytes)
    _, url = read_upload(str(bare))
    assert url.startswith("data:image/png;base64,")

    misnamed = tmp_path / "photo.jpg"
    misnamed.write_bytes(png_bytes)
    _, url = read_upload(str(misnamed))
    assert url.startswith("data:image/png;base64,")


def test_read_upload_rejects_non_images(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(InvalidInput):
        read_upload(str(path))

    fake = tmp_path / "fake.png"
    fake.write_text("not really a png")
    with pytest.raises(InvalidInput):
        read_upload(str(fake))

    with pytest.raises(InvalidInput):
        read_upload(str(tmp_path / "missing.png"))


def test_load_source(tmp_path, png_bytes):
    path = tmp_path / "bg.png"
    path.write_bytes(png_bytes)
    assert load_source(str(path)) == png_bytes
    assert load_source(to_data_url(png_bytes)) == png_bytes
    with pytest.raises(LoadFailure):
        load_source(str(tmp_path / "nope.png"))
    with pytest.raises(LoadFailure):
        load_source(to_data_url(b"text", "text/plain"))


def test_decode_generation_drops_stale_tickets():
    generation = DecodeGeneration()
    first = generation.begin()
    second = generation.begin()
    assert not generation.is_current(first)
    assert generation.is_current(second)
    generation.invalidate()
    assert not generation.is_current(second)
