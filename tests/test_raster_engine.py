"""Tests for the Pillow raster engine."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from cropcache.config import MIME_JPEG, MIME_PNG
from cropcache.errors import DecodeError, EncodeError
from cropcache.infrastructure.services.raster_engine import PillowRasterEngine


@pytest.fixture()
def engine() -> PillowRasterEngine:
    return PillowRasterEngine()


def test_sniff_mime_reads_content_not_extension(engine, make_image):
    jpeg = make_image("really-a-jpeg.png", fmt="JPEG")
    png = make_image("picture.jpg", fmt="PNG")
    assert engine.sniff_mime(jpeg) == MIME_JPEG
    assert engine.sniff_mime(png) == MIME_PNG


def test_sniff_mime_unknown(engine, tmp_path: Path):
    text = tmp_path / "notes.jpg"
    text.write_text("hello")
    assert engine.sniff_mime(text) is None
    assert engine.sniff_mime(tmp_path) is None


def test_sniff_mime_multi_picture_jpeg(engine, make_mpo):
    path = make_mpo()
    with Image.open(path) as img:
        assert img.format == "MPO"
    assert engine.sniff_mime(path) == MIME_JPEG
    assert engine.decode(path, MIME_JPEG).width == 400


def test_oversized_source_is_not_identified(engine, make_image, monkeypatch):
    path = make_image("huge.jpg", (400, 300))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    assert engine.sniff_mime(path) is None
    with pytest.raises(DecodeError):
        engine.decode(path, MIME_JPEG)


def test_decode_reports_natural_size(engine, make_image):
    decoded = engine.decode(make_image("photo.jpg", (640, 480)), MIME_JPEG)
    assert (decoded.width, decoded.height) == (640, 480)
    assert decoded.pixels.mode == "RGB"


def test_decode_png_keeps_alpha(engine, transparent_png):
    decoded = engine.decode(transparent_png, MIME_PNG)
    assert decoded.pixels.mode == "RGBA"
    assert decoded.pixels.getpixel((10, 10))[3] == 0


def test_decode_truncated_file_fails(engine, tmp_path: Path):
    path = tmp_path / "broken.jpg"
    Image.effect_noise((400, 300), 80).convert("RGB").save(path, format="JPEG", quality=95)
    data = path.read_bytes()
    path.write_bytes(data[: len(data) // 2])
    with pytest.raises(DecodeError):
        engine.decode(path, MIME_JPEG)


def test_resample_fills_canvas(engine, make_image):
    decoded = engine.decode(make_image("photo.jpg", (400, 300), color=(0, 0, 255)), MIME_JPEG)
    canvas = engine.new_canvas(40, 30)
    engine.resample(canvas, decoded.pixels, 0, 0, 0, 0, 40, 30, 400, 300)
    red, green, blue = canvas.image.getpixel((20, 15))
    assert blue > 200 and red < 30 and green < 30


def test_alpha_mode_before_resample_preserves_transparency(engine, transparent_png, tmp_path: Path):
    decoded = engine.decode(transparent_png, MIME_PNG)
    canvas = engine.new_canvas(100, 100)
    engine.set_alpha_mode(canvas, blend=False, save_alpha=True)
    engine.resample(canvas, decoded.pixels, 0, 0, 0, 0, 100, 100, 100, 100)
    out = tmp_path / "out.png"
    engine.encode(canvas, out, MIME_PNG, 5)
    with Image.open(out) as result:
        assert result.mode == "RGBA"
        assert result.getpixel((10, 50))[3] == 0
        assert result.getpixel((90, 50)) == (255, 0, 0, 255)


def test_alpha_mode_after_resample_loses_transparency(engine, transparent_png, tmp_path: Path):
    decoded = engine.decode(transparent_png, MIME_PNG)
    canvas = engine.new_canvas(100, 100)
    engine.resample(canvas, decoded.pixels, 0, 0, 0, 0, 100, 100, 100, 100)
    engine.set_alpha_mode(canvas, blend=False, save_alpha=True)
    out = tmp_path / "out.png"
    engine.encode(canvas, out, MIME_PNG, 5)
    with Image.open(out) as result:
        assert result.getpixel((10, 50))[3] == 255


def test_encode_jpeg(engine, tmp_path: Path):
    canvas = engine.new_canvas(20, 10)
    out = tmp_path / "out.jpg"
    engine.encode(canvas, out, MIME_JPEG, 80)
    with Image.open(out) as result:
        assert result.format == "JPEG"
        assert result.size == (20, 10)


def test_encode_into_missing_directory_fails(engine, tmp_path: Path):
    canvas = engine.new_canvas(20, 10)
    with pytest.raises(EncodeError):
        engine.encode(canvas, tmp_path / "missing" / "out.png", MIME_PNG, 5)
