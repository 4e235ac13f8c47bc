"""Tests for bitmap loading and decoding."""

from __future__ import annotations

import asyncio
import base64

import pytest

from scenecanvas.engine.images import decode_bitmap, is_svg, load_bitmap
from scenecanvas.errors import ImageLoadError
from tests.conftest import RED_DOT_SVG, png_bytes


def test_decode_png():
    bitmap = decode_bitmap("inline", png_bytes(30, 10))
    assert (bitmap.natural_width, bitmap.natural_height) == (30, 10)
    assert bitmap.image.mode == "RGBA"


def test_decode_svg_rasterizes():
    bitmap = decode_bitmap("dot.svg", RED_DOT_SVG)
    assert (bitmap.natural_width, bitmap.natural_height) == (40, 20)
    assert bitmap.image.getpixel((20, 10)) == (255, 0, 0, 255)


def test_is_svg():
    assert is_svg(RED_DOT_SVG)
    assert is_svg(b'<?xml version="1.0"?>\n<svg></svg>')
    assert not is_svg(png_bytes(1, 1))


def test_garbage_bytes():
    with pytest.raises(ImageLoadError):
        decode_bitmap("junk", b"definitely not an image")


def test_load_base64_data_uri():
    uri = "data:image/png;base64," + base64.b64encode(png_bytes(4, 8)).decode()
    bitmap = asyncio.run(load_bitmap(uri))
    assert (bitmap.natural_width, bitmap.natural_height) == (4, 8)
    assert bitmap.source == uri


def test_load_percent_encoded_svg_data_uri():
    uri = "data:image/svg+xml," + RED_DOT_SVG.decode().replace("#", "%23")
    bitmap = asyncio.run(load_bitmap(uri))
    assert bitmap.natural_width == 40


def test_load_local_path(tmp_path):
    path = tmp_path / "pic.png"
    path.write_bytes(png_bytes(12, 6))
    bitmap = asyncio.run(load_bitmap(str(path)))
    assert bitmap.aspect_ratio == 2.0


def test_missing_path():
    with pytest.raises(ImageLoadError, match="failed to load image"):
        asyncio.run(load_bitmap("/nonexistent/pic.png"))


def test_malformed_data_uri():
    with pytest.raises(ImageLoadError):
        asyncio.run(load_bitmap("data:image/png;base64"))
