"""Bitmap loading: URL, data: URI or local path → decoded ``Bitmap``.

SVG sources (highlight overlays are usually SVG) are rasterized with cairosvg first;
everything else goes straight to Pillow.
"""

from __future__ import annotations

import asyncio
import base64
import io
import logging
from pathlib import Path
from urllib.parse import unquote_to_bytes

import cairosvg
import httpx
from PIL import Image

from scenecanvas.config import settings
from scenecanvas.engine.types import Bitmap
from scenecanvas.errors import ImageLoadError

logger = logging.getLogger(__name__)

_SVG_SNIFF_BYTES = 512


async def load_bitmap(source: str, timeout: float | None = None) -> Bitmap:
    """Fetch and decode ``source``. Raises ``ImageLoadError`` on any failure."""
    data = await read_source(source, timeout)
    return decode_bitmap(source, data)


async def read_source(source: str, timeout: float | None = None) -> bytes:
    if source.startswith(("http://", "https://")):
        return await _fetch(source, timeout or settings.image_fetch_timeout_s)
    if source.startswith("data:"):
        return _decode_data_uri(source)
    try:
        return await asyncio.to_thread(Path(source).read_bytes)
    except OSError as e:
        raise ImageLoadError(source, str(e)) from e


def decode_bitmap(source: str, data: bytes) -> Bitmap:
    if is_svg(data):
        try:
            data = cairosvg.svg2png(bytestring=data)
        except Exception as e:
            raise ImageLoadError(source, f"svg rasterization failed: {e}") from e

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise ImageLoadError(source, str(e)) from e

    bitmap = Bitmap(source=source, image=image.convert("RGBA"))
    logger.debug("Decoded image %dx%d", bitmap.natural_width, bitmap.natural_height)
    return bitmap


def is_svg(data: bytes) -> bool:
    head = data[:_SVG_SNIFF_BYTES].lstrip().lower()
    return head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head)


async def _fetch(url: str, timeout: float) -> bytes:
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise ImageLoadError(url, str(e)) from e
    logger.debug("Fetched %s (%d bytes)", url, len(response.content))
    return response.content


def _decode_data_uri(uri: str) -> bytes:
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ImageLoadError(uri, "malformed data URI")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload)
        except ValueError as e:
            raise ImageLoadError(uri, f"invalid base64 payload: {e}") from e
    return unquote_to_bytes(payload)
