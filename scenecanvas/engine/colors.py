"""CSS colour strings → normalized RGBA tuples."""

from __future__ import annotations

import re
from functools import lru_cache

from PIL import ImageColor

from scenecanvas.errors import SceneConfigError

RGBA = tuple[float, float, float, float]

TRANSPARENT: RGBA = (0.0, 0.0, 0.0, 0.0)

# Pillow only accepts integer alpha in rgba(); CSS uses 0..1 or a percentage
_NUM = r"(?:\d+(?:\.\d*)?|\.\d+)%?"
_RGBA_RE = re.compile(
    rf"^rgba?\(\s*({_NUM})\s*[, ]\s*({_NUM})\s*[, ]\s*({_NUM})\s*(?:[,/]\s*({_NUM})\s*)?\)$",
    re.IGNORECASE,
)


@lru_cache(maxsize=512)
def parse_color(value: str) -> RGBA:
    """Parse ``#rgb``, ``#rrggbbaa``, ``rgb()``, ``rgba()``, ``hsl()`` or a named colour."""
    text = value.strip()
    if text.lower() in ("transparent", "none", ""):
        return TRANSPARENT

    m = _RGBA_RE.match(text)
    if m:
        r, g, b = (_channel(m.group(i)) for i in (1, 2, 3))
        a = _alpha(m.group(4)) if m.group(4) is not None else 1.0
        return (r, g, b, a)

    try:
        rgba = ImageColor.getrgb(text)
    except ValueError as e:
        raise SceneConfigError(f"unknown color {value!r}") from e

    if len(rgba) == 4:
        r, g, b, a = rgba
        return (r / 255, g / 255, b / 255, a / 255)
    r, g, b = rgba
    return (r / 255, g / 255, b / 255, 1.0)


def with_alpha(color: RGBA, alpha: float) -> RGBA:
    r, g, b, a = color
    return (r, g, b, a * alpha)


def _channel(token: str) -> float:
    if token.endswith("%"):
        return _clamp(float(token[:-1]) / 100)
    return _clamp(float(token) / 255)


def _alpha(token: str) -> float:
    if token.endswith("%"):
        return _clamp(float(token[:-1]) / 100)
    return _clamp(float(token))


def _clamp(v: float) -> float:
    return max(0.0, min(1.0, v))
