"""Headless raster engine: a cairo image surface driven through a canvas-style 2D context.

cairo keeps one source and one set of stroke parameters; the browser canvas keeps separate
fill/stroke styles, a global alpha and shadow settings. ``CairoContext2D`` holds that canvas
state in Python and applies it at paint time. Shadows are drawn on a scratch layer, blurred
with Pillow and composited in device space (canvas shadow offsets ignore the transform).
"""

from __future__ import annotations

import dataclasses
import io
import logging
import math
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import cairocffi as cairo
import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageFilter

from scenecanvas.config import settings
from scenecanvas.engine.colors import RGBA, parse_color, with_alpha
from scenecanvas.engine.images import load_bitmap
from scenecanvas.engine.types import Bitmap, FontSpec, OutputType, TextMetrics
from scenecanvas.errors import SceneConfigError

logger = logging.getLogger(__name__)

_TAU = 2 * math.pi

_LINE_CAPS = {
    "butt": cairo.LINE_CAP_BUTT,
    "round": cairo.LINE_CAP_ROUND,
    "square": cairo.LINE_CAP_SQUARE,
}
_LINE_JOINS = {
    "miter": cairo.LINE_JOIN_MITER,
    "round": cairo.LINE_JOIN_ROUND,
    "bevel": cairo.LINE_JOIN_BEVEL,
}
_MEDIA_TYPES = {"png": "image/png", "jpg": "image/jpeg"}


@dataclass
class _PaintState:
    fill_style: str = "#000000"
    stroke_style: str = "#000000"
    line_width: float = 1.0
    line_cap: str = "butt"
    line_join: str = "miter"
    miter_limit: float = 10.0
    line_dash: list[float] = field(default_factory=list)
    line_dash_offset: float = 0.0
    global_alpha: float = 1.0
    shadow_color: str = "rgba(0, 0, 0, 0)"
    shadow_blur: float = 0.0
    shadow_offset_x: float = 0.0
    shadow_offset_y: float = 0.0
    font: FontSpec = FontSpec(settings.default_font_family, 10)


class _StateAttr:
    """Canvas style property backed by the current ``_PaintState``."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return getattr(obj._state, self.name)

    def __set__(self, obj: Any, value: Any) -> None:
        setattr(obj._state, self.name, value)


class CairoContext2D:
    fill_style = _StateAttr()
    stroke_style = _StateAttr()
    line_width = _StateAttr()
    line_cap = _StateAttr()
    line_join = _StateAttr()
    miter_limit = _StateAttr()
    line_dash_offset = _StateAttr()
    global_alpha = _StateAttr()
    shadow_color = _StateAttr()
    shadow_blur = _StateAttr()
    shadow_offset_x = _StateAttr()
    shadow_offset_y = _StateAttr()

    def __init__(self, surface: cairo.ImageSurface) -> None:
        self._surface = surface
        self._cr = cairo.Context(surface)
        self._cr.set_antialias(cairo.ANTIALIAS_BEST)
        self._state = _PaintState()
        self._stack: list[_PaintState] = []
        self._bitmap_surfaces: dict[int, cairo.ImageSurface] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def save(self) -> None:
        self._stack.append(dataclasses.replace(self._state, line_dash=list(self._state.line_dash)))
        self._cr.save()

    def restore(self) -> None:
        if not self._stack:
            return
        self._state = self._stack.pop()
        self._cr.restore()

    def translate(self, x: float, y: float) -> None:
        self._cr.translate(x, y)

    def rotate(self, angle: float) -> None:
        self._cr.rotate(angle)

    def set_line_dash(self, segments: list[float]) -> None:
        if any(s < 0 for s in segments):
            return
        # canvas repeats odd-length dash lists
        self._state.line_dash = list(segments) * 2 if len(segments) % 2 else list(segments)

    def set_font(self, family: str, size: float, weight: str = "") -> None:
        self._state.font = FontSpec(family=family, size=size, weight=weight or "")

    # ------------------------------------------------------------------
    # Path building
    # ------------------------------------------------------------------

    def begin_path(self) -> None:
        self._cr.new_path()

    def close_path(self) -> None:
        if self._cr.has_current_point():
            self._cr.close_path()

    def move_to(self, x: float, y: float) -> None:
        self._cr.move_to(x, y)

    def line_to(self, x: float, y: float) -> None:
        if self._cr.has_current_point():
            self._cr.line_to(x, y)
        else:
            self._cr.move_to(x, y)

    def rect(self, x: float, y: float, width: float, height: float) -> None:
        self._cr.rectangle(x, y, width, height)

    def round_rect(self, x: float, y: float, width: float, height: float, radius: float) -> None:
        r = max(0.0, min(radius, abs(width) / 2, abs(height) / 2))
        if r == 0:
            self._cr.rectangle(x, y, width, height)
            return
        cr = self._cr
        cr.new_sub_path()
        cr.arc(x + width - r, y + r, r, -math.pi / 2, 0)
        cr.arc(x + width - r, y + height - r, r, 0, math.pi / 2)
        cr.arc(x + r, y + height - r, r, math.pi / 2, math.pi)
        cr.arc(x + r, y + r, r, math.pi, 3 * math.pi / 2)
        cr.close_path()

    def arc(
        self,
        x: float,
        y: float,
        radius: float,
        start_angle: float,
        end_angle: float,
        counterclockwise: bool = False,
    ) -> None:
        if radius <= 0:
            self.line_to(x, y)
            return
        self._arc_path(self._cr, x, y, radius, start_angle, end_angle, counterclockwise)

    def ellipse(
        self,
        x: float,
        y: float,
        radius_x: float,
        radius_y: float,
        rotation: float,
        start_angle: float,
        end_angle: float,
        counterclockwise: bool = False,
    ) -> None:
        if radius_x <= 0 or radius_y <= 0:
            self.line_to(x, y)
            return
        cr = self._cr
        cr.save()
        cr.translate(x, y)
        cr.rotate(rotation)
        cr.scale(radius_x, radius_y)
        self._arc_path(cr, 0, 0, 1, start_angle, end_angle, counterclockwise)
        cr.restore()

    def arc_to(self, x1: float, y1: float, x2: float, y2: float, radius: float) -> None:
        cr = self._cr
        if not cr.has_current_point():
            cr.move_to(x1, y1)
        x0, y0 = cr.get_current_point()

        ax, ay = x0 - x1, y0 - y1
        bx, by = x2 - x1, y2 - y1
        la, lb = math.hypot(ax, ay), math.hypot(bx, by)
        cross = ax * by - ay * bx
        if radius <= 0 or la == 0 or lb == 0 or abs(cross) < 1e-9:
            cr.line_to(x1, y1)
            return

        cos_theta = max(-1.0, min(1.0, (ax * bx + ay * by) / (la * lb)))
        half = math.acos(cos_theta) / 2
        tangent = radius / math.tan(half)
        t1 = (x1 + ax / la * tangent, y1 + ay / la * tangent)
        t2 = (x1 + bx / lb * tangent, y1 + by / lb * tangent)

        ux, uy = ax / la + bx / lb, ay / la + by / lb
        ul = math.hypot(ux, uy)
        dist = radius / math.sin(half)
        cx, cy = x1 + ux / ul * dist, y1 + uy / ul * dist

        start = math.atan2(t1[1] - cy, t1[0] - cx)
        end = math.atan2(t2[1] - cy, t2[0] - cx)
        sweep = (end - start + math.pi) % _TAU - math.pi

        cr.line_to(*t1)
        if sweep >= 0:
            cr.arc(cx, cy, radius, start, start + sweep)
        else:
            cr.arc_negative(cx, cy, radius, start, start + sweep)

    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> None:
        cr = self._cr
        if not cr.has_current_point():
            cr.move_to(cpx, cpy)
        x0, y0 = cr.get_current_point()
        cr.curve_to(
            x0 + 2 / 3 * (cpx - x0),
            y0 + 2 / 3 * (cpy - y0),
            x + 2 / 3 * (cpx - x),
            y + 2 / 3 * (cpy - y),
            x,
            y,
        )

    def bezier_curve_to(
        self, cp1x: float, cp1y: float, cp2x: float, cp2y: float, x: float, y: float
    ) -> None:
        if not self._cr.has_current_point():
            self._cr.move_to(cp1x, cp1y)
        self._cr.curve_to(cp1x, cp1y, cp2x, cp2y, x, y)

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def fill(self) -> None:
        color = self._paint_color(self._state.fill_style)
        if self._shadow_active():
            path = self._cr.copy_path()

            def _shadow(c: cairo.Context) -> None:
                c.append_path(path)
                c.fill()

            self._paint_shadow(_shadow)
        self._cr.set_source_rgba(*color)
        self._cr.fill_preserve()

    def stroke(self) -> None:
        color = self._paint_color(self._state.stroke_style)
        if self._shadow_active():
            path = self._cr.copy_path()

            def _shadow(c: cairo.Context) -> None:
                self._apply_stroke_params(c)
                c.append_path(path)
                c.stroke()

            self._paint_shadow(_shadow)
        self._apply_stroke_params(self._cr)
        self._cr.set_source_rgba(*color)
        self._cr.stroke_preserve()

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        with self._isolated_path():
            self._cr.rectangle(x, y, width, height)
            self.fill()

    def stroke_rect(self, x: float, y: float, width: float, height: float) -> None:
        with self._isolated_path():
            self._cr.rectangle(x, y, width, height)
            self.stroke()

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        with self._isolated_path():
            cr = self._cr
            cr.save()
            cr.rectangle(x, y, width, height)
            cr.set_operator(cairo.OPERATOR_CLEAR)
            cr.fill()
            cr.restore()

    def fill_text(self, text: str, x: float, y: float) -> None:
        with self._isolated_path():
            self._text_path(text, x, y)
            self.fill()

    def stroke_text(self, text: str, x: float, y: float) -> None:
        with self._isolated_path():
            self._text_path(text, x, y)
            self.stroke()

    def measure_text(self, text: str) -> TextMetrics:
        return measure_with_cairo(self._cr, text, self._state.font)

    def draw_image(self, bitmap: Bitmap, x: float, y: float, width: float, height: float) -> None:
        if width == 0 or height == 0:
            return
        source = self._bitmap_surface(bitmap)
        sx = width / bitmap.natural_width
        sy = height / bitmap.natural_height

        def _place(c: cairo.Context) -> None:
            c.translate(x, y)
            c.scale(sx, sy)

        if self._shadow_active():

            def _shadow(c: cairo.Context) -> None:
                _place(c)
                c.mask_surface(source, 0, 0)

            self._paint_shadow(_shadow)

        cr = self._cr
        cr.save()
        _place(cr)
        cr.set_source_surface(source, 0, 0)
        cr.get_source().set_filter(cairo.FILTER_BEST)
        cr.paint_with_alpha(self._state.global_alpha)
        cr.restore()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _arc_path(
        cr: cairo.Context,
        x: float,
        y: float,
        radius: float,
        start: float,
        end: float,
        counterclockwise: bool,
    ) -> None:
        # canvas clamps sweeps of a full turn or more to exactly one turn
        if counterclockwise:
            if start - end >= _TAU:
                end = start - _TAU
            cr.arc_negative(x, y, radius, start, end)
        else:
            if end - start >= _TAU:
                end = start + _TAU
            cr.arc(x, y, radius, start, end)

    def _paint_color(self, style: str) -> RGBA:
        return with_alpha(parse_color(style), self._state.global_alpha)

    def _apply_stroke_params(self, c: cairo.Context) -> None:
        s = self._state
        c.set_line_width(s.line_width)
        c.set_line_cap(_LINE_CAPS.get(s.line_cap, cairo.LINE_CAP_BUTT))
        c.set_line_join(_LINE_JOINS.get(s.line_join, cairo.LINE_JOIN_MITER))
        c.set_miter_limit(s.miter_limit)
        c.set_dash(s.line_dash, s.line_dash_offset)

    def _text_path(self, text: str, x: float, y: float) -> None:
        _select_font(self._cr, self._state.font)
        self._cr.move_to(x, y)
        self._cr.text_path(text)

    @contextmanager
    def _isolated_path(self) -> Iterator[None]:
        """Run a paint that must not disturb the path being built."""
        saved = self._cr.copy_path()
        self._cr.new_path()
        try:
            yield
        finally:
            self._cr.new_path()
            self._cr.append_path(saved)

    def _shadow_active(self) -> bool:
        s = self._state
        if parse_color(s.shadow_color)[3] == 0:
            return False
        return s.shadow_blur > 0 or s.shadow_offset_x != 0 or s.shadow_offset_y != 0

    def _paint_shadow(self, painter: Callable[[cairo.Context], None]) -> None:
        s = self._state
        layer = cairo.ImageSurface(
            cairo.FORMAT_ARGB32, self._surface.get_width(), self._surface.get_height()
        )
        lcr = cairo.Context(layer)
        lcr.set_matrix(self._cr.get_matrix())
        lcr.set_source_rgba(*self._paint_color(s.shadow_color))
        painter(lcr)

        if s.shadow_blur > 0:
            # canvas shadowBlur is twice the gaussian standard deviation
            blurred = surface_to_image(layer).filter(ImageFilter.GaussianBlur(s.shadow_blur / 2))
            layer = image_to_surface(blurred)

        cr = self._cr
        cr.save()
        cr.identity_matrix()
        cr.set_source_surface(layer, s.shadow_offset_x, s.shadow_offset_y)
        cr.paint()
        cr.restore()

    def _bitmap_surface(self, bitmap: Bitmap) -> cairo.ImageSurface:
        key = id(bitmap.image)
        if key not in self._bitmap_surfaces:
            self._bitmap_surfaces[key] = image_to_surface(bitmap.image)
        return self._bitmap_surfaces[key]


class CairoTextMeasurer:
    """Measures text without a render surface (used by engines that do not rasterize)."""

    def __init__(self) -> None:
        self._cr = cairo.Context(cairo.ImageSurface(cairo.FORMAT_ARGB32, 1, 1))

    def __call__(self, text: str, font: FontSpec) -> TextMetrics:
        return measure_with_cairo(self._cr, text, font)


class CairoEngine:
    """Server-side engine: rasterizes to PNG or JPEG bytes."""

    name = "cairo"

    def __init__(self, image_loader: Callable[[str], Any] | None = None) -> None:
        self._image_loader = image_loader or load_bitmap

    def create_surface(self, width: int, height: int) -> cairo.ImageSurface:
        return cairo.ImageSurface(cairo.FORMAT_ARGB32, int(width), int(height))

    def get_context(self, surface: cairo.ImageSurface) -> CairoContext2D:
        return CairoContext2D(surface)

    async def load_image(self, source: str) -> Bitmap:
        return await self._image_loader(source)

    def encode(self, surface: cairo.ImageSurface, output_type: OutputType) -> bytes:
        surface.flush()
        buf = io.BytesIO()
        if output_type == "png":
            surface.write_to_png(buf)
        elif output_type == "jpg":
            # premultiplied channels are the image composited over black
            rgb = _surface_pixels(surface)[..., 2::-1]
            Image.fromarray(np.ascontiguousarray(rgb), "RGB").save(
                buf, "JPEG", quality=settings.jpeg_quality
            )
        else:
            raise SceneConfigError(f"unknown output type {output_type!r}")
        return buf.getvalue()

    def media_type(self, output_type: OutputType) -> str:
        return _MEDIA_TYPES[output_type]


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


def measure_with_cairo(cr: cairo.Context, text: str, font: FontSpec) -> TextMetrics:
    _select_font(cr, font)
    x_bearing, y_bearing, width, height, x_advance, _ = cr.text_extents(text)
    ascent, descent, _, _, _ = cr.font_extents()
    return TextMetrics(
        width=x_advance,
        actual_bounding_box_ascent=-y_bearing,
        actual_bounding_box_descent=height + y_bearing,
        em_height_ascent=ascent,
        em_height_descent=descent,
        alphabetic_baseline=0.0,
    )


def _select_font(cr: cairo.Context, font: FontSpec) -> None:
    weight = cairo.FONT_WEIGHT_BOLD if font.is_bold else cairo.FONT_WEIGHT_NORMAL
    cr.select_font_face(font.family, cairo.FONT_SLANT_NORMAL, weight)
    cr.set_font_size(font.size)


def _surface_pixels(surface: cairo.ImageSurface) -> NDArray[np.uint8]:
    """H×W×4 view of an ARGB32 surface in memory order (BGRA on little-endian hosts)."""
    surface.flush()
    width, height, stride = surface.get_width(), surface.get_height(), surface.get_stride()
    raw = np.frombuffer(surface.get_data(), dtype=np.uint8).reshape(height, stride)
    return raw[:, : width * 4].reshape(height, width, 4)


def surface_to_image(surface: cairo.ImageSurface) -> Image.Image:
    bgra = _surface_pixels(surface).astype(np.float32)
    alpha = bgra[..., 3:4]
    rgb = np.where(alpha > 0, bgra[..., 2::-1] * 255.0 / np.maximum(alpha, 1.0), 0.0)
    rgba = np.concatenate([rgb, alpha], axis=-1)
    return Image.fromarray(np.clip(rgba + 0.5, 0, 255).astype(np.uint8), "RGBA")


def image_to_surface(image: Image.Image) -> cairo.ImageSurface:
    rgba = np.asarray(image.convert("RGBA"), dtype=np.float32)
    width, height = image.size
    alpha = rgba[..., 3:4] / 255.0
    bgra = np.concatenate([rgba[..., 2::-1] * alpha, rgba[..., 3:4]], axis=-1)

    stride = cairo.ImageSurface.format_stride_for_width(cairo.FORMAT_ARGB32, width)
    rows = np.zeros((height, stride), dtype=np.uint8)
    rows[:, : width * 4] = np.clip(bgra + 0.5, 0, 255).astype(np.uint8).reshape(height, width * 4)
    return cairo.ImageSurface.create_for_data(
        bytearray(rows.tobytes()), cairo.FORMAT_ARGB32, width, height, stride
    )
