"""Display-list engine: records canvas calls for replay onto a DOM canvas in a page.

Every call is stored under its browser ``CanvasRenderingContext2D`` name, e.g.
``{"op": "arc", "args": [50, 50, 20, 0, 6.28, false]}``; style assignments become
``{"op": "set", "prop": "fillStyle", "value": "red"}``. The encoded output is a JSON document
``{"width", "height", "ops"}`` that a page replays with ``ctx[op](...args)`` / ``ctx[prop] = value``.

Text is measured by an injectable measurer (cairo by default), so layout decisions match
the raster engine.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from scenecanvas.config import settings
from scenecanvas.engine.images import load_bitmap
from scenecanvas.engine.types import Bitmap, FontSpec, OutputType, TextMetrics
from scenecanvas.errors import SceneConfigError

logger = logging.getLogger(__name__)

TextMeasurer = Callable[[str, FontSpec], TextMetrics]
ImageLoader = Callable[[str], Awaitable[Bitmap]]

_DEFAULTS: dict[str, Any] = {
    "fill_style": "#000000",
    "stroke_style": "#000000",
    "line_width": 1.0,
    "line_cap": "butt",
    "line_join": "miter",
    "miter_limit": 10.0,
    "line_dash_offset": 0.0,
    "global_alpha": 1.0,
    "shadow_color": "rgba(0, 0, 0, 0)",
    "shadow_blur": 0.0,
    "shadow_offset_x": 0.0,
    "shadow_offset_y": 0.0,
}


@dataclass
class DisplayList:
    width: int
    height: int
    ops: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"width": self.width, "height": self.height, "ops": self.ops}


class _RecordedAttr:
    """Style property that records assignments under its canvas name."""

    def __init__(self, canvas_name: str) -> None:
        self.canvas_name = canvas_name

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return obj._state[self.name]

    def __set__(self, obj: Any, value: Any) -> None:
        obj._state[self.name] = value
        obj._record_set(self.canvas_name, value)


class RecordingContext:
    fill_style = _RecordedAttr("fillStyle")
    stroke_style = _RecordedAttr("strokeStyle")
    line_width = _RecordedAttr("lineWidth")
    line_cap = _RecordedAttr("lineCap")
    line_join = _RecordedAttr("lineJoin")
    miter_limit = _RecordedAttr("miterLimit")
    line_dash_offset = _RecordedAttr("lineDashOffset")
    global_alpha = _RecordedAttr("globalAlpha")
    shadow_color = _RecordedAttr("shadowColor")
    shadow_blur = _RecordedAttr("shadowBlur")
    shadow_offset_x = _RecordedAttr("shadowOffsetX")
    shadow_offset_y = _RecordedAttr("shadowOffsetY")

    def __init__(self, display_list: DisplayList, measurer: TextMeasurer) -> None:
        self.display_list = display_list
        self._measure = measurer
        self._state: dict[str, Any] = dict(_DEFAULTS, font=FontSpec(settings.default_font_family, 10))
        self._stack: list[dict[str, Any]] = []

    @property
    def ops(self) -> list[dict[str, Any]]:
        return self.display_list.ops

    @property
    def font(self) -> FontSpec:
        return self._state["font"]

    def calls(self, op: str) -> list[list[Any]]:
        """Arguments of every recorded call named ``op``, in order."""
        return [entry["args"] for entry in self.ops if entry["op"] == op]

    def _record(self, op: str, *args: Any) -> None:
        self.ops.append({"op": op, "args": list(args)})

    def _record_set(self, prop: str, value: Any) -> None:
        self.ops.append({"op": "set", "prop": prop, "value": value})

    # state
    def save(self) -> None:
        self._stack.append(dict(self._state))
        self._record("save")

    def restore(self) -> None:
        if self._stack:
            self._state = self._stack.pop()
        self._record("restore")

    def translate(self, x: float, y: float) -> None:
        self._record("translate", x, y)

    def rotate(self, angle: float) -> None:
        self._record("rotate", angle)

    def set_line_dash(self, segments: list[float]) -> None:
        self._record("setLineDash", list(segments))

    def set_font(self, family: str, size: float, weight: str = "") -> None:
        font = FontSpec(family=family, size=size, weight=weight or "")
        self._state["font"] = font
        self._record_set("font", font.css())

    # path building
    def begin_path(self) -> None:
        self._record("beginPath")

    def close_path(self) -> None:
        self._record("closePath")

    def move_to(self, x: float, y: float) -> None:
        self._record("moveTo", x, y)

    def line_to(self, x: float, y: float) -> None:
        self._record("lineTo", x, y)

    def rect(self, x: float, y: float, width: float, height: float) -> None:
        self._record("rect", x, y, width, height)

    def round_rect(self, x: float, y: float, width: float, height: float, radius: float) -> None:
        self._record("roundRect", x, y, width, height, radius)

    def arc(self, x, y, radius, start_angle, end_angle, counterclockwise=False) -> None:
        self._record("arc", x, y, radius, start_angle, end_angle, counterclockwise)

    def ellipse(
        self, x, y, radius_x, radius_y, rotation, start_angle, end_angle, counterclockwise=False
    ) -> None:
        self._record(
            "ellipse", x, y, radius_x, radius_y, rotation, start_angle, end_angle, counterclockwise
        )

    def arc_to(self, x1, y1, x2, y2, radius) -> None:
        self._record("arcTo", x1, y1, x2, y2, radius)

    def quadratic_curve_to(self, cpx, cpy, x, y) -> None:
        self._record("quadraticCurveTo", cpx, cpy, x, y)

    def bezier_curve_to(self, cp1x, cp1y, cp2x, cp2y, x, y) -> None:
        self._record("bezierCurveTo", cp1x, cp1y, cp2x, cp2y, x, y)

    # painting
    def fill(self) -> None:
        self._record("fill")

    def stroke(self) -> None:
        self._record("stroke")

    def fill_rect(self, x, y, width, height) -> None:
        self._record("fillRect", x, y, width, height)

    def stroke_rect(self, x, y, width, height) -> None:
        self._record("strokeRect", x, y, width, height)

    def clear_rect(self, x, y, width, height) -> None:
        self._record("clearRect", x, y, width, height)

    def fill_text(self, text: str, x: float, y: float) -> None:
        self._record("fillText", text, x, y)

    def stroke_text(self, text: str, x: float, y: float) -> None:
        self._record("strokeText", text, x, y)

    def measure_text(self, text: str) -> TextMetrics:
        return self._measure(text, self._state["font"])

    def draw_image(self, bitmap: Bitmap, x: float, y: float, width: float, height: float) -> None:
        self._record("drawImage", bitmap.source, x, y, width, height)


class RecordingEngine:
    """Engine whose output is a replayable display list instead of pixels."""

    name = "recording"

    def __init__(
        self,
        measurer: TextMeasurer | None = None,
        image_loader: ImageLoader | None = None,
    ) -> None:
        if measurer is None:
            from scenecanvas.engine.cairo_engine import CairoTextMeasurer

            measurer = CairoTextMeasurer()
        self._measurer = measurer
        self._image_loader = image_loader or load_bitmap
        self.last_context: RecordingContext | None = None

    def create_surface(self, width: int, height: int) -> DisplayList:
        return DisplayList(width=int(width), height=int(height))

    def get_context(self, surface: DisplayList) -> RecordingContext:
        self.last_context = RecordingContext(surface, self._measurer)
        return self.last_context

    async def load_image(self, source: str) -> Bitmap:
        return await self._image_loader(source)

    def encode(self, surface: DisplayList, output_type: OutputType) -> bytes:
        if output_type not in ("png", "jpg"):
            raise SceneConfigError(f"unknown output type {output_type!r}")
        logger.debug("Encoded display list with %d ops", len(surface.ops))
        return json.dumps(surface.to_dict()).encode("utf-8")

    def media_type(self, output_type: OutputType) -> str:
        return "application/json"
