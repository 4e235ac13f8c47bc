"""Drawing-surface capability consumed by the renderers.

A ``CanvasEngine`` owns surface creation, bitmap loading and encoding for one host; a
``DrawingContext`` is the stateful 2D context the renderers drive. Method names follow the
browser ``CanvasRenderingContext2D`` API in snake_case, with the same semantics (``fill`` and
``stroke`` keep the current path, ``fill_rect`` does not touch it, ``save``/``restore`` do not
cover the path).
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from PIL import Image

OutputType = Literal["png", "jpg"]


@dataclass(frozen=True)
class TextMetrics:
    """Per-string metrics, mirroring the browser ``TextMetrics`` fields the layout needs."""

    width: float
    actual_bounding_box_ascent: float = 0.0
    actual_bounding_box_descent: float = 0.0
    em_height_ascent: float = 0.0
    em_height_descent: float = 0.0
    alphabetic_baseline: float = 0.0


@dataclass(frozen=True)
class FontSpec:
    family: str
    size: float
    weight: str = ""

    @property
    def is_bold(self) -> bool:
        w = self.weight.strip().lower()
        if w in ("bold", "bolder"):
            return True
        return w.isdigit() and int(w) >= 600

    def css(self) -> str:
        weight = f"{self.weight} " if self.weight else ""
        return f'{weight}{self.size:g}px "{self.family}"'


@dataclass
class Bitmap:
    """A decoded image plus the source it was loaded from."""

    source: str
    image: Image.Image

    @property
    def natural_width(self) -> int:
        return self.image.width

    @property
    def natural_height(self) -> int:
        return self.image.height

    @property
    def aspect_ratio(self) -> float:
        return self.natural_width / self.natural_height


class DrawingContext(Protocol):
    fill_style: str
    stroke_style: str
    line_width: float
    line_cap: str
    line_join: str
    miter_limit: float
    line_dash_offset: float
    global_alpha: float
    shadow_color: str
    shadow_blur: float
    shadow_offset_x: float
    shadow_offset_y: float

    # state
    def save(self) -> None: ...
    def restore(self) -> None: ...
    def translate(self, x: float, y: float) -> None: ...
    def rotate(self, angle: float) -> None: ...
    def set_line_dash(self, segments: list[float]) -> None: ...
    def set_font(self, family: str, size: float, weight: str = "") -> None: ...

    # path building
    def begin_path(self) -> None: ...
    def close_path(self) -> None: ...
    def move_to(self, x: float, y: float) -> None: ...
    def line_to(self, x: float, y: float) -> None: ...
    def rect(self, x: float, y: float, width: float, height: float) -> None: ...
    def round_rect(self, x: float, y: float, width: float, height: float, radius: float) -> None: ...
    def arc(
        self, x: float, y: float, radius: float, start_angle: float, end_angle: float,
        counterclockwise: bool = False,
    ) -> None: ...
    def ellipse(
        self, x: float, y: float, radius_x: float, radius_y: float, rotation: float,
        start_angle: float, end_angle: float, counterclockwise: bool = False,
    ) -> None: ...
    def arc_to(self, x1: float, y1: float, x2: float, y2: float, radius: float) -> None: ...
    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> None: ...
    def bezier_curve_to(
        self, cp1x: float, cp1y: float, cp2x: float, cp2y: float, x: float, y: float,
    ) -> None: ...

    # painting
    def fill(self) -> None: ...
    def stroke(self) -> None: ...
    def fill_rect(self, x: float, y: float, width: float, height: float) -> None: ...
    def stroke_rect(self, x: float, y: float, width: float, height: float) -> None: ...
    def clear_rect(self, x: float, y: float, width: float, height: float) -> None: ...
    def fill_text(self, text: str, x: float, y: float) -> None: ...
    def stroke_text(self, text: str, x: float, y: float) -> None: ...
    def measure_text(self, text: str) -> TextMetrics: ...
    def draw_image(self, bitmap: Bitmap, x: float, y: float, width: float, height: float) -> None: ...


class CanvasEngine(Protocol):
    name: str

    def create_surface(self, width: int, height: int) -> Any: ...
    def get_context(self, surface: Any) -> DrawingContext: ...
    async def load_image(self, source: str) -> Bitmap: ...
    def encode(self, surface: Any, output_type: OutputType) -> bytes: ...
    def media_type(self, output_type: OutputType) -> str: ...


@contextmanager
def state_scope(ctx: DrawingContext) -> Iterator[DrawingContext]:
    """Save the context state and restore it on every exit path."""
    ctx.save()
    try:
        yield ctx
    finally:
        ctx.restore()


@contextmanager
def rotated(ctx: DrawingContext, degrees: float | None, cx: float, cy: float) -> Iterator[None]:
    """Rotate ``degrees`` about (cx, cy) for the duration of the block."""
    if not degrees:
        yield
        return
    with state_scope(ctx):
        ctx.translate(cx, cy)
        ctx.rotate(math.radians(degrees))
        ctx.translate(-cx, -cy)
        yield
