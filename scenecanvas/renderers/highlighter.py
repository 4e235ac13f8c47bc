"""Highlight decorations for the text renderer."""

from __future__ import annotations

from dataclasses import dataclass

from scenecanvas.engine.types import Bitmap, DrawingContext, TextMetrics, state_scope
from scenecanvas.models.scene import HighlightImageStyle

UNDERLINE = "underline"
COLORED = "colored"
HALF_RECTANGLE = "halfRectangle"
SVG = "svg"

# Decorated characters are drawn by the decorator only
HIGHLIGHT_BY_CHAR = (UNDERLINE, COLORED, HALF_RECTANGLE)
# One overlay per line, text drawn normally on top
HIGHLIGHT_BY_WORD = (SVG,)

UNDERLINE_WIDTH = 8


@dataclass
class PlacedChar:
    """A measured character and, after layout, its baseline position."""

    char: str
    index: int
    metrics: TextMetrics
    x: float = 0.0
    y: float = 0.0

    @property
    def width(self) -> float:
        return self.metrics.width

    @property
    def bounding_height(self) -> float:
        return self.metrics.actual_bounding_box_ascent + self.metrics.actual_bounding_box_descent

    @property
    def em_height(self) -> float:
        return self.metrics.em_height_ascent + self.metrics.em_height_descent


class Highlighter:
    def __init__(self, ctx: DrawingContext, text_color: str) -> None:
        self.ctx = ctx
        self.text_color = text_color

    def decorate(self, kind: str, c: PlacedChar, color: str) -> None:
        if kind == COLORED:
            self.color_text(c, color)
        elif kind == HALF_RECTANGLE:
            self.rect_fill(c, color)
        elif kind == UNDERLINE:
            self.underline(c, color)
        else:
            raise ValueError(f"not a per-character highlight: {kind!r}")

    def color_text(self, c: PlacedChar, color: str) -> None:
        with state_scope(self.ctx):
            self.ctx.fill_style = color
            self.ctx.fill_text(c.char, c.x, c.y)

    def rect_fill(self, c: PlacedChar, color: str) -> None:
        """Marker stroke over the lower part of the glyph, then the glyph."""
        ctx = self.ctx
        with state_scope(ctx):
            ctx.fill_style = color
            ctx.fill_rect(
                c.x,
                c.y - abs(c.metrics.alphabetic_baseline) - 4,
                c.width,
                c.em_height / 3,
            )
            ctx.fill_style = self.text_color
            ctx.fill_text(c.char, c.x, c.y)

    def underline(self, c: PlacedChar, color: str) -> None:
        ctx = self.ctx
        y = c.y + c.metrics.actual_bounding_box_descent
        with state_scope(ctx):
            ctx.begin_path()
            ctx.stroke_style = color
            ctx.line_width = UNDERLINE_WIDTH
            ctx.move_to(c.x, y)
            ctx.line_to(c.x + c.width, y)
            ctx.stroke()
            ctx.fill_style = self.text_color
            ctx.fill_text(c.char, c.x, c.y)

    def overlay(self, word: list[PlacedChar], image: Bitmap, style: HighlightImageStyle) -> None:
        """Draw ``image`` across one line's run of highlighted characters."""
        first = word[0]
        width = sum(c.width for c in word)
        if style.cover_text:
            top = first.y - first.bounding_height
            height = first.bounding_height
        else:
            top = first.y
            height = style.height
        self.ctx.draw_image(
            image,
            first.x,
            top + (style.offset_y or 0),
            width,
            height or first.bounding_height,
        )
