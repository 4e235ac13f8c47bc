"""Text layout engine: per-character measuring, wrapping, alignment and highlights.

Layout works character by character against live ``measure_text`` metrics: characters are
packed into lines no wider than the node's ``width``, each line's baseline sits one max-ascent
below the previous one, and every character gets its own (x, y) baseline position. Drawing
then issues one ``fill_text`` per character.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

from scenecanvas.engine.types import Bitmap, state_scope
from scenecanvas.errors import LayoutNotReadyError, SceneConfigError
from scenecanvas.models.scene import FontSizeRange, Highlight, TextNode, TextStyle, XYGap
from scenecanvas.renderers.base import BaseRenderer, Box
from scenecanvas.renderers.highlighter import (
    HIGHLIGHT_BY_CHAR,
    HIGHLIGHT_BY_WORD,
    Highlighter,
    PlacedChar,
)
from scenecanvas.renderers.registry import renderer

logger = logging.getLogger(__name__)


def resolve_font_size(
    font_size: float | FontSizeRange, content: str, width: float, gap: float
) -> float:
    """Fixed size, or a ``{min, max}`` range fitted to one uniform cell per character."""
    if not isinstance(font_size, FontSizeRange):
        return font_size
    count = len(content)
    if count == 0:
        return font_size.min
    fitted = (width - (count - 1) * gap) / count
    return min(max(fitted, font_size.min), font_size.max)


def line_width(line: list[PlacedChar], gap: float) -> float:
    if not line:
        return 0.0
    return sum(c.width for c in line) + gap * (len(line) - 1)


def wrap_chars(chars: list[PlacedChar], max_width: float, gap: float) -> list[list[PlacedChar]]:
    """Greedy character wrap. A line always holds at least one character."""
    lines: list[list[PlacedChar]] = [[]]
    for c in chars:
        current = lines[-1]
        if current and line_width(current, gap) + c.width > max_width:
            lines.append([c])
        else:
            current.append(c)
    return lines


def resolve_padding(padding: float | XYGap | None) -> tuple[float, float]:
    if padding is None:
        return 0.0, 0.0
    if isinstance(padding, XYGap):
        return padding.x, padding.y
    return padding, padding


@renderer("text", description="Wrapped per-character text with optional highlight")
class TextRenderer(BaseRenderer[TextNode]):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.lines: list[list[PlacedChar]] | None = None
        self.font_size: float | None = None
        self.overlay: Bitmap | None = None
        if self.in_flow:
            # position comes from the flow, alignment inside the box is meaningless
            self.node.style.align = None
            self.node.style.vertical_align = None

    @property
    def style(self) -> TextStyle:
        return self.node.style

    @property
    def container(self) -> Box:
        if self.lines is None:
            raise LayoutNotReadyError(f"text {self.node.id!r} has not been laid out")
        return self._bounding_box(self.lines)

    def rotation_center(self) -> tuple[float, float]:
        return (self.x + self.node.width / 2, self.y + self.node.height / 2)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    async def layout(self) -> TextRenderer:
        self._check_highlight()
        highlight = self.style.highlight
        if highlight and highlight.style and highlight.style.url and self.overlay is None:
            self.overlay = await self.engine.load_image(highlight.style.url)

        self.font_size = resolve_font_size(
            self.style.font_size, self.node.content, self.node.width, self.style.horizontal_gap
        )
        self._apply_font()
        chars = [
            PlacedChar(char=ch, index=i, metrics=self.ctx.measure_text(ch))
            for i, ch in enumerate(self.node.content)
        ]
        lines = wrap_chars(chars, self.node.width, self.style.horizontal_gap)
        self._place(lines)
        self.lines = lines

        logger.debug(
            "text %r: %d chars in %d lines at size %.1f",
            self.node.id,
            len(chars),
            len(lines),
            self.font_size,
        )
        return self

    def _check_highlight(self) -> None:
        highlight = self.style.highlight
        if highlight is None or highlight.type is None:
            return
        if highlight.type in HIGHLIGHT_BY_CHAR and not highlight.color:
            raise SceneConfigError(
                f"text {self.node.id!r}: color is required for highlight type {highlight.type!r}"
            )
        if highlight.type in HIGHLIGHT_BY_WORD and highlight.style is None:
            raise SceneConfigError(
                f"text {self.node.id!r}: style is required for highlight type {highlight.type!r}"
            )

    def _apply_font(self) -> None:
        self.ctx.set_font(self.style.font_name, self.font_size, self.style.font_weight or "")

    def _place(self, lines: list[list[PlacedChar]]) -> None:
        style = self.style
        h_gap = style.horizontal_gap
        v_gap = style.vertical_gap

        block_height = sum(max((c.bounding_height for c in line), default=0.0) for line in lines)
        block_height += (len(lines) - 1) * v_gap
        if style.vertical_align == "center":
            pad_y = (self.node.height - block_height) / 2
        elif style.vertical_align == "bottom":
            pad_y = self.node.height - block_height
        else:
            pad_y = 0.0

        baseline = self.y + pad_y
        for line_index, line in enumerate(lines):
            width = line_width(line, h_gap)
            if style.align == "center":
                pad_x = (self.node.width - width) / 2
            elif style.align == "right":
                pad_x = self.node.width - width
            else:
                pad_x = 0.0

            ascent = max((c.metrics.actual_bounding_box_ascent for c in line), default=0.0)
            baseline += ascent + (v_gap if line_index else 0.0)

            x = self.x + pad_x
            for i, c in enumerate(line):
                if i:
                    x += h_gap + line[i - 1].width
                c.x, c.y = x, baseline

    def _bounding_box(self, lines: list[list[PlacedChar]]) -> Box:
        pad_x, pad_y = resolve_padding(self.style.padding)
        if not lines[0]:
            return Box(self.x - pad_x, self.y - pad_y, self.x + pad_x, self.y + pad_y)

        h_gap = self.style.horizontal_gap
        max_width = max(line_width(line, h_gap) for line in lines)
        first = lines[0][0]
        last = lines[-1][-1]
        top = max(c.metrics.actual_bounding_box_ascent for c in lines[0])

        x1 = first.x - pad_x
        y1 = first.y - top - pad_y
        return Box(
            x1,
            y1,
            x1 + max_width + pad_x * 2,
            last.y + last.metrics.actual_bounding_box_descent + pad_y,
        )

    # ------------------------------------------------------------------
    # Draw
    # ------------------------------------------------------------------

    async def _draw(self) -> None:
        if self.lines is None:
            raise LayoutNotReadyError(f"text {self.node.id!r} has not been laid out")
        self._apply_font()
        self._draw_background()
        self._draw_chars()

    def _draw_background(self) -> None:
        if not self.style.background_color:
            return
        box = self.container
        with state_scope(self.ctx):
            self.ctx.fill_style = self.style.background_color
            self.ctx.begin_path()
            self.ctx.round_rect(box.x1, box.y1, box.width, box.height, self.style.radius or 0)
            self.ctx.fill()

    def _draw_char(self, c: PlacedChar) -> None:
        ctx = self.ctx
        ctx.fill_style = self.style.color
        ctx.fill_text(c.char, c.x, c.y)
        border = self.style.border
        if border is not None:
            with state_scope(ctx):
                ctx.line_width = border.width or 1
                ctx.stroke_style = border.color
                ctx.stroke_text(c.char, c.x, c.y)

    def _draw_chars(self) -> None:
        chars = [c for line in self.lines for c in line]
        highlight = self.style.highlight
        marked = self._highlighted(highlight)
        if highlight is None or highlight.type is None or not marked:
            for c in chars:
                self._draw_char(c)
            return

        if highlight.type in HIGHLIGHT_BY_CHAR:
            highlighter = Highlighter(self.ctx, self.style.color)
            indexes = {c.index for _, c in marked}
            for _, c in marked:
                highlighter.decorate(highlight.type, c, highlight.color)
            for c in chars:
                if c.index not in indexes:
                    self._draw_char(c)
            return

        if self.overlay is None:
            raise SceneConfigError(
                f"text {self.node.id!r}: highlight image {highlight.style.url!r} was not loaded"
            )
        highlighter = Highlighter(self.ctx, self.style.color)
        for _, run in itertools.groupby(marked, key=lambda item: item[0]):
            highlighter.overlay([c for _, c in run], self.overlay, highlight.style)
        for c in chars:
            self._draw_char(c)

    def _highlighted(self, highlight: Highlight | None) -> list[tuple[int, PlacedChar]]:
        """``(line_index, char)`` for the first occurrence of the highlight word."""
        if highlight is None or highlight.type is None or not highlight.content:
            return []
        start = self.node.content.find(highlight.content)
        if start < 0:
            logger.warning(
                "text %r: highlight %r not found in content", self.node.id, highlight.content
            )
            return []
        end = start + len(highlight.content)
        return [
            (line_index, c)
            for line_index, line in enumerate(self.lines)
            for c in line
            if start <= c.index < end
        ]
