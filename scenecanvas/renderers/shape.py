"""Shape interpreter: executes a declarative command list against the drawing context.

The command stream does not bracket every path explicitly. Two policies fill the gaps:

* ``PATH_RESETTING_COMMANDS`` start a fresh path before adding geometry, so
  ``arc, fill, arc, fill`` paints two independent discs.
* Style resolution is a fold (``resolve_style``) over the stream: a command's own style wins,
  a bare paint trigger borrows the style of the path-building command right before it, and
  after any paint trigger the context drops back to the layer style.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from scenecanvas.engine.types import DrawingContext, state_scope
from scenecanvas.errors import LayoutNotReadyError, SceneConfigError
from scenecanvas.models.scene import (
    ArcCommand,
    ShapeCommand,
    ShapeNode,
    ShapeStyle,
)
from scenecanvas.renderers.base import BaseRenderer, Box, apply_shadow
from scenecanvas.renderers.registry import renderer

logger = logging.getLogger(__name__)

PATH_RESETTING_COMMANDS = frozenset({"rect", "moveTo", "arc", "ellipse"})

PATH_BUILDING_COMMANDS = frozenset(
    {"arc", "ellipse", "arcTo", "moveTo", "lineTo", "quadraticCurveTo", "bezierCurveTo", "rect"}
)

PAINT_COMMANDS = frozenset({"fill", "stroke", "fillAndStroke"})

_HANDLERS = {
    "rect": "_rect",
    "fillRect": "_fill_rect",
    "strokeRect": "_stroke_rect",
    "clearRect": "_clear_rect",
    "beginPath": "_begin_path",
    "closePath": "_close_path",
    "moveTo": "_move_to",
    "lineTo": "_line_to",
    "arc": "_arc",
    "ellipse": "_ellipse",
    "arcTo": "_arc_to",
    "quadraticCurveTo": "_quadratic_curve_to",
    "bezierCurveTo": "_bezier_curve_to",
    "fill": "_fill",
    "stroke": "_stroke",
    "fillAndStroke": "_fill_and_stroke",
}


@dataclass(frozen=True)
class StyleState:
    """Fold state threaded through the command stream."""

    layer: ShapeStyle | None
    last: ShapeStyle | None


def resolve_style(
    cmd: ShapeCommand, prev: ShapeCommand | None, state: StyleState
) -> tuple[ShapeStyle | None, StyleState]:
    """Style to apply before ``cmd`` and the state for the next command.

    ``None`` means leave the context as it is.
    """
    own = cmd.style
    if cmd.type in PAINT_COMMANDS and own is None:
        if prev is not None and prev.type in PATH_BUILDING_COMMANDS and prev.style is not None:
            return prev.style, replace(state, last=prev.style)
        return state.last, state
    if own is not None:
        return own, replace(state, last=own)
    if cmd.type in PATH_BUILDING_COMMANDS:
        return state.last, state
    return None, state


def after_paint(state: StyleState) -> StyleState:
    return replace(state, last=state.layer)


def apply_style(ctx: DrawingContext, style: ShapeStyle | None) -> None:
    """Copy the fields ``style`` sets onto the context; unset fields are left alone."""
    if style is None:
        return
    if style.fill_style:
        ctx.fill_style = style.fill_style
    if style.stroke_style:
        ctx.stroke_style = style.stroke_style
    if style.line_width is not None:
        ctx.line_width = style.line_width
    if style.line_cap:
        ctx.line_cap = style.line_cap
    if style.line_join:
        ctx.line_join = style.line_join
    if style.miter_limit is not None:
        ctx.miter_limit = style.miter_limit
    if style.line_dash is not None:
        ctx.set_line_dash(style.line_dash)
    if style.line_dash_offset is not None:
        ctx.line_dash_offset = style.line_dash_offset
    if style.global_alpha is not None:
        ctx.global_alpha = style.global_alpha


def corner_radii(cmd: Any) -> tuple[float, float] | None:
    """``(rx, ry)`` for a rect-family command, or None for square corners."""
    if cmd.rx is None and cmd.ry is None:
        return None
    rx = cmd.rx if cmd.rx is not None else cmd.ry
    ry = cmd.ry if cmd.ry is not None else cmd.rx
    return rx, ry


def rounded_rect_path(
    ctx: DrawingContext, x: float, y: float, w: float, h: float, rx: float, ry: float
) -> None:
    """Closed path of four edges and four quadratic corners."""
    ctx.move_to(x + rx, y)
    ctx.line_to(x + w - rx, y)
    ctx.quadratic_curve_to(x + w, y, x + w, y + ry)
    ctx.line_to(x + w, y + h - ry)
    ctx.quadratic_curve_to(x + w, y + h, x + w - rx, y + h)
    ctx.line_to(x + rx, y + h)
    ctx.quadratic_curve_to(x, y + h, x, y + h - ry)
    ctx.line_to(x, y + ry)
    ctx.quadratic_curve_to(x, y, x + rx, y)
    ctx.close_path()


def resolve_arc_radii(cmd: ArcCommand) -> tuple[float, float]:
    if cmd.radius is not None:
        return cmd.radius, cmd.radius
    if cmd.radius_x is not None or cmd.radius_y is not None:
        rx = cmd.radius_x if cmd.radius_x is not None else cmd.radius_y
        ry = cmd.radius_y if cmd.radius_y is not None else cmd.radius_x
        return rx, ry
    return 0.0, 0.0


def compute_bounds(node: ShapeNode) -> tuple[float, float]:
    """Width and height of the shape. Curves are bounded by their control points."""
    if node.width and node.height:
        return node.width, node.height

    xs: list[float] = []
    ys: list[float] = []
    for cmd in node.shapes:
        t = cmd.type
        if t in ("rect", "fillRect", "strokeRect", "clearRect"):
            xs += [cmd.x, cmd.x + cmd.width]
            ys += [cmd.y, cmd.y + cmd.height]
        elif t in ("moveTo", "lineTo"):
            xs.append(cmd.x)
            ys.append(cmd.y)
        elif t == "arc":
            if cmd.radius is None and cmd.radius_x is None and cmd.radius_y is None:
                continue
            rx, ry = resolve_arc_radii(cmd)
            xs += [cmd.x - rx, cmd.x + rx]
            ys += [cmd.y - ry, cmd.y + ry]
        elif t == "ellipse":
            xs += [cmd.x - cmd.radius_x, cmd.x + cmd.radius_x]
            ys += [cmd.y - cmd.radius_y, cmd.y + cmd.radius_y]
        elif t == "arcTo":
            xs += [cmd.x1, cmd.x2]
            ys += [cmd.y1, cmd.y2]
        elif t == "quadraticCurveTo":
            xs += [cmd.cp1x, cmd.x]
            ys += [cmd.cp1y, cmd.y]
        elif t == "bezierCurveTo":
            xs += [cmd.cp1x, cmd.cp2x, cmd.x]
            ys += [cmd.cp1y, cmd.cp2y, cmd.y]

    if not xs:
        return 0.0, 0.0
    return max(xs) - min(xs), max(ys) - min(ys)


@renderer("shape", description="Declarative path and paint commands")
class ShapeRenderer(BaseRenderer[ShapeNode]):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.computed_width = 0.0
        self.computed_height = 0.0
        self._laid_out = False

    @property
    def container(self) -> Box:
        if not self._laid_out:
            raise LayoutNotReadyError(f"shape {self.node.id!r} has not been laid out")
        return Box(self.x, self.y, self.x + self.computed_width, self.y + self.computed_height)

    async def layout(self) -> ShapeRenderer:
        bw, bh = compute_bounds(self.node)
        self.computed_width = self.node.width if self.node.width is not None else bw
        self.computed_height = self.node.height if self.node.height is not None else bh
        self._laid_out = True
        logger.debug(
            "shape %r: %d commands, %.1fx%.1f at (%.1f, %.1f)",
            self.node.id,
            len(self.node.shapes),
            self.computed_width,
            self.computed_height,
            self.x,
            self.y,
        )
        return self

    async def _draw(self) -> None:
        ctx = self.ctx
        layer_style = self.node.style
        commands = self.node.shapes
        apply_shadow(ctx, self.node.shadow)

        state = StyleState(layer=layer_style, last=layer_style)
        with state_scope(ctx):
            apply_style(ctx, layer_style)
            for i, cmd in enumerate(commands):
                prev = commands[i - 1] if i > 0 else None
                nxt = commands[i + 1] if i + 1 < len(commands) else None

                style, state = resolve_style(cmd, prev, state)
                apply_style(ctx, style)
                self.execute(cmd)
                self._auto_paint(cmd, nxt)

                if cmd.type in PAINT_COMMANDS:
                    # drop per-command overrides, back to the layer style
                    ctx.restore()
                    ctx.save()
                    apply_style(ctx, layer_style)
                    state = after_paint(state)

    def _auto_paint(self, cmd: ShapeCommand, nxt: ShapeCommand | None) -> None:
        """Paint a styled path-building command that no paint trigger follows."""
        if cmd.type not in PATH_BUILDING_COMMANDS or cmd.style is None:
            return
        if nxt is not None and nxt.type in PAINT_COMMANDS:
            return
        if cmd.style.fill_style and cmd.style.fill_style != "transparent":
            self.ctx.fill()
        if cmd.style.stroke_style:
            self.ctx.stroke()

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------

    def execute(self, cmd: ShapeCommand) -> None:
        name = _HANDLERS.get(cmd.type)
        if name is None:
            raise SceneConfigError(f"shape {self.node.id!r}: unknown command type {cmd.type!r}")
        if cmd.type in PATH_RESETTING_COMMANDS:
            self.ctx.begin_path()
        getattr(self, name)(cmd)

    def _rounded(self, cmd: Any) -> bool:
        radii = corner_radii(cmd)
        if radii is None:
            return False
        rounded_rect_path(
            self.ctx, cmd.x + self.x, cmd.y + self.y, cmd.width, cmd.height, *radii
        )
        return True

    def _rect(self, cmd: Any) -> None:
        if not self._rounded(cmd):
            self.ctx.rect(cmd.x + self.x, cmd.y + self.y, cmd.width, cmd.height)

    def _fill_rect(self, cmd: Any) -> None:
        if corner_radii(cmd) is not None:
            self.ctx.begin_path()
            self._rounded(cmd)
            self.ctx.fill()
        else:
            self.ctx.fill_rect(cmd.x + self.x, cmd.y + self.y, cmd.width, cmd.height)

    def _stroke_rect(self, cmd: Any) -> None:
        if corner_radii(cmd) is not None:
            self.ctx.begin_path()
            self._rounded(cmd)
            self.ctx.stroke()
        else:
            self.ctx.stroke_rect(cmd.x + self.x, cmd.y + self.y, cmd.width, cmd.height)

    def _clear_rect(self, cmd: Any) -> None:
        self.ctx.clear_rect(cmd.x + self.x, cmd.y + self.y, cmd.width, cmd.height)

    def _begin_path(self, cmd: Any) -> None:
        self.ctx.begin_path()

    def _close_path(self, cmd: Any) -> None:
        self.ctx.close_path()

    def _move_to(self, cmd: Any) -> None:
        self.ctx.move_to(cmd.x + self.x, cmd.y + self.y)

    def _line_to(self, cmd: Any) -> None:
        self.ctx.line_to(cmd.x + self.x, cmd.y + self.y)

    def _arc(self, cmd: Any) -> None:
        rx, ry = resolve_arc_radii(cmd)
        x, y = cmd.x + self.x, cmd.y + self.y
        if rx == ry:
            self.ctx.arc(x, y, rx, cmd.start_angle, cmd.end_angle, cmd.counterclockwise)
        else:
            self.ctx.ellipse(
                x, y, rx, ry, 0.0, cmd.start_angle, cmd.end_angle, cmd.counterclockwise
            )

    def _ellipse(self, cmd: Any) -> None:
        self.ctx.ellipse(
            cmd.x + self.x,
            cmd.y + self.y,
            cmd.radius_x,
            cmd.radius_y,
            cmd.rotation,
            cmd.start_angle,
            cmd.end_angle,
            cmd.counterclockwise,
        )

    def _arc_to(self, cmd: Any) -> None:
        self.ctx.arc_to(
            cmd.x1 + self.x, cmd.y1 + self.y, cmd.x2 + self.x, cmd.y2 + self.y, cmd.radius
        )

    def _quadratic_curve_to(self, cmd: Any) -> None:
        self.ctx.quadratic_curve_to(
            cmd.cp1x + self.x, cmd.cp1y + self.y, cmd.x + self.x, cmd.y + self.y
        )

    def _bezier_curve_to(self, cmd: Any) -> None:
        self.ctx.bezier_curve_to(
            cmd.cp1x + self.x,
            cmd.cp1y + self.y,
            cmd.cp2x + self.x,
            cmd.cp2y + self.y,
            cmd.x + self.x,
            cmd.y + self.y,
        )

    def _fill(self, cmd: Any) -> None:
        self.ctx.fill()

    def _stroke(self, cmd: Any) -> None:
        self.ctx.stroke()

    def _fill_and_stroke(self, cmd: Any) -> None:
        self.ctx.fill()
        self.ctx.stroke()
