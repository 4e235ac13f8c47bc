"""Shared renderer machinery: the layout/draw protocol and bounding boxes."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Generic, TypeVar

from scenecanvas.engine.types import CanvasEngine, DrawingContext, rotated, state_scope
from scenecanvas.models.scene import Shadow

NodeT = TypeVar("NodeT")


@dataclass(frozen=True)
class Box:
    """Axis-aligned bounding box in canvas coordinates."""

    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center(self) -> tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)


class BaseRenderer(abc.ABC, Generic[NodeT]):
    """One scene node bound to the shared drawing context.

    Lifecycle: construct (deep copy of the node) → ``await layout()`` → ``await draw()``.
    ``container`` is only meaningful after layout.
    """

    def __init__(
        self,
        ctx: DrawingContext,
        engine: CanvasEngine,
        node: NodeT,
        *,
        in_flow: bool = False,
    ) -> None:
        self.ctx = ctx
        self.engine = engine
        self.node: NodeT = node.model_copy(deep=True)
        self.in_flow = in_flow

    @property
    def x(self) -> float:
        return self.node.x if self.node.x is not None else 0.0

    @property
    def y(self) -> float:
        return self.node.y if self.node.y is not None else 0.0

    @property
    @abc.abstractmethod
    def container(self) -> Box:
        """Resolved bounding box. Raises ``LayoutNotReadyError`` before layout."""

    @abc.abstractmethod
    async def layout(self) -> BaseRenderer:
        ...

    @abc.abstractmethod
    async def _draw(self) -> None:
        ...

    def rotation_center(self) -> tuple[float, float]:
        return self.container.center

    async def draw(self) -> BaseRenderer:
        with state_scope(self.ctx):
            if self.node.rotate:
                cx, cy = self.rotation_center()
                with rotated(self.ctx, self.node.rotate, cx, cy):
                    await self._draw()
            else:
                await self._draw()
        return self

    async def set_position(self, x: float, y: float) -> BaseRenderer:
        self.node.x = x
        self.node.y = y
        return await self.layout()


def apply_shadow(ctx: DrawingContext, shadow: Shadow | None) -> None:
    if shadow is None:
        return
    ctx.shadow_color = shadow.color
    ctx.shadow_blur = shadow.blur
    ctx.shadow_offset_x = shadow.offset_x
    ctx.shadow_offset_y = shadow.offset_y
