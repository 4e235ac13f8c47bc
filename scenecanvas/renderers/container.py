"""Container layout engine: flow positioning, cross-axis centring, ordered drawing."""

from __future__ import annotations

import logging
from typing import Any

from scenecanvas.errors import LayoutNotReadyError
from scenecanvas.models.scene import ContainerNode, XYGap
from scenecanvas.renderers.base import BaseRenderer, Box
from scenecanvas.renderers.registry import get_registry, renderer

logger = logging.getLogger(__name__)


def resolve_gap(gap: float | XYGap | None) -> tuple[float, float]:
    if gap is None:
        return 0.0, 0.0
    if isinstance(gap, XYGap):
        return gap.x, gap.y
    return gap, gap


def flow_position(
    x: float | None,
    y: float | None,
    prev: Box | None,
    origin: tuple[float, float],
    direction: str,
    gap: float | XYGap | None,
) -> tuple[float, float]:
    """Fill in whichever of ``x``/``y`` is missing from the previous sibling's box.

    Row: right of the previous sibling, top-aligned with it. Column: below it,
    left-aligned with it. The first child starts at ``origin`` with no gap.
    """
    if prev is None:
        prev = Box(origin[0], origin[1], origin[0], origin[1])
        gap_x = gap_y = 0.0
    else:
        gap_x, gap_y = resolve_gap(gap)

    if direction == "column":
        return (prev.x1 if x is None else x, prev.y2 + gap_y if y is None else y)
    return (prev.x2 + gap_x if x is None else x, prev.y1 if y is None else y)


@renderer("container", description="Ordered children with row/column flow")
class ContainerRenderer(BaseRenderer[ContainerNode]):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.children: list[BaseRenderer] | None = None

    @property
    def container(self) -> Box:
        if not self.children:
            raise LayoutNotReadyError(
                f"container {self.node.id!r} has no laid-out children"
            )
        first = self.children[0].container
        last = self.children[-1].container
        return Box(first.x1, first.y1, last.x2, last.y2)

    async def layout(self) -> ContainerRenderer:
        node = self.node
        registry = get_registry()
        laid_out: list[BaseRenderer] = []

        for child in node.layers:
            # children are authored relative to this container
            x = child.x + self.x if child.x is not None else None
            y = child.y + self.y if child.y is not None else None
            in_flow = x is None or y is None
            if in_flow:
                prev = laid_out[-1].container if laid_out else None
                x, y = flow_position(x, y, prev, (self.x, self.y), node.direction, node.gap)

            current = registry.create(
                child.model_copy(update={"x": x, "y": y}), self.ctx, self.engine, in_flow=in_flow
            )
            await current.layout()
            laid_out.append(current)

        if node.item_align == "center" and laid_out:
            await self._center_items(laid_out)

        self.children = laid_out
        logger.debug(
            "container %r: %d children laid out (%s)", node.id, len(laid_out), node.direction
        )
        return self

    async def _center_items(self, children: list[BaseRenderer]) -> None:
        """Centre every child on the cross axis within the widest/tallest child."""
        boxes = [c.container for c in children]
        if self.node.direction == "column":
            extent = max(b.width for b in boxes)
            for child, box in zip(children, boxes):
                await child.set_position(child.x + (extent - box.width) / 2, child.y)
        else:
            extent = max(b.height for b in boxes)
            for child, box in zip(children, boxes):
                await child.set_position(child.x, child.y + (extent - box.height) / 2)

    async def _draw(self) -> None:
        if self.children is None:
            raise LayoutNotReadyError(f"container {self.node.id!r} has not been laid out")
        for child in self.children:
            await child.draw()
