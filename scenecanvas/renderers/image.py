"""Image node: a colour block, a fitted bitmap, or both."""

from __future__ import annotations

import logging
from typing import Any

from scenecanvas.engine.types import Bitmap, state_scope
from scenecanvas.errors import LayoutNotReadyError, SceneConfigError
from scenecanvas.models.scene import ImageNode
from scenecanvas.renderers.base import BaseRenderer, Box, apply_shadow
from scenecanvas.renderers.registry import renderer

logger = logging.getLogger(__name__)


def fit_image(
    natural_width: float,
    natural_height: float,
    width: float | None,
    height: float | None,
    object_fit: str = "contain",
) -> tuple[float, float, float, float]:
    """Resolve ``(box_w, box_h, image_w, image_h)`` for a bitmap of the given natural size.

    Only when both ``width`` and ``height`` are set does ``object_fit`` matter; the image is
    then scaled along one axis and centred in the box along the other.
    """
    ratio = natural_width / natural_height
    if not width:
        if not height:
            return natural_width, natural_height, natural_width, natural_height
        return height * ratio, height, height * ratio, height
    if not height:
        return width, width / ratio, width, width / ratio

    if (ratio > 1) if object_fit == "cover" else (ratio <= 1):
        return width, height, height * ratio, height
    return width, height, width, width / ratio


@renderer("img", "image", description="Bitmap with optional colour block, shadow and alpha")
class ImageRenderer(BaseRenderer[ImageNode]):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.width: float | None = None
        self.height: float | None = None
        self.image_width = 0.0
        self.image_height = 0.0
        self.bitmap: Bitmap | None = None

    @property
    def container(self) -> Box:
        if self.width is None:
            raise LayoutNotReadyError(f"image {self.node.id!r} has not been laid out")
        return Box(self.x, self.y, self.x + self.width, self.y + self.height)

    def rotation_center(self) -> tuple[float, float]:
        height = self.height
        if not height:
            height = self.width / self.bitmap.aspect_ratio if self.bitmap is not None else 0.0
        return (self.x + self.width / 2, self.y + height / 2)

    async def layout(self) -> ImageRenderer:
        node = self.node
        if node.url and self.bitmap is None:
            self.bitmap = await self.engine.load_image(node.url)

        if self.bitmap is None:
            if not node.width or not node.height:
                raise SceneConfigError(
                    f"image {node.id!r}: width and height are required when no url is given"
                )
            self.width, self.height = node.width, node.height
            self.image_width = self.image_height = 0.0
        else:
            self.width, self.height, self.image_width, self.image_height = fit_image(
                self.bitmap.natural_width,
                self.bitmap.natural_height,
                node.width,
                node.height,
                node.object_fit,
            )

        logger.debug(
            "image %r: box %.1fx%.1f, bitmap %.1fx%.1f",
            node.id,
            self.width,
            self.height,
            self.image_width,
            self.image_height,
        )
        return self

    async def _draw(self) -> None:
        if self.width is None:
            raise LayoutNotReadyError(f"image {self.node.id!r} has not been laid out")
        if self.node.color:
            self._draw_color()
        if self.bitmap is not None:
            self._draw_bitmap(self.bitmap)

    def _draw_color(self) -> None:
        ctx = self.ctx
        with state_scope(ctx):
            ctx.fill_style = self.node.color
            ctx.begin_path()
            ctx.round_rect(self.x, self.y, self.width, self.height, self.node.radius or 0)
            ctx.fill()

    def _draw_bitmap(self, bitmap: Bitmap) -> None:
        ctx = self.ctx
        margin_x = self.width - self.image_width
        margin_y = self.height - self.image_height
        with state_scope(ctx):
            if self.node.global_alpha is not None:
                ctx.global_alpha = self.node.global_alpha
            apply_shadow(ctx, self.node.shadow)
            ctx.draw_image(
                bitmap,
                self.x + margin_x / 2,
                self.y + margin_y / 2,
                self.image_width,
                self.image_height,
            )
