"""Renderer registry: every node kind is a renderer class registered via decorator.

Usage:
    @renderer("img", "image", description="Bitmap or colour block")
    class ImageRenderer(BaseRenderer[ImageNode]):
        ...

Adding a new node kind = one module with the decorator plus a model variant in
``scenecanvas.models.scene``. The container looks children up here by their ``type`` tag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from scenecanvas.errors import SceneConfigError

if TYPE_CHECKING:
    from scenecanvas.engine.types import CanvasEngine, DrawingContext
    from scenecanvas.renderers.base import BaseRenderer

logger = logging.getLogger(__name__)


@dataclass
class RendererSpec:
    kind: str
    cls: type["BaseRenderer"]
    description: str = ""


class RendererRegistry:
    """Maps node ``type`` tags to renderer classes."""

    def __init__(self) -> None:
        self._renderers: dict[str, RendererSpec] = {}

    def register(self, spec: RendererSpec) -> None:
        if spec.kind in self._renderers:
            raise ValueError(f"Duplicate renderer kind: {spec.kind}")
        self._renderers[spec.kind] = spec
        logger.debug("Registered renderer %s (%s)", spec.kind, spec.cls.__name__)

    def get(self, kind: str) -> RendererSpec:
        try:
            return self._renderers[kind]
        except KeyError:
            raise SceneConfigError(
                f"unknown layer type {kind!r}; expected one of {self.kinds()}"
            ) from None

    def kinds(self) -> list[str]:
        return sorted(self._renderers)

    def create(
        self,
        node: Any,
        ctx: "DrawingContext",
        engine: "CanvasEngine",
        *,
        in_flow: bool = False,
    ) -> "BaseRenderer":
        spec = self.get(node.type)
        return spec.cls(ctx, engine, node, in_flow=in_flow)

    @property
    def count(self) -> int:
        return len(self._renderers)


# Module-level singleton
_registry = RendererRegistry()


def get_registry() -> RendererRegistry:
    return _registry


def renderer(*kinds: str, description: str = "") -> Callable[[type], type]:
    """Class decorator registering a renderer for one or more node kinds."""

    def decorator(cls: type) -> type:
        for kind in kinds:
            _registry.register(RendererSpec(kind=kind, cls=cls, description=description))
        return cls

    return decorator
