"""Render entry point: scene description in, encoded image bytes out."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from scenecanvas.engine import create_engine
from scenecanvas.engine.types import CanvasEngine, OutputType
from scenecanvas.errors import SceneConfigError
from scenecanvas.models.scene import ContainerNode, Scene
from scenecanvas.renderers.container import ContainerRenderer

logger = logging.getLogger(__name__)


class Renderer:
    """Owns one surface for one scene. Build a new instance per render."""

    def __init__(self, scene: Scene | dict[str, Any], engine: CanvasEngine | None = None) -> None:
        self.scene = scene if isinstance(scene, Scene) else Scene.model_validate(scene)
        self.engine = engine or create_engine()

    @property
    def output_type(self) -> OutputType:
        return self.scene.output.type if self.scene.output else "png"

    @property
    def media_type(self) -> str:
        return self.engine.media_type(self.output_type)

    async def render(self) -> bytes:
        scene = self.scene
        if not scene.layers:
            raise SceneConfigError(f"scene {scene.id!r} has no layers")

        start = time.perf_counter()
        logger.info(
            "Rendering scene %r: %dx%d, %d layers, engine=%s",
            scene.id,
            scene.width,
            scene.height,
            len(scene.layers),
            self.engine.name,
        )

        surface = self.engine.create_surface(scene.width, scene.height)
        ctx = self.engine.get_context(surface)
        root = ContainerNode(
            id=scene.id,
            type="container",
            x=0,
            y=0,
            width=scene.width,
            height=scene.height,
            layers=scene.layers,
        )
        container = ContainerRenderer(ctx, self.engine, root)
        await container.layout()
        await container.draw()

        data = self.engine.encode(surface, self.output_type)
        logger.info(
            "Rendered scene %r: %d bytes %s in %.0fms",
            scene.id,
            len(data),
            self.output_type,
            (time.perf_counter() - start) * 1000,
        )
        return data


async def render(scene: Scene | dict[str, Any], engine: CanvasEngine | None = None) -> bytes:
    return await Renderer(scene, engine).render()


def render_sync(scene: Scene | dict[str, Any], engine: CanvasEngine | None = None) -> bytes:
    """Blocking wrapper for callers without an event loop."""
    return asyncio.run(render(scene, engine))
