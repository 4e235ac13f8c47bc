"""Node renderers. Importing this package registers every node kind."""

from scenecanvas.renderers.base import BaseRenderer, Box
from scenecanvas.renderers.container import ContainerRenderer
from scenecanvas.renderers.image import ImageRenderer
from scenecanvas.renderers.registry import get_registry, renderer
from scenecanvas.renderers.shape import ShapeRenderer
from scenecanvas.renderers.text import TextRenderer

__all__ = [
    "BaseRenderer",
    "Box",
    "ContainerRenderer",
    "ImageRenderer",
    "ShapeRenderer",
    "TextRenderer",
    "get_registry",
    "renderer",
]
