"""scenecanvas: compile declarative scene descriptions into rendered images."""

from scenecanvas.errors import ImageLoadError, LayoutNotReadyError, RenderError, SceneConfigError
from scenecanvas.models.scene import Scene
from scenecanvas.renderer import Renderer, render, render_sync
from scenecanvas.schema import schema_description

__version__ = "0.1.0"

__all__ = [
    "ImageLoadError",
    "LayoutNotReadyError",
    "RenderError",
    "Renderer",
    "Scene",
    "SceneConfigError",
    "render",
    "render_sync",
    "schema_description",
]
