"""Drawing surfaces: the canvas capability the renderers draw against."""

from __future__ import annotations

from scenecanvas.config import settings
from scenecanvas.engine.cairo_engine import CairoEngine
from scenecanvas.engine.recording import RecordingEngine
from scenecanvas.engine.types import (
    Bitmap,
    CanvasEngine,
    DrawingContext,
    FontSpec,
    TextMetrics,
    rotated,
    state_scope,
)
from scenecanvas.errors import SceneConfigError

ENGINES: dict[str, type] = {
    CairoEngine.name: CairoEngine,
    RecordingEngine.name: RecordingEngine,
}


def create_engine(name: str | None = None) -> CanvasEngine:
    """Instantiate an engine by name (``settings.default_engine`` when omitted)."""
    key = name or settings.default_engine
    try:
        engine_cls = ENGINES[key]
    except KeyError:
        raise SceneConfigError(
            f"unknown engine {key!r}; expected one of {sorted(ENGINES)}"
        ) from None
    return engine_cls()


__all__ = [
    "ENGINES",
    "Bitmap",
    "CairoEngine",
    "CanvasEngine",
    "DrawingContext",
    "FontSpec",
    "RecordingEngine",
    "TextMetrics",
    "create_engine",
    "rotated",
    "state_scope",
]
