"""POST /api/render: scene description → encoded image (or display list)."""

from __future__ import annotations

import time
from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from scenecanvas.config import Settings
from scenecanvas.dependencies import get_settings
from scenecanvas.engine import create_engine
from scenecanvas.models.scene import Scene
from scenecanvas.renderer import Renderer
from scenecanvas.schema import scene_json_schema

router = APIRouter()


@router.post("/render")
async def render_scene(
    scene: Scene,
    engine: Literal["cairo", "recording"] | None = Query(
        None, description="Drawing engine; defaults to settings.default_engine"
    ),
    settings: Settings = Depends(get_settings),
) -> Response:
    start = time.perf_counter()
    renderer = Renderer(scene, create_engine(engine or settings.default_engine))
    data = await renderer.render()
    elapsed = (time.perf_counter() - start) * 1000
    return Response(
        content=data,
        media_type=renderer.media_type,
        headers={"X-Render-Time-Ms": f"{elapsed:.1f}"},
    )


@router.get("/schema")
async def schema() -> dict:
    return scene_json_schema()
