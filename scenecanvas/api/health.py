"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from scenecanvas import __version__
from scenecanvas.engine import ENGINES
from scenecanvas.models.responses import HealthResponse
from scenecanvas.renderers import get_registry

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        engines=sorted(ENGINES),
        node_types=get_registry().kinds(),
    )
