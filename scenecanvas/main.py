"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scenecanvas import __version__
from scenecanvas.config import settings
from scenecanvas.errors import ImageLoadError, SceneConfigError
from scenecanvas.models.responses import ErrorResponse

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.scenecanvas_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="scenecanvas",
        description="Declarative scene descriptions rendered to PNG/JPEG or canvas display lists",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SceneConfigError, _scene_config_error)
    app.add_exception_handler(ImageLoadError, _image_load_error)

    from scenecanvas.api.router import api_router

    app.include_router(api_router)

    return app


async def _scene_config_error(request: Request, exc: SceneConfigError) -> JSONResponse:
    logger.warning("Rejected scene: %s", exc)
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(detail=str(exc), error=type(exc).__name__).model_dump(),
    )


async def _image_load_error(request: Request, exc: ImageLoadError) -> JSONResponse:
    logger.warning("Image load failed: %s", exc)
    return JSONResponse(
        status_code=502,
        content=ErrorResponse(detail=str(exc), error=type(exc).__name__).model_dump(),
    )


app = create_app()
