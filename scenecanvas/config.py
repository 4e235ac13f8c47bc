"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    scenecanvas_env: str = "development"
    scenecanvas_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Rendering
    default_engine: str = "cairo"
    default_font_family: str = "sans-serif"
    jpeg_quality: int = 95
    image_fetch_timeout_s: float = 10.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
