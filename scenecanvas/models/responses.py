"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    engines: list[str] = Field(default_factory=list)
    node_types: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    detail: str
    error: str = Field(..., description="Exception class name")
