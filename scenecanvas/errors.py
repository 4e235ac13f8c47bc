"""Render error taxonomy."""

from __future__ import annotations


class RenderError(Exception):
    """Base class for every failure raised while rendering a scene."""


class SceneConfigError(RenderError, ValueError):
    """The scene description is missing something the node needs to render."""


class LayoutNotReadyError(RenderError, RuntimeError):
    """A bounding box was requested before the node finished its layout phase."""


class ImageLoadError(RenderError):
    """A bitmap source could not be fetched or decoded."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"failed to load image {_short(source)!r}: {reason}")


def _short(source: str, limit: int = 80) -> str:
    # data: URIs can be megabytes long
    return source if len(source) <= limit else source[:limit] + "..."
