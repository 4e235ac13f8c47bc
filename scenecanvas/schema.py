"""Published scene schema for producers that build scene descriptions directly."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

from scenecanvas.models.scene import Scene


@lru_cache(maxsize=1)
def scene_json_schema() -> dict[str, Any]:
    """JSON schema of the scene description, with wire (camelCase) field names."""
    return Scene.model_json_schema(by_alias=True)


def schema_description() -> str:
    return json.dumps(scene_json_schema(), indent=2)
