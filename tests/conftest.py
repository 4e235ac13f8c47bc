"""Shared test fixtures."""

from __future__ import annotations

import io
import math
import re

import pytest
from PIL import Image

from scenecanvas.engine.recording import RecordingEngine
from scenecanvas.engine.types import Bitmap, FontSpec, TextMetrics

TAU = 2 * math.pi


# Fixed font metrics: every glyph is a half-em wide, 0.8em above and 0.2em below the baseline.

def fixed_measure(text: str, font: FontSpec) -> TextMetrics:
    size = font.size
    return TextMetrics(
        width=len(text) * size * 0.5,
        actual_bounding_box_ascent=size * 0.8,
        actual_bounding_box_descent=size * 0.2,
        em_height_ascent=size * 0.8,
        em_height_descent=size * 0.2,
        alphabetic_baseline=0.0,
    )


_MEM_SOURCE = re.compile(r"^mem://(\d+)x(\d+)")


async def memory_loader(source: str) -> Bitmap:
    """Resolve ``mem://WxH`` sources to solid bitmaps of that size."""
    m = _MEM_SOURCE.match(source)
    if m is None:
        raise AssertionError(f"unexpected image source in test: {source}")
    size = (int(m.group(1)), int(m.group(2)))
    return Bitmap(source=source, image=Image.new("RGBA", size, (200, 40, 40, 255)))


def png_bytes(width: int, height: int, color=(10, 120, 200, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, "PNG")
    return buf.getvalue()


RED_DOT_SVG = b"""<svg xmlns="http://www.w3.org/2000/svg" width="40" height="20">
  <rect x="0" y="0" width="40" height="20" fill="#ff0000"/>
</svg>"""


PAINT_OPS = ("fill", "stroke", "fillRect", "strokeRect", "fillText", "strokeText", "drawImage")


def paint_states(ops: list[dict]) -> list[tuple[str, list, dict]]:
    """Replay recorded save/restore/set ops; ``(op, args, style)`` for every paint call."""
    state: dict = {}
    stack: list[dict] = []
    painted = []
    for entry in ops:
        op = entry["op"]
        if op == "save":
            stack.append(dict(state))
        elif op == "restore":
            if stack:
                state = stack.pop()
        elif op == "set":
            state[entry["prop"]] = entry["value"]
        elif op in PAINT_OPS:
            painted.append((op, entry["args"], dict(state)))
    return painted


def op_names(ops: list[dict]) -> list[str]:
    return [entry["op"] for entry in ops]


# Sample scenes

PROCESS_FLOWCHART = {
    "id": "process-flowchart",
    "width": 620,
    "height": 280,
    "layers": [
        {
            "id": "start-shape",
            "type": "shape",
            "x": 30,
            "y": 100,
            "shapes": [
                {
                    "type": "ellipse",
                    "x": 45,
                    "y": 40,
                    "radiusX": 45,
                    "radiusY": 35,
                    "rotation": 0,
                    "startAngle": 0,
                    "endAngle": TAU,
                    "style": {"fillStyle": "#E8F5E9", "strokeStyle": "#2E7D32", "lineWidth": 2},
                },
                {"type": "fillAndStroke"},
            ],
        },
        {
            "id": "start-text",
            "type": "text",
            "x": 30,
            "y": 107,
            "width": 90,
            "height": 66,
            "content": "Start",
            "style": {
                "fontName": "sans-serif",
                "fontSize": 16,
                "color": "#1B5E20",
                "align": "center",
                "verticalAlign": "center",
            },
        },
        {
            "id": "arrow-1",
            "type": "shape",
            "x": 0,
            "y": 0,
            "shapes": [
                {"type": "moveTo", "x": 120, "y": 135},
                {"type": "lineTo", "x": 160, "y": 135},
                {
                    "type": "stroke",
                    "style": {
                        "strokeStyle": "#1a1a1a",
                        "lineWidth": 3,
                        "lineCap": "round",
                        "lineJoin": "round",
                    },
                },
                {"type": "moveTo", "x": 165, "y": 135},
                {"type": "lineTo", "x": 155, "y": 130},
                {"type": "lineTo", "x": 155, "y": 140},
                {"type": "closePath"},
                {"type": "fill", "style": {"fillStyle": "#1a1a1a"}},
            ],
        },
        {
            "id": "process1-shape",
            "type": "shape",
            "x": 165,
            "y": 105,
            "shadow": {"color": "rgba(0, 0, 0, 0.3)", "blur": 6, "offsetX": 2, "offsetY": 2},
            "shapes": [
                {
                    "type": "rect",
                    "x": 0,
                    "y": 0,
                    "width": 100,
                    "height": 60,
                    "rx": 6,
                    "ry": 6,
                    "style": {"fillStyle": "#E3F2FD", "strokeStyle": "#1565C0", "lineWidth": 2},
                },
                {"type": "fillAndStroke"},
            ],
        },
        {
            "id": "process1-text",
            "type": "text",
            "x": 165,
            "y": 105,
            "width": 100,
            "height": 60,
            "content": "Process 1",
            "style": {
                "fontName": "sans-serif",
                "fontSize": 14,
                "color": "#0D47A1",
                "align": "center",
                "verticalAlign": "center",
            },
        },
    ],
}

ROW_CARDS = {
    "id": "row-cards",
    "width": 400,
    "height": 200,
    "layers": [
        {
            "id": "row",
            "type": "container",
            "x": 10,
            "y": 20,
            "width": 380,
            "height": 160,
            "direction": "row",
            "itemAlign": "center",
            "gap": 12,
            "layers": [
                {"id": "badge", "type": "img", "width": 40, "height": 40, "color": "#FFB300", "radius": 8},
                {
                    "id": "title",
                    "type": "text",
                    "width": 200,
                    "height": 40,
                    "content": "Sunscreen",
                    "style": {
                        "fontName": "sans-serif",
                        "fontSize": 20,
                        "color": "#212121",
                        "backgroundColor": "#FFF8E1",
                        "padding": {"x": 4, "y": 2},
                        "radius": 4,
                        "highlight": {"content": "Sun", "type": "underline", "color": "#FF7043"},
                    },
                },
                {
                    "id": "tick",
                    "type": "shape",
                    "rotate": 15,
                    "shapes": [
                        {"type": "moveTo", "x": 0, "y": 10},
                        {"type": "lineTo", "x": 8, "y": 18},
                        {"type": "lineTo", "x": 22, "y": 0},
                        {"type": "stroke", "style": {"strokeStyle": "#43A047", "lineWidth": 3}},
                    ],
                },
            ],
        }
    ],
}


@pytest.fixture
def recording_engine() -> RecordingEngine:
    return RecordingEngine(measurer=fixed_measure, image_loader=memory_loader)


@pytest.fixture
def process_flowchart() -> dict:
    return PROCESS_FLOWCHART


@pytest.fixture
def row_cards() -> dict:
    return ROW_CARDS
