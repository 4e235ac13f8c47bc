"""Tests for the display-list engine."""

from __future__ import annotations

import asyncio
import json

import pytest

from scenecanvas.engine.recording import RecordingEngine
from scenecanvas.engine.types import rotated, state_scope
from scenecanvas.errors import SceneConfigError
from tests.conftest import fixed_measure, memory_loader


def _ctx(engine: RecordingEngine, width: int = 100, height: int = 50):
    return engine.get_context(engine.create_surface(width, height))


def test_records_calls_with_canvas_names(recording_engine):
    ctx = _ctx(recording_engine)
    ctx.begin_path()
    ctx.move_to(1, 2)
    ctx.quadratic_curve_to(3, 4, 5, 6)
    ctx.fill()
    assert [op["op"] for op in ctx.ops] == ["beginPath", "moveTo", "quadraticCurveTo", "fill"]
    assert ctx.calls("quadraticCurveTo") == [[3, 4, 5, 6]]


def test_property_assignment_is_recorded(recording_engine):
    ctx = _ctx(recording_engine)
    ctx.fill_style = "red"
    ctx.line_width = 3
    assert ctx.ops == [
        {"op": "set", "prop": "fillStyle", "value": "red"},
        {"op": "set", "prop": "lineWidth", "value": 3},
    ]
    assert ctx.fill_style == "red"


def test_restore_reverts_properties(recording_engine):
    ctx = _ctx(recording_engine)
    ctx.fill_style = "red"
    ctx.save()
    ctx.fill_style = "blue"
    ctx.restore()
    assert ctx.fill_style == "red"


def test_restore_without_save_keeps_state(recording_engine):
    ctx = _ctx(recording_engine)
    ctx.stroke_style = "green"
    ctx.restore()
    assert ctx.stroke_style == "green"


def test_font_and_measure(recording_engine):
    ctx = _ctx(recording_engine)
    ctx.set_font("serif", 20, "bold")
    assert ctx.ops[-1] == {"op": "set", "prop": "font", "value": 'bold 20px "serif"'}
    assert ctx.measure_text("ab").width == 20


def test_state_scope_restores_on_error(recording_engine):
    ctx = _ctx(recording_engine)
    with pytest.raises(RuntimeError):
        with state_scope(ctx):
            ctx.fill_style = "red"
            raise RuntimeError("boom")
    assert ctx.ops[-1] == {"op": "restore", "args": []}
    assert ctx.fill_style == "#000000"


def test_rotated_brackets_transform(recording_engine):
    ctx = _ctx(recording_engine)
    with rotated(ctx, 90, 10, 20):
        ctx.fill_rect(0, 0, 1, 1)
    names = [op["op"] for op in ctx.ops]
    assert names == ["save", "translate", "rotate", "translate", "fillRect", "restore"]
    assert ctx.calls("translate") == [[10, 20], [-10, -20]]
    assert ctx.calls("rotate")[0][0] == pytest.approx(1.5707963, rel=1e-6)


def test_rotated_noop_without_angle(recording_engine):
    ctx = _ctx(recording_engine)
    with rotated(ctx, None, 10, 20):
        pass
    assert ctx.ops == []


def test_encode_is_json_display_list(recording_engine):
    surface = recording_engine.create_surface(30, 40)
    ctx = recording_engine.get_context(surface)
    ctx.fill_rect(0, 0, 30, 40)
    payload = json.loads(recording_engine.encode(surface, "png"))
    assert payload == {
        "width": 30,
        "height": 40,
        "ops": [{"op": "fillRect", "args": [0, 0, 30, 40]}],
    }
    assert recording_engine.media_type("png") == "application/json"


def test_encode_rejects_unknown_output(recording_engine):
    surface = recording_engine.create_surface(1, 1)
    with pytest.raises(SceneConfigError):
        recording_engine.encode(surface, "gif")


def test_load_image_uses_injected_loader():
    engine = RecordingEngine(measurer=fixed_measure, image_loader=memory_loader)
    bitmap = asyncio.run(engine.load_image("mem://20x10"))
    assert (bitmap.natural_width, bitmap.natural_height) == (20, 10)
    assert bitmap.aspect_ratio == 2.0
