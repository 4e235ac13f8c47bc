"""Tests for container flow layout."""

from __future__ import annotations

import asyncio

import pytest

from scenecanvas.errors import LayoutNotReadyError
from scenecanvas.models.scene import ContainerNode
from scenecanvas.renderers.base import Box
from scenecanvas.renderers.container import ContainerRenderer, flow_position
from scenecanvas.renderers.image import ImageRenderer
from scenecanvas.renderers.shape import ShapeRenderer
from scenecanvas.renderers.text import TextRenderer


def _block(size: float | tuple[float, float], **data) -> dict:
    w, h = size if isinstance(size, tuple) else (size, size)
    return {"id": f"b{w}x{h}", "type": "img", "width": w, "height": h, "color": "#ccc", **data}


def _container(layers: list[dict], **data) -> ContainerNode:
    node = {"id": "c", "type": "container", "x": 0, "y": 0, "width": 300, "height": 300, "layers": layers}
    node.update(data)
    return ContainerNode.model_validate(node)


def _laid_out(engine, node: ContainerNode) -> ContainerRenderer:
    ctx = engine.get_context(engine.create_surface(400, 400))
    renderer = ContainerRenderer(ctx, engine, node)
    asyncio.run(renderer.layout())
    return renderer


def _boxes(renderer: ContainerRenderer) -> list[tuple[float, float, float, float]]:
    return [(b.x1, b.y1, b.x2, b.y2) for b in (c.container for c in renderer.children)]


class TestFlowPosition:
    def test_first_child_starts_at_origin_without_gap(self):
        assert flow_position(None, None, None, (10, 20), "row", 15) == (10, 20)

    def test_row(self):
        assert flow_position(None, None, Box(0, 5, 15, 20), (0, 0), "row", 10) == (25, 5)

    def test_column_with_xy_gap(self):
        gap = {"x": 3, "y": 7}
        node = _container([], gap=gap)
        assert flow_position(None, None, Box(4, 0, 15, 15), (0, 0), "column", node.gap) == (4, 22)

    def test_explicit_coordinate_kept(self):
        assert flow_position(0, None, Box(0, 5, 15, 20), (0, 0), "row", 10) == (0, 5)


class TestLayout:
    def test_row_flow(self, recording_engine):
        renderer = _laid_out(recording_engine, _container([_block(15), _block(20)], gap=10))
        assert _boxes(renderer) == [(0, 0, 15, 15), (25, 0, 45, 20)]

    def test_row_of_text_uses_measured_width(self, recording_engine):
        style = {"fontName": "serif", "fontSize": 10, "color": "black"}
        layers = [
            {"id": "a", "type": "text", "width": 100, "height": 20, "content": "ab", "style": style},
            {"id": "b", "type": "text", "width": 100, "height": 20, "content": "cd", "style": style},
        ]
        renderer = _laid_out(recording_engine, _container(layers, gap=10))
        assert _boxes(renderer) == [(0, 0, 10, 10), (20, 0, 30, 10)]

    def test_column_flow(self, recording_engine):
        node = _container([_block(15), _block(20)], direction="column", gap={"x": 3, "y": 7})
        renderer = _laid_out(recording_engine, node)
        assert _boxes(renderer) == [(0, 0, 15, 15), (0, 22, 20, 42)]

    def test_flow_starts_at_container_origin(self, recording_engine):
        renderer = _laid_out(recording_engine, _container([_block(5)], x=10, y=20, gap=8))
        assert _boxes(renderer) == [(10, 20, 15, 25)]

    def test_explicit_coordinates_are_relative(self, recording_engine):
        node = _container([_block(15), _block(5, x=5, y=6)], x=10, y=20)
        renderer = _laid_out(recording_engine, node)
        assert _boxes(renderer)[1] == (15, 26, 20, 31)
        assert renderer.children[1].in_flow is False

    def test_explicit_zero_is_not_overridden(self, recording_engine):
        node = _container([_block(15), _block(5, x=0)], x=10, y=20, gap=4)
        renderer = _laid_out(recording_engine, node)
        # x given, y flows from the previous sibling
        assert _boxes(renderer)[1] == (10, 20, 15, 25)
        assert renderer.children[1].in_flow is True

    def test_row_boxes_advance(self, recording_engine):
        renderer = _laid_out(recording_engine, _container([_block(w) for w in (5, 10, 15, 20)], gap=2))
        boxes = [c.container for c in renderer.children]
        for prev, nxt in zip(boxes, boxes[1:]):
            assert nxt.x1 >= prev.x2

    def test_child_kinds(self, recording_engine):
        layers = [
            _block(10),
            {"id": "t", "type": "text", "width": 50, "height": 20, "content": "hi",
             "style": {"fontName": "serif", "fontSize": 10, "color": "black"}},
            {"id": "s", "type": "shape", "shapes": [{"type": "rect", "x": 0, "y": 0, "width": 4, "height": 4}]},
        ]
        renderer = _laid_out(recording_engine, _container(layers))
        assert [type(c) for c in renderer.children] == [ImageRenderer, TextRenderer, ShapeRenderer]

    def test_flowing_text_drops_alignment(self, recording_engine):
        text = {
            "id": "t",
            "type": "text",
            "width": 50,
            "height": 20,
            "content": "hi",
            "style": {"fontName": "serif", "fontSize": 10, "color": "black", "align": "right"},
        }
        placed = dict(text, id="p", x=0, y=40)
        renderer = _laid_out(recording_engine, _container([text, placed]))
        flowing, fixed = renderer.children
        assert flowing.style.align is None
        assert fixed.style.align == "right"

    def test_authored_children_untouched(self, recording_engine):
        node = _container([_block(15), _block(20)], gap=10)
        _laid_out(recording_engine, node)
        assert [(child.x, child.y) for child in node.layers] == [(None, None), (None, None)]

    def test_nested_container(self, recording_engine):
        inner = {
            "id": "inner",
            "type": "container",
            "width": 100,
            "height": 100,
            "direction": "column",
            "gap": 5,
            "layers": [_block(10), _block(10)],
        }
        renderer = _laid_out(recording_engine, _container([inner, _block(10)], x=10, y=10))
        nested, sibling = renderer.children
        assert _boxes(nested) == [(10, 10, 20, 20), (10, 25, 20, 35)]
        box = nested.container
        assert (box.x1, box.y1, box.x2, box.y2) == (10, 10, 20, 35)
        assert _boxes(renderer)[1] == (20, 10, 30, 20)


class TestItemAlign:
    def test_row_centres_vertically(self, recording_engine):
        node = _container([_block(10), _block((10, 30))], itemAlign="center")
        renderer = _laid_out(recording_engine, node)
        assert _boxes(renderer) == [(0, 10, 10, 20), (10, 0, 20, 30)]

    def test_column_centres_horizontally(self, recording_engine):
        node = _container([_block(10), _block((30, 10))], direction="column", itemAlign="center")
        renderer = _laid_out(recording_engine, node)
        assert _boxes(renderer) == [(10, 0, 20, 10), (0, 10, 30, 20)]

    def test_text_centred_in_row(self, recording_engine, row_cards):
        node = ContainerNode.model_validate(row_cards["layers"][0])
        renderer = _laid_out(recording_engine, node)
        # text box sits padding-deep around its glyphs, the tick flows from the text box top
        assert _boxes(renderer) == [(10, 20, 50, 60), (58, 26, 156, 50), (168, 29, 190, 47)]


class TestBoundingBox:
    def test_first_to_last(self, recording_engine):
        renderer = _laid_out(recording_engine, _container([_block(15), _block(20)], x=5, y=5, gap=10))
        box = renderer.container
        assert (box.x1, box.y1, box.x2, box.y2) == (5, 5, 50, 25)

    def test_empty_container_has_no_box(self, recording_engine):
        renderer = _laid_out(recording_engine, _container([]))
        with pytest.raises(LayoutNotReadyError):
            renderer.container

    def test_box_before_layout(self, recording_engine):
        ctx = recording_engine.get_context(recording_engine.create_surface(10, 10))
        renderer = ContainerRenderer(ctx, recording_engine, _container([_block(5)]))
        with pytest.raises(LayoutNotReadyError):
            renderer.container


class TestDraw:
    def test_children_drawn_in_order(self, recording_engine):
        renderer = _laid_out(recording_engine, _container([_block(15), _block(20), _block(5)], gap=1))
        asyncio.run(renderer.draw())
        widths = [args[2] for args in renderer.ctx.calls("roundRect")]
        assert widths == [15, 20, 5]

    def test_draw_is_repeatable(self, recording_engine):
        renderer = _laid_out(recording_engine, _container([_block(15), _block(20)], gap=1))
        ops = renderer.ctx.ops
        asyncio.run(renderer.draw())
        first = list(ops)
        asyncio.run(renderer.draw())
        assert ops[len(first):] == first

    def test_container_rotation(self, recording_engine):
        node = _container([_block(10), _block(10)], gap=10, rotate=90)
        renderer = _laid_out(recording_engine, node)
        asyncio.run(renderer.draw())
        translates = renderer.ctx.calls("translate")
        assert translates == [[15, 5], [-15, -5]]
