"""Scene description models: the JSON contract accepted by the renderer.

Wire keys are camelCase (``fontName``, ``objectFit``...); Python attributes are snake_case.
Every node and shape command is a tagged union discriminated by its ``type`` field.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SceneModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared value objects
# ---------------------------------------------------------------------------


class Shadow(SceneModel):
    color: str
    blur: float = 0.0
    offset_x: float = Field(0.0, validation_alias=AliasChoices("offsetX", "offset_x", "X"))
    offset_y: float = Field(0.0, validation_alias=AliasChoices("offsetY", "offset_y", "Y"))


class XYGap(SceneModel):
    x: float = 0.0
    y: float = 0.0


class ShapeStyle(SceneModel):
    """Paint state for a shape layer or a single command override."""

    fill_style: str | None = None
    stroke_style: str | None = None
    line_width: float | None = None
    line_cap: Literal["butt", "round", "square"] | None = None
    line_join: Literal["bevel", "round", "miter"] | None = None
    miter_limit: float | None = None
    line_dash: list[float] | None = None
    line_dash_offset: float | None = None
    global_alpha: float | None = None


# ---------------------------------------------------------------------------
# Shape commands
# ---------------------------------------------------------------------------


class _Command(SceneModel):
    style: ShapeStyle | None = None


class _RectGeometry(_Command):
    x: float
    y: float
    width: float
    height: float


class RectCommand(_RectGeometry):
    type: Literal["rect"]
    rx: float | None = None
    ry: float | None = None


class FillRectCommand(_RectGeometry):
    type: Literal["fillRect"]
    rx: float | None = None
    ry: float | None = None


class StrokeRectCommand(_RectGeometry):
    type: Literal["strokeRect"]
    rx: float | None = None
    ry: float | None = None


class ClearRectCommand(_RectGeometry):
    type: Literal["clearRect"]


class BeginPathCommand(_Command):
    type: Literal["beginPath"]


class ClosePathCommand(_Command):
    type: Literal["closePath"]


class MoveToCommand(_Command):
    type: Literal["moveTo"]
    x: float
    y: float


class LineToCommand(_Command):
    type: Literal["lineTo"]
    x: float
    y: float


class ArcCommand(_Command):
    type: Literal["arc"]
    x: float
    y: float
    radius: float | None = None
    radius_x: float | None = None
    radius_y: float | None = None
    start_angle: float
    end_angle: float
    counterclockwise: bool = False


class EllipseCommand(_Command):
    type: Literal["ellipse"]
    x: float
    y: float
    radius_x: float
    radius_y: float
    rotation: float = 0.0
    start_angle: float
    end_angle: float
    counterclockwise: bool = False


class ArcToCommand(_Command):
    type: Literal["arcTo"]
    x1: float
    y1: float
    x2: float
    y2: float
    radius: float


class QuadraticCurveToCommand(_Command):
    type: Literal["quadraticCurveTo"]
    cp1x: float = Field(alias="cp1x")
    cp1y: float = Field(alias="cp1y")
    x: float
    y: float


class BezierCurveToCommand(_Command):
    type: Literal["bezierCurveTo"]
    cp1x: float = Field(alias="cp1x")
    cp1y: float = Field(alias="cp1y")
    cp2x: float = Field(alias="cp2x")
    cp2y: float = Field(alias="cp2y")
    x: float
    y: float


class FillCommand(_Command):
    type: Literal["fill"]


class StrokeCommand(_Command):
    type: Literal["stroke"]


class FillAndStrokeCommand(_Command):
    type: Literal["fillAndStroke"]


ShapeCommand = Annotated[
    Union[
        RectCommand,
        FillRectCommand,
        StrokeRectCommand,
        ClearRectCommand,
        BeginPathCommand,
        ClosePathCommand,
        MoveToCommand,
        LineToCommand,
        ArcCommand,
        EllipseCommand,
        ArcToCommand,
        QuadraticCurveToCommand,
        BezierCurveToCommand,
        FillCommand,
        StrokeCommand,
        FillAndStrokeCommand,
    ],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Text style
# ---------------------------------------------------------------------------


class FontSizeRange(SceneModel):
    min: float
    max: float


class Border(SceneModel):
    color: str
    width: float | None = None


class HighlightImageStyle(SceneModel):
    height: float | None = None
    offset_y: float | None = None
    cover_text: bool = False
    url: str


HighlightType = Literal["underline", "colored", "halfRectangle", "svg"]


class Highlight(SceneModel):
    logics: str | None = None
    content: str | None = None
    type: HighlightType | None = None
    color: str | None = None
    style: HighlightImageStyle | None = None


class TextStyle(SceneModel):
    font_name: str
    font_size: float | FontSizeRange
    color: str
    align: Literal["left", "center", "right"] | None = None
    vertical_align: Literal["top", "center", "bottom"] | None = None
    font_weight: str | None = None
    background_color: str | None = None
    radius: float | None = None
    padding: float | XYGap | None = None
    border: Border | None = None
    vertical_gap: float = 0.0
    horizontal_gap: float = Field(
        0.0,
        validation_alias=AliasChoices("horizontalGap", "horizontal_gap", "horizonalGap"),
    )
    highlight: Highlight | None = None


# ---------------------------------------------------------------------------
# Scene nodes
# ---------------------------------------------------------------------------


class _Node(SceneModel):
    id: str | int
    x: float | None = None
    y: float | None = None
    rotate: float | None = None


class TextNode(_Node):
    type: Literal["text"]
    width: float
    height: float
    content: str
    style: TextStyle


class ImageNode(_Node):
    type: Literal["img", "image"]
    width: float | None = None
    height: float | None = None
    url: str | None = None
    color: str | None = None
    object_fit: Literal["contain", "cover"] = "contain"
    radius: float | None = None
    global_alpha: float | None = None
    shadow: Shadow | None = None


class ShapeNode(_Node):
    type: Literal["shape"]
    width: float | None = None
    height: float | None = None
    style: ShapeStyle | None = None
    shadow: Shadow | None = None
    shapes: list[ShapeCommand] = Field(default_factory=list)


class ContainerNode(_Node):
    type: Literal["container"]
    width: float
    height: float
    direction: Literal["row", "column"] = "row"
    item_align: Literal["center"] | None = None
    gap: float | XYGap = 0.0
    layers: list[SceneNode] = Field(default_factory=list)


SceneNode = Annotated[
    Union[TextNode, ImageNode, ShapeNode, ContainerNode],
    Field(discriminator="type"),
]


class OutputOptions(SceneModel):
    type: Literal["png", "jpg"] = "png"


class Scene(SceneModel):
    """Top-level render request."""

    id: str | int
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    layers: list[SceneNode] = Field(default_factory=list)
    output: OutputOptions | None = None


ContainerNode.model_rebuild()
Scene.model_rebuild()
