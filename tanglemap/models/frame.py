# tanglemap/models/frame.py
from typing import Literal
from pydantic import BaseModel, Field
from tanglemap.models.geometry import Point

class EdgeShape(BaseModel):
    source_id: int
    target_id: int
    start: Point
    end: Point
    width: float
    arrow: bool = True

class SelfLoopShape(BaseModel):
    node_id: int
    center: Point
    radius: float

class NodeShape(BaseModel):
    id: int
    center: Point
    radius: float
    color: str
    shape: Literal["circle", "star"] = "circle"
    star: str | None = None
    title: str
    label: str | None = None
    selected: bool = False
    highlighted: bool = False
    pinned: bool = False

class LassoShape(BaseModel):
    top_left: Point
    bottom_right: Point

class Frame(BaseModel):
    width: int
    height: int
    zoom: float
    edges: list[EdgeShape] = Field(default_factory=list)
    self_loops: list[SelfLoopShape] = Field(default_factory=list)
    nodes: list[NodeShape] = Field(default_factory=list)
    link_preview: tuple[Point, Point] | None = None
    lasso: LassoShape | None = None
    message: str | None = None
