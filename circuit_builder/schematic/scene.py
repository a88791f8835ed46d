"""
Vector scene graph for the schematic preview.

Plain dataclass nodes that any vector surface can draw. Scene.to_dict()
gives a JSON tree for the agent runtime; Scene.to_svg() gives a standalone
SVG document. Class names match the preview stylesheet (sch-*).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Union
from xml.sax.saxutils import escape, quoteattr


def fmt_number(v: float) -> str:
    """66.0 -> '66', 66.5 -> '66.5'."""
    return str(int(v)) if float(v).is_integer() else repr(float(v))


def fmt_points(points: Sequence[tuple[float, float]]) -> str:
    return " ".join(f"{fmt_number(x)},{fmt_number(y)}" for x, y in points)


@dataclass
class Rect:
    x: float
    y: float
    width: float
    height: float
    rx: float = 0
    css_class: str = ""


@dataclass
class Circle:
    cx: float
    cy: float
    r: float
    css_class: str = ""
    fill: Optional[str] = None


@dataclass
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    css_class: str = ""


@dataclass
class Polyline:
    points: list[tuple[float, float]]
    css_class: str = ""


@dataclass
class Polygon:
    points: list[tuple[float, float]]
    css_class: str = ""


@dataclass
class Path:
    d: str
    stroke: Optional[str] = None
    stroke_width: float = 1.5
    fill: str = "none"
    css_class: str = ""


@dataclass
class Text:
    x: float
    y: float
    content: str
    anchor: str = "start"
    css_class: str = ""
    fill: Optional[str] = None


@dataclass
class Group:
    key: str
    children: list["Node"] = field(default_factory=list)


Node = Union[Rect, Circle, Line, Polyline, Polygon, Path, Text, Group]

_TYPE_NAMES = {
    Rect: "rect", Circle: "circle", Line: "line", Polyline: "polyline",
    Polygon: "polygon", Path: "path", Text: "text", Group: "g",
}


def node_to_dict(node: Node) -> dict:
    out: dict = {"type": _TYPE_NAMES[type(node)]}
    if isinstance(node, Group):
        out["key"] = node.key
        out["children"] = [node_to_dict(c) for c in node.children]
        return out
    for name, value in vars(node).items():
        if value is None or value == "":
            continue
        if isinstance(value, list):
            value = [list(p) for p in value]
        out[name] = value
    return out


def _attrs(**kw) -> str:
    parts = []
    for name, value in kw.items():
        if value is None or value == "":
            continue
        if isinstance(value, (int, float)):
            value = fmt_number(value)
        attr = name.rstrip("_").replace("_", "-")
        parts.append(f"{attr}={quoteattr(str(value))}")
    return " ".join(parts)


def node_to_svg(node: Node) -> str:
    if isinstance(node, Group):
        inner = "".join(node_to_svg(c) for c in node.children)
        return f"<g {_attrs(data_key=node.key)}>{inner}</g>"
    if isinstance(node, Rect):
        return f"<rect {_attrs(x=node.x, y=node.y, width=node.width, height=node.height, rx=node.rx or None, class_=node.css_class)} />"
    if isinstance(node, Circle):
        return f"<circle {_attrs(cx=node.cx, cy=node.cy, r=node.r, fill=node.fill, class_=node.css_class)} />"
    if isinstance(node, Line):
        return f"<line {_attrs(x1=node.x1, y1=node.y1, x2=node.x2, y2=node.y2, class_=node.css_class)} />"
    if isinstance(node, Polyline):
        return f"<polyline {_attrs(points=fmt_points(node.points), class_=node.css_class)} />"
    if isinstance(node, Polygon):
        return f"<polygon {_attrs(points=fmt_points(node.points), class_=node.css_class)} />"
    if isinstance(node, Path):
        caps = "round" if node.stroke else None
        attrs = _attrs(
            d=node.d, fill=node.fill, stroke=node.stroke,
            stroke_width=node.stroke_width if node.stroke else None,
            stroke_linecap=caps, stroke_linejoin=caps, class_=node.css_class,
        )
        return f"<path {attrs} />"
    if isinstance(node, Text):
        anchor = node.anchor if node.anchor != "start" else None
        return f"<text {_attrs(x=node.x, y=node.y, text_anchor=anchor, fill=node.fill, class_=node.css_class)}>{escape(node.content)}</text>"
    raise TypeError(f"Unknown scene node: {node!r}")


@dataclass
class Scene:
    width: float
    height: float
    children: list[Node] = field(default_factory=list)

    def add(self, node: Node) -> Node:
        self.children.append(node)
        return node

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "children": [node_to_dict(c) for c in self.children],
        }

    def to_svg(self) -> str:
        w, h = fmt_number(self.width), fmt_number(self.height)
        body = "".join(node_to_svg(c) for c in self.children)
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {w} {h}" '
            f'width="{w}" height="{h}" role="img" aria-label="Circuit schematic" class="sch-svg">'
            f"{body}</svg>"
        )
