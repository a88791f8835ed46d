"""
Schematic renderer — composes layout and routing into a scene graph.

Drawing order is back-to-front: power badge, microcontroller, stacked
parts, then every routed net, so wires always sit on top of part bodies.
Stateless and deterministic: the same parts and nets give the same scene.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from circuit_builder.schema import Net, Part
from circuit_builder.schematic.classifier import Archetype
from circuit_builder.schematic.layout import (
    MCU_PAD, PartPlacement, SchematicLayout, compute_layout,
)
from circuit_builder.schematic.router import JUNCTION_RADIUS, RoutedNet, route_nets
from circuit_builder.schematic.scene import (
    Circle, Group, Line, Path, Polygon, Polyline, Rect, Scene, Text, fmt_number,
)

PIN_DOT_RADIUS = 2.5
PIN_LABEL_INSET = 5
PIN_LABEL_BASELINE = 3.5
NOTCH_RADIUS = 6
ZIGZAG_SEGMENTS = 6


@dataclass
class RenderResult:
    scene: Scene
    layout: SchematicLayout
    routed: list[RoutedNet]

    @property
    def nets_drawn(self) -> list[str]:
        return [r.name for r in self.routed]

    @property
    def drawn_indices(self) -> set[int]:
        return {r.index for r in self.routed}


# ── Pins ──────────────────────────────────────────────────────

def _pin_nodes(placement: PartPlacement) -> list[Group]:
    groups = []
    for pin in placement.pins:
        if pin.side == "left":
            label = Text(pin.base.x + PIN_LABEL_INSET, pin.base.y + PIN_LABEL_BASELINE,
                         pin.name, css_class="sch-pin-label")
            stub = Line(pin.tip.x, pin.tip.y, pin.base.x, pin.base.y, css_class="sch-pin-stub")
        else:
            label = Text(pin.base.x - PIN_LABEL_INSET, pin.base.y + PIN_LABEL_BASELINE,
                         pin.name, anchor="end", css_class="sch-pin-label")
            stub = Line(pin.base.x, pin.base.y, pin.tip.x, pin.tip.y, css_class="sch-pin-stub")
        groups.append(Group(f"{placement.ref}-{pin.side[0]}-{pin.name}", [
            stub,
            Circle(pin.tip.x, pin.tip.y, PIN_DOT_RADIUS, css_class="sch-pin-dot"),
            label,
        ]))
    return groups


# ── Bodies ────────────────────────────────────────────────────

def _resistor_body(p: PartPlacement) -> list:
    b = p.body
    cy = b.y + b.height / 2
    x0, x1 = b.x + 10, b.right - 10
    seg_w = (x1 - x0) / ZIGZAG_SEGMENTS
    amp = b.height * 0.25
    points = [(x0, cy)]
    for s in range(ZIGZAG_SEGMENTS):
        direction = -1 if s % 2 == 0 else 1
        points.append((x0 + (s + 0.5) * seg_w, cy + direction * amp))
    points.append((x1, cy))
    return [
        Rect(b.x, b.y, b.width, b.height, rx=2, css_class="sch-resistor-body"),
        Polyline(points, css_class="sch-zigzag"),
    ]


def _led_body(p: PartPlacement) -> list:
    b = p.body
    cy = b.y + b.height / 2
    tri = min(b.height - 8, 22)
    tx = b.x + b.width / 2 - tri / 2
    top, bottom = cy - tri / 2, cy + tri / 2
    return [
        Rect(b.x, b.y, b.width, b.height, rx=3, css_class="sch-led-body"),
        Polygon([(tx, top), (tx, bottom), (tx + tri, cy)], css_class="sch-led-tri"),
        Line(tx + tri, top, tx + tri, bottom, css_class="sch-led-bar"),
        Line(tx + tri + 4, top + 2, tx + tri + 10, top - 4, css_class="sch-led-arrow"),
        Line(tx + tri + 8, top + 5, tx + tri + 14, top - 1, css_class="sch-led-arrow"),
    ]


def _servo_body(p: PartPlacement) -> list:
    b = p.body
    cx, cy = b.center
    return [
        Rect(b.x, b.y, b.width, b.height, rx=3, css_class="sch-servo-body"),
        Circle(cx, cy, min(b.height * 0.3, 12), css_class="sch-motor-circle"),
        Text(cx, cy + 4, "M", anchor="middle", css_class="sch-motor-m"),
    ]


def _sensor_body(p: PartPlacement) -> list:
    b = p.body
    cy = fmt_number(b.y + b.height / 2)
    x0 = b.x + 10
    xs = [fmt_number(x0 + dx) for dx in (0, 8, 16, 24, 32)]
    up, down = fmt_number(b.y + b.height / 2 - 6), fmt_number(b.y + b.height / 2 + 6)
    d = f"M{xs[0]},{cy} Q{xs[1]},{up} {xs[2]},{cy} Q{xs[3]},{down} {xs[4]},{cy}"
    return [
        Rect(b.x, b.y, b.width, b.height, rx=3, css_class="sch-sensor-body"),
        Path(d, css_class="sch-sensor-wave"),
    ]


def _generic_body(p: PartPlacement) -> list:
    b = p.body
    return [Rect(b.x, b.y, b.width, b.height, rx=3, css_class="sch-generic-body")]


BODY_DRAWERS = {
    Archetype.RESISTOR: _resistor_body,
    Archetype.LED: _led_body,
    Archetype.SERVO: _servo_body,
    Archetype.SENSOR: _sensor_body,
}


def _mcu_group(mcu: PartPlacement) -> Group:
    b = mcu.body
    cx = b.x + b.width / 2
    return Group(mcu.ref, [
        Rect(b.x, b.y, b.width, b.height, rx=4, css_class="sch-mcu-body"),
        Circle(cx, b.y, NOTCH_RADIUS, css_class="sch-mcu-notch"),
        Text(cx, b.y + MCU_PAD - 2, mcu.ref, anchor="middle", css_class="sch-part-ref"),
        Text(cx, b.bottom - 6, mcu.name, anchor="middle", css_class="sch-part-name"),
        *_pin_nodes(mcu),
    ])


def _part_group(p: PartPlacement) -> Group:
    b = p.body
    cx = b.x + b.width / 2
    body = BODY_DRAWERS.get(p.archetype, _generic_body)(p)
    return Group(p.ref, [
        *body,
        Text(cx, b.y - 5, p.ref, anchor="middle", css_class="sch-part-ref"),
        Text(cx, b.bottom + 12, p.name, anchor="middle", css_class="sch-part-name"),
        *_pin_nodes(p),
    ])


def _net_group(net: RoutedNet) -> Group:
    children: list = [
        Path(w.path, stroke=net.color, stroke_width=1.5) for w in net.wires
    ]
    children += [
        Circle(j.x, j.y, JUNCTION_RADIUS, fill=net.color) for j in net.junctions
    ]
    if net.label:
        children.append(Text(net.label.x, net.label.y, net.label.text,
                             css_class="sch-net-label", fill=net.color))
    return Group(f"net-{net.name}", children)


def render_schematic(parts: Sequence[Part], nets: Sequence[Net],
                     power_info: Optional[str] = None) -> RenderResult:
    """Lay out, route and draw a circuit as a scene graph."""
    layout = compute_layout(parts, nets)
    routed = route_nets(nets, layout.pin_positions)

    scene = Scene(layout.width, layout.height)
    if power_info:
        scene.add(Text(layout.width - 8, 14, power_info, anchor="end", css_class="sch-power-badge"))
    if layout.mcu:
        scene.add(_mcu_group(layout.mcu))
    for placement in layout.others:
        scene.add(_part_group(placement))
    for net in routed:
        scene.add(_net_group(net))

    return RenderResult(scene=scene, layout=layout, routed=routed)
