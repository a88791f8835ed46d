"""
Net router — draws each net as Manhattan wires through a shared bus corridor.

Every net gets one vertical trunk ("bus") between the two part columns.
The first resolvable connection is the anchor; each other endpoint is
joined to it with a horizontal-vertical-horizontal path along that trunk.
Endpoints missing from the pin-position map are dropped without error and
nets left with fewer than two endpoints are not drawn.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Sequence

from circuit_builder.schema import Net
from circuit_builder.schematic.layout import COMP_X, PIN_STUB, PinKey, Point
from circuit_builder.schematic.scene import fmt_number

BUS_X = 220
BUS_STEP = 12
BUS_CLEARANCE = 20
BUS_MAX_X = COMP_X - PIN_STUB - BUS_CLEARANCE

POWER_COLOR = "#ef4444"
GROUND_COLOR = "#16a34a"
SIGNAL_PALETTE = ("#2563eb", "#d97706", "#7c3aed", "#0891b2", "#be185d", "#4f46e5")

JUNCTION_RADIUS = 3
LABEL_DX = 2
LABEL_DY = -5


class NetKind(str, Enum):
    POWER = "power"
    GROUND = "ground"
    SIGNAL = "signal"


def net_kind(name: str) -> NetKind:
    upper = name.upper()
    if "VCC" in upper or upper in ("5V", "3V3"):
        return NetKind.POWER
    if "GND" in upper:
        return NetKind.GROUND
    return NetKind.SIGNAL


def net_color(kind: NetKind, signal_index: int) -> str:
    if kind is NetKind.POWER:
        return POWER_COLOR
    if kind is NetKind.GROUND:
        return GROUND_COLOR
    return SIGNAL_PALETTE[signal_index % len(SIGNAL_PALETTE)]


def bus_x(net_index: int) -> float:
    """Trunk x for the net at net_index, kept inside the open corridor."""
    return min(max(BUS_X + net_index * BUS_STEP, BUS_X), BUS_MAX_X)


@dataclass(frozen=True)
class Wire:
    points: tuple[Point, ...]

    @property
    def path(self) -> str:
        coords = [f"{fmt_number(p.x)},{fmt_number(p.y)}" for p in self.points]
        return "M" + " L".join(coords)


@dataclass(frozen=True)
class NetLabel:
    x: float
    y: float
    text: str


@dataclass
class RoutedNet:
    name: str
    index: int
    kind: NetKind
    color: str
    bus_x: float
    wires: list[Wire] = field(default_factory=list)
    junctions: list[Point] = field(default_factory=list)
    label: NetLabel | None = None


def route_net(net: Net, net_index: int, pin_positions: Mapping[PinKey, Point],
              signal_index: int) -> RoutedNet | None:
    """Route one net; None when fewer than two endpoints resolve."""
    endpoints = [
        pin_positions[key]
        for key in (PinKey(c.part_ref, c.pin) for c in net.connections)
        if key in pin_positions
    ]
    if len(endpoints) < 2:
        return None

    kind = net_kind(net.name)
    trunk = bus_x(net_index)
    anchor, *targets = endpoints

    wires = [
        Wire((anchor, Point(trunk, anchor.y), Point(trunk, to.y), to))
        for to in targets
    ]
    junctions = [Point(trunk, anchor.y) for _ in targets] if len(endpoints) > 2 else []

    return RoutedNet(
        name=net.name,
        index=net_index,
        kind=kind,
        color=net_color(kind, signal_index),
        bus_x=trunk,
        wires=wires,
        junctions=junctions,
        label=NetLabel(trunk + LABEL_DX, anchor.y + LABEL_DY, net.name),
    )


def route_nets(nets: Sequence[Net], pin_positions: Mapping[PinKey, Point]) -> list[RoutedNet]:
    """Route all nets in schema order. The signal palette counter is local to this call."""
    routed = []
    signal_index = 0
    for i, net in enumerate(nets):
        result = route_net(net, i, pin_positions, signal_index)
        if result is None:
            continue
        if result.kind is NetKind.SIGNAL:
            signal_index += 1
        routed.append(result)
    return routed
