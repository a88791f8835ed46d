"""
Schematic layout — places parts in two columns and assigns pin positions.

The first microcontroller-class part sits in the left column; every other
part stacks down the right column in schema order. The open corridor
between the columns is left free for the net router's bus lines.

All coordinates are pixel-space on a fixed-width canvas. Derived state is
rebuilt from scratch on every call; nothing here is cached.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Sequence

from circuit_builder.schema import Net, Part
from circuit_builder.schematic.classifier import Archetype, classify
from circuit_builder.schematic.pins import split_alternating, split_mcu_pins, used_pins

# ── Geometry ──────────────────────────────────────────────────

CANVAS_WIDTH = 560
MIN_CANVAS_HEIGHT = 180

MCU_X = 30
MCU_W = 130
MCU_PIN_GAP = 20
MCU_PAD = 16
MCU_MIN_SLOTS = 2
MCU_BOTTOM_MARGIN = 30

PIN_STUB = 16

COMP_X = 390
COMP_W = 130
COMP_GAP = 72
COMP_START_Y = 40
COMP_CENTER_OFFSET = 30
COMP_PIN_GAP = 20
COMP_PIN_TOP = 12
COMP_PAD = 16
COMP_BOTTOM_MARGIN = 40


class Point(NamedTuple):
    x: float
    y: float


class PinKey(NamedTuple):
    """Composite key of the pin-position map."""
    ref: str
    pin: str


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class PlacedPin:
    name: str
    side: str       # "left" | "right"
    base: Point     # where the stub meets the body
    tip: Point      # wire attachment point


@dataclass
class PartPlacement:
    ref: str
    name: str
    archetype: Archetype
    body: Box
    left_pins: list[PlacedPin] = field(default_factory=list)
    right_pins: list[PlacedPin] = field(default_factory=list)

    @property
    def pins(self) -> list[PlacedPin]:
        return self.left_pins + self.right_pins


@dataclass
class SchematicLayout:
    mcu: Optional[PartPlacement]
    others: list[PartPlacement]
    pin_positions: dict[PinKey, Point]
    width: float = CANVAS_WIDTH
    height: float = MIN_CANVAS_HEIGHT

    @property
    def placements(self) -> list[PartPlacement]:
        return ([self.mcu] if self.mcu else []) + self.others


def _place_side(names: Sequence[str], side: str, body: Box, y_of) -> list[PlacedPin]:
    placed = []
    for i, name in enumerate(names):
        y = y_of(i)
        if side == "left":
            base, tip = Point(body.x, y), Point(body.x - PIN_STUB, y)
        else:
            base, tip = Point(body.right, y), Point(body.right + PIN_STUB, y)
        placed.append(PlacedPin(name, side, base, tip))
    return placed


def place_mcu(part: Part, nets: Sequence[Net]) -> PartPlacement:
    left, right = split_mcu_pins(used_pins(part.ref, nets))
    slots = max(len(left), len(right), MCU_MIN_SLOTS)
    body = Box(MCU_X, COMP_START_Y, MCU_W, slots * MCU_PIN_GAP + MCU_PAD * 2)

    def y_of(i: int) -> float:
        return body.y + MCU_PAD + i * MCU_PIN_GAP + MCU_PIN_GAP / 2

    return PartPlacement(
        ref=part.ref,
        name=part.name,
        archetype=Archetype.MICROCONTROLLER,
        body=body,
        left_pins=_place_side(left, "left", body, y_of),
        right_pins=_place_side(right, "right", body, y_of),
    )


def place_stacked(part: Part, index: int, nets: Sequence[Net]) -> PartPlacement:
    left, right = split_alternating(used_pins(part.ref, nets))
    center_y = COMP_START_Y + index * COMP_GAP + COMP_CENTER_OFFSET
    height = max(len(left), len(right), 1) * COMP_PIN_GAP + COMP_PAD
    body = Box(COMP_X, center_y - height / 2, COMP_W, height)

    def y_of(i: int) -> float:
        return body.y + COMP_PIN_TOP + i * COMP_PIN_GAP

    return PartPlacement(
        ref=part.ref,
        name=part.name,
        archetype=classify(part.ref, part.name),
        body=body,
        left_pins=_place_side(left, "left", body, y_of),
        right_pins=_place_side(right, "right", body, y_of),
    )


def compute_layout(parts: Sequence[Part], nets: Sequence[Net]) -> SchematicLayout:
    """Place every part and build the (ref, pin) -> Point map."""
    mcu_part = next(
        (p for p in parts if classify(p.ref, p.name) is Archetype.MICROCONTROLLER), None
    )
    # Breadboards are wiring aids, not circuit elements.
    stacked = [
        p for p in parts if p is not mcu_part and "breadboard" not in p.name.lower()
    ]

    mcu = place_mcu(mcu_part, nets) if mcu_part else None
    others = [place_stacked(p, i, nets) for i, p in enumerate(stacked)]

    pin_positions: dict[PinKey, Point] = {}
    for placement in ([mcu] if mcu else []) + others:
        for pin in placement.pins:
            pin_positions[PinKey(placement.ref, pin.name)] = pin.tip

    mcu_bottom = (mcu.body.bottom if mcu else COMP_START_Y + MCU_MIN_SLOTS * MCU_PIN_GAP + MCU_PAD * 2)
    height = max(
        mcu_bottom + MCU_BOTTOM_MARGIN,
        COMP_START_Y + len(stacked) * COMP_GAP + COMP_BOTTOM_MARGIN,
        MIN_CANVAS_HEIGHT,
    )
    return SchematicLayout(
        mcu=mcu,
        others=others,
        pin_positions=pin_positions,
        width=CANVAS_WIDTH,
        height=height,
    )
