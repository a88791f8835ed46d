"""
Pin allocation — which pins of a part are used, and on which side they go.

Only pins that appear in a net connection are drawn. The microcontroller
gets a semantic split (digital pins left, power/analog right); every other
part gets a parity split in discovery order.
"""
import re
from typing import Iterable, Sequence

from circuit_builder.schema import Net

_POWER_TIERS = {
    "5V": 0, "VIN": 0,
    "3.3V": 1, "3V3": 1,
    "GND": 2,
}


def used_pins(part_ref: str, nets: Iterable[Net]) -> list[str]:
    """Pins of part_ref referenced by any net, deduplicated, in scan order."""
    seen: dict[str, None] = {}
    for net in nets:
        for c in net.connections:
            if c.part_ref == part_ref:
                seen.setdefault(c.pin, None)
    return list(seen)


def pin_number(pin: str) -> int:
    """Numeric value embedded in a pin name: 'D13' -> 13, 'GND' -> 0."""
    digits = re.sub(r"[^0-9]", "", pin)
    return int(digits) if digits else 0


def _is_digital(pin: str) -> bool:
    p = pin.upper()
    return p.startswith("D") or p.startswith("~") or re.fullmatch(r"[0-9]+", p) is not None


def _right_key(pin: str) -> tuple[int, int]:
    return _POWER_TIERS.get(pin.upper(), 3), pin_number(pin)


def split_mcu_pins(pins: Sequence[str]) -> tuple[list[str], list[str]]:
    """Digital pins to the left sorted numerically; power first on the right."""
    left = sorted((p for p in pins if _is_digital(p)), key=pin_number)
    right = sorted((p for p in pins if not _is_digital(p)), key=_right_key)
    return left, right


def split_alternating(pins: Sequence[str]) -> tuple[list[str], list[str]]:
    """Even positions left, odd positions right."""
    # TODO: split by pin role (supply/ground vs signal) instead of parity once
    # parts carry pinout metadata; parity follows net order, not the package.
    return list(pins[0::2]), list(pins[1::2])
