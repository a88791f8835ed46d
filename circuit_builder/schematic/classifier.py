"""
Part classifier — maps a part's ref and name to a rendering archetype.

Rules are an ordered table; the first matching predicate wins, so order is
part of the behaviour: ref "R3" named "LED sensor module" falls through the
resistor rule on its sensor exclusion and lands on LED.
"""
import re
from enum import Enum
from typing import Callable


class Archetype(str, Enum):
    MICROCONTROLLER = "microcontroller"
    RESISTOR = "resistor"
    LED = "led"
    CAPACITOR = "capacitor"
    SERVO = "servo"
    SENSOR = "sensor"
    GENERIC = "generic"


Rule = Callable[[str, str], bool]

_SENSOR_WORDS = ("sensor", "dht", "hc-sr", "tmp", "bme", "bmp")


def _is_mcu(ref: str, name: str) -> bool:
    return ref.startswith("U") or any(w in name for w in ("arduino", "mcu", "esp"))


def _is_resistor(ref: str, name: str) -> bool:
    return ref.startswith("R") and "sensor" not in name


def _is_led(ref: str, name: str) -> bool:
    return ref.startswith("D") or "led" in name or "diode" in name


def _is_capacitor(ref: str, name: str) -> bool:
    return ref.startswith("C") and ("cap" in name or re.search(r"\d", name) is not None)


def _is_servo(ref: str, name: str) -> bool:
    return "servo" in name or "motor" in name


def _is_sensor(ref: str, name: str) -> bool:
    return any(w in name for w in _SENSOR_WORDS)


# Priority-ordered: (predicate over (REF, name-lowercased), archetype)
RULES: list[tuple[Rule, Archetype]] = [
    (_is_mcu, Archetype.MICROCONTROLLER),
    (_is_resistor, Archetype.RESISTOR),
    (_is_led, Archetype.LED),
    (_is_capacitor, Archetype.CAPACITOR),
    (_is_servo, Archetype.SERVO),
    (_is_sensor, Archetype.SENSOR),
]


def classify(ref: str, name: str) -> Archetype:
    """Return the archetype for a part. Total: unmatched parts are GENERIC."""
    r = ref.upper()
    n = name.lower()
    for predicate, archetype in RULES:
        if predicate(r, n):
            return archetype
    return Archetype.GENERIC
