"""
Circuit validators — simple electrical hazard checks over a CircuitSchema.

Each check returns a list of ValidationWarning. Warnings are advisory
metadata; the schematic renderer draws whatever it is given regardless.
"""
import re

from circuit_builder.schema import CircuitSchema
from circuit_builder.types import Severity, ValidationWarning


def check_voltage_domain(schema: CircuitSchema) -> list[ValidationWarning]:
    """Logic rail must not exceed the input rail."""
    if schema.power.logic_voltage_v > schema.power.input_voltage_v:
        return [ValidationWarning(
            code="VOLTAGE_DOMAIN_MISMATCH",
            severity=Severity.HIGH.value,
            message="Logic voltage is greater than input voltage.",
            fix="Lower logic voltage or use a proper regulator/level shifter.",
        )]
    return []


def check_led_resistor(schema: CircuitSchema) -> list[ValidationWarning]:
    """Any LED in the BOM needs at least one resistor alongside it."""
    resistors = [p for p in schema.parts if re.search(r"resistor", p.name, re.I)]
    leds = [p for p in schema.parts if re.search(r"led", p.name, re.I)]
    if leds and not resistors:
        return [ValidationWarning(
            code="MISSING_LED_RESISTOR",
            severity=Severity.HIGH.value,
            message="LED detected without a series resistor in BOM.",
            fix="Add 220-1k Ohm resistor in series with each LED.",
        )]
    return []


def check_floating_nets(schema: CircuitSchema) -> list[ValidationWarning]:
    return [
        ValidationWarning(
            code="FLOATING_NET",
            severity=Severity.MEDIUM.value,
            message=f"Net {net.name} has fewer than two connections.",
            fix="Ensure every net has valid source and destination pins.",
        )
        for net in schema.nets
        if len(net.connections) < 2
    ]


def check_pin_conflicts(schema: CircuitSchema) -> list[ValidationWarning]:
    """A pin listed on two different nets shorts them together."""
    warnings = []
    pin_use: dict[str, str] = {}
    for net in schema.nets:
        for c in net.connections:
            key = f"{c.part_ref}:{c.pin}"
            existing = pin_use.get(key)
            if existing and existing != net.name:
                warnings.append(ValidationWarning(
                    code="POTENTIAL_SHORT",
                    severity=Severity.HIGH.value,
                    message=f"Pin {key} is assigned to multiple nets ({existing}, {net.name}).",
                    fix="Move the pin to a single electrical net.",
                ))
            else:
                pin_use[key] = net.name
    return warnings


# Registry, run in order
CHECKS = {
    "voltage_domain": check_voltage_domain,
    "led_resistor": check_led_resistor,
    "floating_nets": check_floating_nets,
    "pin_conflicts": check_pin_conflicts,
}


def validate_circuit(schema: CircuitSchema, checks: list[str] | None = None) -> tuple[bool, list[ValidationWarning]]:
    """Run checks (all by default). Returns (passed, warnings); passed means no high severity."""
    warnings: list[ValidationWarning] = []
    for name, check in CHECKS.items():
        if checks is None or name in checks:
            warnings.extend(check(schema))
    passed = all(w.severity != Severity.HIGH.value for w in warnings)
    return passed, warnings
