"""
Circuit schema — the normalized circuit description every tool shares.

Parts, nets and pin map, validated with pydantic. Resolution is lenient:
tools accept a schema object, a JSON string (fenced or wrapped in prose is
fine), or a legacy schematic dict, and fall back to a default LED circuit
rather than failing.
"""
from __future__ import annotations

import json
import re
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from circuit_builder.errors import JSONParseError

DEFAULT_DESCRIPTION = "General-purpose Arduino circuit"
DEFAULT_PROJECT_NAME = "antigravity-arduino-project"


# ── Models ────────────────────────────────────────────────────

class Part(BaseModel):
    model_config = ConfigDict(frozen=True)

    ref: str = Field(..., description="Reference designator, e.g. U1, R1, D1")
    name: str = Field(..., description="Human-readable part name")
    mpn: Optional[str] = Field(None, description="Manufacturer part number")
    quantity: int = Field(1, gt=0, description="Part quantity")
    logic_voltage_v: Optional[float] = Field(None, description="Nominal logic voltage")
    max_current_ma: Optional[float] = Field(None, description="Max recommended current in mA")


class NetConnection(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    part_ref: str = Field(
        ...,
        validation_alias=AliasChoices("part_ref", "partRef"),
        description="Connected part reference",
    )
    pin: str = Field(..., description="Pin identifier on the part")


class Net(BaseModel):
    name: str = Field(..., description="Electrical net name")
    connections: list[NetConnection] = Field(
        default_factory=list, description="Pins connected on this net; the first is the anchor"
    )


class Constraint(BaseModel):
    id: str = Field(..., description="Constraint identifier")
    description: str = Field(..., description="Constraint details")
    type: Literal["size", "cost", "safety", "thermal", "power", "general"] = "general"


class PowerSpec(BaseModel):
    input_voltage_v: float = 5
    logic_voltage_v: float = 5
    max_current_ma: float = 500


class CircuitSchema(BaseModel):
    version: str = "1.0"
    project_name: str = DEFAULT_PROJECT_NAME
    description: str = DEFAULT_DESCRIPTION
    power: PowerSpec
    parts: list[Part] = Field(default_factory=list)
    nets: list[Net] = Field(default_factory=list)
    pin_map: dict[str, str] = Field(
        default_factory=dict,
        description="Signal name to pin mapping, e.g. LED_STATUS -> U1:D13",
    )
    constraints: list[Constraint] = Field(default_factory=list)

    def power_summary(self) -> str:
        """Short badge text such as '5V / 500mA'."""
        return f"{_fmt(self.power.input_voltage_v)}V / {_fmt(self.power.max_current_ma)}mA"


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


# ── JSON text parsing ─────────────────────────────────────────

def _clean_json(raw: str) -> str:
    """Fix trailing commas and comments that agents sometimes emit."""
    raw = re.sub(r',\s*([}\]])', r'\1', raw)      # trailing commas
    raw = re.sub(r'//[^\n]*', '', raw)              # line comments
    raw = re.sub(r'/\*.*?\*/', '', raw, flags=re.DOTALL)  # block comments
    return raw.strip()


def parse_json_text(text: str) -> Any:
    """Extract JSON from agent-supplied text. Handles fences and prose."""
    text = text.strip()

    # 1. Direct parse
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # 2. Extract from ```json ... ``` fences
    for m in re.finditer(r'```(?:json)?\s*\n(.*?)```', text, re.DOTALL):
        try:
            return json.loads(_clean_json(m.group(1)))
        except json.JSONDecodeError:
            continue

    # 3. Bracket matching (first { or [ to last } or ])
    for sc, ec in [('{', '}'), ('[', ']')]:
        s = text.find(sc)
        e = text.rfind(ec)
        if s >= 0 and e > s:
            try:
                return json.loads(_clean_json(text[s:e + 1]))
            except json.JSONDecodeError:
                continue

    raise JSONParseError(f"JSON parse failed: {text[:150]}...", raw_text=text)


# ── Construction and resolution ───────────────────────────────

def parse_power_supply(power_supply: str | None) -> float:
    """'12V' -> 12.0; anything unusable -> 5.0."""
    if not power_supply:
        return 5.0
    digits = re.sub(r"[^\d.]", "", power_supply)
    m = re.match(r"\d*\.?\d+|\d+", digits)
    if not m:
        return 5.0
    value = float(m.group(0))
    return value if value > 0 else 5.0


def create_default_circuit_schema(
    description: str | None = None,
    power_supply: str | None = None,
    requested_components: list[str] | None = None,
) -> CircuitSchema:
    input_voltage = parse_power_supply(power_supply)
    requested = requested_components or []

    fallback_parts = [
        Part(ref="U1", name="Arduino Uno R3", mpn="A000066", logic_voltage_v=5),
        Part(ref="R1", name="220 Ohm Resistor"),
        Part(ref="D1", name="LED", max_current_ma=20),
    ]
    requested_parts = [Part(ref=f"X{i + 1}", name=name) for i, name in enumerate(requested)]

    return CircuitSchema(
        description=description or DEFAULT_DESCRIPTION,
        power=PowerSpec(
            input_voltage_v=input_voltage,
            logic_voltage_v=input_voltage if input_voltage <= 5 else 5,
            max_current_ma=500,
        ),
        parts=[fallback_parts[0], *requested_parts] if requested_parts else fallback_parts,
        nets=[
            Net(name="VCC", connections=[
                NetConnection(part_ref="U1", pin="5V"),
                NetConnection(part_ref="D1", pin="A"),
            ]),
            Net(name="GND", connections=[
                NetConnection(part_ref="U1", pin="GND"),
                NetConnection(part_ref="D1", pin="K"),
                NetConnection(part_ref="R1", pin="2"),
            ]),
            Net(name="LED_STATUS", connections=[
                NetConnection(part_ref="U1", pin="D13"),
                NetConnection(part_ref="R1", pin="1"),
            ]),
        ],
        pin_map={"LED_STATUS": "U1:D13"},
    )


LEGACY_KEYS = ("description", "power_supply", "requested_components")


def _convert_legacy_schematic(raw: dict) -> CircuitSchema:
    description = raw.get("description")
    power_supply = raw.get("power_supply")
    components = raw.get("requested_components")
    return create_default_circuit_schema(
        description=description if isinstance(description, str) else DEFAULT_DESCRIPTION,
        power_supply=power_supply if isinstance(power_supply, str) else "5V",
        requested_components=(
            [c for c in components if isinstance(c, str)] if isinstance(components, list) else []
        ),
    )


def _parse_candidate(candidate: Any) -> CircuitSchema | None:
    if isinstance(candidate, CircuitSchema):
        return candidate
    try:
        return CircuitSchema.model_validate(candidate)
    except ValidationError:
        pass
    # A dict with none of the legacy keys carries nothing usable
    if isinstance(candidate, dict) and any(k in candidate for k in LEGACY_KEYS):
        return _convert_legacy_schematic(candidate)
    return None


def resolve_circuit_schema(
    circuit_schema: Any = None,
    schematic_json: Any = None,
    fallback_description: str | None = None,
    fallback_power_supply: str | None = None,
    fallback_components: list[str] | None = None,
) -> tuple[CircuitSchema, bool]:
    """
    Turn whatever a caller sent into a CircuitSchema.

    Returns (schema, used_fallback). used_fallback is True when nothing usable
    was supplied and the default circuit was returned instead. Never raises.
    """
    fallback = create_default_circuit_schema(
        description=fallback_description,
        power_supply=fallback_power_supply,
        requested_components=fallback_components,
    )

    if isinstance(circuit_schema, str):
        try:
            parsed = parse_json_text(circuit_schema)
        except JSONParseError:
            return fallback, True
        schema = _parse_candidate(parsed)
        return (schema, False) if schema is not None else (fallback, True)

    if circuit_schema is not None:
        schema = _parse_candidate(circuit_schema)
        return (schema, False) if schema is not None else (fallback, True)

    if schematic_json is not None:
        schema = _parse_candidate(schematic_json)
        return (schema, False) if schema is not None else (fallback, True)

    return fallback, True


def circuit_schema_to_string(schema: CircuitSchema) -> str:
    return json.dumps(schema.model_dump(), indent=2)
