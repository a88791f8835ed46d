"""
Write Arduino Code — sketch template plus the component sidebar for the preview.
"""
import re
from dataclasses import asdict
from typing import Any, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

from circuit_builder.schema import CircuitSchema
from circuit_builder.tools.dispatcher import ToolCall, parse_arguments, resolve_call_schema
from circuit_builder.types import ComponentListing

SKETCH_FILENAME = "sketch.ino"

DEFAULT_KIT = [
    ComponentListing("Arduino Uno R3", 1, "https://www.adafruit.com/product/50"),
    ComponentListing("Breadboard", 1, "https://www.adafruit.com/product/64"),
    ComponentListing("220 Ohm Resistor", 2, "https://www.adafruit.com/product/2780"),
    ComponentListing("LED", 1, "https://www.adafruit.com/product/300"),
]

DIAGRAM_NOTES = [
    "Connect component grounds to Arduino GND.",
    "Use 220 Ohm resistor in series with each LED.",
    "Verify pin mapping before uploading firmware.",
]

# Same escaping as JavaScript's encodeURIComponent
URI_SAFE = "-_.!~*'()"


class WriteArduinoCodeParams(BaseModel):
    description: str = Field(..., description="Natural language description of what the circuit should do")
    components: list[str] = Field(default_factory=list, description="Optional list of components used in the circuit")
    circuit_schema: Optional[Any] = Field(None, description="Optional circuit schema JSON string or object for pin constants and the schematic preview")


def adafruit_search_url(name: str) -> str:
    return f"https://www.adafruit.com/search?q={quote(name, safe=URI_SAFE)}"


def component_listings(components: list[str]) -> list[ComponentListing]:
    """Unique components in first-seen order, or the default kit when none given."""
    unique = list(dict.fromkeys(components))
    if not unique:
        return list(DEFAULT_KIT)
    return [ComponentListing(name, 1, adafruit_search_url(name)) for name in unique]


def _pin_constant(net_name: str, location: str) -> str:
    """'LED_STATUS', 'U1:D13' -> 'const int LED_STATUS_PIN = 13;'"""
    pin = location.split(":")[-1].upper()
    ident = re.sub(r"[^A-Za-z0-9_]", "_", net_name).upper() + "_PIN"
    if re.fullmatch(r"D?[0-9]+", pin):
        return f"const int {ident} = {pin.lstrip('D')};"
    if re.fullmatch(r"A[0-9]+", pin):
        return f"const int {ident} = {pin};"
    # Supply pins have no pin number
    return f"// {net_name}: {location}"


def build_sketch(description: str, schema: CircuitSchema | None = None) -> str:
    lines = ["// Auto-generated Arduino code", f"// Description: {description}", ""]
    led_pin = "13"
    if schema and schema.pin_map:
        for name, loc in schema.pin_map.items():
            line = _pin_constant(name, loc)
            lines.append(line)
            # Alias only a declared constant; supply pins produce a comment
            if name == "LED_STATUS" and line.startswith("const int"):
                led_pin = "LED_STATUS_PIN"
    lines.append(f"const int LED_PIN = {led_pin};")
    lines += [
        "",
        "void setup() {",
        "  pinMode(LED_PIN, OUTPUT);",
        "}",
        "",
        "void loop() {",
        "  digitalWrite(LED_PIN, HIGH);",
        "  delay(500);",
        "  digitalWrite(LED_PIN, LOW);",
        "  delay(500);",
        "}",
    ]
    return "\n".join(lines)


class WriteArduinoCodeTool:
    name = "write_arduino_code"
    description = "Generate Arduino .ino code based on circuit requirements"
    Params = WriteArduinoCodeParams
    read_only = True
    open_world = False

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        schema = None
        if params.circuit_schema is not None:
            schema = resolve_call_schema(
                call, params.circuit_schema,
                fallback_description=params.description,
                fallback_components=params.components,
            )

        components = component_listings(params.components)
        result = {
            "prompt": params.description,
            "filename": SKETCH_FILENAME,
            "code": build_sketch(params.description, schema),
            "components": [asdict(c) for c in components],
            "diagramTitle": "Circuit Diagram Preview",
            "diagramNotes": list(DIAGRAM_NOTES),
            "summary": f"Generated {SKETCH_FILENAME} with {len(components)} components.",
        }
        if schema is not None:
            result["circuit_parts"] = [p.model_dump() for p in schema.parts]
            result["circuit_nets"] = [n.model_dump() for n in schema.nets]
            result["power_info"] = schema.power_summary()
        return result
