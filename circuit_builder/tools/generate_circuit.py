"""
Generate Circuit — keyword rule engine from a description to a circuit schema.

No LLM involved: keywords in the description pick sensor, servo and LED
blocks, each with its nets and pin-map entries on an Arduino Uno. VCC and
GND nets collect every block's supply pins and are placed first.
"""
from typing import Optional

from pydantic import BaseModel, Field

from circuit_builder.schema import (
    DEFAULT_DESCRIPTION, CircuitSchema, Constraint, Net, NetConnection, Part, PowerSpec,
    parse_power_supply,
)
from circuit_builder.tools.dispatcher import ToolCall, parse_arguments

MCU_REF = "U1"


class GenerateCircuitParams(BaseModel):
    description: Optional[str] = Field(None, description="Natural-language description of what the circuit should do")
    requirements: Optional[str] = Field(None, description="Backward-compatible alias for description")
    power_supply: Optional[str] = Field(None, description="Power input for the design, for example 5V, 12V, or battery voltage")
    constraints: list[str] = Field(default_factory=list, description="Optional constraints like size, cost, safety, or environment")
    components: Optional[list[str]] = Field(None, description="Requested component list")


def _signal_net(name: str, mcu_pin: str, ref: str, pin: str) -> Net:
    return Net(name=name, connections=[
        NetConnection(part_ref=MCU_REF, pin=mcu_pin),
        NetConnection(part_ref=ref, pin=pin),
    ])


class _CircuitDraft:
    """Accumulates parts, nets and wiring notes while rules fire."""

    def __init__(self):
        self.parts = [Part(ref=MCU_REF, name="Arduino Uno R3", mpn="A000066", logic_voltage_v=5)]
        self.nets: list[Net] = []
        self.pin_map: dict[str, str] = {}
        self.vcc = [NetConnection(part_ref=MCU_REF, pin="5V")]
        self.gnd = [NetConnection(part_ref=MCU_REF, pin="GND")]
        self.wiring = [
            "Connect Arduino 5V to breadboard positive rail.",
            "Connect Arduino GND to breadboard ground rail.",
        ]
        self.counters = {"S": 1, "R": 1, "D": 1, "M": 1}

    def next_ref(self, prefix: str) -> str:
        ref = f"{prefix}{self.counters[prefix]}"
        self.counters[prefix] += 1
        return ref

    def add_powered(self, ref: str, name: str):
        self.parts.append(Part(ref=ref, name=name))
        self.vcc.append(NetConnection(part_ref=ref, pin="VCC"))
        self.gnd.append(NetConnection(part_ref=ref, pin="GND"))

    def add_signal(self, name: str, mcu_pin: str, ref: str, pin: str):
        self.nets.append(_signal_net(name, mcu_pin, ref, pin))
        self.pin_map[name] = f"{MCU_REF}:{mcu_pin}"


def _add_dht(draft: _CircuitDraft):
    ref = draft.next_ref("S")
    draft.add_powered(ref, "DHT11 Temperature & Humidity Sensor")
    draft.add_signal("DHT_DATA", "D2", ref, "DATA")
    draft.wiring.append(f"Connect {ref} DHT11: VCC→5V, GND→GND, DATA→D2.")


def _add_ultrasonic(draft: _CircuitDraft):
    ref = draft.next_ref("S")
    draft.add_powered(ref, "HC-SR04 Ultrasonic Sensor")
    draft.add_signal("SR04_TRIG", "D11", ref, "TRIG")
    draft.add_signal("SR04_ECHO", "D12", ref, "ECHO")
    draft.wiring.append(f"Connect {ref} HC-SR04: VCC→5V, GND→GND, TRIG→D11, ECHO→D12.")


def _add_servo(draft: _CircuitDraft):
    ref = draft.next_ref("M")
    draft.add_powered(ref, "SG90 Micro Servo")
    draft.add_signal("SERVO_SIG", "D9", ref, "SIG")
    draft.wiring.append(f"Connect {ref} Servo: Brown→GND, Red→5V, Orange→D9.")


def _add_status_led(draft: _CircuitDraft):
    r_ref, d_ref = draft.next_ref("R"), draft.next_ref("D")
    draft.parts += [
        Part(ref=r_ref, name="220 Ohm Resistor"),
        Part(ref=d_ref, name="LED", max_current_ma=20),
    ]
    draft.add_signal("LED_STATUS", "D13", r_ref, "1")
    draft.nets.append(Net(name="LED_ANODE", connections=[
        NetConnection(part_ref=r_ref, pin="2"),
        NetConnection(part_ref=d_ref, pin="A"),
    ]))
    draft.gnd.append(NetConnection(part_ref=d_ref, pin="K"))
    draft.wiring.append(f"Connect {d_ref} LED: anode via {r_ref} 220Ω to D13, cathode to GND.")


# Keyword rules, applied in order; every matching rule fires.
RULES = [
    (("temperature", "humidity"), _add_dht),
    (("distance", "ultrasonic"), _add_ultrasonic),
    (("servo", "motor"), _add_servo),
]


def build_circuit(description: str, power_supply: str | None = None,
                  constraints: list[str] | None = None,
                  components: list[str] | None = None) -> tuple[CircuitSchema, list[str]]:
    """Apply the keyword rules. Returns (schema, wiring instructions)."""
    desc = description.lower()
    input_v = parse_power_supply(power_supply)
    draft = _CircuitDraft()

    for keywords, add_block in RULES:
        if any(k in desc for k in keywords):
            add_block(draft)

    # Status LED when asked for, or as the default circuit when nothing else matched
    if "led" in desc or len(draft.parts) == 1:
        _add_status_led(draft)

    for name in components or []:
        draft.parts.append(Part(ref=f"X{len(draft.parts)}", name=name))

    nets = [
        Net(name="VCC", connections=draft.vcc),
        Net(name="GND", connections=draft.gnd),
        *draft.nets,
    ]
    schema = CircuitSchema(
        description=desc,
        power=PowerSpec(
            input_voltage_v=input_v,
            logic_voltage_v=input_v if input_v <= 5 else 5,
            max_current_ma=500,
        ),
        parts=draft.parts,
        nets=nets,
        pin_map=draft.pin_map,
        constraints=[
            Constraint(id=f"C{i + 1}", description=c) for i, c in enumerate(constraints or [])
        ],
    )
    return schema, draft.wiring


class GenerateCircuitTool:
    name = "generate_circuit"
    description = (
        "Generate an Arduino circuit from requirements and return a normalized "
        "circuit schema with parts, nets, and wiring."
    )
    Params = GenerateCircuitParams
    read_only = True
    open_world = False

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        schema, wiring = build_circuit(
            params.description or params.requirements or DEFAULT_DESCRIPTION,
            power_supply=params.power_supply,
            constraints=params.constraints,
            components=params.components,
        )
        return {
            "component_list": [
                {"name": p.name, "quantity": p.quantity, "ref": p.ref, "mpn": p.mpn or "N/A"}
                for p in schema.parts
            ],
            "wiring_instructions": wiring,
            "circuit_schema": schema.model_dump(),
        }
