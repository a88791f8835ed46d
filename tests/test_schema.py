"""Tests for circuit schema models, JSON extraction and lenient resolution."""
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from pydantic import ValidationError

from circuit_builder.errors import JSONParseError
from circuit_builder.schema import (
    DEFAULT_DESCRIPTION, CircuitSchema, NetConnection, Part, circuit_schema_to_string,
    create_default_circuit_schema, parse_json_text, parse_power_supply, resolve_circuit_schema,
)

MINIMAL = {
    "power": {"input_voltage_v": 9, "logic_voltage_v": 5, "max_current_ma": 250},
    "parts": [{"ref": "U1", "name": "Arduino Uno R3"}, {"ref": "R1", "name": "Resistor"}],
    "nets": [{"name": "SIG", "connections": [
        {"part_ref": "U1", "pin": "D3"}, {"partRef": "R1", "pin": "1"},
    ]}],
}


# ── Models ───────────────────────────────────────────────────

class TestModels:
    def test_minimal_schema(self):
        schema = CircuitSchema.model_validate(MINIMAL)
        assert schema.version == "1.0"
        assert schema.description == DEFAULT_DESCRIPTION
        assert [p.ref for p in schema.parts] == ["U1", "R1"]

    def test_camel_case_part_ref(self):
        schema = CircuitSchema.model_validate(MINIMAL)
        assert schema.nets[0].connections[1].part_ref == "R1"

    def test_power_required(self):
        with pytest.raises(ValidationError):
            CircuitSchema.model_validate({"parts": []})

    def test_quantity_positive(self):
        with pytest.raises(ValidationError):
            Part(ref="R1", name="Resistor", quantity=0)

    def test_connection_frozen(self):
        c = NetConnection(part_ref="U1", pin="D2")
        with pytest.raises(ValidationError):
            c.pin = "D3"

    def test_power_summary(self):
        schema = CircuitSchema.model_validate(MINIMAL)
        assert schema.power_summary() == "9V / 250mA"

    def test_power_summary_fractional(self):
        schema = create_default_circuit_schema(power_supply="3.7V battery")
        assert schema.power_summary() == "3.7V / 500mA"


# ── JSON extraction ──────────────────────────────────────────

class TestParseJsonText:
    def test_direct(self):
        assert parse_json_text('{"a": 1}') == {"a": 1}

    def test_fenced(self):
        assert parse_json_text('```json\n{"key": "value"}\n```') == {"key": "value"}

    def test_prose_before_json(self):
        assert parse_json_text('Here is the schema:\n\n{"data": true}') == {"data": True}

    def test_trailing_comma(self):
        assert parse_json_text('{"a": 1, "b": 2,}') == {"a": 1, "b": 2}

    def test_garbage_raises(self):
        with pytest.raises(JSONParseError) as exc:
            parse_json_text("no json here")
        assert exc.value.stage == "json_parse"
        assert exc.value.recoverable


# ── Construction ─────────────────────────────────────────────

class TestPowerSupply:
    @pytest.mark.parametrize("text,expected", [
        (None, 5.0),
        ("", 5.0),
        ("12V", 12.0),
        ("3.3 volts", 3.3),
        ("battery", 5.0),
        ("0V", 5.0),
    ])
    def test_parse(self, text, expected):
        assert parse_power_supply(text) == expected


class TestDefaultSchema:
    def test_led_circuit(self):
        schema = create_default_circuit_schema()
        assert [p.ref for p in schema.parts] == ["U1", "R1", "D1"]
        assert [n.name for n in schema.nets] == ["VCC", "GND", "LED_STATUS"]
        assert schema.pin_map == {"LED_STATUS": "U1:D13"}

    def test_logic_voltage_capped(self):
        schema = create_default_circuit_schema(power_supply="12V")
        assert schema.power.input_voltage_v == 12
        assert schema.power.logic_voltage_v == 5

    def test_requested_components_replace_led(self):
        schema = create_default_circuit_schema(requested_components=["Buzzer", "Relay"])
        assert [(p.ref, p.name) for p in schema.parts] == [
            ("U1", "Arduino Uno R3"), ("X1", "Buzzer"), ("X2", "Relay"),
        ]


# ── Resolution ───────────────────────────────────────────────

class TestResolve:
    def test_object(self):
        schema, fallback = resolve_circuit_schema(MINIMAL)
        assert not fallback
        assert schema.power.input_voltage_v == 9

    def test_json_string(self):
        schema, fallback = resolve_circuit_schema(json.dumps(MINIMAL))
        assert not fallback
        assert len(schema.parts) == 2

    def test_fenced_string(self):
        schema, fallback = resolve_circuit_schema(f"```json\n{json.dumps(MINIMAL)}\n```")
        assert not fallback
        assert schema.nets[0].name == "SIG"

    def test_model_instance_passthrough(self):
        original = CircuitSchema.model_validate(MINIMAL)
        schema, fallback = resolve_circuit_schema(original)
        assert schema is original and not fallback

    def test_unparseable_string_falls_back(self):
        schema, fallback = resolve_circuit_schema("definitely not json")
        assert fallback
        assert [p.ref for p in schema.parts] == ["U1", "R1", "D1"]

    def test_nothing_supplied_falls_back(self):
        schema, fallback = resolve_circuit_schema(
            None, fallback_description="Night light", fallback_power_supply="9V",
        )
        assert fallback
        assert schema.description == "Night light"
        assert schema.power.input_voltage_v == 9

    def test_legacy_schematic(self):
        legacy = {"description": "Old format", "power_supply": "12V", "requested_components": ["Fan", 3]}
        schema, fallback = resolve_circuit_schema(schematic_json=legacy)
        assert not fallback
        assert schema.description == "Old format"
        assert [p.name for p in schema.parts] == ["Arduino Uno R3", "Fan"]

    def test_circuit_schema_wins_over_legacy(self):
        schema, _ = resolve_circuit_schema(MINIMAL, schematic_json={"description": "ignored"})
        assert schema.power.input_voltage_v == 9

    def test_dict_without_schema_data_falls_back(self):
        schema, fallback = resolve_circuit_schema({"nonsense": True}, fallback_description="Door chime")
        assert fallback
        assert schema.description == "Door chime"

    def test_list_falls_back(self):
        _, fallback = resolve_circuit_schema([1, 2, 3])
        assert fallback

    def test_to_string_round_trips(self):
        schema = create_default_circuit_schema()
        again, fallback = resolve_circuit_schema(circuit_schema_to_string(schema))
        assert not fallback
        assert again == schema
