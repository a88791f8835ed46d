"""
Tool dispatcher and handler tests.

Run: python -m pytest tests/ -v
"""
import asyncio
import io
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from circuit_builder.errors import ToolArgumentError, ToolExecutionError, UnknownToolError
from circuit_builder.logger import ToolLogger
from circuit_builder.metrics import ToolMetrics
from circuit_builder.schema import create_default_circuit_schema
from circuit_builder.tools.dispatcher import ToolCall
from circuit_builder.tools.generate_circuit import build_circuit
from circuit_builder.tools.parts import search_catalog, tokenize
from circuit_builder.tools.registry import create_dispatcher


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def dispatcher(log_stream):
    return create_dispatcher(ToolLogger(request_id="test", stream=log_stream, enabled=True))


def run(dispatcher, tool, **arguments):
    call = ToolCall(tool=tool, arguments=arguments, caller="test")
    result = asyncio.run(dispatcher.dispatch(call))
    return call, result


DEFAULT_SCHEMA = create_default_circuit_schema().model_dump()


# ── Dispatcher ───────────────────────────────────────────────

class TestDispatcher:
    def test_all_tools_registered(self, dispatcher):
        assert set(dispatcher.tools) == {
            "generate_circuit", "write_arduino_code", "validate_circuit", "render_schematic",
            "search_components", "get_datasheet", "generate_3d_case", "order_parts",
            "export_project", "suggest_improvements", "analyze_photo", "search_emails",
        }

    def test_describe(self, dispatcher):
        manifest = {t["name"]: t for t in dispatcher.describe()}
        gen = manifest["generate_circuit"]
        assert "description" in gen["input_schema"]["properties"]
        assert gen["annotations"] == {"readOnlyHint": True, "openWorldHint": False}
        assert manifest["order_parts"]["annotations"]["openWorldHint"] is True

    def test_unknown_tool(self, dispatcher):
        call = ToolCall(tool="make_coffee")
        with pytest.raises(UnknownToolError):
            asyncio.run(dispatcher.dispatch(call))
        assert call.status == "error"
        assert dispatcher.call_log == [call]

    def test_bad_arguments(self, dispatcher):
        call = ToolCall(tool="write_arduino_code", arguments={"components": "not-a-list"})
        with pytest.raises(ToolArgumentError) as exc:
            asyncio.run(dispatcher.dispatch(call))
        locs = {tuple(e["loc"]) for e in exc.value.errors}
        assert ("description",) in locs
        assert exc.value.recoverable
        assert call.status == "error"

    def test_handler_crash_wrapped(self, dispatcher):
        class Exploding:
            name = "explode"
            description = "always fails"

            async def handle(self, call):
                raise RuntimeError("boom")

        dispatcher.register_tool(Exploding())
        call = ToolCall(tool="explode")
        with pytest.raises(ToolExecutionError) as exc:
            asyncio.run(dispatcher.dispatch(call))
        assert "boom" in str(exc.value)
        assert call.error == "boom"

    def test_envelope_completed(self, dispatcher):
        call, result = run(dispatcher, "search_emails")
        assert call.status == "done"
        assert call.result is result
        assert call.duration_ms >= 0

    def test_logs_json_lines(self, dispatcher, log_stream):
        run(dispatcher, "search_emails")
        events = [json.loads(line) for line in log_stream.getvalue().splitlines()]
        assert [e["event"] for e in events] == ["tool.start", "tool.done"]
        assert all(e["request"] == "test" and e["tool"] == "search_emails" for e in events)

    def test_metrics_recorded(self, dispatcher):
        before = ToolMetrics().snapshot()["tools"].get("get_datasheet", {}).get("calls", 0)
        run(dispatcher, "get_datasheet", component_name="SG90")
        after = ToolMetrics().snapshot()["tools"]["get_datasheet"]["calls"]
        assert after == before + 1

    def test_schema_fallback_flag(self, dispatcher, log_stream):
        call, _ = run(dispatcher, "validate_circuit")
        assert call.schema_fallback
        assert '"schema.fallback"' in log_stream.getvalue()

        call, _ = run(dispatcher, "validate_circuit", circuit_schema=DEFAULT_SCHEMA)
        assert not call.schema_fallback


# ── Generate circuit ─────────────────────────────────────────

class TestGenerateCircuit:
    def test_default_is_led(self):
        schema, wiring = build_circuit("")
        assert [p.ref for p in schema.parts] == ["U1", "R1", "D1"]
        assert [n.name for n in schema.nets] == ["VCC", "GND", "LED_STATUS", "LED_ANODE"]
        assert len(wiring) == 3

    def test_temperature_with_led(self):
        schema, _ = build_circuit("Temperature monitor with LED alert")
        assert [p.ref for p in schema.parts] == ["U1", "S1", "R1", "D1"]
        assert schema.pin_map == {"DHT_DATA": "U1:D2", "LED_STATUS": "U1:D13"}
        gnd = schema.nets[1]
        assert [(c.part_ref, c.pin) for c in gnd.connections] == [
            ("U1", "GND"), ("S1", "GND"), ("D1", "K"),
        ]

    def test_distance_and_servo(self):
        schema, _ = build_circuit("Distance triggered servo gate")
        assert [p.name for p in schema.parts] == [
            "Arduino Uno R3", "HC-SR04 Ultrasonic Sensor", "SG90 Micro Servo",
        ]
        assert schema.pin_map == {"SR04_TRIG": "U1:D11", "SR04_ECHO": "U1:D12", "SERVO_SIG": "U1:D9"}
        assert [n.name for n in schema.nets][:2] == ["VCC", "GND"]

    def test_extra_components(self):
        schema, _ = build_circuit("blink", components=["Buzzer"])
        assert schema.parts[-1].ref == "X3"
        assert schema.parts[-1].name == "Buzzer"

    def test_power_and_constraints(self):
        schema, _ = build_circuit("led", power_supply="12V", constraints=["fits in pocket"])
        assert schema.power.input_voltage_v == 12
        assert schema.power.logic_voltage_v == 5
        assert schema.constraints[0].id == "C1"

    def test_tool_output(self, dispatcher):
        _, result = run(dispatcher, "generate_circuit", requirements="Humidity logger")
        assert result["circuit_schema"]["description"] == "humidity logger"
        assert result["component_list"][0] == {
            "name": "Arduino Uno R3", "quantity": 1, "ref": "U1", "mpn": "A000066",
        }
        assert result["component_list"][1]["mpn"] == "N/A"


# ── Write Arduino code ───────────────────────────────────────

class TestWriteArduinoCode:
    def test_default_kit(self, dispatcher):
        _, result = run(dispatcher, "write_arduino_code", description="Blink an LED")
        assert result["filename"] == "sketch.ino"
        assert [c["name"] for c in result["components"]] == [
            "Arduino Uno R3", "Breadboard", "220 Ohm Resistor", "LED",
        ]
        assert result["components"][2]["qty"] == 2
        assert "// Description: Blink an LED" in result["code"]
        assert result["summary"] == "Generated sketch.ino with 4 components."
        assert "circuit_parts" not in result

    def test_components_deduped_with_search_links(self, dispatcher):
        _, result = run(dispatcher, "write_arduino_code", description="x",
                        components=["DHT11 Sensor", "LED", "DHT11 Sensor"])
        assert [c["name"] for c in result["components"]] == ["DHT11 Sensor", "LED"]
        assert result["components"][0]["purchase_url"] == "https://www.adafruit.com/search?q=DHT11%20Sensor"

    def test_schema_pin_constants(self, dispatcher):
        _, gen = run(dispatcher, "generate_circuit", description="temperature led")
        _, result = run(dispatcher, "write_arduino_code", description="temperature led",
                        circuit_schema=gen["circuit_schema"])
        assert "const int DHT_DATA_PIN = 2;" in result["code"]
        assert "const int LED_STATUS_PIN = 13;" in result["code"]
        assert "const int LED_PIN = LED_STATUS_PIN;" in result["code"]
        assert result["power_info"] == "5V / 500mA"
        assert [p["ref"] for p in result["circuit_parts"]] == ["U1", "S1", "R1", "D1"]

    def test_analog_and_supply_pins(self, dispatcher):
        schema = json.loads(json.dumps(DEFAULT_SCHEMA))
        schema["pin_map"] = {"POT": "U1:A0", "RAIL": "U1:5V"}
        _, result = run(dispatcher, "write_arduino_code", description="knob", circuit_schema=schema)
        assert "const int POT_PIN = A0;" in result["code"]
        assert "// RAIL: U1:5V" in result["code"]
        assert "const int LED_PIN = 13;" in result["code"]

    def test_led_status_on_supply_pin_keeps_default(self, dispatcher):
        schema = json.loads(json.dumps(DEFAULT_SCHEMA))
        schema["pin_map"] = {"LED_STATUS": "U1:5V"}
        _, result = run(dispatcher, "write_arduino_code", description="x", circuit_schema=schema)
        assert "// LED_STATUS: U1:5V" in result["code"]
        assert "LED_STATUS_PIN" not in result["code"]
        assert "const int LED_PIN = 13;" in result["code"]


# ── Validate / render ────────────────────────────────────────

class TestValidateTool:
    def test_pass(self, dispatcher):
        _, result = run(dispatcher, "validate_circuit", circuit_schema=DEFAULT_SCHEMA)
        assert result["pass"] is True
        assert result["warnings"] == []
        assert result["normalized_circuit_schema"]["parts"][0]["ref"] == "U1"

    def test_short_detected(self, dispatcher):
        schema = json.loads(json.dumps(DEFAULT_SCHEMA))
        schema["nets"][2]["connections"].append({"part_ref": "U1", "pin": "GND"})
        _, result = run(dispatcher, "validate_circuit", circuit_schema=json.dumps(schema))
        assert result["pass"] is False
        assert [w["code"] for w in result["warnings"]] == ["POTENTIAL_SHORT"]


class TestRenderTool:
    def test_render(self, dispatcher, log_stream):
        renders = ToolMetrics().snapshot()["schematic_renders"]
        call, result = run(dispatcher, "render_schematic", circuit_schema=DEFAULT_SCHEMA)
        assert not call.schema_fallback
        assert result["width"] == 560
        assert result["nets_drawn"] == ["VCC", "GND", "LED_STATUS"]
        assert result["nets_skipped"] == []
        assert result["svg"].startswith("<svg")
        assert result["scene"]["children"][0]["type"] == "text"
        assert ToolMetrics().snapshot()["schematic_renders"] == renders + 1
        assert '"schematic.render"' in log_stream.getvalue()

    def test_skipped_nets_reported(self, dispatcher):
        schema = json.loads(json.dumps(DEFAULT_SCHEMA))
        schema["nets"].append({"name": "DANGLING", "connections": [{"part_ref": "Q7", "pin": "1"}]})
        _, result = run(dispatcher, "render_schematic", circuit_schema=schema, show_power=False)
        assert result["nets_skipped"] == ["DANGLING"]
        assert result["scene"]["children"][0]["type"] == "g"

    def test_skipped_duplicate_net_name(self, dispatcher):
        schema = json.loads(json.dumps(DEFAULT_SCHEMA))
        schema["nets"].append({"name": "VCC", "connections": [{"part_ref": "Q7", "pin": "1"}]})
        _, result = run(dispatcher, "render_schematic", circuit_schema=schema)
        assert result["nets_drawn"] == ["VCC", "GND", "LED_STATUS"]
        assert result["nets_skipped"] == ["VCC"]

    def test_fallback_renders_default(self, dispatcher):
        call, result = run(dispatcher, "render_schematic", circuit_schema="{broken")
        assert call.schema_fallback
        assert len(result["nets_drawn"]) == 3


# ── Parts ────────────────────────────────────────────────────

class TestParts:
    def test_tokenize(self):
        assert tokenize("Flight controller (Pixhawk or similar) for the drone") == [
            "flight", "controller", "drone",
        ]

    def test_search_ranked(self):
        results = search_catalog("ultrasonic distance sensor")
        assert results[0].mpn == "HC-SR04"

    def test_search_no_tokens(self):
        assert search_catalog("a / the") == []

    def test_search_tool(self, dispatcher):
        _, result = run(dispatcher, "search_components", query="servo motor", limit=2)
        assert len(result["results"]) == 2
        assert result["results"][0]["name"] == "SG90 Micro Servo"

    def test_datasheet_known(self, dispatcher):
        _, result = run(dispatcher, "get_datasheet", part_number="HC-SR04 module")
        assert result["component"] == "HC-SR04 module"
        assert result["pdf_link"].endswith("HCSR04.pdf")
        assert result["key_specs_summary"]["range"] == "2cm to 400cm"

    def test_datasheet_fallback(self, dispatcher):
        _, result = run(dispatcher, "get_datasheet", component_name="Foo Widget")
        assert result["pdf_link"] == "https://www.google.com/search?q=foo%20widget%20datasheet%20pdf"

    def test_datasheet_nothing_given(self, dispatcher):
        _, result = run(dispatcher, "get_datasheet")
        assert result["component"] == "Generic Search"

    def test_order_from_bom(self, dispatcher):
        _, result = run(dispatcher, "order_parts", preferred_vendor="digikey",
                        bom_list=[{"name": "LED", "quantity": 3}])
        assert result["total_price_estimate_usd"] == 3.75
        assert result["cart_links"] == [
            {"vendor": "digikey", "url": "https://www.digikey.com/en/products/result?s=LED"},
        ]
        assert result["delivery_time"] == "3-7 business days"

    def test_order_from_schema(self, dispatcher):
        _, result = run(dispatcher, "order_parts", circuit_schema=DEFAULT_SCHEMA)
        assert [b["part_number"] for b in result["bom_used"]] == ["A000066", None, None]
        assert len(result["cart_links"]) == 2
        assert "A000066%20220%20Ohm%20Resistor%20LED" in result["cart_links"][0]["url"]

    def test_order_rejects_zero_quantity(self, dispatcher):
        with pytest.raises(ToolArgumentError):
            run(dispatcher, "order_parts", bom_list=[{"name": "LED", "quantity": 0}])


# ── Enclosure / export / suggestions / intake ────────────────

class TestEnclosure:
    def test_default_board(self, dispatcher):
        _, result = run(dispatcher, "generate_3d_case", circuit_schema=DEFAULT_SCHEMA)
        assert result["stl_file"] == "generated/case-minimal-76.6x61.4x28.stl"
        assert "cube([76.6, 61.4, 28], center=false);" in result["openscad_code"]
        assert "Vents" not in result["openscad_code"]
        assert "cylinder" not in result["openscad_code"]
        assert result["derived_from_schema"] == {"part_count": 3, "net_count": 3}

    def test_vented(self, dispatcher):
        _, result = run(dispatcher, "generate_3d_case", style="vented")
        assert "for (i = [0:7])" in result["openscad_code"]

    def test_rugged_custom_board(self, dispatcher):
        _, result = run(dispatcher, "generate_3d_case", style="rugged",
                        board_size={"length_mm": 100, "width_mm": 50, "height_mm": 30})
        assert result["stl_file"] == "generated/case-rugged-112x62x42.stl"
        assert "cylinder" not in result["openscad_code"]

    def test_bad_style(self, dispatcher):
        with pytest.raises(ToolArgumentError):
            run(dispatcher, "generate_3d_case", style="spiky")


class TestExport:
    def test_github_bundle(self, dispatcher):
        _, result = run(dispatcher, "export_project", project_id="demo", format="github",
                        circuit_schema=DEFAULT_SCHEMA, arduino_code="void loop() {}")
        assert result["bundle_url"].endswith("/demo.txt")
        assert "bom.csv" in result["bundled_files"]
        assert result["preview"]["sketch_ino"] == "void loop() {}"
        assert result["preview"]["bom_csv"].splitlines() == [
            "U1,Arduino Uno R3,1,A000066",
            "R1,220 Ohm Resistor,1,",
            "D1,LED,1,",
        ]
        assert json.loads(result["preview"]["circuit_schema_json"])["pin_map"] == {"LED_STATUS": "U1:D13"}

    def test_defaults(self, dispatcher):
        _, result = run(dispatcher, "export_project")
        assert result["bundle_url"].endswith("/project-default.zip")
        assert result["preview"]["sketch_ino"].startswith("// Placeholder sketch")


class TestSuggestImprovements:
    def test_high_voltage_tip(self, dispatcher):
        schema = create_default_circuit_schema(power_supply="12V").model_dump()
        _, result = run(dispatcher, "suggest_improvements", circuit_schema=schema)
        assert any("buck regulator" in t for t in result["power_efficiency"])
        assert result["analyzed_code_lines"] == 6
        assert result["analyzed_schema"]["input_voltage_v"] == 12

    def test_many_nets_tip(self, dispatcher):
        schema = json.loads(json.dumps(DEFAULT_SCHEMA))
        schema["nets"] += [{"name": f"N{i}", "connections": []} for i in range(8)]
        _, result = run(dispatcher, "suggest_improvements", circuit_schema=schema, code="a\nb")
        assert len(result["optimization_tips"]) == 3
        assert len(result["power_efficiency"]) == 2
        assert result["analyzed_code_lines"] == 2


class TestIntake:
    def test_analyze_photo(self, dispatcher):
        _, result = run(dispatcher, "analyze_photo", image="photos/123")
        assert result["image"] == "photos/123"
        assert result["extracted_circuit_schema"]["description"] == "Draft schema inferred from photo"

    def test_search_emails_filter(self, dispatcher):
        _, result = run(dispatcher, "search_emails", query="RESISTOR")
        assert [s["from"] for s in result["snippets"]] == ["orders@example.com"]

    def test_search_emails_all(self, dispatcher):
        _, result = run(dispatcher, "search_emails")
        assert result["query"] == ""
        assert len(result["snippets"]) == 2
