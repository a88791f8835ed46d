"""
Suggest Improvements — firmware and power tips for a circuit and its sketch.
"""
from typing import Any, Optional

from pydantic import BaseModel, Field

from circuit_builder.tools.dispatcher import ToolCall, parse_arguments, resolve_call_schema

EMPTY_SKETCH = "void setup() {\n}\n\nvoid loop() {\n}\n"

# Thresholds for the extra tips
MANY_NETS = 10
LINEAR_REG_MAX_V = 9


class SuggestImprovementsParams(BaseModel):
    circuit_schema: Optional[Any] = Field(None, description="Circuit schema JSON string or object")
    arduino_code: Optional[str] = Field(None, description="Current Arduino firmware source code")
    schematic_json: Optional[Any] = Field(None, description="Backward-compatible schematic object input")
    code: Optional[str] = Field(None, description="Backward-compatible alias for arduino_code")


class SuggestImprovementsTool:
    name = "suggest_improvements"
    description = "Suggest firmware and hardware improvements for reliability and power efficiency."
    Params = SuggestImprovementsParams
    read_only = True
    open_world = False

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        schema = resolve_call_schema(call, params.circuit_schema, params.schematic_json)
        code = params.arduino_code or params.code or EMPTY_SKETCH

        optimization_tips = [
            "Debounce digital inputs in software to avoid false triggers.",
            "Group pin initialization into helper functions for maintainability.",
        ]
        if len(schema.nets) > MANY_NETS:
            optimization_tips.append("Split code by subsystem to keep pin handling maintainable.")

        power_efficiency = [
            "Use sleep modes between sensor reads.",
            "Disable unused peripherals to reduce idle current draw.",
        ]
        if schema.power.input_voltage_v > LINEAR_REG_MAX_V:
            power_efficiency.append("Use a buck regulator instead of linear regulation for thermal efficiency.")

        return {
            "optimization_tips": optimization_tips,
            "power_efficiency": power_efficiency,
            "alternative_components": [
                "Swap linear regulator with a buck converter for higher efficiency.",
                "Use low-power LEDs with higher luminous efficacy.",
            ],
            "analyzed_schema": {
                "parts": len(schema.parts),
                "nets": len(schema.nets),
                "input_voltage_v": schema.power.input_voltage_v,
            },
            "analyzed_code_lines": len(code.split("\n")),
        }
