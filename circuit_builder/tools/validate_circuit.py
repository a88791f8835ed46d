"""
Validate Circuit — electrical and wiring risk checks on a circuit schema.
"""
from dataclasses import asdict
from typing import Any, Optional

from pydantic import BaseModel, Field

from circuit_builder.tools.dispatcher import ToolCall, parse_arguments, resolve_call_schema
from circuit_builder.validators import validate_circuit


class ValidateCircuitParams(BaseModel):
    circuit_schema: Optional[Any] = Field(None, description="Circuit schema JSON string or object")
    schematic_json: Optional[Any] = Field(None, description="Backward-compatible schematic object input")
    checks: Optional[list[str]] = Field(None, description="Subset of checks to run; all when omitted")


class ValidateCircuitTool:
    name = "validate_circuit"
    description = "Validate a normalized circuit schema for electrical and wiring risks."
    Params = ValidateCircuitParams
    read_only = True
    open_world = False

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        schema = resolve_call_schema(call, params.circuit_schema, params.schematic_json)
        passed, warnings = validate_circuit(schema, params.checks)
        return {
            "pass": passed,
            "warnings": [asdict(w) for w in warnings],
            "normalized_circuit_schema": schema.model_dump(),
        }
