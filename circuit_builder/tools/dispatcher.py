"""
Tool dispatcher — routes tool calls from the agent runtime to handlers.

Each call travels in a ToolCall envelope that records status, result,
error and duration, the same envelope whether it came in over HTTP or
from the CLI. Handlers are plain classes with a pydantic Params model and
an async handle(call) method.
"""
import time
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from circuit_builder.errors import (
    ToolArgumentError, ToolError, ToolExecutionError, UnknownToolError,
)
from circuit_builder.logger import ToolLogger
from circuit_builder.metrics import ToolMetrics
from circuit_builder.schema import CircuitSchema, resolve_circuit_schema


@dataclass
class ToolCall:
    """Typed envelope for one tool invocation."""
    tool: str
    arguments: dict = field(default_factory=dict)
    caller: str = "agent"
    status: str = "pending"
    result: Any = None
    error: str | None = None
    duration_ms: int = 0
    schema_fallback: bool = False


def parse_arguments(model: type[BaseModel], call: ToolCall) -> Any:
    """Validate call.arguments against a tool's Params model."""
    try:
        return model.model_validate(call.arguments or {})
    except ValidationError as e:
        raise ToolArgumentError(
            f"Invalid arguments for {call.tool}: {e.error_count()} error(s)",
            tool=call.tool,
            errors=e.errors(include_url=False, include_context=False),
        ) from e


def resolve_call_schema(call: ToolCall, circuit_schema: Any = None, schematic_json: Any = None,
                        **fallback) -> CircuitSchema:
    """Resolve the schema argument of a call, flagging the call when the default was used."""
    schema, used_fallback = resolve_circuit_schema(circuit_schema, schematic_json, **fallback)
    call.schema_fallback = call.schema_fallback or used_fallback
    return schema


class ToolDispatcher:
    def __init__(self, logger: ToolLogger | None = None):
        self.tools: dict[str, Any] = {}
        self.call_log: list[ToolCall] = []
        self.logger = logger or ToolLogger()
        self.metrics = ToolMetrics()

    def register_tool(self, tool):
        self.tools[tool.name] = tool

    def describe(self) -> list[dict]:
        """Tool manifest: name, description, JSON schema, annotations."""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.Params.model_json_schema(),
                "annotations": {
                    "readOnlyHint": getattr(tool, "read_only", True),
                    "openWorldHint": getattr(tool, "open_world", False),
                },
            }
            for tool in self.tools.values()
        ]

    async def dispatch(self, call: ToolCall) -> dict:
        """Run a call. Records the outcome on the envelope; raises ToolError on failure."""
        self.call_log.append(call)
        tool = self.tools.get(call.tool)
        if not tool:
            call.status = "error"
            call.error = f"Tool '{call.tool}' not registered"
            raise UnknownToolError(call.tool)

        call.status = "in_progress"
        self.logger.tool_start(call.tool, call.caller)
        t0 = time.monotonic()
        try:
            result = await tool.handle(call)
        except ToolError as e:
            self._fail(call, str(e), t0)
            raise
        except Exception as e:
            self._fail(call, str(e), t0)
            raise ToolExecutionError(str(e), tool=call.tool) from e

        call.status = "done"
        call.result = result
        call.duration_ms = int((time.monotonic() - t0) * 1000)
        if call.schema_fallback:
            self.logger.schema_fallback(call.tool, "no usable circuit schema supplied")
        self.logger.tool_done(call.tool, call.duration_ms, keys=sorted(result))
        self.metrics.record_tool(call.tool, call.duration_ms, fallback=call.schema_fallback)
        return result

    def _fail(self, call: ToolCall, error: str, t0: float):
        call.status = "error"
        call.error = error
        call.duration_ms = int((time.monotonic() - t0) * 1000)
        self.logger.tool_error(call.tool, error, call.duration_ms)
        self.metrics.record_tool(call.tool, call.duration_ms, error=True)
