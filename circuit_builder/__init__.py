"""
Arduino Circuit Builder — tool server and schematic layout engine.

Public API:
    from circuit_builder import CircuitSchema, resolve_circuit_schema
    from circuit_builder import render_schematic, create_dispatcher
    from circuit_builder.schematic.layout import compute_layout
    from circuit_builder.config import CONFIG
"""
__version__ = "1.0.0"

from circuit_builder.config import CONFIG
from circuit_builder.schema import CircuitSchema, Net, NetConnection, Part, resolve_circuit_schema
from circuit_builder.schematic.render import render_schematic
from circuit_builder.tools.dispatcher import ToolCall, ToolDispatcher
from circuit_builder.tools.registry import create_dispatcher

__all__ = [
    "CircuitSchema", "Part", "Net", "NetConnection", "resolve_circuit_schema",
    "render_schematic", "ToolCall", "ToolDispatcher", "create_dispatcher", "CONFIG",
]
