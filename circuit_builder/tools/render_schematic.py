"""
Render Schematic — runs the layout engine over a circuit schema.

Returns both the scene graph (for clients that draw it themselves) and
the SVG text. Nets with fewer than two placed endpoints are listed as
skipped rather than drawn.
"""
from typing import Any, Optional

from pydantic import BaseModel, Field

from circuit_builder.metrics import ToolMetrics
from circuit_builder.schematic.render import render_schematic
from circuit_builder.tools.dispatcher import ToolCall, parse_arguments, resolve_call_schema


class RenderSchematicParams(BaseModel):
    circuit_schema: Optional[Any] = Field(None, description="Circuit schema JSON string or object")
    schematic_json: Optional[Any] = Field(None, description="Backward-compatible schematic object input")
    show_power: bool = Field(True, description="Draw the power summary badge in the top-right corner")


class RenderSchematicTool:
    name = "render_schematic"
    description = (
        "Lay out and route a circuit schema as a schematic diagram; returns "
        "a scene graph and SVG."
    )
    Params = RenderSchematicParams
    read_only = True
    open_world = False

    def __init__(self, logger=None):
        self.logger = logger

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        schema = resolve_call_schema(call, params.circuit_schema, params.schematic_json)
        power_info = schema.power_summary() if params.show_power else None

        result = render_schematic(schema.parts, schema.nets, power_info)
        drawn = result.nets_drawn
        skipped = [n.name for i, n in enumerate(schema.nets) if i not in result.drawn_indices]

        if self.logger:
            self.logger.render_done(
                parts=len(result.layout.placements), nets_drawn=len(drawn),
                nets_skipped=len(skipped), height=result.layout.height,
            )
        ToolMetrics().record_render()

        return {
            "width": result.scene.width,
            "height": result.scene.height,
            "nets_drawn": drawn,
            "nets_skipped": skipped,
            "scene": result.scene.to_dict(),
            "svg": result.scene.to_svg(),
        }
