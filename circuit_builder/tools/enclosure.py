"""
Generate 3D Case — OpenSCAD enclosure around the board.

Board size comes from the caller or defaults to an Uno footprint, with the
height estimated from the part count. Style presets change the wall margin
(rugged) and cut vent slots (vented).
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from circuit_builder.schematic.scene import fmt_number
from circuit_builder.tools.dispatcher import ToolCall, parse_arguments, resolve_call_schema

UNO_LENGTH_MM = 68.6
UNO_WIDTH_MM = 53.4
WALL_MM = 2
VENT_PITCH_MM = 6


class BoardSize(BaseModel):
    length_mm: float = Field(..., description="Board length in millimeters")
    width_mm: float = Field(..., description="Board width in millimeters")
    height_mm: float = Field(20, description="Board max height including components in millimeters")


class Generate3DCaseParams(BaseModel):
    circuit_schema: Optional[Any] = Field(None, description="Circuit schema JSON string or object")
    board_size: Optional[BoardSize] = Field(None, description="Board dimensions")
    style: Literal["minimal", "vented", "rugged"] = Field("minimal", description="Case style preset")


def _mm(v: float) -> str:
    return fmt_number(round(v, 3))


def _vent_lines(vent_slots: int, width: float, height: float) -> list[str]:
    if vent_slots == 0:
        return []
    return [
        "    // Vents",
        f"    for (i = [0:{vent_slots - 1}]) {{",
        f"      translate([{VENT_PITCH_MM} + i * {VENT_PITCH_MM}, {_mm(width - WALL_MM)}, {_mm(height / 2)}]) "
        "rotate([90,0,0]) cylinder(h=2, r=1.5);",
        "    }",
    ]


def enclosure_scad(style: str, part_count: int, board: BoardSize) -> tuple[str, tuple[float, float, float]]:
    """OpenSCAD source and outer (length, width, height) of the case."""
    margin = 6 if style == "rugged" else 4
    vent_slots = 8 if style == "vented" else 0
    length = board.length_mm + margin * 2
    width = board.width_mm + margin * 2
    height = board.height_mm + margin * 2

    code = "\n".join([
        f"// Auto-generated case ({style})",
        f"// Parts: {part_count}",
        "module enclosure() {",
        "  difference() {",
        f"    cube([{_mm(length)}, {_mm(width)}, {_mm(height)}], center=false);",
        f"    translate([{WALL_MM},{WALL_MM},{WALL_MM}]) "
        f"cube([{_mm(length - 2 * WALL_MM)}, {_mm(width - 2 * WALL_MM)}, {_mm(height - WALL_MM)}], center=false);",
        *_vent_lines(vent_slots, width, height),
        "  }",
        "}",
        "enclosure();",
        "",
    ])
    return code, (length, width, height)


class Generate3DCaseTool:
    name = "generate_3d_case"
    description = "Generate OpenSCAD for an enclosure from a normalized circuit schema."
    Params = Generate3DCaseParams
    read_only = True
    open_world = False

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        schema = resolve_call_schema(call, params.circuit_schema)
        board = params.board_size or BoardSize(
            length_mm=UNO_LENGTH_MM,
            width_mm=UNO_WIDTH_MM,
            height_mm=max(20, 12 + len(schema.parts) * 1.5),
        )
        code, (length, width, height) = enclosure_scad(params.style, len(schema.parts), board)
        return {
            "openscad_code": code,
            "stl_file": f"generated/case-{params.style}-{_mm(length)}x{_mm(width)}x{_mm(height)}.stl",
            "derived_from_schema": {
                "part_count": len(schema.parts),
                "net_count": len(schema.nets),
            },
        }
