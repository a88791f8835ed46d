"""
Export Project — bundle manifest and file previews for a project.
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from circuit_builder.config import CONFIG
from circuit_builder.schema import CircuitSchema, circuit_schema_to_string
from circuit_builder.tools.dispatcher import ToolCall, parse_arguments, resolve_call_schema

BUNDLED_FILES = [
    "sketch.ino",
    "circuit_schema.json",
    "bom.csv",
    "validation_report.md",
    "enclosure.stl",
]

PLACEHOLDER_SKETCH = "// Placeholder sketch\nvoid setup() {}\nvoid loop() {}\n"

# github exports are a plain-text manifest
EXTENSIONS = {"zip": "zip", "pdf": "pdf", "github": "txt"}


class ExportProjectParams(BaseModel):
    project_id: str = Field("project-default", description="Project identifier")
    format: Literal["zip", "pdf", "github"] = Field("zip", description="Desired export format")
    circuit_schema: Optional[Any] = Field(None, description="Optional normalized circuit schema")
    arduino_code: Optional[str] = Field(None, description="Optional Arduino sketch source")


def bom_csv(schema: CircuitSchema) -> str:
    return "\n".join(f"{p.ref},{p.name},{p.quantity},{p.mpn or ''}" for p in schema.parts)


class ExportProjectTool:
    name = "export_project"
    description = "Export project assets, including sketch, circuit schema, BOM, and enclosure files."
    Params = ExportProjectParams
    read_only = True
    open_world = False

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        schema = resolve_call_schema(call, params.circuit_schema)
        ext = EXTENSIONS[params.format]
        return {
            "project_id": params.project_id,
            "format": params.format,
            "bundle_url": f"{CONFIG.export_base_url.rstrip('/')}/{params.project_id}.{ext}",
            "bundled_files": list(BUNDLED_FILES),
            "preview": {
                "sketch_ino": params.arduino_code if params.arduino_code is not None else PLACEHOLDER_SKETCH,
                "circuit_schema_json": circuit_schema_to_string(schema),
                "bom_csv": bom_csv(schema),
            },
        }
