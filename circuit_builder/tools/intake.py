"""
Intake tools — photo analysis and project email search.

Both return canned data shaped like the real integrations would return.
"""
from typing import Optional

from pydantic import BaseModel, Field

from circuit_builder.schema import create_default_circuit_schema
from circuit_builder.tools.dispatcher import ToolCall, parse_arguments

EMAILS = [
    {
        "subject": "Re: Sensor module dimensions",
        "from": "supplier@example.com",
        "date": "2026-02-15",
        "snippet": "Board is 45mm x 20mm and works at 5V.",
        "extracted_specs": ["45mm x 20mm", "Operating voltage: 5V"],
    },
    {
        "subject": "Order confirmation for resistors",
        "from": "orders@example.com",
        "date": "2026-02-17",
        "snippet": "220 Ohm resistor pack ships in 2 business days.",
        "extracted_specs": ["220 Ohm", "Ship ETA: 2 business days"],
    },
]


class AnalyzePhotoParams(BaseModel):
    image: Optional[str] = Field(None, description="Image URL or file identifier from Google Photos")


class AnalyzePhotoTool:
    name = "analyze_photo"
    description = (
        "Analyze a circuit photo and infer components, dimensions, layout hints, "
        "and a draft circuit schema."
    )
    Params = AnalyzePhotoParams
    read_only = True
    open_world = False

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        draft = create_default_circuit_schema(description="Draft schema inferred from photo")
        return {
            "image": params.image or "",
            "detected_components": [
                "Arduino Uno compatible board",
                "Breadboard",
                "Jumper wires",
                "One LED",
            ],
            "dimensions": {"estimated_width_mm": 120, "estimated_height_mm": 80},
            "circuit_layout_hints": [
                "Keep sensor wires shorter than 20cm for signal stability.",
                "Route power and signal lines separately to reduce noise.",
            ],
            "extracted_circuit_schema": draft.model_dump(),
        }


class SearchEmailsParams(BaseModel):
    query: Optional[str] = Field(None, description="Search phrase, e.g. component order or product dimensions")


def search_emails(query: str | None) -> list[dict]:
    needle = (query or "").lower()
    if not needle:
        return [dict(e) for e in EMAILS]
    return [dict(e) for e in EMAILS if needle in f"{e['subject']} {e['snippet']}".lower()]


class SearchEmailsTool:
    name = "search_emails"
    description = "Search project-related emails and extract relevant snippets and specifications."
    Params = SearchEmailsParams
    read_only = True
    open_world = False

    async def handle(self, call: ToolCall) -> dict:
        params = parse_arguments(self.Params, call)
        return {"query": params.query or "", "snippets": search_emails(params.query)}
