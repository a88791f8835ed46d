"""
FastAPI server — tool endpoints, schematic SVG and A2A discovery.

GET  /tools           → tool manifest (name, description, input schema, hints)
POST /tools/{name}    → run one tool; JSON body is the tool's arguments
POST /schematic.svg   → circuit schema in, rendered schematic SVG out
GET  /a2a/discover    → A2A capability advertisement
GET  /health          → healthcheck
GET  /metrics         → per-tool call metrics
GET  /openapi.json    → OpenAPI 3.1 schema (auto-generated)
"""
from typing import Any

from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from circuit_builder import __version__
from circuit_builder.errors import ToolArgumentError, ToolError, UnknownToolError
from circuit_builder.logger import ToolLogger
from circuit_builder.metrics import ToolMetrics
from circuit_builder.middleware import RequestTracingMiddleware
from circuit_builder.tools.dispatcher import ToolCall, ToolDispatcher
from circuit_builder.tools.registry import create_dispatcher

app = FastAPI(
    title="Arduino Circuit Builder",
    description=(
        "Tool server for Arduino projects. Generates circuits, sketches and "
        "enclosures, validates wiring, and renders schematic diagrams from a "
        "normalized circuit schema."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTracingMiddleware)


def _dispatcher_for(request: Request) -> ToolDispatcher:
    logger = getattr(request.state, "logger", None)
    return create_dispatcher(logger or ToolLogger())


def _error_response(e: ToolError) -> JSONResponse:
    if isinstance(e, UnknownToolError):
        status = 404
    elif isinstance(e, ToolArgumentError):
        status = 422
    else:
        status = 500
    content = {"status": "error", "tool": e.tool, "stage": e.stage, "detail": str(e)}
    if isinstance(e, ToolArgumentError):
        content["errors"] = e.errors
    return JSONResponse(status_code=status, content=content)


## ── Tools ─────────────────────────────────────────────────────

@app.get("/tools")
async def list_tools():
    """Tool manifest with a JSON schema per tool."""
    return {"tools": create_dispatcher().describe()}


@app.post("/tools/{name}")
async def call_tool(name: str, request: Request, arguments: dict | None = Body(None)):
    """Run one tool with the request body as its arguments."""
    dispatcher = _dispatcher_for(request)
    call = ToolCall(tool=name, arguments=arguments or {}, caller="http")
    try:
        result = await dispatcher.dispatch(call)
    except ToolError as e:
        return _error_response(e)
    return {
        "status": call.status,
        "tool": call.tool,
        "duration_ms": call.duration_ms,
        "schema_fallback": call.schema_fallback,
        "result": result,
    }


@app.post("/schematic.svg")
async def schematic_svg(request: Request, circuit_schema: Any = Body(None)):
    """Render a circuit schema straight to SVG."""
    dispatcher = _dispatcher_for(request)
    call = ToolCall(tool="render_schematic", arguments={"circuit_schema": circuit_schema}, caller="http")
    try:
        result = await dispatcher.dispatch(call)
    except ToolError as e:
        return _error_response(e)
    return Response(
        content=result["svg"],
        media_type="image/svg+xml",
        headers={"X-Schema-Fallback": "1" if call.schema_fallback else "0"},
    )


## ── A2A Protocol ──────────────────────────────────────────────

@app.get("/a2a/discover")
async def a2a_discover():
    """Agent-to-Agent capability discovery. One capability per registered tool."""
    return {
        "agent": "arduino-circuit-builder",
        "version": __version__,
        "protocol": "a2a/1.0",
        "capabilities": [
            {
                "task": tool["name"],
                "description": tool["description"],
                "endpoint": f"/tools/{tool['name']}",
                "input_schema": tool["input_schema"],
            }
            for tool in create_dispatcher().describe()
        ],
    }


## ── Ops ───────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__, "tools": len(create_dispatcher().tools)}


@app.get("/metrics")
async def metrics():
    return ToolMetrics().snapshot()
