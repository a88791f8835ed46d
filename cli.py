#!/usr/bin/env python3
"""
Arduino Circuit Builder CLI — run tools and render schematics locally.

Usage:
  python cli.py tools                                        # List registered tools
  python cli.py call generate_circuit --args '{"description": "servo"}'
  python cli.py render schema.json -o schematic.svg          # Schema file to SVG
  python cli.py serve                                        # Start web server
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))


def cmd_tools(args):
    """List registered tools."""
    from circuit_builder.tools.registry import create_dispatcher
    for tool in create_dispatcher().describe():
        hints = tool["annotations"]
        flags = "ro" if hints["readOnlyHint"] else "rw"
        if hints["openWorldHint"]:
            flags += ",open"
        print(f"  {tool['name']:<22} [{flags:<7}] {tool['description']}")


def cmd_call(args):
    """Run one tool and print its result as JSON."""
    from circuit_builder.errors import ToolError
    from circuit_builder.tools.dispatcher import ToolCall
    from circuit_builder.tools.registry import create_dispatcher

    try:
        arguments = json.loads(args.args) if args.args else {}
    except json.JSONDecodeError as e:
        print(f"Invalid --args JSON: {e}", file=sys.stderr)
        sys.exit(2)

    call = ToolCall(tool=args.tool, arguments=arguments, caller="cli")
    try:
        result = asyncio.run(create_dispatcher().dispatch(call))
    except ToolError as e:
        print(f"Error [{e.stage}]: {e}", file=sys.stderr)
        for err in getattr(e, "errors", []):
            print(f"  {'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        sys.exit(1)

    text = json.dumps(result, indent=2)
    if args.output:
        Path(args.output).write_text(text)
        print(f"Saved to {args.output}", file=sys.stderr)
    else:
        print(text)
    if call.schema_fallback:
        print("Note: no usable circuit schema supplied, default circuit used", file=sys.stderr)


def cmd_render(args):
    """Render a circuit schema file to SVG."""
    from circuit_builder.config import CONFIG
    from circuit_builder.tools.dispatcher import ToolCall
    from circuit_builder.tools.registry import create_dispatcher

    raw = Path(args.schema).read_text()
    call = ToolCall(tool="render_schematic", arguments={"circuit_schema": raw}, caller="cli")
    result = asyncio.run(create_dispatcher().dispatch(call))

    out = Path(args.output) if args.output else Path(CONFIG.output_dir) / f"{Path(args.schema).stem}.svg"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(result["svg"])

    print(f"Canvas:  {result['width']}x{result['height']}")
    print(f"Drawn:   {', '.join(result['nets_drawn']) or '-'}")
    if result["nets_skipped"]:
        print(f"Skipped: {', '.join(result['nets_skipped'])}")
    if call.schema_fallback:
        print("Warning: schema unusable, rendered the default circuit", file=sys.stderr)
    print(f"\nSaved to {out}", file=sys.stderr)


def cmd_serve(args):
    """Start the web server."""
    import uvicorn
    from circuit_builder.config import CONFIG
    host = args.host or CONFIG.host
    port = args.port or CONFIG.port
    print(f"Starting server on {host}:{port}")
    uvicorn.run("circuit_builder.api.server:app", host=host, port=port, reload=args.reload)


def main():
    parser = argparse.ArgumentParser(
        description="Arduino Circuit Builder — circuit tools and schematic rendering",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command")

    # tools
    sub.add_parser("tools", help="List registered tools")

    # call
    p_call = sub.add_parser("call", help="Run one tool")
    p_call.add_argument("tool", help="Tool name")
    p_call.add_argument("--args", default=None, help="Tool arguments as a JSON object")
    p_call.add_argument("-o", "--output", help="Save result to file")

    # render
    p_render = sub.add_parser("render", help="Render a circuit schema JSON file to SVG")
    p_render.add_argument("schema", help="Path to circuit schema JSON")
    p_render.add_argument("-o", "--output", help="SVG output path")

    # serve
    p_serve = sub.add_parser("serve", help="Start web server")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.add_argument("--reload", action="store_true")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        return

    {"tools": cmd_tools, "call": cmd_call, "render": cmd_render, "serve": cmd_serve}[args.command](args)


if __name__ == "__main__":
    main()
