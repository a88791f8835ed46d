"""
Structured JSON logger for tool-call observability.

Outputs one JSON object per log line, parseable by jq, Loki, CloudWatch.
Timestamps are ISO-8601 UTC. Tool context is present when known.
"""
import json
import sys
import time
from datetime import datetime, timezone

from circuit_builder.config import CONFIG


class ToolLogger:
    """Structured logger that writes JSON lines to stderr."""

    def __init__(self, request_id: str = "", stream=None, enabled: bool | None = None):
        self.request_id = request_id
        self.stream = stream or sys.stderr
        self.enabled = CONFIG.log_enabled if enabled is None else enabled
        self._start = time.monotonic()

    def _emit(self, level: str, event: str, tool: str = "", **fields):
        if not self.enabled:
            return
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "request": self.request_id,
            "elapsed_ms": int((time.monotonic() - self._start) * 1000),
        }
        if tool:
            record["tool"] = tool
        record.update(fields)
        self.stream.write(json.dumps(record, default=str) + "\n")
        self.stream.flush()

    def info(self, event: str, tool: str = "", **kw):
        self._emit("info", event, tool, **kw)

    def warn(self, event: str, tool: str = "", **kw):
        self._emit("warn", event, tool, **kw)

    def error(self, event: str, tool: str = "", **kw):
        self._emit("error", event, tool, **kw)

    def tool_start(self, tool: str, caller: str):
        self._emit("info", "tool.start", tool, caller=caller)

    def tool_done(self, tool: str, duration_ms: int, **result_fields):
        self._emit("info", "tool.done", tool, duration_ms=duration_ms, **result_fields)

    def tool_error(self, tool: str, error: str, duration_ms: int):
        self._emit("error", "tool.error", tool, error=error, duration_ms=duration_ms)

    def schema_fallback(self, tool: str, reason: str):
        self._emit("warn", "schema.fallback", tool, reason=reason)

    def render_done(self, parts: int, nets_drawn: int, nets_skipped: int, height: float):
        self._emit("info", "schematic.render", parts=parts, nets_drawn=nets_drawn,
                   nets_skipped=nets_skipped, height=height)
