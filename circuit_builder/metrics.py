"""
Lightweight tool-call metrics collector.

Tracks per-tool execution times, error rates, and how often a tool had to
fall back to the default circuit schema. Thread-safe singleton.
"""
import time
import threading
from dataclasses import dataclass
from collections import defaultdict


@dataclass
class ToolStats:
    """Per-tool execution statistics."""
    calls: int = 0
    total_ms: int = 0
    errors: int = 0
    schema_fallbacks: int = 0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / max(1, self.calls)

    @property
    def error_rate(self) -> float:
        return self.errors / max(1, self.calls)

    def record(self, duration_ms: int, error: bool = False, fallback: bool = False):
        self.calls += 1
        self.total_ms += duration_ms
        if error:
            self.errors += 1
        if fallback:
            self.schema_fallbacks += 1


class ToolMetrics:
    """Global metrics singleton. Thread-safe."""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._tools = defaultdict(ToolStats)
                    cls._instance._renders = 0
                    cls._instance._start = time.time()
        return cls._instance

    def record_tool(self, tool: str, duration_ms: int, error: bool = False, fallback: bool = False):
        with self._lock:
            self._tools[tool].record(duration_ms, error, fallback)

    def record_render(self):
        with self._lock:
            self._renders += 1

    def snapshot(self) -> dict:
        uptime = time.time() - self._start
        with self._lock:
            return {
                "uptime_s": round(uptime, 1),
                "total_calls": sum(s.calls for s in self._tools.values()),
                "schematic_renders": self._renders,
                "tools": {
                    name: {
                        "calls": s.calls,
                        "avg_ms": round(s.avg_ms),
                        "error_rate": round(s.error_rate, 3),
                        "schema_fallbacks": s.schema_fallbacks,
                    }
                    for name, s in self._tools.items()
                },
            }
