"""
Typed exception hierarchy for tool-call error handling.

Each failure mode of the dispatcher has its own exception type so the
HTTP layer can map it to a status code. All inherit from ToolError.
The schematic layout core never raises; these cover the tool surface only.
"""


class ToolError(Exception):
    """Base exception for all tool-call errors."""
    def __init__(self, message: str, tool: str = "", stage: str = "", recoverable: bool = False):
        self.tool = tool
        self.stage = stage
        self.recoverable = recoverable
        super().__init__(message)


class UnknownToolError(ToolError):
    """No tool is registered under the requested name."""
    def __init__(self, tool: str):
        super().__init__(f"Tool '{tool}' not registered", tool=tool, stage="lookup")


class ToolArgumentError(ToolError):
    """Tool arguments failed validation against the tool's parameter model."""
    def __init__(self, message: str, tool: str = "", errors: list | None = None):
        self.errors = errors or []
        super().__init__(message, tool=tool, stage="arguments", recoverable=True)


class ToolExecutionError(ToolError):
    """A tool handler raised while running."""
    def __init__(self, message: str, tool: str = ""):
        super().__init__(message, tool=tool, stage="execute")


class JSONParseError(ToolError):
    """Text passed where JSON was expected could not be parsed."""
    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text[:200]
        super().__init__(message, stage="json_parse", recoverable=True)
