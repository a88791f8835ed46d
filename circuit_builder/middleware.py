"""
Request middleware — tracing, timing and per-request logging.

Each request gets a short id and a ToolLogger bound to it on
request.state, so tool-call log lines from that request share the id.
Responses carry X-Request-Id and X-Duration-Ms.
"""
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from circuit_builder.logger import ToolLogger


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Binds a request id and logger; adds id and duration headers."""

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = uuid.uuid4().hex[:8]
        logger = ToolLogger(request_id=request_id)
        request.state.request_id = request_id
        request.state.logger = logger

        t0 = time.monotonic()
        response = await call_next(request)
        duration_ms = int((time.monotonic() - t0) * 1000)

        response.headers["X-Request-Id"] = request_id
        response.headers["X-Duration-Ms"] = str(duration_ms)
        if self.log_requests:
            logger.info("http.request", method=request.method, path=request.url.path,
                        status=response.status_code, duration_ms=duration_ms)
        return response
