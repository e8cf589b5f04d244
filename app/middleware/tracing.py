import logging
import time
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.metrics import REQUEST_COUNT, REQUEST_DURATION

logger = logging.getLogger(__name__)

TRACE_HEADER = "X-Request-ID"

# Copied into tasks created while handling a request, so webhook side effects
# log under the delivery that spawned them.
_trace_id: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)


def current_trace_id() -> Optional[str]:
    return _trace_id.get()


class TraceIdFilter(logging.Filter):
    """Adds ``trace_id`` to every record passing through a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = _trace_id.get() or "-"
        return True


def install_trace_filter(logger_: Optional[logging.Logger] = None) -> None:
    for handler in (logger_ or logging.getLogger()).handlers:
        if not any(isinstance(f, TraceIdFilter) for f in handler.filters):
            handler.addFilter(TraceIdFilter())


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Assigns a trace id per request, times it and records request metrics."""

    def __init__(self, app: ASGIApp, slow_request_seconds: float = 1.0):
        super().__init__(app)
        self.slow_request_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        trace_id = request.headers.get(TRACE_HEADER) or str(uuid.uuid4())
        request.state.trace_id = trace_id
        token = _trace_id.set(trace_id)
        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            self._record(request, response, process_time)
        finally:
            _trace_id.reset(token)

        response.headers[TRACE_HEADER] = trace_id
        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response

    def _record(self, request: Request, response: Response, process_time: float) -> None:
        # Route template keeps session ids out of the metric labels
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        REQUEST_DURATION.observe(process_time)
        REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status=response.status_code).inc()

        if process_time > self.slow_request_seconds:
            logger.warning(
                "Slow request %s %s took %.2fs",
                request.method, request.url.path, process_time,
            )
        else:
            logger.info("%s %s - %s - %.3fs", request.method, request.url.path, response.status_code, process_time)
