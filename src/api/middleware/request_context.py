"""
Request context middleware.

Assigns every request an id (taken from X-Request-ID or X-Correlation-ID
when the caller sends one), binds it to the structlog context, echoes it
in the response and logs one line per request. When tracing is enabled
the request is wrapped in a server span.
"""

import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from src.observability.tracing import get_tracer, is_tracing_enabled, traced

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_INCOMING_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")


def _request_id(request: Request) -> str:
    for header in _INCOMING_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Correlate logs, spans and responses with a per-request id."""

    async def dispatch(self, request: Request, call_next):
        request_id = _request_id(request)
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            authenticated="X-API-KEY" in request.headers,
        )
        start_time = time.perf_counter()

        try:
            if is_tracing_enabled():
                attributes = {
                    "http.method": request.method,
                    "http.target": request.url.path,
                    "http.request_id": request_id,
                }
                span_name = f"{request.method} {request.url.path}"
                with traced(get_tracer("userfeedback.api"), span_name, attributes) as span:
                    response = await call_next(request)
                    span.set_attribute("http.status_code", response.status_code)
            else:
                response = await call_next(request)

            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()
