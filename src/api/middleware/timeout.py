"""
Request timeout middleware.

A feedback request that is still waiting on Postgres after
``timeout_seconds`` is cancelled and answered with 504. Health checks
are exempt so a slow database shows up as "unhealthy" instead of a
gateway timeout.
"""

import asyncio

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

DEFAULT_EXEMPT_PREFIXES = ("/health",)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Cancel requests running longer than ``timeout_seconds``."""

    def __init__(
        self,
        app,
        timeout_seconds: float = 30.0,
        exempt_prefixes: tuple[str, ...] = DEFAULT_EXEMPT_PREFIXES,
    ):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.exempt_prefixes = exempt_prefixes

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.exempt_prefixes):
            return await call_next(request)

        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await call_next(request)
        except TimeoutError:
            logger.warning(
                "Request cancelled after timeout",
                method=request.method,
                path=request.url.path,
                timeout_seconds=self.timeout_seconds,
            )
            return JSONResponse(
                status_code=504,
                content={
                    "detail": "Request timed out",
                    "timeout_seconds": self.timeout_seconds,
                },
            )
