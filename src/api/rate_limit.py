"""
Rate limiting for feedback submission, backed by slowapi and Redis.

Logged-in callers are counted per API key and anonymous ones per client
address. Only ``POST /userfeedback`` is decorated; reads stay unlimited.
The limiter is a no-op unless RATE_LIMIT_ENABLED=true.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.api.auth import api_key_header
from src.config.settings import get_settings


def _get_rate_limit_key(request: Request) -> str:
    return request.headers.get(api_key_header.model.name) or get_remote_address(request)


def submission_limit() -> str:
    """Current limit string, e.g. ``"120/minute"``."""
    return get_settings().rate_limit_default


def create_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=_get_rate_limit_key,
        storage_uri=str(settings.redis_url),
        enabled=settings.rate_limit_enabled,
    )


limiter = create_limiter()
