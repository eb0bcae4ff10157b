"""
API authentication using X-API-KEY header.

Each configured key maps to a principal (username and profile). Requests
without a key are anonymous; feedback reads and creation are open to
anonymous callers, deletion and publication need a Reviewer.
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from src.catalog.schemas import Principal, Profile
from src.config.settings import get_settings

# API key header scheme
api_key_header = APIKeyHeader(name="X-API-KEY", auto_error=False)

# Principal used for any key while API_KEYS is empty (dev mode)
DEV_PRINCIPAL = Principal(username="dev", profile=Profile.ADMINISTRATOR)


@lru_cache
def parse_api_keys(raw: str) -> dict[str, Principal]:
    """
    Parse ``key[:username[:profile]]`` entries separated by commas.

    A key without a username authenticates as a user named after the key;
    a missing profile defaults to RegisteredUser.

    Raises:
        ValueError: If an entry names an unknown profile
    """
    principals: dict[str, Principal] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        key, _, rest = entry.partition(":")
        username, _, profile = rest.partition(":")
        principals[key.strip()] = Principal(
            username=username.strip() or key.strip(),
            profile=Profile.parse(profile) if profile.strip() else Profile.REGISTERED_USER,
        )
    return principals


async def get_current_principal(
    api_key: str | None = Security(api_key_header),
) -> Principal | None:
    """
    Resolve the caller from the X-API-KEY header.

    Returns:
        The principal, or None for anonymous requests

    Raises:
        HTTPException: 401 if a key is given but not recognized
    """
    if api_key is None:
        return None

    settings = get_settings()

    # If no API keys configured, any key is accepted (dev mode)
    if not settings.api_keys.strip():
        return DEV_PRINCIPAL

    principal = parse_api_keys(settings.api_keys).get(api_key)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
    return principal


async def require_reviewer(
    principal: Principal | None = Depends(get_current_principal),
) -> Principal:
    """
    Require a principal with the Reviewer profile or higher.

    Raises:
        HTTPException: 401 when anonymous, 403 when the profile is too low
    """
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Provide X-API-KEY header.",
        )
    if not principal.has_profile(Profile.REVIEWER):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operation not allowed. Only Reviewers can do this.",
        )
    return principal
