"""Setting manager with TTL caching."""

import logging
import time

from src.storage.database import Database
from src.system_settings.config import SystemSettingsConfig
from src.system_settings.repository import SettingsRepository
from src.system_settings.schemas import LOCAL_RATING_ENABLE, RatingsSetting

logger = logging.getLogger(__name__)


class SettingManager:
    """Cached access to system settings.

    Wraps SettingsRepository with a per-key TTL cache so that the
    rating-mode gate evaluated on every feedback request does not hit
    the database each time.
    """

    def __init__(
        self,
        database: Database,
        config: SystemSettingsConfig | None = None,
    ) -> None:
        self._config = config or SystemSettingsConfig()
        self._repo = SettingsRepository(database)
        self._cache: dict[str, tuple[str | None, float]] = {}

    @property
    def repository(self) -> SettingsRepository:
        """Access the underlying repository for direct DB operations."""
        return self._repo

    async def get_value(self, name: str) -> str | None:
        """Get a setting value (cached)."""
        now = time.monotonic()
        ttl = self._config.cache_ttl_seconds
        cached = self._cache.get(name)
        if cached is not None and (now - cached[1]) < ttl:
            return cached[0]

        value = await self._repo.get_value(name)
        self._cache[name] = (value, now)
        return value

    async def set_value(self, name: str, value: str) -> None:
        """Store a setting value and drop its cached copy."""
        await self._repo.set_value(name, value)
        self._cache.pop(name, None)

    async def get_rating_mode(self) -> RatingsSetting:
        """Current local rating mode, falling back to the configured default."""
        raw = await self.get_value(LOCAL_RATING_ENABLE)
        mode = RatingsSetting.parse(raw)
        if mode is None:
            if raw is not None:
                logger.warning(
                    "Unrecognized %s value %r, using %s",
                    LOCAL_RATING_ENABLE, raw, self._config.default_rating_mode.value,
                )
            return self._config.default_rating_mode
        return mode

    async def set_rating_mode(self, mode: RatingsSetting) -> None:
        await self.set_value(LOCAL_RATING_ENABLE, mode.value)

    def invalidate_cache(self) -> None:
        """Force-clear the cache so next access hits the DB."""
        self._cache.clear()
