"""Configuration for the system settings store."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.system_settings.schemas import RatingsSetting


class SystemSettingsConfig(BaseSettings):
    """Settings for setting lookups and caching."""

    model_config = SettingsConfigDict(
        env_prefix="SYSTEM_SETTINGS_",
        case_sensitive=False,
        extra="ignore",
    )

    cache_ttl_seconds: int = Field(
        default=30,
        ge=0,
        description="TTL for in-memory setting values (0 = no caching)",
    )
    default_rating_mode: RatingsSetting = Field(
        default=RatingsSetting.ADVANCED,
        description="Rating mode used when the setting is missing or unreadable",
    )
