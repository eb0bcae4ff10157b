"""System settings: database-backed key/value settings such as the rating mode."""

from src.system_settings.config import SystemSettingsConfig
from src.system_settings.repository import SettingsRepository
from src.system_settings.schemas import LOCAL_RATING_ENABLE, RatingsSetting
from src.system_settings.service import SettingManager

__all__ = [
    "LOCAL_RATING_ENABLE",
    "RatingsSetting",
    "SettingManager",
    "SettingsRepository",
    "SystemSettingsConfig",
]
