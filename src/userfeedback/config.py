"""User feedback configuration.

Controls constraints on feedback submission and listing. All settings
can be overridden via ``USERFEEDBACK_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class UserFeedbackConfig(BaseSettings):
    """Configuration for the user feedback system."""

    model_config = SettingsConfigDict(
        env_prefix="USERFEEDBACK_",
        case_sensitive=False,
        extra="ignore",
    )

    max_comment_length: int = Field(
        default=2000,
        ge=0,
        le=10000,
        description="Maximum length for feedback comments (longer ones are truncated)",
    )
    rating_scale_max: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Highest score accepted for a rating criterion",
    )
    max_list_size: int = Field(
        default=1000,
        ge=1,
        description="Upper bound for an explicit page size (size=-1 is never capped)",
    )
