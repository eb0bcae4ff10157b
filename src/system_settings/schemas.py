"""System setting keys and values."""

from enum import Enum

# Setting that switches the local rating feature
LOCAL_RATING_ENABLE = "system/localrating/enable"


class RatingsSetting(str, Enum):
    """Values of the local rating setting.

    ``basic`` keeps the simple star rating elsewhere in the catalog;
    only ``advanced`` enables the user feedback API.
    """

    OFF = "off"
    BASIC = "basic"
    ADVANCED = "advanced"

    @classmethod
    def parse(cls, value: str | None) -> "RatingsSetting | None":
        """Parse a stored value, accepting legacy ``true``/``false``."""
        if value is None:
            return None
        normalized = value.strip().lower()
        if normalized == "false":
            return cls.OFF
        if normalized == "true":
            return cls.BASIC
        try:
            return cls(normalized)
        except ValueError:
            return None
