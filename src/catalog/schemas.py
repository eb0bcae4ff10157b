"""Catalog-side types the feedback API reads: records and principals."""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum


class Profile(IntEnum):
    """User profiles, ordered by privilege.

    A check for a profile is satisfied by that profile or any higher one.
    """

    REGISTERED_USER = 1
    EDITOR = 2
    REVIEWER = 3
    USER_ADMIN = 4
    ADMINISTRATOR = 5

    @classmethod
    def parse(cls, value: str) -> "Profile":
        """Parse ``Reviewer``, ``reviewer``, ``UserAdmin`` or ``user_admin``."""
        normalized = value.strip().replace("_", "").replace("-", "").lower()
        for profile in cls:
            if profile.name.replace("_", "").lower() == normalized:
                return profile
        raise ValueError(
            f"Invalid profile {value!r}. "
            f"Must be one of: {[p.name.lower() for p in cls]}"
        )


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""

    username: str
    profile: Profile = Profile.REGISTERED_USER

    @property
    def is_authenticated(self) -> bool:
        return True

    def has_profile(self, profile: Profile) -> bool:
        return self.profile >= profile


@dataclass
class MetadataRecord:
    """Read-only view of a catalog metadata record."""

    uuid: str
    title: str = ""
    is_published: bool = False
    owner_id: str | None = None
    updated_at: datetime | None = None
