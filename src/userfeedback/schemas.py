"""Schema definitions for user feedback records.

Maps 1:1 to the ``userfeedback`` database table. Each record is a
rating and comment left by a user (logged in or anonymous) on one
catalog metadata record.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class FeedbackStatus(str, Enum):
    """Publication status of a feedback."""

    PUBLISHED = "published"
    DRAFT = "draft"


class FeedbackNotFoundError(LookupError):
    """Raised when a feedback uuid does not exist."""

    def __init__(self, feedback_uuid: str) -> None:
        super().__init__(f"User feedback {feedback_uuid!r} not found")
        self.feedback_uuid = feedback_uuid


@dataclass
class UserFeedback:
    """A persisted user feedback from the userfeedback table.

    Attributes:
        metadata_uuid: UUID of the catalog record being rated.
        uuid: Feedback identifier (uuid4 string).
        comment_text: Optional free-text comment.
        ratings: Score per rating criterion; 0 means the criterion was skipped.
        keywords: Free tags attached by the author.
        parent_uuid: Feedback this one replies to, if any.
        author_user_id: Username of a logged-in author.
        author_name: Display name given by an anonymous author.
        author_email: Contact email given by an anonymous author.
        author_organization: Organisation given by an anonymous author.
        author_privacy: Hide the author's contact details when serialized.
        approver_user_id: Username of the reviewer who published it.
        status: Publication status.
        created_at: When the feedback was submitted.
    """

    metadata_uuid: str
    uuid: str = field(default_factory=lambda: str(uuid.uuid4()))
    comment_text: str | None = None
    ratings: dict[str, int] = field(default_factory=dict)
    keywords: list[str] = field(default_factory=list)
    parent_uuid: str | None = None
    author_user_id: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    author_organization: str | None = None
    author_privacy: bool = False
    approver_user_id: str | None = None
    status: FeedbackStatus = FeedbackStatus.DRAFT
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if not self.metadata_uuid:
            raise ValueError("metadata_uuid is required")
        if isinstance(self.status, str):
            self.status = FeedbackStatus(self.status)
        for criterion, score in self.ratings.items():
            if score < 0:
                raise ValueError(
                    f"Invalid rating {score} for criterion {criterion!r}. "
                    "Must not be negative."
                )

    @property
    def is_published(self) -> bool:
        return self.status == FeedbackStatus.PUBLISHED
