"""
Request and response models for the user feedback API.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(
        ...,
        description="Error message",
    )
    error_type: str = Field(
        default="error",
        description="Error type",
    )


class ComponentHealth(BaseModel):
    """Health of a single dependency."""

    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency in milliseconds")
    details: dict = Field(default_factory=dict, description="Extra diagnostic details")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall service status: healthy, degraded, or unhealthy",
    )
    rating_mode: str | None = Field(
        default=None,
        description="Current local rating mode (off, basic, advanced)",
    )
    components: dict[str, ComponentHealth] = Field(
        default_factory=dict,
        description="Per-dependency health",
    )


# User feedback models


class UserFeedbackDTO(BaseModel):
    """Wire representation of a user feedback.

    Used both as the body of ``POST /userfeedback`` and as the item
    returned by the read endpoints. Server-managed fields (uuid, status,
    approver, date) are ignored on input.
    """

    uuid: str | None = Field(default=None, description="Feedback UUID")
    parent_uuid: str | None = Field(
        default=None,
        description="UUID of the feedback this one replies to",
    )
    metadata_uuid: str = Field(
        ...,
        min_length=1,
        description="UUID of the rated metadata record",
    )
    comment_text: str | None = Field(default=None, description="Free-text comment")
    rating: dict[str, int] = Field(
        default_factory=dict,
        description="Score per rating criterion (0 = not rated)",
    )
    rating_avg: float | None = Field(
        default=None,
        description="Average of the non-zero scores of this feedback",
    )
    keywords: list[str] = Field(default_factory=list, description="Free tags")
    author_name: str | None = Field(default=None, description="Author display name")
    author_user_id: str | None = Field(default=None, description="Username of a logged-in author")
    author_email: str | None = Field(default=None, description="Author contact email")
    author_organization: str | None = Field(default=None, description="Author organisation")
    author_privacy: bool = Field(
        default=False,
        description="Hide the author's contact details from readers",
    )
    approver_name: str | None = Field(default=None, description="Reviewer who published it")
    date: str | None = Field(default=None, description="Creation time (ISO 8601)")
    published: bool = Field(default=False, description="Whether the feedback is published")


class RatingAverageResponse(BaseModel):
    """Aggregate rating for a metadata record."""

    rating_averages: dict[str, float] = Field(
        default_factory=dict,
        description="Mean non-zero score per criterion",
    )
    average: float | None = Field(
        default=None,
        description="Mean of every non-zero score, null when nothing was rated",
    )
    count: int = Field(..., description="Number of feedback considered")
