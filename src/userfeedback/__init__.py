"""User feedback: ratings and comments on catalog metadata records.

Components:
- UserFeedback: Dataclass mapping to the userfeedback table
- UserFeedbackConfig: Pydantic settings for feedback constraints
- UserFeedbackRepository: CRUD and publication queries
- UserFeedbackService: Authorship, status and size rules over the repository
- RatingAverage / compute_rating_average: On-the-fly rating aggregation
"""

from src.userfeedback.aggregation import (
    RatingAverage,
    average_of_ratings,
    compute_rating_average,
)
from src.userfeedback.config import UserFeedbackConfig
from src.userfeedback.repository import UserFeedbackRepository
from src.userfeedback.schemas import (
    FeedbackNotFoundError,
    FeedbackStatus,
    UserFeedback,
)
from src.userfeedback.service import UNLIMITED, UserFeedbackService

__all__ = [
    "FeedbackNotFoundError",
    "FeedbackStatus",
    "RatingAverage",
    "UNLIMITED",
    "UserFeedback",
    "UserFeedbackConfig",
    "UserFeedbackRepository",
    "UserFeedbackService",
    "average_of_ratings",
    "compute_rating_average",
]
