"""User feedback service.

Business rules around the repository: who may author what, which
status a new feedback starts in, list size limits and publication.
"""

import logging

from src.catalog.schemas import Principal
from src.observability.tracing import get_tracer, traced
from src.userfeedback.config import UserFeedbackConfig
from src.userfeedback.repository import UserFeedbackRepository
from src.userfeedback.schemas import (
    FeedbackNotFoundError,
    FeedbackStatus,
    UserFeedback,
)

logger = logging.getLogger(__name__)

# Page size meaning "everything"; never capped
UNLIMITED = -1


class UserFeedbackService:
    """Feedback operations used by the REST layer.

    Feedback written by a logged-in principal is published immediately
    with that principal as approver. Anonymous feedback starts as a
    draft and needs a reviewer to publish it.
    """

    def __init__(
        self,
        repository: UserFeedbackRepository,
        config: UserFeedbackConfig | None = None,
    ) -> None:
        self._repo = repository
        self._config = config or UserFeedbackConfig()
        self._tracer = get_tracer("userfeedback.service")

    @property
    def repository(self) -> UserFeedbackRepository:
        """Access the underlying repository for direct DB operations."""
        return self._repo

    def _resolve_limit(self, size: int | None) -> int | None:
        """Map a requested page size to a query limit (None = no LIMIT)."""
        if size is None or size == UNLIMITED:
            return None
        if size < 1:
            raise ValueError(f"Invalid size {size}. Must be -1 or a positive integer.")
        return min(size, self._config.max_list_size)

    def prepare(self, feedback: UserFeedback, principal: Principal | None) -> UserFeedback:
        """Apply authorship and status rules to a new feedback.

        Raises:
            ValueError: If a rating is out of range or an anonymous
                feedback has no author name.
        """
        scale_max = self._config.rating_scale_max
        for criterion, score in feedback.ratings.items():
            if score > scale_max:
                raise ValueError(
                    f"Invalid rating {score} for criterion {criterion!r}. "
                    f"Must be between 0 and {scale_max}."
                )

        comment = feedback.comment_text
        if comment and len(comment) > self._config.max_comment_length:
            feedback.comment_text = comment[: self._config.max_comment_length]

        if principal is not None and principal.is_authenticated:
            feedback.author_user_id = principal.username
            feedback.approver_user_id = principal.username
            feedback.status = FeedbackStatus.PUBLISHED
        else:
            author_name = (feedback.author_name or "").strip()
            if not author_name:
                raise ValueError("Anonymous feedback requires an author_name")
            feedback.author_name = author_name
            feedback.author_user_id = None
            feedback.approver_user_id = None
            feedback.status = FeedbackStatus.DRAFT

        return feedback

    async def save_user_feedback(
        self,
        feedback: UserFeedback,
        principal: Principal | None = None,
    ) -> UserFeedback:
        """Validate and persist a new feedback.

        Raises:
            ValueError: If the feedback fails ``prepare`` or replies to
                an unknown parent feedback.
        """
        feedback = self.prepare(feedback, principal)
        if feedback.parent_uuid is not None:
            parent = await self._repo.get_by_uuid(feedback.parent_uuid)
            if parent is None:
                raise ValueError(f"Unknown parent_uuid {feedback.parent_uuid!r}")
        with traced(self._tracer, "userfeedback.save", {"metadata_uuid": feedback.metadata_uuid}):
            created = await self._repo.create(feedback)
        logger.info(
            "Saved user feedback %s on %s (%s)",
            created.uuid, created.metadata_uuid, created.status.value,
        )
        return created

    async def retrieve_user_feedback(
        self,
        feedback_uuid: str,
        published_only: bool = True,
    ) -> UserFeedback | None:
        """Get one feedback, or None if unknown or hidden by ``published_only``."""
        return await self._repo.get_by_uuid(feedback_uuid, published_only=published_only)

    async def retrieve_user_feedback_list(
        self,
        size: int | None = UNLIMITED,
        published_only: bool = True,
    ) -> list[UserFeedback]:
        """List feedback across all records, newest first."""
        return await self._repo.list_recent(
            published_only=published_only,
            limit=self._resolve_limit(size),
        )

    async def retrieve_user_feedback_for_metadata(
        self,
        metadata_uuid: str,
        size: int | None = UNLIMITED,
        published_only: bool = True,
    ) -> list[UserFeedback]:
        """List feedback for one catalog record, newest first."""
        return await self._repo.list_by_metadata(
            metadata_uuid,
            published_only=published_only,
            limit=self._resolve_limit(size),
        )

    async def remove_user_feedback(self, feedback_uuid: str) -> bool:
        """Delete a feedback. Returns False when the uuid was unknown."""
        deleted = await self._repo.delete(feedback_uuid)
        if deleted:
            logger.info("Removed user feedback %s", feedback_uuid)
        else:
            logger.debug("No user feedback %s to remove", feedback_uuid)
        return deleted

    async def publish_user_feedback(
        self,
        feedback_uuid: str,
        approver: Principal | None,
    ) -> None:
        """Publish a draft feedback.

        Raises:
            FeedbackNotFoundError: If the uuid does not exist.
        """
        approver_id = approver.username if approver is not None else None
        with traced(self._tracer, "userfeedback.publish", {"feedback_uuid": feedback_uuid}):
            updated = await self._repo.publish(feedback_uuid, approver_id)
        if not updated:
            raise FeedbackNotFoundError(feedback_uuid)
        logger.info("Published user feedback %s (approver=%s)", feedback_uuid, approver_id)
