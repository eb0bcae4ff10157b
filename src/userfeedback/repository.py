"""User feedback repository for CRUD and publication queries.

Uses asyncpg through the shared Database wrapper, providing storage,
retrieval, deletion and publication of UserFeedback records.
"""

import json
import logging
from typing import Any

from src.storage.database import Database
from src.userfeedback.schemas import FeedbackStatus, UserFeedback

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS userfeedback (
    uuid                TEXT PRIMARY KEY,
    metadata_uuid       TEXT NOT NULL,
    parent_uuid         TEXT REFERENCES userfeedback(uuid) ON DELETE SET NULL,
    comment_text        TEXT,
    ratings             JSONB NOT NULL DEFAULT '{}',
    keywords            TEXT[] NOT NULL DEFAULT '{}',
    author_user_id      TEXT,
    author_name         TEXT,
    author_email        TEXT,
    author_organization TEXT,
    author_privacy      BOOLEAN NOT NULL DEFAULT FALSE,
    approver_user_id    TEXT,
    status              TEXT NOT NULL DEFAULT 'draft',
    created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_userfeedback_metadata
    ON userfeedback(metadata_uuid, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_userfeedback_status
    ON userfeedback(status);
"""


class UserFeedbackRepository:
    """Repository for user feedback persistence and querying.

    Operates on the ``userfeedback`` table. ``published_only`` filters
    restrict results to feedback with status ``published``.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the userfeedback table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Userfeedback table ensured")

    async def create(self, feedback: UserFeedback) -> UserFeedback:
        """Insert a new feedback.

        Args:
            feedback: Feedback to persist.

        Returns:
            The created UserFeedback as stored.
        """
        sql = """
            INSERT INTO userfeedback (
                uuid, metadata_uuid, parent_uuid, comment_text, ratings,
                keywords, author_user_id, author_name, author_email,
                author_organization, author_privacy, approver_user_id,
                status, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14)
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            feedback.uuid,
            feedback.metadata_uuid,
            feedback.parent_uuid,
            feedback.comment_text,
            json.dumps(feedback.ratings),
            feedback.keywords,
            feedback.author_user_id,
            feedback.author_name,
            feedback.author_email,
            feedback.author_organization,
            feedback.author_privacy,
            feedback.approver_user_id,
            feedback.status.value,
            feedback.created_at,
        )
        return _row_to_feedback(row)

    async def get_by_uuid(
        self,
        feedback_uuid: str,
        *,
        published_only: bool = False,
    ) -> UserFeedback | None:
        """Get a feedback by uuid.

        Returns:
            UserFeedback or None if not found (or not published when
            ``published_only`` is set).
        """
        sql = "SELECT * FROM userfeedback WHERE uuid = $1"
        if published_only:
            sql += " AND status = 'published'"
        row = await self._db.fetchrow(sql, feedback_uuid)
        if row is None:
            return None
        return _row_to_feedback(row)

    async def list_recent(
        self,
        *,
        metadata_uuid: str | None = None,
        published_only: bool = False,
        limit: int | None = 50,
        offset: int = 0,
    ) -> list[UserFeedback]:
        """List feedback, newest first, with optional filtering.

        Args:
            metadata_uuid: Restrict to one catalog record.
            published_only: Skip drafts.
            limit: Maximum records to return, None for all of them.
            offset: Offset for pagination.
        """
        conditions: list[str] = []
        params: list[Any] = []
        param_idx = 1

        if metadata_uuid is not None:
            conditions.append(f"metadata_uuid = ${param_idx}")
            params.append(metadata_uuid)
            param_idx += 1

        if published_only:
            conditions.append(f"status = ${param_idx}")
            params.append(FeedbackStatus.PUBLISHED.value)
            param_idx += 1

        where_clause = ""
        if conditions:
            where_clause = "WHERE " + " AND ".join(conditions)

        page_clause = f"OFFSET ${param_idx}"
        if limit is not None:
            page_clause = f"LIMIT ${param_idx} OFFSET ${param_idx + 1}"
            params.append(limit)
        params.append(offset)

        sql = f"""
            SELECT * FROM userfeedback
            {where_clause}
            ORDER BY created_at DESC
            {page_clause}
        """

        rows = await self._db.fetch(sql, *params)
        return [_row_to_feedback(row) for row in rows]

    async def list_by_metadata(
        self,
        metadata_uuid: str,
        *,
        published_only: bool = False,
        limit: int | None = 50,
        offset: int = 0,
    ) -> list[UserFeedback]:
        """List feedback for a single catalog record, newest first."""
        return await self.list_recent(
            metadata_uuid=metadata_uuid,
            published_only=published_only,
            limit=limit,
            offset=offset,
        )

    async def delete(self, feedback_uuid: str) -> bool:
        """Delete a feedback.

        Returns:
            True if a row was deleted, False if the uuid was unknown.
        """
        result = await self._db.execute(
            "DELETE FROM userfeedback WHERE uuid = $1", feedback_uuid
        )
        return result.endswith(" 1")

    async def publish(self, feedback_uuid: str, approver_user_id: str | None) -> bool:
        """Mark a feedback as published and record who approved it.

        Publishing an already published feedback refreshes the approver.

        Returns:
            True if updated, False if the uuid was unknown.
        """
        sql = """
            UPDATE userfeedback
            SET status = 'published', approver_user_id = $2
            WHERE uuid = $1
            RETURNING uuid
        """
        result = await self._db.fetchval(sql, feedback_uuid, approver_user_id)
        return result is not None


def _row_to_feedback(row: Any) -> UserFeedback:
    """Convert an asyncpg Record to a UserFeedback."""
    ratings = row.get("ratings") or {}
    if isinstance(ratings, str):
        ratings = json.loads(ratings)

    return UserFeedback(
        uuid=row["uuid"],
        metadata_uuid=row["metadata_uuid"],
        parent_uuid=row.get("parent_uuid"),
        comment_text=row.get("comment_text"),
        ratings={str(k): int(v) for k, v in ratings.items()},
        keywords=list(row.get("keywords") or []),
        author_user_id=row.get("author_user_id"),
        author_name=row.get("author_name"),
        author_email=row.get("author_email"),
        author_organization=row.get("author_organization"),
        author_privacy=row.get("author_privacy", False),
        approver_user_id=row.get("approver_user_id"),
        status=FeedbackStatus(row["status"]),
        created_at=row["created_at"],
    )
