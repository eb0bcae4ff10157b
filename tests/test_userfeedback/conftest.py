"""Shared fixtures for user feedback tests."""

from unittest.mock import AsyncMock

import pytest


@pytest.fixture
def mock_database():
    """Mock Database with async fetch methods."""
    db = AsyncMock()
    db.fetchrow = AsyncMock()
    db.fetch = AsyncMock(return_value=[])
    db.fetchval = AsyncMock()
    db.execute = AsyncMock(return_value="DELETE 1")
    return db


@pytest.fixture
def feedback_row(published_feedback):
    """A dict mimicking an asyncpg Record for the published feedback."""
    return {
        "uuid": published_feedback.uuid,
        "metadata_uuid": published_feedback.metadata_uuid,
        "parent_uuid": None,
        "comment_text": published_feedback.comment_text,
        "ratings": '{"usability": 4, "completeness": 5, "readability": 0}',
        "keywords": ["hydrology"],
        "author_user_id": "alice",
        "author_name": None,
        "author_email": None,
        "author_organization": None,
        "author_privacy": False,
        "approver_user_id": "alice",
        "status": "published",
        "created_at": published_feedback.created_at,
    }
