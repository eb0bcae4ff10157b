"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.dependencies import (
    get_catalog_repository,
    get_setting_manager,
    get_userfeedback_service,
)
from src.catalog.repository import CatalogRepository
from src.catalog.schemas import MetadataRecord
from src.system_settings.schemas import RatingsSetting
from src.system_settings.service import SettingManager
from src.userfeedback.service import UserFeedbackService

# key:username:profile entries understood by src.api.auth
TEST_API_KEYS = (
    "reviewer-key:rita:reviewer,"
    "editor-key:ed:editor,"
    "admin-key:ada:administrator,"
    "user-key:bob"
)

REVIEWER = {"X-API-KEY": "reviewer-key"}
EDITOR = {"X-API-KEY": "editor-key"}
ADMIN = {"X-API-KEY": "admin-key"}
USER = {"X-API-KEY": "user-key"}


@pytest.fixture
def mock_feedback_service():
    """Mock UserFeedbackService."""
    service = AsyncMock(spec=UserFeedbackService)
    service.retrieve_user_feedback = AsyncMock(return_value=None)
    service.retrieve_user_feedback_list = AsyncMock(return_value=[])
    service.retrieve_user_feedback_for_metadata = AsyncMock(return_value=[])
    service.remove_user_feedback = AsyncMock(return_value=True)
    service.publish_user_feedback = AsyncMock(return_value=None)
    service.save_user_feedback = AsyncMock(side_effect=lambda fb, principal=None: fb)
    return service


@pytest.fixture
def mock_setting_manager():
    """Mock SettingManager in advanced rating mode."""
    manager = AsyncMock(spec=SettingManager)
    manager.get_rating_mode = AsyncMock(return_value=RatingsSetting.ADVANCED)
    return manager


@pytest.fixture
def mock_catalog():
    """Mock CatalogRepository where md-001 is a published record."""
    catalog = AsyncMock(spec=CatalogRepository)
    catalog.can_view_record = AsyncMock(
        return_value=MetadataRecord(uuid="md-001", is_published=True)
    )
    return catalog


@pytest.fixture
def app(monkeypatch, mock_feedback_service, mock_setting_manager, mock_catalog):
    """Application with test API keys and mocked dependencies."""
    monkeypatch.setenv("API_KEYS", TEST_API_KEYS)
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")

    application = create_app()
    application.dependency_overrides[get_userfeedback_service] = lambda: mock_feedback_service
    application.dependency_overrides[get_setting_manager] = lambda: mock_setting_manager
    application.dependency_overrides[get_catalog_repository] = lambda: mock_catalog

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """FastAPI TestClient with dependency overrides."""
    with TestClient(app) as c:
        yield c
