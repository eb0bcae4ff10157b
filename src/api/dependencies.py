"""
Dependency injection for FastAPI endpoints.
"""

from src.catalog.repository import CatalogRepository
from src.storage.database import Database
from src.system_settings.service import SettingManager
from src.userfeedback.config import UserFeedbackConfig
from src.userfeedback.repository import UserFeedbackRepository
from src.userfeedback.service import UserFeedbackService

# Global service instances (initialized on first request)
_database: Database | None = None
_userfeedback_service: UserFeedbackService | None = None
_setting_manager: SettingManager | None = None
_catalog_repository: CatalogRepository | None = None


async def get_database() -> Database:
    """Get the shared database, connecting on first use."""
    global _database

    if _database is None:
        database = Database()
        await database.connect()
        _database = database

    return _database


async def get_userfeedback_service() -> UserFeedbackService:
    """
    Get user feedback service instance.

    Creates a singleton service over the shared database pool.
    """
    global _userfeedback_service

    if _userfeedback_service is None:
        database = await get_database()
        _userfeedback_service = UserFeedbackService(
            repository=UserFeedbackRepository(database),
            config=UserFeedbackConfig(),
        )

    return _userfeedback_service


async def get_setting_manager() -> SettingManager:
    """Get the cached setting manager."""
    global _setting_manager

    if _setting_manager is None:
        database = await get_database()
        _setting_manager = SettingManager(database)

    return _setting_manager


async def get_catalog_repository() -> CatalogRepository:
    """Get the catalog repository used for record visibility checks."""
    global _catalog_repository

    if _catalog_repository is None:
        database = await get_database()
        _catalog_repository = CatalogRepository(database)

    return _catalog_repository


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _database, _userfeedback_service, _setting_manager, _catalog_repository

    _userfeedback_service = None
    _setting_manager = None
    _catalog_repository = None

    if _database is not None:
        await _database.close()
        _database = None
