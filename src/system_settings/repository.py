"""Database repository for the settings table."""

import logging

from src.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS settings (
    name       TEXT PRIMARY KEY,
    value      TEXT,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

_UPSERT_SQL = """
INSERT INTO settings (name, value)
VALUES ($1, $2)
ON CONFLICT (name) DO UPDATE SET
    value = EXCLUDED.value,
    updated_at = NOW()
"""


class SettingsRepository:
    """Key/value access to the settings table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the settings table (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Settings table ensured")

    async def get_value(self, name: str) -> str | None:
        """Get a setting value, or None if it is not set."""
        return await self._db.fetchval(
            "SELECT value FROM settings WHERE name = $1", name
        )

    async def set_value(self, name: str, value: str) -> None:
        """Insert or update a setting value."""
        await self._db.execute(_UPSERT_SQL, name, value)
        logger.info("Setting %s updated to %r", name, value)
