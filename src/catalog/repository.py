"""Database access to the catalog's metadata records.

Only the columns the feedback API needs for visibility checks are
read. Records are owned and maintained by the catalog itself.
"""

import logging
from typing import Any

from src.catalog.schemas import MetadataRecord, Principal, Profile
from src.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS metadata (
    uuid         TEXT PRIMARY KEY,
    title        TEXT NOT NULL DEFAULT '',
    is_published BOOLEAN NOT NULL DEFAULT FALSE,
    owner_id     TEXT,
    updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

_UPSERT_SQL = """
INSERT INTO metadata (uuid, title, is_published, owner_id)
VALUES ($1, $2, $3, $4)
ON CONFLICT (uuid) DO UPDATE SET
    title = EXCLUDED.title,
    is_published = EXCLUDED.is_published,
    owner_id = EXCLUDED.owner_id,
    updated_at = NOW()
RETURNING *
"""


def _row_to_record(row: Any) -> MetadataRecord:
    """Convert an asyncpg Record to a MetadataRecord."""
    return MetadataRecord(
        uuid=row["uuid"],
        title=row.get("title") or "",
        is_published=row.get("is_published", False),
        owner_id=row.get("owner_id"),
        updated_at=row.get("updated_at"),
    )


class CatalogRepository:
    """Lookup and visibility checks for metadata records."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the metadata table (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Metadata table ensured")

    async def upsert_record(self, record: MetadataRecord) -> MetadataRecord:
        """Insert or update a record."""
        row = await self._db.fetchrow(
            _UPSERT_SQL,
            record.uuid,
            record.title,
            record.is_published,
            record.owner_id,
        )
        return _row_to_record(row)

    async def get_record(self, metadata_uuid: str) -> MetadataRecord | None:
        """Get a record by uuid, or None if unknown."""
        row = await self._db.fetchrow(
            "SELECT * FROM metadata WHERE uuid = $1", metadata_uuid
        )
        if row is None:
            return None
        return _row_to_record(row)

    async def can_view_record(
        self,
        metadata_uuid: str,
        principal: Principal | None,
    ) -> MetadataRecord | None:
        """Return the record if the principal may view it, else None.

        Published records are visible to everyone. Unpublished ones are
        visible to their owner and to reviewers and above.
        """
        record = await self.get_record(metadata_uuid)
        if record is None:
            return None
        if record.is_published:
            return record
        if principal is None:
            return None
        if principal.has_profile(Profile.REVIEWER) or principal.username == record.owner_id:
            return record
        return None
