"""Tests for catalog records, profiles and view checks."""

from unittest.mock import AsyncMock

import pytest

from src.catalog.repository import CatalogRepository
from src.catalog.schemas import MetadataRecord, Principal, Profile


@pytest.fixture
def mock_database():
    db = AsyncMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.execute = AsyncMock()
    return db


def _row(is_published: bool, owner_id: str | None = "olga") -> dict:
    return {
        "uuid": "md-001",
        "title": "River gauges",
        "is_published": is_published,
        "owner_id": owner_id,
        "updated_at": None,
    }


class TestProfile:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Reviewer", Profile.REVIEWER),
            ("reviewer", Profile.REVIEWER),
            ("UserAdmin", Profile.USER_ADMIN),
            ("user_admin", Profile.USER_ADMIN),
            ("RegisteredUser", Profile.REGISTERED_USER),
            ("administrator", Profile.ADMINISTRATOR),
        ],
    )
    def test_parse(self, raw, expected):
        assert Profile.parse(raw) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Invalid profile"):
            Profile.parse("superuser")

    def test_ordering(self):
        assert Profile.REGISTERED_USER < Profile.EDITOR < Profile.REVIEWER
        assert Profile.REVIEWER < Profile.USER_ADMIN < Profile.ADMINISTRATOR


class TestPrincipal:
    def test_has_profile_includes_higher(self):
        admin = Principal("ada", Profile.ADMINISTRATOR)
        assert admin.has_profile(Profile.REVIEWER)
        assert admin.is_authenticated

    def test_has_profile_excludes_lower(self):
        editor = Principal("ed", Profile.EDITOR)
        assert not editor.has_profile(Profile.REVIEWER)

    def test_default_profile(self):
        assert Principal("bob").profile is Profile.REGISTERED_USER


class TestCatalogRepository:
    @pytest.mark.asyncio
    async def test_get_record(self, mock_database):
        mock_database.fetchrow.return_value = _row(True)
        repo = CatalogRepository(mock_database)

        record = await repo.get_record("md-001")

        assert record == MetadataRecord(
            uuid="md-001", title="River gauges", is_published=True, owner_id="olga"
        )
        mock_database.fetchrow.assert_awaited_once_with(
            "SELECT * FROM metadata WHERE uuid = $1", "md-001"
        )

    @pytest.mark.asyncio
    async def test_upsert_record(self, mock_database):
        mock_database.fetchrow.return_value = _row(False)
        repo = CatalogRepository(mock_database)

        record = await repo.upsert_record(
            MetadataRecord(uuid="md-001", title="River gauges", owner_id="olga")
        )

        assert record.uuid == "md-001"
        assert mock_database.fetchrow.call_args.args[1:] == (
            "md-001", "River gauges", False, "olga",
        )


class TestCanViewRecord:
    @pytest.mark.asyncio
    async def test_unknown_record(self, mock_database):
        repo = CatalogRepository(mock_database)
        assert await repo.can_view_record("nope", Principal("ada", Profile.ADMINISTRATOR)) is None

    @pytest.mark.asyncio
    async def test_published_visible_to_anonymous(self, mock_database):
        mock_database.fetchrow.return_value = _row(True)
        repo = CatalogRepository(mock_database)

        record = await repo.can_view_record("md-001", None)

        assert record is not None
        assert record.uuid == "md-001"

    @pytest.mark.asyncio
    async def test_unpublished_hidden_from_anonymous(self, mock_database):
        mock_database.fetchrow.return_value = _row(False)
        repo = CatalogRepository(mock_database)

        assert await repo.can_view_record("md-001", None) is None

    @pytest.mark.asyncio
    async def test_unpublished_visible_to_owner(self, mock_database):
        mock_database.fetchrow.return_value = _row(False, owner_id="olga")
        repo = CatalogRepository(mock_database)

        assert await repo.can_view_record("md-001", Principal("olga")) is not None

    @pytest.mark.asyncio
    async def test_unpublished_visible_to_reviewer(self, mock_database):
        mock_database.fetchrow.return_value = _row(False)
        repo = CatalogRepository(mock_database)

        principal = Principal("rita", Profile.REVIEWER)
        assert await repo.can_view_record("md-001", principal) is not None

    @pytest.mark.asyncio
    async def test_unpublished_hidden_from_other_editor(self, mock_database):
        mock_database.fetchrow.return_value = _row(False)
        repo = CatalogRepository(mock_database)

        assert await repo.can_view_record("md-001", Principal("ed", Profile.EDITOR)) is None
