"""Tests for API key authentication and the reviewer check."""

import pytest
from fastapi import HTTPException

from src.api.auth import (
    DEV_PRINCIPAL,
    get_current_principal,
    parse_api_keys,
    require_reviewer,
)
from src.catalog.schemas import Principal, Profile


class TestParseApiKeys:
    def test_full_entries(self):
        keys = parse_api_keys("k1:rita:reviewer, k2:ada:Administrator")
        assert keys == {
            "k1": Principal("rita", Profile.REVIEWER),
            "k2": Principal("ada", Profile.ADMINISTRATOR),
        }

    def test_defaults(self):
        keys = parse_api_keys("bare,k2:bob")
        assert keys["bare"] == Principal("bare", Profile.REGISTERED_USER)
        assert keys["k2"] == Principal("bob", Profile.REGISTERED_USER)

    def test_blank_entries_skipped(self):
        assert parse_api_keys(" , ,") == {}

    def test_unknown_profile(self):
        with pytest.raises(ValueError, match="Invalid profile"):
            parse_api_keys("k1:eve:overlord")


class TestGetCurrentPrincipal:
    @pytest.mark.asyncio
    async def test_no_header_is_anonymous(self, monkeypatch):
        monkeypatch.setenv("API_KEYS", "k1:rita:reviewer")
        assert await get_current_principal(None) is None

    @pytest.mark.asyncio
    async def test_known_key(self, monkeypatch):
        monkeypatch.setenv("API_KEYS", "k1:rita:reviewer")
        assert await get_current_principal("k1") == Principal("rita", Profile.REVIEWER)

    @pytest.mark.asyncio
    async def test_unknown_key(self, monkeypatch):
        monkeypatch.setenv("API_KEYS", "k1:rita:reviewer")

        with pytest.raises(HTTPException) as exc_info:
            await get_current_principal("other")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_dev_mode_accepts_any_key(self, monkeypatch):
        monkeypatch.setenv("API_KEYS", "")
        assert await get_current_principal("whatever") is DEV_PRINCIPAL


class TestRequireReviewer:
    @pytest.mark.asyncio
    async def test_anonymous(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_reviewer(None)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("profile", [Profile.REGISTERED_USER, Profile.EDITOR])
    async def test_profile_too_low(self, profile):
        with pytest.raises(HTTPException) as exc_info:
            await require_reviewer(Principal("ed", profile))
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "profile", [Profile.REVIEWER, Profile.USER_ADMIN, Profile.ADMINISTRATOR]
    )
    async def test_reviewer_or_higher(self, profile):
        principal = Principal("rita", profile)
        assert await require_reviewer(principal) is principal
