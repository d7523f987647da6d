"""
Integration Tests for the current user endpoints and authentication.
"""

import json
import time
from datetime import timedelta
from unittest.mock import patch
from urllib.parse import urlencode

import pytest

from focusdesk.backend.core.security import compute_init_data_hash
from focusdesk.backend.core.utils import utc_now

BOT_TOKEN = "123456:TEST-TOKEN"


def _signed_init_data(user: dict) -> str:
    fields = {"auth_date": str(int(time.time())), "query_id": "AAE", "user": json.dumps(user)}
    fields["hash"] = compute_init_data_hash(fields, BOT_TOKEN)
    return urlencode(fields)


class TestMe:
    @pytest.mark.asyncio
    async def test_dev_login_registers_user(self, client, api):
        """Should create the user on first request with the dev header."""
        response = await client.get("/api/v1/me", headers={"X-Dev-Tg-Id": "424242"})

        data = api.assert_success(response)["data"]
        assert data["tg_id"] == 424242
        assert data["trial_started_at"] is None

    @pytest.mark.asyncio
    async def test_invalid_dev_id(self, client, api):
        response = await client.get("/api/v1/me", headers={"X-Dev-Tg-Id": "not-a-number"})

        api.assert_error(response, 401)

    @pytest.mark.asyncio
    async def test_signed_init_data_wins(self, client, api):
        """Should authenticate from Telegram init data and copy the profile."""
        init_data = _signed_init_data({"id": 777, "first_name": "Ann", "username": "ann"})

        with patch("focusdesk.backend.core.dependencies.get_settings") as get_settings:
            get_settings.return_value.telegram_bot_token = BOT_TOKEN
            response = await client.get(
                "/api/v1/me",
                headers={"X-Telegram-Init-Data": init_data, "X-Dev-Tg-Id": "1"},
            )

        data = api.assert_success(response)["data"]
        assert data["tg_id"] == 777
        assert data["first_name"] == "Ann"
        assert data["username"] == "ann"

    @pytest.mark.asyncio
    async def test_tampered_init_data(self, client, api):
        """Should reject init data whose signature does not match."""
        init_data = _signed_init_data({"id": 777}).replace("777", "778")

        with patch("focusdesk.backend.core.dependencies.get_settings") as get_settings:
            get_settings.return_value.telegram_bot_token = BOT_TOKEN
            response = await client.get("/api/v1/me", headers={"X-Telegram-Init-Data": init_data})

        api.assert_error(response, 401, "AUTH_UNAUTHORIZED")


class TestSubscription:
    @pytest.mark.asyncio
    async def test_fresh_user_is_active(self, client, api, make_user, auth_headers):
        """Should report active with no trial started."""
        user = await make_user()

        data = api.assert_success(
            await client.get("/api/v1/me/subscription", headers=auth_headers(user))
        )["data"]

        assert data["active"] is True
        assert data["trial_ends_at"] is None

    @pytest.mark.asyncio
    async def test_expired_trial(self, client, api, make_user, auth_headers):
        """Should report inactive once the trial window has passed."""
        user = await make_user(trial_started_at=utc_now() - timedelta(days=8))

        data = api.assert_success(
            await client.get("/api/v1/me/subscription", headers=auth_headers(user))
        )["data"]

        assert data["active"] is False
        assert data["trial_ends_at"] is not None

    @pytest.mark.asyncio
    async def test_paid_subscription_overrides_trial(self, client, api, make_user, auth_headers):
        user = await make_user(
            trial_started_at=utc_now() - timedelta(days=30),
            subscription_until=utc_now() + timedelta(days=30),
        )

        data = api.assert_success(
            await client.get("/api/v1/me/subscription", headers=auth_headers(user))
        )["data"]

        assert data["active"] is True
