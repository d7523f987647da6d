"""
Security Utilities.

Telegram Mini App init data validation and token helpers.

Telegram signs the WebApp init data with a key derived from the bot token:

    secret_key = HMAC_SHA256(key="WebAppData", msg=bot_token)
    hash       = hex(HMAC_SHA256(key=secret_key, msg=data_check_string))

where data_check_string is every received field except ``hash``,
formatted as ``key=value``, sorted by key and joined with ``\\n``.
"""

import hashlib
import hmac
import json
import secrets
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl

from focusdesk.backend.core.exceptions import AuthenticationError
from focusdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

WEBAPP_KEY = b"WebAppData"


@dataclass
class TelegramIdentity:
    """Identity extracted from validated init data or the dev header."""

    tg_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    language_code: str | None = None

    @classmethod
    def from_user_payload(cls, payload: dict[str, Any]) -> "TelegramIdentity":
        return cls(
            tg_id=int(payload["id"]),
            username=payload.get("username"),
            first_name=payload.get("first_name"),
            last_name=payload.get("last_name"),
            language_code=payload.get("language_code"),
        )


def build_data_check_string(fields: dict[str, str]) -> str:
    """Build the data-check-string from init data fields (hash excluded)."""
    return "\n".join(
        f"{key}={fields[key]}" for key in sorted(fields) if key != "hash"
    )


def compute_init_data_hash(fields: dict[str, str], bot_token: str) -> str:
    """Compute the expected hash for init data fields."""
    secret_key = hmac.new(WEBAPP_KEY, bot_token.encode(), hashlib.sha256).digest()
    return hmac.new(
        secret_key,
        build_data_check_string(fields).encode(),
        hashlib.sha256,
    ).hexdigest()


def verify_init_data(
    init_data: str,
    bot_token: str,
    max_age_seconds: int | None = None,
) -> TelegramIdentity:
    """
    Validate Telegram WebApp init data and return the user it describes.

    Args:
        init_data: Raw query string from Telegram.WebApp.initData
        bot_token: Bot token the Mini App belongs to
        max_age_seconds: Reject data whose auth_date is older than this

    Returns:
        TelegramIdentity of the signed user

    Raises:
        AuthenticationError: If the data is malformed, unsigned, stale,
            or carries no user
    """
    if not bot_token:
        raise AuthenticationError("Telegram bot token is not configured")

    fields = dict(parse_qsl(init_data, keep_blank_values=True))
    received_hash = fields.get("hash")
    if not received_hash:
        raise AuthenticationError("Init data is not signed")

    expected = compute_init_data_hash(fields, bot_token)
    if not hmac.compare_digest(expected, received_hash):
        logger.warning("Init data signature mismatch")
        raise AuthenticationError("Invalid init data signature")

    if max_age_seconds is not None:
        try:
            auth_date = int(fields.get("auth_date", "0"))
        except ValueError as e:
            raise AuthenticationError("Invalid init data auth_date") from e
        age = time.time() - auth_date
        if age > max_age_seconds:
            raise AuthenticationError("Init data has expired")

    raw_user = fields.get("user")
    if not raw_user:
        raise AuthenticationError("Init data carries no user")

    try:
        payload = json.loads(raw_user)
        return TelegramIdentity.from_user_payload(payload)
    except (ValueError, KeyError, TypeError) as e:
        raise AuthenticationError("Invalid init data user") from e


def generate_invite_code() -> str:
    """Generate a URL-safe invite code."""
    return secrets.token_urlsafe(9)
