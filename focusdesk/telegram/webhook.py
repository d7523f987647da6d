"""
Webhook Endpoint for Telegram Bot.

Provides FastAPI router for handling Telegram webhook requests.
"""

import hmac
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response
from pydantic import ValidationError

from focusdesk.backend.core.config import get_app_config, get_settings
from focusdesk.backend.core.logging import get_logger

if TYPE_CHECKING:
    from aiogram import Bot, Dispatcher

logger = get_logger(__name__)


def get_webhook_path() -> str:
    return get_app_config().application.telegram.webhook_path or "/webhook/telegram"


def get_webhook_router(bot: "Bot", dp: "Dispatcher") -> APIRouter:
    """
    Create a FastAPI router for handling Telegram webhook requests.

    Args:
        bot: aiogram Bot instance
        dp: aiogram Dispatcher instance

    Returns:
        FastAPI APIRouter with webhook endpoint
    """
    from aiogram.exceptions import TelegramAPIError
    from aiogram.types import Update

    router = APIRouter(tags=["telegram"])
    webhook_path = get_webhook_path()
    webhook_secret = get_settings().telegram_webhook_secret

    @router.post(webhook_path)
    async def telegram_webhook(request: Request) -> Response:
        """Validate the secret token header and feed the update to aiogram."""
        if webhook_secret:
            secret_header = request.headers.get("X-Telegram-Bot-Api-Secret-Token")
            if not secret_header or not hmac.compare_digest(secret_header, webhook_secret):
                logger.warning(
                    "Invalid webhook secret token",
                    extra={"client_ip": request.client.host if request.client else None},
                )
                return Response(status_code=403)

        try:
            update = Update.model_validate(await request.json(), context={"bot": bot})
        except (ValueError, ValidationError) as e:
            logger.warning("Malformed Telegram update", extra={"error": str(e)})
            return Response(status_code=400)

        try:
            await dp.feed_update(bot, update)
        except TelegramAPIError as e:
            # 200 so Telegram does not redeliver an update we cannot answer
            logger.error(
                "Error processing Telegram update",
                extra={"update_id": update.update_id, "error": str(e)},
                exc_info=True,
            )
        return Response(status_code=200)

    @router.get(webhook_path + "/health")
    async def telegram_webhook_health() -> dict:
        """Health check for the Telegram webhook endpoint."""
        return {"status": "healthy", "webhook_path": webhook_path}

    return router


def get_webhook_url(base_url: str) -> str:
    """Full webhook URL for a public base URL."""
    return f"{base_url.rstrip('/')}{get_webhook_path()}"
