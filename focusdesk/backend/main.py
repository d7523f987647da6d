"""
FastAPI Application Entry Point.

Serves the JSON API under ``application.api_prefix``, the Mini App's
static files under ``application.webapp_path`` and, when enabled, the
Telegram webhook.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from focusdesk.backend.api import health
from focusdesk.backend.api.v1 import router as api_v1_router
from focusdesk.backend.core.concurrency import reset_semaphores
from focusdesk.backend.core.config import get_app_config
from focusdesk.backend.core.database import dispose_engine
from focusdesk.backend.core.exception_handlers import register_exception_handlers
from focusdesk.backend.core.logging import get_logger, setup_logging
from focusdesk.backend.core.middleware import RequestContextMiddleware

logger = get_logger(__name__)

WEBAPP_DIR = Path(__file__).resolve().parent.parent / "web" / "static"

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    app_config = get_app_config()
    setup_logging(level=app_config.logging.level)

    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
        },
    )
    telegram_enabled = app_config.features.channel_telegram_enabled
    if telegram_enabled and app_config.application.telegram.webhook_base_url:
        await _register_webhook(app_config.application.telegram.webhook_base_url)

    yield

    if telegram_enabled:
        from focusdesk.telegram.bot import cleanup_bot, get_bot

        await cleanup_bot(get_bot())

    await dispose_engine()
    reset_semaphores()
    logger.info("Application shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app_config = get_app_config()
    app_settings = app_config.application

    app = FastAPI(
        title=app_settings.name,
        description=app_settings.description,
        version=app_settings.version,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)

    cors_origins = app_settings.cors.origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_v1_router, prefix=app_settings.api_prefix)

    if app_config.features.webapp_enabled:
        app.mount(
            app_settings.webapp_path,
            StaticFiles(directory=WEBAPP_DIR, html=True),
            name="webapp",
        )

    _mount_telegram(app, app_config)

    return app


def _mount_telegram(app: FastAPI, app_config) -> None:
    """Mount the Telegram webhook when the channel is enabled."""
    if not app_config.features.channel_telegram_enabled:
        return

    from focusdesk.telegram.bot import get_bot, get_dispatcher
    from focusdesk.telegram.webhook import get_webhook_router

    app.include_router(get_webhook_router(get_bot(), get_dispatcher()))
    logger.info("Telegram webhook mounted")


async def _register_webhook(base_url: str) -> None:
    """Tell Telegram where to deliver updates. Startup continues if Telegram is unreachable."""
    from aiogram.exceptions import TelegramAPIError

    from focusdesk.backend.core.config import get_settings
    from focusdesk.telegram.bot import get_bot, setup_webhook
    from focusdesk.telegram.webhook import get_webhook_url

    try:
        await setup_webhook(get_bot(), get_webhook_url(base_url), get_settings().telegram_webhook_secret)
    except TelegramAPIError as e:
        logger.error("Webhook registration failed", extra={"error": str(e)})


def get_app() -> FastAPI:
    """
    Get the application instance (lazy initialization).

    Use this instead of importing `app` directly to avoid
    import-time configuration errors.
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: `uvicorn focusdesk.backend.main:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
