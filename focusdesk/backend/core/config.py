"""
Configuration Management.

Loads secrets from config/.env and settings from config/settings/*.yaml.
No hardcoded values in code. All configuration comes from these sources.

Secrets (.env):
    DB_PASSWORD, REDIS_PASSWORD, TELEGRAM_BOT_TOKEN,
    TELEGRAM_WEBHOOK_SECRET, OPENAI_API_KEY

Settings (YAML):
    application.yaml   - App identity, server, cors, telegram, timeouts
    database.yaml      - Database and Redis connection settings
    logging.yaml       - Logging configuration
    features.yaml      - Feature flags
    security.yaml      - Telegram init data validation, trial period
    assistant.yaml     - Chat-completion provider and prompt settings
    notifications.yaml - Reminder windows, cron schedules, invite defaults
    concurrency.yaml   - Semaphores
    observability.yaml - Health check configuration
"""

from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import quote

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from focusdesk.backend.core.config_schema import (
    ApplicationSchema,
    AssistantSchema,
    ConcurrencySchema,
    DatabaseSchema,
    FeaturesSchema,
    LoggingSchema,
    NotificationsSchema,
    ObservabilitySchema,
    SecuritySchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets loaded from config/.env. Only passwords, tokens, and keys."""

    db_password: str = ""
    redis_password: str = ""
    telegram_bot_token: str = ""
    telegram_webhook_secret: str = ""
    openai_api_key: str = ""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


# Section name -> schema; each section lives in config/settings/<name>.yaml
SECTIONS: dict[str, type] = {
    "application": ApplicationSchema,
    "database": DatabaseSchema,
    "logging": LoggingSchema,
    "features": FeaturesSchema,
    "security": SecuritySchema,
    "assistant": AssistantSchema,
    "notifications": NotificationsSchema,
    "concurrency": ConcurrencySchema,
    "observability": ObservabilitySchema,
}


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Every file in SECTIONS is validated against its schema at load time,
    so a missing key or an unknown field fails on startup.
    """

    def __init__(self) -> None:
        self._sections = {
            name: _load_validated(schema, f"{name}.yaml") for name, schema in SECTIONS.items()
        }

    @property
    def application(self) -> ApplicationSchema:
        return self._sections["application"]

    @property
    def database(self) -> DatabaseSchema:
        return self._sections["database"]

    @property
    def logging(self) -> LoggingSchema:
        return self._sections["logging"]

    @property
    def features(self) -> FeaturesSchema:
        return self._sections["features"]

    @property
    def security(self) -> SecuritySchema:
        return self._sections["security"]

    @property
    def assistant(self) -> AssistantSchema:
        """Chat-completion provider settings."""
        return self._sections["assistant"]

    @property
    def notifications(self) -> NotificationsSchema:
        """Reminder, cron and invite settings."""
        return self._sections["notifications"]

    @property
    def concurrency(self) -> ConcurrencySchema:
        """Concurrency settings (semaphores)."""
        return self._sections["concurrency"]

    @property
    def observability(self) -> ObservabilitySchema:
        """Observability settings (health checks)."""
        return self._sections["observability"]


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_database_url(async_driver: bool = True) -> str:
    """
    Construct database URL from YAML config and secrets.

    Args:
        async_driver: Use asyncpg driver if True, psycopg2 if False.

    Returns:
        Database connection URL string.
    """
    db = get_app_config().database
    password = quote(get_settings().db_password, safe="")
    driver = "postgresql+asyncpg" if async_driver else "postgresql"
    return f"{driver}://{db.user}:{password}@{db.host}:{db.port}/{db.name}"


def get_redis_url() -> str:
    """
    Construct Redis URL from YAML config and secrets.

    Returns:
        Redis connection URL string.
    """
    redis = get_app_config().database.redis
    password = get_settings().redis_password
    auth = f":{quote(password, safe='')}@" if password else ""
    return f"redis://{auth}{redis.host}:{redis.port}/{redis.db}"


def get_server_base_url() -> tuple[str, float]:
    """
    Get the backend server base URL and timeout from application.yaml.

    Returns:
        Tuple of (base_url, timeout_seconds).
    """
    app = get_app_config().application
    server = app.server
    base_url = f"http://{server.host}:{server.port}"
    timeout = float(app.timeouts.external_api)
    return base_url, timeout
