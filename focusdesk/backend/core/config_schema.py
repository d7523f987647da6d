"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema    → application.yaml
    DatabaseSchema       → database.yaml
    LoggingSchema        → logging.yaml
    FeaturesSchema       → features.yaml
    SecuritySchema       → security.yaml
    AssistantSchema      → assistant.yaml
    NotificationsSchema  → notifications.yaml
    ConcurrencySchema    → concurrency.yaml
    ObservabilitySchema  → observability.yaml
"""

from pydantic import BaseModel, ConfigDict


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class TimeoutsSchema(_StrictBase):
    database: int
    external_api: int
    background: int


class TelegramAppSchema(_StrictBase):
    webhook_path: str
    webhook_base_url: str
    webapp_url: str


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api_prefix: str
    webapp_path: str
    server: ServerSchema
    cors: CorsSchema
    timeouts: TimeoutsSchema
    telegram: TelegramAppSchema


# =============================================================================
# database.yaml
# =============================================================================


class BrokerSchema(_StrictBase):
    queue_name: str
    result_expiry_seconds: int


class RedisSchema(_StrictBase):
    host: str
    port: int
    db: int
    broker: BrokerSchema


class DatabaseSchema(_StrictBase):
    host: str
    port: int
    name: str
    user: str
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int
    echo: bool
    redis: RedisSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    auth_dev_login_enabled: bool
    subscription_enforced: bool
    channel_telegram_enabled: bool
    notifications_enqueue_enabled: bool
    events_record_enabled: bool
    webapp_enabled: bool


# =============================================================================
# security.yaml
# =============================================================================


class InitDataSchema(_StrictBase):
    max_age_seconds: int


class TrialSchema(_StrictBase):
    days: int


class SecuritySchema(_StrictBase):
    init_data: InitDataSchema
    trial: TrialSchema


# =============================================================================
# assistant.yaml
# =============================================================================


class CircuitBreakerSchema(_StrictBase):
    fail_max: int
    timeout_duration: int


class RetrySchema(_StrictBase):
    max_attempts: int
    backoff_max: int


class AssistantSchema(_StrictBase):
    base_url: str
    model: str
    temperature: float
    language: str
    history_limit: int
    request_timeout_seconds: int
    circuit_breaker: CircuitBreakerSchema
    retry: RetrySchema


# =============================================================================
# notifications.yaml
# =============================================================================


class CronJobSchema(_StrictBase):
    cron: str
    enabled: bool


class InviteDefaultsSchema(_StrictBase):
    expires_in_hours: int
    max_uses: int


class NotificationsSchema(_StrictBase):
    deadline_reminder_days: int
    deliver_max_retries: int
    deadline_reminders: CronJobSchema
    overdue_alerts: CronJobSchema
    invites: InviteDefaultsSchema


# =============================================================================
# concurrency.yaml
# =============================================================================


class SemaphoresSchema(_StrictBase):
    database: int
    redis: int
    llm: int
    telegram: int


class ConcurrencySchema(_StrictBase):
    semaphores: SemaphoresSchema


# =============================================================================
# observability.yaml
# =============================================================================


class HealthChecksSchema(_StrictBase):
    ready_timeout_seconds: int


class ObservabilitySchema(_StrictBase):
    health_checks: HealthChecksSchema
