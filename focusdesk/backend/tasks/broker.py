"""
Taskiq Broker Configuration.

Redis list-queue broker for background tasks. Retries are driven by the
``retry_on_error`` / ``max_retries`` task labels through
SimpleRetryMiddleware.

Usage:
    # Start worker process
    python cli.py --service worker

    # Or directly with taskiq
    taskiq worker focusdesk.backend.tasks.worker:broker
"""

from typing import TYPE_CHECKING

from focusdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from taskiq_redis import ListQueueBroker


def create_broker() -> "ListQueueBroker":
    """Create the broker with a Redis result backend."""
    from taskiq import SimpleRetryMiddleware
    from taskiq_redis import ListQueueBroker, RedisAsyncResultBackend

    from focusdesk.backend.core.config import get_app_config, get_redis_url

    broker_config = get_app_config().database.redis.broker
    redis_url = get_redis_url()

    result_backend = RedisAsyncResultBackend(
        redis_url=redis_url,
        result_ex_time=broker_config.result_expiry_seconds,
    )

    broker = (
        ListQueueBroker(url=redis_url, queue_name=broker_config.queue_name)
        .with_result_backend(result_backend)
        .with_middlewares(SimpleRetryMiddleware(default_retry_count=3))
    )

    logger.debug(
        "Taskiq broker configured",
        extra={
            "queue_name": broker_config.queue_name,
            "result_expiry": broker_config.result_expiry_seconds,
        },
    )
    return broker


_broker: "ListQueueBroker | None" = None


def get_broker() -> "ListQueueBroker":
    """Get the broker instance, creating it if necessary."""
    global _broker
    if _broker is None:
        _broker = create_broker()

        @_broker.on_event("startup")
        async def on_startup(state) -> None:
            logger.info("Taskiq worker starting up")

        @_broker.on_event("shutdown")
        async def on_shutdown(state) -> None:
            from focusdesk.backend.core.database import dispose_engine

            await dispose_engine()
            logger.info("Taskiq worker shutting down")

    return _broker
