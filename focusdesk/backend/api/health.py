"""
Health Check Endpoints.

Provides liveness, readiness, and detailed health checks.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (database and Redis reachable)
- /health/detailed: Component-by-component status (for debugging)
"""

import asyncio
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from focusdesk.backend.core.config import get_app_config, get_redis_url
from focusdesk.backend.core.database import get_session_factory
from focusdesk.backend.core.logging import get_logger
from focusdesk.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database() -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    try:
        start = utc_now()
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
        latency_ms = int((utc_now() - start).total_seconds() * 1000)
        return {"status": "healthy", "latency_ms": latency_ms}
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}


async def check_redis() -> dict[str, Any]:
    """
    Check Redis connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    import redis.asyncio as redis

    try:
        start = utc_now()
        client = redis.from_url(get_redis_url())
        try:
            await client.ping()
        finally:
            await client.aclose()
        latency_ms = int((utc_now() - start).total_seconds() * 1000)
        return {"status": "healthy", "latency_ms": latency_ms}
    except Exception as e:
        logger.warning("Redis health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}


async def run_checks(timeout: float | None = None) -> dict[str, dict[str, Any]]:
    """Run dependency checks in parallel. Timed-out checks count as unhealthy."""
    db_result: dict[str, Any] = {"status": "unhealthy", "error": "check did not run"}
    redis_result: dict[str, Any] = {"status": "unhealthy", "error": "check did not run"}

    try:
        async with asyncio.timeout(timeout):
            try:
                async with asyncio.TaskGroup() as tg:
                    db_task = tg.create_task(check_database())
                    redis_task = tg.create_task(check_redis())
                db_result = db_task.result()
                redis_result = redis_task.result()
            except* Exception as eg:
                for exc in eg.exceptions:
                    logger.warning("Health check task failed", extra={"error": str(exc)})
    except TimeoutError:
        logger.warning("Health checks timed out", extra={"timeout": timeout})

    return {"database": db_result, "redis": redis_result}


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running. No dependency checks.
    """
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check() -> Any:
    """
    Readiness check.

    Returns 503 if the database or Redis is unhealthy.
    """
    timeout = get_app_config().observability.health_checks.ready_timeout_seconds
    checks = await run_checks(timeout)

    unhealthy = [name for name, check in checks.items() if check.get("status") == "unhealthy"]
    body = {
        "status": "unhealthy" if unhealthy else "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }

    if unhealthy:
        logger.warning("Readiness check failed", extra={"unhealthy": unhealthy})
        return JSONResponse(status_code=503, content=body)
    return body


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    """
    Detailed health check.

    Application info, dependency checks and semaphore usage.
    """
    checks = await run_checks(get_app_config().observability.health_checks.ready_timeout_seconds)
    app_settings = get_app_config().application

    healthy = all(check.get("status") == "healthy" for check in checks.values())
    return {
        "status": "healthy" if healthy else "degraded",
        "application": {
            "name": app_settings.name,
            "env": app_settings.environment,
            "debug": app_settings.debug,
            "version": app_settings.version,
        },
        "checks": checks,
        "semaphores": _get_semaphore_status(),
        "timestamp": utc_now().isoformat(),
    }


def _get_semaphore_status() -> dict[str, Any]:
    from focusdesk.backend.core.concurrency import _semaphores

    return {name: {"available": sem._value} for name, sem in _semaphores.items()}
