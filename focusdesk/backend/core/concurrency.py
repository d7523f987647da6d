"""
Concurrency Limits.

Named asyncio semaphores that cap concurrent access to external
dependencies. Sizing is configured in config/settings/concurrency.yaml
under ``semaphores.<name>``.

Usage:
    from focusdesk.backend.core.concurrency import get_semaphore

    async with get_semaphore("llm"):
        result = await client.chat.completions.create(...)
"""

import asyncio

from focusdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CAPACITY = 20

_semaphores: dict[str, asyncio.Semaphore] = {}


def get_semaphore(name: str) -> asyncio.Semaphore:
    """Get a named semaphore, creating it lazily.

    Names missing from concurrency.yaml default to a capacity of 20.
    """
    if name not in _semaphores:
        from focusdesk.backend.core.config import get_app_config

        semaphore_config = get_app_config().concurrency.semaphores
        capacity = getattr(semaphore_config, name, DEFAULT_CAPACITY)
        _semaphores[name] = asyncio.Semaphore(capacity)
        logger.debug("Semaphore created", extra={"name": name, "capacity": capacity})
    return _semaphores[name]


def reset_semaphores() -> None:
    """Drop all semaphores. Called on shutdown so a new loop gets fresh ones."""
    _semaphores.clear()
    logger.debug("Semaphores cleared")
