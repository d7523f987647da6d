"""
Database Engine and Sessions.

One async engine per process, created on first use so importing models or
services never needs database credentials. API requests get a session per
request that commits when the endpoint returns; workers open their own
sessions from ``get_session_factory()``.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from focusdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _connect_args() -> dict[str, Any]:
    """asyncpg options: connect timeout and the name shown in pg_stat_activity."""
    from focusdesk.backend.core.config import get_app_config

    app = get_app_config().application
    return {
        "timeout": app.timeouts.database,
        "server_settings": {"application_name": app.name},
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        from focusdesk.backend.core.config import get_app_config, get_database_url

        db_config = get_app_config().database
        _engine = create_async_engine(
            get_database_url(),
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            pool_recycle=db_config.pool_recycle,
            pool_pre_ping=True,
            echo=db_config.echo,
            connect_args=_connect_args(),
        )
        logger.debug("Database engine created", extra={"host": db_config.host, "db": db_config.name})
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the process engine. Loaded rows stay usable after commit."""
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_factory


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session (FastAPI dependency).

    Commits once the endpoint returns; any exception rolls the whole
    request back, so a failed multi-step operation leaves no partial rows.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Dispose the engine on shutdown, if it was ever created."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.debug("Database engine disposed")
    _engine = None
    _async_session_factory = None
