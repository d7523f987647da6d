"""
Analytics Events.

Records product events into the event_logs table. Recording is gated by
``features.events_record_enabled``.

Service events are written in the caller's session so they commit or
roll back with the operation they describe. Error events use their own
session because the request session is usually unusable by then.
"""

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.config import get_app_config
from focusdesk.backend.core.logging import get_logger
from focusdesk.backend.models.event import EventLog

logger = get_logger(__name__)


async def record_event(
    session: AsyncSession,
    event_name: str,
    user_id: str | None = None,
    focus_id: str | None = None,
    props: dict[str, Any] | None = None,
) -> EventLog | None:
    """Add an analytics event to the current transaction."""
    if not get_app_config().features.events_record_enabled:
        return None

    event = EventLog(
        event_name=event_name,
        user_id=user_id,
        focus_id=focus_id,
        props=props,
    )
    session.add(event)
    logger.debug(
        "Event recorded",
        extra={"event_name": event_name, "user_id": user_id, "focus_id": focus_id},
    )
    return event


async def record_error_event(
    route: str,
    message: str,
    user_id: str | None = None,
) -> None:
    """
    Record an ``error_api`` event in a separate session.

    Never raises: a failure to record is logged and swallowed so the
    original error response is always returned.
    """
    if not get_app_config().features.events_record_enabled:
        return

    from focusdesk.backend.core.database import get_session_factory

    try:
        async with get_session_factory()() as session:
            session.add(
                EventLog(
                    event_name="error_api",
                    user_id=user_id,
                    props={"route": route, "message": message[:500]},
                )
            )
            await session.commit()
    except (SQLAlchemyError, OSError) as e:
        logger.warning(
            "Failed to record error event",
            extra={"route": route, "error": str(e)},
        )
