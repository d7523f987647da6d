"""
FastAPI Dependencies.

Shared dependencies for request handling: database session, the
authenticated user and outbound collaborators.
"""

from typing import Annotated

from fastapi import BackgroundTasks, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.config import get_app_config, get_settings
from focusdesk.backend.core.database import get_db_session
from focusdesk.backend.core.exceptions import AuthenticationError
from focusdesk.backend.core.logging import get_logger
from focusdesk.backend.core.security import TelegramIdentity, verify_init_data
from focusdesk.backend.gateway.assistant import BusinessAssistantGateway, get_assistant_gateway
from focusdesk.backend.models.user import User
from focusdesk.backend.services.notifications import NotificationDispatcher
from focusdesk.backend.services.users import UserService

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def resolve_identity(
    init_data: str | None,
    dev_tg_id: str | None,
) -> TelegramIdentity:
    """
    Work out who is calling.

    Signed Telegram init data wins. The dev header is honoured only when
    ``features.auth_dev_login_enabled`` is on and no init data was sent.

    Raises:
        AuthenticationError: When neither source identifies a user
    """
    if init_data:
        return verify_init_data(
            init_data,
            get_settings().telegram_bot_token,
            max_age_seconds=get_app_config().security.init_data.max_age_seconds,
        )

    if dev_tg_id and get_app_config().features.auth_dev_login_enabled:
        try:
            return TelegramIdentity(tg_id=int(dev_tg_id))
        except ValueError as e:
            raise AuthenticationError("Invalid dev Telegram id") from e

    raise AuthenticationError()


async def get_current_user(
    request: Request,
    db: DbSession,
    x_telegram_init_data: str | None = Header(None),
    x_dev_tg_id: str | None = Header(None),
) -> User:
    """Authenticate the request and upsert the user by Telegram id."""
    identity = resolve_identity(x_telegram_init_data, x_dev_tg_id)
    user = await UserService(db).upsert_from_identity(identity)
    request.state.user_id = user.id
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]

AssistantGateway = Annotated[BusinessAssistantGateway, Depends(get_assistant_gateway)]


async def get_notification_dispatcher(
    db: DbSession,
    background_tasks: BackgroundTasks,
) -> NotificationDispatcher:
    """Dispatcher whose queue jobs are sent after the response commits."""
    return NotificationDispatcher(db, background_tasks)


Notifier = Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)]
