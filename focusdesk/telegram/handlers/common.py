"""
Common Handlers.

/start (including ``/start inv_<code>`` invite deep links) and /help.
"""

from html import escape

from aiogram import Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message

from focusdesk.backend.core.database import get_session_factory
from focusdesk.backend.core.logging import get_logger, log_with_source
from focusdesk.backend.core.security import TelegramIdentity
from focusdesk.backend.services.users import UserService
from focusdesk.telegram.keyboards.common import get_open_app_keyboard

logger = get_logger(__name__)

router = Router(name="common")

INVITE_PREFIX = "inv_"

HELP_TEXT = (
    "<b>📚 Focusdesk</b>\n\n"
    "Projects, tasks and a business assistant in one Mini App.\n\n"
    "/start - Open the app\n"
    "/help - Show this message\n\n"
    "Reminders about deadlines and overdue tasks arrive in this chat."
)


def parse_invite_code(args: str | None) -> str | None:
    """Invite code from a /start payload such as ``inv_AbC123``."""
    if args and args.startswith(INVITE_PREFIX) and len(args) > len(INVITE_PREFIX):
        return args[len(INVITE_PREFIX):]
    return None


async def register_user(message: Message) -> None:
    """Create or refresh the user row so invites and reminders can find it."""
    user = message.from_user
    if user is None:
        return
    identity = TelegramIdentity(
        tg_id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        language_code=user.language_code,
    )
    async with get_session_factory()() as session:
        await UserService(session).upsert_from_identity(identity)
        await session.commit()


@router.message(CommandStart())
async def cmd_start(message: Message, command: CommandObject) -> None:
    """Greet the user and offer the Mini App button."""
    await register_user(message)

    invite_code = parse_invite_code(command.args)
    first_name = escape(message.from_user.first_name) if message.from_user else "there"

    if invite_code:
        text = (
            f"👋 Hi, <b>{first_name}</b>!\n\n"
            "You have been invited to a project. Open the app to join it."
        )
    else:
        text = (
            f"👋 Hi, <b>{first_name}</b>!\n\n"
            "Focusdesk keeps your business projects, tasks and the AI assistant "
            "in one place. Open the app to start."
        )

    await message.answer(text, reply_markup=get_open_app_keyboard(invite_code))

    log_with_source(
        logger,
        "telegram",
        "info",
        "User started bot",
        tg_id=message.from_user.id if message.from_user else None,
        invite=bool(invite_code),
    )


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT, reply_markup=get_open_app_keyboard())
