"""
User Service.

Keeps the users table in sync with Telegram identities.
"""

from focusdesk.backend.core.security import TelegramIdentity
from focusdesk.backend.models.user import User
from focusdesk.backend.repositories.user import UserRepository
from focusdesk.backend.services.base import BaseService

PROFILE_FIELDS = ("username", "first_name", "last_name", "language_code")


class UserService(BaseService):
    def __init__(self, session) -> None:
        super().__init__(session)
        self.repo = UserRepository(session)

    async def upsert_from_identity(self, identity: TelegramIdentity) -> User:
        """
        Find the user by Telegram id, creating it on first sight.

        Profile fields are refreshed from the identity when it carries them.
        """
        user = await self.repo.get_by_tg_id(identity.tg_id)
        if user is None:
            self._log_operation("Registering user", tg_id=identity.tg_id)
            return await self._execute_db_operation(
                "create_user",
                self.repo.create(
                    tg_id=identity.tg_id,
                    **{field: getattr(identity, field) for field in PROFILE_FIELDS},
                ),
            )

        changes = {
            field: getattr(identity, field)
            for field in PROFILE_FIELDS
            if getattr(identity, field) is not None
            and getattr(identity, field) != getattr(user, field)
        }
        if changes:
            await self._execute_db_operation(
                "refresh_user",
                self.repo.update(user, **changes),
            )
        return user
