"""
Notification Log Repository.
"""

from sqlalchemy import update

from focusdesk.backend.models.enums import NotificationStatus
from focusdesk.backend.models.notification import NotificationLog
from focusdesk.backend.repositories.base import BaseRepository


class NotificationLogRepository(BaseRepository[NotificationLog]):
    model = NotificationLog

    async def mark_queued_for_user(
        self,
        user_id: str,
        type: str,
        **values,
    ) -> int:
        """Update every queued log of a user and type. Returns the row count."""
        result = await self.session.execute(
            update(NotificationLog)
            .where(
                NotificationLog.user_id == user_id,
                NotificationLog.type == type,
                NotificationLog.status == NotificationStatus.QUEUED.value,
            )
            .values(**values)
        )
        await self.session.flush()
        return result.rowcount or 0
