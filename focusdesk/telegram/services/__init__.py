"""
Telegram Bot Services.
"""

from focusdesk.telegram.services.notifications import (
    NotificationResult,
    NotificationService,
    get_notification_service,
)

__all__ = [
    "NotificationResult",
    "NotificationService",
    "get_notification_service",
]
