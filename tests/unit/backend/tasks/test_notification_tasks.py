"""
Unit tests for the notification delivery task.
"""

from unittest.mock import MagicMock, patch

import pytest

from focusdesk.backend.tasks import notifications
from focusdesk.backend.tasks.notifications import delivery_values, register_tasks
from focusdesk.telegram.services.notifications import NotificationResult


class TestDeliveryValues:
    def test_success(self):
        values = delivery_values(NotificationResult(success=True, tg_id=1, message_id=5))

        assert values["status"] == "sent"
        assert values["sent_at"] is not None
        assert values["error"] is None

    def test_failure_keeps_error(self):
        """Should record the Telegram error and leave sent_at untouched."""
        values = delivery_values(NotificationResult(success=False, tg_id=1, error="Forbidden: bot was blocked"))

        assert values == {"status": "failed", "error": "Forbidden: bot was blocked"}


class TestRegisterTasks:
    @pytest.fixture(autouse=True)
    def reset_registry(self):
        notifications._registered = None
        yield
        notifications._registered = None

    def test_registers_once(self):
        """Should register deliver_notification with retries and cache it."""
        broker = MagicMock()

        with patch("focusdesk.backend.tasks.broker.get_broker", return_value=broker):
            first = register_tasks()
            second = register_tasks()

        assert first is second
        assert "deliver_notification" in first
        broker.task.assert_called_once()
        kwargs = broker.task.call_args.kwargs
        assert kwargs["task_name"] == "deliver_notification"
        assert kwargs["retry_on_error"] is True
        assert kwargs["max_retries"] == 3
