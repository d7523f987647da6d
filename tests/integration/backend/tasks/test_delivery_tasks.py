"""
Integration Tests for Background Tasks.

Runs deliver_notification and the scheduled deadline scans directly
(without a broker) against the test database. Telegram is mocked.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import select

from focusdesk.backend.core.exceptions import ExternalServiceError
from focusdesk.backend.core.utils import utc_now
from focusdesk.backend.models import Focus, FocusMember, NotificationLog, Task, User
from focusdesk.backend.tasks.notifications import deliver_notification
from focusdesk.backend.tasks.scheduled import send_deadline_reminders, send_overdue_alerts
from focusdesk.telegram.services.notifications import NotificationResult


def _telegram(success: bool = True, error: str | None = None) -> MagicMock:
    service = MagicMock()

    async def send(tg_id, text, **kwargs):
        return NotificationResult(success=success, tg_id=tg_id, message_id=42 if success else None, error=error)

    service.send = AsyncMock(side_effect=send)
    return service


async def _seed_user(factory, tg_id: int = 5001) -> User:
    async with factory() as session:
        user = User(tg_id=tg_id, first_name="Max")
        session.add(user)
        await session.commit()
        return user


async def _seed_log(factory, user: User, type: str = "task_assigned") -> NotificationLog:
    async with factory() as session:
        log = NotificationLog(user_id=user.id, type=type, status="queued")
        session.add(log)
        await session.commit()
        return log


async def _load_logs(factory) -> list[NotificationLog]:
    async with factory() as session:
        return list((await session.execute(select(NotificationLog))).scalars().all())


class TestDeliverNotification:
    """Tests for the deliver_notification task."""

    @pytest.mark.asyncio
    async def test_success_marks_log_sent(self, patched_session_factory):
        """Should mark the addressed log as sent."""
        user = await _seed_user(patched_session_factory)
        log = await _seed_log(patched_session_factory, user)
        telegram = _telegram()

        with patch("focusdesk.backend.tasks.notifications.get_notification_service", return_value=telegram):
            result = await deliver_notification(
                tg_id=user.tg_id, text="Hi", type="task_assigned", user_id=user.id, log_id=log.id
            )

        assert result["status"] == "sent"
        assert result["message_id"] == 42
        telegram.send.assert_awaited_once_with(user.tg_id, "Hi")

        [stored] = await _load_logs(patched_session_factory)
        assert stored.status == "sent"
        assert stored.sent_at is not None
        assert stored.error is None

    @pytest.mark.asyncio
    async def test_failure_marks_log_failed_and_raises(self, patched_session_factory):
        """Should record the error and raise so the queue retries."""
        user = await _seed_user(patched_session_factory)
        log = await _seed_log(patched_session_factory, user)

        with patch(
            "focusdesk.backend.tasks.notifications.get_notification_service",
            return_value=_telegram(success=False, error="Forbidden: bot was blocked"),
        ):
            with pytest.raises(ExternalServiceError):
                await deliver_notification(
                    tg_id=user.tg_id, text="Hi", type="task_assigned", user_id=user.id, log_id=log.id
                )

        [stored] = await _load_logs(patched_session_factory)
        assert stored.status == "failed"
        assert stored.error == "Forbidden: bot was blocked"

    @pytest.mark.asyncio
    async def test_sender_exception_marks_log_failed_and_propagates(self, patched_session_factory):
        """Should not leave the log queued when the sender itself raises."""
        user = await _seed_user(patched_session_factory)
        log = await _seed_log(patched_session_factory, user)
        telegram = MagicMock()
        telegram.send = AsyncMock(side_effect=RuntimeError("token invalid"))

        with patch("focusdesk.backend.tasks.notifications.get_notification_service", return_value=telegram):
            with pytest.raises(RuntimeError, match="token invalid"):
                await deliver_notification(
                    tg_id=user.tg_id, text="Hi", type="task_assigned", user_id=user.id, log_id=log.id
                )

        [stored] = await _load_logs(patched_session_factory)
        assert stored.status == "failed"
        assert stored.error == "token invalid"

    @pytest.mark.asyncio
    async def test_without_log_id_updates_queued_logs_of_type(self, patched_session_factory):
        """Should fall back to the user's queued logs of the same type."""
        user = await _seed_user(patched_session_factory)
        await _seed_log(patched_session_factory, user, type="task_assigned")
        await _seed_log(patched_session_factory, user, type="overdue_task")

        with patch("focusdesk.backend.tasks.notifications.get_notification_service", return_value=_telegram()):
            await deliver_notification(tg_id=user.tg_id, text="Hi", type="task_assigned", user_id=user.id)

        statuses = {log.type: log.status for log in await _load_logs(patched_session_factory)}
        assert statuses == {"task_assigned": "sent", "overdue_task": "queued"}


class TestScheduledScans:
    """Tests for deadline reminders and overdue alerts."""

    async def _seed_tasks(self, factory) -> dict[str, str]:
        now = utc_now()
        async with factory() as session:
            owner = User(tg_id=6001, first_name="Olga")
            assignee = User(tg_id=6002, first_name="Max")
            session.add_all([owner, assignee])
            await session.flush()

            focus = Focus(owner_user_id=owner.id, title="Bakery")
            focus.members.append(FocusMember(user_id=owner.id, role="owner"))
            focus.members.append(FocusMember(user_id=assignee.id, role="member"))
            session.add(focus)
            await session.flush()

            def task(title, due_at, status="todo", assignee_id=assignee.id):
                return Task(
                    focus_id=focus.id,
                    created_by_user_id=owner.id,
                    assigned_to_user_id=assignee_id,
                    title=title,
                    priority="medium",
                    status=status,
                    due_at=due_at,
                )

            due_soon = task("Call <supplier>", now + timedelta(days=1))
            overdue = task("Pay rent", now - timedelta(days=2))
            session.add_all([
                due_soon,
                overdue,
                task("Already done", now + timedelta(days=1), status="done"),
                task("Nobody's", now + timedelta(days=1), assignee_id=None),
                task("Far away", now + timedelta(days=10)),
            ])
            await session.commit()
            return {"due_soon": due_soon.id, "overdue": overdue.id, "tg_id": assignee.tg_id}

    @pytest.mark.asyncio
    async def test_deadline_reminders(self, patched_session_factory):
        """Should remind about open assigned tasks inside the window only."""
        seeded = await self._seed_tasks(patched_session_factory)
        telegram = _telegram()

        with patch("focusdesk.backend.tasks.scheduled.get_notification_service", return_value=telegram):
            result = await send_deadline_reminders(days=1)

        assert result["status"] == "completed"
        assert (result["found"], result["sent"], result["failed"]) == (1, 1, 0)

        tg_id, text = telegram.send.await_args.args
        assert tg_id == seeded["tg_id"]
        assert "Call &lt;supplier&gt;" in text

        [log] = await _load_logs(patched_session_factory)
        assert log.type == "deadline_reminder"
        assert log.status == "sent"
        assert log.payload["task_id"] == seeded["due_soon"]

    @pytest.mark.asyncio
    async def test_overdue_alerts(self, patched_session_factory):
        """Should alert about open tasks past their due date."""
        seeded = await self._seed_tasks(patched_session_factory)

        with patch("focusdesk.backend.tasks.scheduled.get_notification_service", return_value=_telegram()):
            result = await send_overdue_alerts()

        assert (result["found"], result["sent"]) == (1, 1)
        [log] = await _load_logs(patched_session_factory)
        assert log.type == "overdue_task"
        assert log.payload["task_id"] == seeded["overdue"]

    @pytest.mark.asyncio
    async def test_failed_send_is_recorded(self, patched_session_factory):
        """Should count and log a refused message as failed."""
        await self._seed_tasks(patched_session_factory)

        with patch(
            "focusdesk.backend.tasks.scheduled.get_notification_service",
            return_value=_telegram(success=False, error="chat not found"),
        ):
            result = await send_overdue_alerts()

        assert (result["found"], result["sent"], result["failed"]) == (1, 0, 1)
        [log] = await _load_logs(patched_session_factory)
        assert log.status == "failed"
        assert log.error == "chat not found"

    @pytest.mark.asyncio
    async def test_sender_exception_does_not_stop_the_job(self, patched_session_factory):
        """Should mark the raising send failed and go on with the next task."""
        seeded = await self._seed_tasks(patched_session_factory)
        async with patched_session_factory() as session:
            overdue = await session.get(Task, seeded["overdue"])
            assignee = (await session.execute(select(User).where(User.tg_id == seeded["tg_id"]))).scalar_one()
            session.add(Task(
                focus_id=overdue.focus_id,
                created_by_user_id=overdue.created_by_user_id,
                assigned_to_user_id=assignee.id,
                title="File taxes",
                priority="high",
                status="in_progress",
                due_at=utc_now() - timedelta(days=1),
            ))
            await session.commit()

        telegram = MagicMock()
        telegram.send = AsyncMock(side_effect=[
            RuntimeError("boom"),
            NotificationResult(success=True, tg_id=seeded["tg_id"], message_id=7),
        ])

        with patch("focusdesk.backend.tasks.scheduled.get_notification_service", return_value=telegram):
            result = await send_overdue_alerts()

        assert (result["found"], result["sent"], result["failed"]) == (2, 1, 1)
        statuses = sorted((log.status, log.error) for log in await _load_logs(patched_session_factory))
        assert statuses == [("failed", "boom"), ("sent", None)]


class TestDeadlineWindow:
    """The reminder window is [now + (N - 1), now + (N + 1)] days."""

    @pytest.mark.asyncio
    async def test_window_edges(self, patched_session_factory):
        now = utc_now()
        margin = timedelta(minutes=5)
        async with patched_session_factory() as session:
            owner = User(tg_id=7001, first_name="Olga")
            session.add(owner)
            await session.flush()
            focus = Focus(owner_user_id=owner.id, title="Bakery")
            focus.members.append(FocusMember(user_id=owner.id, role="owner"))
            session.add(focus)
            await session.flush()

            due_dates = {
                "before start": now + timedelta(days=1) - margin,
                "just after start": now + timedelta(days=1) + margin,
                "just before end": now + timedelta(days=3) - margin,
                "after end": now + timedelta(days=3) + margin,
            }
            session.add_all([
                Task(
                    focus_id=focus.id,
                    created_by_user_id=owner.id,
                    assigned_to_user_id=owner.id,
                    title=title,
                    priority="medium",
                    status="todo",
                    due_at=due_at,
                )
                for title, due_at in due_dates.items()
            ])
            await session.commit()

        telegram = _telegram()
        with patch("focusdesk.backend.tasks.scheduled.get_notification_service", return_value=telegram):
            result = await send_deadline_reminders(days=2)

        assert (result["found"], result["sent"]) == (2, 2)
        titles = {
            call.args[1].split("Task: ")[1].split("\n")[0]
            for call in telegram.send.await_args_list
        }
        assert titles == {"just after start", "just before end"}
