"""
Assistant Service.

Chat with the business assistant inside a focus and turn accepted
suggestions into tasks.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from focusdesk.backend.core.config import get_app_config
from focusdesk.backend.core.exceptions import NotFoundError
from focusdesk.backend.gateway.assistant import BusinessAssistantGateway, FocusContext
from focusdesk.backend.models.assistant import AssistantMessage, AssistantThread
from focusdesk.backend.models.enums import MessageRole
from focusdesk.backend.models.task import Task
from focusdesk.backend.models.user import User
from focusdesk.backend.repositories.assistant import AssistantRepository
from focusdesk.backend.schemas.assistant import PlanToTasksRequest
from focusdesk.backend.services import subscription
from focusdesk.backend.services.base import FocusScopedService
from focusdesk.backend.services.events import record_event
from focusdesk.backend.services.task import TaskService


class AssistantService(FocusScopedService):
    """Service for assistant threads."""

    def __init__(
        self,
        session: AsyncSession,
        gateway: BusinessAssistantGateway,
        task_service: TaskService | None = None,
    ) -> None:
        super().__init__(session)
        self.gateway = gateway
        self.threads = AssistantRepository(session)
        self.task_service = task_service or TaskService(session)

    async def get_thread(
        self,
        user: User,
        focus_id: str,
    ) -> tuple[AssistantThread | None, list[AssistantMessage]]:
        """The focus's oldest thread with its messages, or (None, [])."""
        await self._require_member(focus_id, user.id)
        thread = await self.threads.get_first_thread(focus_id)
        if thread is None:
            return None, []
        return thread, await self.threads.list_messages(thread.id)

    async def _get_or_create_thread(self, focus_id: str) -> AssistantThread:
        thread = await self.threads.get_first_thread(focus_id)
        if thread is None:
            self._log_operation("Opening assistant thread", focus_id=focus_id)
            thread = await self._execute_db_operation(
                "create_thread",
                self.threads.create(focus_id=focus_id),
            )
        return thread

    async def send_message(self, user: User, focus_id: str, content: str) -> AssistantMessage:
        """
        Store the user's message, ask the assistant and store its answer.

        Returns:
            The stored assistant message
        """
        subscription.ensure_active(user)
        member = await self._require_member(focus_id, user.id)
        focus = await self.focuses.get_by_id_or_none(focus_id)
        if focus is None:
            raise NotFoundError("Focus not found")

        thread = await self._get_or_create_thread(focus_id)
        await self.threads.add_message(thread.id, MessageRole.USER.value, content)
        await record_event(self.session, "ai_message_sent", user_id=user.id, focus_id=focus_id)

        history = await self.threads.recent_messages(
            thread.id, get_app_config().assistant.history_limit
        )
        context = FocusContext(
            title=focus.title,
            description=focus.description,
            stage=focus.stage,
            deadline_at=focus.deadline_at,
            role=member.role,
        )

        self._log_debug("Calling assistant", focus_id=focus_id, history_size=len(history))
        answer = await self.gateway.complete(
            context,
            [(message.role, message.content) for message in history],
        )

        reply = await self.threads.add_message(
            thread.id,
            MessageRole.ASSISTANT.value,
            answer.reply,
            meta=answer.to_meta(),
        )
        await record_event(
            self.session,
            "ai_message_received",
            user_id=user.id,
            focus_id=focus_id,
            props={"has_tasks": bool(answer.tasks)},
        )
        return reply

    async def plan_to_tasks(
        self,
        user: User,
        focus_id: str,
        plan: PlanToTasksRequest,
    ) -> list[Task]:
        """Create the accepted plan's tasks. Owner only, all or nothing."""
        subscription.ensure_active(user)
        await self._require_owner(focus_id, user.id)
        self._log_operation("Creating tasks from plan", focus_id=focus_id, count=len(plan.tasks))
        return await self.task_service.create_many(user, focus_id, plan.tasks)
