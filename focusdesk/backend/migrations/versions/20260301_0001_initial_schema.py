"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-03-01 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(), nullable=False)


def _user_fk(name: str, nullable: bool = False, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(name, sa.String(), sa.ForeignKey("users.id", ondelete=ondelete), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("tg_id", sa.BigInteger(), nullable=False),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("language_code", sa.String(16), nullable=True),
        sa.Column("trial_started_at", sa.DateTime(), nullable=True),
        sa.Column("subscription_until", sa.DateTime(), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_tg_id", "users", ["tg_id"], unique=True)

    op.create_table(
        "focuses",
        _id(),
        _user_fk("owner_user_id"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("stage", sa.String(255), nullable=True),
        sa.Column("deadline_at", sa.DateTime(), nullable=True),
        sa.Column("success_metric", sa.Text(), nullable=True),
        sa.Column("budget", sa.Float(), nullable=True),
        sa.Column("niche", sa.String(255), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_focuses_owner_user_id", "focuses", ["owner_user_id"])

    op.create_table(
        "focus_members",
        _id(),
        sa.Column("focus_id", sa.String(), sa.ForeignKey("focuses.id", ondelete="CASCADE"), nullable=False),
        _user_fk("user_id"),
        sa.Column("role", sa.String(16), nullable=False),
        _created_at(),
        sa.UniqueConstraint("focus_id", "user_id", name="uq_focus_member"),
    )
    op.create_index("ix_focus_members_focus_id", "focus_members", ["focus_id"])
    op.create_index("ix_focus_members_user_id", "focus_members", ["user_id"])

    op.create_table(
        "tasks",
        _id(),
        sa.Column("focus_id", sa.String(), sa.ForeignKey("focuses.id", ondelete="CASCADE"), nullable=False),
        _user_fk("created_by_user_id"),
        _user_fk("assigned_to_user_id", nullable=True, ondelete="SET NULL"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("due_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_tasks_focus_id", "tasks", ["focus_id"])
    op.create_index("ix_tasks_assigned_to_user_id", "tasks", ["assigned_to_user_id"])
    op.create_index("ix_tasks_status", "tasks", ["status"])
    op.create_index("ix_tasks_due_at", "tasks", ["due_at"])

    op.create_table(
        "subtasks",
        _id(),
        sa.Column("task_id", sa.String(), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("is_done", sa.Boolean(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_subtasks_task_id", "subtasks", ["task_id"])

    op.create_table(
        "task_comments",
        _id(),
        sa.Column("task_id", sa.String(), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        _user_fk("author_user_id"),
        sa.Column("text", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_task_comments_task_id", "task_comments", ["task_id"])

    op.create_table(
        "assistant_threads",
        _id(),
        sa.Column("focus_id", sa.String(), sa.ForeignKey("focuses.id", ondelete="CASCADE"), nullable=False),
        _created_at(),
    )
    op.create_index("ix_assistant_threads_focus_id", "assistant_threads", ["focus_id"])

    op.create_table(
        "assistant_messages",
        _id(),
        sa.Column(
            "thread_id",
            sa.String(),
            sa.ForeignKey("assistant_threads.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_assistant_messages_thread_id", "assistant_messages", ["thread_id"])

    op.create_table(
        "invites",
        _id(),
        sa.Column("focus_id", sa.String(), sa.ForeignKey("focuses.id", ondelete="CASCADE"), nullable=False),
        _user_fk("created_by_user_id"),
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("use_count", sa.Integer(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_invites_focus_id", "invites", ["focus_id"])
    op.create_index("ix_invites_code", "invites", ["code"], unique=True)

    op.create_table(
        "notification_logs",
        _id(),
        _user_fk("user_id"),
        sa.Column("type", sa.String(64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_notification_logs_user_id", "notification_logs", ["user_id"])
    op.create_index("ix_notification_logs_status", "notification_logs", ["status"])

    op.create_table(
        "event_logs",
        _id(),
        sa.Column("event_name", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("focus_id", sa.String(36), nullable=True),
        sa.Column("props", sa.JSON(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_event_logs_event_name", "event_logs", ["event_name"])
    op.create_index("ix_event_logs_user_id", "event_logs", ["user_id"])


def downgrade() -> None:
    for table in (
        "event_logs",
        "notification_logs",
        "invites",
        "assistant_messages",
        "assistant_threads",
        "task_comments",
        "subtasks",
        "tasks",
        "focus_members",
        "focuses",
        "users",
    ):
        op.drop_table(table)
