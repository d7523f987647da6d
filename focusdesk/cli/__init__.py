"""
Terminal Client.

Typer commands for working with focuses, tasks, the assistant and
invites from a terminal. A thin presentation layer: every action is an
HTTP call to the backend through FocusdeskClient.

Usage:
    python -m focusdesk.cli --dev-tg-id 1001 focus list
    python -m focusdesk.cli task toggle <task_id> --focus <focus_id>
"""
