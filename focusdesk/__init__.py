"""
Focusdesk.

- backend/: API, database, configuration, background tasks
- cli/: Terminal client (Typer + Rich)
- telegram/: Telegram bot integration (aiogram v3)
- web/: Mini App static frontend
"""
