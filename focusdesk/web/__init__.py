"""Telegram Mini App static client."""
