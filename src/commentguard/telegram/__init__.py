"""
Telegram module for commentguard.

Handles Telegram client operations including:
- Session management
- Chat backfill and live message events as a comment source
"""

from .source import TelegramSource, connect, create_client, parse_chat

__all__ = [
    "TelegramSource",
    "connect",
    "create_client",
    "parse_chat",
]
