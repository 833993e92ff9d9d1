"""
Telegram chat as a comment source.

Keeps a buffer of the chat's recent text messages:
- refresh() backfills the most recent messages
- live NewMessage / MessageEdited events update the buffer and notify
  a change callback (the monitor's debounced scan)

Message ids are the source handles.
"""

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from telethon import TelegramClient, errors, events


logger = logging.getLogger(__name__)


def create_client(api_id: int, api_hash: str, phone: str, session_dir: str) -> TelegramClient:
    """
    Build a Telethon client with a per-phone session file.

    Args:
        api_id: Telegram API ID
        api_hash: Telegram API hash
        phone: Phone number (with country code, e.g., +1234567890)
        session_dir: Directory for session files
    """
    Path(session_dir).mkdir(parents=True, exist_ok=True)

    session_name = phone.replace("+", "").replace(" ", "_")
    session_path = os.path.join(session_dir, session_name)

    return TelegramClient(session_path, api_id, api_hash)


async def connect(client: TelegramClient) -> None:
    """
    Connect using an existing session.

    Raises:
        RuntimeError: If the session is not authorized
    """
    await client.connect()

    if not await client.is_user_authorized():
        raise RuntimeError(
            "Session not authorized. Log in once with Telethon to create the session file."
        )


def parse_chat(chat: str) -> Union[int, str]:
    """Numeric chat ids stay ints, anything else is a handle or link."""
    try:
        return int(chat)
    except ValueError:
        return chat


class TelegramSource:
    """
    Source enumerator over one Telegram chat.

    Args:
        client: Connected Telethon client
        entity: Resolved chat entity (or anything get_entity accepts)
        limit: Number of recent messages to backfill
    """

    def __init__(self, client: TelegramClient, entity: Any, limit: int = 200):
        self.client = client
        self.entity = entity
        self.limit = limit
        self._messages: Dict[int, str] = {}
        self._handlers: List[Tuple[Callable, Any]] = []

    def __len__(self) -> int:
        return len(self._messages)

    def add_message(self, message: Any) -> bool:
        """
        Buffer a message, keeping only the `limit` newest ids.

        Returns:
            True if the buffer changed
        """
        text = getattr(message, "text", None) or getattr(message, "message", None)

        # Skip media-only messages
        if not text:
            return False

        if self._messages.get(message.id) == text:
            return False

        self._messages[message.id] = text

        if self.limit and len(self._messages) > self.limit:
            for msg_id in sorted(self._messages)[: len(self._messages) - self.limit]:
                del self._messages[msg_id]

        return message.id in self._messages

    async def refresh(self) -> int:
        """
        Backfill recent messages.

        Returns:
            Number of new or changed messages buffered
        """
        changed = 0

        try:
            async for message in self.client.iter_messages(self.entity, limit=self.limit, reverse=False):
                if self.add_message(message):
                    changed += 1
        except errors.FloodWaitError as e:
            # Telegram rate limit - keep what we have and let the next refresh retry
            logger.warning("FloodWaitError: Telegram asks to wait %ss", e.seconds)

        return changed

    def attach(self, on_change: Optional[Callable[[], None]] = None) -> None:
        """Listen for new and edited messages in the chat."""

        async def handler(event):
            if self.add_message(event.message) and on_change:
                on_change()

        for builder in (events.NewMessage(chats=self.entity), events.MessageEdited(chats=self.entity)):
            self.client.add_event_handler(handler, builder)
            self._handlers.append((handler, builder))

    def detach(self) -> None:
        for handler, builder in self._handlers:
            self.client.remove_event_handler(handler, builder)
        self._handlers = []

    def items(self) -> List[Tuple[str, int]]:
        # Oldest first
        return [(self._messages[msg_id], msg_id) for msg_id in sorted(self._messages)]
