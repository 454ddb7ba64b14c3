"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message

from core.models import Submission

COMMANDS = frozenset({"/start", "/help", "/info"})


async def should_discard(event) -> bool:
    """Return True for updates the bot never answers.

    Only direct messages from human users in private chats are handled; bots,
    forums and group chats are ignored.
    """

    message = getattr(event, "message", None)
    if message is None:
        return True
    if not getattr(event, "is_private", False):
        return True

    sender = await event.get_sender()
    if sender is None or getattr(sender, "bot", False):
        return True

    chat = await event.get_chat()
    if getattr(chat, "forum", False):
        return True
    return False


def parse_command(text: str) -> Optional[str]:
    """Return the command name for exact command messages like ``/help``."""

    stripped = text.strip()
    # Telegram appends the bot username in some clients, e.g. /help@mybot.
    command = stripped.split("@", 1)[0]
    if command in COMMANDS:
        return command
    return None


def build_submission(message: Message) -> Submission:
    """Build a core Submission from a Telethon Message."""

    return Submission(
        user_id=int(message.sender_id),
        chat_id=int(message.chat_id),
        message_id=int(message.id),
        text=message.raw_text or "",
    )
