"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message

from core.models import IncomingEvent


def _sender_name(message: Message) -> Optional[str]:
    sender = getattr(message, "sender", None)
    if sender is None:
        return None
    username = getattr(sender, "username", None)
    first = getattr(sender, "first_name", None)
    last = getattr(sender, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    if isinstance(username, str) and username:
        return f"@{username}"
    return None


def build_event(message: Message) -> IncomingEvent:
    """Build a core IncomingEvent from a Telethon Message."""

    sender_id = getattr(message, "sender_id", None)
    # Fallback: a missing sender (anonymous admin, channel post) never owns anything.
    if sender_id is None:
        sender_id = message.chat_id

    return IncomingEvent(
        chat_id=message.chat_id,
        message_id=message.id,
        sender_id=str(sender_id),
        text=message.raw_text or "",
        timestamp=int(message.date.timestamp()),
        is_from_self=bool(getattr(message, "out", False)),
        sender_name=_sender_name(message),
    )
