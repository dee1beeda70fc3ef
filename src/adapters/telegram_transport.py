"""Telegram transport adapter.

Implements the core TransportPort on top of a connected Telethon client.
"""

from __future__ import annotations

from typing import Any

from telethon import errors

from core.errors import TransportError
from core.models import GroupInfo


def _dialog_title(dialog: Any) -> str:
    entity = getattr(dialog, "entity", None)
    title = getattr(entity, "title", None)
    if title:
        return str(title)
    name = getattr(dialog, "name", None)
    if name:
        return str(name)
    entity_id = getattr(entity, "id", None)
    return str(entity_id or "Unknown group")


def _member_count(dialog: Any) -> int:
    entity = getattr(dialog, "entity", None)
    count = getattr(entity, "participants_count", None)
    return int(count) if count else 0


class TelegramTransport:
    """Send replies and list groups through the user account."""

    def __init__(self, client) -> None:
        self._client = client

    async def send_text(self, chat_id: int, text: str) -> None:
        try:
            await self._client.send_message(chat_id, text)
        except (errors.RPCError, ConnectionError, ValueError) as exc:
            raise TransportError(f"send to {chat_id} failed: {exc}") from exc

    async def list_groups(self) -> list[GroupInfo]:
        """Return groups and megagroups, sorted so indices stay stable."""

        groups: list[GroupInfo] = []
        try:
            async for dialog in self._client.iter_dialogs():
                # Broadcast channels are not groups; megagroups report is_group.
                if not getattr(dialog, "is_group", False):
                    continue
                groups.append(
                    GroupInfo(
                        id=dialog.id,
                        display_name=_dialog_title(dialog),
                        member_count=_member_count(dialog),
                    )
                )
        except (errors.RPCError, ConnectionError) as exc:
            raise TransportError(f"group listing failed: {exc}") from exc
        groups.sort(key=lambda group: (group.display_name.lower(), group.id))
        return groups
