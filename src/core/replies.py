"""Control-command reply texts.

Keeping wording here prevents drift between the chat commands and the CLI
group listing.
"""

from __future__ import annotations

from typing import Sequence

from core.models import GroupInfo


def format_group_listing(groups: Sequence[GroupInfo], with_hint: bool = True) -> str:
    if not groups:
        return "❌ No groups found!"
    lines = ["📋 **Available groups:**"]
    for index, group in enumerate(groups, start=1):
        lines.append(f"{index}. {group.display_name} ({group.member_count} members)")
    if with_hint:
        lines.extend(["", "Reply with the group number to activate the bot in that group."])
    return "\n".join(lines)


def format_activated(group: GroupInfo) -> str:
    return (
        f"✅ Bot activated in: **{group.display_name}**\n\n"
        "Now the bot will only respond in this group."
    )


def format_invalid_index() -> str:
    return "❌ Invalid group number!"


def format_deactivated() -> str:
    return "🔴 Bot deactivated successfully!"


def format_status(status_line: str) -> str:
    return f"🤖 Bot status: {status_line}"
