"""Owner-gated activation state machine (core domain).

States are INACTIVE and ACTIVE(group, activated_at). Every transition is
owner-gated; non-owner attempts change nothing and are reported as
NOT_OWNER so callers can stay silent.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from core.config import ControlConfig
from core.models import ActivationState, GroupInfo, IncomingEvent

LOGGER = logging.getLogger(__name__)


class Outcome(enum.Enum):
    NOT_OWNER = "not_owner"
    IGNORED = "ignored"
    LISTED = "listed"
    ACTIVATED = "activated"
    INVALID_INDEX = "invalid_index"
    DEACTIVATED = "deactivated"


@dataclass(frozen=True)
class SelectionResult:
    outcome: Outcome
    group: Optional[GroupInfo] = None


class ActivationController:
    """Owns the ActivationState; nothing else mutates it."""

    def __init__(self, config: ControlConfig) -> None:
        self._owners = frozenset(config.owners)
        self._state = ActivationState()

    @property
    def state(self) -> ActivationState:
        return self._state

    def is_owner(self, sender_id: str) -> bool:
        return sender_id in self._owners

    def request_listing(self, sender_id: str) -> Outcome:
        """Listing never changes state; it only checks ownership."""

        return Outcome.LISTED if self.is_owner(sender_id) else Outcome.NOT_OWNER

    def select(
        self,
        sender_id: str,
        index: int,
        groups: Sequence[GroupInfo],
        timestamp: int,
    ) -> SelectionResult:
        """Activate the 1-based `index` group; only accepted while inactive."""

        if not self.is_owner(sender_id):
            return SelectionResult(Outcome.NOT_OWNER)
        if self._state.is_active:
            return SelectionResult(Outcome.IGNORED)
        if not 1 <= index <= len(groups):
            return SelectionResult(Outcome.INVALID_INDEX)

        group = groups[index - 1]
        self._state = ActivationState(
            is_active=True,
            selected_group_id=group.id,
            selected_group_name=group.display_name,
            activated_at=timestamp,
        )
        LOGGER.info("Activated in group %s (%s)", group.display_name, group.id)
        return SelectionResult(Outcome.ACTIVATED, group)

    def deactivate(self, sender_id: str) -> Outcome:
        if not self.is_owner(sender_id):
            return Outcome.NOT_OWNER
        if self._state.is_active:
            LOGGER.info("Deactivated from group %s", self._state.selected_group_id)
        self._state = ActivationState()
        return Outcome.DEACTIVATED

    def admits(self, event: IncomingEvent) -> bool:
        """True when the event belongs to the active group and window."""

        state = self._state
        return (
            state.is_active
            and state.selected_group_id is not None
            and event.chat_id == state.selected_group_id
            and event.timestamp >= state.activated_at
        )

    def status_line(self, learned_count: int) -> str:
        if self._state.is_active:
            return (
                f"Active in {self._state.selected_group_name} - detecting character names"
                f" ({learned_count} learned)"
            )
        return f"Inactive - send activate-list to activate ({learned_count} learned)"
