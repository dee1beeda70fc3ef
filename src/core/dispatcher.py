"""Event dispatch: dedup, control commands, activation gate, reply.

The dispatcher is the single event-handling path, so the deduplicator and
activation state are only ever mutated from here.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from core import replies
from core.activation import ActivationController, Outcome
from core.config import ControlConfig
from core.dedup import IngestDeduplicator
from core.delivery import DeliveryQueue
from core.models import GroupInfo, IncomingEvent, OutboundTask
from core.names import LearnedNameStore
from core.ports import TransportPort
from core.processor import MessagePipeline, format_response

LOGGER = logging.getLogger(__name__)


class EventDispatcher:
    def __init__(
        self,
        *,
        transport: TransportPort,
        control: ControlConfig,
        controller: ActivationController,
        deduplicator: IngestDeduplicator,
        pipeline: MessagePipeline,
        queue: DeliveryQueue,
        store: LearnedNameStore,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._transport = transport
        self._control = control
        self._controller = controller
        self._dedup = deduplicator
        self._pipeline = pipeline
        self._queue = queue
        self._store = store
        self._clock = clock

    async def handle(self, event: IncomingEvent) -> None:
        """Process one transport event end to end."""

        if not self._dedup.admit(event):
            return

        command = event.text.strip()
        if await self._handle_control(event, command):
            return

        if not self._controller.admits(event):
            return

        LOGGER.info("%s: %s", event.sender_name or event.sender_id, event.text)
        result = await self._pipeline.process(event.text)
        response = format_response(result)
        if response is None:
            return
        if result.is_tournament_style:
            LOGGER.debug("Tournament-style message in %s", event.chat_id)
        self._queue.enqueue(
            OutboundTask(
                text=response.text,
                chat_id=event.chat_id,
                enqueued_at=self._clock(),
                unit_count=response.count,
            )
        )

    async def _handle_control(self, event: IncomingEvent, command: str) -> bool:
        """Return True when the text was consumed as a control command."""

        if command in self._control.status_commands:
            line = self._controller.status_line(self._store.learned_count)
            await self._reply(event.chat_id, replies.format_status(line))
            return True

        if command in self._control.list_commands:
            if self._controller.request_listing(event.sender_id) is Outcome.NOT_OWNER:
                return True
            groups = await self._list_groups()
            await self._reply(event.chat_id, replies.format_group_listing(groups))
            return True

        if command in self._control.deactivate_commands:
            if self._controller.deactivate(event.sender_id) is Outcome.NOT_OWNER:
                return True
            await self._reply(event.chat_id, replies.format_deactivated())
            return True

        # Bare integers select a group, but only from an owner while inactive.
        if command.isdigit() and command.isascii():
            if not self._controller.is_owner(event.sender_id) or self._controller.state.is_active:
                return False
            groups = await self._list_groups()
            selection = self._controller.select(
                event.sender_id, int(command), groups, event.timestamp
            )
            if selection.outcome is Outcome.ACTIVATED:
                await self._reply(event.chat_id, replies.format_activated(selection.group))
            elif selection.outcome is Outcome.INVALID_INDEX:
                await self._reply(event.chat_id, replies.format_invalid_index())
            return True

        return False

    async def _list_groups(self) -> list[GroupInfo]:
        try:
            return list(await self._transport.list_groups())
        except Exception:
            LOGGER.warning("Failed to fetch group list", exc_info=True)
            return []

    async def _reply(self, chat_id: int, text: str) -> None:
        try:
            await self._transport.send_text(chat_id, text)
        except Exception:
            LOGGER.warning("Failed to send control reply to %s", chat_id, exc_info=True)
