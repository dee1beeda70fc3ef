"""Outbound delivery queue with human pacing and failure backoff.

Tasks are sent strictly FIFO by a single consumer. A failed send is not
retried; it only grows the backoff. Correction messages run on their own
timers and are unordered relative to the main queue.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import deque
from typing import Awaitable, Callable, Optional

from core.config import DeliveryConfig
from core.mistakes import MistakeInjector
from core.models import MistakeKind, OutboundTask
from core.ports import TransportPort

LOGGER = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def adaptive_delay(unit_count: int, config: DeliveryConfig, rng: random.Random) -> float:
    """Seconds to wait before sending a reply with `unit_count` names."""

    jitter = rng.uniform(0, config.jitter_ms) if config.jitter_ms > 0 else 0.0
    millis = config.base_delay_ms + config.per_unit_delay_ms * (max(unit_count, 1) - 1) + jitter
    return millis * config.delay_scale / 1000


def backoff_delay(failures: int, config: DeliveryConfig, rng: random.Random) -> float:
    """Seconds to wait after `failures` consecutive send failures."""

    jitter = rng.uniform(0, config.backoff_jitter_ms) if config.backoff_jitter_ms > 0 else 0.0
    millis = min(config.backoff_base_ms * 2 ** failures, config.backoff_cap_ms) + jitter
    return millis / 1000


class DeliveryQueue:
    """Owns the FIFO, the in-flight flag and the failure counter."""

    def __init__(
        self,
        transport: TransportPort,
        config: DeliveryConfig,
        mistakes: Optional[MistakeInjector] = None,
        *,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._transport = transport
        self._config = config
        self._mistakes = mistakes
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._pending: deque[OutboundTask] = deque()
        self._draining = False
        self._closed = False
        self._drain_task: Optional[asyncio.Task] = None
        self._timers: set[asyncio.Task] = set()
        self.consecutive_failures = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def is_draining(self) -> bool:
        return self._draining

    def enqueue(self, task: OutboundTask) -> None:
        if self._closed:
            LOGGER.debug("Queue closed, dropping reply for %s", task.chat_id)
            return
        self._pending.append(task)
        if not self._draining:
            self._draining = True
            self._drain_task = asyncio.create_task(self._drain())

    def close(self) -> None:
        """Stop scheduling new work; an in-flight send is not cancelled."""

        self._closed = True

    async def join(self) -> None:
        """Wait for the drain loop and any correction timers."""

        if self._drain_task is not None:
            await self._drain_task
        while self._timers:
            await asyncio.gather(*list(self._timers), return_exceptions=True)

    async def _drain(self) -> None:
        try:
            while self._pending and not self._closed:
                await self._deliver(self._pending.popleft())
        finally:
            self._draining = False

    async def _deliver(self, task: OutboundTask) -> None:
        text = task.text
        delay = adaptive_delay(task.unit_count, self._config, self._rng)

        decision = None
        if self._mistakes is not None and self._mistakes.enabled:
            decision = self._mistakes.decide(task.text, self._rng)
            if decision.kind is MistakeKind.DELAY:
                delay *= self._mistakes.delay_factor
            elif decision.is_mistake:
                text = decision.text
                LOGGER.debug("Injected %s mistake: %r", decision.kind.value, text)

        await self._sleep(delay)
        try:
            await self._transport.send_text(task.chat_id, text)
        except Exception as exc:
            self.consecutive_failures += 1
            wait = backoff_delay(self.consecutive_failures, self._config, self._rng)
            LOGGER.warning(
                "Send to %s failed (%s failures in a row), backing off %.1fs: %s",
                task.chat_id,
                self.consecutive_failures,
                wait,
                exc,
            )
            await self._sleep(wait)
            return

        self.consecutive_failures = 0
        if decision is not None and self._mistakes.wants_correction(decision, self._rng):
            self._schedule_correction(task)

    def _schedule_correction(self, task: OutboundTask) -> None:
        timer = asyncio.create_task(self._send_correction(task))
        self._timers.add(timer)
        timer.add_done_callback(self._timers.discard)

    async def _send_correction(self, task: OutboundTask) -> None:
        await self._sleep(self._mistakes.correction_delay)
        try:
            await self._transport.send_text(task.chat_id, task.text)
        except Exception as exc:
            LOGGER.warning("Correction to %s failed: %s", task.chat_id, exc)
