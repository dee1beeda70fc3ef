"""Ingest deduplication (core domain).

One strategy only: an identifier set bounded by capacity (oldest evicted
first) plus a staleness check. Events older than max_age_seconds are dropped
unless they are newer than the last admitted timestamp, which tolerates
out-of-order delivery while rejecting history replayed on reconnect.
Repeated content under a new identifier is admitted.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable

from core.config import DedupConfig
from core.models import IncomingEvent


def event_key(event: IncomingEvent) -> str:
    """Return the identifier used for deduplication."""

    return f"{event.chat_id}-{event.message_id}-{event.timestamp}"


class IngestDeduplicator:
    def __init__(self, config: DedupConfig, clock: Callable[[], float] = time.time) -> None:
        if config.capacity < 1:
            raise ValueError("Dedup capacity must be positive")
        self._config = config
        self._clock = clock
        self._seen: "OrderedDict[str, None]" = OrderedDict()
        # Start at "now" so a reconnect cannot replay pre-start history.
        self._last_admitted = int(clock())

    @property
    def size(self) -> int:
        return len(self._seen)

    def admit(self, event: IncomingEvent) -> bool:
        if event.is_from_self or not event.text.strip():
            return False

        key = event_key(event)
        if key in self._seen:
            return False

        max_age = self._config.max_age_seconds
        if max_age > 0:
            age = self._clock() - event.timestamp
            if age > max_age and event.timestamp <= self._last_admitted:
                return False

        self._seen[key] = None
        while len(self._seen) > self._config.capacity:
            self._seen.popitem(last=False)
        self._last_admitted = max(self._last_admitted, event.timestamp)
        return True
