from __future__ import annotations

import pytest

from core.config import DedupConfig
from core.dedup import IngestDeduplicator, event_key
from core.models import IncomingEvent

NOW = 1_700_000_000


class FakeClock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _event(message_id: int = 1, timestamp: int = NOW, **overrides) -> IncomingEvent:
    values = dict(chat_id=-100, message_id=message_id, sender_id="42", text="*goku*", timestamp=timestamp)
    values.update(overrides)
    return IncomingEvent(**values)


def test_event_key_combines_chat_message_and_timestamp() -> None:
    assert event_key(_event(message_id=7, timestamp=123)) == "-100-7-123"


def test_same_event_admitted_once() -> None:
    dedup = IngestDeduplicator(DedupConfig(), clock=FakeClock())
    assert dedup.admit(_event())
    assert not dedup.admit(_event())


def test_repeated_content_with_new_id_is_admitted() -> None:
    dedup = IngestDeduplicator(DedupConfig(), clock=FakeClock())
    assert dedup.admit(_event(message_id=1))
    assert dedup.admit(_event(message_id=2))


def test_own_messages_and_empty_text_are_dropped() -> None:
    dedup = IngestDeduplicator(DedupConfig(), clock=FakeClock())
    assert not dedup.admit(_event(is_from_self=True))
    assert not dedup.admit(_event(message_id=2, text="   "))
    assert dedup.size == 0


def test_capacity_evicts_oldest_first() -> None:
    dedup = IngestDeduplicator(DedupConfig(capacity=2, max_age_seconds=0), clock=FakeClock())
    for message_id in (1, 2, 3):
        assert dedup.admit(_event(message_id=message_id))

    assert dedup.size == 2
    assert dedup.admit(_event(message_id=1))
    assert not dedup.admit(_event(message_id=3))


def test_stale_replay_is_dropped() -> None:
    clock = FakeClock()
    dedup = IngestDeduplicator(DedupConfig(max_age_seconds=30), clock=clock)
    assert not dedup.admit(_event(timestamp=NOW - 3600))


def test_out_of_order_fresh_event_is_admitted() -> None:
    clock = FakeClock()
    dedup = IngestDeduplicator(DedupConfig(max_age_seconds=30), clock=clock)
    assert dedup.admit(_event(message_id=2, timestamp=NOW))
    assert dedup.admit(_event(message_id=1, timestamp=NOW - 5))


def test_old_event_newer_than_last_admitted_is_admitted() -> None:
    clock = FakeClock()
    dedup = IngestDeduplicator(DedupConfig(max_age_seconds=30), clock=clock)
    clock.now = NOW + 600

    # Sent while disconnected: old by the clock, but newer than anything admitted.
    assert dedup.admit(_event(message_id=5, timestamp=NOW + 100))
    assert not dedup.admit(_event(message_id=4, timestamp=NOW + 50))


def test_staleness_check_can_be_disabled() -> None:
    dedup = IngestDeduplicator(DedupConfig(max_age_seconds=0), clock=FakeClock())
    assert dedup.admit(_event(timestamp=NOW - 3600))


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        IngestDeduplicator(DedupConfig(capacity=0))
