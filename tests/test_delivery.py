from __future__ import annotations

import asyncio
import random

import pytest

from core.config import DeliveryConfig, MistakeConfig
from core.delivery import DeliveryQueue, adaptive_delay, backoff_delay
from core.errors import TransportError
from core.mistakes import MistakeInjector
from core.models import OutboundTask

STILL = DeliveryConfig(jitter_ms=0, backoff_jitter_ms=0)


class FakeTransport:
    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.attempts: list[tuple[int, str]] = []
        self.sent: list[tuple[int, str]] = []

    async def send_text(self, chat_id: int, text: str) -> None:
        self.attempts.append((chat_id, text))
        if self.failures > 0:
            self.failures -= 1
            raise TransportError("rate limited")
        self.sent.append((chat_id, text))

    async def list_groups(self):
        return []


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _task(text: str, chat_id: int = -100) -> OutboundTask:
    return OutboundTask(text=text, chat_id=chat_id, enqueued_at=0.0, unit_count=len(text.split(" ")))


def _drain(queue: DeliveryQueue, *tasks: OutboundTask) -> None:
    async def scenario() -> None:
        for task in tasks:
            queue.enqueue(task)
        await queue.join()

    asyncio.run(scenario())


def test_adaptive_delay_scales_with_unit_count() -> None:
    rng = random.Random(0)
    assert adaptive_delay(1, STILL, rng) == pytest.approx(0.24)
    assert adaptive_delay(3, STILL, rng) == pytest.approx(0.42)
    assert adaptive_delay(0, STILL, rng) == pytest.approx(0.24)


def test_adaptive_delay_jitter_is_bounded() -> None:
    rng = random.Random(1)
    config = DeliveryConfig()
    for _ in range(100):
        assert 0.24 <= adaptive_delay(1, config, rng) <= 0.24 + 0.3


def test_backoff_is_monotonic_up_to_cap() -> None:
    rng = random.Random(2)
    delays = [backoff_delay(failures, STILL, rng) for failures in range(12)]
    assert delays == sorted(delays)
    assert delays[1] == pytest.approx(2.0)
    assert max(delays) == pytest.approx(30.0)


def test_sends_in_fifo_order() -> None:
    transport = FakeTransport()
    queue = DeliveryQueue(transport, STILL, sleep=RecordingSleep(), rng=random.Random(3))
    _drain(queue, _task("one"), _task("two"), _task("three"))

    assert [text for _, text in transport.sent] == ["one", "two", "three"]
    assert queue.pending == 0
    assert not queue.is_draining


def test_failed_task_is_dropped_and_backoff_grows() -> None:
    transport = FakeTransport(failures=3)
    sleep = RecordingSleep()
    queue = DeliveryQueue(transport, STILL, sleep=sleep, rng=random.Random(4))
    _drain(queue, _task("a"), _task("b"), _task("c"), _task("d"))

    assert [text for _, text in transport.attempts] == ["a", "b", "c", "d"]
    assert transport.sent == [(-100, "d")]
    assert queue.consecutive_failures == 0
    # adaptive, backoff pairs for each failure, then the final adaptive delay.
    backoffs = sleep.calls[1:6:2]
    assert backoffs == [pytest.approx(2.0), pytest.approx(4.0), pytest.approx(8.0)]


def test_failure_counter_tracks_consecutive_failures() -> None:
    transport = FakeTransport(failures=2)
    queue = DeliveryQueue(transport, STILL, sleep=RecordingSleep(), rng=random.Random(5))
    _drain(queue, _task("a"), _task("b"))

    assert queue.consecutive_failures == 2


def test_closed_queue_drops_new_work() -> None:
    transport = FakeTransport()
    queue = DeliveryQueue(transport, STILL, sleep=RecordingSleep())
    queue.close()
    _drain(queue, _task("late"))

    assert transport.attempts == []


def test_textual_mistake_is_followed_by_correction() -> None:
    transport = FakeTransport()
    sleep = RecordingSleep()
    mistakes = MistakeInjector(
        MistakeConfig(enabled=True, probability=1.0, correction_probability=1.0, kinds=("reorder",))
    )
    queue = DeliveryQueue(transport, STILL, mistakes, sleep=sleep, rng=random.Random(6))
    _drain(queue, _task("a b c"))

    texts = [text for _, text in transport.sent]
    assert len(texts) == 2
    assert texts[0] != "a b c"
    assert sorted(texts[0].split(" ")) == ["a", "b", "c"]
    assert texts[1] == "a b c"
    assert sleep.calls[-1] == pytest.approx(1.5)


def test_delay_mistake_triples_wait_without_correction() -> None:
    transport = FakeTransport()
    sleep = RecordingSleep()
    mistakes = MistakeInjector(
        MistakeConfig(enabled=True, probability=1.0, correction_probability=1.0, kinds=("delay",))
    )
    queue = DeliveryQueue(transport, STILL, mistakes, sleep=sleep, rng=random.Random(7))
    _drain(queue, _task("a b"))

    assert transport.sent == [(-100, "a b")]
    assert sleep.calls == [pytest.approx(3 * adaptive_delay(2, STILL, random.Random()))]


def test_disabled_mistakes_send_text_unchanged() -> None:
    transport = FakeTransport()
    mistakes = MistakeInjector(MistakeConfig(enabled=False, probability=1.0))
    queue = DeliveryQueue(transport, STILL, mistakes, sleep=RecordingSleep(), rng=random.Random(8))
    _drain(queue, _task("ناروتو ساسكي"))

    assert transport.sent == [(-100, "ناروتو ساسكي")]
