from __future__ import annotations

import asyncio
from typing import Optional

from core.config import ResolverConfig
from core.errors import OracleError, OracleRateLimited
from core.models import NameRecord
from core.names import LearnedNameStore
from core.resolver import NameResolver


class NullStorage:
    def load_mappings(self):
        return {}, {}

    def save_mappings(self, static, learned) -> None:
        pass


class FakeOracle:
    def __init__(self, name: str, result: Optional[NameRecord] = None, error: Optional[Exception] = None, delay: float = 0.0) -> None:
        self.name = name
        self.result = result
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def lookup(self, query: str) -> Optional[NameRecord]:
        self.calls.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


def _resolver(oracles, timeout_ms: int = 660) -> tuple[NameResolver, LearnedNameStore]:
    store = LearnedNameStore(NullStorage())
    return NameResolver(store, oracles, ResolverConfig(timeout_ms=timeout_ms)), store


def test_static_hit_never_calls_oracles() -> None:
    oracle = FakeOracle("AniList", NameRecord("Naruto Uzumaki", 0.9, "AniList"))
    resolver, store = _resolver([oracle])
    store.add_static("ناروتو", "Naruto Uzumaki")

    record = asyncio.run(resolver.resolve("ناروتو"))

    assert record == NameRecord("Naruto Uzumaki", 1.0, "local")
    assert oracle.calls == []


def test_learned_hit_is_local_and_repeatable() -> None:
    oracle = FakeOracle("kitsu.io")
    resolver, store = _resolver([oracle])
    store.remember("goku", NameRecord("Son Goku", 0.8, "kitsu.io"))

    first = asyncio.run(resolver.resolve("Goku"))
    second = asyncio.run(resolver.resolve("goku"))

    assert first == second == NameRecord("Son Goku", 1.0, "local")
    assert oracle.calls == []


def test_highest_confidence_wins() -> None:
    low = FakeOracle("kitsu.io", NameRecord("Goku", 0.8, "kitsu.io"))
    high = FakeOracle("AniList", NameRecord("Son Goku", 0.9, "AniList"))
    resolver, _ = _resolver([low, high])

    record = asyncio.run(resolver.resolve("goku"))

    assert record.source == "AniList"
    assert low.calls == ["goku"] and high.calls == ["goku"]


def test_ties_keep_first_oracle() -> None:
    first = FakeOracle("api.jikan.moe", NameRecord("Goku", 0.8, "api.jikan.moe"))
    second = FakeOracle("kitsu.io", NameRecord("Son Goku", 0.8, "kitsu.io"))
    resolver, _ = _resolver([first, second])

    assert asyncio.run(resolver.resolve("goku")).source == "api.jikan.moe"


def test_failures_are_swallowed_per_oracle() -> None:
    broken = FakeOracle("AniList", error=OracleError("500"))
    limited = FakeOracle("api.jikan.moe", error=OracleRateLimited("api.jikan.moe", 2.0))
    working = FakeOracle("kitsu.io", NameRecord("Son Goku", 0.8, "kitsu.io"))
    resolver, _ = _resolver([broken, limited, working])

    record = asyncio.run(resolver.resolve("goku"))

    assert record == NameRecord("Son Goku", 0.8, "kitsu.io")


def test_slow_oracle_times_out() -> None:
    slow = FakeOracle("AniList", NameRecord("Son Goku", 0.9, "AniList"), delay=0.5)
    fast = FakeOracle("kitsu.io", NameRecord("Goku", 0.8, "kitsu.io"))
    resolver, _ = _resolver([slow, fast], timeout_ms=50)

    assert asyncio.run(resolver.resolve("goku")).source == "kitsu.io"


def test_all_oracles_failing_returns_none() -> None:
    resolver, _ = _resolver(
        [FakeOracle("AniList", error=OracleError("timeout")), FakeOracle("kitsu.io", error=ValueError("bad"))]
    )

    assert asyncio.run(resolver.resolve("goku")) is None


def test_no_oracles_returns_none() -> None:
    resolver, _ = _resolver([])

    assert asyncio.run(resolver.resolve("goku")) is None
