"""HTTP name lookup oracles (AniList, Jikan, Kitsu).

Each oracle implements the core OraclePort. Failures surface as OracleError
so the resolver can drop them per oracle. A 429 puts only that oracle into
a cooldown honoring Retry-After; other oracles are unaffected.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import httpx

from core.errors import OracleError, OracleRateLimited
from core.models import NameRecord

LOGGER = logging.getLogger(__name__)

USER_AGENT = "namewatch/1.0"
DEFAULT_COOLDOWN_SECONDS = 5.0

ANILIST_URL = "https://graphql.anilist.co/"
JIKAN_URL = "https://api.jikan.moe/v4/characters"
KITSU_URL = "https://kitsu.io/api/edge/characters"

_ANILIST_QUERY = "query ($search: String) { Character(search: $search) { name { full native } id } }"


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class HttpOracle:
    """Shared request/cooldown handling; subclasses build and parse."""

    name = "oracle"
    confidence = 0.8

    def __init__(
        self,
        timeout_ms: int = 660,
        max_cooldown_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._timeout = timeout_ms / 1000
        self._max_cooldown = max_cooldown_seconds
        self._clock = clock
        self._cooldown_until = 0.0

    @property
    def cooling_down(self) -> bool:
        return self._clock() < self._cooldown_until

    async def lookup(self, query: str) -> Optional[NameRecord]:
        if self.cooling_down:
            LOGGER.debug("%s cooling down, skipping %r", self.name, query)
            return None
        try:
            async with httpx.AsyncClient(timeout=self._timeout, headers={"User-Agent": USER_AGENT}) as client:
                response = await self._request(client, query)
            if response.status_code == 429:
                retry_after = _retry_after(response)
                self._enter_cooldown(retry_after)
                raise OracleRateLimited(self.name, retry_after)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            raise OracleError(f"{self.name} timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise OracleError(f"{self.name} returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise OracleError(f"{self.name} request failed: {exc}") from exc
        except ValueError as exc:
            raise OracleError(f"{self.name} returned invalid JSON") from exc

        try:
            name = self._parse(payload)
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise OracleError(f"Unexpected response format from {self.name}") from exc
        if not name:
            return None
        return NameRecord(name=name, confidence=self.confidence, source=self.name)

    def _enter_cooldown(self, retry_after: Optional[float]) -> None:
        seconds = min(retry_after if retry_after is not None else DEFAULT_COOLDOWN_SECONDS, self._max_cooldown)
        self._cooldown_until = self._clock() + seconds
        LOGGER.warning("%s rate limited, cooling down %.1fs", self.name, seconds)

    async def _request(self, client: httpx.AsyncClient, query: str) -> httpx.Response:
        raise NotImplementedError

    def _parse(self, payload: dict[str, Any]) -> Optional[str]:
        raise NotImplementedError


class AniListOracle(HttpOracle):
    name = "AniList"
    confidence = 0.9

    async def _request(self, client: httpx.AsyncClient, query: str) -> httpx.Response:
        body = {"query": _ANILIST_QUERY, "variables": {"search": query}}
        return await client.post(ANILIST_URL, json=body)

    def _parse(self, payload: dict[str, Any]) -> Optional[str]:
        character = (payload.get("data") or {}).get("Character")
        if not character:
            return None
        return character["name"].get("full") or character["name"].get("native")


class JikanOracle(HttpOracle):
    name = "api.jikan.moe"

    async def _request(self, client: httpx.AsyncClient, query: str) -> httpx.Response:
        return await client.get(JIKAN_URL, params={"q": query, "limit": 1})

    def _parse(self, payload: dict[str, Any]) -> Optional[str]:
        items = payload["data"]
        if not items:
            return None
        return items[0]["name"]


class KitsuOracle(HttpOracle):
    name = "kitsu.io"

    async def _request(self, client: httpx.AsyncClient, query: str) -> httpx.Response:
        return await client.get(KITSU_URL, params={"filter[name]": query, "page[limit]": 1})

    def _parse(self, payload: dict[str, Any]) -> Optional[str]:
        items = payload["data"]
        if not items:
            return None
        attributes = items[0]["attributes"]
        return attributes.get("name") or attributes.get("canonicalName")


ORACLES = {
    "anilist": AniListOracle,
    "jikan": JikanOracle,
    "kitsu": KitsuOracle,
}


def build_oracles(names: list[str], timeout_ms: int, max_cooldown_seconds: float) -> list[HttpOracle]:
    """Instantiate the configured oracles in order; unknown names are an error."""

    oracles: list[HttpOracle] = []
    for name in names:
        key = name.strip().lower()
        if key not in ORACLES:
            raise ValueError(f"Unsupported oracle: {name}")
        oracles.append(ORACLES[key](timeout_ms=timeout_ms, max_cooldown_seconds=max_cooldown_seconds))
    return oracles
