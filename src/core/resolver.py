"""Name resolution: local mappings first, then concurrent oracles."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from core.config import ResolverConfig
from core.errors import OracleError
from core.models import NameRecord
from core.names import LearnedNameStore
from core.ports import OraclePort

LOGGER = logging.getLogger(__name__)

LOCAL_SOURCE = "local"


class NameResolver:
    """Resolve a token to a canonical name.

    Every oracle call carries its own timeout, so overall latency is bounded
    by the slowest oracle rather than unbounded.
    """

    def __init__(
        self,
        store: LearnedNameStore,
        oracles: Iterable[OraclePort],
        config: ResolverConfig,
    ) -> None:
        self._store = store
        self._oracles: list[OraclePort] = list(oracles)
        self._timeout = config.timeout_ms / 1000

    async def resolve(self, token: str) -> Optional[NameRecord]:
        local = self._store.lookup(token)
        if local is not None:
            return NameRecord(name=local.name, confidence=1.0, source=LOCAL_SOURCE)
        if not self._oracles:
            return None

        results = await asyncio.gather(*(self._ask(oracle, token) for oracle in self._oracles))
        best: Optional[NameRecord] = None
        for result in results:
            # Strict comparison keeps the first oracle on ties.
            if result is not None and (best is None or result.confidence > best.confidence):
                best = result
        return best

    async def _ask(self, oracle: OraclePort, token: str) -> Optional[NameRecord]:
        try:
            return await asyncio.wait_for(oracle.lookup(token), timeout=self._timeout)
        except asyncio.TimeoutError:
            LOGGER.debug("Oracle %s timed out for %r", oracle.name, token)
        except OracleError as exc:
            LOGGER.debug("Oracle %s failed for %r: %s", oracle.name, token, exc)
        except Exception:
            LOGGER.warning("Oracle %s raised unexpectedly", oracle.name, exc_info=True)
        return None
